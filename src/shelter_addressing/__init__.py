"""Walking-order addresses for shelters in refugee and IDP camps."""

from .addressing import address_sub_block, address_sub_blocks, format_address
from .cleaning import assign_structure_ids, prepare_layer
from .config import SHELTER_LETTERS, AddressingConfig, TieBreak
from .errors import AddressingError, InputIntegrityError, LetterOverflowError, RankKeyError
from .linear_ref import project_distance
from .models import (
    AddressedShelter,
    AddressedStructure,
    AddressingResult,
    Diagnostic,
    DiagnosticKind,
    Feature,
    LayerMetadata,
    RankedShelter,
    Severity,
)
from .pipeline import address_shapefiles, assign_addresses
from .rank import compose_key, rank_doors
from .reader import detect_crs, read_layer
from .relate import relate
from .writer import shelters_to_csv, write_shelters, write_structures

__all__ = [
    "SHELTER_LETTERS",
    "AddressedShelter",
    "AddressedStructure",
    "AddressingConfig",
    "AddressingError",
    "AddressingResult",
    "Diagnostic",
    "DiagnosticKind",
    "Feature",
    "InputIntegrityError",
    "LayerMetadata",
    "LetterOverflowError",
    "RankKeyError",
    "RankedShelter",
    "Severity",
    "TieBreak",
    "address_shapefiles",
    "address_sub_block",
    "address_sub_blocks",
    "assign_addresses",
    "assign_structure_ids",
    "compose_key",
    "detect_crs",
    "format_address",
    "prepare_layer",
    "project_distance",
    "rank_doors",
    "read_layer",
    "relate",
    "shelters_to_csv",
    "write_shelters",
    "write_structures",
]
