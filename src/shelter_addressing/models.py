"""Pydantic data models for the shelter addressing pipeline."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from shapely.geometry.base import BaseGeometry


class Feature(BaseModel):
    """A single vector feature: geometry plus attribute table row.

    ``fid`` is the feature's position in its layer and is the tie-break for
    every ordering decision in the pipeline.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    fid: int
    geometry: BaseGeometry = Field(exclude=True)
    properties: dict[str, Any] = Field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        value = self.properties.get(key, default)
        return default if value is None else value

    def with_property(self, key: str, value: Any) -> "Feature":
        """Return a copy with ``key`` set; the original is left untouched."""
        return self.model_copy(update={"properties": {**self.properties, key: value}})


class LayerMetadata(BaseModel):
    """Metadata about a parsed vector layer."""

    shape_type_name: str
    crs_epsg: int | None = None
    crs_name: str | None = None
    is_projected: bool | None = None
    num_features: int
    fields: list[str]


class RankedShelter(BaseModel):
    """What the sub-block engine needs to know about one shelter."""

    fid: int
    camp_id: str
    structure_id: int | None = None
    rank: float | None = None


class ShelterAddress(BaseModel):
    """Numbering outcome for one shelter."""

    fid: int
    camp_id: str
    structure_id: int | None = None
    rank: float | None = None
    structure_number: int | None = None
    shelter_letter: str | None = None
    address: str


class AddressedShelter(Feature):
    """A shelter with its structure, rank and final address."""

    camp_id: str
    structure_id: int | None = None
    rank: float | None = None
    structure_number: int | None = None
    shelter_letter: str | None = None
    address: str


class AddressedStructure(Feature):
    """A structure with the first walking-order number it received."""

    structure_id: int
    structure_number: int | None = None


class Severity(str, Enum):
    """How urgently a diagnostic needs manual review."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DiagnosticKind(str, Enum):
    """The data-quality condition a diagnostic reports."""

    SHELTER_WITHOUT_STRUCTURE = "shelter_without_structure"
    SHELTER_MULTIPLE_STRUCTURES = "shelter_multiple_structures"
    DOOR_WITHOUT_LINE = "door_without_line"
    SHELTER_WITHOUT_DOOR = "shelter_without_door"
    SHELTER_MULTIPLE_DOORS = "shelter_multiple_doors"
    DUPLICATE_RANK = "duplicate_rank"
    LETTER_OVERFLOW = "letter_overflow"
    EMPTY_SUB_BLOCK = "empty_sub_block"


class Diagnostic(BaseModel):
    """A non-fatal data-quality condition for manual review."""

    kind: DiagnosticKind
    severity: Severity
    message: str
    camp_id: str | None = None
    fid: int | None = None


class SubBlockResult(BaseModel):
    """Numbering of one sub-block, produced independently of all others."""

    camp_id: str
    shelters: list[ShelterAddress]
    diagnostics: list[Diagnostic] = Field(default_factory=list)


class AddressingResult(BaseModel):
    """Complete result of an addressing run."""

    shelters: list[AddressedShelter]
    structures: list[AddressedStructure]
    diagnostics: list[Diagnostic]
