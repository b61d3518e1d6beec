"""End-to-end addressing: four camp layers in, addressed shelters and structures out.

Stages run strictly in order and each one only adds attributes:

1. structure id -> shelter (largest overlap)
2. sequence line -> door point (nearest within tolerance), distance along line, rank key
3. rank key -> shelter (door point inside shelter)
4. per sub-block structure numbering and lettering
5. address formatting
"""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path

from .addressing import address_sub_blocks
from .cleaning import STRUCTURE_ID, assign_structure_ids, prepare_layer
from .config import AddressingConfig
from .errors import InputIntegrityError
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
    ShelterAddress,
)
from .rank import RANK_KEY, rank_doors
from .reader import read_layer
from .relate import candidates, relate

logger = logging.getLogger(__name__)

POLYGONAL = {"Polygon"}
LINEAR = {"LineString"}
PUNCTUAL = {"Point"}

RANK = "rank"


def _as_int(value) -> int | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return int(number) if number.is_integer() else None


def _is_degenerate(geometry) -> bool:
    if geometry.geom_type == "Polygon":
        return geometry.area == 0
    if geometry.geom_type == "LineString":
        return geometry.length == 0
    return False


def validate_inputs(
    structures: list[Feature],
    shelters: list[Feature],
    lines: list[Feature],
    doors: list[Feature],
    config: AddressingConfig,
) -> list[Feature]:
    """Fail fast on anything the pipeline cannot process.

    Returns the sequence lines with their line id normalized to ``int``.
    """
    layers = (
        ("structures", structures, POLYGONAL),
        ("shelters", shelters, POLYGONAL),
        ("lines", lines, LINEAR),
        ("doors", doors, PUNCTUAL),
    )
    for name, layer, allowed in layers:
        empty = [f.fid for f in layer if f.geometry.is_empty]
        if empty:
            raise InputIntegrityError(name, "empty geometry reached the addressing core", empty)
        wrong = [f.fid for f in layer if f.geometry.geom_type not in allowed]
        if wrong:
            raise InputIntegrityError(
                name, f"expected single-part {'/'.join(sorted(allowed))} geometries", wrong
            )
        degenerate = [f.fid for f in layer if _is_degenerate(f.geometry)]
        if degenerate:
            raise InputIntegrityError(name, "degenerate geometry (zero length or zero area)", degenerate)

    no_camp = [f.fid for f in shelters if str(f.get(config.camp_field, "")).strip() == ""]
    if no_camp:
        raise InputIntegrityError("shelters", f"missing required attribute '{config.camp_field}'", no_camp)

    normalized = []
    bad_ids = []
    for f in lines:
        line_id = _as_int(f.get(config.line_field))
        if line_id is None:
            bad_ids.append(f.fid)
            continue
        normalized.append(f.with_property(config.line_field, line_id))
    if bad_ids:
        raise InputIntegrityError("lines", f"'{config.line_field}' must be an integer", bad_ids)

    counts = Counter(f.properties[config.line_field] for f in normalized)
    repeated = [f.fid for f in normalized if counts[f.properties[config.line_field]] > 1]
    if repeated:
        raise InputIntegrityError("lines", f"'{config.line_field}' values must be unique", repeated)

    return normalized


def _association_diagnostics(
    shelters: list[Feature],
    structure_hits: list[list[int]],
    door_hits: list[list[int]],
    camp_field: str,
) -> list[Diagnostic]:
    diagnostics = []
    for shelter, s_hits, d_hits in zip(shelters, structure_hits, door_hits):
        camp_id = str(shelter.get(camp_field))
        if not s_hits:
            diagnostics.append(Diagnostic(
                kind=DiagnosticKind.SHELTER_WITHOUT_STRUCTURE, severity=Severity.MEDIUM,
                message=f"Shelter {shelter.fid} overlaps no structure",
                camp_id=camp_id, fid=shelter.fid,
            ))
        elif len(s_hits) > 1:
            diagnostics.append(Diagnostic(
                kind=DiagnosticKind.SHELTER_MULTIPLE_STRUCTURES, severity=Severity.LOW,
                message=f"Shelter {shelter.fid} overlaps {len(s_hits)} structures; largest overlap kept",
                camp_id=camp_id, fid=shelter.fid,
            ))
        if not d_hits:
            diagnostics.append(Diagnostic(
                kind=DiagnosticKind.SHELTER_WITHOUT_DOOR, severity=Severity.MEDIUM,
                message=f"Shelter {shelter.fid} contains no ranked door point; addressed as {camp_id}",
                camp_id=camp_id, fid=shelter.fid,
            ))
        elif len(d_hits) > 1:
            diagnostics.append(Diagnostic(
                kind=DiagnosticKind.SHELTER_MULTIPLE_DOORS, severity=Severity.MEDIUM,
                message=f"Shelter {shelter.fid} contains {len(d_hits)} door points; first one kept",
                camp_id=camp_id, fid=shelter.fid,
            ))
    return diagnostics


def assign_addresses(
    structures: list[Feature],
    shelters: list[Feature],
    lines: list[Feature],
    doors: list[Feature],
    config: AddressingConfig | None = None,
) -> AddressingResult:
    """Address every shelter of a camp from its four cleaned layers.

    Raises ``InputIntegrityError`` before doing any work if a layer is
    unusable. Everything else that looks wrong ends up in the returned
    diagnostics.
    """
    config = config or AddressingConfig()
    lines = validate_inputs(structures, shelters, lines, doors, config)
    camp_field = config.camp_field

    structures = assign_structure_ids(structures)
    with_structure = relate(shelters, structures, STRUCTURE_ID, config.structure_tie_break)
    structure_hits = candidates(shelters, structures, config.structure_tie_break)

    ranked_doors, diagnostics = rank_doors(lines, doors, config)
    door_pool = [d for d in ranked_doors if d.get(RANK_KEY) is not None]
    with_rank = relate(with_structure, door_pool, RANK_KEY, config.door_tie_break, target_attribute=RANK)
    door_hits = candidates(shelters, door_pool, config.door_tie_break)

    diagnostics.extend(_association_diagnostics(shelters, structure_hits, door_hits, camp_field))

    records = [
        RankedShelter(
            fid=f.fid,
            camp_id=str(f.get(camp_field)),
            structure_id=f.get(STRUCTURE_ID),
            rank=f.get(RANK),
        )
        for f in with_rank
    ]
    sub_blocks = address_sub_blocks(records, config.workers, config.fail_on_overflow)

    addresses: list[ShelterAddress] = []
    for block in sub_blocks:
        addresses.extend(block.shelters)
        diagnostics.extend(block.diagnostics)

    by_fid = {f.fid: f for f in shelters}
    addressed_shelters = [
        AddressedShelter(
            fid=a.fid,
            geometry=by_fid[a.fid].geometry,
            properties=by_fid[a.fid].properties,
            **a.model_dump(exclude={"fid"}),
        )
        for a in addresses
    ]

    first_number: dict[int, int] = {}
    for a in addresses:
        if a.structure_id is None or a.structure_number is None:
            continue
        current = first_number.get(a.structure_id)
        if current is None or a.structure_number < current:
            first_number[a.structure_id] = a.structure_number

    addressed_structures = [
        AddressedStructure(
            fid=f.fid,
            geometry=f.geometry,
            properties={k: v for k, v in f.properties.items() if k != STRUCTURE_ID},
            structure_id=f.properties[STRUCTURE_ID],
            structure_number=first_number.get(f.properties[STRUCTURE_ID]),
        )
        for f in structures
    ]

    _log_summary(addressed_shelters, diagnostics)
    return AddressingResult(
        shelters=addressed_shelters,
        structures=addressed_structures,
        diagnostics=diagnostics,
    )


def _log_summary(shelters: list[AddressedShelter], diagnostics: list[Diagnostic]) -> None:
    lettered = sum(1 for s in shelters if s.shelter_letter is not None)
    logger.info("Addressed %d of %d shelters", lettered, len(shelters))
    for kind, count in sorted(Counter(d.kind.value for d in diagnostics).items()):
        logger.warning("%d x %s", count, kind)
    for d in diagnostics:
        logger.debug("%s: %s", d.kind.value, d.message)


def check_crs(metadata: dict[str, LayerMetadata]) -> None:
    """All layers must share one projected CRS; distances are taken in its units."""
    epsgs = {m.crs_epsg for m in metadata.values()}
    if len(epsgs) > 1:
        detail = ", ".join(f"{name}=EPSG:{m.crs_epsg}" for name, m in metadata.items())
        raise InputIntegrityError("layers", f"layers use different coordinate systems ({detail})")
    geographic = [name for name, m in metadata.items() if m.is_projected is False]
    if geographic:
        raise InputIntegrityError(
            ", ".join(geographic), "geographic CRS; reproject to a metric CRS first"
        )


def address_shapefiles(
    structures_path: str | Path,
    shelters_path: str | Path,
    lines_path: str | Path,
    doors_path: str | Path,
    config: AddressingConfig | None = None,
) -> tuple[AddressingResult, LayerMetadata]:
    """Read, clean and address four shapefiles.

    Returns the result and the shelter layer metadata (for writing output).
    """
    layers: dict[str, list[Feature]] = {}
    metadata: dict[str, LayerMetadata] = {}
    paths = {
        "structures": structures_path,
        "shelters": shelters_path,
        "lines": lines_path,
        "doors": doors_path,
    }
    for name, path in paths.items():
        features, meta = read_layer(path)
        layers[name] = prepare_layer(features, name)
        metadata[name] = meta

    check_crs(metadata)
    result = assign_addresses(
        layers["structures"], layers["shelters"], layers["lines"], layers["doors"], config
    )
    return result, metadata["shelters"]
