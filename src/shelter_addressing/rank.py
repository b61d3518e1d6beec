"""Rank keys: one sortable scalar per door point from (line id, distance along line)."""

from __future__ import annotations

import logging

from .config import AddressingConfig
from .errors import RankKeyError
from .linear_ref import project_distance
from .models import Diagnostic, DiagnosticKind, Feature, Severity
from .relate import relate

logger = logging.getLogger(__name__)

LINE_DISTANCE = "lineDistance"
RANK_KEY = "rankKey"


def compose_key(line_id: int, distance: float, multiplier: float) -> float:
    """Return ``line_id * multiplier + distance``.

    Sorting the result orders by line id first, then by distance, as long as
    ``0 <= distance < multiplier``; anything else raises ``RankKeyError``.
    """
    if line_id < 0:
        raise RankKeyError("lines", f"line id {line_id} is negative")
    if not 0 <= distance < multiplier:
        raise RankKeyError(
            "doors", f"distance {distance} is outside [0, {multiplier}) for line {line_id}"
        )
    return line_id * multiplier + distance


def check_multiplier(lines: list[Feature], multiplier: float) -> None:
    """Reject the run if any sequence line is at least ``multiplier`` long."""
    too_long = [f.fid for f in lines if f.geometry.length >= multiplier]
    if too_long:
        longest = max(f.geometry.length for f in lines)
        raise RankKeyError(
            "lines",
            f"line length {longest:.1f} reaches the rank multiplier {multiplier:g}",
            too_long,
        )


def rank_doors(
    lines: list[Feature],
    doors: list[Feature],
    config: AddressingConfig,
) -> tuple[list[Feature], list[Diagnostic]]:
    """Attach line id, distance along that line and rank key to every door point.

    Doors that match no line keep ``None`` for all three and are reported.
    """
    check_multiplier(lines, config.rank_multiplier)
    field = config.line_field
    geometry_by_id = {int(f.properties[field]): f.geometry for f in lines}

    related = relate(
        doors, lines, field, config.line_tie_break,
        max_distance=config.door_snap_tolerance,
    )

    ranked: list[Feature] = []
    diagnostics: list[Diagnostic] = []
    for door in related:
        line_id = door.get(field)
        if line_id is None:
            diagnostics.append(Diagnostic(
                kind=DiagnosticKind.DOOR_WITHOUT_LINE,
                severity=Severity.MEDIUM,
                message=f"Door point {door.fid} is not within {config.door_snap_tolerance:g} of any sequence line",
                fid=door.fid,
            ))
            ranked.append(door.model_copy(update={
                "properties": {**door.properties, LINE_DISTANCE: None, RANK_KEY: None},
            }))
            continue

        line_id = int(line_id)
        distance = project_distance(geometry_by_id[line_id], door.geometry)
        key = compose_key(line_id, distance, config.rank_multiplier)
        ranked.append(door.model_copy(update={
            "properties": {**door.properties, field: line_id, LINE_DISTANCE: distance, RANK_KEY: key},
        }))

    logger.info(
        "Ranked %d of %d door points along %d sequence lines",
        len(doors) - len(diagnostics), len(doors), len(lines),
    )
    return ranked, diagnostics
