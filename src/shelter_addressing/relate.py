"""Spatial join: copy an attribute from matching reference features onto targets.

Candidates come from a shapely STRtree; the tie-break policy orders them and
the best one wins. Every ordering falls back to reference input order, so two
runs over the same layers always pick the same reference.
"""

from __future__ import annotations

import logging

from shapely.strtree import STRtree

from .config import TieBreak
from .models import Feature

logger = logging.getLogger(__name__)


def candidates(
    targets: list[Feature],
    references: list[Feature],
    tie_break: TieBreak,
    max_distance: float = 0.0,
) -> list[list[int]]:
    """Return, per target, the indices into ``references`` that match it, best first.

    - ``FIRST_INTERSECTING``: intersecting references in input order.
    - ``LARGEST_OVERLAP_AREA``: references sharing area with the target, by
      descending intersection area. Boundary-only contact does not count.
      Targets without area (points, lines) fall back to input order.
    - ``NEAREST``: references within ``max_distance``, by ascending distance.
    """
    if not references:
        return [[] for _ in targets]

    tree = STRtree([r.geometry for r in references])
    result: list[list[int]] = []

    for target in targets:
        geom = target.geometry
        if tie_break is TieBreak.NEAREST:
            hits = tree.query(geom.buffer(max_distance)) if max_distance > 0 else tree.query(geom)
            scored = []
            for i in hits:
                d = geom.distance(references[i].geometry)
                if d <= max_distance:
                    scored.append((d, int(i)))
            result.append([i for _, i in sorted(scored)])
            continue

        hits = sorted(int(i) for i in tree.query(geom, predicate="intersects"))
        if tie_break is TieBreak.LARGEST_OVERLAP_AREA and geom.area > 0:
            scored = []
            for i in hits:
                area = geom.intersection(references[i].geometry).area
                if area > 0:
                    scored.append((-area, i))
            hits = [i for _, i in sorted(scored)]
        result.append(hits)

    return result


def relate(
    targets: list[Feature],
    references: list[Feature],
    attribute: str,
    tie_break: TieBreak = TieBreak.LARGEST_OVERLAP_AREA,
    *,
    target_attribute: str | None = None,
    max_distance: float = 0.0,
) -> list[Feature]:
    """Return copies of ``targets`` carrying ``attribute`` from their best reference.

    References without a value for ``attribute`` are ignored. A target with no
    matching reference gets ``None``. Neither input list is modified.
    """
    key = target_attribute or attribute
    pool = [r for r in references if r.get(attribute) is not None]
    matches = candidates(targets, pool, tie_break, max_distance)

    related: list[Feature] = []
    unmatched = 0
    for target, hits in zip(targets, matches):
        value = pool[hits[0]].get(attribute) if hits else None
        if value is None:
            unmatched += 1
        related.append(target.with_property(key, value))

    logger.debug(
        "Related %s onto %d targets (%s): %d unmatched",
        attribute, len(targets), tie_break.value, unmatched,
    )
    return related
