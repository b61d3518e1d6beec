"""Vector hygiene for hand-digitized camp layers.

Multipart features are split, empty geometries dropped and exact duplicates
removed before anything is related or ranked.
"""

from __future__ import annotations

import logging

from .models import Feature

logger = logging.getLogger(__name__)

STRUCTURE_ID = "structureId"


def explode_multipart(features: list[Feature]) -> list[Feature]:
    """Split multipart geometries into one feature per part, attributes copied."""
    exploded: list[Feature] = []
    for f in features:
        parts = getattr(f.geometry, "geoms", None)
        if parts is None:
            exploded.append(f)
            continue
        for part in parts:
            exploded.append(f.model_copy(update={"geometry": part, "properties": dict(f.properties)}))
    return exploded


def drop_empty(features: list[Feature]) -> list[Feature]:
    kept = [f for f in features if not f.geometry.is_empty]
    if len(kept) < len(features):
        logger.info("Dropped %d empty geometries", len(features) - len(kept))
    return kept


def drop_duplicate_geometries(features: list[Feature]) -> list[Feature]:
    """Keep the first feature of every group with identical geometry."""
    seen: set[bytes] = set()
    kept: list[Feature] = []
    for f in features:
        key = f.geometry.normalize().wkb
        if key in seen:
            logger.debug("Duplicate geometry at fid %d", f.fid)
            continue
        seen.add(key)
        kept.append(f)
    if len(kept) < len(features):
        logger.info("Dropped %d duplicate geometries", len(features) - len(kept))
    return kept


def renumber(features: list[Feature]) -> list[Feature]:
    return [f.model_copy(update={"fid": i}) for i, f in enumerate(features)]


def prepare_layer(features: list[Feature], name: str = "layer") -> list[Feature]:
    """Explode, drop empties and duplicates, then renumber fids in input order."""
    cleaned = renumber(drop_duplicate_geometries(drop_empty(explode_multipart(features))))
    logger.info("Prepared %s: %d -> %d features", name, len(features), len(cleaned))
    return cleaned


def assign_structure_ids(structures: list[Feature]) -> list[Feature]:
    """Number structures 1..N in their current order."""
    return [f.with_property(STRUCTURE_ID, i) for i, f in enumerate(structures, start=1)]
