"""Shapefile and CSV output for addressed layers."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path

import shapefile

from .models import AddressedShelter, AddressedStructure

logger = logging.getLogger(__name__)

# DBF field names are capped at 10 characters.
SHELTER_FIELDS = [
    ("campId", "C", 50, 0),
    ("struct_id", "N", 10, 0),
    ("rank", "N", 19, 3),
    ("struct_no", "N", 10, 0),
    ("letter", "C", 1, 0),
    ("address", "C", 64, 0),
]
STRUCTURE_FIELDS = [
    ("struct_id", "N", 10, 0),
    ("struct_no", "N", 10, 0),
]

CSV_FIELDS = [
    "fid", "camp_id", "structure_id", "rank",
    "structure_number", "shelter_letter", "address",
]


def _write_prj(path: Path, prj_wkt: str | None) -> None:
    if prj_wkt:
        path.with_suffix(".prj").write_text(prj_wkt)


def write_shelters(shelters: list[AddressedShelter], path: str | Path, prj_wkt: str | None = None) -> Path:
    """Write addressed shelters as a polygon shapefile."""
    path = Path(path).with_suffix(".shp")
    with shapefile.Writer(str(path), shapeType=shapefile.POLYGON) as w:
        for name, kind, size, decimal in SHELTER_FIELDS:
            w.field(name, kind, size=size, decimal=decimal)
        for s in shelters:
            w.shape(s.geometry)
            w.record(s.camp_id, s.structure_id, s.rank, s.structure_number, s.shelter_letter or "", s.address)
    _write_prj(path, prj_wkt)
    logger.info("Wrote %d shelters to %s", len(shelters), path)
    return path


def write_structures(structures: list[AddressedStructure], path: str | Path, prj_wkt: str | None = None) -> Path:
    """Write structures with their walking-order number as a polygon shapefile."""
    path = Path(path).with_suffix(".shp")
    with shapefile.Writer(str(path), shapeType=shapefile.POLYGON) as w:
        for name, kind, size, decimal in STRUCTURE_FIELDS:
            w.field(name, kind, size=size, decimal=decimal)
        for s in structures:
            w.shape(s.geometry)
            w.record(s.structure_id, s.structure_number)
    _write_prj(path, prj_wkt)
    logger.info("Wrote %d structures to %s", len(structures), path)
    return path


def shelters_to_csv(shelters: list[AddressedShelter]) -> str:
    """Render the shelter address table as CSV text."""
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=CSV_FIELDS, extrasaction="ignore")
    writer.writeheader()
    for s in shelters:
        writer.writerow(s.model_dump(include=set(CSV_FIELDS)))
    return buf.getvalue()
