"""Shapefile layer reader with CRS detection."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

import shapefile
from pyproj import CRS
from shapely.geometry import GeometryCollection, shape

from .models import Feature, LayerMetadata

logger = logging.getLogger(__name__)


def detect_crs(prj_source: str | Path | None) -> tuple[int | None, str | None, bool | None]:
    """Parse CRS from a .prj WKT string or file path.

    Returns (epsg_code, crs_name, is_projected) or (None, None, None) on failure.
    """
    if prj_source is None:
        return None, None, None

    wkt = prj_source if isinstance(prj_source, str) else ""
    if isinstance(prj_source, Path):
        if not prj_source.exists():
            return None, None, None
        wkt = prj_source.read_text()

    if not wkt.strip():
        return None, None, None

    try:
        crs = CRS.from_wkt(wkt)
    except Exception:
        logger.warning("Could not parse .prj WKT; CRS left unknown")
        return None, None, None

    epsg = crs.to_epsg()
    return epsg, crs.name, crs.is_projected


def read_layer(
    shp_path: str | Path | None = None,
    *,
    shp_file: BinaryIO | None = None,
    shx_file: BinaryIO | None = None,
    dbf_file: BinaryIO | None = None,
    prj_wkt: str | None = None,
) -> tuple[list[Feature], LayerMetadata]:
    """Read a shapefile and return its features with metadata.

    Supports two modes:
    - File path: pass ``shp_path`` (the .prj is auto-discovered)
    - File objects: pass ``shp_file``, ``shx_file``, ``dbf_file``, and optionally ``prj_wkt``

    Null shapes are kept as empty geometries so that ``fid`` stays aligned with
    the record number; the cleaning step drops them.
    """
    if shp_path is not None:
        shp_path = Path(shp_path)
        sf = shapefile.Reader(str(shp_path))
        prj_path = shp_path.with_suffix(".prj")
        if not prj_path.exists():
            # shp_path might already lack an extension (pyshp convention)
            prj_path = Path(str(shp_path) + ".prj")
        epsg, crs_name, is_projected = detect_crs(prj_path if prj_path.exists() else None)
    elif shp_file is not None:
        sf = shapefile.Reader(shp=shp_file, shx=shx_file, dbf=dbf_file)
        epsg, crs_name, is_projected = detect_crs(prj_wkt)
    else:
        raise ValueError("Provide either shp_path or shp_file")

    shape_type_name = sf.shapeTypeName
    fields = [f[0] for f in sf.fields[1:]]  # skip DeletionFlag
    features: list[Feature] = []
    for fid, sr in enumerate(sf.iterShapeRecords()):
        if sr.shape.shapeType == shapefile.NULL:
            geometry = GeometryCollection()
        else:
            geometry = shape(sr.shape.__geo_interface__)
        features.append(Feature(fid=fid, geometry=geometry, properties=sr.record.as_dict()))
    sf.close()

    metadata = LayerMetadata(
        shape_type_name=shape_type_name,
        crs_epsg=epsg,
        crs_name=crs_name,
        is_projected=is_projected,
        num_features=len(features),
        fields=fields,
    )
    logger.info("Read %d %s features (EPSG:%s)", len(features), metadata.shape_type_name, epsg)
    return features, metadata
