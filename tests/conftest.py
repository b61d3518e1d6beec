from pathlib import Path

import pytest
import shapefile
from pyproj import CRS
from shapely.geometry import LineString, Point, box

from shelter_addressing import Feature

UTM_37N_WKT = CRS.from_epsg(32637).to_wkt()
WGS84_WKT = CRS.from_epsg(4326).to_wkt()


def layer(*geometries, **columns) -> list[Feature]:
    """Build a feature list; keyword columns are per-feature value lists."""
    return [
        Feature(fid=i, geometry=g, properties={k: v[i] for k, v in columns.items()})
        for i, g in enumerate(geometries)
    ]


@pytest.fixture
def camp():
    """Two sub-blocks along two parallel sequence lines.

    C03 (line 1, y=0): structure 1 holds shelters 0 and 1, structure 2 holds
    shelter 2, structure 3 holds shelter 3 which has no door. B01 (line 2,
    y=50): structure 4 holds shelter 4.
    """
    structures = layer(
        box(0, -1, 20, 9), box(30, -1, 40, 9), box(50, -1, 60, 9), box(0, 49, 10, 59),
        type=["building"] * 4, id=["s1", "s2", "s3", "s4"],
    )
    shelters = layer(
        box(0, -1, 10, 9), box(10, -1, 20, 9), box(30, -1, 40, 9), box(50, -1, 60, 9), box(0, 49, 10, 59),
        type=["shelter"] * 5,
        id=["h0", "h1", "h2", "h3", "h4"],
        campId=["C03", "C03", "C03", "C03", "B01"],
    )
    lines = layer(LineString([(0, 0), (100, 0)]), LineString([(0, 50), (100, 50)]), lineId=[1, 2])
    doors = layer(Point(5, 0), Point(15, 0), Point(35, 0), Point(5, 50))
    return structures, shelters, lines, doors


def write_layer(path: Path, features: list[Feature], shape_type: int, prj_wkt: str | None = UTM_37N_WKT) -> Path:
    """Write features to a shapefile; property types are inferred from the first feature."""
    path = Path(path).with_suffix(".shp")
    path.parent.mkdir(parents=True, exist_ok=True)
    names = list(features[0].properties) if features and features[0].properties else []
    with shapefile.Writer(str(path), shapeType=shape_type) as w:
        if not names:
            w.field("fid", "N", size=10)
        for name in names:
            if isinstance(features[0].properties[name], int):
                w.field(name, "N", size=10)
            else:
                w.field(name, "C", size=50)
        for f in features:
            _write_shape(w, f.geometry)
            w.record(*([f.properties[n] for n in names] or [f.fid]))
    if prj_wkt:
        path.with_suffix(".prj").write_text(prj_wkt)
    return path


@pytest.fixture
def camp_shapefiles(tmp_path, camp):
    structures, shelters, lines, doors = camp
    return {
        "structures": write_layer(tmp_path / "structures" / "structures", structures, shapefile.POLYGON),
        "shelters": write_layer(tmp_path / "shelters" / "shelters", shelters, shapefile.POLYGON),
        "lines": write_layer(tmp_path / "lines" / "lines", lines, shapefile.POLYLINE),
        "doors": write_layer(tmp_path / "doors" / "doors", doors, shapefile.POINT),
    }


def _write_shape(w: shapefile.Writer, geometry) -> None:
    # pyshp 3 rejects the tuple coordinates in shapely's __geo_interface__ for points and lines
    if geometry.geom_type == "Point":
        w.point(geometry.x, geometry.y)
    elif geometry.geom_type == "LineString":
        w.line([[list(c) for c in geometry.coords]])
    else:
        w.shape(geometry)
