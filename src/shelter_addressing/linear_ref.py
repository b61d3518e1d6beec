"""Linear referencing of door points along sequence lines."""

from shapely.geometry import LineString, MultiLineString, Point


def project_distance(line: LineString | MultiLineString, point: Point) -> float:
    """Distance along ``line`` from its first vertex to the point on it nearest ``point``.

    Measured along the path in CRS units, not as a straight line to the start.
    A point far from the line still projects onto its globally nearest point.
    """
    if line.is_empty:
        raise ValueError("Cannot project onto an empty line")
    return float(line.project(point))
