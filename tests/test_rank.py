"""Tests for linear referencing and rank key composition."""

import pytest
from shapely.geometry import LineString, MultiLineString, Point

from conftest import layer
from shelter_addressing import AddressingConfig, DiagnosticKind, RankKeyError, compose_key, project_distance, rank_doors
from shelter_addressing.rank import LINE_DISTANCE, RANK_KEY, check_multiplier


class TestProjectDistance:
    def test_straight_line(self):
        line = LineString([(0, 0), (100, 0)])
        assert project_distance(line, Point(42.5, 3)) == pytest.approx(42.5)

    def test_measured_along_path(self):
        line = LineString([(0, 0), (10, 0), (10, 10)])
        # straight-line distance to the start would be ~13, along the path it is 15
        assert project_distance(line, Point(12, 5)) == pytest.approx(15.0)

    def test_far_point_projects_to_nearest(self):
        line = LineString([(0, 0), (10, 0)])
        assert project_distance(line, Point(500, 500)) == pytest.approx(10.0)
        assert project_distance(line, Point(-3, -3)) == pytest.approx(0.0)

    def test_multilinestring(self):
        line = MultiLineString([[(0, 0), (10, 0)], [(20, 0), (30, 0)]])
        assert project_distance(line, Point(25, 1)) == pytest.approx(15.0)

    def test_empty_line_rejected(self):
        with pytest.raises(ValueError):
            project_distance(LineString(), Point(0, 0))


class TestComposeKey:
    def test_examples(self):
        assert compose_key(3, 42.5, 1_000_000) == 3_000_042.5
        assert compose_key(4, 10.0, 1_000_000) == 4_000_010.0

    def test_line_order_dominates_distance(self):
        assert compose_key(3, 999_999.0, 1_000_000) < compose_key(4, 0.0, 1_000_000)

    def test_distance_order_within_line(self):
        assert compose_key(2, 1.0, 1e6) < compose_key(2, 1.5, 1e6)

    def test_distance_at_multiplier_rejected(self):
        with pytest.raises(RankKeyError):
            compose_key(1, 10_000.0, 10_000)

    def test_negative_values_rejected(self):
        with pytest.raises(RankKeyError):
            compose_key(-1, 0.0, 1e6)
        with pytest.raises(RankKeyError):
            compose_key(1, -0.5, 1e6)


class TestRankDoors:
    def lines(self):
        return layer(LineString([(0, 0), (100, 0)]), LineString([(0, 50), (100, 50)]), lineId=[3, 4])

    def test_attaches_line_distance_and_key(self):
        doors = layer(Point(42.5, 0.2), Point(10, 50))
        ranked, diagnostics = rank_doors(self.lines(), doors, AddressingConfig())
        assert diagnostics == []
        assert ranked[0].properties["lineId"] == 3
        assert ranked[0].properties[LINE_DISTANCE] == pytest.approx(42.5)
        assert ranked[0].properties[RANK_KEY] == pytest.approx(3_000_042.5)
        assert ranked[1].properties[RANK_KEY] == pytest.approx(4_000_010.0)
        assert ranked[0].properties[RANK_KEY] < ranked[1].properties[RANK_KEY]

    def test_door_away_from_lines(self):
        doors = layer(Point(50, 25))
        ranked, diagnostics = rank_doors(self.lines(), doors, AddressingConfig(door_snap_tolerance=2.0))
        assert ranked[0].properties[RANK_KEY] is None
        assert ranked[0].properties["lineId"] is None
        assert [d.kind for d in diagnostics] == [DiagnosticKind.DOOR_WITHOUT_LINE]

    def test_default_tolerance_reaches_wall_doors(self):
        doors = layer(Point(20, 1.5), Point(60, 6.0))
        ranked, diagnostics = rank_doors(self.lines(), doors, AddressingConfig())
        assert ranked[0].properties[RANK_KEY] == pytest.approx(3_000_020.0)
        assert ranked[1].properties[RANK_KEY] is None
        assert [(d.kind, d.fid) for d in diagnostics] == [(DiagnosticKind.DOOR_WITHOUT_LINE, 1)]

    def test_nearest_line_wins(self):
        doors = layer(Point(50, 20))
        ranked, _ = rank_doors(self.lines(), doors, AddressingConfig(door_snap_tolerance=40.0))
        assert ranked[0].properties["lineId"] == 3

    def test_inputs_unchanged(self):
        doors = layer(Point(1, 0))
        rank_doors(self.lines(), doors, AddressingConfig())
        assert doors[0].properties == {}

    def test_multiplier_shorter_than_line(self):
        with pytest.raises(RankKeyError):
            check_multiplier(self.lines(), 100.0)
        with pytest.raises(RankKeyError):
            rank_doors(self.lines(), layer(Point(1, 0)), AddressingConfig(rank_multiplier=50.0))
