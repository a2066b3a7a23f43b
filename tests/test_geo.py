"""Tests for geo helpers."""

import pytest

from exposure_risk.geo import distance_meters, haversine, path_length_km, sample_route_points
from exposure_risk.models import Coordinate


class TestHaversine:
    def test_zero_distance(self):
        assert haversine(13.7563, 100.5018, 13.7563, 100.5018) == 0.0

    def test_known_distance_bangkok_chiang_mai(self):
        d = haversine(13.7563, 100.5018, 18.7883, 98.9853)
        assert 570 < d < 595

    def test_known_distance_new_york_london(self):
        d = haversine(40.7128, -74.0060, 51.5074, -0.1278)
        assert 5550 < d < 5590

    def test_antipodal_points(self):
        d = haversine(0, 0, 0, 180)
        assert 20010 < d < 20020

    def test_symmetry(self):
        d1 = haversine(13.7563, 100.5018, 18.7883, 98.9853)
        d2 = haversine(18.7883, 98.9853, 13.7563, 100.5018)
        assert d1 == pytest.approx(d2)


class TestDistances:
    def test_one_degree_of_longitude_at_equator(self):
        d = distance_meters(Coordinate(0, 0), Coordinate(0, 1))
        assert d == pytest.approx(111195, rel=1e-3)

    def test_path_length_sums_legs(self):
        a, b = Coordinate(13.75, 100.50), Coordinate(13.76, 100.51)
        assert path_length_km([a, b, a]) == pytest.approx(2 * distance_meters(a, b) / 1000)

    def test_path_length_single_point(self):
        assert path_length_km([Coordinate(13.75, 100.50)]) == 0


class TestSampleRoutePoints:
    @pytest.fixture
    def coords(self):
        return [Coordinate(13.75 + i * 0.001, 100.50) for i in range(10)]

    def test_empty(self):
        assert sample_route_points([], 1000) == []

    def test_single_vertex(self, coords):
        assert sample_route_points(coords[:1], 5000) == [coords[0]]

    def test_zero_distance(self, coords):
        assert sample_route_points(coords, 0) == [coords[0]]

    def test_one_per_interval(self, coords):
        points = sample_route_points(coords, 2500)
        assert points == [coords[0], coords[3], coords[6], coords[9]]

    def test_short_route_keeps_endpoints(self, coords):
        assert sample_route_points(coords, 500) == [coords[0], coords[9]]

    def test_custom_interval(self, coords):
        assert len(sample_route_points(coords, 2500, interval_meters=500)) == 6
