"""Tests for the direct and inverse geodesic problem solvers."""

import math

import numpy as np
import pytest

from geospatial.arcs import GeoArc
from geospatial.ellipsoid import WGS84
from geospatial.geo_point import GeoPoint
from geospatial.geodesic import (
    Bessel,
    GaussMidLatitude,
    Haversine,
    Karney,
    Vincenty,
    geodesic_direct,
    geodesic_distance_batch,
    geodesic_inverse,
)


def _point(lat, lon):
    return GeoPoint.from_degrees(lat, lon, WGS84)


def _angle_diff(a, b):
    """Smallest difference of two bearings in degrees."""
    return abs((a - b + 180.0) % 360.0 - 180.0)


# Lines of a few hundred to a few thousand kilometres
LINES = [
    ((30.0, 114.0), (40.0, 116.0)),
    ((-33.9, 151.2), (-37.8, 145.0)),
    ((51.5, -0.1), (40.7, -74.0)),
    ((10.0, 20.0), (-5.0, 35.0)),
    ((60.0, 179.0), (62.0, -170.0)),
]


class TestVincenty:

    def test_equator_degree(self):
        distance = Vincenty().distance(_point(0.0, 0.0), _point(0.0, 1.0))
        assert distance == pytest.approx(111319.491, abs=1e-3)

    @pytest.mark.parametrize("start,end", LINES)
    def test_inverse_matches_karney(self, start, end):
        p1, p2 = _point(*start), _point(*end)
        ours = Vincenty().inverse(p1, p2)
        reference = Karney().inverse(p1, p2)
        assert ours.distance == pytest.approx(reference.distance, abs=1e-3)
        assert _angle_diff(ours.bearing.degrees, reference.bearing.degrees) < 1e-7
        assert _angle_diff(ours.inverse_bearing.degrees, reference.inverse_bearing.degrees) < 1e-7

    @pytest.mark.parametrize("start,end", LINES)
    def test_direct_inverts_inverse(self, start, end):
        p1, p2 = _point(*start), _point(*end)
        solver = Vincenty()
        result = solver.inverse(p1, p2)
        direct = solver.direct(p1, result.distance, result.bearing)
        assert direct.end.latitude.degrees == pytest.approx(p2.latitude.degrees, abs=1e-9)
        assert _angle_diff(direct.end.longitude.degrees, p2.longitude.degrees) < 1e-9
        assert _angle_diff(direct.inverse_bearing.degrees, result.inverse_bearing.degrees) < 1e-7

    def test_direct_returns_back_azimuth(self):
        """Heading due east along the equator, the way back points west."""
        result = Vincenty().direct(_point(0.0, 0.0), 100_000.0, 90.0)
        assert result.end.latitude.degrees == pytest.approx(0.0, abs=1e-12)
        assert result.inverse_bearing.degrees == pytest.approx(270.0)

    def test_direct_crosses_antimeridian(self):
        end = Vincenty().end_point(_point(0.0, 179.5), 200_000.0, 90.0)
        assert -180.0 < end.longitude.degrees < -178.0

    def test_meridian_fallback_is_logged(self, convergence_log):
        """Points on one meridian leave the longitude iteration degenerate."""
        result = Vincenty().inverse(_point(10.0, 20.0), _point(40.0, 20.0))
        expected = WGS84.meridian_arc_length(math.radians(40.0)) - WGS84.meridian_arc_length(math.radians(10.0))
        assert result.distance == pytest.approx(expected, abs=1e-3)
        assert result.bearing.degrees == 0.0
        assert result.inverse_bearing.degrees == 180.0
        events = convergence_log.events("vincenty.inverse")
        assert len(events) == 1
        assert not events[0].converged

    def test_coincident_points(self):
        result = Vincenty().inverse(_point(45.0, 7.0), _point(45.0, 7.0))
        assert result.distance == 0.0
        assert result.bearing.is_nan
        assert result.inverse_bearing.is_nan


class TestBessel:

    @pytest.mark.parametrize("start,end", LINES[:4])
    def test_inverse_matches_karney(self, start, end):
        p1, p2 = _point(*start), _point(*end)
        ours = Bessel().inverse(p1, p2)
        reference = Karney().inverse(p1, p2)
        assert ours.distance == pytest.approx(reference.distance, abs=2e-2)
        assert _angle_diff(ours.bearing.degrees, reference.bearing.degrees) < 1e-6
        assert _angle_diff(ours.inverse_bearing.degrees, reference.inverse_bearing.degrees) < 1e-6

    @pytest.mark.parametrize("bearing", [0.0, 45.0, 135.0, 200.0, 315.0])
    def test_direct_matches_vincenty(self, bearing):
        start = _point(35.0, 110.0)
        ours = Bessel().direct(start, 500_000.0, bearing)
        reference = Vincenty().direct(start, 500_000.0, bearing)
        assert ours.end.latitude.degrees == pytest.approx(reference.end.latitude.degrees, abs=1e-7)
        assert _angle_diff(ours.end.longitude.degrees, reference.end.longitude.degrees) < 1e-7
        assert _angle_diff(ours.inverse_bearing.degrees, reference.inverse_bearing.degrees) < 1e-6

    def test_same_meridian(self):
        result = Bessel().inverse(_point(50.0, 8.0), _point(20.0, 8.0))
        assert result.bearing.degrees == 180.0
        assert result.inverse_bearing.degrees == 0.0
        assert result.distance == pytest.approx(
            Karney().distance(_point(50.0, 8.0), _point(20.0, 8.0)), abs=1e-3
        )


class TestGaussMidLatitude:

    @pytest.mark.parametrize("bearing", [10.0, 80.0, 150.0, 260.0])
    def test_short_direct(self, bearing):
        start = _point(30.5, 114.3)
        ours = GaussMidLatitude().direct(start, 25_000.0, bearing)
        reference = Karney().direct(start, 25_000.0, bearing)
        assert ours.end.latitude.radians == pytest.approx(reference.end.latitude.radians, abs=5e-9)
        assert ours.end.longitude.radians == pytest.approx(reference.end.longitude.radians, abs=5e-9)
        assert _angle_diff(ours.inverse_bearing.degrees, reference.inverse_bearing.degrees) < 3e-4

    @pytest.mark.parametrize("end", [(30.7, 114.5), (30.3, 114.1), (30.6, 114.0)])
    def test_short_inverse(self, end):
        p1, p2 = _point(30.5, 114.3), _point(*end)
        ours = GaussMidLatitude().inverse(p1, p2)
        reference = Karney().inverse(p1, p2)
        assert ours.distance == pytest.approx(reference.distance, abs=5e-3)
        assert math.radians(_angle_diff(ours.bearing.degrees, reference.bearing.degrees)) < 5e-6


class TestHaversine:

    def test_nashville_los_angeles(self):
        bna = GeoPoint.from_degrees(36.12, -86.67)
        lax = GeoPoint.from_degrees(33.94, -118.40)
        assert Haversine().distance(bna, lax) / 1000 == pytest.approx(2887.2599506, abs=1e-7)

    def test_direct_round_trip(self):
        solver = Haversine()
        start = GeoPoint.from_degrees(36.12, -86.67)
        end = solver.end_point(start, 1_000_000.0, 300.0)
        assert solver.distance(start, end) == pytest.approx(1_000_000.0, abs=1e-6)
        assert solver.bearing(start, end).degrees == pytest.approx(300.0, abs=1e-9)

    def test_initial_bearing_due_north(self):
        bearing = Haversine.initial_bearing(_point(0.0, 0.0), _point(10.0, 0.0))
        assert bearing.degrees == pytest.approx(0.0, abs=1e-12)


class TestConvenience:

    def test_default_solver_is_vincenty(self):
        p1, p2 = _point(30.0, 114.0), _point(40.0, 116.0)
        assert geodesic_inverse(p1, p2).distance == Vincenty().distance(p1, p2)
        assert geodesic_inverse(p1, p2, Karney()).distance == pytest.approx(
            Vincenty().distance(p1, p2), abs=1e-3
        )

    def test_geodesic_direct(self):
        result = geodesic_direct(_point(0.0, 0.0), 111319.491, 90.0)
        assert result.end.longitude.degrees == pytest.approx(1.0, abs=1e-8)

    def test_arcs(self):
        p1, p2 = _point(30.0, 114.0), _point(40.0, 116.0)
        arc = Vincenty().geodesic(p1, p2)
        assert isinstance(arc, GeoArc)
        assert arc.length == pytest.approx(Vincenty().distance(p1, p2))
        arc = Vincenty().geodesic_from(p1, 1000.0, 45.0)
        assert arc.azimuth.degrees == pytest.approx(45.0)
        assert arc.start is p1

    def test_batch(self):
        lat1 = np.radians([30.0, -33.9, 51.5])
        lon1 = np.radians([114.0, 151.2, -0.1])
        lat2 = np.radians([40.0, -37.8, 40.7])
        lon2 = np.radians([116.0, 145.0, -74.0])
        distances = geodesic_distance_batch(lat1, lon1, lat2, lon2, WGS84)
        assert distances.shape == (3,)
        for i, (start, end) in enumerate(LINES[:3]):
            assert distances[i] == pytest.approx(Karney().distance(_point(*start), _point(*end)), abs=1e-6)

    def test_batch_broadcasts(self):
        distances = geodesic_distance_batch(0.0, 0.0, np.radians([0.0, 0.0]), np.radians([1.0, 2.0]), WGS84)
        assert distances[0] == pytest.approx(111319.491, abs=1e-3)
        assert distances[1] == pytest.approx(2 * distances[0], rel=1e-9)
