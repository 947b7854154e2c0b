"""Tests for the reduction of ground observations to the ellipsoid."""

import math

import pytest

from common.errors import InvalidInputError
from geospatial.angles import Angle
from geospatial.coordinate_models import geodetic_to_ecef
from geospatial.ellipsoid import WGS84
from geospatial.geo_point import GeoPoint
from geospatial.geodesic import Karney
from geospatial.ground_reduction import (
    azimuth_from_astronomic,
    azimuth_from_deflection,
    distance_to_surface,
    elevation_difference_correction,
    normal_section_to_geodesic,
    vertical_deflection_correction,
    zenith_to_surface,
)


def _chord(start, end, h1, h2):
    p1 = geodetic_to_ecef(start.latitude.radians, start.longitude.radians, h1, WGS84)
    p2 = geodetic_to_ecef(end.latitude.radians, end.longitude.radians, h2, WGS84)
    return math.dist(p1, p2)


class TestDirectionCorrections:

    def test_deflection_vanishes_for_horizontal_sight(self):
        assert vertical_deflection_correction(5.0, -3.0, 30.0, 0.0).degrees == pytest.approx(0.0, abs=1e-15)

    def test_deflection_correction(self):
        delta = vertical_deflection_correction(5.0, -3.0, 90.0, 45.0)
        assert delta.degrees * 3600 == pytest.approx(-5.0)

    def test_elevation_difference_correction(self):
        lat = math.radians(30.0)
        delta = elevation_difference_correction(WGS84, 30.0, 45.0, 1000.0)
        expected = WGS84.e2 * 1000.0 * math.cos(lat) ** 2 / (2 * WGS84.meridian_radius(lat))
        assert delta.radians == pytest.approx(expected)
        assert elevation_difference_correction(WGS84, 30.0, 0.0, 1000.0).degrees == pytest.approx(0.0, abs=1e-15)

    def test_normal_section_correction_is_tiny(self):
        delta = normal_section_to_geodesic(WGS84, Angle(30.0), Angle(45.0), 30_000.0)
        assert delta.degrees < 0.0
        assert abs(delta.degrees * 3600) < 1e-2
        assert normal_section_to_geodesic(WGS84, 30.0, 90.0, 30_000.0).degrees == pytest.approx(0.0, abs=1e-15)

    def test_zenith_to_surface(self):
        assert zenith_to_surface(90.0, 3600.0, 0.0, 0.0).degrees == pytest.approx(91.0)
        assert zenith_to_surface(Angle(90.0), 0.0, 3600.0, 90.0).degrees == pytest.approx(91.0)


class TestDistanceReduction:

    @pytest.mark.parametrize("azimuth", [0.0, 45.0, 120.0])
    def test_chord_on_ellipsoid(self, azimuth):
        """A chord between surface points reduces to the geodesic length."""
        start = GeoPoint.from_degrees(30.0, 114.0, WGS84)
        end = Karney().end_point(start, 20_000.0, azimuth)
        slope = _chord(start, end, 0.0, 0.0)
        assert distance_to_surface(WGS84, 30.0, azimuth, slope, 0.0, 0.0) == pytest.approx(20_000.0, abs=1e-3)

    def test_elevated_line(self):
        start = GeoPoint.from_degrees(30.0, 114.0, WGS84)
        end = Karney().end_point(start, 20_000.0, 60.0)
        slope = _chord(start, end, 480.0, 520.0)
        assert distance_to_surface(WGS84, 30.0, 60.0, slope, 480.0, 520.0) == pytest.approx(20_000.0, abs=5e-3)

    def test_height_difference_exceeds_distance(self):
        with pytest.raises(InvalidInputError):
            distance_to_surface(WGS84, 30.0, 0.0, 100.0, 0.0, 150.0)


class TestLaplaceAzimuth:

    def test_from_astronomic_longitude(self):
        azimuth = azimuth_from_astronomic(45.0, 30.0, 116.001, 116.0)
        assert azimuth.degrees == pytest.approx(45.0 - 0.0005)

    def test_from_deflection(self):
        azimuth = azimuth_from_deflection(Angle(45.0), 3.6, 45.0)
        assert azimuth.degrees == pytest.approx(45.0 - 0.001)
