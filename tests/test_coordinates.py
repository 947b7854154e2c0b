"""Tests for coordinate value types and geocentric/topocentric conversions."""

import math

import numpy as np
import pytest
from pyproj import Transformer

from common.errors import InvalidInputError
from geospatial.angles import Latitude, Longitude
from geospatial.coordinate_models import (
    ecef_to_geodetic,
    enu_to_geodetic,
    from_topocentric,
    geodetic_to_ecef,
    geodetic_to_ecef_batch,
    geodetic_to_enu,
    to_geodetic,
    to_space_rectangular,
    to_topocentric,
)
from geospatial.coordinates import (
    CartesianCoord,
    GeodeticCoord,
    GeographicCoord,
    PolarCoord,
    ProjectedCoord,
    SpaceRectangularCoord,
    SphericalCoord,
    TopocentricPolarCoord,
    TopocentricRectCoord,
)


class TestCartesianCoord:

    def test_distance(self):
        assert CartesianCoord(3.0, 4.0).distance(CartesianCoord(0.0, 0.0)) == 5.0

    def test_dimension_mismatch(self):
        with pytest.raises(InvalidInputError):
            CartesianCoord(1.0, 2.0).distance(CartesianCoord(1.0, 2.0, 3.0))
        with pytest.raises(InvalidInputError):
            CartesianCoord(1.0, 2.0).shift(1.0, 2.0, 3.0)

    def test_units(self):
        p = CartesianCoord(1.0, 2.0, unit="kilometer")
        assert p.in_unit("meter") == pytest.approx((1000.0, 2000.0))
        assert p.to_unit("meter").unit == "meter"
        assert p.distance(CartesianCoord(1000.0, 2000.0, unit="meter")) == pytest.approx(0.0)

    def test_rejects_angular_unit(self):
        with pytest.raises(InvalidInputError):
            CartesianCoord(1.0, 2.0, unit="degree")

    def test_shift_and_rescale(self):
        p = CartesianCoord(1.0, 2.0).shift(CartesianCoord(0.5, 0.5))
        assert p.values == (1.5, 2.5)
        assert p.rescale(2.0).values == (3.0, 5.0)
        with pytest.raises(InvalidInputError):
            p.rescale(0.0)

    def test_rotate_2d_frame(self):
        x, y = CartesianCoord(1.0, 0.0).rotate(90.0)
        assert x == pytest.approx(0.0, abs=1e-12)
        assert y == pytest.approx(-1.0)

    def test_rotate_3d_about_z(self):
        p = SpaceRectangularCoord(1.0, 0.0, 5.0).rotate(90.0, fixed_axis=3)
        assert isinstance(p, SpaceRectangularCoord)
        assert p.values == pytest.approx((0.0, -1.0, 5.0), abs=1e-12)
        with pytest.raises(InvalidInputError):
            p.rotate(10.0, fixed_axis=4)

    def test_reflect(self):
        x, y = CartesianCoord(1.0, 0.0).reflect(45.0)
        assert (x, y) == pytest.approx((0.0, 1.0), abs=1e-12)

    def test_named_subtypes(self):
        assert ProjectedCoord(4_000_000.0, 500_000.0).easting == 500_000.0
        assert TopocentricRectCoord(1.0, 2.0, 3.0).up == 3.0
        assert SpaceRectangularCoord(1.0, 2.0, 3.0).y == 2.0

    def test_dict_round_trip(self):
        p = SpaceRectangularCoord(1.0, 2.0, 3.0, unit="meter")
        assert SpaceRectangularCoord.from_dict(p.to_dict()) == p


class TestAngularCoords:

    def test_floats_become_latitude_and_longitude(self):
        coord = GeographicCoord(45.0, 190.0)
        assert isinstance(coord.latitude, Latitude)
        assert isinstance(coord.longitude, Longitude)
        assert coord.longitude.degrees == pytest.approx(-170.0)

    def test_invalid_latitude(self):
        with pytest.raises(InvalidInputError):
            GeographicCoord(120.0, 0.0)

    def test_geodetic_dict(self):
        coord = GeodeticCoord.from_degrees(39.9, 116.4, 43.5)
        restored = GeodeticCoord.from_dict(coord.to_dict())
        assert restored.latitude == coord.latitude
        assert restored.height == 43.5
        assert restored.height_system is coord.height_system

    def test_topocentric_polar(self):
        polar = TopocentricPolarCoord(100.0, 90.0, 0.0)
        rect = polar.to_rect()
        assert rect.east == pytest.approx(100.0)
        assert rect.north == pytest.approx(0.0, abs=1e-9)
        back = rect.to_polar()
        assert back.range == pytest.approx(100.0)

    def test_spherical(self):
        coord = SphericalCoord.from_cartesian(SpaceRectangularCoord(0.0, 0.0, 10.0))
        assert coord.radius == pytest.approx(10.0)
        assert coord.to_cartesian().z == pytest.approx(10.0)

    def test_polar(self):
        polar = PolarCoord.from_cartesian(CartesianCoord(0.0, 2.0))
        assert polar.range == pytest.approx(2.0)
        x, y = polar.to_cartesian()
        assert (x, y) == pytest.approx((0.0, 2.0), abs=1e-12)


class TestGeocentric:

    def test_equator_prime_meridian(self, wgs84):
        X, Y, Z = geodetic_to_ecef(0.0, 0.0, 0.0, wgs84)
        assert (X, Y, Z) == pytest.approx((wgs84.a, 0.0, 0.0))

    def test_round_trip(self, wgs84):
        lat, lon = math.radians(39.9042), math.radians(116.4074)
        X, Y, Z = geodetic_to_ecef(lat, lon, 50.0, wgs84)
        lat2, lon2, h2 = ecef_to_geodetic(X, Y, Z, wgs84)
        assert math.degrees(lat2) == pytest.approx(39.9042, abs=1e-9)
        assert math.degrees(lon2) == pytest.approx(116.4074, abs=1e-9)
        assert h2 == pytest.approx(50.0, abs=1e-6)

    @pytest.mark.parametrize("lat_deg,h", [(90.0, 100.0), (-90.0, 0.0), (80.0, 10_000.0)])
    def test_near_poles(self, wgs84, lat_deg, h):
        X, Y, Z = geodetic_to_ecef(math.radians(lat_deg), 0.3, h, wgs84)
        lat2, _, h2 = ecef_to_geodetic(X, Y, Z, wgs84)
        assert math.degrees(lat2) == pytest.approx(lat_deg, abs=1e-9)
        assert h2 == pytest.approx(h, abs=1e-4)

    def test_matches_pyproj(self, wgs84):
        transformer = Transformer.from_crs("EPSG:4979", "EPSG:4978", always_xy=True)
        expected = transformer.transform(116.4074, 39.9042, 50.0)
        X, Y, Z = geodetic_to_ecef(math.radians(39.9042), math.radians(116.4074), 50.0, wgs84)
        assert (X, Y, Z) == pytest.approx(expected, abs=1e-4)

    def test_batch_matches_scalar(self, wgs84):
        lats = np.radians([0.0, 30.0, -45.0])
        lons = np.radians([0.0, 100.0, -60.0])
        heights = np.array([0.0, 500.0, -20.0])
        X, Y, Z = geodetic_to_ecef_batch(lats, lons, heights, wgs84)
        for i in range(3):
            assert (X[i], Y[i], Z[i]) == pytest.approx(
                geodetic_to_ecef(lats[i], lons[i], heights[i], wgs84)
            )

    def test_value_type_wrappers(self, wgs84):
        coord = GeodeticCoord.from_degrees(31.2, 121.5, 12.0)
        xyz = to_space_rectangular(coord, wgs84)
        assert isinstance(xyz, SpaceRectangularCoord)
        back = to_geodetic(xyz, wgs84)
        assert back.latitude.degrees == pytest.approx(31.2, abs=1e-9)
        assert back.longitude.degrees == pytest.approx(121.5, abs=1e-9)
        assert back.height == pytest.approx(12.0, abs=1e-6)

    def test_uses_default_ellipsoid(self, cgcs2000):
        X, _, _ = geodetic_to_ecef(0.0, 0.0)
        assert X == pytest.approx(cgcs2000.a)


class TestTopocentric:

    def test_point_north_of_origin(self, wgs84):
        origin_lat = math.radians(45.0)
        east, north, up = geodetic_to_enu(origin_lat + 1e-5, 0.0, 0.0, origin_lat, 0.0, 0.0, wgs84)
        assert east == pytest.approx(0.0, abs=1e-6)
        assert north > 60.0
        assert abs(up) < 0.01

    def test_enu_round_trip(self, wgs84):
        lat0, lon0 = math.radians(30.0), math.radians(114.0)
        lat, lon, h = enu_to_geodetic(1200.0, -800.0, 35.0, lat0, lon0, 20.0, wgs84)
        east, north, up = geodetic_to_enu(lat, lon, h, lat0, lon0, 20.0, wgs84)
        assert (east, north, up) == pytest.approx((1200.0, -800.0, 35.0), abs=1e-6)

    def test_value_type_round_trip(self, wgs84):
        origin = GeodeticCoord.from_degrees(30.0, 114.0, 20.0)
        local = TopocentricRectCoord(150.0, 250.0, -5.0)
        xyz = from_topocentric(local, origin, wgs84)
        again = to_topocentric(xyz, origin, wgs84)
        assert again.values == pytest.approx(local.values, abs=1e-6)
