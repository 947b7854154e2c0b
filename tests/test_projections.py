"""Tests for map projections and distortion analysis."""

import math

import pytest
from pyproj import Proj

from common.errors import InvalidInputError, MissingParameterError
from geospatial.coordinates import GeographicCoord, ProjectedCoord
from geospatial.ellipsoid import SPHERE, WGS84
from geospatial.projections import (
    UPS,
    UTM,
    AlbersEqualArea,
    CassiniSoldner,
    LambertConformalConic2SP,
    Mercator,
    PolarStereographic,
    ProjectionParameters,
    TransverseMercator,
    WebMercator,
    compute_tissot_indicatrix,
    select_projection,
)


def _tm():
    return TransverseMercator(
        ProjectionParameters(
            latitude_of_origin=0.0,
            central_meridian=117.0,
            scale_factor=0.9996,
            false_easting=500_000.0,
        ),
        WGS84,
    )


def _lcc():
    return LambertConformalConic2SP(
        ProjectionParameters(
            standard_parallel_1=25.0,
            standard_parallel_2=47.0,
            latitude_of_origin=0.0,
            central_meridian=105.0,
        ),
        WGS84,
    )


def _albers():
    return AlbersEqualArea(
        ProjectionParameters(
            standard_parallel_1=29.5,
            standard_parallel_2=45.5,
            latitude_of_origin=23.0,
            central_meridian=-96.0,
        ),
        WGS84,
    )


def _polar():
    return PolarStereographic(
        ProjectionParameters(
            latitude_of_origin=-90.0,
            true_scale_latitude=-71.0,
            central_meridian=0.0,
        ),
        WGS84,
    )


def _mercator():
    return Mercator(ProjectionParameters(central_meridian=110.0, scale_factor=1.0), WGS84)


def _cassini():
    return CassiniSoldner(
        ProjectionParameters(latitude_of_origin=10.0, central_meridian=-61.0),
        WGS84,
    )


# (factory, sample points in degrees)
CASES = {
    "transverse_mercator": (_tm, [(0.0, 117.0), (31.5, 119.5), (-45.0, 114.2), (70.0, 118.0)]),
    "utm": (lambda: UTM(50, "N", WGS84), [(0.5, 117.0), (39.9, 116.4), (60.0, 119.9)]),
    "lambert": (_lcc, [(35.0, 105.0), (20.0, 80.0), (50.0, 130.0)]),
    "albers": (_albers, [(23.0, -96.0), (40.0, -75.0), (30.0, -120.0)]),
    "polar_stereographic": (_polar, [(-75.0, 0.0), (-60.0, 135.0), (-89.0, -45.0)]),
    "ups": (lambda: UPS("N", WGS84), [(85.0, 0.0), (88.0, -120.0), (84.5, 179.0)]),
    "mercator": (_mercator, [(0.0, 110.0), (45.0, 100.0), (-70.0, 150.0)]),
    "web_mercator": (lambda: WebMercator(WGS84), [(0.0, 0.0), (51.5, -0.12), (-33.9, 151.2)]),
    "cassini": (_cassini, [(10.0, -61.0), (10.5, -60.5), (9.0, -62.0)]),
}


@pytest.mark.parametrize("name", sorted(CASES))
def test_reverse_inverts_forward(name):
    """Projecting and unprojecting a point returns it within 1e-7 degrees."""
    factory, points = CASES[name]
    projection = factory()
    for lat, lon in points:
        northing, easting = projection.forward(lat, lon)
        lat2, lon2 = projection.reverse(northing, easting)
        assert lat2.degrees == pytest.approx(lat, abs=1e-7)
        assert lon2.degrees == pytest.approx(lon, abs=1e-7)


@pytest.mark.parametrize("name,tolerance", [
    ("transverse_mercator", 5e-3),
    ("utm", 5e-3),
    ("lambert", 1e-4),
    ("albers", 1e-4),
    ("polar_stereographic", 1e-4),
    ("ups", 1e-4),
    ("mercator", 1e-4),
    ("web_mercator", 1e-4),
    ("cassini", 1e-2),
])
def test_matches_pyproj(name, tolerance):
    """Forward results agree with PROJ for the equivalent definition."""
    factory, points = CASES[name]
    projection = factory()
    reference = Proj(projection.proj4_string)
    for lat, lon in points:
        northing, easting = projection.forward(lat, lon)
        x, y = reference(lon, lat)
        assert easting == pytest.approx(x, abs=tolerance)
        assert northing == pytest.approx(y, abs=tolerance)


class TestTransverseMercator:

    def test_central_meridian_is_meridian_arc(self):
        projection = _tm()
        northing, easting = projection.forward(30.0, 117.0)
        assert easting == pytest.approx(500_000.0)
        assert northing == pytest.approx(0.9996 * WGS84.meridian_arc_length(math.radians(30.0)))

    def test_rejects_far_longitude(self):
        with pytest.raises(InvalidInputError):
            _tm().forward(30.0, 130.0)

    def test_requires_scale_factor(self):
        with pytest.raises(MissingParameterError):
            TransverseMercator(ProjectionParameters(latitude_of_origin=0.0), WGS84)

    def test_value_type_helpers(self):
        projection = _tm()
        projected = projection.forward_coord(GeographicCoord.from_degrees(31.5, 119.5))
        assert isinstance(projected, ProjectedCoord)
        back = projection.reverse_coord(projected)
        assert back.latitude.degrees == pytest.approx(31.5, abs=1e-7)
        assert len(projection.forward_many([GeographicCoord(1.0, 117.0)] * 3)) == 3


class TestConics:

    def test_lambert_cone_constant(self):
        lcc = _lcc()
        assert 0.0 < lcc.n < 1.0
        assert lcc.preserves_angles

    def test_symmetric_parallels_rejected(self):
        with pytest.raises(InvalidInputError):
            LambertConformalConic2SP(
                ProjectionParameters(standard_parallel_1=-30.0, standard_parallel_2=30.0), WGS84
            )

    def test_lambert_on_sphere_round_trip(self):
        lcc = LambertConformalConic2SP(
            ProjectionParameters(standard_parallel_1=30.0, standard_parallel_2=60.0), SPHERE
        )
        lat, lon = lcc.reverse(*lcc.forward(45.0, 10.0))
        assert (lat.degrees, lon.degrees) == pytest.approx((45.0, 10.0), abs=1e-9)

    def test_albers_equal_area(self):
        albers = _albers()
        assert albers.preserves_area
        tissot = compute_tissot_indicatrix(albers, math.radians(40.0), math.radians(-90.0))
        assert tissot.is_equal_area
        assert not tissot.is_conformal


class TestAzimuthalAndCylindrical:

    def test_ups_pole(self):
        ups = UPS("N", WGS84)
        northing, easting = ups.forward(90.0, 0.0)
        assert (northing, easting) == pytest.approx((2_000_000.0, 2_000_000.0))
        lat, _ = ups.reverse(2_000_000.0, 2_000_000.0)
        assert lat.degrees == 90.0

    def test_polar_opposite_pole(self):
        with pytest.raises(InvalidInputError):
            _polar().forward(90.0, 0.0)

    def test_mercator_pole(self):
        with pytest.raises(InvalidInputError):
            _mercator().forward(90.0, 0.0)

    def test_mercator_is_conformal(self):
        tissot = compute_tissot_indicatrix(_mercator(), math.radians(30.0), math.radians(100.0))
        assert tissot.is_conformal
        assert tissot.semi_major == pytest.approx(1.0 / math.cos(math.radians(30.0)), rel=1e-2)

    def test_web_mercator_extent(self):
        _, easting = WebMercator(WGS84).forward(0.0, 180.0)
        assert easting == pytest.approx(20037508.342789244)

    def test_cassini_on_central_meridian(self):
        northing, easting = _cassini().forward(12.0, -61.0)
        expected = WGS84.meridian_arc_length(math.radians(12.0)) - WGS84.meridian_arc_length(math.radians(10.0))
        assert easting == pytest.approx(0.0, abs=1e-9)
        assert northing == pytest.approx(expected)


class TestSelection:

    def test_small_region_gets_utm(self):
        projection = select_projection(30.0, 32.0, 114.5, 116.5, WGS84)
        assert isinstance(projection, UTM)
        assert projection.zone == 50

    def test_polar_region_gets_ups(self):
        projection = select_projection(85.0, 89.0, -30.0, 30.0, WGS84)
        assert isinstance(projection, UPS)
        assert projection.hemisphere == "N"

    def test_equatorial_band_gets_mercator(self):
        projection = select_projection(-10.0, 10.0, 0.0, 60.0, WGS84)
        assert isinstance(projection, Mercator)

    def test_wide_midlatitude_region_gets_lambert(self):
        projection = select_projection(25.0, 50.0, 75.0, 135.0, WGS84)
        assert isinstance(projection, LambertConformalConic2SP)

    def test_invalid_latitude_range(self):
        with pytest.raises(InvalidInputError):
            select_projection(40.0, 30.0, 0.0, 1.0)
