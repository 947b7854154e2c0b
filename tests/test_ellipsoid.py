"""Tests for reference ellipsoids."""

import math

import numpy as np
import pytest

from common.errors import InvalidInputError, MissingParameterError
from geospatial import ellipsoid as ellipsoid_module
from geospatial.ellipsoid import (
    ELLIPSOIDS,
    KRASSOVSKY1940,
    SPHERE,
    Ellipsoid,
    get_ellipsoid,
)


class TestGeometricConstants:

    def test_wgs84_derived_parameters(self, wgs84):
        assert wgs84.b == pytest.approx(6356752.314245, abs=1e-6)
        assert wgs84.e2 == pytest.approx(0.00669437999014, abs=1e-14)
        assert wgs84.ep2 == pytest.approx(0.00673949674228, abs=1e-14)
        assert wgs84.c == pytest.approx(wgs84.a ** 2 / wgs84.b)

    def test_wgs84_radii(self, wgs84):
        assert wgs84.mean_radius == pytest.approx(6371008.7714, abs=1e-3)
        assert wgs84.authalic_radius == pytest.approx(6371007.1809, abs=1e-3)
        assert wgs84.volumetric_radius == pytest.approx(6371000.7900, abs=1e-3)

    def test_wgs84_area(self, wgs84):
        assert wgs84.area == pytest.approx(5.10065621724e14, rel=1e-10)

    def test_sphere(self):
        sphere = Ellipsoid.sphere(6371000.0)
        assert sphere.is_sphere
        assert sphere.e2 == 0.0
        assert sphere.b == sphere.a
        assert sphere.area == pytest.approx(4 * math.pi * 6371000.0 ** 2)
        assert sphere.authalic_radius == sphere.a

    def test_from_axes(self):
        clarke = Ellipsoid.from_axes(6378206.4, 6356583.8)
        assert clarke.ivf == pytest.approx(294.978698214, abs=1e-6)
        assert Ellipsoid.from_axes(1000.0, 1000.0).is_sphere

    @pytest.mark.parametrize("a,ivf", [(-1.0, 298.0), (0.0, 298.0), (6378137.0, 0.5)])
    def test_invalid_parameters(self, a, ivf):
        with pytest.raises(InvalidInputError):
            Ellipsoid(a=a, ivf=ivf)


class TestCurvature:

    def test_equator(self, wgs84):
        assert wgs84.prime_vertical_radius(0.0) == pytest.approx(wgs84.a)
        assert wgs84.meridian_radius(0.0) == pytest.approx(wgs84.a * (1 - wgs84.e2))

    def test_pole(self, wgs84):
        pole = math.pi / 2
        assert wgs84.prime_vertical_radius(pole) == pytest.approx(wgs84.c)
        assert wgs84.meridian_radius(pole) == pytest.approx(wgs84.c)
        assert wgs84.parallel_radius(pole) == pytest.approx(0.0, abs=1e-6)

    def test_euler_radius_limits(self, wgs84):
        lat = math.radians(40.0)
        assert wgs84.curvature_radius(lat, 0.0) == pytest.approx(wgs84.meridian_radius(lat))
        assert wgs84.curvature_radius(lat, math.pi / 2) == pytest.approx(wgs84.prime_vertical_radius(lat))

    def test_mean_curvature_radius(self, wgs84):
        lat = math.radians(40.0)
        expected = math.sqrt(wgs84.meridian_radius(lat) * wgs84.prime_vertical_radius(lat))
        assert wgs84.mean_curvature_radius(lat) == pytest.approx(expected)

    def test_vectorized(self, wgs84):
        lats = np.radians([0.0, 30.0, 60.0])
        radii = wgs84.prime_vertical_radius(lats)
        assert radii.shape == (3,)
        assert radii[0] == pytest.approx(wgs84.a)


class TestMeridianArc:

    def test_quarter_meridian(self, wgs84):
        assert wgs84.quarter_meridian == pytest.approx(10001965.729, abs=1e-3)

    @pytest.mark.parametrize("lat_deg", [-60.0, 0.0, 15.0, 45.0, 89.0])
    def test_latitude_from_arc_inverts_arc(self, wgs84, lat_deg):
        lat = math.radians(lat_deg)
        arc = wgs84.meridian_arc_length(lat)
        assert wgs84.latitude_from_meridian_arc(arc) == pytest.approx(lat, abs=1e-10)


class TestNormalGravity:

    def test_grs80_flattening_from_j2(self, grs80):
        assert grs80.ivf == pytest.approx(298.257222101, abs=1e-6)
        assert grs80.j2 == pytest.approx(0.00108263, rel=1e-9)

    def test_grs80_gravity(self, grs80):
        assert grs80.equatorial_gravity == pytest.approx(9.7803267715, abs=1e-8)
        assert grs80.polar_gravity == pytest.approx(9.8321863685, abs=1e-8)

    def test_wgs84_gravity(self, wgs84):
        assert wgs84.equatorial_gravity == pytest.approx(9.7803253359, abs=1e-8)
        assert wgs84.polar_gravity == pytest.approx(9.8321849378, abs=1e-8)
        assert wgs84.surface_gravity(0.0) == pytest.approx(wgs84.equatorial_gravity)

    def test_free_air_decrease(self, wgs84):
        lat = math.radians(45.0)
        assert wgs84.normal_gravity(lat, 1000.0) < wgs84.surface_gravity(lat)

    def test_requires_physical_constants(self):
        with pytest.raises(MissingParameterError):
            KRASSOVSKY1940.equatorial_gravity

    def test_j2_solve_stops_at_iteration_cap(self, monkeypatch, convergence_log):
        """A solve that never meets its tolerance runs exactly the capped rounds."""
        monkeypatch.setattr(ellipsoid_module, "J2_TOLERANCE", -1.0)
        ellipsoid = Ellipsoid.from_dynamic_form_factor(6378137.0, 0.00108263, 7292115e-11, 3986005e8)
        assert ellipsoid.ivf == pytest.approx(298.257222101, abs=1e-6)
        events = convergence_log.events("ellipsoid.j2")
        assert len(events) == 1
        assert events[0].iterations == ellipsoid_module.J2_MAX_ITERATIONS
        assert not events[0].converged


class TestCatalog:

    def test_lookup_is_case_insensitive(self, wgs84):
        assert get_ellipsoid("wgs84") is wgs84
        assert get_ellipsoid("Krassovsky1940") is KRASSOVSKY1940

    def test_unknown_name(self):
        with pytest.raises(InvalidInputError):
            get_ellipsoid("Everest1830")

    def test_catalog_keys(self):
        assert all(key == e.name.lower() for key, e in ELLIPSOIDS.items())
        assert SPHERE.is_sphere

    def test_pyproj_crs(self, wgs84):
        crs = wgs84.to_crs()
        assert crs.ellipsoid.semi_major_metre == pytest.approx(wgs84.a)
        assert crs.ellipsoid.inverse_flattening == pytest.approx(wgs84.ivf)
