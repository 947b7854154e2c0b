"""Tests for datum transformations and parameter estimation."""

import math

import numpy as np
import pytest
from pyproj import Transformer

from common.errors import CannotResolveError, InvalidInputError
from geospatial.coordinate_models import geodetic_to_ecef
from geospatial.coordinates import GeodeticCoord, SpaceRectangularCoord
from geospatial.ellipsoid import WGS72, WGS84
from geospatial.transformations import (
    AffineTransform,
    BursaWolf,
    Helmert,
    MolodenskyBadekas,
    TransParameters,
    gauss_jordan_solve,
    get_parameters,
    molodensky,
    resolve_parameters,
)


def _stations():
    """Geocentric positions spread over the globe."""
    points = [(-60.0, -150.0), (-30.0, 20.0), (0.0, 100.0), (15.0, -70.0), (45.0, 10.0), (70.0, 160.0)]
    return np.array([
        geodetic_to_ecef(math.radians(lat), math.radians(lon), 100.0, WGS84)
        for lat, lon in points
    ])


class TestTransParameters:

    def test_from_values_counts(self):
        assert TransParameters.from_values(0, 0, 4.5).count == 3
        assert TransParameters.from_values(1, 2, 3, 0.5).values == (1.0, 2.0, 3.0, 0.5)
        with pytest.raises(InvalidInputError):
            TransParameters.from_values(1, 2)
        with pytest.raises(InvalidInputError):
            TransParameters(count=5)

    def test_inverted(self):
        params = get_parameters("WGS72_WGS84").inverted()
        assert params.tz == -4.5
        assert params.rz == -0.554
        assert (params.source, params.target) == ("WGS84", "WGS72")

    def test_inverted_keeps_rotation_point(self):
        params = TransParameters.from_values(1, 2, 3, 0.1, 0.2, 0.3, 0.4, 100, 200, 300)
        inverted = params.inverted()
        assert inverted.tx == -1.0
        assert (inverted.px, inverted.py, inverted.pz) == (100.0, 200.0, 300.0)

    def test_to_dict_and_str(self):
        params = TransParameters.from_values(1, 2, 3, 0.5)
        data = params.to_dict()
        assert data["s"] == 0.5
        assert "rx" not in data
        assert str(params) == "Tx=1.000, Ty=2.000, Tz=3.000, S=0.500"

    def test_catalog(self):
        params = get_parameters("osgb36_wgs84")
        assert params.tx == 446.448
        assert params.location == "Great Britain"
        with pytest.raises(InvalidInputError):
            get_parameters("Mars2000_WGS84")


class TestAffineTransform:

    def test_rotation_2d(self):
        x, y = AffineTransform.rotation_2d(90.0, tx=1.0).transform(1.0, 0.0)
        assert (x, y) == pytest.approx((1.0, 1.0))

    def test_composition_applies_right_operand_first(self):
        shift = AffineTransform.rotation_2d(0.0, tx=1.0)
        double = AffineTransform.scaling(2.0, 2.0)
        assert (double @ shift).transform(1.0, 0.0) == pytest.approx((4.0, 0.0))
        assert (shift @ double).transform(1.0, 0.0) == pytest.approx((3.0, 0.0))

    def test_inverse(self):
        t = AffineTransform.similarity_2d(30.0, 1.5, tx=10.0, ty=-4.0)
        x, y = t.inverse().transform(*t.transform(3.0, 7.0))
        assert (x, y) == pytest.approx((3.0, 7.0))

    def test_singular_inverse(self):
        with pytest.raises(InvalidInputError):
            AffineTransform([[0.0, 0.0, 0.0], [0.0, 0.0, 0.0], [0.0, 0.0, 1.0]]).inverse()
        with pytest.raises(InvalidInputError):
            AffineTransform([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]).inverse()

    def test_axis_rotation(self):
        x, y, z = AffineTransform.axis_rotation(90.0, 3).transform(1.0, 0.0, 0.0)
        assert (x, y, z) == pytest.approx((0.0, 1.0, 0.0), abs=1e-12)
        with pytest.raises(InvalidInputError):
            AffineTransform.axis_rotation(90.0, 0)

    def test_too_many_ordinates(self):
        with pytest.raises(InvalidInputError):
            AffineTransform.scaling(1.0, 1.0).transform(1.0, 2.0, 3.0)

    def test_missing_ordinates_are_zero(self):
        assert AffineTransform.rotation_3d(0.0, 0.0, 0.0, tz=5.0).transform(1.0) == pytest.approx((1.0, 0.0, 5.0))

    def test_transform_array(self):
        t = AffineTransform.rotation_3d(10.0, -20.0, 30.0, tx=1.0, ty=2.0, tz=3.0)
        points = _stations()
        result = t.transform_array(points)
        for row, point in zip(result, points):
            assert tuple(row) == pytest.approx(t.transform(*point))

    def test_rotation_3d_is_orthonormal(self):
        rotation = AffineTransform.rotation_3d(10.0, -20.0, 30.0).matrix[:3, :3]
        assert rotation @ rotation.T == pytest.approx(np.eye(3))


class TestSimilarityTransforms:

    def test_helmert_translation(self):
        assert Helmert(TransParameters.from_values(1.0, 2.0, 3.0)).transform_xyz(0.0, 0.0, 0.0) == (1.0, 2.0, 3.0)

    def test_conventions_differ_by_rotation_sign(self):
        params = TransParameters.from_values(10, -5, 3, 1.2, 0.3, -0.2, 0.5)
        flipped = TransParameters.from_values(10, -5, 3, 1.2, -0.3, 0.2, -0.5)
        assert Helmert(params).matrix == pytest.approx(BursaWolf(flipped).matrix)

    @pytest.mark.parametrize("code", ["WGS72_WGS84", "OSGB36_WGS84", "NAD83_WGS84"])
    def test_helmert_matches_proj(self, code):
        params = get_parameters(code)
        pipeline = (
            f"+proj=helmert +x={params.tx} +y={params.ty} +z={params.tz} "
            f"+rx={params.rx} +ry={params.ry} +rz={params.rz} +s={params.s} "
            f"+convention=position_vector"
        )
        reference = Transformer.from_pipeline(pipeline)
        helmert = Helmert(params)
        for point in _stations():
            expected = reference.transform(*point)
            assert helmert.transform_xyz(*point) == pytest.approx(expected, abs=1e-3)

    def test_invert(self):
        helmert = Helmert(get_parameters("OSGB36_WGS84"))
        inverse = helmert.invert()
        assert inverse.parameters.source == "WGS84"
        point = tuple(_stations()[4])
        assert inverse.transform_xyz(*helmert.transform_xyz(*point)) == pytest.approx(point, abs=1e-6)

    def test_transform_coord_keeps_type(self):
        coord = SpaceRectangularCoord(1.0, 2.0, 3.0)
        moved = Helmert(TransParameters.from_values(1.0, 1.0, 1.0)).transform_coord(coord)
        assert isinstance(moved, SpaceRectangularCoord)
        assert moved.values == pytest.approx((2.0, 3.0, 4.0))

    def test_molodensky_badekas_rotates_about_point(self):
        p = (4_000_000.0, 1_000_000.0, 4_800_000.0)
        params = TransParameters.from_values(1, 2, 3, 2.0, 0.5, -0.4, 1.1, *p)
        transform = MolodenskyBadekas(params)
        assert transform.transform_xyz(*p) == pytest.approx((p[0] + 1, p[1] + 2, p[2] + 3), abs=1e-6)

    def test_molodensky_badekas_without_point_is_helmert(self):
        params = TransParameters.from_values(1, 2, 3, 2.0, 0.5, -0.4, 1.1, 0, 0, 0)
        seven = TransParameters.from_values(1, 2, 3, 2.0, 0.5, -0.4, 1.1)
        assert MolodenskyBadekas(params).matrix == pytest.approx(Helmert(seven).matrix)


class TestGeodeticTransforms:

    def test_molodensky_matches_geocentric_shift(self):
        """For a pure translation both routes agree within a centimetre."""
        params = TransParameters.from_values(0.0, 0.0, 4.5)
        point = GeodeticCoord.from_degrees(39.9, 116.4, 50.0)
        exact = Helmert(params).transform_geodetic(point, WGS72, WGS84)
        approx = molodensky(point, WGS72, WGS84, params)
        assert approx.latitude.degrees == pytest.approx(exact.latitude.degrees, abs=1e-7)
        assert approx.longitude.degrees == pytest.approx(exact.longitude.degrees, abs=1e-7)
        assert approx.height == pytest.approx(exact.height, abs=1e-2)

    def test_transform_geodetic_many(self):
        helmert = Helmert(get_parameters("WGS72_WGS84"))
        points = [GeodeticCoord.from_degrees(10.0, 20.0, 0.0), GeodeticCoord.from_degrees(-10.0, -20.0, 0.0)]
        moved = helmert.transform_geodetic_many(points, WGS72, WGS84)
        assert len(moved) == 2
        assert moved[0].height_system is points[0].height_system


class TestParameterEstimation:

    def test_gauss_jordan(self):
        matrix = np.array([[4.0, -2.0, 1.0], [-2.0, 4.0, -2.0], [1.0, -2.0, 4.0]])
        rhs = np.array([11.0, -16.0, 17.0])
        assert gauss_jordan_solve(matrix, rhs) == pytest.approx(np.linalg.solve(matrix, rhs))

    def test_gauss_jordan_singular(self):
        with pytest.raises(CannotResolveError):
            gauss_jordan_solve(np.array([[1.0, 2.0], [2.0, 4.0]]), np.array([1.0, 2.0]))
        with pytest.raises(InvalidInputError):
            gauss_jordan_solve(np.ones((2, 3)), np.ones(2))

    def test_recovers_seven_parameters(self):
        truth = TransParameters.from_values(-84.8, -208.0, -96.3, -0.023, 2.36, 1.0, 3.09)
        source = _stations()
        target = Helmert(truth).transform_array(source)
        resolved = resolve_parameters(source, target)
        assert resolved.count == 7
        assert resolved.values[:3] == pytest.approx(truth.values[:3], abs=1e-3)
        assert resolved.s == pytest.approx(truth.s, abs=1e-4)
        assert resolved.values[4:] == pytest.approx(truth.values[4:], abs=1e-4)

    def test_accepts_coordinate_objects_and_weights(self):
        truth = TransParameters.from_values(1.0, -2.0, 3.0)
        source = [SpaceRectangularCoord(*p) for p in _stations()]
        target = [SpaceRectangularCoord(*Helmert(truth).transform_xyz(*p.values)) for p in source]
        resolved = resolve_parameters(source, target, weights=np.ones(3 * len(source)), count=3)
        assert resolved.values == pytest.approx((1.0, -2.0, 3.0), abs=1e-6)

    def test_recovers_ten_parameters(self):
        source = _stations()
        centroid = source.mean(axis=0)
        truth = TransParameters.from_values(0.5, -0.3, 0.8, 1.5, 0.2, -0.1, 0.4, *centroid)
        target = MolodenskyBadekas(truth).transform_array(source)
        resolved = resolve_parameters(source, target, count=10)
        assert resolved.count == 10
        assert resolved.values[:7] == pytest.approx(truth.values[:7], abs=1e-4)
        assert resolved.values[7:] == pytest.approx(tuple(centroid))

    def test_mismatched_point_sets(self):
        source = _stations()
        with pytest.raises(InvalidInputError):
            resolve_parameters(source, source[:-1])
        with pytest.raises(InvalidInputError):
            resolve_parameters(source[:2], source[:2])
        with pytest.raises(InvalidInputError):
            resolve_parameters(source, source, count=6)

    def test_degenerate_geometry(self):
        source = [(0.0, 0.0, 0.0)] * 3
        target = [(1.0, 1.0, 1.0)] * 3
        with pytest.raises(CannotResolveError):
            resolve_parameters(source, target, count=4)
