"""
Datum Transformations.

Similarity transformations between geocentric reference frames, the
Molodensky differential formulas in geodetic space, and least-squares
estimation of transformation parameters from common points.

Rotation Conventions
--------------------
Two sign conventions for the small rotations are in use:

- **Position vector** (:class:`Helmert`): counter-clockwise rotation of the
  point is positive, R = [[1, -Rz, Ry], [Rz, 1, -Rx], [-Ry, Rx, 1]].
- **Coordinate frame** (:class:`BursaWolf`): clockwise rotation of the
  frame is positive, R = [[1, Rz, -Ry], [-Rz, 1, Rx], [Ry, -Rx, 1]].

Both apply X' = T + (1 + S·1e-6)·R·X with translations in meters, the scale
in ppm and rotations in arcseconds.

References
----------
- EPSG Guidance Note 7-2, sections 2.4.3.
- NGA (2014). Standard Molodensky transformation.
"""

from dataclasses import dataclass, replace
import math
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from common.constants import SECOND_TO_RADIAN
from common.errors import CannotResolveError, InvalidInputError
from common.logging_config import get_logger
from geospatial.angles import Angle, Latitude, Longitude
from geospatial.coordinate_models import ecef_to_geodetic, geodetic_to_ecef
from geospatial.coordinates import CartesianCoord, GeodeticCoord, SpaceRectangularCoord
from geospatial.ellipsoid import Ellipsoid
from geospatial.projections.base import AngleLike

logger = get_logger(__name__)

PPM = 1e-6

# Relative pivot magnitude below which the normal equations are singular
PIVOT_THRESHOLD = 1e-12

PARAMETER_NAMES = ("tx", "ty", "tz", "s", "rx", "ry", "rz", "px", "py", "pz")

XYZ = Tuple[float, float, float]


def _radians(value: AngleLike) -> float:
    return value.radians if isinstance(value, Angle) else math.radians(value)


# =========================================================================
# Transformation parameters
# =========================================================================

@dataclass(frozen=True)
class TransParameters:
    """A set of 3, 4, 7 or 10 datum transformation parameters.

    Attributes
    ----------
    tx, ty, tz : float
        Translations in meters.
    s : float
        Scale difference in ppm.
    rx, ry, rz : float
        Rotations in arcseconds.
    px, py, pz : float
        Rotation point in meters (Molodensky-Badekas only).
    source, target : str
        Datum names.
    code, location : str
        Identifier and area of use.
    count : int
        Number of defined values (3, 4, 7 or 10).
    """
    tx: float = 0.0
    ty: float = 0.0
    tz: float = 0.0
    s: float = 0.0
    rx: float = 0.0
    ry: float = 0.0
    rz: float = 0.0
    px: float = 0.0
    py: float = 0.0
    pz: float = 0.0
    source: str = ""
    target: str = ""
    code: str = ""
    location: str = ""
    count: int = 7

    def __post_init__(self):
        if self.count not in (3, 4, 7, 10):
            raise InvalidInputError(
                f"Parameter count must be 3, 4, 7 or 10, got {self.count}"
            )

    @classmethod
    def from_values(
        cls,
        *values: float,
        source: str = "",
        target: str = "",
        code: str = "",
        location: str = ""
    ) -> 'TransParameters':
        """Build from values ordered (Tx, Ty, Tz, S, Rx, Ry, Rz, Px, Py, Pz).

        >>> TransParameters.from_values(0, 0, 4.5).count
        3
        """
        if len(values) not in (3, 4, 7, 10):
            raise InvalidInputError(
                f"Expected 3, 4, 7 or 10 parameter values, got {len(values)}"
            )
        named = dict(zip(PARAMETER_NAMES, (float(v) for v in values)))
        return cls(**named, source=source, target=target, code=code,
                   location=location, count=len(values))

    @property
    def values(self) -> Tuple[float, ...]:
        return tuple(getattr(self, name) for name in PARAMETER_NAMES[:self.count])

    @property
    def translation(self) -> NDArray[np.float64]:
        return np.array([self.tx, self.ty, self.tz])

    @property
    def rotation_radians(self) -> XYZ:
        return (self.rx * SECOND_TO_RADIAN, self.ry * SECOND_TO_RADIAN, self.rz * SECOND_TO_RADIAN)

    @property
    def scale(self) -> float:
        """Scale multiplier 1 + S·1e-6."""
        return 1.0 + self.s * PPM

    @property
    def rotation_point(self) -> NDArray[np.float64]:
        return np.array([self.px, self.py, self.pz])

    def inverted(self) -> 'TransParameters':
        """Negated values with source and target swapped.

        A first-order inverse; for the exact inverse of a transform use
        :meth:`DatumTransform.invert`.
        """
        negated = {name: -getattr(self, name) for name in PARAMETER_NAMES}
        # The rotation point is a location, not a correction
        if self.count == 10:
            negated.update(px=self.px, py=self.py, pz=self.pz)
        return replace(self, **negated, source=self.target, target=self.source)

    def to_dict(self) -> Dict[str, Union[str, float, int]]:
        data = {name: getattr(self, name) for name in PARAMETER_NAMES[:self.count]}
        data.update(source=self.source, target=self.target, code=self.code,
                    location=self.location, count=self.count)
        return data

    def __str__(self) -> str:
        text = f"Tx={self.tx:.3f}, Ty={self.ty:.3f}, Tz={self.tz:.3f}"
        if self.count >= 4:
            text += f", S={self.s:.3f}"
        if self.count >= 7:
            text += f", Rx={self.rx:.4f}, Ry={self.ry:.4f}, Rz={self.rz:.4f}"
        if self.count == 10:
            text += f", Px={self.px:.3f}, Py={self.py:.3f}, Pz={self.pz:.3f}"
        return text


def _catalog(*values: float, source: str, target: str = "WGS84", location: str = "") -> TransParameters:
    return TransParameters.from_values(*values, source=source, target=target,
                                       code=f"{source}_{target}", location=location)


# Position-vector parameters (Tx, Ty, Tz [m], S [ppm], Rx, Ry, Rz [arcsec])
TRANSFORMATION_PARAMETERS: Dict[str, TransParameters] = {
    p.code: p for p in (
        _catalog(0, 0, 4.5, 0.219, 0, 0, 0.554, source="WGS72"),
        _catalog(-1.1, -0.3, -0.9, 0, 0, 0, 0.169, source="PZ90"),
        _catalog(1.004, -1.910, -0.515, -0.0015, 0.0267, 0.0034, 0.011, source="NAD83"),
        _catalog(446.448, -125.157, 542.06, -20.4894, 0.1502, 0.247, 0.8421,
                 source="OSGB36", location="Great Britain"),
        _catalog(89.5, 93.8, 123.1, -1.2, 0, 0, 0.156, source="ED50"),
        _catalog(-0.004, 0.003, 0.004, 0, -6.9, -0.27, 0.27,
                 source="WGS84G1674", target="WGS84G1762"),
        _catalog(-0.006, 0.005, 0, 0.020, -4.5, 0, 0,
                 source="WGS84G1150", target="WGS84G1762"),
        _catalog(565, 49.9, 465.8, 4.08, -0.409, 0.36, -1.869, source="RD", location="Netherlands"),
        _catalog(-116, -50.47, 141.69, 0.0983, 0.23, 0.39, 0.344, source="AGD84", location="Australia"),
        _catalog(660.077, 13.551, 369.344, 5.66, -0.805, -0.578, -0.952, source="CH1903", location="Switzerland"),
        _catalog(582, 105, 414, 8.3, 1.04, 0.35, -3.08, source="DHDN", location="Germany"),
        _catalog(414.1, 41.3, 603.1, 0, -0.855, 2.141, -7.023, source="RT90", location="Sweden"),
        _catalog(-84.8, -208, -96.3, -0.023, 2.36, 1, 3.09, source="ED87", location="Finland"),
        _catalog(482.53, -130.596, 564.557, 8.15, -1.042, -0.214, -0.631, source="TM65", location="Ireland"),
        _catalog(-238.2, 85.2, 29.9, 2.03, 0.166, 0.046, 1.248, source="Datum73", location="Portugal"),
        _catalog(278.3, 93, 474.5, 6.21, 7.889, 0.05, -6.61, source="NGO1948", location="Norway"),
        _catalog(-99.1, 53.3, -112.5, -1, 0.419, -0.83, 1.885, source="BD72", location="Belgium"),
        _catalog(33.4, -146.6, -76.3, -0.84, -0.359, -0.053, 0.844, source="Pulkovo1942", location="Poland"),
        _catalog(59.47, -5.04, 187.44, -4.5993, 0.47, -0.1, 1.024, source="NZGD49", location="New Zealand"),
    )
}


def get_parameters(name: str) -> TransParameters:
    """Look up a catalog parameter set by code (case-insensitive).

    >>> get_parameters("wgs72_wgs84").tz
    4.5
    """
    for code, parameters in TRANSFORMATION_PARAMETERS.items():
        if code.lower() == name.lower():
            return parameters
    raise InvalidInputError(
        f"Unknown transformation parameters '{name}'. "
        f"Available: {', '.join(TRANSFORMATION_PARAMETERS)}"
    )


# =========================================================================
# Affine transforms
# =========================================================================

class AffineTransform:
    """Affine transform held as a homogeneous matrix.

    A transform from M to N dimensions has a (N+1)×(M+1) matrix whose last
    column is the translation and whose last row is (0, ..., 0, 1).

    Parameters
    ----------
    matrix : array_like
        Homogeneous transform matrix, at least 2×2.

    Examples
    --------
    >>> t = AffineTransform.rotation_2d(90.0, tx=1.0)
    >>> [round(v, 9) for v in t.transform(1.0, 0.0)]
    [1.0, 1.0]
    """

    def __init__(self, matrix: Union[Sequence[Sequence[float]], NDArray[np.float64]]):
        matrix = np.array(matrix, dtype=np.float64)
        if matrix.ndim != 2:
            raise InvalidInputError("Transformation matrix must be two-dimensional")
        if matrix.shape[0] < 2:
            raise InvalidInputError("Transformation matrix must have at least 2 rows")
        if matrix.shape[1] < 2:
            raise InvalidInputError("Transformation matrix must have at least 2 columns")
        self._matrix = matrix

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def scaling(cls, *scale: float) -> 'AffineTransform':
        """Per-axis scaling."""
        if not scale:
            raise InvalidInputError("At least one scale factor is required")
        matrix = np.eye(len(scale) + 1)
        matrix[:-1, :-1] = np.diag(scale)
        return cls(matrix)

    @classmethod
    def rotation_2d(cls, theta: AngleLike, tx: float = 0.0, ty: float = 0.0) -> 'AffineTransform':
        """Planar rotation (counter-clockwise positive) followed by a shift."""
        t = _radians(theta)
        c, s = math.cos(t), math.sin(t)
        return cls([[c, -s, tx], [s, c, ty], [0.0, 0.0, 1.0]])

    @classmethod
    def similarity_2d(
        cls,
        theta: AngleLike,
        scale: float,
        tx: float = 0.0,
        ty: float = 0.0
    ) -> 'AffineTransform':
        """Four-parameter planar similarity: shift, rotation and scale."""
        t = _radians(theta)
        c, s = scale * math.cos(t), scale * math.sin(t)
        return cls([[c, -s, tx], [s, c, ty], [0.0, 0.0, 1.0]])

    @classmethod
    def axis_rotation(cls, angle: AngleLike, fixed_axis: int) -> 'AffineTransform':
        """Rotation about one coordinate axis (1 = X, 2 = Y, 3 = Z)."""
        t = _radians(angle)
        c, s = math.cos(t), math.sin(t)
        if fixed_axis == 1:
            rotation = [[1, 0, 0], [0, c, -s], [0, s, c]]
        elif fixed_axis == 2:
            rotation = [[c, 0, s], [0, 1, 0], [-s, 0, c]]
        elif fixed_axis == 3:
            rotation = [[c, -s, 0], [s, c, 0], [0, 0, 1]]
        else:
            raise InvalidInputError(f"Fixed axis must be 1, 2 or 3, got {fixed_axis}")
        matrix = np.eye(4)
        matrix[:3, :3] = rotation
        return cls(matrix)

    @classmethod
    def rotation_3d(
        cls,
        rx: AngleLike,
        ry: AngleLike,
        rz: AngleLike,
        tx: float = 0.0,
        ty: float = 0.0,
        tz: float = 0.0
    ) -> 'AffineTransform':
        """Exact rotation R = Rz·Ry·Rx (counter-clockwise positive) and shift."""
        sx, cx = math.sin(_radians(rx)), math.cos(_radians(rx))
        sy, cy = math.sin(_radians(ry)), math.cos(_radians(ry))
        sz, cz = math.sin(_radians(rz)), math.cos(_radians(rz))
        return cls([
            [cy * cz, -cx * sz + sx * sy * cz, sx * sz + cx * sy * cz, tx],
            [cy * sz, cx * cz + sx * sy * sz, -sx * cz + cx * sy * sz, ty],
            [-sy, sx * cy, cx * cy, tz],
            [0.0, 0.0, 0.0, 1.0],
        ])

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def source_dimension(self) -> int:
        return self._matrix.shape[1] - 1

    @property
    def target_dimension(self) -> int:
        return self._matrix.shape[0] - 1

    @property
    def matrix(self) -> NDArray[np.float64]:
        return self._matrix.copy()

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def transform(self, *coords: float) -> Tuple[float, ...]:
        """Transform one point; missing trailing ordinates are taken as 0."""
        if len(coords) > self.source_dimension:
            raise InvalidInputError(
                f"Point has {len(coords)} ordinates, transform accepts {self.source_dimension}"
            )
        source = np.zeros(self.source_dimension + 1)
        source[:len(coords)] = coords
        source[-1] = 1.0
        target = self._matrix @ source
        return tuple(float(v) for v in target[:-1])

    def transform_xyz(self, x: float, y: float, z: float) -> XYZ:
        if self.source_dimension != 3 or self.target_dimension != 3:
            raise InvalidInputError("Transform matrix is not three-dimensional")
        X, Y, Z = self.transform(x, y, z)
        return X, Y, Z

    def transform_coord(self, coord: CartesianCoord) -> CartesianCoord:
        """Transform a Cartesian coordinate, keeping its type and unit."""
        values = self.transform(*coord.values)
        if isinstance(coord, SpaceRectangularCoord) and len(values) == 3:
            return SpaceRectangularCoord(*values, unit=coord.unit)
        return CartesianCoord(*values, unit=coord.unit)

    def transform_many(self, coords: Sequence[CartesianCoord]) -> List[CartesianCoord]:
        return [self.transform_coord(c) for c in coords]

    def transform_array(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Transform an (n, source_dimension) array of points."""
        points = np.atleast_2d(np.asarray(points, dtype=np.float64))
        if points.shape[1] != self.source_dimension:
            raise InvalidInputError(
                f"Points have {points.shape[1]} columns, transform accepts {self.source_dimension}"
            )
        return points @ self._matrix[:-1, :-1].T + self._matrix[:-1, -1]

    def inverse(self) -> 'AffineTransform':
        """The exact inverse transform."""
        return AffineTransform(self._inverse_matrix())

    def _inverse_matrix(self) -> NDArray[np.float64]:
        if self._matrix.shape[0] != self._matrix.shape[1]:
            raise InvalidInputError("Only square transforms can be inverted")
        try:
            return np.linalg.inv(self._matrix)
        except np.linalg.LinAlgError as exc:
            raise InvalidInputError("Transform matrix is singular") from exc

    def __matmul__(self, other: 'AffineTransform') -> 'AffineTransform':
        """Composition: ``(a @ b)`` applies ``b`` first."""
        return AffineTransform(self._matrix @ other._matrix)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._matrix.tolist()})"


class DatumTransform(AffineTransform):
    """Three-dimensional similarity transform between geocentric frames."""

    def __init__(self, matrix, parameters: Optional[TransParameters] = None):
        super().__init__(matrix)
        if self._matrix.shape != (4, 4):
            raise InvalidInputError("Datum transforms need a 4×4 matrix")
        self.parameters = parameters

    def invert(self) -> 'DatumTransform':
        """The exact inverse transform (target frame back to source)."""
        parameters = self.parameters.inverted() if self.parameters else None
        return DatumTransform(self._inverse_matrix(), parameters)

    def transform_geodetic(
        self,
        point: GeodeticCoord,
        from_ellipsoid: Ellipsoid,
        to_ellipsoid: Ellipsoid
    ) -> GeodeticCoord:
        """Transform a geodetic coordinate via geocentric X, Y, Z."""
        X, Y, Z = geodetic_to_ecef(
            point.latitude.radians, point.longitude.radians, point.height, from_ellipsoid
        )
        x, y, z = self.transform_xyz(X, Y, Z)
        lat, lon, h = ecef_to_geodetic(x, y, z, to_ellipsoid)
        return GeodeticCoord(Latitude.from_radians(lat), Longitude.from_radians(lon), h,
                             point.height_system)

    def transform_geodetic_many(
        self,
        points: Sequence[GeodeticCoord],
        from_ellipsoid: Ellipsoid,
        to_ellipsoid: Ellipsoid
    ) -> List[GeodeticCoord]:
        return [self.transform_geodetic(p, from_ellipsoid, to_ellipsoid) for p in points]


def _similarity_matrix(parameters: TransParameters, rotation: NDArray[np.float64]) -> NDArray[np.float64]:
    matrix = np.eye(4)
    matrix[:3, :3] = parameters.scale * rotation
    matrix[:3, 3] = parameters.translation
    return matrix


class Helmert(DatumTransform):
    """Seven-parameter Helmert transform, position-vector convention.

    X' = T + (1 + S·1e-6)·R·X, R = [[1, -Rz, Ry], [Rz, 1, -Rx], [-Ry, Rx, 1]]

    Examples
    --------
    >>> h = Helmert(TransParameters.from_values(1.0, 2.0, 3.0))
    >>> h.transform_xyz(0.0, 0.0, 0.0)
    (1.0, 2.0, 3.0)
    """

    def __init__(self, parameters: TransParameters):
        rx, ry, rz = parameters.rotation_radians
        rotation = np.array([
            [1.0, -rz, ry],
            [rz, 1.0, -rx],
            [-ry, rx, 1.0],
        ])
        super().__init__(_similarity_matrix(parameters, rotation), parameters)


class BursaWolf(DatumTransform):
    """Seven-parameter Bursa-Wolf transform, coordinate-frame convention.

    X' = T + (1 + S·1e-6)·R·X, R = [[1, Rz, -Ry], [-Rz, 1, Rx], [Ry, -Rx, 1]]
    """

    def __init__(self, parameters: TransParameters):
        rx, ry, rz = parameters.rotation_radians
        rotation = np.array([
            [1.0, rz, -ry],
            [-rz, 1.0, rx],
            [ry, -rx, 1.0],
        ])
        super().__init__(_similarity_matrix(parameters, rotation), parameters)


class MolodenskyBadekas(DatumTransform):
    """Ten-parameter transform rotating about the point (Px, Py, Pz).

    X' = P + T + (1 + S·1e-6)·R·(X - P), with R in the position-vector
    convention.
    """

    def __init__(self, parameters: TransParameters):
        rx, ry, rz = parameters.rotation_radians
        rotation = parameters.scale * np.array([
            [1.0, -rz, ry],
            [rz, 1.0, -rx],
            [-ry, rx, 1.0],
        ])
        p = parameters.rotation_point
        matrix = np.eye(4)
        matrix[:3, :3] = rotation
        matrix[:3, 3] = p + parameters.translation - rotation @ p
        super().__init__(matrix, parameters)


# =========================================================================
# Molodensky
# =========================================================================

def molodensky_shift(
    point: GeodeticCoord,
    ellipsoid: Ellipsoid,
    da: float,
    df: float,
    dx: float,
    dy: float,
    dz: float
) -> GeodeticCoord:
    """Standard Molodensky transformation.

    Parameters
    ----------
    point : GeodeticCoord
        Point on the source datum.
    ellipsoid : Ellipsoid
        Source ellipsoid.
    da, df : float
        Target minus source semi-major axis (m) and flattening.
    dx, dy, dz : float
        Geocentric shift of the origin in meters.

    Returns
    -------
    GeodeticCoord
        Point on the target datum.
    """
    B = point.latitude.radians
    L = point.longitude.radians
    H = point.height

    sin_b, cos_b = math.sin(B), math.cos(B)
    sin_l, cos_l = math.sin(L), math.cos(L)

    a = ellipsoid.a
    b_a = 1.0 - ellipsoid.f
    e2 = ellipsoid.e2
    w = 1.0 - e2 * sin_b * sin_b
    Rm = a * (1.0 - e2) / w ** 1.5
    Rn = a / math.sqrt(w)

    dB = (
        -dx * sin_b * cos_l - dy * sin_b * sin_l + dz * cos_b
        + da * Rn * e2 * sin_b * cos_b / a
        + df * (Rm / b_a + Rn * b_a) * sin_b * cos_b
    ) / (Rm + H)
    dL = (-dx * sin_l + dy * cos_l) / ((Rn + H) * cos_b)
    dH = (
        dx * cos_b * cos_l + dy * cos_b * sin_l + dz * sin_b
        - da * a / Rn + df * b_a * Rn * sin_b * sin_b
    )

    return GeodeticCoord(
        Latitude.from_radians(B + dB),
        Longitude.from_radians(L + dL),
        H + dH,
        point.height_system,
    )


def molodensky(
    point: GeodeticCoord,
    from_ellipsoid: Ellipsoid,
    to_ellipsoid: Ellipsoid,
    parameters: TransParameters
) -> GeodeticCoord:
    """Molodensky transformation using the translations of `parameters`."""
    return molodensky_shift(
        point,
        from_ellipsoid,
        to_ellipsoid.a - from_ellipsoid.a,
        to_ellipsoid.f - from_ellipsoid.f,
        parameters.tx,
        parameters.ty,
        parameters.tz,
    )


# =========================================================================
# Parameter estimation
# =========================================================================

def gauss_jordan_solve(
    matrix: NDArray[np.float64],
    rhs: NDArray[np.float64]
) -> NDArray[np.float64]:
    """Solve ``matrix @ x = rhs`` by Gauss-Jordan elimination.

    Partial pivoting; a pivot smaller than ``PIVOT_THRESHOLD`` times the
    largest matrix entry marks the system singular.

    Raises
    ------
    CannotResolveError
        If the system is singular or ill-conditioned.
    InvalidInputError
        If the shapes do not match.
    """
    a = np.array(matrix, dtype=np.float64)
    b = np.array(rhs, dtype=np.float64)
    n = a.shape[0]
    if a.ndim != 2 or a.shape != (n, n) or b.shape[0] != n:
        raise InvalidInputError(f"Cannot solve a {a.shape} system with {b.shape} right side")

    scale = np.max(np.abs(a)) if a.size else 0.0
    if scale == 0.0:
        raise CannotResolveError("Normal equations are all zero")

    augmented = np.column_stack([a, b])
    for col in range(n):
        pivot_row = col + int(np.argmax(np.abs(augmented[col:, col])))
        pivot = augmented[pivot_row, col]
        if abs(pivot) < PIVOT_THRESHOLD * scale:
            raise CannotResolveError(
                "Normal equations are singular",
                context={"column": col, "pivot": float(pivot)}
            )
        if pivot_row != col:
            augmented[[col, pivot_row]] = augmented[[pivot_row, col]]
        augmented[col] /= augmented[col, col]
        for row in range(n):
            if row != col and augmented[row, col] != 0.0:
                augmented[row] -= augmented[row, col] * augmented[col]

    return augmented[:, n:].reshape(b.shape)


def _as_xyz_array(points: Sequence[Union[CartesianCoord, Sequence[float]]], label: str) -> NDArray[np.float64]:
    rows = []
    for point in points:
        values = point.values if isinstance(point, CartesianCoord) else tuple(point)
        if len(values) != 3:
            raise InvalidInputError(f"The {label} points must be three-dimensional")
        rows.append(values)
    return np.array(rows, dtype=np.float64).reshape(-1, 3)


def _design_matrix(source: NDArray[np.float64], count: int) -> NDArray[np.float64]:
    """Linearized position-vector model, unknowns ordered as TransParameters."""
    n = source.shape[0]
    A = np.zeros((3 * n, min(count, 7)))
    X, Y, Z = source[:, 0], source[:, 1], source[:, 2]
    for axis in range(3):
        A[axis::3, axis] = 1.0
    if count >= 4:
        A[0::3, 3] = X * PPM
        A[1::3, 3] = Y * PPM
        A[2::3, 3] = Z * PPM
    if count >= 7:
        k = SECOND_TO_RADIAN
        # dX = Ry·Z - Rz·Y, dY = Rz·X - Rx·Z, dZ = Rx·Y - Ry·X
        A[0::3, 5] = Z * k
        A[0::3, 6] = -Y * k
        A[1::3, 4] = -Z * k
        A[1::3, 6] = X * k
        A[2::3, 4] = Y * k
        A[2::3, 5] = -X * k
    return A


def resolve_parameters(
    source: Sequence[Union[CartesianCoord, Sequence[float]]],
    target: Sequence[Union[CartesianCoord, Sequence[float]]],
    weights: Optional[NDArray[np.float64]] = None,
    count: int = 7
) -> TransParameters:
    """Estimate transformation parameters from common points by least squares.

    Parameters
    ----------
    source, target : sequence of SpaceRectangularCoord or (X, Y, Z)
        Common points in the source and target frames, in meters.
    weights : ndarray, optional
        Observation weights, a 3N×3N matrix or a length-3N vector
        (default: unit weights).
    count : int
        3 (translations), 4 (plus scale), 7 (plus rotations) or 10
        (Molodensky-Badekas about the centroid of the source points).

    Returns
    -------
    TransParameters
        Position-vector parameters from source to target.

    Raises
    ------
    InvalidInputError
        On mismatched point counts, too few points, unsupported `count` or
        a badly shaped weight array.
    CannotResolveError
        If the normal equations are singular.
    """
    if count not in (3, 4, 7, 10):
        raise InvalidInputError(f"Parameter count must be 3, 4, 7 or 10, got {count}")

    src = _as_xyz_array(source, "source")
    dst = _as_xyz_array(target, "target")
    n = src.shape[0]
    if n != dst.shape[0]:
        raise InvalidInputError(
            f"Point sets differ in size: {n} source, {dst.shape[0]} target"
        )
    unknowns = min(count, 7)
    if 3 * n < unknowns or n < math.ceil(unknowns / 3):
        raise InvalidInputError(
            f"At least {math.ceil(unknowns / 3)} points are needed for {count} parameters"
        )

    if weights is None:
        P = np.eye(3 * n)
    else:
        weights = np.asarray(weights, dtype=np.float64)
        if weights.shape == (3 * n,):
            P = np.diag(weights)
        elif weights.shape == (3 * n, 3 * n):
            P = weights
        else:
            raise InvalidInputError(
                f"Weights must be of shape ({3 * n},) or ({3 * n}, {3 * n}), got {weights.shape}"
            )

    centroid = src.mean(axis=0) if count == 10 else np.zeros(3)
    A = _design_matrix(src - centroid, count)
    l = (dst - src).reshape(-1)

    normal = A.T @ P @ A
    solution = gauss_jordan_solve(normal, A.T @ P @ l)

    residuals = A @ solution - l
    logger.debug(
        f"Resolved {count} parameters from {n} points, "
        f"RMS residual {float(np.sqrt(np.mean(residuals ** 2))):.4f} m"
    )

    values = list(solution)
    if count == 10:
        values.extend(centroid)
    return TransParameters.from_values(*values)
