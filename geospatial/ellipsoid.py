"""
Reference Ellipsoid Model.

This module defines the immutable :class:`Ellipsoid` together with the
closed-form quantities derived from it: eccentricities, radii of curvature,
meridian arc length, surface area, volume and equivalent sphere radii. When
the angular velocity and gravitational constant are known the ellipsoid
also acts as a normal (level) ellipsoid and yields normal gravity.

An ellipsoid is built once from one of its defining forms and never
mutated afterwards:

- ``Ellipsoid.from_axis_flattening(a, 1/f)``
- ``Ellipsoid.from_axes(a, b)``
- ``Ellipsoid.from_dynamic_form_factor(a, J2, ω, GM)`` (e.g. GRS80)
- ``Ellipsoid.from_c20(a, C20, ω, GM)``
- ``Ellipsoid.sphere(R)``

Scientific Context
------------------
Domain: Geometric and physical geodesy
Model: Oblate ellipsoid of revolution

References
----------
- Torge, W. (2001). Geodesy (3rd ed.). de Gruyter.
- Moritz, H. (2000). Geodetic Reference System 1980. J. Geodesy 74, 128-133.
- Heiskanen, W. & Moritz, H. (1967). Physical Geodesy. Freeman.
"""

from dataclasses import dataclass
import math
from typing import Dict, Optional, Union

import numpy as np
from numpy.typing import NDArray
from pyproj import CRS

from common.constants import EPSILON5, MAX_ITERATIONS, GeodeticConstants
from common.errors import ConvergenceError, InvalidInputError, MissingParameterError
from common.logging_config import ConvergenceLog, get_logger

logger = get_logger(__name__)

FloatOrArray = Union[float, NDArray[np.float64]]

# Seed and stopping rule of the J2 -> flattening fixed-point solve
J2_SEED_INVERSE_FLATTENING = 298.2572
J2_TOLERANCE = 1e-15
J2_MAX_ITERATIONS = 50


def _meridian_coefficients(e2: float):
    """Coefficients A..F of the meridian arc series, up to e¹⁰."""
    e4 = e2 * e2
    e6 = e4 * e2
    e8 = e6 * e2
    e10 = e8 * e2
    A = (1 + 3 * e2 / 4 + 45 * e4 / 64 + 175 * e6 / 256
         + 11025 * e8 / 16384 + 43659 * e10 / 65536)
    B = (3 * e2 / 4 + 15 * e4 / 16 + 525 * e6 / 512
         + 2205 * e8 / 2048 + 72765 * e10 / 65536)
    C = 15 * e4 / 64 + 105 * e6 / 256 + 2205 * e8 / 4096 + 10395 * e10 / 16384
    D = 35 * e6 / 512 + 315 * e8 / 2048 + 31185 * e10 / 131072
    E = 315 * e8 / 16384 + 3465 * e10 / 65536
    F = 693 * e10 / 131072
    return A, B, C, D, E, F


def _inverse_flattening_from_j2(a: float, j2: float, omega: float, gm: float) -> float:
    """Solve the flattening implied by a dynamic form factor.

    Iterates e² = 3·J2 + (4/15)(ω²a³/GM)·e³/(2q0) starting from
    1/f = 298.2572. After ``J2_MAX_ITERATIONS`` rounds the last value is
    kept; this case is logged and recorded in the convergence log.
    """
    m = 4 * (omega * a) ** 2 * a / gm / 15
    ivf = J2_SEED_INVERSE_FLATTENING
    e2 = (2 * ivf - 1) / ivf / ivf
    previous = e2 + 1
    iterations = 0

    while abs(e2 - previous) > J2_TOLERANCE:
        if iterations >= J2_MAX_ITERATIONS:
            logger.warning(
                f"J2 flattening solve stopped after {iterations} iterations "
                f"(J2={j2}, residual={abs(e2 - previous):.3e}); keeping last value"
            )
            ConvergenceLog().record(
                "ellipsoid.j2",
                iterations=iterations,
                residual=abs(e2 - previous),
                converged=False,
                context={"a": a, "J2": j2}
            )
            break
        previous = e2
        ep2 = previous / (1 - previous)
        ep = math.sqrt(ep2)
        q0 = (1 + 3 / ep2) * math.atan(ep) - 3 / ep
        e2 = 3 * j2 + m * previous ** 1.5 / q0
        iterations += 1

    return 1 / (1 - math.sqrt(1 - e2))


@dataclass(frozen=True)
class Ellipsoid:
    """An oblate ellipsoid of revolution.

    Attributes
    ----------
    a : float
        Semi-major axis in meters.
    ivf : float
        Inverse flattening 1/f (``math.inf`` for a sphere).
    name : str
        Identifier for the ellipsoid.
    epsg_code : int, optional
        EPSG ellipsoid code.
    omega : float, optional
        Angular velocity in rad/s (normal ellipsoids only).
    gm : float, optional
        Geocentric gravitational constant in m³/s² (normal ellipsoids only).

    Derived Parameters
    ------------------
    b : float
        Semi-minor axis (polar radius) in meters.
    e2 : float
        First eccentricity squared: e² = 2/ivf - 1/ivf²
    ep2 : float
        Second eccentricity squared: e'² = e² / (1 - e²)
    """
    a: float
    ivf: float
    name: str = ""
    epsg_code: Optional[int] = None
    omega: Optional[float] = None
    gm: Optional[float] = None

    def __post_init__(self):
        if not self.a > 0:
            raise InvalidInputError(f"Semi-major axis must be positive, got {self.a}")
        if not self.ivf > 1:
            raise InvalidInputError(f"Inverse flattening must exceed 1, got {self.ivf}")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_axis_flattening(
        cls,
        a: float,
        ivf: float,
        name: str = "",
        epsg_code: Optional[int] = None,
        omega: Optional[float] = None,
        gm: Optional[float] = None
    ) -> 'Ellipsoid':
        """Build from semi-major axis and inverse flattening."""
        return cls(a=a, ivf=ivf, name=name, epsg_code=epsg_code, omega=omega, gm=gm)

    @classmethod
    def from_axes(cls, a: float, b: float, name: str = "",
                  epsg_code: Optional[int] = None) -> 'Ellipsoid':
        """Build from both semi-axes; equal axes give a sphere."""
        if not 0 < b <= a:
            raise InvalidInputError(f"Semi-minor axis must be within (0, a], got {b}")
        ivf = math.inf if a == b else a / (a - b)
        return cls(a=a, ivf=ivf, name=name, epsg_code=epsg_code)

    @classmethod
    def from_dynamic_form_factor(
        cls,
        a: float,
        j2: float,
        omega: float,
        gm: float,
        name: str = "",
        epsg_code: Optional[int] = None
    ) -> 'Ellipsoid':
        """Build a normal ellipsoid from (a, J2, ω, GM).

        The flattening is found by fixed-point iteration (tolerance 1e-15
        on e², at most 50 rounds).
        """
        ivf = _inverse_flattening_from_j2(a, j2, omega, gm)
        return cls(a=a, ivf=ivf, name=name, epsg_code=epsg_code, omega=omega, gm=gm)

    @classmethod
    def from_c20(
        cls,
        a: float,
        c20: float,
        omega: float,
        gm: float,
        name: str = "",
        epsg_code: Optional[int] = None
    ) -> 'Ellipsoid':
        """Build a normal ellipsoid from the normalized coefficient C20 = -J2/√5."""
        return cls.from_dynamic_form_factor(a, -c20 * math.sqrt(5.0), omega, gm, name, epsg_code)

    @classmethod
    def sphere(cls, radius: float, name: str = "Sphere") -> 'Ellipsoid':
        """Build a sphere of the given radius."""
        return cls(a=radius, ivf=math.inf, name=name)

    # ------------------------------------------------------------------
    # Geometric constants
    # ------------------------------------------------------------------

    @property
    def is_sphere(self) -> bool:
        return math.isinf(self.ivf)

    @property
    def f(self) -> float:
        """Flattening."""
        return 1.0 / self.ivf

    @property
    def b(self) -> float:
        """Semi-minor axis in meters."""
        return self.a * (1.0 - self.f)

    @property
    def e2(self) -> float:
        """First eccentricity squared."""
        return 2.0 / self.ivf - 1.0 / self.ivf / self.ivf

    @property
    def ep2(self) -> float:
        """Second eccentricity squared."""
        return self.e2 / (1.0 - self.e2)

    @property
    def e(self) -> float:
        """First eccentricity."""
        return math.sqrt(self.e2)

    @property
    def ep(self) -> float:
        """Second eccentricity."""
        return math.sqrt(self.ep2)

    @property
    def c(self) -> float:
        """Polar radius of curvature a²/b."""
        return self.a * self.a / self.b

    @property
    def n(self) -> float:
        """Third flattening (a - b)/(a + b)."""
        return self.f / (2.0 - self.f)

    @property
    def second_flattening(self) -> float:
        """(a - b)/b."""
        return self.f / (1.0 - self.f)

    @property
    def rectifying_radius(self) -> float:
        """Radius of the sphere with the same meridian length, a(1 + n²/4)/(1 + n)."""
        n = self.n
        return self.a * (1 + n * n / 4) / (1 + n)

    @property
    def mean_radius(self) -> float:
        """Arithmetic mean radius (2a + b)/3."""
        return (2 * self.a + self.b) / 3

    @property
    def authalic_radius(self) -> float:
        """Radius of the sphere with the same surface area."""
        if self.is_sphere:
            return self.a
        e = self.e
        return math.sqrt(self.a ** 2 / 2 + self.b ** 2 / 2 * math.atanh(e) / e)

    @property
    def volumetric_radius(self) -> float:
        """Radius of the sphere with the same volume, (a²b)^(1/3)."""
        return (self.a * self.a * self.b) ** (1.0 / 3.0)

    @property
    def area(self) -> float:
        """Surface area in square meters."""
        if self.is_sphere:
            return 4 * math.pi * self.a ** 2
        e = self.e
        return 2 * math.pi * self.a ** 2 * (
            1 + (1 - self.e2) / (2 * e) * math.log((1 + e) / (1 - e))
        )

    @property
    def volume(self) -> float:
        """Volume in cubic meters."""
        return 4 * math.pi * self.a ** 2 * self.b / 3

    @property
    def quarter_meridian(self) -> float:
        """Meridian distance from the equator to a pole."""
        return float(self.meridian_arc_length(math.pi / 2))

    @property
    def proj4_string(self) -> str:
        """PROJ.4 ellipsoid definition."""
        if self.is_sphere:
            return f"+R={self.a!r}"
        return f"+a={self.a!r} +rf={self.ivf!r}"

    def to_crs(self) -> CRS:
        """Geographic CRS on this ellipsoid (longitude/latitude, degrees)."""
        return CRS.from_proj4(f"+proj=longlat {self.proj4_string} +no_defs")

    # ------------------------------------------------------------------
    # Latitude-dependent quantities (latitudes in radians)
    # ------------------------------------------------------------------

    def W(self, latitude_rad: FloatOrArray) -> FloatOrArray:
        """Auxiliary function √(1 - e² sin²φ)."""
        sin_lat = np.sin(latitude_rad)
        return np.sqrt(1 - self.e2 * sin_lat ** 2)

    def V(self, latitude_rad: FloatOrArray) -> FloatOrArray:
        """Auxiliary function √(1 + e'² cos²φ)."""
        cos_lat = np.cos(latitude_rad)
        return np.sqrt(1 + self.ep2 * cos_lat ** 2)

    def prime_vertical_radius(self, latitude_rad: FloatOrArray) -> FloatOrArray:
        """Radius of curvature in the prime vertical.

        Notes
        -----
        N = a / (1 - e² sin²φ)^(1/2)

        At the equator (φ=0): N = a
        """
        return self.a / self.W(latitude_rad)

    def meridian_radius(self, latitude_rad: FloatOrArray) -> FloatOrArray:
        """Radius of curvature in the meridian.

        Notes
        -----
        M = a(1 - e²) / (1 - e² sin²φ)^(3/2)
        """
        return self.a * (1 - self.e2) / self.W(latitude_rad) ** 3

    def mean_curvature_radius(self, latitude_rad: FloatOrArray) -> FloatOrArray:
        """Gaussian mean radius √(MN) = c / V²."""
        return self.c / self.V(latitude_rad) ** 2

    def curvature_radius(self, latitude_rad: FloatOrArray, azimuth_rad: FloatOrArray) -> FloatOrArray:
        """Radius of curvature of the normal section at `azimuth` (Euler).

        Notes
        -----
        R_A = M·N / (N cos²A + M sin²A)
        """
        M = self.meridian_radius(latitude_rad)
        N = self.prime_vertical_radius(latitude_rad)
        return M * N / (N * np.cos(azimuth_rad) ** 2 + M * np.sin(azimuth_rad) ** 2)

    def parallel_radius(self, latitude_rad: FloatOrArray) -> FloatOrArray:
        """Radius of the parallel circle N·cosφ."""
        return self.prime_vertical_radius(latitude_rad) * np.cos(latitude_rad)

    def meridian_arc_length(self, latitude_rad: FloatOrArray) -> FloatOrArray:
        """Meridian distance from the equator to `latitude`, series to e¹⁰.

        Notes
        -----
        X = a(1-e²)(Aφ - B/2 sin2φ + C/4 sin4φ - D/6 sin6φ + E/8 sin8φ - F/10 sin10φ)
        """
        A, B, C, D, E, F = _meridian_coefficients(self.e2)
        phi = latitude_rad
        return self.a * (1 - self.e2) * (
            A * phi
            - B * np.sin(2 * phi) / 2
            + C * np.sin(4 * phi) / 4
            - D * np.sin(6 * phi) / 6
            + E * np.sin(8 * phi) / 8
            - F * np.sin(10 * phi) / 10
        )

    def latitude_from_meridian_arc(self, arc_length: float, tolerance: float = EPSILON5) -> float:
        """Latitude (radians) whose meridian distance is `arc_length`.

        Fixed-point iteration on the series of :meth:`meridian_arc_length`.

        Raises
        ------
        ConvergenceError
            If the iteration has not settled after ``MAX_ITERATIONS`` rounds.
        """
        A, B, C, D, E, F = _meridian_coefficients(self.e2)
        reduced = arc_length / (self.a * (1 - self.e2))
        phi = reduced / A

        for iteration in range(1, MAX_ITERATIONS + 1):
            updated = (
                reduced
                + B * math.sin(2 * phi) / 2
                - C * math.sin(4 * phi) / 4
                + D * math.sin(6 * phi) / 6
                - E * math.sin(8 * phi) / 8
                + F * math.sin(10 * phi) / 10
            ) / A
            if abs(updated - phi) < tolerance:
                return updated
            phi = updated

        raise ConvergenceError(
            f"Latitude from meridian arc {arc_length} m did not converge",
            iterations=MAX_ITERATIONS
        )

    # ------------------------------------------------------------------
    # Normal ellipsoid
    # ------------------------------------------------------------------

    def _require_normal(self):
        if self.omega is None:
            raise MissingParameterError("omega")
        if self.gm is None:
            raise MissingParameterError("gm")

    def _q0_terms(self):
        ep = self.ep
        ep2 = self.ep2
        q0 = 0.5 * ((1 + 3 / ep2) * math.atan(ep) - 3 / ep)
        q0p = 3 * (1 + 1 / ep2) * (1 - math.atan(ep) / ep) - 1
        return q0, q0p

    @property
    def m(self) -> float:
        """Geodetic parameter m = ω²a²b / GM."""
        self._require_normal()
        return self.omega ** 2 * self.a ** 2 * self.b / self.gm

    @property
    def j2(self) -> float:
        """Dynamic form factor implied by (a, f, ω, GM)."""
        self._require_normal()
        q0, _ = self._q0_terms()
        return self.e2 / 3 * (1 - 2 * self.m * self.ep / (15 * q0))

    @property
    def c20(self) -> float:
        """Fully normalized zonal coefficient C20 = -J2/√5."""
        return -self.j2 / math.sqrt(5.0)

    @property
    def equatorial_gravity(self) -> float:
        """Normal gravity at the equator in m/s²."""
        self._require_normal()
        q0, q0p = self._q0_terms()
        m = self.m
        return self.gm / (self.a * self.b) * (1 - m - m * self.ep * q0p / (6 * q0))

    @property
    def polar_gravity(self) -> float:
        """Normal gravity at the poles in m/s²."""
        self._require_normal()
        q0, q0p = self._q0_terms()
        m = self.m
        return self.gm / self.a ** 2 * (1 + m * self.ep * q0p / (3 * q0))

    def surface_gravity(self, latitude_rad: FloatOrArray) -> FloatOrArray:
        """Normal gravity on the ellipsoid (Somigliana's closed formula).

        Notes
        -----
        γ = (a γe cos²φ + b γp sin²φ) / √(a² cos²φ + b² sin²φ)
        """
        ge = self.equatorial_gravity
        gp = self.polar_gravity
        cos2 = np.cos(latitude_rad) ** 2
        sin2 = np.sin(latitude_rad) ** 2
        return (self.a * ge * cos2 + self.b * gp * sin2) / np.sqrt(
            self.a ** 2 * cos2 + self.b ** 2 * sin2
        )

    def normal_gravity(self, latitude_rad: FloatOrArray, height: FloatOrArray) -> FloatOrArray:
        """Normal gravity at `height` meters above the ellipsoid (free-air gradient)."""
        gradient = GeodeticConstants.FREE_AIR_GRADIENT.value
        return self.surface_gravity(latitude_rad) - gradient * np.asarray(height)

    def __str__(self) -> str:
        return self.name or f"Ellipsoid(a={self.a}, 1/f={self.ivf})"


# =========================================================================
# Named ellipsoids
# =========================================================================

WGS84 = Ellipsoid.from_axis_flattening(
    GeodeticConstants.WGS84_SEMI_MAJOR_AXIS.value,
    GeodeticConstants.WGS84_INVERSE_FLATTENING.value,
    name="WGS84",
    epsg_code=7030,
    omega=GeodeticConstants.WGS84_ANGULAR_VELOCITY.value,
    gm=GeodeticConstants.WGS84_GM.value
)

GRS80 = Ellipsoid.from_dynamic_form_factor(
    GeodeticConstants.GRS80_SEMI_MAJOR_AXIS.value,
    GeodeticConstants.GRS80_J2.value,
    GeodeticConstants.GRS80_ANGULAR_VELOCITY.value,
    GeodeticConstants.GRS80_GM.value,
    name="GRS80",
    epsg_code=7019
)

CGCS2000 = Ellipsoid.from_axis_flattening(
    GeodeticConstants.CGCS2000_SEMI_MAJOR_AXIS.value,
    GeodeticConstants.CGCS2000_INVERSE_FLATTENING.value,
    name="CGCS2000",
    epsg_code=1024,
    omega=GeodeticConstants.WGS84_ANGULAR_VELOCITY.value,
    gm=GeodeticConstants.WGS84_GM.value
)

WGS72 = Ellipsoid.from_axis_flattening(
    6378135.0, 298.26, name="WGS72", epsg_code=7043,
    omega=GeodeticConstants.WGS72_ANGULAR_VELOCITY.value,
    gm=GeodeticConstants.WGS72_GM.value
)

PZ90 = Ellipsoid.from_axis_flattening(
    6378136.0, 298.257839303, name="PZ90", epsg_code=7054,
    omega=GeodeticConstants.WGS84_ANGULAR_VELOCITY.value,
    gm=GeodeticConstants.PZ90_GM.value
)

KRASSOVSKY1940 = Ellipsoid.from_axis_flattening(6378245.0, 298.3, name="Krassovsky1940", epsg_code=7024)
INTERNATIONAL1924 = Ellipsoid.from_axis_flattening(6378388.0, 297.0, name="International1924", epsg_code=7022)
BESSEL1841 = Ellipsoid.from_axis_flattening(6377397.155, 299.1528128, name="Bessel1841", epsg_code=7004)
AIRY1830 = Ellipsoid.from_axis_flattening(6377563.396, 299.3249646, name="Airy1830", epsg_code=7001)
CLARKE1866 = Ellipsoid.from_axes(6378206.4, 6356583.8, name="Clarke1866", epsg_code=7008)
CLARKE1880 = Ellipsoid.from_axis_flattening(6378249.145, 293.465, name="Clarke1880", epsg_code=7012)
GRS67 = Ellipsoid.from_axis_flattening(6378160.0, 298.247167427, name="GRS67", epsg_code=7036)
WGS66 = Ellipsoid.from_axis_flattening(6378145.0, 298.25, name="WGS66")
SPHERE = Ellipsoid.sphere(6371000.0)

ELLIPSOIDS: Dict[str, Ellipsoid] = {
    e.name.lower(): e
    for e in (
        WGS84, GRS80, CGCS2000, WGS72, PZ90, KRASSOVSKY1940, INTERNATIONAL1924,
        BESSEL1841, AIRY1830, CLARKE1866, CLARKE1880, GRS67, WGS66, SPHERE,
    )
}


def get_ellipsoid(name: str) -> Ellipsoid:
    """Look up a named ellipsoid (case-insensitive).

    Raises
    ------
    InvalidInputError
        If no ellipsoid has that name.
    """
    try:
        return ELLIPSOIDS[name.lower()]
    except KeyError:
        raise InvalidInputError(
            f"Unknown ellipsoid '{name}'. Known: {sorted(e.name for e in ELLIPSOIDS.values())}"
        ) from None
