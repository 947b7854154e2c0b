"""
Map Projection Framework with Distortion Tracking.

Every projection implements the same two-way contract:

- ``forward(lat, lon) -> (northing, easting)``: geodetic to plane
- ``reverse(northing, easting) -> (Latitude, Longitude)``: plane to geodetic

Projections are configured once from a :class:`ProjectionParameters` value
and are immutable afterwards. Required parameters are checked at
construction time and reported with :class:`MissingParameterError`.

Latitudes and longitudes may be given as :class:`Angle` values or as
plain floats in decimal degrees.

Tissot's indicatrix quantifies the local distortion of any projection by
numerically differentiating its forward transform.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
- Tissot, A. (1859). Mémoire sur la représentation des surfaces.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, replace
from enum import Enum
import math
from typing import Dict, Iterable, List, Optional, Tuple, Union

import numpy as np
from pyproj import CRS

from common.errors import InvalidInputError, MissingParameterError
from common.logging_config import get_logger
from geospatial.angles import Angle, Latitude, Longitude, wrap_longitude_difference
from geospatial.coordinates import GeodeticCoord, GeographicCoord, ProjectedCoord
from geospatial.ellipsoid import Ellipsoid
from geospatial.settings import default_ellipsoid

logger = get_logger(__name__)

AngleLike = Union[Angle, float]


class ProjectionParameter(Enum):
    """Names of the projection parameters."""
    SEMI_MAJOR = "semi_major"
    INVERSE_FLATTENING = "inverse_flattening"
    FALSE_EASTING = "false_easting"
    FALSE_NORTHING = "false_northing"
    CENTRAL_MERIDIAN = "central_meridian"
    LATITUDE_OF_ORIGIN = "latitude_of_origin"
    STANDARD_PARALLEL_1 = "standard_parallel_1"
    STANDARD_PARALLEL_2 = "standard_parallel_2"
    SCALE_FACTOR = "scale_factor"
    TRUE_SCALE_LATITUDE = "true_scale_latitude"
    AZIMUTH = "azimuth"
    RECTIFIED_GRID_ANGLE = "rectified_grid_angle"
    ZONE_WIDTH = "zone_width"


class ProjectionSurface(Enum):
    AZIMUTHAL = "azimuthal"
    CONICAL = "conical"
    CYLINDRICAL = "cylindrical"
    HYBRID = "hybrid"
    MISCELLANEOUS = "miscellaneous"
    POLYCONICAL = "polyconical"
    PSEUDO_AZIMUTHAL = "pseudo_azimuthal"
    PSEUDO_CONICAL = "pseudo_conical"
    PSEUDO_CYLINDRICAL = "pseudo_cylindrical"
    RETRO_AZIMUTHAL = "retro_azimuthal"


class ProjectionProperty(Enum):
    APHYLACTIC = "aphylactic"
    CONFORMAL = "conformal"
    EQUAL_AREA = "equal_area"
    EQUIDISTANT = "equidistant"
    GNOMONIC = "gnomonic"


class ProjectionOrientation(Enum):
    OBLIQUE = "oblique"
    SECANT = "secant"
    TANGENT = "tangent"
    TRANSVERSE = "transverse"


@dataclass(frozen=True)
class ProjectionParameters:
    """Parameter set of a projection.

    Angles are in decimal degrees, lengths in meters. Unset parameters are
    ``None``. An ``inverse_flattening`` that is not positive (or infinite)
    denotes a sphere of radius ``semi_major``.
    """
    semi_major: Optional[float] = None
    inverse_flattening: Optional[float] = None
    false_easting: Optional[float] = None
    false_northing: Optional[float] = None
    central_meridian: Optional[float] = None
    latitude_of_origin: Optional[float] = None
    standard_parallel_1: Optional[float] = None
    standard_parallel_2: Optional[float] = None
    scale_factor: Optional[float] = None
    true_scale_latitude: Optional[float] = None
    azimuth: Optional[float] = None
    rectified_grid_angle: Optional[float] = None
    zone_width: Optional[float] = None

    @classmethod
    def from_ellipsoid(cls, ellipsoid: Ellipsoid, **values) -> 'ProjectionParameters':
        """Parameters on `ellipsoid` plus the given named values."""
        return cls(semi_major=ellipsoid.a, inverse_flattening=ellipsoid.ivf, **values)

    def with_defaults(self, **defaults) -> 'ProjectionParameters':
        """Fill the unset parameters named in `defaults`."""
        missing = {k: v for k, v in defaults.items() if getattr(self, k) is None}
        return replace(self, **missing) if missing else self

    def as_dict(self) -> Dict[ProjectionParameter, float]:
        """Mapping of the set parameters."""
        return {
            ProjectionParameter(name): value
            for name, value in asdict(self).items()
            if value is not None
        }


class MapProjection(ABC):
    """Abstract base class for map projections.

    Parameters
    ----------
    parameters : ProjectionParameters, optional
        Projection parameters. Unset axes are taken from `ellipsoid`.
    ellipsoid : Ellipsoid, optional
        Ellipsoid supplying the axes when the parameters leave them unset
        (default: process-wide default ellipsoid).

    Raises
    ------
    MissingParameterError
        If a required parameter is absent.
    """

    name: str = "Map projection"
    surface: ProjectionSurface = ProjectionSurface.MISCELLANEOUS
    projection_property: ProjectionProperty = ProjectionProperty.APHYLACTIC
    orientation: ProjectionOrientation = ProjectionOrientation.TANGENT

    # Parameters without which the projection cannot be built
    required: Tuple[ProjectionParameter, ...] = ()
    # Values filled in when a parameter is absent
    defaults: Dict[str, float] = {}

    def __init__(
        self,
        parameters: Optional[ProjectionParameters] = None,
        ellipsoid: Optional[Ellipsoid] = None
    ):
        parameters = parameters or ProjectionParameters()
        if parameters.semi_major is None or parameters.inverse_flattening is None:
            source = ellipsoid or default_ellipsoid()
            parameters = parameters.with_defaults(
                semi_major=source.a, inverse_flattening=source.ivf
            )

        self._check(parameters, self.required)
        self._parameters = parameters.with_defaults(**self.defaults)
        self._ellipsoid = self._build_ellipsoid(self._parameters)

    @staticmethod
    def _check(parameters: ProjectionParameters, names: Iterable[ProjectionParameter]):
        for name in names:
            if getattr(parameters, name.value) is None:
                raise MissingParameterError(name.value)

    @staticmethod
    def _build_ellipsoid(parameters: ProjectionParameters) -> Ellipsoid:
        ivf = parameters.inverse_flattening
        if ivf <= 0 or math.isinf(ivf):
            return Ellipsoid.sphere(parameters.semi_major)
        return Ellipsoid.from_axis_flattening(parameters.semi_major, ivf)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    @property
    def parameters(self) -> ProjectionParameters:
        return self._parameters

    @property
    def ellipsoid(self) -> Ellipsoid:
        """Ellipsoid built from the semi-major axis and inverse flattening."""
        return self._ellipsoid

    def get_parameter(self, parameter: ProjectionParameter) -> float:
        """Value of `parameter`, NaN when it is not set."""
        value = getattr(self._parameters, parameter.value)
        return math.nan if value is None else value

    @property
    def semi_major(self) -> float:
        return self._parameters.semi_major

    @property
    def inverse_flattening(self) -> float:
        return self._parameters.inverse_flattening

    @property
    def es(self) -> float:
        """Squared eccentricity (0 for a sphere)."""
        return self._ellipsoid.e2

    @property
    def e(self) -> float:
        return self._ellipsoid.e

    @property
    def central_meridian(self) -> Optional[Longitude]:
        value = self._parameters.central_meridian
        return None if value is None else Longitude(value)

    @property
    def latitude_of_origin(self) -> Optional[Latitude]:
        """Origin latitude, falling back to the true-scale latitude."""
        value = self._parameters.latitude_of_origin
        if value is None:
            value = self._parameters.true_scale_latitude
        return None if value is None else Latitude(value)

    @property
    def standard_parallel_1(self) -> Optional[Latitude]:
        value = self._parameters.standard_parallel_1
        return None if value is None else Latitude(value)

    @property
    def standard_parallel_2(self) -> Optional[Latitude]:
        value = self._parameters.standard_parallel_2
        return None if value is None else Latitude(value)

    @property
    def false_easting(self) -> float:
        return self.get_parameter(ProjectionParameter.FALSE_EASTING)

    @property
    def false_northing(self) -> float:
        return self.get_parameter(ProjectionParameter.FALSE_NORTHING)

    @property
    def scale_factor(self) -> float:
        return self.get_parameter(ProjectionParameter.SCALE_FACTOR)

    @property
    def zone_width(self) -> float:
        return self.get_parameter(ProjectionParameter.ZONE_WIDTH)

    # ------------------------------------------------------------------
    # Shared series
    # ------------------------------------------------------------------

    def meridional_distance(self, latitude_rad: float) -> float:
        """Meridian arc length from the equator, in meters."""
        return float(self._ellipsoid.meridian_arc_length(latitude_rad))

    def meridional_latitude(self, distance: float) -> float:
        """Latitude (radians) at meridian arc length `distance`."""
        return self._ellipsoid.latitude_from_meridian_arc(distance)

    # ------------------------------------------------------------------
    # Descriptors
    # ------------------------------------------------------------------

    @property
    def preserves_angles(self) -> bool:
        """Whether this is a conformal projection."""
        return self.projection_property is ProjectionProperty.CONFORMAL

    @property
    def preserves_area(self) -> bool:
        """Whether this is an equal-area projection."""
        return self.projection_property is ProjectionProperty.EQUAL_AREA

    @property
    @abstractmethod
    def proj4_string(self) -> str:
        """PROJ.4 definition string."""
        pass

    def to_crs(self) -> CRS:
        """The equivalent pyproj coordinate reference system."""
        return CRS.from_proj4(self.proj4_string)

    def _ellps_proj4(self) -> str:
        return f"{self._ellipsoid.proj4_string} +units=m +no_defs"

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    @abstractmethod
    def forward(self, latitude: AngleLike, longitude: AngleLike) -> Tuple[float, float]:
        """Transform geodetic coordinates to the plane.

        Parameters
        ----------
        latitude, longitude : Angle or float
            Geodetic coordinates (floats are decimal degrees).

        Returns
        -------
        Tuple[float, float]
            (northing, easting) in meters.
        """
        pass

    @abstractmethod
    def reverse(self, northing: float, easting: float) -> Tuple[Latitude, Longitude]:
        """Transform plane coordinates back to geodetic.

        Parameters
        ----------
        northing, easting : float
            Projected coordinates in meters.

        Returns
        -------
        Tuple[Latitude, Longitude]
        """
        pass

    def forward_coord(self, point: Union[GeographicCoord, GeodeticCoord]) -> ProjectedCoord:
        northing, easting = self.forward(point.latitude, point.longitude)
        return ProjectedCoord(northing, easting, unit="meter")

    def reverse_coord(self, point: ProjectedCoord) -> GeographicCoord:
        northing, easting = point.in_unit("meter")
        lat, lon = self.reverse(northing, easting)
        return GeographicCoord(lat, lon)

    def forward_many(self, points: Iterable[Union[GeographicCoord, GeodeticCoord]]) -> List[ProjectedCoord]:
        return [self.forward_coord(p) for p in points]

    def reverse_many(self, points: Iterable[ProjectedCoord]) -> List[GeographicCoord]:
        return [self.reverse_coord(p) for p in points]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._parameters})"


def as_latitude(value: AngleLike) -> Latitude:
    """Coerce an angle or a float in degrees into a latitude."""
    if isinstance(value, Latitude):
        return value
    return Latitude(value.degrees if isinstance(value, Angle) else float(value))


def as_longitude(value: AngleLike) -> Longitude:
    """Coerce an angle or a float in degrees into a longitude."""
    if isinstance(value, Longitude):
        return value
    return Longitude(value.degrees if isinstance(value, Angle) else float(value))


def longitude_offset(longitude: Longitude, central_meridian: Longitude) -> float:
    """Signed longitude difference in radians, wrapped to (-π, π]."""
    return wrap_longitude_difference(longitude, central_meridian).radians


def latitude_from_conformal(chi: float, es: float) -> float:
    """Geodetic latitude from conformal latitude `chi` (Snyder 3-5, series to e⁸)."""
    e4 = es * es
    e6 = e4 * es
    e8 = e4 * e4
    return (
        chi
        + (es / 2 + 5 * e4 / 24 + e6 / 12 + 13 * e8 / 360) * math.sin(2 * chi)
        + (7 * e4 / 48 + 29 * e6 / 240 + 811 * e8 / 11520) * math.sin(4 * chi)
        + (7 * e6 / 120 + 81 * e8 / 1120) * math.sin(6 * chi)
        + (4279 * e8 / 161280) * math.sin(8 * chi)
    )


def check_hemisphere(hemisphere: str) -> str:
    """Validate an 'N'/'S' hemisphere flag (case-insensitive)."""
    flag = hemisphere.upper() if isinstance(hemisphere, str) else ""
    if flag not in ("N", "S"):
        raise InvalidInputError(f"Hemisphere must be 'N' or 'S', got {hemisphere!r}")
    return flag


# =========================================================================
# Distortion analysis
# =========================================================================

@dataclass
class TissotIndicatrix:
    """Tissot's indicatrix describing local distortion at a point.

    The Tissot indicatrix shows how an infinitesimally small circle
    on the Earth's surface is distorted into an ellipse on the map.

    Attributes
    ----------
    semi_major : float
        Semi-major axis of the distortion ellipse (scale factor).
    semi_minor : float
        Semi-minor axis of the distortion ellipse (scale factor).
    orientation_rad : float
        Orientation of the major axis in radians.
    area_scale : float
        Area distortion factor.
    angular_distortion_rad : float
        Maximum angular distortion in radians.

    Notes
    -----
    - For a conformal projection: semi_major = semi_minor (circle, no angular distortion)
    - For an equal-area projection: area_scale = 1.0 (but shapes are distorted)
    """
    semi_major: float
    semi_minor: float
    orientation_rad: float
    area_scale: float
    angular_distortion_rad: float

    @property
    def is_conformal(self) -> bool:
        """Check if projection is locally conformal."""
        return bool(np.abs(self.semi_major - self.semi_minor) < 1e-6)

    @property
    def is_equal_area(self) -> bool:
        """Check if projection is locally equal-area."""
        return bool(np.abs(self.area_scale - 1.0) < 1e-6)


def compute_tissot_indicatrix(
    projection: MapProjection,
    lat_rad: float,
    lon_rad: float,
    delta: float = 1e-7
) -> TissotIndicatrix:
    """Compute Tissot's indicatrix numerically.

    Works for any projection by central differences of its forward
    transform.

    Parameters
    ----------
    projection : MapProjection
        The projection to analyze.
    lat_rad, lon_rad : float
        Location in geodetic coordinates (radians).
    delta : float
        Small angular offset for numerical differentiation.

    Returns
    -------
    TissotIndicatrix
        Local distortion characteristics.
    """
    def project(lat: float, lon: float) -> Tuple[float, float]:
        northing, easting = projection.forward(
            Latitude.from_radians(lat), Longitude.from_radians(lon)
        )
        return easting, northing

    # ∂x/∂λ, ∂y/∂λ (east-west)
    x_e, y_e = project(lat_rad, lon_rad + delta)
    x_w, y_w = project(lat_rad, lon_rad - delta)
    dxdl = (x_e - x_w) / (2 * delta)
    dydl = (y_e - y_w) / (2 * delta)

    # ∂x/∂φ, ∂y/∂φ (north-south)
    x_n, y_n = project(lat_rad + delta, lon_rad)
    x_s, y_s = project(lat_rad - delta, lon_rad)
    dxdp = (x_n - x_s) / (2 * delta)
    dydp = (y_n - y_s) / (2 * delta)

    ellipsoid = projection.ellipsoid
    M = ellipsoid.meridian_radius(lat_rad)
    N = ellipsoid.prime_vertical_radius(lat_rad)
    cos_lat = np.cos(lat_rad)

    # Scale along meridian (h) and parallel (k)
    h = np.sqrt(dxdp**2 + dydp**2) / M
    k = np.sqrt(dxdl**2 + dydl**2) / (N * cos_lat)

    # sin θ' between the projected meridian and parallel
    sin_theta = np.clip(np.abs(dxdp * dydl - dydp * dxdl) / (h * M * k * N * cos_lat), -1, 1)
    area_scale = h * k * sin_theta

    # Principal scales from h, k and the intersection angle
    a_plus_b = np.sqrt(h**2 + k**2 + 2 * h * k * sin_theta)
    a_minus_b = np.sqrt(max(h**2 + k**2 - 2 * h * k * sin_theta, 0.0))
    semi_major = (a_plus_b + a_minus_b) / 2
    semi_minor = (a_plus_b - a_minus_b) / 2

    theta = 0.5 * np.arctan2(2 * (dxdp * dxdl + dydp * dydl),
                             dxdp**2 + dydp**2 - dxdl**2 - dydl**2)

    return TissotIndicatrix(
        semi_major=float(semi_major),
        semi_minor=float(semi_minor),
        orientation_rad=float(theta),
        area_scale=float(area_scale),
        angular_distortion_rad=float(2 * np.arcsin(np.clip(a_minus_b / a_plus_b, -1, 1)))
    )
