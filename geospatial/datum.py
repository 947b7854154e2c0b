"""
Geodetic and Vertical Datums.

A geodetic datum fixes an ellipsoid to the Earth. A geocentric datum puts the
ellipsoid's centre at the Earth's centre of mass at a reference epoch. A
local (classical) datum orients it at an origin point whose astronomic
position and azimuth were observed. Longitudes of a datum are counted from
its prime meridian, which is not always Greenwich.

A vertical datum names the surface that heights are referred to.

Types
-----
- :class:`PrimeMeridian` - zero meridian and its offset from Greenwich
- :class:`VerticalDeviation` - deflection of the vertical at a point
- :class:`GeodeticOrigin` - fundamental point of a local datum
- :class:`VerticalDatum` - reference surface for heights
- :class:`CoordinateDatum` - ellipsoid plus prime meridian
- :class:`GeocentricDatum` - earth-centred datum with a reference epoch
- :class:`LocalDatum` - datum oriented at a geodetic origin
"""

from dataclasses import dataclass, field
from enum import Enum
import math
from typing import Dict, Optional, TypeVar

from common.errors import InvalidInputError, MissingParameterError
from common.logging_config import get_logger
from geospatial.angles import Angle, Latitude, Longitude
from geospatial.coordinates import GeodeticCoord, HeightSystem, _as_angle
from geospatial.ellipsoid import (
    BESSEL1841,
    CGCS2000,
    CLARKE1866,
    CLARKE1880,
    GRS80,
    INTERNATIONAL1924,
    KRASSOVSKY1940,
    PZ90,
    WGS72,
    WGS84,
    Ellipsoid,
)
from geospatial.projections.base import AngleLike
from geospatial.time_systems import TimeSystem, UtcTime
from geospatial.transformations import TransParameters, get_parameters

logger = get_logger(__name__)

T = TypeVar("T")


def _lookup(catalog: Dict[str, T], name: str, kind: str) -> T:
    for key, value in catalog.items():
        if key.lower() == name.lower():
            return value
    raise InvalidInputError(f"Unknown {kind} '{name}'. Known: {sorted(catalog)}")


# =========================================================================
# Prime meridians
# =========================================================================

@dataclass(frozen=True)
class PrimeMeridian:
    """A zero meridian, given by its longitude east of Greenwich.

    Attributes
    ----------
    name : str
    longitude : Longitude
        Greenwich longitude of the meridian.
    epsg_code : int, optional
        EPSG prime meridian code.
    """
    name: str
    longitude: Longitude
    epsg_code: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "longitude", _as_angle(self.longitude, Longitude))

    def to_greenwich(self, longitude: AngleLike) -> Longitude:
        """Greenwich longitude of a longitude counted from this meridian."""
        return Longitude(_as_angle(longitude).degrees + self.longitude.degrees)

    def from_greenwich(self, longitude: AngleLike) -> Longitude:
        """Longitude counted from this meridian of a Greenwich longitude."""
        return Longitude(_as_angle(longitude).degrees - self.longitude.degrees)

    def __str__(self) -> str:
        return self.name


GREENWICH = PrimeMeridian("Greenwich", Longitude(0.0), 8901)

PRIME_MERIDIANS: Dict[str, PrimeMeridian] = {
    pm.name: pm for pm in (
        GREENWICH,
        PrimeMeridian("Lisbon", Angle.from_dms(-9, 7, 54.862), 8902),
        PrimeMeridian("Paris", Angle.from_dms(2, 20, 14.025), 8903),
        PrimeMeridian("Bogota", Angle.from_dms(-74, 4, 51.3), 8904),
        PrimeMeridian("Madrid", Angle.from_dms(-3, 41, 16.58), 8905),
        PrimeMeridian("Rome", Angle.from_dms(12, 27, 8.4), 8906),
        PrimeMeridian("Bern", Angle.from_dms(7, 26, 22.5), 8907),
        PrimeMeridian("Jakarta", Angle.from_dms(106, 48, 27.79), 8908),
        PrimeMeridian("Ferro", Angle.from_dms(-17, 40, 0), 8909),
        PrimeMeridian("Brussels", Angle.from_dms(4, 22, 4.71), 8910),
        PrimeMeridian("Stockholm", Angle.from_dms(18, 3, 29.8), 8911),
        PrimeMeridian("Athens", Angle.from_dms(23, 42, 58.815), 8912),
        PrimeMeridian("Oslo", Angle.from_dms(10, 43, 22.5), 8913),
        PrimeMeridian("Paris RGS", Angle.from_dms(2, 12, 5.022), 8914),
    )
}


def get_prime_meridian(name: str) -> PrimeMeridian:
    """Look up a prime meridian by name (case-insensitive)."""
    return _lookup(PRIME_MERIDIANS, name, "prime meridian")


# =========================================================================
# Datum origins
# =========================================================================

class EllipsoidOrientation(Enum):
    """How a local datum's ellipsoid was fitted to the geoid."""
    SINGLE_POINT = "single_point"
    MULTIPLE_POINTS = "multiple_points"


@dataclass(frozen=True)
class VerticalDeviation:
    """Deflection of the vertical in arc seconds.

    Attributes
    ----------
    xi : float
        North-south component ξ.
    eta : float
        East-west component η.
    """
    xi: float
    eta: float

    @property
    def north_south(self) -> Angle:
        return Angle(self.xi / 3600.0)

    @property
    def east_west(self) -> Angle:
        return Angle(self.eta / 3600.0)

    @property
    def total(self) -> Angle:
        return Angle(math.hypot(self.xi, self.eta) / 3600.0)


@dataclass(frozen=True)
class GeodeticOrigin:
    """Fundamental point of a local datum.

    Attributes
    ----------
    name : str
    latitude : Latitude
    longitude : Longitude
    height : float
        Height of the origin in meters (NaN when not published).
    azimuth : Angle
        Geodetic azimuth of the orienting line (NaN when not published).
    orientation : EllipsoidOrientation
    location : str
    deflection : VerticalDeviation, optional
        Deflection of the vertical adopted at the origin.
    elevation_anomaly : float
        Height anomaly (geoid or quasigeoid height) at the origin in meters.
    """
    name: str
    latitude: Latitude
    longitude: Longitude
    height: float = math.nan
    azimuth: Angle = field(default_factory=Angle)
    orientation: EllipsoidOrientation = EllipsoidOrientation.SINGLE_POINT
    location: str = ""
    deflection: Optional[VerticalDeviation] = None
    elevation_anomaly: float = math.nan

    def __post_init__(self):
        object.__setattr__(self, "latitude", _as_angle(self.latitude, Latitude))
        object.__setattr__(self, "longitude", _as_angle(self.longitude, Longitude))
        object.__setattr__(self, "azimuth", _as_angle(self.azimuth))
        object.__setattr__(self, "height", float(self.height))

    @classmethod
    def from_coord(cls, name: str, point: GeodeticCoord, azimuth: AngleLike = math.nan,
                   **kwargs) -> 'GeodeticOrigin':
        return cls(name, point.latitude, point.longitude, point.height, _as_angle(azimuth), **kwargs)

    @property
    def point(self) -> GeodeticCoord:
        """The origin as a geodetic coordinate (a missing height reads as 0)."""
        height = 0.0 if math.isnan(self.height) else self.height
        return GeodeticCoord(self.latitude, self.longitude, height)

    def __str__(self) -> str:
        return f"{self.name} (B:{self.latitude}, L:{self.longitude})"


def _origin(name: str, lat: tuple, lon: tuple, **kwargs) -> GeodeticOrigin:
    return GeodeticOrigin(name, Latitude(Angle.from_dms(*lat).degrees),
                          Longitude(Angle.from_dms(*lon).degrees), **kwargs)


GEODETIC_ORIGINS: Dict[str, GeodeticOrigin] = {
    o.name: o for o in (
        _origin("Xi'an 1980", (34, 32, 27), (108, 55, 25),
                orientation=EllipsoidOrientation.MULTIPLE_POINTS, location="Yongle, Shaanxi"),
        _origin("Pulkovo 1942", (59, 46, 18.55), (30, 19, 42.09), location="Pulkovo Observatory"),
        _origin("Meades Ranch", (39, 13, 26.686), (-98, 32, 30.506), location="Kansas"),
        _origin("Potsdam Helmert Tower", (52, 22, 51.4456), (13, 3, 58.9283), location="Potsdam"),
        _origin("Tokyo Observatory (old)", (35, 39, 17.515), (139, 44, 40.502), location="Tokyo"),
        _origin("Hu-Tzu-Shan", (23, 58, 32.34), (120, 58, 25.975), location="Taiwan"),
        _origin("Herstmonceux", (50, 51, 55.271), (0, 20, 45.882), location="Sussex"),
        _origin("Bern Observatory", (46, 57, 8.66), (7, 26, 22.5), location="Bern"),
        _origin("Kalianpur 1895", (24, 7, 11.26), (77, 39, 17.57), location="India"),
        _origin("Johnston Geodetic", (-25, 56, 54.5515), (133, 12, 30.0771), location="Australia"),
        _origin("Campo Inchauspe", (-35, 58, 16.56), (-62, 10, 12.03), location="Argentina"),
        _origin("Buffelsfontein", (-33, 59, 32), (25, 30, 44.622), location="South Africa"),
        _origin("Pantheon", (48, 50, 46.5), (2, 20, 48.67), location="Paris"),
        _origin("Monte Mario", (41, 55, 25.51), (12, 27, 8.4), location="Rome"),
    )
}


def get_geodetic_origin(name: str) -> GeodeticOrigin:
    """Look up a datum origin by name (case-insensitive)."""
    return _lookup(GEODETIC_ORIGINS, name, "geodetic origin")


# =========================================================================
# Vertical datums
# =========================================================================

class SurfaceType(Enum):
    """Kind of surface a vertical datum realizes."""
    GEOID = "geoid"
    ELLIPSOID = "ellipsoid"
    MEAN_SEA_LEVEL = "mean_sea_level"
    QUASIGEOID = "quasigeoid"
    LOCAL = "local"
    BAROMETRIC = "barometric"


@dataclass(frozen=True)
class VerticalDatum:
    """Reference surface for heights.

    Raises
    ------
    MissingParameterError
        If an ellipsoidal vertical datum names no ellipsoid.
    """
    name: str
    alias: str
    surface: SurfaceType
    ellipsoid: Optional[Ellipsoid] = None

    def __post_init__(self):
        if self.surface is SurfaceType.ELLIPSOID and self.ellipsoid is None:
            raise MissingParameterError("ellipsoid")

    @property
    def height_system(self) -> HeightSystem:
        """Height system whose heights refer to this surface."""
        return {
            SurfaceType.ELLIPSOID: HeightSystem.ELLIPSOIDAL,
            SurfaceType.QUASIGEOID: HeightSystem.NORMAL,
        }.get(self.surface, HeightSystem.ORTHOMETRIC)

    def __str__(self) -> str:
        return self.alias or self.name


VERTICAL_DATUMS: Dict[str, VerticalDatum] = {
    v.alias: v for v in (
        VerticalDatum("Huanghai Mean Sea Level 1956", "Huanghai1956", SurfaceType.MEAN_SEA_LEVEL),
        VerticalDatum("China National Height Datum 1985", "China1985", SurfaceType.QUASIGEOID),
        VerticalDatum("North American Vertical Datum of 1988", "NAVD88", SurfaceType.GEOID),
        VerticalDatum("National Geodetic Vertical Datum of 1929", "NGVD29", SurfaceType.MEAN_SEA_LEVEL),
        VerticalDatum("Baltic System of Heights", "Kronstadt", SurfaceType.QUASIGEOID),
        VerticalDatum("Theoretical Lowest Tide", "TLT", SurfaceType.LOCAL),
        VerticalDatum("Lowest Astronomical Tide", "LAT", SurfaceType.LOCAL),
        VerticalDatum("Mean Lower Low Water", "MLLW", SurfaceType.LOCAL),
        VerticalDatum("Mean Low Water Springs", "MLWS", SurfaceType.LOCAL),
        VerticalDatum("Indian Spring Low Water", "ISLW", SurfaceType.LOCAL),
        VerticalDatum("WGS84 Ellipsoid", "WGS84", SurfaceType.ELLIPSOID, WGS84),
    )
}


def get_vertical_datum(name: str) -> VerticalDatum:
    """Look up a vertical datum by alias (case-insensitive)."""
    return _lookup(VERTICAL_DATUMS, name, "vertical datum")


# =========================================================================
# Geodetic datums
# =========================================================================

@dataclass(frozen=True)
class CoordinateDatum:
    """An ellipsoid tied to the Earth, with the meridian longitudes count from.

    Attributes
    ----------
    name : str
    ellipsoid : Ellipsoid
    prime_meridian : PrimeMeridian
        Greenwich unless stated otherwise.
    short_name : str
    area_of_use : str
    scope : str
    remarks : str
    epsg_code : int, optional
        EPSG datum code.
    wgs84_parameters : str, optional
        Code of the catalog parameters transforming this datum to WGS84
        (see :data:`geospatial.transformations.TRANSFORMATION_PARAMETERS`).
    """
    name: str
    ellipsoid: Ellipsoid
    prime_meridian: PrimeMeridian = GREENWICH
    short_name: str = ""
    area_of_use: str = ""
    scope: str = ""
    remarks: str = ""
    epsg_code: Optional[int] = None
    wgs84_parameters: Optional[str] = None

    def to_greenwich(self, point: GeodeticCoord) -> GeodeticCoord:
        """Re-count a point's longitude from Greenwich."""
        return GeodeticCoord(point.latitude, self.prime_meridian.to_greenwich(point.longitude),
                             point.height, point.height_system)

    def from_greenwich(self, point: GeodeticCoord) -> GeodeticCoord:
        """Re-count a Greenwich longitude from this datum's prime meridian."""
        return GeodeticCoord(point.latitude, self.prime_meridian.from_greenwich(point.longitude),
                             point.height, point.height_system)

    def parameters_to_wgs84(self) -> TransParameters:
        """Catalog transformation parameters from this datum to WGS84.

        Raises
        ------
        MissingParameterError
            If the datum names no parameter set.
        """
        if self.wgs84_parameters is None:
            raise MissingParameterError("wgs84_parameters")
        return get_parameters(self.wgs84_parameters)

    def __str__(self) -> str:
        return self.short_name or self.name


@dataclass(frozen=True)
class GeocentricDatum(CoordinateDatum):
    """An earth-centred datum realized at a reference epoch."""
    epoch: Optional[TimeSystem] = None


@dataclass(frozen=True)
class LocalDatum(CoordinateDatum):
    """A classical datum oriented at a geodetic origin.

    Attributes
    ----------
    origin : GeodeticOrigin, optional
    height_system : HeightSystem
        Height system used with the datum.
    normal_ellipsoid : Ellipsoid, optional
        Ellipsoid used for normal gravity, when it differs from the
        reference ellipsoid.
    """
    origin: Optional[GeodeticOrigin] = None
    height_system: HeightSystem = HeightSystem.NORMAL
    normal_ellipsoid: Optional[Ellipsoid] = None

    def __post_init__(self):
        if self.origin is None:
            logger.debug(f"Local datum {self.name} has no origin")

    @property
    def gravity_ellipsoid(self) -> Ellipsoid:
        """Ellipsoid normal gravity is computed on."""
        return self.normal_ellipsoid or self.ellipsoid


GEODETIC_DATUMS: Dict[str, CoordinateDatum] = {
    d.short_name: d for d in (
        GeocentricDatum("World Geodetic System 1984", WGS84, short_name="WGS84",
                        area_of_use="World", epsg_code=6326),
        GeocentricDatum("World Geodetic System 1972", WGS72, short_name="WGS72",
                        area_of_use="World", epsg_code=6322, wgs84_parameters="WGS72_WGS84"),
        GeocentricDatum("China Geodetic Coordinate System 2000", CGCS2000, short_name="CGCS2000",
                        area_of_use="China", epsg_code=1043,
                        epoch=UtcTime.from_decimal_year(2000.0)),
        GeocentricDatum("Parametry Zemli 1990", PZ90, short_name="PZ90",
                        area_of_use="World", epsg_code=6740, wgs84_parameters="PZ90_WGS84"),
        GeocentricDatum("North American Datum 1983", GRS80, short_name="NAD83",
                        area_of_use="North America", epsg_code=6269, wgs84_parameters="NAD83_WGS84"),
        LocalDatum("Beijing 1954", KRASSOVSKY1940, short_name="Beijing1954", area_of_use="China",
                   epsg_code=6214, origin=GEODETIC_ORIGINS["Pulkovo 1942"]),
        LocalDatum("Pulkovo 1942", KRASSOVSKY1940, short_name="Pulkovo1942",
                   area_of_use="Former Soviet Union", epsg_code=6284,
                   origin=GEODETIC_ORIGINS["Pulkovo 1942"], wgs84_parameters="Pulkovo1942_WGS84"),
        LocalDatum("European Datum 1950", INTERNATIONAL1924, short_name="ED50", area_of_use="Europe",
                   epsg_code=6230, origin=GEODETIC_ORIGINS["Potsdam Helmert Tower"],
                   height_system=HeightSystem.ORTHOMETRIC, wgs84_parameters="ED50_WGS84"),
        LocalDatum("North American Datum 1927", CLARKE1866, short_name="NAD27",
                   area_of_use="North America", epsg_code=6267,
                   origin=GEODETIC_ORIGINS["Meades Ranch"], height_system=HeightSystem.ORTHOMETRIC),
        LocalDatum("Tokyo", BESSEL1841, short_name="Tokyo", area_of_use="Japan", epsg_code=6301,
                   origin=GEODETIC_ORIGINS["Tokyo Observatory (old)"],
                   height_system=HeightSystem.ORTHOMETRIC),
        LocalDatum("Nouvelle Triangulation Francaise (Paris)", CLARKE1880, short_name="NTF(Paris)",
                   prime_meridian=PRIME_MERIDIANS["Paris"], area_of_use="France", epsg_code=6807,
                   origin=GEODETIC_ORIGINS["Pantheon"], height_system=HeightSystem.ORTHOMETRIC),
        LocalDatum("Monte Mario (Rome)", INTERNATIONAL1924, short_name="MonteMario(Rome)",
                   prime_meridian=PRIME_MERIDIANS["Rome"], area_of_use="Italy", epsg_code=6806,
                   origin=GEODETIC_ORIGINS["Monte Mario"], height_system=HeightSystem.ORTHOMETRIC),
    )
}


def get_datum(name: str) -> CoordinateDatum:
    """Look up a geodetic datum by short name (case-insensitive)."""
    return _lookup(GEODETIC_DATUMS, name, "datum")
