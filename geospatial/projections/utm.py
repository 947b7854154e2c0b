"""
Universal Transverse Mercator (UTM).

UTM divides the Earth between 80.5°S and 84.5°N into 60 longitudinal zones
of 6° and 20 latitude bands lettered C to X (skipping I and O). Bands are
8° tall except X, which spans 72°N to 84°N. Around Norway (band V) and
Svalbard (band X) the zone boundaries are overridden by fixed tables.

Each zone is a Transverse Mercator projection with scale 0.9996 on the
central meridian, a false easting of 500 km and, in the southern
hemisphere, a false northing of 10 000 km.

Notes
-----
Zone numbering treats the eastern zone boundary as inclusive: longitude
9°E lies in zone 31 of band X and 6°E in zone 31 of other bands.

References
----------
- DMA Technical Manual 8358.2 (1989). The Universal Grids.
- Snyder, J.P. (1987). Map Projections - A Working Manual, pp. 57-64.
"""

from dataclasses import dataclass
import math
from typing import Dict, Optional, Tuple

from common.errors import InvalidInputError
from common.logging_config import get_logger
from geospatial.angles import Latitude, Longitude
from geospatial.ellipsoid import Ellipsoid
from geospatial.projections.base import (
    AngleLike,
    MapProjection,
    ProjectionOrientation,
    ProjectionParameters,
    ProjectionProperty,
    ProjectionSurface,
    as_latitude,
    as_longitude,
    check_hemisphere,
)
from geospatial.projections.transverse_mercator import TransverseMercator, tm_forward_series
from geospatial.settings import default_ellipsoid

logger = get_logger(__name__)

LATITUDE_BANDS = "CDEFGHJKLMNPQRSTUVWX"

MIN_LATITUDE = -80.5
MAX_LATITUDE = 84.5

SCALE_FACTOR = 0.9996
FALSE_EASTING = 500_000.0
FALSE_NORTHING_SOUTH = 10_000_000.0

MIN_EASTING, MAX_EASTING = 100_000.0, 900_000.0
MIN_NORTHING, MAX_NORTHING = 0.0, 10_000_000.0

# Svalbard: band X zones by longitude range (lower bound exclusive)
_X_BAND_ZONES = ((0.0, 9.0, 31), (9.0, 21.0, 33), (21.0, 33.0, 35), (33.0, 42.0, 37))

# (band, zone) -> central meridian in degrees
_SPECIAL_CENTRAL_MERIDIANS: Dict[Tuple[str, int], float] = {
    ("V", 31): 1.5,
    ("V", 32): 7.5,
    ("X", 31): 4.5,
    ("X", 37): 37.5,
}

# (band, zone) -> (min longitude, max longitude) overrides
_SPECIAL_LONGITUDES: Dict[Tuple[str, int], Tuple[float, float]] = {
    ("V", 31): (0.0, 3.0),
    ("V", 32): (3.0, 12.0),
    ("X", 31): (0.0, 9.0),
    ("X", 33): (9.0, 21.0),
    ("X", 35): (21.0, 33.0),
    ("X", 37): (33.0, 42.0),
}

_INVALID_X_ZONES = (32, 34, 36)


def _round6(value: float) -> float:
    # Absorbs accumulated numerical error from the projection series
    return round(value, 6)


# =========================================================================
# Zone and band tables
# =========================================================================

def validate_zone(zone: int) -> int:
    """Return `zone` if it is a valid UTM zone number (1-60)."""
    if not isinstance(zone, int) or isinstance(zone, bool) or not 1 <= zone <= 60:
        raise InvalidInputError(f"UTM zone must be an integer in [1, 60], got {zone!r}")
    return zone


def validate_band(band: str) -> str:
    """Return the upper-cased band letter if it is one of C-X without I and O."""
    letter = band.upper() if isinstance(band, str) and len(band) == 1 else ""
    if not letter or letter not in LATITUDE_BANDS:
        raise InvalidInputError(f"UTM latitude band must be one of C-X except I and O, got {band!r}")
    return letter


def validate_zone_and_band(zone: int, band: str) -> Tuple[int, str]:
    """Validate a zone/band pair; zones 32, 34 and 36 do not exist in band X."""
    zone = validate_zone(zone)
    band = validate_band(band)
    if band == "X" and zone in _INVALID_X_ZONES:
        raise InvalidInputError(f"UTM zone {zone} does not exist in band X")
    return zone, band


def utm_latitude_band(latitude: AngleLike) -> str:
    """Latitude band letter of a latitude.

    Raises
    ------
    InvalidInputError
        If the latitude lies outside [-80.5°, 84.5°].
    """
    lat_deg = as_latitude(latitude).degrees
    if not MIN_LATITUDE <= lat_deg <= MAX_LATITUDE:
        raise InvalidInputError(
            f"Latitude {lat_deg}° is outside the UTM range [{MIN_LATITUDE}°, {MAX_LATITUDE}°]"
        )

    index = math.floor((_round6(lat_deg) + 80.0) / 8.0)
    return LATITUDE_BANDS[min(max(index, 0), len(LATITUDE_BANDS) - 1)]


def utm_longitude_zone(longitude: AngleLike, band: str) -> int:
    """Zone number of a longitude within a latitude band.

    Parameters
    ----------
    longitude : Angle or float
        Longitude (floats are decimal degrees).
    band : str
        Latitude band letter, selecting the Norway and Svalbard overrides.

    Examples
    --------
    >>> utm_longitude_zone(9.0, "X")
    31
    >>> utm_longitude_zone(9.0, "V")
    32
    """
    band = validate_band(band)
    lon_deg = _round6(as_longitude(longitude).degrees)

    # Zone edges belong to the eastern zone; 180° wraps to zone 1
    wrapped = (lon_deg + 180.0) % 360.0
    zone = min(1 + math.floor(wrapped / 6.0), 60)

    if band == "V":
        if 3.0 <= lon_deg < 12.0:
            zone = 32
    elif band == "X":
        for lower, upper, special in _X_BAND_ZONES:
            if lower < lon_deg <= upper:
                zone = special
                break

    return zone


def utm_central_meridian(zone: int, band: Optional[str] = None) -> Longitude:
    """Central meridian of a zone, including the Norway/Svalbard cells."""
    validate_zone(zone)
    if band is not None:
        special = _SPECIAL_CENTRAL_MERIDIANS.get((validate_band(band), zone))
        if special is not None:
            return Longitude(special)
    return Longitude(6.0 * zone - 183.0)


def utm_min_longitude(zone: int, band: str) -> Longitude:
    zone, band = validate_zone_and_band(zone, band)
    lower, _ = _SPECIAL_LONGITUDES.get((band, zone), (6.0 * zone - 186.0, None))
    return Longitude(lower)


def utm_max_longitude(zone: int, band: str) -> Longitude:
    zone, band = validate_zone_and_band(zone, band)
    _, upper = _SPECIAL_LONGITUDES.get((band, zone), (None, 6.0 * zone - 180.0))
    return Longitude(upper)


def utm_min_latitude(band: str) -> Latitude:
    """Inclusive lower latitude of a band (the half-degree UPS overlap excluded)."""
    index = LATITUDE_BANDS.index(validate_band(band))
    return Latitude(8.0 * (index - 10))


def utm_max_latitude(band: str) -> Latitude:
    """Exclusive upper latitude of a band; band X is 12° tall."""
    band = validate_band(band)
    height = 12.0 if band == "X" else 8.0
    return Latitude(utm_min_latitude(band).degrees + height)


def utm_hemisphere(band: str) -> str:
    """'S' for bands C to M, 'N' for bands N to X."""
    return "S" if validate_band(band) < "N" else "N"


def _grid_northing(ellipsoid: Ellipsoid, lat_deg: float, delta_lon_deg: float) -> float:
    northing, _ = tm_forward_series(
        ellipsoid, math.radians(lat_deg), math.radians(delta_lon_deg), SCALE_FACTOR
    )
    return northing + FALSE_NORTHING_SOUTH if lat_deg < 0 else northing


def _half_width(zone: int, band: str) -> float:
    return (utm_max_longitude(zone, band).degrees - utm_min_longitude(zone, band).degrees) / 2.0


def utm_min_northing(band: str, zone: Optional[int] = None, ellipsoid: Optional[Ellipsoid] = None) -> int:
    """Smallest northing (meters) found in a latitude band.

    Northern bands reach it on the central meridian, southern bands at the
    zone edge.
    """
    band = validate_band(band)
    ellipsoid = ellipsoid or default_ellipsoid()
    lat = utm_min_latitude(band).degrees
    if utm_hemisphere(band) == "N":
        return int(round(_grid_northing(ellipsoid, lat, 0.0)))
    edge = 3.0 if zone is None else _half_width(zone, band)
    return int(round(_grid_northing(ellipsoid, lat, edge)))


def utm_max_northing(zone: int, band: str, ellipsoid: Optional[Ellipsoid] = None) -> int:
    """Largest northing (meters) found in a UTM cell."""
    zone, band = validate_zone_and_band(zone, band)
    if band == "M":
        return int(FALSE_NORTHING_SOUTH)
    ellipsoid = ellipsoid or default_ellipsoid()
    lat = utm_max_latitude(band).degrees
    if utm_hemisphere(band) == "S":
        return int(round(_grid_northing(ellipsoid, lat, 0.0)))
    return int(round(_grid_northing(ellipsoid, lat, _half_width(zone, band))))


# =========================================================================
# Projection
# =========================================================================

@dataclass(frozen=True)
class UTMCoord:
    """A UTM grid position.

    Attributes
    ----------
    zone : int
        Longitudinal zone (1-60).
    band : str
        Latitude band letter.
    easting, northing : float
        Grid coordinates in meters, including the false origin.
    """
    zone: int
    band: str
    easting: float
    northing: float

    def __post_init__(self):
        validate_zone_and_band(self.zone, self.band)

    @property
    def hemisphere(self) -> str:
        return utm_hemisphere(self.band)

    def __str__(self) -> str:
        return f"{self.zone}{self.band} {self.easting:.3f}E {self.northing:.3f}N"


class UTM(MapProjection):
    """Transverse Mercator projection of one UTM zone.

    Parameters
    ----------
    zone : int
        Longitudinal zone (1-60).
    hemisphere : str
        'N' or 'S'; selects the false northing.
    ellipsoid : Ellipsoid, optional
        Reference ellipsoid (default: process-wide default).

    Notes
    -----
    Forward projection uses the central meridian of the point's cell, so
    points of the Norway and Svalbard cells use their shifted meridians.
    Reverse first unprojects with the nominal meridian and repeats the
    computation when the resulting band implies a shifted one.
    """

    name = "Universal Transverse Mercator"
    epsg_method = 9824
    surface = ProjectionSurface.CYLINDRICAL
    projection_property = ProjectionProperty.CONFORMAL
    orientation = ProjectionOrientation.TRANSVERSE

    def __init__(self, zone: int, hemisphere: str, ellipsoid: Optional[Ellipsoid] = None):
        self.zone = validate_zone(zone)
        self.hemisphere = check_hemisphere(hemisphere)
        ellipsoid = ellipsoid or default_ellipsoid()

        parameters = ProjectionParameters.from_ellipsoid(
            ellipsoid,
            latitude_of_origin=0.0,
            central_meridian=utm_central_meridian(self.zone).degrees,
            scale_factor=SCALE_FACTOR,
            false_easting=FALSE_EASTING,
            false_northing=FALSE_NORTHING_SOUTH if self.hemisphere == "S" else 0.0,
        )
        super().__init__(parameters)
        self._zone_projections: Dict[float, TransverseMercator] = {}

    def _projection(self, central_meridian: Longitude) -> TransverseMercator:
        key = central_meridian.degrees
        if key not in self._zone_projections:
            self._zone_projections[key] = TransverseMercator(
                ProjectionParameters(
                    semi_major=self.semi_major,
                    inverse_flattening=self.inverse_flattening,
                    latitude_of_origin=0.0,
                    central_meridian=key,
                    scale_factor=SCALE_FACTOR,
                    false_easting=self.false_easting,
                    false_northing=self.false_northing,
                )
            )
        return self._zone_projections[key]

    def forward(self, latitude: AngleLike, longitude: AngleLike) -> Tuple[float, float]:
        lat = as_latitude(latitude)
        band = utm_latitude_band(lat)
        central_meridian = utm_central_meridian(self.zone, band)
        return self._projection(central_meridian).forward(lat, as_longitude(longitude))

    def reverse(self, northing: float, easting: float) -> Tuple[Latitude, Longitude]:
        if not MIN_EASTING <= easting <= MAX_EASTING:
            raise InvalidInputError(
                f"UTM easting {easting} is outside [{MIN_EASTING}, {MAX_EASTING}]"
            )
        if not MIN_NORTHING <= northing <= MAX_NORTHING:
            raise InvalidInputError(
                f"UTM northing {northing} is outside [{MIN_NORTHING}, {MAX_NORTHING}]"
            )

        nominal = utm_central_meridian(self.zone)
        lat, lon = self._projection(nominal).reverse(northing, easting)

        band = utm_latitude_band(lat)
        validate_zone_and_band(self.zone, band)

        if self.hemisphere == "N":
            special = utm_central_meridian(self.zone, band)
            if special != nominal:
                lat, lon = self._projection(special).reverse(northing, easting)

        return lat, lon

    @property
    def proj4_string(self) -> str:
        south = " +south" if self.hemisphere == "S" else ""
        return f"+proj=utm +zone={self.zone}{south} {self._ellps_proj4()}"

    def __repr__(self) -> str:
        return f"UTM(zone={self.zone}, hemisphere={self.hemisphere!r}, ellipsoid={self.ellipsoid})"


def to_utm(
    latitude: AngleLike,
    longitude: AngleLike,
    ellipsoid: Optional[Ellipsoid] = None
) -> UTMCoord:
    """Project a point into its own UTM cell.

    Examples
    --------
    >>> coord = to_utm(60.0, 5.0)
    >>> coord.zone, coord.band
    (32, 'V')
    """
    lat = as_latitude(latitude)
    band = utm_latitude_band(lat)
    zone = utm_longitude_zone(longitude, band)
    northing, easting = UTM(zone, utm_hemisphere(band), ellipsoid).forward(lat, longitude)
    return UTMCoord(zone, band, easting, northing)


def from_utm(coord: UTMCoord, ellipsoid: Optional[Ellipsoid] = None) -> Tuple[Latitude, Longitude]:
    """Geodetic position of a UTM grid coordinate."""
    return UTM(coord.zone, coord.hemisphere, ellipsoid).reverse(coord.northing, coord.easting)
