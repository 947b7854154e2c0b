"""
Military Grid Reference System (MGRS).

An MGRS reference names a UTM cell (zone and band), a 100 km square
inside it and a position inside the square:

    32U MU 12345 67890
    │ │  ││ │     └─ northing within the square
    │ │  ││ └─────── easting within the square
    │ │  │└───────── row letter (20-letter cycle A-V without I, O)
    │ │  └────────── column letter (24-letter cycle A-Z without I, O)
    │ └───────────── latitude band
    └─────────────── longitudinal zone

Column letters restart every three zones; row letters of even zones are
offset by five letters. Precision is 1 to 5 digits per component
(10 km down to 1 m). Decoding a reference yields the south-west corner of
the cell it names, so encoding that corner again gives back the same text.
"""

from dataclasses import dataclass
import math
import re
from typing import Optional

from common.errors import InvalidInputError
from common.logging_config import get_logger
from geospatial.coordinates import GeographicCoord
from geospatial.ellipsoid import Ellipsoid
from geospatial.projections.base import AngleLike
from geospatial.projections.utm import (
    UTM,
    UTMCoord,
    to_utm,
    utm_latitude_band,
    utm_min_northing,
    validate_band,
    validate_zone,
    validate_zone_and_band,
)

logger = get_logger(__name__)

EAST_LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ"
NORTH_LETTERS = "ABCDEFGHJKLMNPQRSTUV"

SQUARE_SIZE = 100_000.0
# Row letters repeat every 2 000 km of northing
ROW_CYCLE = 2_000_000.0

_MGRS_PATTERN = re.compile(
    r"^(?P<zone>\d{1,2})(?P<band>[A-Z])(?P<column>[A-Z])(?P<row>[A-Z])(?P<digits>\d*)$"
)


def _row_offset(zone: int) -> int:
    return 0 if zone % 2 == 1 else 5


def _column_set(zone: int) -> int:
    return ((zone - 1) % 3) * 8


def square_letters(zone: int, easting: float, northing: float) -> str:
    """Column and row letters of the 100 km square holding a UTM position."""
    column = math.floor(easting / SQUARE_SIZE)
    if not 1 <= column <= 8:
        raise InvalidInputError(f"Easting {easting} is outside the MGRS grid columns")
    row = math.floor(northing / SQUARE_SIZE)
    return (
        EAST_LETTERS[_column_set(zone) + column - 1]
        + NORTH_LETTERS[(row + _row_offset(zone)) % len(NORTH_LETTERS)]
    )


def _truncate(value: float, precision: int) -> int:
    # round() first so 99999.9999999 m does not lose a digit
    within = round(value % SQUARE_SIZE, 6)
    return int(math.floor(within / 10 ** (5 - precision)))


@dataclass(frozen=True)
class MGRSCoord:
    """A parsed MGRS reference.

    Attributes
    ----------
    zone : int
    band : str
    column : str
        100 km column letter.
    row : str
        100 km row letter.
    easting, northing : int
        Offsets inside the square, in units of ``10**(5 - precision)`` meters.
    precision : int
        Digits per component (1-5).
    """
    zone: int
    band: str
    column: str
    row: str
    easting: int
    northing: int
    precision: int = 5

    def __post_init__(self):
        validate_zone_and_band(self.zone, self.band)
        if not 1 <= self.precision <= 5:
            raise InvalidInputError(f"MGRS precision must be 1-5 digits, got {self.precision}")
        if self.column not in EAST_LETTERS:
            raise InvalidInputError(f"Invalid MGRS column letter {self.column!r}")
        if self.row not in NORTH_LETTERS:
            raise InvalidInputError(f"Invalid MGRS row letter {self.row!r}")
        limit = 10 ** self.precision
        if not (0 <= self.easting < limit and 0 <= self.northing < limit):
            raise InvalidInputError(
                f"MGRS offsets must have at most {self.precision} digits"
            )

    @property
    def resolution(self) -> float:
        """Size of the cell named by the reference, in meters."""
        return 10.0 ** (5 - self.precision)

    def __str__(self) -> str:
        width = self.precision
        return (
            f"{self.zone}{self.band} {self.column}{self.row} "
            f"{self.easting:0{width}d} {self.northing:0{width}d}"
        )

    def compact(self) -> str:
        """Reference without separators, e.g. ``32UMU1234567890``."""
        return str(self).replace(" ", "")


def parse_mgrs(text: str) -> MGRSCoord:
    """Parse an MGRS string.

    Whitespace and dashes are ignored and letters may be lower case.

    Raises
    ------
    InvalidInputError
        If the text is not a well-formed MGRS reference.
    """
    compact = re.sub(r"[\s\-]", "", text).upper()
    match = _MGRS_PATTERN.match(compact)
    if match is None:
        raise InvalidInputError(f"Cannot decode MGRS reference {text!r}")

    digits = match.group("digits")
    if len(digits) % 2 or not 2 <= len(digits) <= 10:
        raise InvalidInputError(
            f"MGRS reference {text!r} must carry 1-5 digits per component"
        )

    precision = len(digits) // 2
    zone = validate_zone(int(match.group("zone")))
    return MGRSCoord(
        zone=zone,
        band=validate_band(match.group("band")),
        column=match.group("column"),
        row=match.group("row"),
        easting=int(digits[:precision]),
        northing=int(digits[precision:]),
        precision=precision,
    )


def utm_to_mgrs(coord: UTMCoord, precision: int = 5) -> MGRSCoord:
    """MGRS reference of a UTM grid coordinate."""
    if not 1 <= precision <= 5:
        raise InvalidInputError(f"MGRS precision must be 1-5 digits, got {precision}")
    letters = square_letters(coord.zone, coord.easting, coord.northing)
    return MGRSCoord(
        zone=coord.zone,
        band=coord.band,
        column=letters[0],
        row=letters[1],
        easting=_truncate(coord.easting, precision),
        northing=_truncate(coord.northing, precision),
        precision=precision,
    )


def mgrs_to_utm(reference, ellipsoid: Optional[Ellipsoid] = None) -> UTMCoord:
    """UTM grid coordinate of the south-west corner of an MGRS cell.

    Parameters
    ----------
    reference : str or MGRSCoord
        The reference to decode.
    ellipsoid : Ellipsoid, optional
        Ellipsoid used to place the band's northing range.

    Raises
    ------
    InvalidInputError
        If the letters do not belong to the zone or the northing falls
        outside the UTM range.
    """
    mgrs = parse_mgrs(reference) if isinstance(reference, str) else reference

    column = EAST_LETTERS.index(mgrs.column) - _column_set(mgrs.zone)
    if not 0 <= column <= 7:
        raise InvalidInputError(
            f"Column letter {mgrs.column!r} is not used in zone {mgrs.zone}"
        )

    row = (NORTH_LETTERS.index(mgrs.row) - _row_offset(mgrs.zone)) % len(NORTH_LETTERS)

    easting = (column + 1) * SQUARE_SIZE + mgrs.easting * mgrs.resolution
    northing = row * SQUARE_SIZE + mgrs.northing * mgrs.resolution

    # Lift the northing into the band by whole row cycles
    band_floor = math.floor(utm_min_northing(mgrs.band, ellipsoid=ellipsoid) / SQUARE_SIZE) * SQUARE_SIZE
    while northing < band_floor:
        northing += ROW_CYCLE

    if not 0.0 <= northing <= 10_000_000.0:
        raise InvalidInputError(f"Decoded northing {northing} is outside [0, 10 000 000]")

    return UTMCoord(mgrs.zone, mgrs.band, easting, northing)


def to_mgrs(
    latitude: AngleLike,
    longitude: AngleLike,
    precision: int = 5,
    ellipsoid: Optional[Ellipsoid] = None
) -> MGRSCoord:
    """MGRS reference of a geodetic position.

    Examples
    --------
    >>> ref = to_mgrs(48.8566, 2.3522, precision=3)
    >>> ref.zone, ref.band
    (31, 'U')
    """
    return utm_to_mgrs(to_utm(latitude, longitude, ellipsoid), precision)


def from_mgrs(reference, ellipsoid: Optional[Ellipsoid] = None) -> GeographicCoord:
    """Geodetic position of the south-west corner of an MGRS cell."""
    coord = mgrs_to_utm(reference, ellipsoid)
    lat, lon = UTM(coord.zone, coord.hemisphere, ellipsoid).reverse(coord.northing, coord.easting)
    return GeographicCoord(lat, lon)


def utm_position_to_mgrs(
    zone: int,
    hemisphere: str,
    easting: float,
    northing: float,
    precision: int = 5,
    ellipsoid: Optional[Ellipsoid] = None
) -> MGRSCoord:
    """MGRS reference of a UTM position given without its band.

    The band is recovered by unprojecting the position.
    """
    lat, _ = UTM(zone, hemisphere, ellipsoid).reverse(northing, easting)
    band = utm_latitude_band(lat)
    return utm_to_mgrs(UTMCoord(zone, band, easting, northing), precision)
