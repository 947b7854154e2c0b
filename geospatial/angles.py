"""
Angle, Latitude and Longitude Value Types.

An angle is stored as a single decimal-degree float, whatever unit or
sexagesimal encoding it was built from. NaN stands for an unset angle.

Angles are immutable: operations such as :meth:`Angle.normalize` return new
values. A kind tag selects the normalization rule:

- plain angles wrap to [0°, 360°);
- latitudes fold (270°, 360°) back to (-90°, 0°) and reject anything that
  wraps into (90°, 270°);
- longitudes fold (180°, 360°) to (-180°, 0°) and never reject.

Sexagesimal Encodings
---------------------
=========  ====================  ======================
Style      Example               Meaning
=========  ====================  ======================
DMMSS      45.3030               45°30'30"
DMMSSSS    453030.25             45°30'30.25"
DMM        45.3025               45°30.25'
DMMMM      4530.25               45°30.25'
DD_MM_SS   45°30'30.25000"       string form
=========  ====================  ======================

References
----------
- Bowditch, N. (2002). The American Practical Navigator, Chapter 1.
"""

from enum import Enum
import math
import re
from typing import Any, Dict, Union

from common.constants import (
    ANGLE_EPSILON,
    DEGREE_TO_RADIAN,
    DMS_CARRY_EPSILON,
    RADIAN_TO_DEGREE,
    RADIAN_TO_SECOND,
    SECOND_TO_RADIAN,
)
from common.errors import InvalidInputError
from common.units import units


class AngleKind(Enum):
    """Normalization rule carried by an angle."""
    PLAIN = "plain"
    LATITUDE = "latitude"
    LONGITUDE = "longitude"


class DataStyle(Enum):
    """Numeric encodings an angle can be read from or written to."""
    DEGREES = "degrees"
    MINUTES = "minutes"
    SECONDS = "seconds"
    RADIANS = "radians"
    DMMSS = "D.MMSS"
    DMMSSSS = "DDDMMSS.ss"
    DMM = "D.MM"
    DMMMM = "DDDMM.mm"
    DD_MM_SS = "DD°MM'SS.sssss\""


_DMS_PATTERN = re.compile(
    r"^\s*(?P<sign>[-+])?\s*(?P<deg>\d+(?:\.\d*)?)\s*°"
    r"(?:\s*(?P<min>\d+(?:\.\d*)?)\s*')?"
    r"(?:\s*(?P<sec>\d+(?:\.\d*)?)\s*\")?"
    r"\s*(?P<flag>[NSEWnsew])?\s*$"
)


def normalize_degrees(value: float, kind: AngleKind = AngleKind.PLAIN) -> float:
    """Apply the normalization rule of `kind` to a degree value.

    Parameters
    ----------
    value : float
        Angle in degrees.
    kind : AngleKind
        Normalization rule.

    Returns
    -------
    float
        Normalized degrees. Values already inside the target range are
        returned unchanged, bit for bit.

    Raises
    ------
    InvalidInputError
        If `kind` is LATITUDE and the wrapped value lies in (90°, 270°).
    """
    if math.isnan(value):
        return value

    if kind is AngleKind.LATITUDE and -90.0 <= value <= 90.0:
        return value
    if kind is AngleKind.LONGITUDE and -180.0 < value <= 180.0:
        return value
    if kind is AngleKind.PLAIN and 0.0 <= value < 360.0:
        return value

    wrapped = value % 360.0
    if wrapped >= 360.0:
        wrapped = 0.0

    if kind is AngleKind.LATITUDE:
        if 90.0 < wrapped < 270.0:
            raise InvalidInputError(
                f"Latitude {value}° is outside [-90°, 90°]",
                context={"value": value, "wrapped": wrapped}
            )
        if wrapped >= 270.0:
            wrapped -= 360.0
    elif kind is AngleKind.LONGITUDE:
        if wrapped > 180.0:
            wrapped -= 360.0

    return wrapped


class Angle:
    """An angle stored in decimal degrees.

    Parameters
    ----------
    degrees : float
        Angle in decimal degrees (NaN for an unset angle).

    Notes
    -----
    Equality is tolerance based: two angles are equal when their degree
    values differ by less than ``ANGLE_EPSILON`` (1e-12°, about 3.6e-9
    arcseconds). NaN angles never compare equal. Because the relation is
    not transitive, angles are not hashable.

    Examples
    --------
    >>> Angle.from_dms(45, 30, 30).to_dms()
    453030.0
    >>> Angle(-30.5).to_string()
    '-30°30\\'00.00000"'
    """

    __slots__ = ("_degrees",)

    kind = AngleKind.PLAIN

    def __init__(self, degrees: float = math.nan):
        self._degrees = float(degrees)

    # ------------------------------------------------------------------
    # Alternative constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_dms(cls, deg: int, minute: int, second: float) -> 'Angle':
        """Build an angle from degree, minute and second components.

        Only one component may carry the sign. When degree and minute are
        both zero the seconds carry it; when only the degree is zero the
        minutes carry it (and may reach 60); otherwise the degree does.

        Raises
        ------
        InvalidInputError
            If a component is out of range.
        """
        if deg == 0 and minute == 0:
            if abs(second) >= 60:
                raise InvalidInputError(f"Second {second} must be within (-60, 60)")
            value = second / 3600.0
        elif deg == 0:
            if abs(minute) > 60:
                raise InvalidInputError(f"Minute {minute} must be within [-60, 60]")
            if not 0 <= second < 60:
                raise InvalidInputError(f"Second {second} must be within [0, 60)")
            value = math.copysign(abs(minute) / 60.0 + second / 3600.0, minute)
        else:
            if not 0 <= minute < 60:
                raise InvalidInputError(f"Minute {minute} must be within [0, 60)")
            if not 0 <= second < 60:
                raise InvalidInputError(f"Second {second} must be within [0, 60)")
            value = math.copysign(abs(deg) + minute / 60.0 + second / 3600.0, deg)
        return cls(value)

    @classmethod
    def from_radians(cls, radians: float) -> 'Angle':
        """Build an angle from radians."""
        return cls(radians * RADIAN_TO_DEGREE)

    @classmethod
    def from_degrees(cls, degrees: float) -> 'Angle':
        """Build an angle from decimal degrees."""
        return cls(degrees)

    @classmethod
    def from_unit(cls, value: float, unit: str) -> 'Angle':
        """Build an angle from a value in any pint angular unit."""
        return cls(units.convert(value, unit, "degree"))

    @classmethod
    def from_style(cls, value: Union[float, str], style: DataStyle) -> 'Angle':
        """Decode a value written in one of the :class:`DataStyle` encodings.

        Packed sexagesimal values are split by floor division; a minute or
        second field of 60 or more is an error, never clamped.

        Raises
        ------
        InvalidInputError
            If a packed minute or second field is out of range.
        """
        if style is DataStyle.DD_MM_SS:
            return cls.from_string(str(value))

        value = float(value)
        if style is DataStyle.DEGREES:
            return cls(value)
        if style is DataStyle.MINUTES:
            return cls(value / 60.0)
        if style is DataStyle.SECONDS:
            return cls(value / 3600.0)
        if style is DataStyle.RADIANS:
            return cls.from_radians(value)
        if math.isnan(value):
            return cls(value)

        sign = -1.0 if value < 0 else 1.0
        v = abs(value)

        if style is DataStyle.DMMSSSS:
            d = math.floor(v / 10000.0)
            m = math.floor((v - d * 10000.0) / 100.0)
            s = v - d * 10000.0 - m * 100.0
        elif style is DataStyle.DMMSS:
            d = math.floor(v)
            m = math.floor(round((v - d) * 100.0, 9))
            s = round((v - d - m / 100.0) * 10000.0, 9)
        elif style is DataStyle.DMMMM:
            d = math.floor(v / 100.0)
            m = v - d * 100.0
            s = 0.0
        elif style is DataStyle.DMM:
            d = math.floor(v)
            m = (v - d) * 100.0
            s = 0.0
        else:
            raise InvalidInputError(f"Unsupported data style {style}")

        if m >= 60:
            raise InvalidInputError(
                f"Minute field {m} of {value} ({style.value}) must be less than 60"
            )
        if s >= 60:
            raise InvalidInputError(
                f"Second field {s} of {value} ({style.value}) must be less than 60"
            )
        return cls(sign * (d + m / 60.0 + s / 3600.0))

    @classmethod
    def from_string(cls, text: str) -> 'Angle':
        """Parse the ``d°MM'SS.sss"`` form, with an optional hemisphere letter.

        A trailing S or W makes the angle negative.

        Raises
        ------
        InvalidInputError
            If the text cannot be parsed or a field is out of range.
        """
        match = _DMS_PATTERN.match(text)
        if match is None:
            raise InvalidInputError(f"Cannot parse angle from '{text}'")

        deg = float(match.group("deg"))
        minute = float(match.group("min") or 0.0)
        second = float(match.group("sec") or 0.0)
        if minute >= 60 or second >= 60:
            raise InvalidInputError(f"Minute or second field out of range in '{text}'")

        value = deg + minute / 60.0 + second / 3600.0
        negative = match.group("sign") == "-"
        flag = (match.group("flag") or "").upper()
        if flag in ("S", "W"):
            negative = not negative
        return cls(-value if negative else value)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Angle':
        """Rebuild an angle written by :meth:`to_dict`."""
        style = DataStyle[data.get("style", DataStyle.DEGREES.name)]
        kind = AngleKind(data.get("kind", cls.kind.value))
        target = _KIND_TYPES.get(kind, cls)
        return target.from_style(data["value"], style)

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    @property
    def degrees(self) -> float:
        """Value in decimal degrees."""
        return self._degrees

    @property
    def minutes(self) -> float:
        """Value in decimal minutes."""
        return self._degrees * 60.0

    @property
    def seconds(self) -> float:
        """Value in decimal seconds."""
        return self._degrees * 3600.0

    @property
    def radians(self) -> float:
        """Value in radians."""
        return self._degrees * DEGREE_TO_RADIAN

    @property
    def is_nan(self) -> bool:
        """Whether the angle is unset."""
        return math.isnan(self._degrees)

    def _dms_parts(self):
        """Split into (sign, degree, minute, second) with the 60 carry applied."""
        sign = -1 if self._degrees < 0 else 1
        v = abs(self._degrees)
        d = math.floor(v)
        m = math.floor((v - d) * 60.0)
        s = (v - d - m / 60.0) * 3600.0

        if abs(s - 60.0) < DMS_CARRY_EPSILON:
            s = 0.0
            m += 1
        elif -DMS_CARRY_EPSILON < s < 0.0:
            s = 0.0
        if m >= 60:
            m -= 60
            d += 1
        return sign, d, m, s

    @property
    def degree(self) -> int:
        """Signed whole-degree component."""
        sign, d, _, _ = self._dms_parts()
        return sign * d

    @property
    def minute(self) -> int:
        """Whole-minute component (always positive)."""
        return self._dms_parts()[2]

    @property
    def second(self) -> float:
        """Decimal-second component (always positive)."""
        return self._dms_parts()[3]

    def to_dms(self) -> float:
        """Pack into ``DDDMMSS.ssss``.

        Seconds within ``DMS_CARRY_EPSILON`` of 60 are carried into the
        minute, and a resulting 60-minute field into the degree, so the
        packed value never shows a 60 in either field.
        """
        if self.is_nan:
            return math.nan
        sign, d, m, s = self._dms_parts()
        return sign * (d * 10000.0 + m * 100.0 + s)

    def get_value(self, style: DataStyle = DataStyle.DEGREES) -> Union[float, str]:
        """Encode the angle in `style`."""
        if style is DataStyle.DEGREES:
            return self._degrees
        if style is DataStyle.MINUTES:
            return self.minutes
        if style is DataStyle.SECONDS:
            return self.seconds
        if style is DataStyle.RADIANS:
            return self.radians
        if style is DataStyle.DD_MM_SS:
            return self.to_string(style)
        if style is DataStyle.DMMSSSS:
            return self.to_dms()
        if self.is_nan:
            return math.nan

        sign, d, m, s = self._dms_parts()
        if style is DataStyle.DMMSS:
            return sign * (d + m / 100.0 + s / 10000.0)
        decimal_minutes = m + s / 60.0
        if style is DataStyle.DMM:
            return sign * (d + decimal_minutes / 100.0)
        if style is DataStyle.DMMMM:
            return sign * (d * 100.0 + decimal_minutes)
        raise InvalidInputError(f"Unsupported data style {style}")

    def get_value_in(self, unit: str) -> float:
        """Express the angle in any pint angular unit."""
        return units.convert(self._degrees, "degree", unit)

    def normalize(self) -> 'Angle':
        """Return the angle normalized according to its kind."""
        return type(self)(normalize_degrees(self._degrees, self.kind))

    # ------------------------------------------------------------------
    # Formatting and serialization
    # ------------------------------------------------------------------

    def to_string(self, style: DataStyle = DataStyle.DD_MM_SS) -> str:
        """Format the angle; the sexagesimal form is ``d°MM'SS.sssss"``."""
        if self.is_nan:
            return "NaN"
        if style is not DataStyle.DD_MM_SS:
            return f"{self.get_value(style)}"
        sign, d, m, s = self._dms_parts()
        prefix = "-" if sign < 0 else ""
        return f"{prefix}{d}°{m:02d}'{s:08.5f}\""

    def to_dict(self, style: DataStyle = DataStyle.DEGREES) -> Dict[str, Any]:
        """Serialize as ``{"value", "style", "kind"}``.

        The value is written in `style`; DD_MM_SS writes the string form.
        """
        value = self.get_value(style)
        return {"value": value, "style": style.name, "kind": self.kind.value}

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._degrees!r})"

    def __format__(self, spec: str) -> str:
        if not spec:
            return str(self)
        return format(self._degrees, spec)

    # ------------------------------------------------------------------
    # Comparison and arithmetic (results are plain angles)
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Angle):
            return NotImplemented
        return abs(self._degrees - other._degrees) < ANGLE_EPSILON

    __hash__ = None

    def __lt__(self, other: 'Angle') -> bool:
        return self._degrees < other._degrees

    def __le__(self, other: 'Angle') -> bool:
        return self._degrees <= other._degrees

    def __gt__(self, other: 'Angle') -> bool:
        return self._degrees > other._degrees

    def __ge__(self, other: 'Angle') -> bool:
        return self._degrees >= other._degrees

    def __add__(self, other: 'Angle') -> 'Angle':
        if not isinstance(other, Angle):
            return NotImplemented
        return Angle(self._degrees + other._degrees)

    def __sub__(self, other: 'Angle') -> 'Angle':
        if not isinstance(other, Angle):
            return NotImplemented
        return Angle(self._degrees - other._degrees)

    def __mul__(self, factor: float) -> 'Angle':
        if isinstance(factor, Angle):
            return NotImplemented
        return Angle(self._degrees * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> 'Angle':
        if isinstance(divisor, Angle):
            return NotImplemented
        return Angle(self._degrees / divisor)

    def __neg__(self) -> 'Angle':
        return Angle(-self._degrees)

    def __abs__(self) -> 'Angle':
        return Angle(abs(self._degrees))


class Latitude(Angle):
    """A latitude in [-90°, 90°], normalized on construction.

    Raises
    ------
    InvalidInputError
        If the value wraps into (90°, 270°).
    """

    __slots__ = ()

    kind = AngleKind.LATITUDE

    def __init__(self, degrees: float = math.nan):
        super().__init__(normalize_degrees(float(degrees), AngleKind.LATITUDE))

    @classmethod
    def from_hemisphere(cls, deg: int, minute: int, second: float, flag: str) -> 'Latitude':
        """Build from positive components and an 'N'/'S' flag."""
        return cls(_hemisphere_degrees(deg, minute, second, flag, "NS"))

    @property
    def hemisphere(self) -> str:
        """'N' for the northern hemisphere (and the equator), else 'S'."""
        return "S" if self._degrees < 0 else "N"

    def to_string(self, style: DataStyle = DataStyle.DD_MM_SS) -> str:
        if style is not DataStyle.DD_MM_SS or self.is_nan:
            return super().to_string(style)
        return abs(Angle(self._degrees)).to_string(style) + self.hemisphere


class Longitude(Angle):
    """A longitude in (-180°, 180°], normalized on construction."""

    __slots__ = ()

    kind = AngleKind.LONGITUDE

    def __init__(self, degrees: float = math.nan):
        super().__init__(normalize_degrees(float(degrees), AngleKind.LONGITUDE))

    @classmethod
    def from_hemisphere(cls, deg: int, minute: int, second: float, flag: str) -> 'Longitude':
        """Build from positive components and an 'E'/'W' flag."""
        return cls(_hemisphere_degrees(deg, minute, second, flag, "EW"))

    @property
    def hemisphere(self) -> str:
        """'E' for the eastern hemisphere (and the prime meridian), else 'W'."""
        return "W" if self._degrees < 0 else "E"

    def to_string(self, style: DataStyle = DataStyle.DD_MM_SS) -> str:
        if style is not DataStyle.DD_MM_SS or self.is_nan:
            return super().to_string(style)
        return abs(Angle(self._degrees)).to_string(style) + self.hemisphere


def _hemisphere_degrees(deg: int, minute: int, second: float, flag: str, flags: str) -> float:
    """Decimal degrees from positive components and a hemisphere letter."""
    if deg < 0:
        raise InvalidInputError(f"Degree {deg} must not be negative when a flag is given")
    if not 0 <= minute < 60:
        raise InvalidInputError(f"Minute {minute} must be within [0, 60)")
    if not 0 <= second < 60:
        raise InvalidInputError(f"Second {second} must be within [0, 60)")

    letter = flag.upper() if isinstance(flag, str) else ""
    if len(letter) != 1 or letter not in flags:
        raise InvalidInputError(f"Hemisphere flag '{flag}' must be one of {tuple(flags)}")

    value = deg + minute / 60.0 + second / 3600.0
    return -value if letter == flags[1] else value


def angular_difference(a: Angle, b: Angle) -> Angle:
    """Difference ``a - b`` with the quadrant-folding rule of coordinates.

    When the first operand is negative, 360° is added to the raw difference.
    This is the rule used when differencing two latitudes or two longitudes;
    it is not ordinary subtraction.

    Parameters
    ----------
    a, b : Angle
        Minuend and subtrahend.

    Returns
    -------
    Angle
        A plain angle.
    """
    result = a.degrees - b.degrees
    if a.degrees < 0:
        result += 360.0
    return Angle(result)


def wrap_longitude_difference(a: Angle, b: Angle) -> Angle:
    """Signed longitude difference ``a - b`` wrapped to (-180°, 180°]."""
    return Angle(normalize_degrees(a.degrees - b.degrees, AngleKind.LONGITUDE))


_KIND_TYPES = {
    AngleKind.PLAIN: Angle,
    AngleKind.LATITUDE: Latitude,
    AngleKind.LONGITUDE: Longitude,
}

Angle.ZERO = Angle(0.0)
Angle.NAN = Angle(math.nan)
Angle.PI = Angle(180.0)
Angle.HALF_PI = Angle(90.0)
Angle.TWO_PI = Angle(360.0)
Angle.DEGREE_TO_RADIAN = DEGREE_TO_RADIAN
Angle.RADIAN_TO_DEGREE = RADIAN_TO_DEGREE
Angle.SECOND_TO_RADIAN = SECOND_TO_RADIAN
Angle.RADIAN_TO_SECOND = RADIAN_TO_SECOND

Latitude.EQUATOR = Latitude(0.0)
Latitude.NORTH_POLE = Latitude(90.0)
Latitude.SOUTH_POLE = Latitude(-90.0)
Latitude.MIN_VALUE = Latitude(-90.0)
Latitude.MAX_VALUE = Latitude(90.0)

Longitude.PRIME_MERIDIAN = Longitude(0.0)
Longitude.ANTIMERIDIAN = Longitude(180.0)
