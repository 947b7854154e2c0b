"""
Time Scales for Satellite Geodesy.

Epochs of GNSS observations are tagged in the time scale of the broadcasting
system. This module converts them to and from civil time and the Julian date
used by orbit and Earth-rotation models.

Scales
------
=========  ===============================  ======================
Scale      Relation to TAI                  Origin (week 0, tow 0)
=========  ===============================  ======================
UTC        TAI - (TAI-UTC)(t)               -
TAI        -                                -
GPS        TAI - 19 s                       1980-01-06 00:00:00
Galileo    TAI - 19 s                       1999-08-22 00:00:00
BeiDou     TAI - 33 s                       2006-01-01 00:00:00
=========  ===============================  ======================

TAI-UTC is read from the leap-second table from 1972 on. Between 1960 and
1972 UTC drifted against TAI at a published rate, and before 1960 the
offset is taken as zero.

Every time value wraps a naive :class:`datetime.datetime` read in its own
scale. Values of different scales compare and subtract through TAI, so
``GpsTime - UtcTime`` is the elapsed number of SI seconds.

References
----------
- IERS Bulletin C (leap second announcements).
- IS-GPS-200, Galileo OS SIS ICD and BDS-SIS-ICD (system time definitions).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
import math
from typing import ClassVar, Tuple, Union

from common.errors import InvalidInputError
from common.logging_config import get_logger

logger = get_logger(__name__)

SECONDS_PER_DAY = 86400.0
SECONDS_PER_WEEK = 604800.0
JD_MJD_OFFSET = 2400000.5
MJD_ZERO = datetime(1858, 11, 17)

# (year, month, TAI-UTC in seconds) from the first day of the month, newest first
LEAP_SECONDS: Tuple[Tuple[int, int, float], ...] = (
    (2017, 1, 37.0),
    (2015, 7, 36.0),
    (2012, 7, 35.0),
    (2009, 1, 34.0),
    (2006, 1, 33.0),
    (1999, 1, 32.0),
    (1997, 7, 31.0),
    (1996, 1, 30.0),
    (1994, 7, 29.0),
    (1993, 7, 28.0),
    (1992, 7, 27.0),
    (1991, 1, 26.0),
    (1990, 1, 25.0),
    (1988, 1, 24.0),
    (1985, 7, 23.0),
    (1983, 7, 22.0),
    (1982, 7, 21.0),
    (1981, 7, 20.0),
    (1980, 1, 19.0),
    (1979, 1, 18.0),
    (1978, 1, 17.0),
    (1977, 1, 16.0),
    (1976, 1, 15.0),
    (1975, 1, 14.0),
    (1974, 1, 13.0),
    (1973, 1, 12.0),
    (1972, 7, 11.0),
    (1972, 1, 10.0),
)

# (year, month, offset in seconds, drift in seconds per day) for 1960-1971
UTC_DRIFT: Tuple[Tuple[int, int, float, float], ...] = (
    (1968, 2, 4.2131700, 0.0025920),
    (1966, 1, 4.3131700, 0.0025920),
    (1965, 9, 3.8401300, 0.0012960),
    (1965, 7, 3.7401300, 0.0012960),
    (1965, 3, 3.6401300, 0.0012960),
    (1965, 1, 3.5401300, 0.0012960),
    (1964, 9, 3.4401300, 0.0012960),
    (1964, 4, 3.3401300, 0.0012960),
    (1964, 1, 3.2401300, 0.0012960),
    (1963, 11, 1.9458580, 0.0011232),
    (1962, 1, 1.8458580, 0.0011232),
    (1961, 8, 1.3728180, 0.0012960),
    (1961, 1, 1.4228180, 0.0012960),
    (1960, 1, 1.4178180, 0.0012960),
)


def tai_minus_utc(utc: datetime) -> float:
    """TAI-UTC in seconds at a UTC moment."""
    if utc.year < 1960:
        logger.debug(f"No TAI-UTC offset is defined before 1960 ({utc}); using 0")
        return 0.0
    if utc.year < 1972:
        for year, month, offset, drift in UTC_DRIFT:
            start = datetime(year, month, 1)
            if utc >= start:
                return offset + (utc - start).total_seconds() / SECONDS_PER_DAY * drift
    for year, month, leaps in LEAP_SECONDS:
        if utc >= datetime(year, month, 1):
            return leaps
    return 0.0


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_year(year: int) -> int:
    return 366 if is_leap_year(year) else 365


def date_from_day_of_year(year: int, day_of_year: float) -> datetime:
    """Moment from a year and a (fractional) day of year counted from 1.

    Raises
    ------
    InvalidInputError
        If the day does not fall inside the year.
    """
    if not 1.0 <= day_of_year < days_in_year(year) + 1.0:
        raise InvalidInputError(
            f"Day of year {day_of_year} must be within [1, {days_in_year(year) + 1}) for {year}")
    return datetime(year, 1, 1) + timedelta(days=day_of_year - 1.0)


def _seconds(value: Union[float, timedelta]) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


@dataclass(frozen=True, eq=False)
class TimeSystem(ABC):
    """A moment read in one time scale.

    Attributes
    ----------
    moment : datetime
        Naive calendar reading of the moment in this scale.
    """
    moment: datetime

    scale: ClassVar[str] = ""

    def __post_init__(self):
        if not isinstance(self.moment, datetime):
            raise InvalidInputError(f"Expected a datetime, got {type(self.moment).__name__}")
        if self.moment.tzinfo is not None:
            raise InvalidInputError("Time scales are read from naive datetimes")

    @classmethod
    def from_components(cls, year: int, month: int, day: int, hour: int = 0,
                        minute: int = 0, second: float = 0.0):
        return cls(datetime(year, month, day, hour, minute) + timedelta(seconds=second))

    @classmethod
    def from_month_days(cls, year: int, month: int, days: float):
        """Moment from a fractional day of the month (1.5 is noon on the 1st)."""
        if days < 1.0:
            raise InvalidInputError(f"Day of month {days} must be at least 1")
        return cls(datetime(year, month, 1) + timedelta(days=days - 1.0))

    @classmethod
    def from_day_of_year(cls, year: int, day_of_year: float):
        return cls(date_from_day_of_year(year, day_of_year))

    @abstractmethod
    def to_tai(self) -> 'TaiTime':
        pass

    def to_utc(self) -> 'UtcTime':
        return self.to_tai().to_utc()

    def to_julian(self) -> 'JulianDate':
        """Julian date of the UTC reading of this moment."""
        return JulianDate.from_datetime(self.to_utc().moment)

    @property
    def day_of_year(self) -> int:
        return self.moment.timetuple().tm_yday

    @property
    def second_of_day(self) -> float:
        m = self.moment
        return m.hour * 3600 + m.minute * 60 + m.second + m.microsecond * 1e-6

    @property
    def decimal_year(self) -> float:
        start = datetime(self.moment.year, 1, 1)
        elapsed = (self.moment - start).total_seconds() / SECONDS_PER_DAY
        return self.moment.year + elapsed / days_in_year(self.moment.year)

    def _shifted(self, seconds: float):
        return type(self)(self.moment + timedelta(seconds=seconds))

    def __add__(self, seconds: Union[float, timedelta]):
        if isinstance(seconds, TimeSystem):
            return NotImplemented
        return self._shifted(_seconds(seconds))

    def __sub__(self, other):
        """Shift back by seconds, or the elapsed SI seconds since another moment."""
        if isinstance(other, TimeSystem):
            return (self.to_tai().moment - other.to_tai().moment).total_seconds()
        return self._shifted(-_seconds(other))

    def _key(self) -> datetime:
        return self.to_tai().moment

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeSystem):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __lt__(self, other: 'TimeSystem') -> bool:
        return self._key() < other._key()

    def __le__(self, other: 'TimeSystem') -> bool:
        return self._key() <= other._key()

    def __gt__(self, other: 'TimeSystem') -> bool:
        return self._key() > other._key()

    def __ge__(self, other: 'TimeSystem') -> bool:
        return self._key() >= other._key()

    def __str__(self) -> str:
        return self.moment.strftime("%Y-%m-%d_%H:%M:%S.") + f"{self.moment.microsecond // 1000:03d}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class TaiTime(TimeSystem):
    """International Atomic Time."""

    scale = "TAI"

    def to_tai(self) -> 'TaiTime':
        return self

    def to_utc(self) -> 'UtcTime':
        """UTC reading; an inserted leap second reads as the following 00:00:00."""
        guess = self.moment - timedelta(seconds=tai_minus_utc(self.moment))
        return UtcTime(self.moment - timedelta(seconds=tai_minus_utc(guess)))


class UtcTime(TimeSystem):
    """Coordinated Universal Time."""

    scale = "UTC"

    @classmethod
    def from_decimal_year(cls, epoch: float) -> 'UtcTime':
        """Moment from a decimal year such as 2020.5."""
        year = int(math.floor(epoch))
        days = (epoch - year) * days_in_year(year)
        return cls(datetime(year, 1, 1) + timedelta(days=days))

    @property
    def tai_minus_utc(self) -> float:
        return tai_minus_utc(self.moment)

    def to_tai(self) -> TaiTime:
        return TaiTime(self.moment + timedelta(seconds=self.tai_minus_utc))

    def to_utc(self) -> 'UtcTime':
        return self


@dataclass(frozen=True)
class JulianDate:
    """A Julian date held as its modified Julian date (days since 1858-11-17).

    The date carries no scale of its own; :meth:`TimeSystem.to_julian` reads
    it from UTC.
    """
    mjd: float

    @classmethod
    def from_datetime(cls, moment: datetime) -> 'JulianDate':
        return cls((moment - MJD_ZERO).total_seconds() / SECONDS_PER_DAY)

    @classmethod
    def from_jd(cls, jd: float) -> 'JulianDate':
        return cls(jd - JD_MJD_OFFSET)

    @property
    def jd(self) -> float:
        return self.mjd + JD_MJD_OFFSET

    def to_datetime(self) -> datetime:
        return MJD_ZERO + timedelta(days=self.mjd)

    def to_utc(self) -> UtcTime:
        return UtcTime(self.to_datetime())

    def __add__(self, days: float) -> 'JulianDate':
        return JulianDate(self.mjd + days)

    def __sub__(self, other):
        """Shift back by days, or the number of days since another date."""
        if isinstance(other, JulianDate):
            return self.mjd - other.mjd
        return JulianDate(self.mjd - other)


class GnssTime(TimeSystem):
    """System time of a satellite navigation system.

    A GNSS time is continuous (no leap seconds) and runs a fixed number of
    seconds behind TAI. Epochs are usually given as a week number and the
    seconds of week counted from the system origin.

    Raises
    ------
    InvalidInputError
        If the moment precedes the system origin.
    """

    origin: ClassVar[datetime]
    tai_offset: ClassVar[float]

    def __post_init__(self):
        super().__post_init__()
        if self.moment < self.origin:
            raise InvalidInputError(
                f"{self.scale} time {self.moment} precedes the system origin {self.origin}")

    @classmethod
    def from_week_seconds(cls, week: int, seconds_of_week: float):
        """Moment from a week number and the seconds into that week.

        Raises
        ------
        InvalidInputError
            If the week is negative or the seconds fall outside [0, 604800).
        """
        if week < 0:
            raise InvalidInputError(f"{cls.scale} week {week} must not be negative")
        if not 0.0 <= seconds_of_week < SECONDS_PER_WEEK:
            raise InvalidInputError(
                f"Seconds of week {seconds_of_week} must be within [0, {SECONDS_PER_WEEK:.0f})")
        return cls(cls.origin + timedelta(weeks=week, seconds=seconds_of_week))

    @classmethod
    def from_tai(cls, tai: TimeSystem):
        return cls(tai.to_tai().moment - timedelta(seconds=cls.tai_offset))

    @classmethod
    def from_utc(cls, utc: Union[TimeSystem, datetime]):
        if isinstance(utc, datetime):
            utc = UtcTime(utc)
        return cls.from_tai(utc)

    def _elapsed(self) -> float:
        return (self.moment - self.origin).total_seconds()

    @property
    def week(self) -> int:
        return int(self._elapsed() // SECONDS_PER_WEEK)

    @property
    def seconds_of_week(self) -> float:
        return self._elapsed() - self.week * SECONDS_PER_WEEK

    @property
    def day_of_week(self) -> int:
        """Day of the week, 0 being the first day after the week rollover."""
        return int(self.seconds_of_week // SECONDS_PER_DAY)

    @property
    def week_seconds(self) -> Tuple[int, float]:
        return self.week, self.seconds_of_week

    def to_tai(self) -> TaiTime:
        return TaiTime(self.moment + timedelta(seconds=self.tai_offset))

    def to(self, scale: type) -> 'GnssTime':
        """Read the same moment in another GNSS scale."""
        return scale.from_tai(self)


class GpsTime(GnssTime):
    """GPS system time."""
    scale = "GPS"
    origin = datetime(1980, 1, 6)
    tai_offset = 19.0


class GalileoTime(GnssTime):
    """Galileo system time, whose week 0 is GPS week 1024."""
    scale = "GST"
    origin = datetime(1999, 8, 22)
    tai_offset = 19.0


class BdsTime(GnssTime):
    """BeiDou system time, equal to UTC at its origin."""
    scale = "BDT"
    origin = datetime(2006, 1, 1)
    tai_offset = 33.0


class GnssTimeSpan:
    """Interval between two moments, possibly read in different scales.

    Parameters
    ----------
    start, end : TimeSystem
        Bounds of the interval. ``end`` may precede ``start``, in which case
        the span is negative.
    """

    def __init__(self, start: TimeSystem, end: TimeSystem):
        self.start = start
        self.end = end

    @property
    def total_seconds(self) -> float:
        return self.end - self.start

    @property
    def total_minutes(self) -> float:
        return self.total_seconds / 60.0

    @property
    def total_hours(self) -> float:
        return self.total_seconds / 3600.0

    @property
    def total_days(self) -> float:
        return self.total_seconds / SECONDS_PER_DAY

    def contains(self, other: Union[TimeSystem, 'GnssTimeSpan']) -> bool:
        """Whether a moment or a whole span lies within this span (bounds included)."""
        low, high = sorted((self.start, self.end))
        if isinstance(other, GnssTimeSpan):
            return all(low <= t <= high for t in (other.start, other.end))
        return low <= other <= high

    def duration(self) -> 'GnssTimeSpan':
        """The span with its bounds in chronological order."""
        if self.end < self.start:
            return self.negate()
        return self

    def negate(self) -> 'GnssTimeSpan':
        return GnssTimeSpan(self.end, self.start)

    def __add__(self, other: Union['GnssTimeSpan', float, timedelta]) -> 'GnssTimeSpan':
        """Extend the end by another span or a number of seconds."""
        seconds = other.total_seconds if isinstance(other, GnssTimeSpan) else _seconds(other)
        return GnssTimeSpan(self.start, self.end + seconds)

    def __sub__(self, other: Union['GnssTimeSpan', float, timedelta]) -> 'GnssTimeSpan':
        seconds = other.total_seconds if isinstance(other, GnssTimeSpan) else _seconds(other)
        return GnssTimeSpan(self.start, self.end - seconds)

    def __repr__(self) -> str:
        return f"GnssTimeSpan({self.start!r}, {self.end!r})"
