"""
Coordinate Value Types.

This module defines the coordinate representations used across the
library. All of them are immutable; operations such as shifting or rotating
return new coordinates.

Types
-----
- :class:`CartesianCoord` - n-dimensional Cartesian tuple with a linear unit
- :class:`SpaceRectangularCoord` - geocentric (X, Y, Z)
- :class:`TopocentricRectCoord` - local (East, North, Up)
- :class:`ProjectedCoord` - map grid (northing, easting)
- :class:`GeographicCoord` - (latitude, longitude)
- :class:`GeodeticCoord` - (latitude, longitude, height)
- :class:`TopocentricPolarCoord` - (range, azimuth, elevation)
- :class:`SphericalCoord` - (radius, polar angle, azimuth)
- :class:`PolarCoord` - planar (range, azimuth)

Conventions
-----------
- Azimuths are measured clockwise from north (the x axis of planar
  surveying coordinates points north, the y axis east).
- Axis rotations rotate the reference frame (passive rotation), so a
  positive angle about Z turns the X axis towards Y.
- Linear values are stored in the unit given at construction and converted
  through :mod:`common.units` on request.
"""

from dataclasses import dataclass, field
from enum import Enum
import math
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple, Union

from common.errors import InvalidInputError
from common.units import units
from geospatial.angles import Angle, AngleKind, Latitude, Longitude, normalize_degrees

AngleLike = Union[Angle, float]


def _as_angle(value: AngleLike, cls=Angle) -> Angle:
    """Coerce a float (degrees) or angle into `cls`."""
    if isinstance(value, cls):
        return value
    if isinstance(value, Angle):
        return cls(value.degrees)
    return cls(float(value))


def _default_linear_unit() -> str:
    # Deferred import: settings pulls in the ellipsoid catalog
    from geospatial.settings import get_settings
    return get_settings().linear_unit


class HeightSystem(Enum):
    """Reference surface a height is measured from."""
    ELLIPSOIDAL = "ellipsoidal"
    ORTHOMETRIC = "orthometric"
    NORMAL = "normal"
    DYNAMIC = "dynamic"
    GEOPOTENTIAL_NUMBER = "geopotential_number"


# =========================================================================
# Cartesian family
# =========================================================================

class CartesianCoord:
    """An n-dimensional Cartesian coordinate.

    Parameters
    ----------
    *values : float
        Coordinate components. The dimension is fixed by their count.
    unit : str, optional
        Linear unit of the components (pint name). Defaults to the
        process-wide linear unit.

    Raises
    ------
    InvalidInputError
        If the unit is not a length unit.

    Examples
    --------
    >>> p = CartesianCoord(3.0, 4.0)
    >>> p.distance(CartesianCoord(0.0, 0.0))
    5.0
    """

    __slots__ = ("_values", "_unit")

    def __init__(self, *values: float, unit: Optional[str] = None):
        if len(values) == 1 and isinstance(values[0], (list, tuple)):
            values = tuple(values[0])
        self._values = tuple(float(v) for v in values)
        unit = unit or _default_linear_unit()
        if units.base_unit(unit) != "meter":
            raise InvalidInputError(f"'{unit}' is not a linear unit")
        self._unit = unit

    @property
    def dimension(self) -> int:
        return len(self._values)

    @property
    def unit(self) -> str:
        return self._unit

    @property
    def values(self) -> Tuple[float, ...]:
        return self._values

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, index: int) -> float:
        return self._values[index]

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)

    def _with_values(self, values: Sequence[float], unit: Optional[str] = None) -> 'CartesianCoord':
        return type(self)(*values, unit=unit or self._unit)

    def _check_dimension(self, other_dimension: int):
        if other_dimension != self.dimension:
            raise InvalidInputError(
                f"Dimension mismatch: {self.dimension} and {other_dimension}"
            )

    def in_unit(self, unit: str) -> Tuple[float, ...]:
        """Components expressed in `unit`."""
        factor = units.factor(self._unit) / units.factor(unit)
        return tuple(v * factor for v in self._values)

    def to_unit(self, unit: str) -> 'CartesianCoord':
        """The same point with components expressed in `unit`."""
        return self._with_values(self.in_unit(unit), unit)

    def distance(self, other: 'CartesianCoord') -> float:
        """Euclidean distance to `other`, in this coordinate's unit."""
        self._check_dimension(other.dimension)
        theirs = other.in_unit(self._unit)
        return math.sqrt(sum((a - b) ** 2 for a, b in zip(self._values, theirs)))

    def shift(self, *delta: Union[float, 'CartesianCoord']) -> 'CartesianCoord':
        """Translate by a coordinate or by one offset per component."""
        if len(delta) == 1 and isinstance(delta[0], CartesianCoord):
            offsets = delta[0].in_unit(self._unit)
        else:
            offsets = tuple(float(d) for d in delta)
        self._check_dimension(len(offsets))
        return self._with_values([a + b for a, b in zip(self._values, offsets)])

    def rescale(self, scale: float) -> 'CartesianCoord':
        """Multiply every component by a positive `scale`."""
        if scale <= 0:
            raise InvalidInputError(f"Scale must be positive, got {scale}")
        return self._with_values([v * scale for v in self._values])

    def rotate(self, theta: AngleLike, fixed_axis: int = 3) -> 'CartesianCoord':
        """Rotate the reference frame by `theta`.

        Two-dimensional coordinates rotate in their plane; three-dimensional
        ones about `fixed_axis` (1 = X, 2 = Y, 3 = Z). One-dimensional
        coordinates are returned unchanged.
        """
        rad = _as_angle(theta).radians
        c, s = math.cos(rad), math.sin(rad)

        if self.dimension == 1:
            return self
        if self.dimension == 2:
            x, y = self._values
            return self._with_values([x * c + y * s, -x * s + y * c])
        if self.dimension == 3:
            x, y, z = self._values
            if fixed_axis == 1:
                return self._with_values([x, y * c + z * s, -y * s + z * c])
            if fixed_axis == 2:
                return self._with_values([x * c - z * s, y, x * s + z * c])
            if fixed_axis == 3:
                return self._with_values([x * c + y * s, -x * s + y * c, z])
            raise InvalidInputError(f"Rotation axis must be 1, 2 or 3, got {fixed_axis}")
        raise InvalidInputError(f"Rotation is undefined for dimension {self.dimension}")

    def reflect(self, theta: AngleLike) -> 'CartesianCoord':
        """Mirror a planar coordinate across the line through the origin at `theta`."""
        if self.dimension != 2:
            raise InvalidInputError(f"Reflection needs a 2D coordinate, got {self.dimension}D")
        rad = 2 * _as_angle(theta).radians
        x, y = self._values
        return self._with_values([
            x * math.cos(rad) + y * math.sin(rad),
            x * math.sin(rad) - y * math.cos(rad),
        ])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CartesianCoord):
            return NotImplemented
        return type(self) is type(other) and self._values == other._values and self._unit == other._unit

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._values, self._unit))

    def __repr__(self) -> str:
        body = ", ".join(repr(v) for v in self._values)
        return f"{type(self).__name__}({body}, unit={self._unit!r})"

    def __str__(self) -> str:
        return "[" + ", ".join(str(v) for v in self._values) + "]"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": type(self).__name__, "values": list(self._values), "unit": self._unit}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CartesianCoord':
        return cls(*data["values"], unit=data.get("unit"))


class SpaceRectangularCoord(CartesianCoord):
    """Geocentric Cartesian coordinate (X, Y, Z)."""

    __slots__ = ()

    def __init__(self, x: float, y: float, z: float, unit: Optional[str] = None):
        super().__init__(x, y, z, unit=unit)

    @property
    def x(self) -> float:
        return self._values[0]

    @property
    def y(self) -> float:
        return self._values[1]

    @property
    def z(self) -> float:
        return self._values[2]


class TopocentricRectCoord(CartesianCoord):
    """Local horizon coordinate (East, North, Up)."""

    __slots__ = ()

    def __init__(self, east: float, north: float, up: float, unit: Optional[str] = None):
        super().__init__(east, north, up, unit=unit)

    @property
    def east(self) -> float:
        return self._values[0]

    @property
    def north(self) -> float:
        return self._values[1]

    @property
    def up(self) -> float:
        return self._values[2]

    def to_polar(self) -> 'TopocentricPolarCoord':
        """Slant range, azimuth and elevation of this vector."""
        e, n, u = self._values
        horizontal = math.hypot(e, n)
        azimuth = Angle.from_radians(math.atan2(e, n)).normalize()
        elevation = Angle.from_radians(math.atan2(u, horizontal))
        return TopocentricPolarCoord(math.sqrt(horizontal ** 2 + u ** 2), azimuth, elevation, unit=self._unit)


class ProjectedCoord(CartesianCoord):
    """Map grid coordinate (northing, easting)."""

    __slots__ = ()

    def __init__(self, northing: float, easting: float, unit: Optional[str] = None):
        super().__init__(northing, easting, unit=unit)

    @property
    def northing(self) -> float:
        return self._values[0]

    @property
    def easting(self) -> float:
        return self._values[1]


# =========================================================================
# Angular coordinates
# =========================================================================

@dataclass(frozen=True)
class GeographicCoord:
    """Latitude and longitude on an ellipsoid.

    Floats are accepted and read as decimal degrees.
    """
    latitude: Latitude
    longitude: Longitude

    def __post_init__(self):
        object.__setattr__(self, "latitude", _as_angle(self.latitude, Latitude))
        object.__setattr__(self, "longitude", _as_angle(self.longitude, Longitude))

    @classmethod
    def from_degrees(cls, lat_deg: float, lon_deg: float) -> 'GeographicCoord':
        return cls(Latitude(lat_deg), Longitude(lon_deg))

    @classmethod
    def from_radians(cls, lat_rad: float, lon_rad: float) -> 'GeographicCoord':
        return cls(Latitude.from_radians(lat_rad), Longitude.from_radians(lon_rad))

    def to_degrees(self) -> Tuple[float, float]:
        """(latitude, longitude) in decimal degrees."""
        return self.latitude.degrees, self.longitude.degrees

    def to_radians(self) -> Tuple[float, float]:
        return self.latitude.radians, self.longitude.radians

    def __str__(self) -> str:
        return f"B:{self.latitude}, L:{self.longitude}"

    def to_dict(self) -> Dict[str, Any]:
        return {"latitude": self.latitude.to_dict(), "longitude": self.longitude.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GeographicCoord':
        return cls(Angle.from_dict(data["latitude"]), Angle.from_dict(data["longitude"]))


@dataclass(frozen=True)
class GeodeticCoord:
    """Latitude, longitude and height above a reference surface.

    Attributes
    ----------
    latitude : Latitude
    longitude : Longitude
    height : float
        Height in meters.
    height_system : HeightSystem
        Surface the height refers to (ellipsoidal by default).
    """
    latitude: Latitude
    longitude: Longitude
    height: float = 0.0
    height_system: HeightSystem = HeightSystem.ELLIPSOIDAL

    def __post_init__(self):
        object.__setattr__(self, "latitude", _as_angle(self.latitude, Latitude))
        object.__setattr__(self, "longitude", _as_angle(self.longitude, Longitude))
        object.__setattr__(self, "height", float(self.height))

    @classmethod
    def from_degrees(cls, lat_deg: float, lon_deg: float, height: float = 0.0,
                     height_system: HeightSystem = HeightSystem.ELLIPSOIDAL) -> 'GeodeticCoord':
        return cls(Latitude(lat_deg), Longitude(lon_deg), height, height_system)

    @property
    def geographic(self) -> GeographicCoord:
        return GeographicCoord(self.latitude, self.longitude)

    def __str__(self) -> str:
        return f"B:{self.latitude}, L:{self.longitude}, H:{self.height}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude.to_dict(),
            "longitude": self.longitude.to_dict(),
            "height": self.height,
            "height_system": self.height_system.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GeodeticCoord':
        return cls(
            Angle.from_dict(data["latitude"]),
            Angle.from_dict(data["longitude"]),
            data.get("height", 0.0),
            HeightSystem(data.get("height_system", HeightSystem.ELLIPSOIDAL.value)),
        )


@dataclass(frozen=True)
class TopocentricPolarCoord:
    """Slant range, azimuth (clockwise from north) and elevation."""
    range: float
    azimuth: Angle
    elevation: Angle
    unit: str = "meter"

    def __post_init__(self):
        if self.range < 0:
            raise InvalidInputError(f"Range must not be negative, got {self.range}")
        object.__setattr__(self, "azimuth", _as_angle(self.azimuth))
        object.__setattr__(self, "elevation", _as_angle(self.elevation))

    def to_rect(self) -> TopocentricRectCoord:
        """East, north and up components of this vector."""
        az = self.azimuth.radians
        el = self.elevation.radians
        horizontal = self.range * math.cos(el)
        return TopocentricRectCoord(
            horizontal * math.sin(az),
            horizontal * math.cos(az),
            self.range * math.sin(el),
            unit=self.unit
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "range": self.range,
            "azimuth": self.azimuth.to_dict(),
            "elevation": self.elevation.to_dict(),
            "unit": self.unit,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TopocentricPolarCoord':
        return cls(data["range"], Angle.from_dict(data["azimuth"]),
                   Angle.from_dict(data["elevation"]), data.get("unit", "meter"))


@dataclass(frozen=True)
class SphericalCoord:
    """Radius, polar angle (from +Z) and azimuth (from +X towards +Y)."""
    radius: float
    polar: Angle
    azimuth: Angle
    unit: str = "meter"

    def __post_init__(self):
        if self.radius < 0:
            raise InvalidInputError(f"Radius must not be negative, got {self.radius}")
        object.__setattr__(self, "polar", _as_angle(self.polar))
        object.__setattr__(self, "azimuth", _as_angle(self.azimuth))

    def to_cartesian(self) -> SpaceRectangularCoord:
        theta = self.polar.radians
        phi = self.azimuth.radians
        return SpaceRectangularCoord(
            self.radius * math.sin(theta) * math.cos(phi),
            self.radius * math.sin(theta) * math.sin(phi),
            self.radius * math.cos(theta),
            unit=self.unit
        )

    @classmethod
    def from_cartesian(cls, coord: CartesianCoord) -> 'SphericalCoord':
        if coord.dimension != 3:
            raise InvalidInputError(f"Spherical coordinates need 3 components, got {coord.dimension}")
        x, y, z = coord.values
        radius = math.sqrt(x * x + y * y + z * z)
        polar = Angle.from_radians(math.atan2(math.hypot(x, y), z))
        azimuth = Angle(normalize_degrees(math.degrees(math.atan2(y, x)), AngleKind.PLAIN))
        return cls(radius, polar, azimuth, coord.unit)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "radius": self.radius,
            "polar": self.polar.to_dict(),
            "azimuth": self.azimuth.to_dict(),
            "unit": self.unit,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SphericalCoord':
        return cls(data["radius"], Angle.from_dict(data["polar"]),
                   Angle.from_dict(data["azimuth"]), data.get("unit", "meter"))


@dataclass(frozen=True)
class PolarCoord:
    """Planar range and azimuth (clockwise from the x/north axis)."""
    range: float
    azimuth: Angle
    unit: str = "meter"

    def __post_init__(self):
        if self.range < 0:
            raise InvalidInputError(f"Range must not be negative, got {self.range}")
        object.__setattr__(self, "azimuth", _as_angle(self.azimuth))

    def to_cartesian(self) -> CartesianCoord:
        """Planar (x north, y east) coordinate."""
        az = self.azimuth.radians
        return CartesianCoord(self.range * math.cos(az), self.range * math.sin(az), unit=self.unit)

    @classmethod
    def from_cartesian(cls, coord: CartesianCoord) -> 'PolarCoord':
        if coord.dimension != 2:
            raise InvalidInputError(f"Polar coordinates need 2 components, got {coord.dimension}")
        x, y = coord.values
        azimuth = Angle.from_radians(math.atan2(y, x)).normalize()
        return cls(math.hypot(x, y), azimuth, coord.unit)

    def to_dict(self) -> Dict[str, Any]:
        return {"range": self.range, "azimuth": self.azimuth.to_dict(), "unit": self.unit}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PolarCoord':
        return cls(data["range"], Angle.from_dict(data["azimuth"]), data.get("unit", "meter"))
