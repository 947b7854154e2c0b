"""
Process-wide Defaults.

Computational functions take an explicit ``ellipsoid`` argument; the
defaults kept here are only consulted when the caller leaves it out
(projection axes, geodesic solver ellipsoid, units of new coordinates).

Thread Safety
-------------
Reads and replacements are guarded by a lock. Settings objects are
immutable, so a reader always sees a consistent snapshot.

Examples
--------
>>> from geospatial.ellipsoid import WGS84
>>> with override_settings(ellipsoid=WGS84):
...     get_settings().ellipsoid.name
'WGS84'
"""

from contextlib import contextmanager
from dataclasses import dataclass, replace
import threading
from typing import Iterator

import pint

from common.logging_config import get_logger
from common.units import BASE_UNITS, units
from geospatial.ellipsoid import CGCS2000, Ellipsoid

logger = get_logger(__name__)


@dataclass(frozen=True)
class GeodeticSettings:
    """Default ellipsoid and units.

    Attributes
    ----------
    ellipsoid : Ellipsoid
        Ellipsoid used when none is passed explicitly.
    linear_unit : str
        pint unit name for new Cartesian coordinates.
    angular_unit : str
        pint unit name in which angles are reported by default.
    """
    ellipsoid: Ellipsoid = CGCS2000
    linear_unit: str = "meter"
    angular_unit: str = "degree"

    def __post_init__(self):
        # Fails with a pint error for unknown or wrong-dimension units
        units.validate_dimensionality(units.quantity(1.0, self.linear_unit), "[length]")
        if units.base_unit(self.angular_unit) != BASE_UNITS["[angle]"]:
            raise pint.DimensionalityError(self.angular_unit, "[angle]")


_settings = GeodeticSettings()
_settings_lock = threading.Lock()


def get_settings() -> GeodeticSettings:
    """Return the current process-wide settings."""
    with _settings_lock:
        return _settings


def set_settings(settings: GeodeticSettings) -> GeodeticSettings:
    """Replace the process-wide settings.

    Returns
    -------
    GeodeticSettings
        The settings that were active before the call.
    """
    global _settings
    with _settings_lock:
        previous = _settings
        _settings = settings
    logger.debug(f"Default ellipsoid set to {settings.ellipsoid}")
    return previous


def default_ellipsoid() -> Ellipsoid:
    """Shorthand for ``get_settings().ellipsoid``."""
    return get_settings().ellipsoid


@contextmanager
def override_settings(**changes) -> Iterator[GeodeticSettings]:
    """Temporarily replace individual settings fields.

    Parameters
    ----------
    **changes
        Fields of :class:`GeodeticSettings` to override.
    """
    previous = set_settings(replace(get_settings(), **changes))
    try:
        yield get_settings()
    finally:
        set_settings(previous)
