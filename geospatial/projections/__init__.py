"""
Map projections.

Every projection maps geodetic coordinates to the plane with
``forward(lat, lon) -> (northing, easting)`` and back with
``reverse(northing, easting) -> (Latitude, Longitude)``.

This package provides:
- Transverse Mercator, UTM and Gauss-Krüger zoned grids
- MGRS grid references
- Lambert Conformal Conic and Albers Equal-Area conics
- Polar Stereographic and UPS
- Mercator, Web Mercator and Cassini-Soldner
- Tissot indicatrix distortion analysis
"""

from geospatial.projections.base import (
    MapProjection,
    ProjectionParameter,
    ProjectionParameters,
    ProjectionSurface,
    ProjectionProperty,
    ProjectionOrientation,
    TissotIndicatrix,
    compute_tissot_indicatrix,
)

from geospatial.projections.transverse_mercator import TransverseMercator

from geospatial.projections.utm import (
    UTM,
    UTMCoord,
    to_utm,
    from_utm,
    utm_latitude_band,
    utm_longitude_zone,
    utm_central_meridian,
    utm_min_latitude,
    utm_max_latitude,
    utm_min_longitude,
    utm_max_longitude,
    utm_min_northing,
    utm_max_northing,
)

from geospatial.projections.mgrs import (
    MGRSCoord,
    parse_mgrs,
    to_mgrs,
    from_mgrs,
    utm_to_mgrs,
    mgrs_to_utm,
)

from geospatial.projections.gauss_krueger import (
    GaussKrueger,
    gk_zone_number,
    gk_central_meridian,
)

from geospatial.projections.lambert import LambertConformalConic2SP
from geospatial.projections.albers import AlbersEqualArea
from geospatial.projections.polar_stereographic import PolarStereographic, UPS, ups_band
from geospatial.projections.mercator import Mercator, WebMercator
from geospatial.projections.cassini import CassiniSoldner
from geospatial.projections.selection import select_projection

__all__ = [
    # Framework
    "MapProjection",
    "ProjectionParameter",
    "ProjectionParameters",
    "ProjectionSurface",
    "ProjectionProperty",
    "ProjectionOrientation",
    "TissotIndicatrix",
    "compute_tissot_indicatrix",
    # Transverse Mercator family
    "TransverseMercator",
    "UTM",
    "UTMCoord",
    "to_utm",
    "from_utm",
    "utm_latitude_band",
    "utm_longitude_zone",
    "utm_central_meridian",
    "utm_min_latitude",
    "utm_max_latitude",
    "utm_min_longitude",
    "utm_max_longitude",
    "utm_min_northing",
    "utm_max_northing",
    "GaussKrueger",
    "gk_zone_number",
    "gk_central_meridian",
    # MGRS
    "MGRSCoord",
    "parse_mgrs",
    "to_mgrs",
    "from_mgrs",
    "utm_to_mgrs",
    "mgrs_to_utm",
    # Conics
    "LambertConformalConic2SP",
    "AlbersEqualArea",
    # Azimuthal
    "PolarStereographic",
    "UPS",
    "ups_band",
    # Cylindrical
    "Mercator",
    "WebMercator",
    "CassiniSoldner",
    # Selection
    "select_projection",
]
