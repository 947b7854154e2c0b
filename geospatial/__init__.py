"""
Geospatial Module: ellipsoidal geodesy.

All Earth-surface calculations of the library originate from this module.

This module provides:
- Angles, latitudes and longitudes with sexagesimal encodings
- Reference ellipsoids, their radii of curvature and normal gravity
- Coordinate value types and conversions (geodetic, geocentric, topocentric)
- Map projections with distortion analysis
- Direct and inverse geodesic problem solvers
- Datum transformations and parameter estimation
- Reduction of ground observations to the ellipsoid
- Geoid undulation interpolation
- GNSS time scales, leap seconds and Julian dates
- Geodetic datums, prime meridians and vertical datums
"""

from geospatial.angles import (
    Angle,
    Latitude,
    Longitude,
    AngleKind,
    DataStyle,
    angular_difference,
    wrap_longitude_difference,
)

from geospatial.ellipsoid import (
    Ellipsoid,
    ELLIPSOIDS,
    WGS84,
    GRS80,
    CGCS2000,
    WGS72,
    PZ90,
    get_ellipsoid,
)

from geospatial.settings import (
    GeodeticSettings,
    get_settings,
    set_settings,
    override_settings,
    default_ellipsoid,
)

from geospatial.coordinates import (
    HeightSystem,
    CartesianCoord,
    SpaceRectangularCoord,
    TopocentricRectCoord,
    ProjectedCoord,
    GeographicCoord,
    GeodeticCoord,
    TopocentricPolarCoord,
    SphericalCoord,
    PolarCoord,
)

from geospatial.coordinate_models import (
    geodetic_to_ecef,
    ecef_to_geodetic,
    geodetic_to_enu,
    enu_to_geodetic,
    geodetic_to_ecef_batch,
    to_space_rectangular,
    to_geodetic,
    to_topocentric,
    from_topocentric,
)

from geospatial.geo_point import GeoPoint
from geospatial.arcs import GeoArc, Meridian, Parallel, meridian_length, trapezoid_area

from geospatial.geodesic import (
    DirectResult,
    InverseResult,
    GeodesicSolution,
    Vincenty,
    Bessel,
    GaussMidLatitude,
    Haversine,
    Karney,
    geodesic_inverse,
    geodesic_direct,
    geodesic_distance_batch,
)

from geospatial.transformations import (
    TransParameters,
    TRANSFORMATION_PARAMETERS,
    get_parameters,
    AffineTransform,
    DatumTransform,
    Helmert,
    BursaWolf,
    MolodenskyBadekas,
    molodensky,
    molodensky_shift,
    gauss_jordan_solve,
    resolve_parameters,
)

from geospatial.ground_reduction import (
    vertical_deflection_correction,
    elevation_difference_correction,
    normal_section_to_geodesic,
    zenith_to_surface,
    distance_to_surface,
    azimuth_from_astronomic,
    azimuth_from_deflection,
)

from geospatial.geoid import GridCell, GeoidModel, ArrayGeoidModel

from geospatial.time_systems import (
    TimeSystem,
    UtcTime,
    TaiTime,
    JulianDate,
    GnssTime,
    GpsTime,
    GalileoTime,
    BdsTime,
    GnssTimeSpan,
    tai_minus_utc,
)

from geospatial.datum import (
    PrimeMeridian,
    PRIME_MERIDIANS,
    GREENWICH,
    get_prime_meridian,
    EllipsoidOrientation,
    VerticalDeviation,
    GeodeticOrigin,
    GEODETIC_ORIGINS,
    get_geodetic_origin,
    SurfaceType,
    VerticalDatum,
    VERTICAL_DATUMS,
    get_vertical_datum,
    CoordinateDatum,
    GeocentricDatum,
    LocalDatum,
    GEODETIC_DATUMS,
    get_datum,
)

from geospatial.projections import (
    MapProjection,
    ProjectionParameters,
    TransverseMercator,
    UTM,
    GaussKrueger,
    LambertConformalConic2SP,
    AlbersEqualArea,
    PolarStereographic,
    UPS,
    Mercator,
    WebMercator,
    CassiniSoldner,
    compute_tissot_indicatrix,
    select_projection,
)

__all__ = [
    # Angles
    "Angle",
    "Latitude",
    "Longitude",
    "AngleKind",
    "DataStyle",
    "angular_difference",
    "wrap_longitude_difference",
    # Ellipsoids
    "Ellipsoid",
    "ELLIPSOIDS",
    "WGS84",
    "GRS80",
    "CGCS2000",
    "WGS72",
    "PZ90",
    "get_ellipsoid",
    # Settings
    "GeodeticSettings",
    "get_settings",
    "set_settings",
    "override_settings",
    "default_ellipsoid",
    # Coordinates
    "HeightSystem",
    "CartesianCoord",
    "SpaceRectangularCoord",
    "TopocentricRectCoord",
    "ProjectedCoord",
    "GeographicCoord",
    "GeodeticCoord",
    "TopocentricPolarCoord",
    "SphericalCoord",
    "PolarCoord",
    "geodetic_to_ecef",
    "ecef_to_geodetic",
    "geodetic_to_enu",
    "enu_to_geodetic",
    "geodetic_to_ecef_batch",
    "to_space_rectangular",
    "to_geodetic",
    "to_topocentric",
    "from_topocentric",
    # Points and arcs
    "GeoPoint",
    "GeoArc",
    "Meridian",
    "Parallel",
    "meridian_length",
    "trapezoid_area",
    # Geodesic problem
    "DirectResult",
    "InverseResult",
    "GeodesicSolution",
    "Vincenty",
    "Bessel",
    "GaussMidLatitude",
    "Haversine",
    "Karney",
    "geodesic_inverse",
    "geodesic_direct",
    "geodesic_distance_batch",
    # Transformations
    "TransParameters",
    "TRANSFORMATION_PARAMETERS",
    "get_parameters",
    "AffineTransform",
    "DatumTransform",
    "Helmert",
    "BursaWolf",
    "MolodenskyBadekas",
    "molodensky",
    "molodensky_shift",
    "gauss_jordan_solve",
    "resolve_parameters",
    # Ground reductions
    "vertical_deflection_correction",
    "elevation_difference_correction",
    "normal_section_to_geodesic",
    "zenith_to_surface",
    "distance_to_surface",
    "azimuth_from_astronomic",
    "azimuth_from_deflection",
    # Geoid
    "GridCell",
    "GeoidModel",
    "ArrayGeoidModel",
    # Time systems
    "TimeSystem",
    "UtcTime",
    "TaiTime",
    "JulianDate",
    "GnssTime",
    "GpsTime",
    "GalileoTime",
    "BdsTime",
    "GnssTimeSpan",
    "tai_minus_utc",
    # Datums
    "PrimeMeridian",
    "PRIME_MERIDIANS",
    "GREENWICH",
    "get_prime_meridian",
    "EllipsoidOrientation",
    "VerticalDeviation",
    "GeodeticOrigin",
    "GEODETIC_ORIGINS",
    "get_geodetic_origin",
    "SurfaceType",
    "VerticalDatum",
    "VERTICAL_DATUMS",
    "get_vertical_datum",
    "CoordinateDatum",
    "GeocentricDatum",
    "LocalDatum",
    "GEODETIC_DATUMS",
    "get_datum",
    # Projections
    "MapProjection",
    "ProjectionParameters",
    "TransverseMercator",
    "UTM",
    "GaussKrueger",
    "LambertConformalConic2SP",
    "AlbersEqualArea",
    "PolarStereographic",
    "UPS",
    "Mercator",
    "WebMercator",
    "CassiniSoldner",
    "compute_tissot_indicatrix",
    "select_projection",
]
