"""
Geodesic Problem Solvers.

The direct problem finds the end point and back azimuth of a geodesic given
its start point, length and initial azimuth. The inverse problem finds the
length and both azimuths of the geodesic joining two points.

Solvers
-------
- :class:`Vincenty` - nested-equation iteration on the auxiliary sphere.
  Sub-millimetre for all lines except nearly antipodal ones.
- :class:`Bessel` - Bessel's series solution with the reduced latitude.
- :class:`GaussMidLatitude` - Gauss mid-latitude formulas. Short lines only
  (a few tens of kilometres).
- :class:`Haversine` - great circle on a sphere of radius 6372.8 km.
- :class:`Karney` - GeographicLib algorithms through ``pyproj.Geod``; valid
  for every configuration including antipodal points, used as reference.

All bearings are :class:`Angle` values in [0°, 360°). The inverse bearing
is the azimuth at the end point pointing back to the start.

References
----------
- Vincenty, T. (1975). Direct and inverse solutions of geodesics on the
  ellipsoid. Survey Review, 23(176), 88-93.
- Kong, X. (2005). Foundation of Geodesy (2nd ed.), ch. 4.
- Karney, C.F.F. (2013). Algorithms for geodesics. J. Geodesy, 87(1), 43-55.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import math
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray
from pyproj import Geod

from common.constants import ANGLE_EPSILON, EPSILON4, EPSILON5, MAX_ITERATIONS
from common.errors import ConvergenceError
from common.logging_config import ConvergenceLog, get_logger
from geospatial.angles import Angle, Latitude, Longitude, wrap_longitude_difference
from geospatial.arcs import GeoArc, Meridian
from geospatial.ellipsoid import Ellipsoid
from geospatial.geo_point import GeoPoint
from geospatial.projections.base import AngleLike
from geospatial.settings import default_ellipsoid

logger = get_logger(__name__)

VINCENTY_INVERSE_ITERATIONS = 20
VINCENTY_TOLERANCE = 1e-13
HAVERSINE_RADIUS = 6372.8e3


@dataclass(frozen=True)
class DirectResult:
    """Solution of the direct problem.

    Attributes
    ----------
    end : GeoPoint
        End point on the start point's ellipsoid.
    inverse_bearing : Angle
        Azimuth at the end point towards the start.
    """
    end: GeoPoint
    inverse_bearing: Angle


@dataclass(frozen=True)
class InverseResult:
    """Solution of the inverse problem.

    Attributes
    ----------
    distance : float
        Geodesic length in meters.
    bearing : Angle
        Azimuth at the start point towards the end.
    inverse_bearing : Angle
        Azimuth at the end point towards the start.
    """
    distance: float
    bearing: Angle
    inverse_bearing: Angle


def _bearing(radians: float) -> Angle:
    """Azimuth in [0°, 360°); NaN stays NaN."""
    degrees = math.degrees(radians) % 360.0
    return Angle(0.0 if degrees == 360.0 else degrees)


def _radians(value: AngleLike) -> float:
    return value.radians if isinstance(value, Angle) else math.radians(value)


def _end_point(start: GeoPoint, lat_rad: float, dlon_rad: float) -> GeoPoint:
    return GeoPoint(
        Latitude.from_radians(lat_rad),
        Longitude(start.longitude.degrees + math.degrees(dlon_rad)),
        start.ellipsoid,
    )


def _coincident(start: GeoPoint, end: GeoPoint) -> bool:
    return (
        abs(start.latitude.radians - end.latitude.radians) < ANGLE_EPSILON
        and abs(wrap_longitude_difference(end.longitude, start.longitude).radians) < ANGLE_EPSILON
    )


_COINCIDENT = InverseResult(0.0, Angle.NAN, Angle.NAN)


class GeodesicSolution(ABC):
    """Abstract solver of the direct and inverse geodesic problems.

    Points carry their ellipsoid; the start point's ellipsoid is used.
    """

    name: str = "geodesic"

    @abstractmethod
    def direct(self, start: GeoPoint, distance: float, bearing: AngleLike) -> DirectResult:
        """End point and inverse bearing of a geodesic.

        Parameters
        ----------
        start : GeoPoint
        distance : float
            Length in meters.
        bearing : Angle or float
            Azimuth at the start (floats are decimal degrees).
        """
        pass

    @abstractmethod
    def inverse(self, start: GeoPoint, end: GeoPoint) -> InverseResult:
        """Distance, bearing and inverse bearing between two points."""
        pass

    def end_point(self, start: GeoPoint, distance: float, bearing: AngleLike) -> GeoPoint:
        return self.direct(start, distance, bearing).end

    def inverse_bearing(self, start: GeoPoint, distance: float, bearing: AngleLike) -> Angle:
        return self.direct(start, distance, bearing).inverse_bearing

    def distance(self, start: GeoPoint, end: GeoPoint) -> float:
        return self.inverse(start, end).distance

    def bearing(self, start: GeoPoint, end: GeoPoint) -> Angle:
        return self.inverse(start, end).bearing

    def inverse_bearing_between(self, start: GeoPoint, end: GeoPoint) -> Angle:
        return self.inverse(start, end).inverse_bearing

    def geodesic(self, start: GeoPoint, end: GeoPoint) -> GeoArc:
        """The geodesic between two points as an arc."""
        result = self.inverse(start, end)
        return GeoArc(start, end, result.distance, result.bearing, result.inverse_bearing)

    def geodesic_from(self, start: GeoPoint, distance: float, bearing: AngleLike) -> GeoArc:
        """The geodesic of given length and initial azimuth as an arc."""
        result = self.direct(start, distance, bearing)
        return GeoArc(start, result.end, distance, _bearing(_radians(bearing)), result.inverse_bearing)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# =========================================================================
# Vincenty
# =========================================================================

def _vincenty_ab(u2: float) -> Tuple[float, float]:
    A = 1 + u2 / 16384 * (4096 + u2 * (-768 + u2 * (320 - 175 * u2)))
    B = u2 / 1024 * (256 + u2 * (-128 + u2 * (74 - 47 * u2)))
    return A, B


def _vincenty_delta_sigma(B: float, sin_s: float, cos_s: float, cos2sm: float) -> float:
    cos2sm2 = cos2sm * cos2sm
    return B * sin_s * (
        cos2sm + B / 4 * (
            cos_s * (-1 + 2 * cos2sm2)
            - B / 6 * cos2sm * (-3 + 4 * sin_s * sin_s) * (-3 + 4 * cos2sm2)
        )
    )


class Vincenty(GeodesicSolution):
    """Vincenty's direct and inverse formulae.

    Notes
    -----
    The inverse iteration is limited to 20 rounds. When it does not settle
    (nearly antipodal points, or points on one meridian where the longitude
    iteration is degenerate) the distance of the last round is returned with
    meridian bearings: 180°/0° when the start lies north of the end, 0°/180°
    when south, NaN when level. Such fallbacks are recorded in the
    :class:`ConvergenceLog` under ``"vincenty.inverse"``.

    Examples
    --------
    >>> from geospatial.ellipsoid import WGS84
    >>> p1 = GeoPoint.from_degrees(0.0, 0.0, WGS84)
    >>> p2 = GeoPoint.from_degrees(0.0, 1.0, WGS84)
    >>> round(Vincenty().distance(p1, p2), 3)
    111319.491
    """

    name = "vincenty"

    def direct(self, start: GeoPoint, distance: float, bearing: AngleLike) -> DirectResult:
        ellipsoid = start.ellipsoid
        a, b, f = ellipsoid.a, ellipsoid.b, ellipsoid.f

        alpha1 = _radians(bearing)
        sin_a1, cos_a1 = math.sin(alpha1), math.cos(alpha1)

        tan_u1 = (1 - f) * math.tan(start.latitude.radians)
        cos_u1 = 1 / math.sqrt(1 + tan_u1 * tan_u1)
        sin_u1 = tan_u1 * cos_u1

        sigma1 = math.atan2(tan_u1, cos_a1)
        sin_alpha = cos_u1 * sin_a1
        cos2_alpha = 1 - sin_alpha * sin_alpha
        A, B = _vincenty_ab(cos2_alpha * (a * a - b * b) / (b * b))

        s_over_ba = distance / (b * A)
        sigma = s_over_ba
        for iteration in range(1, MAX_ITERATIONS + 1):
            cos2sm = math.cos(2 * sigma1 + sigma)
            updated = s_over_ba + _vincenty_delta_sigma(B, math.sin(sigma), math.cos(sigma), cos2sm)
            residual = abs(updated - sigma)
            sigma = updated
            if residual < VINCENTY_TOLERANCE:
                break
        else:
            ConvergenceLog().record("vincenty.direct", MAX_ITERATIONS, residual, False)
            raise ConvergenceError(
                "Vincenty direct solution did not converge",
                iterations=MAX_ITERATIONS,
                context={"distance": distance, "bearing": math.degrees(alpha1)}
            )

        sin_s, cos_s = math.sin(sigma), math.cos(sigma)
        cos2sm = math.cos(2 * sigma1 + sigma)

        x = sin_u1 * sin_s - cos_u1 * cos_s * cos_a1
        phi2 = math.atan2(
            sin_u1 * cos_s + cos_u1 * sin_s * cos_a1,
            (1 - f) * math.sqrt(sin_alpha * sin_alpha + x * x)
        )
        lam = math.atan2(sin_s * sin_a1, cos_u1 * cos_s - sin_u1 * sin_s * cos_a1)
        C = f / 16 * cos2_alpha * (4 + f * (4 - 3 * cos2_alpha))
        L = lam - (1 - C) * f * sin_alpha * (
            sigma + C * sin_s * (cos2sm + C * cos_s * (-1 + 2 * cos2sm * cos2sm))
        )
        alpha2 = math.atan2(sin_alpha, -x)

        return DirectResult(_end_point(start, phi2, L), _bearing(alpha2 + math.pi))

    def inverse(self, start: GeoPoint, end: GeoPoint) -> InverseResult:
        if _coincident(start, end):
            return _COINCIDENT

        ellipsoid = start.ellipsoid
        a, b, f = ellipsoid.a, ellipsoid.b, ellipsoid.f
        phi1, phi2 = start.latitude.radians, end.latitude.radians
        L = wrap_longitude_difference(end.longitude, start.longitude).radians

        u1 = math.atan((1 - f) * math.tan(phi1))
        u2 = math.atan((1 - f) * math.tan(phi2))
        sin_u1, cos_u1 = math.sin(u1), math.cos(u1)
        sin_u2, cos_u2 = math.sin(u2), math.cos(u2)

        lam = L
        converged = False
        change = math.nan
        for iteration in range(VINCENTY_INVERSE_ITERATIONS):
            previous = lam
            sin_l, cos_l = math.sin(lam), math.cos(lam)

            sin2_s = (cos_u2 * sin_l) ** 2 + (cos_u1 * sin_u2 - sin_u1 * cos_u2 * cos_l) ** 2
            sin_s = math.sqrt(sin2_s)
            cos_s = sin_u1 * sin_u2 + cos_u1 * cos_u2 * cos_l
            sigma = math.atan2(sin_s, cos_s)

            sin_alpha = 0.0 if sin2_s == 0 else cos_u1 * cos_u2 * sin_l / sin_s
            cos2_alpha = 1 - sin_alpha * sin_alpha
            cos2sm = 0.0 if cos2_alpha == 0 else cos_s - 2 * sin_u1 * sin_u2 / cos2_alpha

            A, B = _vincenty_ab(cos2_alpha * (a * a - b * b) / (b * b))
            delta_sigma = _vincenty_delta_sigma(B, sin_s, cos_s, cos2sm)

            C = f / 16 * cos2_alpha * (4 + f * (4 - 3 * cos2_alpha))
            lam = L + (1 - C) * f * sin_alpha * (
                sigma + C * sin_s * (cos2sm + C * cos_s * (-1 + 2 * cos2sm * cos2sm))
            )

            if lam != 0.0:
                change = abs((lam - previous) / lam)
                if iteration > 1 and change < VINCENTY_TOLERANCE:
                    converged = True
                    break

        distance = b * A * (sigma - delta_sigma)

        if not converged:
            logger.debug(
                f"Vincenty inverse did not converge in {VINCENTY_INVERSE_ITERATIONS} "
                f"iterations; using meridian bearings"
            )
            ConvergenceLog().record(
                "vincenty.inverse", VINCENTY_INVERSE_ITERATIONS, change, False,
                {"start": str(start), "end": str(end)}
            )
            if phi1 > phi2:
                return InverseResult(distance, Angle(180.0), Angle(0.0))
            if phi1 < phi2:
                return InverseResult(distance, Angle(0.0), Angle(180.0))
            return InverseResult(distance, Angle.NAN, Angle.NAN)

        sin_l, cos_l = math.sin(lam), math.cos(lam)
        alpha1 = math.atan2(cos_u2 * sin_l, cos_u1 * sin_u2 - sin_u1 * cos_u2 * cos_l)
        alpha2 = math.atan2(cos_u1 * sin_l, -sin_u1 * cos_u2 + cos_u1 * sin_u2 * cos_l)
        return InverseResult(distance, _bearing(alpha1), _bearing(alpha2 + math.pi))


# =========================================================================
# Bessel
# =========================================================================

def _bessel_distance_coefficients(ep2: float, cos2_m: float, a: float) -> Tuple[float, float, float]:
    """α, β, γ of the arc-length series (KK = e'²cos²m)."""
    kk = ep2 * cos2_m
    alpha = math.sqrt(1 + ep2) * (1 - kk / 4 + 7 * kk * kk / 64 - 15 * kk ** 3 / 256) / a
    beta = kk / 4 - kk * kk / 8 + 37 * kk ** 3 / 512
    gamma = kk * kk * (1 - kk) / 128
    return alpha, beta, gamma


def _bessel_longitude_coefficients(e2: float, cos2_m: float) -> Tuple[float, float, float]:
    """α', β', γ' of the longitude series (KK = e²cos²m)."""
    kk = e2 * cos2_m
    alpha = (e2 / 2 + e2 * e2 / 8 + e2 ** 3 / 16
             - e2 * (1 + e2) * kk / 16 + 3 * e2 * kk * kk / 128)
    beta = e2 * (1 + e2) * kk / 16 - e2 * kk * kk / 32
    gamma = e2 * kk * kk / 256
    return alpha, beta, gamma


def _series(alpha: float, beta: float, gamma: float, sigma: float, M: float) -> float:
    return (
        alpha * sigma
        + beta * math.sin(sigma) * math.cos(2 * M + sigma)
        + gamma * math.sin(2 * sigma) * math.cos(4 * M + 2 * sigma)
    )


class Bessel(GeodesicSolution):
    """Bessel's solution with reduced latitudes.

    Iterations (arc length in the direct problem, longitude on the
    auxiliary sphere in the inverse) stop at ``EPSILON5``. Points on one
    meridian are solved with the closed meridian arc.
    """

    name = "bessel"

    def direct(self, start: GeoPoint, distance: float, bearing: AngleLike) -> DirectResult:
        ellipsoid = start.ellipsoid
        a, e2, ep2 = ellipsoid.a, ellipsoid.e2, ellipsoid.ep2

        A1 = _radians(bearing)
        sin_a1, cos_a1 = math.sin(A1), math.cos(A1)
        u1 = math.atan(math.sqrt(1 - e2) * math.tan(start.latitude.radians))
        sin_u1, cos_u1 = math.sin(u1), math.cos(u1)

        sin_m = cos_u1 * sin_a1
        cos2_m = 1 - sin_m * sin_m
        # Arc from the equator crossing to the start point
        M = math.atan2(math.tan(u1), cos_a1)

        alpha, beta, gamma = _bessel_distance_coefficients(ep2, cos2_m, a)
        sigma = alpha * distance
        for iteration in range(1, MAX_ITERATIONS + 1):
            updated = alpha * distance + _series(0.0, beta, gamma, sigma, M)
            residual = abs(updated - sigma)
            sigma = updated
            if residual <= EPSILON5:
                break
        else:
            ConvergenceLog().record("bessel.direct", MAX_ITERATIONS, residual, False)
            raise ConvergenceError(
                "Bessel direct solution did not converge",
                iterations=MAX_ITERATIONS,
                context={"distance": distance, "bearing": math.degrees(A1)}
            )

        sin_s, cos_s = math.sin(sigma), math.cos(sigma)
        x = sin_u1 * sin_s - cos_u1 * cos_s * cos_a1
        u2 = math.atan2(sin_u1 * cos_s + cos_u1 * sin_s * cos_a1, math.hypot(sin_m, x))
        lam = math.atan2(sin_s * sin_a1, cos_u1 * cos_s - sin_u1 * sin_s * cos_a1)
        A2 = math.atan2(sin_m, -x)

        B2 = math.atan2(math.sin(u2), math.sqrt(1 - e2) * math.cos(u2))
        dL = lam - sin_m * _series(*_bessel_longitude_coefficients(e2, cos2_m), sigma, M)

        return DirectResult(_end_point(start, B2, dL), _bearing(A2 + math.pi))

    def inverse(self, start: GeoPoint, end: GeoPoint) -> InverseResult:
        if _coincident(start, end):
            return _COINCIDENT

        l = wrap_longitude_difference(end.longitude, start.longitude).radians
        if abs(l) < ANGLE_EPSILON:
            arc = Meridian(start.longitude, start.latitude, end.latitude, start.ellipsoid)
            return InverseResult(arc.length, arc.azimuth, arc.inverse_azimuth)

        ellipsoid = start.ellipsoid
        a, e2, ep2 = ellipsoid.a, ellipsoid.e2, ellipsoid.ep2
        u1 = math.atan(math.sqrt(1 - e2) * math.tan(start.latitude.radians))
        u2 = math.atan(math.sqrt(1 - e2) * math.tan(end.latitude.radians))
        sin_u1, cos_u1 = math.sin(u1), math.cos(u1)
        sin_u2, cos_u2 = math.sin(u2), math.cos(u2)

        def auxiliary(lam: float):
            sin_l, cos_l = math.sin(lam), math.cos(lam)
            y = cos_u2 * sin_l
            x = cos_u1 * sin_u2 - sin_u1 * cos_u2 * cos_l
            sin_s = math.hypot(y, x)
            cos_s = sin_u1 * sin_u2 + cos_u1 * cos_u2 * cos_l
            sigma = math.atan2(sin_s, cos_s)
            sin_m = cos_u1 * cos_u2 * sin_l / sin_s
            A1 = math.atan2(y, x)
            M = math.atan2(math.tan(u1), math.cos(A1))
            return sigma, sin_m, 1 - sin_m * sin_m, A1, M

        lam = l
        for iteration in range(1, MAX_ITERATIONS + 1):
            sigma, sin_m, cos2_m, A1, M = auxiliary(lam)
            updated = l + sin_m * _series(*_bessel_longitude_coefficients(e2, cos2_m), sigma, M)
            residual = abs(updated - lam)
            lam = updated
            if residual <= EPSILON5:
                break
        else:
            ConvergenceLog().record(
                "bessel.inverse", MAX_ITERATIONS, residual, False,
                {"start": str(start), "end": str(end)}
            )
            raise ConvergenceError(
                "Bessel inverse solution did not converge",
                iterations=MAX_ITERATIONS,
                context={"start": str(start), "end": str(end)}
            )

        sigma, sin_m, cos2_m, A1, M = auxiliary(lam)
        sin_l, cos_l = math.sin(lam), math.cos(lam)
        A2 = math.atan2(cos_u1 * sin_l, -sin_u1 * cos_u2 + cos_u1 * sin_u2 * cos_l)

        alpha, beta, gamma = _bessel_distance_coefficients(ep2, cos2_m, a)
        distance = (sigma - _series(0.0, beta, gamma, sigma, M)) / alpha
        return InverseResult(distance, _bearing(A1), _bearing(A2 + math.pi))


# =========================================================================
# Gauss mid-latitude
# =========================================================================

class GaussMidLatitude(GeodesicSolution):
    """Gauss mid-latitude formulas for short lines.

    The direct problem iterates the mean latitude and azimuth to
    ``EPSILON4``. Accuracy degrades quickly beyond some tens of kilometres.
    """

    name = "gauss"

    @staticmethod
    def _increments(ellipsoid: Ellipsoid, distance: float, Bm: float, Am: float):
        sin_a, cos_a = math.sin(Am), math.cos(Am)
        cos_b, tan_b = math.cos(Bm), math.tan(Bm)
        t2 = tan_b * tan_b
        eta2 = ellipsoid.ep2 * cos_b * cos_b
        V = math.sqrt(1 + eta2)
        SN = distance * V / ellipsoid.c
        k = SN * SN / 24

        dB = (1 + k * (sin_a * sin_a * (2 + 3 * t2 + 2 * eta2)
                       - 3 * cos_a * cos_a * eta2 * (t2 - 1 - eta2 + 4 * eta2 * t2))) * SN * V * V * cos_a
        dL = (1 + k * (t2 * sin_a * sin_a
                       - cos_a * cos_a * (1 + eta2 - 9 * eta2 * t2))) * SN * sin_a / cos_b
        dA = (1 + k * (cos_a * cos_a * (2 + 7 * eta2 + 9 * eta2 * t2 + 5 * eta2 * eta2)
                       + sin_a * sin_a * (2 + t2 + 2 * eta2))) * SN * sin_a * tan_b
        return dB, dL, dA

    def direct(self, start: GeoPoint, distance: float, bearing: AngleLike) -> DirectResult:
        ellipsoid = start.ellipsoid
        B1 = start.latitude.radians
        A1 = _radians(bearing)

        # First-order increments seed the mid-point
        cos_b = math.cos(B1)
        V = math.sqrt(1 + ellipsoid.ep2 * cos_b * cos_b)
        SN = distance * V / ellipsoid.c
        dB = SN * math.cos(A1) * V * V
        dA = SN * math.sin(A1) * math.tan(B1)
        dL = SN * math.sin(A1) / cos_b
        Bm, Am = B1 + dB / 2, A1 + dA / 2

        for iteration in range(1, MAX_ITERATIONS + 1):
            dB, dL, dA = self._increments(ellipsoid, distance, Bm, Am)
            new_Bm, new_Am = B1 + dB / 2, A1 + dA / 2
            residual = max(abs(new_Bm - Bm), abs(new_Am - Am))
            Bm, Am = new_Bm, new_Am
            if residual <= EPSILON4:
                break
        else:
            ConvergenceLog().record("gauss.direct", MAX_ITERATIONS, residual, False)
            raise ConvergenceError(
                "Gauss mid-latitude direct solution did not converge",
                iterations=MAX_ITERATIONS,
                context={"distance": distance, "bearing": math.degrees(A1)}
            )

        return DirectResult(_end_point(start, B1 + dB, dL), _bearing(A1 + dA + math.pi))

    def inverse(self, start: GeoPoint, end: GeoPoint) -> InverseResult:
        if _coincident(start, end):
            return _COINCIDENT

        ellipsoid = start.ellipsoid
        B1, B2 = start.latitude.radians, end.latitude.radians
        Bm = (B1 + B2) / 2
        dB = B2 - B1
        dL = wrap_longitude_difference(end.longitude, start.longitude).radians

        cos_b, sin_b, tan_b = math.cos(Bm), math.sin(Bm), math.tan(Bm)
        t2 = tan_b * tan_b
        eta2 = ellipsoid.ep2 * cos_b * cos_b
        V2 = 1 + eta2
        N = float(ellipsoid.prime_vertical_radius(Bm))

        r01 = N * cos_b
        r21 = N * cos_b * (1 + eta2 - 9 * eta2 * t2) / 24
        r03 = -N * cos_b ** 3 * t2 / 24
        s_sin_a = r01 * dL + r21 * dB * dB * dL + r03 * dL ** 3

        s10 = N / V2
        s12 = -N * cos_b * cos_b * (2 + 3 * t2 + 3 * t2 * eta2) / 24
        s30 = N * (eta2 - t2 * eta2) / 8
        s_cos_a = s10 * dB + s12 * dB * dL * dL + s30 * dB ** 3

        Am = math.atan2(s_sin_a, s_cos_a)
        distance = math.hypot(s_sin_a, s_cos_a)

        t01 = sin_b
        t21 = sin_b * (3 + 2 * eta2 - 2 * eta2 * eta2) / 24
        t03 = sin_b * cos_b * cos_b * (1 + eta2) / 12
        dA = t01 * dL + t21 * dB * dB * dL + t03 * dL ** 3

        return InverseResult(
            distance,
            _bearing(Am - dA / 2),
            _bearing(Am + dA / 2 + math.pi),
        )


# =========================================================================
# Haversine
# =========================================================================

class Haversine(GeodesicSolution):
    """Great-circle solution on a sphere of radius 6372.8 km.

    The points' ellipsoid is ignored.

    Examples
    --------
    >>> bna = GeoPoint.from_degrees(36.12, -86.67)
    >>> lax = GeoPoint.from_degrees(33.94, -118.40)
    >>> round(Haversine().distance(bna, lax) / 1000, 7)
    2887.2599506
    """

    name = "haversine"

    def __init__(self, radius: float = HAVERSINE_RADIUS):
        self.radius = radius

    @staticmethod
    def initial_bearing(start: GeoPoint, end: GeoPoint) -> Angle:
        """Great-circle azimuth at `start` towards `end`."""
        lat1, lat2 = start.latitude.radians, end.latitude.radians
        dlon = end.longitude.radians - start.longitude.radians
        x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
        y = math.sin(dlon) * math.cos(lat2)
        return _bearing(math.atan2(y, x))

    def direct(self, start: GeoPoint, distance: float, bearing: AngleLike) -> DirectResult:
        lat1 = start.latitude.radians
        brng = _radians(bearing)
        d = distance / self.radius

        lat2 = math.asin(
            math.sin(lat1) * math.cos(d) + math.cos(lat1) * math.sin(d) * math.cos(brng)
        )
        dlon = math.atan2(
            math.sin(brng) * math.sin(d) * math.cos(lat1),
            math.cos(d) - math.sin(lat1) * math.sin(lat2)
        )
        end = _end_point(start, lat2, dlon)
        return DirectResult(end, self.initial_bearing(end, start))

    def inverse(self, start: GeoPoint, end: GeoPoint) -> InverseResult:
        if _coincident(start, end):
            return _COINCIDENT

        lat1, lat2 = start.latitude.radians, end.latitude.radians
        dlon = end.longitude.radians - start.longitude.radians
        h = (
            math.sin((lat2 - lat1) / 2) ** 2
            + math.sin(dlon / 2) ** 2 * math.cos(lat1) * math.cos(lat2)
        )
        distance = self.radius * 2 * math.asin(math.sqrt(h))
        return InverseResult(
            distance,
            self.initial_bearing(start, end),
            self.initial_bearing(end, start),
        )

    def __repr__(self) -> str:
        return f"Haversine(radius={self.radius})"


# =========================================================================
# Karney (pyproj)
# =========================================================================

def _geod(ellipsoid: Ellipsoid) -> Geod:
    return Geod(a=ellipsoid.a, f=ellipsoid.f)


class Karney(GeodesicSolution):
    """GeographicLib solution through ``pyproj.Geod``.

    Accurate to nanometres for any pair of points, including antipodal
    ones.
    """

    name = "karney"

    def direct(self, start: GeoPoint, distance: float, bearing: AngleLike) -> DirectResult:
        azimuth = math.degrees(_radians(bearing))
        lon2, lat2, back = _geod(start.ellipsoid).fwd(
            start.longitude.degrees, start.latitude.degrees, azimuth, distance
        )
        end = GeoPoint(Latitude(lat2), Longitude(lon2), start.ellipsoid)
        return DirectResult(end, _bearing(math.radians(back)))

    def inverse(self, start: GeoPoint, end: GeoPoint) -> InverseResult:
        if _coincident(start, end):
            return _COINCIDENT

        forward, back, distance = _geod(start.ellipsoid).inv(
            start.longitude.degrees, start.latitude.degrees,
            end.longitude.degrees, end.latitude.degrees
        )
        return InverseResult(
            float(distance), _bearing(math.radians(forward)), _bearing(math.radians(back))
        )


# =========================================================================
# Convenience functions
# =========================================================================

_DEFAULT_SOLVER = Vincenty()


def geodesic_inverse(
    start: GeoPoint,
    end: GeoPoint,
    solver: Optional[GeodesicSolution] = None
) -> InverseResult:
    """Solve the inverse problem (Vincenty unless `solver` is given)."""
    return (solver or _DEFAULT_SOLVER).inverse(start, end)


def geodesic_direct(
    start: GeoPoint,
    distance: float,
    bearing: AngleLike,
    solver: Optional[GeodesicSolution] = None
) -> DirectResult:
    """Solve the direct problem (Vincenty unless `solver` is given)."""
    return (solver or _DEFAULT_SOLVER).direct(start, distance, bearing)


def geodesic_distance_batch(
    lat1_rad: NDArray[np.float64],
    lon1_rad: NDArray[np.float64],
    lat2_rad: NDArray[np.float64],
    lon2_rad: NDArray[np.float64],
    ellipsoid: Optional[Ellipsoid] = None
) -> NDArray[np.float64]:
    """Geodesic distances for arrays of point pairs.

    Parameters
    ----------
    lat1_rad, lon1_rad : ndarray
        First points in radians.
    lat2_rad, lon2_rad : ndarray
        Second points in radians (broadcastable against the first).
    ellipsoid : Ellipsoid, optional
        Reference ellipsoid (default: process-wide default).

    Returns
    -------
    ndarray
        Distances in meters.
    """
    geod = _geod(ellipsoid or default_ellipsoid())
    lat1, lon1, lat2, lon2 = np.broadcast_arrays(
        np.degrees(lat1_rad), np.degrees(lon1_rad), np.degrees(lat2_rad), np.degrees(lon2_rad)
    )
    _, _, distances = geod.inv(lon1, lat1, lon2, lat2)
    return np.asarray(distances, dtype=np.float64)
