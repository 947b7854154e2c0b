"""Tests for UTM zoning and MGRS references."""

import math

import pytest

from common.errors import InvalidInputError
from geospatial.ellipsoid import WGS84
from geospatial.projections import (
    UTM,
    UTMCoord,
    from_mgrs,
    from_utm,
    mgrs_to_utm,
    parse_mgrs,
    to_mgrs,
    to_utm,
    utm_central_meridian,
    utm_latitude_band,
    utm_longitude_zone,
    utm_max_northing,
    utm_min_northing,
    utm_to_mgrs,
)

WASHINGTON = (38.8895, -77.0353)
SYDNEY = (-33.8568, 151.2153)


class TestZonesAndBands:

    @pytest.mark.parametrize("lon,band,zone", [
        (9.0, "X", 31),
        (9.5, "X", 33),
        (21.0, "X", 33),
        (41.0, "X", 37),
        (9.0, "V", 32),
        (2.0, "V", 31),
        (6.0, "U", 32),
        (5.9, "U", 31),
        (6.5, "U", 32),
        (12.0, "V", 33),
        (11.9, "V", 32),
        (3.0, "V", 32),
        (0.0, "N", 31),
        (-180.0, "N", 1),
        (180.0, "N", 1),
        (179.5, "N", 60),
        (-179.5, "N", 1),
    ])
    def test_longitude_zone(self, lon, band, zone):
        assert utm_longitude_zone(lon, band) == zone

    @pytest.mark.parametrize("lat,band", [
        (-80.5, "C"),
        (-80.0, "C"),
        (-0.1, "M"),
        (0.0, "N"),
        (60.0, "V"),
        (72.0, "X"),
        (84.5, "X"),
    ])
    def test_latitude_band(self, lat, band):
        assert utm_latitude_band(lat) == band

    @pytest.mark.parametrize("lat", [-81.0, 84.6, 90.0])
    def test_latitude_outside_utm(self, lat):
        with pytest.raises(InvalidInputError):
            utm_latitude_band(lat)

    def test_special_central_meridians(self):
        assert utm_central_meridian(32, "V").degrees == 7.5
        assert utm_central_meridian(31, "X").degrees == 4.5
        assert utm_central_meridian(32).degrees == 9.0

    def test_missing_svalbard_zones(self):
        with pytest.raises(InvalidInputError):
            UTMCoord(34, "X", 500_000.0, 8_000_000.0)

    def test_invalid_zone_and_band(self):
        with pytest.raises(InvalidInputError):
            UTM(61, "N")
        with pytest.raises(InvalidInputError):
            utm_longitude_zone(10.0, "I")

    def test_northing_limits(self):
        assert utm_max_northing(18, "M", WGS84) == 10_000_000
        assert utm_min_northing("N", ellipsoid=WGS84) == 0
        assert utm_min_northing("S", ellipsoid=WGS84) < utm_max_northing(18, "S", WGS84)


class TestProjection:

    def test_norway_cell(self):
        coord = to_utm(60.0, 5.0, WGS84)
        assert (coord.zone, coord.band) == (32, "V")

    @pytest.mark.parametrize("lat,lon", [WASHINGTON, SYDNEY, (61.0, 4.0), (78.0, 15.0), (0.0, 3.0)])
    def test_from_utm_inverts_to_utm(self, lat, lon):
        coord = to_utm(lat, lon, WGS84)
        lat2, lon2 = from_utm(coord, WGS84)
        assert lat2.degrees == pytest.approx(lat, abs=1e-8)
        assert lon2.degrees == pytest.approx(lon, abs=1e-8)

    def test_southern_false_northing(self):
        coord = to_utm(*SYDNEY, WGS84)
        assert coord.hemisphere == "S"
        assert 6_000_000.0 < coord.northing < 7_000_000.0

    def test_reverse_rejects_easting_outside_grid(self):
        with pytest.raises(InvalidInputError):
            UTM(18, "N", WGS84).reverse(4_000_000.0, 50_000.0)

    def test_string(self):
        assert str(UTMCoord(18, "S", 323487.0, 4306483.0)) == "18S 323487.000E 4306483.000N"


class TestMGRS:

    def test_washington_monument(self):
        reference = to_mgrs(*WASHINGTON, precision=3, ellipsoid=WGS84)
        assert (reference.zone, reference.band) == (18, "S")
        assert reference.column + reference.row == "UJ"
        assert str(reference) == "18S UJ 234 064"
        assert reference.compact() == "18SUJ234064"

    def test_paris(self):
        reference = to_mgrs(48.8566, 2.3522, precision=3, ellipsoid=WGS84)
        assert (reference.zone, reference.band) == (31, "U")

    def test_parse_ignores_spacing_and_case(self):
        reference = parse_mgrs("18s uj 2348-0648")
        assert reference.precision == 4
        assert (reference.easting, reference.northing) == (2348, 648)
        assert str(reference) == "18S UJ 2348 0648"
        assert reference.resolution == 10.0

    @pytest.mark.parametrize("text", ["18SUJ234", "18SUJ", "18SUJ23480648012", "SUJ1234", "18SIJ1234"])
    def test_parse_rejects_malformed(self, text):
        with pytest.raises(InvalidInputError):
            parse_mgrs(text)

    @pytest.mark.parametrize("lat,lon", [WASHINGTON, SYDNEY, (61.0, 4.0), (-5.0, 100.0)])
    def test_decoding_gives_truncated_utm(self, lat, lon):
        """Decoding a 1 m reference yields the floored UTM coordinate."""
        coord = to_utm(lat, lon, WGS84)
        decoded = mgrs_to_utm(utm_to_mgrs(coord), WGS84)
        assert (decoded.zone, decoded.band) == (coord.zone, coord.band)
        assert decoded.easting == math.floor(coord.easting)
        assert decoded.northing == math.floor(coord.northing)

    def test_from_mgrs_is_south_west_corner(self):
        corner = from_mgrs("18SUJ234064", WGS84)
        coord = to_utm(corner.latitude, corner.longitude, WGS84)
        assert coord.easting == pytest.approx(323_400.0, abs=1e-3)
        assert coord.northing == pytest.approx(4_306_400.0, abs=1e-3)

    def test_column_outside_zone(self):
        # Zone 18 uses columns S-Z
        with pytest.raises(InvalidInputError):
            mgrs_to_utm("18SAJ1234", WGS84)

    def test_invalid_precision(self):
        coord = to_utm(*WASHINGTON, WGS84)
        with pytest.raises(InvalidInputError):
            utm_to_mgrs(coord, precision=6)
