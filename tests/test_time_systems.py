"""Tests for GNSS time scales, leap seconds and Julian dates."""

from datetime import datetime, timedelta

import pytest

from common.errors import InvalidInputError
from geospatial.time_systems import (
    BdsTime,
    GalileoTime,
    GnssTimeSpan,
    GpsTime,
    JulianDate,
    TaiTime,
    UtcTime,
    date_from_day_of_year,
    days_in_year,
    is_leap_year,
    tai_minus_utc,
)


class TestLeapSeconds:

    @pytest.mark.parametrize("moment,offset", [
        (datetime(1972, 1, 1), 10.0),
        (datetime(1972, 6, 30, 23, 59, 59), 10.0),
        (datetime(1972, 7, 1), 11.0),
        (datetime(1980, 1, 6), 19.0),
        (datetime(2006, 1, 1), 33.0),
        (datetime(2016, 12, 31, 23, 59, 59), 36.0),
        (datetime(2017, 1, 1), 37.0),
        (datetime(2020, 6, 1), 37.0),
    ])
    def test_table(self, moment, offset):
        assert tai_minus_utc(moment) == offset

    def test_drift_before_1972(self):
        assert tai_minus_utc(datetime(1968, 2, 1)) == pytest.approx(4.21317)
        assert tai_minus_utc(datetime(1968, 2, 11)) == pytest.approx(4.21317 + 10 * 0.002592)
        assert tai_minus_utc(datetime(1959, 12, 31)) == 0.0

    def test_elapsed_across_leap_second(self):
        before = UtcTime(datetime(2016, 12, 31, 23, 59, 59))
        after = UtcTime(datetime(2017, 1, 1))
        assert after - before == pytest.approx(2.0)


class TestCalendar:

    def test_leap_years(self):
        assert is_leap_year(2000)
        assert is_leap_year(2024)
        assert not is_leap_year(1900)
        assert days_in_year(2023) == 365

    def test_day_of_year(self):
        assert date_from_day_of_year(2020, 60) == datetime(2020, 2, 29)
        assert date_from_day_of_year(2021, 1.5) == datetime(2021, 1, 1, 12)
        assert UtcTime(datetime(2021, 3, 1)).day_of_year == 60
        with pytest.raises(InvalidInputError):
            date_from_day_of_year(2021, 366)

    def test_constructors(self):
        assert UtcTime.from_components(2020, 1, 2, 3, 4, 5.5).moment == datetime(2020, 1, 2, 3, 4, 5, 500000)
        assert UtcTime.from_month_days(2020, 3, 1.5).moment == datetime(2020, 3, 1, 12)
        assert UtcTime.from_decimal_year(2020.5).moment == datetime(2020, 7, 2)
        assert UtcTime(datetime(2020, 7, 2)).decimal_year == pytest.approx(2020.5)
        assert UtcTime(datetime(2020, 1, 1, 1, 0, 30)).second_of_day == pytest.approx(3630.0)

    def test_rejects_aware_datetimes(self):
        from datetime import timezone
        with pytest.raises(InvalidInputError):
            UtcTime(datetime(2020, 1, 1, tzinfo=timezone.utc))

    def test_string_form(self):
        assert str(UtcTime(datetime(2020, 1, 2, 3, 4, 5, 678000))) == "2020-01-02_03:04:05.678"


class TestJulianDate:

    def test_j2000(self):
        jd = JulianDate.from_datetime(datetime(2000, 1, 1, 12))
        assert jd.mjd == pytest.approx(51544.5)
        assert jd.jd == pytest.approx(2451545.0)

    def test_round_trip_through_jd(self):
        jd = JulianDate.from_jd(2451545.0)
        assert jd.to_datetime() == datetime(2000, 1, 1, 12)
        assert (jd + 0.5).to_utc().moment == datetime(2000, 1, 2)
        assert (jd + 1.0) - jd == pytest.approx(1.0)

    def test_from_gps(self):
        gps = GpsTime.from_utc(datetime(2000, 1, 1, 12))
        assert gps.to_julian().mjd == pytest.approx(51544.5)


class TestGnssTime:

    def test_gps_origin(self):
        gps = GpsTime.from_week_seconds(0, 0.0)
        assert gps.to_utc().moment == datetime(1980, 1, 6)
        assert gps.to_tai().moment == datetime(1980, 1, 6, 0, 0, 19)

    def test_gps_minus_utc(self):
        utc = UtcTime(datetime(2020, 1, 1))
        gps = GpsTime.from_utc(utc)
        assert gps.moment == datetime(2020, 1, 1, 0, 0, 18)
        assert gps.week_seconds == (2086, pytest.approx(3 * 86400 + 18.0))
        assert gps.day_of_week == 3
        assert gps.to_utc().moment == utc.moment

    def test_beidou(self):
        gps = GpsTime.from_utc(datetime(2020, 1, 1))
        bds = gps.to(BdsTime)
        assert bds.moment == gps.moment - timedelta(seconds=14)
        assert bds.week == gps.week - 1356
        assert bds.seconds_of_week == pytest.approx(gps.seconds_of_week - 14.0)
        assert BdsTime.from_week_seconds(0, 0.0).to_utc().moment == datetime(2006, 1, 1)

    def test_galileo(self):
        gps = GpsTime.from_utc(datetime(2020, 1, 1))
        gst = gps.to(GalileoTime)
        assert gst.week == gps.week - 1024
        assert gst.seconds_of_week == pytest.approx(gps.seconds_of_week)
        assert gst == gps

    def test_week_seconds_round_trip(self):
        gps = GpsTime.from_week_seconds(2200, 345600.25)
        assert gps.week == 2200
        assert gps.seconds_of_week == pytest.approx(345600.25)

    @pytest.mark.parametrize("week,seconds", [(-1, 0.0), (10, -1.0), (10, 604800.0)])
    def test_invalid_week_seconds(self, week, seconds):
        with pytest.raises(InvalidInputError):
            GpsTime.from_week_seconds(week, seconds)

    def test_before_origin(self):
        with pytest.raises(InvalidInputError):
            BdsTime(datetime(2005, 12, 31))
        with pytest.raises(InvalidInputError):
            GpsTime.from_week_seconds(0, 10.0) - 20.0

    def test_arithmetic_and_ordering(self):
        gps = GpsTime.from_week_seconds(2000, 0.0)
        later = gps + 3600.0
        assert later.seconds_of_week == pytest.approx(3600.0)
        assert later - gps == pytest.approx(3600.0)
        assert (later - timedelta(hours=1)) == gps
        assert gps < later
        assert gps == gps.to_tai()
        assert gps.to_utc() < later

    def test_tai_to_utc_at_leap_second(self):
        """The inserted second 2016-12-31 23:59:60 reads as the next midnight."""
        assert TaiTime(datetime(2017, 1, 1, 0, 0, 37)).to_utc().moment == datetime(2017, 1, 1)
        assert TaiTime(datetime(2017, 1, 1, 0, 0, 36)).to_utc().moment == datetime(2017, 1, 1)
        assert TaiTime(datetime(2017, 1, 1, 0, 0, 35)).to_utc().moment == datetime(2016, 12, 31, 23, 59, 59)


class TestGnssTimeSpan:

    @pytest.fixture
    def span(self):
        start = GpsTime.from_week_seconds(2000, 0.0)
        return GnssTimeSpan(start, start + 2 * 86400.0)

    def test_totals(self, span):
        assert span.total_seconds == pytest.approx(172800.0)
        assert span.total_minutes == pytest.approx(2880.0)
        assert span.total_hours == pytest.approx(48.0)
        assert span.total_days == pytest.approx(2.0)

    def test_contains(self, span):
        assert span.contains(span.start + 100.0)
        assert span.contains(span.end)
        assert not span.contains(span.end + 1.0)
        assert span.contains(GnssTimeSpan(span.start + 1.0, span.end - 1.0))
        assert not span.contains(GnssTimeSpan(span.start - 1.0, span.end))

    def test_mixed_scales(self, span):
        utc_inside = (span.start + 60.0).to_utc()
        assert span.contains(utc_inside)
        assert GnssTimeSpan(span.start, utc_inside).total_seconds == pytest.approx(60.0)

    def test_negate_and_duration(self, span):
        negative = span.negate()
        assert negative.total_seconds == pytest.approx(-172800.0)
        assert negative.duration().total_seconds == pytest.approx(172800.0)
        assert span.duration() is span

    def test_add_and_subtract(self, span):
        assert (span + 3600.0).total_hours == pytest.approx(49.0)
        assert (span - span).total_seconds == pytest.approx(0.0)
        assert (span + timedelta(days=1)).total_days == pytest.approx(3.0)
