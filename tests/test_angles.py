"""Tests for angles, latitudes and longitudes."""

import math

import pytest

from common.errors import InvalidInputError
from geospatial.angles import (
    Angle,
    AngleKind,
    DataStyle,
    Latitude,
    Longitude,
    angular_difference,
    normalize_degrees,
    wrap_longitude_difference,
)


class TestConstruction:

    @pytest.mark.parametrize("degrees", [0.0, 12.5, -33.25, 359.999, 720.0])
    def test_degrees_preserved(self, degrees):
        """Plain angles store the given degrees without normalization."""
        assert Angle(degrees).degrees == degrees

    def test_default_is_nan(self):
        assert Angle().is_nan
        assert math.isnan(Angle.NAN.radians)

    def test_from_radians(self):
        assert Angle.from_radians(math.pi).degrees == pytest.approx(180.0)
        assert Angle.from_radians(math.pi / 2) == Angle.HALF_PI

    def test_from_dms(self):
        assert Angle.from_dms(45, 30, 30).degrees == pytest.approx(45.508333333333)
        assert Angle.from_dms(-45, 30, 0).degrees == pytest.approx(-45.5)

    def test_from_dms_sign_on_minutes_and_seconds(self):
        """The first non-zero component carries the sign."""
        assert Angle.from_dms(0, -30, 0).degrees == pytest.approx(-0.5)
        assert Angle.from_dms(0, 0, -36).degrees == pytest.approx(-0.01)

    @pytest.mark.parametrize("deg,minute,second", [
        (10, 60, 0),
        (10, 5, 60),
        (0, 61, 0),
        (0, 0, 60),
        (10, -5, 0),
    ])
    def test_from_dms_rejects_out_of_range(self, deg, minute, second):
        with pytest.raises(InvalidInputError):
            Angle.from_dms(deg, minute, second)

    def test_from_unit(self):
        assert Angle.from_unit(3600.0, "arcsecond").degrees == pytest.approx(1.0)
        assert Angle.from_unit(math.pi, "radian").degrees == pytest.approx(180.0)


class TestSexagesimal:

    def test_to_dms_packs_components(self):
        assert Angle.from_dms(45, 30, 30).to_dms() == pytest.approx(453030.0)

    def test_to_dms_carries_sixty_seconds(self):
        """Seconds within the carry epsilon of 60 roll into the next degree."""
        assert Angle.from_dms(45, 59, 59.9999999).to_dms() == pytest.approx(460000.0)

    def test_to_dms_of_nan(self):
        assert math.isnan(Angle.NAN.to_dms())

    def test_components(self):
        angle = Angle(-30.5)
        assert angle.degree == -30
        assert angle.minute == 30
        assert angle.second == pytest.approx(0.0, abs=1e-9)

    def test_to_string(self):
        assert Angle(-30.5).to_string() == "-30°30'00.00000\""

    def test_latitude_string_has_hemisphere(self):
        assert Latitude(-30.5).to_string() == "30°30'00.00000\"S"
        assert Longitude(120.25).to_string() == "120°15'00.00000\"E"

    def test_from_string(self):
        assert Angle.from_string("45°30'30\"").degrees == pytest.approx(45.508333333333)
        assert Angle.from_string("30°30'00\"S").degrees == pytest.approx(-30.5)

    def test_from_string_rejects_garbage(self):
        with pytest.raises(InvalidInputError):
            Angle.from_string("north-ish")

    @pytest.mark.parametrize("style,value,expected", [
        (DataStyle.DMMSS, 45.3030, 45.508333333333),
        (DataStyle.DMMSSSS, 453030.0, 45.508333333333),
        (DataStyle.DMM, 45.30, 45.5),
        (DataStyle.DMMMM, 4530.0, 45.5),
        (DataStyle.MINUTES, 90.0, 1.5),
        (DataStyle.SECONDS, 5400.0, 1.5),
    ])
    def test_from_style(self, style, value, expected):
        assert Angle.from_style(value, style).degrees == pytest.approx(expected)

    def test_from_style_rejects_sixty_minutes(self):
        with pytest.raises(InvalidInputError):
            Angle.from_style(456000.0, DataStyle.DMMSSSS)

    def test_get_value_styles(self):
        angle = Angle(45.5)
        assert angle.get_value(DataStyle.DMM) == pytest.approx(45.30)
        assert angle.get_value(DataStyle.DMMMM) == pytest.approx(4530.0)
        assert angle.get_value(DataStyle.SECONDS) == pytest.approx(163800.0)
        assert angle.get_value_in("arcminute") == pytest.approx(2730.0)

    def test_dict_round_trip_keeps_kind(self):
        data = Latitude(-12.75).to_dict(DataStyle.DMMSSSS)
        restored = Angle.from_dict(data)
        assert isinstance(restored, Latitude)
        assert restored.degrees == pytest.approx(-12.75)


class TestComparisonAndArithmetic:

    def test_equality_uses_epsilon(self):
        assert Angle(10.0) == Angle(10.0 + 1e-13)
        assert Angle(10.0) != Angle(10.0 + 1e-9)

    def test_angles_are_unhashable(self):
        with pytest.raises(TypeError):
            hash(Angle(1.0))

    def test_ordering(self):
        assert Angle(1.0) < Angle(2.0)
        assert Angle(3.0) >= Angle(3.0)

    def test_arithmetic_returns_plain_angle(self):
        total = Latitude(80.0) + Latitude(20.0)
        assert type(total) is Angle
        assert total.degrees == pytest.approx(100.0)
        assert (Angle(10.0) * 3).degrees == pytest.approx(30.0)
        assert (Angle(10.0) / 4).degrees == pytest.approx(2.5)
        assert (-Angle(10.0)).degrees == -10.0
        assert abs(Angle(-10.0)).degrees == 10.0


class TestNormalization:

    @pytest.mark.parametrize("value,expected", [
        (45.0, 45.0),
        (-90.0, -90.0),
        (300.0, -60.0),
        (450.0, 90.0),
    ])
    def test_latitude(self, value, expected):
        assert Latitude(value).degrees == pytest.approx(expected)

    @pytest.mark.parametrize("value", [91.0, 180.0, 269.0, -91.0])
    def test_latitude_rejects_wrapped_values_in_gap(self, value):
        with pytest.raises(InvalidInputError):
            Latitude(value)

    @pytest.mark.parametrize("value,expected", [
        (180.0, 180.0),
        (-180.0, 180.0),
        (190.0, -170.0),
        (-190.0, 170.0),
        (540.0, 180.0),
    ])
    def test_longitude(self, value, expected):
        assert Longitude(value).degrees == pytest.approx(expected)

    def test_plain_normalize(self):
        assert Angle(-30.0).normalize().degrees == pytest.approx(330.0)
        assert Angle(720.0).normalize().degrees == 0.0

    def test_values_in_range_are_untouched(self):
        value = 12.345678901234567
        assert normalize_degrees(value, AngleKind.LONGITUDE) == value

    def test_hemisphere(self):
        assert Latitude.from_hemisphere(30, 15, 0, "S").degrees == pytest.approx(-30.25)
        assert Longitude.from_hemisphere(120, 0, 0, "w").hemisphere == "W"
        assert Latitude.EQUATOR.hemisphere == "N"
        with pytest.raises(InvalidInputError):
            Latitude.from_hemisphere(30, 0, 0, "E")


class TestDifferences:

    def test_angular_difference_folds_negative_minuend(self):
        assert angular_difference(Angle(10.0), Angle(4.0)).degrees == pytest.approx(6.0)
        assert angular_difference(Angle(-10.0), Angle(20.0)).degrees == pytest.approx(330.0)

    def test_wrap_longitude_difference(self):
        diff = wrap_longitude_difference(Longitude(-179.0), Longitude(179.0))
        assert diff.degrees == pytest.approx(2.0)
