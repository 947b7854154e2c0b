"""Tests for units, settings, convergence diagnostics and the error taxonomy."""

import logging

import pint
import pytest

from common.errors import (
    CannotResolveError,
    ConvergenceError,
    GeodeticError,
    InvalidInputError,
    MissingParameterError,
)
from common.logging_config import ConvergenceLog, get_logger
from common.units import units
from geospatial.ellipsoid import CGCS2000, WGS84
from geospatial.settings import (
    GeodeticSettings,
    default_ellipsoid,
    get_settings,
    override_settings,
    set_settings,
)


class TestUnits:

    def test_convert(self):
        assert units.convert(1.0, "degree", "arcminute") == pytest.approx(60.0)
        assert units.convert(2.0, "kilometer", "meter") == pytest.approx(2000.0)
        assert units.convert(5.0, "meter", "meter") == 5.0

    def test_factor(self):
        assert units.factor("arcsecond") == pytest.approx(1 / 3600)
        assert units.factor("gon") == pytest.approx(0.9)
        assert units.factor("foot") == pytest.approx(0.3048)

    @pytest.mark.parametrize("unit,base", [
        ("radian", "degree"),
        ("gon", "degree"),
        ("kilometer", "meter"),
        ("foot", "meter"),
    ])
    def test_base_unit(self, unit, base):
        assert units.base_unit(unit) == base

    def test_base_unit_rejects_other_dimensions(self):
        with pytest.raises(pint.DimensionalityError):
            units.base_unit("second")

    def test_validate_dimensionality(self):
        assert units.validate_dimensionality(units.quantity(3.0, "mile"), "[length]")
        with pytest.raises(pint.DimensionalityError):
            units.validate_dimensionality(units.quantity(3.0, "second"), "[length]")


class TestSettings:

    def test_default_ellipsoid(self):
        assert default_ellipsoid() is CGCS2000
        assert get_settings().linear_unit == "meter"

    def test_override_restores(self):
        with override_settings(ellipsoid=WGS84) as settings:
            assert settings.ellipsoid is WGS84
            assert default_ellipsoid() is WGS84
        assert default_ellipsoid() is CGCS2000

    def test_override_restores_after_error(self):
        with pytest.raises(RuntimeError):
            with override_settings(ellipsoid=WGS84):
                raise RuntimeError("boom")
        assert default_ellipsoid() is CGCS2000

    def test_set_settings_returns_previous(self):
        previous = set_settings(GeodeticSettings(ellipsoid=WGS84))
        try:
            assert previous.ellipsoid is CGCS2000
            assert default_ellipsoid() is WGS84
        finally:
            set_settings(previous)

    def test_settings_are_frozen(self):
        with pytest.raises(AttributeError):
            get_settings().linear_unit = "foot"

    @pytest.mark.parametrize("changes", [
        {"linear_unit": "degree"},
        {"angular_unit": "meter"},
        {"linear_unit": "second"},
    ])
    def test_unit_validation(self, changes):
        with pytest.raises(pint.DimensionalityError):
            GeodeticSettings(**changes)

    def test_unknown_unit(self):
        with pytest.raises(pint.UndefinedUnitError):
            GeodeticSettings(linear_unit="furlongs_per_fortnight_x")


class TestConvergenceLog:

    def test_singleton(self):
        assert ConvergenceLog() is ConvergenceLog()

    def test_record_and_summary(self, convergence_log):
        event = convergence_log.record("ellipsoid.j2", iterations=51, residual=2e-15, converged=False)
        convergence_log.record("vincenty.inverse", iterations=20, residual=1e-9, converged=False,
                               context={"lat1": 0.0})
        convergence_log.record("vincenty.inverse", iterations=4, residual=0.0, converged=True)

        assert event.solver == "ellipsoid.j2"
        assert not event.converged
        assert len(convergence_log.events()) == 3
        assert len(convergence_log.events("vincenty.inverse")) == 2
        assert convergence_log.events("vincenty.inverse")[0].context == {"lat1": 0.0}
        assert convergence_log.summary() == {
            "ellipsoid.j2": {"converged": 0, "not_converged": 1},
            "vincenty.inverse": {"converged": 1, "not_converged": 1},
        }

    def test_clear(self, convergence_log):
        convergence_log.record("x", iterations=1, residual=0.0, converged=True)
        convergence_log.clear()
        assert convergence_log.events() == []
        assert convergence_log.summary() == {}

    def test_get_logger_adds_one_handler(self):
        first = get_logger("geodesy.test")
        second = get_logger("geodesy.test", level=logging.DEBUG)
        assert first is second
        assert len(second.handlers) == 1
        assert second.level == logging.DEBUG


class TestErrors:

    @pytest.mark.parametrize("error", [
        InvalidInputError("bad"),
        ConvergenceError("slow", iterations=10),
        MissingParameterError("central_meridian"),
        CannotResolveError("singular"),
    ])
    def test_hierarchy(self, error):
        assert isinstance(error, GeodeticError)
        assert isinstance(error, ValueError)

    def test_attributes(self):
        assert MissingParameterError("lat1").parameter == "lat1"
        assert "lat1" in str(MissingParameterError("lat1"))
        error = ConvergenceError("slow", iterations=10, context={"residual": 1e-3})
        assert error.iterations == 10
        assert error.context["residual"] == 1e-3
        assert InvalidInputError("bad").context == {}
