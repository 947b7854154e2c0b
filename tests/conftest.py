"""Shared fixtures for the geodesy test suite."""

import pytest

from common.logging_config import ConvergenceLog
from geospatial.ellipsoid import CGCS2000, GRS80, WGS84


@pytest.fixture
def wgs84():
    return WGS84


@pytest.fixture
def grs80():
    return GRS80


@pytest.fixture
def cgcs2000():
    return CGCS2000


@pytest.fixture
def convergence_log():
    """Process-wide convergence log, emptied before and after the test."""
    log = ConvergenceLog()
    log.clear()
    yield log
    log.clear()
