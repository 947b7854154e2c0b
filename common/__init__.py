"""
Common utilities and infrastructure for the geodesy library.

This package provides foundational components used across all modules:
- Defining constants of the reference ellipsoids and numerical tolerances
- Unit registry and dimensional analysis
- The exception hierarchy
- Logging and the convergence log of iterative solvers
"""

from common.constants import (
    Constant,
    GeodeticConstants,
    EPSILON3,
    EPSILON4,
    EPSILON5,
    ANGLE_EPSILON,
    MAX_ITERATIONS,
)
from common.errors import (
    GeodeticError,
    InvalidInputError,
    ConvergenceError,
    MissingParameterError,
    CannotResolveError,
)
from common.units import UnitRegistry, units, ureg, Q_
from common.logging_config import get_logger, ConvergenceEvent, ConvergenceLog

__all__ = [
    # Constants
    "Constant",
    "GeodeticConstants",
    "EPSILON3",
    "EPSILON4",
    "EPSILON5",
    "ANGLE_EPSILON",
    "MAX_ITERATIONS",
    # Errors
    "GeodeticError",
    "InvalidInputError",
    "ConvergenceError",
    "MissingParameterError",
    "CannotResolveError",
    # Units
    "UnitRegistry",
    "units",
    "ureg",
    "Q_",
    # Logging
    "get_logger",
    "ConvergenceEvent",
    "ConvergenceLog",
]
