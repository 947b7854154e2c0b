"""
Error Taxonomy for Geodetic Computations.

Every failure raised by this library derives from :class:`GeodeticError`,
which itself is a ``ValueError`` so callers that only guard against bad
values keep working. The subclasses separate the four kinds of failure a
caller may want to react to differently:

- :class:`InvalidInputError` - a value outside its domain (an angle
  component out of range, an unknown hemisphere flag, mismatched
  coordinate dimensions, an invalid UTM zone).
- :class:`ConvergenceError` - an iterative solver exhausted its
  iteration budget.
- :class:`MissingParameterError` - a required projection parameter was
  not supplied.
- :class:`CannotResolveError` - a least-squares system is singular.

Errors are local to the failing call. Nothing is partially updated, so
values built before the failure (ellipsoids, parameter sets) stay valid.
"""

from typing import Any, Dict, Optional


class GeodeticError(ValueError):
    """Base class of all geodetic computation errors.

    Parameters
    ----------
    message : str
        Human-readable description.
    context : dict, optional
        Additional values describing the failure (offending value,
        iteration count, ...).
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class InvalidInputError(GeodeticError):
    """A value lies outside the domain of the operation."""


class ConvergenceError(GeodeticError):
    """An iterative computation did not converge within its budget.

    Attributes
    ----------
    iterations : int
        Number of iterations performed before giving up.
    """

    def __init__(
        self,
        message: str,
        iterations: int = 0,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, context)
        self.iterations = iterations


class MissingParameterError(GeodeticError):
    """A required projection parameter is absent.

    Attributes
    ----------
    parameter : str
        Name of the missing parameter.
    """

    def __init__(self, parameter: str):
        super().__init__(f"Missing projection parameter '{parameter}'")
        self.parameter = parameter


class CannotResolveError(GeodeticError):
    """The normal equations of a parameter estimation are singular."""
