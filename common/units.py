"""
Unit Registry for Angular and Linear Quantities.

This module provides a centralized unit system using the `pint` library.
Geodetic values are stored internally in a base unit per dimension
(decimal degrees for angles, meters for lengths); every other unit is a
multiplicative factor against that base. Coordinates and angles carry a
unit name and convert through this registry.

Example Usage
-------------
>>> from common.units import units
>>> units.convert(1.0, 'degree', 'arcsecond')
3600.0
>>> units.factor('kilometer')
1000.0
"""

import pint
from pint import UnitRegistry as PintUnitRegistry

# Create the global unit registry
ureg = PintUnitRegistry()

# Convenience alias for creating quantities
Q_ = ureg.Quantity

# Base unit of each dimension handled by the library
BASE_UNITS = {
    "[angle]": "degree",
    "[length]": "meter",
}


class UnitRegistry:
    """Wrapper around pint UnitRegistry with geodesy-specific helpers.

    Attributes
    ----------
    registry : pint.UnitRegistry
        The underlying pint unit registry.

    Examples
    --------
    >>> units = UnitRegistry()
    >>> units.quantity(1.5, 'gon').to('degree')
    <Quantity(1.35, 'degree')>
    """

    def __init__(self):
        self._registry = ureg

    @property
    def registry(self) -> PintUnitRegistry:
        """Access the underlying pint registry."""
        return self._registry

    def quantity(self, value: float, unit: str) -> pint.Quantity:
        """Create a quantity with units.

        Parameters
        ----------
        value : float
            The numerical value.
        unit : str
            The unit string (e.g., 'degree', 'arcsecond', 'foot').

        Returns
        -------
        pint.Quantity
            A quantity object with associated units.
        """
        return self._registry.Quantity(value, unit)

    def validate_dimensionality(
        self,
        quantity: pint.Quantity,
        expected_dim: str
    ) -> bool:
        """Check if a quantity has the expected dimensionality.

        Parameters
        ----------
        quantity : pint.Quantity
            The quantity to check.
        expected_dim : str
            The expected dimensionality (e.g., '[length]').

        Returns
        -------
        bool
            True if dimensionality matches.

        Raises
        ------
        pint.DimensionalityError
            If dimensionality does not match.
        """
        expected = self._registry.get_dimensionality(expected_dim)
        if quantity.dimensionality != expected:
            raise pint.DimensionalityError(
                quantity.units,
                expected,
                quantity.dimensionality,
                expected
            )
        return True

    def base_unit(self, unit: str) -> str:
        """Return the library base unit sharing the dimension of `unit`.

        Angles have dimension ``[]`` in pint (radians are dimensionless),
        so any dimensionless unit that converts to radians is treated as
        an angle.
        """
        dimensionality = self._registry.parse_units(unit).dimensionality
        if dimensionality == self._registry.get_dimensionality("[length]"):
            return BASE_UNITS["[length]"]
        if not dimensionality:
            return BASE_UNITS["[angle]"]
        raise pint.DimensionalityError(unit, "[length] or [angle]")

    def factor(self, unit: str) -> float:
        """Conversion factor from `unit` to its base unit.

        Parameters
        ----------
        unit : str
            Angular or linear unit name.

        Returns
        -------
        float
            Value of one `unit` expressed in the base unit.
        """
        return float(self._registry.Quantity(1.0, unit).to(self.base_unit(unit)).magnitude)

    def convert(self, value: float, from_unit: str, to_unit: str) -> float:
        """Convert a bare value between two compatible units.

        Parameters
        ----------
        value : float
            Value expressed in `from_unit`.
        from_unit, to_unit : str
            Unit names.

        Returns
        -------
        float
            The value expressed in `to_unit`.
        """
        if from_unit == to_unit:
            return value
        return float(self._registry.Quantity(value, from_unit).to(to_unit).magnitude)


# Shared instance used by the coordinate and angle types
units = UnitRegistry()
