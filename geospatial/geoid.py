"""
Geoid Undulation Models.

A geoid model returns the height N of the geoid above the ellipsoid,
interpolated bilinearly from a regular latitude/longitude grid. Grid rows
run from north to south and columns from west to east.

Concrete models provide the grid values through :meth:`GeoidModel.read_grid`;
:class:`ArrayGeoidModel` holds them in memory as a numpy array.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import math
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from common.errors import InvalidInputError
from common.logging_config import get_logger
from geospatial.angles import Angle
from geospatial.projections.base import AngleLike

logger = get_logger(__name__)


@dataclass(frozen=True)
class GridCell:
    """Grid cell holding a point, with the point's position inside it.

    Attributes
    ----------
    row, col : int
        Indices of the cell's north-west corner.
    row_fraction, col_fraction : float
        Offsets in [0, 1) southwards and eastwards from that corner.
    """
    row: int
    col: int
    row_fraction: float
    col_fraction: float


class GeoidModel(ABC):
    """Abstract regular-grid geoid model.

    Parameters
    ----------
    top : float
        Latitude of the first grid row in degrees.
    left : float
        Longitude of the first grid column in degrees.
    grid_lat, grid_lon : float
        Grid spacing in degrees.
    rows, columns : int
        Grid size.
    name : str
        Model name.
    """

    def __init__(
        self,
        top: float,
        left: float,
        grid_lat: float,
        grid_lon: float,
        rows: int,
        columns: int,
        name: str = ""
    ):
        if grid_lat <= 0 or grid_lon <= 0:
            raise InvalidInputError("Grid spacing must be positive")
        if rows < 2 or columns < 2:
            raise InvalidInputError("A geoid grid needs at least 2 rows and 2 columns")
        self.top = top
        self.left = left
        self.grid_lat = grid_lat
        self.grid_lon = grid_lon
        self.rows = rows
        self.columns = columns
        self.name = name

    @property
    def bottom(self) -> float:
        return self.top - (self.rows - 1) * self.grid_lat

    @property
    def right(self) -> float:
        return self.left + (self.columns - 1) * self.grid_lon

    @property
    def is_global(self) -> bool:
        """Whether the columns wrap around the full circle of longitude."""
        return math.isclose(self.columns * self.grid_lon, 360.0) or self.columns * self.grid_lon > 360.0

    def get_boundary(self, lat_deg: float, lon_deg: float) -> GridCell:
        """Locate the grid cell containing a point.

        Raises
        ------
        InvalidInputError
            If the point lies outside the grid.
        """
        if not self.bottom <= lat_deg <= self.top:
            raise InvalidInputError(
                f"Latitude {lat_deg} outside geoid grid [{self.bottom}, {self.top}]"
            )

        lon_offset = lon_deg - self.left
        if self.is_global:
            lon_offset %= 360.0
        elif not 0.0 <= lon_offset <= self.right - self.left:
            raise InvalidInputError(
                f"Longitude {lon_deg} outside geoid grid [{self.left}, {self.right}]"
            )

        row_pos = (self.top - lat_deg) / self.grid_lat
        col_pos = lon_offset / self.grid_lon

        row = min(int(row_pos), self.rows - 2)
        col = int(col_pos)
        if not self.is_global:
            col = min(col, self.columns - 2)
        return GridCell(row, col, row_pos - row, col_pos - col)

    @abstractmethod
    def read_grid(self, row: int, col: int) -> Tuple[float, float, float, float]:
        """Undulations at the corners of a cell.

        Returns
        -------
        tuple
            (north-west, north-east, south-west, south-east) in meters.
        """
        pass

    def get_height(self, lat: AngleLike, lon: AngleLike) -> float:
        """Geoid undulation at a point by bilinear interpolation, in meters."""
        lat_deg = lat.degrees if isinstance(lat, Angle) else float(lat)
        lon_deg = lon.degrees if isinstance(lon, Angle) else float(lon)

        cell = self.get_boundary(lat_deg, lon_deg)
        nw, ne, sw, se = self.read_grid(cell.row, cell.col)
        u, v = cell.col_fraction, cell.row_fraction

        north = nw + (ne - nw) * u
        south = sw + (se - sw) * u
        return float(north + (south - north) * v)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, top={self.top}, left={self.left}, "
            f"rows={self.rows}, columns={self.columns})"
        )


class ArrayGeoidModel(GeoidModel):
    """Geoid model backed by an in-memory grid.

    Parameters
    ----------
    grid : array_like
        Undulations in meters, shape (rows, columns), first row northmost.
    top, left : float
        Coordinates of ``grid[0, 0]`` in degrees.
    grid_lat, grid_lon : float
        Grid spacing in degrees.
    name : str, optional

    Examples
    --------
    >>> model = ArrayGeoidModel([[0.0, 2.0], [2.0, 4.0]], top=1.0, left=0.0,
    ...                         grid_lat=1.0, grid_lon=1.0)
    >>> model.get_height(0.5, 0.5)
    2.0
    """

    def __init__(
        self,
        grid: NDArray[np.float64],
        top: float,
        left: float,
        grid_lat: float,
        grid_lon: float,
        name: Optional[str] = None
    ):
        values = np.asarray(grid, dtype=np.float64)
        if values.ndim != 2:
            raise InvalidInputError("Geoid grid must be two-dimensional")
        rows, columns = values.shape
        super().__init__(top, left, grid_lat, grid_lon, rows, columns, name or "array")
        self._grid = values

    def read_grid(self, row: int, col: int) -> Tuple[float, float, float, float]:
        next_col = col + 1
        if next_col >= self.columns:
            next_col = 0 if self.is_global else col
        col %= self.columns
        next_row = min(row + 1, self.rows - 1)
        g = self._grid
        return (
            float(g[row, col]),
            float(g[row, next_col]),
            float(g[next_row, col]),
            float(g[next_row, next_col]),
        )
