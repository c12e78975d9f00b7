"""ScalarField — the diffusing chemical concentration grid.

The field is stored as a single NumPy 2D array indexed ``grid[y, x]``.
It provides deposit/read operations; the blur, decay and food stamping
pass lives in ``diffusion.py`` and replaces ``grid`` wholesale each
tick.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

_MAX_DEPOSIT = 1.0


def disk_offsets(radius: int) -> list[tuple[int, int]]:
    """Return integer ``(dx, dy)`` offsets with ``dx² + dy² <= radius²``.

    Args:
        radius: Disk radius in cells (negative values give the origin only).

    Returns:
        Offsets in row-major order, origin included.
    """
    radius = max(0, radius)
    r_sq = radius * radius
    return [
        (dx, dy)
        for dy in range(-radius, radius + 1)
        for dx in range(-radius, radius + 1)
        if dx * dx + dy * dy <= r_sq
    ]


@dataclass
class ScalarField:
    """A ``width x height`` grid of chemical concentration.

    Attributes:
        width: Grid columns.
        height: Grid rows.
        grid: Concentration values, shape ``(height, width)``.
    """

    width: int
    height: int
    grid: NDArray[np.float64] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Allocate an all-zero grid."""
        self.width = max(0, int(self.width))
        self.height = max(0, int(self.height))
        self.grid = np.zeros((self.height, self.width), dtype=np.float64)

    @property
    def buffer(self) -> NDArray[np.float64]:
        """Flat row-major view of the grid (length ``width * height``)."""
        return self.grid.reshape(-1)

    def in_bounds(self, x: float, y: float) -> bool:
        """Return True if ``(x, y)`` lies in ``[0, width) x [0, height)``."""
        return 0 <= x < self.width and 0 <= y < self.height

    def deposit(self, x: float, y: float, amount: float) -> None:
        """Add chemical to the cell containing ``(x, y)``.

        The write is clamped to 1.0.  Points outside the grid are
        ignored.

        Args:
            x: Column coordinate.
            y: Row coordinate.
            amount: Quantity to add.
        """
        if not self.in_bounds(x, y):
            return
        cx, cy = math.floor(x), math.floor(y)
        self.grid[cy, cx] = min(_MAX_DEPOSIT, self.grid[cy, cx] + amount)

    def deposit_disk(self, x: float, y: float, radius: int, amount: float) -> None:
        """Deposit ``amount`` into every cell of a disk around ``(x, y)``.

        Cells falling outside the grid are skipped, not wrapped.

        Args:
            x: Centre column coordinate.
            y: Centre row coordinate.
            radius: Disk radius in cells.
            amount: Per-cell quantity.
        """
        grid = self.grid
        for dx, dy in disk_offsets(radius):
            px = math.floor(x + dx)
            py = math.floor(y + dy)
            if 0 <= px < self.width and 0 <= py < self.height:
                grid[py, px] = min(_MAX_DEPOSIT, grid[py, px] + amount)

    def query(self, x: float, y: float) -> float:
        """Read the concentration at ``(x, y)``; 0.0 outside the grid."""
        if not self.in_bounds(x, y):
            return 0.0
        return float(self.grid[math.floor(y), math.floor(x)])

    def sense(self, x: float, y: float, angle: float, distance: float) -> float:
        """Read the concentration ``distance`` cells away along ``angle``."""
        return self.query(
            x + math.cos(angle) * distance,
            y + math.sin(angle) * distance,
        )

    def clear(self) -> None:
        """Reset every cell to zero."""
        self.grid = np.zeros((self.height, self.width), dtype=np.float64)

    def total(self) -> float:
        """Return the summed concentration over all cells."""
        return float(self.grid.sum())
