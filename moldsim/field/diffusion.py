"""Food stamping, blur and decay for the scalar field.

Operates on the raw NumPy array inside ``ScalarField``.  Separated from
``grid.py`` so that the diffusion approximation can be swapped or
optimised independently.

The blur is a local average over a disk, not a PDE solve.  Every pass
reads one array and writes a freshly allocated one, so no cell ever
sees a value already updated in the same pass.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

import numpy as np
from numpy.typing import NDArray

from moldsim.field.food import FoodSource
from moldsim.field.grid import ScalarField, disk_offsets


def inject_food(
    grid: NDArray[np.float64],
    sources: Iterable[FoodSource],
    particle_size: float,
) -> None:
    """Set every cell covered by a food source to the source's strength.

    Sources are applied in order, so overlapping sources resolve to the
    last one.  A cell at offset ``(dx, dy)`` is covered when
    ``(dx² + dy²) / size² <= radius²``.  Cells outside the grid are
    skipped.  Modifies ``grid`` in-place.

    Args:
        grid: Field array, shape ``(height, width)``.
        sources: Food sources in registry order.
        particle_size: Scale applied to source radii.
    """
    height, width = grid.shape
    size = particle_size if particle_size > 0 else 1.0
    size_sq = size * size
    for food in sources:
        r_sq = food.radius * food.radius
        reach = max(1, math.floor(food.radius * size))
        for dy in range(-reach, reach + 1):
            for dx in range(-reach, reach + 1):
                if (dx * dx + dy * dy) / size_sq > r_sq:
                    continue
                px = math.floor(food.x + dx)
                py = math.floor(food.y + dy)
                if 0 <= px < width and 0 <= py < height:
                    grid[py, px] = food.strength


def blur(
    grid: NDArray[np.float64],
    radius: int,
    diffusion_rate: float,
) -> NDArray[np.float64]:
    """Blend each cell with the mean of its wrapped disk neighbourhood.

    ``new = mean * diffusion_rate + self * (1 - diffusion_rate)``

    Args:
        grid: Input array (not modified).
        radius: Neighbourhood disk radius in cells.
        diffusion_rate: Weight of the neighbourhood mean.

    Returns:
        A new array of the same shape.
    """
    offsets = disk_offsets(radius)
    total = np.zeros_like(grid)
    for dx, dy in offsets:
        # rolled[y, x] == grid[(y + dy) % h, (x + dx) % w]
        total += np.roll(grid, shift=(-dy, -dx), axis=(0, 1))
    mean = total / len(offsets)
    return mean * diffusion_rate + grid * (1.0 - diffusion_rate)


def step_diffusion(
    field: ScalarField,
    food_sources: Iterable[FoodSource],
    *,
    diffusion_rate: float,
    decay_rate: float,
    particle_size: float,
) -> None:
    """Run one tick of food injection, blur and decay on ``field``.

    Args:
        field: The scalar field; its ``grid`` is replaced.
        food_sources: Sources to stamp before blurring.
        diffusion_rate: Weight of the neighbourhood mean.
        decay_rate: Fraction lost per tick after blurring.
        particle_size: Sets the blur radius and scales food radii.
    """
    if field.grid.size == 0:
        return
    inject_food(field.grid, food_sources, particle_size)
    radius = max(1, math.floor(particle_size))
    blended = blur(field.grid, radius, diffusion_rate)
    blended *= 1.0 - decay_rate
    field.grid = blended
