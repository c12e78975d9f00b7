"""SpatialIndex — uniform hash grid over particle positions.

Buckets hold particle *indices* into the particle list, keyed by
``(floor(x / cell_size), floor(y / cell_size))``.  The index is rebuilt
from scratch every tick; bucket lists are kept between rebuilds and
only cleared, so a steady-state tick allocates no new buckets.
Membership is never stored on the particle: lookups recompute the key
from the current position.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from moldsim.particles.particle import Particle

DEFAULT_CELL_SIZE = 10.0


class SpatialIndex:
    """Per-tick particle bucket grid for bounded-radius neighbour queries."""

    def __init__(self, cell_size: float = DEFAULT_CELL_SIZE) -> None:
        self._cell_size = cell_size
        self._cells: dict[tuple[int, int], list[int]] = {}
        self._active_keys: list[tuple[int, int]] = []

    @property
    def cell_size(self) -> float:
        return self._cell_size

    def cell_key(self, x: float, y: float) -> tuple[int, int]:
        return (math.floor(x / self._cell_size), math.floor(y / self._cell_size))

    def clear(self) -> None:
        for key in self._active_keys:
            self._cells[key].clear()
        self._active_keys.clear()

    def insert(self, index: int, x: float, y: float) -> None:
        key = self.cell_key(x, y)
        bucket = self._cells.get(key)
        if bucket is None:
            bucket = []
            self._cells[key] = bucket
        if not bucket:
            # New or cleared at the start of this rebuild.
            self._active_keys.append(key)
        bucket.append(index)

    def rebuild(self, particles: Sequence[Particle]) -> None:
        """Clear the grid and reinsert every particle by its position."""
        self.clear()
        for i, p in enumerate(particles):
            self.insert(i, p.x, p.y)

    def candidates(self, x: float, y: float, radius: float) -> Iterator[int]:
        """Yield indices in every cell within ``ceil(radius / cell_size)``.

        This is a square superset of the disk; callers filter by
        distance.
        """
        cx, cy = self.cell_key(x, y)
        reach = math.ceil(max(0.0, radius) / self._cell_size)
        cells = self._cells
        for dy in range(-reach, reach + 1):
            for dx in range(-reach, reach + 1):
                bucket = cells.get((cx + dx, cy + dy))
                if bucket:
                    yield from bucket

    def neighbors_within(
        self,
        index: int,
        particles: Sequence[Particle],
        radius: float,
    ) -> list[tuple[int, float, float, float]]:
        """Return particles within ``radius`` of ``particles[index]``.

        Args:
            index: Query particle index (excluded from the result).
            particles: The list the index was rebuilt from.
            radius: Euclidean search radius (inclusive).

        Returns:
            ``(j, dx, dy, distance)`` tuples, offsets measured from the
            query particle to particle ``j``.
        """
        me = particles[index]
        px, py = me.x, me.y
        r_sq = radius * radius
        found: list[tuple[int, float, float, float]] = []
        for j in self.candidates(px, py, radius):
            if j == index:
                continue
            other = particles[j]
            dx = other.x - px
            dy = other.y - py
            d_sq = dx * dx + dy * dy
            if d_sq <= r_sq:
                found.append((j, dx, dy, math.sqrt(d_sq)))
        return found

    def __len__(self) -> int:
        return sum(len(self._cells[key]) for key in self._active_keys)
