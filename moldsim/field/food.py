"""Food sources — user-placed circular regions pinned to a strength.

Sources have no lifetime of their own: they are appended by the
attract tool, removed by the erase tool and cleared on request.  The
diffusion pass stamps them into the field each tick.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass
class FoodSource:
    """A circular region forcing field cells to ``strength``.

    Attributes:
        x: Centre column coordinate.
        y: Centre row coordinate.
        radius: Radius in particle-size units.
        strength: Value written into every covered cell.
    """

    x: float
    y: float
    radius: float
    strength: float = 1.0


@dataclass
class FoodSourceRegistry:
    """Ordered list of food sources (later sources overwrite earlier ones)."""

    sources: list[FoodSource] = field(default_factory=list)

    def add(
        self,
        x: float,
        y: float,
        radius: float,
        strength: float = 1.0,
    ) -> FoodSource:
        """Append a food source.

        Args:
            x: Centre column coordinate.
            y: Centre row coordinate.
            radius: Radius in particle-size units (clamped to >= 0).
            strength: Stamped concentration.

        Returns:
            The newly registered source.
        """
        source = FoodSource(x=x, y=y, radius=max(0.0, radius), strength=strength)
        self.sources.append(source)
        return source

    def remove_near(self, x: float, y: float, radius: float) -> int:
        """Drop every source whose centre lies strictly within ``radius``.

        Args:
            x: Query column coordinate.
            y: Query row coordinate.
            radius: Erase radius.

        Returns:
            Number of sources removed.
        """
        r_sq = max(0.0, radius) ** 2
        before = len(self.sources)
        self.sources = [
            s for s in self.sources if (s.x - x) ** 2 + (s.y - y) ** 2 >= r_sq
        ]
        return before - len(self.sources)

    def clear(self) -> None:
        """Remove all sources."""
        self.sources.clear()

    def __iter__(self) -> Iterator[FoodSource]:
        return iter(self.sources)

    def __len__(self) -> int:
        return len(self.sources)
