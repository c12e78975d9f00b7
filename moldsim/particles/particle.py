"""Particle -- a single chemotactic agent on the toroidal plane."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from numpy.random import Generator


@dataclass
class Particle:
    """A single mould particle.

    Attributes:
        x: Column coordinate in ``[0, width)``.
        y: Row coordinate in ``[0, height)``.
        angle: Heading in radians (0 = east, pi/2 = south).
        speed: Nominal speed used when steering.
        vx: Velocity along x, cells per tick.
        vy: Velocity along y, cells per tick.
        is_stuck: Aggregated particles are frozen with zero velocity.
    """

    x: float
    y: float
    angle: float = 0.0
    speed: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    is_stuck: bool = False

    @classmethod
    def random(
        cls,
        width: float,
        height: float,
        speed: float,
        rng: Generator,
    ) -> Particle:
        """Create a free particle at a uniformly random position.

        Heading and velocity direction come from two independent draws,
        so a fresh particle does not necessarily move where it faces.

        Args:
            width: Plane width.
            height: Plane height.
            speed: Velocity magnitude.
            rng: Seeded random generator.

        Returns:
            A new free Particle.
        """
        x = float(rng.uniform(0.0, width))
        y = float(rng.uniform(0.0, height))
        angle = float(rng.uniform(0.0, 2.0 * math.pi))
        direction = float(rng.uniform(0.0, 2.0 * math.pi))
        return cls(
            x=x,
            y=y,
            angle=angle,
            speed=speed,
            vx=math.cos(direction) * speed,
            vy=math.sin(direction) * speed,
        )

    @classmethod
    def pinned(cls, x: float, y: float) -> Particle:
        """Create a stuck particle with zero velocity at ``(x, y)``."""
        return cls(x=x, y=y, is_stuck=True)

    @property
    def velocity_norm(self) -> float:
        """Return the magnitude of ``(vx, vy)``."""
        return math.hypot(self.vx, self.vy)
