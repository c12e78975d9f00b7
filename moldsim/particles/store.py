"""ParticleStore — the dynamic particle list and its resize rules.

Parameter edits never tear the collection down: a new particle count is
reconciled against the live list so that stuck (aggregated) particles
survive slider drags whenever possible.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from moldsim.particles.particle import Particle

if TYPE_CHECKING:
    from numpy.random import Generator

logger = logging.getLogger(__name__)


@dataclass
class ParticleStore:
    """All particles living on a ``width x height`` plane.

    Attributes:
        width: Plane width used for random spawns.
        height: Plane height used for random spawns.
        particles: Live particles, in update order.
    """

    width: float
    height: float
    particles: list[Particle] = field(default_factory=list)

    @property
    def stuck_count(self) -> int:
        """Return how many particles are currently stuck."""
        return sum(1 for p in self.particles if p.is_stuck)

    def initialize(self, count: int, speed: float, rng: Generator) -> None:
        """Discard every particle and spawn ``count`` random ones.

        Args:
            count: Number of particles (negative values clamp to 0).
            speed: Initial velocity magnitude.
            rng: Seeded random generator.
        """
        self.particles.clear()
        self._spawn(max(0, count), speed, rng)

    def reconcile_count(self, new_count: int, speed: float, rng: Generator) -> None:
        """Grow or shrink the list to ``new_count`` particles.

        Growing appends random particles and leaves existing ones alone.
        Shrinking removes free particles first, taken from the tail of
        the free subset; stuck particles are only removed, from the tail,
        once no free particle is left.

        Args:
            new_count: Target size (negative values clamp to 0).
            speed: Velocity magnitude for newly spawned particles.
            rng: Seeded random generator.
        """
        new_count = max(0, new_count)
        current = len(self.particles)
        if new_count > current:
            self._spawn(new_count - current, speed, rng)
        elif new_count < current:
            to_remove = current - new_count
            free = [i for i, p in enumerate(self.particles) if not p.is_stuck]
            doomed = set(free[::-1][:to_remove])
            self.particles[:] = [
                p for i, p in enumerate(self.particles) if i not in doomed
            ]
            remaining = to_remove - len(doomed)
            if remaining > 0:
                del self.particles[-remaining:]
            logger.debug(
                "Removed %d particles (%d stuck)",
                to_remove,
                max(0, remaining),
            )

    def rescale_speed(self, new_speed: float) -> None:
        """Rescale every free particle's velocity to ``new_speed``.

        Direction is preserved; zero-length velocities are left as-is.
        """
        for p in self.particles:
            if p.is_stuck:
                continue
            norm = p.velocity_norm
            if norm > 0:
                scale = new_speed / norm
                p.vx *= scale
                p.vy *= scale
            p.speed = new_speed

    def spawn_pinned(self, x: float, y: float) -> Particle:
        """Append a stuck, motionless particle at ``(x, y)``."""
        particle = Particle.pinned(x, y)
        self.particles.append(particle)
        return particle

    def _spawn(self, count: int, speed: float, rng: Generator) -> None:
        for _ in range(count):
            self.particles.append(
                Particle.random(self.width, self.height, speed, rng),
            )

    def __len__(self) -> int:
        return len(self.particles)

    def __iter__(self) -> Iterator[Particle]:
        return iter(self.particles)

    def __getitem__(self, index: int) -> Particle:
        return self.particles[index]
