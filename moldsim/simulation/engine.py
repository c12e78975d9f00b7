"""SimulationEngine — the per-tick loop and the command surface.

Owns all simulation state and advances it in a fixed order:

1. Rebuild the spatial index from current positions
2. Update particles in list order (behaviour, move, wrap, deposit)
3. Stamp food sources, blur and decay the field

Commands (restart, spawn, food edits, parameter updates) and ticks run
on the same sequential timeline; nothing here blocks or does I/O.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import NamedTuple

import numpy as np
from numpy.random import Generator
from numpy.typing import NDArray

from moldsim.field.diffusion import step_diffusion
from moldsim.field.food import FoodSource, FoodSourceRegistry
from moldsim.field.grid import ScalarField
from moldsim.particles.behavior import StepResult, step_particle
from moldsim.particles.particle import Particle
from moldsim.particles.spatial import SpatialIndex
from moldsim.particles.store import ParticleStore
from moldsim.simulation.config import SimulationParams

logger = logging.getLogger(__name__)


class SimulationState(NamedTuple):
    """Read-only snapshot handed to renderers.

    ``particles`` holds the live Particle objects; callers must not
    mutate them.  ``field`` is a flat row-major copy of the
    concentration grid taken at snapshot time; later ticks do not change it.
    """

    particles: tuple[Particle, ...]
    field: NDArray[np.float64]
    food_sources: tuple[FoodSource, ...]
    tick: int


@dataclass
class SimulationEngine:
    """Drives the simulation forward tick by tick.

    Attributes:
        width: Plane width in field cells.
        height: Plane height in field cells.
        params: Parameters read at every tick.
        rng: Random generator for every draw; seeded from
            ``params.seed`` when not supplied.
        chemical_field: The scalar chemical field.
        store: All particles.
        food: Registered food sources.
        spatial: Neighbour index, rebuilt every tick.
        tick_count: Number of ticks advanced (paused ticks excluded).
    """

    width: int
    height: int
    params: SimulationParams = field(default_factory=SimulationParams)
    rng: Generator | None = None
    chemical_field: ScalarField = field(init=False)
    store: ParticleStore = field(init=False)
    food: FoodSourceRegistry = field(init=False)
    spatial: SpatialIndex = field(init=False)
    tick_count: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        """Allocate the field and spawn the initial particles."""
        self.width = max(0, int(self.width))
        self.height = max(0, int(self.height))
        if self.rng is None:
            self.rng = np.random.default_rng(self.params.seed)
        self.chemical_field = ScalarField(width=self.width, height=self.height)
        self.store = ParticleStore(width=self.width, height=self.height)
        self.food = FoodSourceRegistry()
        self.spatial = SpatialIndex()
        self.store.initialize(
            self.params.particle_count,
            self.params.move_speed,
            self.rng,
        )
        logger.info(
            "Engine created: %dx%d field, %d particles",
            self.width,
            self.height,
            len(self.store),
        )

    @property
    def particles(self) -> list[Particle]:
        return self.store.particles

    @property
    def food_sources(self) -> list[FoodSource]:
        return self.food.sources

    # -- Tick --------------------------------------------------------------

    def tick(self) -> None:
        """Advance the simulation by one step unless paused."""
        params = self.params
        if params.is_paused:
            return

        particles = self.store.particles
        self.spatial.rebuild(particles)

        radius = max(1, math.floor(params.particle_size))
        per_cell = params.chemical_deposit_rate / (radius * radius)

        for i, particle in enumerate(particles):
            result = step_particle(
                i,
                particles,
                self.spatial,
                self.chemical_field,
                params,
                self.rng,
            )
            if result is not StepResult.STEER:
                continue
            self._move(particle)
            self.chemical_field.deposit_disk(
                particle.x,
                particle.y,
                radius,
                per_cell,
            )

        step_diffusion(
            self.chemical_field,
            self.food,
            diffusion_rate=params.diffusion_rate,
            decay_rate=params.decay_rate,
            particle_size=params.particle_size,
        )
        self.tick_count += 1

    def run(self, ticks: int) -> None:
        """Call ``tick`` ``ticks`` times.

        Args:
            ticks: Number of ticks to advance.
        """
        for _ in range(ticks):
            self.tick()

    def _move(self, particle: Particle) -> None:
        """Integrate one step and wrap toroidally."""
        particle.x = _wrap(particle.x + particle.vx, self.width)
        particle.y = _wrap(particle.y + particle.vy, self.height)

    # -- Commands ----------------------------------------------------------

    def update_parameters(self, params: SimulationParams) -> None:
        """Swap in a new parameter record without resetting particles.

        A change of ``particle_count`` is applied as a delta to the live
        list, so pinned spawns are not counted against the target.
        Speeds of free particles are rescaled to the new move speed.
        Cosmetic fields and the pause flag need no further work.
        """
        old = self.params
        self.params = params
        if params.particle_count != old.particle_count:
            target = len(self.store) + params.particle_count - old.particle_count
            logger.debug(
                "Reconciling particle count %d -> %d",
                len(self.store),
                max(0, target),
            )
            self.store.reconcile_count(target, params.move_speed, self.rng)
        self.store.rescale_speed(params.move_speed)

    def restart(self) -> None:
        """Respawn ``params.particle_count`` fresh particles.

        The field and food sources are left untouched.
        """
        self.store.initialize(
            self.params.particle_count,
            self.params.move_speed,
            self.rng,
        )
        logger.info("Restarted with %d particles", len(self.store))

    def reseed(self, seed: int | None) -> None:
        """Replace the random generator with one seeded by ``seed``."""
        self.rng = np.random.default_rng(seed)

    def spawn_pinned(self, x: float, y: float) -> Particle:
        """Insert a stuck particle at ``(x, y)``."""
        return self.store.spawn_pinned(x, y)

    def add_food_source(
        self,
        x: float,
        y: float,
        radius: float,
        strength: float = 1.0,
    ) -> FoodSource:
        """Register a food source centred at ``(x, y)``."""
        source = self.food.add(x, y, radius, strength)
        logger.debug("Food source added at (%.1f, %.1f) r=%.1f", x, y, radius)
        return source

    def remove_food_sources_near(self, x: float, y: float, radius: float) -> int:
        """Remove food sources centred strictly within ``radius``."""
        removed = self.food.remove_near(x, y, radius)
        if removed:
            logger.debug("Removed %d food sources near (%.1f, %.1f)", removed, x, y)
        return removed

    def clear_food_sources(self) -> None:
        """Remove all food sources and zero the field."""
        self.food.clear()
        self.chemical_field.clear()
        logger.debug("Food sources and field cleared")

    # -- Queries -----------------------------------------------------------

    def get_state(self) -> SimulationState:
        """Return the current particles and a copy of the field buffer."""
        return SimulationState(
            particles=tuple(self.store.particles),
            field=self.chemical_field.buffer.copy(),
            food_sources=tuple(self.food.sources),
            tick=self.tick_count,
        )


def _wrap(value: float, size: int) -> float:
    """Wrap ``value`` into ``[0, size)``."""
    if size <= 0:
        return 0.0
    wrapped = value % size
    # Tiny negatives round up to ``size`` under float modulo.
    if wrapped >= size:
        wrapped = 0.0
    return wrapped
