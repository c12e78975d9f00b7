"""Behaviour composition -- one particle's steering decision per tick.

Three influences are combined into a new velocity:

- **Aggregation (DLA)**: a free particle within ``3 * particle_size`` of
  a stuck one sticks with ``sticking_probability``.  Sticking wins over
  everything else.  Stuck particles roll ``release_probability`` each
  tick to come loose.
- **Chemotaxis**: three sensors (left, centre, right) sample the field
  ahead of the particle.  The particle keeps going and speeds up when
  the centre is strongest, turns by ``turn_speed`` toward the stronger
  side otherwise, and wanders randomly when it senses nothing.
- **Flocking**: alignment, cohesion and separation over neighbours
  within ``perception_radius``, blended 60/40 with the chemical
  velocity.  The blend weights are fixed even when every flocking force
  is zero.

The result is renormalised to ``move_speed``.  Integration, wrapping
and deposit are done by the engine.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from numpy.random import Generator

    from moldsim.field.grid import ScalarField
    from moldsim.particles.particle import Particle
    from moldsim.particles.spatial import SpatialIndex
    from moldsim.simulation.config import SimulationParams

# -- Constants ---------------------------------------------------------------

_STICK_DISTANCE_FACTOR = 3.0  # sticking reach in particle sizes
_SEPARATION_FALLOFF = 0.25  # separation decay length / perception radius
_CENTRE_BOOST = 0.5  # speed boost per unit of centre reading
_CHEMICAL_WEIGHT = 0.6
_FLOCK_WEIGHT = 0.4


class StepResult(Enum):
    """What happened to a particle during its behaviour step."""

    STEER = auto()  # free particle with a fresh velocity; engine moves it
    STICK = auto()  # became stuck this tick
    HOLD = auto()  # was stuck and stays stuck
    RELEASE = auto()  # was stuck and came loose; motionless until next tick


def sense(
    particle: Particle,
    field: ScalarField,
    params: SimulationParams,
) -> tuple[float, float, float]:
    """Sample the field at the left, centre and right sensors.

    Args:
        particle: The sensing particle.
        field: The scalar field.
        params: Current simulation parameters.

    Returns:
        ``(left, centre, right)`` readings; 0.0 beyond the grid edge.
    """
    distance = params.sensor_distance * params.particle_size
    x, y, angle = particle.x, particle.y, particle.angle
    return (
        field.sense(x, y, angle - params.sensor_angle, distance),
        field.sense(x, y, angle, distance),
        field.sense(x, y, angle + params.sensor_angle, distance),
    )


def chemical_velocity(
    particle: Particle,
    field: ScalarField,
    params: SimulationParams,
    rng: Generator,
) -> tuple[float, float]:
    """Return the velocity suggested by the three field sensors."""
    left, centre, right = sense(particle, field, params)

    if max(left, centre, right) <= 0:
        # Nothing sensed: bounded random walk.
        turn = float(rng.uniform(-0.5, 0.5)) * params.turn_speed
        angle = particle.angle + turn
    elif centre > left and centre > right:
        boost = 1.0 + centre * _CENTRE_BOOST
        return particle.vx * boost, particle.vy * boost
    elif left > right:
        angle = particle.angle - params.turn_speed
    else:
        angle = particle.angle + params.turn_speed

    return math.cos(angle) * particle.speed, math.sin(angle) * particle.speed


def step_particle(
    index: int,
    particles: Sequence[Particle],
    spatial: SpatialIndex,
    field: ScalarField,
    params: SimulationParams,
    rng: Generator,
) -> StepResult:
    """Compute one tick of behaviour for ``particles[index]``.

    Mutates the particle's ``vx``, ``vy``, ``angle``, ``speed`` and
    ``is_stuck`` in-place.  Position is left to the caller.

    Args:
        index: Index of the particle to update.
        particles: All particles (the list the index was built from).
        spatial: Spatial index rebuilt for this tick.
        field: Scalar field to sense.
        params: Current simulation parameters.
        rng: Seeded random generator.

    Returns:
        The StepResult describing the particle's state transition.
    """
    particle = particles[index]

    if particle.is_stuck:
        if float(rng.random()) < params.release_probability:
            particle.is_stuck = False
            particle.speed = params.move_speed
            particle.vx = math.cos(particle.angle) * params.move_speed
            particle.vy = math.sin(particle.angle) * params.move_speed
            return StepResult.RELEASE
        return StepResult.HOLD

    perception = params.perception_radius
    stick_reach = params.particle_size * _STICK_DISTANCE_FACTOR
    falloff = perception * _SEPARATION_FALLOFF

    align_x = align_y = 0.0
    centre_x = centre_y = 0.0
    sep_x = sep_y = 0.0
    count = 0
    near_stuck = False

    for j, dx, dy, dist in spatial.neighbors_within(
        index,
        particles,
        max(perception, stick_reach),
    ):
        other = particles[j]
        if other.is_stuck and dist < stick_reach:
            near_stuck = True
        if dist < perception:
            align_x += other.vx
            align_y += other.vy
            centre_x += other.x
            centre_y += other.y
            if dist > 0:
                force = math.exp(-dist / falloff)
                sep_x -= dx / dist * force
                sep_y -= dy / dist * force
            count += 1

    if near_stuck and float(rng.random()) < params.sticking_probability:
        particle.is_stuck = True
        particle.vx = 0.0
        particle.vy = 0.0
        return StepResult.STICK

    vx, vy = chemical_velocity(particle, field, params, rng)

    if count > 0:
        align_x = align_x / count * params.alignment_force
        align_y = align_y / count * params.alignment_force
        coh_x = (centre_x / count - particle.x) / perception * params.cohesion_force
        coh_y = (centre_y / count - particle.y) / perception * params.cohesion_force
        sep_x *= params.separation_force / count
        sep_y *= params.separation_force / count
        vx = vx * _CHEMICAL_WEIGHT + (align_x + coh_x + sep_x) * _FLOCK_WEIGHT
        vy = vy * _CHEMICAL_WEIGHT + (align_y + coh_y + sep_y) * _FLOCK_WEIGHT

    norm = math.hypot(vx, vy)
    if norm > 0:
        vx = vx / norm * params.move_speed
        vy = vy / norm * params.move_speed

    particle.vx = vx
    particle.vy = vy
    particle.angle = math.atan2(vy, vx)
    particle.speed = params.move_speed
    return StepResult.STEER
