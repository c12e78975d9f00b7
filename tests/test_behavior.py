"""Tests for moldsim.particles.behavior — sticking, chemotaxis, flocking."""

import math

import pytest
from numpy.random import Generator

from moldsim.field.grid import ScalarField
from moldsim.particles.behavior import StepResult, sense, step_particle
from moldsim.particles.particle import Particle
from moldsim.particles.spatial import SpatialIndex
from moldsim.simulation.config import SimulationParams

# No flocking, no randomness in the walk, no sticking.
_QUIET = SimulationParams(
    turn_speed=0.0,
    sensor_distance=3.0,
    alignment_force=0.0,
    cohesion_force=0.0,
    separation_force=0.0,
    sticking_probability=0.0,
)


def _step(
    particles: list[Particle],
    params: SimulationParams,
    rng: Generator,
    field: ScalarField | None = None,
    index: int = 0,
) -> StepResult:
    spatial = SpatialIndex()
    spatial.rebuild(particles)
    field = field or ScalarField(width=32, height=32)
    return step_particle(index, particles, spatial, field, params, rng)


def _heading_east(x: float = 10.0, y: float = 10.0) -> Particle:
    return Particle(x=x, y=y, angle=0.0, speed=1.0, vx=1.0, vy=0.0)


class TestStuckParticles:
    """Stuck particles hold still and roll for release."""

    def test_hold_without_release(self, rng: Generator) -> None:
        pinned = Particle.pinned(5, 5)
        params = _QUIET.replace(release_probability=0.0)
        assert _step([pinned], params, rng) is StepResult.HOLD
        assert pinned == Particle.pinned(5, 5)

    def test_release(self, rng: Generator) -> None:
        pinned = Particle.pinned(5, 5)
        params = _QUIET.replace(release_probability=1.0)
        assert _step([pinned], params, rng) is StepResult.RELEASE
        assert not pinned.is_stuck
        assert (pinned.x, pinned.y) == (5.0, 5.0)
        assert pinned.velocity_norm == pytest.approx(params.move_speed)


class TestSticking:
    """Free particles next to stuck ones aggregate."""

    def test_sticks_next_to_stuck(self, rng: Generator) -> None:
        mover = _heading_east()
        particles = [mover, Particle.pinned(11.5, 10)]
        params = _QUIET.replace(sticking_probability=1.0)
        assert _step(particles, params, rng) is StepResult.STICK
        assert mover.is_stuck
        assert (mover.vx, mover.vy) == (0.0, 0.0)

    def test_zero_probability_never_sticks(self, rng: Generator) -> None:
        particles = [_heading_east(), Particle.pinned(11.5, 10)]
        assert _step(particles, _QUIET, rng) is StepResult.STEER
        assert not particles[0].is_stuck

    def test_reach_independent_of_perception(self, rng: Generator) -> None:
        particles = [_heading_east(), Particle.pinned(12.0, 10)]
        params = _QUIET.replace(sticking_probability=1.0, perception_radius=0.5)
        assert _step(particles, params, rng) is StepResult.STICK

    def test_out_of_reach(self, rng: Generator) -> None:
        particles = [_heading_east(), Particle.pinned(13.5, 10)]
        params = _QUIET.replace(sticking_probability=1.0)
        assert _step(particles, params, rng) is StepResult.STEER


class TestChemotaxis:
    """Sensor readings steer the particle."""

    def test_sensors(self) -> None:
        field = ScalarField(width=32, height=32)
        field.grid[10, 13] = 0.5
        left, centre, right = sense(_heading_east(), field, _QUIET)
        assert (left, centre, right) == (0.0, 0.5, 0.0)

    def test_random_walk_without_signal(self, rng: Generator) -> None:
        p = _heading_east()
        assert _step([p], _QUIET, rng) is StepResult.STEER
        assert p.vx == pytest.approx(1.0)
        assert p.vy == pytest.approx(0.0)

    def test_random_walk_is_bounded(self, rng: Generator) -> None:
        params = _QUIET.replace(turn_speed=0.4)
        for _ in range(50):
            p = _heading_east()
            _step([p], params, rng)
            assert abs(p.angle) <= 0.2 + 1e-12

    def test_centre_keeps_velocity(self, rng: Generator) -> None:
        """The centre branch scales the current velocity, not the heading."""
        field = ScalarField(width=32, height=32)
        field.grid[10, 13] = 0.5
        p = Particle(x=10, y=10, angle=0.0, speed=1.0, vx=0.0, vy=1.0)
        _step([p], _QUIET.replace(move_speed=2.0), rng, field)
        assert p.vx == pytest.approx(0.0)
        assert p.vy == pytest.approx(2.0)
        assert p.angle == pytest.approx(math.pi / 2)
        assert p.speed == 2.0

    def test_turns_left(self, rng: Generator) -> None:
        field = ScalarField(width=32, height=32)
        field.grid[7, 12] = 0.5  # left sensor at angle -pi/4
        p = _heading_east()
        _step([p], _QUIET.replace(turn_speed=0.3), rng, field)
        assert p.angle == pytest.approx(-0.3)

    def test_turns_right(self, rng: Generator) -> None:
        field = ScalarField(width=32, height=32)
        field.grid[12, 12] = 0.5  # right sensor at angle +pi/4
        p = _heading_east()
        _step([p], _QUIET.replace(turn_speed=0.3), rng, field)
        assert p.angle == pytest.approx(0.3)


class TestFlocking:
    """Neighbour forces blend 60/40 with the chemical velocity."""

    def test_alignment_blend(self, rng: Generator) -> None:
        p = _heading_east()
        other = Particle(x=12, y=10, angle=0.0, speed=1.0, vx=0.0, vy=1.0)
        _step([p, other], _QUIET.replace(alignment_force=1.0), rng)
        assert p.angle == pytest.approx(math.atan2(0.4, 0.6))
        assert math.hypot(p.vx, p.vy) == pytest.approx(1.0)

    def test_zero_forces_keep_direction(self, rng: Generator) -> None:
        p = _heading_east()
        other = Particle(x=12, y=10, vx=0.0, vy=1.0)
        _step([p, other], _QUIET, rng)
        assert p.vx == pytest.approx(1.0)
        assert p.vy == pytest.approx(0.0)

    def test_separation_pushes_away(self, rng: Generator) -> None:
        p = Particle(x=10, y=10, angle=math.pi / 2, speed=1.0, vx=0.0, vy=1.0)
        other = Particle(x=12, y=10)
        _step([p, other], _QUIET.replace(separation_force=1.0), rng)
        assert p.vx < 0

    def test_cohesion_pulls_toward_centroid(self, rng: Generator) -> None:
        p = Particle(x=10, y=10, angle=math.pi / 2, speed=1.0, vx=0.0, vy=1.0)
        other = Particle(x=20, y=10)
        _step([p, other], _QUIET.replace(cohesion_force=1.0), rng)
        assert p.vx > 0

    def test_neighbours_beyond_perception_ignored(self, rng: Generator) -> None:
        p = _heading_east()
        other = Particle(x=10, y=25, vx=0.0, vy=1.0)
        params = _QUIET.replace(alignment_force=1.0, perception_radius=10.0)
        _step([p, other], params, rng)
        assert p.vy == pytest.approx(0.0)
