"""Tests for moldsim.particles — Particle and ParticleStore."""

import math

import numpy as np
from numpy.random import Generator

from moldsim.particles.particle import Particle
from moldsim.particles.store import ParticleStore


class TestParticle:
    """Tests for particle construction."""

    def test_random_within_plane(self, rng: Generator) -> None:
        for _ in range(50):
            p = Particle.random(20.0, 10.0, 2.0, rng)
            assert 0 <= p.x < 20.0
            assert 0 <= p.y < 10.0
            assert 0 <= p.angle < 2 * math.pi
            assert math.isclose(p.velocity_norm, 2.0)
            assert p.speed == 2.0
            assert not p.is_stuck

    def test_pinned_is_motionless(self) -> None:
        p = Particle.pinned(3.0, 4.0)
        assert p.is_stuck
        assert (p.vx, p.vy) == (0.0, 0.0)


class TestParticleStore:
    """Tests for initialise / reconcile / rescale / spawn."""

    def test_initialize(self, small_store: ParticleStore) -> None:
        assert len(small_store) == 10
        assert small_store.stuck_count == 0

    def test_initialize_discards_existing(
        self,
        small_store: ParticleStore,
        rng: Generator,
    ) -> None:
        old = list(small_store)
        small_store.initialize(3, 1.0, rng)
        assert len(small_store) == 3
        assert all(p not in old for p in small_store)

    def test_negative_count_clamped(self, rng: Generator) -> None:
        store = ParticleStore(width=10, height=10)
        store.initialize(-5, 1.0, rng)
        assert len(store) == 0
        store.reconcile_count(-1, 1.0, rng)
        assert len(store) == 0

    def test_grow_keeps_existing(
        self,
        small_store: ParticleStore,
        rng: Generator,
    ) -> None:
        before = list(small_store)
        small_store.reconcile_count(15, 1.0, rng)
        assert len(small_store) == 15
        assert small_store.particles[:10] == before
        assert all(a is b for a, b in zip(small_store.particles, before))

    def test_shrink_removes_last_free_particle(self, rng: Generator) -> None:
        store = ParticleStore(width=10, height=10)
        store.initialize(5, 1.0, rng)
        store[1].is_stuck = True
        store[4].is_stuck = True
        expected = [store[0], store[1], store[2], store[4]]

        store.reconcile_count(4, 1.0, rng)

        assert len(store) == 4
        assert store.stuck_count == 2
        assert all(a is b for a, b in zip(store.particles, expected))

    def test_shrink_takes_stuck_last(self, rng: Generator) -> None:
        store = ParticleStore(width=10, height=10)
        store.initialize(5, 1.0, rng)
        store[1].is_stuck = True
        store[4].is_stuck = True
        survivor = store[1]

        store.reconcile_count(1, 1.0, rng)

        assert store.particles == [survivor]
        assert store[0] is survivor

    def test_shrink_all_stuck_to_zero(self, rng: Generator) -> None:
        store = ParticleStore(width=10, height=10)
        for i in range(4):
            store.spawn_pinned(i, i)
        store.reconcile_count(0, 1.0, rng)
        assert len(store) == 0

    def test_rescale_preserves_direction(self, small_store: ParticleStore) -> None:
        directions = [math.atan2(p.vy, p.vx) for p in small_store]
        small_store.rescale_speed(3.0)
        for p, direction in zip(small_store, directions):
            assert math.isclose(p.velocity_norm, 3.0)
            assert math.isclose(math.atan2(p.vy, p.vx), direction, abs_tol=1e-12)
            assert p.speed == 3.0

    def test_rescale_skips_zero_and_stuck(self) -> None:
        store = ParticleStore(width=10, height=10)
        still = Particle(x=1, y=1)
        store.particles.append(still)
        pinned = store.spawn_pinned(2, 2)
        store.rescale_speed(2.0)
        assert (still.vx, still.vy) == (0.0, 0.0)
        assert (pinned.vx, pinned.vy) == (0.0, 0.0)
        assert pinned.speed == 0.0

    def test_spawn_pinned_appends(self, small_store: ParticleStore) -> None:
        p = small_store.spawn_pinned(7.5, 8.5)
        assert small_store[-1] is p
        assert (p.x, p.y, p.is_stuck) == (7.5, 8.5, True)
        assert small_store.stuck_count == 1

    def test_spawn_is_seeded(self) -> None:
        a = ParticleStore(width=50, height=50)
        b = ParticleStore(width=50, height=50)
        a.initialize(5, 1.0, np.random.default_rng(3))
        b.initialize(5, 1.0, np.random.default_rng(3))
        assert a.particles == b.particles
