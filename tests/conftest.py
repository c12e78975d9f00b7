"""Shared fixtures for the moldsim test suite."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.random import Generator

from moldsim.field.grid import ScalarField
from moldsim.particles.store import ParticleStore
from moldsim.simulation.config import SimulationParams


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def small_field() -> ScalarField:
    """An 8x8 scalar field for fast tests."""
    return ScalarField(width=8, height=8)


@pytest.fixture
def small_params() -> SimulationParams:
    """Default parameters with a population small enough for tests."""
    return SimulationParams(particle_count=20, seed=777)


@pytest.fixture
def small_store(rng: Generator) -> ParticleStore:
    """A 64x64 store pre-populated with 10 free particles."""
    store = ParticleStore(width=64, height=64)
    store.initialize(10, 1.0, rng)
    return store
