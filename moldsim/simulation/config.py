"""Config — simulation parameters and YAML presets.

``SimulationParams`` is the record the engine reads once per tick; it
is frozen, so edits go through ``dataclasses.replace`` and
``SimulationEngine.update_parameters``.  ``SimulationConfig`` bundles
the parameters with the plane size, seed and food tool settings and is
what YAML preset files hold.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationParams:
    """Per-tick simulation parameters.

    Attributes:
        particle_count: Target number of particles.
        move_speed: Speed every free particle is normalised to.
        turn_speed: Turn per tick when following a side sensor (radians).
        sensor_angle: Angle between centre and side sensors (radians).
        sensor_distance: Sensor reach in particle sizes.
        diffusion_rate: Weight of the neighbourhood mean in the blur.
        decay_rate: Fraction of concentration lost per tick.
        chemical_deposit_rate: Chemical laid per particle per tick.
        alignment_force: Weight of the neighbour-average velocity.
        cohesion_force: Weight of the pull toward the neighbour centroid.
        separation_force: Weight of the push away from close neighbours.
        perception_radius: Flocking neighbourhood radius.
        particle_size: Sets deposit, blur and sticking radii.
        sticking_probability: Chance per tick to stick next to a stuck
            particle.
        release_probability: Chance per tick for a stuck particle to
            come loose.
        is_paused: When True, ticks leave all state untouched.
        seed: Seed for the engine's random generator.
        field_color: Hex colour of a saturated field cell (display only).
        mold_color: Hex colour of particles (display only).
        background_color: Hex colour of an empty field cell (display only).
    """

    particle_count: int = 5000
    move_speed: float = 1.0
    turn_speed: float = 0.1
    sensor_angle: float = math.pi / 4
    sensor_distance: float = 10.0
    diffusion_rate: float = 0.1
    decay_rate: float = 0.1
    chemical_deposit_rate: float = 0.05
    alignment_force: float = 0.3
    cohesion_force: float = 0.0
    separation_force: float = 0.5
    perception_radius: float = 30.0
    particle_size: float = 1.0
    sticking_probability: float = 1.0
    release_probability: float = 0.0
    is_paused: bool = False
    seed: int | None = 42

    # Cosmetic
    field_color: str = "#808080"
    mold_color: str = "#000000"
    background_color: str = "#ffffff"

    def replace(self, **changes: Any) -> SimulationParams:
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class FoodParams:
    """Settings of the attract/erase tool.

    Attributes:
        size: Radius of placed food sources and of the erase brush.
        strength: Concentration placed food sources hold the field at.
    """

    size: float = 15.0
    strength: float = 1.0


@dataclass
class SimulationConfig:
    """Top-level configuration: plane, parameters and tool settings.

    Attributes:
        width: Plane width in field cells.
        height: Plane height in field cells.
        params: Initial simulation parameters.
        food: Food tool settings.
    """

    width: int = 400
    height: int = 300
    params: SimulationParams = field(default_factory=SimulationParams)
    food: FoodParams = field(default_factory=FoodParams)

    @classmethod
    def from_yaml(cls, path: str | Path) -> SimulationConfig:
        """Load configuration from a YAML file.

        Missing keys keep their defaults.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated SimulationConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
            ValueError: If the document is not a mapping or names an
                unknown parameter.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            msg = f"{path}: expected a mapping at the top level"
            raise ValueError(msg)

        config = cls(
            width=int(data.get("width", cls.width)),
            height=int(data.get("height", cls.height)),
            params=_build(SimulationParams, data.get("params") or {}, path),
            food=_build(FoodParams, data.get("food") or {}, path),
        )
        logger.info("Loaded config from %s", path)
        return config

    def to_yaml(self, path: str | Path) -> None:
        """Write this configuration to ``path`` as a YAML preset."""
        path = Path(path)
        data = {
            "width": self.width,
            "height": self.height,
            "params": dataclasses.asdict(self.params),
            "food": dataclasses.asdict(self.food),
        }
        with path.open("w") as f:
            yaml.safe_dump(data, f, sort_keys=False)
        logger.info("Saved preset to %s", path)


def _build(cls: type, values: dict[str, Any], path: Path) -> Any:
    """Instantiate a params dataclass, rejecting unknown keys."""
    known = {f.name for f in dataclasses.fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        msg = f"{path}: unknown {cls.__name__} keys: {', '.join(unknown)}"
        raise ValueError(msg)
    return cls(**values)
