"""Entry point for ``python -m moldsim``.

Loads the default YAML config, builds a simulation engine and opens a
Pygame window to watch the mould grow.
"""

from __future__ import annotations

import argparse
import logging
import pathlib

from moldsim.simulation.config import SimulationConfig
from moldsim.simulation.engine import SimulationEngine
from moldsim.ui.pygame_client import PygameRenderer

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)


def main() -> None:
    """Parse CLI args, create engine, launch renderer."""
    parser = argparse.ArgumentParser(
        prog="moldsim",
        description="moldsim - slime mould, flocking and aggregation simulator",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=2,
        help="Window pixels per field cell (default: 2)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=60,
        help="Target frames per second (default: 60)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override the RNG seed from the config",
    )
    parser.add_argument(
        "--preset-out",
        type=pathlib.Path,
        default=pathlib.Path("preset.yaml"),
        help="File written when S is pressed (default: preset.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SimulationConfig.from_yaml(args.config)
    params = config.params
    if args.seed is not None:
        params = params.replace(seed=args.seed)

    engine = SimulationEngine(width=config.width, height=config.height, params=params)

    renderer = PygameRenderer(
        engine=engine,
        food=config.food,
        scale=args.scale,
        preset_path=args.preset_out,
    )
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
