"""Pygame 2D viewer for the moldsim engine.

Paints the chemical field as a blend of the background and field
colours, draws particles on top, and maps mouse tools onto engine
commands:

- left drag: attract (place food sources)
- right drag: erase food sources under the brush
- middle click or shift + left click: spawn a pinned particle

The engine ticks once per frame while not paused.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import pygame

if TYPE_CHECKING:
    from moldsim.particles.particle import Particle
    from moldsim.simulation.config import FoodParams
    from moldsim.simulation.engine import SimulationEngine

logger = logging.getLogger(__name__)

_FOOD_OUTLINE = (0, 255, 0)
_PANEL_TEXT = (40, 40, 40)


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    """Parse ``#rrggbb`` into an RGB tuple; malformed input gives black."""
    text = value.lstrip("#")
    if len(text) != 6:
        return (0, 0, 0)
    try:
        return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
    except ValueError:
        return (0, 0, 0)


def field_to_rgb(
    grid: np.ndarray,
    field_color: str,
    background_color: str,
) -> np.ndarray:
    """Blend field and background colours by concentration.

    Args:
        grid: Field array, shape ``(height, width)``.
        field_color: Colour of a saturated cell.
        background_color: Colour of an empty cell.

    Returns:
        ``uint8`` array of shape ``(width, height, 3)`` ready for
        ``pygame.surfarray``.
    """
    value = np.clip(grid, 0.0, 1.0).T[..., np.newaxis]
    fg = np.array(hex_to_rgb(field_color), dtype=np.float64)
    bg = np.array(hex_to_rgb(background_color), dtype=np.float64)
    return np.rint(fg * value + bg * (1.0 - value)).astype(np.uint8)


class PygameRenderer:
    """Renders a SimulationEngine into a Pygame window.

    Attributes:
        engine: The simulation engine to visualise.
        food: Attract/erase tool settings.
        scale: Window pixels per field cell.
        preset_path: Where the S key saves the current preset.
        screen: The Pygame display surface.
    """

    def __init__(
        self,
        engine: SimulationEngine,
        food: FoodParams,
        scale: int = 2,
        preset_path: Path | None = None,
    ) -> None:
        """Initialise the renderer.

        Args:
            engine: The simulation engine to render.
            food: Food tool settings.
            scale: Pixel width/height per field cell.
            preset_path: Target file for saved presets.
        """
        self.engine = engine
        self.food = food
        self.scale = max(1, scale)
        self.preset_path = preset_path or Path("preset.yaml")
        self._dragging: int | None = None

        pygame.init()
        self.screen = pygame.display.set_mode(
            (engine.width * self.scale, engine.height * self.scale),
        )
        pygame.display.set_caption("moldsim")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.running = True

    def run(self, fps: int = 60) -> None:
        """Main loop: handle events, tick, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            self.clock.tick(fps)
            self._handle_events()
            self.engine.tick()
            self._draw()

        logger.info("Viewer closed after %d ticks", self.engine.tick_count)
        pygame.quit()

    def to_field(self, pos: tuple[int, int]) -> tuple[float, float]:
        """Convert window pixels to field coordinates."""
        return pos[0] / self.scale, pos[1] / self.scale

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key)
            elif event.type == pygame.MOUSEBUTTONDOWN:
                x, y = self.to_field(event.pos)
                shift = pygame.key.get_mods() & pygame.KMOD_SHIFT
                if event.button == 2 or (event.button == 1 and shift):
                    self.engine.spawn_pinned(x, y)
                elif event.button in (1, 3):
                    self._dragging = event.button
                    self._apply_tool(x, y)
            elif event.type == pygame.MOUSEBUTTONUP:
                self._dragging = None
            elif event.type == pygame.MOUSEMOTION and self._dragging:
                self._apply_tool(*self.to_field(event.pos))

    def _handle_key(self, key: int) -> None:
        engine = self.engine
        if key == pygame.K_ESCAPE:
            self.running = False
        elif key == pygame.K_SPACE:
            engine.update_parameters(
                engine.params.replace(is_paused=not engine.params.is_paused),
            )
        elif key == pygame.K_r:
            engine.restart()
        elif key == pygame.K_c:
            engine.clear_food_sources()
        elif key == pygame.K_s:
            self._save_preset()

    def _apply_tool(self, x: float, y: float) -> None:
        if self._dragging == 3:
            self.engine.remove_food_sources_near(x, y, self.food.size)
        else:
            self.engine.add_food_source(x, y, self.food.size, self.food.strength)

    def _save_preset(self) -> None:
        from moldsim.simulation.config import SimulationConfig

        config = SimulationConfig(
            width=self.engine.width,
            height=self.engine.height,
            params=self.engine.params,
            food=self.food,
        )
        config.to_yaml(self.preset_path)

    def _draw(self) -> None:
        """Render one frame."""
        engine = self.engine
        params = engine.params
        state = engine.get_state()

        pixels = field_to_rgb(
            engine.chemical_field.grid,
            params.field_color,
            params.background_color,
        )
        self._draw_particles(
            pixels,
            state.particles,
            hex_to_rgb(params.mold_color),
        )

        surface = pygame.surfarray.make_surface(pixels)
        if self.scale != 1:
            surface = pygame.transform.scale(surface, self.screen.get_size())
        self.screen.blit(surface, (0, 0))

        for source in state.food_sources:
            pygame.draw.circle(
                self.screen,
                _FOOD_OUTLINE,
                (int(source.x * self.scale), int(source.y * self.scale)),
                max(1, int(source.radius * params.particle_size * self.scale)),
                width=1,
            )

        status = "PAUSED" if params.is_paused else f"tick {state.tick}"
        fps = self.clock.get_fps()
        line = f"{status}  particles {len(state.particles)}  fps {fps:.0f}"
        self.screen.blit(self.font.render(line, True, _PANEL_TEXT), (6, 6))
        pygame.display.flip()

    @staticmethod
    def _draw_particles(
        pixels: np.ndarray,
        particles: Sequence[Particle],
        colour: tuple[int, int, int],
    ) -> None:
        """Stamp each particle as one pixel into ``pixels`` (x-major)."""
        if not particles:
            return
        width, height = pixels.shape[0], pixels.shape[1]
        n = len(particles)
        xs = np.fromiter((p.x for p in particles), dtype=np.float64, count=n)
        ys = np.fromiter((p.y for p in particles), dtype=np.float64, count=n)
        xi = np.clip(xs.astype(np.int64), 0, width - 1)
        yi = np.clip(ys.astype(np.int64), 0, height - 1)
        pixels[xi, yi] = colour
