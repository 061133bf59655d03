"""Pygame 2D visualization for a planning run.

Renders the terrain, hotspots, pheromone field and current best path in
a window.  The planner advances at a configurable iteration rate while
the display refreshes at the Pygame frame rate, and stops advancing once
the iteration budget is spent.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import numpy as np
import pygame

if TYPE_CHECKING:
    from dronewatch.planning.planner import ACOPlanner

from dronewatch.world.terrain import TerrainClass

# Colour palette
_BG = (20, 20, 20)
_TERRAIN_COLOURS: dict[TerrainClass, tuple[int, int, int]] = {
    TerrainClass.BLOCKED: (15, 15, 15),
    TerrainClass.LAND: (51, 153, 51),
    TerrainClass.WATER: (0, 128, 255),
    TerrainClass.ROAD: (77, 77, 77),
}
_START = (40, 220, 40)
_GOAL = (230, 40, 40)
_HOTSPOT = (255, 230, 0)
_PATH = (230, 0, 230)

# Pheromone overlay colour
_PHEROMONE_COLOUR = np.array([255, 255, 255], dtype=np.float64)


class PathRenderer:
    """Renders an ACOPlanner's state into a Pygame window.

    Attributes:
        planner: The planner to visualise.
        cell_size: Pixel size of each grid cell.
        screen: The Pygame display surface.
    """

    # Speed presets: iterations per second
    _SPEED_STEPS: ClassVar[list[float]] = [0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 50.0]

    def __init__(
        self,
        planner: ACOPlanner,
        cell_size: int = 6,
        iterations_per_second: float = 5.0,
    ) -> None:
        """Initialise the renderer.

        Args:
            planner: The planner to render.
            cell_size: Pixel width/height per grid cell.
            iterations_per_second: Planner iterations per real-time second.
        """
        self.planner = planner
        self.cell_size = cell_size
        self.iterations_per_second = iterations_per_second
        self._speed_index = self._nearest_speed(iterations_per_second)
        self._accumulator = 0.0

        terrain = planner.terrain
        self._panel_width = 220
        self._win_w = terrain.width * cell_size + self._panel_width
        self._win_h = terrain.height * cell_size

        pygame.init()
        self.screen = pygame.display.set_mode((self._win_w, self._win_h))
        pygame.display.set_caption("DroneWatch")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self._terrain_surface = self._render_terrain()
        self.running = True
        self.paused = False

    def _nearest_speed(self, ips: float) -> int:
        """Return the index of the closest speed preset."""
        diffs = [abs(s - ips) for s in self._SPEED_STEPS]
        return diffs.index(min(diffs))

    def run(self, fps: int = 30) -> None:
        """Main loop: handle events, step the planner, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            dt = self.clock.tick(fps) / 1000.0
            self._handle_events()
            if not self.paused and not self.planner.done:
                self._accumulator += self.iterations_per_second * dt
                steps = int(self._accumulator)
                self._accumulator -= steps
                for _ in range(steps):
                    if self.planner.done:
                        break
                    self.planner.step()
            self._draw()

        pygame.quit()

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.paused = not self.paused
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    self._speed_index = min(
                        len(self._SPEED_STEPS) - 1,
                        self._speed_index + 1,
                    )
                    self.iterations_per_second = self._SPEED_STEPS[self._speed_index]
                elif event.key == pygame.K_MINUS:
                    self._speed_index = max(0, self._speed_index - 1)
                    self.iterations_per_second = self._SPEED_STEPS[self._speed_index]

    def _draw(self) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        self.screen.blit(self._terrain_surface, (0, 0))
        self._draw_pheromone_overlay()
        self._draw_best_path()
        self._draw_markers()
        self._draw_info_panel()
        pygame.display.flip()

    def _render_terrain(self) -> pygame.Surface:
        """Draw the static terrain once onto an off-screen surface."""
        cs = self.cell_size
        terrain = self.planner.terrain
        surface = pygame.Surface((terrain.width * cs, terrain.height * cs))
        for row in range(terrain.height):
            for col in range(terrain.width):
                colour = _TERRAIN_COLOURS[TerrainClass(int(terrain.classes[row, col]))]
                pygame.draw.rect(surface, colour, (col * cs, row * cs, cs, cs))
        return surface

    def _draw_pheromone_overlay(self) -> None:
        """Draw pheromone as a translucent white haze scaled to the maximum."""
        cs = self.cell_size
        grid = self.planner.pheromone.grid
        max_val = grid.max()
        if max_val <= 0:
            return

        overlay = pygame.Surface(
            (grid.shape[1] * cs, grid.shape[0] * cs),
            pygame.SRCALPHA,
        )
        colour = _PHEROMONE_COLOUR.astype(int).tolist()
        for row, col in zip(*np.nonzero(grid > 0.05 * max_val), strict=True):
            alpha = int(min(grid[row, col] / max_val, 1.0) * 140)
            pygame.draw.rect(
                overlay,
                (*colour, alpha),
                (int(col) * cs, int(row) * cs, cs, cs),
            )
        self.screen.blit(overlay, (0, 0))

    def _centre(self, cell: tuple[int, int]) -> tuple[int, int]:
        row, col = cell
        cs = self.cell_size
        return col * cs + cs // 2, row * cs + cs // 2

    def _draw_best_path(self) -> None:
        """Draw the best path so far as a polyline."""
        best = self.planner.best
        if best is None or best.length < 2:
            return
        points = [self._centre(cell) for cell in best.path]
        pygame.draw.lines(self.screen, _PATH, False, points, 2)

    def _draw_markers(self) -> None:
        """Draw start, goal and hotspot markers."""
        radius = max(3, self.cell_size)
        config = self.planner.config
        pygame.draw.circle(self.screen, _START, self._centre(config.start), radius)
        pygame.draw.circle(self.screen, _GOAL, self._centre(config.goal), radius)
        for cell in self.planner.terrain.hotspots:
            x, y = self._centre(cell)
            for dy in (-radius, radius):
                pygame.draw.line(
                    self.screen,
                    _HOTSPOT,
                    (x - radius, y + dy),
                    (x + radius, y - dy),
                    2,
                )

    def _draw_info_panel(self) -> None:
        """Draw a stats panel on the right side of the window."""
        planner = self.planner
        panel_x = planner.terrain.width * self.cell_size + 10
        y = 10

        best = planner.best
        last = planner.history[-1] if planner.history else None
        meters = planner.config.report.meters_per_unit
        lines = [
            f"Iteration: {planner.iteration}/{planner.config.colony.max_iterations}",
            f"Speed: {self.iterations_per_second:.1f} it/s",
            "DONE" if planner.done else ("PAUSED" if self.paused else "RUNNING"),
            "",
            "--- Colony ---",
            f"Ants: {planner.policy.population}",
            f"Last successes: {last.successes if last else '-'}",
            f"Last shortest: {last.min_length if last and last.min_length else '-'}",
            "",
            "--- Best path ---",
        ]
        if best is None:
            lines.append("none yet")
        else:
            lines += [
                f"Cells: {best.length}",
                f"Distance: {best.distance_m(meters) / 1000:.2f} km",
                f"Found at: {best.iteration + 1}",
            ]
        lines += [
            "",
            "--- Controls ---",
            "SPACE: pause",
            "+/-: speed",
            "ESC: quit",
        ]

        for line in lines:
            surf = self.font.render(line, True, (200, 200, 200))
            self.screen.blit(surf, (panel_x, y))
            y += 18
