"""
Cloth simulator class driving the sheet frame by frame.
"""

import logging
import math
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np

from .config import SimulationConfig
from .errors import ConfigError
from .mesh import build_mesh, step
from .primitives import extract_shaded, extract_wireframe

logger = logging.getLogger(__name__)

MODES = ("lines", "triangles")


class ClothSimulator:
    """Frame driver for a cloth sheet.

    Each frame advances an internal clock, moves the center vertex along a
    scripted vertical oscillation and runs one physics tick. Shell code
    (sliders, mouse drag) talks to the sheet only between frames through the
    methods below.

    Attributes:
        config: Simulation configuration shared with the vertices.
        vertices: Vertex arrays of the sheet.
        springs: Spring arrays of the sheet.
        time: Simulation clock, advanced by each time step.
    """

    def __init__(self, config: SimulationConfig):
        """Initialize the cloth simulator.

        Args:
            config: Simulation configuration.
        """
        self.vertices, self.springs = build_mesh(
            config.side_count, config.side_length, config.stiffness_multiplier, config
        )
        self.config = self.vertices.config
        self.time = 0.0

        # Store initial state for reset
        self._initial_vertices = self.vertices.copy()
        self._initial_springs = self.springs.copy()

        logger.info(
            "Cloth simulator ready: %dx%d grid on %s",
            self.config.side_count,
            self.config.side_count,
            self.config.device,
        )

    def reset(self):
        """Reset simulation to initial state."""
        self.vertices = self._initial_vertices.copy()
        self.springs = self._initial_springs.copy()
        # Slider-driven parameters survive a reset
        self.vertices.config = self.config
        self.time = 0.0

    def set_gravity(self, level: float):
        """Set gravity from a slider level; positive levels pull towards -Y."""
        self.config.static_force = (0.0, -level * self.config.mass / 100.0, 0.0)

    def set_dissipation(self, dissipation: float):
        """Set the fraction of velocity lost per tick."""
        if not 0.0 < dissipation <= 1.0:
            raise ConfigError(f"dissipation must lie in (0, 1], got {dissipation}")
        self.config.damping_factor = 1.0 - dissipation

    def center_height(self, now: float) -> float:
        config = self.config
        return config.amplitude * math.sin(now / config.period)

    def drive(self, now: float):
        """Place the center vertex on its scripted oscillation at time ``now``."""
        index = self.config.center_index
        x, _, z = self.vertices.get_positions()[index]
        self.vertices.move(index, (x, self.center_height(now), z), allow_pinned_override=True)

    def step(
        self,
        time_step: Optional[float] = None,
        external_force: Optional[Sequence[float]] = None,
    ):
        """Advance the clock, drive the center vertex and run one tick.

        Args:
            time_step: Time step of the frame. If None, uses config value.
            external_force: Optional replacement for the static force.
        """
        if time_step is None:
            time_step = self.config.time_step

        self.time += time_step
        self.drive(self.time)
        step(self.vertices, self.springs, time_step, external_force)

    def move_vertex(self, index: int, new_position: Sequence[float], allow_pinned_override: bool = True):
        """Drag a vertex to a new position between frames."""
        self.vertices.move(index, new_position, allow_pinned_override)

    def pin_vertex(self, index: int, pinned: bool):
        self.vertices.pin(index, pinned)

    def geometry(self, mode: str = "lines") -> Tuple[np.ndarray, np.ndarray]:
        """Renderable positions and colors of the current state.

        Args:
            mode: "lines" for the strain wireframe, "triangles" for the
                force-shaded surface.
        """
        if mode == "lines":
            return extract_wireframe(self.vertices, self.springs)
        if mode == "triangles":
            return extract_shaded(self.vertices, self.springs, self.config.side_count)
        raise ValueError(f"Unknown geometry mode {mode!r}; expected one of {MODES}")

    def frames(
        self,
        steps: Optional[int] = None,
        mode: str = "lines",
        time_step: Optional[float] = None,
    ) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
        """Step the simulation and publish geometry once per frame.

        Args:
            steps: Number of frames. If None, runs until the caller stops.
            mode: Geometry mode, see :meth:`geometry`.
            time_step: Time step per frame. If None, uses config value.

        Yields:
            (positions, colors) after each tick.
        """
        if mode not in MODES:
            raise ValueError(f"Unknown geometry mode {mode!r}; expected one of {MODES}")

        frame = 0
        while steps is None or frame < steps:
            self.step(time_step)
            yield self.geometry(mode)
            frame += 1

    def run(
        self,
        steps: int,
        record: bool = True,
        time_step: Optional[float] = None,
    ) -> Optional[np.ndarray]:
        """Run simulation for multiple frames.

        Args:
            steps: Number of frames to run.
            record: Whether to record trajectory.
            time_step: Time step per frame. If None, uses config value.

        Returns:
            If record=True, returns trajectory array of shape (steps, num_vertices, 3).
            Otherwise returns None.
        """
        trajectory = [] if record else None

        for _ in range(steps):
            self.step(time_step)
            if record:
                trajectory.append(self.vertices.get_positions())

        logger.debug("Ran %d frames, clock at %.3f", steps, self.time)

        if record:
            return np.array(trajectory).reshape(steps, len(self.vertices), 3)
        return None

    def get_positions(self) -> np.ndarray:
        """Get current positions as numpy array."""
        return self.vertices.get_positions()
