"""
Configuration dataclass for cloth simulation parameters.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import warp as wp

from .errors import ConfigError


@dataclass
class SimulationConfig:
    """Configuration for the cloth simulation.

    Per-vertex mass and per-spring stiffness are derived from the grid
    resolution so that total mass and restoring force of the sheet stay
    roughly the same when ``side_count`` changes.

    Attributes:
        side_count: Number of vertices along each side of the square grid.
        side_length: Length of a cloth side.
        stiffness_multiplier: Hooke's coefficient multiplier for the sheet.
        base_mass: Total mass of the sheet, spread evenly over the vertices.
        damping_factor: Fraction of the previous displacement kept each tick.
        static_force: Force applied to every unpinned vertex (e.g. gravity).
        time_step: Default time step of one tick.
        amplitude: Amplitude of the scripted center vertex oscillation.
        period: Period divisor of the scripted center vertex oscillation.
        device: Warp device to use ('cpu' or 'cuda:0', etc.).
    """

    side_count: int = 27
    side_length: float = 200.0
    stiffness_multiplier: float = 0.001
    base_mass: float = 0.1
    damping_factor: float = 0.998
    static_force: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    time_step: float = 0.2
    amplitude: float = 10.0
    period: float = 16.0
    device: Optional[str] = None

    def __post_init__(self):
        """Validate parameters, initialize warp and pick a device."""
        if self.side_count < 2:
            raise ConfigError(f"side_count must be at least 2, got {self.side_count}")
        if self.side_length <= 0:
            raise ConfigError(f"side_length must be positive, got {self.side_length}")
        if self.stiffness_multiplier <= 0:
            raise ConfigError(
                f"stiffness_multiplier must be positive, got {self.stiffness_multiplier}"
            )
        if self.base_mass <= 0:
            raise ConfigError(f"base_mass must be positive, got {self.base_mass}")
        if not 0.0 <= self.damping_factor < 1.0:
            raise ConfigError(
                f"damping_factor must lie in [0, 1), got {self.damping_factor}"
            )
        if self.time_step <= 0:
            raise ConfigError(f"time_step must be positive, got {self.time_step}")
        if self.period <= 0:
            raise ConfigError(f"period must be positive, got {self.period}")

        self.static_force = tuple(float(c) for c in self.static_force)
        if len(self.static_force) != 3:
            raise ConfigError("static_force must have exactly three components")

        wp.init()
        if self.device is None:
            self.device = str(wp.get_device())

    @property
    def mass(self) -> float:
        """Mass of a single vertex."""
        return self.base_mass / self.side_count**2

    @property
    def stiffness(self) -> float:
        """Hooke's coefficient shared by every spring of the sheet."""
        n = self.side_count
        return self.stiffness_multiplier * (n - 1) / n**2

    @property
    def dissipation(self) -> float:
        return 1.0 - self.damping_factor

    @property
    def spacing(self) -> float:
        """Distance between neighbouring grid vertices."""
        return self.side_length / (self.side_count - 1)

    @property
    def num_vertices(self) -> int:
        return self.side_count**2

    @property
    def num_springs(self) -> int:
        n = self.side_count - 1
        return 3 * n * n + 2 * n

    @property
    def center_index(self) -> int:
        return (self.side_count**2 - 1) // 2

    @property
    def corner_indices(self) -> Tuple[int, int, int, int]:
        n = self.side_count
        return (0, n - 1, n * (n - 1), n * n - 1)

    @property
    def wp_device(self):
        """Get the warp device object."""
        return wp.get_device(self.device)
