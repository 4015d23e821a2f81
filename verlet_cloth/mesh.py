"""
Vertex and spring arrays of a cloth sheet, and the per-tick stepper.

Vertices and springs are stored as parallel warp arrays. Springs refer to
vertices by integer index only; the vertex array never changes size, so an
index that is valid at construction stays valid for the sheet's lifetime.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple

import numpy as np
import warp as wp

from .config import SimulationConfig
from .errors import DegenerateSpringError, VertexIndexError
from .geometry import make_grid_positions, make_pins, make_rest_lengths, make_spring_pairs
from . import kernels

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VertexState:
    """Snapshot of a single vertex."""

    position: np.ndarray
    prior_displacement: np.ndarray
    accumulated_force: np.ndarray
    force_magnitude: float
    pinned: bool


@dataclass(frozen=True)
class SpringState:
    """Snapshot of a single spring."""

    head_index: int
    tail_index: int
    rest_length: float
    deformed_length: float


class Vertices:
    """Point masses of a cloth sheet.

    Attributes:
        config: Simulation configuration carrying the per-sheet constants
            (mass, static force, damping factor).
        pos: Current positions (warp array of vec3).
        prior_disp: Displacement applied during the previous tick.
        forces: Force accumulator, filled by springs and cleared by integration.
        force_mag: Magnitude of the force consumed by the last integration.
        pinned: Pin mask (warp array, 1 = pinned).
    """

    def __init__(
        self,
        positions: np.ndarray,
        config: SimulationConfig,
        pinned: Optional[np.ndarray] = None,
    ):
        self.config = config
        device = config.wp_device

        pos_np = np.asarray(positions, dtype=np.float32).reshape(-1, 3)
        count = pos_np.shape[0]
        if pinned is None:
            pinned = np.zeros(count, dtype=np.int32)
        pinned_np = np.asarray(pinned, dtype=np.int32).reshape(count)

        self.pos = wp.array(pos_np, dtype=wp.vec3, device=device)
        self.prior_disp = wp.zeros(count, dtype=wp.vec3, device=device)
        self.forces = wp.zeros(count, dtype=wp.vec3, device=device)
        self.force_mag = wp.zeros(count, dtype=wp.float32, device=device)
        self.pinned = wp.array(pinned_np, dtype=wp.int32, device=device)

    def __len__(self) -> int:
        return self.pos.shape[0]

    def __getitem__(self, index: int) -> VertexState:
        self._check_index(index)
        return VertexState(
            position=self.pos.numpy()[index].copy(),
            prior_displacement=self.prior_disp.numpy()[index].copy(),
            accumulated_force=self.forces.numpy()[index].copy(),
            force_magnitude=float(self.force_mag.numpy()[index]),
            pinned=bool(self.pinned.numpy()[index]),
        )

    @property
    def device(self):
        return self.pos.device

    def _check_index(self, index: int):
        if isinstance(index, (bool, np.bool_)) or not isinstance(index, (int, np.integer)):
            raise TypeError(f"Vertex index must be an integer, got {type(index).__name__}")
        if not 0 <= index < len(self):
            raise VertexIndexError(int(index), len(self))

    def move(self, index: int, new_position: Sequence[float], allow_pinned_override: bool = False):
        """Move a vertex to a new position.

        A free vertex remembers the jump as its previous displacement, so the
        imposed motion carries on through later ticks. A pinned vertex is left
        alone unless ``allow_pinned_override`` is set (dragging), in which case
        only its position changes.

        Args:
            index: Vertex index.
            new_position: Target position (3 components).
            allow_pinned_override: Whether a pinned vertex may be moved.
        """
        self._check_index(index)
        x, y, z = (float(c) for c in new_position)
        wp.launch(
            kernels.move_vertex,
            dim=1,
            inputs=[
                self.pos,
                self.prior_disp,
                self.pinned,
                int(index),
                wp.vec3(x, y, z),
                int(bool(allow_pinned_override)),
            ],
            device=self.device,
        )

    def pin(self, index: int, is_pinned: bool = True):
        """Pin or unpin a vertex. The previous displacement is always zeroed."""
        self._check_index(index)
        wp.launch(
            kernels.pin_vertex,
            dim=1,
            inputs=[self.prior_disp, self.pinned, int(index), int(bool(is_pinned))],
            device=self.device,
        )

    def integrate(self, time_step: float):
        """Integrate accumulated forces into new positions for one tick."""
        config = self.config
        wp.launch(
            kernels.integrate,
            dim=len(self),
            inputs=[
                self.pos,
                self.prior_disp,
                self.forces,
                self.force_mag,
                self.pinned,
                wp.vec3(*config.static_force),
                config.mass,
                config.damping_factor,
                float(time_step),
            ],
            device=self.device,
        )

    def copy(self) -> "Vertices":
        """Independent copy of the vertex state and its configuration."""
        other = Vertices.__new__(Vertices)
        other.config = replace(self.config)
        other.pos = wp.clone(self.pos)
        other.prior_disp = wp.clone(self.prior_disp)
        other.forces = wp.clone(self.forces)
        other.force_mag = wp.clone(self.force_mag)
        other.pinned = wp.clone(self.pinned)
        return other

    def get_positions(self) -> np.ndarray:
        """Get current positions as numpy array."""
        return self.pos.numpy().copy()

    def get_prior_displacements(self) -> np.ndarray:
        return self.prior_disp.numpy().copy()

    def get_forces(self) -> np.ndarray:
        return self.forces.numpy().copy()

    def get_force_magnitudes(self) -> np.ndarray:
        return self.force_mag.numpy().copy()

    def get_pinned(self) -> np.ndarray:
        """Get pin mask as boolean numpy array."""
        return self.pinned.numpy().astype(bool)


class Springs:
    """Elastic connectors between vertex pairs.

    Attributes:
        stiffness: Hooke's coefficient shared by every spring of the sheet.
        pairs: (head, tail) vertex indices (warp 2D int array).
        rest: Rest lengths, fixed at construction.
        deformed: Lengths measured during the last update.
    """

    def __init__(
        self,
        pairs: np.ndarray,
        rest_lengths: np.ndarray,
        stiffness: float,
        device=None,
    ):
        pairs_np = np.asarray(pairs, dtype=np.int32).reshape(-1, 2)
        rest_np = np.asarray(rest_lengths, dtype=np.float32).reshape(pairs_np.shape[0])

        degenerate = np.flatnonzero(~(rest_np > 0.0))
        if degenerate.size:
            s = int(degenerate[0])
            raise DegenerateSpringError(s, int(pairs_np[s, 0]), int(pairs_np[s, 1]))

        self.stiffness = float(stiffness)
        self.pairs = wp.array(pairs_np, dtype=wp.int32, device=device)
        self.rest = wp.array(rest_np, dtype=wp.float32, device=device)
        # Until the first update a spring is taken to be at rest
        self.deformed = wp.array(rest_np, dtype=wp.float32, device=device)

    @classmethod
    def connecting(
        cls,
        vertices: Vertices,
        pairs: np.ndarray,
        stiffness: Optional[float] = None,
    ) -> "Springs":
        """Springs whose rest lengths are the current distances between their endpoints."""
        pairs_np = np.asarray(pairs, dtype=np.int32).reshape(-1, 2)
        count = len(vertices)
        bad = pairs_np[(pairs_np < 0) | (pairs_np >= count)]
        if bad.size:
            raise VertexIndexError(int(bad[0]), count)
        if stiffness is None:
            stiffness = vertices.config.stiffness
        rest = make_rest_lengths(vertices.get_positions(), pairs_np)
        return cls(pairs_np, rest, stiffness, device=vertices.device)

    def __len__(self) -> int:
        return self.pairs.shape[0]

    def __getitem__(self, index: int) -> SpringState:
        if not 0 <= index < len(self):
            raise IndexError(f"Spring index {index} out of range for {len(self)} springs")
        head, tail = self.pairs.numpy()[index]
        return SpringState(
            head_index=int(head),
            tail_index=int(tail),
            rest_length=float(self.rest.numpy()[index]),
            deformed_length=float(self.deformed.numpy()[index]),
        )

    def update(self, vertices: Vertices):
        """Measure every spring and add its forces to both endpoints."""
        wp.launch(
            kernels.spring_forces,
            dim=len(self),
            inputs=[
                vertices.pos,
                self.pairs,
                self.rest,
                self.stiffness,
                self.deformed,
                vertices.forces,
            ],
            device=vertices.device,
        )

    def copy(self) -> "Springs":
        other = Springs.__new__(Springs)
        other.stiffness = self.stiffness
        other.pairs = wp.clone(self.pairs)
        other.rest = wp.clone(self.rest)
        other.deformed = wp.clone(self.deformed)
        return other

    def get_pairs(self) -> np.ndarray:
        return self.pairs.numpy().copy()

    def get_rest_lengths(self) -> np.ndarray:
        return self.rest.numpy().copy()

    def get_deformed_lengths(self) -> np.ndarray:
        return self.deformed.numpy().copy()


def build_mesh(
    side_count: int,
    side_length: float,
    stiffness_multiplier: float,
    config: Optional[SimulationConfig] = None,
) -> Tuple[Vertices, Springs]:
    """Build a square cloth sheet.

    Args:
        side_count: Number of vertices per side (at least 2).
        side_length: Length of a side.
        stiffness_multiplier: Hooke's coefficient multiplier.
        config: Base configuration for the remaining parameters. The grid
            parameters above override its grid fields.

    Returns:
        Tuple of (vertices, springs).
    """
    if config is None:
        config = SimulationConfig(
            side_count=side_count,
            side_length=side_length,
            stiffness_multiplier=stiffness_multiplier,
        )
    else:
        config = replace(
            config,
            side_count=side_count,
            side_length=side_length,
            stiffness_multiplier=stiffness_multiplier,
        )

    vertices = Vertices(make_grid_positions(config), config, pinned=make_pins(config))
    springs = Springs.connecting(vertices, make_spring_pairs(config), config.stiffness)

    logger.debug(
        "Built %dx%d cloth: %d vertices, %d springs, mass=%.3g, stiffness=%.3g",
        side_count,
        side_count,
        len(vertices),
        len(springs),
        config.mass,
        config.stiffness,
    )
    return vertices, springs


def step(
    vertices: Vertices,
    springs: Springs,
    time_step: float,
    external_force: Optional[Sequence[float]] = None,
):
    """Perform one simulation tick.

    All springs accumulate their forces before any vertex integrates. An
    external force replaces the sheet's static force and stays in effect for
    later ticks.

    Args:
        vertices: Vertex arrays (modified in place).
        springs: Spring arrays (deformed lengths updated).
        time_step: Time step of the tick.
        external_force: Optional new static force (3 components).
    """
    springs.update(vertices)

    if external_force is not None:
        vertices.config.static_force = tuple(float(c) for c in external_force)

    vertices.integrate(time_step)


def move_vertex(
    vertices: Vertices,
    index: int,
    new_position: Sequence[float],
    allow_pinned_override: bool = False,
):
    """Move a vertex; see :meth:`Vertices.move`."""
    vertices.move(index, new_position, allow_pinned_override)


def pin_vertex(vertices: Vertices, index: int, pinned: bool):
    """Pin or unpin a vertex; see :meth:`Vertices.pin`."""
    vertices.pin(index, pinned)
