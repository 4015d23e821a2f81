"""
Cloth geometry creation functions.

These functions create the initial vertex positions, spring connectivity,
rest lengths, and pin mask for the cloth simulation.
"""

from typing import Tuple

import numpy as np

from .config import SimulationConfig


def make_grid_positions(config: SimulationConfig) -> np.ndarray:
    """Create initial grid positions for cloth vertices.

    The sheet lies flat in the XZ plane. Vertex ``(row, col)`` sits at
    ``(row * spacing, 0, col * spacing)`` and has index ``row * side_count + col``.

    Args:
        config: Simulation configuration.

    Returns:
        Array of shape (num_vertices, 3) containing 3D positions.
    """
    n, dx = config.side_count, config.spacing
    x = np.zeros((n * n, 3), dtype=np.float32)

    for row in range(n):
        for col in range(n):
            idx = row * n + col
            x[idx, 0] = row * dx
            x[idx, 2] = col * dx

    return x


def make_spring_pairs(config: SimulationConfig) -> np.ndarray:
    """Create spring connectivity for the grid.

    Every cell gets a vertical spring (to the cell below), a horizontal
    spring (to the cell on the right) and a single diagonal shear spring
    (to the lower-right cell). The neighbour is the head, the cell itself
    the tail.

    Args:
        config: Simulation configuration.

    Returns:
        Array of shape (num_springs, 2) with (head, tail) vertex indices.
    """
    n = config.side_count

    pairs = []
    for row in range(n):
        for col in range(n):
            curr = row * n + col
            # Vertical
            if row < n - 1:
                pairs.append((curr + n, curr))
            # Horizontal
            if col < n - 1:
                pairs.append((curr + 1, curr))
            # Diagonal (no anti-diagonal counterpart)
            if row < n - 1 and col < n - 1:
                pairs.append((curr + n + 1, curr))

    return np.array(pairs, dtype=np.int32).reshape(-1, 2)


def make_rest_lengths(positions: np.ndarray, pairs: np.ndarray) -> np.ndarray:
    """Rest length of every spring, taken from the given positions.

    Args:
        positions: Array of shape (num_vertices, 3).
        pairs: Array of shape (num_springs, 2) with (head, tail) indices.

    Returns:
        Array of shape (num_springs,) with rest lengths.
    """
    positions = np.asarray(positions, dtype=np.float32)
    pairs = np.asarray(pairs, dtype=np.int64).reshape(-1, 2)
    delta = positions[pairs[:, 1]] - positions[pairs[:, 0]]
    return np.linalg.norm(delta, axis=1).astype(np.float32)


def make_pins(config: SimulationConfig) -> np.ndarray:
    """Create pin mask for the cloth.

    The four corners and the center vertex are pinned. For a 2x2 grid the
    center index is itself a corner, so only four vertices end up pinned.

    Args:
        config: Simulation configuration.

    Returns:
        Array of shape (num_vertices,) with 1 for pinned, 0 for free.
    """
    pins = np.zeros(config.num_vertices, dtype=np.int32)

    for idx in config.corner_indices:
        pins[idx] = 1
    pins[config.center_index] = 1

    return pins


def grid_cells(side_count: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Vertex indices of the four corners of every grid cell.

    Returns:
        Tuple ``(p00, p01, p10, p11)`` of index arrays, one entry per cell in
        row-major order: ``p00`` is the cell's own vertex, ``p01`` its right
        neighbour, ``p10`` the one below and ``p11`` the lower-right one.
    """
    n = side_count
    rows, cols = np.meshgrid(np.arange(n - 1), np.arange(n - 1), indexing="ij")
    p00 = (rows * n + cols).ravel()
    return p00, p00 + 1, p00 + n, p00 + n + 1
