"""
Renderable primitives from cloth state.

Both extractors only read the simulation arrays. Positions come back as a
flat float32 sequence (3 per primitive vertex) and colors as a parallel flat
float32 sequence (RGBA, 4 per primitive vertex), ready for upload to a
vertex buffer.

Two color policies exist side by side:

* wireframe colors measure strain per spring, ``|L / L_rest - 1|`` scaled by
  ``WIREFRAME_STRAIN_SCALE``;
* shaded colors measure the force magnitude each vertex consumed during the
  last tick, relative to a reference force derived from the sheet stiffness
  and the rest length of the first spring.
"""

from typing import Tuple

import numpy as np

from .geometry import grid_cells
from .mesh import Springs, Vertices

WIREFRAME_STRAIN_SCALE = 32.0
SHADED_REFERENCE_DIVISOR = 16.0
SATURATION = 2.0


def strain_colors(level: np.ndarray, saturation: float = SATURATION) -> np.ndarray:
    """Map strain levels to RGBA colors from green (0) to red (>= saturation).

    Args:
        level: Non-negative strain levels, any shape.
        saturation: Level at and above which the color is pure red.

    Returns:
        Array of shape (level.size, 4).
    """
    level = np.asarray(level, dtype=np.float64).ravel()
    red = np.where(level > saturation, 1.0, level / saturation)
    colors = np.zeros((level.size, 4), dtype=np.float32)
    colors[:, 0] = red
    colors[:, 1] = 1.0 - red
    colors[:, 3] = 1.0
    return colors


def wireframe_strain(springs: Springs) -> np.ndarray:
    """Scaled strain of every spring, as used for wireframe coloring."""
    ratio = springs.get_deformed_lengths().astype(np.float64) / springs.get_rest_lengths()
    return np.abs(ratio - 1.0) * WIREFRAME_STRAIN_SCALE


def shaded_strain(vertices: Vertices, springs: Springs) -> np.ndarray:
    """Normalized force magnitude of every vertex, as used for shaded coloring."""
    reference = springs.stiffness * float(springs.get_rest_lengths()[0]) / SHADED_REFERENCE_DIVISOR
    return vertices.get_force_magnitudes().astype(np.float64) * 2.0 / reference


def extract_wireframe(vertices: Vertices, springs: Springs) -> Tuple[np.ndarray, np.ndarray]:
    """One line segment per spring, tail first, colored by spring strain.

    Returns:
        Tuple of (positions, colors) with ``6 * len(springs)`` and
        ``8 * len(springs)`` floats respectively.
    """
    pos = vertices.get_positions()
    pairs = springs.get_pairs()

    segments = np.stack([pos[pairs[:, 1]], pos[pairs[:, 0]]], axis=1)
    colors = np.repeat(strain_colors(wireframe_strain(springs)), 2, axis=0)

    return segments.astype(np.float32).ravel(), colors.ravel()


def extract_shaded(
    vertices: Vertices, springs: Springs, side_count: int
) -> Tuple[np.ndarray, np.ndarray]:
    """Two triangles per grid cell, colored by per-vertex force magnitude.

    Cell ``(row, col)`` yields triangles ``(p00, p01, p11)`` and
    ``(p00, p11, p10)``.

    Returns:
        Tuple of (positions, colors) with ``18 * (side_count - 1)**2`` and
        ``24 * (side_count - 1)**2`` floats respectively.
    """
    pos = vertices.get_positions()
    p00, p01, p10, p11 = grid_cells(side_count)
    corners = np.stack([p00, p01, p11, p00, p11, p10], axis=1).ravel()

    vertex_colors = strain_colors(shaded_strain(vertices, springs))

    return pos[corners].astype(np.float32).ravel(), vertex_colors[corners].ravel()


def triangle_normals(positions: np.ndarray) -> np.ndarray:
    """Face normal of every triangle, repeated for each of its vertices.

    Normals are the unnormalized cross product ``(b - a) x (c - a)``.

    Args:
        positions: Flat triangle positions as returned by :func:`extract_shaded`.

    Returns:
        Flat float32 array of the same length as ``positions``.
    """
    tris = np.asarray(positions, dtype=np.float32).reshape(-1, 3, 3)
    a, b, c = tris[:, 0], tris[:, 1], tris[:, 2]
    normals = np.cross(b - a, c - a)
    return np.repeat(normals, 3, axis=0).astype(np.float32).ravel()
