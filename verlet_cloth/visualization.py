"""
Visualization utilities for cloth simulation.
"""

from typing import List, Optional, Sequence

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.animation as animation
from mpl_toolkits.mplot3d.art3d import Line3DCollection, Poly3DCollection

from .primitives import triangle_normals

LIGHT_DIRECTION = (0.5, 0.7, 1.0)


def _fit_axes(ax, positions: np.ndarray, margin: float = 0.05):
    pts = positions.reshape(-1, 3)
    lo, hi = pts.min(axis=0), pts.max(axis=0)
    pad = max(float((hi - lo).max()), 1e-6) * margin
    ax.set_xlim(lo[0] - pad, hi[0] + pad)
    ax.set_ylim(lo[2] - pad, hi[2] + pad)
    ax.set_zlim(lo[1] - pad, hi[1] + pad)


def _to_plot_space(points: np.ndarray) -> np.ndarray:
    # The sheet lies in XZ with Y up; matplotlib's vertical axis is its third one.
    return points[..., [0, 2, 1]]


def draw_wireframe(ax, positions: np.ndarray, colors: np.ndarray) -> Line3DCollection:
    """Draw line segments as returned by ``extract_wireframe``."""
    segments = np.asarray(positions).reshape(-1, 2, 3)
    seg_colors = np.asarray(colors).reshape(-1, 2, 4)[:, 0]

    collection = Line3DCollection(_to_plot_space(segments), colors=seg_colors, linewidths=0.8)
    ax.add_collection3d(collection)
    _fit_axes(ax, segments)
    return collection


def shade(colors: np.ndarray, normals: np.ndarray, light=LIGHT_DIRECTION) -> np.ndarray:
    """Darken per-face colors by the angle between face normal and light.

    Args:
        colors: RGBA colors of shape (faces, 4).
        normals: Face normals of shape (faces, 3), not necessarily unit length.
        light: Direction towards the light.

    Returns:
        Shaded RGBA colors of shape (faces, 4).
    """
    light = np.asarray(light, dtype=np.float64)
    light = light / np.linalg.norm(light)
    lengths = np.linalg.norm(normals, axis=1)
    lengths[lengths == 0.0] = 1.0
    # Two-sided lighting
    intensity = np.abs(normals @ light) / lengths

    shaded = np.array(colors, dtype=np.float64)
    shaded[:, :3] *= intensity[:, None]
    return shaded


def draw_shaded(ax, positions: np.ndarray, colors: np.ndarray) -> Poly3DCollection:
    """Draw triangles as returned by ``extract_shaded`` with flat lighting."""
    tris = np.asarray(positions).reshape(-1, 3, 3)
    face_colors = np.asarray(colors).reshape(-1, 3, 4).mean(axis=1)
    normals = triangle_normals(positions).reshape(-1, 3, 3)[:, 0]

    collection = Poly3DCollection(
        _to_plot_space(tris), facecolors=shade(face_colors, normals), edgecolors="none"
    )
    ax.add_collection3d(collection)
    _fit_axes(ax, tris)
    return collection


def animate_cloth(
    simulator,
    frames: int,
    mode: str = "lines",
    path: Optional[str] = None,
    interval: int = 50,
    figsize: tuple = (10, 8),
) -> animation.FuncAnimation:
    """Create an animation of the cloth, stepping the simulator once per frame.

    Args:
        simulator: A ``ClothSimulator``.
        frames: Number of frames.
        mode: "lines" or "triangles".
        path: If given, the animation is written there (.gif via pillow,
            anything else via ffmpeg).
        interval: Delay between frames in milliseconds.
        figsize: Figure size.

    Returns:
        The matplotlib animation.
    """
    fig = plt.figure(figsize=figsize)
    ax = fig.add_subplot(111, projection="3d")
    draw = draw_wireframe if mode == "lines" else draw_shaded
    geometry = simulator.frames(mode=mode)

    def render(positions, colors, title):
        ax.clear()
        draw(ax, positions, colors)
        ax.set_title(title)
        ax.set_xlabel("X")
        ax.set_ylabel("Z")
        ax.set_zlabel("Height")

    def init():
        # Current state, without stepping
        render(*simulator.geometry(mode), f"Cloth Simulation - Frame 0/{frames}")
        return []

    def animate(frame):
        render(*next(geometry), f"Cloth Simulation - Frame {frame + 1}/{frames}")

    anim = animation.FuncAnimation(
        fig, animate, frames=frames, init_func=init, interval=interval, repeat=False
    )

    if path is not None:
        writer = "pillow" if path.endswith(".gif") else "ffmpeg"
        anim.save(path, writer=writer)

    return anim


def plot_trajectories(
    trajectory: np.ndarray,
    vertex_indices: Optional[List[int]] = None,
    figsize: tuple = (12, 8),
) -> plt.Figure:
    """Plot the height of selected vertices over time.

    Args:
        trajectory: Array of shape (frames, num_vertices, 3) containing positions.
        vertex_indices: Indices of vertices to plot. If None, plots a sample.
        figsize: Figure size.

    Returns:
        The matplotlib figure.
    """
    if vertex_indices is None:
        # Sample some vertices across the cloth
        num_vertices = trajectory.shape[1]
        vertex_indices = list(range(0, num_vertices, max(1, num_vertices // 10)))

    fig, ax = plt.subplots(figsize=figsize)
    frames = np.arange(len(trajectory))

    for idx in vertex_indices:
        ax.plot(frames, trajectory[:, idx, 1], label=f"Vertex {idx}", alpha=0.7)

    ax.set_xlabel("Time (frame)")
    ax.set_ylabel("Height")
    ax.set_title("Vertex Heights Over Time")
    ax.legend(loc="upper left", fontsize="small")
    ax.grid(True, alpha=0.3)

    return fig


def plot_vertex_over_time(
    trajectory: np.ndarray,
    vertex_index: int,
    figsize: tuple = (15, 4),
    labels: Sequence[str] = ("X", "Height", "Z"),
) -> plt.Figure:
    """Plot each coordinate of a single vertex over time.

    Args:
        trajectory: Array of shape (frames, num_vertices, 3) containing positions.
        vertex_index: Index of the vertex to plot.
        figsize: Figure size.
        labels: Axis labels of the three coordinates.

    Returns:
        The matplotlib figure.
    """
    fig, axes = plt.subplots(1, 3, figsize=figsize)
    frames = np.arange(len(trajectory))

    for axis, ax in enumerate(axes):
        ax.plot(frames, trajectory[:, vertex_index, axis])
        ax.set_xlabel("Time (frame)")
        ax.set_ylabel(f"{labels[axis]} Position")
        ax.set_title(f"Vertex {vertex_index} - {labels[axis]}")
        ax.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig
