"""
Verlet Cloth Package

A mass-spring cloth simulation using NVIDIA Warp, integrated with damped
Verlet steps and rendered as a strain-colored wireframe or shaded surface.
"""

from .config import SimulationConfig
from .errors import ConfigError, DegenerateSpringError, VertexIndexError, VerletClothError
from .geometry import make_grid_positions, make_spring_pairs, make_pins
from .mesh import Springs, Vertices, build_mesh, move_vertex, pin_vertex, step
from .primitives import extract_shaded, extract_wireframe, triangle_normals
from .simulation import ClothSimulator
from .visualization import animate_cloth, plot_trajectories

__all__ = [
    "SimulationConfig",
    "VerletClothError",
    "ConfigError",
    "DegenerateSpringError",
    "VertexIndexError",
    "make_grid_positions",
    "make_spring_pairs",
    "make_pins",
    "Vertices",
    "Springs",
    "build_mesh",
    "step",
    "move_vertex",
    "pin_vertex",
    "extract_wireframe",
    "extract_shaded",
    "triangle_normals",
    "ClothSimulator",
    "animate_cloth",
    "plot_trajectories",
]
