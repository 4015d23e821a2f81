"""Shared fixtures.

Simulations run on the warp CPU device so results are repeatable and no GPU
is required. Plots use the non-interactive Agg backend.
"""

import matplotlib

matplotlib.use("Agg")

import pytest
import warp as wp

from verlet_cloth import SimulationConfig, build_mesh

wp.config.quiet = True


@pytest.fixture
def config():
    return SimulationConfig(side_count=3, side_length=2.0, stiffness_multiplier=1.0, device="cpu")


@pytest.fixture
def mesh(config):
    """The 3x3 example sheet: unit spacing, five pinned vertices."""
    return build_mesh(3, 2.0, 1.0, config)
