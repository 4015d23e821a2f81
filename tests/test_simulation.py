import math

import numpy as np
import pytest

from verlet_cloth import ClothSimulator, ConfigError, SimulationConfig


@pytest.fixture
def simulator():
    config = SimulationConfig(
        side_count=5,
        side_length=4.0,
        stiffness_multiplier=0.1,
        amplitude=0.5,
        period=2.0,
        device="cpu",
    )
    return ClothSimulator(config)


def test_center_follows_scripted_oscillation(simulator):
    center = simulator.config.center_index
    assert center == 12

    simulator.step(0.2)
    assert simulator.time == pytest.approx(0.2)
    assert simulator.get_positions()[center][1] == pytest.approx(0.5 * math.sin(0.1), rel=1e-5)

    simulator.step(0.2)
    assert simulator.time == pytest.approx(0.4)
    assert simulator.get_positions()[center][1] == pytest.approx(0.5 * math.sin(0.2), rel=1e-5)
    # the center stays pinned and keeps its grid location in the plane
    np.testing.assert_allclose(simulator.get_positions()[center][[0, 2]], [2.0, 2.0])
    assert simulator.vertices[center].pinned


def test_driven_center_moves_neighbours(simulator):
    simulator.run(10, record=False)
    heights = simulator.get_positions()[:, 1]
    neighbour = simulator.config.center_index + 1
    assert heights[neighbour] > 0.0


def test_default_time_step_comes_from_config(simulator):
    simulator.step()
    assert simulator.time == pytest.approx(simulator.config.time_step)


def test_set_gravity(simulator):
    simulator.set_gravity(1.5)
    mass = simulator.config.mass
    assert simulator.config.static_force == pytest.approx((0.0, -1.5 * mass / 100.0, 0.0))
    assert simulator.vertices.config is simulator.config


def test_set_dissipation(simulator):
    simulator.set_dissipation(0.01)
    assert simulator.config.damping_factor == pytest.approx(0.99)
    with pytest.raises(ConfigError):
        simulator.set_dissipation(0.0)


def test_run_records_trajectory(simulator):
    trajectory = simulator.run(4)
    assert trajectory.shape == (4, 25, 3)
    np.testing.assert_array_equal(trajectory[-1], simulator.get_positions())


def test_run_without_record(simulator):
    assert simulator.run(2, record=False) is None
    assert simulator.time == pytest.approx(0.4)


def test_reset_restores_initial_state_and_keeps_sliders(simulator):
    initial = simulator.get_positions()
    simulator.set_gravity(2.0)
    force = simulator.config.static_force
    simulator.run(5, record=False)

    simulator.reset()

    assert simulator.time == 0.0
    np.testing.assert_array_equal(simulator.get_positions(), initial)
    np.testing.assert_array_equal(simulator.vertices.get_prior_displacements(), 0.0)
    assert simulator.config.static_force == force


def test_frames_publish_geometry_each_tick(simulator):
    frames = list(simulator.frames(3, mode="triangles"))
    assert len(frames) == 3
    positions, colors = frames[-1]
    assert positions.shape == (16 * 6 * 3,)
    assert colors.shape == (16 * 6 * 4,)
    assert simulator.time == pytest.approx(0.6)


def test_frames_without_limit(simulator):
    frames = simulator.frames(mode="lines")
    for _ in range(4):
        next(frames)
    assert simulator.time == pytest.approx(0.8)


def test_unknown_geometry_mode(simulator):
    with pytest.raises(ValueError):
        simulator.geometry("points")
    with pytest.raises(ValueError):
        next(simulator.frames(1, mode="points"))


def test_drag_and_release(simulator):
    simulator.move_vertex(0, (0.0, 1.0, 0.0))
    assert simulator.get_positions()[0][1] == pytest.approx(1.0)

    simulator.pin_vertex(0, False)
    simulator.step(0.2)
    assert simulator.get_positions()[0][1] < 1.0


def test_driven_center_has_no_force_magnitude(simulator):
    center = simulator.config.center_index
    simulator.move_vertex(center, (2.0, 1.0, 2.0))

    simulator.step(0.2)

    state = simulator.vertices[center]
    assert state.force_magnitude == 0.0
    np.testing.assert_array_equal(state.accumulated_force, [0.0, 0.0, 0.0])
    _, colors = simulator.geometry("triangles")
    # first triangle of the cell left of the center: p00=6, p01=7, p11=12
    np.testing.assert_array_equal(colors.reshape(-1, 4)[6 * 5 + 2], [0.0, 1.0, 0.0, 1.0])
