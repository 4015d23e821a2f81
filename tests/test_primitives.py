import numpy as np
import pytest

from verlet_cloth import Springs, Vertices, extract_shaded, extract_wireframe, step, triangle_normals
from verlet_cloth.primitives import shaded_strain, strain_colors, wireframe_strain

GREEN = [0.0, 1.0, 0.0, 1.0]
RED = [1.0, 0.0, 0.0, 1.0]


def test_strain_colors_ramp_and_saturate():
    colors = strain_colors(np.array([0.0, 1.0, 2.0, 3.0, 40.0]))
    np.testing.assert_allclose(colors[:, 0], [0.0, 0.5, 1.0, 1.0, 1.0])
    np.testing.assert_allclose(colors[:, 1], [1.0, 0.5, 0.0, 0.0, 0.0])
    np.testing.assert_allclose(colors[:, 2], 0.0)
    np.testing.assert_allclose(colors[:, 3], 1.0)


def test_wireframe_shapes(mesh):
    vertices, springs = mesh
    positions, colors = extract_wireframe(vertices, springs)
    assert positions.dtype == np.float32
    assert colors.dtype == np.float32
    assert positions.shape == (16 * 2 * 3,)
    assert colors.shape == (16 * 2 * 4,)


def test_wireframe_segments_run_tail_to_head(mesh):
    vertices, springs = mesh
    positions, _ = extract_wireframe(vertices, springs)
    segments = positions.reshape(-1, 2, 3)
    pos = vertices.get_positions()
    pairs = springs.get_pairs()
    np.testing.assert_array_equal(segments[:, 0], pos[pairs[:, 1]])
    np.testing.assert_array_equal(segments[:, 1], pos[pairs[:, 0]])


def test_wireframe_is_green_at_rest(mesh):
    vertices, springs = mesh
    step(vertices, springs, 0.2)
    _, colors = extract_wireframe(vertices, springs)
    np.testing.assert_allclose(colors.reshape(-1, 4), np.tile(GREEN, (16 * 2, 1)), atol=1e-4)


def test_spring_stretched_twice_is_red(config):
    vertices = Vertices([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]], config)
    springs = Springs.connecting(vertices, [[0, 1]])
    vertices.move(1, (2.0, 0.0, 0.0))
    springs.update(vertices)

    assert wireframe_strain(springs)[0] == pytest.approx(32.0)
    _, colors = extract_wireframe(vertices, springs)
    np.testing.assert_allclose(colors.reshape(-1, 4), [RED, RED])


def test_small_strain_is_partially_red(config):
    vertices = Vertices([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]], config)
    springs = Springs.connecting(vertices, [[0, 1]])
    vertices.move(1, (1.03125, 0.0, 0.0))
    springs.update(vertices)

    # |1.03125 - 1| * 32 = 1, half way to saturation
    _, colors = extract_wireframe(vertices, springs)
    np.testing.assert_allclose(colors.reshape(-1, 4)[0], [0.5, 0.5, 0.0, 1.0], atol=1e-5)


def test_shaded_shapes(mesh):
    vertices, springs = mesh
    positions, colors = extract_shaded(vertices, springs, 3)
    assert positions.shape == (4 * 6 * 3,)
    assert colors.shape == (4 * 6 * 4,)


def test_shaded_triangle_winding(mesh):
    vertices, springs = mesh
    positions, _ = extract_shaded(vertices, springs, 3)
    pos = vertices.get_positions()
    first_cell = positions.reshape(-1, 3)[:6]
    np.testing.assert_array_equal(first_cell, pos[[0, 1, 4, 0, 4, 3]])


def test_shaded_is_green_without_force(mesh):
    vertices, springs = mesh
    _, colors = extract_shaded(vertices, springs, 3)
    np.testing.assert_array_equal(colors.reshape(-1, 4), np.tile(GREEN, (24, 1)))


def test_shaded_colors_follow_force_magnitude(mesh):
    vertices, springs = mesh
    vertices.move(4, (1.0, 0.3, 1.0), allow_pinned_override=True)
    step(vertices, springs, 0.2)

    reference = springs.stiffness * 1.0 / 16.0
    expected = vertices.get_force_magnitudes() * 2.0 / reference
    np.testing.assert_allclose(shaded_strain(vertices, springs), expected, rtol=1e-5)

    _, colors = extract_shaded(vertices, springs, 3)
    colors = colors.reshape(-1, 4)
    # first triangle vertex is vertex 0
    np.testing.assert_allclose(colors[0], strain_colors(expected[[0]])[0], rtol=1e-5)
    assert colors[:, 0].max() > 0.0


def test_extraction_does_not_mutate_state(mesh):
    vertices, springs = mesh
    vertices.move(1, (0.0, 0.4, 1.0))
    step(vertices, springs, 0.2)
    snapshot = (
        vertices.get_positions(),
        vertices.get_prior_displacements(),
        vertices.get_force_magnitudes(),
        springs.get_deformed_lengths(),
    )

    extract_wireframe(vertices, springs)
    extract_shaded(vertices, springs, 3)

    after = (
        vertices.get_positions(),
        vertices.get_prior_displacements(),
        vertices.get_force_magnitudes(),
        springs.get_deformed_lengths(),
    )
    for a, b in zip(snapshot, after):
        np.testing.assert_array_equal(a, b)


def test_triangle_normals():
    positions = np.array([0, 0, 0, 1, 0, 0, 0, 0, 1], dtype=np.float32)
    normals = triangle_normals(positions)
    assert normals.shape == (9,)
    np.testing.assert_allclose(normals.reshape(3, 3), [[0, -1, 0]] * 3)


def test_flat_sheet_normals_point_up(mesh):
    vertices, springs = mesh
    positions, _ = extract_shaded(vertices, springs, 3)
    normals = triangle_normals(positions).reshape(-1, 3)
    np.testing.assert_allclose(normals[:, [0, 2]], 0.0)
    assert np.all(normals[:, 1] > 0.0)
