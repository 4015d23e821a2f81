"""
Warp kernels for cloth simulation.

Spring kernels run one thread per spring and accumulate into the shared
force array with atomic adds. Vertex kernels run one thread per vertex and
touch only their own entries.

Note: Kernels must be defined at module level (not inside classes) per Warp requirements.
"""

import warp as wp


@wp.kernel
def spring_forces(
    pos: wp.array(dtype=wp.vec3),
    springs: wp.array2d(dtype=wp.int32),
    rest: wp.array(dtype=wp.float32),
    stiffness: float,
    deformed: wp.array(dtype=wp.float32),
    f: wp.array(dtype=wp.vec3),
):
    """Compute spring forces between connected vertices.

    The scalar force ``k * (1 - L_rest / L)`` is positive when the spring is
    stretched and scales the head-to-tail vector, so no normalization is
    needed. Coincident endpoints are excluded at construction time.

    Args:
        pos: Vertex positions.
        springs: Spring connectivity (N x 2 array of head, tail indices).
        rest: Rest lengths for each spring.
        stiffness: Hooke's coefficient shared by all springs.
        deformed: Current length of each spring (written).
        f: Force accumulator (modified via atomic_add).
    """
    s = wp.tid()

    head = springs[s][0]
    tail = springs[s][1]

    delta = pos[tail] - pos[head]
    length = wp.length(delta)
    deformed[s] = length

    scalar_force = stiffness * (1.0 - rest[s] / length)
    head_force = delta * scalar_force

    # Newton's third law
    wp.atomic_add(f, head, head_force)
    wp.atomic_add(f, tail, -head_force)


@wp.kernel
def integrate(
    pos: wp.array(dtype=wp.vec3),
    prior_disp: wp.array(dtype=wp.vec3),
    forces: wp.array(dtype=wp.vec3),
    force_mag: wp.array(dtype=wp.float32),
    pinned: wp.array(dtype=wp.int32),
    static_force: wp.vec3,
    mass: float,
    damping: float,
    dt: float,
):
    """Advance vertex positions with damped Verlet integration.

    The previous displacement stands in for velocity * dt; forces contribute
    ``F * dt^2 / m``. Every accumulator is cleared; only free vertices
    snapshot the magnitude of the force they consumed.

    Args:
        pos: Vertex positions (modified in place).
        prior_disp: Displacement of the previous tick (modified in place).
        forces: Accumulated spring forces (cleared).
        force_mag: Magnitude of the accumulated force (written).
        pinned: Pin mask (1 = pinned, 0 = free).
        static_force: Force applied to every free vertex.
        mass: Mass of each vertex.
        damping: Fraction of the previous displacement kept.
        dt: Time step.
    """
    i = wp.tid()

    f = forces[i]
    forces[i] = wp.vec3(0.0, 0.0, 0.0)

    # Pinned vertices don't move and keep their force magnitude
    if pinned[i] == 1:
        return

    force_mag[i] = wp.length(f)

    scale = dt * dt / mass
    disp = prior_disp[i] * damping + (static_force + f) * scale

    pos[i] = pos[i] + disp
    prior_disp[i] = disp


@wp.kernel
def move_vertex(
    pos: wp.array(dtype=wp.vec3),
    prior_disp: wp.array(dtype=wp.vec3),
    pinned: wp.array(dtype=wp.int32),
    index: int,
    new_pos: wp.vec3,
    allow_pinned_override: int,
):
    """Move one vertex. Should be launched with dim=1.

    A free vertex records the imposed displacement so inertia carries it on.
    A pinned vertex only moves when the override is set, and keeps its
    (zero) displacement.
    """
    if pinned[index] == 0:
        prior_disp[index] = new_pos - pos[index]
        pos[index] = new_pos
    elif allow_pinned_override == 1:
        pos[index] = new_pos


@wp.kernel
def pin_vertex(
    prior_disp: wp.array(dtype=wp.vec3),
    pinned: wp.array(dtype=wp.int32),
    index: int,
    is_pinned: int,
):
    """Set the pin flag of one vertex. Should be launched with dim=1."""
    pinned[index] = is_pinned
    prior_disp[index] = wp.vec3(0.0, 0.0, 0.0)
