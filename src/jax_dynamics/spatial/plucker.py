"""Spatial (6D) vector algebra in Plücker coordinates.

Spatial motion vectors are ordered ``[angular, linear]``, i.e.
``v = [wx, wy, wz, vx, vy, vz]``, and spatial forces ``[moment, force]``.
A Plücker transform ``X`` from frame A to frame B has the block structure::

    X = [[ E,        0 ],
         [-E @ r×,   E ]]

where ``E`` is the 3x3 *coordinate* transform from A to B coordinates and
``r`` is the position of B's origin expressed in A. Motion vectors
transform with ``X``, force vectors with ``X^{-T}``, so that a child-to-parent
force transform is simply ``X.T``.
"""

import jax
import jax.numpy as jnp

from . import so3

Array = jax.Array


def xrot(E: Array) -> Array:
    """
    Pure rotational Plücker transform.

    Args:
        E: (..., 3, 3) coordinate transform (transpose of the rotation matrix)

    Returns:
        (..., 6, 6) spatial transform
    """
    zeros = jnp.zeros_like(E)
    top = jnp.concatenate([E, zeros], axis=-1)
    bottom = jnp.concatenate([zeros, E], axis=-1)
    return jnp.concatenate([top, bottom], axis=-2)


def xtrans(r: Array) -> Array:
    """
    Pure translational Plücker transform.

    Args:
        r: (..., 3) position of the new origin in the old frame

    Returns:
        (..., 6, 6) spatial transform
    """
    r = jnp.asarray(r, dtype=float)
    I = jnp.broadcast_to(jnp.eye(3, dtype=r.dtype), r.shape[:-1] + (3, 3))
    zeros = jnp.zeros_like(I)
    top = jnp.concatenate([I, zeros], axis=-1)
    bottom = jnp.concatenate([-so3.skew_symmetric(r), I], axis=-1)
    return jnp.concatenate([top, bottom], axis=-2)


def from_rotation_and_translation(E: Array, r: Array) -> Array:
    """Plücker transform ``xrot(E) @ xtrans(r)``: translate by ``r``, then rotate."""
    return jnp.matmul(xrot(E), xtrans(r))


def rotx(theta: Array) -> Array:
    """Coordinate rotation about the x axis by ``theta``."""
    return xrot(_axis_rotation(jnp.array([1.0, 0.0, 0.0]), theta))


def roty(theta: Array) -> Array:
    """Coordinate rotation about the y axis by ``theta``."""
    return xrot(_axis_rotation(jnp.array([0.0, 1.0, 0.0]), theta))


def rotz(theta: Array) -> Array:
    """Coordinate rotation about the z axis by ``theta``."""
    return xrot(_axis_rotation(jnp.array([0.0, 0.0, 1.0]), theta))


def axis_rotation(axis: Array, theta: Array) -> Array:
    """Coordinate rotation about an arbitrary unit ``axis`` by ``theta``."""
    return xrot(_axis_rotation(axis, theta))


def _axis_rotation(axis: Array, theta: Array) -> Array:
    # coordinate transforms rotate frames, not vectors, hence the transpose
    return so3.inverse(so3.exp(axis * theta))


def get_rotation(X: Array) -> Array:
    """
    Extract the 3x3 coordinate transform ``E`` from a Plücker transform.

    Args:
        X: (..., 6, 6) spatial transform

    Returns:
        (..., 3, 3) coordinate transform
    """
    return X[..., :3, :3]


def get_translation(X: Array) -> Array:
    """
    Extract the origin offset ``r`` from a Plücker transform.

    Args:
        X: (..., 6, 6) spatial transform

    Returns:
        (..., 3) position of the target origin in source coordinates
    """
    E = get_rotation(X)
    r_skew = -jnp.matmul(so3.inverse(E), X[..., 3:, :3])
    return so3.unskew(r_skew)


def inverse(X: Array) -> Array:
    """
    Invert a Plücker transform using its block structure.

    Args:
        X: (..., 6, 6) spatial transform

    Returns:
        (..., 6, 6) inverse transform
    """
    E = get_rotation(X)
    r = get_translation(X)
    E_T = so3.inverse(E)
    zeros = jnp.zeros_like(E)
    top = jnp.concatenate([E_T, zeros], axis=-1)
    bottom = jnp.concatenate([jnp.matmul(so3.skew_symmetric(r), E_T), E_T], axis=-1)
    return jnp.concatenate([top, bottom], axis=-2)


def crossm(v: Array) -> Array:
    """
    Spatial cross-product operator for motion vectors (``v ×``).

    Args:
        v: (..., 6) spatial motion vector

    Returns:
        (..., 6, 6) matrix such that ``crossm(v) @ m == v × m``
    """
    w_skew = so3.skew_symmetric(v[..., :3])
    v_skew = so3.skew_symmetric(v[..., 3:])
    zeros = jnp.zeros_like(w_skew)
    top = jnp.concatenate([w_skew, zeros], axis=-1)
    bottom = jnp.concatenate([v_skew, w_skew], axis=-1)
    return jnp.concatenate([top, bottom], axis=-2)


def crossf(v: Array) -> Array:
    """
    Spatial cross-product operator for force vectors (``v ×*``).

    Args:
        v: (..., 6) spatial motion vector

    Returns:
        (..., 6, 6) matrix such that ``crossf(v) @ f == v ×* f``
    """
    return -jnp.swapaxes(crossm(v), -1, -2)


def spatial_inertia(mass: Array, com: Array, inertia_com: Array) -> Array:
    """
    Spatial inertia of a rigid body expressed at its frame origin.

    Uses the parallel axis rule to move the rotational inertia from the
    center of mass to the body origin::

        I = [[I_c + m c× c×^T,   m c×],
             [m c×^T,            m 1 ]]

    Args:
        mass: body mass
        com: (3,) center of mass in body coordinates
        inertia_com: (3, 3) rotational inertia about the center of mass

    Returns:
        (6, 6) symmetric spatial inertia matrix
    """
    c_skew = so3.skew_symmetric(com)
    mc_skew = mass * c_skew
    top = jnp.concatenate([inertia_com + jnp.matmul(mc_skew, c_skew.T), mc_skew], axis=-1)
    bottom = jnp.concatenate([mc_skew.T, mass * jnp.eye(3, dtype=c_skew.dtype)], axis=-1)
    return jnp.concatenate([top, bottom], axis=-2)
