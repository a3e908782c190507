"""SO(3) rotation helpers in JAX.

Rotation matrices here follow the usual active convention (``R @ v`` rotates
``v``). The spatial-algebra code in :mod:`jax_dynamics.spatial.plucker` works
with *coordinate* transforms instead, which are the transposes of these.
All functions are pure, JIT-able, and operate on JAX arrays.
"""

import jax
import jax.numpy as jnp

Array = jax.Array


def exp(log_r: Array) -> Array:
    """
    SO(3) exponential map: convert axis-angle vector to rotation matrix.

    Implements Rodrigues' formula to convert a 3D axis-angle vector (so(3))
    to a rotation matrix (SO(3)). This is how a revolute joint angle becomes
    a rotation about the joint axis.

    Args:
        log_r: (..., 3) array of axis-angle vectors

    Returns:
        (..., 3, 3) array of rotation matrices
    """
    angle = jnp.linalg.norm(log_r, axis=-1, keepdims=True)

    # Taylor expansion near zero keeps the map differentiable at the origin
    small_angle = angle < 1e-8
    cos_angle = jnp.where(small_angle, 1.0 - 0.5 * angle**2, jnp.cos(angle))
    sin_angle = jnp.where(small_angle, angle - angle**3 / 6.0, jnp.sin(angle))

    axis = jnp.where(angle > 1e-8, log_r / jnp.where(small_angle, 1.0, angle), log_r)

    K = skew_symmetric(axis)

    # Rodrigues formula: R = I + sin(θ) * K + (1 - cos(θ)) * K²
    I = jnp.eye(3, dtype=log_r.dtype)
    I = jnp.broadcast_to(I, log_r.shape[:-1] + (3, 3))

    R = (I +
         sin_angle[..., None] * K +
         (1.0 - cos_angle)[..., None] * jnp.matmul(K, K))

    return R


def from_euler_zyx(angles: Array) -> Array:
    """
    Rotation matrix from ZYX Euler angles.

    Args:
        angles: (..., 3) array ``[z, y, x]`` of angles in radians, applied
            as yaw about Z, then pitch about the new Y, then roll about the
            new X.

    Returns:
        (..., 3, 3) rotation matrix ``Rz @ Ry @ Rx``
    """
    angles = jnp.asarray(angles)
    zeros = jnp.zeros_like(angles[..., 0:1])
    z, y, x = angles[..., 0:1], angles[..., 1:2], angles[..., 2:3]
    R_z = exp(jnp.concatenate([zeros, zeros, z], axis=-1))
    R_y = exp(jnp.concatenate([zeros, y, zeros], axis=-1))
    R_x = exp(jnp.concatenate([x, zeros, zeros], axis=-1))
    return jnp.matmul(R_z, jnp.matmul(R_y, R_x))


def inverse(R: Array) -> Array:
    """
    Compute inverse of rotation matrix.

    For rotation matrices, the inverse is simply the transpose.

    Args:
        R: (..., 3, 3) rotation matrix

    Returns:
        (..., 3, 3) inverse rotation matrix
    """
    return jnp.swapaxes(R, -1, -2)


def apply(R: Array, v: Array) -> Array:
    """
    Apply rotation to vector(s).

    Args:
        R: (..., 3, 3) rotation matrix
        v: (..., 3) or (..., N, 3) vector(s) to rotate

    Returns:
        (..., 3) or (..., N, 3) rotated vector(s)
    """
    if v.ndim == R.ndim - 1:  # Single vector case
        return jnp.einsum('...ij,...j->...i', R, v)
    else:  # Multiple vectors case
        return jnp.einsum('...ij,...nj->...ni', R, v)


def skew_symmetric(v: Array) -> Array:
    """
    Convert 3D vector to skew-symmetric (cross-product) matrix.

    Args:
        v: (..., 3) vector

    Returns:
        (..., 3, 3) skew-symmetric matrix with ``skew(v) @ w == cross(v, w)``
    """
    v = jnp.asarray(v)
    zeros = jnp.zeros(v.shape[:-1], dtype=v.dtype)

    return jnp.stack([
        jnp.stack([zeros, -v[..., 2], v[..., 1]], axis=-1),
        jnp.stack([v[..., 2], zeros, -v[..., 0]], axis=-1),
        jnp.stack([-v[..., 1], v[..., 0], zeros], axis=-1)
    ], axis=-2)


def unskew(K: Array) -> Array:
    """Inverse of :func:`skew_symmetric`, reading the vector from the off-diagonals."""
    return jnp.stack([K[..., 2, 1], K[..., 0, 2], K[..., 1, 0]], axis=-1)
