"""Kinematics of the tree: body transforms, velocities and point queries.

Every query recomputes the outward pass from the joint state it is given, so
results never depend on an earlier call.
"""

from typing import List, Optional, Tuple

import jax
import jax.numpy as jnp

from .core.model import Model, ModelDescription, check_body_id, check_state_vector
from .core.state import WorkingState
from .joints import _jcalc
from .spatial import plucker, so3

Array = jax.Array


def outward_pass(
    description: ModelDescription,
    q: Array,
    qdot: Array,
    X_0: Array,
    v_0: Array,
) -> Tuple[List[Array], ...]:
    """Propagate transforms and velocities from the base to the leaves.

    ``q`` and ``qdot`` are indexed by body id, entry 0 being the base.

    Returns:
        Lists ``(X_lambda, X_base, S, v, c)`` with one entry per body.
    """
    parents = description.parents
    n = len(parents)
    zeros = jnp.zeros(6)

    X_lambda = [jnp.eye(6)] * n
    X_base = [X_0] + [None] * (n - 1)
    S = [zeros] * n
    v = [v_0] + [None] * (n - 1)
    c = [zeros] * n

    # ids are topologically sorted: a parent is always visited before its children
    for i in range(1, n):
        XJ, S[i], v_J, c_J = _jcalc(description.joint_types[i], description.joint_axes[i], q[i], qdot[i])
        X_lambda[i] = XJ @ description.joint_frames[i]
        X_base[i] = X_lambda[i] @ X_base[parents[i]]
        v[i] = X_lambda[i] @ v[parents[i]] + v_J
        c[i] = c_J + plucker.crossm(v[i]) @ v_J

    return X_lambda, X_base, S, v, c


def pad_state(x: Array) -> Array:
    """Prepend the unused base entry so that joint ``i`` lives at index ``i``."""
    return jnp.concatenate([jnp.zeros(1, dtype=x.dtype), x])


@jax.jit
def kinematics_pass(
    description: ModelDescription, q: Array, qdot: Array, qddot: Optional[Array] = None
) -> WorkingState:
    """Pure, JIT-compiled fixed-base kinematics.

    Args:
        description: Model description.
        q: (n,) joint positions.
        qdot: (n,) joint velocities.
        qddot: Optional (n,) joint accelerations. Without it the body
            accelerations are left at zero.

    Returns:
        WorkingState with ``X_lambda, X_base, S, v, c`` filled in, and ``a``
        when accelerations were given. The dynamics fields are zero.
    """
    n = len(description.parents)
    q, qdot = pad_state(q), pad_state(qdot)
    X_lambda, X_base, S, v, c = outward_pass(description, q, qdot, jnp.eye(6), jnp.zeros(6))

    a = [jnp.zeros(6)] * n
    if qddot is not None:
        qddot = pad_state(qddot)
        for i in range(1, n):
            a[i] = X_lambda[i] @ a[description.parents[i]] + c[i] + S[i] * qddot[i]
    else:
        qddot = jnp.zeros(n)

    return WorkingState(
        X_lambda=jnp.stack(X_lambda),
        X_base=jnp.stack(X_base),
        S=jnp.stack(S),
        v=jnp.stack(v),
        a=jnp.stack(a),
        c=jnp.stack(c),
        IA=jnp.zeros((n, 6, 6)),
        pA=jnp.zeros((n, 6)),
        U=jnp.zeros((n, 6)),
        d=jnp.zeros(n),
        u=jnp.zeros(n),
        qddot=qddot,
    )


def update_kinematics(
    model: Model, Q: Array, QDot: Array, QDDot: Optional[Array] = None
) -> WorkingState:
    """Compute body transforms, velocities and (optionally) accelerations.

    Args:
        model: Initialised model.
        Q: Joint positions, one per body.
        QDot: Joint velocities, one per body.
        QDDot: Optional joint accelerations, one per body.

    Returns:
        A fresh WorkingState; the model is not modified.

    Raises:
        ModelStateError: if the model is not initialised or the vectors
            have the wrong length.
    """
    description = model.description
    n = description.num_bodies
    Q = check_state_vector("Q", Q, n)
    QDot = check_state_vector("QDot", QDot, n)
    if QDDot is not None:
        QDDot = check_state_vector("QDDot", QDDot, n)
    return kinematics_pass(description, Q, QDot, QDDot)


def calc_point_velocity(
    model: Model, Q: Array, QDot: Array, body_id: int, point_position: Array
) -> Array:
    """Velocity of a body-fixed point in world coordinates.

    Args:
        model: Initialised model.
        Q: Joint positions.
        QDot: Joint velocities.
        body_id: Body the point is attached to.
        point_position: (3,) position of the point in body coordinates.

    Returns:
        (3,) linear velocity of the point in world coordinates.
    """
    check_body_id(model.description, body_id)
    point = _check_point(point_position)
    state = update_kinematics(model, Q, QDot)

    omega, v_lin = state.v[body_id, :3], state.v[body_id, 3:]
    E = plucker.get_rotation(state.X_base[body_id])
    return so3.apply(so3.inverse(E), v_lin + jnp.cross(omega, point))


def calc_point_acceleration(
    model: Model, Q: Array, QDot: Array, QDDot: Array, body_id: int, point_position: Array
) -> Array:
    """Acceleration of a body-fixed point in world coordinates.

    The spatial acceleration of the body is shifted to the point and the
    velocity product ``ω × (v + ω × p)`` is added, which contains the
    centripetal term ``ω × (ω × p)``.

    Args:
        model: Initialised model.
        Q: Joint positions.
        QDot: Joint velocities.
        QDDot: Joint accelerations.
        body_id: Body the point is attached to.
        point_position: (3,) position of the point in body coordinates.

    Returns:
        (3,) linear acceleration of the point in world coordinates.
    """
    check_body_id(model.description, body_id)
    point = _check_point(point_position)
    state = update_kinematics(model, Q, QDot, QDDot)

    omega, v_lin = state.v[body_id, :3], state.v[body_id, 3:]
    alpha, a_lin = state.a[body_id, :3], state.a[body_id, 3:]
    v_point = v_lin + jnp.cross(omega, point)
    a_point = a_lin + jnp.cross(alpha, point) + jnp.cross(omega, v_point)

    E = plucker.get_rotation(state.X_base[body_id])
    return so3.apply(so3.inverse(E), a_point)


def calc_body_to_base_coordinates(model: Model, Q: Array, body_id: int, point_position: Array) -> Array:
    """World position of a point given in body coordinates."""
    check_body_id(model.description, body_id)
    point = _check_point(point_position)
    X = _body_transform(model, Q, body_id)
    return plucker.get_translation(X) + so3.apply(so3.inverse(plucker.get_rotation(X)), point)


def calc_base_to_body_coordinates(model: Model, Q: Array, body_id: int, point_position: Array) -> Array:
    """Body coordinates of a point given in world coordinates."""
    check_body_id(model.description, body_id)
    point = _check_point(point_position)
    X = _body_transform(model, Q, body_id)
    return so3.apply(plucker.get_rotation(X), point - plucker.get_translation(X))


def calc_body_world_orientation(model: Model, Q: Array, body_id: int) -> Array:
    """Coordinate transform from world to body coordinates, shape (3, 3)."""
    check_body_id(model.description, body_id)
    return plucker.get_rotation(_body_transform(model, Q, body_id))


def _body_transform(model: Model, Q: Array, body_id: int) -> Array:
    state = update_kinematics(model, Q, jnp.zeros(model.description.num_bodies))
    return state.X_base[body_id]


def _check_point(point_position: Array) -> Array:
    point = jnp.asarray(point_position, dtype=float)
    if point.shape != (3,):
        raise ValueError(f"point_position must be a 3-vector, got shape {point.shape}")
    return point
