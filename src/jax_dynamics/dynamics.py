"""Forward dynamics with the Articulated Body Algorithm.

This module implements the three-pass Articulated Body Algorithm (RBDA,
chapter 7) for fixed-base trees and its floating-base variant (RBDA,
section 9.4). The numeric core :func:`articulated_body_algorithm` is pure
and JIT-compiled; the public entry points validate their input, run the core
and check the result for degenerate joints on concrete values.
"""

import functools
import logging
from typing import Optional, Tuple

import jax
import jax.numpy as jnp
import numpy as np

from .core.model import Model, ModelDescription, check_spatial_vector, check_state_vector
from .core.records import JointType
from .core.state import WorkingState
from .exceptions import IllConditionedModelError, ModelStateError
from .kinematics import outward_pass, pad_state
from .spatial import plucker

Array = jax.Array

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 1e-12


@functools.partial(jax.jit, static_argnames=("floating",))
def articulated_body_algorithm(
    description: ModelDescription,
    q: Array,
    qdot: Array,
    tau: Array,
    X_B: Optional[Array] = None,
    v_B: Optional[Array] = None,
    f_B: Optional[Array] = None,
    floating: bool = False,
) -> WorkingState:
    """Pure forward dynamics core, suitable for ``jax.jit`` and ``jax.vmap``.

    No validation happens here: a degenerate joint shows up as a zero entry
    in the returned ``d`` and non-finite accelerations.

    Args:
        description: Model description.
        q: (n,) joint positions.
        qdot: (n,) joint velocities.
        tau: (n,) joint torques.
        X_B: (6, 6) transform from world to base coordinates (floating only).
        v_B: (6,) base velocity in base coordinates (floating only).
        f_B: (6,) external force on the base in base coordinates (floating only).
        floating: Treat body 0 as a free-floating body.

    Returns:
        WorkingState of the call; ``qddot[1:]`` are the joint accelerations
        and, for a floating base, ``a[0]`` is the base acceleration.
    """
    parents = description.parents
    joint_types = description.joint_types
    n = len(parents)
    inertias = description.spatial_inertias
    zeros = jnp.zeros(6)

    q, qdot, tau = pad_state(q), pad_state(qdot), pad_state(tau)
    if floating:
        X_0, v_0 = X_B, v_B
    else:
        X_0, v_0 = jnp.eye(6), zeros

    X_lambda, X_base, S, v, c = outward_pass(description, q, qdot, X_0, v_0)

    # gravity enters as an external force on every body, expressed in body coordinates
    a_g = jnp.concatenate([jnp.zeros(3), description.gravity])
    IA = [inertias[i] for i in range(n)]
    pA = [
        plucker.crossf(v[i]) @ (inertias[i] @ v[i]) - inertias[i] @ (X_base[i] @ a_g)
        for i in range(n)
    ]
    if floating:
        pA[0] = pA[0] - f_B

    U = [zeros] * n
    d = [jnp.zeros(())] * n
    u = [jnp.zeros(())] * n

    for i in reversed(range(1, n)):
        if joint_types[i] == JointType.REVOLUTE:
            U[i] = IA[i] @ S[i]
            d[i] = S[i] @ U[i]
            u[i] = tau[i] - S[i] @ pA[i]
            Ia = IA[i] - jnp.outer(U[i], U[i]) / d[i]
            pa = pA[i] + Ia @ c[i] + U[i] * (u[i] / d[i])
        else:
            # fixed joints attach the whole subtree rigidly to the parent
            Ia = IA[i]
            pa = pA[i] + Ia @ c[i]

        parent = parents[i]
        if parent != 0 or floating:
            IA[parent] = IA[parent] + X_lambda[i].T @ Ia @ X_lambda[i]
            pA[parent] = pA[parent] + X_lambda[i].T @ pa

    a = [zeros] * n
    qddot = [jnp.zeros(())] * n
    if floating:
        a[0] = jnp.linalg.solve(IA[0], -pA[0])

    for i in range(1, n):
        a_i = X_lambda[i] @ a[parents[i]] + c[i]
        if joint_types[i] == JointType.REVOLUTE:
            qddot[i] = (u[i] - U[i] @ a_i) / d[i]
            a_i = a_i + S[i] * qddot[i]
        a[i] = a_i

    return WorkingState(
        X_lambda=jnp.stack(X_lambda),
        X_base=jnp.stack(X_base),
        S=jnp.stack(S),
        v=jnp.stack(v),
        a=jnp.stack(a),
        c=jnp.stack(c),
        IA=jnp.stack(IA),
        pA=jnp.stack(pA),
        U=jnp.stack(U),
        d=jnp.stack(d),
        u=jnp.stack(u),
        qddot=jnp.stack(qddot),
    )


def forward_dynamics(
    model: Model, Q: Array, QDot: Array, Tau: Array, *, tolerance: float = DEFAULT_TOLERANCE
) -> Array:
    """Joint accelerations of a fixed-base tree.

    Args:
        model: Initialised model. A floating body, if any, is held fixed.
        Q: Joint positions, one per body in id order.
        QDot: Joint velocities.
        Tau: Joint torques.
        tolerance: Smallest accepted articulated inertia along a joint axis.

    Returns:
        (n,) joint accelerations; ``QDDot[i - 1]`` belongs to body ``i``.
        Fixed joints always get zero.

    Raises:
        ModelStateError: if the model is not initialised or the vectors
            have the wrong length.
        IllConditionedModelError: if a revolute joint has (near) zero
            articulated inertia about its axis.
    """
    description = model.description
    n = description.num_bodies
    Q = check_state_vector("Q", Q, n)
    QDot = check_state_vector("QDot", QDot, n)
    Tau = check_state_vector("Tau", Tau, n)

    state = articulated_body_algorithm(description, Q, QDot, Tau)
    _check_articulated_inertia(description, state.d, tolerance)
    return state.qddot[1:]


def forward_dynamics_floating_base(
    model: Model,
    Q: Array,
    QDot: Array,
    Tau: Array,
    X_B: Optional[Array] = None,
    v_B: Optional[Array] = None,
    f_B: Optional[Array] = None,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
) -> Tuple[Array, Array]:
    """Base and joint accelerations of a tree with a free-floating base.

    Args:
        model: Initialised model. Without a floating body the base is held
            fixed, the base state is ignored and ``a_B`` is zero.
        Q: Joint positions of the internal joints.
        QDot: Joint velocities of the internal joints.
        Tau: Joint torques of the internal joints.
        X_B: (6, 6) transform from world to base coordinates. Defaults to
            the model's base translation and rotation.
        v_B: (6,) base velocity in base coordinates, zero by default.
        f_B: (6,) external force on the base in base coordinates, zero by
            default.
        tolerance: Smallest accepted articulated inertia along a joint axis.

    Returns:
        Tuple ``(a_B, QDDot)`` of the (6,) base acceleration in base
        coordinates and the (n,) joint accelerations.

    Raises:
        ModelStateError: if the model is not initialised or got input of
            the wrong size.
        IllConditionedModelError: on a degenerate joint, or when the
            reciprocal condition number of the base articulated inertia is
            not above ``tolerance``.
    """
    description = model.description
    n = description.num_bodies
    Q = check_state_vector("Q", Q, n)
    QDot = check_state_vector("QDot", QDot, n)
    Tau = check_state_vector("Tau", Tau, n)
    X_B = model.base_transform() if X_B is None else jnp.asarray(X_B, dtype=float)
    if X_B.shape != (6, 6):
        raise ModelStateError(f"X_B must have shape (6, 6), got {X_B.shape}")
    v_B = check_spatial_vector("v_B", v_B)
    f_B = check_spatial_vector("f_B", f_B)

    if not description.floating_base:
        logger.debug("Model has no floating body, holding the base fixed")
        state = articulated_body_algorithm(description, Q, QDot, Tau)
        _check_articulated_inertia(description, state.d, tolerance)
        return jnp.zeros(6), state.qddot[1:]

    state = articulated_body_algorithm(description, Q, QDot, Tau, X_B, v_B, f_B, floating=True)
    _check_articulated_inertia(description, state.d, tolerance)
    _check_base_inertia(np.asarray(state.IA[0]), np.asarray(state.a[0]), tolerance)
    return state.a[0], state.qddot[1:]


def _check_base_inertia(IA_B: np.ndarray, a_B: np.ndarray, tolerance: float):
    # reciprocal condition number, zero for an exactly singular inertia
    rcond = 1.0 / np.linalg.cond(IA_B)
    if not (rcond > tolerance and np.all(np.isfinite(a_B))):
        raise IllConditionedModelError(0, float(np.linalg.eigvalsh(IA_B).min()))


def _check_articulated_inertia(description: ModelDescription, d: Array, tolerance: float):
    d = np.asarray(d)
    for body_id, joint_type in enumerate(description.joint_types):
        # negated comparison so that NaN is rejected as well
        if joint_type == JointType.REVOLUTE and not abs(d[body_id]) > tolerance:
            raise IllConditionedModelError(body_id, float(d[body_id]))
