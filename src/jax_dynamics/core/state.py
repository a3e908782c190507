"""Per-call working state of the recursive dynamics algorithms."""

import jax
from flax import struct

Array = jax.Array


@struct.dataclass
class WorkingState:
    """Quantities computed during one pass over the kinematic tree.

    Every array has a leading dimension of ``num_bodies + 1``; entry 0 is the
    base and entry ``i`` belongs to body ``i`` and the joint connecting it to
    its parent. A fresh state is produced by every algorithm call, so the
    model itself is never written to.

    Attributes:
        X_lambda: (n, 6, 6) transforms from parent to body coordinates.
        X_base: (n, 6, 6) transforms from base to body coordinates.
        S: (n, 6) joint motion subspaces.
        v: (n, 6) spatial body velocities in body coordinates.
        a: (n, 6) spatial body accelerations in body coordinates.
        c: (n, 6) velocity-product (bias) accelerations.
        IA: (n, 6, 6) articulated-body inertias.
        pA: (n, 6) articulated-body bias forces.
        U: (n, 6) ``IA @ S`` per joint.
        d: (n,) ``S^T @ IA @ S`` per joint, zero for fixed joints.
        u: (n,) joint torque minus bias force along the axis.
        qddot: (n,) joint accelerations, entry 0 unused.
    """
    X_lambda: Array
    X_base: Array
    S: Array
    v: Array
    a: Array
    c: Array
    IA: Array
    pA: Array
    U: Array
    d: Array
    u: Array
    qddot: Array
