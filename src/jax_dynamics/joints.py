"""Joint model: transforms and motion terms of a single joint."""

from typing import Tuple

import jax
import jax.numpy as jnp

from .core.model import ModelDescription, check_body_id
from .core.records import JointType
from .exceptions import BodyLookupError, JointConstructionError
from .spatial import plucker

Array = jax.Array


def jcalc(
    description: ModelDescription, joint_id: int, q: Array, qdot: Array
) -> Tuple[Array, Array, Array, Array]:
    """Compute the joint transform and motion terms for one joint.

    Args:
        description: Initialised model description.
        joint_id: Id of the joint, equal to the id of the body it moves.
        q: Joint position.
        qdot: Joint velocity.

    Returns:
        Tuple ``(XJ, S, v_J, c_J)``: the (6, 6) joint transform, the (6,)
        motion subspace, the (6,) joint velocity and the (6,) velocity
        product acceleration of the joint (zero for the supported joints).

    Raises:
        BodyLookupError: if ``joint_id`` does not exist or is the base,
            which has no joint.
        JointConstructionError: if the joint type is not supported.
    """
    check_body_id(description, joint_id)
    if joint_id == 0:
        raise BodyLookupError("Body 0 is the base and has no joint")
    return _jcalc(description.joint_types[joint_id], description.joint_axes[joint_id], q, qdot)


def _jcalc(joint_type: JointType, axis: Array, q: Array, qdot: Array) -> Tuple[Array, Array, Array, Array]:
    c_J = jnp.zeros(6, dtype=axis.dtype)

    if joint_type == JointType.REVOLUTE:
        XJ = plucker.axis_rotation(axis[:3], q)
        S = axis
        v_J = S * qdot
    elif joint_type == JointType.FIXED:
        XJ = jnp.eye(6, dtype=axis.dtype)
        S = jnp.zeros(6, dtype=axis.dtype)
        v_J = S
    else:
        raise JointConstructionError(f"Unsupported joint type {joint_type!r}")

    return XJ, S, v_J, c_J
