"""Value types describing the pieces of a kinematic tree.

Bodies, joints and contacts are immutable flax PyTrees. They are built through
their ``create`` class methods, which validate the input eagerly; the
dataclass constructors themselves do no checking and are what JAX uses when
unflattening.
"""

import enum
from typing import Sequence, Union

import jax
import jax.numpy as jnp
import numpy as np
from flax import struct

from ..exceptions import BodyConstructionError, JointConstructionError
from ..spatial import plucker

Array = jax.Array

_CARDINAL_AXES = tuple(tuple(row) for row in np.eye(3))


class JointType(enum.IntEnum):
    """The kinds of joints connecting a body to its parent."""

    UNDEFINED = 0
    FIXED = 1
    REVOLUTE = 2


@struct.dataclass
class Body:
    """Mass distribution of a single rigid link.

    Attributes:
        mass: Mass of the body.
        center_of_mass: (3,) position of the center of mass in body coordinates.
        spatial_inertia: (6, 6) spatial inertia at the body origin. Derived once
            in :meth:`create`; a body with different mass or COM must be
            created anew.
    """
    mass: Array
    center_of_mass: Array
    spatial_inertia: Array

    @classmethod
    def create(
        cls,
        mass: float,
        center_of_mass: Sequence[float],
        gyration_radii: Sequence[float],
    ) -> "Body":
        """Build a body and its spatial inertia.

        Args:
            mass: Body mass, must be positive.
            center_of_mass: Position of the COM in body coordinates.
            gyration_radii: Principal rotational inertia values about the
                COM, used as the diagonal of the rotational inertia.

        Returns:
            Body with a symmetric spatial inertia.

        Raises:
            BodyConstructionError: on non-positive mass, negative inertia
                values or vectors that are not 3D.
        """
        com = np.asarray(center_of_mass, dtype=float)
        radii = np.asarray(gyration_radii, dtype=float)
        if com.shape != (3,) or radii.shape != (3,):
            raise BodyConstructionError(
                f"center_of_mass and gyration_radii must be 3-vectors, "
                f"got shapes {com.shape} and {radii.shape}"
            )
        if not np.isfinite(mass) or mass <= 0.0:
            raise BodyConstructionError(f"Body mass must be positive, got {mass}")
        if np.any(radii < 0.0):
            raise BodyConstructionError(f"Gyration radii must be non-negative, got {radii}")

        com = jnp.asarray(com)
        inertia = plucker.spatial_inertia(mass, com, jnp.diag(jnp.asarray(radii)))
        return cls(mass=jnp.asarray(mass, dtype=com.dtype), center_of_mass=com, spatial_inertia=inertia)


@struct.dataclass
class Joint:
    """Kinematic relationship between a body and its parent.

    Attributes:
        joint_type: Kind of joint. Static, so a change of type retraces.
        joint_axis: (6,) motion subspace ``[wx, wy, wz, vx, vy, vz]``. Zero
            for fixed joints.
    """
    joint_type: JointType = struct.field(pytree_node=False)
    joint_axis: Array

    @classmethod
    def create(
        cls,
        joint_type: Union[JointType, str],
        axis: Sequence[float] = (0.0, 0.0, 0.0),
    ) -> "Joint":
        """Build a joint, accepting only fixed joints and cardinal revolute joints.

        Args:
            joint_type: ``JointType`` member or its name (``"revolute"``,
                ``"fixed"``).
            axis: Rotation axis; must be exactly (1,0,0), (0,1,0) or (0,0,1)
                for revolute joints and is ignored for fixed joints.

        Raises:
            JointConstructionError: for any other joint type or axis.
        """
        if isinstance(joint_type, str):
            try:
                joint_type = JointType[joint_type.upper()]
            except KeyError:
                raise JointConstructionError(f"Unknown joint type '{joint_type}'")

        if joint_type == JointType.REVOLUTE:
            axis = np.asarray(axis, dtype=float)
            if axis.shape != (3,) or tuple(axis) not in _CARDINAL_AXES:
                raise JointConstructionError(
                    f"Revolute joints must rotate about a cardinal axis, got {axis.tolist()}"
                )
            joint_axis = jnp.concatenate([jnp.asarray(axis), jnp.zeros(3)])
        elif joint_type == JointType.FIXED:
            joint_axis = jnp.zeros(6)
        else:
            raise JointConstructionError(f"Unsupported joint type {joint_type!r}")

        return cls(joint_type=JointType(joint_type), joint_axis=joint_axis)


@struct.dataclass
class Contact:
    """A labelled point on a body, kept for consumers outside the dynamics.

    Attributes:
        body_id: Body the point is attached to.
        point: (3,) position in body coordinates.
    """
    body_id: int = struct.field(pytree_node=False)
    point: Array
