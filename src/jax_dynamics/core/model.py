"""Kinematic-tree model: an append-only builder and its frozen description.

A :class:`Model` is assembled body by body. Calling :meth:`Model.init`
freezes the current tree into a :class:`ModelDescription`, an immutable PyTree
that the dynamics algorithms consume. The tree is stored as parallel arrays
indexed by body id with an explicit parent array; id 0 is the base and bodies
are numbered from 1 in the order they are added, so a parent always has a
smaller id than its children.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import jax
import jax.numpy as jnp
from flax import struct

from ..exceptions import BodyLookupError, ContactLookupError, ModelStateError
from ..spatial import plucker, so3
from .records import Body, Contact, Joint, JointType

Array = jax.Array

logger = logging.getLogger(__name__)


@struct.dataclass
class ModelDescription:
    """Immutable PyTree snapshot of a model's topology and inertial data.

    Attributes:
        parents: Tuple of length ``n + 1``; ``parents[i]`` is the parent id
            of body ``i``. Entry 0 (the base) refers to itself.
            Marked as a static field for JIT compilation.
        joint_types: Joint type of each body's joint; entry 0 is UNDEFINED.
            Marked as a static field for JIT compilation.
        floating_base: Whether body 0 is free to move in all six directions.
        joint_axes: Array of shape (n + 1, 6) with the motion subspaces.
        joint_frames: Array of shape (n + 1, 6, 6) with the fixed transforms
            ``X_T`` from parent coordinates to each joint frame.
        spatial_inertias: Array of shape (n + 1, 6, 6). Entry 0 is the
            floating body's inertia, or zero for a fixed base.
        gravity: (3,) gravitational acceleration in base coordinates.
    """
    parents: Tuple[int, ...] = struct.field(pytree_node=False)
    joint_types: Tuple[JointType, ...] = struct.field(pytree_node=False)
    floating_base: bool = struct.field(pytree_node=False)
    joint_axes: Array
    joint_frames: Array
    spatial_inertias: Array
    gravity: Array

    @property
    def num_bodies(self) -> int:
        """Number of movable bodies, not counting the base."""
        return len(self.parents) - 1


class Model:
    """Append-only builder of a kinematic tree.

    Bodies, joints and contacts are only ever added. Any change that affects
    the dynamics marks the model stale until :meth:`init` is called again.
    """

    def __init__(self, gravity: Sequence[float] = (0.0, -9.81, 0.0)):
        self.parents: List[int] = [0]
        self.bodies: List[Optional[Body]] = [None]
        self.joints: List[Joint] = [Joint(joint_type=JointType.UNDEFINED, joint_axis=jnp.zeros(6))]
        self.joint_frames: List[Array] = [jnp.eye(6)]
        self.contacts: List[Contact] = []

        self.floating_base = False
        self.base_translation = jnp.zeros(3)
        self.base_rotation = jnp.zeros(3)

        self._gravity = jnp.asarray(gravity, dtype=float)
        self._description: Optional[ModelDescription] = None
        self._stale = False

    @property
    def gravity(self) -> Array:
        return self._gravity

    @gravity.setter
    def gravity(self, value: Sequence[float]):
        value = jnp.asarray(value, dtype=float)
        if value.shape != (3,):
            raise ValueError(f"gravity must be a 3-vector, got shape {value.shape}")
        self._gravity = value
        self._mark_stale()

    @property
    def num_bodies(self) -> int:
        """Number of movable bodies, which is also the number of joint coordinates."""
        return len(self.parents) - 1

    def add_body(self, parent_id: int, joint_frame: Array, joint: Joint, body: Body) -> int:
        """Connect a body to the tree.

        Args:
            parent_id: Id of the parent body, 0 for the base.
            joint_frame: (6, 6) Plücker transform from the parent frame to
                the joint frame (``X_T``).
            joint: Joint connecting the new body to its parent.
            body: Inertial description of the new body.

        Returns:
            Id of the added body.

        Raises:
            BodyLookupError: if ``parent_id`` does not exist.
            ValueError: if ``joint_frame`` is not a 6x6 matrix.
        """
        self._check_body_id(parent_id)
        joint_frame = jnp.asarray(joint_frame, dtype=float)
        if joint_frame.shape != (6, 6):
            raise ValueError(f"joint_frame must have shape (6, 6), got {joint_frame.shape}")

        self.parents.append(parent_id)
        self.joint_frames.append(joint_frame)
        self.joints.append(joint)
        self.bodies.append(body)
        self._mark_stale()

        body_id = len(self.parents) - 1
        logger.debug(
            "Added body %d to parent %d with %s joint", body_id, parent_id, joint.joint_type.name
        )
        return body_id

    def set_floating_body(
        self,
        body: Body,
        translation: Optional[Sequence[float]] = None,
        rotation: Optional[Sequence[float]] = None,
    ):
        """Make the base a free-floating body.

        Args:
            body: Inertial description of the base.
            translation: Base position in world coordinates.
            rotation: Base orientation as ZYX Euler angles ``[z, y, x]``.
        """
        self.bodies[0] = body
        self.floating_base = True
        if translation is not None:
            self.base_translation = jnp.asarray(translation, dtype=float)
        if rotation is not None:
            self.base_rotation = jnp.asarray(rotation, dtype=float)
        self._mark_stale()
        logger.debug("Base set to floating with mass %s", float(body.mass))

    def add_contact(self, body_id: int, point: Sequence[float]) -> int:
        """Attach a contact point to a body and return its id."""
        self._check_body_id(body_id)
        self.contacts.append(Contact(body_id=body_id, point=jnp.asarray(point, dtype=float)))
        return len(self.contacts) - 1

    def base_transform(self) -> Array:
        """Plücker transform from world to base coordinates."""
        E = so3.inverse(so3.from_euler_zyx(self.base_rotation))
        return plucker.from_rotation_and_translation(E, self.base_translation)

    def body(self, body_id: int) -> Optional[Body]:
        """Return the body with the given id; the base is ``None`` unless floating."""
        self._check_body_id(body_id)
        return self.bodies[body_id]

    def joint(self, body_id: int) -> Joint:
        """Return the joint connecting body ``body_id`` to its parent."""
        self._check_body_id(body_id)
        return self.joints[body_id]

    def contact(self, contact_id: int) -> Contact:
        if not 0 <= contact_id < len(self.contacts):
            raise ContactLookupError(
                f"Contact {contact_id} not found, model has {len(self.contacts)} contacts"
            )
        return self.contacts[contact_id]

    def init(self) -> ModelDescription:
        """Freeze the current tree into the description used by the algorithms.

        Must be called after the topology is complete and again after every
        change to it.
        """
        if self._stale and self._description is not None:
            logger.info("Re-initialising model after its topology changed")

        if self.floating_base:
            base_inertia = self.bodies[0].spatial_inertia
        else:
            base_inertia = jnp.zeros((6, 6))
        inertias = [base_inertia] + [body.spatial_inertia for body in self.bodies[1:]]

        self._description = ModelDescription(
            parents=tuple(self.parents),
            joint_types=tuple(joint.joint_type for joint in self.joints),
            floating_base=self.floating_base,
            joint_axes=jnp.stack([joint.joint_axis for joint in self.joints]),
            joint_frames=jnp.stack(self.joint_frames),
            spatial_inertias=jnp.stack(inertias),
            gravity=self._gravity,
        )
        self._stale = False
        logger.debug("Initialised model with %d bodies", self.num_bodies)
        return self._description

    @property
    def description(self) -> ModelDescription:
        """The frozen description from the last :meth:`init`.

        Raises:
            ModelStateError: if :meth:`init` was never called or the model
                changed since.
        """
        if self._description is None:
            raise ModelStateError("Model is not initialised, call init() first")
        if self._stale:
            raise ModelStateError(
                "Model changed since the last init(), call init() again"
            )
        return self._description

    def _check_body_id(self, body_id: int):
        if not 0 <= body_id < len(self.parents):
            raise BodyLookupError(
                f"Body {body_id} not found, model has {self.num_bodies} bodies"
            )

    def _mark_stale(self):
        if self._description is not None:
            self._stale = True


def check_state_vector(name: str, value: Array, size: int) -> Array:
    """Convert a joint-space vector and check it has one entry per body."""
    value = jnp.asarray(value, dtype=float)
    if value.shape != (size,):
        raise ModelStateError(
            f"{name} must have shape ({size},), got {value.shape}"
        )
    return value


def check_spatial_vector(name: str, value: Optional[Array]) -> Array:
    if value is None:
        return jnp.zeros(6)
    value = jnp.asarray(value, dtype=float)
    if value.shape != (6,):
        raise ModelStateError(f"{name} must have shape (6,), got {value.shape}")
    return value


def check_body_id(description: ModelDescription, body_id: int):
    if not 0 <= body_id <= description.num_bodies:
        raise BodyLookupError(
            f"Body {body_id} not found, model has {description.num_bodies} bodies"
        )
