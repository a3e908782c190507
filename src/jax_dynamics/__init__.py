"""
JAX Dynamics: forward dynamics of articulated rigid-body trees.

This library provides spatial-algebra implementations of the Articulated
Body Algorithm for fixed- and floating-base kinematic trees, together with
point kinematics queries, using JAX.
"""

import jax
jax.config.update("jax_enable_x64", True)

# Import core modules
from . import spatial
from . import core
from .core import Body, Contact, Joint, JointType, Model, ModelDescription, WorkingState
from .dynamics import articulated_body_algorithm, forward_dynamics, forward_dynamics_floating_base
from .joints import jcalc
from .kinematics import (
    calc_base_to_body_coordinates,
    calc_body_to_base_coordinates,
    calc_body_world_orientation,
    calc_point_acceleration,
    calc_point_velocity,
    update_kinematics,
)

__version__ = "0.1.0"
__all__ = [
    "spatial",
    "core",
    "Body",
    "Contact",
    "Joint",
    "JointType",
    "Model",
    "ModelDescription",
    "WorkingState",
    "jcalc",
    "articulated_body_algorithm",
    "forward_dynamics",
    "forward_dynamics_floating_base",
    "update_kinematics",
    "calc_point_velocity",
    "calc_point_acceleration",
    "calc_body_to_base_coordinates",
    "calc_base_to_body_coordinates",
    "calc_body_world_orientation",
]
