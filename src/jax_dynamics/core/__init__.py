"""Core model data structures for JAX Dynamics.

This module provides the records describing bodies and joints, the
append-only model builder with its immutable description, and the per-call
working state of the algorithms.
"""

from .records import Body, Contact, Joint, JointType
from .model import Model, ModelDescription
from .state import WorkingState

__all__ = ["Body", "Contact", "Joint", "JointType", "Model", "ModelDescription", "WorkingState"]
