"""
Spatial algebra for rigid-body dynamics in JAX.

This module provides pure, JIT-compilable implementations of:
- SO(3) rotations (so3 module)
- 6D Plücker transforms, spatial cross products and inertias (plucker module)
"""

from . import so3
from . import plucker

__all__ = [
    "so3",
    "plucker",
]
