"""Exception types raised by jax_dynamics.

All errors derive from :class:`JaxDynamicsError` and additionally from the
builtin exception that best describes them, so callers can catch either.
"""


class JaxDynamicsError(Exception):
    """Base class for all errors raised by this package."""


class BodyConstructionError(JaxDynamicsError, ValueError):
    """A body was built from physically invalid parameters."""


class JointConstructionError(JaxDynamicsError, ValueError):
    """Unsupported joint type or a revolute axis that is not a cardinal axis."""


class ModelStateError(JaxDynamicsError, RuntimeError):
    """The model is not initialised, is stale, or got state of the wrong size."""


class IllConditionedModelError(JaxDynamicsError, ArithmeticError):
    """An articulated inertia that must be inverted is (near) singular."""

    def __init__(self, body_id: int, d: float):
        super().__init__(
            f"Body {body_id} has degenerate articulated inertia (d={d:.3e})"
        )
        self.body_id = body_id
        self.d = d


class BodyLookupError(JaxDynamicsError, IndexError):
    """A body id does not exist in the model."""


class ContactLookupError(JaxDynamicsError, IndexError):
    """A contact id does not exist in the model."""
