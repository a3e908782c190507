"""Pytest fixtures building small kinematic trees."""

import jax.numpy as jnp
import pytest

from jax_dynamics import Body, Joint, Model
from jax_dynamics.spatial import plucker


def _build_chain(num_bodies: int, gravity=(0.0, -9.81, 0.0)) -> Model:
    """Planar serial chain of unit-length links hanging along -y.

    Each link rotates about z and has its center of mass halfway down.
    """
    model = Model(gravity=gravity)
    parent = 0
    for i in range(num_bodies):
        joint_frame = jnp.eye(6) if i == 0 else plucker.xtrans(jnp.array([0.0, -1.0, 0.0]))
        body = Body.create(1.0 + 0.5 * i, (0.0, -0.5, 0.0), (0.1, 0.05 + 0.01 * i, 0.1))
        parent = model.add_body(parent, joint_frame, Joint.create("revolute", (0.0, 0.0, 1.0)), body)
    model.init()
    return model


def _build_branched_tree(gravity=(0.0, -9.81, 0.0)) -> Model:
    """Tree with a root link carrying two branches, one of them two links long."""
    model = Model(gravity=gravity)
    body = Body.create(2.0, (0.1, -0.4, 0.0), (0.2, 0.1, 0.15))
    root = model.add_body(0, jnp.eye(6), Joint.create("revolute", (0.0, 0.0, 1.0)), body)

    left = model.add_body(
        root,
        plucker.xtrans(jnp.array([0.3, -0.8, 0.0])),
        Joint.create("revolute", (1.0, 0.0, 0.0)),
        Body.create(1.0, (0.0, -0.3, 0.05), (0.05, 0.02, 0.05)),
    )
    model.add_body(
        left,
        plucker.xtrans(jnp.array([0.0, -0.6, 0.0])) @ plucker.rotz(0.3),
        Joint.create("revolute", (0.0, 1.0, 0.0)),
        Body.create(0.5, (0.05, -0.2, 0.0), (0.01, 0.02, 0.01)),
    )
    model.add_body(
        root,
        plucker.xtrans(jnp.array([-0.3, -0.8, 0.0])),
        Joint.create("revolute", (0.0, 0.0, 1.0)),
        Body.create(1.5, (0.0, -0.4, 0.0), (0.04, 0.01, 0.04)),
    )
    model.init()
    return model


@pytest.fixture
def pendulum() -> Model:
    """Single link hinged about z at the origin, COM one meter along x."""
    model = Model(gravity=(0.0, -9.81, 0.0))
    body = Body.create(2.0, (1.0, 0.0, 0.0), (0.1, 0.2, 0.3))
    model.add_body(0, jnp.eye(6), Joint.create("revolute", (0.0, 0.0, 1.0)), body)
    model.init()
    return model


@pytest.fixture(scope="session")
def make_chain():
    """Factory for planar serial chains, see ``_build_chain``."""
    return _build_chain


@pytest.fixture(scope="session")
def make_branched_tree():
    return _build_branched_tree


@pytest.fixture(scope="session")
def make_floating_chain(make_chain):
    """Factory re-rooting a two-link chain on a floating base body."""

    def build(base: Body, gravity) -> Model:
        chain = make_chain(2, gravity=gravity)
        model = Model(gravity=gravity)
        model.set_floating_body(base)
        for i in range(1, 3):
            model.add_body(chain.parents[i], chain.joint_frames[i], chain.joints[i], chain.bodies[i])
        model.init()
        return model

    return build


@pytest.fixture
def double_pendulum() -> Model:
    return _build_chain(2)


@pytest.fixture
def branched_tree() -> Model:
    return _build_branched_tree()
