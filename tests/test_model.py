"""Tests for bodies, joints, contacts and the model builder."""

import jax.numpy as jnp
import numpy as np
import pytest

from jax_dynamics import Body, Joint, JointType, Model, forward_dynamics, jcalc
from jax_dynamics.exceptions import (
    BodyConstructionError,
    BodyLookupError,
    ContactLookupError,
    JointConstructionError,
    ModelStateError,
)
from jax_dynamics.spatial import plucker


def _unit_body():
    return Body.create(1.0, (0.0, -0.5, 0.0), (0.1, 0.1, 0.1))


# Body tests
def test_body_spatial_inertia():
    """Test the spatial inertia built from mass, COM and gyration radii."""
    body = Body.create(2.0, (1.0, 0.0, 0.0), (0.1, 0.2, 0.3))
    I = body.spatial_inertia

    np.testing.assert_allclose(I[:3, :3], jnp.diag(jnp.array([0.1, 2.2, 2.3])), atol=1e-12)
    np.testing.assert_allclose(I[3:, 3:], 2.0 * jnp.eye(3), atol=1e-12)
    # m c× for c = x
    expected_coupling = jnp.array([[0.0, 0.0, 0.0], [0.0, 0.0, -2.0], [0.0, 2.0, 0.0]])
    np.testing.assert_allclose(I[:3, 3:], expected_coupling, atol=1e-12)
    np.testing.assert_allclose(I, I.T, atol=1e-12)
    assert float(body.mass) == 2.0


@pytest.mark.parametrize(
    "mass, com, radii",
    [
        (0.0, (0.0, 0.0, 0.0), (1.0, 1.0, 1.0)),
        (-1.0, (0.0, 0.0, 0.0), (1.0, 1.0, 1.0)),
        (1.0, (0.0, 0.0), (1.0, 1.0, 1.0)),
        (1.0, (0.0, 0.0, 0.0), (1.0, -1.0, 1.0)),
    ],
)
def test_body_rejects_invalid_parameters(mass, com, radii):
    with pytest.raises(BodyConstructionError):
        Body.create(mass, com, radii)


# Joint tests
@pytest.mark.parametrize("axis", [(1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)])
def test_revolute_joint_cardinal_axes(axis):
    joint = Joint.create(JointType.REVOLUTE, axis)
    assert joint.joint_type == JointType.REVOLUTE
    np.testing.assert_allclose(joint.joint_axis, jnp.concatenate([jnp.array(axis), jnp.zeros(3)]))


@pytest.mark.parametrize("axis", [(1.0, 1.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), (0.0, 0.0, 1.0, 0.0)])
def test_revolute_joint_rejects_non_cardinal_axis(axis):
    with pytest.raises(JointConstructionError, match="cardinal axis"):
        Joint.create(JointType.REVOLUTE, axis)


def test_fixed_joint_has_zero_axis():
    joint = Joint.create("fixed", (0.0, 0.0, 1.0))
    assert joint.joint_type == JointType.FIXED
    np.testing.assert_array_equal(joint.joint_axis, jnp.zeros(6))


@pytest.mark.parametrize("joint_type", [JointType.UNDEFINED, "prismatic", 7])
def test_unsupported_joint_types(joint_type):
    with pytest.raises(JointConstructionError):
        Joint.create(joint_type, (0.0, 0.0, 1.0))


def test_construction_errors_are_value_errors():
    with pytest.raises(ValueError):
        Joint.create("revolute", (1.0, 1.0, 0.0))


# jcalc tests
def test_jcalc_revolute():
    model = Model()
    model.add_body(0, jnp.eye(6), Joint.create("revolute", (0.0, 0.0, 1.0)), _unit_body())
    description = model.init()

    XJ, S, v_J, c_J = jcalc(description, 1, 0.25, 2.0)

    np.testing.assert_allclose(XJ, plucker.rotz(0.25), atol=1e-12)
    np.testing.assert_allclose(S, jnp.array([0.0, 0.0, 1.0, 0.0, 0.0, 0.0]))
    np.testing.assert_allclose(v_J, jnp.array([0.0, 0.0, 2.0, 0.0, 0.0, 0.0]))
    np.testing.assert_allclose(c_J, jnp.zeros(6))


def test_jcalc_fixed():
    model = Model()
    model.add_body(0, jnp.eye(6), Joint.create("fixed"), _unit_body())
    description = model.init()

    XJ, S, v_J, c_J = jcalc(description, 1, 0.25, 2.0)

    np.testing.assert_allclose(XJ, jnp.eye(6))
    np.testing.assert_allclose(S, jnp.zeros(6))
    np.testing.assert_allclose(v_J, jnp.zeros(6))
    np.testing.assert_allclose(c_J, jnp.zeros(6))


def test_jcalc_invalid_joint_id():
    model = Model()
    model.add_body(0, jnp.eye(6), Joint.create("fixed"), _unit_body())
    description = model.init()
    with pytest.raises(BodyLookupError):
        jcalc(description, 2, 0.0, 0.0)
    with pytest.raises(BodyLookupError, match="no joint"):
        jcalc(description, 0, 0.0, 0.0)


# Model tests
def test_add_body_assigns_sequential_ids():
    model = Model()
    revolute = Joint.create("revolute", (0.0, 0.0, 1.0))
    first = model.add_body(0, jnp.eye(6), revolute, _unit_body())
    second = model.add_body(first, jnp.eye(6), revolute, _unit_body())
    third = model.add_body(first, jnp.eye(6), revolute, _unit_body())

    assert (first, second, third) == (1, 2, 3)
    assert model.parents == [0, 0, 1, 1]
    assert model.num_bodies == 3

    description = model.init()
    assert description.parents == (0, 0, 1, 1)
    assert description.num_bodies == 3
    assert description.joint_types[1:] == (JointType.REVOLUTE,) * 3
    assert description.spatial_inertias.shape == (4, 6, 6)
    assert description.joint_frames.shape == (4, 6, 6)


def test_add_body_unknown_parent():
    model = Model()
    with pytest.raises(BodyLookupError):
        model.add_body(1, jnp.eye(6), Joint.create("fixed"), _unit_body())


def test_add_body_rejects_bad_joint_frame():
    model = Model()
    with pytest.raises(ValueError, match="joint_frame"):
        model.add_body(0, jnp.eye(4), Joint.create("fixed"), _unit_body())


def test_lookups():
    model = Model()
    body = _unit_body()
    body_id = model.add_body(0, jnp.eye(6), Joint.create("fixed"), body)

    assert model.body(body_id) is body
    assert model.body(0) is None
    assert model.joint(body_id).joint_type == JointType.FIXED
    with pytest.raises(BodyLookupError):
        model.body(5)
    with pytest.raises(BodyLookupError):
        model.joint(-1)


def test_contacts():
    model = Model()
    body_id = model.add_body(0, jnp.eye(6), Joint.create("fixed"), _unit_body())

    first = model.add_contact(body_id, (0.0, -1.0, 0.0))
    second = model.add_contact(0, (1.0, 0.0, 0.0))

    assert (first, second) == (0, 1)
    assert model.contact(first).body_id == body_id
    np.testing.assert_allclose(model.contact(first).point, jnp.array([0.0, -1.0, 0.0]))
    with pytest.raises(ContactLookupError):
        model.contact(2)
    with pytest.raises(BodyLookupError):
        model.add_contact(3, (0.0, 0.0, 0.0))


def test_uninitialised_model_is_rejected():
    model = Model()
    model.add_body(0, jnp.eye(6), Joint.create("revolute", (0.0, 0.0, 1.0)), _unit_body())
    with pytest.raises(ModelStateError, match="not initialised"):
        forward_dynamics(model, [0.0], [0.0], [0.0])


def test_topology_change_requires_init():
    model = Model()
    revolute = Joint.create("revolute", (0.0, 0.0, 1.0))
    model.add_body(0, jnp.eye(6), revolute, _unit_body())
    model.init()
    forward_dynamics(model, [0.0], [0.0], [0.0])

    model.add_body(1, plucker.xtrans(jnp.array([0.0, -1.0, 0.0])), revolute, _unit_body())
    with pytest.raises(ModelStateError, match="init"):
        forward_dynamics(model, [0.0, 0.0], [0.0, 0.0], [0.0, 0.0])

    model.init()
    assert forward_dynamics(model, [0.0, 0.0], [0.0, 0.0], [0.0, 0.0]).shape == (2,)


def test_gravity_change_requires_init():
    model = Model()
    model.add_body(0, jnp.eye(6), Joint.create("revolute", (0.0, 0.0, 1.0)), _unit_body())
    model.init()
    model.gravity = (0.0, 0.0, -9.81)
    with pytest.raises(ModelStateError):
        forward_dynamics(model, [0.0], [0.0], [0.0])
    description = model.init()
    np.testing.assert_allclose(description.gravity, jnp.array([0.0, 0.0, -9.81]))


def test_adding_contact_keeps_model_initialised():
    model = Model()
    model.add_body(0, jnp.eye(6), Joint.create("revolute", (0.0, 0.0, 1.0)), _unit_body())
    model.init()
    model.add_contact(1, (0.0, -1.0, 0.0))
    assert model.description.num_bodies == 1


def test_state_vector_length_mismatch(pendulum):
    with pytest.raises(ModelStateError, match="Q must have shape"):
        forward_dynamics(pendulum, [0.0, 0.0], [0.0], [0.0])
    with pytest.raises(ModelStateError, match="Tau must have shape"):
        forward_dynamics(pendulum, [0.0], [0.0], [])


def test_floating_body_and_base_transform():
    model = Model()
    model.set_floating_body(_unit_body(), translation=(1.0, 2.0, 3.0), rotation=(0.5, 0.0, 0.0))
    description = model.init()

    assert description.floating_base
    np.testing.assert_allclose(description.spatial_inertias[0], _unit_body().spatial_inertia)

    X_B = model.base_transform()
    np.testing.assert_allclose(plucker.get_translation(X_B), jnp.array([1.0, 2.0, 3.0]), atol=1e-12)
    np.testing.assert_allclose(X_B, plucker.rotz(0.5) @ plucker.xtrans(jnp.array([1.0, 2.0, 3.0])), atol=1e-12)
