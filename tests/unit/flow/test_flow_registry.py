"""Tests for FlowRegistry."""

import pytest

from spotter.core.constants import Step
from spotter.core.errors import FlowError
from spotter.core.types import FlowOutcome, NoData, ReplyTarget
from spotter.flow.registry import FlowRegistry
from spotter.flows import build_flow_registry


def test_register_and_get_flow():
    """Test registering and retrieving a step handler"""

    # Arrange
    registry = FlowRegistry()

    @registry.register(Step.LOG_MEAL)
    async def log_meal(ctx, data, text):
        return FlowOutcome.done("ok")

    # Act
    spec = registry.get("log_meal")

    # Assert
    assert spec.handler is log_meal
    assert spec.data_type is NoData
    assert spec.cancellable is True
    assert spec.privileged is False


def test_register_duplicate_step_raises():
    registry = FlowRegistry()

    @registry.register("x")
    async def first(ctx, data, text):
        return FlowOutcome.done("")

    with pytest.raises(FlowError, match="already registered"):

        @registry.register("x")
        async def second(ctx, data, text):
            return FlowOutcome.done("")


def test_get_unknown_step_raises():
    """Test an unknown step is a FlowError, never a silent no-op"""
    with pytest.raises(FlowError, match="No flow registered"):
        FlowRegistry().get("nowhere")


def test_contains_accepts_enum_and_string():
    registry = build_flow_registry()

    assert Step.LOG_MEAL in registry
    assert "log_meal" in registry
    assert "unknown" not in registry


class TestBuiltInFlows:
    """Properties of the built-in registry."""

    def test_every_step_has_a_handler(self):
        registry = build_flow_registry()

        assert set(registry.list_steps()) == {step.value for step in Step}

    def test_admin_password_step_is_not_cancellable(self):
        spec = build_flow_registry().get(Step.AWAIT_ADMIN_PASS)

        assert spec.cancellable is False
        assert spec.privileged is False

    def test_admin_steps_are_privileged(self):
        registry = build_flow_registry()
        privileged = {step for step in registry.list_steps() if registry.get(step).privileged}

        assert privileged == {
            Step.ADMIN_BROADCAST.value,
            Step.ADMIN_REPLY.value,
            Step.PROMOTE_USER.value,
            Step.DEMOTE_USER.value,
            Step.REMOVE_USER.value,
            Step.CREATE_EXERCISE.value,
            Step.CREATE_WORKOUT.value,
            Step.CREATE_CHALLENGE.value,
        }

    def test_reply_step_expects_reply_target(self):
        assert build_flow_registry().get(Step.ADMIN_REPLY).data_type is ReplyTarget
