"""Tests for DialogueRouter turn resolution and error mapping."""

import asyncio

import pytest

from spotter.core.constants import Step
from spotter.core.errors import FlowError
from spotter.core.types import FlowOutcome, InboundCallback, InboundText, NoData, ProfileChoice
from spotter.dialogue.commands import CallbackRegistry, CommandRegistry
from spotter.dialogue.router import (
    CANCELLED_REPLY,
    FALLBACK_REPLY,
    SAVE_FAILED_REPLY,
    DialogueRouter,
)
from spotter.flow.context import ADMIN_ONLY
from spotter.flow.registry import FlowRegistry
from spotter.flows.onboarding import AGE_PROMPT, WEIGHT_PROMPT
from spotter.flows.tracking import MEAL_PROMPT


async def say(router, text: str, user_id: int = 1, first_name: str = "Ana"):
    return await router.handle_text(
        InboundText(user_id=user_id, text=text, first_name=first_name)
    )


class TestFallbackAndCommands:
    @pytest.mark.asyncio
    async def test_unmatched_text_gets_fallback(self, router):
        result = await say(router, "hello there")

        assert result.replies == [FALLBACK_REPLY]
        assert result.step is None

    @pytest.mark.asyncio
    async def test_cancel_without_session(self, router):
        result = await say(router, "/cancel")

        assert result.replies[0].startswith("Nothing to cancel.")

    @pytest.mark.asyncio
    async def test_menu_command_for_unknown_user_asks_for_start(self, router):
        result = await say(router, "Profile")

        assert result.replies == ["Please /start first."]

    @pytest.mark.asyncio
    async def test_start_begins_onboarding(self, router):
        result = await say(router, "/start")

        assert result.replies[-1] == AGE_PROMPT
        assert result.step == Step.ONBOARD_AGE.value


class TestModalSessions:
    """An active session owns every text turn."""

    @pytest.mark.asyncio
    async def test_menu_trigger_is_handed_to_the_step(self, router):
        # Arrange
        await say(router, "/start")
        await say(router, "/cancel")
        await say(router, "Log Meal")

        # Act
        result = await say(router, "Profile")

        # Assert
        assert result.replies == [MEAL_PROMPT]
        assert result.step == Step.LOG_MEAL.value

    @pytest.mark.asyncio
    async def test_cancel_trigger_clears_session(self, router, services):
        await say(router, "/start")

        result = await say(router, "Back to Main")

        assert result.replies == [CANCELLED_REPLY]
        assert result.step is None
        assert services.sessions.get(1) is None

    @pytest.mark.asyncio
    async def test_cancel_is_consumed_as_password_attempt(self, router, services):
        """The password step takes the next turn whatever it contains."""
        await say(router, "/admin")

        result = await say(router, "/cancel")

        assert result.replies == ["Wrong password"]
        assert result.step is None
        assert not services.elevation.is_elevated(1)


class TestErrorMapping:
    @pytest.mark.asyncio
    async def test_unknown_step_raises_flow_error(self, router, services):
        services.sessions.set(1, "ghost_step")

        with pytest.raises(FlowError, match="ghost_step"):
            await say(router, "anything")

    @pytest.mark.asyncio
    async def test_data_variant_mismatch_raises_flow_error(self, router, services):
        services.sessions.set(1, Step.ONBOARD_AGE, NoData())

        with pytest.raises(FlowError, match="ProfileRef"):
            await say(router, "29")

    @pytest.mark.asyncio
    async def test_persistence_failure_does_not_advance(self, router, services, repository, monkeypatch):
        """A failed save keeps the step so the user can retry."""
        # Arrange
        await say(router, "/start")

        async def broken_save(item):
            raise OSError("database unreachable")

        monkeypatch.setattr(repository.users, "save", broken_save)

        # Act
        result = await say(router, "29")

        # Assert
        assert result.replies == [SAVE_FAILED_REPLY]
        assert result.step == Step.ONBOARD_AGE.value
        stored = await repository.users.get(1)
        assert stored.active_profile.age is None

    @pytest.mark.asyncio
    async def test_failed_relay_write_keeps_trainer_step(self, router, repository, monkeypatch):
        # Arrange
        await say(router, "/start")
        await say(router, "/cancel")
        await say(router, "Trainer")

        async def broken_create(item):
            raise OSError("database unreachable")

        monkeypatch.setattr(repository.relays, "create", broken_create)

        # Act
        result = await say(router, "hello coach")

        # Assert
        assert result.replies == [SAVE_FAILED_REPLY]
        assert result.step == Step.MESSAGE_TRAINER.value

    @pytest.mark.asyncio
    async def test_failed_content_write_keeps_admin_step(
        self, router, services, repository, monkeypatch
    ):
        # Arrange
        services.elevation.grant(1)
        services.sessions.set(1, Step.CREATE_EXERCISE)

        async def broken_create(item):
            raise OSError("database unreachable")

        monkeypatch.setattr(repository.exercises, "create", broken_create)

        # Act
        result = await say(router, "Lunge | strength | beginner | legs | none | Upright | Step")

        # Assert
        assert result.replies == [SAVE_FAILED_REPLY]
        assert result.step == Step.CREATE_EXERCISE.value
        assert await repository.exercises.count() == 0

    @pytest.mark.asyncio
    async def test_retry_after_persistence_recovers(self, router, repository, monkeypatch):
        await say(router, "/start")
        original_save = repository.users.save

        async def broken_save(item):
            raise OSError("database unreachable")

        monkeypatch.setattr(repository.users, "save", broken_save)
        await say(router, "29")
        monkeypatch.setattr(repository.users, "save", original_save)

        result = await say(router, "29")

        assert result.replies == [WEIGHT_PROMPT]

    @pytest.mark.asyncio
    async def test_not_found_clears_session(self, router, services):
        await say(router, "/start")
        await say(router, "/cancel")
        services.sessions.set(1, Step.SWITCH_PROFILE, ProfileChoice(profile_ids=["gone"]))

        result = await say(router, "1")

        assert result.replies == ["That profile no longer exists."]
        assert result.step is None

    @pytest.mark.asyncio
    async def test_privileged_command_without_elevation(self, router):
        result = await say(router, "Broadcast")

        assert result.replies == [ADMIN_ONLY]
        assert result.step is None


class TestPrivilegedSteps:
    """Privileged steps are gated by the router as well as by their handlers."""

    @pytest.fixture
    def calls(self) -> list[str]:
        return []

    @pytest.fixture
    def gated_router(self, services, calls) -> DialogueRouter:
        flows = FlowRegistry()

        @flows.register("unguarded_admin_step", privileged=True)
        async def unguarded(ctx, data, text):
            calls.append(text)
            return FlowOutcome.done("done")

        return DialogueRouter(services, flows, CommandRegistry(), CallbackRegistry())

    @pytest.mark.asyncio
    async def test_handler_without_own_check_is_denied(self, gated_router, services, calls):
        # Arrange
        services.sessions.set(1, "unguarded_admin_step")

        # Act
        result = await say(gated_router, "wipe everything")

        # Assert
        assert result.replies == [ADMIN_ONLY]
        assert result.step == "unguarded_admin_step"
        assert calls == []

    @pytest.mark.asyncio
    async def test_elevated_user_reaches_handler(self, gated_router, services, calls):
        services.elevation.grant(1)
        services.sessions.set(1, "unguarded_admin_step")

        result = await say(gated_router, "go")

        assert result.replies == ["done"]
        assert calls == ["go"]


class TestIsolationAndOrdering:
    @pytest.mark.asyncio
    async def test_sessions_are_isolated_between_users(self, router):
        await say(router, "/start", user_id=1)
        await say(router, "/start", user_id=2)
        await say(router, "29", user_id=1)

        result = await say(router, "abc", user_id=2)

        assert result.replies == ["Please send a number for age."]
        assert result.step == Step.ONBOARD_AGE.value

    @pytest.mark.asyncio
    async def test_concurrent_turns_for_one_user_are_serialised(self, router, repository):
        first, second = await asyncio.gather(say(router, "/start"), say(router, "29"))

        assert first.replies[-1] == AGE_PROMPT
        assert second.replies == [WEIGHT_PROMPT]
        stored = await repository.users.get(1)
        assert stored.active_profile.age == 29


class TestCallbacks:
    @pytest.mark.asyncio
    async def test_unknown_callback_is_ignored(self, router):
        result = await router.handle_callback(InboundCallback(user_id=1, payload="nope:1"))

        assert result.replies == []

    @pytest.mark.asyncio
    async def test_callback_does_not_disturb_session(self, router):
        await say(router, "/start")

        result = await router.handle_callback(InboundCallback(user_id=1, payload="done:w1"))

        assert result.replies[0].startswith("Workout logged.")
        assert result.step == Step.ONBOARD_AGE.value
