"""Admin login, broadcast, reply and management conversations."""

import asyncio

import pytest

from spotter.core.constants import Role, Step
from spotter.core.types import InboundText
from spotter.flow.context import ADMIN_ONLY
from spotter.flows.admin import parse_exercise, password_matches

ADMIN = 1


async def login(assistant, user_id: int = ADMIN, password: str | None = None):
    await assistant.process_text(user_id, "/admin")
    return await assistant.process_text(user_id, password or assistant.services.admin_password)


class TestPasswordGate:
    @pytest.mark.asyncio
    async def test_correct_password_grants_elevation(self, assistant):
        prompt = await assistant.process_text(ADMIN, "/admin")
        result = await assistant.process_text(ADMIN, assistant.services.admin_password)

        assert prompt.step == Step.AWAIT_ADMIN_PASS.value
        assert result.replies == ["Admin access granted"]
        assert result.step is None
        assert assistant.services.elevation.is_elevated(ADMIN)

    @pytest.mark.asyncio
    async def test_wrong_password_is_denied(self, assistant):
        result = await login(assistant, password="guess")

        assert result.replies == ["Wrong password"]
        assert result.step is None
        assert not assistant.services.elevation.is_elevated(ADMIN)

    @pytest.mark.asyncio
    async def test_elevation_persists_until_logout(self, assistant):
        """Unrelated turns do not drop elevation; logout does."""
        await login(assistant)
        await assistant.process_text(ADMIN, "/start")
        await assistant.process_text(ADMIN, "/cancel")
        await assistant.process_text(ADMIN, "Today")

        still_admin = await assistant.process_text(ADMIN, "View Content")
        logout = await assistant.process_text(ADMIN, "Logout Admin")
        after = await assistant.process_text(ADMIN, "View Content")

        assert still_admin.text.startswith("Content counts:")
        assert logout.replies[0].startswith("Logged out of admin.")
        assert after.replies == [ADMIN_ONLY]

    @pytest.mark.asyncio
    async def test_no_password_configured(self, services, router):
        services.admin_password = None

        result = await router.handle_text(InboundText(user_id=1, text="/admin"))

        assert result.replies == ["No admin password set on server."]
        assert result.step is None

    def test_password_matches(self):
        assert password_matches("abc", "abc")
        assert not password_matches("abd", "abc")
        assert not password_matches("", None)


class TestBroadcast:
    @pytest.mark.asyncio
    async def test_broadcast_counts_failures(self, assistant, transport):
        # Arrange
        for user_id in (10, 11, 12):
            await assistant.process_text(user_id, "/start")
        await login(assistant)
        transport.unreachable.add(11)

        # Act
        await assistant.process_text(ADMIN, "Broadcast")
        result = await assistant.process_text(ADMIN, "Gym closed on Monday")

        # Assert
        assert result.replies == ["Broadcast sent to 2 users, failed 1."]
        assert result.step is None
        assert transport.messages_for(10) == ["Admin Broadcast:\n\nGym closed on Monday"]
        assert transport.messages_for(11) == []

    @pytest.mark.asyncio
    async def test_broadcast_rechecks_elevation_each_turn(self, assistant, transport):
        """Logging out between turns blocks the pending broadcast."""
        await assistant.process_text(10, "/start")
        await login(assistant)
        await assistant.process_text(ADMIN, "Broadcast")
        assistant.services.elevation.revoke(ADMIN)

        result = await assistant.process_text(ADMIN, "hello all")

        assert result.replies == [ADMIN_ONLY]
        assert result.step == Step.ADMIN_BROADCAST.value
        assert transport.messages_for(10) == []

    @pytest.mark.asyncio
    async def test_slow_recipient_times_out(self, assistant, transport, monkeypatch):
        await assistant.process_text(10, "/start")
        await assistant.process_text(11, "/start")
        await login(assistant)
        assistant.services.send_timeout = 0.05
        deliver = transport.send_text

        async def slow_send(user_id, text):
            if user_id == 11:
                await asyncio.sleep(1)
            await deliver(user_id, text)

        monkeypatch.setattr(transport, "send_text", slow_send)
        await assistant.process_text(ADMIN, "Broadcast")

        result = await assistant.process_text(ADMIN, "hi")

        assert result.replies == ["Broadcast sent to 1 users, failed 1."]


class TestReplyFlow:
    @pytest.mark.asyncio
    async def test_replyto_callback_requires_elevation(self, assistant):
        result = await assistant.process_callback(ADMIN, "replyto:10")

        assert result.replies == [ADMIN_ONLY]
        assert result.step is None

    @pytest.mark.asyncio
    async def test_reply_is_forwarded(self, assistant, transport):
        await login(assistant)

        started = await assistant.process_callback(ADMIN, "replyto:10")
        result = await assistant.process_text(ADMIN, "Keep going!")

        assert started.step == Step.ADMIN_REPLY.value
        assert result.replies == ["Reply forwarded."]
        assert transport.messages_for(10) == ["Trainer reply:\n\nKeep going!"]

    @pytest.mark.asyncio
    async def test_failed_forward_is_reported(self, assistant, transport):
        await login(assistant)
        transport.unreachable.add(10)
        await assistant.process_callback(ADMIN, "replyto:10")

        result = await assistant.process_text(ADMIN, "hello")

        assert result.replies[0].startswith("Failed to forward:")
        assert result.step is None

    @pytest.mark.asyncio
    async def test_replyto_with_bad_id(self, assistant):
        await login(assistant)

        result = await assistant.process_callback(ADMIN, "replyto:abc")

        assert result.replies == ["Send a numeric user id."]
        assert result.step is None


class TestUserManagement:
    @pytest.mark.asyncio
    async def test_promote_and_demote(self, assistant, repository):
        await assistant.process_text(10, "/start")
        await login(assistant)

        await assistant.process_text(ADMIN, "Promote User")
        promoted = await assistant.process_text(ADMIN, "10")
        role_after_promote = (await repository.users.get(10)).role
        await assistant.process_text(ADMIN, "Demote User")
        await assistant.process_text(ADMIN, "10")

        assert promoted.replies == ["Promoted 10 to admin."]
        assert role_after_promote is Role.admin
        assert (await repository.users.get(10)).role is Role.user

    @pytest.mark.asyncio
    async def test_promote_unknown_user_ends_flow(self, assistant):
        await login(assistant)
        await assistant.process_text(ADMIN, "Promote User")

        result = await assistant.process_text(ADMIN, "999")

        assert result.replies == ["User not found"]
        assert result.step is None

    @pytest.mark.asyncio
    async def test_promote_requires_numeric_id(self, assistant):
        await login(assistant)
        await assistant.process_text(ADMIN, "Promote User")

        result = await assistant.process_text(ADMIN, "bob")

        assert result.replies == ["Send a numeric user id."]
        assert result.step == Step.PROMOTE_USER.value

    @pytest.mark.asyncio
    async def test_role_does_not_grant_elevation(self, assistant):
        """A persisted admin role only changes menu visibility."""
        await assistant.process_text(10, "/start")
        await assistant.process_text(10, "/cancel")
        await login(assistant)
        await assistant.process_text(ADMIN, "Promote User")
        await assistant.process_text(ADMIN, "10")

        help_text = await assistant.process_text(10, "/help")
        denied = await assistant.process_text(10, "Analytics")

        assert "Admin menu" in help_text.text
        assert denied.replies == [ADMIN_ONLY]

    @pytest.mark.asyncio
    async def test_remove_user_clears_their_session(self, assistant, repository):
        await assistant.process_text(10, "/start")
        await login(assistant)
        await assistant.process_text(ADMIN, "Remove User")

        result = await assistant.process_text(ADMIN, "10")

        assert result.replies == ["Removed user 10."]
        assert await repository.users.get(10) is None
        assert assistant.get_session(10) is None


class TestContent:
    @pytest.mark.asyncio
    async def test_create_exercise_from_pipe_format(self, assistant, repository):
        await login(assistant)
        await assistant.process_text(ADMIN, "Create Exercise")

        result = await assistant.process_text(
            ADMIN, "Lunge | strength | beginner | legs, glutes | none | Upright torso | Step forward"
        )

        assert result.replies == ["Exercise created: Lunge."]
        lunge = (await repository.exercises.find(lambda e: e.name == "Lunge"))[0]
        assert lunge.muscle_groups == ["legs", "glutes"]
        assert lunge.description == "Step forward"

    @pytest.mark.asyncio
    async def test_create_workout_from_camel_case_json(self, assistant, repository):
        await login(assistant)
        await assistant.process_text(ADMIN, "Create Workout")

        result = await assistant.process_text(
            ADMIN,
            '{"name": "Core Blast", "durationMins": 20, "difficulty": "intermediate", '
            '"exercises": [{"name": "Plank", "sets": 3, "reps": "45s"}]}',
        )

        assert result.replies == ["Workout created: Core Blast."]
        workout = (await repository.workouts.find(lambda w: w.name == "Core Blast"))[0]
        assert workout.duration_mins == 20
        assert workout.author == str(ADMIN)

    @pytest.mark.asyncio
    async def test_invalid_workout_json_reprompts(self, assistant):
        await login(assistant)
        await assistant.process_text(ADMIN, "Create Workout")

        result = await assistant.process_text(ADMIN, "not json")

        assert result.replies == ["Send valid JSON for workout"]
        assert result.step == Step.CREATE_WORKOUT.value

    @pytest.mark.asyncio
    async def test_create_challenge_and_list_it(self, assistant, clock):
        await login(assistant)
        await assistant.process_text(ADMIN, "Create Challenge")

        created = await assistant.process_text(
            ADMIN, '{"name": "March Steps", "startDate": "2024-03-01", "endDate": "2024-03-31"}'
        )
        listing = await assistant.process_text(ADMIN, "Challenges")

        assert created.replies == ["Challenge created: March Steps."]
        assert "March Steps" in listing.text

    @pytest.mark.asyncio
    async def test_challenge_end_before_start_is_rejected(self, assistant):
        await login(assistant)
        await assistant.process_text(ADMIN, "Create Challenge")

        result = await assistant.process_text(
            ADMIN, '{"name": "Backwards", "startDate": "2024-03-31", "endDate": "2024-03-01"}'
        )

        assert result.step == Step.CREATE_CHALLENGE.value


def test_parse_exercise_json():
    exercise = parse_exercise('{"name": "Dip", "muscleGroups": ["triceps"]}')

    assert exercise.name == "Dip"
    assert exercise.muscle_groups == ["triceps"]


class TestInsights:
    @pytest.mark.asyncio
    async def test_analytics_and_feedback_inbox(self, assistant):
        await assistant.process_text(10, "/start")
        await assistant.process_text(10, "/cancel")
        await assistant.process_text(10, "/report")
        await assistant.process_text(10, "Button is broken")
        await login(assistant)

        analytics = await assistant.process_text(ADMIN, "Analytics")
        inbox = await assistant.process_text(ADMIN, "Feedback")

        assert "Total users: 1" in analytics.text
        assert "Feedback items: 1" in analytics.text
        assert len(inbox.replies) == 1
        assert "Button is broken" in inbox.replies[0]
        assert "markread:" in inbox.replies[0]

    @pytest.mark.asyncio
    async def test_user_list(self, assistant):
        await assistant.process_text(10, "/start", first_name="Ana")
        await login(assistant)

        result = await assistant.process_text(ADMIN, "User Mgmt")

        assert "Users (1):" in result.text
        assert "10" in result.text
