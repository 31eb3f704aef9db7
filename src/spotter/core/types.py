"""Core type definitions for the conversation state machine."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from spotter.core.constants import ProfileField

UserHandle = int


# --- Flow data variants -------------------------------------------------------
# Each step chain carries exactly one of these; the `kind` tag discriminates.


class NoData(BaseModel):
    kind: Literal["none"] = "none"


class ProfileRef(BaseModel):
    """Carried through the onboarding chain."""

    kind: Literal["profile"] = "profile"
    profile_id: str


class ProfileFieldEdit(BaseModel):
    """Carried through the field editor; `field` is set once chosen."""

    kind: Literal["profile_field"] = "profile_field"
    profile_id: str
    field: ProfileField | None = None


class ProfileChoice(BaseModel):
    """Snapshot of profile ids shown to the user, in display order."""

    kind: Literal["profile_choice"] = "profile_choice"
    profile_ids: list[str]


class ExerciseChoice(BaseModel):
    kind: Literal["exercise_choice"] = "exercise_choice"
    exercise_ids: list[str]


class ReplyTarget(BaseModel):
    """Recipient of an operator reply."""

    kind: Literal["reply_target"] = "reply_target"
    recipient_id: UserHandle


FlowData = Annotated[
    NoData | ProfileRef | ProfileFieldEdit | ProfileChoice | ExerciseChoice | ReplyTarget,
    Field(discriminator="kind"),
]


class Session(BaseModel):
    """Ephemeral record of the dialogue step a user is in."""

    owner_id: UserHandle
    step: str
    data: FlowData = Field(default_factory=NoData)
    updated_at: datetime = Field(default_factory=datetime.now)


# --- Turn outcomes ---------------------------------------------------------------


class Transition(str, Enum):
    advance = "advance"
    done = "done"


@dataclass
class FlowOutcome:
    """Result of a flow handler for one text turn.

    `advance` replaces the session with `next_step` and `data`, `done` clears
    it. A turn that should stay on its step raises InputError instead.
    """

    reply: str
    transition: Transition
    next_step: str | None = None
    data: BaseModel | None = None

    @classmethod
    def advance(cls, reply: str, step: str, data: BaseModel | None = None) -> "FlowOutcome":
        return cls(reply=reply, transition=Transition.advance, next_step=step, data=data)

    @classmethod
    def done(cls, reply: str) -> "FlowOutcome":
        return cls(reply=reply, transition=Transition.done)


@dataclass
class InboundText:
    """A text message delivered by the transport."""

    user_id: UserHandle
    text: str
    first_name: str = ""
    username: str = ""


@dataclass
class InboundCallback:
    """A button press delivered by the transport."""

    user_id: UserHandle
    payload: str


@dataclass
class TurnResult:
    """Replies produced for the sender of one inbound event."""

    replies: list[str] = field(default_factory=list)
    step: str | None = None

    @property
    def text(self) -> str:
        return "\n\n".join(self.replies)
