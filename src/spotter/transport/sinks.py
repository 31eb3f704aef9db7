"""Outbound transport implementations.

The chat provider itself is outside this package; these sinks cover local
delivery (HTTP outbox, console) and tests.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field

from spotter.core.errors import TransportError
from spotter.core.types import UserHandle


@dataclass
class OutboundMessage:
    user_id: UserHandle
    text: str
    image: bytes | None = None


class Transport(ABC):
    """Interface for delivering messages to users (DIP)."""

    @abstractmethod
    async def send_text(self, user_id: UserHandle, text: str) -> None:
        """Send a text message to a user."""
        ...

    async def send_image(self, user_id: UserHandle, image: bytes, caption: str = "") -> None:
        """Send an image; sinks without image support fall back to the caption."""
        await self.send_text(user_id, caption)


@dataclass
class BufferedTransport(Transport):
    """Buffers messages per recipient for polling or tests.

    Recipients listed in `unreachable` fail with TransportError.
    """

    unreachable: set[UserHandle] = field(default_factory=set)
    _outbox: dict[UserHandle, list[OutboundMessage]] = field(
        default_factory=lambda: defaultdict(list), init=False, repr=False
    )

    async def send_text(self, user_id: UserHandle, text: str) -> None:
        self._deliver(OutboundMessage(user_id=user_id, text=text))

    async def send_image(self, user_id: UserHandle, image: bytes, caption: str = "") -> None:
        self._deliver(OutboundMessage(user_id=user_id, text=caption, image=image))

    def messages_for(self, user_id: UserHandle) -> list[str]:
        return [message.text for message in self._outbox.get(user_id, [])]

    def drain(self, user_id: UserHandle) -> list[OutboundMessage]:
        """Return and forget everything queued for a user."""
        return self._outbox.pop(user_id, [])

    @property
    def sent(self) -> list[OutboundMessage]:
        return [message for queue in self._outbox.values() for message in queue]

    def _deliver(self, message: OutboundMessage) -> None:
        if message.user_id in self.unreachable:
            raise TransportError("Recipient unreachable", user_id=message.user_id)
        self._outbox[message.user_id].append(message)
