"""Messenger capability.

The orchestrator never interprets messages. It only threads a messenger through
to action bodies, which may use it to notify recipient roles (e.g. "buyer",
"approver"). Concrete transports implement the `Messenger` protocol.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Message:
    """A message template registered under a unique key."""

    key: str
    message: Any

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key.strip():
            raise TypeError("Message key must be a non-empty string")

    def to_json(self) -> dict[str, object]:
        return {"key": self.key, "message": self.message}


class MessageNotRegistered(KeyError):
    def __init__(self, message_key: str) -> None:
        super().__init__(message_key)
        self.message_key = message_key

    def __str__(self) -> str:
        return f"Message '{self.message_key}' is not registered"


@runtime_checkable
class Messenger(Protocol):
    """Deliver registered messages to recipient roles."""

    def register_message(self, message: Message) -> None: ...

    async def send(self, message_key: str, recipient_roles: Sequence[str]) -> None: ...


@dataclass(frozen=True, slots=True)
class Delivery:
    message_key: str
    message: Any
    recipient_roles: tuple[str, ...]
    sent_at: datetime


class InMemoryMessenger:
    """Messenger that records deliveries instead of sending them anywhere.

    Useful for tests and local runs. Every delivery is logged and kept in
    `outbox` in send order.
    """

    def __init__(self, recipient_roles: Iterable[str] = ()) -> None:
        self.recipient_roles: tuple[str, ...] = tuple(recipient_roles)
        self._messages: dict[str, Message] = {}
        self.outbox: list[Delivery] = []

    def register_message(self, message: Message) -> None:
        self._messages[message.key] = message

    def get_message(self, key: str) -> Message | None:
        return self._messages.get(key)

    async def send(self, message_key: str, recipient_roles: Sequence[str] = ()) -> None:
        message = self._messages.get(message_key)
        if message is None:
            raise MessageNotRegistered(message_key)

        roles = tuple(recipient_roles) or self.recipient_roles
        delivery = Delivery(
            message_key=message_key,
            message=message.message,
            recipient_roles=roles,
            sent_at=datetime.now(tz=UTC),
        )
        self.outbox.append(delivery)
        logger.info(
            "Message delivered",
            extra={"message_key": message_key, "recipient_roles": list(roles)},
        )
