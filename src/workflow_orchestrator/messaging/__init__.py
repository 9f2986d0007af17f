"""Transport-agnostic message delivery used by actions."""

from workflow_orchestrator.messaging.messenger import (
    Delivery,
    InMemoryMessenger,
    Message,
    MessageNotRegistered,
    Messenger,
)

__all__ = [
    "Delivery",
    "InMemoryMessenger",
    "Message",
    "MessageNotRegistered",
    "Messenger",
]
