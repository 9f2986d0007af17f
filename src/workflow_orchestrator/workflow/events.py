from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .actions import ActionResult


@dataclass(frozen=True, slots=True)
class Event:
    """An external stimulus delivered to a task.

    Events are plain signals. They never perform work themselves; the workflow
    routes them to at most one action.
    """

    key: str
    payload: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key.strip():
            raise ValueError("Event key must be a non-empty string")

    def to_json(self) -> dict[str, object]:
        return {"key": self.key, "payload": dict(self.payload)}

    @staticmethod
    def from_json(obj: Mapping[str, object]) -> Event:
        payload = obj.get("payload")
        return Event(
            key=str(obj.get("key", "")),
            payload=dict(payload) if isinstance(payload, Mapping) else {},
        )


@dataclass(frozen=True, slots=True)
class EmitEvent:
    """Describes a follow-up event an action result may give rise to.

    The orchestrator attaches this to results but never delivers it on its own.
    Callers that want chaining call `build()` and deliver the event explicitly.
    """

    key: str
    build_payload: Callable[[ActionResult], dict[str, Any]]

    def build(self, result: ActionResult) -> Event:
        return Event(key=self.key, payload=dict(self.build_payload(result) or {}))
