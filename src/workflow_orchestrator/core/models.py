"""Task and invocation log records owned by the orchestrator."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import UTC, datetime

from workflow_orchestrator.workflow.actions import ActionResult
from workflow_orchestrator.workflow.events import Event
from workflow_orchestrator.workflow.state_machine import State


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _parse_dt(value: object) -> datetime:
    # Best-effort parsing; records are always written in ISO format.
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return utc_now()


@dataclass(slots=True)
class Task:
    """One independent, stateful instance of a workflow.

    `state` is always the last committed state. It is only replaced after an
    action result with `success=True`.
    """

    id: str
    workflow_key: str
    state: State
    created_at: datetime

    def copy(self) -> Task:
        return replace(self)

    def to_json(self) -> dict[str, object]:
        return {
            "id": self.id,
            "workflow_key": self.workflow_key,
            "state": self.state.to_json(),
            "created_at": self.created_at.isoformat(),
        }

    @staticmethod
    def from_json(obj: Mapping[str, object]) -> Task:
        state_raw = obj.get("state")
        return Task(
            id=str(obj["id"]),
            workflow_key=str(obj["workflow_key"]),
            state=State.from_json(state_raw) if isinstance(state_raw, Mapping) else State(key=""),
            created_at=_parse_dt(obj.get("created_at")),
        )


@dataclass(frozen=True, slots=True)
class InvocationLog:
    """Audit record of one `Orchestrator.handle_event` call.

    `success` is true when an action was selected and ran to completion, i.e.
    the result names an action key. Lookup failures carry no action result.
    """

    timestamp: datetime
    task_id: str
    event: Event
    success: bool
    message: str | None = None
    action_log_data: ActionResult | None = None

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "timestamp": self.timestamp.isoformat(),
            "task_id": self.task_id,
            "event": self.event.to_json(),
            "success": self.success,
        }
        if self.message is not None:
            out["message"] = self.message
        if self.action_log_data is not None:
            out["action_log_data"] = self.action_log_data.to_json()
        return out
