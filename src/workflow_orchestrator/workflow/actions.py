from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from .errors import WorkflowError
from .events import EmitEvent

if TYPE_CHECKING:
    from workflow_orchestrator.messaging.messenger import Messenger

    from .state_machine import State


@dataclass(frozen=True, slots=True)
class Invocability:
    """Outcome of an action guard.

    `description` explains the gating condition and is kept for diagnostics even
    when `can` is true.
    """

    can: bool
    description: str = ""


@dataclass(frozen=True, slots=True)
class ActionResult:
    """What happened when an event was routed to an action.

    Results produced by the engine itself (no trigger matched, the action
    raised, ...) carry no `action_key` and name the failure in `error`.
    """

    success: bool
    action_key: str | None = None
    cost: float = 0.0
    new_state: State | None = None
    message: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    emit_event: EmitEvent | None = None
    error: str | None = None

    @staticmethod
    def failure(error: WorkflowError) -> ActionResult:
        return ActionResult(success=False, cost=0.0, message=str(error), error=error.code)

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "success": self.success,
            "cost": self.cost,
            "data": dict(self.data),
        }
        if self.action_key is not None:
            out["action_key"] = self.action_key
        if self.new_state is not None:
            out["new_state"] = self.new_state.to_json()
        if self.message is not None:
            out["message"] = self.message
        if self.emit_event is not None:
            out["emit_event"] = self.emit_event.key
        if self.error is not None:
            out["error"] = self.error
        return out


class Action:
    """A named, guarded unit of work.

    The body (`perform`) may be a plain function or a coroutine function; either
    way `invoke` is awaited by the workflow. Bodies must treat the incoming state
    as read-only and describe any change through `ActionResult.new_state`.
    """

    def __init__(
        self,
        key: str,
        description: str,
        guard: Callable[[State], Invocability],
        perform: Callable[[State, Messenger | None], ActionResult | Awaitable[ActionResult]],
        *,
        cost: float = 0.0,
        emit_event: EmitEvent | None = None,
    ) -> None:
        if not key or not key.strip():
            raise ValueError("Action key must be a non-empty string")
        self.key = key
        self.description = description
        self.cost = cost
        self.emit_event = emit_event
        self._guard = guard
        self._perform = perform

    def __repr__(self) -> str:
        return f"Action(key={self.key!r}, cost={self.cost!r})"

    def can_be_invoked(self, state: State) -> Invocability:
        return self._guard(state)

    async def invoke(self, state: State, messenger: Messenger | None = None) -> ActionResult:
        result = self._perform(state, messenger)
        if inspect.isawaitable(result):
            result = await result

        if not isinstance(result, ActionResult):
            raise TypeError(
                f"Action '{self.key}' returned {type(result).__name__}, expected ActionResult"
            )

        if self.emit_event is not None and result.emit_event is None:
            result = replace(result, emit_event=self.emit_event)
        return result

    def succeed(
        self,
        new_state: State,
        *,
        data: dict[str, Any] | None = None,
        message: str | None = None,
    ) -> ActionResult:
        """Build a successful result carrying this action's key and cost."""

        return ActionResult(
            success=True,
            action_key=self.key,
            cost=self.cost,
            new_state=new_state,
            message=message,
            data=dict(data or {}),
        )

    def fail(self, message: str, *, data: dict[str, Any] | None = None) -> ActionResult:
        """Build a failed result. The task state is left untouched by the engine."""

        return ActionResult(
            success=False,
            action_key=self.key,
            cost=self.cost,
            message=message,
            data=dict(data or {}),
        )
