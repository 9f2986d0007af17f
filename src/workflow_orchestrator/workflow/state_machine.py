from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .actions import Action, ActionResult
from .errors import (
    ActionInvocationFailed,
    ActionKeyConflict,
    InvalidState,
    NoApplicableAction,
    NoTriggersForEvent,
    TriggerConflict,
    TriggerEvaluationFailed,
    WorkflowError,
)
from .events import Event

if TYPE_CHECKING:
    from workflow_orchestrator.messaging.messenger import Messenger

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class State:
    """Where a task currently is.

    States are replaced wholesale, never mutated. `data` is a read-only view over
    a private copy of what was passed in; use `evolve` to derive the next state.
    """

    key: str
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    def evolve(self, key: str | None = None, data: Mapping[str, Any] | None = None) -> State:
        merged = dict(self.data)
        if data:
            merged.update(data)
        return State(key=self.key if key is None else key, data=merged)

    def to_json(self) -> dict[str, object]:
        return {"key": self.key, "data": dict(self.data)}

    @staticmethod
    def from_json(obj: Mapping[str, object]) -> State:
        data = obj.get("data")
        return State(
            key=str(obj.get("key", "")),
            data=dict(data) if isinstance(data, Mapping) else {},
        )


Condition = Callable[[State, Event], bool]


@dataclass(frozen=True, slots=True)
class Trigger:
    event_key: str
    action: Action
    condition: Condition


class Workflow:
    """Named definition of actions and triggers with a fixed initial state key.

    Registries preserve insertion order: for a given event, triggers are tried in
    the order they were added, and the first one whose condition and action guard
    both pass is invoked.
    """

    def __init__(
        self, key: str, initial_state_key: str, actions: Iterable[Action] = ()
    ) -> None:
        self.key = key
        self.initial_state_key = initial_state_key

        self._state: State | None = None
        self._initial_state_data: dict[str, Any] = {}

        self._actions: dict[str, Action] = {}
        # event key -> action key -> trigger
        self._triggers: dict[str, dict[str, Trigger]] = {}

        for action in actions:
            self.register_action(action)

    def __repr__(self) -> str:
        return f"Workflow(key={self.key!r}, initial_state_key={self.initial_state_key!r})"

    # State

    def set_initial_state_data(self, data: Mapping[str, Any]) -> None:
        self._initial_state_data = dict(data)

    def initial_state(self, data: Mapping[str, Any] | None = None) -> State:
        """Build a fresh initial state without touching the working slot."""

        source = self._initial_state_data if data is None else data
        return State(key=self.initial_state_key, data=dict(source))

    def init_state(self) -> None:
        self._state = self.initial_state()

    def get_state(self) -> State | None:
        return self._state

    def set_state(self, state: State | None) -> None:
        self._state = state

    # Registries

    def register_action(self, action: Action) -> None:
        if action.key in self._actions:
            raise ActionKeyConflict(action.key, self.key)
        self._actions[action.key] = action

    def add_trigger(self, event_key: str, action: Action, condition: Condition) -> None:
        registered = self._actions.get(action.key)
        if registered is None:
            self.register_action(action)
        elif registered is not action:
            raise ActionKeyConflict(action.key, self.key)

        event_triggers = self._triggers.setdefault(event_key, {})
        if action.key in event_triggers:
            raise TriggerConflict(event_key, action.key, self.key)
        event_triggers[action.key] = Trigger(
            event_key=event_key, action=action, condition=condition
        )

    def get_actions(self) -> list[Action]:
        return list(self._actions.values())

    def get_action(self, action_key: str) -> Action | None:
        return self._actions.get(action_key)

    def get_triggers(self, event_key: str) -> list[Trigger]:
        return list(self._triggers.get(event_key, {}).values())

    def event_keys(self) -> list[str]:
        return list(self._triggers)

    # Resolution

    def resolve(self, state: State | None, event: Event) -> Trigger:
        """Pick the trigger that handles `event` in `state`.

        Pure with respect to the workflow: evaluates conditions and guards only.

        Raises:
            InvalidState: no state to resolve against.
            NoTriggersForEvent: nothing is registered for the event key.
            NoApplicableAction: every condition or guard rejected the event.
            TriggerEvaluationFailed: a condition or guard raised.
        """

        if state is None:
            raise InvalidState(self.key)

        triggers = self._triggers.get(event.key)
        if not triggers:
            raise NoTriggersForEvent(event.key)

        for trigger in triggers.values():
            try:
                if not trigger.condition(state, event):
                    continue
                invocability = trigger.action.can_be_invoked(state)
            except Exception as e:
                raise TriggerEvaluationFailed(event.key, trigger.action.key, str(e)) from e

            if not invocability.can:
                logger.debug(
                    "Action guard rejected event",
                    extra={
                        "workflow": self.key,
                        "event": event.key,
                        "action": trigger.action.key,
                        "reason": invocability.description,
                    },
                )
                continue
            return trigger

        raise NoApplicableAction(event.key)

    def run(self, state: State | None) -> WorkflowRun:
        """Create a resolution context that owns its own working state."""

        return WorkflowRun(workflow=self, state=state)

    async def handle_event(
        self, event: Event, messenger: Messenger | None = None
    ) -> ActionResult:
        run = self.run(self._state)
        result = await run.handle_event(event, messenger)
        self._state = run.state
        return result


class WorkflowRun:
    """One event being handled against one task's state.

    Borrows the workflow's registries read-only, so several runs for different
    tasks can share a single `Workflow` without seeing each other's state.
    """

    def __init__(self, workflow: Workflow, state: State | None) -> None:
        self.workflow = workflow
        self.state = state

    async def handle_event(
        self, event: Event, messenger: Messenger | None = None
    ) -> ActionResult:
        try:
            trigger = self.workflow.resolve(self.state, event)
        except WorkflowError as e:
            logger.info(
                "Event not dispatched",
                extra={"workflow": self.workflow.key, "event": event.key, "error": e.code},
            )
            return ActionResult.failure(e)

        # resolve() guarantees a state here
        assert self.state is not None
        action = trigger.action
        logger.debug(
            "Trigger selected",
            extra={"workflow": self.workflow.key, "event": event.key, "action": action.key},
        )

        try:
            result = await action.invoke(self.state, messenger)
        except Exception as e:
            logger.warning(
                "Action invocation failed",
                exc_info=True,
                extra={"workflow": self.workflow.key, "event": event.key, "action": action.key},
            )
            return ActionResult.failure(ActionInvocationFailed(action.key, str(e)))

        if result.success and result.new_state is not None:
            self.state = result.new_state
        return result
