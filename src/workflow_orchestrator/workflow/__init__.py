"""Workflow domain concepts.

This package provides first-class types for:
- Events (signals delivered to a task)
- Guarded actions (units of work producing a result and an optional next state)
- Triggers binding events to actions under a condition
- The workflow resolution engine

Resolution is deterministic: for a given state, event and trigger registration
order the same action is always chosen.
"""

from .actions import Action, ActionResult, Invocability
from .errors import (
    ActionInvocationFailed,
    ActionKeyConflict,
    InvalidState,
    NoApplicableAction,
    NoTriggersForEvent,
    TaskNotFound,
    TriggerConflict,
    TriggerEvaluationFailed,
    WorkflowError,
    WorkflowKeyConflict,
    WorkflowNotFound,
)
from .events import EmitEvent, Event
from .state_machine import State, Trigger, Workflow, WorkflowRun

__all__ = [
    "Action",
    "ActionInvocationFailed",
    "ActionKeyConflict",
    "ActionResult",
    "EmitEvent",
    "Event",
    "InvalidState",
    "Invocability",
    "NoApplicableAction",
    "NoTriggersForEvent",
    "State",
    "TaskNotFound",
    "Trigger",
    "TriggerConflict",
    "TriggerEvaluationFailed",
    "Workflow",
    "WorkflowError",
    "WorkflowKeyConflict",
    "WorkflowNotFound",
    "WorkflowRun",
]
