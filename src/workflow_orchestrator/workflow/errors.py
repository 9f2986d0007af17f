"""Error taxonomy for workflow resolution and task dispatch.

Configuration errors (`ActionKeyConflict`, `TriggerConflict`,
`WorkflowKeyConflict`) are raised at setup time. The remaining errors describe
runtime outcomes and are turned into failed results by the engine instead of
escaping from `handle_event`.
"""

from __future__ import annotations


class WorkflowError(Exception):
    """Base class for all orchestration errors."""

    @property
    def code(self) -> str:
        return type(self).__name__


class WorkflowNotFound(WorkflowError):
    def __init__(self, workflow_key: str) -> None:
        super().__init__(f"Workflow '{workflow_key}' not found")
        self.workflow_key = workflow_key


class WorkflowKeyConflict(WorkflowError):
    def __init__(self, workflow_key: str) -> None:
        super().__init__(f"Workflow '{workflow_key}' is already registered")
        self.workflow_key = workflow_key


class TaskNotFound(WorkflowError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task '{task_id}' not found")
        self.task_id = task_id


class ActionKeyConflict(WorkflowError):
    def __init__(self, action_key: str, workflow_key: str) -> None:
        super().__init__(
            f"Action '{action_key}' is already registered in workflow '{workflow_key}'"
        )
        self.action_key = action_key
        self.workflow_key = workflow_key


class TriggerConflict(WorkflowError):
    def __init__(self, event_key: str, action_key: str, workflow_key: str) -> None:
        super().__init__(
            f"Trigger for action '{action_key}' already exists for event '{event_key}' "
            f"in workflow '{workflow_key}'"
        )
        self.event_key = event_key
        self.action_key = action_key
        self.workflow_key = workflow_key


class InvalidState(WorkflowError):
    def __init__(self, workflow_key: str) -> None:
        super().__init__(f"Invalid state: workflow '{workflow_key}' has no current state")
        self.workflow_key = workflow_key


class NoTriggersForEvent(WorkflowError):
    def __init__(self, event_key: str) -> None:
        super().__init__(f"No triggers registered for event '{event_key}'")
        self.event_key = event_key


class NoApplicableAction(WorkflowError):
    def __init__(self, event_key: str) -> None:
        super().__init__(f"No valid action could be executed for event '{event_key}'")
        self.event_key = event_key


class ActionInvocationFailed(WorkflowError):
    """An action body raised. The message is the original exception's message."""

    def __init__(self, action_key: str, message: str) -> None:
        super().__init__(message or "Action execution failed")
        self.action_key = action_key


class TriggerEvaluationFailed(WorkflowError):
    """A trigger condition or action guard raised while resolving an event."""

    def __init__(self, event_key: str, action_key: str, message: str) -> None:
        super().__init__(
            f"Evaluating trigger '{action_key}' for event '{event_key}' failed: {message}"
        )
        self.event_key = event_key
        self.action_key = action_key
