"""Workflow Orchestrator.

An in-process core for running event-driven workflows:
- workflows resolve incoming events to exactly one guarded action
- an orchestrator keeps tasks, commits successful results and logs every call
- a messenger capability is threaded through to actions
"""

__version__ = "0.1.0"

from workflow_orchestrator.core import (
    InvocationLog,
    Orchestrator,
    OrchestratorConfig,
    Task,
    create_orchestrator,
)
from workflow_orchestrator.messaging import InMemoryMessenger, Message, Messenger
from workflow_orchestrator.workflow import (
    Action,
    ActionResult,
    EmitEvent,
    Event,
    Invocability,
    State,
    Workflow,
)

__all__ = [
    "__version__",
    "Action",
    "ActionResult",
    "EmitEvent",
    "Event",
    "InMemoryMessenger",
    "Invocability",
    "InvocationLog",
    "Message",
    "Messenger",
    "Orchestrator",
    "OrchestratorConfig",
    "State",
    "Task",
    "Workflow",
    "create_orchestrator",
]
