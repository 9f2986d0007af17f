"""Core package initialization."""

from workflow_orchestrator.core.config import OrchestratorConfig, StateConfig
from workflow_orchestrator.core.models import InvocationLog, Task
from workflow_orchestrator.core.orchestrator import Orchestrator, create_orchestrator

__all__ = [
    "InvocationLog",
    "Orchestrator",
    "OrchestratorConfig",
    "StateConfig",
    "Task",
    "create_orchestrator",
]
