"""State persistence for orchestrator tasks and invocation logs.

The orchestrator keeps everything in memory. `TaskStore` is an optional
persistence hook that writes a JSON snapshot after every state-affecting call so
tasks can be inspected and restored after a restart.
"""

import json
import logging
from collections.abc import Awaitable, Sequence
from datetime import UTC, datetime
from typing import Any, Protocol

from pydantic import BaseModel, Field

from workflow_orchestrator.core.config import StateConfig
from workflow_orchestrator.core.models import InvocationLog, Task

logger = logging.getLogger(__name__)


class PersistenceHook(Protocol):
    """Called by the orchestrator after a task is created or an event is handled.

    A hook may return an awaitable to move the write off the event loop;
    `Orchestrator.handle_event` awaits it before returning its log.
    """

    def __call__(self, task: Task, logs: Sequence[InvocationLog]) -> Awaitable[None] | None: ...


class OrchestratorState(BaseModel):
    """Persisted snapshot of the orchestrator.

    Tasks are stored by id with their last committed state; `history` holds the
    invocation logs in append order.
    """

    version: str = Field(default="1.0.0", description="State schema version")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    tasks: list[dict[str, Any]] = Field(default_factory=list)
    history: list[dict[str, Any]] = Field(default_factory=list)

    metadata: dict[str, Any] = Field(default_factory=dict)


class TaskStore:
    """JSON-file backed persistence hook.

    Writes synchronously: the snapshot is small and a local file write is short
    enough to run on the event loop.
    """

    def __init__(self, config: StateConfig) -> None:
        """Initialize the store.

        Args:
            config: State configuration.
        """
        self.config = config
        self.storage_path = config.storage_path
        self.state_file = config.state_file

        self.state: OrchestratorState = OrchestratorState()
        # History restored from disk; logs of the running process are appended to it.
        self._restored_history: list[dict[str, Any]] = []

        self.storage_path.mkdir(parents=True, exist_ok=True)

        logger.info("Task store initialized", extra={"path": str(self.state_file)})

    def __call__(self, task: Task, logs: Sequence[InvocationLog]) -> None:
        self.upsert_task(task)
        self.state.history = self._restored_history + [log.to_json() for log in logs]
        self.save()

    def load(self) -> OrchestratorState:
        """Load state from persistent storage.

        Returns:
            Loaded state object. A missing or unreadable file yields fresh state.
        """
        if not self.state_file.exists():
            logger.info("No existing state found, starting fresh")
            return self.state

        try:
            with open(self.state_file, encoding="utf-8") as f:
                data = json.load(f)
            self.state = OrchestratorState.model_validate(data)
            self._restored_history = list(self.state.history)
            logger.info(
                "State loaded",
                extra={"tasks": len(self.state.tasks), "history": len(self.state.history)},
            )
        except Exception:
            logger.exception("Failed to load state, using fresh state")

        return self.state

    def save(self) -> None:
        """Save state to persistent storage."""
        self.state.updated_at = datetime.now(UTC)
        try:
            with open(self.state_file, "w", encoding="utf-8") as f:
                json.dump(
                    self.state.model_dump(mode="json"),
                    f,
                    indent=2,
                    ensure_ascii=False,
                    default=str,
                )
        except OSError:
            logger.exception("Failed to save state", extra={"path": str(self.state_file)})
            raise

        logger.debug("State saved", extra={"path": str(self.state_file)})

    def upsert_task(self, task: Task) -> None:
        record = task.to_json()
        for idx, existing in enumerate(self.state.tasks):
            if existing.get("id") == task.id:
                self.state.tasks[idx] = record
                return
        self.state.tasks.append(record)

    def load_tasks(self) -> list[Task]:
        """Tasks from the last saved snapshot, in creation order."""
        self.load()
        tasks: list[Task] = []
        for raw in self.state.tasks:
            try:
                tasks.append(Task.from_json(raw))
            except KeyError:
                logger.warning("Skipping malformed task record", extra={"record": raw})
        return tasks

    def clear_state(self) -> None:
        """Clear all state data."""
        logger.warning("Clearing all state data")
        self.state = OrchestratorState()
        self._restored_history = []
