"""Task registry and event dispatch."""

import asyncio
import inspect
import logging
import uuid
from collections.abc import Awaitable, Iterable, Mapping
from typing import Any

from workflow_orchestrator.core.config import OrchestratorConfig
from workflow_orchestrator.core.models import InvocationLog, Task, utc_now
from workflow_orchestrator.messaging.messenger import Messenger
from workflow_orchestrator.state.manager import PersistenceHook, TaskStore
from workflow_orchestrator.workflow.errors import (
    TaskNotFound,
    WorkflowKeyConflict,
    WorkflowNotFound,
)
from workflow_orchestrator.workflow.events import Event
from workflow_orchestrator.workflow.state_machine import Workflow

logger = logging.getLogger(__name__)


class Orchestrator:
    """Registry of workflow definitions and live tasks.

    `handle_event` is the only entry point for event delivery. It never raises:
    unknown tasks, unknown workflows and every dispatch failure are reported as
    failed `InvocationLog` entries, and a task's committed state only changes when
    the invoked action reports success.

    Events for different tasks may be handled concurrently, including tasks that
    share a workflow. Calls for the same task must be serialized by the caller.
    """

    def __init__(
        self,
        key: str,
        workflows: Iterable[Workflow] = (),
        messenger: Messenger | None = None,
        persistence: PersistenceHook | None = None,
        tasks: Iterable[Task] = (),
    ) -> None:
        """Initialize the orchestrator.

        Args:
            key: Name of this orchestrator, used in logs.
            workflows: Workflow definitions to register.
            messenger: Messenger passed to every action invocation.
            persistence: Optional hook called after state-affecting operations. It may
                return an awaitable; `handle_event` awaits it before returning.
            tasks: Previously persisted tasks to resume.
        """
        self.key = key
        self.messenger = messenger
        self.persistence = persistence

        self._workflows: list[Workflow] = []
        self._tasks: dict[str, Task] = {}
        self._logs: list[InvocationLog] = []
        self._pending_writes: set[asyncio.Task[None]] = set()

        for workflow in workflows:
            self.register_workflow(workflow)
        for task in tasks:
            self._tasks[task.id] = task.copy()

    # Workflows

    def register_workflow(self, workflow: Workflow) -> None:
        if self.get_workflow(workflow.key) is not None:
            raise WorkflowKeyConflict(workflow.key)
        self._workflows.append(workflow)
        logger.debug(
            "Workflow registered", extra={"orchestrator": self.key, "workflow": workflow.key}
        )

    def get_workflows(self) -> list[Workflow]:
        return list(self._workflows)

    def get_workflow(self, workflow_key: str) -> Workflow | None:
        for workflow in self._workflows:
            if workflow.key == workflow_key:
                return workflow
        return None

    # Tasks

    def init_task(self, workflow_key: str, initial_data: Mapping[str, Any] | None = None) -> Task:
        """Create a task in the workflow's initial state.

        Raises:
            WorkflowNotFound: the workflow key is not registered.
        """
        workflow = self.get_workflow(workflow_key)
        if workflow is None:
            raise WorkflowNotFound(workflow_key)

        task = Task(
            id=str(uuid.uuid4()),
            workflow_key=workflow.key,
            state=workflow.initial_state(initial_data or {}),
            created_at=utc_now(),
        )
        self._tasks[task.id] = task

        logger.info(
            "Task created",
            extra={
                "orchestrator": self.key,
                "task_id": task.id,
                "workflow": workflow.key,
                "state": task.state.key,
            },
        )
        self._persist_nowait(task)
        return task.copy()

    def get_tasks(self) -> list[Task]:
        return [task.copy() for task in self._tasks.values()]

    def get_task(self, task_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        return task.copy() if task is not None else None

    # Logs

    @property
    def logs(self) -> list[InvocationLog]:
        return list(self._logs)

    def get_logs(self, task_id: str | None = None) -> list[InvocationLog]:
        if task_id is None:
            return self.logs
        return [log for log in self._logs if log.task_id == task_id]

    # Events

    async def handle_event(self, task_id: str, event: Event) -> InvocationLog:
        """Deliver `event` to a task and record the outcome."""

        task = self._tasks.get(task_id)
        if task is None:
            return self._reject(task_id, event, TaskNotFound(task_id))

        workflow = self.get_workflow(task.workflow_key)
        if workflow is None:
            return self._reject(task.id, event, WorkflowNotFound(task.workflow_key))

        run = workflow.run(task.state)
        result = await run.handle_event(event, self.messenger)

        if result.success:
            task.state = run.state if run.state is not None else task.state
            logger.info(
                "Task state committed",
                extra={
                    "orchestrator": self.key,
                    "task_id": task.id,
                    "event": event.key,
                    "action": result.action_key,
                    "state": task.state.key,
                },
            )

        log = InvocationLog(
            timestamp=utc_now(),
            task_id=task.id,
            event=event,
            success=bool(result.action_key),
            message=result.message,
            action_log_data=result,
        )
        self._logs.append(log)
        await self._persist(task)
        return log

    def _reject(self, task_id: str, event: Event, error: Exception) -> InvocationLog:
        logger.warning(
            str(error),
            extra={"orchestrator": self.key, "task_id": task_id, "event": event.key},
        )
        log = InvocationLog(
            timestamp=utc_now(),
            task_id=task_id,
            event=event,
            success=False,
            message=str(error),
        )
        self._logs.append(log)
        return log

    # Persistence

    async def wait_persisted(self) -> None:
        """Wait for hook writes scheduled by `init_task` inside a running loop."""
        if self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    async def _persist(self, task: Task) -> None:
        pending = self._call_hook(task)
        if pending is not None:
            await self._settle(pending, task.id)

    def _persist_nowait(self, task: Task) -> None:
        pending = self._call_hook(task)
        if pending is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._settle(pending, task.id))
            return
        write = loop.create_task(self._settle(pending, task.id))
        self._pending_writes.add(write)
        write.add_done_callback(self._pending_writes.discard)

    def _call_hook(self, task: Task) -> Awaitable[None] | None:
        if self.persistence is None:
            return None
        try:
            result = self.persistence(task.copy(), self.logs)
        except Exception:
            # Persistence is best-effort; in-memory state stays authoritative.
            logger.exception(
                "Persistence hook failed", extra={"orchestrator": self.key, "task_id": task.id}
            )
            return None
        return result if inspect.isawaitable(result) else None

    async def _settle(self, pending: Awaitable[None], task_id: str) -> None:
        try:
            await pending
        except Exception:
            logger.exception(
                "Persistence hook failed", extra={"orchestrator": self.key, "task_id": task_id}
            )


def create_orchestrator(
    key: str,
    workflows: Iterable[Workflow] = (),
    messenger: Messenger | None = None,
    config: OrchestratorConfig | None = None,
) -> Orchestrator:
    """Create an orchestrator wired according to configuration.

    When state persistence is enabled, tasks from the last snapshot are resumed
    and every change is written back through a `TaskStore`.
    """
    config = config or OrchestratorConfig()

    if not config.state.enabled:
        return Orchestrator(key=key, workflows=workflows, messenger=messenger)

    store = TaskStore(config.state)
    return Orchestrator(
        key=key,
        workflows=workflows,
        messenger=messenger,
        persistence=store,
        tasks=store.load_tasks(),
    )
