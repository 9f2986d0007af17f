"""Unit tests for task persistence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from workflow_orchestrator.core.config import OrchestratorConfig, StateConfig
from workflow_orchestrator.core.orchestrator import create_orchestrator
from workflow_orchestrator.state.manager import TaskStore
from workflow_orchestrator.workflow.events import Event
from workflow_orchestrator.workflow.state_machine import Workflow


def test_load_without_file_starts_fresh(state_config: StateConfig) -> None:
    store = TaskStore(state_config)

    state = store.load()

    assert state.tasks == []
    assert state.history == []


def test_load_corrupt_file_starts_fresh(state_config: StateConfig) -> None:
    state_config.state_file.write_text("{not json", encoding="utf-8")
    store = TaskStore(state_config)

    assert store.load_tasks() == []


@pytest.mark.asyncio
async def test_orchestrator_writes_snapshot(
    orchestrator_config: OrchestratorConfig, rfq_workflow: Workflow
) -> None:
    orchestrator = create_orchestrator("ProcurementAI", [rfq_workflow], config=orchestrator_config)
    task = orchestrator.init_task("rfq_procurement", {"fileUrl": "https://x/rfq.pdf"})
    await orchestrator.handle_event(task.id, Event(key="rfq_uploaded_event"))

    raw = json.loads(orchestrator_config.state.state_file.read_text(encoding="utf-8"))

    assert [t["id"] for t in raw["tasks"]] == [task.id]
    assert raw["tasks"][0]["state"]["key"] == "processing"
    assert raw["tasks"][0]["state"]["data"]["fileUrl"] == "https://x/rfq.pdf"
    assert len(raw["history"]) == 1
    assert raw["history"][0]["action_log_data"]["action_key"] == "process_rfq"


@pytest.mark.asyncio
async def test_tasks_resume_after_restart(
    orchestrator_config: OrchestratorConfig,
    rfq_workflow: Workflow,
) -> None:
    first = create_orchestrator("ProcurementAI", [rfq_workflow], config=orchestrator_config)
    task = first.init_task("rfq_procurement")
    await first.handle_event(task.id, Event(key="rfq_uploaded_event"))

    second = create_orchestrator("ProcurementAI", [rfq_workflow], config=orchestrator_config)
    resumed = second.get_task(task.id)

    assert resumed is not None
    assert resumed.state.key == "processing"
    assert resumed.created_at == task.created_at

    log = await second.handle_event(task.id, Event(key="rfq_processed_event"))
    assert log.success

    raw = json.loads(orchestrator_config.state.state_file.read_text(encoding="utf-8"))
    assert [h["event"]["key"] for h in raw["history"]] == [
        "rfq_uploaded_event",
        "rfq_processed_event",
    ]


def test_persistence_disabled_writes_nothing(tmp_path: Path, rfq_workflow: Workflow) -> None:
    config = OrchestratorConfig(state=StateConfig(enabled=False, storage_path=tmp_path / "s"))

    orchestrator = create_orchestrator("ProcurementAI", [rfq_workflow], config=config)
    orchestrator.init_task("rfq_procurement")

    assert orchestrator.persistence is None
    assert not (tmp_path / "s").exists()


def test_clear_state(state_config: StateConfig) -> None:
    store = TaskStore(state_config)
    store.state.tasks.append({"id": "x"})

    store.clear_state()

    assert store.state.tasks == []
