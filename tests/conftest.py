"""Test configuration and fixtures."""

from pathlib import Path

import pytest

from workflow_orchestrator.core.config import OrchestratorConfig, StateConfig
from workflow_orchestrator.messaging.messenger import InMemoryMessenger, Message
from workflow_orchestrator.workflow.actions import Action, Invocability
from workflow_orchestrator.workflow.state_machine import Workflow


@pytest.fixture
def temp_state_dir(tmp_path: Path) -> Path:
    """Provide a temporary state directory."""
    state_dir = tmp_path / ".state"
    state_dir.mkdir()
    return state_dir


@pytest.fixture
def state_config(temp_state_dir: Path) -> StateConfig:
    """Provide a test state configuration with persistence enabled."""
    return StateConfig(enabled=True, storage_path=temp_state_dir)


@pytest.fixture
def orchestrator_config(state_config: StateConfig) -> OrchestratorConfig:
    """Provide a test orchestrator configuration."""
    return OrchestratorConfig(log_level="DEBUG", debug=True, state=state_config)


@pytest.fixture
def messenger() -> InMemoryMessenger:
    """Provide a messenger with the role assignment message registered."""
    m = InMemoryMessenger(recipient_roles=["buyer"])
    m.register_message(Message("assign_roles", "Please assign roles"))
    return m


def _build_rfq_workflow() -> Workflow:
    def process(state, _messenger):
        return process_rfq.succeed(
            state.evolve("processing", {"rfq_id": "12345", "rfq_requirements": ["1", "2"]}),
            data={"rfq_id": "12345"},
        )

    async def notify(state, messenger):
        if messenger is not None:
            await messenger.send("assign_roles", ["buyer"])
        return notify_role_selection.succeed(
            state.evolve("awaiting_role_assignment"),
            data={"notification_channel": "role_assignment_channel"},
        )

    process_rfq = Action(
        "process_rfq",
        "Process the RFQ file",
        lambda state: Invocability(state.key == "rfq_uploaded", "RFQ must be uploaded first"),
        process,
        cost=10,
    )
    notify_role_selection = Action(
        "notify_role_selection",
        "Notify human for role selection",
        lambda state: Invocability(state.key == "processing", "File must be in processing state"),
        notify,
        cost=2,
    )

    workflow = Workflow("rfq_procurement", "rfq_uploaded")
    workflow.add_trigger(
        "rfq_uploaded_event", process_rfq, lambda state, _event: state.key == "rfq_uploaded"
    )
    workflow.add_trigger(
        "rfq_processed_event",
        notify_role_selection,
        lambda state, _event: state.key == "processing",
    )
    return workflow


@pytest.fixture
def rfq_workflow() -> Workflow:
    """Provide the RFQ procurement workflow used across orchestrator tests."""
    return _build_rfq_workflow()
