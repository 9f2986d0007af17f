#!/usr/bin/env python3
"""RFQ procurement demo.

This demonstrates using the orchestrator components directly:

* define two guarded actions and bind them to events with triggers
* create a task from the workflow
* deliver events and print the invocation logs

The second action notifies the buyer role through the messenger.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Sequence

from workflow_orchestrator import (
    Action,
    Event,
    InMemoryMessenger,
    Invocability,
    Message,
    Messenger,
    OrchestratorConfig,
    State,
    Workflow,
    create_orchestrator,
)


def _process_rfq(state: State, _messenger: Messenger | None):
    return process_rfq.succeed(
        state.evolve("processing", {"rfq_id": "12345", "rfq_requirements": ["1", "2"]}),
        data={"rfq_id": "12345", "rfq_requirements": ["1", "2"]},
    )


async def _notify_role_selection(state: State, messenger: Messenger | None):
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
    _process_rfq,
    cost=10,
)

notify_role_selection = Action(
    "notify_role_selection",
    "Notify a human to assign roles",
    lambda state: Invocability(state.key == "processing", "File must be in processing state"),
    _notify_role_selection,
    cost=2,
)


def build_workflow() -> Workflow:
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


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the RFQ procurement workflow demo.")
    parser.add_argument(
        "--file-url", default="https://example.com/rfq.pdf", help="RFQ document location"
    )
    return parser.parse_args(argv)


async def run(file_url: str) -> int:
    config = OrchestratorConfig()
    config.setup_logging()

    messenger = InMemoryMessenger(recipient_roles=["buyer"])
    messenger.register_message(Message("assign_roles", "Please assign roles for the new RFQ."))

    orchestrator = create_orchestrator(
        "ProcurementAI", workflows=[build_workflow()], messenger=messenger, config=config
    )
    task = orchestrator.init_task("rfq_procurement", {"fileUrl": file_url})

    for key in ("rfq_uploaded_event", "rfq_processed_event"):
        log = await orchestrator.handle_event(task.id, Event(key=key))
        print(json.dumps(log.to_json(), indent=2))

    final = orchestrator.get_task(task.id)
    return 0 if final is not None and final.state.key == "awaiting_role_assignment" else 1


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    return asyncio.run(run(args.file_url))


if __name__ == "__main__":
    raise SystemExit(main())
