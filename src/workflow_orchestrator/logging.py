"""Logging setup for the orchestrator.

Modules log through `logging.getLogger(__name__)` and pass dispatch context
(`orchestrator`, `workflow`, `task_id`, `event`, `action`, `state`, `error`) via
`extra=`. The JSON formatter lifts those fields to top-level keys so one line
per event can be filtered by task or workflow directly.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, Literal

CONTEXT_FIELDS: tuple[str, ...] = (
    "orchestrator",
    "workflow",
    "task_id",
    "event",
    "action",
    "state",
    "error",
)

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Attributes every LogRecord carries; anything else on a record came from `extra=`.
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}


def record_context(record: logging.LogRecord) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split the `extra=` fields of a record into dispatch context and the rest."""

    context: dict[str, Any] = {}
    other: dict[str, Any] = {}
    for key, value in vars(record).items():
        if key in _STANDARD_ATTRS or key.startswith("_"):
            continue
        if key in CONTEXT_FIELDS:
            context[key] = value
        else:
            other[key] = value
    return context, other


class JsonFormatter(logging.Formatter):
    """One JSON object per line with dispatch context at the top level."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        context, other = record_context(record)
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            **context,
        }
        if other:
            payload["fields"] = other
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str, fmt: Literal["json", "text"] = "json") -> None:
    """Install a single stdout handler on the root logger."""

    handler = logging.StreamHandler(stream=sys.stdout)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)
