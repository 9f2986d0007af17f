"""Configuration for the workflow orchestrator.

Configuration is loaded from environment variables and a local `.env` file
(if present). Nested sections use their own prefixes so they can also be
constructed on their own, e.g. in tests.
"""

import logging
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from workflow_orchestrator.logging import configure_logging


class StateConfig(BaseSettings):
    """Configuration for task state persistence."""

    enabled: bool = Field(
        default=False,
        description="Persist tasks and invocation logs after every state-affecting call",
    )
    storage_path: Path = Field(
        default=Path(".state"),
        description="Directory where the orchestrator snapshot is stored",
    )
    file_name: str = Field(
        default="orchestrator_state.json",
        min_length=1,
        description="Snapshot file name inside storage_path",
    )

    model_config = SettingsConfigDict(
        env_prefix="WORKFLOW_ORCHESTRATOR_STATE_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def state_file(self) -> Path:
        return self.storage_path / self.file_name


class OrchestratorConfig(BaseSettings):
    """Main configuration for the orchestrator."""

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Structured JSON lines or human-readable text",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug logging for the orchestrator packages",
    )

    state: StateConfig = Field(
        default_factory=StateConfig,
        description="State persistence configuration",
    )

    model_config = SettingsConfigDict(
        env_prefix="WORKFLOW_ORCHESTRATOR_",
        env_file=".env",
        extra="ignore",
    )

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        configure_logging(self.log_level, fmt=self.log_format)

        if self.debug:
            logging.getLogger("workflow_orchestrator").setLevel(logging.DEBUG)
