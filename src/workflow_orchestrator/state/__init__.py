"""Optional persistence for orchestrator tasks."""
