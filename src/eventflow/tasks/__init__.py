"""EventFlow background tasks."""

from eventflow.tasks.sweep import start_lifecycle_sweep, stop_lifecycle_sweep

__all__ = ["start_lifecycle_sweep", "stop_lifecycle_sweep"]
