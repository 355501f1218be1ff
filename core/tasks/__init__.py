# Path: core/tasks/__init__.py
# Purpose: Provide background task primitives shared by the store and the Qt runner.
# Layer: core/tasks.
# Details: Exposes outcomes, the runner protocol, an inline runner, and the in-flight registry.

from .base import InflightRegistry, SynchronousRunner, TaskCallback, TaskOutcome, TaskRunner, run_task

__all__ = [
    "InflightRegistry",
    "SynchronousRunner",
    "TaskCallback",
    "TaskOutcome",
    "TaskRunner",
    "run_task",
]
