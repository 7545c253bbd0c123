"""Orchestrator module for the resolution pipeline.

This module provides the components that drive a run: bounded batch
scheduling of probes and the two-sweep resolution pipeline.
"""

from redirectfinder.orchestrator.scheduler import (
    BatchScheduler,
    TaskOutcome,
    iter_batches,
)
from redirectfinder.orchestrator.pipeline import (
    RedirectStore,
    ResolutionPipeline,
)


__all__ = [
    # Scheduler
    "BatchScheduler",
    "TaskOutcome",
    "iter_batches",
    # Pipeline
    "RedirectStore",
    "ResolutionPipeline",
]
