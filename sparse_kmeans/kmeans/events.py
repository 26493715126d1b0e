"""
Progress events emitted while clustering, and the observers that receive them.

The engine never prints. It hands a PassCompleted event to its observer after
every reassignment pass and a RunCompleted event at the end of the run.
Observers must not raise; their return values are ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple


logger = logging.getLogger('sparse_kmeans.kmeans')


@dataclass(frozen=True)
class PassCompleted:
    """Outcome of one reassignment pass."""

    iteration: int                   # 1-based pass number
    reassigned: int                  # Points that moved to another cluster
    quality_delta: float             # Current quality minus candidate quality
    quality: float                   # Aggregate quality of the candidate
    promoted: bool                   # Whether the candidate became current
    cluster_sizes: Tuple[int, ...] = ()


@dataclass(frozen=True)
class RunCompleted:
    """Outcome of a full clustering run."""

    iterations: int
    quality: float
    converged: bool


class ClusterObserver(Protocol):
    def on_pass_completed(self, event: PassCompleted) -> None: ...

    def on_run_completed(self, event: RunCompleted) -> None: ...


class LoggingObserver:
    """Default observer: reports progress through the logging module."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def on_pass_completed(self, event: PassCompleted) -> None:
        self.log.info(
            "Pass %d: %d points moved, quality delta %.6g, candidate quality %.6g%s",
            event.iteration,
            event.reassigned,
            event.quality_delta,
            event.quality,
            "" if event.promoted else " (not applied)",
        )
        self.log.debug("Pass %d cluster sizes: %s", event.iteration, list(event.cluster_sizes))

    def on_run_completed(self, event: RunCompleted) -> None:
        if event.converged:
            self.log.info(
                "Batch k-means converged after %d passes, quality %.6g",
                event.iterations,
                event.quality,
            )
        else:
            self.log.warning(
                "Batch k-means stopped after %d passes without converging, quality %.6g",
                event.iterations,
                event.quality,
            )


@dataclass
class RecordingObserver:
    """Keeps every event, in order."""

    passes: List[PassCompleted] = field(default_factory=list)
    runs: List[RunCompleted] = field(default_factory=list)

    def on_pass_completed(self, event: PassCompleted) -> None:
        self.passes.append(event)

    def on_run_completed(self, event: RunCompleted) -> None:
        self.runs.append(event)
