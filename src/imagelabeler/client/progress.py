"""Progress reporting for one analysis cycle.

Progress is driven by lifecycle events, not timers:

    start 5 -> image prepared 10 -> request dispatched 20
        -> bytes sent (20..80) -> upload complete 85
        -> response received 90 -> labels normalized 95 -> done 100
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Phase(StrEnum):
    IDLE = "idle"
    PREPARING_IMAGE = "preparing_image"
    UPLOADING = "uploading"
    WAITING_ON_SERVICE = "waiting_on_service"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


CYCLE_STARTED = 5
IMAGE_PREPARED = 10
REQUEST_DISPATCHED = 20
UPLOAD_CEILING = 80
UPLOAD_COMPLETE = 85
RESPONSE_RECEIVED = 90
LABELS_NORMALIZED = 95
COMPLETE = 100

_PROGRESS_LABELS: tuple[tuple[int, str], ...] = (
    (0, "Ready"),
    (IMAGE_PREPARED - 1, "Starting analysis"),
    (REQUEST_DISPATCHED - 1, "Preparing image"),
    (UPLOAD_CEILING, "Uploading image"),
    (RESPONSE_RECEIVED - 1, "Waiting for the vision service"),
    (COMPLETE - 1, "Processing results"),
    (COMPLETE, "Done"),
)


@dataclass(frozen=True)
class ProgressState:
    """Percentage in [0, 100] plus the lifecycle phase that produced it."""

    percent: int = 0
    phase: Phase = Phase.IDLE

    @property
    def label(self) -> str:
        return progress_label(self.percent)


def upload_percent(bytes_sent: int, bytes_total: int) -> int:
    """Rescale bytes-sent/bytes-total linearly into the upload sub-range."""
    if bytes_total <= 0:
        return UPLOAD_CEILING
    fraction = min(max(bytes_sent / bytes_total, 0.0), 1.0)
    return REQUEST_DISPATCHED + round(fraction * (UPLOAD_CEILING - REQUEST_DISPATCHED))


def progress_label(percent: int) -> str:
    """Human-readable phase text for a percentage, by range lookup."""
    for upper, text in _PROGRESS_LABELS:
        if percent <= upper:
            return text
    return _PROGRESS_LABELS[-1][1]


def advance_progress(progress: ProgressState, phase: Phase, percent: int) -> ProgressState:
    """Move to ``phase``; the percentage is clamped to [0, 100] and never goes backwards."""
    clamped = min(max(percent, 0), COMPLETE)
    return ProgressState(percent=max(progress.percent, clamped), phase=phase)
