"""UI state for the label analyzer and its pure transition functions.

Each function takes the current :class:`ClientState` and returns a new one;
nothing is mutated in place. Status flow for one cycle:

    idle -> validating -> loading -> (success | error) -> idle
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field, replace
from enum import StrEnum

from imagelabeler.client import progress as pg
from imagelabeler.client.progress import Phase, ProgressState
from imagelabeler.labels import Label

VALIDATION_MESSAGE = "Provide an image URL or upload a file."


class Status(StrEnum):
    IDLE = "idle"
    VALIDATING = "validating"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class ClientState:
    """Everything the analyzer page shows."""

    image_url: str = ""
    image_data_url: str = ""
    file_name: str = ""
    status: Status = Status.IDLE
    progress: ProgressState = field(default_factory=ProgressState)
    labels: tuple[Label, ...] = ()
    error: str = ""

    @property
    def is_loading(self) -> bool:
        return self.status is Status.LOADING

    @property
    def has_input(self) -> bool:
        return bool(self.image_url or self.image_data_url)

    @property
    def preview_src(self) -> str:
        return self.image_data_url or self.image_url


def encode_data_url(content: bytes, content_type: str | None) -> str:
    """Encode file bytes as a ``data:<type>;base64,<payload>`` string."""
    media_type = content_type or "application/octet-stream"
    return f"data:{media_type};base64,{base64.b64encode(content).decode('ascii')}"


def set_image_url(state: ClientState, url: str) -> ClientState:
    """Typing a URL discards any selected file."""
    return replace(state, image_url=url.strip(), image_data_url="", file_name="")


def set_image_file(state: ClientState, data_url: str, file_name: str = "") -> ClientState:
    """Selecting a file clears the URL field."""
    return replace(state, image_url="", image_data_url=data_url, file_name=file_name)


def submit(state: ClientState) -> ClientState:
    """Start a new cycle: clear previous results, reset progress to 0 and validate input.

    Returns an ERROR state when no image source is set (no request should be
    made); otherwise a LOADING state at the first progress checkpoint.
    """
    fresh = replace(state, status=Status.VALIDATING, progress=ProgressState(), labels=(), error="")
    if not fresh.has_input:
        return replace(fresh, status=Status.ERROR, error=VALIDATION_MESSAGE)
    return replace(
        fresh,
        status=Status.LOADING,
        progress=pg.advance_progress(fresh.progress, Phase.PREPARING_IMAGE, pg.CYCLE_STARTED),
    )


def advance(state: ClientState, phase: Phase, percent: int) -> ClientState:
    return replace(state, progress=pg.advance_progress(state.progress, phase, percent))


def record_upload(state: ClientState, bytes_sent: int, bytes_total: int) -> ClientState:
    """Upload progress from a bytes-sent callback."""
    return advance(state, Phase.UPLOADING, pg.upload_percent(bytes_sent, bytes_total))


def succeed(state: ClientState, labels: list[Label]) -> ClientState:
    state = advance(state, Phase.FINALIZING, pg.LABELS_NORMALIZED)
    return replace(
        state,
        status=Status.SUCCESS,
        labels=tuple(labels),
        progress=pg.advance_progress(state.progress, Phase.DONE, pg.COMPLETE),
    )


def fail(state: ClientState, message: str) -> ClientState:
    """Record a failure; progress stays where it stopped."""
    return replace(
        state,
        status=Status.ERROR,
        error=message or "Analysis failed",
        progress=ProgressState(percent=state.progress.percent, phase=Phase.FAILED),
    )


def settle(state: ClientState) -> ClientState:
    """Clear the loading state; labels and error stay visible."""
    return replace(state, status=Status.IDLE)


def build_request_body(state: ClientState) -> dict[str, str]:
    """JSON body with exactly one image source; a selected file wins over a URL.

    Raises:
        ValueError: If neither source is set.
    """
    if state.image_data_url:
        return {"imageBase64": state.image_data_url}
    if state.image_url:
        return {"imageUrl": state.image_url}
    raise ValueError(VALIDATION_MESSAGE)
