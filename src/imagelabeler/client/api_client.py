"""HTTP client that drives one analysis cycle against the label API."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING

from imagelabeler.client import progress as pg
from imagelabeler.client import state as st
from imagelabeler.client.progress import Phase
from imagelabeler.labels import normalize_labels

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    import httpx

    from imagelabeler.client.state import ClientState

logger = logging.getLogger(__name__)

UPLOAD_CHUNK_SIZE = 64 * 1024


class LabelServiceError(RuntimeError):
    """The label API answered with a non-2xx status."""


class LabelClient:
    """Posts images to the label endpoint and tracks progress in a :class:`ClientState`.

    One cycle at a time: callers disable submission while ``state.is_loading``.
    """

    def __init__(self, endpoint: str, http_client: httpx.AsyncClient, settle_delay: float = 0.3) -> None:
        self._endpoint = endpoint
        self._http = http_client
        self._settle_delay = settle_delay

    async def analyze(
        self,
        state: ClientState,
        on_change: Callable[[ClientState], None] | None = None,
    ) -> ClientState:
        """Run one analysis cycle and return the settled state.

        Validation failures return without any network call. Every other
        failure is captured as the state's error string.
        """
        current = state

        def update(new_state: ClientState) -> None:
            nonlocal current
            current = new_state
            if on_change is not None:
                on_change(new_state)

        update(st.submit(current))
        if current.status is st.Status.ERROR:
            update(st.settle(current))
            return current

        try:
            body = json.dumps(st.build_request_body(current)).encode("utf-8")
            update(st.advance(current, Phase.PREPARING_IMAGE, pg.IMAGE_PREPARED))

            update(st.advance(current, Phase.UPLOADING, pg.REQUEST_DISPATCHED))
            content = _upload_chunks(
                body,
                on_sent=lambda sent, total: update(st.record_upload(current, sent, total)),
                on_complete=lambda: update(st.advance(current, Phase.WAITING_ON_SERVICE, pg.UPLOAD_COMPLETE)),
            )
            async with self._http.stream(
                "POST",
                self._endpoint,
                content=content,
                headers={"Content-Type": "application/json", "Content-Length": str(len(body))},
            ) as response:
                update(st.advance(current, Phase.FINALIZING, pg.RESPONSE_RECEIVED))
                await response.aread()
            if not response.is_success:
                raise LabelServiceError(f"API error: {response.status_code} {response.text}")

            labels = normalize_labels(response.json())
            update(st.succeed(current, labels))
        except Exception as exc:
            logger.exception("Analysis failed")
            update(st.fail(current, str(exc)))
        finally:
            await asyncio.sleep(self._settle_delay)
            update(st.settle(current))
        return current


async def _upload_chunks(
    body: bytes,
    on_sent: Callable[[int, int], None],
    on_complete: Callable[[], None],
) -> AsyncIterator[bytes]:
    """Yield the body in chunks, reporting bytes sent; ``on_complete`` fires once the last chunk is consumed."""
    total = len(body)
    sent = 0
    for start in range(0, total, UPLOAD_CHUNK_SIZE):
        chunk = body[start : start + UPLOAD_CHUNK_SIZE]
        yield chunk
        sent += len(chunk)
        on_sent(sent, total)
    on_complete()
