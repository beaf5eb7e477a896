"""Analyzer web page: the form, one analysis cycle per submit, and the results grid."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, StreamingResponse

from imagelabeler.client import state as st
from imagelabeler.client.render import render_page, render_stream_end, render_stream_start, render_stream_update

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from imagelabeler.client.api_client import LabelClient
    from imagelabeler.client.state import ClientState

logger = logging.getLogger(__name__)

router = APIRouter(include_in_schema=False)


def _get_label_client(request: Request) -> LabelClient:
    client: LabelClient = request.app.state.label_client
    return client


async def stream_analysis(client: LabelClient, state: ClientState) -> AsyncIterator[str]:
    """Run one cycle and yield the page as it progresses.

    The locked form goes out first, then one status row per state change,
    then the results and a live form once the cycle has settled.
    """
    updates: asyncio.Queue[ClientState | None] = asyncio.Queue()

    async def run() -> ClientState:
        try:
            return await client.analyze(state, updates.put_nowait)
        finally:
            updates.put_nowait(None)

    task = asyncio.create_task(run())
    try:
        first = await updates.get()
        if first is not None:
            yield render_stream_start(first)
            yield render_stream_update(first)
            while (update := await updates.get()) is not None:
                yield render_stream_update(update)
        final = await task
        if final.error:
            logger.info("Analysis finished with error: %s", final.error)
        if first is None:
            yield render_page(final)
        else:
            yield render_stream_end(final)
    finally:
        if not task.done():
            task.cancel()


@router.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    """Serve the empty analyzer page."""
    return HTMLResponse(render_page(st.ClientState()))


@router.post("/", response_class=StreamingResponse)
async def analyze(
    request: Request,
    image_url: Annotated[str, Form()] = "",
    image_file: Annotated[UploadFile | None, File()] = None,
) -> StreamingResponse:
    """Apply the submitted inputs in field order (URL, then file) and stream one cycle."""
    state = st.ClientState()
    if image_url:
        state = st.set_image_url(state, image_url)
    if image_file is not None and image_file.filename:
        content = await image_file.read()
        if content:
            state = st.set_image_file(state, st.encode_data_url(content, image_file.content_type), image_file.filename)

    return StreamingResponse(stream_analysis(_get_label_client(request), state), media_type="text/html")
