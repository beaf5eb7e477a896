"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from imagelabeler.api.pages import router as pages_router
from imagelabeler.api.routes import router
from imagelabeler.client.api_client import LabelClient
from imagelabeler.config import LOG_FORMAT, get_settings
from imagelabeler.vision.detector import RekognitionLabelDetector
from imagelabeler.vision.pool import DetectorPool

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: initialize on startup, clean up on shutdown."""
    settings = get_settings()
    app.state.settings = settings

    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)

    logger.info(
        "Starting image labeler (region=%s, max_labels=%s, min_confidence=%s, workers=%s)",
        settings.aws_region,
        settings.max_labels,
        settings.min_confidence,
        settings.max_workers,
    )

    app.state.detector = RekognitionLabelDetector(settings)
    app.state.detector_pool = DetectorPool(settings)
    app.state.http_client = httpx.AsyncClient(timeout=settings.fetch_timeout, follow_redirects=True)
    client_http = httpx.AsyncClient(timeout=settings.client_timeout)
    app.state.label_client = LabelClient(settings.label_endpoint, client_http, settle_delay=settings.settle_delay)

    logger.info("Image labeler ready")
    yield

    logger.info("Shutting down image labeler")
    await client_http.aclose()
    await app.state.http_client.aclose()
    app.state.detector_pool.shutdown()
    logger.info("Image labeler shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="Image Labeler",
        description="Labels images through a managed vision service",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router)
    application.include_router(pages_router)
    return application


app = create_app()


def run() -> None:
    """Serve the app with uvicorn using the configured host and port."""
    settings = get_settings()
    uvicorn.run("imagelabeler.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
