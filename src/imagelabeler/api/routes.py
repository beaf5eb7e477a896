"""API route definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from imagelabeler.api.schemas import ErrorResponse, HealthResponse, LabelRequest, LabelResponse
from imagelabeler.service import CORS_HEADERS, process_label_request

if TYPE_CHECKING:
    import httpx

    from imagelabeler.config import Settings
    from imagelabeler.vision.detector import LabelDetector
    from imagelabeler.vision.pool import DetectorPool

router = APIRouter()


def _get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def _get_detector(request: Request) -> LabelDetector:
    detector: LabelDetector = request.app.state.detector
    return detector


def _get_pool(request: Request) -> DetectorPool:
    pool: DetectorPool = request.app.state.detector_pool
    return pool


def _get_http_client(request: Request) -> httpx.AsyncClient:
    client: httpx.AsyncClient = request.app.state.http_client
    return client


@router.post(
    "/label",
    response_model=LabelResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": LabelRequest.model_json_schema(by_alias=True)}},
        },
    },
    summary="Label an image",
)
async def label(request: Request) -> JSONResponse:
    """Label an image given as ``imageUrl`` or ``imageBase64``.

    The body is parsed by hand so that malformed JSON maps to a 500 and a
    missing image to a 400, instead of FastAPI's 422.
    """
    outcome = await process_label_request(
        await request.body(),
        detector=_get_detector(request),
        pool=_get_pool(request),
        http_client=_get_http_client(request),
        settings=_get_settings(request),
    )
    return JSONResponse(status_code=outcome.status_code, content=outcome.body, headers=CORS_HEADERS)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health(request: Request) -> HealthResponse:
    """Return service health status."""
    settings = _get_settings(request)
    pool = _get_pool(request)
    return HealthResponse(
        status="ok",
        region=settings.aws_region,
        max_labels=settings.max_labels,
        min_confidence=settings.min_confidence,
        in_flight=pool.in_flight,
    )
