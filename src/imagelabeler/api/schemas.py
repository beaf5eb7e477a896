"""Pydantic request/response schemas for the label API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from imagelabeler.labels import Label


class LabelRequest(BaseModel):
    """Image to label: a URL to fetch or inline base64 (optionally a data URL)."""

    model_config = ConfigDict(populate_by_name=True)

    image_url: str | None = Field(default=None, alias="imageUrl")
    image_base64: str | None = Field(default=None, alias="imageBase64", description="Plain base64 or a data URL")


class LabelResponse(BaseModel):
    """Labels in the order the vision service returned them."""

    labels: list[Label]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    region: str
    max_labels: int
    min_confidence: float
    in_flight: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
