"""Label detection backed by AWS Rekognition.

The detector returns label objects in the service's own shape
(``{"Name": ..., "Confidence": ...}``); mapping to canonical labels happens
in :mod:`imagelabeler.service`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

import boto3

if TYPE_CHECKING:
    from imagelabeler.config import Settings

logger = logging.getLogger(__name__)


class LabelDetector(Protocol):
    """Protocol for image labeling backends."""

    def detect_labels(self, image_bytes: bytes) -> list[dict[str, Any]]:
        """Label an image.

        Args:
            image_bytes: Raw encoded image (JPEG or PNG).

        Returns:
            Raw label objects, in service order (usually descending confidence).
        """
        ...


class RekognitionLabelDetector:
    """Calls Rekognition ``DetectLabels`` with the configured label cap and threshold."""

    def __init__(self, settings: Settings, client: Any = None) -> None:
        self._max_labels = settings.max_labels
        self._min_confidence = settings.min_confidence
        self._client = client if client is not None else boto3.client("rekognition", region_name=settings.aws_region)

    def detect_labels(self, image_bytes: bytes) -> list[dict[str, Any]]:
        response = self._client.detect_labels(
            Image={"Bytes": image_bytes},
            MaxLabels=self._max_labels,
            MinConfidence=self._min_confidence,
        )
        labels: list[dict[str, Any]] = list(response.get("Labels") or [])
        logger.debug("Rekognition returned %d labels for %d bytes", len(labels), len(image_bytes))
        return labels
