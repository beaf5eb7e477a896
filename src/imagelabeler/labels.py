"""Canonical label type and normalization of the label shapes seen in the wild.

The vision service and older deployments of the label API do not agree on
field names. Everything that reaches rendering goes through
:func:`normalize_label` first:

- ``{"name", "confidence"}`` (current API)
- ``{"Name", "Confidence"}`` (raw Rekognition)
- ``{"label", "confidence"}``

Anything else falls back to the first key as the name with zero confidence.
That fallback is a compatibility shim only; do not extend it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

_KNOWN_SHAPES: tuple[tuple[str, str], ...] = (
    ("name", "confidence"),
    ("Name", "Confidence"),
    ("label", "confidence"),
)


class Label(BaseModel):
    """A detected visual concept with its confidence (0-100)."""

    name: str
    confidence: float


def _to_confidence(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def normalize_label(item: Any) -> Label:
    """Map any recognized label shape to a canonical :class:`Label`. Never raises."""
    if not isinstance(item, Mapping):
        return Label(name=str(item), confidence=0.0)

    for name_key, confidence_key in _KNOWN_SHAPES:
        if item.get(name_key):
            return Label(name=str(item[name_key]), confidence=_to_confidence(item.get(confidence_key)))

    first_key = next(iter(item), "")
    return Label(name=str(first_key), confidence=0.0)


def normalize_labels(payload: Any) -> list[Label]:
    """Extract and normalize labels from a response payload.

    Accepts ``{"labels": [...]}``, ``{"Labels": [...]}`` or a bare list.
    Any other payload yields an empty list.
    """
    if isinstance(payload, Mapping):
        items = payload.get("labels") or payload.get("Labels") or []
    else:
        items = payload
    if not isinstance(items, list):
        return []
    return [normalize_label(item) for item in items]
