"""Turning a label request into raw image bytes."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)


class ImageSourceError(ValueError):
    """The image could not be decoded, or its size is out of bounds."""


def strip_data_url_prefix(value: str) -> str:
    """Return the payload after the first comma, or the value unchanged if there is none."""
    _prefix, sep, payload = value.partition(",")
    return payload if sep else value


def _check_size(image_bytes: bytes, max_bytes: int) -> bytes:
    if not image_bytes:
        raise ImageSourceError("Image data is empty")
    if len(image_bytes) > max_bytes:
        raise ImageSourceError(f"Image exceeds {max_bytes} bytes")
    return image_bytes


def decode_image_base64(value: str, *, max_bytes: int) -> bytes:
    """Decode plain base64 or a data URL (``data:image/png;base64,AAAA``) into bytes.

    Raises:
        ImageSourceError: If the payload is not valid base64 or the decoded
            image is empty or larger than ``max_bytes``.
    """
    encoded = "".join(strip_data_url_prefix(value).split())
    try:
        image_bytes = base64.b64decode(encoded)
    except (binascii.Error, ValueError) as exc:
        raise ImageSourceError(f"Invalid base64 image data: {exc}") from exc
    return _check_size(image_bytes, max_bytes)


async def fetch_image_bytes(client: httpx.AsyncClient, url: str, *, max_bytes: int) -> bytes:
    """Download an image and return its full body.

    Raises:
        httpx.HTTPError: On transport failures and non-2xx responses.
        ImageSourceError: If the body is empty or larger than ``max_bytes``.
    """
    logger.info("Fetching image from %s", url)
    chunks: list[bytes] = []
    received = 0
    async with client.stream("GET", url) as response:
        response.raise_for_status()
        async for chunk in response.aiter_bytes():
            received += len(chunk)
            if received > max_bytes:
                raise ImageSourceError(f"Image exceeds {max_bytes} bytes")
            chunks.append(chunk)
    return _check_size(b"".join(chunks), max_bytes)
