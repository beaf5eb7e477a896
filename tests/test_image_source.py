"""Tests for request parsing and image byte resolution."""

from __future__ import annotations

import base64

import httpx
import pytest

from imagelabeler.api.schemas import LabelRequest
from imagelabeler.config import Settings
from imagelabeler.image_source import (
    ImageSourceError,
    decode_image_base64,
    fetch_image_bytes,
    strip_data_url_prefix,
)
from imagelabeler.service import MissingImageError, parse_label_request, resolve_image_bytes

PAYLOAD = base64.b64encode(b"\x89PNG\r\n\x1a\nimage-bytes").decode()


def _client(handler: object) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))  # type: ignore[arg-type]


class TestDecodeImageBase64:
    @pytest.mark.parametrize(
        "prefix",
        ["data:image/png;base64,", "data:image/jpeg;base64,", "data:;base64,", "anything-at-all,"],
    )
    def test_prefix_is_stripped_up_to_first_comma(self, prefix: str) -> None:
        with_prefix = decode_image_base64(prefix + PAYLOAD, max_bytes=1024)
        assert with_prefix == decode_image_base64(PAYLOAD, max_bytes=1024)
        assert with_prefix == b"\x89PNG\r\n\x1a\nimage-bytes"

    def test_only_first_comma_is_a_delimiter(self) -> None:
        assert strip_data_url_prefix("a,b,c") == "b,c"
        assert strip_data_url_prefix("no-comma") == "no-comma"

    def test_whitespace_in_payload_is_ignored(self) -> None:
        wrapped = PAYLOAD[:8] + "\n" + PAYLOAD[8:]
        assert decode_image_base64(wrapped, max_bytes=1024) == base64.b64decode(PAYLOAD)

    def test_bad_padding_raises(self) -> None:
        with pytest.raises(ImageSourceError, match="Invalid base64"):
            decode_image_base64("data:image/png;base64,abc", max_bytes=1024)

    def test_empty_payload_raises(self) -> None:
        with pytest.raises(ImageSourceError, match="empty"):
            decode_image_base64("data:image/png;base64,", max_bytes=1024)

    def test_oversized_image_raises(self) -> None:
        with pytest.raises(ImageSourceError, match="exceeds 4 bytes"):
            decode_image_base64(base64.b64encode(b"12345").decode(), max_bytes=4)


class TestFetchImageBytes:
    async def test_returns_full_body(self) -> None:
        body = b"x" * 200_000

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body)

        async with _client(handler) as client:
            assert await fetch_image_bytes(client, "https://example.com/a.jpg", max_bytes=1_000_000) == body

    async def test_non_2xx_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, text="forbidden")

        async with _client(handler) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await fetch_image_bytes(client, "https://example.com/a.jpg", max_bytes=1024)

    async def test_transport_error_propagates(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(httpx.ConnectError):
                await fetch_image_bytes(client, "https://example.com/a.jpg", max_bytes=1024)

    async def test_body_over_cap_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"x" * 2048)

        async with _client(handler) as client:
            with pytest.raises(ImageSourceError, match="exceeds"):
                await fetch_image_bytes(client, "https://example.com/a.jpg", max_bytes=1024)


class TestParseLabelRequest:
    @pytest.mark.parametrize("raw", [None, b"", "   ", {}])
    def test_empty_input_is_empty_request(self, raw: object) -> None:
        request = parse_label_request(raw)  # type: ignore[arg-type]
        assert request.image_url is None
        assert request.image_base64 is None

    @pytest.mark.parametrize("raw", [b"[]", b'[{"imageUrl": "https://example.com/cat.jpg"}]', b'"text"', b"3", b"null"])
    def test_non_object_json_is_empty_request(self, raw: bytes) -> None:
        request = parse_label_request(raw)
        assert request.image_url is None
        assert request.image_base64 is None

    def test_camel_case_fields(self) -> None:
        request = parse_label_request(b'{"imageUrl": "https://example.com/cat.jpg"}')
        assert request.image_url == "https://example.com/cat.jpg"

    def test_invalid_json_raises_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_label_request(b"{oops")

    def test_wrong_type_raises_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_label_request({"imageUrl": 42})


class TestResolveImageBytes:
    async def test_base64_wins_and_url_is_never_fetched(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, content=b"from-url")

        request = LabelRequest(imageUrl="https://example.com/a.jpg", imageBase64=PAYLOAD)
        async with _client(handler) as client:
            image = await resolve_image_bytes(request, client, Settings())

        assert image == base64.b64decode(PAYLOAD)
        assert calls == []

    async def test_url_is_fetched(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"from-url")

        async with _client(handler) as client:
            image = await resolve_image_bytes(LabelRequest(imageUrl="https://example.com/a.jpg"), client, Settings())

        assert image == b"from-url"

    async def test_missing_sources_raise(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        async with _client(handler) as client:
            with pytest.raises(MissingImageError, match="Provide imageUrl or imageBase64"):
                await resolve_image_bytes(LabelRequest(), client, Settings())
