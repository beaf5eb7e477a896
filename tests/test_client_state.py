"""Tests for progress tracking and the client state transitions."""

from __future__ import annotations

import base64

import pytest

from imagelabeler.client import progress as pg
from imagelabeler.client import state as st
from imagelabeler.client.progress import Phase, ProgressState
from imagelabeler.client.state import ClientState, Status
from imagelabeler.labels import Label

DATA_URL = "data:image/png;base64," + base64.b64encode(b"png").decode()


class TestProgress:
    @pytest.mark.parametrize(
        ("sent", "total", "expected"),
        [(0, 100, 20), (50, 100, 50), (100, 100, 80), (150, 100, 80), (0, 0, 80)],
    )
    def test_upload_percent_is_rescaled(self, sent: int, total: int, expected: int) -> None:
        assert pg.upload_percent(sent, total) == expected

    @pytest.mark.parametrize(
        ("percent", "label"),
        [
            (0, "Ready"),
            (5, "Starting analysis"),
            (10, "Preparing image"),
            (20, "Uploading image"),
            (80, "Uploading image"),
            (85, "Waiting for the vision service"),
            (90, "Processing results"),
            (95, "Processing results"),
            (100, "Done"),
        ],
    )
    def test_progress_label_by_range(self, percent: int, label: str) -> None:
        assert pg.progress_label(percent) == label

    def test_advance_never_goes_backwards(self) -> None:
        progress = ProgressState(percent=60, phase=Phase.UPLOADING)
        advanced = pg.advance_progress(progress, Phase.UPLOADING, 40)
        assert advanced.percent == 60

    def test_advance_clamps(self) -> None:
        assert pg.advance_progress(ProgressState(), Phase.DONE, 150).percent == 100
        assert pg.advance_progress(ProgressState(), Phase.PREPARING_IMAGE, -5).percent == 0


class TestInputTransitions:
    def test_url_clears_file(self) -> None:
        state = st.set_image_file(ClientState(), DATA_URL, "cat.png")
        state = st.set_image_url(state, " https://example.com/cat.jpg ")
        assert state.image_url == "https://example.com/cat.jpg"
        assert state.image_data_url == ""
        assert state.file_name == ""

    def test_file_clears_url(self) -> None:
        state = st.set_image_url(ClientState(), "https://example.com/cat.jpg")
        state = st.set_image_file(state, DATA_URL, "cat.png")
        assert state.image_url == ""
        assert state.image_data_url == DATA_URL
        assert state.preview_src == DATA_URL

    def test_encode_data_url(self) -> None:
        assert st.encode_data_url(b"png", "image/png") == DATA_URL
        assert st.encode_data_url(b"", None) == "data:application/octet-stream;base64,"


class TestSubmit:
    def test_without_input_is_validation_error(self) -> None:
        state = st.submit(ClientState())
        assert state.status is Status.ERROR
        assert state.error == st.VALIDATION_MESSAGE
        assert state.progress.percent == 0

    def test_resets_previous_results(self) -> None:
        previous = ClientState(
            image_url="https://example.com/cat.jpg",
            status=Status.IDLE,
            progress=ProgressState(percent=100, phase=Phase.DONE),
            labels=(Label(name="Cat", confidence=90.0),),
            error="old",
        )
        state = st.submit(previous)
        assert state.status is Status.LOADING
        assert state.is_loading
        assert state.labels == ()
        assert state.error == ""
        assert state.progress == ProgressState(percent=pg.CYCLE_STARTED, phase=Phase.PREPARING_IMAGE)


class TestOutcomes:
    def test_succeed_reaches_100(self) -> None:
        state = st.submit(st.set_image_url(ClientState(), "https://example.com/cat.jpg"))
        state = st.succeed(state, [Label(name="Cat", confidence=98.7)])
        assert state.status is Status.SUCCESS
        assert state.progress == ProgressState(percent=100, phase=Phase.DONE)
        assert state.labels == (Label(name="Cat", confidence=98.7),)

    def test_fail_keeps_percent(self) -> None:
        state = st.submit(st.set_image_url(ClientState(), "https://example.com/cat.jpg"))
        state = st.record_upload(state, 1, 2)
        state = st.fail(state, "boom")
        assert state.status is Status.ERROR
        assert state.error == "boom"
        assert state.progress == ProgressState(percent=50, phase=Phase.FAILED)

    def test_fail_with_empty_message(self) -> None:
        assert st.fail(ClientState(), "").error == "Analysis failed"

    def test_settle_returns_to_idle_keeping_results(self) -> None:
        state = st.succeed(st.submit(ClientState(image_url="u")), [Label(name="Cat", confidence=1.0)])
        settled = st.settle(state)
        assert settled.status is Status.IDLE
        assert not settled.is_loading
        assert settled.labels == state.labels


class TestBuildRequestBody:
    def test_file_payload(self) -> None:
        assert st.build_request_body(ClientState(image_data_url=DATA_URL)) == {"imageBase64": DATA_URL}

    def test_url_payload(self) -> None:
        assert st.build_request_body(ClientState(image_url="https://x/y.jpg")) == {"imageUrl": "https://x/y.jpg"}

    def test_file_wins_when_both_set(self) -> None:
        state = ClientState(image_url="https://x/y.jpg", image_data_url=DATA_URL)
        assert st.build_request_body(state) == {"imageBase64": DATA_URL}

    def test_nothing_set_raises(self) -> None:
        with pytest.raises(ValueError, match="Provide an image URL"):
            st.build_request_body(ClientState())
