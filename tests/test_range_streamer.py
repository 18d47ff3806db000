import io

import pytest

from video_manager.common.exceptions import MalformedRangeError
from video_manager.video.range_streamer import RangeStreamer


class TrackingBytesIO(io.BytesIO):
    def __init__(self, data):
        super().__init__(data)
        self.close_calls = 0

    def close(self):
        self.close_calls += 1
        super().close()


def test_no_range_returns_full_file():
    plan = RangeStreamer.plan_response(1024000, None, "video/mp4")
    assert plan.status_code == 200
    assert not plan.is_partial
    assert plan.content_length == 1024000
    assert plan.headers == {"Content-Length": "1024000", "Content-Type": "video/mp4"}


def test_empty_range_header_is_treated_as_absent():
    plan = RangeStreamer.plan_response(10, "", "video/webm")
    assert plan.status_code == 200
    assert "Content-Range" not in plan.headers


def test_explicit_range():
    plan = RangeStreamer.plan_response(1024000, "bytes=0-1023", "video/mp4")
    assert plan.status_code == 206
    assert plan.headers == {
        "Content-Length": "1024",
        "Content-Type": "video/mp4",
        "Content-Range": "bytes 0-1023/1024000",
        "Accept-Ranges": "bytes",
    }


def test_open_ended_range_defaults_end_to_last_byte():
    plan = RangeStreamer.plan_response(1024000, "bytes=512-", "video/mp4")
    assert plan.end == 1023999
    assert plan.content_length == 1023488
    assert plan.headers["Content-Range"] == "bytes 512-1023999/1024000"


@pytest.mark.parametrize("start,end,size", [(0, 0, 1), (0, 99, 500000), (10, 10, 11), (4096, 8191, 10000), (7, 999, 1000)])
def test_range_arithmetic(start, end, size):
    plan = RangeStreamer.plan_response(size, f"bytes={start}-{end}", "video/mp4")
    assert (plan.start, plan.end) == (start, end)
    assert plan.content_length == end - start + 1
    assert plan.headers["Content-Range"] == f"bytes {start}-{end}/{size}"


def test_end_past_file_is_clamped():
    plan = RangeStreamer.plan_response(100, "bytes=50-99999", "video/mp4")
    assert plan.end == 99
    assert plan.content_length == 50


@pytest.mark.parametrize("header", [
    "invalid-range-format",
    "bytes=abc-10",
    "bytes=-500",
    "bytes=10-5",
    "bytes=0-1,5-6",
    "items=0-10",
    "bytes=100-",
])
def test_malformed_ranges_raise(header):
    with pytest.raises(MalformedRangeError):
        RangeStreamer.plan_response(100, header, "video/mp4")


def test_malformed_range_maps_to_streaming_failure_status():
    assert MalformedRangeError.status_code == 500


@pytest.mark.parametrize("ext,expected", [
    (".mp4", "video/mp4"),
    (".MKV", "video/x-matroska"),
    (".mov", "video/quicktime"),
    (".avi", "video/x-msvideo"),
    (".webm", "video/webm"),
    (".ts", "video/mp2t"),
    (".flv", "video/mp4"),
    ("", "video/mp4"),
])
def test_content_type_table(ext, expected):
    assert RangeStreamer.resolve_content_type(ext) == expected


def test_iter_file_range_reads_exact_window_and_closes():
    data = bytes(range(256)) * 10
    handle = TrackingBytesIO(data)
    chunks = list(RangeStreamer.iter_file_range(handle, 100, 300, chunk_size=64))
    assert b"".join(chunks) == data[100:400]
    assert all(len(c) <= 64 for c in chunks)
    assert handle.close_calls == 1


def test_iter_file_range_closes_on_early_disconnect():
    handle = TrackingBytesIO(b"x" * 1000)
    body = RangeStreamer.iter_file_range(handle, 0, 1000, chunk_size=10)
    assert next(body) == b"x" * 10
    body.close()
    assert handle.close_calls == 1
    assert handle.closed


@pytest.mark.parametrize("header", [None, "bytes=0-", "bytes=0-0"])
def test_empty_file_returns_empty_full_response(header):
    plan = RangeStreamer.plan_response(0, header, "video/mp4")
    assert plan.status_code == 200
    assert plan.content_length == 0
    assert plan.headers == {"Content-Length": "0", "Content-Type": "video/mp4"}


def test_empty_file_still_rejects_malformed_range():
    with pytest.raises(MalformedRangeError):
        RangeStreamer.plan_response(0, "invalid-range-format", "video/mp4")
