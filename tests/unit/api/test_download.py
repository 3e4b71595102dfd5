"""Unit tests for api/download.py — incremental copy to a sink."""

from http.client import IncompleteRead
from io import BytesIO
from unittest.mock import MagicMock

import pytest

from lastkajen.api.download import copy_stream
from lastkajen.api.errors import IoError, TransportError


def _stream(chunks: list[bytes]) -> MagicMock:
    resp = MagicMock()
    resp.read.side_effect = [*chunks, b""]
    return resp


class TestCopyStream:
    @pytest.mark.parametrize(
        "chunks",
        [
            [b"only"],
            [b"first", b"second"],
            [bytes([i]) * 100 for i in range(50)],
        ],
        ids=["one", "two", "many"],
    )
    def test_sink_receives_exact_concatenation(self, chunks: list[bytes]) -> None:
        sink = BytesIO()
        written = copy_stream(_stream(chunks), sink, chunk_size=100)
        assert sink.getvalue() == b"".join(chunks)
        assert written == sum(len(c) for c in chunks)

    def test_empty_body_writes_nothing(self) -> None:
        sink = MagicMock()
        assert copy_stream(_stream([]), sink) == 0
        sink.write.assert_not_called()

    def test_requests_chunk_size_per_read(self) -> None:
        resp = _stream([b"a", b"b"])
        copy_stream(resp, BytesIO(), chunk_size=8)
        assert [c.args for c in resp.read.call_args_list] == [(8,), (8,), (8,)]

    @pytest.mark.parametrize("chunk_size", [0, -5])
    def test_non_positive_chunk_size_is_rejected(self, chunk_size: int) -> None:
        resp = _stream([b"data"])
        sink = BytesIO()
        with pytest.raises(ValueError, match="chunk_size"):
            copy_stream(resp, sink, chunk_size=chunk_size)
        resp.read.assert_not_called()
        assert sink.getvalue() == b""

    def test_incomplete_read_raises_transport_error(self) -> None:
        resp = MagicMock()
        resp.read.side_effect = [b"part", IncompleteRead(b"", 10)]
        sink = BytesIO()
        with pytest.raises(TransportError):
            copy_stream(resp, sink)
        assert sink.getvalue() == b"part"

    def test_write_failure_raises_io_error_and_stops_reading(self) -> None:
        resp = _stream([b"a", b"b", b"c"])
        sink = MagicMock()
        sink.write.side_effect = [None, OSError("disk full")]
        with pytest.raises(IoError):
            copy_stream(resp, sink)
        assert resp.read.call_count == 2
