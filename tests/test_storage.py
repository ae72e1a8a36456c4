import gzip
import io
import logging

import pytest

from toplogs.services.storage import LogStore


def test_reads_lines_without_endings(tmp_path):
    path = tmp_path / "access.log"
    path.write_bytes(b"one\r\ntwo\n\nthree")
    assert list(LogStore(str(path)).read_lines()) == ["one", "two", "three"]


def test_reads_gzip(tmp_path):
    path = tmp_path / "access.log.gz"
    with gzip.open(path, "wb") as f:
        f.write(b"a\nb\n")
    assert list(LogStore(str(path)).read_lines()) == ["a", "b"]


def test_undecodable_line_is_skipped(caplog):
    store = LogStore.from_bytes(b"good\n\xff\xfe bad\nalso good\n")
    with caplog.at_level(logging.WARNING, logger="toplogs.services.storage"):
        assert list(store.read_lines()) == ["good", "also good"]
    assert "Read failed" in caplog.text


def test_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        list(LogStore(str(tmp_path / "nope.log")).read_lines())


def test_dash_reads_stdin(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"x\ny\n")))
    store = LogStore("-")
    assert store.is_stdin
    assert list(store.read_lines()) == ["x", "y"]


def gzipped_lines(n=500):
    return gzip.compress("".join(f"line {i} {i * 7919}\n" for i in range(n)).encode())


def test_truncated_gzip_raises_oserror(tmp_path):
    path = tmp_path / "cut.log.gz"
    data = gzipped_lines()
    path.write_bytes(data[: len(data) // 2])
    with pytest.raises(OSError):
        list(LogStore(str(path)).read_lines())


def test_corrupt_gzip_body_raises_oserror(tmp_path):
    path = tmp_path / "corrupt.log.gz"
    data = gzipped_lines()
    path.write_bytes(data[:10] + b"\xff" * 64 + data[-8:])
    with pytest.raises(OSError):
        list(LogStore(str(path)).read_lines())
