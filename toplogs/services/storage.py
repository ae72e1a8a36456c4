"""
LogStore Class - Handles reading access log sources

This module turns a named input (a file, a gzipped file or '-' for
standard input) into a stream of text lines.
"""

import gzip
import io
import logging
import sys
import zlib
from typing import BinaryIO, Iterable, Iterator, Optional

logger = logging.getLogger(__name__)

STDIN_PATH = "-"


class LogStore:
    """
    Reads one access log source line by line.
    Responsibilities:
    - Open files, gzipped files and standard input
    - Decode each line on its own so one bad line does not end the source
    """

    def __init__(self, file_path: str, content: Optional[bytes] = None):
        self.file_path = file_path
        self._content = content

    @classmethod
    def from_bytes(cls, content: bytes, name: str = "<upload>") -> "LogStore":
        """Serve already uploaded content"""
        return cls(name, content=content)

    @property
    def is_stdin(self) -> bool:
        return self._content is None and self.file_path.strip() == STDIN_PATH

    def read_lines(self) -> Iterator[str]:
        """
        Iterator over the decoded lines of the source, without line endings.

        Opening or reading the source raises OSError, including for
        truncated or corrupt gzip data. Lines that are not valid UTF-8 are
        logged and skipped.
        """
        stream = self._open()
        try:
            yield from self._decode(stream)
        except (EOFError, zlib.error) as err:
            raise OSError(f"{self.file_path}: {err}") from err
        finally:
            if not self.is_stdin:
                stream.close()

    def _open(self) -> BinaryIO:
        if self._content is not None:
            return io.BytesIO(self._content)
        if self.is_stdin:
            return sys.stdin.buffer
        if self.file_path.endswith(".gz"):
            return gzip.open(self.file_path, "rb")  # type: ignore[return-value]
        return open(self.file_path, "rb")

    def _decode(self, raw_lines: Iterable[bytes]) -> Iterator[str]:
        for n, raw in enumerate(raw_lines, start=1):
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as err:
                logger.warning("Read failed: %s line %d: %s", self.file_path, n, err)
                continue
            line = line.rstrip("\r\n")
            if line:
                yield line
