"""
Line-oriented reader over a plain or gzip-compressed dump.

The underlying stream is only ever read in blocks of at most
``settings.chunk_size`` bytes, so a pathologically long INSERT costs several
reads instead of one unbounded one.  Blocks are accumulated until they hold a
full *logical line* (ending in ``\\n``, ``\\r`` or ``\\r\\n``) or the stream
is exhausted.
"""
from __future__ import annotations

import gzip
import pathlib
import re
import typing as t
import zlib

from dbrestore.config import ImportSettings
from dbrestore.errors import DumpReadError
from dbrestore.source import is_compressed

_EOL_RE = re.compile(rb"\r\n|\r|\n")


class DumpReader:
    """
    Forward-only iterator of logical lines.  It is the only consumer of the
    file handle; once exhausted it cannot be restarted.

    >>> with DumpReader(path, settings) as reader:
    ...     for line in reader:
    ...         ...
    """

    def __init__(self, path: pathlib.Path | str, settings: ImportSettings | None = None) -> None:
        self.path: pathlib.Path = pathlib.Path(path)
        self.settings: ImportSettings = settings or ImportSettings()
        self.compressed: bool = is_compressed(self.path.name)
        self.lines_read: int = 0
        self._fh: t.BinaryIO | None = None
        self._pending: bytearray = bytearray()
        # _start: first unconsumed byte; _scanned: no terminator before it
        self._start: int = 0
        self._scanned: int = 0
        self._eof: bool = False

    # ------------------------------------------------------------------ #
    # Resource handling
    # ------------------------------------------------------------------ #
    def open(self) -> "DumpReader":
        if self._fh is not None:
            return self
        try:
            if self.compressed:
                self._fh = gzip.open(self.path, "rb")
            else:
                self._fh = open(self.path, "rb")
        except OSError as exc:
            raise DumpReadError(self.path, exc.strerror or str(exc)) from exc
        return self

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> "DumpReader":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Reading
    # ------------------------------------------------------------------ #
    def _read_chunk(self) -> bytes:
        if self._fh is None:
            raise DumpReadError(self.path, "reader is not open")
        try:
            return self._fh.read(self.settings.chunk_size)
        except (OSError, EOFError, zlib.error) as exc:
            # gzip reports corrupt data as BadGzipFile / zlib.error and a
            # truncated member as EOFError
            raise DumpReadError(self.path, f"{type(exc).__name__}: {exc}") from exc

    def _split_line(self) -> bytes | None:
        """Pop one terminated line off the pending bytes, if there is one."""
        m = _EOL_RE.search(self._pending, self._scanned)
        if m is None:
            self._scanned = len(self._pending)
            return None
        # a trailing \r may be the first half of \r\n still in the next chunk
        if m.group() == b"\r" and m.end() == len(self._pending) and not self._eof:
            self._scanned = m.start()
            return None
        line = bytes(self._pending[self._start:m.end()])
        self._start = self._scanned = m.end()
        return line

    def _append(self, chunk: bytes) -> None:
        # drop consumed lines once per chunk, not once per line
        if self._start:
            del self._pending[: self._start]
            self._scanned -= self._start
            self._start = 0
        self._pending += chunk

    def _take_rest(self) -> bytes:
        rest = bytes(self._pending[self._start:])
        self._pending.clear()
        self._start = self._scanned = 0
        return rest

    def next_logical_line(self) -> tuple[str, bool]:
        """
        Return ``(line, has_more)``.  The line keeps its terminator; the last
        line of a file without a trailing newline is returned as is.
        ``("", False)`` means the stream is exhausted.
        """
        while True:
            raw = self._split_line()
            if raw is not None:
                break
            if self._eof:
                raw = self._take_rest()
                break
            chunk = self._read_chunk()
            if chunk:
                self._append(chunk)
            else:
                self._eof = True

        if not raw:
            return "", False

        try:
            line = raw.decode(self.settings.encoding)
        except UnicodeDecodeError as exc:
            raise DumpReadError(
                self.path, f"line {self.lines_read + 1} is not valid {self.settings.encoding}"
            ) from exc
        self.lines_read += 1
        return line, not (self._eof and self._start == len(self._pending))

    def __iter__(self) -> t.Iterator[str]:
        self.open()
        while True:
            line, _ = self.next_logical_line()
            if line == "":
                return
            yield line
