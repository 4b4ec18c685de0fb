"""
Exception hierarchy.  Everything raised on purpose derives from
:class:`RestoreError` so the CLI can report it in one place.
"""
from __future__ import annotations

import pathlib


class RestoreError(RuntimeError):
    """Base class for any user‑visible restore failure."""


class InputNotFoundError(RestoreError):
    """The dump file is missing or does not have an accepted extension."""


class DumpReadError(RestoreError, OSError):
    """Opening, reading, decompressing or decoding the dump failed."""

    def __init__(self, path: pathlib.Path | str, reason: str) -> None:
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = pathlib.Path(path)
        self.reason = reason


class QueryError(RestoreError):
    """The database rejected a statement."""

    PREVIEW_CHARS = 200

    def __init__(
        self,
        statement: str,
        reason: str,
        *,
        line: int | None = None,
        errno: int | None = None,
    ) -> None:
        self.statement = statement
        self.reason = reason
        self.line = line
        self.errno = errno
        super().__init__(self._message())

    def _message(self) -> str:
        where = f" (ending at line {self.line})" if self.line is not None else ""
        preview = self.statement.strip()
        if len(preview) > self.PREVIEW_CHARS:
            preview = preview[: self.PREVIEW_CHARS] + " …"
        return f"Query failed{where}: {self.reason}\n  {preview}"

    def at_line(self, line: int) -> "QueryError":
        """Return a copy that also records the dump line number."""
        return QueryError(self.statement, self.reason, line=line, errno=self.errno)
