"""
Fold logical dump lines into executable statements.

This is *not* a SQL parser: a statement ends on the first line whose
right-trimmed text ends with the delimiter, comment and pragma lines are
recognised by prefix only, and the only unescaping done is dropping every
literal ``\\\\``.  Dumps must be produced with ``--extended-insert=FALSE``
and must not contain the delimiter at the end of a line inside a literal.

The core is the pure :func:`step` transition; :class:`StatementAssembler`
wraps it for callers that prefer an object.
"""
from __future__ import annotations

import dataclasses
import typing as t

from dbrestore.config import ImportSettings
from dbrestore.constants import UTF8_BOM


@dataclasses.dataclass(frozen=True)
class AssemblerState:
    buffer: str = ""
    line_index: int = 0


def sanitize(line: str, line_index: int = 0) -> str:
    """
    Strip the BOM from the very first line, drop double backslashes and
    normalise line breaks to ``\\n``.
    """
    if line_index == 0 and line.startswith(UTF8_BOM):
        line = line[len(UTF8_BOM):]
    line = line.replace("\\\\", "")
    return line.replace("\r\n", "\n").replace("\r", "\n")


def is_comment(line: str, prefixes: t.Sequence[str]) -> bool:
    if line == "":
        return True
    head = line.lstrip(" \t")
    return any(head.startswith(p) for p in prefixes)


def delimiter_found(line: str, delimiter: str) -> bool:
    return bool(delimiter) and line.rstrip().endswith(delimiter)


def step(
    state: AssemblerState,
    line: str,
    settings: ImportSettings,
) -> tuple[AssemblerState, str | None]:
    """
    Consume one logical line.  Returns the next state and the statement the
    line completed, if any.
    """
    index = state.line_index
    clean = sanitize(line, index)

    if is_comment(clean, settings.comment_prefixes):
        return AssemblerState(state.buffer, index + 1), None

    buffer = state.buffer + clean
    delimiter = settings.delimiter

    if delimiter == "":
        return AssemblerState("", index + 1), buffer.rstrip("\n")

    if not delimiter_found(clean, delimiter):
        return AssemblerState(buffer, index + 1), None

    # whatever followed the delimiter (the line break) opens the next buffer
    body = buffer.rstrip()
    statement = body[: len(body) - len(delimiter)]
    return AssemblerState(buffer[len(body):], index + 1), statement


class StatementAssembler:
    """
    Stateful wrapper around :func:`step` for one import run.
    """

    def __init__(self, settings: ImportSettings | None = None) -> None:
        self.settings: ImportSettings = settings or ImportSettings()
        self.state: AssemblerState = AssemblerState()
        self.discarded: str = ""

    @property
    def pending(self) -> str:
        return self.state.buffer

    @property
    def line_index(self) -> int:
        return self.state.line_index

    def feed(self, line: str) -> str | None:
        self.state, statement = step(self.state, line, self.settings)
        return statement

    def flush(self) -> str | None:
        """
        End of stream.  Only an empty delimiter can leave a statement that is
        still worth executing; any other unterminated buffer is discarded and
        kept in :attr:`discarded` for diagnostics.
        """
        pending, self.state = self.state.buffer, AssemblerState(line_index=self.state.line_index)
        if self.settings.delimiter == "":
            return pending.rstrip("\n") if pending.strip() else None
        self.discarded = pending if pending.strip() else ""
        return None


def iter_statements(
    lines: t.Iterable[str],
    settings: ImportSettings | None = None,
    *,
    assembler: StatementAssembler | None = None,
) -> t.Iterator[str]:
    """
    Yield every statement found in *lines*, in source order.  An exactly
    empty logical line ends the stream even when more lines follow.

    Pass *assembler* to inspect its state (e.g. ``discarded``) afterwards.
    """
    assembler = assembler or StatementAssembler(settings)
    for line in lines:
        if line == "":
            break
        statement = assembler.feed(line)
        if statement is not None:
            yield statement
    tail = assembler.flush()
    if tail is not None:
        yield tail
