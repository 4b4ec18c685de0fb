"""
`dbrestore restore` implementation – wipe the target database and replay a
non‑extended‑insert dump into it, one statement at a time.

    mysqldump --extended-insert=FALSE -uroot -p database_name | gzip > database.sql.gz

Nothing is wrapped in a transaction and nothing is retried: the first
failing statement stops the import and everything executed before it stays.
"""
from __future__ import annotations

import dataclasses
import pathlib
import typing as t

import click

from dbrestore.config import Environment, ImportSettings, ensure_restorable
from dbrestore.driver import Executor, open_executor as _open_executor
from dbrestore.dump.assembler import StatementAssembler, iter_statements
from dbrestore.dump.reader import DumpReader
from dbrestore.errors import QueryError
from dbrestore.source import locate_dump

Echo = t.Callable[..., None]

QUIET, NORMAL, VERBOSE = 0, 1, 2


@dataclasses.dataclass
class ImportResult:
    path: pathlib.Path
    lines: int = 0
    statements: int = 0
    dropped_tables: list[str] = dataclasses.field(default_factory=list)
    dropped_tail: bool = False

    def __str__(self) -> str:
        return (
            f"{self.path.name}: {self.statements} statements from {self.lines} lines"
            + (f", {len(self.dropped_tables)} tables dropped" if self.dropped_tables else "")
        )


def drop_tables(
    executor: Executor,
    *,
    echo: Echo = click.echo,
    verbosity: int = NORMAL,
) -> list[str]:
    """Drop every table, with foreign‑key checks off for the duration."""
    dropped: list[str] = []
    executor.foreign_key_checks(False)
    try:
        for name in executor.list_tables():
            if verbosity >= NORMAL:
                echo(f"Dropping table `{name}`")
            executor.drop_table_if_exists(name)
            dropped.append(name)
    finally:
        executor.foreign_key_checks(True)
    return dropped


def import_dump(
    path: pathlib.Path,
    executor: Executor,
    settings: ImportSettings | None = None,
    *,
    echo: Echo = click.echo,
    verbosity: int = NORMAL,
) -> ImportResult:
    """
    Stream *path* through the assembler and execute each statement as soon
    as its delimiter line is read.
    """
    settings = settings or ImportSettings()
    result = ImportResult(path)
    assembler = StatementAssembler(settings)

    with DumpReader(path, settings) as reader:
        for statement in iter_statements(reader, settings, assembler=assembler):
            if not statement.strip():
                continue
            if verbosity >= VERBOSE:
                echo(statement.strip())
            try:
                executor.execute(statement)
            except QueryError as exc:
                raise exc.at_line(reader.lines_read) from exc
            result.statements += 1
        result.lines = reader.lines_read

    result.dropped_tail = bool(assembler.discarded)

    if result.dropped_tail:
        echo(
            f"Warning: {path.name} ends with a statement lacking "
            f"{settings.delimiter!r}; it was not executed.",
            err=True,
        )
    if verbosity >= NORMAL:
        echo("#---- Import complete -----#")
    return result


def restore(
    env: Environment,
    dump_name: str | None = None,
    settings: ImportSettings | None = None,
    *,
    assets_dir: pathlib.Path | str | None = None,
    open_executor: t.Callable[[Environment], t.ContextManager[Executor]] = _open_executor,
    echo: Echo = click.echo,
    verbosity: int = NORMAL,
) -> ImportResult:
    """
    Gate, locate, wipe, import.  The first two steps fail before anything
    destructive happens.
    """
    ensure_restorable(env)
    path = locate_dump(dump_name, assets_dir or env.assets_dir)

    with open_executor(env) as executor:
        dropped = drop_tables(executor, echo=echo, verbosity=verbosity)
        result = import_dump(path, executor, settings, echo=echo, verbosity=verbosity)
    result.dropped_tables = dropped
    return result


def preview(
    env: Environment,
    dump_name: str | None = None,
    settings: ImportSettings | None = None,
    *,
    assets_dir: pathlib.Path | str | None = None,
) -> t.Iterator[str]:
    """Yield the statements a restore would execute, without a database."""
    ensure_restorable(env)
    path = locate_dump(dump_name, assets_dir or env.assets_dir)
    with DumpReader(path, settings) as reader:
        for statement in iter_statements(reader, settings):
            if statement.strip():
                yield statement
