from __future__ import annotations

import gzip
import pathlib

import pytest

from dbrestore.config import Environment
from dbrestore.errors import QueryError


class FakeExecutor:
    """Records everything the restore asks of the database."""

    def __init__(self, tables=(), fail_on: str | None = None, fail_drop: str | None = None):
        self.tables = list(tables)
        self.fail_on = fail_on
        self.fail_drop = fail_drop
        self.executed: list[str] = []
        self.calls: list[tuple] = []

    def execute(self, sql: str) -> None:
        if self.fail_on is not None and self.fail_on in sql:
            raise QueryError(sql, "You have an error in your SQL syntax", errno=1064)
        self.executed.append(sql)

    def list_tables(self) -> list[str]:
        self.calls.append(("list",))
        return list(self.tables)

    def drop_table_if_exists(self, name: str) -> None:
        if name == self.fail_drop:
            raise QueryError(f"DROP TABLE IF EXISTS `{name}`", "locked", errno=1205)
        self.calls.append(("drop", name))

    def foreign_key_checks(self, enabled: bool) -> None:
        self.calls.append(("fk", enabled))


class Echo:
    def __init__(self):
        self.out: list[str] = []
        self.err: list[str] = []

    def __call__(self, message="", err=False, **_kw):
        (self.err if err else self.out).append(message)


@pytest.fixture
def echo() -> Echo:
    return Echo()


@pytest.fixture
def dev_env(tmp_path: pathlib.Path) -> Environment:
    return Environment(
        "dev",
        {
            "host": "127.0.0.1",
            "database": "app",
            "user": "app",
            "password": "secret",
            "stage": "dev",
            "assets_dir": str(tmp_path),
        },
    )


@pytest.fixture
def write_dump(tmp_path: pathlib.Path):
    def _write(name: str, content: str | bytes) -> pathlib.Path:
        data = content.encode("utf-8") if isinstance(content, str) else content
        path = tmp_path / name
        if name.lower().endswith(".gz"):
            with gzip.open(path, "wb") as fh:
                fh.write(data)
        else:
            path.write_bytes(data)
        return path

    return _write
