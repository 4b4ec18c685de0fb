from __future__ import annotations
import typing as t
from contextlib import contextmanager

import mysql.connector

from dbrestore.config import Environment
from dbrestore.errors import QueryError


class Executor(t.Protocol):
    """What the restore needs from a database."""

    def execute(self, sql: str) -> None: ...

    def list_tables(self) -> list[str]: ...

    def drop_table_if_exists(self, name: str) -> None: ...

    def foreign_key_checks(self, enabled: bool) -> None: ...


@contextmanager
def connection(env: Environment):
    """
    Context‑manager that yields a connection inside the target database.

    Autocommit is on: a restore is not transactional and statements that
    already ran stay applied when a later one fails.
    """
    try:
        conn = mysql.connector.connect(**env.dsn(), autocommit=True)
    except mysql.connector.Error as err:
        # bad credentials, unknown database, network
        raise QueryError(
            f"-- connect to {env.host}:{env.port}/{env.database}",
            err.msg or str(err),
            errno=err.errno,
        ) from err

    try:
        yield conn
    finally:
        conn.close()


class MySQLExecutor:
    """
    Runs statements one at a time on a mysql‑connector connection and turns
    every driver error into :class:`QueryError`.
    """

    def __init__(self, conn) -> None:
        self.conn = conn

    def _run(self, sql: str, fetch: bool = False) -> list[tuple]:
        try:
            with self.conn.cursor(buffered=True) as cur:
                cur.execute(sql)
                return cur.fetchall() if fetch else []
        except mysql.connector.Error as err:
            raise QueryError(sql, err.msg or str(err), errno=err.errno) from err

    def execute(self, sql: str) -> None:
        self._run(sql)

    def list_tables(self) -> list[str]:
        return [row[0] for row in self._run("SHOW TABLES", fetch=True)]

    def drop_table_if_exists(self, name: str) -> None:
        quoted = name.replace("`", "``")
        self._run(f"DROP TABLE IF EXISTS `{quoted}`")

    def foreign_key_checks(self, enabled: bool) -> None:
        self._run(f"SET foreign_key_checks = {1 if enabled else 0}")


@contextmanager
def open_executor(env: Environment) -> t.Iterator[MySQLExecutor]:
    with connection(env) as conn:
        yield MySQLExecutor(conn)
