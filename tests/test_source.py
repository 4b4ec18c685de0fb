from __future__ import annotations

import pytest

from dbrestore.errors import InputNotFoundError
from dbrestore.source import check_extension, is_compressed, locate_dump


@pytest.mark.parametrize(
    "name, ok",
    [("db.sql", True), ("db.SQL", True), ("db.sql.gz", True), ("db.GZ", True),
     ("db.zip", False), ("db.sql.bak", False), ("sql", False)],
)
def test_check_extension(name, ok):
    assert check_extension(name) is ok


def test_is_compressed():
    assert is_compressed("database.sql.gz")
    assert is_compressed("DATABASE.GZ")
    assert not is_compressed("database.sql")


def test_locate_defaults_to_database_sql_gz(tmp_path, write_dump):
    path = write_dump("database.sql.gz", "SELECT 1;\n")
    assert locate_dump(None, tmp_path) == path


def test_locate_absolute_path(tmp_path, write_dump):
    path = write_dump("other.sql", "SELECT 1;\n")
    assert locate_dump(str(path), "/does/not/matter") == path


def test_locate_missing(tmp_path):
    with pytest.raises(InputNotFoundError, match="Could not find"):
        locate_dump("missing.sql", tmp_path)


def test_locate_wrong_extension(tmp_path):
    (tmp_path / "dump.txt").write_text("SELECT 1;\n")
    with pytest.raises(InputNotFoundError, match="not a supported dump"):
        locate_dump("dump.txt", tmp_path)
