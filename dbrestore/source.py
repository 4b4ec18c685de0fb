"""
Locate the dump file to restore and decide how to open it.
"""
from __future__ import annotations
import pathlib
import re

from dbrestore.constants import ALLOWED_EXTENSIONS, COMPRESSED_EXTENSION, DEFAULT_DUMP_NAME
from dbrestore.errors import InputNotFoundError

_EXT_RE = re.compile(
    "(" + "|".join(re.escape(e) for e in ALLOWED_EXTENSIONS) + ")$", re.IGNORECASE
)


def check_extension(filename: str | pathlib.Path) -> bool:
    return bool(_EXT_RE.search(str(filename)))


def is_compressed(filename: str | pathlib.Path) -> bool:
    return str(filename).lower().endswith(COMPRESSED_EXTENSION)


def locate_dump(
    name: str | pathlib.Path | None,
    assets_dir: pathlib.Path | str,
) -> pathlib.Path:
    """
    Resolve *name* (default ``database.sql.gz``) inside *assets_dir*.

    Absolute paths are taken as is.  Raises :class:`InputNotFoundError`
    when the file does not exist or is not a ``.sql`` / ``.gz`` file.
    """
    name = name or DEFAULT_DUMP_NAME
    path = pathlib.Path(name).expanduser()
    if not path.is_absolute():
        path = pathlib.Path(assets_dir) / path

    if not check_extension(path.name):
        raise InputNotFoundError(
            f"{name} is not a supported dump; allowed formats are "
            + " or ".join(ALLOWED_EXTENSIONS)
        )
    if not path.is_file():
        raise InputNotFoundError(f"Could not find {name} in {assets_dir}")
    return path
