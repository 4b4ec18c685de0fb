from __future__ import annotations
import dataclasses
import os
import pathlib
import typing as t
import yaml

try:
    import tomllib as _toml
except ModuleNotFoundError:                              # pragma: no cover
    import tomli as _toml                                # type: ignore[no-redef]

from dbrestore.constants import (
    DEFAULT_ASSETS_DIR,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_COMMENT_PREFIXES,
    DEFAULT_DELIMITER,
    DEFAULT_ENCODING,
    SAFE_STAGES,
)
from dbrestore.errors import RestoreError

_DEFAULT_PATH = pathlib.Path("dbrestore.config.yml")


class ConfigurationError(RestoreError):
    """Raised for any user‑visible configuration problem."""


@dataclasses.dataclass(frozen=True)
class ImportSettings:
    """
    How a dump is split into statements.  Handed to both the reader and the
    assembler; never mutated once built.

    An empty *delimiter* turns every accepted line into its own statement.
    """

    delimiter: str = DEFAULT_DELIMITER
    comment_prefixes: tuple[str, ...] = DEFAULT_COMMENT_PREFIXES
    chunk_size: int = DEFAULT_CHUNK_SIZE
    encoding: str = DEFAULT_ENCODING

    def __post_init__(self) -> None:
        if not isinstance(self.delimiter, str):
            raise ConfigurationError("delimiter must be a string")
        # lists coming from YAML are frozen into a tuple
        object.__setattr__(self, "comment_prefixes", tuple(self.comment_prefixes))
        if any(not p for p in self.comment_prefixes):
            raise ConfigurationError("comment prefixes must not be empty strings")
        if not isinstance(self.chunk_size, int) or self.chunk_size <= 0:
            raise ConfigurationError(
                f"chunk_size must be a positive integer, got {self.chunk_size!r}"
            )
        # lines are split on raw \r / \n bytes before decoding
        try:
            eol = "\r\n".encode(self.encoding)
        except LookupError as exc:
            raise ConfigurationError(f"Unknown encoding {self.encoding!r}") from exc
        if eol != b"\r\n":
            raise ConfigurationError(
                f"Encoding {self.encoding!r} is not supported: line breaks must "
                "be single ASCII bytes (use utf-8, latin-1, ...)"
            )

    @classmethod
    def from_dict(cls, d: dict[str, t.Any] | None) -> "ImportSettings":
        d = dict(d or {})
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(d) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown import option(s): {', '.join(sorted(unknown))}"
            )
        return cls(**d)

    def override(self, **changes: t.Any) -> "ImportSettings":
        """Return a copy with every non‑``None`` value in *changes* applied."""
        changes = {k: v for k, v in changes.items() if v is not None}
        return dataclasses.replace(self, **changes) if changes else self


class Environment:
    """
    A thin value‑object holding the attributes required to open a MariaDB
    connection, plus the deployment *stage* used by the restore gate.
    Nothing here talks to the database.
    """

    def __init__(self, name: str, d: dict[str, t.Any]) -> None:
        self.name: str = name
        self.host: str = d["host"]
        self.port: int = d.get("port", 3306)
        self.database: str = d["database"]
        self.user: str = d["user"]

        # Allow `${ENV_VAR}` syntax for secrets
        raw_pwd: str = str(d.get("password", ""))
        self.password: str = (
            os.getenv(raw_pwd[2:-1], "") if raw_pwd.startswith("${") else raw_pwd
        )

        # An environment that does not say what it is counts as production
        self.stage: str = str(d.get("stage", "live"))
        self.assets_dir: pathlib.Path = pathlib.Path(
            d.get("assets_dir", DEFAULT_ASSETS_DIR)
        ).expanduser()

    def dsn(self) -> dict[str, t.Any]:
        """Return kwargs that mysql‑connector understands."""
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "database": self.database,
        }

    def __repr__(self) -> str:
        return f"Environment({self.name!r}, stage={self.stage!r}, database={self.database!r})"


def _read_file(cfg_file: pathlib.Path) -> dict[str, t.Any]:
    if cfg_file.suffix.lower() == ".toml":
        with cfg_file.open("rb") as fh:
            return _toml.load(fh)
    with cfg_file.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def load(
    path: pathlib.Path | str | None = None,
    env: str | None = None,
) -> tuple[Environment, ImportSettings]:
    """
    Parse *path* (or the default YAML) and return the selected
    :class:`Environment` together with the file's :class:`ImportSettings`.
    """
    cfg_file = pathlib.Path(path) if path else _DEFAULT_PATH
    if not cfg_file.exists():
        raise ConfigurationError(f"Config file {cfg_file} not found.")

    try:
        raw = _read_file(cfg_file)
    except (yaml.YAMLError, _toml.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Cannot parse {cfg_file}: {exc}") from exc

    env_name = env or raw.get("default_env")
    if not env_name:
        raise ConfigurationError("No environment specified and no default_env in config")

    try:
        environment = Environment(env_name, raw["environments"][env_name])
    except KeyError as exc:
        raise ConfigurationError(
            f"Environment {env_name!r} not found in config or missing key {exc}"
        ) from exc

    return environment, ImportSettings.from_dict(raw.get("import"))


def ensure_restorable(env: Environment) -> None:
    """
    Refuse to go any further unless *env* is a development or test box.
    Restoring drops every table, so this must run before any file or
    database access.
    """
    if env.stage.lower() not in SAFE_STAGES:
        raise ConfigurationError(
            f"Refusing to restore into {env.name!r}: stage {env.stage!r} is not "
            f"one of {', '.join(SAFE_STAGES)}"
        )
