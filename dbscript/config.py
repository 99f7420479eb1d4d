from __future__ import annotations
import os
import pathlib
import typing as t
import yaml

from dbscript.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_CONFIG_PATH,
    DEFAULT_DELIMITER,
    DEFAULT_USE_BATCH,
)


class ConfigError(RuntimeError):
    """Raised for any user‑visible configuration problem."""


def _secret(raw: t.Any) -> str | None:
    # Allow `${ENV_VAR}` syntax for secrets
    if raw is None:
        return None
    raw = str(raw)
    return os.getenv(raw[2:-1]) if raw.startswith("${") and raw.endswith("}") else raw


class ConnectionSettings:
    """
    A thin value‑object holding the attributes required to open a MariaDB
    connection.  Nothing here talks to the database.
    """

    def __init__(self, role: str, d: dict[str, t.Any]) -> None:
        self.role: str = role
        self.host: str | None = d.get("host")
        self.port: int = int(d.get("port", 3306))
        self.database: str | None = d.get("database")
        self.user: str | None = d.get("user")
        self.password: str | None = _secret(d.get("password"))

    def check(self) -> None:
        """Fail loudly when the settings cannot possibly open a connection."""
        if not self.user:
            raise ConfigError(f"[{self.role}] No username defined!")
        if not self.host:
            raise ConfigError(f"[{self.role}] No host defined!")

    def dsn(self) -> dict[str, t.Any]:
        """Return kwargs that mysql‑connector understands."""
        dsn = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password or "",
        }
        # the admin account usually connects to the server only
        if self.database:
            dsn["database"] = self.database
        return dsn


class ScriptOptions:
    """How script files are read, split and executed."""

    def __init__(self, d: dict[str, t.Any]) -> None:
        self.use_batch: bool = bool(d.get("use_batch", DEFAULT_USE_BATCH))
        self.batch_size: int = d.get("batch_size", DEFAULT_BATCH_SIZE)
        self.delimiter: str = d.get("sql_delimiter", DEFAULT_DELIMITER)
        self.encoding: str | None = d.get("script_encoding")
        self.strip_lines: bool = bool(d.get("strip_lines", False))

        if (
            isinstance(self.batch_size, bool)
            or not isinstance(self.batch_size, int)
            or self.batch_size < 1
        ):
            raise ConfigError(f"batch_size must be a positive integer, got {self.batch_size!r}")
        if not self.delimiter:
            raise ConfigError("sql_delimiter must not be empty")


class Environment:
    """
    Everything one named environment of the config file declares: both
    connections, the script options and the script locations per goal.
    """

    def __init__(
        self,
        name: str,
        d: dict[str, t.Any],
        base_dir: pathlib.Path | None = None,
    ) -> None:
        self.name: str = name
        base = base_dir or pathlib.Path.cwd()

        self.app: ConnectionSettings = ConnectionSettings("application", d.get("app") or {})
        self.admin: ConnectionSettings = ConnectionSettings("admin", d.get("admin") or {})
        self.options: ScriptOptions = ScriptOptions(d)
        self.create_statements: str = d.get("create_statements") or ""

        def _dirs(key: str) -> tuple[pathlib.Path, ...]:
            raw = d.get(key) or []
            if isinstance(raw, str):
                raw = [raw]
            return tuple(
                p if p.is_absolute() else base / p
                for p in (pathlib.Path(x).expanduser() for x in raw)
            )

        self.schema_dirs = _dirs("schema_dirs")
        self.data_dirs = _dirs("data_dirs")
        self.update_dirs = _dirs("update_dirs")

    def check(self) -> None:
        self.admin.check()
        self.app.check()


def load(path: pathlib.Path | str | None = None, env: str | None = None) -> Environment:
    """
    Parse *path* (or the default YAML) and return an :class:`Environment`.
    """
    cfg_file = pathlib.Path(path) if path else DEFAULT_CONFIG_PATH
    if not cfg_file.exists():
        raise ConfigError(f"Config file {cfg_file} not found.")

    with cfg_file.open() as fh:
        raw = yaml.safe_load(fh) or {}

    env_name = env or raw.get("default_env")
    if not env_name:
        raise ConfigError("No environment specified and no default_env in config")

    try:
        data = raw["environments"][env_name]
    except KeyError as exc:
        raise ConfigError(f"Environment {env_name!r} not found in config") from exc
    return Environment(env_name, data or {}, base_dir=cfg_file.resolve().parent)
