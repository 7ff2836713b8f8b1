"""Controller configuration loading helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import tomllib

from pydantic import BaseModel, Field, ValidationError

from .models import ConnectionRole

LOG = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".config" / "hostctl" / "config.toml"


class DbConnectionParams(BaseModel):
    """Parameters used to open a connection as one database user."""

    host: str = "localhost"
    port: int = 3306
    user: str = ""
    password: str = ""
    unix_socket: str | None = None
    database: str | None = None
    charset: str = "utf8mb4"
    connect_timeout: float = 5.0


class ReplicationCredentials(BaseModel):
    """Account replicas use to pull the binlog from their master."""

    user: str = "vt_repl"
    password: str = ""
    connect_retry: int = 10


class HostConfig(BaseModel):
    """Shape of the controller configuration file."""

    dba: DbConnectionParams = Field(default_factory=lambda: DbConnectionParams(user="vt_dba"))
    app: DbConnectionParams = Field(default_factory=lambda: DbConnectionParams(user="vt_app"))
    repl: ReplicationCredentials = Field(default_factory=ReplicationCredentials)
    sidecar_db: str = "_vt"
    reparent_journal_poll_interval: float = 0.1

    def params_for(self, role: ConnectionRole) -> DbConnectionParams:
        """Connection parameters for the given role."""

        if role is ConnectionRole.DBA:
            return self.dba
        if role is ConnectionRole.APP:
            return self.app
        raise ValueError(f"unknown connection role: {role!r}")


def load_config(path: Path | None = None) -> HostConfig:
    """Load configuration from disk; fall back to defaults if missing or invalid."""

    config_path = path or CONFIG_FILE
    try:
        with config_path.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError:
        return HostConfig()
    except (tomllib.TOMLDecodeError, OSError) as exc:
        LOG.warning("Ignoring unreadable config %s: %s", config_path, exc)
        return HostConfig()

    try:
        return HostConfig.model_validate(_known_sections(raw))
    except ValidationError as exc:
        LOG.warning("Ignoring invalid config %s: %s", config_path, exc)
        return HostConfig()


def _known_sections(raw: dict[str, object]) -> dict[str, object]:
    data: dict[str, object] = {}
    for key in ("dba", "app", "repl"):
        section = raw.get(key)
        if isinstance(section, dict):
            data[key] = section
    sidecar_db = raw.get("sidecar_db")
    if isinstance(sidecar_db, str) and sidecar_db:
        data["sidecar_db"] = sidecar_db
    poll_interval = raw.get("reparent_journal_poll_interval")
    if isinstance(poll_interval, (int, float)) and not isinstance(poll_interval, bool):
        data["reparent_journal_poll_interval"] = float(poll_interval)
    return data


__all__ = [
    "CONFIG_FILE",
    "DbConnectionParams",
    "HostConfig",
    "ReplicationCredentials",
    "load_config",
]
