"""SQL builders for replication setup and the reparent journal."""

from __future__ import annotations

from pymysql.converters import escape_string

from .config import ReplicationCredentials
from .models import ReplicationPosition, ReplicationStatus

DEFAULT_SIDECAR_DB = "_vt"


def _quote(value: str) -> str:
    return f"'{escape_string(value)}'"


def quote_identifier(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"


def start_replication_commands(
    status: ReplicationStatus, credentials: ReplicationCredentials
) -> list[str]:
    """Statements that point this host at ``status``'s master and start replicating."""

    commands = ["STOP SLAVE", "RESET SLAVE"]
    if not status.position.is_zero():
        commands.append("RESET MASTER")
        commands.append(f"SET GLOBAL gtid_purged = {_quote(str(status.position))}")
    connect_retry = status.master_connect_retry or credentials.connect_retry
    commands.append(
        "CHANGE MASTER TO\n"
        f"  MASTER_HOST = {_quote(status.master_host)},\n"
        f"  MASTER_PORT = {int(status.master_port)},\n"
        f"  MASTER_USER = {_quote(credentials.user)},\n"
        f"  MASTER_PASSWORD = {_quote(credentials.password)},\n"
        f"  MASTER_CONNECT_RETRY = {int(connect_retry)},\n"
        "  MASTER_AUTO_POSITION = 1"
    )
    commands.append("START SLAVE")
    return commands


def break_replicas_commands(now_ns: int, sidecar_db: str = DEFAULT_SIDECAR_DB) -> list[str]:
    """Write a row with the binlog off, then delete it with the binlog on.

    Replicas never saw the row, so applying the delete breaks them.
    """

    table = f"{quote_identifier(sidecar_db)}.replication_log"
    return [
        f"CREATE DATABASE IF NOT EXISTS {quote_identifier(sidecar_db)}",
        create_replication_log(sidecar_db),
        "SET sql_log_bin = 0",
        f"INSERT INTO {table} (time_created_ns, note) VALUES ({int(now_ns)}, 'force replica break')",
        "SET sql_log_bin = 1",
        f"DELETE FROM {table} WHERE time_created_ns = {int(now_ns)}",
    ]


def create_replication_log(sidecar_db: str = DEFAULT_SIDECAR_DB) -> str:
    return (
        f"CREATE TABLE IF NOT EXISTS {quote_identifier(sidecar_db)}.replication_log (\n"
        "  time_created_ns BIGINT UNSIGNED NOT NULL,\n"
        "  note VARBINARY(255) NOT NULL,\n"
        "  PRIMARY KEY (time_created_ns)\n"
        ") ENGINE=InnoDB"
    )


def create_reparent_journal(sidecar_db: str = DEFAULT_SIDECAR_DB) -> list[str]:
    return [
        f"CREATE DATABASE IF NOT EXISTS {quote_identifier(sidecar_db)}",
        f"CREATE TABLE IF NOT EXISTS {quote_identifier(sidecar_db)}.reparent_journal (\n"
        "  time_created_ns BIGINT UNSIGNED NOT NULL,\n"
        "  action_name VARBINARY(250) NOT NULL,\n"
        "  master_alias VARBINARY(32) NOT NULL,\n"
        "  replication_position VARBINARY(64000) DEFAULT NULL,\n"
        "  PRIMARY KEY (time_created_ns)\n"
        ") ENGINE=InnoDB",
    ]


def populate_reparent_journal(
    time_created_ns: int,
    action_name: str,
    master_alias: str,
    position: ReplicationPosition,
    sidecar_db: str = DEFAULT_SIDECAR_DB,
) -> str:
    return (
        f"INSERT INTO {quote_identifier(sidecar_db)}.reparent_journal "
        "(time_created_ns, action_name, master_alias, replication_position) "
        f"VALUES ({int(time_created_ns)}, {_quote(action_name)}, {_quote(master_alias)}, "
        f"{_quote(str(position))})"
    )


def reparent_journal_query(time_created_ns: int, sidecar_db: str = DEFAULT_SIDECAR_DB) -> str:
    return (
        f"SELECT action_name, master_alias, replication_position "
        f"FROM {quote_identifier(sidecar_db)}.reparent_journal WHERE time_created_ns = {int(time_created_ns)}"
    )


__all__ = [
    "break_replicas_commands",
    "create_replication_log",
    "create_reparent_journal",
    "populate_reparent_journal",
    "quote_identifier",
    "reparent_journal_query",
    "start_replication_commands",
]
