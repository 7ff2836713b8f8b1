"""Tests for the replication SQL builders."""

from __future__ import annotations

from hostctl.config import ReplicationCredentials
from hostctl.models import ReplicationPosition, ReplicationStatus
from hostctl.replication import (
    break_replicas_commands,
    create_reparent_journal,
    populate_reparent_journal,
    quote_identifier,
    reparent_journal_query,
    start_replication_commands,
)


def test_start_replication_commands_with_position() -> None:
    status = ReplicationStatus(
        position=ReplicationPosition("uuid:1-10"),
        master_host="master1",
        master_port=3306,
    )

    commands = start_replication_commands(status, ReplicationCredentials(user="repl", password="p'w"))

    assert commands[:4] == [
        "STOP SLAVE",
        "RESET SLAVE",
        "RESET MASTER",
        "SET GLOBAL gtid_purged = 'uuid:1-10'",
    ]
    change_master = commands[4]
    assert change_master.startswith("CHANGE MASTER TO")
    assert "MASTER_HOST = 'master1'" in change_master
    assert "MASTER_PORT = 3306" in change_master
    assert "MASTER_PASSWORD = 'p\\'w'" in change_master
    assert "MASTER_CONNECT_RETRY = 10" in change_master
    assert commands[-1] == "START SLAVE"


def test_start_replication_commands_skip_purge_for_zero_position() -> None:
    status = ReplicationStatus(master_host="master1", master_port=3306, master_connect_retry=3)

    commands = start_replication_commands(status, ReplicationCredentials())

    assert len(commands) == 4
    assert not any("gtid_purged" in command for command in commands)
    assert "MASTER_CONNECT_RETRY = 3" in commands[2]


def test_break_replicas_commands_toggle_binlog() -> None:
    commands = break_replicas_commands(1700000000000000000, "_vt")

    assert commands[0] == "CREATE DATABASE IF NOT EXISTS `_vt`"
    off = commands.index("SET sql_log_bin = 0")
    on = commands.index("SET sql_log_bin = 1")
    assert commands[off + 1].startswith("INSERT INTO `_vt`.replication_log")
    assert commands[on + 1] == "DELETE FROM `_vt`.replication_log WHERE time_created_ns = 1700000000000000000"


def test_reparent_journal_statements() -> None:
    create = create_reparent_journal("_vt")
    insert = populate_reparent_journal(42, "PlannedReparentShard", "cell-0000000100", ReplicationPosition("uuid:1-3"))

    assert create[0] == "CREATE DATABASE IF NOT EXISTS `_vt`"
    assert "reparent_journal" in create[1]
    assert insert.endswith("VALUES (42, 'PlannedReparentShard', 'cell-0000000100', 'uuid:1-3')")
    assert reparent_journal_query(42).endswith("WHERE time_created_ns = 42")


def test_sidecar_db_identifier_is_escaped() -> None:
    sidecar_db = "side`car"

    commands = break_replicas_commands(1, sidecar_db) + create_reparent_journal(sidecar_db)
    commands.append(populate_reparent_journal(1, "Reparent", "cell-1", ReplicationPosition(), sidecar_db))
    commands.append(reparent_journal_query(1, sidecar_db))

    assert quote_identifier(sidecar_db) == "`side``car`"
    assert commands[0] == "CREATE DATABASE IF NOT EXISTS `side``car`"
    for command in commands:
        if "side" in command:
            assert "`side``car`" in command
