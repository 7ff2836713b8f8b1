"""Scriptable MysqlDaemon used to test callers without a live server."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .connections import ConnectionFactories, ConnectionFactory, PooledConnection
from .errors import (
    NoSchemaError,
    NoStatusError,
    NotAReplicaError,
    QueryFailedError,
    StatementMismatchError,
    StatusMismatchError,
    WaitCancelledError,
)
from .models import ConnectionRole, ReplicationPosition, ReplicationStatus, SchemaDefinition

LOG = logging.getLogger(__name__)

# Expected statements starting with this marker only need to prefix the actual one.
SUBSTRING_MARKER = "SUB"

MASTER_ADDRESS_ERROR = "ERROR"
MYSQL_PORT_ERROR = -1


def statements_match(expected: Sequence[str], actual: Sequence[str]) -> bool:
    """Compare a statement batch against expectations.

    Only entries of ``expected`` carrying ``SUBSTRING_MARKER`` are compared,
    against the same-length prefix of the actual statement. Unmarked entries
    always match. Batches of different lengths never match.
    """

    if len(expected) != len(actual):
        return False
    for want, got in zip(expected, actual):
        if not want.startswith(SUBSTRING_MARKER):
            continue
        prefix = want[len(SUBSTRING_MARKER):]
        if len(got) < len(prefix) or got[: len(prefix)] != prefix:
            return False
    return True


@dataclass(slots=True)
class FakeMysqlDaemon:
    """MysqlDaemon whose every answer is configured by the test.

    Set ``master_address`` to ``""`` to raise NotAReplicaError or to
    ``"ERROR"`` to raise QueryFailedError; ``mysql_port`` of ``-1`` raises
    QueryFailedError. ``None`` for status, schema or a connection factory
    makes the matching call fail. Only ``replicating`` and ``read_only`` are
    changed by calls.
    """

    master_address: str = ""
    mysql_port: int = 0
    replicating: bool = False
    current_replication_status: ReplicationStatus | None = None
    break_replicas_error: Exception | None = None
    current_master_position: ReplicationPosition = field(default_factory=ReplicationPosition)
    read_only: bool = False
    start_replication_commands_status: ReplicationStatus | None = None
    start_replication_commands_result: list[str] = field(default_factory=list)
    schema: SchemaDefinition | None = None
    dba_connection_factory: ConnectionFactory | None = None
    app_connection_factory: ConnectionFactory | None = None
    expected_admin_statements: list[str] = field(default_factory=list)
    # None accepts any journal entry right away.
    reparent_journal_entries: set[int] | None = None
    poll_interval: float = 0.01

    def get_master_address(self) -> str:
        if self.master_address == "":
            raise NotAReplicaError()
        if self.master_address == MASTER_ADDRESS_ERROR:
            raise QueryFailedError("FakeMysqlDaemon.get_master_address returns an error")
        return self.master_address

    def get_mysql_port(self) -> int:
        if self.mysql_port == MYSQL_PORT_ERROR:
            raise QueryFailedError("FakeMysqlDaemon.get_mysql_port returns an error")
        return self.mysql_port

    def start_replication(self, hook_extra_env: Mapping[str, str]) -> None:
        self.replicating = True

    def stop_replication(self, hook_extra_env: Mapping[str, str]) -> None:
        self.replicating = False

    def replication_status(self) -> ReplicationStatus:
        if self.current_replication_status is None:
            raise NoStatusError("no replication status defined")
        return self.current_replication_status

    def break_replicas(self) -> None:
        if self.break_replicas_error is not None:
            raise self.break_replicas_error

    def master_position(self) -> ReplicationPosition:
        return self.current_master_position

    def set_read_only(self, on: bool) -> None:
        self.read_only = on

    def build_start_replication_commands(self, status: ReplicationStatus) -> list[str]:
        if self.start_replication_commands_status != status:
            LOG.debug(
                "Reparent status mismatch: expected %r got %r",
                self.start_replication_commands_status,
                status,
            )
            raise StatusMismatchError(self.start_replication_commands_status, status)
        return list(self.start_replication_commands_result)

    async def wait_for_reparent_journal(
        self, time_created_ns: int, *, timeout: float | None = None
    ) -> None:
        if self.reparent_journal_entries is None:
            return
        try:
            async with asyncio.timeout(timeout):
                while time_created_ns not in self.reparent_journal_entries:
                    await asyncio.sleep(self.poll_interval)
        except TimeoutError as exc:
            raise WaitCancelledError(time_created_ns, timeout) from exc

    def get_schema(
        self,
        db_name: str,
        tables: Sequence[str],
        exclude_tables: Sequence[str],
        include_views: bool,
    ) -> SchemaDefinition:
        if self.schema is None:
            raise NoSchemaError("no schema defined")
        return self.schema.filter_tables(tables, exclude_tables, include_views)

    def get_connection(self, role: ConnectionRole) -> PooledConnection:
        factories = ConnectionFactories(
            dba=self.dba_connection_factory,
            app=self.app_connection_factory,
        )
        return factories.connect(role)

    def execute_admin_statements(self, statements: Sequence[str]) -> None:
        expected = self.expected_admin_statements
        if len(statements) != len(expected):
            LOG.debug("Admin statement count mismatch: expected %d got %d", len(expected), len(statements))
            raise StatementMismatchError("wrong query list size", expected, statements)
        if not statements_match(expected, statements):
            LOG.debug("Admin statement mismatch: expected %r got %r", expected, list(statements))
            raise StatementMismatchError("wrong query list", expected, statements)


__all__ = [
    "FakeMysqlDaemon",
    "MASTER_ADDRESS_ERROR",
    "MYSQL_PORT_ERROR",
    "SUBSTRING_MARKER",
    "statements_match",
]
