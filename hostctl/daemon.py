"""Control surface a cluster manager uses to drive one MySQL host."""

from __future__ import annotations

from typing import Mapping, Protocol, Sequence, runtime_checkable

from .connections import PooledConnection
from .models import ConnectionRole, ReplicationPosition, ReplicationStatus, SchemaDefinition


@runtime_checkable
class MysqlDaemon(Protocol):
    """Protocol implemented by the real controller and the fake."""

    def get_master_address(self) -> str:
        """Return the master address, as shown by 'show slave status'."""

    def get_mysql_port(self) -> int:
        """Return the port mysql is listening on."""

    # replication
    def start_replication(self, hook_extra_env: Mapping[str, str]) -> None: ...

    def stop_replication(self, hook_extra_env: Mapping[str, str]) -> None: ...

    def replication_status(self) -> ReplicationStatus: ...

    # reparenting
    def break_replicas(self) -> None: ...

    def master_position(self) -> ReplicationPosition: ...

    def set_read_only(self, on: bool) -> None: ...

    def build_start_replication_commands(self, status: ReplicationStatus) -> list[str]: ...

    async def wait_for_reparent_journal(
        self, time_created_ns: int, *, timeout: float | None = None
    ) -> None:
        """Block until the journal holds an entry created at ``time_created_ns``."""

    # schema
    def get_schema(
        self,
        db_name: str,
        tables: Sequence[str],
        exclude_tables: Sequence[str],
        include_views: bool,
    ) -> SchemaDefinition: ...

    def get_connection(self, role: ConnectionRole) -> PooledConnection:
        """Return a connection opened as the database user for ``role``."""

    # statement execution
    def execute_admin_statements(self, statements: Sequence[str]) -> None: ...


__all__ = ["MysqlDaemon"]
