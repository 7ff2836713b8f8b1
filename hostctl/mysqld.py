"""MysqlDaemon implementation talking to a live server through PyMySQL."""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Callable, Iterator, Mapping, Sequence

import pymysql
import pymysql.cursors

from .config import HostConfig
from .connections import ConnectionFactories, PooledConnection, pymysql_factory
from .errors import (
    NoSchemaError,
    NoStatusError,
    NotAReplicaError,
    QueryFailedError,
    WaitCancelledError,
)
from .models import (
    ConnectionRole,
    ReplicationPosition,
    ReplicationStatus,
    SchemaDefinition,
    TABLE_VIEW,
    TableDefinition,
)
from .replication import (
    break_replicas_commands,
    quote_identifier,
    reparent_journal_query,
    start_replication_commands,
)

LOG = logging.getLogger(__name__)

HookRunner = Callable[[str, Mapping[str, str]], None]


class Mysqld:
    """Controls one MySQL host through connections made by role factories."""

    def __init__(
        self,
        config: HostConfig | None = None,
        *,
        factories: ConnectionFactories | None = None,
        hook_runner: HookRunner | None = None,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self._config = config or HostConfig()
        self._factories = factories or ConnectionFactories(
            dba=pymysql_factory(self._config.params_for(ConnectionRole.DBA)),
            app=pymysql_factory(self._config.params_for(ConnectionRole.APP)),
        )
        self._hook_runner = hook_runner
        self._clock = clock

    def get_master_address(self) -> str:
        rows = self._fetch("SHOW SLAVE STATUS")
        if not rows:
            raise NotAReplicaError()
        status = _parse_slave_status(rows[0])
        # RESET SLAVE without ALL leaves a row with no master behind.
        if not status.master_host:
            raise NotAReplicaError()
        return status.master_address()

    def get_mysql_port(self) -> int:
        rows = self._fetch("SHOW VARIABLES LIKE 'port'")
        if not rows:
            raise QueryFailedError("no port variable reported by mysqld")
        value = rows[0].get("Value")
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise QueryFailedError(f"unexpected port value: {value!r}") from exc

    def start_replication(self, hook_extra_env: Mapping[str, str]) -> None:
        LOG.info("Starting replication")
        self._execute(["START SLAVE"])
        self._run_hook("postflight_start_slave", hook_extra_env)

    def stop_replication(self, hook_extra_env: Mapping[str, str]) -> None:
        LOG.info("Stopping replication")
        self._run_hook("preflight_stop_slave", hook_extra_env)
        self._execute(["STOP SLAVE"])

    def replication_status(self) -> ReplicationStatus:
        rows = self._fetch("SHOW SLAVE STATUS")
        if not rows:
            raise NoStatusError("no replication status: host is not a replica")
        return _parse_slave_status(rows[0])

    def break_replicas(self) -> None:
        LOG.info("Breaking replicas")
        # sql_log_bin cannot change inside a transaction, and the insert must
        # be durable before the delete is binlogged.
        self._execute(
            break_replicas_commands(self._clock(), self._config.sidecar_db),
            commit_each=True,
        )

    def master_position(self) -> ReplicationPosition:
        rows = self._fetch("SELECT @@GLOBAL.gtid_executed AS gtid_executed")
        if not rows:
            raise QueryFailedError("gtid_executed not reported by mysqld")
        return ReplicationPosition(_clean_gtid_set(rows[0].get("gtid_executed")))

    def set_read_only(self, on: bool) -> None:
        LOG.info("Setting read_only=%s", on)
        self._execute([f"SET GLOBAL read_only = {'ON' if on else 'OFF'}"])

    def build_start_replication_commands(self, status: ReplicationStatus) -> list[str]:
        return start_replication_commands(status, self._config.repl)

    async def wait_for_reparent_journal(
        self, time_created_ns: int, *, timeout: float | None = None
    ) -> None:
        query = reparent_journal_query(time_created_ns, self._config.sidecar_db)
        interval = self._config.reparent_journal_poll_interval
        try:
            async with asyncio.timeout(timeout):
                while True:
                    try:
                        rows = await asyncio.to_thread(self._fetch, query)
                    except QueryFailedError as exc:
                        # Journal table may not be replicated yet; keep polling.
                        LOG.debug("Reparent journal poll failed: %s", exc)
                        rows = []
                    if rows:
                        return
                    await asyncio.sleep(interval)
        except TimeoutError as exc:
            raise WaitCancelledError(time_created_ns, timeout) from exc

    def get_schema(
        self,
        db_name: str,
        tables: Sequence[str],
        exclude_tables: Sequence[str],
        include_views: bool,
    ) -> SchemaDefinition:
        with self._dba_connection() as conn:
            found = _fetch_rows(
                conn,
                "SELECT schema_name AS name FROM information_schema.schemata WHERE schema_name = %s",
                (db_name,),
            )
            if not found:
                raise NoSchemaError(f"no schema for database '{db_name}'")
            create = _fetch_rows(conn, f"SHOW CREATE DATABASE {quote_identifier(db_name)}")
            database_schema = str(create[0].get("Create Database", "")) if create else ""
            listing = _fetch_rows(
                conn,
                "SELECT table_name AS name, table_type AS type, "
                "data_length AS data_length, table_rows AS row_count "
                "FROM information_schema.tables WHERE table_schema = %s ORDER BY table_name",
                (db_name,),
            )
            candidates = SchemaDefinition(
                table_definitions=tuple(
                    TableDefinition(
                        name=str(row["name"]),
                        type=str(row["type"]),
                        data_length=int(row.get("data_length") or 0),
                        row_count=int(row.get("row_count") or 0),
                    )
                    for row in listing
                )
            ).filter_tables(tables, exclude_tables, include_views)
            definitions = tuple(
                self._describe_table(conn, db_name, table) for table in candidates.table_definitions
            )
        schema = SchemaDefinition(database_schema=database_schema, table_definitions=definitions)
        return replace(schema, version=schema.generate_version())

    def get_connection(self, role: ConnectionRole) -> PooledConnection:
        return self._factories.connect(role)

    def execute_admin_statements(self, statements: Sequence[str]) -> None:
        LOG.info("Executing %d admin statement(s)", len(statements))
        self._execute(statements)

    def _describe_table(
        self, conn: PooledConnection, db_name: str, table: TableDefinition
    ) -> TableDefinition:
        qualified = f"{quote_identifier(db_name)}.{quote_identifier(table.name)}"
        create = _fetch_rows(conn, f"SHOW CREATE TABLE {qualified}")
        key = "Create View" if table.type == TABLE_VIEW else "Create Table"
        schema = str(create[0].get(key, "")) if create else ""
        columns = _fetch_rows(
            conn,
            "SELECT column_name AS name FROM information_schema.columns "
            "WHERE table_schema = %s AND table_name = %s ORDER BY ordinal_position",
            (db_name, table.name),
        )
        primary_key = _fetch_rows(
            conn,
            "SELECT column_name AS name FROM information_schema.key_column_usage "
            "WHERE table_schema = %s AND table_name = %s AND constraint_name = 'PRIMARY' "
            "ORDER BY ordinal_position",
            (db_name, table.name),
        )
        return TableDefinition(
            name=table.name,
            schema=schema,
            columns=tuple(str(row["name"]) for row in columns),
            primary_key_columns=tuple(str(row["name"]) for row in primary_key),
            type=table.type,
            data_length=table.data_length,
            row_count=table.row_count,
        )

    @contextmanager
    def _dba_connection(self) -> Iterator[PooledConnection]:
        conn = self._factories.connect(ConnectionRole.DBA)
        try:
            yield conn
        finally:
            conn.close()

    def _fetch(self, sql: str, args: Sequence[object] | None = None) -> list[dict[str, Any]]:
        with self._dba_connection() as conn:
            return _fetch_rows(conn, sql, args)

    def _execute(self, statements: Sequence[str], *, commit_each: bool = False) -> None:
        with self._dba_connection() as conn:
            statement = ""
            try:
                with conn.cursor() as cursor:
                    for statement in statements:
                        LOG.debug("Executing: %s", statement)
                        cursor.execute(statement)
                        if commit_each:
                            conn.commit()
                if not commit_each:
                    conn.commit()
            except pymysql.MySQLError as exc:
                raise QueryFailedError(f"statement {statement!r} failed: {exc}") from exc

    def _run_hook(self, name: str, hook_extra_env: Mapping[str, str]) -> None:
        if self._hook_runner is None:
            LOG.debug("No hook runner configured, skipping %s", name)
            return
        self._hook_runner(name, dict(hook_extra_env))


def _fetch_rows(
    conn: PooledConnection, sql: str, args: Sequence[object] | None = None
) -> list[dict[str, Any]]:
    LOG.debug("Query: %s", sql)
    try:
        with conn.cursor(pymysql.cursors.DictCursor) as cursor:
            cursor.execute(sql, args)
            return list(cursor.fetchall())
    except pymysql.MySQLError as exc:
        raise QueryFailedError(f"query {sql!r} failed: {exc}") from exc


def _parse_slave_status(row: Mapping[str, Any]) -> ReplicationStatus:
    lag = row.get("Seconds_Behind_Master")
    return ReplicationStatus(
        position=ReplicationPosition(_clean_gtid_set(row.get("Executed_Gtid_Set"))),
        slave_io_running=row.get("Slave_IO_Running") == "Yes",
        slave_sql_running=row.get("Slave_SQL_Running") == "Yes",
        seconds_behind_master=int(lag) if lag not in (None, "") else None,
        master_host=str(row.get("Master_Host") or ""),
        master_port=int(row.get("Master_Port") or 0),
        master_connect_retry=int(row.get("Connect_Retry") or 0),
    )


def _clean_gtid_set(value: object) -> str:
    # mysqld wraps long GTID sets across lines.
    return str(value or "").replace("\n", "").strip()


__all__ = ["HookRunner", "Mysqld"]
