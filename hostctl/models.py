"""Replication and schema value types shared by controllers and the fake."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Sequence

from .errors import SchemaFilterError

TABLE_BASE = "BASE TABLE"
TABLE_VIEW = "VIEW"


class ConnectionRole(str, Enum):
    """Database user a pooled connection is opened as."""

    DBA = "dba"
    APP = "app"


@dataclass(frozen=True, slots=True)
class ReplicationPosition:
    """Opaque point in the replication stream (a GTID set)."""

    gtid_set: str = ""

    def is_zero(self) -> bool:
        return not self.gtid_set

    def __str__(self) -> str:
        return self.gtid_set


@dataclass(frozen=True, slots=True)
class ReplicationStatus:
    """Replica state relative to its master, as reported by the server."""

    position: ReplicationPosition = field(default_factory=ReplicationPosition)
    slave_io_running: bool = False
    slave_sql_running: bool = False
    seconds_behind_master: int | None = None
    master_host: str = ""
    master_port: int = 0
    master_connect_retry: int = 0

    def slave_running(self) -> bool:
        """True when both replication threads are running."""

        return self.slave_io_running and self.slave_sql_running

    def master_address(self) -> str:
        return f"{self.master_host}:{self.master_port}"


@dataclass(frozen=True, slots=True)
class TableDefinition:
    """One table or view of a database schema."""

    name: str
    schema: str = ""
    columns: tuple[str, ...] = ()
    primary_key_columns: tuple[str, ...] = ()
    type: str = TABLE_BASE
    data_length: int = 0
    row_count: int = 0


@dataclass(frozen=True, slots=True)
class SchemaDefinition:
    """Database creation statement plus its table definitions."""

    database_schema: str = ""
    table_definitions: tuple[TableDefinition, ...] = ()
    version: str = ""

    def filter_tables(
        self,
        tables: Sequence[str] = (),
        exclude_tables: Sequence[str] = (),
        include_views: bool = True,
    ) -> SchemaDefinition:
        """Return a copy narrowed to matching tables.

        ``tables`` and ``exclude_tables`` are regular expressions searched in
        table names. No ``tables`` means every table is a candidate; any
        exclude match drops a table; views are dropped unless requested.
        """

        include_patterns = _compile_patterns(tables)
        exclude_patterns = _compile_patterns(exclude_tables)
        kept: list[TableDefinition] = []
        for table in self.table_definitions:
            if include_patterns and not any(p.search(table.name) for p in include_patterns):
                continue
            if any(p.search(table.name) for p in exclude_patterns):
                continue
            if not include_views and table.type == TABLE_VIEW:
                continue
            kept.append(table)
        narrowed = replace(self, table_definitions=tuple(kept))
        if narrowed.version:
            # Table list changed, so the hash has to follow.
            narrowed = replace(narrowed, version=narrowed.generate_version())
        return narrowed

    def generate_version(self) -> str:
        """Hash of the table schemas, used to compare schemas cheaply."""

        digest = hashlib.md5()
        for table in self.table_definitions:
            digest.update(table.schema.encode("utf-8"))
        return digest.hexdigest()

    def get_table(self, name: str) -> TableDefinition | None:
        for table in self.table_definitions:
            if table.name == name:
                return table
        return None


def _compile_patterns(patterns: Iterable[str]) -> tuple[re.Pattern[str], ...]:
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            raise SchemaFilterError(f"cannot compile regexp {pattern!r} for table: {exc}") from exc
    return tuple(compiled)


__all__ = [
    "ConnectionRole",
    "ReplicationPosition",
    "ReplicationStatus",
    "SchemaDefinition",
    "TABLE_BASE",
    "TABLE_VIEW",
    "TableDefinition",
]
