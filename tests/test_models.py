"""Tests for the replication and schema value types."""

from __future__ import annotations

import pytest

from hostctl.errors import SchemaFilterError
from hostctl.models import (
    ConnectionRole,
    ReplicationPosition,
    ReplicationStatus,
    SchemaDefinition,
    TABLE_VIEW,
    TableDefinition,
)


def _schema(version: str = "") -> SchemaDefinition:
    return SchemaDefinition(
        database_schema="CREATE DATABASE `vt_db`",
        table_definitions=(
            TableDefinition(name="accounts", schema="CREATE TABLE accounts (id INT)"),
            TableDefinition(name="orders", schema="CREATE TABLE orders (id INT)"),
            TableDefinition(name="orders_archive", schema="CREATE TABLE orders_archive (id INT)"),
            TableDefinition(name="order_totals", schema="CREATE VIEW order_totals", type=TABLE_VIEW),
        ),
        version=version,
    )


def _names(schema: SchemaDefinition) -> list[str]:
    return [table.name for table in schema.table_definitions]


def test_position_is_opaque_value() -> None:
    position = ReplicationPosition("uuid:1-10")

    assert position == ReplicationPosition("uuid:1-10")
    assert position != ReplicationPosition("uuid:1-11")
    assert str(position) == "uuid:1-10"
    assert ReplicationPosition().is_zero()
    assert not position.is_zero()


def test_status_helpers() -> None:
    status = ReplicationStatus(
        slave_io_running=True,
        slave_sql_running=False,
        master_host="master1",
        master_port=3306,
    )

    assert status.slave_running() is False
    assert status.master_address() == "master1:3306"
    assert status == ReplicationStatus(
        slave_io_running=True,
        slave_sql_running=False,
        master_host="master1",
        master_port=3306,
    )


def test_filter_without_patterns_keeps_everything() -> None:
    assert _names(_schema().filter_tables()) == ["accounts", "orders", "orders_archive", "order_totals"]


def test_filter_tables_searches_names() -> None:
    result = _schema().filter_tables(["^orders"], [], True)

    assert _names(result) == ["orders", "orders_archive"]


def test_filter_excludes_and_drops_views() -> None:
    result = _schema().filter_tables(["order"], ["archive"], False)

    assert _names(result) == ["orders"]


def test_filter_returns_copy_and_regenerates_version() -> None:
    schema = _schema(version="stale")

    result = schema.filter_tables(["accounts"], [], True)

    assert len(schema.table_definitions) == 4
    assert schema.version == "stale"
    assert result.version == result.generate_version()
    assert result.version != schema.generate_version()
    assert result.database_schema == schema.database_schema


def test_filter_keeps_empty_version_empty() -> None:
    assert _schema().filter_tables(["accounts"]).version == ""


def test_filter_rejects_invalid_pattern() -> None:
    with pytest.raises(SchemaFilterError, match="cannot compile regexp"):
        _schema().filter_tables(["orders("])


def test_get_table() -> None:
    schema = _schema()

    table = schema.get_table("orders")

    assert table is not None and table.schema == "CREATE TABLE orders (id INT)"
    assert schema.get_table("missing") is None


def test_connection_roles() -> None:
    assert {role.value for role in ConnectionRole} == {"dba", "app"}
    assert ConnectionRole("dba") is ConnectionRole.DBA
