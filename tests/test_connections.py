"""Tests for the connection factory indirection."""

from __future__ import annotations

from typing import Any

import pytest

from hostctl.config import DbConnectionParams
from hostctl.connections import ConnectionFactories, pymysql_factory
from hostctl.errors import FactoryError, NoFactoryError
from hostctl.models import ConnectionRole


class _Connection:
    def cursor(self, *args):  # type: ignore[no-untyped-def]
        raise NotImplementedError

    def commit(self) -> None:
        return None

    def close(self) -> None:
        return None


def test_factories_select_by_role() -> None:
    dba, app = _Connection(), _Connection()
    factories = ConnectionFactories(dba=lambda: dba, app=lambda: app)

    assert factories.connect(ConnectionRole.DBA) is dba
    assert factories.connect(ConnectionRole.APP) is app


def test_missing_factory_raises() -> None:
    with pytest.raises(NoFactoryError, match="'dba'"):
        ConnectionFactories().connect(ConnectionRole.DBA)


def test_failing_factory_is_wrapped() -> None:
    def _factory() -> _Connection:
        raise TimeoutError("connect timed out")

    with pytest.raises(FactoryError) as excinfo:
        ConnectionFactories(app=_factory).connect(ConnectionRole.APP)

    assert isinstance(excinfo.value.cause, TimeoutError)
    assert excinfo.value.role is ConnectionRole.APP


def test_pymysql_factory_uses_tcp_params(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, Any] = {}
    connection = _Connection()

    def _connect(**kwargs: Any) -> _Connection:
        seen.update(kwargs)
        return connection

    monkeypatch.setattr("hostctl.connections.pymysql.connect", _connect)
    factory = pymysql_factory(DbConnectionParams(host="db1", port=6612, user="vt_app", database="vt_db"))

    assert factory() is connection
    assert seen["host"] == "db1"
    assert seen["port"] == 6612
    assert seen["user"] == "vt_app"
    assert seen["database"] == "vt_db"
    assert "unix_socket" not in seen


def test_pymysql_factory_prefers_unix_socket(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, Any] = {}

    def _connect(**kwargs: Any) -> _Connection:
        seen.update(kwargs)
        return _Connection()

    monkeypatch.setattr("hostctl.connections.pymysql.connect", _connect)
    pymysql_factory(DbConnectionParams(unix_socket="/tmp/mysql.sock", user="vt_dba"))()

    assert seen["unix_socket"] == "/tmp/mysql.sock"
    assert "host" not in seen
    assert "database" not in seen
