"""Connection factories selected by connection role."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol, runtime_checkable

import pymysql

from .config import DbConnectionParams
from .errors import FactoryError, NoFactoryError
from .models import ConnectionRole


@runtime_checkable
class PooledConnection(Protocol):
    """Connection handle handed out by a factory; the factory owns its lifecycle."""

    def cursor(self, *args: Any) -> Any: ...

    def commit(self) -> None: ...

    def close(self) -> None: ...


ConnectionFactory = Callable[[], PooledConnection]


@dataclass(frozen=True, slots=True)
class ConnectionFactories:
    """One optional factory per connection role."""

    dba: ConnectionFactory | None = None
    app: ConnectionFactory | None = None

    def factory_for(self, role: ConnectionRole) -> ConnectionFactory | None:
        if role is ConnectionRole.DBA:
            return self.dba
        if role is ConnectionRole.APP:
            return self.app
        raise ValueError(f"unknown connection role: {role!r}")

    def connect(self, role: ConnectionRole) -> PooledConnection:
        """Invoke the factory for ``role``."""

        factory = self.factory_for(role)
        if factory is None:
            raise NoFactoryError(role)
        try:
            return factory()
        except Exception as exc:
            raise FactoryError(role, exc) from exc


def pymysql_factory(params: DbConnectionParams) -> ConnectionFactory:
    """Build a factory opening PyMySQL connections with ``params``."""

    def _connect() -> PooledConnection:
        kwargs: dict[str, object] = {
            "user": params.user,
            "password": params.password,
            "charset": params.charset,
            "connect_timeout": params.connect_timeout,
            "autocommit": False,
        }
        if params.unix_socket:
            kwargs["unix_socket"] = params.unix_socket
        else:
            kwargs["host"] = params.host
            kwargs["port"] = params.port
        if params.database:
            kwargs["database"] = params.database
        return pymysql.connect(**kwargs)

    return _connect


__all__ = [
    "ConnectionFactories",
    "ConnectionFactory",
    "PooledConnection",
    "pymysql_factory",
]
