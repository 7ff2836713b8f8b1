"""Control contract for a single MySQL host, plus a scriptable fake."""

from __future__ import annotations

from .config import DbConnectionParams, HostConfig, ReplicationCredentials, load_config
from .connections import ConnectionFactories, ConnectionFactory, PooledConnection, pymysql_factory
from .daemon import MysqlDaemon
from .errors import (
    FactoryError,
    HostControlError,
    NoFactoryError,
    NoSchemaError,
    NoStatusError,
    NotAReplicaError,
    QueryFailedError,
    SchemaFilterError,
    StatementMismatchError,
    StatusMismatchError,
    WaitCancelledError,
)
from .fake import FakeMysqlDaemon, statements_match
from .models import (
    ConnectionRole,
    ReplicationPosition,
    ReplicationStatus,
    SchemaDefinition,
    TableDefinition,
)
from .mysqld import Mysqld

__all__ = [
    "ConnectionFactories",
    "ConnectionFactory",
    "ConnectionRole",
    "DbConnectionParams",
    "FactoryError",
    "FakeMysqlDaemon",
    "HostConfig",
    "HostControlError",
    "Mysqld",
    "MysqlDaemon",
    "NoFactoryError",
    "NoSchemaError",
    "NoStatusError",
    "NotAReplicaError",
    "PooledConnection",
    "QueryFailedError",
    "ReplicationCredentials",
    "ReplicationPosition",
    "ReplicationStatus",
    "SchemaDefinition",
    "SchemaFilterError",
    "StatementMismatchError",
    "StatusMismatchError",
    "TableDefinition",
    "WaitCancelledError",
    "load_config",
    "pymysql_factory",
    "statements_match",
]
