"""Exceptions raised by host controllers."""

from __future__ import annotations

from typing import Any, Sequence


class HostControlError(RuntimeError):
    """Base class for every failure reported by a host controller."""


class NotAReplicaError(HostControlError):
    """Raised when the host has no configured master."""

    def __init__(self, message: str = "no master configured, not a replica") -> None:
        super().__init__(message)


class QueryFailedError(HostControlError):
    """Raised when a query against the host fails."""


class NoStatusError(HostControlError):
    """Raised when no replication status is known."""


class NoSchemaError(HostControlError):
    """Raised when no schema is available for a database."""


class SchemaFilterError(HostControlError):
    """Raised when a table filter pattern cannot be compiled."""


class StatusMismatchError(HostControlError):
    """Raised when a reparent status does not equal the expected one."""

    def __init__(self, expected: Any, actual: Any) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"wrong status for build_start_replication_commands: expected {expected!r} got {actual!r}"
        )


class StatementMismatchError(HostControlError):
    """Raised when an admin statement batch does not match expectations."""

    def __init__(self, reason: str, expected: Sequence[str], actual: Sequence[str]) -> None:
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        super().__init__(
            f"{reason} for execute_admin_statements: expected {list(self.expected)!r} got {list(self.actual)!r}"
        )


class NoFactoryError(HostControlError):
    """Raised when no connection factory is set for a role."""

    def __init__(self, role: Any) -> None:
        self.role = role
        super().__init__(f"no connection factory set for role '{getattr(role, 'value', role)}'")


class FactoryError(HostControlError):
    """Raised when a connection factory fails; the cause is chained."""

    def __init__(self, role: Any, cause: BaseException) -> None:
        self.role = role
        self.cause = cause
        super().__init__(
            f"connection factory for role '{getattr(role, 'value', role)}' failed: {cause}"
        )


class WaitCancelledError(HostControlError):
    """Raised when waiting for a reparent journal entry hits its deadline."""

    def __init__(self, time_created_ns: int, timeout: float | None = None) -> None:
        self.time_created_ns = time_created_ns
        self.timeout = timeout
        super().__init__(
            f"gave up waiting for reparent journal entry {time_created_ns} after {timeout}s"
        )


__all__ = [
    "FactoryError",
    "HostControlError",
    "NoFactoryError",
    "NoSchemaError",
    "NoStatusError",
    "NotAReplicaError",
    "QueryFailedError",
    "SchemaFilterError",
    "StatementMismatchError",
    "StatusMismatchError",
    "WaitCancelledError",
]
