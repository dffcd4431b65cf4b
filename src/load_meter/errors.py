"""
Error taxonomy for the load meter core.

Storage and lookup failures are raised as typed exceptions so that the API
layer can translate them into HTTP responses and the reset cycle can collect
them per period kind.

CHANGELOG:
- 2026-10-12: Add UnknownTenant for resolver id validation (STORY-006)
- 2026-10-09: Initial creation (STORY-002)

TODO:
- None
"""

from __future__ import annotations


class LoadMeterError(Exception):
    """Base class for all load meter errors."""


class ConnectionFailure(LoadMeterError):
    """Tenant storage could not be reached; no state was changed."""

    def __init__(self, tenant: str, reason: str) -> None:
        self.tenant = tenant
        self.reason = reason
        super().__init__(f"Storage for tenant '{tenant}' unreachable: {reason}")


class UnknownTenant(LoadMeterError):
    """Tenant identifier is not a valid storage namespace."""

    def __init__(self, tenant: str) -> None:
        self.tenant = tenant
        super().__init__(f"Invalid tenant identifier '{tenant}'")


class UnknownSocket(LoadMeterError):
    """No counter row is provisioned for the socket in the given load class."""

    def __init__(self, load_class: str, socket_id: str) -> None:
        self.load_class = load_class
        self.socket_id = socket_id
        super().__init__(
            f"Socket '{socket_id}' is not provisioned for load class '{load_class}'"
        )


class ResetPartialFailure(LoadMeterError):
    """One or more load tables failed to zero during a period reset.

    Attributes:
        kind: Period kind that was being reset.
        failures: List of ``(table_name, message)`` pairs, one per failed table.
    """

    def __init__(self, kind: str, failures: list[tuple[str, str]]) -> None:
        self.kind = kind
        self.failures = failures
        tables = ", ".join(table for table, _ in failures)
        super().__init__(f"{kind.capitalize()} reset failed for: {tables}")


class InvalidInterval(LoadMeterError):
    """Unsupported interval selector on the read path."""

    def __init__(self, selector: str) -> None:
        self.selector = selector
        super().__init__(f"Unsupported interval selector '{selector}'")
