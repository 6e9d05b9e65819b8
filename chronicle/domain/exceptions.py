"""Exceptions raised by the event store."""

from enum import Enum


class StatementPhase(str, Enum):
    """Stage of a store operation in which a backend statement ran."""

    QUERY = "query"
    INSERT = "insert"
    BEGIN = "begin"
    COMMIT = "commit"
    ROLLBACK = "rollback"
    SCHEMA = "schema"


class ChronicleError(Exception):
    """Base class for all event store errors."""

    pass


class ConfigurationError(ChronicleError):
    """Raised when a store is constructed without a required collaborator."""

    pass


class UsageError(ChronicleError, ValueError):
    """Raised when a call is malformed, before any backend interaction.

    The typical cause is a scoped append that omits the expected maximum
    sequence number of its scope.
    """

    pass


class ConcurrencyError(ChronicleError):
    """Raised when an optimistic concurrency check fails.

    The scope's watermark moved between the caller's ``query()`` and its
    ``append()``: another writer committed an event that falls into the
    same scope. Nothing was written. Re-query the scope and retry with
    the fresh watermark.

    Attributes:
        expected: Watermark the caller observed.
        actual: Watermark found inside the append transaction.
    """

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Context changed between query and append: expected max sequence number "
            f"{expected}, got {actual}"
        )


class DatabaseError(ChronicleError):
    """Raised when the backend reports a failed statement.

    Attributes:
        phase: Which stage of the operation failed.
        detail: Backend-provided error description.
    """

    def __init__(self, phase: StatementPhase, detail: str | None = None) -> None:
        self.phase = phase
        self.detail = detail or "Unknown error"
        super().__init__(f"{phase.value} statement failed: {self.detail}")
