"""Backend capability contract consumed by `SQLEventStore`.

Any relational engine can back the store as long as it offers prepared
statements returning row mappings, plus plain statement execution used
for transaction control and DDL. Failures are reported as unsuccessful
results rather than raised; the store turns them into `DatabaseError`.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field


class DatabaseResult(BaseModel):
    """Outcome of a prepared statement.

    Attributes:
        success: Whether the statement ran.
        results: Returned rows as column-name mappings.
        error: Backend error description when ``success`` is False.
    """

    success: bool
    results: list[dict[str, Any]] | None = Field(default=None)
    error: str | None = None


class ExecResult(BaseModel):
    """Outcome of a plain statement."""

    success: bool
    error: str | None = None


class PreparedStatement(ABC):
    """A statement with ``?`` placeholders, optionally bound to parameters."""

    @abstractmethod
    def bind(self, *values: Any) -> "PreparedStatement":
        """Bind positional parameters.

        Returns:
            The statement to execute. Implementations may return ``self``
            or a new statement; callers always use the returned one.
        """
        ...

    @abstractmethod
    async def all(self) -> DatabaseResult:
        """Execute the statement and collect every returned row."""
        ...


class Database(ABC):
    """Handle on a relational backend.

    ``exec`` is also used for ``BEGIN IMMEDIATE TRANSACTION``, ``COMMIT``
    and ``ROLLBACK``. The transaction must isolate the statements issued
    through the same handle from concurrent writers until it ends.
    """

    @abstractmethod
    def prepare(self, sql: str) -> PreparedStatement:
        ...

    @abstractmethod
    async def exec(self, sql: str) -> ExecResult:
        ...
