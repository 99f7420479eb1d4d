"""
Failures raised while reading and executing SQL scripts.

Every error here is fatal for the current run: nothing is retried and
nothing already executed is rolled back.
"""
from __future__ import annotations
import pathlib


class ScriptReadError(RuntimeError):
    """A script could not be decompressed or decoded."""

    def __init__(self, path: pathlib.Path, reason: str) -> None:
        super().__init__(f"{path.name}: {reason}")
        self.path: pathlib.Path = path


class StatementExecutionError(RuntimeError):
    """
    A statement was rejected by the database.

    ``statement`` is the exact SQL text that was sent.  ``position`` is the
    index of the statement inside its batch, or ``None`` when statements
    are executed one at a time.  The driver exception (when there is one)
    is chained as ``__cause__`` and its vendor ``errno`` / ``sqlstate`` are
    copied onto this error.
    """

    def __init__(
        self,
        message: str,
        statement: str,
        *,
        position: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.statement: str = statement
        self.position: int | None = position
        self.errno: int | None = getattr(cause, "errno", None)
        self.sqlstate: str | None = getattr(cause, "sqlstate", None)

    @classmethod
    def wrap(cls, exc: BaseException, statement: str) -> "StatementExecutionError":
        """Append the offending SQL to the driver's message."""
        return cls(f"{exc}\n\nSQL:\n{statement}", statement, cause=exc)
