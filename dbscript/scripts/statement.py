"""
Statement handles: the only thing the executors know about the database.

:class:`StatementHandle` mirrors the small slice of a JDBC ``Statement``
the executors rely on (plain execution with chained results, plus
batches that report one status per statement).  :class:`DBAPIStatement`
provides it on top of any PEP 249 connection.
"""
from __future__ import annotations
import sys
import typing as t

from dbscript.constants import EXECUTE_FAILED, NO_MORE_RESULTS, SUCCESS_NO_INFO


class StatementHandle(t.Protocol):
    #: exception type(s) the driver raises for rejected statements
    driver_error: type[BaseException] | tuple[type[BaseException], ...]

    def execute(self, sql: str) -> bool:
        """Run *sql*; ``True`` when the first result is a result set."""

    def update_count(self) -> int:
        """Rows affected by the current result, ``-1`` when there is none."""

    def more_results(self) -> bool:
        """Advance to the next result; ``True`` when it is a result set."""

    def add_batch(self, sql: str) -> None: ...

    def execute_batch(self) -> list[int]:
        """Submit the queued statements and return one status per statement."""

    def batch_error(self, index: int) -> BaseException | None: ...

    def clear_batch(self) -> None: ...

    def close(self) -> None: ...


def _driver_error(conn: t.Any) -> type[BaseException]:
    """
    The driver's base ``Error`` class: the optional PEP 249 connection
    attribute, else the nearest enclosing module that defines one
    (``mysql.connector.connection_cext`` -> ``mysql.connector``).
    """
    err = getattr(conn, "Error", None)
    if isinstance(err, type) and issubclass(err, BaseException):
        return err
    parts = type(conn).__module__.split(".")
    while parts:
        err = getattr(sys.modules.get(".".join(parts)), "Error", None)
        if isinstance(err, type) and issubclass(err, BaseException):
            return err
        parts.pop()
    return Exception


class DBAPIStatement:
    """
    :class:`StatementHandle` over a DB‑API 2.0 connection (mysql‑connector,
    sqlite3, ...).

    Result sets are fetched and thrown away so the connection is ready for
    the next statement.  Chained results are followed through
    ``cursor.nextset()`` on drivers that implement it; elsewhere a
    statement has exactly one result.
    """

    def __init__(self, conn: t.Any) -> None:
        self.driver_error = _driver_error(conn)
        self._cursor = conn.cursor()
        self._batch: list[str] = []
        self._errors: dict[int, BaseException] = {}
        self._has_result: bool = False

    def _take_result(self) -> bool:
        self._has_result = True
        if self._cursor.description is not None:
            self._cursor.fetchall()
            return True
        return False

    def execute(self, sql: str) -> bool:
        self._cursor.execute(sql)
        return self._take_result()

    def update_count(self) -> int:
        if not self._has_result or self._cursor.description is not None:
            return NO_MORE_RESULTS
        count = self._cursor.rowcount
        return count if count is not None and count >= 0 else NO_MORE_RESULTS

    def more_results(self) -> bool:
        nextset = getattr(self._cursor, "nextset", None)
        if nextset is not None and nextset():
            return self._take_result()
        self._has_result = False
        return False

    # ------------------------------------------------------------------ #
    # Batches
    # ------------------------------------------------------------------ #
    def add_batch(self, sql: str) -> None:
        self._batch.append(sql)

    def clear_batch(self) -> None:
        self._batch = []

    def batch_error(self, index: int) -> BaseException | None:
        return self._errors.get(index)

    def execute_batch(self) -> list[int]:
        """
        Run the queued statements in order.  The first rejected statement
        is reported as ``EXECUTE_FAILED`` and nothing after it is sent.
        """
        batch, self._batch = self._batch, []
        self._errors = {}
        statuses: list[int] = []

        for index, sql in enumerate(batch):
            try:
                self._cursor.execute(sql)
            except self.driver_error as exc:
                self._errors[index] = exc
                statuses.append(EXECUTE_FAILED)
                break
            if self._take_result():
                statuses.append(SUCCESS_NO_INFO)
            else:
                count = self._cursor.rowcount
                statuses.append(count if count is not None and count >= 0 else SUCCESS_NO_INFO)
        self._has_result = False
        return statuses

    def close(self) -> None:
        self._cursor.close()
