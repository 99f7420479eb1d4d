"""
Send statements to the database, one at a time or in batches.
"""
from __future__ import annotations
import logging
import typing as t

from dbscript.constants import EXECUTE_FAILED, NO_MORE_RESULTS, SUCCESS_NO_INFO
from dbscript.errors import StatementExecutionError
from dbscript.scripts.statement import StatementHandle

log = logging.getLogger(__name__)


def execute_statement(st: StatementHandle, sql: str) -> None:
    """
    Execute one statement and drain every result it produces.

    Result sets are not printed, only warned about; update counts are
    logged.  A driver error is re-raised as
    :class:`StatementExecutionError` with *sql* appended to its message.
    """
    log.debug("    executing:\n%s", sql)
    try:
        is_result_set = st.execute(sql)
    except st.driver_error as exc:
        raise StatementExecutionError.wrap(exc, sql) from exc

    while True:
        if is_result_set:
            log.warning(" statement returned a resultset")
        else:
            count = st.update_count()
            if count == NO_MORE_RESULTS:
                break
            log.debug("    %d row(s) updated", count)
        is_result_set = st.more_results()


def execute_batch(st: StatementHandle, statements: t.Sequence[str]) -> list[int]:
    """
    Submit *statements* as one batch and check the status of each.

    Statements before a failed one have already been applied; nothing is
    rolled back.  The handle's batch is cleared whatever happens.
    """
    if not statements:
        return []

    log.debug("Executing batch")
    try:
        for sql in statements:
            st.add_batch(sql)
        statuses = st.execute_batch()
    except st.driver_error as exc:
        raise StatementExecutionError(
            f"Error executing batch: {exc}", "\n".join(statements), cause=exc
        ) from exc
    finally:
        st.clear_batch()

    log.debug("    %d statement(s) executed", len(statuses))
    for i, status in enumerate(statuses):
        if status == SUCCESS_NO_INFO:
            log.debug("    statement %d processed successfully without return results", i)
        elif status == EXECUTE_FAILED:
            sql = statements[i]
            log.error("    error during batch execution of statement: %s", sql)
            cause = st.batch_error(i)
            raise StatementExecutionError(
                f"Error executing: {sql}", sql, position=i, cause=cause
            ) from cause
        elif status >= 0:
            log.debug("    statement %d processed successfully with %d records affected", i, status)
    return statuses
