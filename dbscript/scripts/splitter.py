"""
Split script text into statements on a plain delimiter string.

The splitter knows nothing about SQL: a delimiter at the end of the
accumulated text closes a statement even when it sits inside a string
literal or a comment.  Scripts that need the delimiter inside a statement
(stored procedures, triggers) must pick a different delimiter, e.g. ``/``
or ``GO``, on a line of its own.
"""
from __future__ import annotations
import io
import typing as t

from dbscript.constants import DEFAULT_DELIMITER


def split_statements(
    lines: t.Iterable[str],
    delimiter: str = DEFAULT_DELIMITER,
    *,
    strip_lines: bool = False,
) -> t.Iterator[str]:
    """
    Lazily yield the statements found in *lines*.

    Each line is appended to the buffer after a ``"\\n"``; whenever the
    buffer ends with *delimiter* it is emitted without the delimiter and
    reset.  Whatever is left at the end is emitted as-is if it holds
    anything but whitespace.

    Lines are appended untouched, so ``"SELECT 1;  "`` (trailing blanks)
    does **not** close a statement.  ``strip_lines=True`` trims every line
    first.
    """
    if not delimiter:
        raise ValueError("delimiter must not be empty")

    buf = ""
    for line in lines:
        if strip_lines:
            line = line.strip()
        buf += "\n" + line
        if buf.endswith(delimiter):
            yield buf[: len(buf) - len(delimiter)]
            buf = ""

    if buf.strip():
        yield buf


def split_sql(
    sql: str,
    delimiter: str = DEFAULT_DELIMITER,
    *,
    strip_lines: bool = False,
) -> list[str]:
    """
    Split an in-memory script; same rules as :func:`split_statements`.

    Only LF, CRLF and CR end a line, as when reading a script file.
    """
    lines = (line.rstrip("\n") for line in io.StringIO(sql, newline=None))
    return list(split_statements(lines, delimiter, strip_lines=strip_lines))
