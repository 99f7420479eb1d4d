import sqlite3
from contextlib import contextmanager
from pathlib import Path

import pytest

from dbscript.config import ScriptOptions
from dbscript.constants import EXECUTE_FAILED, SUCCESS_NO_INFO


class FakeDriverError(Exception):
    def __init__(self, msg, errno=None, sqlstate=None):
        super().__init__(msg)
        self.errno = errno
        self.sqlstate = sqlstate


class FakeStatement:
    """
    Records everything sent to it.  ``results`` maps a (stripped) statement
    to the chain of results it produces: ``"rs"`` for a result set, an int
    for an update count.  Statements without an entry update one row.
    """

    driver_error = FakeDriverError

    def __init__(self, fail_on=(), results=None, no_info=()):
        self.fail_on = set(fail_on)
        self.no_info = set(no_info)
        self.results = results or {}
        self.executed = []
        self.batches = []
        self.cleared = 0
        self.closed = 0
        self._batch = []
        self._pending = []
        self._current = None
        self._errors = {}

    def _advance(self):
        if not self._pending:
            self._current = None
            return False
        self._current = self._pending.pop(0)
        return self._current == "rs"

    def execute(self, sql):
        self.executed.append(sql)
        if sql.strip() in self.fail_on:
            raise FakeDriverError("You have an error in your SQL syntax", 1064, "42000")
        self._pending = list(self.results.get(sql.strip(), [1]))
        return self._advance()

    def update_count(self):
        return self._current if isinstance(self._current, int) else -1

    def more_results(self):
        return self._advance()

    def add_batch(self, sql):
        self._batch.append(sql)

    def clear_batch(self):
        self.cleared += 1
        self._batch = []

    def batch_error(self, index):
        return self._errors.get(index)

    def execute_batch(self):
        batch, self._batch = self._batch, []
        self.batches.append(batch)
        self._errors = {}
        statuses = []
        for i, sql in enumerate(batch):
            if sql.strip() in self.fail_on:
                self._errors[i] = FakeDriverError("Duplicate entry", 1062, "23000")
                statuses.append(EXECUTE_FAILED)
                break
            self.executed.append(sql)
            statuses.append(SUCCESS_NO_INFO if sql.strip() in self.no_info else 1)
        return statuses

    def close(self):
        self.closed += 1


@pytest.fixture
def fake():
    return FakeStatement()


@pytest.fixture
def sqlite_conn():
    conn = sqlite3.connect(":memory:", isolation_level=None)
    yield conn
    conn.close()


@pytest.fixture
def options():
    def _make(**kw):
        return ScriptOptions(kw)
    return _make


@pytest.fixture
def scripts_dir(tmp_path):
    d = tmp_path / "scripts"
    d.mkdir()
    return d


def write_script(directory: Path, name: str, text: str, encoding="utf-8") -> Path:
    path = directory / name
    path.write_bytes(text.encode(encoding))
    return path


@contextmanager
def sqlite_connect(path):
    conn = sqlite3.connect(str(path), isolation_level=None)
    try:
        yield conn
    finally:
        conn.close()
