import sqlite3

from dbscript.constants import EXECUTE_FAILED, SUCCESS_NO_INFO
from dbscript.scripts.statement import DBAPIStatement


class MultiCursor:
    """Cursor whose single execute yields several chained results."""

    def __init__(self, sets):
        self._sets = sets
        self._i = 0
        self.fetched = 0

    def execute(self, sql):
        self._i = 0

    @property
    def description(self):
        return [("col",)] if self._sets[self._i] == "rs" else None

    @property
    def rowcount(self):
        current = self._sets[self._i]
        return -1 if current == "rs" else current

    def fetchall(self):
        self.fetched += 1
        return []

    def nextset(self):
        if self._i + 1 < len(self._sets):
            self._i += 1
            return True
        return None

    def close(self):
        pass


class MultiConn:
    def __init__(self, sets):
        self.cur = MultiCursor(sets)

    def cursor(self):
        return self.cur


def test_chained_results_follow_nextset():
    conn = MultiConn(["rs", 4, 0])
    st = DBAPIStatement(conn)

    assert st.execute("CALL p()") is True
    assert st.update_count() == -1
    assert st.more_results() is False
    assert st.update_count() == 4
    assert st.more_results() is False
    assert st.update_count() == 0
    assert st.more_results() is False
    assert st.update_count() == -1
    assert conn.cur.fetched == 1


def test_driver_error_defaults_to_exception():
    assert DBAPIStatement(MultiConn([0])).driver_error is Exception


def test_driver_error_from_connection(sqlite_conn):
    assert DBAPIStatement(sqlite_conn).driver_error is sqlite3.Error


def test_batch_statuses(sqlite_conn):
    sqlite_conn.execute("CREATE TABLE t (id INT PRIMARY KEY)")
    st = DBAPIStatement(sqlite_conn)
    for sql in [
        "CREATE TABLE u (id INT)",
        "INSERT INTO t VALUES (1)",
        "SELECT * FROM t",
        "INSERT INTO t VALUES (1)",
        "INSERT INTO t VALUES (2)",
    ]:
        st.add_batch(sql)

    statuses = st.execute_batch()

    assert statuses == [SUCCESS_NO_INFO, 1, SUCCESS_NO_INFO, EXECUTE_FAILED]
    assert isinstance(st.batch_error(3), sqlite3.IntegrityError)
    assert st.batch_error(0) is None
    assert sqlite_conn.execute("SELECT id FROM t").fetchall() == [(1,)]
    # the queue was consumed
    assert st.execute_batch() == []
