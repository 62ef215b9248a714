import mysql.connector
import pytest
from mysql.connector import errorcode

from src.lesson_scheduler.lesson_scheduler.core.exceptions import TransientStorageError
from src.lesson_scheduler.lesson_scheduler.database.mysql_base import transaction


class _FakeCursor:
    def close(self):
        pass


class _FakeConn:
    def __init__(self):
        self.isolation_level = None
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def start_transaction(self, isolation_level=None):
        self.isolation_level = isolation_level

    def cursor(self, dictionary=False):
        return _FakeCursor()

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class _Factory:
    def __init__(self):
        self.conn = _FakeConn()

    def connect(self):
        return self.conn


def test_commits_at_read_committed():
    factory = _Factory()

    with transaction(factory):
        pass

    assert factory.conn.isolation_level == "READ COMMITTED"
    assert factory.conn.committed and factory.conn.closed


@pytest.mark.parametrize("errno", [errorcode.ER_LOCK_DEADLOCK, errorcode.ER_LOCK_WAIT_TIMEOUT])
def test_lock_errors_become_transient(errno):
    factory = _Factory()

    with pytest.raises(TransientStorageError):
        with transaction(factory):
            raise mysql.connector.Error(msg="lock", errno=errno)

    assert factory.conn.rolled_back and not factory.conn.committed


def test_other_mysql_errors_propagate_unchanged():
    factory = _Factory()

    with pytest.raises(mysql.connector.Error) as exc:
        with transaction(factory):
            raise mysql.connector.Error(msg="syntax", errno=errorcode.ER_PARSE_ERROR)

    assert not isinstance(exc.value, TransientStorageError)
    assert factory.conn.rolled_back
