from __future__ import annotations

from datetime import time, timedelta

import pytest

from src.attendance_tracking.attendance_tracking.database.bootstrap import sql_statements
from src.attendance_tracking.attendance_tracking.database.connection import DatabaseConnection, DBConfig
from src.attendance_tracking.attendance_tracking.database.mysql_base import branch_start_time, db_cursor


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn

    def execute(self, sql, params=None):
        self.conn.executed.append(sql)

    def close(self):
        pass


class FakeConnection:
    def __init__(self):
        self.executed: list[str] = []
        self.calls: list[str] = []

    def cursor(self, dictionary=True):
        return FakeCursor(self)

    def start_transaction(self):
        self.calls.append("begin")

    def commit(self):
        self.calls.append("commit")

    def rollback(self):
        self.calls.append("rollback")

    def close(self):
        self.calls.append("close")


class FakeDatabase(DatabaseConnection):
    def __init__(self):
        super().__init__(DBConfig.from_dict({}))
        self.opened: list[FakeConnection] = []

    def connect(self):
        conn = FakeConnection()
        self.opened.append(conn)
        return conn


def test_each_call_commits_on_its_own_outside_a_transaction():
    db = FakeDatabase()

    for sql in ("UPDATE a", "UPDATE b"):
        with db_cursor(db) as (_, cur):
            cur.execute(sql)

    assert len(db.opened) == 2
    assert [c.calls for c in db.opened] == [["commit", "close"], ["commit", "close"]]


def test_calls_inside_a_transaction_share_one_commit():
    db = FakeDatabase()

    with db.transaction():
        with db_cursor(db) as (_, cur):
            cur.execute("INSERT INTO break_records")
        with db.transaction():
            with db_cursor(db) as (_, cur):
                cur.execute("UPDATE attendance_records")

    assert len(db.opened) == 1
    conn = db.opened[0]
    assert conn.executed == ["INSERT INTO break_records", "UPDATE attendance_records"]
    assert conn.calls == ["begin", "commit", "close"]
    assert db.active() is None


def test_failure_inside_a_transaction_rolls_back_everything():
    db = FakeDatabase()

    with pytest.raises(RuntimeError):
        with db.transaction():
            with db_cursor(db) as (_, cur):
                cur.execute("INSERT INTO break_records")
            raise RuntimeError("second write failed")

    assert db.opened[0].calls == ["begin", "rollback", "close"]
    assert db.active() is None


def test_sql_statements_skip_database_selection_and_comments():
    text = """
CREATE DATABASE IF NOT EXISTS attendance_db;
USE attendance_db;
-- branches
CREATE TABLE branches (
    branch_id INT PRIMARY KEY
);
INSERT INTO branches(branch_id) VALUES (1);
"""

    assert list(sql_statements(text)) == [
        "CREATE TABLE branches (\n    branch_id INT PRIMARY KEY\n)",
        "INSERT INTO branches(branch_id) VALUES (1)",
    ]


@pytest.mark.parametrize(
    "value, expected",
    [
        (timedelta(hours=8, minutes=30), time(8, 30)),
        (time(9, 0), time(9, 0)),
        ("07:45:00", time(7, 45)),
        (None, None),
    ],
)
def test_branch_start_time(value, expected):
    assert branch_start_time(value) == expected
