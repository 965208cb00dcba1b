"""
Shared pytest configuration and fixtures for all tests.

Key fixtures:
- users / posts: writable tables used across the builder suites.
- active_users / editable_users: a read-only view and an updatable view.
- schema: Schema registry holding all of the above.
- fake_executor: recording Executor that returns canned results.
- sqlite_executor: SQLAlchemyExecutor on an in-memory SQLite database
  with the users and posts tables created.
"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path to enable importing project modules
# This allows tests to import from 'core', 'models', 'sql', etc. without installation
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from sqlalchemy import create_engine

from models.column import Column, ColumnKind
from models.table import Schema, Table, View
from sql.executor import SQLAlchemyExecutor, StatementResult


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests - isolated function-level tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interactions")
    config.addinivalue_line("markers", "smoke: Smoke tests - basic functionality checks")
    config.addinivalue_line("markers", "edge_case: Edge case tests - boundary conditions")


# ====================
# Mock Helper Classes
# ====================

class FakeExecutor:
    """Recording executor returning canned results."""
    def __init__(self):
        self.rows = []
        self.rowcount = 0
        self.last_id = None
        self.prepared = []
        self.executed = []
        self.transaction_active = False
        self.transaction_log = []

    def prepare(self, sql):
        self.prepared.append(sql)
        return sql

    def execute(self, statement, parameters):
        self.executed.append((statement, dict(parameters)))
        rowcount = len(self.rows) if self.rows else self.rowcount
        return StatementResult(rows=list(self.rows), rowcount=rowcount, last_insert_id=self.last_id)

    def last_insert_identity(self):
        return self.last_id

    def begin_transaction(self):
        self.transaction_active = True
        self.transaction_log.append('begin')
        return True

    def commit(self):
        self.transaction_active = False
        self.transaction_log.append('commit')
        return True

    def rollback(self):
        self.transaction_active = False
        self.transaction_log.append('rollback')
        return True

    def in_transaction(self):
        return self.transaction_active

    @property
    def last_sql(self):
        return self.executed[-1][0]

    @property
    def last_params(self):
        return self.executed[-1][1]


# ====================
# Fixtures
# ====================

@pytest.fixture
def users():
    """Writable users(id, name, email) table."""
    return Table(
        'users',
        Column('id', ColumnKind.INT, auto_increment=True, primary_key=True),
        Column('name', nullable=False),
        Column('email', max_length=320),
    )


@pytest.fixture
def posts():
    """Writable posts(id, user_id, title, published) table."""
    return Table(
        'posts',
        Column('id', ColumnKind.INT, auto_increment=True, primary_key=True),
        Column('user_id', ColumnKind.INT),
        Column('title'),
        Column('published', ColumnKind.BOOL, default=False),
    )


@pytest.fixture
def active_users():
    """Read-only view."""
    return View('active_users', Column('id', ColumnKind.INT), Column('name'))


@pytest.fixture
def editable_users():
    """View explicitly marked updatable."""
    return View('editable_users', Column('id', ColumnKind.INT), Column('name'), updatable=True)


@pytest.fixture
def schema(users, posts, active_users, editable_users):
    return Schema(users, posts, active_users, editable_users)


@pytest.fixture
def fake_executor():
    return FakeExecutor()


@pytest.fixture
def sqlite_executor():
    """SQLAlchemyExecutor bound to an in-memory SQLite database with sample tables."""
    engine = create_engine('sqlite://')
    connection = engine.connect()
    connection.exec_driver_sql(
        "CREATE TABLE users ("
        "id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL, email TEXT)"
    )
    connection.exec_driver_sql(
        "CREATE TABLE posts ("
        "id INTEGER PRIMARY KEY AUTOINCREMENT, user_id INTEGER, title TEXT, published BOOLEAN)"
    )
    connection.commit()

    executor = SQLAlchemyExecutor(connection)
    yield executor

    if not connection.closed:
        executor.close()
    engine.dispose()
