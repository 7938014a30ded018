"""Shared pytest fixtures: a fake psycopg2 pool so unit tests need no server."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from db.connection import StorageContext


@pytest.fixture
def fake_db():
    """Patch ThreadedConnectionPool with a mock pool handing out one mock connection.

    Yields a namespace with:
    - pool_cls: the patched class (inspect constructor calls)
    - pool: the pool instance returned by the class
    - conn: the connection returned by pool.getconn()
    - cur: the cursor yielded by ``with conn.cursor() as cur``
    """
    cur = MagicMock(name="cursor")
    conn = MagicMock(name="connection")
    conn.cursor.return_value.__enter__.return_value = cur
    fake_pool = MagicMock(name="pool")
    fake_pool.getconn.return_value = conn

    with patch("db.connection.pool.ThreadedConnectionPool", return_value=fake_pool) as pool_cls:
        yield SimpleNamespace(pool_cls=pool_cls, pool=fake_pool, conn=conn, cur=cur)


@pytest.fixture
def context(fake_db) -> StorageContext:
    """An initialized StorageContext backed by the fake pool.

    Mocks are reset after init() so tests only see their own calls.
    """
    ctx = StorageContext(dsn="postgresql://test@localhost/test")
    ctx.init()
    fake_db.cur.reset_mock()
    fake_db.conn.reset_mock()
    fake_db.conn.cursor.return_value.__enter__.return_value = fake_db.cur
    fake_db.pool.getconn.reset_mock()
    fake_db.pool.putconn.reset_mock()
    yield ctx
    ctx.cleanup()
