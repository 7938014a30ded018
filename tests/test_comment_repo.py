"""Unit tests for CommentRepository against the fake pool."""

from __future__ import annotations

from datetime import datetime, timezone

import psycopg2
import pytest

from db.connection import StorageContext
from db.errors import (
    InsertError,
    InvalidReferenceError,
    NotInitializedError,
    ParentNotFoundError,
    QueryError,
)
from models.comment import Comment
from repositories.comment_repo import CommentRepository

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
BUG_ROW = (1, "Crash on save", "", "open", "medium", T0, T0)


@pytest.fixture
def repo(context) -> CommentRepository:
    return CommentRepository(context)


@pytest.mark.parametrize("bad_ref", ["abc", "", "1a", "-1", "0", 0, True, 1.5, None])
def test_create_rejects_malformed_reference(repo, fake_db, bad_ref):
    with pytest.raises(InvalidReferenceError):
        repo.create(bad_ref, Comment(content="hi"))
    fake_db.cur.execute.assert_not_called()


def test_create_missing_parent_never_inserts(repo, fake_db):
    fake_db.cur.fetchone.return_value = None

    with pytest.raises(ParentNotFoundError, match="bug 5 not found"):
        repo.create("5", Comment(content="hi"))

    assert fake_db.cur.execute.call_count == 1
    assert fake_db.cur.execute.call_args.args[0].lstrip().startswith("SELECT")


def test_create_inserts_and_populates_fields(repo, fake_db):
    fake_db.cur.fetchone.side_effect = [BUG_ROW, (4,)]
    comment = repo.create("1", Comment(content="hi", author="ana"))

    assert comment.id == 4
    assert comment.bug_id == 1
    assert comment.created_at is not None
    insert_params = fake_db.cur.execute.call_args.args[1]
    assert insert_params[:3] == (1, "hi", "ana")


def test_create_failure_is_insert_error(repo, fake_db):
    fake_db.cur.fetchone.return_value = BUG_ROW
    fake_db.cur.execute.side_effect = [None, psycopg2.IntegrityError("fk violation")]

    with pytest.raises(InsertError, match="failed to insert comment"):
        repo.create(1, Comment(content="hi"))
    fake_db.conn.rollback.assert_called_once()


def test_get_by_bug_maps_rows(repo, fake_db):
    fake_db.cur.fetchone.return_value = BUG_ROW
    fake_db.cur.fetchall.return_value = [
        (1, 1, "first", "ana", T0),
        (2, 1, "second", "bo", T0),
    ]

    comments = repo.get_by_bug("1")

    assert comments == [
        Comment(id=1, bug_id=1, content="first", author="ana", created_at=T0),
        Comment(id=2, bug_id=1, content="second", author="bo", created_at=T0),
    ]
    assert fake_db.cur.execute.call_args.args[1] == (1,)


def test_get_by_bug_without_comments_is_empty(repo, fake_db):
    fake_db.cur.fetchone.return_value = BUG_ROW
    fake_db.cur.fetchall.return_value = []
    assert repo.get_by_bug(1) == []


def test_get_by_bug_missing_parent(repo, fake_db):
    fake_db.cur.fetchone.return_value = None
    with pytest.raises(ParentNotFoundError):
        repo.get_by_bug(1)


def test_get_by_bug_failure_is_query_error(repo, fake_db):
    fake_db.cur.fetchone.return_value = BUG_ROW
    fake_db.cur.execute.side_effect = [None, psycopg2.OperationalError("gone")]
    with pytest.raises(QueryError):
        repo.get_by_bug(1)


def test_requires_initialized_context():
    repo = CommentRepository(StorageContext(dsn="postgresql://u@h/db"))
    with pytest.raises(NotInitializedError):
        repo.get_by_bug(1)
