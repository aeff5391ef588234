from __future__ import annotations

import sqlite3

import pytest

from app.core.errors import NotFoundError, UpstreamFetchError
from app.core.models import User, Livestream
from app.storage.migrations import SQL_DIR
from app.storage.sqlite_repo import SQLiteRepository


def test_migrations_are_recorded_once(db_path, repo):
    SQLiteRepository(db_path=db_path, migrations_dir=SQL_DIR)

    con = sqlite3.connect(db_path)
    try:
        versions = [r[0] for r in con.execute("SELECT version FROM schema_migrations")]
    finally:
        con.close()
    assert versions == ["001"]


def test_population_queries(repo, seed):
    alice = seed.user("alice", "Alice")
    ls = seed.livestream(alice, "hello")

    with repo.snapshot() as snap:
        assert snap.find_user_by_name("alice") == User(id=alice, name="alice", display_name="Alice")
        assert snap.find_user_by_name("bob") is None
        assert snap.find_livestream(ls) == Livestream(id=ls, user_id=alice, title="hello")
        assert snap.find_livestream(ls + 1) is None
        assert [u.name for u in snap.list_users()] == ["alice"]
        assert [x.id for x in snap.list_livestreams()] == [ls]


def test_score_fact_mappings(repo, seed):
    alice = seed.user("alice")
    bob = seed.user("bob")
    seed.user("carol")
    a1 = seed.livestream(alice)
    a2 = seed.livestream(alice)
    b1 = seed.livestream(bob)

    seed.reaction(a1, "fire")
    seed.reaction(a2, "fire")
    seed.reaction(b1, "heart")
    seed.comment(a1, tip=10)
    seed.comment(a2, tip=5)
    seed.comment(b1)

    with repo.snapshot() as snap:
        assert snap.count_reactions_by_user() == {alice: 2, bob: 1}
        assert snap.sum_tips_by_user() == {alice: 15, bob: 0}
        assert snap.count_reactions_by_livestream() == {a1: 1, a2: 1, b1: 1}
        assert snap.sum_tips_by_livestream() == {a1: 10, a2: 5, b1: 0}


def test_scalar_facts_default_to_zero(repo, seed):
    uid = seed.user("alice")
    ls = seed.livestream(uid)

    with repo.snapshot() as snap:
        assert snap.count_viewers_for_user(uid) == 0
        assert snap.count_livecomments_for_user(uid) == 0
        assert snap.count_emoji_for_user(uid) == {}
        assert snap.count_viewers_for_livestream(ls) == 0
        assert snap.max_tip_for_livestream(ls) == 0
        assert snap.count_reports_for_livestream(ls) == 0


def test_emoji_counts(repo, seed):
    uid = seed.user("alice")
    ls = seed.livestream(uid)
    seed.reaction(ls, "fire")
    seed.reaction(ls, "fire")
    seed.reaction(ls, "heart")

    with repo.snapshot() as snap:
        assert snap.count_emoji_for_user(uid) == {"fire": 2, "heart": 1}


def test_query_failure_is_upstream_error(tmp_path):
    repo = SQLiteRepository(db_path=str(tmp_path / "empty.db"))

    with repo.snapshot() as snap:
        with pytest.raises(UpstreamFetchError):
            snap.list_users()


class _RollbackFailsConnection(sqlite3.Connection):
    def rollback(self) -> None:
        raise sqlite3.OperationalError("disk I/O error")


def _connect_with_failing_rollback(db_path: str):
    def _connect():
        con = sqlite3.connect(db_path, timeout=30, factory=_RollbackFailsConnection)
        con.row_factory = sqlite3.Row
        return con

    return _connect


def test_failed_rollback_keeps_reads(repo, seed, db_path, monkeypatch):
    seed.user("alice")
    monkeypatch.setattr(repo, "_connect", _connect_with_failing_rollback(db_path))

    with repo.snapshot() as snap:
        users = snap.list_users()

    assert [u.name for u in users] == ["alice"]


def test_failed_rollback_does_not_hide_block_error(repo, db_path, monkeypatch):
    monkeypatch.setattr(repo, "_connect", _connect_with_failing_rollback(db_path))

    with pytest.raises(NotFoundError):
        with repo.snapshot():
            raise NotFoundError("not found user that has the given username")
