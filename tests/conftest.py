from __future__ import annotations

import sqlite3

import pytest

from app.core.statistics import StatisticsService
from app.storage.migrations import SQL_DIR
from app.storage.sqlite_repo import SQLiteRepository


class Seeder:
    """Writes platform rows straight into the test database."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _insert(self, sql: str, params: tuple) -> int:
        con = sqlite3.connect(self._db_path)
        try:
            cur = con.execute(sql, params)
            con.commit()
            return int(cur.lastrowid)
        finally:
            con.close()

    def user(self, name: str, display_name: str = "") -> int:
        return self._insert("INSERT INTO users(name, display_name) VALUES(?, ?)", (name, display_name or name))

    def livestream(self, user_id: int, title: str = "") -> int:
        return self._insert("INSERT INTO livestreams(user_id, title) VALUES(?, ?)", (user_id, title))

    def reaction(self, livestream_id: int, emoji_name: str, user_id: int = 0) -> int:
        return self._insert(
            "INSERT INTO reactions(user_id, livestream_id, emoji_name) VALUES(?, ?, ?)",
            (user_id, livestream_id, emoji_name),
        )

    def comment(self, livestream_id: int, tip: int = 0, user_id: int = 0) -> int:
        return self._insert(
            "INSERT INTO livecomments(user_id, livestream_id, comment, tip) VALUES(?, ?, ?, ?)",
            (user_id, livestream_id, "hi", tip),
        )

    def report(self, livestream_id: int, livecomment_id: int, user_id: int = 0) -> int:
        return self._insert(
            "INSERT INTO livecomment_reports(user_id, livestream_id, livecomment_id) VALUES(?, ?, ?)",
            (user_id, livestream_id, livecomment_id),
        )

    def view(self, livestream_id: int, user_id: int = 0) -> int:
        return self._insert(
            "INSERT INTO livestream_viewers_history(user_id, livestream_id) VALUES(?, ?)",
            (user_id, livestream_id),
        )


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "isupipe.db")


@pytest.fixture
def repo(db_path) -> SQLiteRepository:
    return SQLiteRepository(db_path=db_path, migrations_dir=SQL_DIR)


@pytest.fixture
def seed(repo, db_path) -> Seeder:
    return Seeder(db_path)


@pytest.fixture
def service(repo) -> StatisticsService:
    return StatisticsService(repo)
