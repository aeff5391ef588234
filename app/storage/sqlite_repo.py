from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from app.core.errors import UpstreamFetchError
from app.core.models import User, Livestream
from app.storage.migrations import SQLiteMigrationRunner, run_migrations

logger = logging.getLogger(__name__)


def _ensure_dir(path: str) -> None:
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)


class SQLiteSnapshot:
    def __init__(self, con: sqlite3.Connection) -> None:
        self._con = con

    def _all(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        try:
            return self._con.execute(sql, params).fetchall()
        except sqlite3.Error as ex:
            raise UpstreamFetchError(f"sqlite query failed: {ex}") from ex

    def _one(self, sql: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        rows = self._all(sql, params)
        return rows[0] if rows else None

    def _scalar(self, sql: str, params: tuple = ()) -> int:
        row = self._one(sql, params)
        return int(row[0]) if row and row[0] is not None else 0

    def _mapping(self, sql: str) -> Dict[int, int]:
        return {int(r[0]): int(r[1]) for r in self._all(sql)}

    # --- population ---
    def find_user_by_name(self, name: str) -> Optional[User]:
        row = self._one("SELECT id,name,display_name FROM users WHERE name=?", (name,))
        if row is None:
            return None
        return User(id=row["id"], name=row["name"], display_name=row["display_name"])

    def find_livestream(self, livestream_id: int) -> Optional[Livestream]:
        row = self._one("SELECT id,user_id,title FROM livestreams WHERE id=?", (livestream_id,))
        if row is None:
            return None
        return Livestream(id=row["id"], user_id=row["user_id"], title=row["title"])

    def list_users(self) -> Sequence[User]:
        rows = self._all("SELECT id,name,display_name FROM users")
        return [User(id=r["id"], name=r["name"], display_name=r["display_name"]) for r in rows]

    def list_livestreams(self) -> Sequence[Livestream]:
        rows = self._all("SELECT id,user_id,title FROM livestreams")
        return [Livestream(id=r["id"], user_id=r["user_id"], title=r["title"]) for r in rows]

    # --- score facts ---
    def count_reactions_by_user(self) -> Dict[int, int]:
        return self._mapping(
            """
            SELECT l.user_id, COUNT(r.id)
            FROM livestreams l
            INNER JOIN reactions r ON r.livestream_id = l.id
            GROUP BY l.user_id
            """
        )

    def sum_tips_by_user(self) -> Dict[int, int]:
        return self._mapping(
            """
            SELECT l.user_id, IFNULL(SUM(lc.tip), 0)
            FROM livestreams l
            INNER JOIN livecomments lc ON lc.livestream_id = l.id
            GROUP BY l.user_id
            """
        )

    def count_reactions_by_livestream(self) -> Dict[int, int]:
        return self._mapping("SELECT livestream_id, COUNT(id) FROM reactions GROUP BY livestream_id")

    def sum_tips_by_livestream(self) -> Dict[int, int]:
        return self._mapping("SELECT livestream_id, IFNULL(SUM(tip), 0) FROM livecomments GROUP BY livestream_id")

    # --- per-user facts ---
    def count_viewers_for_user(self, user_id: int) -> int:
        return self._scalar(
            """
            SELECT COUNT(h.id)
            FROM livestream_viewers_history h
            INNER JOIN livestreams l ON h.livestream_id = l.id
            WHERE l.user_id=?
            """,
            (user_id,),
        )

    def count_livecomments_for_user(self, user_id: int) -> int:
        return self._scalar(
            """
            SELECT COUNT(lc.id)
            FROM livecomments lc
            INNER JOIN livestreams l ON lc.livestream_id = l.id
            WHERE l.user_id=?
            """,
            (user_id,),
        )

    def count_emoji_for_user(self, user_id: int) -> Dict[str, int]:
        rows = self._all(
            """
            SELECT r.emoji_name, COUNT(*)
            FROM reactions r
            INNER JOIN livestreams l ON r.livestream_id = l.id
            WHERE l.user_id=?
            GROUP BY r.emoji_name
            """,
            (user_id,),
        )
        return {str(r[0]): int(r[1]) for r in rows}

    # --- per-livestream facts ---
    def count_viewers_for_livestream(self, livestream_id: int) -> int:
        return self._scalar("SELECT COUNT(id) FROM livestream_viewers_history WHERE livestream_id=?", (livestream_id,))

    def max_tip_for_livestream(self, livestream_id: int) -> int:
        return self._scalar("SELECT IFNULL(MAX(tip), 0) FROM livecomments WHERE livestream_id=?", (livestream_id,))

    def count_reports_for_livestream(self, livestream_id: int) -> int:
        return self._scalar("SELECT COUNT(id) FROM livecomment_reports WHERE livestream_id=?", (livestream_id,))


class SQLiteRepository:
    def __init__(self, *, db_path: str, migrations_dir: Optional[Path] = None) -> None:
        _ensure_dir(db_path)
        self._db_path = db_path
        if migrations_dir is not None:
            self._init_db(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self._db_path, timeout=30)
        con.row_factory = sqlite3.Row
        return con

    def _init_db(self, migrations_dir: Path) -> None:
        con = self._connect()
        try:
            run_migrations(runner=SQLiteMigrationRunner(con), migrations_dir=migrations_dir, db_type="sqlite")
        finally:
            con.close()

    @contextmanager
    def snapshot(self) -> Iterator[SQLiteSnapshot]:
        """One read transaction; everything read through it sees the same data."""
        try:
            con = self._connect()
        except sqlite3.Error as ex:
            raise UpstreamFetchError(f"failed to connect to sqlite: {ex}") from ex

        try:
            try:
                con.execute("BEGIN")
            except sqlite3.Error as ex:
                raise UpstreamFetchError(f"failed to begin read transaction: {ex}") from ex
            yield SQLiteSnapshot(con)
        finally:
            try:
                con.rollback()
            except sqlite3.Error:
                # Read-only transaction; keep the exception raised inside the block
                logger.warning("Failed to roll back sqlite read transaction", exc_info=True)
            finally:
                con.close()
