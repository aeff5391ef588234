from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from app.core.errors import UpstreamFetchError
from app.core.models import User, Livestream
from app.storage.migrations import PostgresMigrationRunner, run_migrations

logger = logging.getLogger(__name__)


class PostgresSnapshot:
    def __init__(self, con, error_cls) -> None:
        self._con = con
        self._error_cls = error_cls

    def _all(self, sql: str, params: tuple = ()) -> List[dict]:
        try:
            with self._con.cursor() as cur:
                return cur.execute(sql, params).fetchall()
        except self._error_cls as ex:
            raise UpstreamFetchError(f"postgres query failed: {ex}") from ex

    def _one(self, sql: str, params: tuple = ()) -> Optional[dict]:
        rows = self._all(sql, params)
        return rows[0] if rows else None

    def _scalar(self, sql: str, params: tuple = ()) -> int:
        row = self._one(sql, params)
        value = row["value"] if row else None
        return int(value) if value is not None else 0

    def _mapping(self, sql: str) -> Dict[int, int]:
        return {int(r["entity_id"]): int(r["value"]) for r in self._all(sql)}

    # --- population ---
    def find_user_by_name(self, name: str) -> Optional[User]:
        row = self._one("SELECT id,name,display_name FROM users WHERE name=%s", (name,))
        return User(**row) if row else None

    def find_livestream(self, livestream_id: int) -> Optional[Livestream]:
        row = self._one("SELECT id,user_id,title FROM livestreams WHERE id=%s", (livestream_id,))
        return Livestream(**row) if row else None

    def list_users(self) -> Sequence[User]:
        return [User(**r) for r in self._all("SELECT id,name,display_name FROM users")]

    def list_livestreams(self) -> Sequence[Livestream]:
        return [Livestream(**r) for r in self._all("SELECT id,user_id,title FROM livestreams")]

    # --- score facts ---
    def count_reactions_by_user(self) -> Dict[int, int]:
        return self._mapping(
            """
            SELECT l.user_id AS entity_id, COUNT(r.id) AS value
            FROM livestreams l
            INNER JOIN reactions r ON r.livestream_id = l.id
            GROUP BY l.user_id
            """
        )

    def sum_tips_by_user(self) -> Dict[int, int]:
        return self._mapping(
            """
            SELECT l.user_id AS entity_id, COALESCE(SUM(lc.tip), 0) AS value
            FROM livestreams l
            INNER JOIN livecomments lc ON lc.livestream_id = l.id
            GROUP BY l.user_id
            """
        )

    def count_reactions_by_livestream(self) -> Dict[int, int]:
        return self._mapping(
            "SELECT livestream_id AS entity_id, COUNT(id) AS value FROM reactions GROUP BY livestream_id"
        )

    def sum_tips_by_livestream(self) -> Dict[int, int]:
        return self._mapping(
            "SELECT livestream_id AS entity_id, COALESCE(SUM(tip), 0) AS value FROM livecomments GROUP BY livestream_id"
        )

    # --- per-user facts ---
    def count_viewers_for_user(self, user_id: int) -> int:
        return self._scalar(
            """
            SELECT COUNT(h.id) AS value
            FROM livestream_viewers_history h
            INNER JOIN livestreams l ON h.livestream_id = l.id
            WHERE l.user_id=%s
            """,
            (user_id,),
        )

    def count_livecomments_for_user(self, user_id: int) -> int:
        return self._scalar(
            """
            SELECT COUNT(lc.id) AS value
            FROM livecomments lc
            INNER JOIN livestreams l ON lc.livestream_id = l.id
            WHERE l.user_id=%s
            """,
            (user_id,),
        )

    def count_emoji_for_user(self, user_id: int) -> Dict[str, int]:
        rows = self._all(
            """
            SELECT r.emoji_name AS emoji_name, COUNT(*) AS value
            FROM reactions r
            INNER JOIN livestreams l ON r.livestream_id = l.id
            WHERE l.user_id=%s
            GROUP BY r.emoji_name
            """,
            (user_id,),
        )
        return {r["emoji_name"]: int(r["value"]) for r in rows}

    # --- per-livestream facts ---
    def count_viewers_for_livestream(self, livestream_id: int) -> int:
        return self._scalar(
            "SELECT COUNT(id) AS value FROM livestream_viewers_history WHERE livestream_id=%s",
            (livestream_id,),
        )

    def max_tip_for_livestream(self, livestream_id: int) -> int:
        return self._scalar(
            "SELECT COALESCE(MAX(tip), 0) AS value FROM livecomments WHERE livestream_id=%s",
            (livestream_id,),
        )

    def count_reports_for_livestream(self, livestream_id: int) -> int:
        return self._scalar(
            "SELECT COUNT(id) AS value FROM livecomment_reports WHERE livestream_id=%s",
            (livestream_id,),
        )


class PostgresRepository:
    def __init__(self, *, dsn: str, migrations_dir: Optional[Path] = None) -> None:
        # Import psycopg only when PostgreSQL repo is instantiated
        try:
            import psycopg
            from psycopg.rows import dict_row
        except ModuleNotFoundError:
            raise ModuleNotFoundError(
                "psycopg is not installed. Install it with: pip install 'psycopg[binary]>=3.1'"
            )

        self._psycopg = psycopg
        self._dict_row = dict_row
        self._dsn = dsn
        if migrations_dir is not None:
            self._init_db(migrations_dir)

    def _connect(self):
        return self._psycopg.connect(self._dsn, row_factory=self._dict_row)

    def _init_db(self, migrations_dir: Path) -> None:
        with self._connect() as con:
            run_migrations(runner=PostgresMigrationRunner(con), migrations_dir=migrations_dir, db_type="postgres")

    @contextmanager
    def snapshot(self) -> Iterator[PostgresSnapshot]:
        """Read-only REPEATABLE READ transaction shared by every query of one computation."""
        try:
            con = self._connect()
        except self._psycopg.Error as ex:
            raise UpstreamFetchError(f"failed to connect to postgres: {ex}") from ex

        try:
            con.isolation_level = self._psycopg.IsolationLevel.REPEATABLE_READ
            con.read_only = True
            with con.transaction(force_rollback=True):
                yield PostgresSnapshot(con, self._psycopg.Error)
        except self._psycopg.Error as ex:
            raise UpstreamFetchError(f"postgres read transaction failed: {ex}") from ex
        finally:
            con.close()
