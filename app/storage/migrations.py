"""
Versioned schema migrations for the statistics database.

Applied versions are recorded in a `schema_migrations` table, so running the
migrations again against an up-to-date database is a no-op.
"""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Protocol, Sequence

logger = logging.getLogger(__name__)

SQL_DIR = Path(__file__).resolve().parent / "sql"


@dataclass(frozen=True)
class Migration:
    version: str
    name: str
    sql: str

    @property
    def checksum(self) -> str:
        return hashlib.sha256(self.sql.encode("utf-8")).hexdigest()


class MigrationRunner(Protocol):
    """Database-specific side of the migration process."""

    def ensure_migrations_table(self) -> None: ...

    def get_applied_migrations(self) -> Sequence[str]: ...

    def apply_migration(self, migration: Migration) -> None: ...


class SQLiteMigrationRunner:
    def __init__(self, connection) -> None:
        self._con = connection

    def ensure_migrations_table(self) -> None:
        self._con.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                version TEXT NOT NULL PRIMARY KEY,
                name TEXT NOT NULL,
                checksum TEXT NOT NULL,
                applied_at INTEGER NOT NULL
            )
            """
        )
        self._con.commit()

    def get_applied_migrations(self) -> Sequence[str]:
        rows = self._con.execute("SELECT version FROM schema_migrations ORDER BY version").fetchall()
        return [row["version"] for row in rows]

    def apply_migration(self, migration: Migration) -> None:
        logger.info("Applying migration: %s (%s)", migration.version, migration.name)

        # executescript commits any pending transaction before running
        self._con.executescript(migration.sql)
        self._con.execute(
            "INSERT INTO schema_migrations(version, name, checksum, applied_at) VALUES(?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, int(time.time())),
        )
        self._con.commit()
        logger.info("Migration %s applied", migration.version)


class PostgresMigrationRunner:
    def __init__(self, connection) -> None:
        self._con = connection

    def ensure_migrations_table(self) -> None:
        with self._con.cursor() as cur:
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version TEXT NOT NULL PRIMARY KEY,
                    name TEXT NOT NULL,
                    checksum TEXT NOT NULL,
                    applied_at BIGINT NOT NULL
                )
                """
            )
        self._con.commit()

    def get_applied_migrations(self) -> Sequence[str]:
        with self._con.cursor() as cur:
            cur.execute("SELECT version FROM schema_migrations ORDER BY version")
            rows = cur.fetchall()
        return [row["version"] for row in rows]

    def apply_migration(self, migration: Migration) -> None:
        logger.info("Applying migration: %s (%s)", migration.version, migration.name)

        with self._con.cursor() as cur:
            cur.execute(migration.sql)
            cur.execute(
                "INSERT INTO schema_migrations(version, name, checksum, applied_at) VALUES(%s, %s, %s, %s)",
                (migration.version, migration.name, migration.checksum, int(time.time())),
            )
        self._con.commit()
        logger.info("Migration %s applied", migration.version)


def load_migration_from_file(file_path: Path) -> Migration:
    """
    Load a migration named `{version}_{name}_{db_type}.sql`,
    e.g. `001_initial_schema_sqlite.sql`.
    """
    parts = file_path.stem.split("_", 1)
    if len(parts) != 2 or not parts[0].isdigit():
        raise ValueError(
            f"Invalid migration filename: {file_path.name}. "
            f"Expected VERSION_NAME_DBTYPE.sql (e.g. 001_initial_schema_sqlite.sql)"
        )

    version, rest = parts
    name = rest.rsplit("_", 1)[0]
    return Migration(version=version, name=name, sql=file_path.read_text(encoding="utf-8"))


def pending_migrations(*, migrations_dir: Path, db_type: str, applied: Sequence[str]) -> List[Migration]:
    """
    Migrations for `db_type` not yet in `applied`, in version order.

    Raises ValueError when a pending migration would skip over an unapplied
    lower version.
    """
    files = sorted(migrations_dir.glob(f"[0-9]*_{db_type}.sql"))
    done = set(applied)
    pending: List[Migration] = []
    for path in files:
        migration = load_migration_from_file(path)
        if migration.version in done:
            if pending:
                raise ValueError(
                    f"Migration {migration.version} is applied but earlier "
                    f"migration {pending[0].version} is not"
                )
            continue
        pending.append(migration)
    return pending


def run_migrations(*, runner: MigrationRunner, migrations_dir: Path, db_type: str = "sqlite") -> None:
    runner.ensure_migrations_table()
    applied = runner.get_applied_migrations()

    todo = pending_migrations(migrations_dir=migrations_dir, db_type=db_type, applied=applied)
    if not todo:
        logger.info("Schema up to date (%s, %s)", db_type, migrations_dir)
        return

    for migration in todo:
        runner.apply_migration(migration)

    logger.info("Applied %s migration(s)", len(todo))
