from __future__ import annotations

from pathlib import Path

import pytest

from app.storage.migrations import SQL_DIR, load_migration_from_file, pending_migrations


def test_load_migration_parses_filename(tmp_path):
    path = tmp_path / "002_add_indexes_sqlite.sql"
    path.write_text("SELECT 1;", encoding="utf-8")

    migration = load_migration_from_file(path)

    assert migration.version == "002"
    assert migration.name == "add_indexes"
    assert migration.sql == "SELECT 1;"
    assert len(migration.checksum) == 64


def test_load_migration_rejects_bad_names(tmp_path):
    path = tmp_path / "initial.sql"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        load_migration_from_file(path)


def test_pending_filters_by_db_type():
    sqlite = pending_migrations(migrations_dir=SQL_DIR, db_type="sqlite", applied=[])
    postgres = pending_migrations(migrations_dir=SQL_DIR, db_type="postgres", applied=[])

    assert [m.version for m in sqlite] == ["001"]
    assert [m.version for m in postgres] == ["001"]
    assert "AUTOINCREMENT" in sqlite[0].sql
    assert "BIGSERIAL" in postgres[0].sql


def test_pending_skips_applied(tmp_path):
    for name in ("001_a_sqlite.sql", "002_b_sqlite.sql"):
        (tmp_path / name).write_text("", encoding="utf-8")

    todo = pending_migrations(migrations_dir=tmp_path, db_type="sqlite", applied=["001"])
    assert [m.version for m in todo] == ["002"]


def test_pending_rejects_gaps(tmp_path: Path):
    for name in ("001_a_sqlite.sql", "002_b_sqlite.sql"):
        (tmp_path / name).write_text("", encoding="utf-8")

    with pytest.raises(ValueError):
        pending_migrations(migrations_dir=tmp_path, db_type="sqlite", applied=["002"])
