"""Tests for the Alembic migration chain."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "worldnotes" / "migrations"


def _config(db_path: Path) -> Config:
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    config.set_main_option("sqlalchemy.url", f"sqlite+aiosqlite:///{db_path}")
    return config


def _tables(db_path: Path) -> set:
    engine = create_engine(f"sqlite:///{db_path}")
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def test_upgrade_creates_tables(tmp_path) -> None:
    db_path = tmp_path / "migrate.db"

    command.upgrade(_config(db_path), "head")

    assert {"notes", "note_versions"} <= _tables(db_path)
    engine = create_engine(f"sqlite:///{db_path}")
    try:
        indexes = {index["name"] for index in inspect(engine).get_indexes("notes")}
    finally:
        engine.dispose()
    assert "idx_notes_locked" in indexes


def test_downgrade_drops_tables(tmp_path) -> None:
    db_path = tmp_path / "migrate.db"
    config = _config(db_path)

    command.upgrade(config, "head")
    command.downgrade(config, "base")

    assert not {"notes", "note_versions"} & _tables(db_path)
