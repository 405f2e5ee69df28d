"""Startup column patch for team tables created before the finals columns existed."""
from sqlalchemy import text
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from knockout.db_schema_patch import REQUIRED_TEAM_COLUMNS, _get_existing_columns_sqlite, ensure_team_columns


def _legacy_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TABLE team (id INTEGER PRIMARY KEY, competition_id INTEGER NOT NULL, "
                "name VARCHAR NOT NULL, points INTEGER NOT NULL DEFAULT 0)"
            )
        )
        conn.execute(text("INSERT INTO team (competition_id, name, points) VALUES (1, 'Old Club', 7)"))
    return engine


def test_missing_columns_are_added_once():
    engine = _legacy_engine()

    added = ensure_team_columns(engine)
    assert sorted(added) == sorted(name for name, _, _ in REQUIRED_TEAM_COLUMNS)

    columns = _get_existing_columns_sqlite(engine, "team")
    for name, _, _ in REQUIRED_TEAM_COLUMNS:
        assert name in columns

    assert ensure_team_columns(engine) == []

    with engine.connect() as conn:
        row = conn.execute(text("SELECT name, eliminated, knockout_seed FROM team")).one()
    assert tuple(row) == ("Old Club", None, None)


def test_missing_table_is_left_to_create_all():
    engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    assert ensure_team_columns(engine) == []
