from __future__ import annotations

from typing import Dict, List, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Engine

# Finals columns that older "team" tables may lack.
# (name, sqlite_type, postgres_type)
REQUIRED_TEAM_COLUMNS: List[Tuple[str, str, str]] = [
    ("subdivision", "TEXT", "TEXT"),
    ("goal_difference", "INTEGER", "INTEGER"),
    ("eliminated", "INTEGER", "BOOLEAN"),
    ("knockout_seed", "INTEGER", "INTEGER"),
]


def _is_sqlite(engine: Engine) -> bool:
    return engine.dialect.name.lower() == "sqlite"


def _get_existing_columns_sqlite(engine: Engine, table_name: str) -> Dict[str, str]:
    cols: Dict[str, str] = {}
    with engine.connect() as conn:
        res = conn.execute(text(f"PRAGMA table_info({table_name});")).fetchall()
        # PRAGMA table_info returns rows: (cid, name, type, notnull, dflt_value, pk)
        for row in res:
            cols[str(row[1])] = str(row[2])
    return cols


def _get_existing_columns_postgres(engine: Engine, table_name: str) -> Dict[str, str]:
    cols: Dict[str, str] = {}
    sql = """
    SELECT column_name, data_type
    FROM information_schema.columns
    WHERE table_schema = 'public' AND table_name = :table_name;
    """
    with engine.connect() as conn:
        res = conn.execute(text(sql), {"table_name": table_name}).fetchall()
        for row in res:
            cols[str(row[0])] = str(row[1])
    return cols


def _ensure_columns(engine: Engine, table_name: str, required: List[Tuple[str, str, str]]) -> List[str]:
    """Add any missing columns; returns the names that were added."""
    sqlite = _is_sqlite(engine)
    existing = (
        _get_existing_columns_sqlite(engine, table_name)
        if sqlite
        else _get_existing_columns_postgres(engine, table_name)
    )
    if not existing:
        # Table not created yet; create_all owns it
        return []

    added: List[str] = []
    with engine.begin() as conn:
        for name, sqlite_type, postgres_type in required:
            if name in existing:
                continue
            col_type = sqlite_type if sqlite else postgres_type
            conn.execute(text(f'ALTER TABLE "{table_name}" ADD COLUMN {name} {col_type}'))
            added.append(name)
    return added


def ensure_team_columns(engine: Engine) -> List[str]:
    return _ensure_columns(engine, "team", REQUIRED_TEAM_COLUMNS)
