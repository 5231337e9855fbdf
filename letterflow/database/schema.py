from pathlib import Path
from typing import Any

import psycopg

_DEFAULT_SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def load_schema(path: Path | None = None) -> str:
    """Load the bundled DDL for users, templates and submissions."""
    if path is None:
        path = _DEFAULT_SCHEMA_PATH
    return path.read_text(encoding="utf-8")


def apply_schema(conn: psycopg.Connection[Any], path: Path | None = None) -> None:
    """Create types, tables and indexes if they do not exist yet."""
    conn.execute(load_schema(path))
    conn.commit()
