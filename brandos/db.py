import os
import sqlite3
import datetime as dt
import logging
from contextlib import contextmanager
from typing import Any, Dict, List

from .config import settings

logger = logging.getLogger(__name__)

SCHEMA_CORE = '''
CREATE TABLE IF NOT EXISTS inspo_resources (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  url TEXT NOT NULL,
  description TEXT,
  category TEXT,
  sub_category TEXT,
  pricing TEXT,
  featured INTEGER NOT NULL DEFAULT 0,
  open_source INTEGER NOT NULL DEFAULT 0,
  created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_inspo_category ON inspo_resources(category);
'''

# Column name in the table -> key the inspo table UI reads.
PUBLIC_KEYS = {
    "id": "id",
    "name": "Name",
    "url": "URL",
    "description": "Description",
    "category": "Category",
    "sub_category": "Sub-category",
    "pricing": "Pricing",
    "featured": "Featured",
    "open_source": "OpenSource",
    "created_at": "created_at",
}


def _apply_pragmas(con: sqlite3.Connection):
    con.execute("PRAGMA journal_mode=WAL;")
    con.execute("PRAGMA synchronous=NORMAL;")
    con.execute("PRAGMA busy_timeout=30000;")


def _table_columns(con: sqlite3.Connection, name: str) -> set[str]:
    rows = con.execute(f"PRAGMA table_info({name});").fetchall()
    return {r[1] for r in rows}


def _ensure_columns(con: sqlite3.Connection) -> None:
    # Older files were created before pricing/open_source existed.
    cols = _table_columns(con, "inspo_resources")
    if "pricing" not in cols:
        con.execute("ALTER TABLE inspo_resources ADD COLUMN pricing TEXT;")
    if "open_source" not in cols:
        con.execute("ALTER TABLE inspo_resources ADD COLUMN open_source INTEGER NOT NULL DEFAULT 0;")


def init_db():
    folder = os.path.dirname(settings.db_path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    with sqlite3.connect(settings.db_path, timeout=30) as con:
        _apply_pragmas(con)
        con.executescript(SCHEMA_CORE)
        _ensure_columns(con)
        con.commit()


@contextmanager
def connect():
    con = sqlite3.connect(settings.db_path, timeout=30, check_same_thread=False)
    con.row_factory = sqlite3.Row
    _apply_pragmas(con)
    try:
        yield con
    finally:
        con.close()


def _row_to_public(row: sqlite3.Row) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for col, key in PUBLIC_KEYS.items():
        val = row[col]
        if col in ("featured", "open_source"):
            val = bool(val)
        out[key] = val
    return out


def list_resources() -> List[Dict[str, Any]]:
    with connect() as con:
        rows = con.execute("SELECT * FROM inspo_resources ORDER BY id").fetchall()
    return [_row_to_public(r) for r in rows]


def insert_resource(
    name: str,
    url: str,
    description: str | None = None,
    category: str | None = None,
    sub_category: str | None = None,
    pricing: str | None = None,
    featured: bool = False,
    open_source: bool = False,
) -> Dict[str, Any]:
    created_at = dt.datetime.now(dt.timezone.utc).replace(microsecond=0).isoformat()
    with connect() as con:
        cur = con.execute(
            """
            INSERT INTO inspo_resources
              (name, url, description, category, sub_category, pricing, featured, open_source, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (name, url, description, category, sub_category, pricing, int(featured), int(open_source), created_at),
        )
        con.commit()
        row = con.execute("SELECT * FROM inspo_resources WHERE id = ?", (cur.lastrowid,)).fetchone()
    logger.info("inspo resource added: id=%s name=%s", row["id"], name)
    return _row_to_public(row)
