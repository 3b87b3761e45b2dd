"""SQLite database schema definition."""

import sqlite3
from pathlib import Path

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS transactions (
    hash TEXT PRIMARY KEY,
    from_address TEXT NOT NULL,
    to_address TEXT NOT NULL,
    raw_amount TEXT NOT NULL,
    token_decimals INTEGER NOT NULL,
    token_name TEXT NOT NULL,
    token_symbol TEXT NOT NULL,
    timestamp INTEGER NOT NULL,
    block_number INTEGER NOT NULL,
    first_seen REAL NOT NULL,
    validated INTEGER NOT NULL DEFAULT 0,
    locked INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_transactions_timestamp ON transactions(timestamp);
CREATE INDEX IF NOT EXISTS idx_transactions_to ON transactions(to_address);

CREATE TRIGGER IF NOT EXISTS transactions_locked_immutable
BEFORE UPDATE ON transactions
WHEN OLD.locked = 1
BEGIN
    SELECT RAISE(ABORT, 'locked transaction is immutable');
END;

CREATE TABLE IF NOT EXISTS dataset_metadata (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    oldest_block INTEGER,
    newest_block INTEGER,
    total_count INTEGER NOT NULL DEFAULT 0,
    last_full_sync REAL NOT NULL DEFAULT 0,
    last_validation REAL NOT NULL DEFAULT 0,
    integrity_hash TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS address_stats (
    address TEXT PRIMARY KEY,
    count INTEGER NOT NULL DEFAULT 0,
    total_value TEXT NOT NULL DEFAULT '0',
    oldest_timestamp INTEGER,
    newest_timestamp INTEGER
);

CREATE TABLE IF NOT EXISTS validation_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp REAL NOT NULL,
    date TEXT NOT NULL,
    is_valid INTEGER NOT NULL,
    errors TEXT NOT NULL,
    warnings TEXT NOT NULL,
    locked_count INTEGER NOT NULL,
    new_count INTEGER NOT NULL,
    total_count INTEGER NOT NULL,
    integrity_hash TEXT NOT NULL
);
"""


def create_schema(db_path: Path) -> sqlite3.Connection:
    """Create the database schema. Returns the connection."""
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.executescript(SCHEMA_SQL)
    conn.execute(
        "INSERT OR IGNORE INTO schema_version (version) VALUES (?)",
        (SCHEMA_VERSION,),
    )
    conn.commit()
    return conn
