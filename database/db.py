"""
Database Manager

Async SQLite database connection and management.
"""

import aiosqlite
from pathlib import Path
from contextlib import asynccontextmanager
from typing import Optional
import sys

# Add project root to path
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from utils import setup_logger

logger = setup_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

# Default database path (will be overridden by config if available)
DEFAULT_DB_PATH = ROOT_DIR / "database" / "thumbnails.db"
SCHEMA_PATH = Path(__file__).parent / "schema.sql"

# Global connection
_db_connection: Optional[aiosqlite.Connection] = None


# =============================================================================
# DATABASE INITIALIZATION
# =============================================================================

def get_db_path() -> Path:
    """Get database path from config or use default."""
    try:
        from config import DATABASE_PATH
        return Path(DATABASE_PATH)
    except ImportError:
        return DEFAULT_DB_PATH


async def _configure(conn: aiosqlite.Connection) -> None:
    # Enable foreign keys
    await conn.execute("PRAGMA foreign_keys = ON")

    # Enable WAL mode for better concurrency
    await conn.execute("PRAGMA journal_mode = WAL")

    # Set busy timeout to wait up to 60 seconds for locks
    await conn.execute("PRAGMA busy_timeout = 60000")


async def apply_schema(conn: aiosqlite.Connection) -> None:
    """Run schema.sql (idempotent: every statement is IF NOT EXISTS)."""
    if not SCHEMA_PATH.exists():
        logger.warning(f"Schema file not found: {SCHEMA_PATH}")
        return

    with open(SCHEMA_PATH, 'r', encoding='utf-8') as f:
        schema_sql = f.read()

    await conn.executescript(schema_sql)


async def init_db() -> None:
    """
    Initialize the database.

    Creates the database file and runs schema if it doesn't exist.
    """
    global _db_connection

    db_path = get_db_path()

    # Ensure parent directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    _db_connection = await aiosqlite.connect(str(db_path), timeout=60)
    await _configure(_db_connection)
    await apply_schema(_db_connection)

    # Drop expired auth tokens from previous server sessions
    await _purge_expired_auth_sessions(_db_connection)

    logger.info(f"Database initialized: {db_path}")


async def _purge_expired_auth_sessions(db: aiosqlite.Connection) -> None:
    """Delete auth tokens that expired while the server was down."""
    cursor = await db.execute(
        "DELETE FROM auth_sessions WHERE expires_at <= CURRENT_TIMESTAMP"
    )
    await db.commit()
    if cursor.rowcount:
        logger.info(f"Startup cleanup: removed {cursor.rowcount} expired auth session(s)")


async def close_db() -> None:
    """Close database connection."""
    global _db_connection

    if _db_connection:
        await _db_connection.close()
        _db_connection = None


# =============================================================================
# CONNECTION CONTEXT MANAGER
# =============================================================================

@asynccontextmanager
async def get_db():
    """
    Get database connection as async context manager.

    Usage:
        async with get_db() as db:
            await db.execute("SELECT * FROM thumbnail_records")
    """
    # If no global connection, create a new one
    if _db_connection is None:
        db_path = get_db_path()
        db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(db_path), timeout=60)
        await _configure(conn)

        try:
            yield conn
        finally:
            await conn.close()
    else:
        # Use global connection
        yield _db_connection


# =============================================================================
# ROW HELPERS
# =============================================================================

def row_to_dict(cursor: aiosqlite.Cursor, row) -> Optional[dict]:
    """Map a row to a dict using the cursor's column names."""
    if row is None:
        return None
    columns = [description[0] for description in cursor.description]
    return dict(zip(columns, row))


async def fetch_one(db: aiosqlite.Connection, query: str, params=()) -> Optional[dict]:
    """Execute a query and return the first row as a dict."""
    async with db.execute(query, params) as cursor:
        row = await cursor.fetchone()
        return row_to_dict(cursor, row)


async def fetch_all(db: aiosqlite.Connection, query: str, params=()) -> list[dict]:
    """Execute a query and return all rows as dicts."""
    async with db.execute(query, params) as cursor:
        rows = await cursor.fetchall()
        columns = [description[0] for description in cursor.description]
        return [dict(zip(columns, row)) for row in rows]
