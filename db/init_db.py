"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Bugs table: one row per tracked defect
CREATE TABLE IF NOT EXISTS bugs (
    id              SERIAL PRIMARY KEY,
    title           TEXT NOT NULL,
    description     TEXT,
    status          TEXT,
    priority        TEXT,
    created_at      TIMESTAMPTZ,
    updated_at      TIMESTAMPTZ
);

-- Comments table: notes attached to a bug, removed together with it
CREATE TABLE IF NOT EXISTS comments (
    id              SERIAL PRIMARY KEY,
    bug_id          INTEGER REFERENCES bugs(id) ON DELETE CASCADE,
    content         TEXT,
    author          TEXT,
    created_at      TIMESTAMPTZ
);

CREATE INDEX IF NOT EXISTS idx_comments_bug_id ON comments(bug_id);
"""

TRUNCATE_SQL = "TRUNCATE TABLE comments, bugs RESTART IDENTITY CASCADE;"


def create_tables(conn) -> None:
    """
    Execute the schema SQL on the given connection.
    Safe to call multiple times (uses IF NOT EXISTS).

    Raises:
        psycopg2.Error: If any statement fails. The transaction is rolled back.
    """
    try:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        conn.commit()
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to initialize schema: {e}")
        raise


def truncate_tables(conn) -> None:
    """Remove every bug and comment and restart both id sequences at 1."""
    try:
        with conn.cursor() as cur:
            cur.execute(TRUNCATE_SQL)
        conn.commit()
        logger.info("Truncated bugs and comments tables.")
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to truncate tables: {e}")
        raise


if __name__ == "__main__":
    from db.connection import init_storage, close_storage
    from utils.logger import configure_logging
    configure_logging("INFO")
    init_storage()
    close_storage()
    print("Database schema created successfully.")
