"""SQLite storage for the list of recently viewed repositories."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager

DEFAULT_DB_FILE = "relcount.db"

MAX_RECENT_REPOS = 5


def get_db_connection(db_path: str) -> sqlite3.Connection:
    """Create and return a database connection."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Initialize the database schema."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS recent_repos (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            repo TEXT NOT NULL UNIQUE
        )
    """)
    conn.commit()


@contextmanager
def get_db(db_path: str = DEFAULT_DB_FILE) -> Iterator[sqlite3.Connection]:
    """Open an initialized connection and close it afterwards."""
    conn = get_db_connection(db_path)
    try:
        init_db(conn)
        yield conn
    finally:
        conn.close()


def remember_repo(
    conn: sqlite3.Connection, repo: str, limit: int = MAX_RECENT_REPOS
) -> None:
    """Move repo to the front of the recent list, keeping at most `limit`."""
    conn.execute("DELETE FROM recent_repos WHERE repo = ?", (repo,))
    conn.execute("INSERT INTO recent_repos (repo) VALUES (?)", (repo,))
    conn.execute(
        """
        DELETE FROM recent_repos WHERE id NOT IN (
            SELECT id FROM recent_repos ORDER BY id DESC LIMIT ?
        )
        """,
        (limit,),
    )
    conn.commit()


def get_recent_repos(conn: sqlite3.Connection) -> list[str]:
    """Return remembered repositories, most recent first."""
    cursor = conn.execute("SELECT repo FROM recent_repos ORDER BY id DESC")
    return [row["repo"] for row in cursor.fetchall()]


def clear_recent_repos(conn: sqlite3.Connection) -> None:
    """Forget every remembered repository."""
    conn.execute("DELETE FROM recent_repos")
    conn.commit()
