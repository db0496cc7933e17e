"""SQLite-backed commit store."""

import json
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional

import structlog

from atask.errors import DuplicateError
from atask.models import CanonicalCommit, StoredCommit
from atask.storage.config import StoreConfig

logger = structlog.get_logger(__name__)

_INSERT_COLUMNS = (
    "hash, author_name, author_email, commit_date, message, "
    "files_changed, insertions, deletions, created_at"
)
_COLUMNS = f"id, {_INSERT_COLUMNS}"


class CommitStore:
    """Persistent storage for canonical commits using SQLite.

    The hash column carries a UNIQUE constraint: inserting a stored hash
    fails with DuplicateError and never overwrites. ``files_changed`` is kept
    as a JSON array so order and exact path strings survive a round trip.

    The connection is owned by the caller; pass the store to an
    IngestionCoordinator for the duration of a run and close it afterwards.
    """

    def __init__(self, config: Optional[StoreConfig] = None) -> None:
        """Initialize the store and create the schema if needed.

        Args:
            config: Store configuration. If None, loads from environment.
        """
        self.config = config or StoreConfig()
        self.config.ensure_parent_dir()

        self.conn = sqlite3.connect(str(self.config.path), timeout=self.config.timeout)
        self.conn.row_factory = sqlite3.Row
        self._init_db()

    @classmethod
    def in_memory(cls) -> "CommitStore":
        """Create a transient store, mostly useful in tests."""
        return cls(StoreConfig.in_memory())

    def _init_db(self) -> None:
        """Create the commits table and its indices."""
        with self.conn:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS commits (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    hash TEXT UNIQUE NOT NULL,
                    author_name TEXT NOT NULL,
                    author_email TEXT NOT NULL,
                    commit_date TEXT NOT NULL,
                    message TEXT NOT NULL,
                    files_changed TEXT NOT NULL,
                    insertions INTEGER NOT NULL DEFAULT 0,
                    deletions INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                )
            """)
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_commits_hash ON commits(hash)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_commits_date ON commits(commit_date)")

    def insert(self, commit: CanonicalCommit) -> int:
        """Insert a commit.

        Args:
            commit: Commit to persist

        Returns:
            Store id of the new row

        Raises:
            DuplicateError: If a commit with the same hash is already stored
        """
        try:
            with self.conn:
                cursor = self.conn.execute(
                    f"""
                    INSERT INTO commits ({_INSERT_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        commit.hash,
                        commit.author_name,
                        commit.author_email,
                        commit.commit_date.isoformat(),
                        commit.message,
                        json.dumps(commit.files_changed, ensure_ascii=False),
                        commit.insertions,
                        commit.deletions,
                        datetime.now(timezone.utc).isoformat(),
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateError(commit.hash) from e

        logger.debug("commit_stored", commit_hash=commit.hash, id=cursor.lastrowid)
        return cursor.lastrowid

    def find_by_hash(self, commit_hash: str) -> Optional[StoredCommit]:
        """Get a stored commit by hash.

        Returns:
            StoredCommit, or None if the hash is not stored
        """
        row = self.conn.execute(
            f"SELECT {_COLUMNS} FROM commits WHERE hash = ?", (commit_hash,)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_commit(row)

    def list_all(self, limit: Optional[int] = None) -> List[StoredCommit]:
        """Get all stored commits, newest commit date first.

        Args:
            limit: Maximum number of commits to return
        """
        query = f"SELECT {_COLUMNS} FROM commits ORDER BY commit_date DESC, id DESC"
        params = ()
        if limit is not None:
            query += " LIMIT ?"
            params = (limit,)

        return [self._row_to_commit(row) for row in self.conn.execute(query, params)]

    def count(self) -> int:
        """Number of stored commits."""
        return self.conn.execute("SELECT COUNT(*) FROM commits").fetchone()[0]

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    def __enter__(self) -> "CommitStore":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    @staticmethod
    def _row_to_commit(row: sqlite3.Row) -> StoredCommit:
        return StoredCommit(
            id=row["id"],
            hash=row["hash"],
            author_name=row["author_name"],
            author_email=row["author_email"],
            commit_date=datetime.fromisoformat(row["commit_date"]),
            message=row["message"],
            files_changed=json.loads(row["files_changed"]),
            insertions=row["insertions"],
            deletions=row["deletions"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
