"""Ingestion coordinator - persists extracted commits exactly once."""

from pathlib import Path
from typing import Iterable, Optional

import structlog

from atask.errors import AtaskError
from atask.extraction import GraphWalkExtractor, HistoryExtractor, LogStreamExtractor
from atask.models import CanonicalCommit, RepositoryConfig
from atask.storage.base import CommitStoreProtocol

logger = structlog.get_logger(__name__)

STRATEGIES = ("graph", "log")


class IngestionResult:
    """Result of an ingestion run."""

    def __init__(self, inserted: int = 0, skipped: int = 0):
        self.inserted = inserted
        self.skipped = skipped

    @property
    def seen(self) -> int:
        return self.inserted + self.skipped

    def __repr__(self) -> str:
        return f"IngestionResult(inserted={self.inserted}, skipped={self.skipped})"


class IngestionCoordinator:
    """Inserts canonical commits that are not yet in the store.

    Every record is checked by hash before a single insert attempt, so
    running the same extraction twice stores each commit once and the
    second run inserts nothing. The store's own duplicate check is never
    relied on as a filter: a DuplicateError from it means another writer
    got there first, and it propagates.
    """

    def __init__(self, store: CommitStoreProtocol):
        """Initialize the coordinator.

        Args:
            store: Store handle, owned by the caller and borrowed for the run
        """
        self.store = store

    def ingest(self, commits: Iterable[CanonicalCommit]) -> IngestionResult:
        """Persist every commit whose hash is not stored yet.

        Args:
            commits: Canonical commits from any extractor

        Returns:
            IngestionResult with the number of newly inserted commits

        Raises:
            DuplicateError: If a concurrent writer stored a hash between the
                existence check and the insert
        """
        result = IngestionResult()

        for commit in commits:
            if self.store.find_by_hash(commit.hash) is not None:
                result.skipped += 1
                logger.debug("commit_skipped", commit_hash=commit.hash)
                continue

            self.store.insert(commit)
            result.inserted += 1
            logger.debug("commit_inserted", commit_hash=commit.hash)

        logger.info("ingestion_complete", inserted=result.inserted, skipped=result.skipped)
        return result

    def ingest_from(
        self, extractor: HistoryExtractor, max_count: Optional[int] = None
    ) -> IngestionResult:
        """Run an extractor and ingest its output."""
        return self.ingest(extractor.extract_commits(max_count=max_count))


def build_extractor(
    config: RepositoryConfig,
    strategy: str = "graph",
    max_count: Optional[int] = None,
    strict: bool = True,
) -> HistoryExtractor:
    """Create the extractor for a strategy name.

    Args:
        config: Repository configuration
        strategy: "graph" for the object graph walk, "log" for the
            ``git log --numstat`` export
        max_count: Commit limit, applied to the log export up front
        strict: Date strictness of the log stream parser

    Raises:
        ValueError: On an unknown strategy
        RepositoryError: If the repository cannot be opened
    """
    if strategy == "graph":
        return GraphWalkExtractor(config)
    if strategy == "log":
        return LogStreamExtractor.from_repository(config, max_count=max_count, strict=strict)
    raise ValueError(f"Unknown extraction strategy {strategy!r}, expected one of {STRATEGIES}")


def populate_from_git_history(
    store: CommitStoreProtocol,
    repo_path: Path,
    strategy: str = "log",
    max_count: Optional[int] = None,
    strict: bool = True,
) -> IngestionResult:
    """Extract a repository's history and ingest it into a store.

    Args:
        store: Target store
        repo_path: Path to the Git repository
        strategy: Extraction strategy, "graph" or "log"
        max_count: Maximum number of commits to extract
        strict: Date strictness of the log stream parser

    Returns:
        IngestionResult of the run
    """
    config = RepositoryConfig(repo_path=Path(repo_path))
    extractor = build_extractor(config, strategy=strategy, max_count=max_count, strict=strict)

    logger.info("ingestion_started", repo_path=str(repo_path), strategy=strategy)
    try:
        return IngestionCoordinator(store).ingest_from(extractor, max_count=max_count)
    except AtaskError as e:
        logger.error("ingestion_failed", repo_path=str(repo_path), error=str(e))
        raise
