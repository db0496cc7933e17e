"""Idempotent ingestion of extracted commits into a store."""

from atask.ingestion.coordinator import (
    IngestionCoordinator,
    IngestionResult,
    build_extractor,
    populate_from_git_history,
)

__all__ = [
    "IngestionCoordinator",
    "IngestionResult",
    "build_extractor",
    "populate_from_git_history",
]
