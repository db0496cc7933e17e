"""Data models for commit history processing."""

from atask.models.commit import CanonicalCommit, StoredCommit
from atask.models.config import RepositoryConfig, Settings

__all__ = [
    "CanonicalCommit",
    "StoredCommit",
    "RepositoryConfig",
    "Settings",
]
