"""Storage layer for canonical commits."""

from atask.storage.base import CommitStoreProtocol
from atask.storage.commit_store import CommitStore
from atask.storage.config import StoreConfig

__all__ = [
    "CommitStoreProtocol",
    "CommitStore",
    "StoreConfig",
]
