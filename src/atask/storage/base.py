"""Store boundary consumed by the ingestion layer."""

from typing import List, Optional, Protocol

from atask.models import CanonicalCommit, StoredCommit


class CommitStoreProtocol(Protocol):
    """Insert / lookup / list contract of a commit store.

    ``insert`` must raise DuplicateError for an already stored hash instead of
    overwriting it. ``list_all`` is ordered by commit date, newest first.
    """

    def insert(self, commit: CanonicalCommit) -> int:
        ...

    def find_by_hash(self, commit_hash: str) -> Optional[StoredCommit]:
        ...

    def list_all(self) -> List[StoredCommit]:
        ...
