"""Common interface of the history extraction strategies."""

from typing import Iterator, Optional, Protocol, runtime_checkable

from atask.models import CanonicalCommit


@runtime_checkable
class HistoryExtractor(Protocol):
    """Anything that yields canonical commits, newest first."""

    def extract_commits(self, max_count: Optional[int] = None) -> Iterator[CanonicalCommit]:
        ...
