"""Exception hierarchy for atask.

Absence of a record is never an error: lookups return ``None`` instead.
"""


class AtaskError(Exception):
    """Base exception for atask errors"""
    pass


class RepositoryError(AtaskError):
    """Raised when the repository object graph cannot be resolved"""
    pass


class ParseError(AtaskError):
    """Raised on malformed input: log headers, dates, remote URLs or commit hashes"""
    pass


class DuplicateError(AtaskError):
    """Raised when inserting a commit whose hash is already stored"""
    def __init__(self, commit_hash: str):
        self.commit_hash = commit_hash
        super().__init__(f"Commit already stored: {commit_hash}")
