"""Data models for canonical commit records."""

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field, field_validator


class CanonicalCommit(BaseModel):
    """Extractor-agnostic representation of a single commit.

    Both extraction strategies produce this shape; it is the only thing the
    ingestion layer knows about. Instances are immutable.
    """

    hash: str = Field(..., min_length=1, description="Full commit hash, the identity key")
    author_name: str = Field(..., description="Author name")
    author_email: str = Field(..., description="Author email")
    commit_date: datetime = Field(..., description="Author timestamp normalized to UTC")
    message: str = Field(..., description="Commit message, trimmed")
    files_changed: List[str] = Field(
        default_factory=list, description="Paths touched, in diff emission order"
    )
    insertions: int = Field(0, ge=0, description="Lines added across all files")
    deletions: int = Field(0, ge=0, description="Lines deleted across all files")

    class Config:
        """Pydantic config."""
        frozen = True
        json_schema_extra = {
            "example": {
                "hash": "9fceb02d0ae598e95dc970b74767f19372d61af8",
                "author_name": "Jane Doe",
                "author_email": "jane@example.com",
                "commit_date": "2024-01-01T10:00:00Z",
                "message": "Fix bug in board rendering",
                "files_changed": ["src/main.rs", "src/kanban.rs"],
                "insertions": 12,
                "deletions": 3,
            }
        }

    @field_validator("commit_date")
    @classmethod
    def _normalize_to_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are taken to already be UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @field_validator("message")
    @classmethod
    def _strip_message(cls, value: str) -> str:
        return value.strip()

    @property
    def short_hash(self) -> str:
        """First seven characters of the hash."""
        return self.hash[:7]

    @property
    def message_summary(self) -> str:
        """Subject line of the message."""
        return self.message.split("\n", 1)[0]


class StoredCommit(CanonicalCommit):
    """A canonical commit as read back from the store."""

    id: int = Field(..., description="Store-assigned identity")
    created_at: datetime = Field(..., description="When the record was inserted")

    def to_canonical(self) -> CanonicalCommit:
        """Drop the store-specific fields."""
        return CanonicalCommit(**self.model_dump(exclude={"id", "created_at"}))
