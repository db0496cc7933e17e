"""Commit store configuration."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MEMORY_PATH = ":memory:"


class StoreConfig(BaseSettings):
    """Configuration for the SQLite commit store.

    Settings can be loaded from environment variables or .env file.
    All settings are prefixed with ATASK_DB_ (e.g., ATASK_DB_PATH).
    """

    model_config = SettingsConfigDict(
        env_prefix="ATASK_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    path: Path = Field(
        default=Path("./atask.db"),
        description="SQLite database file, or :memory: for a transient store",
    )

    timeout: float = Field(
        default=5.0,
        description="Seconds to wait on a locked database before failing",
    )

    @classmethod
    def in_memory(cls) -> "StoreConfig":
        """Configuration for a transient in-memory store."""
        return cls(path=Path(MEMORY_PATH))

    @property
    def is_memory(self) -> bool:
        return str(self.path) == MEMORY_PATH

    def ensure_parent_dir(self) -> None:
        """Ensure the directory holding the database file exists."""
        if not self.is_memory:
            self.path.parent.mkdir(parents=True, exist_ok=True)
