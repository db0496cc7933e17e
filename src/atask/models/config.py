"""Configuration models."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RepositoryConfig(BaseModel):
    """Configuration for a Git repository to extract history from."""

    repo_path: Path = Field(..., description="Path to the Git repository")
    rev: str = Field("HEAD", description="Reference the traversal starts from")
    remote_name: str = Field("origin", description="Remote used for owner/project lookup")
    remote_host: Optional[str] = Field(
        None,
        description="Host marker remote URLs must carry (e.g. github). Any host when unset",
    )

    class Config:
        """Pydantic config."""
        json_schema_extra = {
            "example": {
                "repo_path": "/path/to/repo",
                "rev": "HEAD",
                "remote_name": "origin",
                "remote_host": "github",
            }
        }


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ATASK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Extraction
    default_strategy: Literal["graph", "log"] = "graph"
    strict_dates: bool = True

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
