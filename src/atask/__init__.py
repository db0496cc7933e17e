"""ATask - commit history extraction and ingestion for Git-based task tracking."""

__version__ = "0.1.0"
