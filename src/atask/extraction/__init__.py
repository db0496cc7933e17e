"""Commit history extraction strategies."""

from atask.extraction.base import HistoryExtractor
from atask.extraction.git_extractor import GraphWalkExtractor
from atask.extraction.log_parser import LogStreamExtractor, export_log
from atask.extraction.remote import parse_remote_url

__all__ = [
    "HistoryExtractor",
    "GraphWalkExtractor",
    "LogStreamExtractor",
    "export_log",
    "parse_remote_url",
]
