"""Tests for the log-stream extractor."""

from datetime import datetime, timezone

import pytest

from atask.errors import ParseError, RepositoryError
from atask.extraction import GraphWalkExtractor, HistoryExtractor, LogStreamExtractor
from atask.extraction.log_parser import (
    is_header_boundary,
    parse_header,
    parse_log_date,
    parse_stat_line,
)
from atask.models import RepositoryConfig

HASH_A = "9fceb02d0ae598e95dc970b74767f19372d61af8"
HASH_B = "4c0d2a7b8f1e3d5c6b7a8f9e0d1c2b3a4f5e6d7c"


def test_single_commit_example():
    text = "abc123|Jane Doe|jane@x.com|2024-01-01 10:00:00 +0000|Fix bug\n3\t1\tsrc/main.rs"

    commits = list(LogStreamExtractor(text).extract_commits())

    assert len(commits) == 1
    commit = commits[0]
    assert commit.hash == "abc123"
    assert commit.author_name == "Jane Doe"
    assert commit.author_email == "jane@x.com"
    assert commit.commit_date == datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
    assert commit.message == "Fix bug"
    assert commit.files_changed == ["src/main.rs"]
    assert commit.insertions == 3
    assert commit.deletions == 1


def test_multiple_commits_separated_by_blank_lines():
    text = (
        f"{HASH_A}|Jane Doe|jane@x.com|2024-01-02 09:30:00 +0100|Add board\n"
        "10\t0\tsrc/kanban.rs\n"
        "2\t1\tsrc/lib.rs\n"
        "\n"
        f"{HASH_B}|John Roe|john@x.com|2024-01-01 10:00:00 +0000|Initial commit\n"
        "5\t0\tREADME.md\n"
    )

    commits = list(LogStreamExtractor(text).extract_commits())

    assert [c.hash for c in commits] == [HASH_A, HASH_B]
    assert commits[0].files_changed == ["src/kanban.rs", "src/lib.rs"]
    assert commits[0].insertions == 12
    assert commits[0].deletions == 1
    assert commits[0].commit_date == datetime(2024, 1, 2, 8, 30, 0, tzinfo=timezone.utc)
    assert commits[1].files_changed == ["README.md"]


def test_header_without_stats_followed_by_header():
    """Test the boundary rule when two headers are adjacent."""
    text = (
        f"{HASH_A}|Jane Doe|jane@x.com|2024-01-02 09:30:00 +0000|Merge branch 'board'\n"
        f"{HASH_B}|John Roe|john@x.com|2024-01-01 10:00:00 +0000|Initial commit\n"
        "1\t0\tREADME.md\n"
    )

    commits = list(LogStreamExtractor(text).extract_commits())

    assert len(commits) == 2
    assert commits[0].files_changed == []
    assert commits[0].insertions == 0
    assert commits[1].files_changed == ["README.md"]


def test_binary_and_malformed_counts_default_to_zero():
    text = (
        f"{HASH_A}|Jane Doe|jane@x.com|2024-01-01 10:00:00 +0000|Add logo\n"
        "-\t-\tassets/logo.png\n"
        "x\t4\tsrc/main.rs\n"
        "2\ty\tsrc/lib.rs\n"
    )

    commit = next(LogStreamExtractor(text).extract_commits())

    assert commit.files_changed == ["assets/logo.png", "src/main.rs", "src/lib.rs"]
    assert commit.insertions == 2
    assert commit.deletions == 4


def test_short_stat_lines_are_ignored():
    text = (
        f"{HASH_A}|Jane Doe|jane@x.com|2024-01-01 10:00:00 +0000|Tweak\n"
        "garbage\n"
        "1\t2\n"
        "1\t1\tsrc/main.rs\n"
    )

    commit = next(LogStreamExtractor(text).extract_commits())

    assert commit.files_changed == ["src/main.rs"]
    assert commit.insertions == 1
    assert commit.deletions == 1


def test_non_header_lines_are_skipped():
    text = (
        "warning: something unrelated\n"
        "\n"
        "not|enough|fields\n"
        "abc123|Jane Doe|jane@x.com|2024-01-01 10:00:00 +0000|Fix bug\n"
    )

    commits = list(LogStreamExtractor(text).extract_commits())

    assert [c.hash for c in commits] == ["abc123"]


def test_subject_may_contain_pipes():
    text = "abc123|Jane Doe|jane@x.com|2024-01-01 10:00:00 +0000|Fix a|b parsing\n1\t0\tx.py"

    commit = next(LogStreamExtractor(text).extract_commits())

    assert commit.message == "Fix a|b parsing"


def test_long_path_with_pipe_ends_stat_block():
    """Known limitation: such a path is read as the next header boundary."""
    long_path = "docs/" + "a" * 30 + "|b.md"
    text = (
        "abc123|Jane Doe|jane@x.com|2024-01-01 10:00:00 +0000|Docs\n"
        "1\t0\tREADME.md\n"
        f"2\t0\t{long_path}\n"
    )

    commits = list(LogStreamExtractor(text).extract_commits())

    assert len(commits) == 1
    assert commits[0].files_changed == ["README.md"]
    assert commits[0].insertions == 1


def test_invalid_date_is_a_parse_error():
    text = "abc123|Jane Doe|jane@x.com|yesterday|Fix bug\n1\t0\tx.py"

    with pytest.raises(ParseError, match="Failed to parse date"):
        list(LogStreamExtractor(text).extract_commits())


def test_invalid_date_non_strict_skips_commit():
    text = (
        f"{HASH_A}|Jane Doe|jane@x.com|yesterday|Broken date\n"
        "1\t0\tx.py\n"
        "\n"
        f"{HASH_B}|John Roe|john@x.com|2024-01-01 10:00:00 +0000|Good\n"
        "2\t0\ty.py\n"
    )

    commits = list(LogStreamExtractor(text, strict=False).extract_commits())

    assert [c.hash for c in commits] == [HASH_B]
    assert commits[0].files_changed == ["y.py"]


def test_max_count_stops_early():
    text = (
        f"{HASH_A}|Jane Doe|jane@x.com|2024-01-02 10:00:00 +0000|Second\n"
        "1\t0\ta.py\n"
        "\n"
        f"{HASH_B}|Jane Doe|jane@x.com|yesterday|Never parsed\n"
    )

    commits = list(LogStreamExtractor(text).extract_commits(max_count=1))

    assert [c.hash for c in commits] == [HASH_A]


def test_empty_input():
    assert list(LogStreamExtractor("").extract_commits()) == []
    assert list(LogStreamExtractor("\n\n").extract_commits()) == []


def test_from_file(tmp_path):
    export = tmp_path / "log.txt"
    export.write_text(
        "abc123|Jöns Ångström|jons@x.com|2024-01-01 10:00:00 +0000|Fix bug\n3\t1\tsrc/main.rs\n",
        encoding="utf-8",
    )

    commit = next(LogStreamExtractor.from_file(export).extract_commits())

    assert commit.author_name == "Jöns Ångström"


class TestHelpers:
    """Tests for the line-level helpers."""

    def test_parse_header(self):
        assert parse_header("h|n|e|d|s") == ("h", "n", "e", "d", "s")
        assert parse_header("h|n|e|d") is None
        assert parse_header("3\t1\tsrc/main.rs") is None

    def test_parse_stat_line(self):
        assert parse_stat_line("3\t1\tsrc/main.rs") == (3, 1, "src/main.rs")
        assert parse_stat_line("-\t-\tlogo.png") == (0, 0, "logo.png")
        assert parse_stat_line("3\t1") is None

    @pytest.mark.parametrize("count", ["1_000", "٣", "+3", "-1", "3.0", ""])
    def test_parse_stat_line_non_numeric_counts(self, count):
        assert parse_stat_line(f"{count}\t{count}\tsrc/main.rs") == (0, 0, "src/main.rs")

    def test_is_header_boundary(self):
        assert is_header_boundary(f"{HASH_A}|Jane|j@x.com|2024-01-01 10:00:00 +0000|x")
        assert not is_header_boundary("3\t1\tsrc/main.rs")
        assert not is_header_boundary("1\t0\ta|b.txt")

    def test_parse_log_date_with_offset(self):
        parsed = parse_log_date("2024-01-01 12:00:00 +0200")

        assert parsed == datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        assert parsed.utcoffset().total_seconds() == 0

    def test_parse_log_date_invalid(self):
        with pytest.raises(ParseError):
            parse_log_date("2024-01-01T10:00:00Z")


class TestFromRepository:
    """Tests for exporting and parsing a real repository's log."""

    def test_is_history_extractor(self, test_repo):
        extractor = LogStreamExtractor.from_repository(RepositoryConfig(repo_path=test_repo))

        assert isinstance(extractor, HistoryExtractor)

    def test_matches_graph_walk(self, test_repo):
        """Test that both strategies agree on a repository with one-line messages."""
        config = RepositoryConfig(repo_path=test_repo)

        from_log = list(LogStreamExtractor.from_repository(config).extract_commits())
        from_graph = list(GraphWalkExtractor(config).extract_commits())

        assert from_log == from_graph

    def test_rename_matches_graph_walk(self, renamed_repo):
        """Test that a moved file is listed under both paths, as in the graph walk."""
        config = RepositoryConfig(repo_path=renamed_repo)

        from_log = list(LogStreamExtractor.from_repository(config).extract_commits())
        from_graph = list(GraphWalkExtractor(config).extract_commits())

        assert from_log == from_graph
        assert from_log[0].files_changed == ["app.py", "main.py"]
        assert (from_log[0].insertions, from_log[0].deletions) == (2, 2)

    def test_merge_matches_graph_walk(self, merged_repo):
        """Test that a merge commit carries its first-parent stats."""
        config = RepositoryConfig(repo_path=merged_repo)

        from_log = list(LogStreamExtractor.from_repository(config).extract_commits())
        from_graph = list(GraphWalkExtractor(config).extract_commits())

        assert from_log == from_graph
        assert from_log[0].message == "Merge feature"
        assert from_log[0].files_changed == ["feature.txt"]
        assert from_log[0].insertions == 2

    def test_max_count_limits_export(self, test_repo):
        config = RepositoryConfig(repo_path=test_repo)

        commits = list(LogStreamExtractor.from_repository(config, max_count=2).extract_commits())

        assert [c.message for c in commits] == ["Remove notes", "Fix: Update hello message"]

    def test_empty_repository_raises(self, empty_repo):
        with pytest.raises(RepositoryError, match="Failed to get git log"):
            LogStreamExtractor.from_repository(RepositoryConfig(repo_path=empty_repo))

    def test_not_a_repository(self, tmp_path):
        with pytest.raises(RepositoryError, match="Invalid Git repository"):
            LogStreamExtractor.from_repository(RepositoryConfig(repo_path=tmp_path))
