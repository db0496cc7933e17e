r"""History extraction from an exported ``git log --numstat`` text stream.

The stream is produced by::

    git log --pretty=format:%H|%an|%ae|%ai|%s --numstat --no-renames --diff-merges=first-parent

and looks like::

    <hash>|<author name>|<author email>|<YYYY-MM-DD HH:MM:SS +ZZZZ>|<subject>
    <insertions>\t<deletions>\t<path>
    ...
    <blank line>
    <next header>

Header and stat lines are not otherwise delimited, so a stat block also ends
at any line that contains ``|`` and is longer than a full hash. A file path
with a ``|`` past that length is misread as a header boundary; this is a
known limitation kept for compatibility with existing exports.
"""

import enum
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import git
import structlog

from atask.errors import ParseError, RepositoryError
from atask.models import CanonicalCommit, RepositoryConfig

logger = structlog.get_logger(__name__)

LOG_FORMAT = "%H|%an|%ae|%ai|%s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"
HEADER_FIELDS = 5
HEADER_LENGTH_THRESHOLD = 40


class _State(enum.Enum):
    AWAITING_HEADER = "awaiting_header"
    CONSUMING_STATS = "consuming_stats"


def parse_header(line: str) -> Optional[Tuple[str, str, str, str, str]]:
    """Split a header line into (hash, name, email, date, subject).

    The subject is the last field and may itself contain ``|``.

    Returns:
        The five fields, or None if the line is not a header
    """
    parts = line.split("|", HEADER_FIELDS - 1)
    if len(parts) != HEADER_FIELDS:
        return None
    return parts[0], parts[1], parts[2], parts[3], parts[4]


def parse_log_date(value: str) -> datetime:
    """Parse an ``%ai`` date and convert it to UTC.

    Raises:
        ParseError: If the date does not match DATE_FORMAT
    """
    try:
        parsed = datetime.strptime(value.strip(), DATE_FORMAT)
    except ValueError as e:
        raise ParseError(f"Failed to parse date {value!r}: {e}") from e
    return parsed.astimezone(timezone.utc)


def parse_stat_line(line: str) -> Optional[Tuple[int, int, str]]:
    """Parse a numstat line into (insertions, deletions, path).

    Non-numeric counts, such as ``-`` for binary files, become 0.

    Returns:
        The parsed triple, or None if the line has fewer than three fields
    """
    parts = line.split("\t")
    if len(parts) < 3:
        return None
    return _to_count(parts[0]), _to_count(parts[1]), parts[2]


def is_header_boundary(line: str) -> bool:
    """Whether a line inside a stat block looks like the next header."""
    return "|" in line and len(line) > HEADER_LENGTH_THRESHOLD


def _to_count(value: str) -> int:
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return 0
    return int(value)


class LogStreamExtractor:
    """Reconstructs canonical commits from a ``git log --numstat`` export.

    Example:
        >>> text = "abc123|Jane Doe|jane@x.com|2024-01-01 10:00:00 +0000|Fix bug\\n3\\t1\\tsrc/main.rs"
        >>> [c.files_changed for c in LogStreamExtractor(text).extract_commits()]
        [['src/main.rs']]
    """

    def __init__(self, text: str, strict: bool = True) -> None:
        """Initialize the extractor.

        Args:
            text: Raw exported log text
            strict: If True, an unparseable header date raises ParseError.
                If False, that commit and its stat block are dropped with a
                warning and scanning continues.
        """
        self.text = text
        self.strict = strict

    @classmethod
    def from_file(cls, path: Path, strict: bool = True) -> "LogStreamExtractor":
        """Create an extractor over a UTF-8 log export on disk."""
        return cls(Path(path).read_text(encoding="utf-8"), strict=strict)

    @classmethod
    def from_repository(
        cls,
        config: RepositoryConfig,
        max_count: Optional[int] = None,
        strict: bool = True,
    ) -> "LogStreamExtractor":
        """Export the log stream of a repository and wrap it.

        Args:
            config: Repository configuration
            max_count: Maximum number of commits to export
            strict: See __init__

        Raises:
            RepositoryError: If the repository cannot be opened or git log fails
        """
        return cls(export_log(config, max_count=max_count), strict=strict)

    def extract_commits(self, max_count: Optional[int] = None) -> Iterator[CanonicalCommit]:
        """Scan the stream and yield one canonical commit per header.

        Args:
            max_count: Maximum number of commits to yield

        Yields:
            CanonicalCommit objects in stream order

        Raises:
            ParseError: On an unparseable header date in strict mode
        """
        lines = self.text.splitlines()
        emitted = 0
        i = 0
        state = _State.AWAITING_HEADER

        header = None
        files_changed: List[str] = []
        insertions = 0
        deletions = 0

        while i < len(lines):
            if max_count is not None and emitted >= max_count:
                return

            line = lines[i].strip()

            if state is _State.AWAITING_HEADER:
                i += 1
                if not line:
                    continue

                header = parse_header(line)
                if header is None:
                    logger.debug("log_line_skipped", line_number=i, line=line[:80])
                    continue

                files_changed = []
                insertions = 0
                deletions = 0
                state = _State.CONSUMING_STATS
                continue

            # CONSUMING_STATS: the boundary line is left for AWAITING_HEADER
            if not line or is_header_boundary(line):
                commit = self._build_commit(header, files_changed, insertions, deletions)
                state = _State.AWAITING_HEADER
                if commit is not None:
                    emitted += 1
                    yield commit
                continue

            stat = parse_stat_line(line)
            if stat is not None:
                added, removed, path = stat
                files_changed.append(path)
                insertions += added
                deletions += removed
            i += 1

        if state is _State.CONSUMING_STATS and (max_count is None or emitted < max_count):
            commit = self._build_commit(header, files_changed, insertions, deletions)
            if commit is not None:
                yield commit

    def _build_commit(
        self,
        header: Tuple[str, str, str, str, str],
        files_changed: List[str],
        insertions: int,
        deletions: int,
    ) -> Optional[CanonicalCommit]:
        commit_hash, author_name, author_email, date_str, message = header

        try:
            commit_date = parse_log_date(date_str)
        except ParseError:
            if self.strict:
                raise
            logger.warning("log_date_unparseable", commit_hash=commit_hash, date=date_str)
            return None

        return CanonicalCommit(
            hash=commit_hash,
            author_name=author_name,
            author_email=author_email,
            commit_date=commit_date,
            message=message,
            files_changed=files_changed,
            insertions=insertions,
            deletions=deletions,
        )


def export_log(config: RepositoryConfig, max_count: Optional[int] = None) -> str:
    """Run ``git log`` with the numstat export format on a repository.

    Args:
        config: Repository configuration
        max_count: Maximum number of commits to export

    Returns:
        Raw log text

    Raises:
        RepositoryError: If the repository cannot be opened or git log fails
    """
    try:
        repo = git.Repo(config.repo_path)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
        raise RepositoryError(f"Invalid Git repository: {config.repo_path}") from e

    # Same diff as the graph walk: first parent only, no rename detection
    args = [
        f"--pretty=format:{LOG_FORMAT}",
        "--numstat",
        "--no-renames",
        "--diff-merges=first-parent",
    ]
    if max_count is not None:
        args.append(f"--max-count={max_count}")
    args.append(config.rev)

    try:
        output = repo.git.log(*args)
    except git.exc.GitCommandError as e:
        raise RepositoryError(f"Failed to get git log: {e.stderr.strip() if e.stderr else e}") from e

    logger.debug("log_exported", repo_path=str(config.repo_path), size=len(output))
    return output
