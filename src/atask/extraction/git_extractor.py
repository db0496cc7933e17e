"""Git repository history extraction by walking the commit graph."""

import re
from datetime import timezone
from typing import Iterator, Optional, Tuple

import git
import structlog
from git import Commit, Repo

from atask.errors import ParseError, RepositoryError
from atask.extraction.remote import parse_remote_url
from atask.models import CanonicalCommit, RepositoryConfig

logger = structlog.get_logger(__name__)

HEXSHA_RE = re.compile(r"^[0-9a-fA-F]{40}$")

# Well-known id of the empty tree, resolvable in every repository
EMPTY_TREE_SHA = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"
NULL_HEXSHA = "0" * 40

# Errors GitPython raises when an object or reference cannot be resolved
_RESOLUTION_ERRORS = (
    git.exc.GitCommandError,
    git.exc.BadName,
    git.exc.BadObject,
    ValueError,
)


class GraphWalkExtractor:
    """Extracts canonical commits by walking a repository's object graph.

    Every commit is diffed tree-to-tree against its first parent, or against
    the empty tree for root commits, and line counts are taken from the
    origin marker of each patch line. Renames are not detected: a moved file
    is listed under both its old and new path.
    """

    def __init__(self, config: RepositoryConfig) -> None:
        """Initialize the extractor.

        Args:
            config: Repository configuration

        Raises:
            RepositoryError: If the path does not exist or is not a repository
        """
        self.config = config
        if not config.repo_path.exists():
            raise RepositoryError(f"Repository path does not exist: {config.repo_path}")

        try:
            self.repo = Repo(config.repo_path)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise RepositoryError(f"Invalid Git repository: {config.repo_path}") from e

    def extract_commits(
        self,
        max_count: Optional[int] = None,
        rev: Optional[str] = None,
    ) -> Iterator[CanonicalCommit]:
        """Walk the history newest first and yield canonical commits.

        Args:
            max_count: Maximum number of commits to yield
            rev: Reference to start from (default: the configured rev)

        Yields:
            CanonicalCommit objects

        Raises:
            RepositoryError: If the start reference cannot be resolved or an
                object in the graph is missing
        """
        rev = rev or self.config.rev

        try:
            start = self.repo.commit(rev)
        except _RESOLUTION_ERRORS as e:
            raise RepositoryError(f"Cannot resolve reference {rev!r}: {e}") from e

        kwargs = {}
        if max_count is not None:
            if max_count <= 0:
                return
            kwargs["max_count"] = max_count

        try:
            for commit in self.repo.iter_commits(start, **kwargs):
                yield self._to_canonical(commit)
        except _RESOLUTION_ERRORS as e:
            raise RepositoryError(f"Failed to walk history from {rev!r}: {e}") from e

    def get_commit(self, commit_hash: str) -> Optional[CanonicalCommit]:
        """Look up a single commit by its full hash.

        Args:
            commit_hash: 40-character hex commit hash

        Returns:
            CanonicalCommit, or None if no such commit exists

        Raises:
            ParseError: If the hash is not a 40-character hex string
        """
        if not HEXSHA_RE.match(commit_hash):
            raise ParseError(f"Invalid commit hash format: {commit_hash!r}")

        # GitPython resolves the null sha to a placeholder without a lookup
        if commit_hash == NULL_HEXSHA:
            return None

        try:
            commit = self.repo.commit(commit_hash.lower())
        except _RESOLUTION_ERRORS:
            logger.debug("commit_not_found", commit_hash=commit_hash)
            return None

        # Tag objects are peeled to their commit, which is a different object
        if commit.hexsha != commit_hash.lower():
            logger.debug("commit_not_found", commit_hash=commit_hash, peeled_to=commit.hexsha)
            return None

        try:
            return self._to_canonical(commit)
        except _RESOLUTION_ERRORS as e:
            raise RepositoryError(f"Failed to read commit {commit_hash}: {e}") from e

    def head_hash(self) -> Optional[str]:
        """Hash of the current HEAD, or None for a repository without commits."""
        try:
            return self.repo.head.commit.hexsha
        except ValueError:
            return None

    def get_remote_url(self, remote_name: Optional[str] = None) -> str:
        """Get the URL of a named remote.

        Raises:
            RepositoryError: If the remote does not exist or has no URL
        """
        remote_name = remote_name or self.config.remote_name
        try:
            return self.repo.remote(remote_name).url
        except (ValueError, git.exc.GitCommandError) as e:
            raise RepositoryError(f"Failed to find remote {remote_name!r}") from e

    def parse_remote(
        self, remote_name: Optional[str] = None, host: Optional[str] = None
    ) -> Tuple[str, str]:
        """Get (owner, project) for a named remote.

        Raises:
            RepositoryError: If the remote does not exist
            ParseError: If its URL has an unsupported shape
        """
        url = self.get_remote_url(remote_name)
        return parse_remote_url(url, host=host or self.config.remote_host)

    def _to_canonical(self, commit: Commit) -> CanonicalCommit:
        """Build a CanonicalCommit from a GitPython Commit object.

        Args:
            commit: GitPython Commit object

        Returns:
            CanonicalCommit object
        """
        if commit.parents:
            diff_index = commit.parents[0].diff(commit, create_patch=True, no_renames=True)
        else:
            # Root commit: everything in its tree is an addition
            empty_tree = git.Tree(self.repo, bytes.fromhex(EMPTY_TREE_SHA))
            diff_index = empty_tree.diff(commit.tree, create_patch=True, no_renames=True)

        files_changed = []
        insertions = 0
        deletions = 0

        for diff in diff_index:
            path = diff.b_path or diff.a_path
            if path:
                files_changed.append(path)

            added, removed = count_patch_lines(diff.diff)
            insertions += added
            deletions += removed

        author = commit.author
        commit_date = commit.authored_datetime.astimezone(timezone.utc)

        return CanonicalCommit(
            hash=commit.hexsha,
            author_name=author.name or "Unknown",
            author_email=author.email or "unknown@example.com",
            commit_date=commit_date,
            message=_decode(commit.message),
            files_changed=files_changed,
            insertions=insertions,
            deletions=deletions,
        )


def count_patch_lines(patch) -> Tuple[int, int]:
    """Count added and removed lines in a patch by origin marker.

    Only lines inside hunks are classified; anything before the first
    ``@@`` header (file headers, binary notices) is ignored.

    Args:
        patch: Patch text as bytes or str (GitPython ``Diff.diff``)

    Returns:
        Tuple of (insertions, deletions)
    """
    if not patch:
        return 0, 0
    if isinstance(patch, bytes):
        patch = patch.decode("utf-8", errors="replace")

    insertions = 0
    deletions = 0
    in_hunk = False

    for line in patch.split("\n"):
        if line.startswith("@@"):
            in_hunk = True
            continue
        if not in_hunk or not line:
            continue

        origin = line[0]
        if origin == "+":
            insertions += 1
        elif origin == "-":
            deletions += 1

    return insertions, deletions


def _decode(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
