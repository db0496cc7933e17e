"""Shared fixtures: small Git repositories built with GitPython."""

import tempfile
from pathlib import Path

import git
import pytest

# 2024-01-01T10:00:00Z
BASE_TIMESTAMP = 1704103200

AUTHOR = git.Actor("Test User", "test@example.com")


def commit_files(repo, repo_path, message, files=None, remove=None, offset_hours=0, tz="+0200"):
    """Write, stage and commit files with a fixed author date."""
    for name, content in (files or {}).items():
        path = repo_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        repo.index.add([name])
    if remove:
        repo.index.remove(remove, working_tree=True)

    date = f"{BASE_TIMESTAMP + offset_hours * 3600} {tz}"
    return repo.index.commit(
        message,
        author=AUTHOR,
        committer=AUTHOR,
        author_date=date,
        commit_date=date,
    )


@pytest.fixture
def empty_repo():
    """A freshly initialized repository without commits."""
    with tempfile.TemporaryDirectory() as tmpdir:
        repo_path = Path(tmpdir)
        git.Repo.init(repo_path)
        yield repo_path


@pytest.fixture
def test_repo():
    """Create a temporary Git repository with four commits.

    1. Initial commit: README.md (1 line), docs/notes.txt (3 lines)
    2. Add main.py (2 lines)
    3. Fix: Update hello message (main.py, +1 -1)
    4. Remove notes (docs/notes.txt, -3)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        repo_path = Path(tmpdir)
        repo = git.Repo.init(repo_path)

        repo.config_writer().set_value("user", "name", "Test User").release()
        repo.config_writer().set_value("user", "email", "test@example.com").release()

        commit_files(
            repo,
            repo_path,
            "Initial commit",
            files={"README.md": "# Test Project\n", "docs/notes.txt": "a\nb\nc\n"},
        )
        commit_files(
            repo,
            repo_path,
            "Add main.py",
            files={"main.py": "def hello():\n    print('Hello, World!')\n"},
            offset_hours=1,
        )
        commit_files(
            repo,
            repo_path,
            "Fix: Update hello message",
            files={"main.py": "def hello():\n    print('Hello, ATask!')\n"},
            offset_hours=2,
        )
        commit_files(repo, repo_path, "Remove notes", remove=["docs/notes.txt"], offset_hours=3)

        yield repo_path


@pytest.fixture
def renamed_repo(test_repo):
    """test_repo plus a fifth commit that moves main.py to app.py."""
    repo = git.Repo(test_repo)
    repo.git.mv("main.py", "app.py")
    commit_files(repo, test_repo, "Rename main.py", offset_hours=4)
    return test_repo


@pytest.fixture
def merged_repo(test_repo):
    """test_repo plus a feature branch merged back with a merge commit.

    The feature branch adds feature.txt (2 lines) while the base branch
    touches README.md, so the merge cannot fast-forward.
    """
    repo = git.Repo(test_repo)
    base = repo.active_branch

    feature = repo.create_head("feature")
    feature.checkout()
    commit_files(repo, test_repo, "Add feature", files={"feature.txt": "x\ny\n"}, offset_hours=4)

    base.checkout()
    commit_files(
        repo, test_repo, "Update readme", files={"README.md": "# Test Project\n\nMore\n"}, offset_hours=5
    )

    date = f"{BASE_TIMESTAMP + 6 * 3600} +0200"
    repo.git.merge(
        "--no-ff",
        "-m",
        "Merge feature",
        "feature",
        env={"GIT_AUTHOR_DATE": date, "GIT_COMMITTER_DATE": date},
    )
    return test_repo
