"""Parsing of remote URLs into (owner, project) pairs."""

from typing import Optional, Tuple

from atask.errors import ParseError


def _split_owner_project(path: str, url: str) -> Tuple[str, str]:
    """Split ``owner/project[.git]`` into its two segments."""
    path = path.rstrip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]

    parts = path.split("/")
    if len(parts) != 2 or not all(parts):
        raise ParseError(f"Invalid repository path format in remote URL: {url}")

    return parts[0], parts[1]


def parse_remote_url(url: str, host: Optional[str] = None) -> Tuple[str, str]:
    """Extract owner and project from an SSH or HTTPS remote URL.

    Supported shapes:
        ``git@host:owner/project.git``
        ``https://host/owner/project.git``

    Args:
        url: Remote URL
        host: Host marker the URL must carry (e.g. ``github``). When None,
            any host is accepted.

    Returns:
        Tuple of (owner, project)

    Raises:
        ParseError: If the URL has another shape or does not carry exactly
            two path segments
    """
    url = url.strip()
    ssh_marker = f"git@{host}" if host else "git@"

    if url.startswith(ssh_marker):
        segments = url.split(":")
        if len(segments) < 2:
            raise ParseError(f"Invalid SSH URL format: {url}")
        return _split_owner_project(segments[1], url)

    if (host and host in url) or (not host and "://" in url):
        # Drop scheme and authority, keep the path
        remainder = url.split("://", 1)[-1]
        _, slash, path = remainder.partition("/")
        if not slash:
            raise ParseError(f"Invalid HTTPS URL format: {url}")
        return _split_owner_project(path, url)

    raise ParseError(f"URL does not appear to be a supported remote: {url}")
