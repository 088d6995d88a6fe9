"""
Last-modified timestamps from git history.

Files that live inside a vendored submodule (``submodules/<name>/...``) are
looked up in that submodule's own repository. Any git failure yields None;
history only annotates output and never affects what gets copied.
"""

from __future__ import annotations

import subprocess
from datetime import datetime, timezone
from pathlib import Path

from ._logging import scoped_logger

__all__ = ["git_last_modified", "resolve_repository"]

log = scoped_logger("history")


def resolve_repository(path: Path, workspace_root: Path, submodules_dir: Path) -> tuple[str | None, Path, Path]:
    """
    Find which repository owns ``path``.

    Returns:
        (submodule name or None, repository root, path relative to that root)
    """
    absolute = path.resolve()
    submodules = submodules_dir.resolve()
    if absolute.is_relative_to(submodules) and absolute != submodules:
        name = absolute.relative_to(submodules).parts[0]
        repo_root = submodules / name
        return name, repo_root, absolute.relative_to(repo_root)

    workspace = workspace_root.resolve()
    if absolute.is_relative_to(workspace):
        return None, workspace, absolute.relative_to(workspace)
    return None, workspace, absolute


def _to_iso(value: str) -> str:
    """Normalize a git ISO-8601 date to UTC with millisecond precision."""
    dt = datetime.fromisoformat(value).astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{dt.microsecond // 1000:03d}Z"


def git_last_modified(
    path: Path,
    workspace_root: Path | None = None,
    submodules_dir: Path | None = None,
) -> str | None:
    """
    Get the last commit date touching ``path``.

    Args:
        path: Source file (symlinks are resolved first).
        workspace_root: Main repository root. Defaults to the current directory.
        submodules_dir: Directory holding submodules. Defaults to ``<root>/submodules``.

    Returns:
        ISO-8601 UTC timestamp such as ``2024-05-01T12:30:00.000Z``, or None
        when git or the file's history is unavailable.
    """
    root = workspace_root or Path.cwd()
    _, repo_root, relative = resolve_repository(path, root, submodules_dir or root / "submodules")

    try:
        result = subprocess.run(
            ["git", "log", "-1", "--format=%cI", "--", str(relative)],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        log.debug("git history unavailable", extra={"path": str(path), "error": str(e)})
        return None

    stamp = result.stdout.strip()
    if not stamp:
        return None

    try:
        return _to_iso(stamp)
    except ValueError:
        log.debug("Unparseable git date", extra={"path": str(path), "value": stamp})
        return None
