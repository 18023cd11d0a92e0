"""Thin wrappers over the external ``git`` and ``tree`` programs."""

from __future__ import annotations
import pathlib
import subprocess
from typing import List, Tuple

UNKNOWN_COMMIT = "(unknown)"


def run(cmd: List[str], cwd: str | None = None, check: bool = True) -> subprocess.CompletedProcess:
    """Run ``cmd`` capturing text output; raises OSError if the program is missing."""
    return subprocess.run(cmd, cwd=cwd, check=check, text=True, capture_output=True)


def git_clone(url: str, dst: str) -> None:
    """Shallow clone, HEAD only."""
    run(["git", "clone", "--depth", "1", url, dst])


def git_head_commit(repo_dir: str) -> str:
    """Full HEAD hash, or UNKNOWN_COMMIT when ``repo_dir`` is not a readable git checkout."""
    try:
        return run(["git", "rev-parse", "HEAD"], cwd=repo_dir).stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        return UNKNOWN_COMMIT


def acquire_repo(locator: str, workdir: pathlib.Path) -> Tuple[pathlib.Path, str]:
    """Return a local snapshot of ``locator`` and its HEAD commit.

    A path to an existing directory is used in place; anything else is
    treated as a git URL and shallow-cloned into ``workdir/repo``.
    Clone failures propagate as CalledProcessError, or OSError when git
    itself cannot be started.
    """
    local = pathlib.Path(locator).expanduser()
    if local.is_dir():
        repo_dir = local.resolve()
    else:
        repo_dir = pathlib.Path(workdir, "repo")
        git_clone(locator, str(repo_dir))
    return repo_dir, git_head_commit(str(repo_dir))
