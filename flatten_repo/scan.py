from __future__ import annotations
import logging
import os
import pathlib
from typing import List

from .classify import decide_file
from .models import FileInfo

logger = logging.getLogger(__name__)


def iter_regular_files(repo_root: pathlib.Path) -> List[pathlib.Path]:
    """Every regular file under ``repo_root``, symlinks excluded, ordered by relative path string.

    Failing to list the root itself raises; unreadable subdirectories are
    skipped with a warning.
    """
    if not repo_root.is_dir():
        raise NotADirectoryError(f"Not a directory: {repo_root}")

    def on_error(err: OSError) -> None:
        if pathlib.Path(err.filename) == repo_root:
            raise err
        logger.warning(f"⚠️  Skipping unreadable directory {err.filename}: {err.strerror}")

    paths: List[pathlib.Path] = []
    for dirpath, _, filenames in os.walk(repo_root, onerror=on_error, followlinks=False):
        for name in filenames:
            p = pathlib.Path(dirpath, name)
            if p.is_symlink():
                continue
            if p.is_file():
                paths.append(p)
    return sorted(paths, key=lambda p: p.relative_to(repo_root).as_posix())


def collect_files(repo_root: pathlib.Path, max_bytes: int) -> List[FileInfo]:
    repo_root = pathlib.Path(repo_root)
    return [decide_file(p, repo_root, max_bytes) for p in iter_regular_files(repo_root)]
