from __future__ import annotations
import logging
import pathlib
import subprocess
from typing import List

from .classify import VCS_DIR
from .git import run
from .models import TreeLister

logger = logging.getLogger(__name__)


def generate_tree_fallback(root: pathlib.Path) -> str:
    """Minimal tree-like output if `tree` command is missing."""
    lines: List[str] = []

    def walk(dir_path: pathlib.Path, prefix: str = ""):
        try:
            entries = [e for e in dir_path.iterdir() if not (e.name == VCS_DIR and e.is_dir())]
        except OSError as e:
            logger.warning(f"⚠️  Cannot list {dir_path}: {e}")
            return
        entries.sort(key=lambda e: (not e.is_dir(), e.name.lower(), e.name))
        for i, e in enumerate(entries):
            last = i == len(entries) - 1
            branch = "└── " if last else "├── "
            lines.append(prefix + branch + e.name)
            if e.is_dir() and not e.is_symlink():
                extension = "    " if last else "│   "
                walk(e, prefix + extension)

    lines.append(root.name)
    walk(root)
    return "\n".join(lines)


def tree_command(root: pathlib.Path) -> str:
    cp = run(["tree", "-a", "-I", VCS_DIR, "."], cwd=str(root))
    return cp.stdout


def try_tree_command(root: pathlib.Path, lister: TreeLister = tree_command) -> str:
    try:
        text = lister(root)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.info(f"🌳 `tree` unavailable ({e}); using built-in tree")
        return generate_tree_fallback(root)
    if not text.strip():
        return generate_tree_fallback(root)
    return text
