from __future__ import annotations
import logging
import os
import pathlib

from .models import FileInfo, Reason, RenderDecision

logger = logging.getLogger(__name__)

MAX_DEFAULT_BYTES = 50 * 1024
BINARY_SNIFF_BYTES = 8192
VCS_DIR = ".git"
BINARY_EXTENSIONS = {
    ".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".svg", ".ico",
    ".pdf", ".zip", ".tar", ".gz", ".bz2", ".xz", ".7z", ".rar",
    ".mp3", ".mp4", ".mov", ".avi", ".mkv", ".wav", ".ogg", ".flac",
    ".ttf", ".otf", ".eot", ".woff", ".woff2",
    ".so", ".dll", ".dylib", ".class", ".jar", ".exe", ".bin",
}


def is_ignored(rel: str) -> bool:
    """True if any directory component of ``rel`` is the VCS metadata dir."""
    return VCS_DIR in rel.split("/")[:-1]


def _valid_utf8_prefix(chunk: bytes) -> bool:
    try:
        chunk.decode("utf-8")
        return True
    except UnicodeDecodeError as e:
        # A multi-byte sequence cut off by the prefix boundary is not an error.
        return len(chunk) == BINARY_SNIFF_BYTES and e.reason == "unexpected end of data"


def looks_binary(path: pathlib.Path) -> bool:
    ext = path.suffix.lower()
    if ext in BINARY_EXTENSIONS:
        return True
    try:
        with path.open("rb") as f:
            chunk = f.read(BINARY_SNIFF_BYTES)
    except OSError as e:
        # If unreadable, treat as binary to be safe
        logger.warning(f"⚠️  Cannot read {path}: {e}")
        return True
    if b"\x00" in chunk:
        return True
    return not _valid_utf8_prefix(chunk)


def file_size(path: pathlib.Path) -> int:
    try:
        return path.stat().st_size
    except OSError as e:
        logger.warning(f"⚠️  Cannot stat {path}: {e}")
        return 0


def decide_file(path: pathlib.Path, repo_root: pathlib.Path, max_bytes: int) -> FileInfo:
    rel = str(path.relative_to(repo_root)).replace(os.sep, "/")
    size = file_size(path)
    if is_ignored(rel):
        reason = Reason.IGNORED
    elif size > max_bytes:
        reason = Reason.TOO_LARGE
    elif looks_binary(path):
        reason = Reason.BINARY
    else:
        reason = Reason.OK
    return FileInfo(path, rel, size, RenderDecision(reason))
