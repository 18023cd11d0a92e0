"""Flatten a repository into one HTML page with a human view and a CXML view."""

from .classify import BINARY_EXTENSIONS, MAX_DEFAULT_BYTES, decide_file, looks_binary
from .cli import derive_temp_output_path
from .cxml import generate_cxml_text
from .git import acquire_repo, git_clone, git_head_commit
from .models import FileInfo, PageStats, Reason, RenderDecision
from .page import build_html, bytes_human, repo_display_name, slugify
from .pipeline import Flattened, flatten
from .scan import collect_files
from .tree import generate_tree_fallback, try_tree_command

__all__ = [
    "BINARY_EXTENSIONS", "MAX_DEFAULT_BYTES", "decide_file", "looks_binary",
    "derive_temp_output_path", "generate_cxml_text",
    "acquire_repo", "git_clone", "git_head_commit",
    "FileInfo", "PageStats", "Reason", "RenderDecision",
    "build_html", "bytes_human", "repo_display_name", "slugify",
    "Flattened", "flatten", "collect_files",
    "generate_tree_fallback", "try_tree_command",
]
