from __future__ import annotations
import pathlib
from dataclasses import dataclass
from typing import List

from .cxml import generate_cxml_text
from .models import FileInfo, Highlighter, MarkdownRenderer, TreeLister
from .page import build_html, render_markdown_text
from .scan import collect_files
from .tree import tree_command, try_tree_command


@dataclass(frozen=True)
class Flattened:
    infos: List[FileInfo]
    tree_text: str
    cxml_text: str
    html: str


def flatten(
    repo_url: str,
    repo_dir: pathlib.Path,
    head_commit: str,
    max_bytes: int,
    *,
    tree_lister: TreeLister = tree_command,
    markdown_renderer: MarkdownRenderer = render_markdown_text,
    highlighter: Highlighter | None = None,
) -> Flattened:
    """Scan ``repo_dir`` once and render both views from the same records."""
    infos = collect_files(repo_dir, max_bytes)
    tree_text = try_tree_command(repo_dir, tree_lister)
    cxml_text = generate_cxml_text(infos)
    html_out = build_html(
        repo_url, head_commit, infos, tree_text, cxml_text,
        markdown_renderer=markdown_renderer,
        highlighter=highlighter,
    )
    return Flattened(infos, tree_text, cxml_text, html_out)
