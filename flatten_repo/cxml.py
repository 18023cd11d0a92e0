"""CXML document: the flat, tagged view of every rendered file for LLM consumption."""

from __future__ import annotations
import logging
import pathlib
from typing import List

from .models import FileInfo, PageStats

logger = logging.getLogger(__name__)


def read_text(path: pathlib.Path) -> str:
    """Decode as UTF-8, falling back to latin-1 so every byte survives."""
    data = path.read_bytes()
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning(f"⚠️  {path} is not valid UTF-8; decoding as latin-1")
        return data.decode("latin-1")


def document_content(info: FileInfo) -> str:
    try:
        return read_text(info.path)
    except OSError as e:
        logger.warning(f"⚠️  Failed to read {info.rel}: {e}")
        return f"Failed to read: {e}"


def generate_cxml_text(infos: List[FileInfo]) -> str:
    """Wrap each rendered file in a numbered <document>, in scan order.

    Files whose decision is not OK are left out, so indices run 1..N over
    the rendered files only.
    """
    documents = [
        f'<document index="{index}">\n'
        f"<source>{info.rel}</source>\n"
        f"<document_content>\n{document_content(info)}\n</document_content>\n"
        "</document>"
        for index, info in enumerate(PageStats.from_infos(infos).rendered, 1)
    ]
    return "\n".join(["<documents>", *documents, "</documents>"])
