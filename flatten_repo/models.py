"""Records produced by the scanner and consumed by both renderers."""

from __future__ import annotations
import pathlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List


class Reason(str, Enum):
    OK = "ok"
    BINARY = "binary"
    TOO_LARGE = "too_large"
    IGNORED = "ignored"


@dataclass(frozen=True)
class RenderDecision:
    reason: Reason

    @property
    def include(self) -> bool:
        return self.reason is Reason.OK


@dataclass(frozen=True)
class FileInfo:
    path: pathlib.Path  # absolute path on disk
    rel: str            # path relative to repo root (slash-separated)
    size: int
    decision: RenderDecision


@dataclass(frozen=True)
class PageStats:
    """Partition of scanned files by decision reason.

    Every Reason member gets a bucket, so the buckets always add up to the
    number of files scanned.
    """

    buckets: Dict[Reason, List[FileInfo]] = field(default_factory=dict)

    @classmethod
    def from_infos(cls, infos: List[FileInfo]) -> "PageStats":
        buckets: Dict[Reason, List[FileInfo]] = {reason: [] for reason in Reason}
        for i in infos:
            buckets[i.decision.reason].append(i)
        return cls(buckets)

    @property
    def rendered(self) -> List[FileInfo]:
        return self.buckets[Reason.OK]

    @property
    def binary(self) -> List[FileInfo]:
        return self.buckets[Reason.BINARY]

    @property
    def too_large(self) -> List[FileInfo]:
        return self.buckets[Reason.TOO_LARGE]

    @property
    def ignored(self) -> List[FileInfo]:
        return self.buckets[Reason.IGNORED]

    @property
    def total(self) -> int:
        return sum(len(items) for items in self.buckets.values())

    @property
    def skipped(self) -> int:
        return self.total - len(self.rendered)

    @property
    def rendered_bytes(self) -> int:
        return sum(i.size for i in self.rendered)


# Injected collaborators. A TreeLister raises OSError or CalledProcessError
# when the listing utility is missing or fails.
TreeLister = Callable[[pathlib.Path], str]
MarkdownRenderer = Callable[[str], str]
Highlighter = Callable[[str, str], str]
