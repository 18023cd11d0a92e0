import pathlib

import pytest

THRESHOLD = 64
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


def write(root: pathlib.Path, rel: str, data) -> pathlib.Path:
    p = root / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, bytes):
        p.write_bytes(data)
    else:
        p.write_text(data, encoding="utf-8")
    return p


@pytest.fixture
def sample_repo(tmp_path):
    """A small checkout with one file per classification outcome plus some code."""
    root = tmp_path / "sample"
    write(root, "readme.md", "# Hello!\n\n")
    write(root, "logo.png", PNG_SIGNATURE)
    write(root, "big.txt", "x" * (THRESHOLD + 1))
    write(root, ".git/HEAD", "ref: refs/heads/main\n")
    write(root, "src/main.py", "def main():\n    return 1 < 2\n")
    return root
