"""
Flatten a git repo (or a local directory) into a single static HTML page for
fast skimming and Ctrl+F, with an embedded CXML view for LLMs.
"""

from __future__ import annotations
import argparse
import logging
import pathlib
import shutil
import subprocess
import sys
import tempfile
import webbrowser

from .classify import MAX_DEFAULT_BYTES
from .git import acquire_repo
from .page import bytes_human, repo_display_name
from .pipeline import flatten


def derive_temp_output_path(repo_url: str) -> pathlib.Path:
    """Derive a temporary output path from the repo URL."""
    name = repo_display_name(repo_url)
    filename = "repo.html" if name == "Repository" else f"{name}.html"
    return pathlib.Path(tempfile.gettempdir()) / filename


def normalize_output_path(out: str) -> pathlib.Path:
    p = pathlib.Path(out)
    if p.suffix.lower() not in {".html", ".htm"}:
        p = p.with_name(p.name + ".html")
    return p


def positive_int(value: str) -> int:
    n = int(value)
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return n


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(prog="flatten-repo", description="Flatten a git repo to a single HTML page")
    ap.add_argument("repo_url", help="Git repo URL (https://github.com/owner/repo[.git]) or a local directory")
    ap.add_argument("-o", "--out", help="Output HTML file path (default: temporary file derived from repo name)")
    ap.add_argument("--max-bytes", type=positive_int, default=MAX_DEFAULT_BYTES, help="Max file size to render (bytes); larger files are listed but skipped")
    ap.add_argument("--no-open", action="store_true", help="Don't open the HTML file in browser after generation")
    return ap.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stderr)

    out_path = normalize_output_path(args.out) if args.out else derive_temp_output_path(args.repo_url)

    tmpdir = tempfile.mkdtemp(prefix="flatten_repo_")
    try:
        print(f"📁 Fetching {args.repo_url} (work dir: {tmpdir})", file=sys.stderr)
        try:
            repo_dir, head = acquire_repo(args.repo_url, pathlib.Path(tmpdir))
        except subprocess.CalledProcessError as e:
            print(f"✗ Clone failed: {(e.stderr or str(e)).strip()}", file=sys.stderr)
            return 1
        except OSError as e:
            print(f"✗ Clone failed: {e}", file=sys.stderr)
            return 1
        print(f"✓ Repository ready at {repo_dir} (HEAD: {head[:8] if len(head) == 40 else head})", file=sys.stderr)

        print(f"📊 Scanning files in {repo_dir}...", file=sys.stderr)
        try:
            result = flatten(args.repo_url, repo_dir, head, args.max_bytes)
        except OSError as e:
            print(f"✗ Cannot scan {repo_dir}: {e}", file=sys.stderr)
            return 1
        rendered_count = sum(1 for i in result.infos if i.decision.include)
        skipped_count = len(result.infos) - rendered_count
        print(f"✓ Found {len(result.infos)} files total ({rendered_count} rendered, {skipped_count} skipped)", file=sys.stderr)

        print(f"💾 Writing HTML file: {out_path.resolve()}", file=sys.stderr)
        out_path.write_text(result.html, encoding="utf-8")
        print(f"✓ Wrote {bytes_human(out_path.stat().st_size)} to {out_path}", file=sys.stderr)

        if not args.no_open:
            print(f"🌐 Opening {out_path} in browser...", file=sys.stderr)
            webbrowser.open(out_path.resolve().as_uri())
        return 0
    finally:
        print(f"🗑️  Cleaning up temporary directory: {tmpdir}", file=sys.stderr)
        shutil.rmtree(tmpdir, ignore_errors=True)


if __name__ == "__main__":
    sys.exit(main())
