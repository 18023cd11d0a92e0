import pathlib

import pytest

from flatten_repo.classify import (
    BINARY_SNIFF_BYTES,
    decide_file,
    file_size,
    is_ignored,
    looks_binary,
)
from flatten_repo.models import Reason, RenderDecision

from conftest import PNG_SIGNATURE, THRESHOLD, write


@pytest.mark.parametrize("rel", [".git/HEAD", ".git/refs/heads/main", "vendor/lib/.git/config"])
def test_vcs_metadata_is_ignored(rel):
    assert is_ignored(rel)


@pytest.mark.parametrize("rel", [".gitignore", ".github/workflows/ci.yml", "a.git/b", "docs/.git", "README.md"])
def test_non_vcs_paths_are_not_ignored(rel):
    assert not is_ignored(rel)


def test_decision_include_follows_reason():
    for reason in Reason:
        assert RenderDecision(reason).include == (reason is Reason.OK)


def test_binary_extension_short_circuits_content(tmp_path):
    p = write(tmp_path, "ICON.PNG", "plain text really")
    assert looks_binary(p)


def test_nul_byte_is_binary(tmp_path):
    assert looks_binary(write(tmp_path, "data.dat", b"abc\x00def"))


def test_invalid_utf8_prefix_is_binary(tmp_path):
    assert looks_binary(write(tmp_path, "latin.txt", b"caf\xe9 au lait"))


def test_plain_text_is_not_binary(tmp_path):
    assert not looks_binary(write(tmp_path, "notes.txt", "héllo wörld\n"))


def test_empty_file_is_not_binary(tmp_path):
    assert not looks_binary(write(tmp_path, "empty.py", b""))


def test_multibyte_char_split_at_prefix_boundary_is_text(tmp_path):
    data = b"a" * (BINARY_SNIFF_BYTES - 1) + "é".encode("utf-8") + b"tail\n"
    assert not looks_binary(write(tmp_path, "long.txt", data))


def test_unreadable_file_is_binary(tmp_path):
    assert looks_binary(tmp_path / "missing.txt")


def test_missing_file_size_is_zero(tmp_path):
    assert file_size(tmp_path / "missing.txt") == 0


def test_scenario_classification(sample_repo):
    expected = {
        "readme.md": Reason.OK,
        "logo.png": Reason.BINARY,
        "big.txt": Reason.TOO_LARGE,
        ".git/HEAD": Reason.IGNORED,
    }
    for rel, reason in expected.items():
        info = decide_file(sample_repo / rel, sample_repo, THRESHOLD)
        assert info.rel == rel
        assert info.decision.reason is reason
        assert info.path == sample_repo / rel


def test_size_at_threshold_is_included(tmp_path):
    p = write(tmp_path, "edge.txt", "y" * THRESHOLD)
    info = decide_file(p, tmp_path, THRESHOLD)
    assert info.size == THRESHOLD
    assert info.decision.reason is Reason.OK


def test_ignored_takes_precedence_over_size(tmp_path):
    p = write(tmp_path, ".git/objects/pack/big.pack", b"\x00" * (THRESHOLD * 4))
    assert decide_file(p, tmp_path, THRESHOLD).decision.reason is Reason.IGNORED


def test_too_large_takes_precedence_over_binary(tmp_path):
    p = write(tmp_path, "huge.png", PNG_SIGNATURE * 10)
    assert decide_file(p, tmp_path, THRESHOLD).decision.reason is Reason.TOO_LARGE


def test_unstatable_file_counts_as_zero_bytes(tmp_path):
    info = decide_file(tmp_path / "gone.txt", tmp_path, THRESHOLD)
    assert info.size == 0
    assert info.decision.reason is Reason.BINARY


def test_rel_uses_forward_slashes(tmp_path):
    p = write(tmp_path, "a/b/c.txt", "c")
    assert decide_file(p, tmp_path, THRESHOLD).rel == "a/b/c.txt"
    assert isinstance(decide_file(p, tmp_path, THRESHOLD).path, pathlib.Path)
