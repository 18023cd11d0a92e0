import re

from flatten_repo.pipeline import flatten
from flatten_repo.tree import generate_tree_fallback

from conftest import THRESHOLD


def missing_tree(root):
    raise FileNotFoundError("tree")


def test_flatten_renders_both_views_from_one_scan(sample_repo):
    result = flatten("https://github.com/owner/sample", sample_repo, "(unknown)", THRESHOLD, tree_lister=missing_tree)
    assert result.tree_text == generate_tree_fallback(sample_repo)
    assert re.findall(r"<source>(.*?)</source>", result.cxml_text) == [
        i.rel for i in result.infos if i.decision.include
    ]
    assert "sample" in result.html


def test_flatten_is_idempotent(sample_repo):
    first = flatten("repo", sample_repo, "abc", THRESHOLD, tree_lister=missing_tree)
    second = flatten("repo", sample_repo, "abc", THRESHOLD, tree_lister=missing_tree)
    assert first.tree_text == second.tree_text
    assert first.cxml_text == second.cxml_text
    assert first.html == second.html
