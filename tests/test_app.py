import os
import shutil
import subprocess
import time

import pytest

import app as web


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("FLATTEN_OUTPUT_DIR", str(tmp_path / "output"))
    monkeypatch.setattr(web, "processing_status", {})
    web.app.config["TESTING"] = True
    with web.app.test_client() as c:
        yield c


@pytest.fixture
def fake_clone(sample_repo, monkeypatch):
    monkeypatch.setattr(web, "git_clone", lambda url, dst: shutil.copytree(sample_repo, dst))
    monkeypatch.setattr(web, "git_head_commit", lambda repo_dir: "a" * 40)


@pytest.mark.parametrize(
    "url, valid",
    [
        ("https://github.com/owner/repo", True),
        ("https://github.com/owner/repo.git", True),
        ("git@github.com:owner/repo.git", True),
        ("https://gitlab.com/owner/repo", False),
        ("", False),
    ],
)
def test_is_valid_github_url(url, valid):
    assert web.is_valid_github_url(url) == valid


def test_index(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"Repo Flattener" in resp.data


@pytest.mark.parametrize(
    "payload, message",
    [
        ({}, "Repository URL is required"),
        ({"repo_url": "https://example.com/x"}, "valid GitHub repository URL"),
        ({"repo_url": "https://github.com/o/r", "max_bytes": "big"}, "max_bytes"),
        ({"repo_url": "https://github.com/o/r", "max_bytes": 0}, "max_bytes"),
    ],
)
def test_process_rejects_bad_input(client, payload, message):
    resp = client.post("/process", json=payload)
    assert resp.status_code == 400
    assert message in resp.get_json()["error"]


def test_process_starts_background_job(client, monkeypatch):
    calls = []
    monkeypatch.setattr(web, "process_repo", lambda *args: calls.append(args))
    resp = client.post("/process", json={"repo_url": "https://github.com/o/r", "max_bytes": 1000})
    task_id = resp.get_json()["task_id"]
    deadline = time.time() + 5
    while not calls and time.time() < deadline:
        time.sleep(0.01)
    assert calls == [(task_id, "https://github.com/o/r", 1000)]


def test_unknown_task(client):
    assert client.get("/status/nope").status_code == 404
    assert client.get("/download/nope").status_code == 404
    assert client.get("/view/nope").status_code == 404


def test_process_repo_success(client, fake_clone):
    web.process_repo("t1", "https://github.com/owner/sample.git", 64)
    status = client.get("/status/t1").get_json()
    assert status["status"] == "complete"
    assert status["progress"] == 100

    view = client.get("/view/t1")
    assert view.status_code == 200
    assert b'id="file-src-main-py"' in view.data
    view.close()

    download = client.get("/download/t1")
    assert "sample_flattened.html" in download.headers["Content-Disposition"]
    download.close()


def test_process_repo_clone_failure(client, monkeypatch):
    def fail(url, dst):
        raise subprocess.CalledProcessError(128, ["git", "clone"], stderr="remote: Repository not found.")

    monkeypatch.setattr(web, "git_clone", fail)
    web.process_repo("t2", "https://github.com/owner/missing", 64)
    status = client.get("/status/t2").get_json()
    assert status["status"] == "error"
    assert status["message"] == "Repository not found"


def test_cleanup_removes_stale_pages(client, tmp_path):
    out = web.output_dir()
    out.mkdir(parents=True)
    stale = out / "old.html"
    fresh = out / "new.html"
    stale.write_text("old")
    fresh.write_text("new")
    week_ago = time.time() - 7 * 24 * 3600
    os.utime(stale, (week_ago, week_ago))
    web.processing_status["old"] = {"status": "complete"}

    web.cleanup_old_files()

    assert not stale.exists()
    assert fresh.exists()
    assert "old" not in web.processing_status
