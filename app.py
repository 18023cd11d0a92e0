from flask import Flask, render_template, request, jsonify, send_file, abort
import logging
import os
import tempfile
import shutil
import subprocess
import pathlib
import uuid
import threading
import time
import re

from flatten_repo import (
    git_clone, git_head_commit, flatten, repo_display_name, MAX_DEFAULT_BYTES
)

app = Flask(__name__)
logger = logging.getLogger(__name__)

OUTPUT_MAX_AGE_SECONDS = 24 * 60 * 60

# task_id -> status dict
processing_status = {}

GITHUB_PATTERNS = [
    r'^https://github\.com/[\w\-\.]+/[\w\-\.]+/?$',
    r'^https://github\.com/[\w\-\.]+/[\w\-\.]+\.git/?$',
    r'^git@github\.com:[\w\-\.]+/[\w\-\.]+\.git$',
]


def output_dir() -> pathlib.Path:
    return pathlib.Path(os.environ.get('FLATTEN_OUTPUT_DIR', 'output'))


def is_valid_github_url(url):
    """Validate if the URL is a valid GitHub repository URL."""
    if not url:
        return False
    return any(re.match(pattern, url.strip()) for pattern in GITHUB_PATTERNS)


def process_repo(task_id, repo_url, max_bytes):
    """Clone, flatten and store one repository; progress goes to processing_status."""
    processing_status[task_id] = {
        'status': 'cloning',
        'message': 'Cloning repository...',
        'progress': 10,
        'repo_url': repo_url,
    }

    tmpdir = tempfile.mkdtemp(prefix="flatten_repo_web_")
    try:
        repo_dir = pathlib.Path(tmpdir, "repo")
        git_clone(repo_url, str(repo_dir))
        head = git_head_commit(str(repo_dir))

        processing_status[task_id].update(
            status='generating', message='Scanning files and generating HTML...', progress=50
        )
        result = flatten(repo_url, repo_dir, head, max_bytes)

        out_dir = output_dir()
        out_dir.mkdir(parents=True, exist_ok=True)
        output_file = out_dir / f"{task_id}.html"
        output_file.write_text(result.html, encoding="utf-8")

        processing_status[task_id].update(
            status='complete',
            message='HTML generated successfully!',
            progress=100,
            file_path=str(output_file.resolve()),
            file_size=output_file.stat().st_size,
        )

    except subprocess.CalledProcessError as e:
        stderr = e.stderr or ''
        error_msg = "Repository not found or access denied"
        if "Authentication failed" in stderr:
            error_msg = "Private repository - authentication required"
        elif "not found" in stderr.lower():
            error_msg = "Repository not found"
        logger.warning(f"Clone of {repo_url} failed: {stderr.strip()}")
        processing_status[task_id].update(status='error', message=error_msg, progress=0)
    except Exception as e:
        logger.exception(f"Flattening {repo_url} failed")
        processing_status[task_id].update(status='error', message=f'Error: {e}', progress=0)
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)


def completed_file(task_id) -> str:
    status_info = processing_status.get(task_id)
    if status_info is None or status_info['status'] != 'complete':
        abort(404)
    file_path = status_info['file_path']
    if not os.path.exists(file_path):
        abort(404)
    return file_path


@app.route('/')
def index():
    return render_template('index.html', max_bytes=MAX_DEFAULT_BYTES)


@app.route('/process', methods=['POST'])
def process():
    data = request.get_json(silent=True) or {}
    repo_url = (data.get('repo_url') or '').strip()
    max_bytes = data.get('max_bytes', MAX_DEFAULT_BYTES)

    if not repo_url:
        return jsonify({'error': 'Repository URL is required'}), 400

    if not is_valid_github_url(repo_url):
        return jsonify({'error': 'Please enter a valid GitHub repository URL'}), 400

    if not isinstance(max_bytes, int) or isinstance(max_bytes, bool) or max_bytes <= 0:
        return jsonify({'error': 'max_bytes must be a positive integer'}), 400

    task_id = str(uuid.uuid4())
    thread = threading.Thread(target=process_repo, args=(task_id, repo_url, max_bytes))
    thread.daemon = True
    thread.start()

    return jsonify({'task_id': task_id})


@app.route('/status/<task_id>')
def status(task_id):
    if task_id not in processing_status:
        return jsonify({'error': 'Task not found'}), 404
    return jsonify(processing_status[task_id])


@app.route('/download/<task_id>')
def download(task_id):
    file_path = completed_file(task_id)
    repo_name = repo_display_name(processing_status[task_id]['repo_url'])
    return send_file(file_path, as_attachment=True, download_name=f"{repo_name}_flattened.html")


@app.route('/view/<task_id>')
def view(task_id):
    return send_file(completed_file(task_id))


def cleanup_old_files(now=None):
    """Remove generated pages older than OUTPUT_MAX_AGE_SECONDS."""
    out_dir = output_dir()
    if not out_dir.exists():
        return

    cutoff_time = (now or time.time()) - OUTPUT_MAX_AGE_SECONDS
    for file_path in out_dir.glob("*.html"):
        try:
            if file_path.stat().st_mtime < cutoff_time:
                file_path.unlink()
                processing_status.pop(file_path.stem, None)
        except OSError as e:
            logger.warning(f"Could not remove {file_path}: {e}")


def start_cleanup_thread():
    def cleanup_loop():
        while True:
            time.sleep(3600)
            cleanup_old_files()

    cleanup_thread = threading.Thread(target=cleanup_loop)
    cleanup_thread.daemon = True
    cleanup_thread.start()


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    output_dir().mkdir(parents=True, exist_ok=True)
    start_cleanup_thread()

    # Render-style hosting passes the port in the environment
    port = int(os.environ.get('PORT', 5000))
    app.run(debug=False, host='0.0.0.0', port=port)
