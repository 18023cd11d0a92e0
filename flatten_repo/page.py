"""Human view: one self-contained HTML page for a flattened repository."""

from __future__ import annotations
import functools
import html
import logging
import pathlib
from typing import List

# External deps
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_for_filename, TextLexer
from pygments.util import ClassNotFound
import markdown

from .cxml import read_text
from .models import FileInfo, Highlighter, MarkdownRenderer, PageStats, Reason

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = {".md", ".markdown", ".mdown", ".mkd", ".mkdn"}
PYGMENTS_STYLE = "monokai"

FILE_ICONS = {
    ".py": "🐍", ".js": "🟨", ".ts": "🔵", ".jsx": "⚛️", ".tsx": "⚛️",
    ".html": "🌐", ".css": "🎨", ".scss": "🎨", ".sass": "🎨",
    ".json": "📋", ".xml": "📋", ".yaml": "📋", ".yml": "📋", ".toml": "📋",
    ".md": "📝", ".txt": "📄", ".csv": "📊", ".sql": "🗄️",
    ".sh": "⚡", ".bat": "⚡", ".ps1": "⚡",
    ".php": "🐘", ".rb": "💎", ".go": "🐹", ".rs": "🦀",
    ".c": "⚙️", ".h": "⚙️", ".cpp": "⚙️", ".d": "⚙️",
    ".java": "☕", ".kt": "🟣", ".swift": "🐦", ".dart": "🎯",
    ".vue": "💚", ".svelte": "🧡", ".dockerfile": "🐳",
    ".gitignore": "📋", ".env": "🔐", ".lock": "🔒", ".log": "📜",
}


def bytes_human(n: int) -> str:
    """Human-readable bytes: 1 decimal for KiB and above, integer for B."""
    units = ["B", "KiB", "MiB", "GiB", "TiB"]
    f = float(n)
    i = 0
    while f >= 1024.0 and i < len(units) - 1:
        f /= 1024.0
        i += 1
    if i == 0:
        return f"{int(f)} {units[i]}"
    return f"{f:.1f} {units[i]}"


def slugify(path_str: str) -> str:
    # Keep alnum, dash, underscore; replace others with '-'
    return "".join(ch if ch.isalnum() or ch in {"-", "_"} else "-" for ch in path_str)


def get_file_icon(rel: str) -> str:
    p = pathlib.PurePosixPath(rel)
    ext = p.suffix.lower() or p.name.lower()
    return FILE_ICONS.get(ext, "📄")


def render_markdown_text(md_text: str) -> str:
    return markdown.markdown(md_text, extensions=["fenced_code", "tables", "toc"])


def highlight_code(text: str, filename: str, formatter: HtmlFormatter) -> str:
    try:
        lexer = get_lexer_for_filename(filename, stripall=False)
    except ClassNotFound:
        lexer = TextLexer(stripall=False)
    return highlight(text, lexer, formatter)


def plain_highlighter(text: str, filename: str) -> str:
    return f"<pre><code>{html.escape(text)}</code></pre>"


COPY_ICON = (
    '<svg width="16" height="16" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">'
    '<rect x="9" y="9" width="13" height="13" rx="2" ry="2"></rect>'
    '<path d="M5 15H4a2 2 0 0 1-2-2V4a2 2 0 0 1 2-2h9a2 2 0 0 1 2 2v1"></path></svg>'
)

PAGE_CSS = """
:root {
  --bg-primary: #1e1e1e; --bg-secondary: #252526; --bg-tertiary: #2d2d30; --bg-hover: #37373d;
  --border-color: #3e3e42; --text-primary: #cccccc; --text-secondary: #9d9d9d; --text-muted: #6a6a6a;
  --accent-blue: #007acc; --accent-green: #4ec9b0; --accent-orange: #ce9178; --accent-red: #f48771;
  --mono: 'Cascadia Code', 'Fira Code', Monaco, 'Courier New', monospace;
}
* { margin: 0; padding: 0; box-sizing: border-box; }
body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; background: var(--bg-primary);
       color: var(--text-primary); line-height: 1.6; font-size: 14px; }
a { color: var(--accent-blue); text-decoration: none; }
a:hover { text-decoration: underline; }
.navbar { background: var(--bg-secondary); border-bottom: 1px solid var(--border-color); padding: 0 20px;
          height: 50px; display: flex; align-items: center; justify-content: space-between;
          position: sticky; top: 0; z-index: 100; }
.navbar-brand { display: flex; align-items: center; gap: 12px; font-weight: 600; font-size: 16px; }
.repo-info { display: flex; gap: 15px; font-size: 13px; color: var(--text-secondary); }
.main-container { display: grid; grid-template-columns: 300px minmax(0, 1fr); height: calc(100vh - 50px); }
.sidebar { background: var(--bg-secondary); border-right: 1px solid var(--border-color); overflow-y: auto; }
.sidebar-header { padding: 16px; border-bottom: 1px solid var(--border-color); background: var(--bg-tertiary); }
.sidebar-title { font-size: 13px; font-weight: 600; text-transform: uppercase; letter-spacing: 0.5px; margin-bottom: 12px; }
.sidebar-content { padding: 16px; }
.view-toggle { display: flex; gap: 8px; }
.toggle-btn { padding: 8px 16px; border: 1px solid var(--border-color); background: var(--bg-primary);
              color: var(--text-secondary); cursor: pointer; border-radius: 6px; font-size: 12px; }
.toggle-btn:hover { background: var(--bg-hover); border-color: var(--accent-blue); }
.toggle-btn.active { background: var(--accent-blue); color: white; border-color: var(--accent-blue); }
.toc { list-style: none; }
.toc-top { display: none; }
.toc li { margin: 2px 0; }
.toc a { display: flex; align-items: center; gap: 8px; padding: 4px 10px; color: var(--text-secondary);
         border-radius: 4px; font-size: 13px; white-space: nowrap; }
.toc a:hover { background: var(--bg-hover); color: var(--text-primary); text-decoration: none; }
.file-icon { width: 16px; flex-shrink: 0; }
.file-size { margin-left: auto; font-size: 11px; color: var(--text-muted); }
.content { overflow-y: auto; }
.content-inner { padding: 20px; }
.panel { background: var(--bg-secondary); border: 1px solid var(--border-color); border-radius: 8px;
         padding: 20px; margin-bottom: 24px; }
.panel h2 { font-size: 16px; margin-bottom: 16px; }
.meta { color: var(--text-secondary); margin-bottom: 16px; }
.meta code { font-family: var(--mono); color: var(--accent-orange); }
.stats-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(140px, 1fr)); gap: 16px; }
.stat-item { text-align: center; padding: 16px; background: var(--bg-primary); border-radius: 6px; }
.stat-value { font-size: 24px; font-weight: 600; color: var(--accent-blue); }
.stat-label { font-size: 12px; color: var(--text-muted); text-transform: uppercase; letter-spacing: 0.5px; }
pre { font-family: var(--mono); font-size: 12px; line-height: 1.4; overflow-x: auto; }
.tree-text { background: var(--bg-primary); color: var(--text-secondary); padding: 16px; border-radius: 6px; }
.skip-section { background: var(--bg-secondary); border: 1px solid var(--border-color); border-radius: 8px; margin-bottom: 16px; }
.skip-section summary { padding: 16px; cursor: pointer; font-weight: 500; }
.skip-list { padding: 0 16px 16px 16px; list-style: none; }
.skip-list li { padding: 4px 0; display: flex; justify-content: space-between; color: var(--text-secondary); }
.skip-list code { font-family: var(--mono); color: var(--accent-orange); }
.file-section { margin-bottom: 24px; }
.file-section h2 { font-size: 15px; font-family: var(--mono); margin-bottom: 8px; }
.file-section h2 .file-size { font-family: inherit; }
.code-container, .markdown-content { background: var(--bg-secondary); border: 1px solid var(--border-color);
                                     border-radius: 8px; overflow: hidden; }
.code-header { background: var(--bg-tertiary); padding: 10px 16px; border-bottom: 1px solid var(--border-color);
               display: flex; align-items: center; gap: 10px; font-size: 13px; }
.file-path { flex: 1; font-family: var(--mono); }
.copy-btn { background: var(--bg-primary); border: 1px solid var(--border-color); color: var(--text-secondary);
            padding: 6px 12px; border-radius: 4px; cursor: pointer; font-size: 12px;
            display: flex; align-items: center; gap: 6px; }
.copy-btn:hover { border-color: var(--accent-blue); color: var(--accent-blue); }
.copy-btn.copied { background: var(--accent-green); border-color: var(--accent-green); color: white; }
.highlight { margin: 0; padding: 16px; }
.highlight pre { background: transparent !important; font-size: 13px; line-height: 1.5; }
.markdown-content { padding: 20px; }
.markdown-content h1, .markdown-content h2, .markdown-content h3 { margin: 20px 0 10px 0; }
.markdown-content p { margin-bottom: 14px; color: var(--text-secondary); }
.markdown-content code { font-family: var(--mono); font-size: 12px; color: var(--accent-orange); }
.markdown-content pre { background: var(--bg-primary); padding: 16px; border-radius: 6px; margin: 14px 0; }
.back-top { font-size: 12px; margin-top: 6px; }
.error { color: var(--accent-red); background: var(--bg-tertiary); padding: 16px; border-radius: 6px;
         border-left: 4px solid var(--accent-red); white-space: pre-wrap; }
#llm-view { display: none; }
#llm-text { width: 100%; height: 70vh; background: var(--bg-primary); color: var(--text-primary);
            border: 1px solid var(--border-color); border-radius: 8px; padding: 16px;
            font-family: var(--mono); font-size: 12px; line-height: 1.4; resize: vertical; }
.llm-header { display: flex; align-items: flex-start; gap: 16px; margin-bottom: 16px; }
.llm-header p { flex: 1; color: var(--text-secondary); }
:target { scroll-margin-top: 60px; }
@media (max-width: 768px) {
  .main-container { grid-template-columns: 1fr; }
  .sidebar, .repo-info { display: none; }
  .toc-top { display: block; }
}
"""

PAGE_SCRIPT = """
function flashCopied(button) {
  const original = button.innerHTML;
  button.innerHTML = 'Copied!';
  button.classList.add('copied');
  setTimeout(() => { button.innerHTML = original; button.classList.remove('copied'); }, 2000);
}

function copyCode(button) {
  navigator.clipboard.writeText(button.getAttribute('data-content'))
    .then(() => flashCopied(button))
    .catch(err => console.error('Failed to copy: ', err));
}

function copyLLMText(button) {
  const textArea = document.getElementById('llm-text');
  textArea.select();
  navigator.clipboard.writeText(textArea.value)
    .then(() => flashCopied(button))
    .catch(err => console.error('Failed to copy: ', err));
}

function showView(name, button) {
  document.getElementById('human-view').style.display = name === 'human' ? 'block' : 'none';
  document.getElementById('llm-view').style.display = name === 'llm' ? 'block' : 'none';
  document.querySelectorAll('.toggle-btn').forEach(btn => btn.classList.remove('active'));
  button.classList.add('active');
}
"""


def repo_display_name(repo_url: str) -> str:
    name = repo_url.rstrip("/").split("/")[-1] if repo_url else ""
    if name.endswith(".git"):
        name = name[:-4]
    return name or "Repository"


def render_toc(rendered: List[FileInfo]) -> str:
    items: List[str] = []
    for i in rendered:
        items.append(
            f'<li><a href="#file-{slugify(i.rel)}"><span class="file-icon">{get_file_icon(i.rel)}</span>'
            f'{html.escape(i.rel)} <span class="file-size">({bytes_human(i.size)})</span></a></li>'
        )
    return "\n".join(items)


def render_file_body(
    info: FileInfo,
    markdown_renderer: MarkdownRenderer,
    highlighter: Highlighter,
) -> str:
    text = read_text(info.path)
    if info.path.suffix.lower() in MARKDOWN_EXTENSIONS:
        return f'<div class="markdown-content">{markdown_renderer(text)}</div>'
    code_html = highlighter(text, info.rel)
    if code_html == text:
        # A no-op highlighter hands back raw source.
        code_html = plain_highlighter(text, info.rel)
    return (
        '<div class="code-container">'
        '<div class="code-header">'
        f'<span class="file-icon">{get_file_icon(info.rel)}</span>'
        f'<span class="file-path">{html.escape(info.rel)}</span>'
        f'<button class="copy-btn" onclick="copyCode(this)" data-content="{html.escape(text)}">{COPY_ICON} Copy</button>'
        "</div>"
        f'<div class="highlight">{code_html}</div>'
        "</div>"
    )


def render_file_section(
    info: FileInfo,
    markdown_renderer: MarkdownRenderer,
    highlighter: Highlighter,
) -> str:
    try:
        body_html = render_file_body(info, markdown_renderer, highlighter)
    except Exception as e:
        # Any failure, including one raised by a collaborator, stays local to this file.
        logger.warning(f"⚠️  Failed to render {info.rel}: {e}")
        body_html = f'<pre class="error">Failed to render: {html.escape(str(e))}</pre>'
    return f"""
<section class="file-section" id="file-{slugify(info.rel)}">
  <h2>{html.escape(info.rel)} <span class="file-size">({bytes_human(info.size)})</span></h2>
  <div class="file-body">{body_html}</div>
  <div class="back-top"><a href="#top">↑ Back to top</a></div>
</section>
"""


SKIP_LIST_TITLES = [
    (Reason.BINARY, "Skipped binaries"),
    (Reason.TOO_LARGE, "Skipped large files"),
    (Reason.IGNORED, "Ignored files"),
]


def render_skip_list(title: str, items: List[FileInfo]) -> str:
    """Collapsible list of files left out for one reason; empty string if none."""
    if not items:
        return ""
    entries = "\n".join(
        f"<li><code>{html.escape(i.rel)}</code> <span class='file-size'>({bytes_human(i.size)})</span></li>"
        for i in items
    )
    summary = f"{html.escape(title)} ({len(items)})"
    return f"<details class='skip-section'><summary>{summary}</summary><ul class='skip-list'>\n{entries}\n</ul></details>"


def render_skip_lists(stats: PageStats) -> str:
    return "".join(render_skip_list(title, stats.buckets[reason]) for reason, title in SKIP_LIST_TITLES)


def render_stats(stats: PageStats) -> str:
    cells = [
        (stats.total, "Total Files"),
        (len(stats.rendered), "Rendered"),
        (len(stats.binary), "Binary"),
        (len(stats.too_large), "Too Large"),
        (len(stats.ignored), "Ignored"),
        (bytes_human(stats.rendered_bytes), "Rendered Size"),
    ]
    return "\n".join(
        f'<div class="stat-item"><div class="stat-value">{value}</div>'
        f'<div class="stat-label">{label}</div></div>'
        for value, label in cells
    )


def build_html(
    repo_url: str,
    head_commit: str,
    infos: List[FileInfo],
    tree_text: str,
    cxml_text: str,
    *,
    markdown_renderer: MarkdownRenderer = render_markdown_text,
    highlighter: Highlighter | None = None,
) -> str:
    formatter = HtmlFormatter(nowrap=False, style=PYGMENTS_STYLE)
    pygments_css = formatter.get_style_defs(".highlight")
    if highlighter is None:
        highlighter = functools.partial(highlight_code, formatter=formatter)

    stats = PageStats.from_infos(infos)
    repo_name = repo_display_name(repo_url)
    toc_html = render_toc(stats.rendered)
    sections = [render_file_section(i, markdown_renderer, highlighter) for i in stats.rendered]
    skipped_html = render_skip_lists(stats)
    short_head = head_commit[:8] if len(head_commit) == 40 else head_commit

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width, initial-scale=1" />
<title>Flattened repo – {html.escape(repo_url)}</title>
<link rel="icon" href="data:image/svg+xml,<svg xmlns='http://www.w3.org/2000/svg' viewBox='0 0 100 100'><text y='.9em' font-size='90'>📁</text></svg>">
<style>
{PAGE_CSS}
/* Pygments */
{pygments_css}
</style>
</head>
<body>
<a id="top"></a>

<nav class="navbar">
  <div class="navbar-brand"><span class="logo">📁</span><span>{html.escape(repo_name)}</span></div>
  <div class="repo-info">
    <span>📦 {html.escape(repo_url)}</span>
    <span>🔗 {html.escape(short_head)}</span>
  </div>
</nav>

<div class="main-container">
  <div class="sidebar">
    <div class="sidebar-header">
      <div class="sidebar-title">Contents ({len(stats.rendered)})</div>
      <div class="view-toggle">
        <button class="toggle-btn active" onclick="showView('human', this)">👤 Human</button>
        <button class="toggle-btn" onclick="showView('llm', this)">🤖 LLM</button>
      </div>
    </div>
    <div class="sidebar-content">
      <ul class="toc">
{toc_html}
      </ul>
    </div>
  </div>

  <div class="content">
    <div class="content-inner">

      <div id="human-view">
        <section class="panel">
          <div class="meta">
            <div><strong>Repository:</strong> <code>{html.escape(repo_url)}</code></div>
            <div><strong>HEAD commit:</strong> <code>{html.escape(head_commit)}</code></div>
            <div><strong>Total files:</strong> {stats.total} · <strong>Rendered:</strong> {len(stats.rendered)} · <strong>Skipped:</strong> {stats.skipped}</div>
          </div>
          <div class="stats-grid">
{render_stats(stats)}
          </div>
        </section>

        <section class="panel toc-top">
          <h2>📑 Contents ({len(stats.rendered)})</h2>
          <ul class="toc">
{toc_html}
          </ul>
        </section>

        <section class="panel">
          <h2>🌳 Directory Structure</h2>
          <pre class="tree-text">{html.escape(tree_text)}</pre>
        </section>

        {skipped_html}

        {''.join(sections)}
      </div>

      <div id="llm-view">
        <section class="panel">
          <h2>🤖 LLM View - CXML Format</h2>
          <div class="llm-header">
            <p>Copy the text below and paste it into an LLM for analysis.</p>
            <button class="copy-btn" onclick="copyLLMText(this)">{COPY_ICON} Copy All</button>
          </div>
          <textarea id="llm-text" readonly>{html.escape(cxml_text)}</textarea>
        </section>
      </div>

    </div>
  </div>
</div>

<script>
{PAGE_SCRIPT}
</script>
</body>
</html>
"""
