"""HTML rendering of the analyzer page."""

from __future__ import annotations

from html import escape
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from imagelabeler.client.state import ClientState
    from imagelabeler.labels import Label

PAGE_TITLE = "Live Image Label Analyzer"

_STYLE = """
body { font-family: system-ui, sans-serif; max-width: 960px; margin: 2rem auto; padding: 0 1rem; }
.page { display: flex; flex-direction: column; }
.controls { order: 1; }
.preview-wrap { order: 2; }
.status-stream { order: 3; }
.status-stream > .status-row:not(:last-child) { display: none; }
.error { order: 4; }
.labels-grid { order: 5; }
.file-name { margin-top: .5rem; color: #444; }
.input-row { display: flex; gap: .5rem; }
.url-input { flex: 1; padding: .5rem; }
.or-row { margin: .75rem 0; color: #666; }
.preview-img { max-width: 100%; max-height: 320px; margin: 1rem 0; }
.preview-placeholder { padding: 3rem; border: 2px dashed #ccc; text-align: center; color: #999; margin: 1rem 0; }
.progress-bar-outer, .confidence-bar-outer { background: #eee; height: 8px; border-radius: 4px; overflow: hidden; }
.progress-bar-inner { background: #3b82f6; height: 100%; }
.confidence-bar-inner { height: 100%; }
.error { color: #b91c1c; margin: 1rem 0; }
.labels-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(180px, 1fr)); gap: 1rem; margin-top: 1rem; }
.label-card { padding: .75rem; border-radius: 6px; box-shadow: 0 1px 3px rgba(0,0,0,.15); }
.label-name { font-weight: 600; }
"""


def display_confidence(value: float) -> float:
    """Clamp a confidence to [0, 100] and round it to two decimal places."""
    return round(min(max(value, 0.0), 100.0), 2)


def percent_to_color(pct: float) -> str:
    """0 -> red, 50 -> orange, 100 -> green."""
    hue = display_confidence(pct) * 1.2
    return f"hsl({hue:g}, 75%, 45%)"


def render_label_card(label: Label) -> str:
    pct = display_confidence(label.confidence)
    color = percent_to_color(pct)
    return (
        f'<div class="label-card" style="border-top: 6px solid {color}">'
        f'<div class="label-name">{escape(label.name)}</div>'
        f'<div class="label-confidence">{pct:g}%</div>'
        '<div class="confidence-bar-outer">'
        f'<div class="confidence-bar-inner" style="width: {pct:g}%; background: {color}"></div>'
        "</div></div>"
    )


def _render_preview(state: ClientState) -> str:
    if state.preview_src:
        return f'<img src="{escape(state.preview_src)}" alt="preview" class="preview-img">'
    return '<div class="preview-placeholder">Image preview</div>'


def _render_status(state: ClientState) -> str:
    percent = state.progress.percent
    if state.is_loading:
        text = f'<div class="loading-text">Analyzing… {percent}% ({escape(state.progress.label)})</div>'
    else:
        text = '<div class="idle-text">Ready</div>'
    return (
        '<div class="status-row">'
        f'<div class="progress-bar-outer" aria-hidden="true"><div class="progress-bar-inner" style="width: {percent}%"></div></div>'
        f"{text}</div>"
    )


def _render_labels(state: ClientState) -> str:
    if not state.labels and not state.is_loading:
        return '<div class="hint">No labels yet — run an analysis.</div>'
    return "".join(render_label_card(label) for label in state.labels)


def _render_form(state: ClientState, css_class: str = "controls") -> str:
    disabled = " disabled" if state.is_loading else ""
    file_name = f'<div class="file-name">Selected file: {escape(state.file_name)}</div>' if state.file_name else ""
    return f"""<form method="post" action="/" enctype="multipart/form-data" class="{css_class}">
<div class="input-row">
<input class="url-input" name="image_url" placeholder="Enter image URL..." value="{escape(state.image_url)}"{disabled}>
<button class="btn" type="submit"{disabled}>Analyze</button>
</div>
<div class="or-row">or upload an image</div>
<div class="upload-row"><input type="file" name="image_file" accept="image/*"{disabled}></div>
{file_name}
</form>
"""


def _render_results(state: ClientState) -> str:
    error = f'<div class="error">{escape(state.error)}</div>\n' if state.error else ""
    return f'{error}<div class="labels-grid">{_render_labels(state)}</div>\n'


_PAGE_OPEN = f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{PAGE_TITLE}</title>
<style>{_STYLE}</style>
</head>
<body>
<main class="page">
<h1>{PAGE_TITLE}</h1>
"""

_PAGE_CLOSE = """</main>
</body>
</html>
"""


def render_page(state: ClientState) -> str:
    """Render the full single-page form with the current state."""
    return (
        _PAGE_OPEN
        + _render_form(state)
        + f'<div class="preview-wrap">{_render_preview(state)}</div>\n'
        + f'<div class="status-stream">{_render_status(state)}</div>\n'
        + _render_results(state)
        + _PAGE_CLOSE
    )


def render_stream_start(state: ClientState) -> str:
    """Opening of a progressively streamed page: locked form, preview, and the open status stream.

    Each later :func:`render_stream_update` appends a status row; CSS shows
    only the newest one.
    """
    return (
        _PAGE_OPEN
        + _render_form(state, "controls controls-locked")
        + f'<div class="preview-wrap">{_render_preview(state)}</div>\n'
        + '<div class="status-stream">'
    )


def render_stream_update(state: ClientState) -> str:
    return _render_status(state) + "\n"


def render_stream_end(state: ClientState) -> str:
    """Close the status stream, swap the locked form for a live one and show results."""
    return (
        "</div>\n<style>.controls-locked { display: none; }</style>\n"
        + _render_form(state)
        + _render_results(state)
        + _PAGE_CLOSE
    )
