"""
Single-page UI shell.

The inline script only forwards browser events to the session API:
file pick/drop, parse clicks, container resizes and inspector hovers.
All state and geometry live on the server.
"""

import html

from ..services.upload import ACCEPTED_MIME_TYPES

STYLES = """
body { margin: 0; font-family: system-ui, sans-serif; background: #111827; color: #f3f4f6; }
header { padding: 1rem 2rem; font-size: 1.4rem; font-weight: 700; }
main { display: grid; grid-template-columns: 1fr 1fr; gap: 1.5rem; padding: 0 2rem 2rem; }
.controls { display: flex; flex-direction: column; gap: 1rem; }
.drop-target { display: flex; align-items: center; justify-content: center; height: 12rem;
  border: 2px dashed #4b5563; border-radius: 0.5rem; background: #1f2937; cursor: pointer; text-align: center; }
.drop-target.is-dragging { border-color: #3b82f6; background: #374151; }
.drop-target.is-disabled { opacity: 0.5; cursor: not-allowed; }
.drop-target input { display: none; }
button { padding: 0.75rem; border: 0; border-radius: 0.5rem; background: #2563eb; color: #fff; font-weight: 700; }
button:disabled { background: #4b5563; cursor: not-allowed; }
.error-slot { color: #f87171; background: rgba(127, 29, 29, 0.5); padding: 0.75rem; border-radius: 0.5rem; text-align: center; }
.error-slot:empty { display: none; }
#preview { position: relative; min-height: 350px; background: #1f2937; border-radius: 0.5rem; overflow: hidden; }
.preview-stack { position: absolute; inset: 0; }
.preview-image { width: 100%; height: 100%; object-fit: contain; }
.preview-placeholder, .inspector-placeholder { display: flex; height: 100%; align-items: center; justify-content: center; color: #6b7280; }
.field-box { position: absolute; box-sizing: border-box; border: 2px solid #ec4899; background: rgba(236, 72, 153, 0.2); border-radius: 2px; }
.field-box.highlighted { border-color: #fde047; background: rgba(253, 224, 71, 0.4); transform: scale(1.05); }
#inspector { grid-column: span 2; height: 60vh; overflow: auto; background: #1f2937; border-radius: 0.5rem; padding: 1rem; }
.inspector { margin: 0; font-family: ui-monospace, monospace; font-size: 0.875rem; }
.field-block { margin: 0.5rem 0 0.5rem 1rem; padding: 0.75rem; border-radius: 0.375rem; background: rgba(17, 24, 39, 0.5); cursor: pointer; }
.field-block:hover, .field-block.hovered { background: rgba(55, 65, 81, 0.5); }
.json-indent { margin-left: 1rem; }
.json-key { color: #f472b6; } .json-string { color: #7dd3fc; } .json-null, .json-punct { color: #6b7280; }
.json-box { color: #fde047; } .json-number { color: #4ade80; } .json-malformed { color: #d8b4fe; }
.json-true { color: #4ade80; } .json-false { color: #f87171; }
.json-table { border-collapse: collapse; font-size: 0.75rem; margin-top: 0.25rem; }
.json-table th { color: #f9a8d4; text-align: left; }
.json-table th, .json-table td { padding: 0.4rem; border: 1px solid #4b5563; }
.json-table td { color: #7dd3fc; }
"""

SCRIPT = """
const state = { id: null, session: null };
const $ = (id) => document.getElementById(id);

async function api(method, path, body) {
  const opts = { method };
  if (body instanceof FormData) { opts.body = body; }
  else if (body !== undefined) { opts.body = JSON.stringify(body); opts.headers = { "Content-Type": "application/json" }; }
  const response = await fetch(path, opts);
  const data = await response.json();
  apply(data.session || data);
}

function apply(session) {
  if (!session || !session.id) return;
  state.session = session;
  $("error").textContent = session.error || "";
  $("parse").disabled = !session.can_parse;
  $("parse-label").textContent = session.is_loading ? "Parsing Document..." : "Parse Document";
  $("drop").classList.toggle("is-disabled", session.is_loading);
  $("file-input").disabled = session.is_loading;
  if (session.filename) $("drop-text").textContent = session.filename + " - file selected. Ready to parse.";
  refreshView();
}

async function refreshView() {
  const box = $("preview").getBoundingClientRect();
  const query = "?container_width=" + box.width + "&container_height=" + box.height;
  const response = await fetch("/sessions/" + state.id + "/view" + query);
  const view = await response.json();
  $("preview").innerHTML = view.preview_html;
  $("inspector").innerHTML = view.inspector_html;
}

function handleFile(file) {
  if (!file) return;
  const form = new FormData();
  form.append("file", file);
  api("POST", "/sessions/" + state.id + "/file", form);
}

function stop(e) { e.preventDefault(); e.stopPropagation(); }

window.addEventListener("DOMContentLoaded", async () => {
  const response = await fetch("/sessions", { method: "POST" });
  const session = await response.json();
  state.id = session.id;
  apply(session);

  const drop = $("drop");
  drop.addEventListener("dragenter", (e) => { stop(e); drop.classList.add("is-dragging"); });
  drop.addEventListener("dragleave", (e) => { stop(e); drop.classList.remove("is-dragging"); });
  drop.addEventListener("dragover", stop);
  drop.addEventListener("drop", (e) => {
    stop(e);
    drop.classList.remove("is-dragging");
    if (e.dataTransfer.files && e.dataTransfer.files[0]) handleFile(e.dataTransfer.files[0]);
  });
  $("file-input").addEventListener("change", (e) => handleFile(e.target.files[0]));
  $("parse").addEventListener("click", () => {
    $("parse").disabled = true;
    $("parse-label").textContent = "Parsing Document...";
    api("POST", "/sessions/" + state.id + "/parse");
  });

  $("inspector").addEventListener("mouseover", (e) => {
    const block = e.target.closest(".field-block");
    if (block && !block.contains(e.relatedTarget)) api("PUT", "/sessions/" + state.id + "/hover", { index: Number(block.dataset.index) });
  });
  $("inspector").addEventListener("mouseout", (e) => {
    const block = e.target.closest(".field-block");
    if (block && !block.contains(e.relatedTarget)) api("PUT", "/sessions/" + state.id + "/hover", { index: null });
  });

  const observer = new ResizeObserver(() => { if (state.id) refreshView(); });
  observer.observe($("preview"));
  window.addEventListener("pagehide", () => observer.disconnect());
});
"""


def render_page(title: str = "Form Lens") -> str:
    """Render the full HTML page."""
    accepted = ",".join(ACCEPTED_MIME_TYPES)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
    <style>{STYLES}</style>
</head>
<body>
    <header>{html.escape(title)}</header>
    <main>
        <div class="controls">
            <label id="drop" class="drop-target" for="file-input">
                <span id="drop-text"><strong>Click to upload</strong> or drag and drop<br>PDF, PNG, JPG, WEBP, or GIF</span>
                <input id="file-input" type="file" accept="{html.escape(accepted)}">
            </label>
            <button id="parse" disabled><span id="parse-label">Parse Document</span></button>
            <div id="error" class="error-slot"></div>
        </div>
        <div id="preview"></div>
        <div id="inspector"></div>
    </main>
    <script>{SCRIPT}</script>
</body>
</html>
"""
