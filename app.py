import io
import logging
import time
import uuid

from flask import Flask, jsonify, request, send_file, session

import config
import gemini_service
from data_url import ALLOWED_TYPES
from errors import FormatError, RemovalError
from state import BusyError, Failure, SessionStore, Success

config.setup_logging()
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = config.SECRET_KEY

sessions = SessionStore(max_sessions=config.MAX_SESSIONS)

DOWNLOAD_FILENAME = "background-removed.png"


def _session_id():
    sid = session.get("sid")
    if sid is None:
        sid = uuid.uuid4().hex
        session["sid"] = sid
    return sid


@app.route("/")
def index():
    return HTML_PAGE.replace("/*__ACCEPT__*/", ", ".join(ALLOWED_TYPES))


@app.route("/api/state")
def get_state():
    return jsonify(sessions.get(_session_id()).to_dict())


@app.route("/api/remove-background", methods=["POST"])
def remove_background():
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    file_type = data.get("file_type") or ""
    image_data = data.get("image_data") or ""
    if not isinstance(file_type, str) or not isinstance(image_data, str):
        return jsonify({"error": "file_type and image_data must be strings"}), 400
    sid = _session_id()

    try:
        state = sessions.select_file(sid, file_type, image_data)
    except BusyError as e:
        return jsonify({"error": str(e)}), 409

    if isinstance(state, Failure):
        logger.info("Rejected upload %r of type %r", data.get("file_name"), file_type)
        return jsonify(state.to_dict()), 400

    logger.info("Removing background from %r (%s)", data.get("file_name"), file_type)
    start = time.time()
    try:
        png_bytes = gemini_service.remove_background(image_data)
    except FormatError as e:
        final = sessions.fail(sid, state.token, e)
        status = 400
    except RemovalError as e:
        logger.warning("Background removal failed: %s", e)
        final = sessions.fail(sid, state.token, e)
        status = 502
    except Exception:
        logger.exception("Unexpected error while removing background")
        final = sessions.fail(sid, state.token, "An unknown error occurred.")
        status = 500
    else:
        final = sessions.complete(sid, state.token, png_bytes)
        status = 200

    if final is None:
        logger.info("Discarding stale result for session %s", sid)
        final = sessions.get(sid)
        status = 200

    body = final.to_dict()
    body["elapsed"] = round(time.time() - start, 1)
    return jsonify(body), status


@app.route("/api/reset", methods=["POST"])
def reset():
    return jsonify(sessions.reset(_session_id()).to_dict())


@app.route("/api/download")
def download():
    state = sessions.get(_session_id())
    if not isinstance(state, Success):
        return jsonify({"error": "No processed image to download"}), 404
    return send_file(
        io.BytesIO(state.processed),
        mimetype="image/png",
        as_attachment=True,
        download_name=DOWNLOAD_FILENAME,
    )


HTML_PAGE = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>AI Background Remover</title>
<style>
  *, *::before, *::after { box-sizing: border-box; margin: 0; padding: 0; }

  body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    background: #0f0f0f;
    color: #e0e0e0;
    min-height: 100vh;
    display: flex;
    flex-direction: column;
    align-items: center;
    justify-content: center;
    padding: 24px;
  }

  header { text-align: center; margin-bottom: 28px; }
  header h1 {
    font-size: 2rem;
    font-weight: 700;
    color: #fff;
  }
  header h1 span { color: #8b5cf6; }
  header p { color: #888; margin-top: 6px; font-size: 0.95rem; }

  .split-layout {
    display: grid;
    grid-template-columns: 1fr 1fr;
    gap: 24px;
    width: 100%;
    max-width: 1100px;
  }
  @media (max-width: 800px) { .split-layout { grid-template-columns: 1fr; } }

  .panel {
    background: #141414;
    border: 1px solid #1e1e1e;
    border-radius: 12px;
    overflow: hidden;
    display: flex;
    flex-direction: column;
  }

  .panel-header {
    padding: 14px 20px;
    border-bottom: 1px solid #1e1e1e;
    display: flex;
    align-items: center;
    gap: 10px;
  }
  .panel-header h2 { font-size: 0.95rem; font-weight: 600; color: #fff; }

  .panel-body {
    aspect-ratio: 1 / 1;
    display: flex;
    align-items: center;
    justify-content: center;
    padding: 16px;
    position: relative;
    /* checkerboard so transparency is visible */
    background-color: #1a1a1a;
    background-image:
      linear-gradient(45deg, #202020 25%, transparent 25%),
      linear-gradient(-45deg, #202020 25%, transparent 25%),
      linear-gradient(45deg, transparent 75%, #202020 75%),
      linear-gradient(-45deg, transparent 75%, #202020 75%);
    background-size: 24px 24px;
    background-position: 0 0, 0 12px, 12px -12px, -12px 0;
  }
  .panel-body.dragging { outline: 2px dashed #8b5cf6; outline-offset: -8px; }
  .panel-body img { max-width: 100%; max-height: 100%; object-fit: contain; }

  button {
    background: #8b5cf6;
    color: #fff;
    border: none;
    border-radius: 8px;
    padding: 10px 22px;
    font-size: 0.85rem;
    font-weight: 500;
    cursor: pointer;
    transition: background 0.2s, opacity 0.2s;
  }
  button:hover { background: #7c3aed; }
  button:disabled { opacity: 0.5; cursor: not-allowed; }
  button.secondary { background: #232323; color: #ccc; border: 1px solid #333; }
  button.secondary:hover { background: #2e2e2e; color: #fff; }

  .upload { text-align: center; }
  .upload p { margin-top: 12px; font-size: 0.8rem; color: #666; }

  .loading {
    display: flex;
    flex-direction: column;
    align-items: center;
    gap: 12px;
    color: #888;
  }
  .spinner {
    width: 32px; height: 32px;
    border: 3px solid #333;
    border-top-color: #8b5cf6;
    border-radius: 50%;
    animation: spin 0.8s linear infinite;
  }
  @keyframes spin { to { transform: rotate(360deg); } }
  .timer { color: #8b5cf6; font-variant-numeric: tabular-nums; }

  .error-card {
    text-align: center;
    padding: 16px;
    max-width: 320px;
  }
  .error-card h3 { color: #f87171; font-size: 1rem; margin-bottom: 8px; }
  .error-card p { color: #fca5a5; font-size: 0.85rem; margin-bottom: 18px; word-break: break-word; }

  footer {
    margin-top: 24px;
    display: none;
    gap: 12px;
    justify-content: center;
  }
  footer.visible { display: flex; }
  .hidden { display: none !important; }
</style>
</head>
<body>

<header>
  <h1>AI <span>Background Remover</span></h1>
  <p>Upload an image and get a transparent PNG back.</p>
</header>

<div class="split-layout">
  <div class="panel">
    <div class="panel-header"><h2>Original</h2></div>
    <div id="originalPane" class="panel-body"></div>
  </div>
  <div class="panel">
    <div class="panel-header"><h2>Result</h2></div>
    <div id="resultPane" class="panel-body"></div>
  </div>
</div>

<footer id="footer">
  <button id="resetBtn" class="secondary" onclick="resetState()">Remove Another</button>
  <a id="downloadLink" href="/api/download" download="background-removed.png" class="hidden">
    <button>Download PNG</button>
  </a>
</footer>

<input id="fileInput" type="file" class="hidden" accept="/*__ACCEPT__*/">

<script>
  const originalPane = document.getElementById('originalPane');
  const resultPane = document.getElementById('resultPane');
  const footer = document.getElementById('footer');
  const downloadLink = document.getElementById('downloadLink');
  const fileInput = document.getElementById('fileInput');
  let current = { status: 'idle', original: null, processed: null, error: '' };
  let timerInterval = null;

  function openPicker() {
    if (current.status === 'processing') return;
    // lets the same file fire `change` again after an error
    fileInput.value = '';
    fileInput.click();
  }

  function imageEl(src, alt) {
    const img = document.createElement('img');
    img.src = src;
    img.alt = alt;
    return img;
  }

  function render(state) {
    current = state;
    clearInterval(timerInterval);
    originalPane.innerHTML = '';
    resultPane.innerHTML = '';

    if (state.original) {
      originalPane.appendChild(imageEl(state.original, 'Original image'));
    } else if (state.status === 'idle') {
      const upload = document.createElement('div');
      upload.className = 'upload';
      upload.innerHTML = '<button>Upload Image</button><p>or drag and drop here</p>';
      upload.querySelector('button').addEventListener('click', openPicker);
      originalPane.appendChild(upload);
    }

    if (state.status === 'processing') {
      resultPane.innerHTML = '<div class="loading"><div class="spinner"></div>' +
        '<div><span class="timer">0.0s</span> removing background...</div></div>';
      const timerEl = resultPane.querySelector('.timer');
      const t0 = Date.now();
      timerInterval = setInterval(() => {
        timerEl.textContent = ((Date.now() - t0) / 1000).toFixed(1) + 's';
      }, 100);
    } else if (state.status === 'success' && state.processed) {
      resultPane.appendChild(imageEl(state.processed, 'Processed result'));
    } else if (state.status === 'error') {
      const card = document.createElement('div');
      card.className = 'error-card';
      card.innerHTML = '<h3>An Error Occurred</h3><p></p><button>Try Again</button>';
      card.querySelector('p').textContent = state.error;
      card.querySelector('button').addEventListener('click', openPicker);
      resultPane.appendChild(card);
    }

    footer.classList.toggle('visible', state.status !== 'idle');
    document.getElementById('resetBtn').disabled = state.status === 'processing';
    downloadLink.classList.toggle('hidden', state.status !== 'success');
    fileInput.disabled = state.status === 'processing';
  }

  function readAsDataUrl(file) {
    return new Promise((resolve, reject) => {
      const reader = new FileReader();
      reader.onload = () => resolve(reader.result);
      reader.onerror = () => reject(reader.error);
      reader.readAsDataURL(file);
    });
  }

  async function postJson(url, body) {
    const res = await fetch(url, {
      method: 'POST',
      headers: { 'Content-Type': 'application/json' },
      body: JSON.stringify(body || {}),
    });
    const data = await res.json();
    if (res.status === 409) throw new Error(data.error);
    return data;
  }

  async function processFile(file) {
    let imageData = null;
    if (file.type.startsWith('image/')) {
      imageData = await readAsDataUrl(file);
      render({ status: 'processing', original: imageData, processed: null, error: '' });
    }
    try {
      render(await postJson('/api/remove-background', {
        image_data: imageData, file_type: file.type, file_name: file.name,
      }));
    } catch (e) {
      console.error(e);
      render(await (await fetch('/api/state')).json());
    }
  }

  fileInput.addEventListener('change', () => {
    const file = fileInput.files && fileInput.files[0];
    if (file) processFile(file);
  });

  originalPane.addEventListener('dragover', e => {
    e.preventDefault();
    e.stopPropagation();
    if (current.status !== 'processing') originalPane.classList.add('dragging');
  });
  originalPane.addEventListener('dragleave', () => originalPane.classList.remove('dragging'));
  originalPane.addEventListener('drop', e => {
    e.preventDefault();
    e.stopPropagation();
    originalPane.classList.remove('dragging');
    if (current.status === 'processing') return;
    const file = e.dataTransfer.files && e.dataTransfer.files[0];
    if (file) processFile(file);
  });

  async function resetState() {
    fileInput.value = '';
    render(await postJson('/api/reset'));
  }

  fetch('/api/state').then(r => r.json()).then(render);
</script>
</body>
</html>
"""


if __name__ == "__main__":
    app.run(host=config.HOST, port=config.PORT, threaded=True)
