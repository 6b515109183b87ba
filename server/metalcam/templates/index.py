"""
HTML Template
=============

HTML template for the web interface.
"""

HTML_TEMPLATE = """
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Metal Camera</title>
    <style>
      * {
        box-sizing: border-box;
      }
      body {
        font-family: 'Segoe UI', system-ui, -apple-system, sans-serif;
        margin: 0;
        min-height: 100vh;
        background: #0f172a;
        color: #e2e8f0;
        display: flex;
        justify-content: center;
        align-items: center;
        padding: 1rem;
      }
      .panel {
        background: #1e293b;
        padding: 2rem;
        border-radius: 18px;
        width: min(980px, 100%);
      }
      h1 {
        margin: 0 0 0.25rem;
        font-size: 1.8rem;
        color: #f8fafc;
      }
      .subtitle {
        color: #94a3b8;
        margin-bottom: 1.5rem;
      }
      .buttons {
        margin-bottom: 1rem;
        display: flex;
        gap: 0.75rem;
      }
      button {
        border: none;
        padding: 0.65rem 1.3rem;
        border-radius: 999px;
        font-weight: 600;
        cursor: pointer;
        background: #4c1d95;
        color: #f8fafc;
      }
      .stream-container {
        background: #020617;
        border-radius: 12px;
        overflow: hidden;
        border: 1px solid #334155;
      }
      img#stream {
        width: 100%;
        min-height: 360px;
        object-fit: contain;
        display: block;
      }
      .meta {
        display: flex;
        justify-content: space-between;
        margin-top: 0.75rem;
        font-size: 0.9rem;
        color: #94a3b8;
      }
      .status.error {
        color: #ef4444;
      }
    </style>
  </head>
  <body>
    <div class="panel">
      <h1 id="title">Metal camera</h1>
      <p class="subtitle">Live clinkcode detection. OpenCV {{ opencv_version }}</p>
      <div class="buttons">
        <button onclick="startStream()">Start</button>
        <button onclick="stopStream()">Stop</button>
      </div>
      <div class="stream-container">
        <img id="stream" src="/video_feed" alt="Live feed" />
      </div>
      <div class="meta">
        <span id="status" class="status">Streaming</span>
        <span id="codes">No clinkcode</span>
      </div>
    </div>
    <script>
      const stream = document.getElementById('stream');
      const status = document.getElementById('status');

      function startStream() {
        stream.src = '/video_feed?t=' + Date.now();
        status.className = 'status';
        status.textContent = 'Streaming';
      }

      function stopStream() {
        stream.src = '';
        fetch('/stop_camera', {method: 'POST'});
        status.textContent = 'Stopped';
      }

      stream.onerror = function() {
        status.textContent = 'Error loading stream - check camera';
        status.className = 'status error';
      };

      setInterval(async function() {
        const health = await (await fetch('/health')).json();
        document.getElementById('title').textContent = health.title;
        document.getElementById('codes').textContent = health.codes.length
          ? 'Clinkcode: ' + health.codes.join(', ')
          : 'No clinkcode';
      }, 1000);
    </script>
  </body>
</html>
"""
