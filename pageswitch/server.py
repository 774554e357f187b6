"""Development server for pageswitch.

Answers page requests and serves static assets for local authoring:
- ``GET /?page=<identifier>`` renders the selected page inside the layout.
- Other paths are served from the static directory; directory listings and
  missing files get a 404.
- Watches content, theme and data folders, rebuilds the site on change and
  tells connected browsers to reload.

The request log names the resolved page, never the raw query.

Key classes:
- DevServer: Main class for running the development server.
- _PageHandler: HTTP request handler routing page requests.
- _ChangeHandler: File system event handler for triggering rebuilds.
"""

from __future__ import annotations

import asyncio
import functools
import io
import json
import threading
import time
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import urlsplit

import websockets
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .errors import ConfigurationError
from .site import CONFIG_FILENAME, Site, build_site, load_config

PAGE_PATHS = ("/", "/index.html")


class _PageHandler(SimpleHTTPRequestHandler):
    """HTTP request handler that renders pages and serves static files.

    Attributes:
        reload_script: JavaScript code for WebSocket connection to trigger reloads.
        dev_server: Server owning the current Site.
    """

    reload_script_template = """
    <script>
    (() => {{
      const ws = new WebSocket('ws://' + location.hostname + ':{ws_port}');
      ws.onmessage = (event) => {{
        const data = JSON.parse(event.data || '{{}}');
        if (data.type === 'reload') location.reload();
      }};
    }})();
    </script>
    """
    reload_script = ""
    dev_server: DevServer | None = None
    _log_target = "-"

    def end_headers(self):
        self.send_header("Cache-Control", "no-cache, no-store, must-revalidate")
        super().end_headers()

    def list_directory(self, path):  # pragma: no cover - exercised via send_head
        # Never expose directory listings; treat as missing content.
        self.send_error(404, "File not found")
        return None

    def send_head(self):
        path = urlsplit(self.path).path
        if path in PAGE_PATHS:
            return self._send_page(urlsplit(self.path).query)
        self._log_target = "static"
        return super().send_head()

    def _send_page(self, query: str):
        site = self.dev_server.site if self.dev_server else None
        if site is None:
            self._log_target = "-"
            self.send_error(503, "Site not ready")
            return None
        entry = site.router.resolve_query(query)
        self._log_target = f"page={entry.identifier}"
        try:
            content = site.assembler.render(entry)
        except Exception as exc:
            print(f"Rendering page '{entry.identifier}' failed: {type(exc).__name__}: {exc}")
            self.send_error(500, "Internal Server Error")
            return None
        content = inject_reload_script(content, self.reload_script)
        encoded = content.encode("utf-8")
        self.send_response(200)
        self.send_header("Content-type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(encoded)))
        self.end_headers()
        return io.BytesIO(encoded)

    def log_request(self, code="-", size="-"):
        print(f"{self.command} {self._log_target} {code}")

    def log_error(self, format, *args):
        print(f"Request error ({args[0] if args else '-'})")


def inject_reload_script(content: str, script: str) -> str:
    """Insert the live reload script before ``</body>``, or append it."""
    if "</body>" in content:
        return content.replace("</body>", f"{script}</body>", 1)
    return content + script


class DevServer:
    """Development server with live reload functionality.

    Attributes:
        project_root: Root directory of the project.
        config: Site configuration.
        static_dir: Directory static assets are served from.
        ws_port: Port for WebSocket connections.
        http_port: Port for HTTP server.
        site: Currently served Site; replaced as a whole on rebuild.
        _observer: File system observer for changes.
        _ws_clients: Set of connected WebSocket clients.
        _loop: Event loop for WebSocket handling.
    """

    def __init__(self, project_root: Path, http_port: int | None = None, ws_port: int | None = None):
        """Initialize the development server.

        Args:
            project_root: Root directory of the project.
            http_port: Optional override for HTTP port.
            ws_port: Optional override for the live reload port.
        """
        self.project_root = project_root
        self.config = load_config(project_root)
        self.static_dir = project_root / str(self.config.get("static_dir", "static"))
        base_http = int(http_port or self.config.get("port", 4000))
        resolved_ws = (
            ws_port
            if ws_port is not None
            else (
                base_http + 1
                if http_port is not None
                else self.config.get("ws_port", base_http + 1)
            )
        )
        self.ws_port = int(resolved_ws)
        self.http_port = base_http
        self._reload_script = _PageHandler.reload_script_template.format(ws_port=self.ws_port)
        self.site: Site | None = None
        self._observer: Observer | None = None
        self._ws_clients: set = set()
        self._loop = asyncio.new_event_loop()
        self._rebuilding = False
        self._last_rebuild_at = 0.0
        self._last_signature: tuple | None = None
        self._debounce_seconds = 0.05

    def start(
        self, include_drafts: bool = False
    ) -> None:  # pragma: no cover - integration path
        self.site = build_site(self.project_root, include_drafts=include_drafts)
        self._last_signature = self._compute_signature()
        threading.Thread(target=self._start_http, daemon=True).start()
        threading.Thread(target=self._start_ws, daemon=True).start()
        self._start_watcher(include_drafts)
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            self.stop()

    def stop(self) -> None:
        if self._observer:
            self._observer.stop()
            self._observer.join()
        self._loop.call_soon_threadsafe(self._loop.stop)

    def handler_class(self) -> type[_PageHandler]:
        """Return a request handler class bound to this server."""
        return type(
            "_PageHandlerBound",
            (_PageHandler,),
            {"reload_script": self._reload_script, "dev_server": self},
        )

    def _start_http(self) -> None:  # pragma: no cover - integration path
        handler = functools.partial(self.handler_class(), directory=str(self.static_dir))
        httpd = ThreadingHTTPServer(("", self.http_port), handler)
        print(f"Serving {self.project_root} at http://localhost:{self.http_port}")
        httpd.serve_forever()

    def _start_ws(self) -> None:  # pragma: no cover - integration path
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_until_complete(self._run_ws_server())
        except OSError as exc:
            print(f"WebSocket server failed to start (port {self.ws_port}): {exc}")
            return

    async def _run_ws_server(self) -> None:  # pragma: no cover - integration path
        async with websockets.serve(self._ws_handler, "0.0.0.0", self.ws_port):
            await asyncio.Future()  # Run forever

    async def _ws_handler(self, websocket):
        self._ws_clients.add(websocket)
        try:
            await websocket.wait_closed()
        finally:
            self._ws_clients.discard(websocket)

    def _broadcast_reload(self):
        message = json.dumps({"type": "reload"})
        asyncio.run_coroutine_threadsafe(self._async_broadcast(message), self._loop)

    async def _async_broadcast(self, message: str):
        stale = set()
        for ws in self._ws_clients:
            try:
                await ws.send(message)
            except Exception:
                stale.add(ws)
        for ws in stale:
            self._ws_clients.discard(ws)

    def _watched_folders(self) -> list[Path]:
        return [
            self.project_root / str(self.config.get("content_dir", "pages")),
            self.project_root / str(self.config.get("theme_dir", "theme")),
            self.project_root / "data",
            self.static_dir,
        ]

    def _start_watcher(self, include_drafts: bool) -> None:
        handler = _ChangeHandler(self, include_drafts)
        observer = Observer()
        for watch_path in self._watched_folders():
            if watch_path.exists():
                observer.schedule(handler, str(watch_path), recursive=True)
        # Watch root for pageswitch.yaml
        observer.schedule(handler, str(self.project_root), recursive=False)
        observer.start()
        self._observer = observer

    def rebuild(self, include_drafts: bool) -> None:
        now = time.time()
        if self._rebuilding or (now - self._last_rebuild_at) < self._debounce_seconds:
            return
        signature = self._compute_signature()
        if signature is not None and signature == self._last_signature:
            return
        self._rebuilding = True
        try:
            print("Change detected; rebuilding...")
            try:
                site = build_site(self.project_root, include_drafts=include_drafts)
            except ConfigurationError as exc:
                print(f"Rebuild failed, keeping previous site: {exc}")
                return
            self.site = site
            self._last_signature = signature
            self._broadcast_reload()
        finally:
            self._rebuilding = False
            self._last_rebuild_at = time.time()

    def _compute_signature(self) -> tuple | None:
        entries: list[tuple] = []
        candidates: list[Path] = [self.project_root / CONFIG_FILENAME]
        for root in self._watched_folders():
            if root.exists():
                candidates.extend(sorted(root.rglob("*")))
        for path in candidates:
            if not path.exists() or path.is_dir():
                continue
            try:
                stat = path.stat()
            except OSError:
                continue
            rel = path.relative_to(self.project_root)
            entries.append((str(rel), stat.st_mtime_ns, stat.st_size))
        return tuple(entries) if entries else None


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, server: DevServer, include_drafts: bool):
        super().__init__()
        self.server = server
        self.include_drafts = include_drafts

    def on_any_event(self, event):
        if event.is_directory:
            return
        path = Path(event.src_path)
        if path.parent == self.server.project_root and path.name != CONFIG_FILENAME:
            return
        if path.name.startswith("."):
            return
        self.server.rebuild(self.include_drafts)
