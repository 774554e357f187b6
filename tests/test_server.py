import asyncio
import io
from pathlib import Path

from pageswitch.errors import ConfigurationError
from pageswitch.layout import LayoutAssembler
from pageswitch.registry import ContentRegistry
from pageswitch.router import PageRouter
from pageswitch.server import DevServer, _ChangeHandler, _PageHandler, inject_reload_script
from pageswitch.site import Site, build_site


class DummyEvent:
    def __init__(self, path, is_directory=False):
        self.src_path = path
        self.is_directory = is_directory


def make_project(root: Path) -> Path:
    (root / "pages").mkdir(parents=True)
    (root / "pages" / "home.html").write_text("<p>home body</p>", encoding="utf-8")
    (root / "pages" / "status.html").write_text("<p>status body</p>", encoding="utf-8")
    (root / "static" / "images").mkdir(parents=True)
    (root / "static" / "images" / "logo.jpg").write_bytes(b"JPEGDATA")
    return root


def make_handler(server: DevServer, path: str, command: str = "GET"):
    cls = server.handler_class()
    handler = cls.__new__(cls)
    handler.path = path
    handler.command = command
    handler.request_version = "HTTP/1.1"
    handler.requestline = f"{command} {path} HTTP/1.1"
    handler.client_address = ("127.0.0.1", 0)
    handler.headers = {}
    handler.wfile = io.BytesIO()
    handler.directory = str(server.static_dir)
    handler.close_connection = True
    return handler


def serve(server: DevServer, path: str) -> tuple[str, bytes]:
    handler = make_handler(server, path)
    body = handler.send_head()
    head = handler.wfile.getvalue().decode("latin-1")
    if body is None:
        return head, b""
    try:
        return head, body.read()
    finally:
        body.close()


def test_page_request_renders_selected_page(tmp_path, capsys):
    server = DevServer(make_project(tmp_path))
    server.site = build_site(tmp_path)
    head, body = serve(server, "/?page=status")
    assert head.startswith("HTTP/1.0 200")
    assert "text/html; charset=utf-8" in head
    assert "no-cache" in head
    assert b"<p>status body</p>" in body
    assert f":{server.ws_port}".encode() in body
    assert body.index(b"WebSocket") < body.index(b"</body>")
    assert "GET page=status 200" in capsys.readouterr().out


def test_hostile_query_serves_default_and_is_not_logged(tmp_path, capsys):
    server = DevServer(make_project(tmp_path))
    server.site = build_site(tmp_path)
    head, body = serve(server, "/index.html?page=..%2F..%2Fetc%2Fpasswd")
    assert head.startswith("HTTP/1.0 200")
    assert b"<p>home body</p>" in body
    assert b"passwd" not in body
    out = capsys.readouterr().out
    assert "GET page=home 200" in out
    assert "passwd" not in out


def test_page_request_before_site_is_ready(tmp_path):
    server = DevServer(make_project(tmp_path))
    head, _ = serve(server, "/?page=status")
    assert head.startswith("HTTP/1.0 503")


def test_failing_producer_returns_500_without_echoing_input(tmp_path, capsys):
    def broken():
        raise OSError("fragment storage unavailable")

    registry = ContentRegistry()
    registry.register("home", "Home", broken)
    router = PageRouter(registry)
    server = DevServer(tmp_path)
    server.site = Site(registry, router, LayoutAssembler(registry), {}, {})
    handler = make_handler(server, "/?page=<script>")
    assert handler.send_head() is None
    response = handler.wfile.getvalue()
    assert response.startswith(b"HTTP/1.0 500")
    assert b"<script>" not in response
    out = capsys.readouterr().out
    assert "Rendering page 'home' failed" in out
    assert "<script>" not in out


def test_static_files_and_404s(tmp_path):
    server = DevServer(make_project(tmp_path))
    server.site = build_site(tmp_path)

    head, body = serve(server, "/images/logo.jpg")
    assert head.startswith("HTTP/1.0 200")
    assert body == b"JPEGDATA"

    head, _ = serve(server, "/images/missing.jpg")
    assert head.startswith("HTTP/1.0 404")

    head, _ = serve(server, "/images/")
    assert head.startswith("HTTP/1.0 404")

    head, _ = serve(server, "/pages/home.html")
    assert head.startswith("HTTP/1.0 404")


def test_inject_reload_script():
    assert inject_reload_script("<body>x</body>", "<s/>") == "<body>x<s/></body>"
    assert inject_reload_script("fragment", "<s/>") == "fragment<s/>"


def test_dev_server_port_override(tmp_path):
    server = DevServer(tmp_path, http_port=5055, ws_port=None)
    assert server.http_port == 5055
    assert server.ws_port == 5056

    explicit = DevServer(tmp_path, http_port=5055, ws_port=6000)
    assert explicit.ws_port == 6000
    assert f":{explicit.ws_port}" in explicit._reload_script

    (tmp_path / "pageswitch.yaml").write_text("port: 7000\nws_port: 7100\n", encoding="utf-8")
    configured = DevServer(tmp_path)
    assert configured.http_port == 7000
    assert configured.ws_port == 7100


def test_rebuild_swaps_site_and_reloads(monkeypatch, tmp_path):
    server = DevServer(make_project(tmp_path))
    old_site = build_site(tmp_path)
    server.site = old_site
    server._compute_signature = lambda: ("changed",)
    reloads = []
    server._broadcast_reload = lambda: reloads.append(True)

    (tmp_path / "pages" / "about.html").write_text("<p>about</p>", encoding="utf-8")
    server.rebuild(include_drafts=False)
    assert server.site is not old_site
    assert "about" in server.site.registry
    assert "about" not in old_site.registry
    assert reloads == [True]


def test_failed_rebuild_keeps_previous_site(monkeypatch, tmp_path, capsys):
    server = DevServer(make_project(tmp_path))
    old_site = build_site(tmp_path)
    server.site = old_site
    server._compute_signature = lambda: ("changed",)
    reloads = []
    server._broadcast_reload = lambda: reloads.append(True)

    def failing_build(*args, **kwargs):
        raise ConfigurationError("default page 'home' is not registered")

    monkeypatch.setattr("pageswitch.server.build_site", failing_build)
    server.rebuild(include_drafts=False)
    assert server.site is old_site
    assert reloads == []
    assert "keeping previous site" in capsys.readouterr().out
    assert server._rebuilding is False


def test_rebuild_guard(monkeypatch, tmp_path):
    server = DevServer(tmp_path)
    calls = []
    monkeypatch.setattr(
        "pageswitch.server.build_site", lambda *args, **kwargs: calls.append("built")
    )
    server._broadcast_reload = lambda: calls.append("reloaded")
    server._debounce_seconds = 0.0

    sigs = [("a",), ("a",), ("b",)]

    def fake_sig():
        return sigs.pop(0) if sigs else ("b",)

    server._compute_signature = fake_sig
    server.rebuild(include_drafts=False)
    server._rebuilding = True
    server.rebuild(include_drafts=False)  # skipped due to rebuilding flag
    server._rebuilding = False
    server.rebuild(include_drafts=False)  # skipped due to same signature
    server.rebuild(include_drafts=False)  # signature changed -> rebuild
    assert calls == ["built", "reloaded", "built", "reloaded"]


def test_compute_signature(tmp_path):
    server = DevServer(make_project(tmp_path))
    first = server._compute_signature()
    paths = [entry[0] for entry in first]
    assert str(Path("pages") / "home.html") in paths
    assert str(Path("static") / "images" / "logo.jpg") in paths
    (tmp_path / "pageswitch.yaml").write_text("port: 4000\n", encoding="utf-8")
    assert server._compute_signature() != first
    assert DevServer(tmp_path / "empty")._compute_signature() is None


def test_change_handler_filters_events(tmp_path):
    server = DevServer(tmp_path)
    called = []
    server.rebuild = lambda include_drafts: called.append(include_drafts)
    handler = _ChangeHandler(server, include_drafts=True)

    handler.on_any_event(DummyEvent(str(tmp_path / "pages"), is_directory=True))
    handler.on_any_event(DummyEvent(str(tmp_path / "README.md")))
    handler.on_any_event(DummyEvent(str(tmp_path / "pages" / ".home.html.swp")))
    assert called == []

    handler.on_any_event(DummyEvent(str(tmp_path / "pageswitch.yaml")))
    handler.on_any_event(DummyEvent(str(tmp_path / "pages" / "home.html")))
    assert called == [True, True]


def test_async_broadcast_tracks_stale_clients(tmp_path):
    server = DevServer(tmp_path)

    class GoodWS:
        def __init__(self):
            self.messages = []

        async def send(self, msg):
            self.messages.append(msg)

    class BadWS:
        async def send(self, msg):
            raise RuntimeError("fail")

    good = GoodWS()
    bad = BadWS()
    server._ws_clients = {good, bad}
    asyncio.run(server._async_broadcast("hello"))
    assert good.messages == ["hello"]
    assert bad not in server._ws_clients


def test_reload_script_port_comes_from_server(tmp_path):
    (tmp_path / "pageswitch.yaml").write_text("port: 7000\n", encoding="utf-8")
    server = DevServer(tmp_path)
    handler_cls = server.handler_class()
    assert ":7001" in handler_cls.reload_script
    assert ":4001" not in handler_cls.reload_script
    assert _PageHandler.reload_script == ""


def test_rebuild_with_invalid_data_file_keeps_previous_site(tmp_path, capsys):
    server = DevServer(make_project(tmp_path))
    old_site = build_site(tmp_path)
    server.site = old_site
    server._compute_signature = lambda: ("changed",)
    server._broadcast_reload = lambda: None

    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "site.yaml").write_text("title: [oops\n", encoding="utf-8")
    server.rebuild(include_drafts=False)
    assert server.site is old_site
    assert "keeping previous site" in capsys.readouterr().out
