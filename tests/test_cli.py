from pathlib import Path

from click.testing import CliRunner

from pageswitch import __version__
from pageswitch.cli import cli
from pageswitch.errors import ConfigurationError


def make_project(root: Path) -> Path:
    (root / "pages").mkdir(parents=True)
    (root / "pages" / "01-home.html").write_text("<p>home body</p>", encoding="utf-8")
    (root / "pages" / "02-status.md").write_text("# Status\n\nAll good.\n", encoding="utf-8")
    return root


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_render_prints_selected_page(monkeypatch, tmp_path):
    monkeypatch.chdir(make_project(tmp_path))
    runner = CliRunner()

    result = runner.invoke(cli, ["render", "status"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "<p>All good.</p>" in result.output

    result = runner.invoke(cli, ["render", "../etc/passwd"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "<p>home body</p>" in result.output

    result = runner.invoke(cli, ["render"], catch_exceptions=False)
    assert "<p>home body</p>" in result.output


def test_render_to_file(monkeypatch, tmp_path):
    monkeypatch.chdir(make_project(tmp_path))
    target = tmp_path / "status.html"
    result = CliRunner().invoke(cli, ["render", "status", "-o", str(target)])
    assert result.exit_code == 0
    assert "Rendered 'status'" in result.output
    assert "<p>All good.</p>" in target.read_text(encoding="utf-8")


def test_pages_lists_registry(monkeypatch, tmp_path):
    monkeypatch.chdir(make_project(tmp_path))
    result = CliRunner().invoke(cli, ["pages"])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines == ["* home\tHome", "  status\tStatus"]


def test_check_reports_success(monkeypatch, tmp_path):
    monkeypatch.chdir(make_project(tmp_path))
    result = CliRunner().invoke(cli, ["check"])
    assert result.exit_code == 0
    assert "OK: 2 pages, default page 'home'" in result.output


def test_check_reports_missing_default(monkeypatch, tmp_path):
    make_project(tmp_path)
    (tmp_path / "pages" / "01-home.html").unlink()
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["check"])
    assert result.exit_code == 1
    assert "Configuration error" in result.output
    assert "default page 'home' is not registered" in result.output


def test_check_reports_duplicate_with_file(monkeypatch, tmp_path):
    make_project(tmp_path)
    (tmp_path / "pages" / "status.html").write_text("<p>dup</p>", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["check"])
    assert result.exit_code == 1
    assert "status.html" in result.output
    assert "already registered" in result.output


def test_serve_passes_options(monkeypatch, tmp_path):
    monkeypatch.chdir(make_project(tmp_path))
    called = {}

    class DummyServer:
        def __init__(self, root, http_port=None, ws_port=None):
            called["root"] = root
            called["port"] = http_port
            called["ws_port"] = ws_port

        def start(self, include_drafts=False):
            called["drafts"] = include_drafts

    monkeypatch.setattr("pageswitch.server.DevServer", DummyServer)
    result = CliRunner().invoke(
        cli, ["serve", "--drafts", "--port", "5050", "--ws-port", "5051"], catch_exceptions=False
    )
    assert result.exit_code == 0
    assert called.pop("root").resolve() == tmp_path.resolve()
    assert called == {"port": 5050, "ws_port": 5051, "drafts": True}


def test_serve_reports_configuration_error(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)

    class FailingServer:
        def __init__(self, root, http_port=None, ws_port=None):
            pass

        def start(self, include_drafts=False):
            raise ConfigurationError("content directory not found", tmp_path / "pages")

    monkeypatch.setattr("pageswitch.server.DevServer", FailingServer)
    result = CliRunner().invoke(cli, ["serve"])
    assert result.exit_code == 1
    assert "File: pages" in result.output


def test_module_main_entrypoint():
    from pageswitch.__main__ import main

    assert callable(main)


def test_check_reports_invalid_data_file(monkeypatch, tmp_path):
    make_project(tmp_path)
    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "site.yaml").write_text("title: [oops\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["check"])
    assert result.exit_code == 1
    assert "Configuration error" in result.output
    assert "site.yaml" in result.output
