"""Command-line interface for pageswitch.

This module defines the CLI commands using the Click framework. All
commands run against the project in the current working directory.

Commands:
- serve: Run the development server with live reload.
- render: Print the HTML a page request produces.
- pages: List the registered pages.
- check: Validate the configuration and content.
"""

from __future__ import annotations

from pathlib import Path

import click

from . import __version__
from .errors import ConfigurationError


def _report_configuration_error(exc: ConfigurationError, project_root: Path) -> None:
    """Display a configuration error and exit with status 1."""
    click.echo(click.style("Configuration error:", fg="red", bold=True), err=True)
    if exc.source_path is not None:
        try:
            shown = exc.source_path.relative_to(project_root)
        except ValueError:
            shown = exc.source_path
        click.echo(click.style(f"  File: {shown}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
    raise SystemExit(1)


def _load_site(project_root: Path, drafts: bool):
    from .site import build_site

    try:
        return build_site(project_root, include_drafts=drafts)
    except ConfigurationError as exc:
        _report_configuration_error(exc, project_root)


@click.group()
@click.version_option(version=__version__, prog_name="pageswitch")
def cli():
    """pageswitch page-selection site server."""


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft fragments")
@click.option(
    "--port",
    type=int,
    required=False,
    help="Port to run the dev server (overrides pageswitch.yaml)",
)
@click.option(
    "--ws-port",
    type=int,
    required=False,
    help="Port for the live reload websocket server (overrides pageswitch.yaml ws_port)",
)
def serve(drafts: bool, port: int | None, ws_port: int | None):
    """Run dev server with live reload."""
    project_root = Path.cwd()
    from .server import DevServer

    server = DevServer(project_root, http_port=port, ws_port=ws_port)
    try:
        server.start(include_drafts=drafts)
    except ConfigurationError as exc:
        _report_configuration_error(exc, project_root)


@cli.command()
@click.argument("page", required=False)
@click.option("--drafts", is_flag=True, help="Include draft fragments")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the HTML to a file instead of stdout",
)
def render(page: str | None, drafts: bool, output: Path | None):
    """Render the page a ?page=PAGE request would produce."""
    site = _load_site(Path.cwd(), drafts)
    html = site.render(page)
    if output is None:
        click.echo(html)
        return
    output.write_text(html, encoding="utf-8")
    click.echo(f"Rendered '{site.router.resolve_identifier(page)}' into {output}")


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft fragments")
def pages(drafts: bool):
    """List registered pages."""
    site = _load_site(Path.cwd(), drafts)
    default = site.registry.default_identifier()
    for entry in site.registry.entries():
        marker = "*" if entry.identifier == default else " "
        click.echo(f"{marker} {entry.identifier}\t{entry.title}")


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft fragments")
def check(drafts: bool):
    """Validate configuration and content."""
    site = _load_site(Path.cwd(), drafts)
    click.echo(
        f"OK: {len(site.registry)} pages, default page "
        f"'{site.registry.default_identifier()}'"
    )


def main():
    """Entry point for the CLI application."""
    cli()
