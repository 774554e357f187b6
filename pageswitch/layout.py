"""Layout assembly for pageswitch.

This module uses Jinja2 to wrap a resolved page in the shared site shell
(header, navigation, footer). Layout templates come from the theme
directory when it provides one, otherwise from a built-in default.

Key class:
- LayoutAssembler: Renders a PageEntry inside the site layout.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape
from markupsafe import Markup

from .content import PageEntry
from .registry import ContentRegistry
from .utils import join_root_url, page_href

__all__ = ["DEFAULT_LAYOUT", "LayoutAssembler"]

DEFAULT_LAYOUT = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ title }}{% if data.title %} - {{ data.title }}{% endif %}</title>
</head>
<body>
  <header>
    <h1><a href="{{ page_url(default_page) }}">{{ data.title or title }}</a></h1>
    <nav>
      <ul>
      {%- for item in navigation %}
        <li{% if item.identifier == current_page.identifier %} class="current"{% endif %}><a href="{{ page_url(item.identifier) }}">{{ item.title }}</a></li>
      {%- endfor %}
      </ul>
    </nav>
  </header>
  <main>
    <h2>{{ title }}</h2>
    {{ page_content }}
  </main>
  <footer>{{ data.footer or "" }}</footer>
</body>
</html>
"""


def _trusted_title(entry: PageEntry) -> PageEntry:
    """Return a copy of the entry whose title is inserted without escaping."""
    return replace(entry, title=Markup(entry.title))


class LayoutAssembler:
    """Wraps page content in the shared layout using Jinja2.

    Site data is escaped by Jinja autoescaping. Titles and fragment markup
    come from the registry and are inserted as-is.

    Attributes:
        registry: Registry supplying navigation entries.
        data: Global site data.
        theme_dir: Directory with layout templates, if any.
        query_param: Name of the page-selection query parameter.
        layout: Layout template name.
        env: Jinja2 environment.
    """

    def __init__(
        self,
        registry: ContentRegistry,
        data: dict[str, Any] | None = None,
        theme_dir: Path | None = None,
        query_param: str = "page",
        layout: str = "layout",
    ):
        """Initialize the layout assembler.

        Args:
            registry: Registry supplying navigation entries.
            data: Global site data.
            theme_dir: Optional directory with layout templates.
            query_param: Name of the page-selection query parameter.
            layout: Layout template name.
        """
        self.registry = registry
        self.data = data or {}
        self.theme_dir = theme_dir
        self.query_param = query_param
        self.layout = layout
        search_path = []
        if theme_dir is not None and theme_dir.is_dir():
            search_path = [theme_dir / "_partials", theme_dir]
        self.env = Environment(
            loader=FileSystemLoader(search_path),
            autoescape=select_autoescape(["html", "xml", "jinja"], default_for_string=True),
        )
        self.env.globals["page_url"] = self._page_url
        self.env.globals["url_for"] = self._url_for

    def _page_url(self, identifier: str) -> str:
        return page_href(identifier, self.query_param)

    def _url_for(self, path: str) -> str:
        """Generate a URL for a static asset path, applying root_url if configured.

        Args:
            path: Path to generate URL for.

        Returns:
            Full URL with root_url prefix if configured.
        """
        if path.startswith(("http://", "https://", "//")):
            return path
        base = str(self.data.get("root_url", "") or "")
        if base:
            return join_root_url(base, path)
        return path if path.startswith("/") else f"/{path}"

    def render(self, entry: PageEntry) -> str:
        """Render a page entry inside the layout.

        Args:
            entry: Resolved page entry.

        Returns:
            Complete HTML document.
        """
        body_html = Markup(entry.produce())
        current = _trusted_title(entry)
        context = {
            "data": self.data,
            "current_page": current,
            "title": current.title,
            "navigation": [_trusted_title(item) for item in self.registry.navigation()],
            "default_page": self.registry.default_identifier(),
        }
        template = self._resolve_layout_template()
        try:
            return template.render(page_content=body_html, **context)
        except TemplateNotFound as exc:
            print(f"Template not found during render ({exc}); using the default layout.")
            return self.env.from_string(DEFAULT_LAYOUT).render(
                page_content=body_html, **context
            )

    def _resolve_layout_template(self):
        """Resolve and return the layout template.

        Returns:
            Jinja2 Template object.
        """
        for name in (
            f"{self.layout}.html.jinja",
            f"{self.layout}.jinja",
            f"{self.layout}.html",
        ):
            try:
                return self.env.get_template(name)
            except TemplateNotFound:
                continue
        return self.env.from_string(DEFAULT_LAYOUT)
