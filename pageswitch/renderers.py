"""Fragment renderers for pageswitch.

Each renderer handles one fragment format and turns its source into body
markup for the layout.

Key classes:
- MarkdownRenderer: Renders Markdown fragments to HTML with mistune.
- HTMLRenderer: Passes HTML fragments through unchanged.
- RendererRegistry: Picks the renderer for a fragment file.
"""

from __future__ import annotations

import re
from pathlib import Path

import mistune

from .protocols import FragmentRenderer
from .utils import is_html, is_markdown


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text.

    Args:
        text: The heading text.

    Returns:
        URL-friendly slug suitable for anchor links.
    """
    slug = text.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-")


class _AnchoredRenderer(mistune.HTMLRenderer):
    """Markdown renderer that gives every heading a unique anchor id."""

    def __init__(self):
        super().__init__(escape=False)
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        base_id = _generate_heading_id(text)
        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            heading_id = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            heading_id = base_id
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'


class MarkdownRenderer:
    """Renders Markdown fragments to HTML."""

    @property
    def source_type(self) -> str:
        return "markdown"

    def can_render(self, path: Path) -> bool:
        return is_markdown(path)

    def render(self, source: str) -> str:
        """Render Markdown source to HTML.

        Args:
            source: Markdown source content.

        Returns:
            Rendered HTML.
        """
        markdown = mistune.create_markdown(
            renderer=_AnchoredRenderer(),
            plugins=["strikethrough", "table", "url"],
        )
        return markdown(source)


class HTMLRenderer:
    """Passes HTML fragments through unchanged."""

    @property
    def source_type(self) -> str:
        return "html"

    def can_render(self, path: Path) -> bool:
        return is_html(path)

    def render(self, source: str) -> str:
        return source


class RendererRegistry:
    """Registry for fragment renderers.

    New fragment formats are supported by registering another renderer.
    """

    def __init__(self):
        """Initialize the registry with default renderers."""
        self._renderers: list[FragmentRenderer] = []
        self.register(MarkdownRenderer())
        self.register(HTMLRenderer())

    def register(self, renderer: FragmentRenderer) -> None:
        """Register a new renderer.

        Args:
            renderer: A FragmentRenderer implementation.
        """
        self._renderers.append(renderer)

    def get_renderer(self, path: Path) -> FragmentRenderer | None:
        """Get the appropriate renderer for a file.

        Args:
            path: Path to the fragment file.

        Returns:
            The first renderer that can handle the file, or None.
        """
        for renderer in self._renderers:
            if renderer.can_render(path):
                return renderer
        return None


default_renderer_registry = RendererRegistry()
