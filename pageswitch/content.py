"""Page entries and content producers for pageswitch.

This module defines what a page is and where its body markup comes from.
It also discovers fragment files in a content directory at startup so
they can be registered.

Key classes:
- PageEntry: Immutable record of a registered page.
- StaticContent: Producer returning fixed markup.
- FragmentContent: Producer reading and rendering a fragment file.
- FragmentLoader: Discovers fragment files and registers them.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import ConfigurationError
from .extractors import extract_frontmatter, extract_title
from .protocols import ContentProducer, FragmentRenderer
from .renderers import RendererRegistry, default_renderer_registry
from .utils import (
    extract_number_from_name,
    is_internal_path,
    is_valid_identifier,
    slugify,
)

if TYPE_CHECKING:
    from .registry import ContentRegistry


@dataclass(frozen=True)
class PageEntry:
    """A page the router can select.

    Attributes:
        identifier: Registry key, also used in ``?page=`` links.
        title: Human-readable title shown in the layout and navigation.
        content: Zero-argument callable producing the body markup.
        order: Navigation sort key.
        show_in_nav: Whether the page is listed in navigation.
        source: Fragment file the page was loaded from, if any.
    """

    identifier: str
    title: str
    content: ContentProducer
    order: int = 0
    show_in_nav: bool = True
    source: Path | None = None

    def produce(self) -> str:
        """Return the body markup for this page."""
        return self.content()


@dataclass(frozen=True)
class StaticContent:
    """Producer that always returns the same markup."""

    markup: str

    def __call__(self) -> str:
        return self.markup


@dataclass(frozen=True)
class FragmentContent:
    """Producer that reads a fragment file each time it is called.

    Frontmatter is stripped and the rest rendered by ``renderer``.

    Attributes:
        path: Fragment file.
        renderer: FragmentRenderer for the file's format.
    """

    path: Path
    renderer: FragmentRenderer

    def __call__(self) -> str:
        raw = self.path.read_text(encoding="utf-8")
        _, body = extract_frontmatter(raw)
        return self.renderer.render(body)


class FragmentLoader:
    """Discovers fragment files in a content directory.

    Only files directly inside ``content_dir`` are considered. Names
    starting with ``_`` are drafts and skipped unless requested.

    Attributes:
        content_dir: Directory containing fragment files.
        renderer_registry: Registry used to pick a renderer per file.
    """

    def __init__(
        self,
        content_dir: Path,
        renderer_registry: RendererRegistry | None = None,
    ):
        """Initialize the loader.

        Args:
            content_dir: Directory containing fragment files.
            renderer_registry: Optional custom renderer registry.
        """
        self.content_dir = content_dir
        self.renderer_registry = renderer_registry or default_renderer_registry

    def iter_files(self, include_drafts: bool = False) -> list[Path]:
        """List fragment files in a stable order.

        Args:
            include_drafts: Whether to include files starting with ``_``.

        Returns:
            Sorted list of fragment paths.

        Raises:
            ConfigurationError: If the content directory does not exist.
        """
        if not self.content_dir.is_dir():
            raise ConfigurationError(
                "content directory not found", source_path=self.content_dir
            )
        files: list[Path] = []
        for path in sorted(self.content_dir.iterdir()):
            if not path.is_file():
                continue
            rel = path.relative_to(self.content_dir)
            if is_internal_path(rel) and not include_drafts:
                continue
            if self.renderer_registry.get_renderer(path) is None:
                continue
            files.append(path)
        return files

    def load(self, include_drafts: bool = False) -> list[PageEntry]:
        """Build a PageEntry for every fragment file.

        Fragments whose derived identifier is not valid are skipped with a
        warning.

        Args:
            include_drafts: Whether to include draft fragments.

        Returns:
            List of page entries in file order.
        """
        entries: list[PageEntry] = []
        for path in self.iter_files(include_drafts):
            entry = self.build(path)
            if entry is None:
                print(f"Skipping {path.name}: not a usable fragment")
                continue
            entries.append(entry)
        return entries

    def build(self, path: Path) -> PageEntry | None:
        """Build a PageEntry from one fragment file.

        Args:
            path: Path to the fragment file.

        Returns:
            PageEntry, or None if the file has no renderer or no valid identifier.

        Raises:
            ConfigurationError: If the file cannot be read.
        """
        renderer = self.renderer_registry.get_renderer(path)
        stem = path.stem.lstrip("_")
        identifier = slugify(stem)
        if renderer is None or not is_valid_identifier(identifier):
            return None
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigurationError(f"cannot read fragment: {exc}", path) from exc
        frontmatter, body = extract_frontmatter(raw)
        order = frontmatter.get("order", extract_number_from_name(stem))
        try:
            order = int(order) if order is not None else 0
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"invalid order value: {order!r}", path) from exc
        return PageEntry(
            identifier=identifier,
            title=extract_title(body, path, frontmatter),
            content=FragmentContent(path, renderer),
            order=order,
            show_in_nav=bool(frontmatter.get("nav", True)),
            source=path,
        )

    def populate(
        self, registry: ContentRegistry, include_drafts: bool = False
    ) -> ContentRegistry:
        """Register every discovered fragment.

        Args:
            registry: Registry to fill.
            include_drafts: Whether to include draft fragments.

        Returns:
            The same registry, for chaining.

        Raises:
            DuplicateKeyError: If two fragments derive the same identifier.
        """
        for entry in self.load(include_drafts):
            registry.add(entry)
        return registry
