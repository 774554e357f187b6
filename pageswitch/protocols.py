"""Protocol definitions for pageswitch.

This module defines the interfaces used between the registry, the router
and the layout assembler. Concrete producers and renderers only need to
match these shapes; nothing has to subclass them.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .content import PageEntry


@runtime_checkable
class ContentProducer(Protocol):
    """Capability that produces the body markup for one page.

    Content may be static or computed on every call. Producers may perform
    their own I/O; the registry never does.
    """

    @abstractmethod
    def __call__(self) -> str:
        """Return the body markup for the page."""
        ...


@runtime_checkable
class FragmentRenderer(Protocol):
    """Protocol for turning a fragment source file into body markup.

    Implementations handle one fragment format (Markdown, HTML).
    """

    @abstractmethod
    def can_render(self, path: Path) -> bool:
        """Check if this renderer can handle the given file.

        Args:
            path: Path to the fragment file.

        Returns:
            True if this renderer can process the file.
        """
        ...

    @abstractmethod
    def render(self, source: str) -> str:
        """Render fragment source to HTML.

        Args:
            source: Fragment source with frontmatter already removed.

        Returns:
            Rendered HTML.
        """
        ...

    @property
    @abstractmethod
    def source_type(self) -> str:
        """Return the source type identifier (e.g., 'markdown', 'html')."""
        ...


@runtime_checkable
class LayoutRenderer(Protocol):
    """Protocol for wrapping a resolved page in the site shell."""

    @abstractmethod
    def render(self, entry: PageEntry) -> str:
        """Render a page entry inside the shared layout.

        Args:
            entry: Resolved page entry.

        Returns:
            Complete HTML document.
        """
        ...
