"""Content registry for pageswitch.

The registry is the allowlist of pages the router may select. It maps a
page identifier to its PageEntry, keeps registration order, and becomes
read-only once sealed. Lookups never touch the filesystem.

Key class:
- ContentRegistry: Ordered, sealable mapping of identifier to PageEntry.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import MappingProxyType

from .content import PageEntry, StaticContent
from .errors import ConfigurationError, DuplicateKeyError
from .protocols import ContentProducer
from .utils import is_valid_identifier

DEFAULT_PAGE = "home"


class ContentRegistry:
    """Ordered mapping from page identifier to PageEntry.

    Entries are added during startup. ``seal()`` checks that the default
    page exists and freezes the registry; after that it is safe to share
    between request threads without locking.

    Entries are looked up case-sensitively.
    """

    def __init__(self, default_identifier: str = DEFAULT_PAGE):
        """Initialize an empty registry.

        Args:
            default_identifier: Page used when a request selects nothing usable.

        Raises:
            ConfigurationError: If the default identifier is not a valid identifier.
        """
        if not is_valid_identifier(default_identifier):
            raise ConfigurationError(
                f"invalid default page identifier: {default_identifier!r}"
            )
        self._default = default_identifier
        self._entries: dict[str, PageEntry] = {}
        self._view = MappingProxyType(self._entries)
        self._sealed = False

    def register(
        self,
        identifier: str,
        title: str,
        producer: ContentProducer | str,
        *,
        order: int = 0,
        show_in_nav: bool = True,
        source: Path | None = None,
    ) -> PageEntry:
        """Register a page.

        Args:
            identifier: Page identifier.
            title: Display title.
            producer: Callable returning body markup, or a markup string.
            order: Navigation sort key.
            show_in_nav: Whether to list the page in navigation.
            source: Fragment file the page came from, if any.

        Returns:
            The registered entry.

        Raises:
            DuplicateKeyError: If the identifier is already registered.
            ConfigurationError: If the identifier is invalid or the registry is sealed.
        """
        if isinstance(producer, str):
            producer = StaticContent(producer)
        entry = PageEntry(
            identifier=identifier,
            title=title,
            content=producer,
            order=order,
            show_in_nav=show_in_nav,
            source=source,
        )
        return self.add(entry)

    def add(self, entry: PageEntry) -> PageEntry:
        """Register a prebuilt entry under the same rules as ``register``."""
        if self._sealed:
            raise ConfigurationError(
                f"cannot register '{entry.identifier}': registry is sealed",
                entry.source,
            )
        if not is_valid_identifier(entry.identifier):
            raise ConfigurationError(
                f"invalid page identifier: {entry.identifier!r}", entry.source
            )
        if not callable(entry.content):
            raise ConfigurationError(
                f"content for page '{entry.identifier}' is not callable", entry.source
            )
        if entry.identifier in self._entries:
            raise DuplicateKeyError(entry.identifier, entry.source)
        self._entries[entry.identifier] = entry
        return entry

    def seal(self) -> ContentRegistry:
        """Check the default page is registered and make the registry read-only.

        Returns:
            The registry, for chaining.

        Raises:
            ConfigurationError: If the default page is not registered.
        """
        if self._default not in self._entries:
            raise ConfigurationError(
                f"default page '{self._default}' is not registered"
            )
        self._sealed = True
        return self

    @property
    def sealed(self) -> bool:
        """Whether the registry has been frozen."""
        return self._sealed

    def lookup(self, identifier: str) -> PageEntry | None:
        """Return the entry for ``identifier``, or None if there is none."""
        return self._view.get(identifier)

    def has(self, identifier: str) -> bool:
        """Check whether ``identifier`` is registered. Matching is case-sensitive."""
        return identifier in self._view

    def default_identifier(self) -> str:
        return self._default

    def default_entry(self) -> PageEntry:
        """Return the default page entry.

        Raises:
            ConfigurationError: If the default page is not registered.
        """
        entry = self.lookup(self._default)
        if entry is None:
            raise ConfigurationError(
                f"default page '{self._default}' is not registered"
            )
        return entry

    def entries(self) -> list[PageEntry]:
        """Return all entries in registration order."""
        return list(self._view.values())

    def navigation(self) -> list[PageEntry]:
        """Return entries shown in navigation, by order then registration order."""
        listed = [entry for entry in self._view.values() if entry.show_in_nav]
        return sorted(listed, key=lambda entry: entry.order)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._view

    def __iter__(self) -> Iterator[str]:
        return iter(self._view)

    def __len__(self) -> int:
        return len(self._view)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        state = "sealed" if self._sealed else "open"
        return f"ContentRegistry({len(self._view)} pages, default={self._default!r}, {state})"
