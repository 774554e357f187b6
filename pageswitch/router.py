"""Page selection for pageswitch.

The router turns the untrusted ``page`` query value of a request into a
registered PageEntry. The value is only ever used as a key into the
in-memory registry, never as a path. Anything missing, malformed or
unknown selects the default page; per-request input never raises.

Key class:
- PageRouter: Validates and resolves page identifiers.
"""

from __future__ import annotations

from urllib.parse import parse_qs

from .content import PageEntry
from .registry import ContentRegistry
from .utils import is_valid_identifier


class PageRouter:
    """Resolves requested page identifiers against a content registry.

    Attributes:
        registry: Sealed registry of selectable pages.
        query_param: Name of the query parameter carrying the identifier.
    """

    def __init__(self, registry: ContentRegistry, query_param: str = "page"):
        """Initialize the router and seal its registry.

        Args:
            registry: Registry of selectable pages.
            query_param: Name of the page-selection query parameter.

        Raises:
            ConfigurationError: If the registry has no default page.
        """
        self.registry = registry.seal()
        self.query_param = query_param

    def resolve_identifier(self, raw_input: object) -> str:
        """Return the identifier a request resolves to.

        Args:
            raw_input: Requested identifier; may be None, empty or hostile.

        Returns:
            A registered identifier.
        """
        if not raw_input:
            return self.registry.default_identifier()
        if not is_valid_identifier(raw_input):
            return self.registry.default_identifier()
        if not self.registry.has(raw_input):
            return self.registry.default_identifier()
        return raw_input

    def resolve(self, raw_input: object = None) -> PageEntry:
        """Resolve a requested identifier to a registered page.

        Args:
            raw_input: Requested identifier; may be None, empty or hostile.

        Returns:
            The requested entry, or the default entry.
        """
        entry = self.registry.lookup(self.resolve_identifier(raw_input))
        if entry is None:
            return self.registry.default_entry()
        return entry

    def resolve_query(self, query_string: str | None) -> PageEntry:
        """Resolve the page selected by a raw URL query string.

        Only the first value of the page parameter counts.

        Args:
            query_string: Query string without the leading ``?``.

        Returns:
            The selected entry, or the default entry.
        """
        if not query_string:
            return self.resolve(None)
        try:
            params = parse_qs(query_string, keep_blank_values=True)
        except ValueError:
            return self.resolve(None)
        values = params.get(self.query_param) or [None]
        return self.resolve(values[0])
