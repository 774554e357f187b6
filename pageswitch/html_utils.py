"""HTML utility functions for pageswitch.

This module provides helpers for building the ``?page=<identifier>`` links
that select a page and the URLs of static assets.

Functions:
    page_href: Build the query-string link for a page identifier.
    join_root_url: Join a base URL with a path.
"""

from __future__ import annotations

from urllib.parse import quote, urlencode


def page_href(identifier: str, query_param: str = "page", base: str = "") -> str:
    """Build the link that selects a page.

    Args:
        identifier: Registered page identifier.
        query_param: Name of the page-selection query parameter.
        base: Optional path or URL the query string is appended to.

    Returns:
        Link such as ``?page=status``.

    Examples:
        >>> page_href("status")
        '?page=status'

        >>> page_href("status", base="/index.html")
        '/index.html?page=status'
    """
    query = urlencode({query_param: identifier}, quote_via=quote)
    return f"{base}?{query}"


def join_root_url(root_url: str, path: str) -> str:
    """Safely join a root URL and a path, avoiding double slashes.

    Args:
        root_url: Base URL (e.g., https://example.com/project).
        path: Path beginning with or without a leading slash.

    Returns:
        Combined URL with proper slash handling.

    Examples:
        >>> join_root_url('https://example.com', '/images/logo.jpg')
        'https://example.com/images/logo.jpg'
    """
    if not root_url:
        return path
    base = root_url.rstrip("/")
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"
