"""Utility functions for pageswitch.

This module contains small helpers used across the package: page identifier
validation, deriving identifiers and titles from fragment filenames, and
ordering prefixes used for navigation.

Key functions:
    is_valid_identifier: Check a candidate page identifier against the allowlist.
    slugify: Convert a fragment filename stem to a page identifier.
    titleize: Convert a filename to a human-readable title.
    extract_number_from_name: Read a leading ordering number from a filename.
    strip_number_prefix: Remove a leading ordering number from a filename.
    is_markdown: Check if a path is a Markdown fragment.
    is_html: Check if a path is an HTML fragment.
    is_internal_path: Check if a path is a draft or internal file.

Note:
    Link-building utilities (page_href, join_root_url) live in
    html_utils.py and are re-exported here.
"""

from __future__ import annotations

import re
from pathlib import Path

from .html_utils import join_root_url, page_href  # noqa: F401

MAX_IDENTIFIER_LENGTH = 64
IDENTIFIER_RE = re.compile(r"[A-Za-z0-9_-]+")


def is_valid_identifier(value: object) -> bool:
    """Check whether a value is an acceptable page identifier.

    Identifiers are non-empty strings of at most ``MAX_IDENTIFIER_LENGTH``
    characters drawn from letters, digits, hyphen and underscore.

    Args:
        value: Candidate identifier, usually straight from a query string.

    Returns:
        True if the value may be used as a registry key.

    Examples:
        >>> is_valid_identifier("status")
        True

        >>> is_valid_identifier("../etc/passwd")
        False
    """
    if not isinstance(value, str):
        return False
    if not value or len(value) > MAX_IDENTIFIER_LENGTH:
        return False
    return IDENTIFIER_RE.fullmatch(value) is not None


def slugify(name: str) -> str:
    """Convert a filename stem to a page identifier, dropping an order prefix.

    Args:
        name: Filename stem.

    Returns:
        Lowercase identifier made of letters, digits, hyphens and underscores.

    Examples:
        >>> slugify("01-Home")
        'home'

        >>> slugify("build status")
        'build-status'
    """
    cleaned = strip_number_prefix(name)
    cleaned = re.sub(r"[^a-zA-Z0-9_]+", "-", cleaned)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "index"


def titleize(filename: str) -> str:
    """Convert a filename to a human-readable title.

    Removes an ordering prefix, replaces hyphens and underscores with
    spaces, and capitalizes each word.

    Args:
        filename: Filename with or without extension.

    Returns:
        Human-readable title string.

    Examples:
        >>> titleize("02-build-status.md")
        'Build Status'

        >>> titleize("home.html")
        'Home'
    """
    base = strip_number_prefix(Path(filename).stem)
    words = re.split(r"[\s\-_]+", base)
    return " ".join(word.capitalize() for word in words if word) or "Untitled"


def extract_number_from_name(name: str) -> int | None:
    """Extract a leading number from a filename for ordering.

    Handles filenames like "01-home.html" or "2-status.md".

    Args:
        name: Filename stem (without extension).

    Returns:
        The extracted number, or None if no number found.
    """
    parts = name.split("-")
    if len(parts) > 1 and parts[0].isdigit():
        return int(parts[0])
    return None


def strip_number_prefix(name: str) -> str:
    """Strip a leading ordering number from a filename stem.

    Args:
        name: Filename stem (without extension).

    Returns:
        Filename with the number prefix removed.
    """
    parts = name.split("-")
    if len(parts) > 1 and parts[0].isdigit():
        return "-".join(parts[1:])
    return name


def is_internal_path(path: Path) -> bool:
    """Check if a path is internal (contains components starting with _).

    Internal paths include partials and draft fragments.

    Args:
        path: Path to check.

    Returns:
        True if any path component starts with underscore.
    """
    return any(part.startswith("_") for part in path.parts)


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown fragment.

    Args:
        path: Path to check.

    Returns:
        True if the file has .md extension (case-insensitive).
    """
    return path.suffix.lower() == ".md"


def is_html(path: Path) -> bool:
    """Check if a path is an HTML fragment.

    Args:
        path: Path to check.

    Returns:
        True if the file has .html or .htm extension (case-insensitive).
    """
    return path.suffix.lower() in (".html", ".htm")
