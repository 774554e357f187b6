"""Metadata extractors for pageswitch fragments.

Fragments may start with a YAML frontmatter block. The title of a page
comes from the frontmatter, then the first heading of the fragment, then
the filename.

Key functions:
- extract_frontmatter: Split YAML frontmatter from fragment source.
- extract_title: Find the display title of a fragment.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml
from markupsafe import Markup

from .utils import titleize

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*\n", re.DOTALL)
HTML_H1_RE = re.compile(r"<h1\b[^>]*>(.*?)</h1>", re.IGNORECASE | re.DOTALL)


def extract_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter from fragment source.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (frontmatter dict, remaining content).
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
        if not isinstance(data, dict):
            return {}, text
        return data, text[match.end() :]
    except yaml.YAMLError:
        return {}, text


def extract_title(body: str, path: Path, frontmatter: dict[str, Any]) -> str:
    """Resolve the title for a fragment.

    Args:
        body: Fragment source without frontmatter.
        path: Path to the fragment file.
        frontmatter: Parsed frontmatter.

    Returns:
        Title text.
    """
    title = frontmatter.get("title")
    if title:
        return str(title).strip()
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("# "):
            return stripped.lstrip("# ").strip()
    match = HTML_H1_RE.search(body)
    if match:
        text = Markup(match.group(1)).striptags()
        if text:
            return text
    return titleize(path.name)
