"""pageswitch: page-selection router for small project websites.

A site is a fixed set of content fragments keyed by short identifiers.
Each request names one of them in a ``?page=`` query parameter; the router
checks the name against the registry (never the filesystem), falls back to
the default page when the name is missing or unknown, and the layout
assembler wraps the selected fragment in the shared page shell.

The main entry point is the CLI module, which provides commands for
serving a site, rendering single pages, and checking a project.
"""

from .content import PageEntry, StaticContent
from .errors import ConfigurationError, DuplicateKeyError
from .layout import LayoutAssembler
from .registry import ContentRegistry
from .router import PageRouter

__all__ = [
    "ConfigurationError",
    "ContentRegistry",
    "DuplicateKeyError",
    "LayoutAssembler",
    "PageEntry",
    "PageRouter",
    "StaticContent",
    "__version__",
]
__version__ = "0.1.0"
