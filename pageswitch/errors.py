"""Errors raised while assembling a site.

Only configuration problems are errors. Anything that goes wrong with an
individual request falls back to the default page instead.
"""

from __future__ import annotations

from pathlib import Path


class ConfigurationError(Exception):
    """Startup-fatal problem with the page registry or site configuration.

    Attributes:
        message: Human-readable error message.
        source_path: Fragment or config file involved, when there is one.
    """

    def __init__(self, message: str, source_path: Path | None = None):
        self.message = message
        self.source_path = source_path
        if source_path is not None:
            super().__init__(f"{source_path}: {message}")
        else:
            super().__init__(message)


class DuplicateKeyError(ConfigurationError):
    """A page identifier was registered twice.

    Attributes:
        identifier: The identifier that was already present.
    """

    def __init__(self, identifier: str, source_path: Path | None = None):
        self.identifier = identifier
        super().__init__(f"page '{identifier}' is already registered", source_path)
