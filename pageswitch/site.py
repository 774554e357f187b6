"""Site assembly for pageswitch.

This module loads the project configuration and site data, discovers the
content fragments, and wires the registry, router and layout assembler
into a Site that turns a requested page identifier into an HTML document.

Key functions:
- build_site: Assemble a Site from a project directory.
- load_config: Loads configuration from pageswitch.yaml.
- load_data: Loads site data from YAML files in the data directory.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .content import FragmentLoader, PageEntry
from .errors import ConfigurationError
from .layout import LayoutAssembler
from .protocols import LayoutRenderer
from .registry import DEFAULT_PAGE, ContentRegistry
from .router import PageRouter

CONFIG_FILENAME = "pageswitch.yaml"

DEFAULT_CONFIG = {
    "default_page": DEFAULT_PAGE,
    "content_dir": "pages",
    "theme_dir": "theme",
    "static_dir": "static",
    "layout": "layout",
    "query_param": "page",
    "port": 4000,
}


@dataclass
class Site:
    """A fully assembled site.

    Attributes:
        registry: Sealed registry of pages.
        router: Router resolving requested identifiers.
        assembler: Layout assembler producing HTML.
        config: Effective configuration.
        data: Global site data.
    """

    registry: ContentRegistry
    router: PageRouter
    assembler: LayoutRenderer
    config: dict[str, Any]
    data: dict[str, Any]

    def resolve(self, raw_input: object = None) -> PageEntry:
        return self.router.resolve(raw_input)

    def render(self, raw_input: object = None) -> str:
        """Render the page selected by a requested identifier.

        Args:
            raw_input: Requested identifier; may be None, empty or hostile.

        Returns:
            Complete HTML document.
        """
        return self.assembler.render(self.router.resolve(raw_input))

    def render_query(self, query_string: str | None) -> str:
        """Render the page selected by a raw URL query string."""
        return self.assembler.render(self.router.resolve_query(query_string))


def load_config(project_root: Path) -> dict[str, Any]:
    """Load configuration from pageswitch.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigurationError: If the file is not valid YAML.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"invalid YAML: {exc}", config_path) from exc
            if isinstance(loaded, dict):
                config.update(loaded)
    return config


def load_data(project_root: Path) -> dict[str, Any]:
    """Load site data from YAML files in the data directory.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing merged data from all YAML files.

    Raises:
        ConfigurationError: If a data file cannot be read or is not valid YAML.
    """
    data_dir = project_root / "data"
    data: dict[str, Any] = {}
    if not data_dir.exists():
        return data
    for path in sorted(data_dir.glob("*.yaml")):
        try:
            with open(path, encoding="utf-8") as f:
                payload = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"invalid data file: {exc}", path) from exc
        if not isinstance(payload, dict):
            continue
        if path.name == "site.yaml":
            data.update(payload)
        else:
            data[path.stem] = payload
    return data


def build_registry(
    content_dir: Path,
    default_page: str = DEFAULT_PAGE,
    include_drafts: bool = False,
) -> ContentRegistry:
    """Discover fragments and build a sealed registry.

    Args:
        content_dir: Directory containing fragment files.
        default_page: Identifier of the default page.
        include_drafts: Whether to include draft fragments.

    Returns:
        Sealed ContentRegistry.

    Raises:
        ConfigurationError: On missing content, duplicates, or a missing default page.
    """
    registry = ContentRegistry(default_page)
    FragmentLoader(content_dir).populate(registry, include_drafts=include_drafts)
    return registry.seal()


def build_site(project_root: Path, include_drafts: bool = False) -> Site:
    """Assemble the site for a project directory.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include draft fragments.

    Returns:
        Site ready to render requests.

    Raises:
        ConfigurationError: If the configuration or content is unusable.
    """
    config = load_config(project_root)
    data = load_data(project_root)
    registry = build_registry(
        project_root / str(config.get("content_dir", "pages")),
        default_page=str(config.get("default_page", DEFAULT_PAGE)),
        include_drafts=include_drafts,
    )
    query_param = str(config.get("query_param", "page"))
    router = PageRouter(registry, query_param=query_param)
    assembler = LayoutAssembler(
        registry,
        data=data,
        theme_dir=project_root / str(config.get("theme_dir", "theme")),
        query_param=query_param,
        layout=str(config.get("layout", "layout")),
    )
    return Site(
        registry=registry,
        router=router,
        assembler=assembler,
        config=config,
        data=data,
    )
