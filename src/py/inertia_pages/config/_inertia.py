"""Inertia Pages configuration classes."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from inertia_pages.config._constants import (
    DEFAULT_ASSETS_DIR,
    DEFAULT_COMPONENT,
    SHARE_KEY,
    TRUE_VALUES,
    empty_dict_factory,
    expand_path,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from litestar.connection import ASGIConnection

    from inertia_pages.content import ContentRepository

__all__ = ("InertiaConfig",)


def _default_template_dirs() -> "list[Path | str]":
    return [Path("templates")]


def _default_assets_dirs() -> list[str]:
    return [DEFAULT_ASSETS_DIR]


def _default_aliases() -> dict[str, str]:
    return {"@webroot": os.getenv("INERTIA_WEBROOT", "public")}


@dataclass
class InertiaConfig:
    """Configuration for template-driven Inertia pages.

    Presence of an InertiaConfig instance on the :class:`InertiaPlugin
    <inertia_pages.inertia.plugin.InertiaPlugin>` enables the adapter.

    Example::

        InertiaPlugin(
            InertiaConfig(
                template_dirs=[here / "templates"],
                assets_dirs=["@webroot/build"],
                content_repository=repository,
            )
        )
    """

    root_template: str = "base.html.j2"
    """The template rendered on first (non-Inertia) requests.

    It receives the page object as ``page`` and should mount the client app, e.g.
    ``<div id="app" data-page="{{ page }}"></div>``. When the site does not provide
    it, the bundled default shell is used.
    """
    template_dirs: "list[Path | str]" = field(default_factory=_default_template_dirs)
    """Site template directories, searched in order."""
    template_extensions: "tuple[str, ...]" = (".html.j2", ".j2", ".html", ".jinja")
    """Suffixes tried when resolving a logical template name to a file."""
    inertia_directory: "str | None" = None
    """Optional base directory (relative to the template roots) holding page templates."""
    shared_directory: str = "_shared"
    """Directory (under ``inertia_directory``) whose templates declare props shared by every page."""
    shared_extensions: "tuple[str, ...]" = (".html", ".j2", ".jinja")
    """Suffixes of the templates rendered from the shared directory."""
    use_versioning: bool = field(
        default_factory=lambda: os.getenv("INERTIA_USE_VERSIONING", "True") in TRUE_VALUES,
    )
    """Whether asset versioning is used.

    Set to False if this is already handled in your build process.
    """
    assets_dirs: "list[str]" = field(default_factory=_default_assets_dirs)
    """Directories hashed to build the asset version when ``use_versioning`` is enabled.

    Supports environment variables and ``@alias`` prefixes.
    """
    aliases: "dict[str, str]" = field(default_factory=_default_aliases)
    """Path aliases available to ``assets_dirs``."""
    inject_element_as_prop: bool = False
    """Whether the matched element (``entry`` or ``category``) is sent to the client as a prop."""
    auto_capture_variables: bool = False
    """Whether top-level ``{% set %}`` assignments of a page template become props."""
    takeover_routing: bool = True
    """Register catch-all routes so every site request is answered by a page template.

    If set to False, only routes declared with ``inertia_route()`` are handled.
    """
    legacy_routes: "dict[str, str]" = field(default_factory=empty_dict_factory)
    """A ``{uri_format: template}`` table consulted when nothing else matches, e.g.
    ``{"blog/{year}/{slug}": "blog/_post"}``.
    """
    error_template_prefix: str = ""
    """Prefix used when looking up ``404`` / ``error`` templates."""
    share_key: str = SHARE_KEY
    """Template variable under which the per-request page context is exposed."""
    site_id: "int | str" = 1
    """The active site when no ``site_resolver`` is configured."""
    site_resolver: "Callable[[ASGIConnection[Any, Any, Any, Any]], int | str] | None" = None
    """Optional callable returning the active site for a connection."""
    content_repository: "ContentRepository | None" = None
    """Element lookup used to answer URIs that belong to entries or categories."""
    default_component: str = DEFAULT_COMPONENT
    """Component name used when nothing declares one and the URI is empty."""

    def __post_init__(self) -> None:
        """Normalize template directories to paths."""
        self.template_dirs = [Path(d) for d in self.template_dirs]

    @property
    def expanded_assets_dirs(self) -> list[str]:
        """Return ``assets_dirs`` with aliases and environment variables expanded.

        Returns:
            The expanded directory paths, in configured order.
        """
        return [expand_path(d, self.aliases) for d in self.assets_dirs]

    @property
    def shared_path(self) -> str:
        """Return the shared-props directory relative to the template roots.

        Returns:
            The shared directory, prefixed with ``inertia_directory`` when configured.
        """
        return self.template_path(self.shared_directory)

    def template_path(self, name: str) -> str:
        """Prefix a logical template name with ``inertia_directory`` when configured.

        Returns:
            The template name relative to the template roots.
        """
        if self.inertia_directory:
            return f"{self.inertia_directory.strip('/')}/{name}"
        return name

    def get_site_id(self, connection: "ASGIConnection[Any, Any, Any, Any]") -> "int | str":
        """Return the active site for a connection.

        Returns:
            The site id from ``site_resolver`` or the configured ``site_id``.
        """
        if self.site_resolver is not None:
            return self.site_resolver(connection)
        return self.site_id
