"""Litestar Inertia Pages: template-driven Inertia.js pages for Litestar.

Every site URI is answered by a Jinja page template. Templates declare the client
component and its props; the adapter speaks the Inertia protocol, sending the page
object as JSON to Inertia visits and rendering the full HTML shell on first loads.

Basic usage:
    from litestar import Litestar
    from litestar.middleware.session.server_side import ServerSideSessionConfig
    from inertia_pages import InertiaConfig, InertiaPlugin

    app = Litestar(
        plugins=[InertiaPlugin(InertiaConfig(template_dirs=["templates"], assets_dirs=["public/build"]))],
        middleware=[ServerSideSessionConfig().middleware],
    )

A page template, ``templates/about.html.j2``::

    {{ page('About') }}
    {{ prop('title', 'About us') }}
"""

from inertia_pages import inertia
from inertia_pages.config import InertiaConfig
from inertia_pages.content import (
    Category,
    CategoryGroup,
    ContentRepository,
    Entry,
    InMemoryContentRepository,
    Section,
    SiteSettings,
)
from inertia_pages.inertia import InertiaPlugin, inertia_route, mark_recent_save
from inertia_pages.template_engine import PagesTemplateEngine, TemplateLocator, TemplateMode

__all__ = (
    "Category",
    "CategoryGroup",
    "ContentRepository",
    "Entry",
    "InMemoryContentRepository",
    "InertiaConfig",
    "InertiaPlugin",
    "PagesTemplateEngine",
    "Section",
    "SiteSettings",
    "TemplateLocator",
    "TemplateMode",
    "inertia",
    "inertia_route",
    "mark_recent_save",
)
