"""Template-driven pages example.

Every URI is answered by a page template under ``templates/``. News entries are
served from an in-memory content repository and rendered with ``news/_entry``.

Run with ``litestar --app examples.pages.app:app run`` and try ``litestar pages resolve news/2024/launch``.
"""

from pathlib import Path

from litestar import Litestar, Request, post
from litestar.middleware.session.server_side import ServerSideSessionConfig
from litestar.response import Redirect
from litestar.stores.memory import MemoryStore

from inertia_pages import (
    Entry,
    InertiaConfig,
    InertiaPlugin,
    InMemoryContentRepository,
    Section,
    SiteSettings,
    inertia_route,
    mark_recent_save,
)

here = Path(__file__).parent

news = Section(
    handle="news",
    site_settings=[SiteSettings(site_id=1, template="news/_entry", uri_format="news/{year}/{slug}")],
)
repository = InMemoryContentRepository([
    Entry(id=1, section=news, uri="news/2024/launch", title="We launched", fields={"body": "Hello world."}),
])


@post("/news/{entry_id:int}/save")
async def save_entry(request: Request, entry_id: int) -> Redirect:
    """Pretend to save an entry, then show it again."""
    mark_recent_save(request, entry_id)
    return Redirect(path="/news/2024/launch")


inertia = InertiaPlugin(
    config=InertiaConfig(
        template_dirs=[here / "templates"],
        assets_dirs=[str(here / "public" / "assets")],
        content_repository=repository,
        legacy_routes={"archive/{year}": "news/archive"},
    )
)

app = Litestar(
    route_handlers=[save_entry, inertia_route("/search", template="search", http_method=("GET", "POST"))],
    plugins=[inertia],
    middleware=[ServerSideSessionConfig().middleware],
    stores={"sessions": MemoryStore()},
    debug=True,
)
