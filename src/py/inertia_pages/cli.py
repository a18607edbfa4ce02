from typing import TYPE_CHECKING, Optional

from click import argument, group, option
from litestar.cli._utils import LitestarGroup  # pyright: ignore[reportPrivateImportUsage]

if TYPE_CHECKING:
    from litestar import Litestar


@group(cls=LitestarGroup, name="pages")
def pages_group() -> None:
    """Manage Inertia pages."""


@pages_group.command(
    name="version",
    help="Print the current asset version token.",
)
def pages_version(app: "Litestar") -> None:
    """Print the current asset version token."""
    from litestar.cli._utils import console  # pyright: ignore[reportPrivateImportUsage]

    from inertia_pages.inertia.plugin import InertiaPlugin
    from inertia_pages.inertia.versioning import get_inertia_version

    plugin = app.plugins.get(InertiaPlugin)
    console.print(get_inertia_version(plugin.config), markup=False, highlight=False)


@pages_group.command(
    name="resolve",
    help="Show which template answers a URI.",
)
@argument("uri", default="")
@option("--site", "site_id", type=str, help="The site to resolve the URI for.", default=None, required=False)
def pages_resolve(app: "Litestar", uri: str, site_id: "Optional[str]") -> None:
    """Show which template answers a URI."""
    from click import ClickException
    from litestar.cli._utils import console  # pyright: ignore[reportPrivateImportUsage]

    from inertia_pages.exceptions import InertiaPagesError
    from inertia_pages.inertia.plugin import InertiaPlugin

    plugin = app.plugins.get(InertiaPlugin)
    resolved_site: "int | str | None" = site_id
    if site_id is not None and site_id.isdigit():
        resolved_site = int(site_id)

    try:
        resolved = plugin.resolver.resolve(uri, site_id=resolved_site)
    except InertiaPagesError as e:
        raise ClickException(str(e)) from e

    console.rule(f"[yellow]/{uri.strip('/')}[/]", align="left")
    if not resolved.matched:
        console.print("[red]✗ No template answers this URI.[/]")
        return
    console.print(f"[green]✓ Template: {resolved.template}[/]")
    if resolved.element is not None:
        console.print(f"Element: {type(resolved.element).__name__} #{resolved.element.id}")
    for key, value in resolved.variables.items():
        if resolved.element is not None and value is resolved.element:
            continue
        console.print(f"  {key} = {value!r}", markup=False, highlight=False)
