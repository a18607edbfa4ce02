import inspect
from collections.abc import Callable
from pathlib import Path
from typing import Any, cast

import click
import pytest
from litestar import Litestar
from litestar.middleware.session.server_side import ServerSideSessionConfig

from inertia_pages.cli import pages_group, pages_resolve, pages_version
from inertia_pages.config import NO_VERSIONING, InertiaConfig
from inertia_pages.content import Entry, InMemoryContentRepository, Section, SiteSettings
from inertia_pages.inertia import InertiaPlugin
from inertia_pages.inertia.versioning import get_inertia_version


def _make_app(config: InertiaConfig) -> Litestar:
    return Litestar(plugins=[InertiaPlugin(config)], middleware=[ServerSideSessionConfig().middleware])


def _unwrap_command(command: object) -> Callable[..., Any]:
    callback = getattr(command, "callback")
    return cast("Callable[..., Any]", inspect.unwrap(callback))


def test_cli_group_commands() -> None:
    assert set(pages_group.commands) == {"version", "resolve"}


def test_cli_plugin_registers_group() -> None:
    cli = click.Group()
    InertiaPlugin().on_cli_init(cli)
    assert cli.commands["pages"] is pages_group


def test_cli_version(make_config: Callable[..., InertiaConfig], capsys: pytest.CaptureFixture[str]) -> None:
    config = make_config()
    _unwrap_command(pages_version)(_make_app(config))
    assert capsys.readouterr().out.strip() == get_inertia_version(config)


def test_cli_version_disabled(make_config: Callable[..., InertiaConfig], capsys: pytest.CaptureFixture[str]) -> None:
    _unwrap_command(pages_version)(_make_app(make_config(use_versioning=False)))
    assert capsys.readouterr().out.strip() == NO_VERSIONING


def test_cli_resolve_template(
    make_config: Callable[..., InertiaConfig],
    write_template: Callable[[str, str], Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    write_template("about.html.j2", "")
    _unwrap_command(pages_resolve)(_make_app(make_config()), uri="/about", site_id=None)
    out = capsys.readouterr().out
    assert "Template: about" in out


def test_cli_resolve_element(
    make_config: Callable[..., InertiaConfig],
    write_template: Callable[[str, str], Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    settings = SiteSettings(site_id=1, template="news/_entry", uri_format="news/{slug}")
    section = Section(handle="news", site_settings=[settings])
    repository = InMemoryContentRepository([Entry(id=9, section=section, uri="news/launch")])
    write_template("news/_entry.html.j2", "")

    app = _make_app(make_config(content_repository=repository))
    _unwrap_command(pages_resolve)(app, uri="news/launch", site_id="1")
    out = capsys.readouterr().out
    assert "Template: news/_entry" in out
    assert "Entry #9" in out
    assert "slug = 'launch'" in out


def test_cli_resolve_no_match(make_config: Callable[..., InertiaConfig], capsys: pytest.CaptureFixture[str]) -> None:
    _unwrap_command(pages_resolve)(_make_app(make_config()), uri="nowhere", site_id=None)
    assert "No template answers this URI" in capsys.readouterr().out


def test_cli_resolve_configuration_error(make_config: Callable[..., InertiaConfig]) -> None:
    section = Section(handle="news", site_settings=[])
    repository = InMemoryContentRepository([Entry(id=9, section=section, uri="news/launch")])
    app = _make_app(make_config(content_repository=repository))
    with pytest.raises(click.ClickException, match="No site settings"):
        _unwrap_command(pages_resolve)(app, uri="news/launch", site_id=None)
