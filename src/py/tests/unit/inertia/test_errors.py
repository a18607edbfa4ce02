"""Tests for error pages and rendering failures."""

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any, NoReturn

import pytest
from jinja2 import TemplateSyntaxError
from litestar import get
from litestar.exceptions import NotAuthorizedException, NotFoundException
from litestar.middleware.session.server_side import ServerSideSessionConfig
from litestar.stores.memory import MemoryStore
from litestar.testing import TestClient, create_test_client  # pyright: ignore[reportUnknownVariableType]

from inertia_pages.config import InertiaConfig
from inertia_pages.content import Entry, InMemoryContentRepository, Section, SiteSettings
from inertia_pages.inertia import InertiaHeaders, InertiaPlugin, inertia_route
from inertia_pages.inertia.exception_handler import get_template_lineno

pytestmark = pytest.mark.anyio

INERTIA = {InertiaHeaders.ENABLED.value: "true"}


@pytest.fixture
def client_factory(make_config: Callable[..., InertiaConfig]) -> Iterator[Callable[..., TestClient[Any]]]:
    clients: list[TestClient[Any]] = []

    def _create(route_handlers: "list[Any] | None" = None, debug: bool = False, **config: Any) -> TestClient[Any]:
        client = create_test_client(
            route_handlers=route_handlers or [],
            plugins=[InertiaPlugin(make_config(**config))],
            middleware=[ServerSideSessionConfig().middleware],
            stores={"sessions": MemoryStore()},
            logging_config=None,
            debug=debug,
        )
        clients.append(client)
        return client.__enter__()

    yield _create
    for client in clients:
        client.__exit__(None, None, None)


def _raise_not_found() -> NoReturn:
    raise NotFoundException(detail="No such thing")


async def test_missing_page_renders_404_template(
    client_factory: Callable[..., TestClient[Any]], write_template: Callable[[str, str], Path]
) -> None:
    write_template("404.html.j2", "{{ page('Errors/NotFound') }}{{ prop('status', status_code) }}")
    client = client_factory()

    response = client.get("/missing/page", headers=INERTIA)
    assert response.status_code == 404
    assert response.json()["component"] == "Errors/NotFound"
    assert response.json()["props"]["status"] == 404
    assert response.json()["url"] == "/missing/page"

    response = client.get("/missing/page")
    assert response.status_code == 404
    assert response.text.startswith("<!DOCTYPE html>")


async def test_error_template_prefix_and_generic_fallback(
    client_factory: Callable[..., TestClient[Any]], write_template: Callable[[str, str], Path]
) -> None:
    write_template("_errors/error.html.j2", "{{ page('Errors/Generic') }}{{ prop('status', status_code) }}")
    response = client_factory(error_template_prefix="_errors/").get("/missing", headers=INERTIA)
    assert response.status_code == 404
    assert response.json()["component"] == "Errors/Generic"


async def test_missing_page_without_error_template(client_factory: Callable[..., TestClient[Any]]) -> None:
    response = client_factory().get("/missing", headers=INERTIA)
    assert response.status_code == 404
    assert response.json()["status_code"] == 404


async def test_http_exception_from_handler_uses_error_template(
    client_factory: Callable[..., TestClient[Any]], write_template: Callable[[str, str], Path]
) -> None:
    @get("/admin")
    async def admin() -> NoReturn:
        raise NotAuthorizedException(detail="Sign in first")

    write_template("401.html.j2", "{{ page('Errors/Unauthorized') }}{{ prop('message', message) }}")
    response = client_factory([admin]).get("/admin", headers=INERTIA)
    assert response.status_code == 401
    assert response.json()["component"] == "Errors/Unauthorized"
    assert response.json()["props"]["message"] == "Sign in first"


async def test_status_error_while_rendering_renders_error_page(
    client_factory: Callable[..., TestClient[Any]], write_template: Callable[[str, str], Path]
) -> None:
    write_template("404.html.j2", "{{ page('Errors/NotFound') }}{{ prop('message', message) }}")
    write_template("lookup.html.j2", "{{ page('Lookup') }}{{ lookup() }}")
    route_handler = inertia_route("/lookup", template="lookup", variables={"lookup": _raise_not_found})

    response = client_factory([route_handler]).get("/lookup", headers=INERTIA)
    assert response.status_code == 404
    assert response.json()["component"] == "Errors/NotFound"
    assert response.json()["props"]["message"] == "No such thing"


async def test_status_error_propagates_in_debug(
    client_factory: Callable[..., TestClient[Any]], write_template: Callable[[str, str], Path]
) -> None:
    write_template("lookup.html.j2", "{{ page('Lookup') }}{{ lookup() }}")
    route_handler = inertia_route("/lookup", template="lookup", variables={"lookup": _raise_not_found})

    response = client_factory([route_handler], debug=True).get("/lookup", headers=INERTIA)
    assert response.status_code == 404
    assert "No such thing" in response.text


async def test_template_error_is_logged_and_raised(
    client_factory: Callable[..., TestClient[Any]],
    write_template: Callable[[str, str], Path],
    package_log: pytest.LogCaptureFixture,
) -> None:
    write_template("broken.html.j2", "{{ page('Broken') }}\n\n{{ missing.attribute.chain }}")
    with package_log.at_level(logging.ERROR, logger="inertia_pages"):
        response = client_factory().get("/broken", headers=INERTIA)

    assert response.status_code == 500
    records = [r for r in package_log.records if r.name == "inertia_pages"]
    assert records
    assert "Template rendering failed" in records[0].getMessage()
    assert "broken" in records[0].getMessage()
    assert "line 3" in records[0].getMessage()


async def test_missing_site_settings_is_fatal(
    client_factory: Callable[..., TestClient[Any]], write_template: Callable[[str, str], Path]
) -> None:
    write_template("news/_entry.html.j2", "{{ page('News/Entry') }}")
    settings = SiteSettings(site_id=2, template="news/_entry", uri_format="news/{slug}")
    section = Section(handle="news", site_settings=[settings])
    repository = InMemoryContentRepository([Entry(id=1, section=section, uri="news/launch")])

    response = client_factory(content_repository=repository).get("/news/launch", headers=INERTIA)
    assert response.status_code == 500


def test_get_template_lineno_from_syntax_error() -> None:
    assert get_template_lineno(TemplateSyntaxError("boom", lineno=7)) == 7
    assert get_template_lineno(ValueError("no template")) is None
