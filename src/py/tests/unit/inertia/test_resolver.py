"""Tests for URI to template resolution."""

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from inertia_pages.config import InertiaConfig
from inertia_pages.content import Category, CategoryGroup, Entry, InMemoryContentRepository, Section, SiteSettings
from inertia_pages.exceptions import SiteSettingsNotFoundError, UriFormatMismatchError
from inertia_pages.inertia.resolver import (
    TEMPLATE_PARAM,
    PageResolver,
    compile_uri_format,
    extract_uri_parameters,
    flatten_variables,
)
from inertia_pages.template_engine import PagesTemplateEngine


def test_extract_uri_parameters() -> None:
    assert extract_uri_parameters("news/2024/launch", "news/{year}/{slug}") == {"year": "2024", "slug": "launch"}


def test_extract_uri_parameters_ignores_outer_slashes() -> None:
    assert extract_uri_parameters("/news/2024/", "news/{year}") == {"year": "2024"}


@pytest.mark.parametrize("uri", ["news/2024", "news/2024/launch/extra", "blog/2024/launch", ""])
def test_extract_uri_parameters_mismatch(uri: str) -> None:
    with pytest.raises(UriFormatMismatchError):
        extract_uri_parameters(uri, "news/{year}/{slug}")


def test_uri_format_literals_are_escaped() -> None:
    pattern, names = compile_uri_format("files/{name}.json")
    assert names == ["name"]
    assert pattern.match("files/report.json")
    assert not pattern.match("files/reportxjson")


def test_flatten_variables() -> None:
    params = {"slug": "top", "variables": {"slug": "nested", "extra": 1}}
    assert flatten_variables(params) == {"slug": "top", "extra": 1}
    assert flatten_variables({"a": 1}) == {"a": 1}


@pytest.fixture
def news() -> Section:
    return Section(
        handle="news",
        site_settings=[SiteSettings(site_id=1, template="news/_entry", uri_format="news/{year}/{slug}")],
    )


@pytest.fixture
def entry(news: Section) -> Entry:
    return Entry(id=42, section=news, uri="news/2024/launch", title="Launch")


@pytest.fixture
def content_config(make_config: Callable[..., InertiaConfig], entry: Entry) -> InertiaConfig:
    return make_config(content_repository=InMemoryContentRepository([entry]))


def _resolver(config: InertiaConfig) -> PageResolver:
    return PageResolver(config, PagesTemplateEngine(config))


def test_resolve_element(
    content_config: InertiaConfig, entry: Entry, write_template: Callable[[str, str], Path]
) -> None:
    write_template("news/_entry.html.j2", "")
    resolved = _resolver(content_config).resolve("/news/2024/launch/", route_params={"page": 2})

    assert resolved.matched
    assert resolved.template == "news/_entry"
    assert resolved.element is entry
    assert resolved.variables == {"page": 2, "year": "2024", "slug": "launch", "entry": entry}


def test_resolve_element_missing_template(content_config: InertiaConfig, entry: Entry) -> None:
    resolved = _resolver(content_config).resolve("news/2024/launch")
    assert not resolved.matched
    assert resolved.element is entry


def test_resolve_element_without_site_settings(content_config: InertiaConfig) -> None:
    with pytest.raises(SiteSettingsNotFoundError, match="news"):
        _resolver(content_config).resolve("news/2024/launch", site_id=2)


def test_resolve_category(
    make_config: Callable[..., InertiaConfig], write_template: Callable[[str, str], Path]
) -> None:
    group = CategoryGroup(handle="topics", site_settings=[SiteSettings(2, "topics/_category", "topics/{slug}")])
    category = Category(id=7, group=group, uri="topics/python")
    config = make_config(content_repository=InMemoryContentRepository([category]), site_id=2)
    write_template("topics/_category.html", "")

    resolved = _resolver(config).resolve("topics/python")
    assert resolved.matched
    assert resolved.variables == {"slug": "python", "category": category}


def test_resolve_explicit_template(
    make_config: Callable[..., InertiaConfig], write_template: Callable[[str, str], Path]
) -> None:
    write_template("search/results.html.j2", "")
    write_template("search.html.j2", "")
    resolved = _resolver(make_config()).resolve(
        "search",
        route_params={"variables": {"mode": "full"}},
        request_params={"q": "inertia", TEMPLATE_PARAM: "other"},
        explicit_template="search/results",
    )
    assert resolved.matched
    assert resolved.template == "search/results"
    assert resolved.variables == {"mode": "full", "q": "inertia"}


def test_resolve_missing_explicit_template_falls_through(
    make_config: Callable[..., InertiaConfig], write_template: Callable[[str, str], Path]
) -> None:
    write_template("search.html.j2", "")
    resolved = _resolver(make_config()).resolve("search", request_params={"q": "x"}, explicit_template="nope")
    assert resolved.template == "search"
    assert resolved.variables == {}


def test_resolve_uri_template(
    make_config: Callable[..., InertiaConfig], write_template: Callable[[str, str], Path]
) -> None:
    write_template("pages/about.html.j2", "")
    write_template("about.html.j2", "")
    resolved = _resolver(make_config(inertia_directory="pages")).resolve("about")
    assert resolved.template == "pages/about"

    resolved = _resolver(make_config()).resolve("about")
    assert resolved.template == "about"


def test_resolve_home(make_config: Callable[..., InertiaConfig], write_template: Callable[[str, str], Path]) -> None:
    write_template("index.html.j2", "")
    resolved = _resolver(make_config()).resolve("")
    assert resolved.matched
    assert resolved.template == ""


def test_resolve_legacy_route(
    make_config: Callable[..., InertiaConfig], write_template: Callable[[str, str], Path]
) -> None:
    write_template("blog/_post.html.j2", "")
    config = make_config(legacy_routes={"archive/{year}": "missing", "blog/{year}/{slug}": "blog/_post"})
    resolved = _resolver(config).resolve("blog/2023/hello")
    assert resolved.matched
    assert resolved.template == "blog/_post"
    assert resolved.variables == {"year": "2023", "slug": "hello"}


def test_resolve_legacy_route_missing_template(
    make_config: Callable[..., InertiaConfig], caplog: pytest.LogCaptureFixture
) -> None:
    config = make_config(legacy_routes={"blog/{slug}": "blog/_post"})
    with caplog.at_level(logging.WARNING, logger="inertia_pages"):
        resolved = _resolver(config).resolve("blog/hello")
    assert not resolved.matched
    assert "blog/_post" in caplog.text


def test_resolve_nothing(make_config: Callable[..., InertiaConfig]) -> None:
    resolved = _resolver(make_config()).resolve("nowhere", route_params={"a": 1})
    assert not resolved.matched
    assert resolved.template is None
    assert resolved.variables == {"a": 1}


def test_element_wins_over_uri_template(
    content_config: InertiaConfig, write_template: Callable[[str, str], Path]
) -> None:
    write_template("news/_entry.html.j2", "")
    write_template("news/2024/launch.html.j2", "")
    assert _resolver(content_config).resolve("news/2024/launch").template == "news/_entry"
