"""Tests for reading the component and props back from rendered page templates."""

from collections.abc import Callable
from pathlib import Path

import pytest

from inertia_pages.config import InertiaConfig
from inertia_pages.inertia.renderer import PageRenderer
from inertia_pages.template_engine import PagesTemplateEngine


@pytest.fixture
def renderer(inertia_config: InertiaConfig, engine: PagesTemplateEngine) -> PageRenderer:
    return PageRenderer(inertia_config, engine)


def test_declared_component_keeps_markers(renderer: PageRenderer, write_template: Callable[[str, str], Path]) -> None:
    write_template("docs.html.j2", "{{ page('Docs') }}<p>hello</p>{{ prop('a', 1) }}")
    page = renderer.handle_matched_template("docs", "docs")
    assert page.component == "Docs"
    assert page.props == {"a": 1}


def test_undeclared_component_drops_markers(
    renderer: PageRenderer, write_template: Callable[[str, str], Path]
) -> None:
    write_template("docs.html.j2", "<p>hello</p>{{ prop('a', 1) }}")
    page = renderer.handle_matched_template("docs", "docs")
    assert page.component == "docs"
    assert page.props == {}


def test_empty_uri_uses_default_component(renderer: PageRenderer, write_template: Callable[[str, str], Path]) -> None:
    write_template("index.html.j2", "<p>home</p>")
    page = renderer.handle_matched_template("index", "")
    assert page.component == "Index"
    assert page.props == {}


def test_json_page_object_is_used_as_is(renderer: PageRenderer, write_template: Callable[[str, str], Path]) -> None:
    write_template("legacy.html.j2", "{{ inertia('Legacy/Page', {'items': [1]}) }}")
    page = renderer.handle_matched_template("legacy", "legacy")
    assert page.component == "Legacy/Page"
    assert page.props == {"items": [1]}


def test_json_without_props_has_no_props(renderer: PageRenderer, write_template: Callable[[str, str], Path]) -> None:
    write_template("raw.html.j2", '{"component": "Raw"}')
    page = renderer.handle_matched_template("raw", "raw")
    assert page.component == "Raw"
    assert page.props == {}


def test_explicit_props_apply_without_component(
    renderer: PageRenderer, write_template: Callable[[str, str], Path]
) -> None:
    write_template("docs.html.j2", "{{ props({'title': 'Docs'}) }}")
    page = renderer.handle_matched_template("docs", "docs")
    assert page.component == "docs"
    assert page.props == {"title": "Docs"}
