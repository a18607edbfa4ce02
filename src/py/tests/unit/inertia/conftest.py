from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from inertia_pages.config import InertiaConfig
from inertia_pages.inertia.plugin import InertiaPlugin
from inertia_pages.template_engine import PagesTemplateEngine


@pytest.fixture
def inertia_config(make_config: Callable[..., InertiaConfig]) -> Generator[InertiaConfig, None, None]:
    yield make_config()


@pytest.fixture
def inertia_plugin(inertia_config: InertiaConfig) -> Generator[InertiaPlugin, None, None]:
    yield InertiaPlugin(config=inertia_config)


@pytest.fixture
def engine(inertia_config: InertiaConfig) -> PagesTemplateEngine:
    return PagesTemplateEngine(inertia_config)


@pytest.fixture
def about_template(write_template: Callable[[str, str], Path]) -> Path:
    return write_template(
        "about.html.j2",
        "{{ page('About') }}\n{{ prop('title', 'About us') }}\n{{ prop('team', ['ada', 'linus']) }}\n",
    )
