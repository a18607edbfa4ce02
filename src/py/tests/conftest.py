import logging
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from inertia_pages.config import InertiaConfig

# Environment variables that may affect test behavior - clear before each test
_INERTIA_ENV_VARS = [
    "INERTIA_USE_VERSIONING",
    "INERTIA_WEBROOT",
]


@pytest.fixture(autouse=True)
def clean_inertia_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear Inertia-related environment variables before each test for isolation."""
    for var in _INERTIA_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    path = tmp_path / "templates"
    path.mkdir()
    return path


@pytest.fixture
def assets_dir(tmp_path: Path) -> Path:
    path = tmp_path / "public" / "assets"
    path.mkdir(parents=True)
    (path / "app.js").write_text("console.log('app')")
    (path / "css").mkdir()
    (path / "css" / "app.css").write_text("body { margin: 0 }")
    return path


@pytest.fixture
def write_template(template_dir: Path) -> Callable[[str, str], Path]:
    """Return a helper writing a template below the site template root."""

    def _write(name: str, source: str) -> Path:
        path = template_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_config(template_dir: Path, assets_dir: Path) -> Callable[..., InertiaConfig]:
    def _make(**kwargs: Any) -> InertiaConfig:
        kwargs.setdefault("template_dirs", [template_dir])
        kwargs.setdefault("assets_dirs", [str(assets_dir)])
        return InertiaConfig(**kwargs)

    return _make


@pytest.fixture
def package_log(caplog: pytest.LogCaptureFixture) -> Generator[pytest.LogCaptureFixture, None, None]:
    """Capture the package logger directly, whatever handlers the application installs on the root logger."""
    package_logger = logging.getLogger("inertia_pages")
    propagate, disabled = package_logger.propagate, package_logger.disabled
    package_logger.addHandler(caplog.handler)
    package_logger.propagate = False
    package_logger.disabled = False
    try:
        yield caplog
    finally:
        package_logger.removeHandler(caplog.handler)
        package_logger.propagate = propagate
        package_logger.disabled = disabled
