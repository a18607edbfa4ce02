"""Textual template inclusion.

Page templates may pull the raw source of another template into their own before
rendering::

    {% pull('components/_card') %}
    {% pull 'components/_card' %}
    {% inherit('layouts/_page') %}

Unlike ``{% include %}``, the pulled source shares the page template's top-level
scope, so ``{% set %}`` assignments and ``page()``/``props()`` calls in it count as
the page's own. Expansion is a single pass: directives inside pulled source are left
as they are.
"""

import re
from typing import TYPE_CHECKING

from inertia_pages.config import logger
from inertia_pages.exceptions import TemplateNotFoundError

if TYPE_CHECKING:
    from inertia_pages.template_engine import PagesTemplateEngine

__all__ = ("INCLUSION_RE", "expand_inclusions", "expand_source")

INCLUSION_RE = re.compile(r"\{%-?\s*(?:pull|inherit)\b\s*(?:\(\s*([^)]+?)\s*\)|([^%]+?))\s*-?%\}")


def _target(match: "re.Match[str]") -> str:
    raw = match.group(1) if match.group(1) else match.group(2)
    return raw.strip().strip("'\"")


def expand_source(engine: "PagesTemplateEngine", source: str) -> str:
    """Replace inclusion directives in ``source`` with the referenced sources.

    Targets are resolved in site mode. A target that does not resolve is replaced
    with an empty string and a warning is logged.

    Returns:
        The expanded source.
    """

    def _replace(match: "re.Match[str]") -> str:
        target = _target(match)
        resolved = engine.resolve_template(target)
        if resolved is None:
            logger.warning("Template not found for %r in %r, skipping.", target, match.group(0))
            return ""
        return engine.read_template(resolved)

    with engine.locator.site_mode():
        return INCLUSION_RE.sub(_replace, source)


def expand_inclusions(engine: "PagesTemplateEngine", template: str) -> str:
    """Return the source of ``template`` with its inclusion directives expanded.

    Args:
        engine: The template engine.
        template: Logical name of the page template.

    Raises:
        TemplateNotFoundError: If ``template`` itself does not resolve.

    Returns:
        The expanded source.
    """
    with engine.locator.site_mode():
        resolved = engine.resolve_template(template)
        if resolved is None:
            raise TemplateNotFoundError(template)
        return expand_source(engine, engine.read_template(resolved))
