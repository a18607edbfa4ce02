"""Inertia protocol types.

This module defines the Python-side data structures for the page object sent to the
client and for the intermediate results of the page pipeline.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypedDict

if TYPE_CHECKING:
    from inertia_pages.content import ContentElement

__all__ = (
    "InertiaHeaderType",
    "PageProps",
    "RenderedPage",
    "ResolvedPage",
)


def _empty_variables_factory() -> "dict[str, Any]":
    return {}


@dataclass(frozen=True)
class PageProps:
    """Inertia page object.

    See: https://inertiajs.com/the-protocol#the-page-object

    Attributes:
        component: Client-side component name. Never empty once composed.
        props: The (already filtered) props sent to the component.
        url: The relative page URL, including the query string.
        version: The asset version token.
    """

    component: str
    props: "dict[str, Any]"
    url: str
    version: str

    def to_dict(self) -> "dict[str, Any]":
        """Return the page object in wire format.

        Returns:
            A dictionary with ``component``, ``props``, ``url`` and ``version``.
        """
        return {
            "component": self.component,
            "props": self.props,
            "url": self.url,
            "version": self.version,
        }


class InertiaHeaderType(TypedDict, total=False):
    """Type for inertia_headers parameter in get_headers()."""

    enabled: "bool | None"
    version: "str | None"
    location: "str | None"


@dataclass(frozen=True)
class ResolvedPage:
    """Outcome of URI resolution.

    Attributes:
        matched: Whether a template answers the URI.
        template: Logical template name, relative to the template roots.
        variables: Base variables handed to the template (route params, element, query/body params).
        element: The content element matched by URI, if any.
    """

    matched: bool
    template: "str | None" = None
    variables: "dict[str, Any]" = field(default_factory=_empty_variables_factory)
    element: "ContentElement | None" = None


@dataclass
class RenderedPage:
    """A page template after rendering and prop extraction.

    Attributes:
        component: Component name declared by the template or derived from the URI.
        props: Props from markers, a JSON body and explicit declarations, lowest to highest priority.
        captured: Top-level ``{% set %}`` assignments of the template.
    """

    component: str
    props: "dict[str, Any]" = field(default_factory=_empty_variables_factory)
    captured: "dict[str, Any]" = field(default_factory=_empty_variables_factory)
