"""Content element interfaces consumed by the page resolver.

Elements (entries and categories) belong to an owner (a section or a category
group). The owner carries per-site settings: the template that renders the
element and the URI format its URIs are generated from. Applications plug their
own content store in by implementing :class:`ContentRepository`; the dataclasses
below are a small in-memory implementation.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, Protocol, runtime_checkable

__all__ = (
    "Category",
    "CategoryGroup",
    "ContentElement",
    "ContentRepository",
    "ElementOwner",
    "Entry",
    "InMemoryContentRepository",
    "Section",
    "SiteSettings",
)


@dataclass(frozen=True)
class SiteSettings:
    """Per-site settings of a section or category group."""

    site_id: "int | str"
    template: str
    uri_format: str


@runtime_checkable
class ElementOwner(Protocol):
    """A section or category group."""

    handle: str

    def get_site_settings(self) -> "Sequence[SiteSettings]": ...


@runtime_checkable
class ContentElement(Protocol):
    """An element that can be routed to by URI."""

    id: "int | str"
    prop_key: ClassVar[str]
    """Template variable the element is exposed under (``entry`` or ``category``)."""

    def get_owner(self) -> "ElementOwner": ...


@runtime_checkable
class ContentRepository(Protocol):
    """Element lookup by URI."""

    def get_element_by_uri(self, uri: str, site_id: "int | str") -> "ContentElement | None": ...


def _site_settings_factory() -> list[SiteSettings]:
    return []


def _fields_factory() -> dict[str, Any]:
    return {}


@dataclass
class Section:
    handle: str
    site_settings: list[SiteSettings] = field(default_factory=_site_settings_factory)

    def get_site_settings(self) -> "Sequence[SiteSettings]":
        return self.site_settings


@dataclass
class CategoryGroup:
    handle: str
    site_settings: list[SiteSettings] = field(default_factory=_site_settings_factory)

    def get_site_settings(self) -> "Sequence[SiteSettings]":
        return self.site_settings


@dataclass
class Entry:
    """An entry of a section."""

    prop_key: ClassVar[str] = "entry"

    id: "int | str"
    section: Section
    uri: str
    title: str = ""
    fields: dict[str, Any] = field(default_factory=_fields_factory)

    def get_owner(self) -> Section:
        return self.section


@dataclass
class Category:
    """A category of a category group."""

    prop_key: ClassVar[str] = "category"

    id: "int | str"
    group: CategoryGroup
    uri: str
    title: str = ""
    fields: dict[str, Any] = field(default_factory=_fields_factory)

    def get_owner(self) -> CategoryGroup:
        return self.group


class InMemoryContentRepository:
    """Content repository backed by a list of elements.

    Elements are matched on their ``uri`` attribute for every site.
    """

    def __init__(self, elements: "Sequence[Entry | Category] | None" = None) -> None:
        self._elements: list[Entry | Category] = list(elements or [])

    def add(self, element: "Entry | Category") -> None:
        self._elements.append(element)

    def get_element_by_uri(self, uri: str, site_id: "int | str") -> "Entry | Category | None":
        uri = uri.strip("/")
        for element in self._elements:
            if element.uri.strip("/") == uri:
                return element
        return None
