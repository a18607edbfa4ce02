from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

__all__ = ("PageContext",)


def _props_factory() -> dict[str, Any]:
    return {}


@dataclass
class PageContext:
    """Explicit page declarations collected while a page template renders.

    One instance is created per render and handed to the template as a variable;
    the ``page()``, ``props()`` and ``inertia()`` template functions write to it and
    the renderer reads it back once rendering is done. Nothing is kept between
    requests.
    """

    component: "str | None" = None
    props: dict[str, Any] = field(default_factory=_props_factory)

    def declare_component(self, component: str) -> None:
        self.component = component

    def declare_props(self, props: "Mapping[str, Any] | None") -> None:
        if props:
            self.props.update(props)
