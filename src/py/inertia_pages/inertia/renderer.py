"""Page rendering and response composition.

A page request runs through :class:`PageRenderer` in two steps:

1. :meth:`PageRenderer.handle_matched_template` expands inclusion directives, renders
   the page template with a fresh :class:`PageContext` and reads the component and
   props the template declared,
2. :meth:`PageRenderer.compose` merges every prop source, applies partial reload
   filtering and returns an :class:`InertiaResponse`.

Props are merged from lowest to highest priority: template variables, the one-shot
``recentElementSave`` session value, shared props, captured ``{% set %}`` variables
(when ``auto_capture_variables`` is enabled), then the props the page declared.
"""

from typing import TYPE_CHECKING, Any, cast

from litestar.exceptions import SerializationException
from litestar.serialization import decode_json
from litestar.status_codes import HTTP_200_OK

from inertia_pages.config import logger
from inertia_pages.inertia.context import PageContext
from inertia_pages.inertia.helpers import RECENT_SAVE_KEY, get_recent_save, pop_recent_save
from inertia_pages.inertia.preprocess import expand_inclusions
from inertia_pages.inertia.props import extract_props, merge_props, resolve_partial_props
from inertia_pages.inertia.request import InertiaDetails, InertiaRequest
from inertia_pages.inertia.response import InertiaResponse
from inertia_pages.inertia.types import PageProps, RenderedPage
from inertia_pages.inertia.versioning import get_request_version

if TYPE_CHECKING:
    from collections.abc import Mapping

    from litestar import Request

    from inertia_pages.config import InertiaConfig
    from inertia_pages.content import ContentElement
    from inertia_pages.inertia.types import ResolvedPage
    from inertia_pages.template_engine import PagesTemplateEngine

__all__ = ("PageRenderer", "get_relative_url")


def get_relative_url(request: "Request[Any, Any, Any]") -> str:
    """Return the relative URL including query string for Inertia page props.

    The Inertia.js protocol requires the ``url`` property to include query parameters
    so that page state (e.g., filters, pagination) is preserved on refresh.

    Args:
        request: The request object.

    Returns:
        The path with query string if present, e.g., ``/reports?page=1&status=active``.
    """
    path = request.url.path
    query = request.url.query
    return f"{path}?{query}" if query else path


class PageRenderer:
    """Render page templates into Inertia responses."""

    def __init__(self, config: "InertiaConfig", engine: "PagesTemplateEngine") -> None:
        self.config = config
        self.engine = engine

    def default_component(self, uri: str) -> str:
        return uri.strip("/") or self.config.default_component

    def handle_matched_template(
        self,
        template: str,
        uri: str,
        variables: "Mapping[str, Any] | None" = None,
        element: "ContentElement | None" = None,
    ) -> RenderedPage:
        """Render a page template and read back what it declared.

        The component comes from ``page()`` and the props from ``prop()`` markers. When
        the template declares no component, its whole output is read as a JSON page
        object (``{"component": ..., "props": ...}``) and markers are ignored; when that
        fails too, the component is the URI, or ``default_component`` for the empty URI,
        and the page has no props. ``props()`` declarations always apply.

        Args:
            template: Logical name of the page template.
            uri: The requested URI.
            variables: Template variables.
            element: An element being edited. It is exposed to the template under its
                ``prop_key`` (``entry`` or ``category``), e.g. to display validation errors.

        Returns:
            The rendered page.
        """
        context: "dict[str, Any]" = dict(variables or {})
        if element is not None:
            context[element.prop_key] = element
        page_context = PageContext()
        context[self.config.share_key] = page_context

        source = expand_inclusions(self.engine, template)
        rendered = self.engine.render_source(source, context)

        component = page_context.component
        if component is None:
            component, props = self._decode_output(rendered.output, uri)
        else:
            props = extract_props(rendered.output)

        return RenderedPage(
            component=component,
            props=merge_props(props, page_context.props),
            captured=rendered.captured,
        )

    def _decode_output(self, output: str, uri: str) -> "tuple[str, dict[str, Any]]":
        default = self.default_component(uri)
        try:
            decoded = decode_json(output.strip() or "null")
        except SerializationException as exc:
            logger.warning("JSON decoding of %r failed: %s. Using component %r.", uri, exc, default)
            return default, {}
        if not isinstance(decoded, dict):
            logger.warning("Output of %r is not a page object. Using component %r.", uri, default)
            return default, {}

        page = cast("dict[str, Any]", decoded)
        json_props = page.get("props")
        return (
            page.get("component") or default,
            dict(cast("dict[str, Any]", json_props)) if isinstance(json_props, dict) else {},
        )

    def get_shared_props(self) -> "dict[str, Any]":
        """Render every template of the shared directory and collect their props.

        Templates are rendered in file name order; the first declaration of a key wins.

        Returns:
            The shared props.
        """
        shared: "dict[str, Any]" = {}
        with self.engine.locator.site_mode():
            templates = self.engine.locator.list_directory(self.config.shared_path, self.config.shared_extensions)
        for template in templates:
            output = self.engine.render_template(template.name, {self.config.share_key: PageContext()})
            shared = extract_props(output, shared)
        return shared

    def compose(
        self,
        request: "Request[Any, Any, Any]",
        page: RenderedPage,
        variables: "Mapping[str, Any] | None" = None,
        element: "ContentElement | None" = None,
        status_code: int = HTTP_200_OK,
    ) -> InertiaResponse:
        """Build the response for a rendered page.

        Args:
            request: The request being answered.
            page: The rendered page.
            variables: The template variables.
            element: The matched element. Its variable is only sent to the client when
                ``inject_element_as_prop`` is enabled.
            status_code: The response status.

        Returns:
            The response.
        """
        route_variables = dict(variables or {})
        if element is not None and not self.config.inject_element_as_prop:
            if route_variables.get(element.prop_key) is element:
                del route_variables[element.prop_key]

        recent_save = get_recent_save(request)
        props = merge_props(
            route_variables,
            recent_save,
            self.get_shared_props(),
            page.captured if self.config.auto_capture_variables else None,
            page.props,
        )
        inertia_details = request.inertia if isinstance(request, InertiaRequest) else InertiaDetails(request)
        props = resolve_partial_props(
            props,
            page.component,
            inertia_details.partial_component,
            only=inertia_details.partial_keys,
            exclude=inertia_details.partial_except_keys,
        )
        # the one-shot value is only consumed by a response that carries it
        if recent_save and RECENT_SAVE_KEY in props:
            pop_recent_save(request)
        return InertiaResponse(
            content=PageProps(
                component=page.component,
                props=props,
                url=get_relative_url(request),
                version=get_request_version(request, self.config),
            ),
            status_code=status_code,
        )

    def render(
        self,
        request: "Request[Any, Any, Any]",
        resolved: "ResolvedPage",
        uri: str,
        status_code: int = HTTP_200_OK,
    ) -> InertiaResponse:
        """Render a resolved page into a response.

        Returns:
            The response.
        """
        if resolved.template is None:
            msg = f"No template resolved for {uri!r}."
            raise ValueError(msg)
        page = self.handle_matched_template(resolved.template, uri, resolved.variables)
        return self.compose(request, page, resolved.variables, resolved.element, status_code=status_code)
