"""URI to page template resolution."""

import re
from typing import TYPE_CHECKING, Any, cast

from inertia_pages.config import logger
from inertia_pages.exceptions import SiteSettingsNotFoundError, UriFormatMismatchError
from inertia_pages.inertia.types import ResolvedPage

if TYPE_CHECKING:
    from collections.abc import Mapping

    from inertia_pages.config import InertiaConfig
    from inertia_pages.content import ContentElement, SiteSettings
    from inertia_pages.template_engine import PagesTemplateEngine

__all__ = (
    "TEMPLATE_PARAM",
    "PageResolver",
    "compile_uri_format",
    "extract_uri_parameters",
    "flatten_variables",
)

TEMPLATE_PARAM = "inertia_template"
"""Route ``opt`` key naming the template of an Inertia-owned route."""

URI_PARAM_RE = re.compile(r"\{([^}]+)\}")


def compile_uri_format(uri_format: str) -> "tuple[re.Pattern[str], list[str]]":
    """Compile a URI format such as ``news/{year}/{slug}`` into an anchored pattern.

    Each ``{name}`` placeholder matches exactly one path segment.

    Returns:
        The pattern and the placeholder names, in order.
    """
    parts = URI_PARAM_RE.split(uri_format.strip("/"))
    names = parts[1::2]
    pattern = "".join(re.escape(part) if index % 2 == 0 else "([^/]+)" for index, part in enumerate(parts))
    return re.compile(f"^{pattern}$"), names


def extract_uri_parameters(uri: str, uri_format: str) -> "dict[str, str]":
    """Extract the placeholder values of ``uri_format`` from ``uri``.

    Args:
        uri: The concrete URI, e.g. ``news/2024/launch``.
        uri_format: The URI format, e.g. ``news/{year}/{slug}``.

    Raises:
        UriFormatMismatchError: If ``uri`` does not match the format.

    Returns:
        The placeholder values by name, e.g. ``{"year": "2024", "slug": "launch"}``.
    """
    pattern, names = compile_uri_format(uri_format)
    match = pattern.match(uri.strip("/"))
    if match is None or len(match.groups()) != len(names):
        raise UriFormatMismatchError(uri, uri_format)
    return dict(zip(names, match.groups()))


def flatten_variables(params: "Mapping[str, Any]") -> "dict[str, Any]":
    """Lift a nested ``variables`` mapping to the top level.

    Top-level keys win over keys of the nested mapping.

    Returns:
        The flattened parameters.
    """
    flattened = dict(params)
    variables = flattened.get("variables")
    if isinstance(variables, dict):
        del flattened["variables"]
        return {**cast("dict[str, Any]", variables), **flattened}
    return flattened


class PageResolver:
    """Decide which template answers a URI.

    Resolution order, first match wins:

    1. a content element whose URI is the requested one; its owner's settings for
       the active site name the template and the URI format parameters are extracted,
    2. the template of an Inertia-owned route (``inertia_route()``), when it exists,
    3. a template named after the URI, under ``inertia_directory`` when configured,
    4. an entry of ``legacy_routes`` whose URI format matches the URI.
    """

    def __init__(self, config: "InertiaConfig", engine: "PagesTemplateEngine") -> None:
        self.config = config
        self.engine = engine

    def resolve(
        self,
        uri: str,
        *,
        site_id: "int | str | None" = None,
        route_params: "Mapping[str, Any] | None" = None,
        request_params: "Mapping[str, Any] | None" = None,
        explicit_template: "str | None" = None,
    ) -> ResolvedPage:
        """Resolve a URI.

        Args:
            uri: The site URI, without the leading slash.
            site_id: The active site. Defaults to the configured site.
            route_params: Path parameters and route variables.
            request_params: Query and body parameters, used by Inertia-owned routes.
            explicit_template: Template declared by an Inertia-owned route.

        Raises:
            SiteSettingsNotFoundError: If the matched element's owner has no settings
                for the active site.

        Returns:
            The resolution outcome.
        """
        uri = uri.strip("/")
        site_id = self.config.site_id if site_id is None else site_id
        variables = flatten_variables(route_params or {})

        with self.engine.locator.site_mode():
            element = self._get_element(uri, site_id)
            if element is not None:
                return self._resolve_element(element, uri, site_id, variables)

            if explicit_template and self.engine.template_exists(explicit_template):
                params = {k: v for k, v in (request_params or {}).items() if k != TEMPLATE_PARAM}
                return ResolvedPage(matched=True, template=explicit_template, variables={**variables, **params})

            template = self.config.template_path(uri)
            if self.engine.template_exists(template):
                return ResolvedPage(matched=True, template=template, variables=variables)

            for uri_format, legacy_template in self.config.legacy_routes.items():
                try:
                    params = extract_uri_parameters(uri, uri_format)
                except UriFormatMismatchError:
                    continue
                if self.engine.template_exists(legacy_template):
                    return ResolvedPage(matched=True, template=legacy_template, variables={**variables, **params})
                logger.warning("Legacy route %r matched but template %r does not exist.", uri_format, legacy_template)

        return ResolvedPage(matched=False, variables=variables)

    def _get_element(self, uri: str, site_id: "int | str") -> "ContentElement | None":
        if self.config.content_repository is None:
            return None
        return self.config.content_repository.get_element_by_uri(uri, site_id)

    def _resolve_element(
        self,
        element: "ContentElement",
        uri: str,
        site_id: "int | str",
        variables: "dict[str, Any]",
    ) -> ResolvedPage:
        owner = element.get_owner()
        settings: "SiteSettings | None" = next(
            (s for s in owner.get_site_settings() if s.site_id == site_id),
            None,
        )
        if settings is None:
            raise SiteSettingsNotFoundError(site_id, owner.handle)

        params = extract_uri_parameters(uri, settings.uri_format)
        matched = self.engine.template_exists(settings.template)
        return ResolvedPage(
            matched=matched,
            template=settings.template,
            variables={**variables, **params, element.prop_key: element},
            element=element,
        )
