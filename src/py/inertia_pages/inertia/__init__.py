from inertia_pages.config import InertiaConfig
from inertia_pages.inertia import helpers
from inertia_pages.inertia.context import PageContext
from inertia_pages.inertia.exception_handler import ErrorHandler, exception_to_http_response
from inertia_pages.inertia.helpers import mark_recent_save, pop_recent_save, refresh_csrf_token
from inertia_pages.inertia.middleware import InertiaMiddleware
from inertia_pages.inertia.plugin import InertiaPlugin
from inertia_pages.inertia.props import extract_props, merge_props, prop_marker, resolve_partial_props
from inertia_pages.inertia.renderer import PageRenderer
from inertia_pages.inertia.request import InertiaDetails, InertiaHeaders, InertiaRequest
from inertia_pages.inertia.resolver import PageResolver, extract_uri_parameters
from inertia_pages.inertia.response import InertiaExternalRedirect, InertiaResponse
from inertia_pages.inertia.routes import create_page_controller, inertia_route
from inertia_pages.inertia.types import PageProps, RenderedPage, ResolvedPage
from inertia_pages.inertia.versioning import get_inertia_version

__all__ = (
    "ErrorHandler",
    "InertiaConfig",
    "InertiaDetails",
    "InertiaExternalRedirect",
    "InertiaHeaders",
    "InertiaMiddleware",
    "InertiaPlugin",
    "InertiaRequest",
    "InertiaResponse",
    "PageContext",
    "PageProps",
    "PageRenderer",
    "PageResolver",
    "RenderedPage",
    "ResolvedPage",
    "create_page_controller",
    "exception_to_http_response",
    "extract_props",
    "extract_uri_parameters",
    "get_inertia_version",
    "helpers",
    "inertia_route",
    "mark_recent_save",
    "merge_props",
    "pop_recent_save",
    "prop_marker",
    "refresh_csrf_token",
    "resolve_partial_props",
)
