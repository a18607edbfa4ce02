"""Page routes.

With ``takeover_routing`` enabled the plugin registers a catch-all controller, so
every site URI not claimed by another route is answered by a page template. Single
routes can be handed to a template explicitly with :func:`inertia_route`::

    app = Litestar(
        route_handlers=[inertia_route("/blog/{year:int}/{slug:str}", template="blog/_post")],
        plugins=[InertiaPlugin(InertiaConfig(takeover_routing=False))],
        middleware=[ServerSideSessionConfig().middleware],
    )
"""

from collections.abc import Mapping
from functools import partial
from typing import TYPE_CHECKING, Any, cast

from anyio import to_thread
from litestar import Controller, HttpMethod, Request, Response, route
from litestar.status_codes import HTTP_200_OK, HTTP_404_NOT_FOUND

from inertia_pages.inertia.plugin import InertiaPlugin
from inertia_pages.inertia.resolver import TEMPLATE_PARAM

if TYPE_CHECKING:
    from collections.abc import Sequence

    from litestar.handlers import HTTPRouteHandler

__all__ = ("PAGE_METHODS", "create_page_controller", "inertia_route", "render_page_request")

PAGE_METHODS = (HttpMethod.GET, HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH, HttpMethod.DELETE)
FORM_CONTENT_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})


def render_page_request(
    inertia_plugin: "InertiaPlugin",
    request: "Request[Any, Any, Any]",
    uri: str,
    *,
    route_params: "Mapping[str, Any] | None" = None,
    request_params: "Mapping[str, Any] | None" = None,
    explicit_template: "str | None" = None,
) -> "Response[Any]":
    """Resolve, render and compose a page.

    Unresolved URIs are answered with the 404 error page. Rendering errors go through
    the plugin's :class:`ErrorHandler <inertia_pages.inertia.exception_handler.ErrorHandler>`.

    Returns:
        The page response.
    """
    resolved = inertia_plugin.resolver.resolve(
        uri,
        site_id=inertia_plugin.config.get_site_id(request),
        route_params=route_params,
        request_params=request_params,
        explicit_template=explicit_template,
    )
    if not resolved.matched:
        return inertia_plugin.error_handler.render_error(request, HTTP_404_NOT_FOUND)
    try:
        return inertia_plugin.renderer.render(request, resolved, uri)
    except Exception as exc:  # noqa: BLE001
        return inertia_plugin.error_handler.handle_error(request, exc, resolved.template)


async def _get_request_params(request: "Request[Any, Any, Any]") -> "dict[str, Any]":
    params: "dict[str, Any]" = dict(request.query_params.items())
    if request.method == HttpMethod.GET:
        return params
    content_type, _ = request.content_type
    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        params.update(form.items())
    elif content_type == "application/json":
        body = await request.json()
        if isinstance(body, dict):
            params.update(cast("dict[str, Any]", body))
    return params


def _get_route_params(request: "Request[Any, Any, Any]") -> "dict[str, Any]":
    route_params: "dict[str, Any]" = dict(request.path_params)
    route_params.pop("path", None)
    variables = request.route_handler.opt.get("variables")
    if isinstance(variables, Mapping):
        route_params["variables"] = dict(cast("Mapping[str, Any]", variables))
    return route_params


async def handle_page_request(request: "Request[Any, Any, Any]") -> "Response[Any]":
    """Answer a request with the page its URI resolves to.

    Returns:
        The page response.
    """
    inertia_plugin = request.app.plugins.get(InertiaPlugin)
    render = partial(
        render_page_request,
        inertia_plugin,
        request,
        request.url.path.strip("/"),
        route_params=_get_route_params(request),
        request_params=await _get_request_params(request),
        explicit_template=request.route_handler.opt.get(TEMPLATE_PARAM),
    )
    return await to_thread.run_sync(render)


def create_page_controller(mount_path: str = "/") -> "type[Controller]":
    """Create the catch-all page controller.

    Args:
        mount_path: The path the controller is mounted on.

    Returns:
        A Litestar Controller answering every URI below ``mount_path``.
    """

    class PageController(Controller):
        """Serve site URIs from page templates."""

        path = mount_path
        include_in_schema = False

        @route(
            path=["/", "/{path:path}"],
            http_method=list(PAGE_METHODS),
            name="inertia_pages",
            status_code=HTTP_200_OK,
        )
        async def page(self, request: "Request[Any, Any, Any]") -> "Response[Any]":
            return await handle_page_request(request)

    return PageController


def inertia_route(
    path: "str | Sequence[str]",
    template: str,
    *,
    http_method: "Sequence[HttpMethod | str]" = (HttpMethod.GET,),
    name: "str | None" = None,
    variables: "Mapping[str, Any] | None" = None,
    **kwargs: Any,
) -> "HTTPRouteHandler":
    """Declare a route answered by a page template.

    Query and body parameters of the request are passed to the template as variables,
    along with the route's path parameters and ``variables``.

    Args:
        path: The route path(s).
        template: Logical name of the page template.
        http_method: Methods the route accepts.
        name: Optional route name.
        variables: Extra template variables. Path parameters win on conflicts.
        **kwargs: Additional keyword arguments passed to :func:`litestar.route`.

    Returns:
        The route handler.
    """
    opt: "dict[str, Any]" = {**kwargs.pop("opt", {}), TEMPLATE_PARAM: template}
    if variables:
        opt["variables"] = dict(variables)

    async def inertia_page(request: "Request[Any, Any, Any]") -> "Response[Any]":
        return await handle_page_request(request)

    return route(
        path=list(path) if not isinstance(path, str) else path,
        http_method=list(http_method),
        name=name,
        opt=opt,
        include_in_schema=kwargs.pop("include_in_schema", False),
        status_code=kwargs.pop("status_code", HTTP_200_OK),
        **kwargs,
    )(inertia_page)
