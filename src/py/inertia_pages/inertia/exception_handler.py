from typing import TYPE_CHECKING, Any, cast

from anyio import to_thread
from jinja2 import TemplateError
from litestar.exceptions import HTTPException, NotFoundException
from litestar.exceptions.responses import create_exception_response  # pyright: ignore[reportUnknownVariableType]
from litestar.response import Response
from litestar.status_codes import HTTP_404_NOT_FOUND, HTTP_500_INTERNAL_SERVER_ERROR

from inertia_pages.config import logger
from inertia_pages.inertia.plugin import InertiaPlugin
from inertia_pages.inertia.resolver import flatten_variables
from inertia_pages.inertia.types import ResolvedPage

if TYPE_CHECKING:
    from collections.abc import Callable

    from litestar import Litestar
    from litestar.connection import Request
    from litestar.connection.base import AuthT, StateT, UserT
    from litestar.types import ASGIApp, Receive, Scope, Send

    from inertia_pages.config import InertiaConfig
    from inertia_pages.inertia.renderer import PageRenderer
    from inertia_pages.inertia.response import InertiaResponse

__all__ = ("ErrorHandler", "ErrorPageResponse", "exception_to_http_response", "get_template_lineno")

TEMPLATE_FILENAME = "<template>"


def get_template_lineno(exc: BaseException) -> "int | None":
    """Return the template line an exception was raised from, when known.

    Syntax errors carry the line themselves; for runtime errors the line is read from
    the template frames Jinja adds to the traceback.

    Returns:
        The line number, or None.
    """
    if (lineno := getattr(exc, "lineno", None)) is not None:
        return cast("int", lineno)
    lineno = None
    tb = exc.__traceback__
    while tb is not None:
        if tb.tb_frame.f_code.co_filename == TEMPLATE_FILENAME:
            lineno = tb.tb_lineno
        tb = tb.tb_next
    return lineno


class ErrorHandler:
    """Turn page errors into error pages.

    Error pages are ordinary page templates. For a status code ``404`` the templates
    ``{prefix}404``, ``{prefix}error`` and ``404`` are tried in that order, where
    ``prefix`` is ``error_template_prefix``.
    """

    def __init__(self, config: "InertiaConfig", renderer: "PageRenderer") -> None:
        self.config = config
        self.renderer = renderer

    def find_error_template(self, status_code: int) -> "str | None":
        """Return the page template for a status code.

        Returns:
            The logical template name, or None when the site has no error template.
        """
        prefix = self.config.error_template_prefix
        candidates = (f"{prefix}{status_code}", f"{prefix}error", str(status_code))
        with self.renderer.engine.locator.site_mode():
            for candidate in dict.fromkeys(candidates):
                template = self.config.template_path(candidate)
                if self.renderer.engine.template_exists(template):
                    return template
        return None

    def render_error(
        self,
        request: "Request[Any, Any, Any]",
        status_code: int,
        detail: "str | None" = None,
    ) -> "InertiaResponse":
        """Render the error template for a status code at that status.

        Args:
            request: The failed request.
            status_code: The HTTP status.
            detail: Optional message exposed to the template as ``message``.

        Raises:
            NotFoundException: If the status is 404 and there is no error template.
            HTTPException: For other statuses without an error template.

        Returns:
            The error page response.
        """
        template = self.find_error_template(status_code)
        if template is None:
            if status_code == HTTP_404_NOT_FOUND:
                raise NotFoundException(detail=detail or "")
            raise HTTPException(status_code=status_code, detail=detail or "")

        variables = flatten_variables(request.scope.get("path_params") or {})
        variables.setdefault("status_code", status_code)
        if detail:
            variables.setdefault("message", detail)
        resolved = ResolvedPage(matched=True, template=template, variables=variables)
        return self.renderer.render(request, resolved, template, status_code=status_code)

    def handle_error(
        self,
        request: "Request[Any, Any, Any]",
        exc: Exception,
        template: "str | None" = None,
    ) -> "InertiaResponse":
        """Handle an exception raised while rendering a page.

        An exception carrying an HTTP ``status_code`` is answered with the matching
        error page unless the application runs in debug mode. Anything else is logged
        and raised again for the application's exception handlers.

        Args:
            request: The failed request.
            exc: The exception.
            template: The page template that was rendering.

        Raises:
            Exception: ``exc`` itself, when it is not answered with an error page.

        Returns:
            The error page response.
        """
        status_code = getattr(exc, "status_code", None)
        if isinstance(status_code, int) and status_code:
            if not request.app.debug:
                return self.render_error(request, status_code, getattr(exc, "detail", None))
            raise exc

        if isinstance(exc, TemplateError):
            logger.error(
                "Template rendering failed: %s in %s on line %s",
                exc.message or exc,
                template or "unknown template",
                get_template_lineno(exc) or "?",
            )
        else:
            logger.error("Error processing Inertia template %s: %s", template or "unknown template", exc)
        raise exc


class ErrorPageResponse(Response[Any]):
    """A response whose error page is rendered in a worker thread when it is sent.

    Exception handlers run synchronously on the event loop, so the template work is
    deferred to :meth:`to_asgi_response`.
    """

    def __init__(self, render_page: "Callable[[], Response[Any]]") -> None:
        super().__init__(content=None)
        self.render_page = render_page

    def to_asgi_response(  # type: ignore[override]
        self, app: "Litestar | None", request: "Request[Any, Any, Any]", **kwargs: Any
    ) -> "ASGIApp":
        async def send_error_page(scope: "Scope", receive: "Receive", send: "Send") -> None:
            response = await to_thread.run_sync(self.render_page)
            await response.to_asgi_response(app, request, **kwargs)(scope, receive, send)

        return send_error_page


def exception_to_http_response(request: "Request[UserT, AuthT, StateT]", exc: "Exception") -> "Response[Any]":
    """Handler for all exceptions subclassed from HTTPException.

    The site's error template for the status is rendered when one exists. Otherwise,
    and for server errors in debug mode, Litestar's standard exception response is
    returned.

    Args:
        request: The request object.
        exc: The exception to handle.

    Returns:
        The response object.
    """
    status_code = exc.status_code if isinstance(exc, HTTPException) else HTTP_500_INTERNAL_SERVER_ERROR
    try:
        inertia_plugin: "InertiaPlugin | None" = request.app.plugins.get(InertiaPlugin)
    except KeyError:
        inertia_plugin = None

    if inertia_plugin is None or (request.app.debug and status_code >= HTTP_500_INTERNAL_SERVER_ERROR):
        return cast("Response[Any]", create_exception_response(request, exc))

    error_handler = inertia_plugin.error_handler
    detail = exc.detail if isinstance(exc, HTTPException) else str(exc)

    def render_error_page() -> "Response[Any]":
        if error_handler.find_error_template(status_code) is None:
            return cast("Response[Any]", create_exception_response(request, exc))
        try:
            return error_handler.render_error(request, status_code, detail)
        except Exception:  # noqa: BLE001
            logger.exception("Unable to render the error template for status %s.", status_code)
            return cast("Response[Any]", create_exception_response(request, exc))

    return ErrorPageResponse(render_error_page)
