import itertools
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from litestar import Litestar, MediaType, Request, Response
from litestar.datastructures.cookie import Cookie
from litestar.exceptions import ImproperlyConfiguredException
from litestar.response.base import ASGIResponse
from litestar.serialization import get_serializer
from litestar.status_codes import HTTP_200_OK, HTTP_409_CONFLICT
from litestar.utils.empty import value_or_default
from litestar.utils.helpers import get_enum_string_value
from litestar.utils.scope.state import ScopeState

from inertia_pages.exceptions import TemplateNotFoundError
from inertia_pages.inertia._utils import get_headers
from inertia_pages.inertia.helpers import refresh_csrf_token
from inertia_pages.inertia.plugin import InertiaPlugin
from inertia_pages.inertia.request import InertiaDetails, InertiaRequest
from inertia_pages.inertia.types import InertiaHeaderType, PageProps
from inertia_pages.template_engine import PagesTemplateEngine, TemplateMode

if TYPE_CHECKING:
    from litestar.background_tasks import BackgroundTask, BackgroundTasks
    from litestar.connection.base import AuthT, StateT, UserT
    from litestar.types import ResponseCookies, ResponseHeaders, TypeEncodersMap

    from inertia_pages.config import InertiaConfig

__all__ = ("DEFAULT_ROOT_TEMPLATE", "InertiaExternalRedirect", "InertiaResponse", "get_root_template")

DEFAULT_ROOT_TEMPLATE = "base.html.j2"


def _is_inertia(request: "Request[Any, Any, Any]") -> bool:
    if isinstance(request, InertiaRequest):
        return request.is_inertia
    return bool(InertiaDetails(request))


def get_root_template(engine: "PagesTemplateEngine", config: "InertiaConfig") -> str:
    """Return the loader name of the full-load shell template.

    The site's ``root_template`` is looked up under ``inertia_directory`` first, then
    at the top of the site template roots. The bundled shell is used when the site
    has none.

    Raises:
        TemplateNotFoundError: If no shell template exists at all.

    Returns:
        The template name.
    """
    with engine.locator.site_mode():
        for name in dict.fromkeys((config.template_path(config.root_template), config.root_template)):
            if (resolved := engine.resolve_template(name)) is not None:
                return resolved.name
    with engine.locator.use_mode(TemplateMode.SYSTEM):
        resolved = engine.resolve_template(config.root_template) or engine.resolve_template(DEFAULT_ROOT_TEMPLATE)
    if resolved is None:
        raise TemplateNotFoundError(config.root_template)
    return resolved.name


class InertiaResponse(Response[PageProps]):
    """Inertia Response

    Sends the page object as JSON to Inertia visits and renders the full-load shell
    template with the page object as ``page`` otherwise.
    """

    def __init__(
        self,
        content: PageProps,
        *,
        template_name: "str | None" = None,
        background: "BackgroundTask | BackgroundTasks | None" = None,
        context: "dict[str, Any] | None" = None,
        cookies: "ResponseCookies | None" = None,
        encoding: "str" = "utf-8",
        headers: "ResponseHeaders | None" = None,
        media_type: "MediaType | str | None" = None,
        status_code: "int" = HTTP_200_OK,
        type_encoders: "TypeEncodersMap | None" = None,
    ) -> None:
        """Handle the rendering of a page object into a bytes string.

        Args:
            content: The page object.
            template_name: Loader name of the shell template. Defaults to the configured ``root_template``.
            background: A :class:`BackgroundTask <.background_tasks.BackgroundTask>` instance or
                :class:`BackgroundTasks <.background_tasks.BackgroundTasks>` to execute after the response is finished.
                Defaults to ``None``.
            context: Extra variables for the shell template.
            cookies: A list of :class:`Cookie <.datastructures.Cookie>` instances to be set under the response
                ``Set-Cookie`` header.
            encoding: Content encoding
            headers: A string keyed dictionary of response headers. Header keys are insensitive.
            media_type: A string or member of the :class:`MediaType <.enums.MediaType>` enum.
            status_code: A value for the response HTTP status code.
            type_encoders: A mapping of types to callables that transform them into types supported for serialization.
        """
        self.content = content
        self.background = background
        self.cookies: list[Cookie] = (
            [Cookie(key=key, value=value) for key, value in cookies.items()]
            if isinstance(cookies, Mapping)
            else list(cookies or [])
        )
        self.encoding = encoding
        self.headers: dict[str, Any] = (
            dict(headers) if isinstance(headers, Mapping) else {h.name: h.value for h in headers or {}}
        )
        self.media_type = media_type
        self.status_code = status_code
        self.response_type_encoders = {**(self.type_encoders or {}), **(type_encoders or {})}
        self.context = context or {}
        self.template_name = template_name

    def create_template_context(
        self,
        request: "Request[UserT, AuthT, StateT]",
        type_encoders: "TypeEncodersMap | None" = None,
    ) -> "dict[str, Any]":
        """Create a context object for the shell template.

        Args:
            request: A :class:`Request <.connection.Request>` instance.
            type_encoders: A mapping of types to callables that transform them into types supported for serialization.

        Returns:
            A dictionary holding the template context
        """
        csrf_token = value_or_default(ScopeState.from_scope(request.scope).csrf_token, "")
        page = self.render(self.content.to_dict(), MediaType.JSON, get_serializer(type_encoders)).decode()
        return {
            **self.context,
            "page": page,
            "request": request,
            "csrf_input": f'<input type="hidden" name="_csrf_token" value="{csrf_token}" />',
        }

    def _render_template(
        self,
        request: "Request[UserT, AuthT, StateT]",
        type_encoders: "TypeEncodersMap | None",
    ) -> bytes:
        """Render the shell template to bytes.

        Raises:
            ImproperlyConfiguredException: If the application does not use the pages template engine.

        Returns:
            The rendered template as bytes.
        """
        template_engine = request.app.template_engine
        if not isinstance(template_engine, PagesTemplateEngine):
            msg = "Inertia pages require the InertiaPlugin template engine."
            raise ImproperlyConfiguredException(msg)

        inertia_plugin = request.app.plugins.get(InertiaPlugin)
        template_name = self.template_name or get_root_template(template_engine, inertia_plugin.config)
        context = self.create_template_context(request, type_encoders)
        return template_engine.render_template(template_name, context).encode(self.encoding)

    def to_asgi_response(
        self,
        app: "Litestar | None",
        request: "Request[UserT, AuthT, StateT]",
        *,
        background: "BackgroundTask | BackgroundTasks | None" = None,
        cookies: "Iterable[Cookie] | None" = None,
        encoded_headers: "Iterable[tuple[bytes, bytes]] | None" = None,
        headers: "dict[str, str] | None" = None,
        is_head_response: "bool" = False,
        media_type: "MediaType | str | None" = None,
        status_code: "int | None" = None,
        type_encoders: "TypeEncodersMap | None" = None,
    ) -> "ASGIResponse":
        headers = {**headers, **self.headers} if headers is not None else dict(self.headers)
        headers["Vary"] = "Accept"
        response_cookies: "list[Cookie]" = list(itertools.chain(self.cookies, cookies or []))
        type_encoders = (
            {**type_encoders, **(self.response_type_encoders or {})} if type_encoders else self.response_type_encoders
        )

        if _is_inertia(request):
            headers.update(get_headers(InertiaHeaderType(enabled=True, version=self.content.version)))
            resolved_media_type = get_enum_string_value(self.media_type or media_type or MediaType.JSON)
            body = self.render(self.content.to_dict(), resolved_media_type, get_serializer(type_encoders))
        else:
            if (csrf_cookie := refresh_csrf_token(request)) is not None:
                response_cookies.append(csrf_cookie)
            resolved_media_type = get_enum_string_value(self.media_type or media_type or MediaType.HTML)
            body = self._render_template(request, type_encoders)

        return ASGIResponse(  # pyright: ignore[reportUnknownMemberType]
            background=self.background or background,
            body=body,
            cookies=response_cookies,
            encoded_headers=encoded_headers,
            encoding=self.encoding,
            headers=headers,
            is_head_response=is_head_response,
            media_type=resolved_media_type,
            status_code=self.status_code or status_code,
        )


class InertiaExternalRedirect(Response[Any]):
    """External redirect via Inertia protocol (409 + X-Inertia-Location).

    This response type triggers a client-side hard redirect in Inertia.js. It is
    used to make a client with stale assets reload the page it asked for.

    Note:
        Request cookies are intentionally NOT passed to the response to prevent
        cookie leakage in redirect responses.
    """

    def __init__(self, request: "Request[Any, Any, Any]", redirect_to: "str", **kwargs: "Any") -> None:
        """Initialize external redirect with 409 status and X-Inertia-Location header.

        Args:
            request: The request object.
            redirect_to: The absolute URL to redirect to.
            **kwargs: Additional keyword arguments passed to the Response constructor.
        """
        super().__init__(
            content=b"",
            status_code=HTTP_409_CONFLICT,
            headers=get_headers(InertiaHeaderType(location=redirect_to)),
            **kwargs,
        )
