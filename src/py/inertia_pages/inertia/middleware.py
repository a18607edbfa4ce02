from typing import TYPE_CHECKING, Any

from anyio import to_thread
from litestar.datastructures.headers import MutableScopeHeaders
from litestar.enums import ScopeType
from litestar.middleware import AbstractMiddleware
from litestar.status_codes import HTTP_302_FOUND, HTTP_303_SEE_OTHER

from inertia_pages.inertia._utils import InertiaHeaders, get_enabled_header
from inertia_pages.inertia.plugin import InertiaPlugin
from inertia_pages.inertia.request import InertiaRequest
from inertia_pages.inertia.response import InertiaExternalRedirect
from inertia_pages.inertia.versioning import get_request_version

if TYPE_CHECKING:
    from litestar.types import ASGIApp, Message, Receive, Scope, Send

    from inertia_pages.config import InertiaConfig

__all__ = ("InertiaMiddleware", "redirect_on_asset_version_mismatch")

SEE_OTHER_METHODS = frozenset({"PUT", "PATCH", "DELETE"})


async def redirect_on_asset_version_mismatch(
    request: "InertiaRequest[Any, Any, Any]", config: "InertiaConfig"
) -> "InertiaExternalRedirect | None":
    """Return redirect response when client and server asset versions differ.

    Only ``GET`` visits are checked; the client then performs a full visit of the
    same URL. The asset directories are hashed in a worker thread.

    Returns:
        An InertiaExternalRedirect when versions differ, otherwise None.
    """
    if not request.is_inertia or request.method != "GET":
        return None

    inertia_version = request.inertia_version
    if inertia_version is None:
        return None

    if inertia_version == await to_thread.run_sync(get_request_version, request, config):
        return None

    return InertiaExternalRedirect(request, redirect_to=str(request.url))


class InertiaMiddleware(AbstractMiddleware):
    """Middleware for handling Inertia.js protocol requirements.

    This middleware:
    1. Answers stale ``GET`` visits with 409 Conflict and an X-Inertia-Location header
    2. Marks successful responses to Inertia requests with ``X-Inertia: true``
    3. Rewrites 302 redirects of PUT/PATCH/DELETE Inertia requests to 303
    4. Moves an ``X-Redirect`` response header to ``Location``
    """

    scopes = {ScopeType.HTTP}

    def __init__(self, app: "ASGIApp") -> None:
        super().__init__(app)
        self.app = app

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        request: InertiaRequest[Any, Any, Any] = InertiaRequest(scope=scope)
        inertia_plugin = request.app.plugins.get(InertiaPlugin)
        redirect = await redirect_on_asset_version_mismatch(request, inertia_plugin.config)
        if redirect is not None:
            response = redirect.to_asgi_response(app=None, request=request)  # pyright: ignore[reportUnknownMemberType]
            await response(scope, receive, send)
        else:
            await self.app(scope, receive, self.create_send_wrapper(request, send))

    @staticmethod
    def create_send_wrapper(request: "InertiaRequest[Any, Any, Any]", send: "Send") -> "Send":
        is_inertia = request.is_inertia
        method = request.method

        async def wrapped_send(message: "Message") -> None:
            if message["type"] == "http.response.start":
                headers = MutableScopeHeaders.from_message(message)
                if redirect_to := headers.get(InertiaHeaders.REDIRECT.value):
                    headers["Location"] = redirect_to
                    del headers[InertiaHeaders.REDIRECT.value]
                if is_inertia:
                    status = message["status"]
                    if 200 <= status < 300:  # noqa: PLR2004
                        headers.update(get_enabled_header())
                    elif status == HTTP_302_FOUND and method in SEE_OTHER_METHODS:
                        message["status"] = HTTP_303_SEE_OTHER
            await send(message)

        return wrapped_send
