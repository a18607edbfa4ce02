from typing import TYPE_CHECKING, Any

from litestar.datastructures.cookie import Cookie
from litestar.exceptions import ImproperlyConfiguredException
from litestar.middleware.csrf import generate_csrf_token
from litestar.utils.scope.state import ScopeState

if TYPE_CHECKING:
    from litestar import Request
    from litestar.connection import ASGIConnection

__all__ = ("RECENT_SAVE_KEY", "get_recent_save", "mark_recent_save", "pop_recent_save", "refresh_csrf_token")

RECENT_SAVE_KEY = "recentElementSave"


def mark_recent_save(
    connection: "ASGIConnection[Any, Any, Any, Any]",
    element_id: "int | str",
) -> "None":
    """Remember a just-saved element for the next page response.

    The id is sent as the ``recentElementSave`` prop of exactly one response, then
    cleared.

    Args:
        connection: The ASGI connection.
        element_id: The id of the saved element.
    """
    try:
        connection.session[RECENT_SAVE_KEY] = element_id
    except (AttributeError, ImproperlyConfiguredException):
        msg = "Unable to set `recentElementSave` session state.  A valid session was not found for this request."
        connection.logger.warning(msg)


def get_recent_save(connection: "ASGIConnection[Any, Any, Any, Any]") -> "dict[str, Any]":
    """Read the one-shot ``recentElementSave`` value without clearing it.

    Returns:
        ``{"recentElementSave": id}`` when a value is stored, otherwise an empty dict.
    """
    try:
        session = connection.session
    except (AttributeError, ImproperlyConfiguredException):
        return {}
    if RECENT_SAVE_KEY not in session:
        return {}
    return {RECENT_SAVE_KEY: session[RECENT_SAVE_KEY]}


def pop_recent_save(connection: "ASGIConnection[Any, Any, Any, Any]") -> "dict[str, Any]":
    """Read and clear the one-shot ``recentElementSave`` value.

    Args:
        connection: The ASGI connection.

    Returns:
        ``{"recentElementSave": id}`` when a value was stored, otherwise an empty dict.
    """
    try:
        session = connection.session
    except (AttributeError, ImproperlyConfiguredException):
        return {}
    if RECENT_SAVE_KEY not in session:
        return {}
    return {RECENT_SAVE_KEY: session.pop(RECENT_SAVE_KEY)}


def refresh_csrf_token(request: "Request[Any, Any, Any]") -> "Cookie | None":
    """Issue a fresh CSRF token for a full page load.

    Litestar's CSRF middleware only issues a token when the request carries no CSRF
    cookie. On full loads the token is rotated here so the client router starts from
    a fresh one.

    Args:
        request: The request being answered with the HTML shell.

    Returns:
        The cookie carrying the new token, or None when CSRF protection is not
        configured or the CSRF middleware issues a token itself.
    """
    csrf_config = request.app.csrf_config
    if csrf_config is None or csrf_config.cookie_name not in request.cookies:
        return None
    token = generate_csrf_token(secret=csrf_config.secret)
    ScopeState.from_scope(request.scope).csrf_token = token
    return Cookie(
        key=csrf_config.cookie_name,
        value=token,
        path=csrf_config.cookie_path,
        domain=csrf_config.cookie_domain,
        secure=csrf_config.cookie_secure,
        httponly=csrf_config.cookie_httponly,
        samesite=csrf_config.cookie_samesite,
    )
