from functools import cached_property
from typing import TYPE_CHECKING
from urllib.parse import unquote

from litestar import Request
from litestar.connection.base import AuthT, StateT, UserT, empty_receive, empty_send

from inertia_pages.inertia._utils import InertiaHeaders

if TYPE_CHECKING:
    from litestar.types import Receive, Scope, Send

__all__ = ("InertiaDetails", "InertiaHeaders", "InertiaRequest", "split_keys")


def split_keys(value: "str | None") -> "list[str]":
    """Split a comma-separated header value, dropping empty entries.

    Returns:
        The stripped keys in header order.
    """
    if not value:
        return []
    return [key.strip() for key in value.split(",") if key.strip()]


class InertiaDetails:
    """InertiaDetails holds all the values sent by Inertia client in headers and provide convenient properties."""

    def __init__(self, request: "Request[UserT, AuthT, StateT]") -> None:
        """Initialize :class:`InertiaDetails`"""
        self.request = request

    def _get_header_value(self, name: "InertiaHeaders") -> "str | None":
        """Parse request header

        Check for uri encoded header and unquotes it in readable format.

        Args:
            name: The header name.

        Returns:
            The header value.
        """

        if value := self.request.headers.get(name.value.lower()):
            is_uri_encoded = self.request.headers.get(f"{name.value.lower()}-uri-autoencoded") == "true"
            return unquote(value) if is_uri_encoded else value
        return None

    def __bool__(self) -> bool:
        """Return True when the request is sent by an Inertia client.

        Returns:
            True if the request originated from an Inertia client, otherwise False.
        """
        return self._get_header_value(InertiaHeaders.ENABLED) == "true"

    @cached_property
    def partial_component(self) -> "str | None":
        """Return the partial component name from headers.

        Returns:
            The partial component name, or None if not present.
        """
        return self._get_header_value(InertiaHeaders.PARTIAL_COMPONENT)

    @cached_property
    def partial_data(self) -> "str | None":
        """Return partial-data keys requested by the client.

        Returns:
            Comma-separated partial-data keys, or None if not present.
        """
        return self._get_header_value(InertiaHeaders.PARTIAL_DATA)

    @cached_property
    def partial_except(self) -> "str | None":
        """Return partial-except keys requested by the client.

        Returns:
            Comma-separated partial-except keys, or None if not present.
        """
        return self._get_header_value(InertiaHeaders.PARTIAL_EXCEPT)

    @cached_property
    def version(self) -> "str | None":
        """Return the Inertia asset version sent by the client.

        Returns:
            The version string, or None if not present.
        """
        return self._get_header_value(InertiaHeaders.VERSION)

    @cached_property
    def partial_keys(self) -> list[str]:
        return split_keys(self.partial_data)

    @cached_property
    def partial_except_keys(self) -> list[str]:
        return split_keys(self.partial_except)


class InertiaRequest(Request[UserT, AuthT, StateT]):
    """Inertia Request class to work with Inertia client."""

    __slots__ = ("inertia",)

    def __init__(self, scope: "Scope", receive: "Receive" = empty_receive, send: "Send" = empty_send) -> None:
        """Initialize :class:`InertiaRequest`"""
        super().__init__(scope=scope, receive=receive, send=send)
        self.inertia = InertiaDetails(self)

    @property
    def is_inertia(self) -> bool:
        """True if the request contained inertia headers.

        Returns:
            True if the request contains Inertia headers, otherwise False.
        """
        return bool(self.inertia)

    @property
    def inertia_version(self) -> "str | None":
        """Get the Inertia asset version sent by the client.

        The client sends this header so the server can detect version mismatches
        and trigger a hard refresh when assets have changed.

        Returns:
            The version string sent by the client, or None if not present.
        """
        return self.inertia.version
