from enum import Enum
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

if TYPE_CHECKING:
    from collections.abc import Callable

    from inertia_pages.inertia.types import InertiaHeaderType


class InertiaHeaders(str, Enum):
    """Enum for Inertia Headers.

    See: https://inertiajs.com/the-protocol

    ``REDIRECT`` is not part of the protocol: it is an internal signal that handlers
    set when they cannot set ``Location`` directly. It is moved to ``Location`` and
    removed before the response leaves the application.
    """

    ENABLED = "X-Inertia"
    VERSION = "X-Inertia-Version"
    LOCATION = "X-Inertia-Location"

    PARTIAL_DATA = "X-Inertia-Partial-Data"
    PARTIAL_COMPONENT = "X-Inertia-Partial-Component"
    PARTIAL_EXCEPT = "X-Inertia-Partial-Except"

    REDIRECT = "X-Redirect"


def get_enabled_header(enabled: bool = True) -> "dict[str, Any]":
    """True if inertia is enabled.

    Args:
        enabled: Whether inertia is enabled.

    Returns:
        The headers for inertia.
    """

    return {InertiaHeaders.ENABLED.value: "true" if enabled else "false"}


def get_version_header(version: str) -> "dict[str, Any]":
    """Return headers for change swap method response.

    Args:
        version: The version of the inertia.

    Returns:
        The headers for inertia.
    """
    return {InertiaHeaders.VERSION.value: version}


def get_location_header(location: str) -> "dict[str, Any]":
    """Return the header that makes the client perform a full visit.

    Args:
        location: The URL the client should load.

    Returns:
        The headers for inertia.
    """
    return {InertiaHeaders.LOCATION.value: quote(location, safe="/#%[]=:;$&()+,!?*@'~")}


def get_headers(inertia_headers: "InertiaHeaderType") -> "dict[str, Any]":
    """Return headers for Inertia responses.

    Args:
        inertia_headers: The inertia headers.

    Raises:
        ValueError: If the inertia headers are None.

    Returns:
        The headers for inertia.
    """
    if not inertia_headers:
        msg = "Value for inertia_headers cannot be None."
        raise ValueError(msg)
    inertia_headers_dict: "dict[str, Callable[..., dict[str, Any]]]" = {
        "enabled": get_enabled_header,
        "location": get_location_header,
        "version": get_version_header,
    }

    header: "dict[str, Any]" = {}
    response: "dict[str, Any]"
    key: "str"
    value: "Any"

    for key, value in inertia_headers.items():
        if value is not None:
            response = inertia_headers_dict[key](value)
            header.update(response)
    return header
