"""Constants and utility functions for configuration."""

import os
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = (
    "DEFAULT_ASSETS_DIR",
    "DEFAULT_COMPONENT",
    "NO_VERSIONING",
    "SHARE_KEY",
    "TRUE_VALUES",
    "empty_dict_factory",
    "expand_path",
)

TRUE_VALUES = {"True", "true", "1", "yes", "Y", "T"}
NO_VERSIONING = "__noversioning__"
DEFAULT_COMPONENT = "Index"
DEFAULT_ASSETS_DIR = "@webroot/assets"
SHARE_KEY = "__inertia__"


def empty_dict_factory() -> dict[str, Any]:
    """Return an empty ``dict[str, Any]``.

    Returns:
        An empty dictionary.
    """
    return {}


def expand_path(value: str, aliases: "Mapping[str, str] | None" = None) -> str:
    """Expand a leading ``@alias``, environment variables and ``~`` in a path.

    Args:
        value: The configured path, e.g. ``@webroot/assets`` or ``$ASSETS_DIR``.
        aliases: Mapping of alias names (including the ``@``) to their paths.

    Returns:
        The expanded path string.
    """
    if aliases and value.startswith("@"):
        alias, sep, rest = value.partition("/")
        if alias in aliases:
            value = f"{aliases[alias]}{sep}{rest}"
    return os.path.expanduser(os.path.expandvars(value))
