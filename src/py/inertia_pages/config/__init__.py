"""Inertia Pages configuration.

The configuration surface is a single dataclass, :class:`InertiaConfig`, plus a
handful of constants shared by the request pipeline.

Example usage::

    InertiaPlugin(config=InertiaConfig(template_dirs=["templates"], use_versioning=False))
"""

import logging

from inertia_pages.config._constants import (  # pyright: ignore[reportPrivateUsage]
    DEFAULT_COMPONENT,
    NO_VERSIONING,
    SHARE_KEY,
    TRUE_VALUES,
    expand_path,
)
from inertia_pages.config._inertia import InertiaConfig  # pyright: ignore[reportPrivateUsage]

logger = logging.getLogger("inertia_pages")

__all__ = (
    "DEFAULT_COMPONENT",
    "NO_VERSIONING",
    "SHARE_KEY",
    "TRUE_VALUES",
    "InertiaConfig",
    "expand_path",
    "logger",
)
