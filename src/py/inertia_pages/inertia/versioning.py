"""Asset version token.

The token changes whenever a file below one of the configured asset directories is
added, removed or modified, which makes Inertia clients perform a full reload.
"""

import hashlib
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

from inertia_pages.config import NO_VERSIONING, logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from litestar.connection import ASGIConnection

    from inertia_pages.config import InertiaConfig

__all__ = ("VERSION_SCOPE_KEY", "get_inertia_version", "get_request_version", "hash_directories", "hash_directory")

VERSION_SCOPE_KEY = "_inertia_version"


def _md5(data: bytes) -> str:
    return hashlib.md5(data, usedforsecurity=False).hexdigest()


def hash_directory(directory: "Path | str") -> str:
    """Return the aggregate hash of a directory tree.

    Each entry contributes the hash of its contents, or the aggregate hash of a
    subdirectory. Entries are concatenated in listing order and hashed once more.

    Args:
        directory: The directory to hash.

    Returns:
        The hex digest, or an empty string when the directory does not exist.
    """
    path = Path(directory)
    if not path.is_dir():
        logger.warning("Asset directory %s does not exist.", path)
        return ""
    hashes: list[str] = []
    for entry in sorted(path.iterdir()):
        if entry.is_dir():
            hashes.append(hash_directory(entry))
        elif entry.is_file():
            hashes.append(_md5(entry.read_bytes()))
    return _md5("".join(hashes).encode())


def hash_directories(directories: "Iterable[Path | str]") -> str:
    return _md5("".join(hash_directory(directory) for directory in directories).encode())


def get_inertia_version(config: "InertiaConfig") -> str:
    """Return the version token for the current assets.

    The token is recomputed on every call so it always reflects the files on disk.

    Args:
        config: The Inertia configuration.

    Returns:
        ``NO_VERSIONING`` when versioning is disabled, otherwise the folded hash of
        every configured asset directory.
    """
    if not config.use_versioning:
        return NO_VERSIONING
    return hash_directories(config.expanded_assets_dirs)


def get_request_version(connection: "ASGIConnection[Any, Any, Any, Any]", config: "InertiaConfig") -> str:
    """Return the version token for a request, computing it at most once.

    The token is stored in the connection scope, so the version check and the page
    response share one computation.

    Returns:
        The version token.
    """
    scope = cast("dict[str, Any]", connection.scope)
    if (version := scope.get(VERSION_SCOPE_KEY)) is None:
        version = scope[VERSION_SCOPE_KEY] = get_inertia_version(config)
    return cast("str", version)
