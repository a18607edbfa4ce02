"""Prop markers, prop merging and partial reloads.

Templates declare props by emitting markers into their output::

    <!--INERTIA_PROP:{"title": "About us"}-->

The ``prop()`` template function writes such a marker; :func:`extract_props` reads
them back after rendering.
"""

import re
from typing import TYPE_CHECKING, Any, cast

from litestar.exceptions import SerializationException
from litestar.serialization import decode_json, encode_json
from markupsafe import Markup

from inertia_pages.config import logger

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

__all__ = (
    "PROP_MARKER_PREFIX",
    "PROP_MARKER_RE",
    "extract_props",
    "merge_props",
    "prop_marker",
    "resolve_partial_props",
)

PROP_MARKER_PREFIX = "<!--INERTIA_PROP:"
PROP_MARKER_RE = re.compile(r"<!--INERTIA_PROP:(\{.*?\})-->", re.DOTALL)
SNIPPET_LENGTH = 120


def prop_marker(key: str, value: Any) -> Markup:
    """Encode a single prop as an output marker.

    ``<`` and ``>`` are escaped inside the JSON body so a value can never close the
    surrounding comment.

    Args:
        key: The prop name.
        value: Any JSON-serializable value.

    Returns:
        The marker, safe to emit from an autoescaping template.
    """
    body = encode_json({key: value}).decode("utf-8")
    body = body.replace("<", "\\u003c").replace(">", "\\u003e")
    return Markup(f"{PROP_MARKER_PREFIX}{body}-->")


def _snippet(text: str) -> str:
    if len(text) <= SNIPPET_LENGTH:
        return text
    return f"{text[:SNIPPET_LENGTH]}..."


def extract_props(output: str, props: "Mapping[str, Any] | None" = None) -> "dict[str, Any]":
    """Collect the props declared by markers in rendered output.

    Keys already present (in ``props`` or in an earlier marker) are kept and the later
    value is dropped with a warning. A marker whose body is not a JSON object is
    logged and skipped.

    Args:
        output: Rendered template output.
        props: Props collected so far.

    Returns:
        A new mapping holding ``props`` plus the newly declared keys.
    """
    collected: "dict[str, Any]" = dict(props or {})
    for match in PROP_MARKER_RE.finditer(output):
        body = match.group(1)
        try:
            decoded = decode_json(body)
        except SerializationException:
            logger.error("Unable to decode prop marker: %s", _snippet(body))
            continue
        if not isinstance(decoded, dict):
            logger.error("Prop marker is not a JSON object: %s", _snippet(body))
            continue
        for key, value in cast("dict[str, Any]", decoded).items():
            if key in collected:
                logger.warning("Duplicate prop key %r ignored; the first declaration wins.", key)
                continue
            collected[key] = value
    return collected


def merge_props(*sources: "Mapping[str, Any] | None") -> "dict[str, Any]":
    """Merge prop sources given from lowest to highest priority.

    Returns:
        The union of all sources; later sources overwrite earlier ones.
    """
    merged: "dict[str, Any]" = {}
    for source in sources:
        if source:
            merged.update(source)
    return merged


def resolve_partial_props(
    props: "Mapping[str, Any]",
    component: str,
    partial_component: "str | None",
    only: "Sequence[str]" = (),
    exclude: "Sequence[str]" = (),
) -> "dict[str, Any]":
    """Filter props for a partial reload.

    The filter only applies when the partial reload targets the component being
    rendered. ``only`` keeps the listed keys, then ``exclude`` removes keys from what
    is left.

    Args:
        props: The complete props.
        component: The component being rendered.
        partial_component: The component named by ``X-Inertia-Partial-Component``.
        only: Keys from ``X-Inertia-Partial-Data``.
        exclude: Keys from ``X-Inertia-Partial-Except``.

    Returns:
        The props to send.
    """
    if partial_component != component:
        return dict(props)

    filtered = {key: props[key] for key in only if key in props} if only else dict(props)
    for key in exclude:
        filtered.pop(key, None)
    return filtered
