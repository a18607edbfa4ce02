"""Jinja template engine for Inertia pages.

:class:`PagesTemplateEngine` is the Litestar template engine installed by the plugin.
On top of Litestar's Jinja integration it

- resolves logical template names (``about`` -> ``about.html.j2``) through a
  :class:`TemplateLocator`,
- renders raw template source and returns both the output and the top-level
  ``{% set %}`` assignments,
- registers the ``prop()``, ``page()``, ``props()`` and ``inertia()`` template
  functions and the ``recursive_merge``, ``set``, ``add`` and ``prune`` filters.

Templates bundled with this package are addressable as ``inertia/<name>``.
"""

import copy
from collections.abc import Iterable, Mapping, MutableMapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any, cast

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PrefixLoader
from jinja2.exceptions import FilterArgumentError
from jinja2.runtime import Macro
from litestar.contrib.jinja import JinjaTemplateEngine
from litestar.serialization import encode_json
from markupsafe import Markup

from inertia_pages.exceptions import TemplateNotFoundError
from inertia_pages.inertia.context import PageContext
from inertia_pages.inertia.props import prop_marker

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence
    from contextlib import AbstractContextManager

    from inertia_pages.config import InertiaConfig

__all__ = (
    "BUNDLED_PREFIX",
    "BUNDLED_TEMPLATES_DIR",
    "PagesTemplateEngine",
    "RenderedTemplate",
    "TemplateLocator",
    "TemplateMode",
    "TemplateRef",
    "add_filter",
    "recursive_merge_filter",
    "set_filter",
)

BUNDLED_TEMPLATES_DIR = Path(__file__).parent / "templates"
BUNDLED_PREFIX = "inertia"


class TemplateMode(str, Enum):
    """Which template roots are searched."""

    SITE = "site"
    """Site template directories, plus bundled templates under ``inertia/``."""
    SYSTEM = "system"
    """Bundled templates only."""


@dataclass(frozen=True)
class TemplateRef:
    """A logical template name resolved to a file.

    Attributes:
        name: The name the Jinja loader knows the template by.
        path: The file on disk.
    """

    name: str
    path: Path


@dataclass(frozen=True)
class RenderedTemplate:
    """Output of a rendered template and its top-level assignments."""

    output: str
    captured: "dict[str, Any]"


class TemplateLocator:
    """Resolve logical template names to files.

    For a name ``about`` the candidates are ``about``, ``about`` + each extension and
    ``about/index`` + each extension, in that order, in every root. An empty name means
    ``index``. Names containing ``..`` never resolve.

    The lookup mode is held in a context variable, so switching it inside one request
    (or worker thread) never leaks into another.
    """

    def __init__(
        self,
        site_dirs: "Iterable[Path | str]",
        system_dir: "Path | str" = BUNDLED_TEMPLATES_DIR,
        extensions: "Sequence[str]" = (".html.j2", ".j2", ".html", ".jinja"),
        mode: TemplateMode = TemplateMode.SITE,
    ) -> None:
        self.site_dirs = [Path(d) for d in site_dirs]
        self.system_dir = Path(system_dir)
        self.extensions = tuple(extensions)
        self._mode: ContextVar[TemplateMode] = ContextVar(f"inertia_pages_template_mode_{id(self)}", default=mode)

    @property
    def mode(self) -> TemplateMode:
        return self._mode.get()

    @mode.setter
    def mode(self, value: "TemplateMode | str") -> None:
        self._mode.set(TemplateMode(value))

    @contextmanager
    def use_mode(self, mode: "TemplateMode | str") -> "Iterator[TemplateLocator]":
        """Switch the lookup mode for the duration of the block.

        The previous mode is restored on exit, including when the block raises.

        Yields:
            The locator.
        """
        token = self._mode.set(TemplateMode(mode))
        try:
            yield self
        finally:
            self._mode.reset(token)

    def site_mode(self) -> "AbstractContextManager[TemplateLocator]":
        return self.use_mode(TemplateMode.SITE)

    def create_loader(self) -> ChoiceLoader:
        """Return a Jinja loader that knows templates by the names :meth:`resolve` returns.

        Returns:
            The loader.
        """
        return ChoiceLoader([
            FileSystemLoader(self.site_dirs),
            PrefixLoader({BUNDLED_PREFIX: FileSystemLoader(self.system_dir)}),
        ])

    def _roots(self, name: str) -> "Iterator[tuple[Path, str, str]]":
        bundled = f"{BUNDLED_PREFIX}/"
        if self.mode is TemplateMode.SYSTEM:
            yield self.system_dir, bundled, name.removeprefix(bundled)
            return
        for root in self.site_dirs:
            yield root, "", name
        if name.startswith(bundled):
            yield self.system_dir, bundled, name[len(bundled) :]

    def _candidates(self, name: str) -> "Iterator[str]":
        name = name.strip("/") or "index"
        yield name
        for extension in self.extensions:
            yield f"{name}{extension}"
        for extension in self.extensions:
            yield f"{name}/index{extension}"

    def resolve(self, name: str) -> "TemplateRef | None":
        """Resolve a logical template name in the current mode.

        Args:
            name: The logical name, e.g. ``blog/_post`` or ``inertia/base.html.j2``.

        Returns:
            The resolved template, or None when no candidate exists.
        """
        name = name.strip().strip("/")
        if ".." in PurePosixPath(name).parts:
            return None
        for root, prefix, relative in self._roots(name):
            for candidate in self._candidates(relative):
                path = root / candidate
                if path.is_file():
                    return TemplateRef(name=f"{prefix}{candidate}", path=path)
        return None

    def exists(self, name: str) -> bool:
        return self.resolve(name) is not None

    def list_directory(self, directory: str, extensions: "Sequence[str]") -> "list[TemplateRef]":
        """Return the templates directly inside a site template directory.

        When several site roots hold a file with the same name, the first root wins.

        Args:
            directory: Directory relative to the site template roots.
            extensions: Suffixes of the files to return.

        Returns:
            The templates, sorted by file name.
        """
        directory = directory.strip("/")
        found: "dict[str, TemplateRef]" = {}
        for root in self.site_dirs:
            path = root / directory
            if not path.is_dir():
                continue
            for entry in sorted(path.iterdir()):
                if entry.is_file() and entry.name.endswith(tuple(extensions)) and entry.name not in found:
                    found[entry.name] = TemplateRef(name=f"{directory}/{entry.name}", path=entry)
        return [found[name] for name in sorted(found)]


def _get_page_context(ctx: "Mapping[str, Any]", share_key: str) -> PageContext:
    page_context = ctx.get(share_key)
    if isinstance(page_context, PageContext):
        return page_context
    # outside of a page render; declarations have nowhere to go
    return PageContext()


def _create_page_callables(share_key: str) -> "dict[str, Callable[..., Any]]":
    def prop(ctx: "Mapping[str, Any]", name: str, value: Any = None) -> Markup:
        return prop_marker(name, value)

    def page(ctx: "Mapping[str, Any]", component: str) -> str:
        _get_page_context(ctx, share_key).declare_component(component)
        return ""

    def props(ctx: "Mapping[str, Any]", values: "Mapping[str, Any] | None" = None, **kwargs: Any) -> str:
        _get_page_context(ctx, share_key).declare_props({**(values or {}), **kwargs})
        return ""

    def inertia(ctx: "Mapping[str, Any]", component: str, props: "Mapping[str, Any] | None" = None) -> Markup:
        # legacy: the page is read back from the output as JSON
        return Markup(encode_json({"component": component, "props": dict(props or {})}).decode("utf-8"))

    return {"prop": prop, "page": page, "props": props, "inertia": inertia}


def _ensure_mapping(element: Any, filter_name: str) -> "Mapping[str, Any]":
    if not isinstance(element, Mapping):
        msg = f'The "{filter_name}" filter only works on mappings, got "{type(element).__name__}".'
        raise FilterArgumentError(msg)
    return cast("Mapping[str, Any]", element)


def _merge(base: "Mapping[str, Any]", overrides: "Mapping[str, Any]") -> "dict[str, Any]":
    merged = dict(base)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _merge(cast("Mapping[str, Any]", current), cast("Mapping[str, Any]", value))
        else:
            merged[key] = value
    return merged


def recursive_merge_filter(element: Any, values: "Mapping[str, Any]") -> "dict[str, Any]":
    """Recursively merge ``values`` into ``element``, replacing existing leaves.

    ``{{ form|recursive_merge({'element': {'attributes': {'placeholder': 'Label'}}}) }}``

    Returns:
        A new mapping.
    """
    return _merge(_ensure_mapping(element, "recursive_merge"), values)


def _set_at(element: "Mapping[str, Any]", at: str, value: Any, add: bool = False) -> "dict[str, Any]":
    result: "dict[str, Any]" = copy.deepcopy(dict(element))
    *path, last = at.split(".")
    child: "MutableMapping[str, Any]" = result
    for key in path:
        next_child = child.get(key)
        if not isinstance(next_child, MutableMapping):
            next_child = {}
            child[key] = next_child
        child = cast("MutableMapping[str, Any]", next_child)

    current = child.get(last)
    if add and isinstance(current, list):
        child[last] = [*current, *value] if isinstance(value, (list, tuple)) else [*current, value]
    elif add and isinstance(current, Mapping) and isinstance(value, Mapping):
        child[last] = {**current, **value}
    else:
        child[last] = value
    return result


def set_filter(element: Any, at: str, value: Any) -> "dict[str, Any]":
    """Set a value at a dotted path, replacing what is there.

    ``{{ form|set('element.attributes.placeholder', 'Label') }}``

    Returns:
        A new mapping.
    """
    return _set_at(_ensure_mapping(element, "set"), at, value)


def add_filter(element: Any, at: str, value: Any = None, values: Any = None) -> "dict[str, Any]":
    """Add a value at a dotted path.

    Lists are extended (or appended to) and mappings are merged; anything else is
    replaced.

    ``{{ form|add('element.attributes.class', 'new-class') }}``

    Returns:
        A new mapping.
    """
    return _set_at(_ensure_mapping(element, "add"), at, values if values is not None else value, add=True)


def _as_fields(definition: Any) -> "dict[str, Any]":
    if isinstance(definition, str):
        return {definition: True}
    if isinstance(definition, Mapping):
        definition = cast("Mapping[str, Any]", definition)
        return {key: value for key, value in definition.items() if not key.startswith(("$", "_"))}
    if isinstance(definition, Iterable):
        return dict.fromkeys(cast("Iterable[str]", definition), True)
    msg = f'The "prune" filter expects a field list or mapping, got "{type(definition).__name__}".'
    raise FilterArgumentError(msg)


def _get_field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return cast("Mapping[str, Any]", item).get(name)
    return getattr(item, name, None)


def _prune_item(item: Any, definition: Any) -> "dict[str, Any]":
    fields = _as_fields(definition)
    # "_<type>" keys add fields for items of that type, e.g. matrix blocks
    item_type = _get_field(item, "type")
    if isinstance(definition, Mapping) and item_type is not None:
        type_key = f"_{getattr(item_type, 'handle', item_type)}"
        if type_key in definition:
            fields.update(_as_fields(cast("Mapping[str, Any]", definition)[type_key]))

    pruned: "dict[str, Any]" = {}
    for name, field_definition in fields.items():
        if field_definition is False or field_definition is None:
            continue
        value = _get_field(item, name)
        pruned[name] = value if field_definition is True else prune_filter(value, field_definition)
    return pruned


def prune_filter(data: Any, definition: Any) -> Any:
    """Reduce data to the fields a definition names.

    Single items (mappings or objects) give a mapping, sequences give a list of
    mappings. A field's definition is ``True`` to copy the value, or a nested
    definition to prune it in turn. In a mapping definition ``$limit`` caps the
    number of items and ``_<type>`` adds fields for items whose ``type`` matches.

    ``{{ entry|prune(['title', 'url']) }}``

    ``{{ entry|prune({'author': ['name'], 'blocks': {'$limit': 10, '_text': {'body': true}}}) }}``

    Returns:
        The pruned data. None is returned unchanged.
    """
    if data is None:
        return None
    if isinstance(data, (Mapping, str, bytes)) or not isinstance(data, Iterable):
        return _prune_item(data, definition)

    items = list(cast("Iterable[Any]", data))
    if isinstance(definition, Mapping) and (limit := cast("Mapping[str, Any]", definition).get("$limit")) is not None:
        items = items[: int(limit)]
    return [_prune_item(item, definition) for item in items]


class PagesTemplateEngine(JinjaTemplateEngine):
    """Jinja template engine aware of Inertia page templates."""

    def __init__(self, config: "InertiaConfig") -> None:
        """Initialize the engine.

        Args:
            config: The Inertia configuration. Its template directories and extensions
                drive template resolution.
        """
        self.config = config
        self.locator = TemplateLocator(config.template_dirs, extensions=config.template_extensions)
        super().__init__(engine_instance=Environment(loader=self.locator.create_loader(), autoescape=True))
        self.engine.filters.update({
            "recursive_merge": recursive_merge_filter,
            "set": set_filter,
            "add": add_filter,
            "prune": prune_filter,
        })
        self.engine.globals["prune"] = prune_filter
        for key, template_callable in _create_page_callables(config.share_key).items():
            self.register_template_callable(key=key, template_callable=template_callable)

    def resolve_template(self, name: str) -> "TemplateRef | None":
        return self.locator.resolve(name)

    def template_exists(self, name: str) -> bool:
        return self.locator.exists(name)

    def read_template(self, template: "TemplateRef | str") -> str:
        """Return the raw source of a template.

        Args:
            template: A resolved template or a logical name.

        Raises:
            TemplateNotFoundError: If the name does not resolve.

        Returns:
            The file contents.
        """
        if isinstance(template, str):
            resolved = self.locator.resolve(template)
            if resolved is None:
                raise TemplateNotFoundError(template)
            template = resolved
        return template.path.read_text(encoding="utf-8")

    def render_source(self, source: str, context: "Mapping[str, Any]") -> RenderedTemplate:
        """Render template source.

        Args:
            source: The template source.
            context: Template variables.

        Returns:
            The output and the top-level ``{% set %}`` assignments (names starting with
            ``_`` and macros excluded).
        """
        module = self.engine.from_string(source).make_module(dict(context))
        captured = {
            key: value
            for key, value in vars(module).items()
            if not key.startswith("_") and not isinstance(value, Macro)
        }
        return RenderedTemplate(output=str(module), captured=captured)

    def render_template(self, name: str, context: "Mapping[str, Any] | None" = None) -> str:
        """Render a template by the name the loader knows it by.

        Returns:
            The rendered output.
        """
        return self.get_template(name).render(**(context or {}))
