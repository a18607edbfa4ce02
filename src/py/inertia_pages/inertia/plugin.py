from typing import TYPE_CHECKING, Any

from litestar.plugins import CLIPlugin, InitPluginProtocol

if TYPE_CHECKING:
    from click import Group
    from litestar.config.app import AppConfig

    from inertia_pages.config import InertiaConfig
    from inertia_pages.inertia.exception_handler import ErrorHandler
    from inertia_pages.inertia.renderer import PageRenderer
    from inertia_pages.inertia.resolver import PageResolver
    from inertia_pages.template_engine import PagesTemplateEngine


class InertiaPlugin(InitPluginProtocol, CLIPlugin):
    """Inertia pages plugin.

    This plugin configures Litestar to answer site requests from page templates:
    - Session middleware requirement validation
    - The pages template engine, InertiaRequest and the Inertia protocol middleware
    - Error page handling for HTTP exceptions
    - The catch-all page controller, when ``takeover_routing`` is enabled
    - The ``pages`` CLI group

    Example::

        from inertia_pages import InertiaConfig, InertiaPlugin

        app = Litestar(
            plugins=[InertiaPlugin(InertiaConfig(template_dirs=["templates"]))],
            middleware=[ServerSideSessionConfig().middleware],
        )
    """

    __slots__ = ("_engine", "_error_handler", "_renderer", "_resolver", "config")

    def __init__(self, config: "InertiaConfig | None" = None) -> "None":
        """Initialize the plugin with Inertia configuration."""
        from inertia_pages.config import InertiaConfig

        self.config = config or InertiaConfig()
        self._engine: "PagesTemplateEngine | None" = None
        self._resolver: "PageResolver | None" = None
        self._renderer: "PageRenderer | None" = None
        self._error_handler: "ErrorHandler | None" = None

    @property
    def engine(self) -> "PagesTemplateEngine":
        """Return the pages template engine, creating it on first use.

        Returns:
            The template engine.
        """
        if self._engine is None:
            from inertia_pages.template_engine import PagesTemplateEngine

            self._engine = PagesTemplateEngine(self.config)
        return self._engine

    @property
    def resolver(self) -> "PageResolver":
        if self._resolver is None:
            from inertia_pages.inertia.resolver import PageResolver

            self._resolver = PageResolver(self.config, self.engine)
        return self._resolver

    @property
    def renderer(self) -> "PageRenderer":
        if self._renderer is None:
            from inertia_pages.inertia.renderer import PageRenderer

            self._renderer = PageRenderer(self.config, self.engine)
        return self._renderer

    @property
    def error_handler(self) -> "ErrorHandler":
        if self._error_handler is None:
            from inertia_pages.inertia.exception_handler import ErrorHandler

            self._error_handler = ErrorHandler(self.config, self.renderer)
        return self._error_handler

    def on_cli_init(self, cli: "Group") -> None:
        from inertia_pages.cli import pages_group

        cli.add_command(pages_group)

    def on_app_init(self, app_config: "AppConfig") -> "AppConfig":
        """Configure application for use with Inertia pages.

        Args:
            app_config: The :class:`AppConfig <litestar.config.app.AppConfig>` instance.

        Raises:
            ImproperlyConfiguredException: If no session middleware is configured.

        Returns:
            The :class:`AppConfig <litestar.config.app.AppConfig>` instance.
        """

        from litestar.exceptions import HTTPException, ImproperlyConfiguredException
        from litestar.middleware import DefineMiddleware
        from litestar.middleware.session import SessionMiddleware
        from litestar.security.session_auth.middleware import MiddlewareWrapper
        from litestar.template import TemplateConfig
        from litestar.utils.predicates import is_class_and_subclass

        from inertia_pages.inertia.exception_handler import exception_to_http_response
        from inertia_pages.inertia.middleware import InertiaMiddleware
        from inertia_pages.inertia.request import InertiaRequest
        from inertia_pages.inertia.response import InertiaResponse
        from inertia_pages.inertia.routes import create_page_controller

        for mw in app_config.middleware:
            if isinstance(mw, DefineMiddleware) and is_class_and_subclass(
                mw.middleware, (MiddlewareWrapper, SessionMiddleware)
            ):
                break
        else:
            msg = "The Inertia plugin require a session middleware."
            raise ImproperlyConfiguredException(msg)

        exception_handlers: "dict[type[Exception] | int, Any]" = {
            HTTPException: exception_to_http_response,
        }
        app_config.exception_handlers.update(exception_handlers)  # pyright: ignore[reportUnknownMemberType]
        app_config.request_class = InertiaRequest
        app_config.template_config = TemplateConfig(instance=self.engine)
        app_config.middleware.append(InertiaMiddleware)
        app_config.signature_types.extend([InertiaRequest, InertiaResponse])
        if self.config.takeover_routing:
            app_config.route_handlers.append(create_page_controller())
        return app_config
