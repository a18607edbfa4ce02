"""Inertia Pages exception classes."""

__all__ = [
    "InertiaPagesError",
    "SiteSettingsNotFoundError",
    "TemplateNotFoundError",
    "UriFormatMismatchError",
]


class InertiaPagesError(Exception):
    """Base exception for Inertia Pages related errors."""


class UriFormatMismatchError(InertiaPagesError, ValueError):
    """Raised when a URI cannot be matched against an element's URI format."""

    def __init__(self, uri: str, uri_format: str) -> None:
        super().__init__(f"URI {uri!r} does not match the URI format {uri_format!r}.")
        self.uri = uri
        self.uri_format = uri_format


class SiteSettingsNotFoundError(InertiaPagesError):
    """Raised when a matched element has no settings for the active site.

    This is a configuration error: the element's section or category group
    must be enabled for the site that is serving the request.
    """

    def __init__(self, site_id: "int | str", owner: "str | None" = None) -> None:
        target = f" on {owner!r}" if owner else ""
        super().__init__(f"No site settings found{target} for the current site {site_id!r}.")
        self.site_id = site_id


class TemplateNotFoundError(InertiaPagesError):
    """Raised when a template cannot be resolved to a file."""

    def __init__(self, template: str) -> None:
        super().__init__(f"Template not found: {template!r}")
        self.template = template
