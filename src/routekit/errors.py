"""routekit exception hierarchy.

Shared across the router, multiplexer, and server so every module
raises and catches the same types.
"""


class RoutekitError(Exception):
    """Base for all routekit-specific errors."""


class ConfigurationError(RoutekitError):
    """Raised when routes, links, or server settings are invalid.

    Always raised while the application is being composed, never while
    a request is being served.
    """


class InvalidPathError(ConfigurationError):
    """A route or link path does not satisfy the path syntax rules."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"path is invalid: {path!r}")


class ServerError(RoutekitError):
    """The listener could not start or stopped with a failure."""
