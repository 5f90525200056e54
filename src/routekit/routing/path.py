"""Path syntax for routes and links.

A valid path starts and ends with ``/``, has no empty segments, no
whitespace, and no braces except as whole-segment ``{name}``
placeholders. The root path ``/`` is always valid.
"""

import re
from dataclasses import dataclass

from routekit.errors import ConfigurationError, InvalidPathError

_SEGMENT = r"(?:[^/\s{}]+|\{[^/\s{}]+\})"
_VALID_PATH = re.compile(rf"^/(?:{_SEGMENT}/)*$")


def is_valid_path(path: str) -> bool:
    """True if *path* may be used for ``Router.route`` or ``Router.link``."""
    return path == "/" or _VALID_PATH.fullmatch(path) is not None


def validate(path: str) -> None:
    """Raise ``InvalidPathError`` unless *path* is a valid route path.

    Examples::

        validate("/")                      # ok
        validate("/users/{id}/posts/")     # ok
        validate("/users")                 # missing trailing slash
        validate("/users//posts/")         # empty segment
        validate("/my files/")             # whitespace
    """
    if not is_valid_path(path):
        raise InvalidPathError(path)


@dataclass(frozen=True, slots=True)
class Segment:
    """One ``/``-delimited piece of a pattern path.

    Literal: ``users``   (wildcard=None)
    Wildcard: ``{id}``   (wildcard="id")
    """

    value: str
    wildcard: str | None = None

    @property
    def is_wildcard(self) -> bool:
        return self.wildcard is not None

    def matches(self, part: str) -> bool:
        if self.wildcard is not None:
            return part != ""
        return part == self.value


@dataclass(frozen=True, slots=True)
class Pattern:
    """A parsed multiplexer pattern: ``"[METHOD ]<path>"``.

    ``subtree`` is true when the path ends in ``/``: the pattern then
    matches its own path and anything beneath it.
    """

    text: str
    method: str | None
    path: str
    segments: tuple[Segment, ...]
    subtree: bool

    @property
    def key(self) -> tuple[str | None, tuple[str | None, ...], bool]:
        """Identity used to detect duplicate registrations (wildcard names ignored)."""
        shape = tuple(None if seg.is_wildcard else seg.value for seg in self.segments)
        return (self.method, shape, self.subtree)

    def match(self, parts: list[str]) -> dict[str, str] | None:
        """Match split request path parts; return captured wildcards or None.

        *parts* is ``path[1:].split("/")``, so ``"/a/b/"`` is ``["a", "b", ""]``.
        """
        count = len(self.segments)
        if self.subtree:
            if len(parts) <= count:
                return None
        elif len(parts) != count:
            return None

        params: dict[str, str] = {}
        for segment, part in zip(self.segments, parts, strict=False):
            if not segment.matches(part):
                return None
            if segment.wildcard is not None:
                params[segment.wildcard] = part
        return params


_METHOD_TOKEN = re.compile(r"^[A-Z]+$")


def parse_pattern(text: str) -> Pattern:
    """Parse ``"GET /users/{id}/"`` or ``"/static/"`` into a Pattern.

    Raises ``ConfigurationError`` for a missing path, a path without a
    leading ``/``, or a method token that is not an upper-case word.
    """
    method: str | None = None
    path = text.strip()
    if " " in path:
        method, _, path = path.partition(" ")
        path = path.strip()
        if not _METHOD_TOKEN.match(method):
            msg = f"invalid method {method!r} in pattern {text!r}"
            raise ConfigurationError(msg)
    if not path.startswith("/"):
        msg = f"pattern path must start with '/': {text!r}"
        raise ConfigurationError(msg)

    body = path[1:]
    subtree = body == "" or body.endswith("/")
    if subtree:
        body = body[:-1]

    segments: list[Segment] = []
    if body:
        for part in body.split("/"):
            if part.startswith("{") and part.endswith("}") and len(part) > 2:
                segments.append(Segment(value=part, wildcard=part[1:-1]))
            else:
                segments.append(Segment(value=part))

    return Pattern(
        text=text,
        method=method,
        path=path,
        segments=tuple(segments),
        subtree=subtree,
    )
