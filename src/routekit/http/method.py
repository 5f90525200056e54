"""HTTP request methods."""

from enum import StrEnum


class Method(StrEnum):
    """Request methods accepted by :meth:`Router.route`.

    Members compare equal to their plain string values, so ``"GET"`` and
    ``Method.GET`` are interchangeable everywhere a method is expected.
    """

    GET = "GET"
    POST = "POST"
    DELETE = "DELETE"
    PATCH = "PATCH"
    PUT = "PUT"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    CONNECT = "CONNECT"
    TRACE = "TRACE"
