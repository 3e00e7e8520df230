"""HTTP methods a route can be registered for."""

from enum import StrEnum


class Method(StrEnum):
    """Route methods.

    ``ALL`` is not an HTTP method: a route registered with it answers
    every request method, including ones not listed here.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    ALL = "ALL"

    def accepts(self, request_method: str) -> bool:
        """Whether a route registered for this method answers *request_method*.

        ``GET`` routes also answer ``HEAD``.
        """
        method = request_method.upper()
        if self is Method.ALL or self == method:
            return True
        return self is Method.GET and method == "HEAD"
