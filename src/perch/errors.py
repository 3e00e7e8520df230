"""Perch exception hierarchy.

Shared across Router, App, handler chains, and the server pipeline so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when routes, mounts, or app configuration are invalid.

    Always raised at registration time, never while serving requests.
    """


class PatternError(ConfigurationError):
    """Raised when a route path cannot be compiled.

    Covers malformed regular expressions, duplicate parameter names,
    parameters without a delimiter between them, and unbalanced groups.
    The offending path is embedded in the message.
    """

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid route path {path!r}: {reason}")


class ChainError(PerchError):
    """A handler returned without choosing an outcome.

    Handlers must return a response value, ``CONTINUE``, ``SKIP_ROUTE``
    or a ``Failure``. Returning ``None`` leaves the request without an
    answer and is reported through this error.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Raised by handlers or produced by the dispatcher. The ASGI handler
    catches these and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
