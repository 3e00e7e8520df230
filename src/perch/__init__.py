"""Perch — ordered path routing with handler chains.

Routes are matched in the order they were registered. Paths may be
literal strings, patterns with parameters (``/users/:userId``,
``/flights/:from-:to``, ``/ab?cd``), or compiled regular expressions.
Each route runs a chain of handlers that decide what happens next.

Basic usage::

    from perch import App, CONTINUE

    app = App()

    def log(request):
        print(request.method, request.path)
        return CONTINUE

    app.use(log)  # registered first, so it runs before every route

    @app.get("/users/:userId(\\d+)")
    def show_user(userId: int):
        return f"user {userId}"

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "CONTINUE",
    "SKIP_ROUTE",
    "App",
    "AppConfig",
    "ChainError",
    "ConfigurationError",
    "Failure",
    "HTTPError",
    "Method",
    "NoMatch",
    "NotFound",
    "PatternError",
    "PerchError",
    "Redirect",
    "Request",
    "Response",
    "RouteMatch",
    "Router",
    "g",
    "get_request",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name == "AppConfig":
        from perch.config import AppConfig

        return AppConfig

    if name == "Router":
        from perch.routing.router import Router

        return Router

    if name in ("RouteMatch", "NoMatch"):
        from perch.routing import route as _route

        return getattr(_route, name)

    if name == "Method":
        from perch.routing.methods import Method

        return Method

    if name in ("CONTINUE", "SKIP_ROUTE", "Failure"):
        from perch.routing import chain as _chain

        return getattr(_chain, name)

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from perch.http import response as _resp

        return getattr(_resp, name)

    if name in ("g", "get_request"):
        from perch import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "PerchError",
        "ConfigurationError",
        "PatternError",
        "ChainError",
        "HTTPError",
        "NotFound",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
