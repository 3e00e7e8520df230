"""Ordered router with mountable sub-routers.

Routes are registered during setup, compiled on registration (so a bad
path fails immediately), and matched in registration order. The router
is frozen before it serves requests.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeAlias

from perch._internal.types import Handler, HandlerSpec
from perch.errors import ConfigurationError
from perch.routing.methods import Method
from perch.routing.pattern import compile_pattern
from perch.routing.route import Mount, NoMatch, Route, RouteMatch

logger = logging.getLogger("perch.routing")

Registration: TypeAlias = "Router | Callable[[Handler], Handler]"


def _flatten(items: Iterable[Any]) -> list[Any]:
    """Flatten nested lists/tuples of handlers, preserving order."""
    flat: list[Any] = []
    for item in items:
        if isinstance(item, (list, tuple)):
            flat.extend(_flatten(item))
        else:
            flat.append(item)
    return flat


def _is_path(value: object) -> bool:
    return isinstance(value, (str, re.Pattern)) or (
        hasattr(value, "pattern") and hasattr(value, "flags") and not callable(value)
    )


def _join(prefix: str, path: str) -> str:
    prefix = prefix.rstrip("/")
    if path == "/" and prefix:
        return prefix
    return prefix + path


class Router:
    """An ordered collection of routes and mounts.

    The first registered layer that matches a request wins. Later
    matches are still reachable: a handler that returns ``SKIP_ROUTE``
    (or whose chain runs out) hands the request to the next one.

    Usage::

        birds = Router()
        birds.get("/", lambda: "Birds home page")
        birds.get("/about", lambda: "About birds")

        app = Router()
        app.get("/flights/:from-:to", show_flight)
        app.route("/book").get(list_books).post(add_book)
        app.use("/birds", birds)

        match = app.match("GET", "/birds/about")
        match.remaining_path  # "/about"

    Options:
        case_sensitive: ``/Foo`` and ``/foo`` are different paths.
        strict: ``/foo`` and ``/foo/`` are different paths.
        merge_params: routes of this router also see the parameters
            captured by the mount prefix of their parent.
        regex_timeout: time budget in seconds for each regex match;
            ``None`` means unlimited. Sub-routers inherit the budget of
            the router a match starts from.
    """

    __slots__ = (
        "_frozen",
        "_layers",
        "case_sensitive",
        "merge_params",
        "name",
        "regex_timeout",
        "strict",
    )

    def __init__(
        self,
        *,
        case_sensitive: bool = False,
        strict: bool = False,
        merge_params: bool = False,
        regex_timeout: float | None = None,
        name: str | None = None,
    ) -> None:
        self.case_sensitive = case_sensitive
        self.strict = strict
        self.merge_params = merge_params
        self.regex_timeout = regex_timeout
        self.name = name
        self._layers: list[Route | Mount] = []
        self._frozen = False

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<Router{label} layers={len(self._layers)}>"

    # -- Registration --

    def add(
        self,
        method: Method | str,
        path: Any,
        *handlers: HandlerSpec,
        name: str | None = None,
    ) -> Route:
        """Register a route and return it.

        *handlers* may be callables or (nested) lists of callables; they
        run in the order given.

        Raises:
            PatternError: If *path* cannot be compiled.
            ConfigurationError: If *method* is unknown or no handler is given.
            RuntimeError: If the router is frozen.
        """
        self._check_not_frozen()
        try:
            route_method = Method(method.upper())
        except ValueError as exc:
            msg = f"Unknown route method {method!r}"
            raise ConfigurationError(msg) from exc

        chain = self._handler_chain(handlers, f"{route_method} {path!r}")
        pattern = compile_pattern(
            path,
            case_sensitive=self.case_sensitive,
            strict=self.strict,
        )
        route = Route(
            method=route_method,
            path=pattern.path,
            pattern=pattern,
            handlers=chain,
            name=name,
        )
        self._layers.append(route)
        logger.debug("Registered %s (%d handlers)", route.describe(), len(chain))
        return route

    def get(self, path: Any, *handlers: HandlerSpec) -> Registration:
        """Register a GET route, or return a decorator if no handler is given."""
        return self._register(Method.GET, path, handlers)

    def post(self, path: Any, *handlers: HandlerSpec) -> Registration:
        """Register a POST route, or return a decorator if no handler is given."""
        return self._register(Method.POST, path, handlers)

    def put(self, path: Any, *handlers: HandlerSpec) -> Registration:
        """Register a PUT route, or return a decorator if no handler is given."""
        return self._register(Method.PUT, path, handlers)

    def delete(self, path: Any, *handlers: HandlerSpec) -> Registration:
        """Register a DELETE route, or return a decorator if no handler is given."""
        return self._register(Method.DELETE, path, handlers)

    def patch(self, path: Any, *handlers: HandlerSpec) -> Registration:
        """Register a PATCH route, or return a decorator if no handler is given."""
        return self._register(Method.PATCH, path, handlers)

    def head(self, path: Any, *handlers: HandlerSpec) -> Registration:
        """Register a HEAD route, or return a decorator if no handler is given."""
        return self._register(Method.HEAD, path, handlers)

    def options(self, path: Any, *handlers: HandlerSpec) -> Registration:
        """Register an OPTIONS route, or return a decorator if no handler is given."""
        return self._register(Method.OPTIONS, path, handlers)

    def all(self, path: Any, *handlers: HandlerSpec) -> Registration:
        """Register a route answering every method.

        Typically used for handlers that inspect the request and return
        ``CONTINUE``::

            @router.all("/secret")
            def announce(request):
                logger.info("Accessing the secret section...")
                return CONTINUE
        """
        return self._register(Method.ALL, path, handlers)

    def route(self, path: Any) -> RouteBuilder:
        """Start a chain of registrations for one path.

        ::

            router.route("/book").get(get_book).post(add_book).put(update_book)
        """
        self._check_not_frozen()
        return RouteBuilder(self, path)

    def use(self, *args: Any) -> Router:
        """Mount a sub-router or middleware handlers under a path prefix.

        Accepts ``use(router)``, ``use(handler, ...)``,
        ``use(prefix, router)`` and ``use(prefix, handler, ...)``. The
        prefix defaults to ``/`` and matches whole leading segments:
        ``/birds`` matches ``/birds`` and ``/birds/about`` but not
        ``/birdsong``. The mounted router sees the path with the prefix
        stripped. It is referenced, not copied, and remains usable on
        its own.

        Middleware handlers run for every method under the prefix and
        usually return ``CONTINUE``.
        """
        self._check_not_frozen()
        if args and _is_path(args[0]):
            prefix, targets = args[0], _flatten(args[1:])
        else:
            prefix, targets = "/", _flatten(args)
        if not targets:
            msg = f"use({prefix!r}) requires a router or at least one handler"
            raise ConfigurationError(msg)

        pattern = compile_pattern(prefix, case_sensitive=self.case_sensitive, end=False)
        pending: list[Handler] = []
        for target in targets:
            if isinstance(target, Router):
                self._flush_middleware(prefix, pattern, pending)
                self._check_mountable(target)
                self._layers.append(Mount(prefix=pattern.path, pattern=pattern, router=target))
                logger.debug("Mounted %r at %s", target, pattern.path)
            else:
                pending.append(target)
        self._flush_middleware(prefix, pattern, pending)
        return self

    def _flush_middleware(self, prefix: Any, pattern: Any, pending: list[Handler]) -> None:
        if not pending:
            return
        chain = self._handler_chain(pending, f"use({prefix!r})")
        route = Route(method=Method.ALL, path=pattern.path, pattern=pattern, handlers=chain)
        self._layers.append(
            Mount(prefix=pattern.path, pattern=pattern, handlers=chain, route=route)
        )
        pending.clear()

    def _register(self, method: Method, path: Any, handlers: tuple[HandlerSpec, ...]) -> Registration:
        if handlers:
            self.add(method, path, *handlers)
            return self

        def decorator(func: Handler) -> Handler:
            self.add(method, path, func)
            return func

        return decorator

    def _handler_chain(self, handlers: Iterable[Any], where: str) -> tuple[Handler, ...]:
        chain = _flatten(handlers)
        if not chain:
            msg = f"{where} requires at least one handler"
            raise ConfigurationError(msg)
        for handler in chain:
            if not callable(handler) or isinstance(handler, Router):
                msg = f"{where}: handler {handler!r} is not callable"
                raise ConfigurationError(msg)
        return tuple(chain)

    def _check_mountable(self, child: Router) -> None:
        if child is self or child._reaches(self):
            msg = f"Mounting {child!r} on {self!r} would create a cycle"
            raise ConfigurationError(msg)

    def _reaches(self, target: Router) -> bool:
        """Whether *target* is mounted somewhere below this router."""
        for layer in self._layers:
            if isinstance(layer, Mount) and layer.router is not None:
                if layer.router is target or layer.router._reaches(target):
                    return True
        return False

    # -- Introspection --

    @property
    def routes(self) -> list[tuple[str, Route]]:
        """Every route in precedence order, as ``(mount_path, route)``.

        Routes of mounted routers are listed in place, with the mount
        prefixes they sit under. Middleware mounts appear as ``ALL``
        routes on their prefix.
        """
        result: list[tuple[str, Route]] = []
        self._collect_routes("", result)
        return result

    def _collect_routes(self, mount_path: str, result: list[tuple[str, Route]]) -> None:
        for layer in self._layers:
            if isinstance(layer, Route):
                result.append((mount_path, layer))
            elif layer.router is not None:
                layer.router._collect_routes(_join(mount_path, layer.prefix), result)
            elif layer.route is not None:
                result.append((mount_path, layer.route))

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Freeze this router and every router mounted below it."""
        self._frozen = True
        for layer in self._layers:
            if isinstance(layer, Mount) and layer.router is not None:
                layer.router.freeze()

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot add routes after the router is frozen. "
                "Register routes and mounts before serving requests."
            )
            raise RuntimeError(msg)

    # -- Matching --

    def match(self, method: str, path: str) -> RouteMatch | NoMatch:
        """Return the first route matching *method* and *path*.

        Returns ``NoMatch`` (falsy) when nothing matches. Matching reads
        the route table only, so repeated calls give equal results.
        """
        found = next(self.iter_matches(method, path), None)
        if found is None:
            return NoMatch(method=method, path=path)
        return found

    def iter_matches(self, method: str, path: str) -> Iterator[RouteMatch]:
        """Lazily yield every matching route in precedence order.

        Descends into mounted routers, which see *path* with the mount
        prefix stripped. The dispatcher walks this iterator to fall
        through from one route to the next.
        """
        yield from self._walk(method, path or "/", "", {}, self.regex_timeout)

    def _walk(
        self,
        method: str,
        path: str,
        mount_path: str,
        parent_params: dict[str, str],
        timeout: float | None,
    ) -> Iterator[RouteMatch]:
        for layer in self._layers:
            if isinstance(layer, Route) and not layer.method.accepts(method):
                continue

            found = layer.pattern.match(path, timeout=timeout)
            if found is None:
                continue

            params = found.params
            if self.merge_params and parent_params:
                params = {**parent_params, **params}

            if isinstance(layer, Route):
                yield RouteMatch(
                    route=layer,
                    params=params,
                    mount_path=mount_path,
                    remaining_path=path,
                )
                continue

            remaining = path[len(found.matched) :]
            if not remaining.startswith("/"):
                remaining = "/" + remaining
            below = mount_path + found.matched.rstrip("/")

            if layer.router is not None:
                yield from layer.router._walk(method, remaining, below, params, timeout)
            elif layer.route is not None:
                yield RouteMatch(
                    route=layer.route,
                    params=params,
                    mount_path=below,
                    remaining_path=remaining,
                )


class RouteBuilder:
    """Chainable registrations sharing one path. Returned by ``Router.route()``."""

    __slots__ = ("_router", "path")

    def __init__(self, router: Router, path: Any) -> None:
        self._router = router
        self.path = path

    def get(self, *handlers: HandlerSpec) -> RouteBuilder:
        self._router.add(Method.GET, self.path, *handlers)
        return self

    def post(self, *handlers: HandlerSpec) -> RouteBuilder:
        self._router.add(Method.POST, self.path, *handlers)
        return self

    def put(self, *handlers: HandlerSpec) -> RouteBuilder:
        self._router.add(Method.PUT, self.path, *handlers)
        return self

    def delete(self, *handlers: HandlerSpec) -> RouteBuilder:
        self._router.add(Method.DELETE, self.path, *handlers)
        return self

    def patch(self, *handlers: HandlerSpec) -> RouteBuilder:
        self._router.add(Method.PATCH, self.path, *handlers)
        return self

    def head(self, *handlers: HandlerSpec) -> RouteBuilder:
        self._router.add(Method.HEAD, self.path, *handlers)
        return self

    def options(self, *handlers: HandlerSpec) -> RouteBuilder:
        self._router.add(Method.OPTIONS, self.path, *handlers)
        return self

    def all(self, *handlers: HandlerSpec) -> RouteBuilder:
        self._router.add(Method.ALL, self.path, *handlers)
        return self
