"""Perch application class.

Mutable during setup (route registration, mounts, error handlers).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch._internal.types import ErrorHandler, HandlerSpec
from perch.config import AppConfig
from perch.routing.methods import Method
from perch.routing.route import NoMatch, Route, RouteMatch
from perch.routing.router import Registration, RouteBuilder, Router
from perch.server.handler import handle_request

logger = logging.getLogger("perch.server")


class App:
    """The perch application.

    Wraps a root ``Router`` built from the config's routing options and
    serves it over ASGI. Registration methods delegate to that router.

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check to ensure exactly
        one thread freezes the app, even when several ASGI workers call
        ``__call__()`` concurrently on the first request.
    """

    __slots__ = (
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        router: Router | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._router: Router = router or Router(
            case_sensitive=self.config.case_sensitive,
            strict=self.config.strict_slashes,
            regex_timeout=self.config.regex_timeout,
            name="app",
        )
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    @property
    def router(self) -> Router:
        return self._router

    # -- Route registration --

    def add(
        self,
        method: Method | str,
        path: Any,
        *handlers: HandlerSpec,
        name: str | None = None,
    ) -> Route:
        self._check_not_frozen()
        return self._router.add(method, path, *handlers, name=name)

    def get(self, path: Any, *handlers: HandlerSpec) -> Registration:
        self._check_not_frozen()
        return self._router.get(path, *handlers)

    def post(self, path: Any, *handlers: HandlerSpec) -> Registration:
        self._check_not_frozen()
        return self._router.post(path, *handlers)

    def put(self, path: Any, *handlers: HandlerSpec) -> Registration:
        self._check_not_frozen()
        return self._router.put(path, *handlers)

    def delete(self, path: Any, *handlers: HandlerSpec) -> Registration:
        self._check_not_frozen()
        return self._router.delete(path, *handlers)

    def patch(self, path: Any, *handlers: HandlerSpec) -> Registration:
        self._check_not_frozen()
        return self._router.patch(path, *handlers)

    def head(self, path: Any, *handlers: HandlerSpec) -> Registration:
        self._check_not_frozen()
        return self._router.head(path, *handlers)

    def options(self, path: Any, *handlers: HandlerSpec) -> Registration:
        self._check_not_frozen()
        return self._router.options(path, *handlers)

    def all(self, path: Any, *handlers: HandlerSpec) -> Registration:
        self._check_not_frozen()
        return self._router.all(path, *handlers)

    def route(self, path: Any) -> RouteBuilder:
        self._check_not_frozen()
        return self._router.route(path)

    def use(self, *args: Any) -> "App":
        """Mount a sub-router or middleware handlers. See ``Router.use``."""
        self._check_not_frozen()
        self._router.use(*args)
        return self

    def match(self, method: str, path: str) -> RouteMatch | NoMatch:
        """First route matching *method* and *path*, without running it."""
        return self._router.match(method, path)

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator.

        Keys are status codes (``404``) or exception classes. An exception
        class also catches its subclasses::

            @app.error(404)
            def not_found(request):
                return "Nothing here", 404
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Server --

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        app_path: str | None = None,
    ) -> None:
        """Freeze the app and serve it with pounce.

        ``config.debug`` turns on auto-reload with a single worker.

        Args:
            host: Override bind host.
            port: Override bind port.
            app_path: ``"module:attribute"`` import string used to reload
                the app when files change.
        """
        self._ensure_frozen()

        from perch.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            reload_dirs=self.config.reload_dirs,
            workers=self.config.workers,
            log_level=self.config.log_level,
            app_path=app_path,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan scopes directly, then delegates HTTP scopes to
        the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before first HTTP request), then
        runs registered startup/shutdown hooks and signals completion
        back to the server.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def startup(self) -> None:
        """Freeze the app and run the startup hooks in registration order."""
        self._ensure_frozen()
        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        """Run the shutdown hooks in registration order."""
        for hook in self._shutdown_hooks:
            await invoke(hook)

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._router.freeze()
            self._frozen = True
            logger.debug("App frozen with %d routes", len(self._router.routes))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, mounts, and hooks before calling app.run()."
            )
            raise RuntimeError(msg)
