"""Handler chains — explicit outcomes instead of ``next()`` callbacks.

A route owns an ordered tuple of handlers. Each handler returns what
should happen next:

- ``CONTINUE`` — run the next handler of the same route.
- ``SKIP_ROUTE`` — abandon this route; the dispatcher resumes matching
  at the next route that also matches the request.
- ``Failure(exc)`` — stop and hand *exc* to the error handlers. Raising
  has the same effect.
- anything else — the response. It is negotiated into a ``Response``
  and ends the request.

A chain that runs out of handlers ends in ``CONTINUE``, which the
dispatcher treats like ``SKIP_ROUTE``: the next matching route gets
the request.

Usage::

    def log(request: Request):
        logger.info("%s %s", request.method, request.path)
        return CONTINUE

    def only_admins(request: Request):
        if request.params["id"] != "0":
            return SKIP_ROUTE
        return CONTINUE

    router.get("/user/:id", log, only_admins, lambda id: f"admin {id}")
"""

import inspect
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Final, TypeAlias

from perch._internal.invoke import invoke
from perch._internal.types import Handler
from perch.errors import ChainError
from perch.http.request import Request
from perch.http.response import Response
from perch.server.negotiation import negotiate

logger = logging.getLogger("perch.routing")


@dataclass(frozen=True, slots=True)
class Continue:
    """Run the next handler in the chain."""


@dataclass(frozen=True, slots=True)
class SkipRoute:
    """Skip the rest of this route's chain and try the next matching route."""


@dataclass(frozen=True, slots=True)
class Terminal:
    """The chain produced a response."""

    response: Response


@dataclass(frozen=True, slots=True)
class Failure:
    """The chain failed; *error* goes to the error handlers."""

    error: Exception


CONTINUE: Final = Continue()
SKIP_ROUTE: Final = SkipRoute()

Outcome: TypeAlias = Continue | SkipRoute | Terminal | Failure


def handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


def build_handler_kwargs(handler: Handler, request: Request) -> dict[str, Any]:
    """Inspect handler signature and build kwargs from the request.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. Route parameters (by name, converted to the annotation if possible)

    Parameters matching neither are left to their defaults.
    """
    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name in request.params:
            value = request.params[name]
            if param.annotation is not inspect.Parameter.empty:
                try:
                    kwargs[name] = param.annotation(value)
                except (ValueError, TypeError):
                    kwargs[name] = value
            else:
                kwargs[name] = value

    return kwargs


def to_outcome(value: Any, handler: Handler) -> Outcome:
    """Map a handler's return value to an ``Outcome``."""
    match value:
        case Continue() | SkipRoute() | Terminal() | Failure():
            return value
        case None:
            msg = (
                f"Handler {handler_name(handler)} returned None. Return a response, "
                "CONTINUE, SKIP_ROUTE, or Failure(...)."
            )
            return Failure(ChainError(msg))
    try:
        return Terminal(negotiate(value))
    except TypeError as exc:
        return Failure(exc)


async def call_handler(handler: Handler, request: Request) -> Outcome:
    """Call one handler, turning raised exceptions into ``Failure``."""
    try:
        kwargs = build_handler_kwargs(handler, request)
        result = await invoke(handler, **kwargs)
    except Exception as exc:
        return Failure(exc)
    return to_outcome(result, handler)


async def run_chain(handlers: Sequence[Handler], request: Request) -> Outcome:
    """Run *handlers* in order, each at most once.

    Stops at the first outcome that is not ``CONTINUE`` and returns it.
    An exhausted chain returns ``CONTINUE``.
    """
    for handler in handlers:
        outcome = await call_handler(handler, request)
        if not isinstance(outcome, Continue):
            logger.debug(
                "%s %s: %s ended the chain with %s",
                request.method,
                request.original_path,
                handler_name(handler),
                type(outcome).__name__,
            )
            return outcome
    return CONTINUE
