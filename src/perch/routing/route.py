"""Route, Mount, and match-result frozen dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from perch._internal.types import Handler
from perch.routing.methods import Method
from perch.routing.pattern import PatternSpec

if TYPE_CHECKING:
    from perch.routing.router import Router


@dataclass(frozen=True, slots=True)
class Route:
    """A registered route: method, compiled path pattern, handler chain.

    Created by the router at registration time and never modified.
    """

    method: Method
    path: str
    pattern: PatternSpec
    handlers: tuple[Handler, ...]
    name: str | None = None

    def describe(self) -> str:
        """Human-readable ``METHOD path`` label."""
        return f"{self.method} {self.path}"


@dataclass(frozen=True, slots=True)
class Mount:
    """A path prefix delegated to a sub-router or a middleware chain.

    Exactly one of ``router`` and ``handlers`` is set. ``pattern`` is
    compiled with ``end=False`` so it matches whole leading segments.
    """

    prefix: str
    pattern: PatternSpec
    router: Router | None = None
    handlers: tuple[Handler, ...] = ()
    route: Route | None = None  # synthetic ALL route yielded for middleware mounts


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match.

    ``remaining_path`` is the path as the owning router saw it, after
    every mount prefix on the way down was stripped. ``mount_path`` is
    the concatenation of those prefixes.
    """

    route: Route
    params: dict[str, str]
    mount_path: str = ""
    remaining_path: str = "/"

    @property
    def handlers(self) -> tuple[Handler, ...]:
        return self.route.handlers


@dataclass(frozen=True, slots=True)
class NoMatch:
    """No route satisfied the request. A result, never raised."""

    method: str = ""
    path: str = ""

    def __bool__(self) -> bool:
        return False
