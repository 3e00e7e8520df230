"""Shared type aliases used across perch modules."""

from collections.abc import Callable, Iterable
from typing import Any, TypeAlias

# Route handler: user-defined function with variable signature
Handler: TypeAlias = Callable[..., Any]

# What registration methods accept: handlers, or (nested) lists of handlers
HandlerSpec: TypeAlias = Handler | Iterable[Any]

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]
