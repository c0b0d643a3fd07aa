"""Shared type aliases used across perch modules."""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from perch.http.request import Request

# Route handler: user-defined function with variable signature
Handler: TypeAlias = Callable[..., Any]

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]

# A mountable application: takes the (rewritten) request, returns a response
Application: TypeAlias = Callable[["Request"], Awaitable[Any]]
