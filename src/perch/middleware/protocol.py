"""The middleware contract.

Every layer of a perch pipeline, the built-in ``Mount`` dispatcher
included, is an async callable taking the request and the rest of the
chain::

    async def layer(request: Request, next: Next) -> Response: ...

Plain functions and objects with ``__call__`` both qualify; nothing
has to subclass anything.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from perch.http.request import Request
from perch.http.response import Response

# What a layer hands back up the chain
AnyResponse: TypeAlias = Response

# The remainder of the chain below the current layer
Next: TypeAlias = Callable[[Request], Awaitable[AnyResponse]]


class Middleware(Protocol):
    """Structural type for pipeline layers.

    A layer may answer the request itself, pass it on, or pass it on and
    adjust what comes back::

        async def server_header(request: Request, next: Next) -> AnyResponse:
            response = await next(request)
            return response.with_header("Server", "perch")

        class OnlyHost:
            def __init__(self, host: str) -> None:
                self.host = host

            async def __call__(self, request: Request, next: Next) -> AnyResponse:
                if request.host != self.host:
                    return Response("wrong host", status=421)
                return await next(request)

    Layers run outside-in in registration order; the mount dispatcher is
    always innermost.
    """

    async def __call__(self, request: Request, next: Next) -> AnyResponse: ...
