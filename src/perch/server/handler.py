"""Request pipeline — middleware chain, routing, and error mapping.

``dispatch_request`` runs one application's pipeline over a ``Request``
and always returns a ``Response``. Mounted perch apps are entered here
too, with the request already rewritten by the enclosing ``Mount``.

``handle_request`` is the only place that touches raw ASGI: it builds
the ``Request`` from the scope and sends the resulting ``Response``.
"""

import inspect
from collections.abc import Callable
from contextvars import Token
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch.context import request_var
from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import AnyResponse, Next
from perch.routing.params import convert_param
from perch.routing.route import RouteMatch
from perch.routing.router import Router
from perch.server.errors import handle_http_error, handle_internal_error
from perch.server.negotiation import negotiate
from perch.server.sender import send_response


async def dispatch_request(
    request: Request,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Process a request through one application's full pipeline."""
    token: Token[Request] = request_var.set(request)

    try:
        # Innermost handler: route on what enclosing mounts left over
        async def dispatch(req: Request) -> AnyResponse:
            match = router.match(req.method, req.path_info)
            return await _invoke_handler(match, req)

        handler = dispatch
        for mw in reversed(middleware):
            outer = handler

            async def make_next(req: Request, _mw: Any = mw, _next: Next = outer) -> Response:
                return negotiate(await _mw(req, _next))

            handler = make_next

        return await handler(request)

    except HTTPError as exc:
        return await handle_http_error(exc, request, error_handlers, debug)
    except Exception as exc:
        return await handle_internal_error(exc, request, error_handlers, debug)
    finally:
        request_var.reset(token)


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    entry: Callable[[Request], Any],
) -> None:
    """Build a Request from the ASGI scope, run *entry*, send the result."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    response = await entry(request)
    await send_response(response, send, method=request.method)


async def _invoke_handler(match: RouteMatch, request: Request) -> AnyResponse:
    """Call the matched route handler, converting path params and return value."""
    handler = match.route.handler
    request.path_params = match.path_params

    kwargs = _build_handler_kwargs(handler, request, match.path_params, match.route.param_types)
    result = await invoke(handler, **kwargs)
    return negotiate(result)


def _build_handler_kwargs(
    handler: Callable[..., Any],
    request: Request,
    path_params: dict[str, str],
    param_types: dict[str, str],
) -> dict[str, Any]:
    """Inspect handler signature and build kwargs from request + path params.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. Path parameters (by name, converted to the annotated type, or by
       the route converter when unannotated)
    """
    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name in path_params:
            value = path_params[name]
            if param.annotation is not inspect.Parameter.empty:
                try:
                    kwargs[name] = param.annotation(value)
                except (ValueError, TypeError):
                    kwargs[name] = value
            else:
                kwargs[name] = convert_param(value, param_types.get(name, "str"))

    return kwargs
