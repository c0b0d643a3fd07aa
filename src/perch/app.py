"""Perch application class.

Mutable during setup (routes, mounts, middleware, error handlers).
Frozen at runtime when app.run(), __call__() or handle() is first invoked.
"""

from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.types import ErrorHandler, Handler
from perch.config import AppConfig
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.mount import Mount, MountPoint, MountRegistry
from perch.middleware.protocol import Middleware
from perch.reverse import ReverseIndex, resolve_path, url_for
from perch.routing.route import Route
from perch.routing.router import Router
from perch.server.handler import dispatch_request, handle_request

logger = logging.getLogger("perch.server")


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    path: str
    handler: Handler
    methods: list[str] | None
    name: str | None


class App:
    """The perch application.

    An App is both a root ASGI application and a mountable one: another
    App can ``mount()`` it at a path or host, and requests reach it
    through ``handle()`` with ``script_name``/``path_info`` already
    rewritten.

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the app, even when several workers hit the first
        request concurrently.
    """

    __slots__ = (
        "__weakref__",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_mounts",
        "_pending_routes",
        # Compiled state (populated by _freeze)
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
        "name",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        name: str | None = None,
        reverse_index: ReverseIndex | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self.name = name
        self._pending_routes: list[_PendingRoute] = []
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._mounts = MountRegistry(self, index=reverse_index)
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<App{label} routes={len(self._pending_routes)} mounts={len(self._mounts)}>"

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Paths are relative to wherever this app ends up mounted.

        Args:
            path: URL path pattern. Use ``{param}`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
            name: Optional route name.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(_PendingRoute(path, func, methods, name))
            return func

        return decorator

    # -- Mounting --

    def mount(self, spec: Any, target: Any, *, no_redirect: bool = False) -> MountPoint:
        """Mount another application under a path prefix and/or host.

        *spec* is a path (``"/wiki"``), a mapping with ``path`` and/or
        ``host`` keys, or a ``MountSpec``. An empty spec mounts *target*
        for every request that reaches this app's mounts.

        *target* is a perch ``App``, any callable ``(request) -> response``,
        or an import string ``"package.module:attribute"``.

        Unless *no_redirect* is set, a ``GET`` for the bare prefix is
        redirected to the trailing-slash form.

        Raises:
            MissingSpecError: If *spec* has an unsupported shape.
            TargetResolutionError: If an import string cannot be resolved.
        """
        self._check_not_frozen()
        return self._mounts.register(spec, target, no_redirect=no_redirect)

    @property
    def mounts(self) -> MountRegistry:
        """This app's mount table, most specific first."""
        return self._mounts

    def resolve_path(self) -> str:
        """The URI path this app is mounted at (``""`` for a root app)."""
        return resolve_path(self, index=self._mounts.index)

    def url_for(self, path: str = "") -> str:
        """Absolute URL path for *path* inside this app."""
        return url_for(self, path, index=self._mounts.index)

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline.

        User middleware always runs outside the mount dispatcher, so it
        sees every request, mounted or not.
        """
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup.
        Hooks of mounted perch apps run after their parent's.
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

        Args:
            host: Override bind host.
            port: Override bind port.
            app_path: Import string for reloads in debug mode.
        """
        self._ensure_frozen()

        from perch.server.serve import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            app_path=app_path,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan directly, then delegates HTTP scopes to the
        request pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        await handle_request(scope, receive, send, entry=self.handle)

    async def handle(self, request: Request) -> Response:
        """Run this app's pipeline over an already-built request.

        Entry point for mounted apps: the enclosing ``Mount`` has moved
        its prefix onto ``request.script_name``.
        """
        self._ensure_frozen()
        assert self._router is not None

        return await dispatch_request(
            request,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before the first HTTP request), then
        runs startup/shutdown hooks and signals completion to the server.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def startup(self) -> None:
        """Run startup hooks of this app, then of every mounted perch app."""
        for app in self._walk_apps():
            app._ensure_frozen()
            await app._run_hooks(app._startup_hooks)

    async def shutdown(self) -> None:
        """Run shutdown hooks, mounted apps first, this app last."""
        for app in reversed(self._walk_apps()):
            await app._run_hooks(app._shutdown_hooks)

    # -- Internal --

    def _walk_apps(self) -> list[App]:
        """This app and all perch apps mounted below it, each once."""
        seen: set[int] = set()
        order: list[App] = []
        stack: list[App] = [self]
        while stack:
            app = stack.pop()
            if id(app) in seen:
                continue
            seen.add(id(app))
            order.append(app)
            children = [p.target for p in app._mounts if isinstance(p.target, App)]
            stack.extend(reversed(children))
        return order

    @staticmethod
    async def _run_hooks(hooks: list[Callable[..., Any]]) -> None:
        for hook in hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # 1. Compile route table
        router = Router()
        for pending in self._pending_routes:
            methods = frozenset(m.upper() for m in (pending.methods or ["GET"]))
            router.add(Route(pending.path, pending.handler, methods, pending.name))
        router.compile()
        self._router = router

        # 2. Capture middleware as an immutable tuple; mounts dispatch innermost
        middleware_list: list[Callable[..., Any]] = list(self._middleware_list)
        if self._mounts:
            middleware_list.append(
                Mount(self._mounts, redirect_status=self.config.redirect_status)
            )
        self._middleware = tuple(middleware_list)

        self._frozen = True
        logger.debug(
            "froze %r: %d routes, %d mounts, %d middleware",
            self,
            len(router.routes),
            len(self._mounts),
            len(self._middleware),
        )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, mounts, and middleware before calling app.run()."
            )
            raise RuntimeError(msg)
