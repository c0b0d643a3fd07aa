"""Route table for leaf applications.

Routes are matched against ``request.path_info``, so an application
mounted at ``/wiki`` declares ``/`` and ``/{page}``, never ``/wiki/...``.
Static routes are tried before parameterised ones; within each group,
registration order decides.
"""

from perch.errors import MethodNotAllowed, NotFound
from perch.routing.route import Route, RouteMatch


class Router:
    """Compiled router.

    Usage::

        router = Router()
        router.add(Route("/users", handler, frozenset({"GET"})))
        router.add(Route("/users/{id:int}", handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/users/42")
    """

    __slots__ = ("_compiled", "_routes", "_static")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._static: dict[str, list[Route]] = {}
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        self._routes.append(route)

    @property
    def routes(self) -> list[Route]:
        """All registered routes in registration order."""
        return list(self._routes)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        static: dict[str, list[Route]] = {}
        for route in self._routes:
            if route.is_static:
                static.setdefault(route.path, []).append(route)
        self._static = static
        self._routes.sort(key=lambda r: not r.is_static)
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against compiled routes.

        An empty path (the bare prefix of a mount with redirects disabled)
        matches as ``/``.

        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        path = path or "/"
        allowed: set[str] = set()

        for route in self._static.get(path, ()):
            if method in route.methods:
                return RouteMatch(route=route, path_params={})
            allowed |= route.methods

        for route in self._routes:
            if route.is_static:
                continue
            m = route.pattern.match(path)
            if m is None:
                continue
            if method in route.methods:
                return RouteMatch(route=route, path_params=m.groupdict())
            allowed |= route.methods

        if allowed:
            raise MethodNotAllowed(frozenset(allowed))
        raise NotFound(f"No route matches {method} {path!r}")
