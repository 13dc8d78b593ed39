"""
=============================================================================
URL ROUTER
=============================================================================

Ordered route table with first-match-wins dispatch.

Supported patterns:
- Static paths:   /user-agent, /
- Wildcard tail:  /echo/*text, /files/*name
- Method filter:  a route may accept one method or any method

=============================================================================
PATTERN MATCHING
=============================================================================

Routes are compiled to regexes once, at registration time:

    Pattern:  /files/*name
                 │     │
                 ▼     ▼
    Regex:    /files/(?P<name>.*)
                     ───────────
                     captures the rest of the path, slashes included

The request path is matched exactly as received. There is no trailing
slash stripping or percent-decoding, so "/echo/a/b/" captures "a/b/".

=============================================================================
DISPATCH ORDER
=============================================================================

    for route in routes (registration order):
        path matches and method matches?  → call handler, done
    some route matches the path only?     → 405, Allow: <its methods>
    nothing matches                       → 404

Because the patterns the server registers never overlap, checking for 405
after the full scan gives the same answer as checking route by route.

=============================================================================
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .request import HTTPRequest
from .response import HTTPResponse, method_not_allowed, not_found


# Handler receives the request and the parameters captured from the path.
Handler = Callable[[HTTPRequest, Dict[str, str]], HTTPResponse]


@dataclass
class Route:
    """
    A registered route.

        Route(
            path="/files/*name",     # URL pattern
            method="GET",            # None = any method
            handler=read_file,
            _pattern=<compiled>,
            _param_names=["name"],
        )
    """

    path: str
    method: Optional[str]
    handler: Handler
    name: Optional[str] = None

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)
    _param_names: List[str] = field(default_factory=list, repr=False)


@dataclass
class RouteMatch:
    """Result of a successful match: the route plus captured parameters."""

    route: Route
    params: Dict[str, str]


class Router:
    """
    HTTP request router.

    Routes are registered with add_route() or the decorators:

        router = Router()

        @router.get("/files/*name")
        def read_file(request, params):
            ...

        @router.route("/")
        def root(request, params):
            return ok()

    Registration order is priority order.
    """

    def __init__(self):
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route at the lowest priority so far.

        Args:
            path: URL pattern (static, or with a trailing *wildcard)
            handler: Called as handler(request, params)
            method: HTTP method, or None for any method
            name: Optional label, shown in logs

        Returns:
            The registered Route.
        """
        pattern, param_names = self._compile_pattern(path)
        route = Route(
            path=path,
            method=method.upper() if method else None,
            handler=handler,
            name=name or getattr(handler, "__name__", None),
            _pattern=pattern,
            _param_names=param_names,
        )
        self._routes.append(route)
        return route

    def _compile_pattern(self, path: str) -> tuple[re.Pattern, List[str]]:
        """
        Compile a path pattern into a regex.

        Input:  "/echo/*text"
        Output: re.compile("/echo/(?P<text>.*)"), ["text"]

        A *wildcard must be the last segment. Static segments are escaped.
        """
        param_names: List[str] = []
        regex_parts: List[str] = []

        segments = path.split("/")[1:]  # pattern always starts with "/"
        for i, segment in enumerate(segments):
            regex_parts.append("/")
            if segment.startswith("*"):
                if i != len(segments) - 1:
                    raise ValueError(f"Wildcard must be the last segment: {path}")
                param_name = segment[1:] or "wildcard"
                param_names.append(param_name)
                regex_parts.append(f"(?P<{param_name}>.*)")
            else:
                regex_parts.append(re.escape(segment))

        pattern = re.compile("".join(regex_parts), re.DOTALL)
        return pattern, param_names

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching both method and path.

        Returns:
            RouteMatch if found, None otherwise.
        """
        for route in self._routes:
            if route.method and route.method != method:
                continue
            m = route._pattern.fullmatch(path)
            if m:
                return RouteMatch(route=route, params=m.groupdict())
        return None

    def get_allowed_methods(self, path: str) -> List[str]:
        """
        Methods accepted by the routes whose pattern matches `path`.

        Used for the Allow header on 405 responses. Returns [] when no
        route matches the path at all.
        """
        methods = set()
        for route in self._routes:
            if route.method and route._pattern.fullmatch(path):
                methods.add(route.method)
        return sorted(methods)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        Returns:
            The handler's response, a 405 when only the method is wrong,
            or a 404 when nothing matches.
        """
        match = self.match(request.method, request.path)
        if match:
            return match.route.handler(request, match.params)

        allowed = self.get_allowed_methods(request.path)
        if allowed:
            return method_not_allowed(allowed)

        return not_found()

    # =========================================================================
    # DECORATOR-STYLE ROUTE REGISTRATION
    # =========================================================================

    def route(
        self,
        path: str,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """
        Decorator for registering routes. method=None accepts any method.
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method, name)
            return handler
        return decorator

    def get(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, "GET", name)

    def post(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(path, "POST", name)
