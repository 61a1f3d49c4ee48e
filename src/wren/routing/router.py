"""Router — route tree, middleware list, and fallback handlers.

Routes go straight into the tree as they are registered. Routers
compose: ``merge()`` unions another router's routes into this one and
``nest()`` mounts them under a path prefix. Only routes travel; the
other router's middleware and fallback handlers stay where they are.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from wren._internal.types import ErrorHandler, Handler
from wren.config import DEFAULT_MAX_BODY_SIZE
from wren.errors import ConfigurationError
from wren.middleware.protocol import Middleware
from wren.routing.body import json_body
from wren.routing.route import Route, RouteMatch
from wren.routing.tree import RouteTree, handler_name

logger = logging.getLogger("wren.routing")


class Router:
    """A composable set of routes plus the policies that wrap them.

    Usage::

        api = Router()

        @api.get("/items/:id")
        def get_item(id: int) -> dict:
            return {"id": id}

        @api.post("/items", max_body_size=4096)
        async def create_item(body: dict) -> tuple[dict, int]:
            return body, 201

        app.nest("/api", api)
    """

    __slots__ = (
        "_error_handler",
        "_middleware_list",
        "_not_found_handler",
        "_tree",
        "max_body_size",
    )

    def __init__(
        self,
        *,
        strict_captures: bool = True,
        backtracking: bool = False,
        max_body_size: int = DEFAULT_MAX_BODY_SIZE,
    ) -> None:
        self._tree = RouteTree(strict_captures=strict_captures, backtracking=backtracking)
        self._middleware_list: list[Middleware] = []
        self._not_found_handler: ErrorHandler | None = None
        self._error_handler: ErrorHandler | None = None
        self.max_body_size = max_body_size

    # -- Route registration --

    def add_route(self, method: str, path: str, handler: Handler) -> None:
        """Register *handler* for one method and path.

        The method is upper-cased. Registering the same method and path
        again replaces the earlier handler.
        """
        self._check_not_frozen()
        if not method:
            msg = f"Route {path!r} needs an HTTP method."
            raise ConfigurationError(msg)
        if not path.startswith("/"):
            msg = f"Route path {path!r} must start with '/'."
            raise ConfigurationError(msg)
        method = method.upper()
        self._tree.insert(method, path, handler)
        logger.debug("Registered %s %s -> %s", method, path, handler_name(handler))

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path. Use ``:name`` for capture segments.
            methods: HTTP methods. Defaults to ``["GET"]``.
        """

        def decorator(func: Handler) -> Handler:
            for method in methods or ["GET"]:
                self.add_route(method, path, func)
            return func

        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        """Register a GET handler via decorator."""
        return self.route(path, methods=["GET"])

    def put(self, path: str) -> Callable[[Handler], Handler]:
        """Register a PUT handler via decorator."""
        return self.route(path, methods=["PUT"])

    def patch(self, path: str) -> Callable[[Handler], Handler]:
        """Register a PATCH handler via decorator."""
        return self.route(path, methods=["PATCH"])

    def delete(self, path: str) -> Callable[[Handler], Handler]:
        """Register a DELETE handler via decorator."""
        return self.route(path, methods=["DELETE"])

    def post(
        self,
        path: str,
        *,
        max_body_size: int | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a JSON payload handler via decorator.

        The tree stores a wrapper that checks ``Content-Type``, caps the
        body at *max_body_size* bytes (the router default when omitted),
        parses it as JSON and passes the result as the handler's
        ``body`` argument. The decorated function is returned unchanged.
        """
        limit = self.max_body_size if max_body_size is None else max_body_size

        def decorator(func: Handler) -> Handler:
            self.add_route("POST", path, json_body(func, limit))
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Append a middleware to the pipeline."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    def use(self, middleware: Middleware) -> Middleware:
        """Decorator form of ``add_middleware``."""
        self.add_middleware(middleware)
        return middleware

    # -- Fallback handlers --

    def not_found(self, func: ErrorHandler) -> ErrorHandler:
        """Register the handler for requests no route matches.

        The handler may accept zero args, ``(request)`` or
        ``(request, exc)``. A plain return value is sent with status 404.
        """
        self._check_not_frozen()
        self._not_found_handler = func
        return func

    def on_error(self, func: ErrorHandler) -> ErrorHandler:
        """Register the handler for unexpected faults.

        Receives ``(request, exc)`` (or fewer args). A plain return value
        is sent with status 500.
        """
        self._check_not_frozen()
        self._error_handler = func
        return func

    # -- Composition --

    def merge(self, other: Router) -> None:
        """Union *other*'s routes into this router; theirs win on collision."""
        self._check_not_frozen()
        self._tree.merge(other._tree)
        logger.debug("Merged %d routes", len(other._tree.routes()))

    def nest(self, prefix: str, other: Router) -> None:
        """Mount *other*'s routes under *prefix*. *other* is not modified."""
        self._check_not_frozen()
        self._tree.nest(prefix, other._tree)
        logger.debug("Nested %d routes under %s", len(other._tree.routes()), prefix)

    # -- Lookup & introspection --

    def find(self, method: str, path: str) -> RouteMatch | None:
        """Look up a handler. ``None`` covers both unknown path and method."""
        return self._tree.find(method, path)

    @property
    def tree(self) -> RouteTree:
        return self._tree

    @property
    def routes(self) -> list[Route]:
        """Every registered route, flattened."""
        return self._tree.routes()

    @property
    def middleware(self) -> tuple[Middleware, ...]:
        return tuple(self._middleware_list)

    @property
    def not_found_handler(self) -> ErrorHandler | None:
        return self._not_found_handler

    @property
    def error_handler(self) -> ErrorHandler | None:
        return self._error_handler

    def format_tree(self) -> str:
        """Indented dump of the route tree."""
        return self._tree.format()

    def freeze(self) -> None:
        """Stop accepting registrations. Lookups keep working."""
        self._tree.freeze()

    # -- Internal --

    def _check_not_frozen(self) -> None:
        if self._tree.frozen:
            msg = (
                "Cannot modify the router after it has started serving requests. "
                "Register routes, middleware, and handlers before serving."
            )
            raise RuntimeError(msg)

