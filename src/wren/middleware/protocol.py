"""Middleware protocol.

A middleware is any callable matching::

    def my_mw(request: Request) -> None: ...
    async def my_mw(request: Request) -> None: ...

No base class required. The framework checks the shape, not the lineage.

Middleware run in registration order before the route lookup. Each one
finishes (and is awaited, when async) before the next starts. They can
stash values in ``request.state`` and queue outgoing headers on
``request.response_headers``. Return values are ignored; raising stops
the pipeline and hands the exception to the central error handling.
"""

from collections.abc import Awaitable
from typing import Protocol

from wren.http.request import Request


class Middleware(Protocol):
    """Protocol for wren middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def load_user(request: Request) -> None:
            request.state["user"] = await users.lookup(request.headers.get("x-user"))

        # Class middleware
        class RequireToken:
            def __call__(self, request: Request) -> None:
                if request.headers.get("x-token") != self.token:
                    raise HTTPError(401, "Unauthorized")
    """

    def __call__(self, request: Request) -> Awaitable[None] | None: ...
