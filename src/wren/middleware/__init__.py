"""Middleware — plain callables run in order before the route lookup.

A middleware is any callable matching::

    def mw(request: Request) -> None
    async def mw(request: Request) -> None

Register with ``router.add_middleware(mw)`` or ``@router.use``.
"""

from wren.middleware.protocol import Middleware

__all__ = ["Middleware"]
