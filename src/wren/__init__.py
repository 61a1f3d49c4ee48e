"""Wren — a small async router with a segment-trie core.

Routes map a method and a ``/``-separated path (``:name`` segments
capture) to a handler. Routers compose with ``merge()`` and ``nest()``,
run an ordered middleware pipeline, and fall back to uniform 404/500
responses. The App is an ASGI 3.0 callable served by pounce.

Basic usage::

    from wren import App

    app = App()

    @app.get("/hello/:name")
    def hello(name: str):
        return f"Hello, {name}!"

    app.run()
"""

import importlib

__version__ = "0.1.0-dev"

# public name -> module that defines it; imported on first attribute access
_EXPORTS = {
    "Abort": "wren.http.response",
    "App": "wren.app",
    "AppConfig": "wren.config",
    "ConfigurationError": "wren.errors",
    "HTTPError": "wren.errors",
    "Middleware": "wren.middleware.protocol",
    "NotFound": "wren.errors",
    "Request": "wren.http.request",
    "Response": "wren.http.response",
    "Router": "wren.routing.router",
    "StaticAssets": "wren.static",
    "Template": "wren.templating.returns",
    "WrenError": "wren.errors",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> object:
    module = _EXPORTS.get(name)
    if module is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    return getattr(importlib.import_module(module), name)
