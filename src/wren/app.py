"""The wren App — a Router that is also an ASGI application.

Everything is registered during setup: routes, middleware, template
extras and lifespan hooks. The first ASGI call (or lifespan startup, or
``run()``) seals the app. Sealing freezes the route tree, snapshots the
middleware list and builds the kida environment; any registration after
that raises ``RuntimeError``.
"""

import inspect
import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from kida import Environment, FileSystemLoader

from wren._internal.asgi import Receive, Scope, Send
from wren.config import AppConfig
from wren.middleware.protocol import Middleware
from wren.routing.router import Router
from wren.server.handler import handle_request
from wren.static import StaticAssets

logger = logging.getLogger("wren.server")

Decorator = Callable[[Callable[..., Any]], Callable[..., Any]]


class App(Router):
    """Router plus config, templates, lifespan hooks and the ASGI entry point.

    Usage::

        app = App(AppConfig(template_dir="views"), static=StaticAssets("static"))

        @app.get("/")
        def index():
            return Template("index.html", continents=CONTINENTS)

        app.nest("/api", api)
        app.run()

    Sealing takes a lock and re-checks the flag inside it, so several
    workers hitting a fresh app at once still seal it exactly once.
    """

    __slots__ = (
        "_env",
        "_env_override",
        "_filters",
        "_globals",
        "_hooks",
        "_pipeline",
        "_seal_lock",
        "_sealed",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        static: StaticAssets | None = None,
        kida_env: Environment | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        super().__init__(
            strict_captures=self.config.strict_captures,
            backtracking=self.config.route_backtracking,
            max_body_size=self.config.max_body_size,
        )
        self._filters: dict[str, Callable[..., Any]] = {}
        self._globals: dict[str, Any] = {}
        self._hooks: dict[str, list[Callable[..., Any]]] = {"startup": [], "shutdown": []}
        self._env_override = kida_env

        self._sealed = False
        self._seal_lock = threading.Lock()
        self._pipeline: tuple[Middleware, ...] = ()
        self._env: Environment | None = None

        if static is not None:
            static.register(self)

    def mount_static(self, directory: str | Path, prefix: str = "/static") -> StaticAssets:
        """Register one GET route per file under *directory*."""
        assets = StaticAssets(directory, prefix)
        assets.register(self)
        return assets

    # -- Templates --

    def template_filter(self, name: str | None = None) -> Decorator:
        """Register a kida filter, named after the function by default."""
        return self._template_extra(self._filters, name)

    def template_global(self, name: str | None = None) -> Decorator:
        """Register a kida global, named after the function by default."""
        return self._template_extra(self._globals, name)

    def _template_extra(self, store: dict[str, Any], name: str | None) -> Decorator:
        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            store[name or func.__name__] = func
            return func

        return decorator

    @property
    def template_filters(self) -> dict[str, Callable[..., Any]]:
        return dict(self._filters)

    @property
    def template_globals(self) -> dict[str, Any]:
        return dict(self._globals)

    @property
    def kida_env(self) -> Environment | None:
        """The template environment; ``None`` until the app is sealed."""
        return self._env

    def _build_environment(self) -> Environment:
        env = self._env_override
        if env is None:
            cfg = self.config
            env = Environment(
                loader=FileSystemLoader(str(cfg.template_dir)),
                autoescape=cfg.autoescape,
                auto_reload=cfg.debug,
                trim_blocks=cfg.trim_blocks,
                lstrip_blocks=cfg.lstrip_blocks,
            )
        if self._filters:
            env.update_filters(self._filters)
        for name, value in self._globals.items():
            env.add_global(name, value)
        return env

    # -- Lifespan --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Run *func* (sync or async) at startup, before any request."""
        self._check_not_frozen()
        self._hooks["startup"].append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Run *func* (sync or async) at shutdown."""
        self._check_not_frozen()
        self._hooks["shutdown"].append(func)
        return func

    async def startup(self) -> None:
        """Seal the app, then run startup hooks in registration order."""
        self.seal()
        await self._run_hooks("startup")

    async def shutdown(self) -> None:
        await self._run_hooks("shutdown")

    async def _run_hooks(self, phase: str) -> None:
        for hook in self._hooks[phase]:
            result = hook()
            if inspect.isawaitable(result):
                await result

    # -- Serving --

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        app_path: str | None = None,
    ) -> None:
        """Seal the app and serve it with the pounce development server.

        *host* and *port* override the config. *app_path* is the
        ``"module:attribute"`` string the reloader re-imports in debug mode.
        """
        self.seal()

        from wren.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            reload_include=self.config.reload_include,
            reload_dirs=self.config.reload_dirs,
            app_path=app_path,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        ``lifespan`` scopes drive ``startup()``/``shutdown()``; ``http``
        scopes go through the request pipeline. Other scope types are
        ignored.
        """
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return

        self.seal()
        await handle_request(
            scope,
            receive,
            send,
            router=self,
            middleware=self._pipeline,
            kida_env=self._env,
        )

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()

            if message["type"] == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif message["type"] == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Sealing --

    @property
    def frozen(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """Freeze routes, snapshot middleware and build templates. Idempotent."""
        if self._sealed:
            return
        with self._seal_lock:
            if self._sealed:
                return
            self._pipeline = self.middleware
            self._env = self._build_environment()
            self.freeze()
            self._sealed = True
        logger.debug("App sealed with %d routes", len(self.routes))
