"""Development server — a single pounce worker around the live App.

``pounce.run()`` wants an import string; wren already holds the App
object, so this builds a ``pounce.Server`` around it directly.
"""


def run_dev_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    reload_include: tuple[str, ...] = (),
    reload_dirs: tuple[str, ...] = (),
    app_path: str | None = None,
) -> None:
    """Serve *app* on *host*:*port* until interrupted.

    Args:
        app: The frozen wren App (any ASGI callable works).
        host: Bind address.
        port: Bind port.
        reload: Restart on file changes (``AppConfig.debug``).
        reload_include: Extra extensions the reloader watches, e.g.
            ``(".html", ".css")`` for templates and static assets.
        reload_dirs: Directories watched in addition to the cwd.
        app_path: ``"module:attribute"``. Lets the reloader re-import
            the app after a change instead of reusing the stale object.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    server = Server(
        ServerConfig(
            host=host,
            port=port,
            workers=1,
            reload=reload,
            reload_include=reload_include,
            reload_dirs=reload_dirs,
        ),
        app,
        app_path=app_path,
    )
    server.run()
