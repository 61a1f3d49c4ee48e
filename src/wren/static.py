"""Static assets — one GET route per file under a directory.

The directory is walked once, when ``register()`` is called, and each
file gets its own route in the router's tree. File contents are read
per request, so edits show up without re-registering; a file deleted
after registration answers 404.

Usage::

    assets = StaticAssets("static")            # /static/css/site.css, ...
    app = App(static=assets)

    # or on any router
    StaticAssets("public", prefix="/").register(router)
"""

import logging
from pathlib import Path

from wren.errors import ConfigurationError, NotFound
from wren.http.response import Response
from wren.routing.router import Router

logger = logging.getLogger("wren.static")

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES: dict[str, str] = {
    ".css": "text/css",
    ".js": "application/javascript",
    ".mjs": "application/javascript",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".avif": "image/avif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".html": "text/html; charset=utf-8",
}


def content_type_for(path: str | Path) -> str:
    """Content type for a file, by extension (case-insensitive)."""
    return CONTENT_TYPES.get(Path(path).suffix.lower(), DEFAULT_CONTENT_TYPE)


class StaticAssets:
    """Registers every file below *directory* as a GET route.

    Routes live at ``prefix + "/" + relative posix path``. Files whose
    path has a segment starting with ``:`` are skipped, since that
    segment would register as a capture.
    """

    __slots__ = ("_cache_control", "_directory", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/static",
        *,
        cache_control: str = "public, max-age=3600",
    ) -> None:
        self._directory = Path(directory).resolve()
        if not self._directory.is_dir():
            msg = f"Static directory {str(directory)!r} does not exist or is not a directory."
            raise ConfigurationError(msg)
        self._cache_control = cache_control

        # Normalize prefix: ensure leading slash, strip trailing.
        # Root prefix "/" normalizes to "".
        stripped = "/" + prefix.strip("/")
        self._prefix = stripped if stripped != "/" else ""

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def prefix(self) -> str:
        return self._prefix

    def files(self) -> list[Path]:
        """Every regular file below the directory, sorted."""
        return sorted(p for p in self._directory.rglob("*") if p.is_file())

    def url_for(self, file_path: Path) -> str:
        """The route path a file is served at."""
        return f"{self._prefix}/{file_path.relative_to(self._directory).as_posix()}"

    def register(self, router: Router) -> int:
        """Add one GET route per file to *router*. Returns the count."""
        count = 0
        for file_path in self.files():
            url = self.url_for(file_path)
            if any(part.startswith(":") for part in url.split("/")):
                logger.warning("Skipping static file %s: ':' would start a capture", file_path)
                continue
            router.add_route("GET", url, self._make_handler(file_path, url))
            count += 1
        logger.info(
            "Registered %d static assets from %s under %s",
            count,
            self._directory,
            self._prefix or "/",
        )
        return count

    def _make_handler(self, file_path: Path, url: str):
        content_type = content_type_for(file_path)
        cache_control = self._cache_control

        def serve_static_file() -> Response:
            if not file_path.is_file():
                logger.warning("Static file %s vanished after registration", file_path)
                raise NotFound()
            body = file_path.read_bytes()
            logger.debug("Serving %s (%d bytes, %s)", url, len(body), content_type)
            return Response(body=body, content_type=content_type).with_header(
                "Cache-Control", cache_control
            )

        serve_static_file.__qualname__ = f"static {url}"
        return serve_static_file
