"""App settings, fixed once the App is built."""

from dataclasses import dataclass
from pathlib import Path

DEFAULT_MAX_BODY_SIZE = 1024 * 1024


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Every knob the App reads, with working defaults.

    ::

        App(AppConfig(debug=True, port=3000, max_body_size=64 * 1024))

    ``debug`` turns on template auto-reload and makes ``run()`` start the
    pounce reloader, which also watches ``reload_dirs`` and files ending
    in ``reload_include``.
    """

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    reload_include: tuple[str, ...] = ()
    reload_dirs: tuple[str, ...] = ()

    # kida
    template_dir: str | Path = "templates"
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True

    # default cap for post() payload routes, in bytes
    max_body_size: int = DEFAULT_MAX_BODY_SIZE

    # raise ConfigurationError when two routes name the same capture differently
    strict_captures: bool = True
    # fall back to other branches when the literal-first path dead-ends
    route_backtracking: bool = False
