"""PathSegment, Route and RouteMatch frozen dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Literal:  ``users``  (is_capture=False)
    Capture:  ``:id``    (is_capture=True, name="id")
    """

    value: str
    is_capture: bool = False
    name: str = ""

    @property
    def token(self) -> str:
        """The segment as it is written in a route path."""
        return f":{self.name}" if self.is_capture else self.value


@dataclass(frozen=True, slots=True)
class Route:
    """One registered (method, path, handler) triple.

    Produced by flattening a route tree; the path carries regenerated
    ``:name`` tokens for every capture on the way down.
    """

    method: str
    path: str
    handler: Callable[..., Any]


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful lookup."""

    method: str
    handler: Callable[..., Any]
    path_params: dict[str, str]
