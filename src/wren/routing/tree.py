"""Route tree — segment trie with literal-over-capture matching.

Each node holds a per-method handler map, literal children keyed by
segment, and at most one capture child. Routes are inserted during
setup; the tree is frozen before it serves requests.

Lookup is greedy by default: at every depth an exact literal child
wins over the capture child and the walk never revisits that choice.
Trees built with ``backtracking=True`` retry the capture branch when
the literal branch fails to produce a handler.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any

from wren.errors import ConfigurationError
from wren.routing.route import PathSegment, Route, RouteMatch

logger = logging.getLogger("wren.routing")


def split_path(path: str) -> list[str]:
    """Tokenize a path on ``/`` after dropping the leading slash.

    Examples::

        ""          -> []               (the root node)
        "/"         -> [""]
        "/users"    -> ["users"]
        "/users/"   -> ["users", ""]    (trailing slash is its own segment)
        "/a/:id"    -> ["a", ":id"]
    """
    if not path:
        return []
    if path.startswith("/"):
        path = path[1:]
    return path.split("/")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path into literal and capture segments.

    Raises ``ConfigurationError`` for a capture without a name (``/a/:``).
    """
    segments: list[PathSegment] = []
    for part in split_path(path):
        if part.startswith(":"):
            name = part[1:]
            if not name:
                msg = f"Capture segment in {path!r} needs a name, e.g. '/items/:id'."
                raise ConfigurationError(msg)
            segments.append(PathSegment(part, is_capture=True, name=name))
        else:
            segments.append(PathSegment(part))
    return segments


def normalize_prefix(prefix: str) -> str:
    """Validate a nesting prefix and drop its trailing slash.

    ``"/"`` normalizes to ``""`` so nesting under it is a plain merge.
    """
    if not prefix.startswith("/"):
        msg = f"Nesting prefix {prefix!r} must start with '/'."
        raise ConfigurationError(msg)
    return prefix.rstrip("/")


def handler_name(handler: Callable[..., Any]) -> str:
    """Readable name for a handler in listings and tree dumps."""
    return getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None) or repr(
        handler
    )


class RouteNode:
    """One segment position in the tree."""

    __slots__ = ("capture", "capture_name", "children", "handlers")

    def __init__(self) -> None:
        # HTTP method -> handler registered at this exact path
        self.handlers: dict[str, Callable[..., Any]] = {}
        # Literal segment children: "users" -> node
        self.children: dict[str, RouteNode] = {}
        # Single capture child and the parameter name it binds
        self.capture: RouteNode | None = None
        self.capture_name: str = ""


class RouteTree:
    """Segment trie mapping (method, path) to a handler.

    Usage::

        tree = RouteTree()
        tree.insert("GET", "/items/:id", get_item)
        match = tree.find("GET", "/items/42")
        # match.handler is get_item, match.path_params == {"id": "42"}
    """

    __slots__ = ("_backtracking", "_frozen", "_root", "_strict_captures")

    def __init__(self, *, strict_captures: bool = True, backtracking: bool = False) -> None:
        self._root = RouteNode()
        self._frozen = False
        self._strict_captures = strict_captures
        self._backtracking = backtracking

    @property
    def root(self) -> RouteNode:
        return self._root

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def strict_captures(self) -> bool:
        return self._strict_captures

    @property
    def backtracking(self) -> bool:
        return self._backtracking

    # -- Registration --

    def insert(self, method: str, path: str, handler: Callable[..., Any]) -> None:
        """Register *handler* for *method* at *path*.

        A handler already registered for the same method and path is
        replaced. Raises ``ConfigurationError`` when a strict tree sees
        a capture name that differs from the one already at that depth.
        """
        self._check_not_frozen()
        node = self._root
        trail: list[str] = []

        for seg in parse_path(path):
            if seg.is_capture:
                node = self._capture_child(node, seg.name, trail)
            else:
                child = node.children.get(seg.value)
                if child is None:
                    child = node.children[seg.value] = RouteNode()
                node = child
            trail.append(seg.token)

        node.handlers[method] = handler

    def merge(self, other: RouteTree) -> None:
        """Union *other* into this tree.

        Handlers from *other* overwrite ours for the same method and
        path. New nodes are created here; no node of *other* is shared.
        """
        self._check_not_frozen()
        if other is self:
            return
        if self._strict_captures:
            self._check_captures(self._root, other._root, [])
        self._merge_nodes(self._root, other._root, [])

    def nest(self, prefix: str, other: RouteTree) -> None:
        """Mount every route of *other* under *prefix*.

        Flattens *other* into full paths, rebuilds them under the prefix
        in a scratch tree, then merges the scratch tree into this one.
        *other* is left untouched.
        """
        self._check_not_frozen()
        base = normalize_prefix(prefix)
        scratch = RouteTree(strict_captures=self._strict_captures)
        for route in other.routes():
            scratch.insert(route.method, base + route.path, route.handler)
        self.merge(scratch)

    def freeze(self) -> None:
        """Make the tree read-only. Further registration raises ``RuntimeError``."""
        self._frozen = True

    # -- Lookup --

    def find(self, method: str, path: str) -> RouteMatch | None:
        """Match a request method and path.

        Returns ``None`` when no node matches the path or the node has
        no handler for *method*; the two cases are not distinguished.
        """
        segments = split_path(path)

        if self._backtracking:
            found = self._find_exhaustive(self._root, segments, 0, method, {})
            if found is None:
                return None
            handler, params = found
            return RouteMatch(method=method, handler=handler, path_params=params)

        node = self._root
        params: dict[str, str] = {}
        for segment in segments:
            child = node.children.get(segment)
            if child is None:
                if node.capture is None:
                    return None
                params[node.capture_name] = segment
                child = node.capture
            node = child

        handler = node.handlers.get(method)
        if handler is None:
            return None
        return RouteMatch(method=method, handler=handler, path_params=params)

    # -- Introspection --

    def routes(self) -> list[Route]:
        """Flatten the tree into routes with regenerated ``:name`` tokens.

        Order: handlers at a node, then literal children in insertion
        order, then the capture child.
        """
        return list(self._walk(self._root, ""))

    def format(self) -> str:
        """Render the tree as indented text, one node or handler per line."""
        lines: list[str] = []
        self._format_node(self._root, "<root>", lines, 0)
        return "\n".join(lines)

    # -- Internal --

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "Cannot modify routes after the tree is frozen."
            raise RuntimeError(msg)

    def _capture_child(self, node: RouteNode, name: str, trail: list[str]) -> RouteNode:
        """Reuse or create the capture child of *node* for ``:name``."""
        if node.capture is None:
            node.capture = RouteNode()
            node.capture_name = name
        elif node.capture_name != name:
            if self._strict_captures:
                where = "/" + "/".join(trail)
                msg = (
                    f"Capture ':{name}' conflicts with ':{node.capture_name}' "
                    f"already registered under {where!r}."
                )
                raise ConfigurationError(msg)
            logger.debug(
                "Capture ':%s' reuses ':%s' under %r",
                name,
                node.capture_name,
                "/" + "/".join(trail),
            )
        return node.capture

    def _check_captures(self, target: RouteNode | None, source: RouteNode, trail: list[str]) -> None:
        """Raise before merging if *source* would rename a capture in *target*.

        Read-only, so a failed strict merge leaves this tree untouched.
        """
        if target is None:
            return
        for segment, child in source.children.items():
            self._check_captures(target.children.get(segment), child, [*trail, segment])
        if source.capture is None:
            return
        if target.capture is not None and target.capture_name != source.capture_name:
            where = "/" + "/".join(trail)
            msg = (
                f"Capture ':{source.capture_name}' conflicts with ':{target.capture_name}' "
                f"already registered under {where!r}."
            )
            raise ConfigurationError(msg)
        self._check_captures(
            target.capture, source.capture, [*trail, f":{source.capture_name}"]
        )

    def _merge_nodes(self, target: RouteNode, source: RouteNode, trail: list[str]) -> None:
        target.handlers.update(source.handlers)

        for segment, child in source.children.items():
            if segment not in target.children:
                target.children[segment] = RouteNode()
            self._merge_nodes(target.children[segment], child, [*trail, segment])

        if source.capture is not None:
            capture = self._capture_child(target, source.capture_name, trail)
            self._merge_nodes(capture, source.capture, [*trail, f":{source.capture_name}"])

    def _find_exhaustive(
        self,
        node: RouteNode,
        segments: list[str],
        index: int,
        method: str,
        params: dict[str, str],
    ) -> tuple[Callable[..., Any], dict[str, str]] | None:
        """Depth-first match: literal branch first, capture branch on failure."""
        if index == len(segments):
            handler = node.handlers.get(method)
            if handler is None:
                return None
            return handler, params

        segment = segments[index]

        child = node.children.get(segment)
        if child is not None:
            result = self._find_exhaustive(child, segments, index + 1, method, params)
            if result is not None:
                return result

        if node.capture is not None:
            bound = {**params, node.capture_name: segment}
            return self._find_exhaustive(node.capture, segments, index + 1, method, bound)

        return None

    def _walk(self, node: RouteNode, prefix: str) -> Iterator[Route]:
        for method, handler in node.handlers.items():
            yield Route(method=method, path=prefix, handler=handler)
        for segment, child in node.children.items():
            yield from self._walk(child, f"{prefix}/{segment}")
        if node.capture is not None:
            yield from self._walk(node.capture, f"{prefix}/:{node.capture_name}")

    def _format_node(self, node: RouteNode, label: str, lines: list[str], depth: int) -> None:
        indent = "    " * depth
        lines.append(f"{indent}├─ {label or '/'}" if depth else label)
        for method, handler in node.handlers.items():
            lines.append(f"{indent}  └─ [{method}] {handler_name(handler)}")
        for segment, child in node.children.items():
            self._format_node(child, segment, lines, depth + 1)
        if node.capture is not None:
            self._format_node(node.capture, f":{node.capture_name}", lines, depth + 1)
