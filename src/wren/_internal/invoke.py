"""Invoke helpers — bind and call sync or async handlers uniformly.

Wren handlers can be ``def`` or ``async def`` and declare only the
arguments they need. Any code that calls a user-provided handler goes
through these two helpers, so signature binding and the sync/async
check each live in exactly one place.

Usage::

    from wren._internal.invoke import bind_arguments, invoke

    kwargs = bind_arguments(handler, request, request.path_params)
    result = await invoke(handler, **kwargs)
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wren.http.request import Request

_NO_BODY = object()


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


def bind_arguments(
    handler: Any,
    request: Request,
    path_params: dict[str, str],
    *,
    body: Any = _NO_BODY,
) -> dict[str, Any]:
    """Inspect the handler signature and build kwargs for it.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. ``body`` parameter, when the caller parsed a payload
    3. Capture parameters (by name, converted through the annotation)

    Parameters that match none of these are left to their defaults.
    """
    from wren.http.request import Request

    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name == "body" and body is not _NO_BODY:
            kwargs[name] = body
        elif name in path_params:
            kwargs[name] = _convert(path_params[name], param.annotation)

    return kwargs


_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


def _convert(value: str, annotation: Any) -> Any:
    """Convert a captured segment through its annotation, if it accepts it.

    ``bool`` accepts true/1/yes/on and false/0/no/off; other words
    stay strings.
    """
    if annotation is inspect.Parameter.empty or annotation is str:
        return value
    if annotation is bool:
        lowered = value.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        return value
    try:
        return annotation(value)
    except (ValueError, TypeError):
        return value
