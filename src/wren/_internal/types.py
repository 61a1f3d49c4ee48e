"""Shared type aliases used across wren modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: user-defined function with variable signature
Handler: TypeAlias = Callable[..., Any]

# Not-found and error handlers receive (), (request), or (request, error)
ErrorHandler: TypeAlias = Callable[..., Any]
