"""Request lifecycle — the states a request passes through in the dispatcher.

Happy path::

    RECEIVED -> MIDDLEWARE -> ROUTE_MATCH -> PARAM_BIND -> [BODY_PARSE]
             -> HANDLER_EXEC -> RESPONSE_SENT

Unmatched requests go ``ROUTE_MATCH -> NOT_FOUND -> RESPONSE_SENT``.
Faults go ``ERROR -> CUSTOM_ERROR_HANDLER | DEFAULT_500 -> RESPONSE_SENT``.
A payload route whose body overflows its cap ends in ``ABORTED``:
nothing is written and the connection is dropped.
"""

import logging
from enum import StrEnum

logger = logging.getLogger("wren.server")


class RequestState(StrEnum):
    RECEIVED = "received"
    MIDDLEWARE = "middleware"
    ROUTE_MATCH = "route_match"
    PARAM_BIND = "param_bind"
    BODY_PARSE = "body_parse"
    HANDLER_EXEC = "handler_exec"
    NOT_FOUND = "not_found"
    ERROR = "error"
    CUSTOM_ERROR_HANDLER = "custom_error_handler"
    DEFAULT_500 = "default_500"
    RESPONSE_SENT = "response_sent"
    ABORTED = "aborted"


S = RequestState

# An HTTPError raised on purpose leaves an active state straight for
# NOT_FOUND (404) or RESPONSE_SENT (any other status).
TRANSITIONS: dict[RequestState, frozenset[RequestState]] = {
    S.RECEIVED: frozenset({S.MIDDLEWARE, S.ERROR}),
    S.MIDDLEWARE: frozenset({S.ROUTE_MATCH, S.NOT_FOUND, S.RESPONSE_SENT, S.ERROR}),
    S.ROUTE_MATCH: frozenset({S.PARAM_BIND, S.NOT_FOUND, S.ERROR}),
    S.PARAM_BIND: frozenset(
        {S.BODY_PARSE, S.HANDLER_EXEC, S.NOT_FOUND, S.RESPONSE_SENT, S.ERROR}
    ),
    S.BODY_PARSE: frozenset({S.HANDLER_EXEC, S.RESPONSE_SENT, S.ABORTED, S.ERROR}),
    S.HANDLER_EXEC: frozenset({S.RESPONSE_SENT, S.ABORTED, S.NOT_FOUND, S.ERROR}),
    S.NOT_FOUND: frozenset({S.RESPONSE_SENT, S.ERROR}),
    S.ERROR: frozenset({S.CUSTOM_ERROR_HANDLER, S.DEFAULT_500}),
    S.CUSTOM_ERROR_HANDLER: frozenset({S.RESPONSE_SENT, S.DEFAULT_500}),
    S.DEFAULT_500: frozenset({S.RESPONSE_SENT}),
    S.RESPONSE_SENT: frozenset(),
    S.ABORTED: frozenset(),
}

TERMINAL_STATES = frozenset({S.RESPONSE_SENT, S.ABORTED})


class RequestLifecycle:
    """Tracks one request's state and rejects illegal transitions."""

    __slots__ = ("_history", "method", "path")

    def __init__(self, method: str, path: str) -> None:
        self.method = method
        self.path = path
        self._history: list[RequestState] = [RequestState.RECEIVED]

    @property
    def state(self) -> RequestState:
        return self._history[-1]

    @property
    def history(self) -> tuple[RequestState, ...]:
        return tuple(self._history)

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def advance(self, target: RequestState) -> None:
        """Move to *target*. Raises ``RuntimeError`` if the move is illegal."""
        current = self.state
        if target not in TRANSITIONS[current]:
            msg = f"Illegal request state transition {current} -> {target} ({self.method} {self.path})"
            raise RuntimeError(msg)
        self._history.append(target)
        logger.debug("%s %s: %s -> %s", self.method, self.path, current, target)
