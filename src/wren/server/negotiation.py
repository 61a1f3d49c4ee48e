"""Handler return value -> Response.

One ``match`` statement, checked top to bottom:

=========================  ==========================================
``Response`` / ``Abort``   returned untouched
``Template``               rendered with the app's kida environment
``str``                    200 ``text/html``
``bytes``                  200 ``application/octet-stream``
``dict`` / ``list``        200 ``application/json``
``None``                   204 with no body
``(value, status)``        *value* negotiated, then the status applied
``(value, status, hdrs)``  as above, plus the headers in *hdrs*
=========================  ==========================================

Anything else is a programming error and raises ``TypeError``.
"""

import json
from typing import Any

from kida import Environment

from wren.errors import ConfigurationError
from wren.http.response import Abort, Response
from wren.templating.returns import Template

JSON_TYPE = "application/json; charset=utf-8"


def _restate(
    inner: Any, status: int, headers: dict[str, str], kida_env: Environment | None
) -> Response | Abort:
    outcome = negotiate(inner, kida_env=kida_env)
    if isinstance(outcome, Abort):
        return outcome
    return outcome.with_status(status).with_headers(headers)


def negotiate(value: Any, *, kida_env: Environment | None = None) -> Response | Abort:
    """Build the Response for whatever a handler returned."""
    match value:
        case Response() | Abort():
            return value
        case Template(name=name, context=context):
            if kida_env is None:
                msg = f"Cannot render {name!r}: the app has no template environment yet."
                raise ConfigurationError(msg)
            return Response(body=kida_env.get_template(name).render(context))
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(body=json.dumps(value, default=str), content_type=JSON_TYPE)
        case None:
            return Response(status=204)
        case (inner, int() as status):
            return _restate(inner, status, {}, kida_env)
        case (inner, int() as status, dict() as headers):
            return _restate(inner, status, headers, kida_env)
    msg = (
        f"Handler returned {type(value).__name__}; expected a Response, Template, "
        "str, bytes, dict, list, None or a (value, status[, headers]) tuple."
    )
    raise TypeError(msg)
