"""Splitting a request target, and the parsed query string."""

from urllib.parse import parse_qsl

from wren.http._multi import MultiMapping

_TRUTHY = frozenset({"true", "1", "yes", "on"})


def split_target(target: str) -> tuple[str, str]:
    """``"/search?q=a?b"`` -> ``("/search", "q=a?b")``.

    Only the first ``?`` splits; a target without one has an empty query.
    """
    path, _, query = target.partition("?")
    return path, query


class QueryParams(MultiMapping):
    """Parsed query string.

    Form-encoding rules: ``&`` separates pairs, the first ``=`` separates
    name from value, ``+`` and ``%XX`` are decoded. Names may repeat and
    a bare ``flag`` or ``flag=`` maps to ``""``.
    """

    __slots__ = ()

    def __init__(self, query_string: bytes | str = b"") -> None:
        if isinstance(query_string, str):
            query_string = query_string.encode("latin-1")
        pairs = parse_qsl(query_string.decode("latin-1"), keep_blank_values=True)
        super().__init__(pairs, query_string)

    @property
    def raw(self) -> bytes:
        """The query string before any decoding."""
        return self._raw

    def get_int(self, key: str, default: int | None = None) -> int | None:
        value = self.get(key)
        try:
            return default if value is None else int(value)
        except ValueError:
            return default

    def get_bool(self, key: str, default: bool | None = None) -> bool | None:
        """``true``/``1``/``yes``/``on`` in any case are True; any other value is False."""
        value = self.get(key)
        return default if value is None else value.lower() in _TRUTHY
