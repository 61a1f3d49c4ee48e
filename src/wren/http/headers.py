"""Request headers, matched without regard to case."""

from wren.http._multi import MultiMapping

RawHeaders = tuple[tuple[bytes, bytes], ...]


class Headers(MultiMapping):
    """Headers built from ASGI byte pairs.

    Both halves of each pair are latin-1; names are stored lower-cased so
    ``headers["Content-Type"]`` and ``headers["content-type"]`` agree.
    """

    __slots__ = ()

    def __init__(self, raw: RawHeaders = ()) -> None:
        super().__init__(
            ((name.decode("latin-1"), value.decode("latin-1")) for name, value in raw), raw
        )

    @staticmethod
    def _fold(name: str) -> str:
        return name.lower()

    @property
    def raw(self) -> RawHeaders:
        """The byte pairs exactly as the server passed them."""
        return self._raw
