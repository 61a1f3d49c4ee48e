"""Read-only mapping where one name can carry several values."""

from collections.abc import Iterable, Iterator, Mapping


class MultiMapping(Mapping[str, str]):
    """Name -> first value, with ``get_list`` for the rest.

    Subclasses decide how names compare by overriding ``_fold``.
    Instances cannot be changed after ``__init__``.
    """

    __slots__ = ("_raw", "_values")

    def __init__(self, pairs: Iterable[tuple[str, str]], raw: object) -> None:
        values: dict[str, list[str]] = {}
        for name, value in pairs:
            values.setdefault(self._fold(name), []).append(value)
        object.__setattr__(self, "_values", values)
        object.__setattr__(self, "_raw", raw)

    def __setattr__(self, name: str, value: object) -> None:
        msg = f"{type(self).__name__} is read-only"
        raise AttributeError(msg)

    @staticmethod
    def _fold(name: str) -> str:
        return name

    def __getitem__(self, key: str) -> str:
        return self._values[self._fold(key)][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._fold(key) in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        shown = ", ".join(f"{name!r}: {values!r}" for name, values in self._values.items())
        return f"{type(self).__name__}({{{shown}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._values.get(self._fold(key))
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        """Every value for *key* in the order received; empty if absent."""
        return list(self._values.get(self._fold(key), ()))
