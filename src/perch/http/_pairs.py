"""Ordered name/value pairs shared by Headers and QueryParams."""

from collections.abc import Iterator, Mapping


class PairMapping(Mapping[str, str]):
    """Read-only mapping over ordered ``(name, value)`` pairs.

    A name may appear more than once. Item access and ``get`` return the
    first value sent under a name, ``get_list`` all of them in arrival
    order. Subclasses choose how names compare by overriding ``_fold``.
    """

    __slots__ = ("_pairs",)

    def __init__(self, pairs: tuple[tuple[str, str], ...] = ()) -> None:
        self._pairs = tuple((self._fold(name), value) for name, value in pairs)

    @staticmethod
    def _fold(name: str) -> str:
        return name

    def __getitem__(self, key: str) -> str:
        folded = self._fold(key)
        for name, value in self._pairs:
            if name == folded:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        folded = self._fold(key)
        return any(name == folded for name, _ in self._pairs)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._pairs))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"{type(self).__name__}({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        folded = self._fold(key)
        return [value for name, value in self._pairs if name == folded]
