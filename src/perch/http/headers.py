"""Case-insensitive HTTP request headers.

Decoded once from the raw ASGI byte pairs; the raw pairs stay available
for code that needs them untouched.
"""

from collections.abc import Mapping

from perch.http._pairs import PairMapping


class Headers(PairMapping):
    """Immutable request headers. Names compare case-insensitively and
    iterate lower-cased, in the order first received.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        self._raw = raw
        super().__init__(
            tuple((name.decode("latin-1"), value.decode("latin-1")) for name, value in raw)
        )

    @staticmethod
    def _fold(name: str) -> str:
        return name.lower()

    @classmethod
    def from_pairs(cls, pairs: Mapping[str, str]) -> "Headers":
        """Build headers from a plain ``{name: value}`` mapping."""
        return cls(
            tuple(
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in pairs.items()
            )
        )

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Raw header byte pairs, as received."""
        return self._raw
