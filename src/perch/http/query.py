"""Query string parameters, parsed once per request."""

from urllib.parse import parse_qsl

from perch.http._pairs import PairMapping


class QueryParams(PairMapping):
    """Immutable query parameters. Blank values are kept (``?flag=``)."""

    __slots__ = ("_raw",)

    def __init__(self, query_string: bytes = b"") -> None:
        self._raw = query_string
        super().__init__(tuple(parse_qsl(query_string.decode("latin-1"), keep_blank_values=True)))

    @property
    def raw(self) -> bytes:
        return self._raw
