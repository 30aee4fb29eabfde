"""Query string parameters, decoded once per request."""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl


class QueryParams(Mapping[str, str]):
    """Immutable query string parameters.

    Keeps every ``(key, value)`` pair in order. Indexing returns the
    first value for a key; ``get_list`` returns them all; ``to_params``
    flattens into the mapping the resolvers read.
    """

    __slots__ = ("_pairs",)

    def __init__(self, query_string: bytes | str = b"") -> None:
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")
        object.__setattr__(self, "_pairs", tuple(parse_qsl(query_string, keep_blank_values=True)))

    def __getitem__(self, key: str) -> str:
        for name, value in self._pairs:
            if name == key:
                return value
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._pairs))

    def __repr__(self) -> str:
        return f"QueryParams({list(self._pairs)!r})"

    def get_list(self, key: str) -> list[str]:
        return [value for name, value in self._pairs if name == key]

    def to_params(self) -> dict[str, str | list[str]]:
        """Flatten into a params mapping; repeated keys keep every value."""
        params: dict[str, str | list[str]] = {}
        for name in self:
            values = self.get_list(name)
            params[name] = values[0] if len(values) == 1 else values
        return params
