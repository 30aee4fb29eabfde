"""Request headers as a case-insensitive, read-only mapping.

Header names are folded to lower case once, when the ASGI byte pairs
are decoded; every lookup after that is a plain string comparison.
"""

from collections.abc import Iterator, Mapping


def _decode(pair: tuple[bytes, bytes]) -> tuple[str, str]:
    name, value = pair
    return name.decode("latin-1").lower(), value.decode("latin-1")


class Headers(Mapping[str, str]):
    """Case-insensitive header mapping.

    Indexing yields the first value sent under a name; ``get_list``
    yields every value in arrival order.
    """

    __slots__ = ("_pairs",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        object.__setattr__(self, "_pairs", tuple(_decode(pair) for pair in raw))

    @classmethod
    def from_mapping(cls, headers: Mapping[str, str]) -> "Headers":
        """Build headers from a plain ``{name: value}`` mapping."""
        return cls(tuple((k.encode("latin-1"), v.encode("latin-1")) for k, v in headers.items()))

    def _values(self, key: str) -> Iterator[str]:
        wanted = key.lower()
        return (value for name, value in self._pairs if name == wanted)

    def __getitem__(self, key: str) -> str:
        for value in self._values(key):
            return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and next(self._values(key), None) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._pairs))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return dict(self.items()) == dict(other.items())

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"

    def get_list(self, key: str) -> list[str]:
        return list(self._values(key))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Lower-cased byte pairs, as an ASGI server would pass them."""
        return tuple((k.encode("latin-1"), v.encode("latin-1")) for k, v in self._pairs)
