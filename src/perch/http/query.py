"""Immutable query string parameters.

Implements ``Mapping[str, str]`` with multi-value access, keeping the
order in which names and values first appeared.
"""

from collections.abc import Iterable, Iterator, Mapping
from urllib.parse import parse_qsl, urlencode


class QueryParams(Mapping[str, str]):
    """Immutable query string parameters.

    Attributes:
        _data: Parsed query string as field name -> tuple of values.
        _raw: Raw query string bytes.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key.
    """

    _data: dict[str, tuple[str, ...]]
    _raw: bytes

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: bytes | str = b"") -> None:
        if isinstance(query_string, str):
            query_string = query_string.encode("latin-1")
        object.__setattr__(self, "_raw", query_string)
        grouped: dict[str, list[str]] = {}
        for name, value in parse_qsl(query_string.decode("latin-1"), keep_blank_values=True):
            grouped.setdefault(name, []).append(value)
        object.__setattr__(self, "_data", {k: tuple(v) for k, v in grouped.items()})

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> "QueryParams":
        """Build query params from ``(name, value)`` pairs."""
        return cls(urlencode(list(pairs)))

    def __setattr__(self, name: str, value: object) -> None:
        msg = "QueryParams is immutable."
        raise AttributeError(msg)

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryParams):
            return NotImplemented
        return self._data == other._data

    def __hash__(self) -> int:
        return hash(tuple(self._data.items()))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"QueryParams({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, ()))

    @property
    def query_string(self) -> str:
        """The encoded query string, without the leading ``?``."""
        return self._raw.decode("latin-1")
