"""Immutable, case-insensitive HTTP headers.

Implements ``Mapping[str, str]`` with multi-value access.
Stores raw byte pairs from the ASGI scope; decodes on access.
Changes produce a new ``Headers``; the original is never touched.
"""

from collections.abc import Iterable, Iterator, Mapping


def _encode(value: str) -> bytes:
    return value.encode("latin-1")


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive HTTP headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header (e.g. repeated ``Accept-Language``).
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        object.__setattr__(self, "_raw", raw)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> "Headers":
        """Build headers from ``(name, value)`` string pairs."""
        return cls(tuple((_encode(name.lower()), _encode(value)) for name, value in pairs))

    def __setattr__(self, name: str, value: object) -> None:
        msg = "Headers is immutable; use with_header() / without() instead."
        raise AttributeError(msg)

    def __getitem__(self, key: str) -> str:
        key_lower = _encode(key.lower())
        for name, value in self._raw:
            if name.lower() == key_lower:
                return value.decode("latin-1")
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = _encode(key.lower())
        return any(name.lower() == key_lower for name, _ in self._raw)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._raw:
            key = name.decode("latin-1").lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return self.items_list() == other.items_list()

    def __hash__(self) -> int:
        return hash(tuple(self.items_list()))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*, in received order."""
        key_lower = _encode(key.lower())
        return [value.decode("latin-1") for name, value in self._raw if name.lower() == key_lower]

    def items_list(self) -> list[tuple[str, str]]:
        """All ``(lowercase name, value)`` pairs, duplicates included."""
        return [
            (name.decode("latin-1").lower(), value.decode("latin-1")) for name, value in self._raw
        ]

    # -- Copy-on-write transformations --

    def with_header(self, name: str, value: str) -> "Headers":
        """Return new headers where *name* has exactly one value."""
        return self.without(name).with_added(name, value)

    def with_added(self, name: str, value: str) -> "Headers":
        """Return new headers with an extra value appended for *name*."""
        return Headers((*self._raw, (_encode(name.lower()), _encode(value))))

    def without(self, *names: str) -> "Headers":
        """Return new headers with every value of *names* removed."""
        drop = {_encode(n.lower()) for n in names}
        return Headers(tuple(pair for pair in self._raw if pair[0].lower() not in drop))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Access raw header byte pairs for ASGI compatibility."""
        return self._raw
