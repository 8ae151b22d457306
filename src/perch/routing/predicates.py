"""Request predicates — composable boolean tests on a Request.

Every route is guarded by a host pattern and a path pattern. Extra
conditions (method, header, query) are predicates that combine with
``&`` (AND), ``|`` (OR) and ``~`` (NOT)::

    from perch.routing.predicates import Header, Method

    only_writes = Method("POST", "PUT") & ~Header("x-dry-run")
"""

import re
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from perch.http.request import Request
from perch.routing.patterns import HostPattern, PathPattern


@runtime_checkable
class Predicate(Protocol):
    """Anything with ``test(request) -> bool``."""

    def test(self, request: Request) -> bool: ...


class Composable:
    """Operator mixin: ``&``, ``|`` and ``~`` build composite predicates.

    Subclasses supply ``test()`` and so satisfy ``Predicate``.
    """

    __slots__ = ()

    def __and__(self, other: Predicate) -> "AllOf":
        return AllOf((self, other))

    def __or__(self, other: Predicate) -> "AnyOf":
        return AnyOf((self, other))

    def __invert__(self) -> "Not":
        return Not(self)


@dataclass(frozen=True, slots=True)
class AllOf(Composable):
    predicates: tuple[Predicate, ...]

    def test(self, request: Request) -> bool:
        return all(p.test(request) for p in self.predicates)


@dataclass(frozen=True, slots=True)
class AnyOf(Composable):
    predicates: tuple[Predicate, ...]

    def test(self, request: Request) -> bool:
        return any(p.test(request) for p in self.predicates)


@dataclass(frozen=True, slots=True)
class Not(Composable):
    predicate: Predicate

    def test(self, request: Request) -> bool:
        return not self.predicate.test(request)


@dataclass(frozen=True, slots=True, init=False)
class Host(Composable):
    """Request host matches one of the given globs."""

    patterns: tuple[HostPattern, ...]

    def __init__(self, *patterns: str) -> None:
        object.__setattr__(self, "patterns", tuple(HostPattern.parse(p) for p in patterns))

    def test(self, request: Request) -> bool:
        host = request.host
        return any(p.matches(host) for p in self.patterns)


@dataclass(frozen=True, slots=True, init=False)
class Path(Composable):
    """Request path matches one of the given patterns."""

    patterns: tuple[PathPattern, ...]

    def __init__(self, *patterns: str) -> None:
        object.__setattr__(self, "patterns", tuple(PathPattern.parse(p) for p in patterns))

    def test(self, request: Request) -> bool:
        return any(p.match(request.path) is not None for p in self.patterns)


@dataclass(frozen=True, slots=True, init=False)
class Method(Composable):
    """Request method is one of the given methods (case-insensitive)."""

    methods: frozenset[str]

    def __init__(self, *methods: str) -> None:
        object.__setattr__(self, "methods", frozenset(m.upper() for m in methods))

    def test(self, request: Request) -> bool:
        return request.method.upper() in self.methods


@dataclass(frozen=True, slots=True, init=False)
class Header(Composable):
    """Header is present, and if *regex* is given, some value fully matches it."""

    name: str
    regex: re.Pattern[str] | None

    def __init__(self, name: str, regex: str | None = None) -> None:
        object.__setattr__(self, "name", name.lower())
        object.__setattr__(self, "regex", re.compile(regex) if regex is not None else None)

    def test(self, request: Request) -> bool:
        values = request.headers.get_list(self.name)
        if not values:
            return False
        if self.regex is None:
            return True
        return any(self.regex.fullmatch(v) for v in values)


@dataclass(frozen=True, slots=True, init=False)
class Query(Composable):
    """Query parameter is present, and if *regex* is given, some value fully matches it."""

    name: str
    regex: re.Pattern[str] | None

    def __init__(self, name: str, regex: str | None = None) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "regex", re.compile(regex) if regex is not None else None)

    def test(self, request: Request) -> bool:
        values = request.query.get_list(self.name)
        if not values:
            return False
        if self.regex is None:
            return True
        return any(self.regex.fullmatch(v) for v in values)
