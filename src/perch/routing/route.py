"""Route and RouteMatch frozen dataclasses."""

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field

from perch.filters.protocol import Filter
from perch.http.request import Request
from perch.routing.patterns import HostPattern, PathPattern
from perch.routing.predicates import Predicate


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    ``host`` and ``path`` are parsed patterns; ``None`` matches
    anything. Build one with :meth:`Route.create` rather than by hand.
    """

    id: str
    target_uri: str
    host: HostPattern | None = None
    path: PathPattern | None = None
    filters: tuple[Filter, ...] = ()
    predicates: tuple[Predicate, ...] = ()

    @classmethod
    def create(
        cls,
        id: str | None,
        host_pattern: str | None,
        path_pattern: str | None,
        target_uri: str,
        filters: Sequence[Filter] = (),
        predicates: Sequence[Predicate] = (),
    ) -> "Route":
        """Parse patterns and freeze a route. A missing id gets a UUID."""
        return cls(
            id=id or str(uuid.uuid4()),
            target_uri=target_uri,
            host=HostPattern.parse(host_pattern) if host_pattern is not None else None,
            path=PathPattern.parse(path_pattern) if path_pattern is not None else None,
            filters=tuple(filters),
            predicates=tuple(predicates),
        )

    def match(self, request: Request) -> dict[str, str] | None:
        """Path params if host, path and every predicate hold, else ``None``."""
        if self.host is not None and not self.host.matches(request.host):
            return None
        if self.path is None:
            params: dict[str, str] | None = {}
        else:
            params = self.path.match(request.path)
        if params is None:
            return None
        if not all(p.test(request) for p in self.predicates):
            return None
        return params


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str] = field(default_factory=dict)
