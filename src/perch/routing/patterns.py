"""Host and path patterns.

Host patterns are dot-separated labels::

    "api.example.com"    exact host
    "*.example.com"      exactly one label in front of example.com
    "**.example.com"     zero or more labels (example.com, a.example.com, a.b.example.com)

Path patterns are slash-separated segments::

    "/users"             exact path
    "/users/{id}"        one segment, captured as ``id``
    "/files/*"           one segment, not captured
    "/static/**"         the remainder (zero or more segments)

Both are parsed once at registration into frozen objects; matching
walks the parsed labels/segments without building regexes.
"""

from dataclasses import dataclass

from perch.errors import ConfigurationError

WILDCARD = "*"
DEEP_WILDCARD = "**"


def _match_labels(pattern: tuple[str, ...], labels: list[str], pi: int, li: int) -> bool:
    """Recursively match host labels; ``**`` may consume zero or more."""
    if pi == len(pattern):
        return li == len(labels)
    token = pattern[pi]
    if token == DEEP_WILDCARD:
        return any(
            _match_labels(pattern, labels, pi + 1, k) for k in range(li, len(labels) + 1)
        )
    if li == len(labels):
        return False
    if token == WILDCARD or token == labels[li]:
        return _match_labels(pattern, labels, pi + 1, li + 1)
    return False


@dataclass(frozen=True, slots=True)
class HostPattern:
    """A parsed host glob. Case-insensitive; ports are ignored."""

    source: str
    labels: tuple[str, ...]

    @classmethod
    def parse(cls, pattern: str) -> "HostPattern":
        text = pattern.strip().lower()
        if ":" in text and not text.startswith("["):
            text = text.split(":", 1)[0]
        labels = tuple(text.split("."))
        if not text or any(not label for label in labels):
            msg = f"Invalid host pattern {pattern!r}: empty label."
            raise ConfigurationError(msg)
        return cls(source=pattern, labels=labels)

    @property
    def matches_any(self) -> bool:
        return self.labels == (DEEP_WILDCARD,)

    def matches(self, host: str) -> bool:
        """True if *host* (already stripped of its port) fits this pattern."""
        if self.matches_any:
            return True
        if not host:
            return False
        return _match_labels(self.labels, host.lower().rstrip(".").split("."), 0, 0)


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a path pattern.

    Static:   ``users``   (kind="static")
    Capture:  ``{id}``    (kind="param", name="id")
    Wildcard: ``*``       (kind="wildcard")
    Rest:     ``**``      (kind="rest"; last segment only)
    """

    value: str
    kind: str = "static"
    name: str | None = None


def parse_path(pattern: str) -> tuple[PathSegment, ...]:
    """Parse a path pattern into segments.

    Examples::

        "/users"        -> (PathSegment("users"),)
        "/users/{id}"   -> (PathSegment("users"), PathSegment("{id}", "param", "id"))
        "/static/**"    -> (PathSegment("static"), PathSegment("**", "rest"))
    """
    if not pattern.startswith("/"):
        msg = f"Invalid path pattern {pattern!r}: must start with '/'."
        raise ConfigurationError(msg)

    parts = [p for p in pattern.strip("/").split("/") if p]
    segments: list[PathSegment] = []
    for index, part in enumerate(parts):
        if part.startswith("<") and part.endswith(">"):
            msg = (
                f"Invalid path pattern {pattern!r}: perch uses {{param}} captures, "
                "not <param>."
            )
            raise ConfigurationError(msg)
        if part == DEEP_WILDCARD:
            if index != len(parts) - 1:
                msg = f"Invalid path pattern {pattern!r}: '**' must be the last segment."
                raise ConfigurationError(msg)
            segments.append(PathSegment(value=part, kind="rest"))
        elif part == WILDCARD:
            segments.append(PathSegment(value=part, kind="wildcard"))
        elif part.startswith("{") and part.endswith("}"):
            name = part[1:-1]
            if not name.isidentifier():
                msg = f"Invalid path pattern {pattern!r}: bad capture name {name!r}."
                raise ConfigurationError(msg)
            segments.append(PathSegment(value=part, kind="param", name=name))
        else:
            segments.append(PathSegment(value=part))
    return tuple(segments)


@dataclass(frozen=True, slots=True)
class PathPattern:
    """A parsed path pattern. A trailing slash on the request is ignored."""

    source: str
    segments: tuple[PathSegment, ...]

    @classmethod
    def parse(cls, pattern: str) -> "PathPattern":
        return cls(source=pattern, segments=parse_path(pattern))

    def match(self, path: str) -> dict[str, str] | None:
        """Return captured params if *path* matches, else ``None``."""
        parts = [p for p in path.strip("/").split("/") if p]
        params: dict[str, str] = {}
        for index, seg in enumerate(self.segments):
            if seg.kind == "rest":
                return params
            if index >= len(parts):
                return None
            part = parts[index]
            if seg.kind == "param":
                params[seg.name or ""] = part
            elif seg.kind == "static" and seg.value != part:
                return None
        if len(parts) != len(self.segments):
            return None
        return params
