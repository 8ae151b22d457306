"""Path rewriting filters.

Both keep the received percent-encoding of the untouched part of the
path, so an encoded ``%2F`` still reaches the upstream as one segment.
"""

from dataclasses import dataclass
from urllib.parse import unquote

from perch.errors import ConfigurationError
from perch.http.request import Request, quote_path


@dataclass(frozen=True, slots=True)
class PrefixPath:
    """Prepend *prefix* to the request path: ``/x`` + ``/a`` -> ``/x/a``."""

    prefix: str

    def __post_init__(self) -> None:
        if not self.prefix.startswith("/"):
            msg = f"PrefixPath prefix must start with '/': {self.prefix!r}"
            raise ConfigurationError(msg)

    def __call__(self, request: Request) -> Request:
        prefix = self.prefix.rstrip("/")
        return request.with_path(
            prefix + request.path, raw_path=quote_path(prefix) + request.target_path
        )


@dataclass(frozen=True, slots=True)
class StripPrefix:
    """Drop the first *parts* path segments: ``/api/v1/users`` -> ``/users`` (parts=2)."""

    parts: int = 1

    def __post_init__(self) -> None:
        if self.parts < 0:
            msg = f"StripPrefix parts must be >= 0, got {self.parts}"
            raise ConfigurationError(msg)

    def __call__(self, request: Request) -> Request:
        # Split the encoded form so an escaped slash counts as data
        raw = request.target_path
        segments = [s for s in raw.split("/") if s]
        remaining = segments[self.parts :]
        raw_path = "/" + "/".join(remaining)
        if remaining and raw.endswith("/"):
            raw_path += "/"
        return request.with_path(unquote(raw_path), raw_path=raw_path)
