"""Request header filters."""

from dataclasses import dataclass

from perch.http.request import Request


@dataclass(frozen=True, slots=True)
class SetRequestHeader:
    """Replace every value of *name* with *value*."""

    name: str
    value: str

    def __call__(self, request: Request) -> Request:
        return request.with_header(self.name, self.value)


@dataclass(frozen=True, slots=True)
class AddRequestHeader:
    """Append *value* to header *name*, keeping existing values."""

    name: str
    value: str

    def __call__(self, request: Request) -> Request:
        return request.with_added_header(self.name, self.value)


@dataclass(frozen=True, slots=True)
class RemoveRequestHeader:
    name: str

    def __call__(self, request: Request) -> Request:
        return request.without_header(self.name)
