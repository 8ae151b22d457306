"""Route filters — request transformers run before forwarding.

A filter is any callable matching:
    def f(request: Request) -> Request | Response      (sync or async)

Built-in filters:
    LocaleNormalizer -- Inject Accept-Language from ?locale= or a default
    QueryStripper -- Forward with an empty query string
    PrefixPath -- Prepend a path prefix
    StripPrefix -- Drop leading path segments
    SetRequestHeader / AddRequestHeader / RemoveRequestHeader -- Header edits
    ShortCircuit -- Answer directly with a fixed response
"""

from perch.filters.chain import apply_filters
from perch.filters.headers import AddRequestHeader, RemoveRequestHeader, SetRequestHeader
from perch.filters.locale import LocaleNormalizer, canonical_language_tag
from perch.filters.path import PrefixPath, StripPrefix
from perch.filters.protocol import Filter, FilterResult
from perch.filters.query import QueryStripper
from perch.filters.respond import ShortCircuit


def modify_request(default_locale: str = "en-US") -> tuple[LocaleNormalizer, QueryStripper]:
    """Locale injection followed by query stripping, as one filter pair.

    Usage::

        gateway.add_route("r1", "**.example.com", "/shop", "http://shop:8000",
                          filters=modify_request("en-US"))
    """
    return LocaleNormalizer(default_locale), QueryStripper()


__all__ = [
    "AddRequestHeader",
    "Filter",
    "FilterResult",
    "LocaleNormalizer",
    "PrefixPath",
    "QueryStripper",
    "RemoveRequestHeader",
    "SetRequestHeader",
    "ShortCircuit",
    "StripPrefix",
    "apply_filters",
    "canonical_language_tag",
    "modify_request",
]
