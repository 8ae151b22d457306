"""Filter factories addressable by name.

Route files refer to filters by name plus keyword arguments::

    filters = [
        { name = "ModifyRequest", default_locale = "en-US" },
        { name = "PrefixPath", prefix = "/myPrefix" },
    ]

A factory may return a single filter or a tuple of filters; tuples
are spliced into the chain in order.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from perch.errors import ConfigurationError
from perch.filters import (
    AddRequestHeader,
    LocaleNormalizer,
    PrefixPath,
    QueryStripper,
    RemoveRequestHeader,
    SetRequestHeader,
    ShortCircuit,
    StripPrefix,
    modify_request,
)
from perch.filters.protocol import Filter

FILTER_FACTORIES: dict[str, Callable[..., Any]] = {
    "AddRequestHeader": AddRequestHeader,
    "LocaleNormalizer": LocaleNormalizer,
    "ModifyRequest": modify_request,
    "PrefixPath": PrefixPath,
    "QueryStripper": QueryStripper,
    "RemoveRequestHeader": RemoveRequestHeader,
    "SetRequestHeader": SetRequestHeader,
    "ShortCircuit": ShortCircuit,
    "StripPrefix": StripPrefix,
}


def build_filter(spec: Mapping[str, Any]) -> tuple[Filter, ...]:
    """Instantiate the filter(s) described by one ``{name = ..., **kwargs}`` table."""
    if not isinstance(spec, Mapping):
        msg = f"Filter entry {spec!r} must be a table."
        raise ConfigurationError(msg)
    options = dict(spec)
    name = options.pop("name", None)
    if not isinstance(name, str):
        msg = f"Filter entry {spec!r} has no 'name'."
        raise ConfigurationError(msg)

    factory = FILTER_FACTORIES.get(name)
    if factory is None:
        known = ", ".join(sorted(FILTER_FACTORIES))
        msg = f"Unknown filter {name!r}. Known filters: {known}"
        raise ConfigurationError(msg)

    try:
        built = factory(**options)
    except TypeError as exc:
        msg = f"Bad arguments for filter {name!r}: {exc}"
        raise ConfigurationError(msg) from exc

    if isinstance(built, tuple):
        return built
    return (built,)


def build_filters(specs: Iterable[Mapping[str, Any]]) -> list[Filter]:
    """Instantiate a whole chain, preserving order."""
    chain: list[Filter] = []
    for spec in specs:
        chain.extend(build_filter(spec))
    return chain
