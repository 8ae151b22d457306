"""Filter chain execution.

Filters run strictly in list order, each receiving the previous one's
output. A ``Response`` halts the chain. Failures stop the chain too:
``HTTPError`` propagates as-is, anything else becomes ``FilterError``.
"""

import logging
from collections.abc import Sequence

from perch._internal.invoke import invoke
from perch.errors import FilterError, HTTPError
from perch.filters.protocol import Filter, FilterResult, filter_name
from perch.http.request import Request
from perch.http.response import Response

logger = logging.getLogger("perch.filters")


async def apply_filters(filters: Sequence[Filter], request: Request) -> FilterResult:
    """Run *filters* over *request*.

    Returns the final ``Request`` when every filter passed it on, or
    the ``Response`` of the first filter that short-circuited.

    Raises:
        HTTPError: Raised by a filter; propagated unchanged.
        FilterError: A filter raised anything else, or returned
            something that is neither a Request nor a Response.
    """
    current = request
    for f in filters:
        name = filter_name(f)
        try:
            result = await invoke(f, current)
        except HTTPError:
            raise
        except Exception as exc:
            raise FilterError(name, str(exc) or type(exc).__name__) from exc

        if isinstance(result, Response):
            logger.debug("Filter %s short-circuited with %d", name, result.status)
            return result
        if not isinstance(result, Request):
            detail = f"returned {type(result).__name__}, expected Request or Response"
            raise FilterError(name, detail)
        current = result
    return current
