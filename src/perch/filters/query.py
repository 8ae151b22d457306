"""Query string removal."""

import logging
from dataclasses import dataclass

from perch.http.request import Request

logger = logging.getLogger("perch.filters")


@dataclass(frozen=True, slots=True)
class QueryStripper:
    """Forward the request with an empty query string."""

    def __call__(self, request: Request) -> Request:
        stripped = request.without_query()
        logger.info("Removed all query params: %s", stripped.absolute_url)
        return stripped
