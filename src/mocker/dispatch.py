"""Turn a match outcome into the HTTP response to send."""

from __future__ import annotations

import logging

from mocker.errors import SerializationError
from mocker.response import JSONResponse
from mocker.routing import Matched, MatchOutcome, MethodNotAllowed

logger = logging.getLogger(__name__)

NOT_FOUND_BODY = {"error": "not found"}
METHOD_NOT_ALLOWED_BODY = {"error": "method not allowed"}
SERIALIZATION_ERROR_BODY = {"error": "internal serialization error"}


def dispatch(outcome: MatchOutcome) -> JSONResponse:
    """Build the response for *outcome*.

    Captured path params are not substituted into the configured body; it is
    returned exactly as written in the configuration.
    """
    if isinstance(outcome, Matched):
        route = outcome.route
        try:
            return JSONResponse(route.body, status_code=route.status)
        except SerializationError:
            logger.exception("Failed to serialize body for %s %s", route.method, route.path)
            return JSONResponse(SERIALIZATION_ERROR_BODY, status_code=500)

    if isinstance(outcome, MethodNotAllowed):
        return JSONResponse(
            METHOD_NOT_ALLOWED_BODY,
            status_code=405,
            headers={"Allow": ", ".join(sorted(outcome.allowed))},
        )

    return JSONResponse(NOT_FOUND_BODY, status_code=404)
