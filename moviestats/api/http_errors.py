from __future__ import annotations

from collections.abc import Mapping

from fastapi import HTTPException

from moviestats.core.errors import ErrorKind, UpstreamError, classify_error, error_message

# A rejected API key is the server's problem, not the caller's.
UPSTREAM_STATUSES: Mapping[ErrorKind, int] = {
    ErrorKind.UNAUTHORIZED: 502,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.INVALID_RESPONSE: 502,
    ErrorKind.NETWORK_ERROR: 503,
}


def upstream_http_error(
    exc: UpstreamError,
    *,
    status_overrides: Mapping[ErrorKind, int] | None = None,
) -> HTTPException:
    kind = classify_error(exc)
    status = (
        status_overrides[kind]
        if status_overrides and kind in status_overrides
        else UPSTREAM_STATUSES[kind]
    )
    return HTTPException(status_code=status, detail=error_message(kind))
