from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NETWORK_ERROR = "network_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    INVALID_RESPONSE = "invalid_response"


ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.NETWORK_ERROR: "Network error. Please check your internet connection.",
    ErrorKind.UNAUTHORIZED: "Unauthorized access. Please check your API key.",
    ErrorKind.NOT_FOUND: "Movie not found. Please try a different search term.",
    ErrorKind.RATE_LIMITED: "Rate limit exceeded. Please try again later.",
    ErrorKind.INVALID_RESPONSE: "Invalid response from the server.",
}

_STATUS_KINDS: dict[int, ErrorKind] = {
    401: ErrorKind.UNAUTHORIZED,
    404: ErrorKind.NOT_FOUND,
    429: ErrorKind.RATE_LIMITED,
}

# Checked in order; first matching substring wins.
_MESSAGE_KINDS: tuple[tuple[str, ErrorKind], ...] = (
    ("401", ErrorKind.UNAUTHORIZED),
    ("404", ErrorKind.NOT_FOUND),
    ("429", ErrorKind.RATE_LIMITED),
    ("Invalid", ErrorKind.INVALID_RESPONSE),
)


class UpstreamError(RuntimeError):
    """A TMDB call failed at the transport, HTTP or decode level.

    ``status_code`` is set for non-2xx responses; ``kind`` is set when the
    raiser already knows the category (e.g. an undecodable body).
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        kind: ErrorKind | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.kind = kind


def classify_error(err: BaseException) -> ErrorKind:
    """Map an exception to an :class:`ErrorKind`.

    Structured information on :class:`UpstreamError` is preferred. Anything
    else falls back to matching status-code substrings in the message, which
    can misfire when an unrelated message happens to contain e.g. "404".
    """
    if isinstance(err, UpstreamError):
        if err.kind is not None:
            return err.kind
        if err.status_code is not None and err.status_code in _STATUS_KINDS:
            return _STATUS_KINDS[err.status_code]

    message = str(err)
    for needle, kind in _MESSAGE_KINDS:
        if needle in message:
            return kind
    return ErrorKind.NETWORK_ERROR


def error_message(kind: ErrorKind) -> str:
    return ERROR_MESSAGES[kind]
