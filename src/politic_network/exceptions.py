"""Error taxonomy for classified request outcomes."""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure categories a request can end in."""

    UNDECODABLE = "undecodable"
    INVALID_TOKEN = "invalid_token"
    INTERNAL_SERVER_ERROR = "internal_server_error"
    BAD_REQUEST = "bad_request"
    INVALID_INFO = "invalid_info"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    CUSTOM = "custom"
    EMPTY = "empty"


class PoliticNetworkError(RuntimeError):
    """Base error for classified request failures.

    `message` holds the server-supplied (or fallback) text when the variant
    carries one; payload-less variants leave it as ``None`` and render their
    `default_message` instead.
    """

    kind: ErrorKind
    default_message = "Request failed"

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, status_code={self.status_code!r})"


class UndecodableError(PoliticNetworkError):
    """Raised when the response body does not match the envelope schema."""

    kind = ErrorKind.UNDECODABLE
    default_message = "The server response could not be decoded"


class InvalidTokenError(PoliticNetworkError):
    """Raised when the server reports an expired or invalid bearer token."""

    kind = ErrorKind.INVALID_TOKEN
    default_message = "The access token is invalid or has expired"


class InternalServerError(PoliticNetworkError):
    kind = ErrorKind.INTERNAL_SERVER_ERROR
    default_message = "The server encountered an internal error"


class BadRequestError(PoliticNetworkError):
    """Raised for malformed requests, including ones that never left the client."""

    kind = ErrorKind.BAD_REQUEST
    default_message = "The request was malformed"


class InvalidInfoError(PoliticNetworkError):
    kind = ErrorKind.INVALID_INFO


class UnauthorizedError(PoliticNetworkError):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "The request was not authorized"


class ConflictError(PoliticNetworkError):
    kind = ErrorKind.CONFLICT


class NotFoundError(PoliticNetworkError):
    kind = ErrorKind.NOT_FOUND


class CustomError(PoliticNetworkError):
    """Catch-all carrying a human-readable message."""

    kind = ErrorKind.CUSTOM


class EmptyResultError(PoliticNetworkError):
    """Raised when the server reports success without a result payload."""

    kind = ErrorKind.EMPTY
    default_message = "The server returned no result"

