"""Map raw responses onto typed outcomes."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from .config import DEFAULT_CONNECTIVITY_MESSAGE
from .envelope import decode_envelope
from .exceptions import (
    BadRequestError,
    ConflictError,
    CustomError,
    EmptyResultError,
    InternalServerError,
    InvalidInfoError,
    InvalidTokenError,
    NotFoundError,
    PoliticNetworkError,
    UndecodableError,
)
from .results import Failure, Outcome, Success

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGES = frozenset({"Token expired", "Invalid token"})

# Unsuccessful envelopes whose status code maps to a dedicated error. Variants
# built from the message carry the server text; the others use their default.
_STATUS_ERRORS: dict[int, tuple[type[PoliticNetworkError], bool]] = {
    400: (BadRequestError, False),
    403: (InvalidInfoError, True),
    404: (NotFoundError, True),
    409: (ConflictError, True),
    500: (InternalServerError, False),
}


def classify_response(
    content: bytes | None,
    status_code: int,
    result_type: Any = None,
    *,
    connectivity_message: str = DEFAULT_CONNECTIVITY_MESSAGE,
) -> Outcome[Any]:
    """Decode ``content`` and classify it together with ``status_code``.

    ``content`` is ``None`` when the transport produced no response at all.
    """

    if content is None:
        return Failure(CustomError(connectivity_message))

    try:
        envelope = decode_envelope(content, result_type)
    except ValidationError as exc:
        logger.debug("Undecodable response (status %s): %s", status_code, exc)
        return Failure(UndecodableError(status_code=status_code))

    if envelope.message in INVALID_TOKEN_MESSAGES:
        return Failure(InvalidTokenError(envelope.message, status_code=status_code))

    if not envelope.is_success and status_code in _STATUS_ERRORS:
        error_type, carries_message = _STATUS_ERRORS[status_code]
        message = envelope.message if carries_message else None
        return Failure(error_type(message, status_code=status_code))

    if envelope.is_success:
        if envelope.result is not None:
            return Success(envelope.result)
        return Failure(EmptyResultError(status_code=status_code))
    return Failure(CustomError(connectivity_message, status_code=status_code))
