"""
core/normalizer.py -- Response Normalizer: one table from outcome to HTTP contract.

Every entity operation either succeeds or raises one of the core.errors classes.
normalize() turns any exception into a Normalized(status_code, code, messages)
triple; the HTTP boundary only decides whether to render it as JSON or as the
error view. Routes never pick status codes for failures themselves.

Lookup walks the exception's MRO, so subclasses (InvalidTokenError) inherit the
row of their parent (AuthorizationFailure). Anything not in the table is an
UnexpectedFailure: logged with its traceback, answered with a generic message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from core.errors import (
    AuthenticationFailure,
    AuthorizationFailure,
    DuplicateKeyError,
    MalformedIdentifierError,
    MarinaError,
    NotFoundError,
    UnexpectedFailure,
    ValidationFailure,
)

logger = logging.getLogger("marina.errors")


@dataclass(frozen=True)
class Normalized:
    status_code: int
    code: str
    messages: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return self.messages[0] if self.messages else ""


# (status, machine-readable code). MalformedIdentifier is 400 for every family.
_TABLE: dict[type[MarinaError], tuple[int, str]] = {
    ValidationFailure: (400, "validation_failed"),
    MalformedIdentifierError: (400, "malformed_identifier"),
    DuplicateKeyError: (400, "duplicate_key"),
    AuthenticationFailure: (401, "invalid_credentials"),
    AuthorizationFailure: (401, "unauthorized"),
    NotFoundError: (404, "not_found"),
    UnexpectedFailure: (500, "internal_error"),
}


def normalize(exc: BaseException) -> Normalized:
    """Map an exception to the status/code/messages the client will see."""
    if isinstance(exc, MarinaError):
        for klass in type(exc).__mro__:
            if klass in _TABLE:
                status, code = _TABLE[klass]
                break
        else:
            status, code = _TABLE[UnexpectedFailure]
        if status >= 500:
            detail = getattr(exc, "detail", "") or str(exc)
            logger.error("Unexpected failure: %s", detail)
            return Normalized(status, code, [UnexpectedFailure.default_message])
        return Normalized(status, code, list(exc.messages))

    logger.error("Unhandled %s", type(exc).__name__, exc_info=exc)
    status, code = _TABLE[UnexpectedFailure]
    return Normalized(status, code, [UnexpectedFailure.default_message])
