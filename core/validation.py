"""
core/validation.py -- Run a pydantic model over raw input, raise ValidationFailure.

Schemas raise PydanticCustomError("field_invalid", <localized message>) for their
own rules; those messages are passed through verbatim. Built-in pydantic errors
(missing field, wrong type) are replaced by the schema's per-field fallback
message so the user never sees pydantic's English wording.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from core.errors import MalformedIdentifierError, ValidationFailure

FIELD_INVALID = "field_invalid"

M = TypeVar("M", bound=BaseModel)

# Largest value an SQLite INTEGER column holds.
MAX_ID = 2**63 - 1


def _field_name(model: type[BaseModel], loc: tuple) -> str:
    """Map an error location (alias or field name) back to the python field name."""
    if not loc:
        return ""
    first = str(loc[0])
    if first in model.model_fields:
        return first
    for name, info in model.model_fields.items():
        if info.alias == first:
            return name
    return first


def validate(model: type[M], data: Mapping[str, Any], fallbacks: Mapping[str, str] | None = None) -> M:
    """Validate data against model and return the instance.

    Raises ValidationFailure with one message per failed field (in field order,
    duplicates removed).
    """
    try:
        return model.model_validate(dict(data))
    except ValidationError as exc:
        fallbacks = fallbacks or {}
        messages: list[str] = []
        for err in exc.errors():
            if err["type"] == FIELD_INVALID:
                msg = err["msg"]
            else:
                name = _field_name(model, err["loc"])
                msg = fallbacks.get(name) or f"{name}: {err['msg']}"
            if msg not in messages:
                messages.append(msg)
        raise ValidationFailure(messages) from None


def clean(data: Mapping[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None or a blank string.

    Used for partial updates: a form submits every input, but only the ones the
    user filled in are meant to change.
    """
    return {k: v for k, v in data.items() if v is not None and not (isinstance(v, str) and not v.strip())}


def parse_id(raw: Any) -> int:
    """Parse a record identifier from a path segment or form field.

    Identifiers are positive integers that fit a 64-bit column. Anything else raises
    MalformedIdentifierError, before any store access.
    """
    if isinstance(raw, bool):
        raise MalformedIdentifierError(raw)
    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw).strip()
        if not (text.isascii() and text.isdigit()):
            raise MalformedIdentifierError(raw)
        value = int(text)
    if not 1 <= value <= MAX_ID:
        raise MalformedIdentifierError(raw)
    return value
