"""
orchestra.execution.normalizer - Provider Error Normalization

Collapses a provider's structured error body into one human-readable string.
Downstream consumers parse this string, so the format is fixed:

    <general message>; <general message>; <field>: <message>; ...

General messages come first in their original order, then field errors in
the payload's insertion order. A payload with nothing usable yields
``"Unknown validation error"``. Normalization never raises.

Example:
    >>> payload = ProviderErrorPayload.from_body(
    ...     {"errors": {"summary": "is required"}, "errorMessages": ["Bad request"]}
    ... )
    >>> normalize(payload)
    'Bad request; summary: is required'
"""

import json
import logging
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

logger = logging.getLogger(__name__)

UNKNOWN_VALIDATION_ERROR = "Unknown validation error"
FRAGMENT_SEPARATOR = "; "


class ProviderErrorPayload(BaseModel):
    """
    Raw error shape received on a failed provider call.

    Wire format (issue tracker): ``{"errors": {field: message}, "errorMessages": [...]}``,
    both keys optional or null. Transient input to :func:`normalize`; never persisted.
    """

    model_config = ConfigDict(populate_by_name=True)

    field_errors: dict[str, str] = Field(default_factory=dict, alias="errors")
    general_messages: list[str] = Field(default_factory=list, alias="errorMessages")

    @field_validator("field_errors", "general_messages", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return {} if info.field_name == "field_errors" else []
        return value

    @classmethod
    def from_body(cls, body: Any) -> "ProviderErrorPayload":
        """
        Defensively parse a decoded (or raw) error body.

        Anything malformed degrades to an empty payload, or to a payload with the
        unusable entries dropped, so the normalizer's fallback applies.

        Args:
            body: Decoded JSON (dict), raw JSON text/bytes, or anything else

        Returns:
            ProviderErrorPayload, possibly empty
        """
        if isinstance(body, bytes | bytearray):
            body = body.decode("utf-8", errors="replace")
        if isinstance(body, str):
            try:
                body = json.loads(body) if body.strip() else None
            except ValueError:
                logger.debug("Error body is not JSON, using empty payload")
                return cls()
        if not isinstance(body, dict):
            return cls()

        field_errors: dict[str, str] = {}
        raw_errors = body.get("errors")
        if isinstance(raw_errors, dict):
            for name, value in raw_errors.items():
                text = _coerce_message(value)
                if text:
                    field_errors[str(name)] = text

        general_messages: list[str] = []
        raw_messages = body.get("errorMessages")
        if isinstance(raw_messages, list):
            for value in raw_messages:
                text = _coerce_message(value)
                if text:
                    general_messages.append(text)
        elif isinstance(raw_messages, str) and raw_messages.strip():
            general_messages.append(raw_messages)

        return cls(field_errors=field_errors, general_messages=general_messages)

    @property
    def is_empty(self) -> bool:
        return not self.field_errors and not self.general_messages


def _coerce_message(value: Any) -> str | None:
    # Jira occasionally sends a list of messages for one field
    if value is None:
        return None
    if isinstance(value, list):
        parts = [str(v) for v in value if v is not None and str(v).strip()]
        return ", ".join(parts) or None
    if isinstance(value, dict):
        return None
    text = str(value)
    return text if text.strip() else None


def normalize(payload: ProviderErrorPayload | None) -> str:
    """
    Collapse a provider error payload into one message.

    Args:
        payload: Parsed error payload (None is treated as empty)

    Returns:
        ``"; "``-joined fragments, or ``"Unknown validation error"`` when the
        payload carried no usable information
    """
    if payload is None:
        return UNKNOWN_VALIDATION_ERROR

    fragments: list[str] = list(payload.general_messages)
    fragments.extend(f"{name}: {message}" for name, message in payload.field_errors.items())

    if fragments:
        return FRAGMENT_SEPARATOR.join(fragments)
    return UNKNOWN_VALIDATION_ERROR


def normalize_validation_error(error: ValidationError) -> str:
    """Render a pydantic ValidationError on an adapter payload in normalized form."""
    field_errors: dict[str, str] = {}
    general_messages: list[str] = []
    for detail in error.errors():
        loc = ".".join(str(part) for part in detail.get("loc", ()))
        message = detail.get("msg", "is invalid").removeprefix("Value error, ")
        if loc:
            # Keep the first message per field, mirroring the provider shape
            field_errors.setdefault(loc, message)
        else:
            general_messages.append(message)
    return normalize(
        ProviderErrorPayload(field_errors=field_errors, general_messages=general_messages)
    )
