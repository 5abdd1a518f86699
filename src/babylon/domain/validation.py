"""Input validation for identifiers and user-supplied content.

The ``is_*`` helpers answer yes/no; the ``assert_*``/``validate_*`` helpers raise
:class:`babylon.domain.errors.ValidationError` so failures render as a
VALIDATION_ERROR envelope at the API boundary.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from babylon.domain.errors import ValidationError

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
PRIVY_DID_RE = re.compile(r"^did:privy:[a-zA-Z0-9]+$")
ETH_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
USERNAME_RE = re.compile(r"^[a-z0-9_]{3,50}$")

CONTENT_LIMITS = {
    "POST_CONTENT": 5000,
    "BIO": 500,
    "DISPLAY_NAME": 100,
    "USERNAME": 50,
    "TAG_NAME": 100,
}


def _matches(pattern: re.Pattern, value: Any) -> bool:
    # fullmatch: `$` alone would accept a trailing newline
    return isinstance(value, str) and pattern.fullmatch(value) is not None


def is_uuid(value: Any) -> bool:
    return _matches(UUID_RE, value)


def assert_uuid(value: Any, name: str = "value") -> None:
    if not is_uuid(value):
        raise ValidationError(f"{name} must be a valid UUID, got: {value}", {name: value})


def is_privy_did(value: Any) -> bool:
    return _matches(PRIVY_DID_RE, value)


def assert_privy_did(value: Any, name: str = "value") -> None:
    if not is_privy_did(value):
        raise ValidationError(f"{name} must be a valid Privy DID, got: {value}", {name: value})


def is_eth_address(value: Any) -> bool:
    return _matches(ETH_ADDRESS_RE, value)


def assert_eth_address(value: Any, name: str = "value") -> None:
    if not is_eth_address(value):
        raise ValidationError(
            f"{name} must be a valid Ethereum address, got: {value}", {name: value}
        )


def is_valid_username(value: Any) -> bool:
    return _matches(USERNAME_RE, value)


def assert_username(value: Any) -> None:
    if not is_valid_username(value):
        raise ValidationError(
            "Username must be 3-50 characters, lowercase alphanumeric and underscores only",
            {"username": value},
        )


def validate_length(value: Optional[str], limit_key: str, field: str) -> None:
    """Check an optional text field against CONTENT_LIMITS[limit_key]"""
    if value is None:
        return
    limit = CONTENT_LIMITS[limit_key]
    if len(value) > limit:
        raise ValidationError(
            f"{field} must be {limit} characters or less",
            {"field": field, "limit": limit, "length": len(value)},
        )


def validate_post_content(content: Any, context: Optional[str] = None) -> None:
    """Validate post content: a non-empty string within the post limit

    Raises:
        ValidationError: If content is not a string, empty, or too long
    """
    prefix = f"{context}: " if context else ""
    if not isinstance(content, str):
        raise ValidationError(f"{prefix}Content must be a string")
    if not content:
        raise ValidationError(f"{prefix}Content cannot be empty")
    limit = CONTENT_LIMITS["POST_CONTENT"]
    if len(content) > limit:
        raise ValidationError(f"{prefix}Content exceeds {limit} characters")


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


def is_positive_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
