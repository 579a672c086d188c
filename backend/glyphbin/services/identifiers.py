"""
Paste identifiers and deletion tokens.

Both are 128 bits from the operating system's CSPRNG (`secrets`), wrapped in
`uuid.UUID` only for equality and the canonical hyphenated hex form. They are
not RFC 4122 version-4 UUIDs: all 128 bits are random.
"""

import re
import secrets
import uuid
from typing import Any

from glyphbin.exceptions import InvalidIdentifierError

ID_BYTES = 16

# ASCII hex only: uuid.UUID alone would also take "+" signs and non-ASCII
# digits, since it parses with int(..., 16)
_ID_PATTERN = re.compile(
    r"(?:urn:uuid:)?(\{)?[0-9a-f]{8}(?:-?[0-9a-f]{4}){3}-?[0-9a-f]{12}(?(1)\})",
    re.IGNORECASE | re.ASCII,
)


def new_id() -> uuid.UUID:
    """Returns a fresh paste identifier."""
    return uuid.UUID(bytes=secrets.token_bytes(ID_BYTES))


def new_token() -> uuid.UUID:
    """Returns a fresh deletion token."""
    return uuid.UUID(bytes=secrets.token_bytes(ID_BYTES))


def parse_id(value: Any) -> uuid.UUID:
    """
    Parses an external paste ID.

    Accepts the canonical hyphenated form as well as the other spellings
    `uuid.UUID` understands (32 bare hex digits, braces, `urn:uuid:` prefix).

    Raises:
        InvalidIdentifierError: wrong length, non-hex characters, or not a string.
    """
    if not isinstance(value, str):
        raise InvalidIdentifierError(value)
    candidate = value.strip()
    if not _ID_PATTERN.fullmatch(candidate):
        raise InvalidIdentifierError(value)
    try:
        return uuid.UUID(candidate)
    except ValueError as e:
        raise InvalidIdentifierError(value) from e


def format_id(value: uuid.UUID) -> str:
    """Canonical external form: lowercase hex in 8-4-4-4-12 groups."""
    return str(value)
