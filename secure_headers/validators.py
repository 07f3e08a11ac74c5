"""Configuration-time validation for secure_headers.

This module provides the predicates used while a header configuration is
being built:
- https report URIs (CSP report-only, Expect-CT, CSP report-uri)
- non-negative integer durations (max-age values)
- single header tokens (domains, nonces, plugin types)

Each `validate_*` function returns a `ValidationResult`; the matching
`require_*` helper raises `ConfigurationError` naming the parameter instead.

Security considerations:
- Values end up verbatim in response headers, so only visible ASCII is
  accepted and CR/LF and list separators are rejected to prevent header
  injection. Internationalized hosts must be given in punycode.
- Only the URI syntax is checked; nothing is fetched or resolved
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

from secure_headers.errors import ConfigurationError


class InvalidUriKind(Enum):
    """Reason a URI was rejected."""

    EMPTY = "empty"
    MALFORMED = "malformed"
    RELATIVE = "relative"
    NOT_HTTPS = "not_https"


@dataclass(frozen=True)
class ValidationResult:
    """Result of a validation check.

    Attributes:
        valid: Whether the input passed validation
        error: Error message if validation failed (None if valid)
        kind: Failure category for URI checks (None if valid)
    """

    valid: bool
    error: str | None = None
    kind: InvalidUriKind | None = None


# Characters that would split or terminate a header value
_FORBIDDEN_CHARS = frozenset("\r\n;,")


def _is_visible_ascii(c: str) -> bool:
    return "!" <= c <= "~"


def validate_https_uri(value: str | None) -> ValidationResult:
    """Validate that a value is an absolute https URI.

    Args:
        value: Candidate URI.

    Returns:
        ValidationResult with valid=True, or the error and `InvalidUriKind`.

    Examples:
        >>> validate_https_uri("https://example.com/report").valid
        True
        >>> validate_https_uri("http://example.com/report").kind
        <InvalidUriKind.NOT_HTTPS: 'not_https'>
        >>> validate_https_uri("/report").kind
        <InvalidUriKind.RELATIVE: 'relative'>
    """
    if not value or not isinstance(value, str) or not value.strip():
        return ValidationResult(
            valid=False, error="URI is required", kind=InvalidUriKind.EMPTY
        )

    value = value.strip()

    if any(not _is_visible_ascii(c) or c in ";,\"" for c in value):
        return ValidationResult(
            valid=False,
            error="URI contains characters not allowed in a header",
            kind=InvalidUriKind.MALFORMED,
        )

    try:
        parsed = urlparse(value)
    except ValueError:
        return ValidationResult(
            valid=False, error="URI could not be parsed", kind=InvalidUriKind.MALFORMED
        )

    if not parsed.scheme or not parsed.netloc:
        return ValidationResult(
            valid=False, error="URI must be absolute", kind=InvalidUriKind.RELATIVE
        )

    if parsed.scheme.lower() != "https":
        return ValidationResult(
            valid=False, error="URI must use the https scheme", kind=InvalidUriKind.NOT_HTTPS
        )

    if not parsed.hostname:
        return ValidationResult(
            valid=False, error="URI has no host", kind=InvalidUriKind.MALFORMED
        )

    return ValidationResult(valid=True)


def validate_token(value: str | None, *, allow_spaces: bool = False) -> ValidationResult:
    """Validate a header token such as a domain, nonce or source expression.

    Args:
        value: Candidate token.
        allow_spaces: Accept a space-separated list (e.g. plugin MIME types).

    """
    if not value or not isinstance(value, str) or not value.strip():
        return ValidationResult(valid=False, error="Value is required")

    value = value.strip()

    if any(c in _FORBIDDEN_CHARS for c in value):
        return ValidationResult(
            valid=False, error="Value contains characters not allowed in a header"
        )

    for c in value:
        if c == " " and allow_spaces:
            continue
        if c.isspace():
            return ValidationResult(valid=False, error="Value must not contain whitespace")
        if not _is_visible_ascii(c):
            return ValidationResult(
                valid=False,
                error="Value must be printable ASCII (use punycode for IDN hosts)",
            )

    return ValidationResult(valid=True)


def require_flag(value: bool, parameter: str) -> bool:
    """Ensure `value` is a real bool; truthy strings such as "false" are rejected."""
    if not isinstance(value, bool):
        raise ConfigurationError(parameter, "must be True or False")
    return value


def require_https_uri(value: str | None, parameter: str) -> str:
    """Return the stripped URI or raise `ConfigurationError` for `parameter`."""
    result = validate_https_uri(value)
    if not result.valid:
        raise ConfigurationError(parameter, result.error or "invalid URI")
    return value.strip()  # type: ignore[union-attr]


def require_token(
    value: str | None, parameter: str, *, allow_spaces: bool = False
) -> str:
    """Return the stripped token or raise `ConfigurationError` for `parameter`."""
    result = validate_token(value, allow_spaces=allow_spaces)
    if not result.valid:
        raise ConfigurationError(parameter, result.error or "invalid value")
    return value.strip()  # type: ignore[union-attr]


def require_non_negative(value: int, parameter: str) -> int:
    """Ensure `value` is an integer >= 0.

    Raises:
        ConfigurationError: If `value` is not an int (bools included) or is negative.

    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(parameter, "must be an integer number of seconds")
    if value < 0:
        raise ConfigurationError(parameter, "must not be negative")
    return value
