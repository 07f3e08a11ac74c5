"""Closed option sets used by the header configuration.

Every enum value is the canonical header token, so rendering is a plain
`.value` lookup. `parse()` accepts either a member or its token (case and
underscore tolerant) and raises `ConfigurationError` for anything else.
"""

from __future__ import annotations

from enum import Enum

from secure_headers.errors import ConfigurationError


class _TokenEnum(str, Enum):
    """Enum whose values are header tokens."""

    @classmethod
    def parse(cls, value: object, parameter: str = "value"):
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            token = value.strip().lower().replace("_", "-")
            for member in cls:
                if token in (member.value.lower(), member.name.lower().replace("_", "-")):
                    return member
        allowed = ", ".join(m.value for m in cls)
        raise ConfigurationError(parameter, f"{value!r} is not one of: {allowed}")

    def __str__(self) -> str:
        return self.value


class XFrameOption(_TokenEnum):
    """X-Frame-Options modes."""

    DENY = "DENY"
    SAME_ORIGIN = "SAMEORIGIN"
    ALLOW_FROM = "ALLOW-FROM"


class ReferrerPolicy(_TokenEnum):
    """Referrer-Policy values."""

    NO_REFERRER = "no-referrer"
    NO_REFERRER_WHEN_DOWNGRADE = "no-referrer-when-downgrade"
    ORIGIN = "origin"
    ORIGIN_WHEN_CROSS_ORIGIN = "origin-when-cross-origin"
    SAME_ORIGIN = "same-origin"
    STRICT_ORIGIN = "strict-origin"
    STRICT_ORIGIN_WHEN_CROSS_ORIGIN = "strict-origin-when-cross-origin"
    UNSAFE_URL = "unsafe-url"


class CrossDomainPolicy(_TokenEnum):
    """X-Permitted-Cross-Domain-Policies values."""

    NONE = "none"
    MASTER_ONLY = "master-only"
    BY_CONTENT_TYPE = "by-content-type"
    BY_FTP_FILENAME = "by-ftp-filename"
    ALL = "all"


class CspCategory(_TokenEnum):
    """CSP resource categories that take a source list.

    Declaration order is the order directives appear in the rendered policy.
    """

    SCRIPT = "script-src"
    OBJECT = "object-src"
    STYLE = "style-src"
    IMG = "img-src"
    MEDIA = "media-src"
    FRAME = "frame-src"
    FONT = "font-src"
    CONNECT = "connect-src"
    DEFAULT = "default-src"
    BASE_URI = "base-uri"
    CHILD = "child-src"
    FORM_ACTION = "form-action"
    FRAME_ANCESTORS = "frame-ancestors"
    MANIFEST = "manifest-src"
    WORKER = "worker-src"


__all__ = ["XFrameOption", "ReferrerPolicy", "CrossDomainPolicy", "CspCategory"]
