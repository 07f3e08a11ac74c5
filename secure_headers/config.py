"""Environment-driven configuration for secure_headers.

Reads `SECURE_HEADERS_*` settings from the process environment and an
optional `.env` file (via Starlette's `Config`) and turns them into a
`HeaderConfiguration`.

Recognised keys (defaults in brackets):
    SECURE_HEADERS_HSTS [true]
    SECURE_HEADERS_HSTS_MAX_AGE [63072000]
    SECURE_HEADERS_HSTS_INCLUDE_SUBDOMAINS [true]
    SECURE_HEADERS_X_FRAME_OPTIONS [deny]; empty disables the header
    SECURE_HEADERS_X_FRAME_OPTIONS_DOMAIN []
    SECURE_HEADERS_XSS_PROTECTION [true]
    SECURE_HEADERS_CONTENT_TYPE_OPTIONS [true]
    SECURE_HEADERS_DEFAULT_CSP [true]
    SECURE_HEADERS_CSP_REPORT_ONLY_URI []; set to enable report-only CSP
    SECURE_HEADERS_PERMITTED_CROSS_DOMAIN_POLICIES [none]; empty disables
    SECURE_HEADERS_REFERRER_POLICY [no-referrer]; empty disables
    SECURE_HEADERS_CACHE_CONTROL [true]
    SECURE_HEADERS_CACHE_CONTROL_MAX_AGE [31536000]
    SECURE_HEADERS_EXPECT_CT_REPORT_URI []; set to enable Expect-CT
    SECURE_HEADERS_EXPECT_CT_ENFORCE [false]
    SECURE_HEADERS_REMOVE_POWERED_BY [true]

Invalid values raise `ConfigurationError` at start-up, like the builder.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Mapping, TypeVar

from starlette.config import Config

from secure_headers.builder import SecureHeadersBuilder, create_builder
from secure_headers.errors import ConfigurationError
from secure_headers.models import (
    DEFAULT_CACHE_MAX_AGE,
    DEFAULT_HSTS_MAX_AGE,
    HeaderConfiguration,
)

logger = logging.getLogger("secure_headers.config")

T = TypeVar("T")

PREFIX = "SECURE_HEADERS_"


class SecureHeadersSettings:
    """Settings accessor with secure_headers defaults.

    Wraps a Starlette Config object. Lookups are prefixed with
    `SECURE_HEADERS_` and fall back to the package defaults.

    Attributes:
        _config: The underlying Starlette Config object
        _defaults: Package-level default values

    """

    def __init__(
        self,
        env_file: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize from an optional env file.

        Args:
            env_file: Path to a .env file. A missing file is not an error.
            environ: Environment mapping to read instead of `os.environ`.

        """
        env_path = Path(env_file) if env_file else None
        kwargs: dict[str, Any] = {}
        if environ is not None:
            kwargs["environ"] = environ
        if env_path is not None and env_path.exists():
            self._config = Config(env_path, **kwargs)
        else:
            self._config = Config(**kwargs)

        self._defaults: dict[str, Any] = {
            "HSTS": "true",
            "HSTS_MAX_AGE": str(DEFAULT_HSTS_MAX_AGE),
            "HSTS_INCLUDE_SUBDOMAINS": "true",
            "X_FRAME_OPTIONS": "deny",
            "X_FRAME_OPTIONS_DOMAIN": "",
            "XSS_PROTECTION": "true",
            "CONTENT_TYPE_OPTIONS": "true",
            "DEFAULT_CSP": "true",
            "CSP_REPORT_ONLY_URI": "",
            "PERMITTED_CROSS_DOMAIN_POLICIES": "none",
            "REFERRER_POLICY": "no-referrer",
            "CACHE_CONTROL": "true",
            "CACHE_CONTROL_MAX_AGE": str(DEFAULT_CACHE_MAX_AGE),
            "EXPECT_CT_REPORT_URI": "",
            "EXPECT_CT_ENFORCE": "false",
            "REMOVE_POWERED_BY": "true",
        }

    def __call__(
        self,
        key: str,
        *,
        cast: Callable[[Any], T] | type[T] | None = None,
    ) -> T | str:
        """Get a setting by its short key (without the prefix).

        Raises:
            ConfigurationError: If the value cannot be cast.

        """
        name = f"{PREFIX}{key}"
        default = self._defaults.get(key, "")
        try:
            if cast is not None:
                return self._config(name, cast=cast, default=default)
            return self._config(name, default=default)
        except ValueError as exc:
            raise ConfigurationError(name, str(exc)) from exc

    def flag(self, key: str) -> bool:
        return bool(self(key, cast=bool))

    def text(self, key: str) -> str:
        return str(self(key)).strip()


def apply_settings(
    settings: SecureHeadersSettings,
    builder: SecureHeadersBuilder | None = None,
) -> SecureHeadersBuilder:
    """Enable headers on `builder` according to `settings`."""
    builder = builder or create_builder()

    if settings.flag("HSTS"):
        builder.use_hsts(
            max_age=settings("HSTS_MAX_AGE", cast=int),
            include_subdomains=settings.flag("HSTS_INCLUDE_SUBDOMAINS"),
        )

    frame_mode = settings.text("X_FRAME_OPTIONS")
    if frame_mode:
        builder.use_x_frame_options(
            frame_mode, settings.text("X_FRAME_OPTIONS_DOMAIN") or None
        )

    if settings.flag("XSS_PROTECTION"):
        builder.use_xss_protection()

    if settings.flag("CONTENT_TYPE_OPTIONS"):
        builder.use_content_type_options()

    if settings.flag("DEFAULT_CSP"):
        builder.use_content_default_security_policy()

    report_only_uri = settings.text("CSP_REPORT_ONLY_URI")
    if report_only_uri:
        builder.use_content_security_policy_report_only(report_only_uri)

    cross_domain = settings.text("PERMITTED_CROSS_DOMAIN_POLICIES")
    if cross_domain:
        builder.use_permitted_cross_domain_policies(cross_domain)

    referrer = settings.text("REFERRER_POLICY")
    if referrer:
        builder.use_referrer_policy(referrer)

    if settings.flag("CACHE_CONTROL"):
        builder.use_cache_control(max_age=settings("CACHE_CONTROL_MAX_AGE", cast=int))

    expect_ct_uri = settings.text("EXPECT_CT_REPORT_URI")
    if expect_ct_uri:
        builder.use_expect_ct(expect_ct_uri, enforce=settings.flag("EXPECT_CT_ENFORCE"))

    if settings.flag("REMOVE_POWERED_BY"):
        builder.remove_powered_by_header()

    return builder


def configure_from_env(
    env_file: str | Path | None = ".env",
    environ: Mapping[str, str] | None = None,
) -> HeaderConfiguration:
    """Build a `HeaderConfiguration` from environment settings.

    Args:
        env_file: Optional .env file; missing files are ignored.
        environ: Environment mapping to read instead of `os.environ`.

    Returns:
        The finished configuration.

    """
    settings = SecureHeadersSettings(env_file, environ=environ)
    config = apply_settings(settings).build()
    logger.debug("Loaded secure headers configuration from environment")
    return config
