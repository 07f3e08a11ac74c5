"""Header value renderers.

One pure function per non-CSP header kind (CSP lives in `csp.py`). None of
them raise for a configuration accepted by the builder.
"""

from __future__ import annotations

from secure_headers.models import (
    CacheControlConfig,
    ExpectCtConfig,
    HstsConfig,
    PermittedCrossDomainPolicyConfig,
    ReferrerPolicyConfig,
    XFrameOptionsConfig,
    XssProtectionConfig,
)
from secure_headers.options import XFrameOption


def render_hsts(config: HstsConfig) -> str:
    value = f"max-age={config.max_age}"
    if config.include_subdomains:
        value += "; includeSubDomains"
    return value


def render_x_frame_options(config: XFrameOptionsConfig) -> str:
    if config.mode is XFrameOption.ALLOW_FROM:
        return f"{config.mode.value} {config.domain}"
    return config.mode.value


def render_xss_protection(config: XssProtectionConfig | None = None) -> str:
    """Always "0": the legacy XSS auditor causes more problems than it solves."""
    return "0"


def render_content_type_options() -> str:
    return "nosniff"


def render_cache_control(config: CacheControlConfig) -> str:
    """Render Cache-Control; max-age is always present.

    Combinations such as no-store with max-age are emitted as given.
    """
    tokens: list[str] = []
    if config.private:
        tokens.append("private")
    if config.no_cache:
        tokens.append("no-cache")
    if config.no_store:
        tokens.append("no-store")
    if config.must_revalidate:
        tokens.append("must-revalidate")
    tokens.append(f"max-age={config.max_age}")
    return ", ".join(tokens)


def render_expect_ct(config: ExpectCtConfig) -> str:
    value = f'max-age={config.max_age}, report-uri="{config.report_uri}"'
    if config.enforce:
        value += ", enforce"
    return value


def render_referrer_policy(config: ReferrerPolicyConfig) -> str:
    return config.policy.value


def render_permitted_cross_domain_policies(
    config: PermittedCrossDomainPolicyConfig,
) -> str:
    return config.policy.value
