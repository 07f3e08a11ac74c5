"""Turn a `HeaderConfiguration` into concrete response headers.

`render()` walks the configuration in a fixed order and returns a
`RenderedHeaders`: the headers to set (insertion ordered) and the headers
to remove. It performs no I/O; writing onto a response is left to the
caller (see `secure_headers.middleware`).

Header order:
    Strict-Transport-Security, X-Frame-Options, X-XSS-Protection,
    X-Content-Type-Options, Content-Security-Policy,
    X-Content-Security-Policy, Content-Security-Policy-Report-Only,
    X-Content-Security-Policy-Report-Only, X-Permitted-Cross-Domain-Policies,
    Referrer-Policy, Cache-Control, Expect-CT
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, MutableMapping, TypeVar

from secure_headers.csp import CspDirectiveSet, render_csp
from secure_headers.errors import RenderInvariantViolation
from secure_headers.models import HeaderConfiguration
from secure_headers.renderers import (
    render_cache_control,
    render_content_type_options,
    render_expect_ct,
    render_hsts,
    render_permitted_cross_domain_policies,
    render_referrer_policy,
    render_x_frame_options,
    render_xss_protection,
)

logger = logging.getLogger("secure_headers.orchestrator")

T = TypeVar("T")

STRICT_TRANSPORT_SECURITY = "Strict-Transport-Security"
X_FRAME_OPTIONS = "X-Frame-Options"
X_XSS_PROTECTION = "X-XSS-Protection"
X_CONTENT_TYPE_OPTIONS = "X-Content-Type-Options"
CONTENT_SECURITY_POLICY = "Content-Security-Policy"
X_CONTENT_SECURITY_POLICY = "X-Content-Security-Policy"
CONTENT_SECURITY_POLICY_REPORT_ONLY = "Content-Security-Policy-Report-Only"
X_CONTENT_SECURITY_POLICY_REPORT_ONLY = "X-Content-Security-Policy-Report-Only"
X_PERMITTED_CROSS_DOMAIN_POLICIES = "X-Permitted-Cross-Domain-Policies"
REFERRER_POLICY = "Referrer-Policy"
CACHE_CONTROL = "Cache-Control"
EXPECT_CT = "Expect-CT"
X_POWERED_BY = "X-Powered-By"


@dataclass(frozen=True)
class RenderedHeaders:
    """Headers to set and headers to delete on an outgoing response."""

    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    remove: frozenset[str] = frozenset()

    def apply(self, target: MutableMapping[str, str]) -> None:
        """Write `headers` onto `target` (overwriting) and delete `remove`."""
        for name, value in self.headers.items():
            target[name] = value
        for name in self.remove:
            if name in target:
                del target[name]


def _require(value: T | None, header: str) -> T:
    if value is None:
        raise RenderInvariantViolation(header)
    return value


def _check_no_orphans(config: HeaderConfiguration) -> None:
    """Raise for a sub-configuration whose header is disabled."""
    pairs = (
        (config.use_hsts, config.hsts, STRICT_TRANSPORT_SECURITY),
        (config.use_x_frame_options, config.x_frame_options, X_FRAME_OPTIONS),
        (config.use_xss_protection, config.xss_protection, X_XSS_PROTECTION),
        (
            config.use_content_security_policy,
            config.content_security_policy,
            CONTENT_SECURITY_POLICY,
        ),
        (
            config.use_content_security_policy_report_only,
            config.content_security_policy_report_only,
            CONTENT_SECURITY_POLICY_REPORT_ONLY,
        ),
        (
            config.use_permitted_cross_domain_policies,
            config.permitted_cross_domain_policies,
            X_PERMITTED_CROSS_DOMAIN_POLICIES,
        ),
        (config.use_referrer_policy, config.referrer_policy, REFERRER_POLICY),
        (config.use_cache_control, config.cache_control, CACHE_CONTROL),
        (config.use_expect_ct, config.expect_ct, EXPECT_CT),
    )
    for enabled, sub_config, header in pairs:
        if not enabled and sub_config is not None:
            raise RenderInvariantViolation(
                header, "is disabled but still has a configuration attached"
            )


def _render_policy(
    headers: dict[str, str],
    directives: CspDirectiveSet,
    header: str,
    legacy_header: str,
) -> None:
    value = render_csp(directives)
    if not value:
        logger.warning("%s is enabled but has no directives", header)
    headers[header] = value
    if directives.use_x_content_security_policy:
        headers[legacy_header] = value


def render(config: HeaderConfiguration) -> RenderedHeaders:
    """Render every enabled header of `config`.

    Raises:
        RenderInvariantViolation: An enabled header has no sub-configuration,
            or a sub-configuration is set while its header is disabled. Only
            possible for hand-assembled configurations.

    """
    _check_no_orphans(config)
    headers: dict[str, str] = {}

    if config.use_hsts:
        headers[STRICT_TRANSPORT_SECURITY] = render_hsts(
            _require(config.hsts, STRICT_TRANSPORT_SECURITY)
        )

    if config.use_x_frame_options:
        headers[X_FRAME_OPTIONS] = render_x_frame_options(
            _require(config.x_frame_options, X_FRAME_OPTIONS)
        )

    if config.use_xss_protection:
        headers[X_XSS_PROTECTION] = render_xss_protection(
            _require(config.xss_protection, X_XSS_PROTECTION)
        )

    if config.use_content_type_options:
        headers[X_CONTENT_TYPE_OPTIONS] = render_content_type_options()

    if config.use_content_security_policy:
        _render_policy(
            headers,
            _require(config.content_security_policy, CONTENT_SECURITY_POLICY),
            CONTENT_SECURITY_POLICY,
            X_CONTENT_SECURITY_POLICY,
        )

    if config.use_content_security_policy_report_only:
        _render_policy(
            headers,
            _require(
                config.content_security_policy_report_only,
                CONTENT_SECURITY_POLICY_REPORT_ONLY,
            ),
            CONTENT_SECURITY_POLICY_REPORT_ONLY,
            X_CONTENT_SECURITY_POLICY_REPORT_ONLY,
        )

    if config.use_permitted_cross_domain_policies:
        headers[X_PERMITTED_CROSS_DOMAIN_POLICIES] = (
            render_permitted_cross_domain_policies(
                _require(
                    config.permitted_cross_domain_policies,
                    X_PERMITTED_CROSS_DOMAIN_POLICIES,
                )
            )
        )

    if config.use_referrer_policy:
        headers[REFERRER_POLICY] = render_referrer_policy(
            _require(config.referrer_policy, REFERRER_POLICY)
        )

    if config.use_cache_control:
        headers[CACHE_CONTROL] = render_cache_control(
            _require(config.cache_control, CACHE_CONTROL)
        )

    if config.use_expect_ct:
        headers[EXPECT_CT] = render_expect_ct(_require(config.expect_ct, EXPECT_CT))

    remove = frozenset({X_POWERED_BY}) if config.remove_powered_by_header else frozenset()

    logger.debug(
        "Rendered security headers: set=%s remove=%s",
        ", ".join(headers) or "-",
        ", ".join(sorted(remove)) or "-",
    )
    return RenderedHeaders(headers=MappingProxyType(headers), remove=remove)
