"""Fluent builder for secure header configurations.

Usage:
    config = (
        create_builder()
        .use_hsts()
        .use_x_frame_options(XFrameOption.SAME_ORIGIN)
        .use_content_security_policy(report_uri="https://example.com/csp")
        .add_csp_sources(CspCategory.SCRIPT, "'self'", "https://cdn.example.com")
        .remove_powered_by_header()
        .build()
    )

Conventions:
- Every `use_*` method enables one header kind and returns the builder.
- Arguments are validated before anything changes; a rejected call raises
  `ConfigurationError` and leaves the builder exactly as it was.
- `build()` returns a frozen `HeaderConfiguration` snapshot. The builder can
  keep going afterwards without affecting snapshots already handed out.

Defaults follow the OWASP Secure Headers project recommendations.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import replace
from typing import Any, Callable, Iterable, TypeVar

from secure_headers.csp import CspDirectiveSet, CspSource, SourceLike
from secure_headers.errors import ConfigurationError
from secure_headers.models import (
    DEFAULT_CACHE_MAX_AGE,
    DEFAULT_EXPECT_CT_MAX_AGE,
    DEFAULT_HSTS_MAX_AGE,
    CacheControlConfig,
    ExpectCtConfig,
    HeaderConfiguration,
    HstsConfig,
    PermittedCrossDomainPolicyConfig,
    ReferrerPolicyConfig,
    XFrameOptionsConfig,
    XssProtectionConfig,
)
from secure_headers.options import (
    CrossDomainPolicy,
    CspCategory,
    ReferrerPolicy,
    XFrameOption,
)
from secure_headers.validators import (
    require_flag,
    require_https_uri,
    require_non_negative,
    require_token,
)

logger = logging.getLogger("secure_headers.builder")

F = TypeVar("F", bound=Callable[..., Any])


def _log_rejection(func: F) -> F:
    """Log `ConfigurationError`s raised by a builder step, then re-raise."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ConfigurationError as exc:
            logger.warning(
                "Rejected %s(): parameter=%s reason=%s",
                func.__name__,
                exc.parameter,
                exc.reason,
            )
            raise

    return wrapper  # type: ignore[return-value]


def _csp_directives(
    *,
    plugin_types: str | None,
    block_all_mixed_content: bool,
    upgrade_insecure_requests: bool,
    referrer: str | None,
    report_uri: str | None,
    use_x_content_security_policy: bool,
) -> CspDirectiveSet:
    """Validate the policy-wide CSP clauses and wrap them in a directive set."""
    if plugin_types is not None:
        plugin_types = require_token(plugin_types, "plugin_types", allow_spaces=True)
    if referrer is not None:
        referrer = require_token(referrer, "referrer")
    if report_uri is not None:
        report_uri = require_https_uri(report_uri, "report_uri")
    require_flag(block_all_mixed_content, "block_all_mixed_content")
    require_flag(upgrade_insecure_requests, "upgrade_insecure_requests")
    require_flag(use_x_content_security_policy, "use_x_content_security_policy")
    return CspDirectiveSet(
        plugin_types=plugin_types,
        block_all_mixed_content=block_all_mixed_content,
        upgrade_insecure_requests=upgrade_insecure_requests,
        referrer=referrer,
        report_uri=report_uri,
        use_x_content_security_policy=use_x_content_security_policy,
    )


class SecureHeadersBuilder:
    """Accumulates header settings and produces a `HeaderConfiguration`."""

    def __init__(self) -> None:
        self._config = HeaderConfiguration()

    @property
    def configuration(self) -> HeaderConfiguration:
        """Current state, as the snapshot `build()` would return."""
        return self._config

    @_log_rejection
    def use_hsts(
        self,
        max_age: int = DEFAULT_HSTS_MAX_AGE,
        include_subdomains: bool = True,
    ) -> SecureHeadersBuilder:
        """Enable Strict-Transport-Security.

        Args:
            max_age: Seconds the browser should only reach the site over HTTPS.
            include_subdomains: Apply the rule to all subdomains as well.

        """
        max_age = require_non_negative(max_age, "max_age")
        require_flag(include_subdomains, "include_subdomains")
        self._config = replace(
            self._config,
            use_hsts=True,
            hsts=HstsConfig(max_age=max_age, include_subdomains=include_subdomains),
        )
        return self

    @_log_rejection
    def use_x_frame_options(
        self,
        mode: XFrameOption | str = XFrameOption.DENY,
        domain: str | None = None,
    ) -> SecureHeadersBuilder:
        """Enable X-Frame-Options.

        Args:
            mode: DENY, SAMEORIGIN or ALLOW-FROM.
            domain: Origin allowed to frame the site. Required for ALLOW-FROM
                and rejected for the other modes.

        Raises:
            ConfigurationError: If `domain` does not match `mode`.

        """
        mode = XFrameOption.parse(mode, "mode")
        if mode is XFrameOption.ALLOW_FROM:
            domain = require_token(domain, "domain")
        elif domain is not None:
            raise ConfigurationError("domain", f"only valid with {XFrameOption.ALLOW_FROM.value}")
        self._config = replace(
            self._config,
            use_x_frame_options=True,
            x_frame_options=XFrameOptionsConfig(mode=mode, domain=domain),
        )
        return self

    def use_xss_protection(self) -> SecureHeadersBuilder:
        """Enable X-XSS-Protection with the auditor disabled ("0").

        Only pair this with a real Content-Security-Policy.
        """
        self._config = replace(
            self._config,
            use_xss_protection=True,
            xss_protection=XssProtectionConfig(),
        )
        return self

    def use_content_type_options(self) -> SecureHeadersBuilder:
        """Enable X-Content-Type-Options: nosniff."""
        self._config = replace(self._config, use_content_type_options=True)
        return self

    def use_content_default_security_policy(self) -> SecureHeadersBuilder:
        """Enable a baseline CSP.

        script-src and object-src are limited to 'self', mixed content is
        blocked and insecure requests are upgraded.
        """
        directives = (
            CspDirectiveSet(block_all_mixed_content=True, upgrade_insecure_requests=True)
            .with_sources(CspCategory.SCRIPT, [CspSource.self_()])
            .with_sources(CspCategory.OBJECT, [CspSource.self_()])
        )
        self._config = replace(
            self._config,
            use_content_security_policy=True,
            content_security_policy=directives,
        )
        return self

    @_log_rejection
    def use_content_security_policy(
        self,
        plugin_types: str | None = None,
        block_all_mixed_content: bool = True,
        upgrade_insecure_requests: bool = True,
        referrer: str | None = None,
        report_uri: str | None = None,
        use_x_content_security_policy: bool = False,
    ) -> SecureHeadersBuilder:
        """Enable an enforcing Content-Security-Policy.

        Source lists start empty; fill them with `add_csp_sources()` or
        `set_csp_sources()`. Calling this again starts a fresh policy.

        Args:
            plugin_types: MIME types allowed for plugins (space separated).
            block_all_mixed_content: Emit block-all-mixed-content.
            upgrade_insecure_requests: Emit upgrade-insecure-requests.
            referrer: Value for the legacy referrer directive.
            report_uri: Absolute https URI violations are reported to.
            use_x_content_security_policy: Also send the value as
                X-Content-Security-Policy for old Internet Explorer.

        """
        directives = _csp_directives(
            plugin_types=plugin_types,
            block_all_mixed_content=block_all_mixed_content,
            upgrade_insecure_requests=upgrade_insecure_requests,
            referrer=referrer,
            report_uri=report_uri,
            use_x_content_security_policy=use_x_content_security_policy,
        )
        self._config = replace(
            self._config,
            use_content_security_policy=True,
            content_security_policy=directives,
        )
        return self

    @_log_rejection
    def use_content_security_policy_report_only(
        self,
        report_uri: str,
        plugin_types: str | None = None,
        block_all_mixed_content: bool = True,
        upgrade_insecure_requests: bool = True,
        referrer: str | None = None,
        use_x_content_security_policy: bool = False,
    ) -> SecureHeadersBuilder:
        """Enable Content-Security-Policy-Report-Only.

        Same options as `use_content_security_policy()`, but `report_uri` is
        required since a report-only policy is useless without it.

        Raises:
            ConfigurationError: If `report_uri` is not an absolute https URI.

        """
        require_https_uri(report_uri, "report_uri")
        directives = _csp_directives(
            plugin_types=plugin_types,
            block_all_mixed_content=block_all_mixed_content,
            upgrade_insecure_requests=upgrade_insecure_requests,
            referrer=referrer,
            report_uri=report_uri,
            use_x_content_security_policy=use_x_content_security_policy,
        )
        self._config = replace(
            self._config,
            use_content_security_policy_report_only=True,
            content_security_policy_report_only=directives,
        )
        return self

    def _csp_for(self, report_only: bool) -> CspDirectiveSet:
        if report_only:
            directives = self._config.content_security_policy_report_only
            method = "use_content_security_policy_report_only"
        else:
            directives = self._config.content_security_policy
            method = "use_content_security_policy"
        if directives is None:
            raise ConfigurationError("report_only", f"call {method}() first")
        return directives

    def _store_csp(self, directives: CspDirectiveSet, report_only: bool) -> None:
        if report_only:
            self._config = replace(
                self._config, content_security_policy_report_only=directives
            )
        else:
            self._config = replace(self._config, content_security_policy=directives)

    @_log_rejection
    def add_csp_sources(
        self,
        category: CspCategory | str,
        *sources: SourceLike,
        report_only: bool = False,
    ) -> SecureHeadersBuilder:
        """Append sources to one CSP category.

        Duplicates are dropped; the first occurrence keeps its position.

        Args:
            category: Category such as `CspCategory.SCRIPT` or "img-src".
            *sources: `CspSource` values or plain text ("'self'", "https://cdn").
            report_only: Target the report-only policy instead.

        Raises:
            ConfigurationError: Unknown category or source, or the targeted
                policy has not been enabled.

        """
        directives = self._csp_for(report_only)
        self._store_csp(directives.with_sources(category, sources), report_only)
        return self

    @_log_rejection
    def set_csp_sources(
        self,
        category: CspCategory | str,
        sources: Iterable[SourceLike],
        *,
        report_only: bool = False,
    ) -> SecureHeadersBuilder:
        """Replace the sources of one CSP category."""
        directives = self._csp_for(report_only)
        self._store_csp(
            directives.with_sources(category, sources, replace_existing=True),
            report_only,
        )
        return self

    @_log_rejection
    def use_permitted_cross_domain_policies(
        self, policy: CrossDomainPolicy | str = CrossDomainPolicy.NONE
    ) -> SecureHeadersBuilder:
        """Enable X-Permitted-Cross-Domain-Policies (default "none")."""
        policy = CrossDomainPolicy.parse(policy, "policy")
        self._config = replace(
            self._config,
            use_permitted_cross_domain_policies=True,
            permitted_cross_domain_policies=PermittedCrossDomainPolicyConfig(policy),
        )
        return self

    @_log_rejection
    def use_referrer_policy(
        self, policy: ReferrerPolicy | str = ReferrerPolicy.NO_REFERRER
    ) -> SecureHeadersBuilder:
        """Enable Referrer-Policy (default "no-referrer")."""
        policy = ReferrerPolicy.parse(policy, "policy")
        self._config = replace(
            self._config,
            use_referrer_policy=True,
            referrer_policy=ReferrerPolicyConfig(policy),
        )
        return self

    @_log_rejection
    def use_cache_control(
        self,
        private: bool = True,
        max_age: int = DEFAULT_CACHE_MAX_AGE,
        no_cache: bool = False,
        no_store: bool = False,
        must_revalidate: bool = False,
    ) -> SecureHeadersBuilder:
        """Enable Cache-Control.

        Args:
            private: Response is for a single user; shared caches must not store it.
            max_age: Maximum age in seconds a client should accept.
            no_cache: Revalidate with the origin before reuse.
            no_store: Do not store the response at all.
            must_revalidate: Stale responses must be revalidated.

        """
        max_age = require_non_negative(max_age, "max_age")
        self._config = replace(
            self._config,
            use_cache_control=True,
            cache_control=CacheControlConfig(
                private=require_flag(private, "private"),
                max_age=max_age,
                no_cache=require_flag(no_cache, "no_cache"),
                no_store=require_flag(no_store, "no_store"),
                must_revalidate=require_flag(must_revalidate, "must_revalidate"),
            ),
        )
        return self

    @_log_rejection
    def use_expect_ct(
        self,
        report_uri: str,
        max_age: int = DEFAULT_EXPECT_CT_MAX_AGE,
        enforce: bool = False,
    ) -> SecureHeadersBuilder:
        """Enable Expect-CT.

        Args:
            report_uri: Absolute https URI for Certificate Transparency failures.
            max_age: Seconds the host is remembered as a known Expect-CT host.
            enforce: Refuse connections that violate the CT policy.

        Raises:
            ConfigurationError: If `report_uri` is missing or not https.

        """
        report_uri = require_https_uri(report_uri, "report_uri")
        max_age = require_non_negative(max_age, "max_age")
        self._config = replace(
            self._config,
            use_expect_ct=True,
            expect_ct=ExpectCtConfig(
                report_uri=report_uri,
                max_age=max_age,
                enforce=require_flag(enforce, "enforce"),
            ),
        )
        return self

    def remove_powered_by_header(self) -> SecureHeadersBuilder:
        """Strip X-Powered-By from responses so the server stack is not advertised."""
        self._config = replace(self._config, remove_powered_by_header=True)
        return self

    def build(self) -> HeaderConfiguration:
        """Return the finished configuration."""
        return self._config


def create_builder() -> SecureHeadersBuilder:
    """Return a fresh, empty builder."""
    return SecureHeadersBuilder()


def build_default_configuration() -> HeaderConfiguration:
    """OWASP recommended headers with default values.

    Enables HSTS, X-Frame-Options, X-XSS-Protection, X-Content-Type-Options,
    the baseline CSP, X-Permitted-Cross-Domain-Policies, Referrer-Policy and
    Cache-Control, and removes X-Powered-By. Expect-CT and report-only CSP
    need a report URI and are left off.
    """
    return (
        create_builder()
        .use_hsts()
        .use_x_frame_options()
        .use_xss_protection()
        .use_content_type_options()
        .use_content_default_security_policy()
        .use_permitted_cross_domain_policies()
        .use_referrer_policy()
        .use_cache_control()
        .remove_powered_by_header()
        .build()
    )
