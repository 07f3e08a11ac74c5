"""Typed header configuration models.

Each header kind has a small frozen dataclass holding its parameters, with
defaults taken from the OWASP Secure Headers project. `HeaderConfiguration`
aggregates them: one `use_*` flag per header kind and the matching optional
sub-configuration.

Invariants:
- A sub-configuration is set if and only if its `use_*` flag is true.
- Instances are frozen; build them through `SecureHeadersBuilder`.
"""

from __future__ import annotations

from dataclasses import dataclass

from secure_headers.csp import CspDirectiveSet
from secure_headers.options import CrossDomainPolicy, ReferrerPolicy, XFrameOption

# Two years, the OWASP recommended minimum for preload lists
DEFAULT_HSTS_MAX_AGE = 63072000
DEFAULT_CACHE_MAX_AGE = 31536000
DEFAULT_EXPECT_CT_MAX_AGE = 86400


@dataclass(frozen=True)
class HstsConfig:
    """Strict-Transport-Security parameters."""

    max_age: int = DEFAULT_HSTS_MAX_AGE
    include_subdomains: bool = True


@dataclass(frozen=True)
class XFrameOptionsConfig:
    """X-Frame-Options parameters.

    `domain` is only meaningful (and then required) for `ALLOW_FROM`.
    """

    mode: XFrameOption = XFrameOption.DENY
    domain: str | None = None


@dataclass(frozen=True)
class XssProtectionConfig:
    """X-XSS-Protection has no parameters; the auditor is always disabled."""


@dataclass(frozen=True)
class CacheControlConfig:
    """Cache-Control parameters. Flags are independent of each other."""

    private: bool = True
    max_age: int = DEFAULT_CACHE_MAX_AGE
    no_cache: bool = False
    no_store: bool = False
    must_revalidate: bool = False


@dataclass(frozen=True)
class ExpectCtConfig:
    """Expect-CT parameters."""

    report_uri: str
    max_age: int = DEFAULT_EXPECT_CT_MAX_AGE
    enforce: bool = False


@dataclass(frozen=True)
class ReferrerPolicyConfig:
    policy: ReferrerPolicy = ReferrerPolicy.NO_REFERRER


@dataclass(frozen=True)
class PermittedCrossDomainPolicyConfig:
    policy: CrossDomainPolicy = CrossDomainPolicy.NONE


@dataclass(frozen=True)
class HeaderConfiguration:
    """Finished, read-only header configuration.

    Produced by `SecureHeadersBuilder.build()` and consumed by
    `secure_headers.orchestrator.render()`.
    """

    use_hsts: bool = False
    hsts: HstsConfig | None = None

    use_x_frame_options: bool = False
    x_frame_options: XFrameOptionsConfig | None = None

    use_xss_protection: bool = False
    xss_protection: XssProtectionConfig | None = None

    use_content_type_options: bool = False

    use_content_security_policy: bool = False
    content_security_policy: CspDirectiveSet | None = None

    use_content_security_policy_report_only: bool = False
    content_security_policy_report_only: CspDirectiveSet | None = None

    use_permitted_cross_domain_policies: bool = False
    permitted_cross_domain_policies: PermittedCrossDomainPolicyConfig | None = None

    use_referrer_policy: bool = False
    referrer_policy: ReferrerPolicyConfig | None = None

    use_cache_control: bool = False
    cache_control: CacheControlConfig | None = None

    use_expect_ct: bool = False
    expect_ct: ExpectCtConfig | None = None

    remove_powered_by_header: bool = False
