from __future__ import annotations

import logging
from dataclasses import FrozenInstanceError

import pytest

from secure_headers.builder import build_default_configuration, create_builder
from secure_headers.csp import CspSource
from secure_headers.errors import ConfigurationError
from secure_headers.models import HeaderConfiguration, HstsConfig
from secure_headers.options import (
    CrossDomainPolicy,
    CspCategory,
    ReferrerPolicy,
    XFrameOption,
)


def test_every_step_returns_the_same_builder(builder) -> None:
    assert builder.use_hsts() is builder
    assert builder.use_x_frame_options() is builder
    assert builder.use_xss_protection() is builder
    assert builder.use_content_type_options() is builder
    assert builder.use_content_security_policy() is builder
    assert builder.add_csp_sources(CspCategory.SCRIPT, "'self'") is builder
    assert builder.set_csp_sources(CspCategory.OBJECT, ["'none'"]) is builder
    assert builder.use_permitted_cross_domain_policies() is builder
    assert builder.use_referrer_policy() is builder
    assert builder.use_cache_control() is builder
    assert builder.use_expect_ct("https://example.com/ct") is builder
    assert builder.remove_powered_by_header() is builder


def test_fresh_builder_is_empty() -> None:
    assert create_builder().build() == HeaderConfiguration()
    assert create_builder() is not create_builder()


def test_build_returns_frozen_configuration(builder) -> None:
    config = builder.use_hsts().build()
    with pytest.raises(FrozenInstanceError):
        config.use_hsts = False  # type: ignore[misc]


def test_later_steps_do_not_change_earlier_snapshots(builder) -> None:
    first = builder.use_hsts().build()
    builder.use_content_type_options()

    assert first.use_content_type_options is False
    assert builder.build().use_content_type_options is True


def test_use_hsts_defaults(builder) -> None:
    config = builder.use_hsts().build()
    assert config.use_hsts is True
    assert config.hsts == HstsConfig(max_age=63072000, include_subdomains=True)


def test_use_hsts_rejects_negative_max_age(builder) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        builder.use_hsts(max_age=-1)
    assert excinfo.value.parameter == "max_age"
    assert builder.build().use_hsts is False


def test_x_frame_options_allow_from_requires_domain(builder) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        builder.use_x_frame_options(XFrameOption.ALLOW_FROM)
    assert excinfo.value.parameter == "domain"
    assert builder.build().x_frame_options is None

    config = builder.use_x_frame_options("allow-from", "example.com").build()
    assert config.x_frame_options.mode is XFrameOption.ALLOW_FROM
    assert config.x_frame_options.domain == "example.com"


def test_x_frame_options_rejects_domain_for_other_modes(builder) -> None:
    with pytest.raises(ConfigurationError):
        builder.use_x_frame_options(XFrameOption.DENY, "example.com")


def test_x_frame_options_accepts_text_modes(builder) -> None:
    config = builder.use_x_frame_options("sameorigin").build()
    assert config.x_frame_options.mode is XFrameOption.SAME_ORIGIN

    with pytest.raises(ConfigurationError) as excinfo:
        builder.use_x_frame_options("maybe")
    assert excinfo.value.parameter == "mode"


def test_default_security_policy(builder) -> None:
    config = builder.use_content_default_security_policy().build()
    csp = config.content_security_policy

    assert config.use_content_security_policy is True
    assert csp.sources_for(CspCategory.SCRIPT) == (CspSource.self_(),)
    assert csp.sources_for(CspCategory.OBJECT) == (CspSource.self_(),)
    assert csp.block_all_mixed_content is True
    assert csp.upgrade_insecure_requests is True


def test_use_content_security_policy_validates_report_uri(builder) -> None:
    with pytest.raises(ConfigurationError):
        builder.use_content_security_policy(report_uri="http://example.com/csp")
    assert builder.build().use_content_security_policy is False

    config = builder.use_content_security_policy(
        report_uri="https://example.com/csp"
    ).build()
    assert config.content_security_policy.report_uri == "https://example.com/csp"


def test_report_only_rejection_is_idempotent(builder) -> None:
    before = builder.build()

    with pytest.raises(ConfigurationError) as excinfo:
        builder.use_content_security_policy_report_only("http://example.com/report")
    assert excinfo.value.parameter == "report_uri"
    assert builder.build() == before

    with pytest.raises(ConfigurationError):
        builder.use_content_security_policy_report_only("http://example.com/report")
    assert builder.build() == before

    config = builder.use_content_security_policy_report_only(
        "https://example.com/report"
    ).build()
    assert config.use_content_security_policy_report_only is True
    assert (
        config.content_security_policy_report_only.report_uri
        == "https://example.com/report"
    )


def test_enforcing_and_report_only_policies_are_independent(builder) -> None:
    config = (
        builder.use_content_security_policy()
        .use_content_security_policy_report_only("https://example.com/report")
        .add_csp_sources(CspCategory.SCRIPT, "'self'")
        .add_csp_sources(CspCategory.SCRIPT, "'none'", report_only=True)
        .build()
    )
    assert config.content_security_policy.sources_for("script-src") == (
        CspSource.self_(),
    )
    assert config.content_security_policy_report_only.sources_for("script-src") == (
        CspSource.none(),
    )


def test_csp_sources_require_enabled_policy(builder) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        builder.add_csp_sources(CspCategory.SCRIPT, "'self'")
    assert excinfo.value.parameter == "report_only"

    builder.use_content_security_policy()
    with pytest.raises(ConfigurationError):
        builder.add_csp_sources(CspCategory.SCRIPT, "'self'", report_only=True)


def test_add_csp_sources_collapses_duplicates(builder) -> None:
    config = (
        builder.use_content_security_policy()
        .add_csp_sources(CspCategory.IMG, "https://img.example.com", "'self'")
        .add_csp_sources(CspCategory.IMG, "https://img.example.com", "data:")
        .build()
    )
    rendered = [s.render() for s in config.content_security_policy.sources_for("img-src")]
    assert rendered == ["https://img.example.com", "'self'", "data:"]


def test_unknown_csp_category_is_rejected(builder) -> None:
    builder.use_content_security_policy()
    with pytest.raises(ConfigurationError) as excinfo:
        builder.add_csp_sources("sound-src", "'self'")
    assert excinfo.value.parameter == "category"


def test_enum_headers_accept_members_and_tokens(builder) -> None:
    config = (
        builder.use_referrer_policy("strict-origin")
        .use_permitted_cross_domain_policies(CrossDomainPolicy.BY_CONTENT_TYPE)
        .build()
    )
    assert config.referrer_policy.policy is ReferrerPolicy.STRICT_ORIGIN
    assert config.permitted_cross_domain_policies.policy is (
        CrossDomainPolicy.BY_CONTENT_TYPE
    )

    with pytest.raises(ConfigurationError):
        builder.use_referrer_policy("everything")


def test_use_expect_ct_requires_https_report_uri(builder) -> None:
    with pytest.raises(ConfigurationError):
        builder.use_expect_ct("")
    with pytest.raises(ConfigurationError):
        builder.use_expect_ct("http://example.com/ct")
    with pytest.raises(ConfigurationError):
        builder.use_expect_ct("https://example.com/ct", max_age=-5)
    assert builder.build().use_expect_ct is False

    config = builder.use_expect_ct("https://example.com/ct", enforce=True).build()
    assert config.expect_ct.max_age == 86400
    assert config.expect_ct.enforce is True


def test_rejections_are_logged(builder, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="secure_headers.builder"):
        with pytest.raises(ConfigurationError):
            builder.use_expect_ct("http://example.com/ct")

    assert "use_expect_ct" in caplog.text
    assert "report_uri" in caplog.text


def test_build_default_configuration() -> None:
    config = build_default_configuration()

    assert config.use_hsts
    assert config.use_x_frame_options
    assert config.use_xss_protection
    assert config.use_content_type_options
    assert config.use_content_security_policy
    assert config.use_permitted_cross_domain_policies
    assert config.use_referrer_policy
    assert config.use_cache_control
    assert config.remove_powered_by_header
    assert not config.use_expect_ct
    assert not config.use_content_security_policy_report_only


def test_non_ascii_values_are_rejected_before_state_changes(builder) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        builder.use_expect_ct("https://例え.jp/ct")
    assert excinfo.value.parameter == "report_uri"
    with pytest.raises(ConfigurationError):
        builder.use_x_frame_options(XFrameOption.ALLOW_FROM, domain="https://例え.jp")

    assert builder.build() == HeaderConfiguration()

    config = builder.use_expect_ct("https://xn--r8jz45g.jp/ct").build()
    assert config.expect_ct.report_uri == "https://xn--r8jz45g.jp/ct"


def test_report_uri_cannot_smuggle_a_second_policy(builder) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        builder.use_content_security_policy(
            report_uri="https://example.com/r,script-src 'unsafe-inline'"
        )
    assert excinfo.value.parameter == "report_uri"
    assert builder.build().use_content_security_policy is False


@pytest.mark.parametrize(
    ("step", "kwargs", "parameter"),
    [
        ("use_cache_control", {"private": "false"}, "private"),
        ("use_cache_control", {"no_store": 1}, "no_store"),
        ("use_hsts", {"include_subdomains": "no"}, "include_subdomains"),
        (
            "use_content_security_policy",
            {"block_all_mixed_content": "yes"},
            "block_all_mixed_content",
        ),
        (
            "use_content_security_policy_report_only",
            {"report_uri": "https://example.com/r", "upgrade_insecure_requests": "false"},
            "upgrade_insecure_requests",
        ),
    ],
)
def test_flags_must_be_real_booleans(builder, step, kwargs, parameter) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        getattr(builder, step)(**kwargs)

    assert excinfo.value.parameter == parameter
    assert builder.build() == HeaderConfiguration()


def test_expect_ct_enforce_must_be_boolean(builder) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        builder.use_expect_ct("https://example.com/ct", enforce="false")
    assert excinfo.value.parameter == "enforce"
    assert builder.build().expect_ct is None
