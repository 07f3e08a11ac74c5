"""Tests for secure_headers.validators module."""

import pytest

from secure_headers.errors import ConfigurationError
from secure_headers.validators import (
    InvalidUriKind,
    require_flag,
    require_https_uri,
    require_non_negative,
    require_token,
    validate_https_uri,
    validate_token,
)


class TestValidateHttpsUri:
    @pytest.mark.parametrize(
        "uri",
        [
            "https://example.com",
            "https://example.com/report",
            "https://reports.example.com:8443/csp?source=web",
            "HTTPS://EXAMPLE.COM/upper",
        ],
    )
    def test_accepts_https_uris(self, uri):
        result = validate_https_uri(uri)
        assert result.valid is True
        assert result.error is None
        assert result.kind is None

    def test_rejects_empty(self):
        assert validate_https_uri("").kind is InvalidUriKind.EMPTY
        assert validate_https_uri("   ").kind is InvalidUriKind.EMPTY
        assert validate_https_uri(None).kind is InvalidUriKind.EMPTY

    def test_rejects_relative(self):
        assert validate_https_uri("/report").kind is InvalidUriKind.RELATIVE
        assert validate_https_uri("report/csp").kind is InvalidUriKind.RELATIVE
        assert validate_https_uri("//example.com/report").kind is InvalidUriKind.RELATIVE

    def test_rejects_other_schemes(self):
        assert validate_https_uri("http://example.com").kind is InvalidUriKind.NOT_HTTPS
        assert validate_https_uri("ftp://example.com").kind is InvalidUriKind.NOT_HTTPS
        assert validate_https_uri("wss://example.com").kind is InvalidUriKind.NOT_HTTPS

    def test_rejects_header_injection(self):
        result = validate_https_uri("https://example.com/\r\nSet-Cookie: a=b")
        assert result.valid is False
        assert result.kind is InvalidUriKind.MALFORMED
        assert validate_https_uri("https://example.com/a;b").valid is False

    @pytest.mark.parametrize(
        "uri",
        [
            "https://例え.jp/r",
            "https://example.com/a\x0bb",
            "https://example.com/a b",
            "https://example.com/r,script-src 'unsafe-inline'",
            "https://example.com/\"r\"",
        ],
    )
    def test_rejects_non_header_text(self, uri):
        result = validate_https_uri(uri)
        assert result.valid is False
        assert result.kind is InvalidUriKind.MALFORMED

    def test_accepts_punycode_host(self):
        assert validate_https_uri("https://xn--r8jz45g.jp/r").valid is True


class TestRequireHttpsUri:
    def test_returns_stripped_value(self):
        assert require_https_uri("  https://example.com/r  ", "report_uri") == (
            "https://example.com/r"
        )

    @pytest.mark.parametrize("uri", ["http://example.com", "/relative", "", None])
    def test_raises_configuration_error_naming_parameter(self, uri):
        with pytest.raises(ConfigurationError) as excinfo:
            require_https_uri(uri, "report_uri")
        assert excinfo.value.parameter == "report_uri"
        assert "report_uri" in str(excinfo.value)


def test_validate_token_rejects_separators_and_whitespace():
    assert validate_token("example.com").valid is True
    assert validate_token("").valid is False
    assert validate_token("a;b").valid is False
    assert validate_token("a,b").valid is False
    assert validate_token("a b").valid is False
    assert validate_token("a b", allow_spaces=True).valid is True
    assert validate_token("a\nb", allow_spaces=True).valid is False


def test_require_token_raises_for_bad_value():
    assert require_token(" example.com ", "domain") == "example.com"
    with pytest.raises(ConfigurationError) as excinfo:
        require_token(None, "domain")
    assert excinfo.value.parameter == "domain"


def test_require_non_negative():
    assert require_non_negative(0, "max_age") == 0
    assert require_non_negative(86400, "max_age") == 86400

    with pytest.raises(ConfigurationError):
        require_non_negative(-1, "max_age")
    with pytest.raises(ConfigurationError):
        require_non_negative(True, "max_age")
    with pytest.raises(ConfigurationError):
        require_non_negative("10", "max_age")


def test_validate_token_requires_visible_ascii():
    assert validate_token("xn--r8jz45g.jp").valid is True
    assert validate_token("例え.jp").valid is False
    assert validate_token("a\x0bb").valid is False
    assert validate_token("a\x0bb", allow_spaces=True).valid is False
    assert validate_token("a\tb", allow_spaces=True).valid is False
    assert validate_token("a\x7fb").valid is False


def test_require_token_rejects_idn_host():
    with pytest.raises(ConfigurationError) as excinfo:
        require_token("例え.jp", "domain")
    assert excinfo.value.parameter == "domain"
    assert "punycode" in excinfo.value.reason


def test_require_flag():
    assert require_flag(True, "enforce") is True
    assert require_flag(False, "enforce") is False

    for value in ("false", "no", 1, 0, None):
        with pytest.raises(ConfigurationError) as excinfo:
            require_flag(value, "enforce")
        assert excinfo.value.parameter == "enforce"
