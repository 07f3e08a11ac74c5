"""secure_headers: OWASP recommended HTTP security response headers.

This package builds a validated header configuration once at start-up and
renders it into the header values to send on every response:
- Strict-Transport-Security, X-Frame-Options, X-XSS-Protection,
  X-Content-Type-Options
- Content-Security-Policy (enforcing and report-only)
- X-Permitted-Cross-Domain-Policies, Referrer-Policy, Cache-Control, Expect-CT
- removal of X-Powered-By

Usage:
    from secure_headers import (
        CspCategory,
        SecureHeadersMiddleware,
        create_builder,
        render,
    )

    config = (
        create_builder()
        .use_hsts()
        .use_content_security_policy()
        .add_csp_sources(CspCategory.SCRIPT, "'self'")
        .build()
    )
    render(config).headers
    app.add_middleware(SecureHeadersMiddleware, config=config)
"""

from __future__ import annotations

__version__ = "0.1.0"

from secure_headers.builder import (
    SecureHeadersBuilder,
    build_default_configuration,
    create_builder,
)
from secure_headers.config import configure_from_env
from secure_headers.csp import CspDirectiveSet, CspSource, render_csp
from secure_headers.errors import ConfigurationError, RenderInvariantViolation
from secure_headers.middleware import SecureHeadersMiddleware, install_secure_headers
from secure_headers.models import HeaderConfiguration
from secure_headers.options import (
    CrossDomainPolicy,
    CspCategory,
    ReferrerPolicy,
    XFrameOption,
)
from secure_headers.orchestrator import RenderedHeaders, render
from secure_headers.validators import validate_https_uri

__all__ = [
    "__version__",
    "SecureHeadersBuilder",
    "build_default_configuration",
    "create_builder",
    "configure_from_env",
    "CspDirectiveSet",
    "CspSource",
    "render_csp",
    "ConfigurationError",
    "RenderInvariantViolation",
    "SecureHeadersMiddleware",
    "install_secure_headers",
    "HeaderConfiguration",
    "CrossDomainPolicy",
    "CspCategory",
    "ReferrerPolicy",
    "XFrameOption",
    "RenderedHeaders",
    "render",
    "validate_https_uri",
]
