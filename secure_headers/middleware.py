"""Starlette integration for secure_headers.

`SecureHeadersMiddleware` renders a `HeaderConfiguration` once, when the
middleware is constructed, and applies the result to every HTTP response:
each configured header is written (replacing any value set by the
endpoint) and each header marked for removal, such as X-Powered-By, is
deleted.

Usage:
    config = (
        create_builder()
        .use_hsts()
        .use_content_type_options()
        .remove_powered_by_header()
        .build()
    )
    app.add_middleware(SecureHeadersMiddleware, config=config)

    # or, guarded against double registration
    install_secure_headers(app, config)

Security considerations:
- HSTS should only be enabled in production with proper HTTPS
- CSP requires careful tuning to avoid breaking legitimate functionality
- Test thoroughly after enabling strict policies
"""

from __future__ import annotations

import logging
from typing import Callable

from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from secure_headers.builder import build_default_configuration
from secure_headers.models import HeaderConfiguration
from secure_headers.orchestrator import RenderedHeaders, render

logger = logging.getLogger("secure_headers.middleware")


class SecureHeadersMiddleware(BaseHTTPMiddleware):
    """Apply rendered security headers to all responses.

    Configuration:
        config: Finished `HeaderConfiguration`. Defaults to
            `build_default_configuration()` (OWASP recommended set).
    """

    def __init__(
        self,
        app: ASGIApp,
        config: HeaderConfiguration | None = None,
    ) -> None:
        super().__init__(app)
        self.config = config if config is not None else build_default_configuration()
        # Configuration is immutable, so render once
        self.rendered: RenderedHeaders = render(self.config)

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        response = await call_next(request)
        self.rendered.apply(response.headers)
        return response


def install_secure_headers(
    app: Starlette, config: HeaderConfiguration | None = None
) -> bool:
    """Add `SecureHeadersMiddleware` to `app` unless already installed.

    Returns:
        True if the middleware was added, False if it was already present.

    """
    state = app.state
    if getattr(state, "_secure_headers_added", False):
        logger.debug("Secure headers middleware already installed; skipping")
        return False

    app.add_middleware(SecureHeadersMiddleware, config=config)
    state._secure_headers_added = True
    return True
