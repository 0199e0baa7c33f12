"""
Security Headers Middleware for FastAPI

Adds security headers to all responses:
- Content-Security-Policy: Restricts resource loading to the site, Stripe and Supabase
- Referrer-Policy: Controls referrer information leakage
- X-Content-Type-Options: Prevents MIME type sniffing
- X-Frame-Options: Prevents clickjacking attacks
- Strict-Transport-Security: Enforces HTTPS (production only)
"""

import logging
import os
from typing import Callable, Optional
from urllib.parse import urlparse

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from .config import SUPABASE_URL

logger = logging.getLogger(__name__)

IS_PRODUCTION = os.getenv("ENVIRONMENT", "development").lower() == "production"


def _supabase_origin() -> Optional[str]:
    if not SUPABASE_URL:
        return None
    parsed = urlparse(SUPABASE_URL)
    return f"{parsed.scheme}://{parsed.netloc}"


def get_csp_policy() -> str:
    """Generate Content-Security-Policy header value."""
    project = _supabase_origin()
    project_src = f" {project}" if project else ""

    directives = [
        "default-src 'self'",
        f"script-src 'self' 'unsafe-inline' https://js.stripe.com{project_src}",
        "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com",
        "img-src 'self' data: https://images.unsplash.com https://*.supabase.co",
        "font-src 'self' data: https://fonts.gstatic.com",
        "connect-src 'self' https://*.supabase.co https://js.stripe.com https://api.stripe.com"
        f"{project_src}",
        "frame-src https://js.stripe.com https://hooks.stripe.com https://checkout.stripe.com",
        "object-src 'none'",
        "base-uri 'self'",
        "form-action 'self'",
        "frame-ancestors 'none'",
    ]
    return "; ".join(directives)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, exclude_paths: Optional[list[str]] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or []
        self.csp_policy = get_csp_policy()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        path = request.url.path
        if any(path.startswith(excluded) for excluded in self.exclude_paths):
            return response

        response.headers["Content-Security-Policy"] = self.csp_policy
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        # Legacy XSS auditor is disabled; CSP covers it
        response.headers["X-XSS-Protection"] = "0"

        if IS_PRODUCTION:
            response.headers["Strict-Transport-Security"] = (
                "max-age=63072000; includeSubDomains; preload"
            )

        return response
