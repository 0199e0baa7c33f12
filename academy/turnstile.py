"""
Cloudflare Turnstile CAPTCHA verification
"""

import logging
from typing import Optional

import httpx
from fastapi import Request

from . import config
from .exceptions import ApiError
from .rate_limiter import get_client_identifier

logger = logging.getLogger(__name__)

SITEVERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"


async def verify_turnstile(token: str, ip: Optional[str] = None) -> bool:
    """
    Verify a Turnstile token

    Args:
        token: Turnstile token from client
        ip: Client IP address (optional)

    Returns:
        True if verification successful (or not configured), False otherwise
    """
    if not config.TURNSTILE_SECRET_KEY:
        logger.debug("TURNSTILE_SECRET_KEY not configured - skipping CAPTCHA verification")
        return True

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                SITEVERIFY_URL,
                data={"secret": config.TURNSTILE_SECRET_KEY, "response": token, "remoteip": ip},
                timeout=10.0,
            )
            result = response.json()
    except Exception as e:
        logger.error(f"Turnstile verification error: {str(e)}")
        # Fail open - allow request if verification service is down
        return True

    success = bool(result.get("success", False))
    if success:
        logger.info(f"Turnstile verification successful for IP: {ip}")
    else:
        logger.warning(
            f"Turnstile verification failed for IP: {ip} - Errors: {result.get('error-codes', [])}"
        )
    return success


async def require_turnstile(token: Optional[str], request: Request) -> None:
    """Reject a public form submission whose CAPTCHA does not verify"""
    if not config.TURNSTILE_SECRET_KEY:
        return

    if not token:
        raise ApiError(400, "CAPTCHA verification failed")

    if not await verify_turnstile(token, get_client_identifier(request)):
        raise ApiError(400, "CAPTCHA verification failed")
