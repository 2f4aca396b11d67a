"""
Authentication Module

Protects admin routes with a shared bearer secret.
"""

import logging

from fastapi import HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .config import settings


logger = logging.getLogger(__name__)
security = HTTPBearer()


def get_admin_secret() -> str:
    """Get the admin API secret from validated config."""
    if not settings.admin_api_secret:
        raise ValueError(
            "ADMIN_API_SECRET environment variable is required for authentication"
        )
    return settings.admin_api_secret


async def verify_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> HTTPAuthorizationCredentials:
    """
    Verify shared secret token.

    Args:
        credentials: Bearer token from request header

    Returns:
        The credentials if valid

    Raises:
        HTTPException: 401 if token is invalid, 500 if auth is misconfigured
    """
    if not settings.auth_required:
        # Development without a configured secret
        return credentials

    try:
        expected_secret = get_admin_secret()
    except ValueError:
        raise HTTPException(
            status_code=500,
            detail="Server authentication not configured"
        )

    if credentials.credentials != expected_secret:
        logger.warning("Rejected admin request with invalid token")
        raise HTTPException(
            status_code=401,
            detail="Invalid authentication token"
        )

    return credentials
