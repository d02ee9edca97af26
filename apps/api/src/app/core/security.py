"""
Token Utilities

JWT decoding for identity-provider tokens. Tokens are issued and
credentials verified by the identity provider; this service only reads
the claims.
"""

import logging
from typing import Any

import jwt

from app.core.config import settings

logger = logging.getLogger(__name__)


def decode_token(token: str) -> dict[str, Any] | None:
    """
    Decode and validate a JWT.

    Returns:
        The claims dict, or None if the signature, algorithm or expiry check fails.
    """
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.debug("Token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.debug(f"Token rejected: {e}")
        return None
