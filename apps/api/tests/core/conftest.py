"""
Fixtures for core tests.
"""

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from app.core.config import settings


@pytest.fixture
def mint_token():
    """Factory signing tokens the way the identity provider does."""

    def _mint(user_id, role, *, expires_delta=timedelta(minutes=5), **claims) -> str:
        payload = {
            "sub": str(user_id),
            "role": role,
            "type": "access",
            "exp": datetime.now(UTC) + expires_delta,
            **claims,
        }
        return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    return _mint
