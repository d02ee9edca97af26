"""
User Repository

Read-only database operations for identity records.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def count_active_by_role(db: AsyncSession, role: UserRole) -> int:
        """Count active users holding ``role``."""
        result = await db.execute(
            select(func.count(User.id)).where(User.role == role, User.is_active.is_(True))
        )
        return result.scalar() or 0

    @staticmethod
    async def count_active_staff(db: AsyncSession) -> int:
        """Count active users that are not students."""
        result = await db.execute(
            select(func.count(User.id)).where(
                User.role != UserRole.STUDENT, User.is_active.is_(True)
            )
        )
        return result.scalar() or 0
