"""
System Settings Dependencies

FastAPI dependencies that apply the eligibility gate to incoming requests.
"""

import logging

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, get_current_user
from app.core.database import get_db
from app.modules.clearances.errors import SystemDisabledError
from app.modules.system_settings import service
from app.modules.system_settings.service import EligibilityGate
from app.modules.users.models import UserRole

logger = logging.getLogger(__name__)


async def eligibility_gate(db: AsyncSession = Depends(get_db)) -> EligibilityGate:
    """Current EligibilityGate for this request."""
    return await service.get_eligibility_gate(db)


async def require_clearance_system_active(
    user: AuthenticatedUser = Depends(get_current_user),
    gate: EligibilityGate = Depends(eligibility_gate),
) -> AuthenticatedUser:
    """
    Reject students while the clearance system is switched off.

    Staff are never gated.

    Raises:
        HTTPException 503: Student request while the system is inactive
    """
    if user.role != UserRole.STUDENT.value:
        return user

    try:
        gate.ensure_clearance_open()
    except SystemDisabledError as e:
        logger.info(f"Clearance system inactive, refused student {user.id}")
        raise HTTPException(
            status_code=e.status_code,
            detail={"error": e.error_code, "message": e.message},
        ) from e

    return user
