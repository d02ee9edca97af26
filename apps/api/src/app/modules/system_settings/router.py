"""
System Settings Router

API endpoints for system administrators to open and close the clearance
and registration systems.

Endpoints:
- GET /admin/system-status - Current state of both switches
- POST /admin/toggle-system - Flip one switch
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, require_roles
from app.core.database import get_db
from app.modules.system_settings import service
from app.modules.system_settings.schemas import (
    SystemStatusResponse,
    ToggleSystemRequest,
    ToggleSystemResponse,
)
from app.modules.users.models import UserRole

logger = logging.getLogger(__name__)

router = APIRouter()

require_system_admin = require_roles(UserRole.SYSTEM_ADMIN.value)


@router.get(
    "/system-status",
    response_model=SystemStatusResponse,
    summary="Get System Status",
    responses={
        401: {"description": "Unauthorized - invalid or missing token"},
        403: {"description": "Forbidden - not a system admin"},
    },
)
async def get_system_status(
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(require_system_admin),
) -> SystemStatusResponse:
    """Return whether clearance and registration are currently open."""
    gate = await service.get_eligibility_gate(db)

    return SystemStatusResponse(
        clearance_system_active=gate.clearance_system_active,
        registration_active=gate.registration_active,
    )


@router.post(
    "/toggle-system",
    response_model=ToggleSystemResponse,
    summary="Toggle System",
    responses={
        401: {"description": "Unauthorized - invalid or missing token"},
        403: {"description": "Forbidden - not a system admin"},
    },
)
async def toggle_system(
    data: ToggleSystemRequest,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(require_system_admin),
) -> ToggleSystemResponse:
    """Flip the clearance or registration switch."""
    try:
        active = await service.toggle_system(db, data.type, admin)
    except Exception as e:
        logger.exception(f"Error toggling {data.type.value} system: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred.",
            },
        ) from e

    return ToggleSystemResponse(
        message=f"{data.type.label} {'activated' if active else 'deactivated'} successfully",
        type=data.type,
        active=active,
    )
