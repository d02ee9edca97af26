"""
Clearance Router

API endpoints for students and the public landing page.

Endpoints:
- POST /clearance/apply - Submit a clearance application
- GET /clearance/status - Latest application and its approvals
- GET /clearance/certificate - Download the clearance certificate (PDF)
- GET /stats/public - Public counters

Student endpoints are closed while the clearance system is switched off.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, require_roles
from app.core.database import get_db
from app.modules.clearances import service
from app.modules.clearances.schemas import (
    ApplyResponse,
    ClearanceApplicationCreate,
    ClearanceResponse,
    PublicStats,
)
from app.modules.clearances.service import ClearanceServiceError
from app.modules.system_settings.dependencies import require_clearance_system_active
from app.modules.users.models import UserRole

logger = logging.getLogger(__name__)

router = APIRouter()
public_router = APIRouter()

require_student = require_roles(UserRole.STUDENT.value)


def _handle_service_error(e: ClearanceServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    )


@router.post(
    "/apply",
    response_model=ApplyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Clearance Application",
    responses={
        400: {"description": "Validation error, e.g. early application without a reason"},
        409: {"description": "An active application already exists"},
        503: {"description": "Clearance system is inactive"},
    },
)
async def apply(
    data: ClearanceApplicationCreate,
    db: AsyncSession = Depends(get_db),
    student: AuthenticatedUser = Depends(require_student),
    _: AuthenticatedUser = Depends(require_clearance_system_active),
) -> ApplyResponse:
    """Submit a new clearance application with every office pending."""
    try:
        application = await service.create_application(db, student.id, data)
    except ClearanceServiceError as e:
        _handle_service_error(e)

    return ApplyResponse(clearance=ClearanceResponse.model_validate(application))


@router.get(
    "/status",
    response_model=ClearanceResponse,
    summary="Get Clearance Status",
    responses={
        404: {"description": "No clearance application found"},
        503: {"description": "Clearance system is inactive"},
    },
)
async def get_status(
    db: AsyncSession = Depends(get_db),
    student: AuthenticatedUser = Depends(require_student),
    _: AuthenticatedUser = Depends(require_clearance_system_active),
) -> ClearanceResponse:
    """Return the student's latest application with each office's decision."""
    try:
        application = await service.get_application(db, student.id)
    except ClearanceServiceError as e:
        _handle_service_error(e)

    return ClearanceResponse.model_validate(application)


@router.get(
    "/certificate",
    response_class=Response,
    summary="Download Clearance Certificate",
    responses={
        200: {"content": {"application/pdf": {}}, "description": "Certificate PDF"},
        404: {"description": "No completed clearance"},
        503: {"description": "Clearance system is inactive"},
    },
)
async def download_certificate(
    db: AsyncSession = Depends(get_db),
    student: AuthenticatedUser = Depends(require_student),
    _: AuthenticatedUser = Depends(require_clearance_system_active),
) -> Response:
    """Render the certificate for the student's completed clearance."""
    try:
        document = await service.issue_certificate(db, student.id)
    except ClearanceServiceError as e:
        _handle_service_error(e)

    filename = f"clearance-certificate-{student.id}.pdf"
    return Response(
        content=document,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@public_router.get(
    "/public",
    response_model=PublicStats,
    summary="Public Statistics",
)
async def public_stats(db: AsyncSession = Depends(get_db)) -> PublicStats:
    """Counters for the landing page. No authentication required."""
    return await service.get_public_stats(db)
