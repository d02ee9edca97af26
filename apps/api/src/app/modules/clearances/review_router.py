"""
Clearance Review Router

API endpoints for the offices that approve or reject clearance applications.
Each reviewer only sees and decides the slot for their own role, within
their scope.

Endpoints:
- GET /reviews/applications - Reviewer queue with the reviewer's slot decision
- GET /reviews/applications/{id} - One application in the reviewer's scope
- GET /reviews/stats - Counts of the reviewer's slot decisions
- POST /reviews/applications/{id}/approvals/{authority_role} - Decide a slot

Security:
- All endpoints require a JWT carrying one of the authority roles
- Decision submissions are rate limited per reviewer
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, require_roles
from app.core.database import get_db
from app.core.rate_limit import RateLimitExceeded, check_rate_limit
from app.modules.clearances import service
from app.modules.clearances.approval_matrix import REQUIRED_AUTHORITIES
from app.modules.clearances.models import ApprovalDecision, ClearanceStatus
from app.modules.clearances.schemas import (
    ClearanceResponse,
    DecisionRequest,
    DecisionResponse,
    ReviewerStats,
    ReviewQueueItem,
    ReviewQueueResponse,
)
from app.modules.clearances.service import ClearanceServiceError

logger = logging.getLogger(__name__)

router = APIRouter()

require_reviewer = require_roles(*(role.value for role in REQUIRED_AUTHORITIES))

RATE_LIMIT_DECISION = (30, 60)  # 30 decisions per minute


def _handle_service_error(e: ClearanceServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    )


@router.get(
    "/applications",
    response_model=ReviewQueueResponse,
    summary="List Applications For Review",
    description="""
Applications the caller's office can act on.

Department heads see students of their department, registrars students of
their college, every other office all students. Each item carries
`my_decision`, the caller's own slot status.

**Filters:**
- `decision`: Only applications where the caller's slot has this decision
""",
)
async def list_applications(
    decision: ApprovalDecision | None = Query(None, description="Filter by slot decision"),
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(20, ge=1, le=100, description="Maximum records to return"),
    db: AsyncSession = Depends(get_db),
    reviewer: AuthenticatedUser = Depends(require_reviewer),
) -> ReviewQueueResponse:
    """List the reviewer's queue."""
    rows, total = await service.get_reviewer_queue(
        db, reviewer, decision=decision, skip=skip, limit=limit
    )

    items = [
        ReviewQueueItem(
            **ClearanceResponse.model_validate(application).model_dump(),
            my_decision=my_decision,
        )
        for application, my_decision in rows
    ]

    logger.info(f"Reviewer {reviewer.id} ({reviewer.role}) listed {len(items)}/{total}")

    return ReviewQueueResponse(items=items, total=total, skip=skip, limit=limit)


@router.get(
    "/applications/{application_id}",
    response_model=ReviewQueueItem,
    summary="Get Application For Review",
    responses={
        403: {"description": "Student outside the reviewer's scope"},
        404: {"description": "Application not found"},
    },
)
async def get_application(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    reviewer: AuthenticatedUser = Depends(require_reviewer),
) -> ReviewQueueItem:
    """One application with every office's decision and the caller's own slot."""
    try:
        application = await service.get_application_by_id(db, application_id, reviewer)
    except ClearanceServiceError as e:
        _handle_service_error(e)

    return ReviewQueueItem(
        **ClearanceResponse.model_validate(application).model_dump(),
        my_decision=application.approval_for(reviewer.role).decision,
    )


@router.get(
    "/stats",
    response_model=ReviewerStats,
    summary="Reviewer Dashboard Statistics",
)
async def get_stats(
    db: AsyncSession = Depends(get_db),
    reviewer: AuthenticatedUser = Depends(require_reviewer),
) -> ReviewerStats:
    """Counts of pending, approved and rejected slots for the caller's office."""
    return await service.get_reviewer_stats(db, reviewer)


@router.post(
    "/applications/{application_id}/approvals/{authority_role}",
    response_model=DecisionResponse,
    summary="Decide Approval",
    responses={
        400: {"description": "Decision is not approved or rejected"},
        403: {"description": "Wrong office, or student outside the reviewer's scope"},
        404: {"description": "Application not found"},
        409: {"description": "Slot already decided, or application closed"},
        429: {"description": "Rate limit exceeded"},
    },
)
async def decide(
    application_id: UUID,
    authority_role: str,
    data: DecisionRequest,
    db: AsyncSession = Depends(get_db),
    reviewer: AuthenticatedUser = Depends(require_reviewer),
) -> DecisionResponse:
    """Approve or reject the caller's slot on an application."""
    limit, window = RATE_LIMIT_DECISION
    if not await check_rate_limit(f"review:decision:{reviewer.id}", limit, window):
        logger.warning(f"Rate limit exceeded for reviewer {reviewer.id}: {limit}/{window}s")
        raise RateLimitExceeded(limit, window)

    try:
        application = await service.submit_decision(
            db,
            application_id,
            authority_role,
            reviewer,
            data.decision,
            data.comment,
        )
    except ClearanceServiceError as e:
        _handle_service_error(e)

    if application.status in (ClearanceStatus.COMPLETED, ClearanceStatus.REJECTED):
        await service.notify_outcome(application)

    return DecisionResponse(
        message=f"Clearance {data.decision.value} successfully",
        clearance=ClearanceResponse.model_validate(application),
    )
