"""
Clearance Service Layer

Business logic for student clearance applications.
Orchestrates repository operations, the approval matrix and review rules.

This module implements:
1. Submission:
   - One active (pending/in-progress) application per student
   - Early applications must carry a reason
   - Every application starts with one PENDING approval per office

2. Review:
   - One office decides its own slot, within its scope
   - The application row is locked while the decision is applied
   - Any failure rolls back, leaving the application unchanged

3. Certificates:
   - Rendered only for completed applications
   - ``certificate_issued`` is set after the first successful render

4. Dashboards:
   - Reviewer queue and counts limited to the reviewer's scope
   - Public counters
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.email import send_clearance_completed, send_clearance_rejected
from app.modules.clearances import approval_matrix, repository, review
from app.modules.clearances.certificate import CertificateSnapshot, render_certificate
from app.modules.clearances.errors import (
    ActiveApplicationExistsError,
    AlreadyDecidedError,
    ApplicationClosedError,
    ApplicationNotFoundError,
    CertificateNotAvailableError,
    ClearanceServiceError,
    ClearanceValidationError,
    ScopeMismatchError,
    SystemDisabledError,
    UnauthorizedReviewerError,
)
from app.modules.clearances.models import (
    ACTIVE_STATUSES,
    ApprovalDecision,
    AuthorityRole,
    ClearanceApplication,
    ClearanceStatus,
)
from app.modules.clearances.schemas import (
    ClearanceApplicationCreate,
    PublicStats,
    ReviewerStats,
)
from app.modules.clearances.status import is_certificate_eligible
from app.modules.users import UserRepository, UserRole

logger = logging.getLogger(__name__)

__all__ = [
    "ActiveApplicationExistsError",
    "AlreadyDecidedError",
    "ApplicationClosedError",
    "ApplicationNotFoundError",
    "CertificateNotAvailableError",
    "ClearanceServiceError",
    "ClearanceValidationError",
    "ScopeMismatchError",
    "SystemDisabledError",
    "UnauthorizedReviewerError",
    "create_application",
    "get_application",
    "get_application_by_id",
    "get_public_stats",
    "get_reviewer_queue",
    "get_reviewer_stats",
    "issue_certificate",
    "notify_outcome",
    "submit_decision",
]


async def create_application(
    db: AsyncSession,
    student_id: UUID,
    data: ClearanceApplicationCreate,
) -> ClearanceApplication:
    """
    Submit a new clearance application for a student.

    Args:
        db: Database session
        student_id: The applying student's user ID
        data: Application details from the request

    Returns:
        The created application with eight PENDING approvals

    Raises:
        ActiveApplicationExistsError: Student already has an active application
        ClearanceValidationError: Early application without a reason
    """
    existing = await repository.get_active_by_student(db, student_id)
    if existing:
        logger.warning(
            f"Student {student_id} already has active application {existing.id}"
        )
        raise ActiveApplicationExistsError()

    application = ClearanceApplication.open(
        student_id=student_id,
        is_early_application=data.is_early_application,
        early_reason=data.early_reason,
        additional_info=data.additional_info,
    )

    try:
        application = await repository.create(db, application)
    except IntegrityError as e:
        # A concurrent submission won the partial unique index
        await db.rollback()
        logger.warning(f"Concurrent application for student {student_id} rejected: {e.orig}")
        raise ActiveApplicationExistsError() from e

    logger.info(
        f"Created clearance application {application.id} for student {student_id}"
        f"{' (early)' if application.is_early_application else ''}"
    )
    return application


async def get_application(db: AsyncSession, student_id: UUID) -> ClearanceApplication:
    """
    Get the student's most recent application.

    Raises:
        ApplicationNotFoundError: If the student has never applied
    """
    application = await repository.get_latest_by_student(db, student_id)

    if not application:
        raise ApplicationNotFoundError()

    return application


async def get_application_by_id(
    db: AsyncSession, application_id: UUID, actor: Any
) -> ClearanceApplication:
    """
    Get an application by ID for a reviewer.

    Raises:
        ApplicationNotFoundError: If the application doesn't exist
        ScopeMismatchError: Student outside the reviewer's department or college
    """
    application = await repository.get_by_id(db, application_id)

    if not application:
        raise ApplicationNotFoundError(application_id)

    check = approval_matrix.authorize(actor.role, actor, application.student)
    if not check.allowed:
        raise ScopeMismatchError(check.message)

    return application


async def submit_decision(
    db: AsyncSession,
    application_id: UUID,
    authority_role: AuthorityRole | str,
    actor: Any,
    decision: ApprovalDecision | str,
    comment: str | None = None,
) -> ClearanceApplication:
    """
    Record one office's decision and recompute the application status.

    The application row stays locked from load to commit, so concurrent
    decisions on the same application are applied one after the other.

    Args:
        db: Database session
        application_id: The application being reviewed
        authority_role: The slot being decided
        actor: The acting reviewer
        decision: APPROVED or REJECTED
        comment: Optional remark

    Returns:
        The updated application

    Raises:
        ApplicationNotFoundError: Unknown application
        UnauthorizedReviewerError: Actor role does not match the slot
        ScopeMismatchError: Student outside the actor's scope
        AlreadyDecidedError: Slot already decided, or application closed
        ClearanceValidationError: Decision is not approved/rejected
    """
    application = await repository.get_by_id_for_update(db, application_id)

    if not application:
        await db.rollback()
        raise ApplicationNotFoundError(application_id)

    try:
        review.apply_decision(application, authority_role, actor, decision, comment)
    except ClearanceServiceError:
        await db.rollback()
        raise

    return await repository.save(db, application)


async def notify_outcome(application: ClearanceApplication) -> None:
    """
    Email the student when the application reaches a final status.

    Delivery failures are logged and never raised.
    """
    student = application.student
    if student is None or not student.email:
        return

    try:
        if application.status == ClearanceStatus.COMPLETED:
            sent = await send_clearance_completed(student.email, student.full_name)
        elif application.status == ClearanceStatus.REJECTED:
            rejected = next(
                (a for a in application.approvals if a.decision == ApprovalDecision.REJECTED),
                None,
            )
            office = rejected.authority_role.value if rejected else "unknown"
            sent = await send_clearance_rejected(
                student.email,
                student.full_name,
                office,
                rejected.comment if rejected else None,
            )
        else:
            return

        if not sent:
            logger.error(f"Failed to send outcome email for application {application.id}")
    except Exception as e:
        logger.error(f"Exception sending outcome email for application {application.id}: {e}")


async def issue_certificate(
    db: AsyncSession,
    student_id: UUID,
    renderer: Callable[[CertificateSnapshot], bytes] = render_certificate,
) -> bytes:
    """
    Render the clearance certificate for the student's completed application.

    The ``certificate_issued`` flag is set only after the renderer returns;
    later requests re-render without changing anything else.

    Args:
        db: Database session
        student_id: The student requesting the certificate
        renderer: Produces the document from a snapshot

    Returns:
        The rendered document

    Raises:
        CertificateNotAvailableError: No completed application
    """
    application = await repository.get_latest_completed_by_student(db, student_id)

    if not application or not is_certificate_eligible(application):
        raise CertificateNotAvailableError()

    student = application.student
    snapshot = CertificateSnapshot(
        student_name=student.full_name,
        student_number=student.student_number,
        department=student.department,
        year_level=student.year_level,
        completed_at=application.completed_at,
    )

    # reportlab drawing is blocking
    document = await asyncio.to_thread(renderer, snapshot)

    if application.mark_certificate_issued():
        await repository.save(db, application)
        logger.info(f"Certificate issued for application {application.id}")

    return document


async def get_reviewer_queue(
    db: AsyncSession,
    actor: Any,
    decision: ApprovalDecision | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[tuple[ClearanceApplication, ApprovalDecision]], int]:
    """
    List the applications a reviewer can act on, with the reviewer's slot decision.

    Department heads see their department, registrars their college,
    every other office all students.
    """
    role = AuthorityRole(actor.role)
    filters = approval_matrix.scope_filter(role, actor)

    return await repository.list_for_reviewer(
        db, role, filters, decision=decision, skip=skip, limit=limit
    )


async def get_reviewer_stats(db: AsyncSession, actor: Any) -> ReviewerStats:
    """Count the reviewer's slot decisions within their scope."""
    role = AuthorityRole(actor.role)
    filters = approval_matrix.scope_filter(role, actor)

    counts = await repository.count_slot_decisions(db, role, filters)

    return ReviewerStats(
        total_applications=sum(counts.values()),
        pending=counts[ApprovalDecision.PENDING],
        approved=counts[ApprovalDecision.APPROVED],
        rejected=counts[ApprovalDecision.REJECTED],
    )


async def get_public_stats(db: AsyncSession) -> PublicStats:
    """Counters for the public landing page."""
    return PublicStats(
        total_students=await UserRepository.count_active_by_role(db, UserRole.STUDENT),
        active_clearances=await repository.count_by_statuses(db, ACTIVE_STATUSES),
        completed_clearances=await repository.count_by_statuses(
            db, frozenset({ClearanceStatus.COMPLETED})
        ),
        active_staff=await UserRepository.count_active_staff(db),
    )
