"""
Clearance Repository

Database operations for clearance applications and their approval records.
Only data access lives here; the approval rules are in ``review`` and
``approval_matrix``.
"""

from uuid import UUID

from sqlalchemy import Select, and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.users.models import College, User

from .models import (
    ACTIVE_STATUSES,
    ApprovalDecision,
    ApprovalRecord,
    AuthorityRole,
    ClearanceApplication,
    ClearanceStatus,
)


async def create(db: AsyncSession, application: ClearanceApplication) -> ClearanceApplication:
    """
    Persist a new application with its approval records.

    Raises:
        IntegrityError: If the student already has an active application
    """
    db.add(application)
    await db.commit()
    await db.refresh(application)

    return application


async def save(db: AsyncSession, application: ClearanceApplication) -> ClearanceApplication:
    """Commit pending changes to an application."""
    await db.commit()
    await db.refresh(application)
    return application


async def get_by_id(db: AsyncSession, id: UUID) -> ClearanceApplication | None:
    """Get application by ID."""
    return await db.get(ClearanceApplication, id)


async def get_by_id_for_update(db: AsyncSession, id: UUID) -> ClearanceApplication | None:
    """
    Get application by ID and lock its row until the transaction ends.

    Concurrent decisions on the same application wait here, so each one
    sees the approvals written by the previous one.
    """
    result = await db.execute(
        select(ClearanceApplication)
        .where(ClearanceApplication.id == id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_active_by_student(db: AsyncSession, student_id: UUID) -> ClearanceApplication | None:
    """Get the student's pending or in-progress application."""
    result = await db.execute(
        select(ClearanceApplication).where(
            ClearanceApplication.student_id == student_id,
            ClearanceApplication.status.in_(list(ACTIVE_STATUSES)),
        )
    )
    return result.scalar_one_or_none()


async def get_latest_by_student(db: AsyncSession, student_id: UUID) -> ClearanceApplication | None:
    """Get the student's most recent application, whatever its status."""
    result = await db.execute(
        select(ClearanceApplication)
        .where(ClearanceApplication.student_id == student_id)
        .order_by(ClearanceApplication.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_latest_completed_by_student(
    db: AsyncSession, student_id: UUID
) -> ClearanceApplication | None:
    """Get the student's most recent completed application."""
    result = await db.execute(
        select(ClearanceApplication)
        .where(
            ClearanceApplication.student_id == student_id,
            ClearanceApplication.status == ClearanceStatus.COMPLETED,
        )
        .order_by(ClearanceApplication.completed_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


def _scope_conditions(filters: dict[str, str | None]) -> list | None:
    """
    Translate student scope filters into SQL conditions.

    Returns None when the scope can match no student (missing scope value
    or an unknown college).
    """
    conditions = []
    for attribute, value in filters.items():
        if value is None:
            return None
        if attribute == "college":
            try:
                conditions.append(User.college == College(value))
            except ValueError:
                return None
        else:
            conditions.append(getattr(User, attribute) == value)
    return conditions


def _slot_query(columns: list, role: AuthorityRole, conditions: list) -> Select:
    return (
        select(*columns)
        .select_from(ClearanceApplication)
        .join(
            ApprovalRecord,
            and_(
                ApprovalRecord.application_id == ClearanceApplication.id,
                ApprovalRecord.authority_role == role,
            ),
        )
        .join(User, User.id == ClearanceApplication.student_id)
        .where(*conditions)
    )


async def list_for_reviewer(
    db: AsyncSession,
    role: AuthorityRole,
    filters: dict[str, str | None],
    decision: ApprovalDecision | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[tuple[ClearanceApplication, ApprovalDecision]], int]:
    """
    List applications in a reviewer's scope with the reviewer's slot decision.

    Args:
        db: Database session
        role: The reviewer's authority role
        filters: Student attribute filters from ``approval_matrix.scope_filter``
        decision: Only include applications where the slot has this decision
        skip: Number of records to skip
        limit: Maximum number of records to return

    Returns:
        Tuple of ((application, slot decision) rows, total count)
    """
    conditions = _scope_conditions(filters)
    if conditions is None:
        return [], 0

    if decision is not None:
        conditions.append(ApprovalRecord.decision == decision)

    count_result = await db.execute(
        _slot_query([func.count(ClearanceApplication.id)], role, conditions)
    )
    total = count_result.scalar() or 0

    result = await db.execute(
        _slot_query([ClearanceApplication, ApprovalRecord.decision], role, conditions)
        .order_by(ClearanceApplication.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    rows = [(application, slot_decision) for application, slot_decision in result.all()]

    return rows, total


async def count_slot_decisions(
    db: AsyncSession, role: AuthorityRole, filters: dict[str, str | None]
) -> dict[ApprovalDecision, int]:
    """Count a role's slot decisions across the applications in scope."""
    counts = {decision: 0 for decision in ApprovalDecision}

    conditions = _scope_conditions(filters)
    if conditions is None:
        return counts

    result = await db.execute(
        _slot_query(
            [ApprovalRecord.decision, func.count(ApprovalRecord.id)], role, conditions
        ).group_by(ApprovalRecord.decision)
    )
    for slot_decision, count in result.all():
        counts[ApprovalDecision(slot_decision)] = count

    return counts


async def count_by_statuses(db: AsyncSession, statuses: frozenset[ClearanceStatus]) -> int:
    """Count applications whose status is in ``statuses``."""
    result = await db.execute(
        select(func.count(ClearanceApplication.id)).where(
            ClearanceApplication.status.in_(list(statuses))
        )
    )
    return result.scalar() or 0
