"""
Clearance Review

Applies one office's decision to a loaded clearance application.

``apply_decision`` performs every check before it touches the application,
so a rejected call leaves the aggregate exactly as it was. Persistence and
locking are handled by ``service.submit_decision``.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from app.modules.clearances import approval_matrix
from app.modules.clearances.errors import (
    AlreadyDecidedError,
    ApplicationClosedError,
    ClearanceValidationError,
    ScopeMismatchError,
    UnauthorizedReviewerError,
)
from app.modules.clearances.models import (
    ApprovalDecision,
    AuthorityRole,
    ClearanceApplication,
)

logger = logging.getLogger(__name__)

FINAL_DECISIONS = frozenset({ApprovalDecision.APPROVED, ApprovalDecision.REJECTED})


def _parse_authority_role(authority_role: AuthorityRole | str) -> AuthorityRole:
    try:
        return AuthorityRole(authority_role)
    except ValueError as e:
        raise ClearanceValidationError(f"Unknown authority role: {authority_role}") from e


def _parse_decision(decision: ApprovalDecision | str) -> ApprovalDecision:
    try:
        parsed = ApprovalDecision(decision)
    except ValueError:
        parsed = None

    if parsed not in FINAL_DECISIONS:
        raise ClearanceValidationError("Status must be approved or rejected")
    return parsed


def apply_decision(
    application: ClearanceApplication,
    authority_role: AuthorityRole | str,
    actor: Any,
    decision: ApprovalDecision | str,
    comment: str | None = None,
    decided_at: datetime | None = None,
) -> ClearanceApplication:
    """
    Record ``actor``'s decision on the ``authority_role`` slot.

    Checks run in this order:
    1. the actor's role must equal the slot's role
    2. the student must be inside the actor's scope
    3. the slot must still be pending, and the application still active
    4. the decision must be approved or rejected

    Args:
        application: Application with ``approvals`` and ``student`` loaded
        authority_role: The slot being decided
        actor: The acting user (``id``, ``role``, ``department``, ``college``)
        decision: APPROVED or REJECTED
        comment: Optional reason or remark
        decided_at: Decision time (defaults to now)

    Returns:
        The same application, with the slot decided and status recomputed

    Raises:
        UnauthorizedReviewerError: Actor role does not match the slot
        ScopeMismatchError: Student outside the actor's department/college
        AlreadyDecidedError: Slot already decided
        ApplicationClosedError: Application already completed or rejected
        ClearanceValidationError: Decision is not approved/rejected
    """
    role = _parse_authority_role(authority_role)

    if actor.role != role.value:
        logger.warning(
            f"Reviewer {actor.id} with role '{actor.role}' tried to decide "
            f"'{role.value}' on application {application.id}"
        )
        raise UnauthorizedReviewerError(actor.role, role.value)

    scope = approval_matrix.authorize(role, actor, application.student)
    if not scope.allowed:
        logger.warning(
            f"Scope mismatch: reviewer {actor.id} ({role.value}) "
            f"on application {application.id}"
        )
        raise ScopeMismatchError(scope.message or "Student is outside your scope")

    approval = application.approval_for(role)
    if not approval.is_pending:
        raise AlreadyDecidedError(role.value)
    if application.is_terminal:
        raise ApplicationClosedError(role.value, application.status.value)

    final_decision = _parse_decision(decision)

    now = decided_at or datetime.now(UTC)
    approval.record(
        decision=final_decision,
        decided_by=actor.id,
        decided_at=now,
        comment=(comment.strip() or None) if comment else None,
    )
    new_status = application.refresh_status(now)

    logger.info(
        f"Application {application.id}: {role.value} {final_decision.value} "
        f"by {actor.id}, status now {new_status.value}"
    )
    return application
