"""
Clearance Status Aggregation

Derives an application's overall status from its approval records.
"""

from collections.abc import Iterable
from typing import Any

from app.modules.clearances.approval_matrix import REQUIRED_AUTHORITIES
from app.modules.clearances.models import ApprovalDecision, AuthorityRole, ClearanceStatus

_REQUIRED = frozenset(REQUIRED_AUTHORITIES)


def aggregate(records: Iterable[Any]) -> ClearanceStatus:
    """
    Compute the overall status of a set of approval records.

    The result does not depend on record order:
    - any REJECTED record -> REJECTED, however many others approved
    - every required office APPROVED -> COMPLETED
    - at least one APPROVED -> IN_PROGRESS
    - otherwise -> PENDING

    Args:
        records: Objects with ``authority_role`` and ``decision`` attributes

    Returns:
        The derived ClearanceStatus
    """
    approved_roles = set()

    for record in records:
        decision = ApprovalDecision(record.decision)
        if decision == ApprovalDecision.REJECTED:
            return ClearanceStatus.REJECTED
        if decision == ApprovalDecision.APPROVED:
            approved_roles.add(AuthorityRole(record.authority_role))

    if _REQUIRED <= approved_roles:
        return ClearanceStatus.COMPLETED
    if approved_roles:
        return ClearanceStatus.IN_PROGRESS
    return ClearanceStatus.PENDING


def is_certificate_eligible(application: Any) -> bool:
    """A certificate may be rendered only for a completed clearance."""
    return application.status == ClearanceStatus.COMPLETED
