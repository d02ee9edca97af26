"""
Approval Matrix

Which offices must decide a clearance application, and against which
students each office may act.

- department_head: only students of the head's own department
- registrar_admin: only students of the registrar's own college
- every other office: any student
"""

import enum
from dataclasses import dataclass
from typing import Any

from app.modules.clearances.models import AuthorityRole


class ScopeRule(str, enum.Enum):
    """Scope rule for an authority role. The value names the compared attribute."""

    GLOBAL = "global"
    DEPARTMENT = "department"
    COLLEGE = "college"


APPROVAL_MATRIX: dict[AuthorityRole, ScopeRule] = {
    AuthorityRole.CHIEF_LIBRARIAN: ScopeRule.GLOBAL,
    AuthorityRole.DORMITORY_PROCTOR: ScopeRule.GLOBAL,
    AuthorityRole.DINING_OFFICER: ScopeRule.GLOBAL,
    AuthorityRole.STUDENT_AFFAIRS: ScopeRule.GLOBAL,
    AuthorityRole.STUDENT_DISCIPLINE: ScopeRule.GLOBAL,
    AuthorityRole.COST_SHARING: ScopeRule.GLOBAL,
    AuthorityRole.DEPARTMENT_HEAD: ScopeRule.DEPARTMENT,
    AuthorityRole.REGISTRAR_ADMIN: ScopeRule.COLLEGE,
}

# Every application carries one approval per role, in this order
REQUIRED_AUTHORITIES: tuple[AuthorityRole, ...] = tuple(APPROVAL_MATRIX)

AUTHORITY_ROLE_VALUES = frozenset(role.value for role in REQUIRED_AUTHORITIES)

SCOPE_MISMATCH = "SCOPE_MISMATCH"


@dataclass(frozen=True)
class ScopeCheck:
    """Result of ``authorize``: allowed, or denied with a reason."""

    allowed: bool
    reason: str | None = None
    message: str | None = None


ALLOWED = ScopeCheck(allowed=True)


def _scope_value(party: Any, attribute: str) -> str | None:
    value = getattr(party, attribute, None)
    if value is None:
        return None
    # College is a str enum on users and a plain string in token claims
    return value.value if isinstance(value, enum.Enum) else str(value)


def is_authority_role(role: str) -> bool:
    """True if ``role`` is one of the offices that decide clearances."""
    return role in AUTHORITY_ROLE_VALUES


def authorize(actor_role: AuthorityRole | str, actor_scope: Any, student: Any) -> ScopeCheck:
    """
    Check whether an actor holding ``actor_role`` may decide for ``student``.

    Args:
        actor_role: The authority role the actor is acting as
        actor_scope: Object with the actor's ``department`` and ``college``
        student: The applying student's record (``department``, ``college``)

    Returns:
        ALLOWED, or a denied ScopeCheck with reason SCOPE_MISMATCH
    """
    rule = APPROVAL_MATRIX[AuthorityRole(actor_role)]

    if rule == ScopeRule.GLOBAL:
        return ALLOWED

    attribute = rule.value
    actor_value = _scope_value(actor_scope, attribute)
    student_value = _scope_value(student, attribute)

    if actor_value is None or actor_value != student_value:
        return ScopeCheck(
            allowed=False,
            reason=SCOPE_MISMATCH,
            message=f"You can only review clearances for your {attribute}",
        )

    return ALLOWED


def scope_filter(actor_role: AuthorityRole | str, actor_scope: Any) -> dict[str, str | None]:
    """
    Student attribute filters limiting a reviewer's queue to their scope.

    Returns an empty dict for globally scoped roles. A scoped actor missing
    the scope attribute gets a ``None`` value; callers treat that as an
    empty scope.
    """
    rule = APPROVAL_MATRIX[AuthorityRole(actor_role)]

    if rule == ScopeRule.GLOBAL:
        return {}

    return {rule.value: _scope_value(actor_scope, rule.value)}
