"""
Clearances module - student clearance applications and their approval by
the university offices.
"""

from app.modules.clearances.models import (
    ApprovalDecision,
    ApprovalRecord,
    AuthorityRole,
    ClearanceApplication,
    ClearanceStatus,
)

__all__ = [
    "ApprovalDecision",
    "ApprovalRecord",
    "AuthorityRole",
    "ClearanceApplication",
    "ClearanceStatus",
]
