"""
Clearance Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.modules.clearances.models import ApprovalDecision, AuthorityRole, ClearanceStatus
from app.modules.users.models import College


class ClearanceApplicationCreate(BaseModel):
    """Request body for POST /clearance/apply."""

    is_early_application: bool = False
    early_reason: str | None = Field(None, max_length=1000)
    additional_info: str | None = Field(None, max_length=2000)
    agree_to_terms: bool

    @model_validator(mode="after")
    def validate_terms(self) -> "ClearanceApplicationCreate":
        if not self.agree_to_terms:
            raise ValueError("You must agree to terms and conditions")
        return self


class DecisionRequest(BaseModel):
    """Request body for deciding one approval slot."""

    decision: ApprovalDecision
    comment: str | None = Field(None, max_length=1000)


class StudentSummary(BaseModel):
    """Student details shown alongside an application."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: str
    student_number: str | None = None
    department: str | None = None
    college: College | None = None
    year_level: int | None = None


class ApprovalRecordResponse(BaseModel):
    """One office's decision."""

    model_config = ConfigDict(from_attributes=True)

    authority_role: AuthorityRole
    decision: ApprovalDecision
    decided_by: UUID | None = None
    decided_at: datetime | None = None
    comment: str | None = None


class ClearanceResponse(BaseModel):
    """A clearance application with all of its approvals."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: UUID
    student: StudentSummary | None = None
    is_early_application: bool
    early_reason: str | None = None
    additional_info: str | None = None
    status: ClearanceStatus
    approvals: list[ApprovalRecordResponse]
    completed_at: datetime | None = None
    certificate_issued: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ApplyResponse(BaseModel):
    """Response after submitting a clearance application."""

    message: str = "Clearance application submitted successfully"
    clearance: ClearanceResponse


class DecisionResponse(BaseModel):
    """Response after an office decides its slot."""

    message: str
    clearance: ClearanceResponse


class ReviewQueueItem(ClearanceResponse):
    """An application in a reviewer's queue, with the reviewer's own slot status."""

    my_decision: ApprovalDecision


class ReviewQueueResponse(BaseModel):
    """Paginated reviewer queue."""

    items: list[ReviewQueueItem]
    total: int
    skip: int
    limit: int


class ReviewerStats(BaseModel):
    """Counts of the reviewer's slot decisions within their scope."""

    total_applications: int
    pending: int
    approved: int
    rejected: int


class PublicStats(BaseModel):
    """Public counters shown on the landing page."""

    total_students: int
    active_clearances: int
    completed_clearances: int
    active_staff: int
