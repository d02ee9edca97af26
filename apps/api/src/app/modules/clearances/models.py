"""
Clearance Models

A clearance application and its fixed set of per-office approval records.

The overall ``status`` of an application is derived from its approval
records and cannot be assigned directly; it only moves when a record is
decided and ``refresh_status`` recomputes it.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from app.modules.clearances.errors import (
    ClearanceInvariantError,
    ClearanceValidationError,
    InvalidDecisionTransitionError,
)
from app.modules.shared import BaseModel
from app.modules.users.models import User


class AuthorityRole(str, enum.Enum):
    """The offices that must each decide a clearance application."""

    CHIEF_LIBRARIAN = "chief_librarian"
    DORMITORY_PROCTOR = "dormitory_proctor"
    DINING_OFFICER = "dining_officer"
    STUDENT_AFFAIRS = "student_affairs"
    STUDENT_DISCIPLINE = "student_discipline"
    COST_SHARING = "cost_sharing"
    DEPARTMENT_HEAD = "department_head"
    REGISTRAR_ADMIN = "registrar_admin"


class ApprovalDecision(str, enum.Enum):
    """Decision recorded by one office."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ClearanceStatus(str, enum.Enum):
    """Overall status of a clearance application."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"


ACTIVE_STATUSES = frozenset({ClearanceStatus.PENDING, ClearanceStatus.IN_PROGRESS})
TERMINAL_STATUSES = frozenset({ClearanceStatus.COMPLETED, ClearanceStatus.REJECTED})


class ClearanceApplication(BaseModel):
    """
    A student's clearance application.

    Created through ``ClearanceApplication.open`` with one PENDING approval
    record per authority role. Never deleted.
    """

    __tablename__ = "clearance_applications"

    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )

    # Application details
    is_early_application: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    early_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    additional_info: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Derived status, exposed read-only through ``status``
    _status: Mapped[ClearanceStatus] = mapped_column(
        "status",
        Enum(ClearanceStatus, name="clearance_status"),
        nullable=False,
        default=ClearanceStatus.PENDING,
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    certificate_issued: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    student: Mapped[User] = relationship(User, lazy="selectin")
    approvals: Mapped[list["ApprovalRecord"]] = relationship(
        "ApprovalRecord",
        back_populates="application",
        order_by="ApprovalRecord.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_clearance_applications_status", "status"),
        Index("ix_clearance_applications_student_id", "student_id"),
        # One pending or in-progress application per student
        Index(
            "uq_clearance_applications_active_student",
            "student_id",
            unique=True,
            postgresql_where=text("status IN ('PENDING', 'IN_PROGRESS')"),
        ),
    )

    @classmethod
    def open(
        cls,
        student_id: uuid.UUID,
        is_early_application: bool,
        early_reason: str | None = None,
        additional_info: str | None = None,
    ) -> "ClearanceApplication":
        """
        Build a new application with every approval slot PENDING.

        Raises:
            ClearanceValidationError: If an early application has no reason
        """
        from app.modules.clearances.approval_matrix import REQUIRED_AUTHORITIES

        early_reason = early_reason.strip() if early_reason else None
        if is_early_application and not early_reason:
            raise ClearanceValidationError(
                "Reason is required for early clearance applications"
            )

        additional_info = additional_info.strip() if additional_info else None

        return cls(
            id=uuid.uuid4(),
            student_id=student_id,
            is_early_application=is_early_application,
            early_reason=early_reason if is_early_application else None,
            additional_info=additional_info or None,
            _status=ClearanceStatus.PENDING,
            certificate_issued=False,
            approvals=[
                ApprovalRecord(
                    authority_role=role,
                    position=position,
                    decision=ApprovalDecision.PENDING,
                )
                for position, role in enumerate(REQUIRED_AUTHORITIES)
            ],
        )

    @hybrid_property
    def status(self) -> ClearanceStatus:
        return self._status

    @property
    def is_active(self) -> bool:
        return self._status in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self._status in TERMINAL_STATUSES

    def approval_for(self, role: "AuthorityRole") -> "ApprovalRecord":
        """Return the approval record for ``role``."""
        role = AuthorityRole(role)
        for approval in self.approvals:
            if approval.authority_role == role:
                return approval
        raise ClearanceInvariantError(f"Application {self.id} has no approval for {role.value}")

    def refresh_status(self, now: datetime) -> ClearanceStatus:
        """
        Recompute the overall status from the approval records.

        Sets ``completed_at`` the first time the application completes.
        """
        from app.modules.clearances.status import aggregate

        self._status = aggregate(self.approvals)
        if self._status == ClearanceStatus.COMPLETED and self.completed_at is None:
            self.completed_at = now
        return self._status

    def mark_certificate_issued(self) -> bool:
        """
        Record that a certificate has been rendered.

        Returns:
            True if the flag changed, False if it was already set
        """
        if self.certificate_issued:
            return False
        self.certificate_issued = True
        return True

    @validates("completed_at")
    def _validate_completed_at(self, key: str, value: datetime | None) -> datetime | None:
        if self.completed_at is not None and value != self.completed_at:
            raise ClearanceInvariantError("completed_at is already set and cannot change")
        return value

    @validates("certificate_issued")
    def _validate_certificate_issued(self, key: str, value: bool) -> bool:
        if self.certificate_issued and not value:
            raise ClearanceInvariantError("certificate_issued cannot be reset")
        if value and self._status != ClearanceStatus.COMPLETED:
            raise ClearanceInvariantError(
                "A certificate can only be issued for a completed clearance"
            )
        return value


class ApprovalRecord(BaseModel):
    """One office's decision on a clearance application."""

    __tablename__ = "approval_records"

    application_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("clearance_applications.id", ondelete="CASCADE"),
        nullable=False,
    )

    authority_role: Mapped[AuthorityRole] = mapped_column(
        Enum(AuthorityRole, name="authority_role"), nullable=False
    )
    # Order of the role in the approval matrix
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    decision: Mapped[ApprovalDecision] = mapped_column(
        Enum(ApprovalDecision, name="approval_decision"),
        nullable=False,
        default=ApprovalDecision.PENDING,
    )
    # Note: no FK so decisions survive account removal at the identity provider
    decided_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    application: Mapped["ClearanceApplication"] = relationship(
        "ClearanceApplication", back_populates="approvals"
    )

    __table_args__ = (
        UniqueConstraint(
            "application_id", "authority_role", name="uq_approval_records_application_role"
        ),
        Index("ix_approval_records_role_decision", "authority_role", "decision"),
    )

    @property
    def is_pending(self) -> bool:
        return self.decision == ApprovalDecision.PENDING

    def record(
        self,
        decision: ApprovalDecision,
        decided_by: uuid.UUID,
        decided_at: datetime,
        comment: str | None = None,
    ) -> None:
        """Store a final decision on this slot."""
        self.decision = decision
        self.decided_by = decided_by
        self.decided_at = decided_at
        self.comment = comment

    @validates("decision")
    def _validate_decision(self, key: str, value: ApprovalDecision) -> ApprovalDecision:
        value = ApprovalDecision(value)
        current = self.decision
        if current is not None and current != ApprovalDecision.PENDING and value != current:
            raise InvalidDecisionTransitionError(current.value, value.value)
        return value
