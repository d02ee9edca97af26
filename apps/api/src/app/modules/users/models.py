"""
User Models

Identity records for students and university staff. Accounts are created and
managed by the identity provider; the clearance workflow only reads them to
resolve a student's department, college and certificate details.
"""

from enum import Enum

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import Mapped, mapped_column

from app.modules.shared import BaseModel


class UserRole(str, Enum):
    """User roles in the system."""

    STUDENT = "student"
    SYSTEM_ADMIN = "system_admin"
    REGISTRAR_ADMIN = "registrar_admin"
    DEPARTMENT_HEAD = "department_head"
    CHIEF_LIBRARIAN = "chief_librarian"
    DORMITORY_PROCTOR = "dormitory_proctor"
    DINING_OFFICER = "dining_officer"
    STUDENT_AFFAIRS = "student_affairs"
    STUDENT_DISCIPLINE = "student_discipline"
    COST_SHARING = "cost_sharing"


class College(str, Enum):
    """Colleges a student or registrar belongs to."""

    ENGINEERING = "engineering"
    NATURAL_SCIENCES = "natural_sciences"
    SOCIAL_SCIENCES = "social_sciences"


class User(BaseModel):
    """
    A student or staff member.

    Students carry department, college, student number and year level.
    Department heads carry a department; registrars carry a college.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)

    role: Mapped[UserRole] = mapped_column(
        ENUM(UserRole, name="user_role", create_type=True),
        nullable=False,
        default=UserRole.STUDENT,
    )

    # Student-specific fields
    student_number: Mapped[str | None] = mapped_column(String(50), unique=True, nullable=True)
    year_level: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Scope fields used by the approval matrix
    department: Mapped[str | None] = mapped_column(String(200), nullable=True, index=True)
    college: Mapped[College | None] = mapped_column(
        ENUM(College, name="college", create_type=True), nullable=True, index=True
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role.value})>"
