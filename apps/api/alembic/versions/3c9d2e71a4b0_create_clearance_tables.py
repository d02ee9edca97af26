"""create clearance tables

Revision ID: 3c9d2e71a4b0
Revises:
Create Date: 2026-10-19 09:00:00.000000

This migration:
1. Creates the enum types (stored by member name, as SQLAlchemy's Enum does)
2. Creates users, clearance_applications, approval_records and system_settings
3. Creates a unique partial index allowing one pending or in-progress
   application per student
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3c9d2e71a4b0"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

AUTHORITY_ROLES = (
    "CHIEF_LIBRARIAN",
    "DORMITORY_PROCTOR",
    "DINING_OFFICER",
    "STUDENT_AFFAIRS",
    "STUDENT_DISCIPLINE",
    "COST_SHARING",
    "DEPARTMENT_HEAD",
    "REGISTRAR_ADMIN",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create clearance tables and enum types."""
    bind = op.get_bind()

    user_role_enum = postgresql.ENUM(
        "STUDENT", "SYSTEM_ADMIN", *AUTHORITY_ROLES, name="user_role", create_type=False
    )
    college_enum = postgresql.ENUM(
        "ENGINEERING", "NATURAL_SCIENCES", "SOCIAL_SCIENCES", name="college", create_type=False
    )
    clearance_status_enum = postgresql.ENUM(
        "PENDING", "IN_PROGRESS", "COMPLETED", "REJECTED", name="clearance_status", create_type=False
    )
    authority_role_enum = postgresql.ENUM(*AUTHORITY_ROLES, name="authority_role", create_type=False)
    approval_decision_enum = postgresql.ENUM(
        "PENDING", "APPROVED", "REJECTED", name="approval_decision", create_type=False
    )

    for enum_type in (
        user_role_enum,
        college_enum,
        clearance_status_enum,
        authority_role_enum,
        approval_decision_enum,
    ):
        enum_type.create(bind, checkfirst=True)

    # Users
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("role", user_role_enum, nullable=False, server_default="STUDENT"),
        sa.Column("student_number", sa.String(length=50), nullable=True),
        sa.Column("year_level", sa.Integer(), nullable=True),
        sa.Column("department", sa.String(length=200), nullable=True),
        sa.Column("college", college_enum, nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_number", name="uq_users_student_number"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_department"), "users", ["department"], unique=False)
    op.create_index(op.f("ix_users_college"), "users", ["college"], unique=False)

    # Clearance applications
    op.create_table(
        "clearance_applications",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("is_early_application", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("early_reason", sa.Text(), nullable=True),
        sa.Column("additional_info", sa.Text(), nullable=True),
        sa.Column("status", clearance_status_enum, nullable=False, server_default="PENDING"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("certificate_issued", sa.Boolean(), nullable=False, server_default="false"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["users.id"],
            name="fk_clearance_applications_student_id",
            ondelete="RESTRICT",
        ),
    )
    op.create_index(
        "ix_clearance_applications_status", "clearance_applications", ["status"], unique=False
    )
    op.create_index(
        "ix_clearance_applications_student_id",
        "clearance_applications",
        ["student_id"],
        unique=False,
    )
    # One pending or in-progress application per student
    op.create_index(
        "uq_clearance_applications_active_student",
        "clearance_applications",
        ["student_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('PENDING', 'IN_PROGRESS')"),
    )

    # Approval records, one per office per application
    op.create_table(
        "approval_records",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("application_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("authority_role", authority_role_enum, nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("decision", approval_decision_enum, nullable=False, server_default="PENDING"),
        sa.Column("decided_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["application_id"],
            ["clearance_applications.id"],
            name="fk_approval_records_application_id",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint(
            "application_id", "authority_role", name="uq_approval_records_application_role"
        ),
    )
    op.create_index(
        "ix_approval_records_role_decision",
        "approval_records",
        ["authority_role", "decision"],
        unique=False,
    )

    # System switches
    op.create_table(
        "system_settings",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("value", postgresql.JSON(astext_type=sa.Text()), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("updated_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_system_settings_key"), "system_settings", ["key"], unique=True)


def downgrade() -> None:
    """Drop clearance tables and enum types."""
    op.drop_index(op.f("ix_system_settings_key"), table_name="system_settings")
    op.drop_table("system_settings")

    op.drop_index("ix_approval_records_role_decision", table_name="approval_records")
    op.drop_table("approval_records")

    op.drop_index("uq_clearance_applications_active_student", table_name="clearance_applications")
    op.drop_index("ix_clearance_applications_student_id", table_name="clearance_applications")
    op.drop_index("ix_clearance_applications_status", table_name="clearance_applications")
    op.drop_table("clearance_applications")

    op.drop_index(op.f("ix_users_college"), table_name="users")
    op.drop_index(op.f("ix_users_department"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    for name in ("approval_decision", "authority_role", "clearance_status", "college", "user_role"):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
