"""
Fixtures for clearance tests.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.core.auth import AuthenticatedUser
from app.modules.clearances.approval_matrix import REQUIRED_AUTHORITIES
from app.modules.clearances.models import (
    ApprovalDecision,
    AuthorityRole,
    ClearanceApplication,
)
from app.modules.clearances.review import apply_decision
from app.modules.users.models import College, User, UserRole

DECIDED_AT = datetime(2026, 5, 4, 10, 30, tzinfo=UTC)


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.rollback = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def decided_at():
    return DECIDED_AT


@pytest.fixture
def student():
    """A software engineering student in the engineering college."""
    return User(
        id=uuid4(),
        email="abebe.kebede@student.edu",
        full_name="Abebe Kebede",
        role=UserRole.STUDENT,
        student_number="ETS0123/14",
        year_level=4,
        department="Software Engineering",
        college=College.ENGINEERING,
        is_active=True,
    )


@pytest.fixture
def civil_student():
    """A civil engineering student in the natural sciences college."""
    return User(
        id=uuid4(),
        email="sara.tesfaye@student.edu",
        full_name="Sara Tesfaye",
        role=UserRole.STUDENT,
        student_number="ETS0456/14",
        year_level=3,
        department="Civil Engineering",
        college=College.NATURAL_SCIENCES,
        is_active=True,
    )


@pytest.fixture
def make_application():
    """Factory opening an application for a student, with the relationship set."""

    def _make(student, is_early_application=False, **kwargs) -> ClearanceApplication:
        application = ClearanceApplication.open(
            student_id=student.id,
            is_early_application=is_early_application,
            **kwargs,
        )
        application.student = student
        return application

    return _make


@pytest.fixture
def make_actor():
    """Factory for an authenticated user holding ``role``."""

    def _make(role, **scope) -> AuthenticatedUser:
        role = role.value if isinstance(role, AuthorityRole) else role
        return AuthenticatedUser(id=uuid4(), role=role, **scope)

    return _make


@pytest.fixture
def actor_for(make_actor):
    """Factory for a reviewer whose scope covers ``student``."""

    def _make(role, student) -> AuthenticatedUser:
        return make_actor(role, department=student.department, college=student.college.value)

    return _make


@pytest.fixture
def decide(actor_for):
    """Apply a decision on a slot with an in-scope reviewer."""

    def _decide(application, role, decision):
        actor = actor_for(role, application.student)
        return apply_decision(application, role, actor, decision, decided_at=DECIDED_AT)

    return _decide


@pytest.fixture
def application(make_application, student):
    """A fresh application with every slot pending."""
    return make_application(student)


@pytest.fixture
def completed_application(make_application, decide, student):
    """An application every office has approved."""
    application = make_application(student)
    for role in REQUIRED_AUTHORITIES:
        decide(application, role, ApprovalDecision.APPROVED)
    return application
