"""
Unit tests for clearance status aggregation.
"""

import itertools
from types import SimpleNamespace

import pytest

from app.modules.clearances.approval_matrix import REQUIRED_AUTHORITIES
from app.modules.clearances.models import ApprovalDecision, AuthorityRole, ClearanceStatus
from app.modules.clearances.status import aggregate, is_certificate_eligible

APPROVED = ApprovalDecision.APPROVED
REJECTED = ApprovalDecision.REJECTED
PENDING = ApprovalDecision.PENDING


def records(*decisions):
    """Approval records pairing each required office with a decision."""
    return [
        SimpleNamespace(authority_role=role, decision=decision)
        for role, decision in zip(REQUIRED_AUTHORITIES, decisions, strict=False)
    ]


class TestAggregate:
    """Tests for aggregate()."""

    def test_all_pending_is_pending(self):
        assert aggregate(records(*[PENDING] * 8)) == ClearanceStatus.PENDING

    def test_empty_is_pending(self):
        assert aggregate([]) == ClearanceStatus.PENDING

    def test_one_approval_is_in_progress(self):
        assert aggregate(records(APPROVED, *[PENDING] * 7)) == ClearanceStatus.IN_PROGRESS

    def test_seven_of_eight_approved_is_in_progress(self):
        assert aggregate(records(*[APPROVED] * 7, PENDING)) == ClearanceStatus.IN_PROGRESS

    def test_all_approved_is_completed(self):
        assert aggregate(records(*[APPROVED] * 8)) == ClearanceStatus.COMPLETED

    def test_single_rejection_dominates_approvals(self):
        """One rejection wins over any number of approvals."""
        assert aggregate(records(*[APPROVED] * 7, REJECTED)) == ClearanceStatus.REJECTED

    def test_rejection_with_pending_is_rejected(self):
        assert aggregate(records(REJECTED, *[PENDING] * 7)) == ClearanceStatus.REJECTED

    def test_missing_office_never_completes(self):
        """Seven approvals without the eighth office cannot complete."""
        assert aggregate(records(*[APPROVED] * 7)) == ClearanceStatus.IN_PROGRESS

    def test_duplicate_approvals_do_not_stand_in_for_missing_office(self):
        duplicated = records(*[APPROVED] * 7) + [
            SimpleNamespace(authority_role=AuthorityRole.CHIEF_LIBRARIAN, decision=APPROVED)
        ]
        assert aggregate(duplicated) == ClearanceStatus.IN_PROGRESS

    def test_accepts_raw_string_values(self):
        raw = [
            SimpleNamespace(authority_role=role.value, decision="approved")
            for role in REQUIRED_AUTHORITIES
        ]
        assert aggregate(raw) == ClearanceStatus.COMPLETED

    @pytest.mark.parametrize(
        "decisions",
        [
            (APPROVED, APPROVED, PENDING, PENDING, APPROVED, PENDING, APPROVED, PENDING),
            (APPROVED, REJECTED, APPROVED, APPROVED, APPROVED, APPROVED, APPROVED, APPROVED),
            (APPROVED,) * 8,
            (PENDING,) * 8,
        ],
    )
    def test_order_independent(self, decisions):
        """The result does not change under any rotation or reversal of the records."""
        base = records(*decisions)
        expected = aggregate(base)

        for shift in range(len(base)):
            rotated = base[shift:] + base[:shift]
            assert aggregate(rotated) == expected
            assert aggregate(list(reversed(rotated))) == expected

    def test_order_independent_all_permutations_small(self):
        """Every permutation of a mixed set gives the same status."""
        base = records(APPROVED, REJECTED, PENDING, APPROVED)
        results = {aggregate(list(p)) for p in itertools.permutations(base)}
        assert results == {ClearanceStatus.REJECTED}


class TestCertificateEligibility:
    """Tests for is_certificate_eligible()."""

    @pytest.mark.parametrize(
        "status,eligible",
        [
            (ClearanceStatus.PENDING, False),
            (ClearanceStatus.IN_PROGRESS, False),
            (ClearanceStatus.REJECTED, False),
            (ClearanceStatus.COMPLETED, True),
        ],
    )
    def test_only_completed_is_eligible(self, status, eligible):
        assert is_certificate_eligible(SimpleNamespace(status=status)) is eligible
