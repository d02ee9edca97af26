"""
Unit tests for the clearance repository layer.

These tests focus on scope filtering and the row lock taken for decisions.
"""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql

from app.modules.clearances import repository
from app.modules.clearances.models import ApprovalDecision, AuthorityRole


def compiled(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect()))


class TestScopeConditions:
    """Tests for _scope_conditions()."""

    def test_no_filters(self):
        assert repository._scope_conditions({}) == []

    def test_department_filter(self):
        conditions = repository._scope_conditions({"department": "Software Engineering"})
        assert len(conditions) == 1
        assert "users.department" in str(conditions[0])

    def test_missing_scope_matches_nothing(self):
        assert repository._scope_conditions({"department": None}) is None

    def test_unknown_college_matches_nothing(self):
        assert repository._scope_conditions({"college": "medicine"}) is None


class TestReviewerQueries:
    """Tests for reviewer queue and counts."""

    @pytest.mark.asyncio
    async def test_empty_scope_skips_query(self, mock_db):
        """A department head without a department sees nothing."""
        rows, total = await repository.list_for_reviewer(
            mock_db, AuthorityRole.DEPARTMENT_HEAD, {"department": None}
        )

        assert (rows, total) == ([], 0)
        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_scope_counts_zero(self, mock_db):
        counts = await repository.count_slot_decisions(
            mock_db, AuthorityRole.REGISTRAR_ADMIN, {"college": None}
        )

        assert counts == {decision: 0 for decision in ApprovalDecision}
        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_queue_joins_reviewer_slot(self, mock_db):
        count_result = MagicMock()
        count_result.scalar.return_value = 0
        rows_result = MagicMock()
        rows_result.all.return_value = []
        mock_db.execute.side_effect = [count_result, rows_result]

        await repository.list_for_reviewer(
            mock_db,
            AuthorityRole.DEPARTMENT_HEAD,
            {"department": "Software Engineering"},
            decision=ApprovalDecision.PENDING,
        )

        sql = compiled(mock_db.execute.call_args_list[1].args[0])
        assert "JOIN approval_records" in sql
        assert "approval_records.authority_role" in sql
        assert "users.department" in sql
        assert "approval_records.decision" in sql


class TestRowLock:
    """Tests for get_by_id_for_update()."""

    @pytest.mark.asyncio
    async def test_selects_for_update(self, mock_db):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db.execute.return_value = result

        application = await repository.get_by_id_for_update(mock_db, uuid4())

        assert application is None
        assert "FOR UPDATE" in compiled(mock_db.execute.call_args.args[0])
