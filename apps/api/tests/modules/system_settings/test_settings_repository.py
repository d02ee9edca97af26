"""
Unit tests for the system settings repository.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from app.modules.system_settings import repository
from app.modules.system_settings.models import SystemSetting


def compiled(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect()))


@pytest.fixture
def mock_db():
    db = AsyncMock()
    db.add = MagicMock()
    return db


def returning(setting):
    result = MagicMock()
    result.scalar_one_or_none.return_value = setting
    return result


class TestGetByKey:
    """Tests for get_by_key()."""

    @pytest.mark.asyncio
    async def test_plain_read_takes_no_lock(self, mock_db):
        mock_db.execute.return_value = returning(None)

        await repository.get_by_key(mock_db, "clearance_system_active")

        assert "FOR UPDATE" not in compiled(mock_db.execute.call_args.args[0])

    @pytest.mark.asyncio
    async def test_locked_read(self, mock_db):
        mock_db.execute.return_value = returning(None)

        await repository.get_by_key(mock_db, "clearance_system_active", for_update=True)

        assert "FOR UPDATE" in compiled(mock_db.execute.call_args.args[0])


class TestUpsert:
    """Tests for upsert()."""

    @pytest.mark.asyncio
    async def test_updates_locked_row(self, mock_db):
        setting = SystemSetting(key="registration_active", value=True)
        mock_db.execute.return_value = returning(setting)

        result = await repository.upsert(mock_db, "registration_active", False)

        assert result is setting
        assert setting.value is False
        assert "FOR UPDATE" in compiled(mock_db.execute.call_args.args[0])
        mock_db.add.assert_not_called()
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_creates_missing_row(self, mock_db):
        mock_db.execute.return_value = returning(None)

        result = await repository.upsert(mock_db, "registration_active", True)

        assert result.key == "registration_active"
        assert result.value is True
        mock_db.add.assert_called_once_with(result)
