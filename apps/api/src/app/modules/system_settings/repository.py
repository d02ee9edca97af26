"""
System Settings Repository

Database operations for system settings.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import SystemSetting


async def get_by_key(
    db: AsyncSession, key: str, *, for_update: bool = False
) -> SystemSetting | None:
    """
    Get a setting by key.

    With ``for_update`` the row stays locked until the transaction ends.
    """
    query = select(SystemSetting).where(SystemSetting.key == key)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_values(db: AsyncSession, keys: list[str]) -> dict[str, object]:
    """Get the stored values for ``keys``. Missing keys are left out."""
    result = await db.execute(select(SystemSetting).where(SystemSetting.key.in_(keys)))
    return {setting.key: setting.value for setting in result.scalars().all()}


async def upsert(
    db: AsyncSession,
    key: str,
    value: object,
    *,
    description: str | None = None,
    updated_by: UUID | None = None,
) -> SystemSetting:
    """
    Create or update a setting and commit.

    Raises:
        IntegrityError: If another transaction created the key first
    """
    setting = await get_by_key(db, key, for_update=True)

    if setting is None:
        setting = SystemSetting(key=key)
        db.add(setting)

    setting.value = value
    setting.description = description
    setting.updated_by = updated_by

    await db.commit()
    await db.refresh(setting)

    return setting
