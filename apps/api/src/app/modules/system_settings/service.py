"""
System Settings Service Layer

Builds the eligibility gate from the stored switches and lets system
administrators flip them.

When the settings store cannot be read, the gate is reported open
(controlled by the GATE_FAIL_OPEN setting).
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.modules.clearances.errors import SystemDisabledError
from app.modules.system_settings import repository
from app.modules.system_settings.models import SETTING_KEYS, SystemType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EligibilityGate:
    """Snapshot of the system switches, consulted before clearance operations."""

    clearance_system_active: bool
    registration_active: bool

    @classmethod
    def open(cls) -> "EligibilityGate":
        return cls(clearance_system_active=True, registration_active=True)

    def ensure_clearance_open(self) -> None:
        """
        Raises:
            SystemDisabledError: If the clearance system is switched off
        """
        if not self.clearance_system_active:
            raise SystemDisabledError("Clearance system is currently inactive")

    def ensure_registration_open(self) -> None:
        """
        Raises:
            SystemDisabledError: If registration is switched off
        """
        if not self.registration_active:
            raise SystemDisabledError("Registration is currently closed")


def _defaults() -> dict[SystemType, bool]:
    return {
        SystemType.CLEARANCE: settings.clearance_system_active_default,
        SystemType.REGISTRATION: settings.registration_active_default,
    }


async def _read_switches(db: AsyncSession) -> dict[SystemType, bool]:
    stored = await repository.get_values(db, list(SETTING_KEYS.values()))
    switches = _defaults()
    for system_type, key in SETTING_KEYS.items():
        if key in stored and stored[key] is not None:
            switches[system_type] = bool(stored[key])
    return switches


async def get_eligibility_gate(db: AsyncSession) -> EligibilityGate:
    """
    Read both switches into an EligibilityGate.

    Missing settings fall back to the configured defaults. If the store
    fails and ``gate_fail_open`` is set, the gate is returned open.

    Raises:
        SQLAlchemyError: Store failure with ``gate_fail_open`` disabled
    """
    try:
        switches = await _read_switches(db)
    except SQLAlchemyError as e:
        if not settings.gate_fail_open:
            raise
        logger.error(f"Failed to read system settings, treating systems as active: {e}")
        await db.rollback()
        return EligibilityGate.open()

    return EligibilityGate(
        clearance_system_active=switches[SystemType.CLEARANCE],
        registration_active=switches[SystemType.REGISTRATION],
    )


async def _flip(db: AsyncSession, system_type: SystemType, actor: Any) -> bool:
    setting = await repository.get_by_key(db, system_type.setting_key, for_update=True)

    current = _defaults()[system_type]
    if setting is not None and setting.value is not None:
        current = bool(setting.value)
    new_value = not current

    actor_name = getattr(actor, "name", None) or str(actor.id)
    description = (
        f"{system_type.label} {'activated' if new_value else 'deactivated'} by {actor_name}"
    )

    await repository.upsert(
        db,
        system_type.setting_key,
        new_value,
        description=description,
        updated_by=actor.id,
    )

    logger.info(description)
    return new_value


async def toggle_system(db: AsyncSession, system_type: SystemType, actor: Any) -> bool:
    """
    Flip a system switch.

    The setting row is locked between reading and writing, so concurrent
    toggles are applied one after the other. If a concurrent toggle creates
    the setting first, the flip is retried against the stored row.

    Args:
        db: Database session
        system_type: Which switch to flip
        actor: The system administrator making the change

    Returns:
        The new value of the switch
    """
    try:
        return await _flip(db, system_type, actor)
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Concurrent first toggle of {system_type.setting_key}, retrying: {e.orig}")
        return await _flip(db, system_type, actor)
