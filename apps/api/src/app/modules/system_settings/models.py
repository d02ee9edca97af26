"""
System Settings Models

Key/value switches controlling which parts of the system are open.
"""

import enum
import uuid
from typing import Any

from sqlalchemy import String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.modules.shared import BaseModel


class SystemType(str, enum.Enum):
    """Systems that can be switched on and off."""

    CLEARANCE = "clearance"
    REGISTRATION = "registration"

    @property
    def setting_key(self) -> str:
        return SETTING_KEYS[self]

    @property
    def label(self) -> str:
        return "Clearance system" if self == SystemType.CLEARANCE else "Registration"


SETTING_KEYS = {
    SystemType.CLEARANCE: "clearance_system_active",
    SystemType.REGISTRATION: "registration_active",
}


class SystemSetting(BaseModel):
    """A named setting and who last changed it."""

    __tablename__ = "system_settings"

    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Note: no FK, the identity provider owns user accounts
    updated_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)

    def __repr__(self) -> str:
        return f"<SystemSetting {self.key}={self.value!r}>"
