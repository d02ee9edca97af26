"""
System Settings Schemas
"""

from pydantic import BaseModel

from .models import SystemType


class SystemStatusResponse(BaseModel):
    """Current state of the system switches."""

    clearance_system_active: bool
    registration_active: bool


class ToggleSystemRequest(BaseModel):
    """Request body for POST /admin/toggle-system."""

    type: SystemType


class ToggleSystemResponse(BaseModel):
    """Result of flipping a system switch."""

    message: str
    type: SystemType
    active: bool
