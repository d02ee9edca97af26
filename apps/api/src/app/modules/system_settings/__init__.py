"""
System settings module - switches that open and close the clearance and
registration systems.
"""

from app.modules.system_settings.models import SystemSetting, SystemType
from app.modules.system_settings.service import EligibilityGate

__all__ = ["EligibilityGate", "SystemSetting", "SystemType"]
