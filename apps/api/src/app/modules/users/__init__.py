"""
Users module - identity records read by the clearance workflow.
"""

from app.modules.users.models import College, User, UserRole
from app.modules.users.repository import UserRepository

__all__ = ["College", "User", "UserRole", "UserRepository"]
