"""Domain models for the visitor control service"""
from .visitor import Visitor
from .custom_field import CustomFieldConfig
from .user import UserProfile, UserRole

__all__ = [
    "Visitor",
    "CustomFieldConfig",
    "UserProfile",
    "UserRole",
]
