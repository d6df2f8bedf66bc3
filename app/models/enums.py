"""Enum definitions for readings and users."""

from enum import Enum


class ReadingStatus(str, Enum):
    """Review state of a meter reading."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class UserRole(str, Enum):
    """Access level of a user."""

    TENANT = "tenant"
    ADMIN = "admin"
