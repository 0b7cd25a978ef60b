"""
Database package: declarative base and async engine/session management.
"""

from medbook.database.base import Base, TimestampMixin

__all__ = ["Base", "TimestampMixin"]
