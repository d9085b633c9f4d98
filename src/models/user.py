"""User database model.

This module defines the account (authentication) record using SQLAlchemy.
Role-specific data lives in the profile tables keyed by the same user_id.
"""

from sqlalchemy import Boolean, Column, String
from .base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    user_id = Column(String, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False)  # 'admin', 'teacher', 'student' or 'parent'
    is_active = Column(Boolean, nullable=False, default=False)
    create_at = Column(String, nullable=False, index=True)  # ISO format string
