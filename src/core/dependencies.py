"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes,
following Google Python Style Guide and FastAPI best practices.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from utils import approval_manager
from utils import user_manager


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_approval_manager(
    db: Session = Depends(get_db),
) -> approval_manager.ApprovalManager:
    """Get ApprovalManager instance with request-scoped DB session."""
    return approval_manager.ApprovalManager(db)


# Type aliases for dependency injection
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
ApprovalManagerDep = Annotated[
    approval_manager.ApprovalManager, Depends(get_approval_manager)
]
