"""Approval workflow for pending accounts.

Teacher and admin registrations start inactive. An administrator lists them,
then approves (activates) or rejects (deletes account and profile) each one.
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from core.exceptions import NotFound
from models import PROFILE_MODELS, UserModel
from schemas.user import PendingUser, User
from utils.converters import model_to_user
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)


class ApprovalManager:
    """Lists, approves and rejects pending accounts."""

    def __init__(self, db: Session):
        self.db = db
        self.user_manager = UserManager(db)

    def list_pending(self) -> List[PendingUser]:
        """Return inactive accounts, newest first, with profile display fields.

        Each profile is looked up separately in the table for the account's
        role.
        """
        models = (
            self.db.query(UserModel)
            .filter(UserModel.is_active == False)  # noqa: E712
            .order_by(UserModel.create_at.desc())
            .all()
        )
        results = []
        for model in models:
            pending = PendingUser(
                user_id=model.user_id,
                username=model.username,
                role=model.role,
                create_at=model.create_at,
            )
            profile_cls = PROFILE_MODELS.get(model.role)
            profile = None
            if profile_cls is not None:
                profile = (
                    self.db.query(profile_cls)
                    .filter(profile_cls.user_id == model.user_id)
                    .first()
                )
            if profile is not None:
                pending.name = profile.name
                pending.surname = getattr(profile, "surname", None)
                pending.email = profile.email
                pending.phone = getattr(profile, "phone", None)
            results.append(pending)
        return results

    def approve(self, user_id: str) -> User:
        """Activate a pending account.

        Approving an account that is already active changes nothing.

        Raises:
            NotFound: If no account has this ID.
        """
        model = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        if model is None:
            raise NotFound(user_id)
        if model.is_active:
            logger.info("User already active, nothing to approve: %s", model.username)
            return model_to_user(model)

        with self.user_manager.atomic():
            model.is_active = True
        logger.info("Approved user: %s", model.username)
        return model_to_user(model)

    def reject(self, user_id: str) -> None:
        """Delete a pending account and its profile as one unit.

        Raises:
            NotFound: If no account has this ID or its profile is missing.
            InternalError: If the transaction fails; nothing is deleted.
        """
        self.user_manager.delete_user(user_id)
        logger.info("Rejected user: %s", user_id)
