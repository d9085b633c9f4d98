"""User management utilities.

This module provides account provisioning: registration of an account together
with its role-specific profile, credential verification, admin creation,
profile and password edits, and atomic account deletion.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import (
    DuplicateUsername,
    Forbidden,
    InternalError,
    InvalidCredentials,
    NotFound,
    PendingApproval,
    ValidationError,
)
from core.security import burn_password_check, hash_password, verify_password
from models import PROFILE_MODELS, AdminModel, ParentModel, StudentModel, UserModel
from schemas.profile import Profile, build_profile
from schemas.user import AUTO_ACTIVATED_ROLES, ChildInfo, Role, User, UserWithProfile
from utils.converters import model_to_profile, model_to_user, profile_to_model, user_to_model

logger = logging.getLogger(__name__)

# Fields that identify a profile and can never be edited
IMMUTABLE_PROFILE_FIELDS = ("user_id", "role")


def _is_username_conflict(error: IntegrityError) -> bool:
    return "username" in str(error.orig).lower()


class UserManager:
    """Manages accounts and their profiles using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    @contextmanager
    def atomic(self, username: Optional[str] = None) -> Iterator[None]:
        """Run the enclosed writes as one transaction.

        Commits when the block finishes, rolls everything back otherwise.

        Args:
            username: Username being written, if any. A unique violation on
                the username column is then reported as DuplicateUsername.

        Raises:
            DuplicateUsername: If the storage layer rejects the username.
            InternalError: On any other storage failure.
        """
        try:
            yield
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if username is not None and _is_username_conflict(e):
                raise DuplicateUsername(f"Username '{username}' already exists") from e
            logger.error("Integrity error, transaction rolled back: %s", e.orig)
            raise InternalError() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Storage error, transaction rolled back: %s", e)
            raise InternalError() from e
        except Exception:
            self.db.rollback()
            raise

    # --- Lookups ---

    def get_user_by_username(self, username: str) -> Optional[User]:
        """Get a user by username.

        Args:
            username: Username to look up.

        Returns:
            User object if found, None otherwise.
        """
        model = self.db.query(UserModel).filter(UserModel.username == username).first()
        if model:
            return model_to_user(model)
        return None

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by user ID.

        Args:
            user_id: User ID to look up.

        Returns:
            User object if found, None otherwise.
        """
        model = self._get_model(user_id)
        if model:
            return model_to_user(model)
        return None

    def get_user(self, user_id: str) -> User:
        """Like get_user_by_id but raises NotFound for unknown IDs."""
        user = self.get_user_by_id(user_id)
        if user is None:
            raise NotFound(user_id)
        return user

    def get_profile(self, user: User) -> Optional[Profile]:
        model = self._get_profile_model(user.user_id, user.role.value)
        if model is None:
            return None
        return model_to_profile(user.role.value, model)

    def get_user_with_profile(self, user_id: str) -> UserWithProfile:
        user = self.get_user(user_id)
        return UserWithProfile(
            user_id=user.user_id,
            username=user.username,
            role=user.role,
            is_active=user.is_active,
            create_at=user.create_at,
            profile=self.get_profile(user),
        )

    def list_users(
        self, role: Optional[str] = None, is_active: Optional[bool] = None
    ) -> List[User]:
        """List accounts, newest first, with optional filters.

        Args:
            role: Optional role filter.
            is_active: Optional active flag filter.

        Returns:
            List of User objects.
        """
        query = self.db.query(UserModel)
        if role:
            query = query.filter(UserModel.role == role)
        if is_active is not None:
            query = query.filter(UserModel.is_active == is_active)
        models = query.order_by(UserModel.create_at.desc()).all()
        return [model_to_user(m) for m in models]

    def list_children(self, parent_id: str) -> List[ChildInfo]:
        """List the students linked to a parent, sorted by name.

        Raises:
            NotFound: If no account has this ID.
            ValidationError: If the account is not a parent.
        """
        parent = self.get_user(parent_id)
        if parent.role is not Role.PARENT:
            raise ValidationError(f"User '{parent_id}' is not a parent")

        rows = (
            self.db.query(StudentModel, UserModel)
            .join(UserModel, UserModel.user_id == StudentModel.user_id)
            .filter(StudentModel.parent_id == parent_id)
            .order_by(StudentModel.name, StudentModel.surname)
            .all()
        )
        return [
            ChildInfo(
                user_id=student.user_id,
                username=account.username,
                name=student.name,
                surname=student.surname,
                class_id=student.class_id,
                grade_id=student.grade_id,
                is_active=bool(account.is_active),
            )
            for student, account in rows
        ]

    # --- Provisioning ---

    def register(
        self,
        username: str,
        role: str,
        profile_fields: Dict[str, Any],
        password: str,
    ) -> User:
        """Register an account together with its role's profile.

        Students and parents are active right away; teachers and admins wait
        for an administrator's approval. Self-registered admins never get the
        super admin flag.

        Args:
            username: Username for the new account.
            role: One of 'admin', 'teacher', 'student', 'parent'.
            profile_fields: Profile fields for the role.
            password: Plain text password.

        Returns:
            Created User object.

        Raises:
            ValidationError: If a required field is missing or invalid.
            DuplicateUsername: If the username already exists.
            InternalError: If the transaction fails.
        """
        try:
            role = Role(role)
        except ValueError:
            raise ValidationError(
                f"Invalid role: {role}. Must be 'admin', 'teacher', 'student' or 'parent'."
            )
        profile = build_profile(role.value, profile_fields)
        if role is Role.ADMIN:
            profile = profile.model_copy(update={"super_admin": False})

        return self._create_account(
            username,
            password,
            profile,
            is_active=role.value in AUTO_ACTIVATED_ROLES,
        )

    def create_account(
        self,
        username: str,
        role: str,
        profile_fields: Dict[str, Any],
        password: str,
    ) -> User:
        """Create an account on an administrator's behalf.

        Accounts created this way are active right away, whatever the role.
        Admins created here never get the super admin flag; use create_admin
        for that.

        Raises:
            ValidationError: If a required field is missing, the role is
                unknown or a student's parent does not exist.
            DuplicateUsername: If the username already exists.
            InternalError: If the transaction fails.
        """
        try:
            role = Role(role)
        except ValueError:
            raise ValidationError(
                f"Invalid role: {role}. Must be 'admin', 'teacher', 'student' or 'parent'."
            )
        profile = build_profile(role.value, profile_fields)
        if role is Role.ADMIN:
            profile = profile.model_copy(update={"super_admin": False})
        return self._create_account(username, password, profile, is_active=True)

    def create_admin(
        self,
        actor_id: str,
        username: str,
        password: str,
        name: str,
        email: Optional[str] = None,
        super_admin: bool = False,
    ) -> User:
        """Create an active admin account on behalf of a super admin.

        Raises:
            Forbidden: If the actor is not a super admin.
            ValidationError: If a required field is missing.
            DuplicateUsername: If the username already exists.
        """
        actor = (
            self.db.query(AdminModel).filter(AdminModel.user_id == actor_id).first()
        )
        if actor is None or not actor.super_admin:
            raise Forbidden("Only super admins can create admin accounts")

        profile = build_profile(
            Role.ADMIN.value, {"name": name, "email": email, "super_admin": super_admin}
        )
        return self._create_account(username, password, profile, is_active=True)

    def bootstrap_admin(self, username: str, password: str, name: str) -> Optional[User]:
        """Create the first super admin unless the username is taken.

        Returns:
            The created User, or None if the username already exists.
        """
        if self.get_user_by_username(username.strip()) is not None:
            return None
        profile = build_profile(Role.ADMIN.value, {"name": name, "super_admin": True})
        return self._create_account(username, password, profile, is_active=True)

    def _create_account(
        self, username: str, password: str, profile: Profile, is_active: bool
    ) -> User:
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username is required")
        if not password:
            raise ValidationError("Password is required")

        # Fast path; the unique index on users.username is the real guard
        if self.get_user_by_username(username) is not None:
            raise DuplicateUsername(f"Username '{username}' already exists")

        if profile.role == Role.STUDENT.value:
            parent = (
                self.db.query(ParentModel)
                .filter(ParentModel.user_id == profile.parent_id)
                .first()
            )
            if parent is None:
                raise ValidationError(f"Parent '{profile.parent_id}' not found")

        user = User(
            username=username,
            password_hash=hash_password(password),
            role=profile.role,
            is_active=is_active,
        )
        with self.atomic(username):
            self.db.add(user_to_model(user))
            self.db.flush()
            self.db.add(profile_to_model(user.user_id, profile))
            self.db.flush()

        logger.info(
            "Created %s account: %s (active=%s)", user.role.value, username, is_active
        )
        return user

    # --- Credentials ---

    def authenticate(self, username: str, password: str) -> User:
        """Verify a username/password pair.

        Unknown usernames and wrong passwords fail identically.

        Raises:
            InvalidCredentials: If the username is unknown or the password wrong.
            PendingApproval: If the account has not been approved yet.
        """
        user = self.get_user_by_username((username or "").strip())
        if user is None:
            burn_password_check(password)
            raise InvalidCredentials()
        if not user.is_active:
            raise PendingApproval()
        if not verify_password(password, user.password_hash):
            raise InvalidCredentials()
        return user

    def change_password(
        self, user_id: str, current_password: str, new_password: str
    ) -> None:
        """Replace an account's password after checking the current one.

        Raises:
            NotFound: If the account does not exist.
            InvalidCredentials: If current_password does not match.
        """
        model = self._get_model(user_id)
        if model is None:
            raise NotFound(user_id)
        if not verify_password(current_password, model.password_hash):
            raise InvalidCredentials("Current password is incorrect")
        if not new_password:
            raise ValidationError("Password is required")
        with self.atomic():
            model.password_hash = hash_password(new_password)
        logger.info("Password changed for user: %s", model.username)

    # --- Updates ---

    def set_active(self, user_id: str, is_active: bool) -> User:
        """Set an account's active flag.

        Raises:
            NotFound: If the account does not exist.
        """
        model = self._get_model(user_id)
        if model is None:
            raise NotFound(user_id)
        if model.is_active != is_active:
            with self.atomic():
                model.is_active = is_active
            logger.info("Set active=%s for user: %s", is_active, model.username)
        return model_to_user(model)

    def update_profile(self, user_id: str, fields: Dict[str, Any]) -> Profile:
        """Apply a partial update to an account's profile.

        The merged profile is validated against the role's shape before
        anything is written.

        Raises:
            NotFound: If the account or its profile does not exist.
            ValidationError: If the update touches immutable fields or the
                merged profile is invalid.
        """
        user = self.get_user(user_id)
        model = self._get_profile_model(user_id, user.role.value)
        if model is None:
            raise NotFound(user_id, "Profile not found")

        for field in IMMUTABLE_PROFILE_FIELDS:
            if field in fields:
                raise ValidationError(f"'{field}' cannot be changed")
        if "super_admin" in fields:
            raise ValidationError("'super_admin' cannot be changed")

        current = model_to_profile(user.role.value, model)
        merged = {**current.model_dump(exclude={"role"}), **fields}
        profile = build_profile(user.role.value, merged)

        if profile.role == Role.STUDENT.value and profile.parent_id != current.parent_id:
            parent = (
                self.db.query(ParentModel)
                .filter(ParentModel.user_id == profile.parent_id)
                .first()
            )
            if parent is None:
                raise ValidationError(f"Parent '{profile.parent_id}' not found")

        with self.atomic():
            for key, value in profile.model_dump(exclude={"role"}).items():
                setattr(model, key, value)
        logger.info("Updated profile for user: %s", user.username)
        return profile

    # --- Deletion ---

    def delete_user(self, user_id: str) -> None:
        """Delete an account and its profile as one unit.

        Raises:
            NotFound: If the account does not exist or has no profile of its
                declared role.
            ValidationError: If the account is a parent still linked to students.
            InternalError: If the transaction fails; nothing is deleted.
        """
        model = self._get_model(user_id)
        if model is None:
            raise NotFound(user_id)
        profile = self._get_profile_model(user_id, model.role)
        if profile is None:
            raise NotFound(user_id, "Profile not found for user")

        if model.role == Role.PARENT.value:
            children = (
                self.db.query(StudentModel)
                .filter(StudentModel.parent_id == user_id)
                .count()
            )
            if children:
                raise ValidationError(
                    f"Parent is still linked to {children} student(s)"
                )

        username, role = model.username, model.role
        with self.atomic():
            self.db.delete(profile)
            self.db.flush()
            self.db.delete(model)
            self.db.flush()
        logger.info("Deleted %s account: %s", role, username)

    # --- Helpers ---

    def _get_model(self, user_id: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.user_id == user_id).first()

    def _get_profile_model(self, user_id: str, role: str):
        model_cls = PROFILE_MODELS.get(role)
        if model_cls is None:
            return None
        return self.db.query(model_cls).filter(model_cls.user_id == user_id).first()
