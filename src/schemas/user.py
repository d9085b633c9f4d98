"""User schema definitions.

This module defines the account model, token claims and the request/response
bodies of the authentication and administration endpoints.
"""

import uuid
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import pytz
from pydantic import BaseModel, Field

from schemas.profile import Profile


class Role(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"


# Roles whose accounts are usable right after registration
AUTO_ACTIVATED_ROLES = frozenset({Role.STUDENT.value, Role.PARENT.value})


class User(BaseModel):
    user_id: str = Field(
        description="The unique identifier shared by the account and its profile.",
        default_factory=lambda: uuid.uuid4().hex,
        frozen=True,
    )
    username: str
    password_hash: str
    role: Role = Field(frozen=True)
    is_active: bool = False
    create_at: str = Field(
        description="The time when the account was created.",
        default_factory=lambda: datetime.now(pytz.utc).isoformat(),
    )

    def summary(self) -> "UserSummary":
        return UserSummary(user_id=self.user_id, username=self.username, role=self.role)


class UserSummary(BaseModel):
    """Account fields that are safe to return to clients."""

    user_id: str
    username: str
    role: Role


class UserInfo(UserSummary):
    is_active: bool
    create_at: str


class UserWithProfile(UserInfo):
    profile: Optional[Profile] = None


class TokenClaims(BaseModel):
    """Claims carried by an access token."""

    user_id: str
    username: str
    role: Role
    exp: int


# --- Requests ---


class RegisterRequest(BaseModel):
    """Registration body: credentials, role and the role's profile fields."""

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    role: Role
    name: Optional[str] = None
    surname: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    sex: Optional[str] = None
    birthday: Optional[date] = None
    subjects: Optional[List[int]] = None
    parent_id: Optional[str] = None
    class_id: Optional[int] = None
    grade_id: Optional[int] = None

    def profile_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"username", "password", "role"}, exclude_none=True)


class LoginRequest(BaseModel):
    username: str
    password: str


class CreateAdminRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    name: str = Field(min_length=1)
    email: Optional[str] = None
    super_admin: bool = False


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=1)


class SetActiveRequest(BaseModel):
    is_active: bool


# --- Responses ---


class LoginResponse(BaseModel):
    token: str
    user: UserSummary


class PendingUser(BaseModel):
    """A pending account enriched with its profile's display fields."""

    user_id: str
    username: str
    role: Role
    create_at: str
    name: Optional[str] = None
    surname: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class ChildInfo(BaseModel):
    """A student linked to a parent."""

    user_id: str
    username: str
    name: str
    surname: str
    class_id: int
    grade_id: int
    is_active: bool


class UserListResponse(BaseModel):
    users: List[UserInfo]
