"""Profile schema definitions.

Every account owns exactly one profile whose shape depends on the account's
role. The shapes form a tagged union discriminated by ``role``.
"""

from datetime import date
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

import pydantic
from pydantic import BaseModel, Field, TypeAdapter

from core.exceptions import ValidationError

Sex = Literal["MALE", "FEMALE"]


class AdminProfile(BaseModel):
    role: Literal["admin"] = "admin"
    name: str = Field(min_length=1)
    email: Optional[str] = None
    super_admin: bool = Field(
        default=False,
        description="Whether this admin can create other admins.",
    )


class TeacherProfile(BaseModel):
    role: Literal["teacher"] = "teacher"
    name: str = Field(min_length=1)
    surname: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: str = Field(min_length=1)
    sex: Sex
    birthday: date
    subjects: List[int] = Field(default_factory=list)


class StudentProfile(BaseModel):
    role: Literal["student"] = "student"
    name: str = Field(min_length=1)
    surname: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: str = Field(min_length=1)
    sex: Sex
    birthday: date
    parent_id: str = Field(min_length=1, description="user_id of the parent.")
    class_id: int
    grade_id: int


class ParentProfile(BaseModel):
    role: Literal["parent"] = "parent"
    name: str = Field(min_length=1)
    surname: str = Field(min_length=1)
    email: Optional[str] = None
    phone: str = Field(min_length=1)
    address: str = Field(min_length=1)


Profile = Annotated[
    Union[AdminProfile, TeacherProfile, StudentProfile, ParentProfile],
    Field(discriminator="role"),
]

_profile_adapter = TypeAdapter(Profile)


def _describe(exc: pydantic.ValidationError) -> str:
    parts = []
    for error in exc.errors():
        # Drop the union tag from the location, e.g. ('teacher', 'birthday')
        loc = [str(p) for p in error["loc"][1:]] or [str(p) for p in error["loc"]]
        if loc:
            parts.append(f"{'.'.join(loc)}: {error['msg']}")
        else:
            parts.append(error["msg"])
    return "; ".join(parts)


def build_profile(role: str, fields: Dict[str, Any]) -> Profile:
    """Validate raw profile fields against the shape for ``role``.

    Args:
        role: Account role selecting the profile shape.
        fields: Raw profile fields (extra keys are ignored).

    Returns:
        The typed profile.

    Raises:
        ValidationError: If the role is unknown or a required field is
            missing or malformed.
    """
    data = {k: v for k, v in fields.items() if v is not None}
    data["role"] = role
    try:
        return _profile_adapter.validate_python(data)
    except pydantic.ValidationError as e:
        raise ValidationError(_describe(e)) from e

