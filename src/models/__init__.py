"""Database models.

Importing this package registers every table with ``Base.metadata``.
"""

from .user import UserModel
from .admin import AdminModel
from .teacher import TeacherModel
from .student import StudentModel
from .parent import ParentModel

# Profile table for each account role
PROFILE_MODELS = {
    "admin": AdminModel,
    "teacher": TeacherModel,
    "student": StudentModel,
    "parent": ParentModel,
}

__all__ = [
    "UserModel",
    "AdminModel",
    "TeacherModel",
    "StudentModel",
    "ParentModel",
    "PROFILE_MODELS",
]
