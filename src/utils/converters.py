"""Conversions between pydantic schemas and SQLAlchemy models."""

from models import PROFILE_MODELS, UserModel
from schemas.profile import Profile, build_profile
from schemas.user import User


def user_to_model(user: User) -> UserModel:
    return UserModel(
        user_id=user.user_id,
        username=user.username,
        password_hash=user.password_hash,
        role=user.role.value,
        is_active=user.is_active,
        create_at=user.create_at,
    )


def model_to_user(model: UserModel) -> User:
    return User(
        user_id=model.user_id,
        username=model.username,
        password_hash=model.password_hash,
        role=model.role,
        is_active=bool(model.is_active),
        create_at=model.create_at,
    )


def profile_to_model(user_id: str, profile: Profile):
    """Build the profile table row for ``profile`` under ``user_id``."""
    model_cls = PROFILE_MODELS[profile.role]
    return model_cls(user_id=user_id, **profile.model_dump(exclude={"role"}))


def model_to_profile(role: str, model) -> Profile:
    """Read a profile table row back into its typed shape."""
    fields = {
        column.name: getattr(model, column.name)
        for column in model.__table__.columns
        if column.name != "user_id"
    }
    return build_profile(role, fields)
