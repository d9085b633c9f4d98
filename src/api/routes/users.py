"""Account administration routes."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, status

from api.routes.auth import require_admin
from core.dependencies import UserManagerDep
from schemas.profile import Profile
from schemas.user import (
    ChildInfo,
    RegisterRequest,
    Role,
    SetActiveRequest,
    TokenClaims,
    UserInfo,
    UserListResponse,
    UserWithProfile,
)

router = APIRouter(prefix="/api/admin/users", tags=["Users"])


@router.get("", response_model=UserListResponse, summary="List accounts")
def list_users(
    user_manager: UserManagerDep,
    role: Optional[Role] = None,
    is_active: Optional[bool] = None,
    claims: TokenClaims = Depends(require_admin),
) -> UserListResponse:
    users = user_manager.list_users(
        role=role.value if role else None, is_active=is_active
    )
    return UserListResponse(
        users=[
            UserInfo(
                user_id=u.user_id,
                username=u.username,
                role=u.role,
                is_active=u.is_active,
                create_at=u.create_at,
            )
            for u in users
        ]
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
def create_account(
    req: RegisterRequest,
    user_manager: UserManagerDep,
    claims: TokenClaims = Depends(require_admin),
) -> dict:
    """Create an account and its profile; it is active right away."""
    user = user_manager.create_account(
        username=req.username,
        role=req.role.value,
        profile_fields=req.profile_fields(),
        password=req.password,
    )
    return {
        "success": True,
        "message": "User created successfully",
        "user_id": user.user_id,
        "is_active": user.is_active,
    }


@router.get("/{user_id}", response_model=UserWithProfile, summary="Get an account")
def get_user(
    user_id: str,
    user_manager: UserManagerDep,
    claims: TokenClaims = Depends(require_admin),
) -> UserWithProfile:
    return user_manager.get_user_with_profile(user_id)


@router.get(
    "/{user_id}/children",
    response_model=List[ChildInfo],
    summary="List a parent's students",
)
def list_children(
    user_id: str,
    user_manager: UserManagerDep,
    claims: TokenClaims = Depends(require_admin),
) -> List[ChildInfo]:
    return user_manager.list_children(user_id)


@router.patch("/{user_id}/activate", summary="Set an account's active flag")
def set_active(
    user_id: str,
    req: SetActiveRequest,
    user_manager: UserManagerDep,
    claims: TokenClaims = Depends(require_admin),
) -> dict:
    """Activate or deactivate an account.

    Deactivation blocks future logins only; tokens issued earlier stay
    valid until they expire.
    """
    user = user_manager.set_active(user_id, req.is_active)
    return {"success": True, "user_id": user.user_id, "is_active": user.is_active}


@router.patch("/{user_id}/profile", response_model=Profile, summary="Edit a profile")
def update_profile(
    user_id: str,
    user_manager: UserManagerDep,
    fields: Dict[str, Any] = Body(...),
    claims: TokenClaims = Depends(require_admin),
) -> Profile:
    """Apply a partial update to an account's profile.

    The account's user_id and role cannot be changed.
    """
    return user_manager.update_profile(user_id, fields)


@router.delete("/{user_id}", summary="Delete an account")
def delete_user(
    user_id: str,
    user_manager: UserManagerDep,
    claims: TokenClaims = Depends(require_admin),
) -> dict:
    """Delete an account together with its profile."""
    user_manager.delete_user(user_id)
    return {"success": True, "message": "User deleted successfully"}
