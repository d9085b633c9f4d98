"""Authentication routes.

This module handles HTTP endpoints for registration, login and the signed-in
user's own account, and provides the token gate used by every role-scoped
route.
"""

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Cookie, Depends, Response, status

import config
from core.dependencies import UserManagerDep
from core.exceptions import Forbidden, Unauthorized
from core.security import create_access_token, decode_access_token
from schemas.user import (
    ChangePasswordRequest,
    CreateAdminRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    Role,
    TokenClaims,
    UserWithProfile,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def get_token_claims(
    token: Optional[str] = Cookie(default=None, alias=config.TOKEN_COOKIE_NAME),
) -> TokenClaims:
    """Read and check the access token carried in the cookie.

    No database lookup happens here; a token stays valid until its expiry
    even if the account is deactivated or deleted in the meantime.

    Args:
        token: Encoded JWT from the token cookie.

    Returns:
        Decoded token claims.

    Raises:
        Unauthorized: If the cookie is missing or the token unreadable.
        TokenExpired: If the token's expiry lies in the past.
    """
    if not token:
        raise Unauthorized()
    return decode_access_token(token)


def require_role(*roles: Role) -> Callable:
    """Build a dependency admitting only tokens whose role is in ``roles``."""

    def dependency(claims: TokenClaims = Depends(get_token_claims)) -> TokenClaims:
        if claims.role not in roles:
            raise Forbidden()
        return claims

    return dependency


require_admin = require_role(Role.ADMIN)
require_any_role = require_role(*Role)


@router.post("/register", summary="Register a new account")
def register(
    req: RegisterRequest,
    user_manager: UserManagerDep,
) -> dict:
    """Register an account and its role-specific profile.

    Students and parents can log in right away; teachers and admins wait
    for an administrator's approval.

    Args:
        req: Registration request with credentials, role and profile fields.
        user_manager: Injected UserManager instance.

    Returns:
        Dictionary with success message, user_id and activation state.
    """
    user = user_manager.register(
        username=req.username,
        role=req.role.value,
        profile_fields=req.profile_fields(),
        password=req.password,
    )
    message = (
        "Registration successful"
        if user.is_active
        else "Registration successful, awaiting admin approval"
    )
    return {
        "success": True,
        "message": message,
        "user_id": user.user_id,
        "is_active": user.is_active,
    }


@router.post("/login", summary="Log in")
def login(
    req: LoginRequest,
    response: Response,
    user_manager: UserManagerDep,
) -> LoginResponse:
    """Login with username and password.

    The token is returned in the body and set as an HTTP-only cookie.

    Args:
        req: Login request with username and password.
        response: Outgoing response, used to set the token cookie.
        user_manager: Injected UserManager instance.

    Returns:
        LoginResponse with the token and a user summary.
    """
    user = user_manager.authenticate(req.username, req.password)
    token = create_access_token(user)
    response.set_cookie(
        key=config.TOKEN_COOKIE_NAME,
        value=token,
        max_age=config.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=config.COOKIE_SECURE,
    )
    logger.info("User logged in: %s", user.username)
    return LoginResponse(token=token, user=user.summary())


@router.post("/logout", summary="Log out")
def logout(response: Response) -> dict:
    """Clear the token cookie.

    Tokens are stateless, so an already issued token stays valid until it
    expires.
    """
    response.delete_cookie(config.TOKEN_COOKIE_NAME)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/me", response_model=UserWithProfile, summary="Current account")
def get_current_user_info(
    user_manager: UserManagerDep,
    claims: TokenClaims = Depends(require_any_role),
) -> UserWithProfile:
    """Get the signed-in account together with its profile."""
    return user_manager.get_user_with_profile(claims.user_id)


@router.patch("/password", summary="Change own password")
def change_password(
    req: ChangePasswordRequest,
    user_manager: UserManagerDep,
    claims: TokenClaims = Depends(require_any_role),
) -> dict:
    user_manager.change_password(
        claims.user_id, req.current_password, req.new_password
    )
    return {"success": True, "message": "Password changed successfully"}


@router.post(
    "/admin/create",
    status_code=status.HTTP_201_CREATED,
    summary="Create an admin account",
)
def create_admin(
    req: CreateAdminRequest,
    user_manager: UserManagerDep,
    claims: TokenClaims = Depends(require_admin),
) -> dict:
    """Create an active admin account.

    Only admins whose profile carries the super admin flag may do this.

    Args:
        req: Credentials and admin profile fields.
        user_manager: Injected UserManager instance.
        claims: Claims of the calling admin.

    Returns:
        Dictionary with success message and the new user_id.
    """
    user = user_manager.create_admin(
        actor_id=claims.user_id,
        username=req.username,
        password=req.password,
        name=req.name,
        email=req.email,
        super_admin=req.super_admin,
    )
    return {
        "success": True,
        "message": "Admin user created successfully",
        "user_id": user.user_id,
    }
