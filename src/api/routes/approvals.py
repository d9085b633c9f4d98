"""Approval routes.

Administrators review pending teacher and admin registrations here.
"""

from typing import List

from fastapi import APIRouter, Depends

from api.routes.auth import require_admin
from core.dependencies import ApprovalManagerDep
from schemas.user import PendingUser, TokenClaims

router = APIRouter(prefix="/api/admin/approvals", tags=["Approvals"])


@router.get("", response_model=List[PendingUser], summary="List pending accounts")
def list_pending(
    approval_manager: ApprovalManagerDep,
    claims: TokenClaims = Depends(require_admin),
) -> List[PendingUser]:
    """List accounts awaiting approval, newest first.

    Each entry carries the display fields of the account's profile.
    """
    return approval_manager.list_pending()


@router.patch("/{user_id}/approve", summary="Approve a pending account")
def approve(
    user_id: str,
    approval_manager: ApprovalManagerDep,
    claims: TokenClaims = Depends(require_admin),
) -> dict:
    approval_manager.approve(user_id)
    return {"success": True, "message": "User approved successfully"}


@router.delete("/{user_id}/reject", summary="Reject a pending account")
def reject(
    user_id: str,
    approval_manager: ApprovalManagerDep,
    claims: TokenClaims = Depends(require_admin),
) -> dict:
    """Reject an account, deleting it together with its profile."""
    approval_manager.reject(user_id)
    return {"success": True, "message": "User rejected and removed successfully"}
