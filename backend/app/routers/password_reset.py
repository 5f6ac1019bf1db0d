from fastapi import APIRouter, Depends

from app.models.user import AdminPasswordResetRequest, CompletePasswordReset
from app.services import password_reset_service
from app.services.auth_service import get_current_user

router = APIRouter(prefix="/api", tags=["password-reset"])


@router.post("/admin/users/{user_id}/generate-reset-link")
async def generate_reset_link(
    user_id: str, body: AdminPasswordResetRequest, user=Depends(get_current_user),
):
    """League admin creates a reset link for another member of that league."""
    return await password_reset_service.generate_reset_link(str(user["_id"]), user_id, body.league_id)


@router.post("/admin/users/{user_id}/reset-password")
async def reset_with_temporary_password(
    user_id: str, body: AdminPasswordResetRequest, user=Depends(get_current_user),
):
    """League admin sets a temporary password for another member of that league."""
    return await password_reset_service.reset_with_temporary_password(str(user["_id"]), user_id, body.league_id)


@router.get("/reset-password/{token}")
async def validate_reset_token(token: str):
    return await password_reset_service.validate_token(token)


@router.post("/reset-password/{token}")
async def complete_reset(token: str, body: CompletePasswordReset):
    await password_reset_service.complete_reset(token, body.new_password)
    return {"message": "Password has been reset. You can now log in."}
