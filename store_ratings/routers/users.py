from fastapi import APIRouter, Depends, HTTPException, Request

from store_ratings.models.user import PasswordUpdateRequest, ROLE_LABELS
from store_ratings.db.session import get_db
from store_ratings.services.auth import IdentityProvider, get_identity_provider, update_user_password
from store_ratings.services.guard import require_session
from store_ratings.services.log import log_activity
from store_ratings.services.session import AuthContext

router = APIRouter()

@router.get("/profile")
async def get_profile(context: AuthContext = Depends(require_session())):
    profile = context.profile
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")

    return {
        "profile": profile,
        "role_label": ROLE_LABELS.get(profile.role, profile.role),
    }

@router.put("/update-password")
async def update_password(
    request: Request,
    password_data: PasswordUpdateRequest,
    context: AuthContext = Depends(require_session()),
    provider: IdentityProvider = Depends(get_identity_provider),
    db=Depends(get_db)
):
    await update_user_password(provider, password_data.new_password, password_data.current_password)

    await log_activity(
        db,
        user_id=context.identity.uid,
        user_name=context.profile.name if context.profile else context.identity.email,
        action="password_changed",
        details="User changed their password",
        target_type="profile",
        request=request
    )

    return {"message": "Password updated successfully"}
