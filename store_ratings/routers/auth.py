from fastapi import APIRouter, Depends, Request

from store_ratings.models.user import SessionInfo, Token, UserCreate, UserLogin
from store_ratings.db.session import get_db
from store_ratings.services.auth import IdentityProvider, get_identity_provider, sign_up_user
from store_ratings.services.guard import require_guest
from store_ratings.services.log import log_activity
from store_ratings.services.session import AuthContext, get_auth_context

router = APIRouter()

@router.post("/auth/register", response_model=Token, status_code=201)
async def register(
    request: Request,
    user_data: UserCreate,
    context: AuthContext = Depends(require_guest),
    provider: IdentityProvider = Depends(get_identity_provider),
    db=Depends(get_db)
):
    user = await sign_up_user(
        db, provider,
        email=user_data.email,
        password=user_data.password,
        name=user_data.name,
        address=user_data.address,
    )

    await log_activity(
        db,
        user_id=user.id,
        user_name=user.name,
        action="registered",
        details="Created an account",
        target_type="user",
        request=request
    )
    return Token(access_token=provider.current_token, user=user)


@router.post("/auth/login", response_model=Token)
async def login(
    request: Request,
    user_data: UserLogin,
    context: AuthContext = Depends(require_guest),
    provider: IdentityProvider = Depends(get_identity_provider),
    db=Depends(get_db)
):
    access_token = await provider.sign_in(user_data.email, user_data.password)

    # The sign-in event has already refreshed the session context
    profile = context.profile
    if profile:
        await log_activity(
            db,
            user_id=profile.id,
            user_name=profile.name,
            action="signed_in",
            details="Signed in",
            target_type="user",
            request=request
        )
    return {"access_token": access_token, "token_type": "bearer", "user": profile}


@router.post("/auth/logout")
async def logout(
    context: AuthContext = Depends(get_auth_context),
    provider: IdentityProvider = Depends(get_identity_provider)
):
    await provider.sign_out()
    return {"message": "Signed out successfully"}


@router.get("/auth/me", response_model=SessionInfo)
async def get_me(context: AuthContext = Depends(get_auth_context)):
    return context.snapshot()
