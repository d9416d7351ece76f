from fastapi import APIRouter, Depends, HTTPException, Query, Request
from typing import List, Optional
import logging

from store_ratings.core.errors import AuthError
from store_ratings.models.log import ActivityLog
from store_ratings.models.store import Store, StoreCreate, StoreUpdate, StoreWithRating
from store_ratings.models.user import AdminUserCreate, AdminUserUpdate, User, ROLE_ADMIN, ROLE_STORE_OWNER, ROLE_USER
from store_ratings.db.session import get_db
from store_ratings.services.auth import (
    IdentityProvider,
    create_admin_user,
    get_current_user_data,
    get_identity_provider,
    update_user_data,
)
from store_ratings.services.guard import require_session
from store_ratings.services.log import get_recent_activity, log_activity
from store_ratings.services.session import AuthContext
from store_ratings.services.store import (
    add_store,
    get_all_stores,
    get_all_users,
    get_dashboard_counts,
    get_ratings_by_store,
    get_store_by_id,
    get_store_by_owner,
    update_store,
)
from store_ratings.utils.helpers import calculate_average_rating, filter_by_search_term, sort_by_key

logger = logging.getLogger(__name__)

router = APIRouter()

require_admin = require_session(ROLE_ADMIN)

USER_SORT_FIELDS = {"name", "email", "address", "role", "created_at"}
STORE_SORT_FIELDS = {"name", "email", "address", "average_rating", "rating_count", "created_at"}


def _check_sort(sort_by: str, order: str, allowed: set):
    if sort_by not in allowed:
        raise HTTPException(status_code=400, detail=f"sort_by must be one of: {', '.join(sorted(allowed))}")
    if order not in ("asc", "desc"):
        raise HTTPException(status_code=400, detail="order must be 'asc' or 'desc'")


@router.get("/admin/dashboard")
async def admin_dashboard(
    admin: AuthContext = Depends(require_admin),
    db=Depends(get_db)
):
    try:
        counts = await get_dashboard_counts(db)
        recent_activity = await get_recent_activity(db, limit=10)
    except Exception as e:
        logger.error(f"Error fetching dashboard data: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load dashboard data. Please try again later.")

    ratings_per_store = 0
    if counts["total_ratings"] and counts["total_stores"]:
        ratings_per_store = round(counts["total_ratings"] / counts["total_stores"], 1)

    return {
        **counts,
        "ratings_per_store": ratings_per_store,
        "recent_activity": recent_activity,
    }


@router.get("/admin/users")
async def admin_list_users(
    search: Optional[str] = None,
    role: Optional[str] = None,
    sort_by: str = Query("name"),
    order: str = Query("asc"),
    admin: AuthContext = Depends(require_admin),
    db=Depends(get_db)
):
    _check_sort(sort_by, order, USER_SORT_FIELDS)
    try:
        users = await get_all_users(db)
    except Exception as e:
        logger.error(f"Error fetching users: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load users. Please try again later.")

    role_counts = {r: len([u for u in users if u.role == r]) for r in (ROLE_ADMIN, ROLE_STORE_OWNER, ROLE_USER)}

    result = users
    if role and role != "all":
        result = [u for u in result if u.role == role]
    if search:
        result = filter_by_search_term(result, search, ["name", "email", "address"])
    result = sort_by_key(result, sort_by, order)

    return {"users": result, "total": len(users), "role_counts": role_counts}


@router.post("/admin/users", response_model=User, status_code=201)
async def admin_create_user(
    request: Request,
    payload: AdminUserCreate,
    admin: AuthContext = Depends(require_admin),
    provider: IdentityProvider = Depends(get_identity_provider),
    db=Depends(get_db)
):
    admin_profile = admin.profile
    try:
        user = await create_admin_user(
            db, provider,
            email=payload.email,
            password=payload.password,
            name=payload.name,
            address=payload.address,
            role=payload.role,
        )

        # Not atomic with the account: a failure here leaves an owner without a store
        if payload.role == ROLE_STORE_OWNER and payload.store_name:
            store = await add_store(db, name=payload.store_name, email=user.email,
                                    address=payload.address, owner_id=user.id)
            await log_activity(
                db,
                user_id=admin_profile.id,
                user_name=admin_profile.name,
                action="store_created",
                details=f"Created store '{store.name}' for {user.email}",
                target_id=store.id,
                target_type="store",
                request=request
            )
    except AuthError:
        raise
    except Exception as e:
        logger.error(f"Error saving user: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to save user. Please try again.")

    await log_activity(
        db,
        user_id=admin_profile.id,
        user_name=admin_profile.name,
        action="user_created",
        details=f"Created {user.role} account {user.email}",
        target_id=user.id,
        target_type="user",
        request=request
    )
    return user


@router.get("/admin/users/{user_id}")
async def admin_get_user(
    user_id: str,
    admin: AuthContext = Depends(require_admin),
    db=Depends(get_db)
):
    user = await get_current_user_data(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    store = await get_store_by_owner(db, user_id) if user.role == ROLE_STORE_OWNER else None
    return {"user": user, "store": store}


@router.put("/admin/users/{user_id}", response_model=User)
async def admin_update_user(
    request: Request,
    user_id: str,
    payload: AdminUserUpdate,
    admin: AuthContext = Depends(require_admin),
    db=Depends(get_db)
):
    user = await get_current_user_data(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    try:
        await update_user_data(db, user_id, {
            "name": payload.name,
            "address": payload.address,
            "role": payload.role,
        })

        # Changing to store owner with a store name also creates the store
        if payload.role == ROLE_STORE_OWNER and payload.store_name:
            await add_store(db, name=payload.store_name, email=user.email,
                            address=payload.address, owner_id=user_id)
    except Exception as e:
        logger.error(f"Error saving user: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to save user. Please try again.")

    await log_activity(
        db,
        user_id=admin.profile.id,
        user_name=admin.profile.name,
        action="user_updated",
        details=f"Updated account {user.email}",
        target_id=user_id,
        target_type="user",
        request=request
    )

    if user_id == admin.identity.uid:
        await admin.refresh_user_data()
    return await get_current_user_data(db, user_id)


@router.get("/admin/stores", response_model=List[StoreWithRating])
async def admin_list_stores(
    search: Optional[str] = None,
    rating: Optional[int] = Query(None, ge=0, le=5),
    sort_by: str = Query("name"),
    order: str = Query("asc"),
    admin: AuthContext = Depends(require_admin),
    db=Depends(get_db)
):
    _check_sort(sort_by, order, STORE_SORT_FIELDS)
    try:
        stores = await get_all_stores(db)
        ratings = await get_ratings_by_store(db)
    except Exception as e:
        logger.error(f"Error fetching stores: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load stores. Please try again later.")

    result = [
        StoreWithRating(
            **store.model_dump(),
            average_rating=calculate_average_rating(ratings.get(store.id, [])),
            rating_count=len(ratings.get(store.id, [])),
        )
        for store in stores
    ]

    # Rating filter selects the [rating, rating + 1) average bucket
    if rating is not None:
        result = [s for s in result if rating <= s.average_rating < rating + 1]
    if search:
        result = filter_by_search_term(result, search, ["name", "email", "address"])
    return sort_by_key(result, sort_by, order)


@router.post("/admin/stores", response_model=Store, status_code=201)
async def admin_create_store(
    request: Request,
    payload: StoreCreate,
    admin: AuthContext = Depends(require_admin),
    db=Depends(get_db)
):
    owner = await get_current_user_data(db, payload.owner_id)
    if not owner or owner.role != ROLE_STORE_OWNER:
        raise HTTPException(status_code=400, detail="owner_id must be a valid Store Owner")

    store = await add_store(db, name=payload.name, email=payload.email,
                            address=payload.address, owner_id=payload.owner_id)

    await log_activity(
        db,
        user_id=admin.profile.id,
        user_name=admin.profile.name,
        action="store_created",
        details=f"Created store '{store.name}' for {owner.email}",
        target_id=store.id,
        target_type="store",
        request=request
    )
    return store


@router.put("/admin/stores/{store_id}", response_model=Store)
async def admin_update_store(
    request: Request,
    store_id: str,
    payload: StoreUpdate,
    admin: AuthContext = Depends(require_admin),
    db=Depends(get_db)
):
    store = await get_store_by_id(db, store_id)
    if not store:
        raise HTTPException(status_code=404, detail="Store not found")

    try:
        await update_store(db, store_id, payload.model_dump())
    except Exception as e:
        logger.error(f"Error saving store: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to save store. Please try again.")

    await log_activity(
        db,
        user_id=admin.profile.id,
        user_name=admin.profile.name,
        action="store_updated",
        details=f"Updated store '{payload.name}'",
        target_id=store_id,
        target_type="store",
        request=request
    )
    return await get_store_by_id(db, store_id)


@router.get("/admin/logs", response_model=List[ActivityLog])
async def get_activity_logs(
    action: Optional[str] = None,
    user_id: Optional[str] = None,
    target_type: Optional[str] = None,
    limit: int = Query(100, le=1000),
    admin: AuthContext = Depends(require_admin),
    db=Depends(get_db)
):
    """Activity logs, newest first, with optional equality filters"""
    query = {}

    if action:
        query["action"] = action
    if user_id:
        query["user_id"] = user_id
    if target_type:
        query["target_type"] = target_type

    return await get_recent_activity(db, query, limit=limit)
