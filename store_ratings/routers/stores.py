from fastapi import APIRouter, Depends, HTTPException, Request
from typing import List, Optional
import logging

from store_ratings.models.rating import RatingSubmit
from store_ratings.models.store import StoreDetail, StoreWithRating
from store_ratings.db.session import get_db
from store_ratings.services.guard import require_session
from store_ratings.services.log import log_activity
from store_ratings.services.session import AuthContext, get_auth_context
from store_ratings.services.store import (
    get_all_stores,
    get_ratings_by_store,
    get_store_by_id,
    get_store_ratings,
    get_user_rating_for_store,
    upsert_rating,
)
from store_ratings.utils.helpers import calculate_average_rating, filter_by_search_term, format_date, truncate_text

logger = logging.getLogger(__name__)

router = APIRouter()


def _rating_label(rating):
    if rating is None:
        return None
    if rating.updated_at:
        return f"Updated on {format_date(rating.updated_at)}"
    return f"Rated on {format_date(rating.created_at)}"


@router.get("/stores", response_model=List[StoreWithRating])
async def list_stores(
    search: Optional[str] = None,
    context: AuthContext = Depends(get_auth_context),
    db=Depends(get_db)
):
    try:
        stores = await get_all_stores(db)
        ratings = await get_ratings_by_store(db)
    except Exception as e:
        logger.error(f"Error fetching stores: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load stores. Please try again later.")

    if search:
        stores = filter_by_search_term(stores, search, ["name", "address"])

    result = []
    for store in stores:
        values = ratings.get(store.id, [])
        item = StoreWithRating(
            **store.model_dump(),
            average_rating=calculate_average_rating(values),
            rating_count=len(values),
            address_preview=truncate_text(store.address, 100),
        )
        if context.is_authenticated:
            mine = await get_user_rating_for_store(db, context.identity.uid, store.id)
            item.my_rating = mine.value if mine else None
        result.append(item)
    return result

@router.get("/stores/{store_id}", response_model=StoreDetail)
async def get_store(
    store_id: str,
    context: AuthContext = Depends(get_auth_context),
    db=Depends(get_db)
):
    try:
        store = await get_store_by_id(db, store_id)
        if not store:
            raise HTTPException(status_code=404, detail="Store not found")

        ratings = await get_store_ratings(db, store_id)
        mine = None
        if context.is_authenticated:
            mine = await get_user_rating_for_store(db, context.identity.uid, store_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching store data: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load store data. Please try again later.")

    return StoreDetail(
        store=store,
        ratings=ratings,
        average_rating=calculate_average_rating([r.value for r in ratings]),
        user_rating=mine.value if mine else None,
        user_rating_label=_rating_label(mine),
        can_rate=context.profile is not None and not (context.is_admin or context.is_store_owner),
    )

@router.post("/stores/{store_id}/rating", response_model=StoreDetail)
async def submit_rating(
    request: Request,
    store_id: str,
    rating_data: RatingSubmit,
    context: AuthContext = Depends(require_session()),
    db=Depends(get_db)
):
    if context.profile is None:
        raise HTTPException(status_code=401, detail="You must be logged in to submit a rating")

    # Admins and store owners may not rate stores
    if context.is_admin or context.is_store_owner:
        raise HTTPException(status_code=403, detail="Admins and store owners cannot rate stores")

    store = await get_store_by_id(db, store_id)
    if not store:
        raise HTTPException(status_code=404, detail="Store not found")

    previous = await get_user_rating_for_store(db, context.identity.uid, store_id)
    try:
        await upsert_rating(db, context.identity.uid, store_id, rating_data.value)
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to submit rating. Please try again.")

    await log_activity(
        db,
        user_id=context.profile.id,
        user_name=context.profile.name,
        action="rating_updated" if previous else "rating_submitted",
        details=f"Rated store '{store.name}' {rating_data.value} stars",
        target_id=store_id,
        target_type="store",
        request=request
    )

    # Refresh the ratings after the write
    ratings = await get_store_ratings(db, store_id)
    mine = await get_user_rating_for_store(db, context.identity.uid, store_id)
    return StoreDetail(
        store=store,
        ratings=ratings,
        average_rating=calculate_average_rating([r.value for r in ratings]),
        user_rating=rating_data.value,
        user_rating_label=_rating_label(mine),
        can_rate=True,
    )
