from fastapi import APIRouter, Depends, HTTPException
import logging

from store_ratings.models.user import ROLE_STORE_OWNER
from store_ratings.db.session import get_db
from store_ratings.services.guard import require_session
from store_ratings.services.session import AuthContext
from store_ratings.services.store import get_store_by_owner, get_store_raters, get_store_ratings
from store_ratings.utils.helpers import calculate_average_rating, rating_distribution

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/store-owner/dashboard")
async def store_owner_dashboard(
    owner: AuthContext = Depends(require_session(ROLE_STORE_OWNER)),
    db=Depends(get_db)
):
    """Aggregated feedback for the signed-in owner's store"""
    try:
        store = await get_store_by_owner(db, owner.identity.uid)
        if not store:
            raise HTTPException(
                status_code=404,
                detail="You don't have a store yet. Please ask an admin to create one."
            )

        ratings = await get_store_ratings(db, store.id)
        raters = await get_store_raters(db, store.id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching store data: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load store data. Please try again later.")

    values = [r.value for r in ratings]
    return {
        "store": store,
        "average_rating": calculate_average_rating(values),
        "total_ratings": len(values),
        "unique_raters": len({r.uid for r in raters}),
        "distribution": rating_distribution(values),
        "raters": raters,
    }
