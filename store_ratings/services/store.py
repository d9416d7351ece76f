"""Typed read/write helpers over the ``stores``, ``ratings`` and ``users`` collections.

Queries use equality filters only; any ordering happens in memory.
"""

from datetime import datetime
from typing import Dict, List, Optional
import logging
import uuid

from store_ratings.models.rating import Rating, RaterSummary
from store_ratings.models.store import Store
from store_ratings.models.user import User
from store_ratings.utils.helpers import format_date, sort_by_key

logger = logging.getLogger(__name__)

async def get_all_stores(db) -> List[Store]:
    try:
        stores = await db.stores.find({}).to_list(1000)
        return [Store(**store) for store in stores]
    except Exception as e:
        logger.error(f"Error getting stores: {str(e)}")
        raise

async def get_store_by_id(db, store_id: str) -> Optional[Store]:
    try:
        store = await db.stores.find_one({"id": store_id})
        return Store(**store) if store else None
    except Exception as e:
        logger.error(f"Error getting store by ID: {str(e)}")
        raise

async def add_store(db, name: str, email: str, address: str, owner_id: str) -> Store:
    try:
        store = Store(name=name, email=email, address=address, owner_id=owner_id)
        await db.stores.insert_one(store.model_dump())
        return store
    except Exception as e:
        logger.error(f"Error adding store: {str(e)}")
        raise

async def update_store(db, store_id: str, data: dict):
    data = {k: v for k, v in data.items() if k not in ("id", "created_at")}
    try:
        await db.stores.update_one({"id": store_id}, {"$set": data})
    except Exception as e:
        logger.error(f"Error updating store: {str(e)}")
        raise

async def get_store_by_owner(db, owner_id: str) -> Optional[Store]:
    """First store whose owner_id matches; one store per owner is assumed."""
    store = await db.stores.find_one({"owner_id": owner_id})
    return Store(**store) if store else None

async def get_all_users(db) -> List[User]:
    try:
        users = await db.users.find({}).to_list(1000)
        return [User(**user) for user in users]
    except Exception as e:
        logger.error(f"Error getting users: {str(e)}")
        raise

async def get_store_ratings(db, store_id: str) -> List[Rating]:
    """Ratings for a store, newest first."""
    try:
        ratings = await db.ratings.find({"store_id": store_id}).to_list(1000)
        return [Rating(**r) for r in sort_by_key(ratings, "created_at", "desc")]
    except Exception as e:
        logger.error(f"Error getting store ratings: {str(e)}")
        raise

async def get_ratings_by_store(db) -> Dict[str, List[int]]:
    """Rating values of every store, keyed by store id."""
    ratings = await db.ratings.find({}).to_list(10000)
    values: Dict[str, List[int]] = {}
    for r in ratings:
        values.setdefault(r["store_id"], []).append(r["value"])
    return values

async def upsert_rating(db, user_id: str, store_id: str, value: int):
    """Insert the user's rating for a store, or update the one already there.

    This is a query followed by a separate write: two concurrent calls for the
    same user and store can both miss and insert two records. ``value`` is
    stored as given.
    """
    try:
        existing = await db.ratings.find({"user_id": user_id, "store_id": store_id}).to_list(1)

        if existing:
            await db.ratings.update_one(
                {"id": existing[0]["id"]},
                {"$set": {"value": value, "updated_at": datetime.utcnow()}}
            )
        else:
            rating_doc = {
                "id": str(uuid.uuid4()),
                "user_id": user_id,
                "store_id": store_id,
                "value": value,
                "created_at": datetime.utcnow(),
                "updated_at": None,
            }
            await db.ratings.insert_one(rating_doc)
    except Exception as e:
        logger.error(f"Error upserting rating: {str(e)}")
        raise

async def get_user_rating_for_store(db, user_id: str, store_id: str) -> Optional[Rating]:
    try:
        ratings = await db.ratings.find({"user_id": user_id, "store_id": store_id}).to_list(1)
        return Rating(**ratings[0]) if ratings else None
    except Exception as e:
        logger.error(f"Error getting user rating for store: {str(e)}")
        raise

async def get_users_who_rated_store(db, store_id: str) -> List[User]:
    try:
        ratings = await get_store_ratings(db, store_id)
        users = []
        for rating in ratings:
            user = await db.users.find_one({"id": rating.user_id})
            if user:
                users.append(User(**user))
        return users
    except Exception as e:
        logger.error(f"Error getting users who rated store: {str(e)}")
        raise

async def get_store_raters(db, store_id: str) -> List[RaterSummary]:
    """Each rating of the store joined with its author's name and email."""
    ratings = await get_store_ratings(db, store_id)
    users = {u.id: u for u in await get_users_who_rated_store(db, store_id)}
    result = []
    for r in ratings:
        user = users.get(r.user_id)
        summary = RaterSummary(
            uid=r.user_id,
            rating_value=r.value,
            rating_date=r.created_at,
            rating_date_label=format_date(r.created_at),
        )
        if user:
            summary.name = user.name
            summary.email = user.email
        result.append(summary)
    return result

async def get_dashboard_counts(db) -> Dict[str, int]:
    try:
        return {
            "total_users": await db.users.count_documents({}),
            "total_stores": await db.stores.count_documents({}),
            "total_ratings": await db.ratings.count_documents({}),
        }
    except Exception as e:
        logger.error(f"Error getting dashboard counts: {str(e)}")
        raise
