from datetime import datetime, timedelta

from store_ratings.services.store import (
    add_store,
    get_store_by_id,
    update_store,
    get_store_ratings,
    get_user_rating_for_store,
    get_users_who_rated_store,
    get_store_raters,
    upsert_rating,
)


async def test_first_submission_inserts_rating(db):
    await upsert_rating(db, "u1", "s1", 3)

    assert len(db.ratings.docs) == 1
    rating = db.ratings.docs[0]
    assert rating["value"] == 3
    assert rating["updated_at"] is None
    assert rating["created_at"] is not None


async def test_resubmission_updates_in_place(db):
    await upsert_rating(db, "u1", "s1", 3)
    created_at = db.ratings.docs[0]["created_at"]

    await upsert_rating(db, "u1", "s1", 5)

    ratings = [r for r in db.ratings.docs if r["user_id"] == "u1" and r["store_id"] == "s1"]
    assert len(ratings) == 1
    assert ratings[0]["value"] == 5
    assert ratings[0]["updated_at"] is not None
    assert ratings[0]["created_at"] == created_at


async def test_ratings_are_kept_per_user_and_store(db):
    await upsert_rating(db, "u1", "s1", 3)
    await upsert_rating(db, "u2", "s1", 4)
    await upsert_rating(db, "u1", "s2", 1)

    assert len(db.ratings.docs) == 3
    mine = await get_user_rating_for_store(db, "u2", "s1")
    assert mine.value == 4
    assert await get_user_rating_for_store(db, "u2", "s2") is None


async def test_value_is_not_range_checked(db):
    await upsert_rating(db, "u1", "s1", 9)
    assert db.ratings.docs[0]["value"] == 9


async def test_store_ratings_newest_first(db):
    now = datetime.utcnow()
    for i, uid in enumerate(["old", "mid", "new"]):
        db.ratings.docs.append({
            "id": uid, "store_id": "s1", "user_id": uid, "value": 3,
            "created_at": now + timedelta(minutes=i), "updated_at": None,
        })

    ratings = await get_store_ratings(db, "s1")
    assert [r.id for r in ratings] == ["new", "mid", "old"]


async def test_raters_fall_back_to_anonymous(db):
    db.users.docs.append({
        "id": "u1", "name": "Known Rater With Long Name", "email": "known@example.com",
        "address": "1 Main St", "role": "user", "created_at": datetime.utcnow(),
    })
    await upsert_rating(db, "u1", "s1", 4)
    await upsert_rating(db, "ghost", "s1", 2)

    users = await get_users_who_rated_store(db, "s1")
    assert [u.id for u in users] == ["u1"]

    raters = {r.uid: r for r in await get_store_raters(db, "s1")}
    assert raters["u1"].email == "known@example.com"
    assert raters["ghost"].name == "Anonymous"
    assert raters["ghost"].email == "—"


async def test_update_store_keeps_identity_fields(db):
    store = await add_store(db, name="Old Name", email="shop@example.com", address="1 Main St", owner_id="o1")

    await update_store(db, store.id, {"name": "New Name", "id": "hijack", "created_at": None})

    updated = await get_store_by_id(db, store.id)
    assert updated.name == "New Name"
    assert updated.created_at == store.created_at
