def test_owner_without_store(client, register):
    owner = register("owner@example.com", role="store_owner")
    res = client.get("/api/store-owner/dashboard", headers=owner.headers)
    assert res.status_code == 404
    assert res.json()["detail"] == "You don't have a store yet. Please ask an admin to create one."


def test_owner_dashboard_aggregates_ratings(client, register, make_store):
    owner = register("owner@example.com", role="store_owner")
    store = make_store("Owner's Shop", owner_id=owner.id)
    other = make_store("Someone Else's Shop")
    alice = register("alice@example.com")
    bob = register("bob@example.com")

    client.post(f"/api/stores/{store['id']}/rating", json={"value": 5}, headers=alice.headers)
    client.post(f"/api/stores/{store['id']}/rating", json={"value": 4}, headers=bob.headers)
    client.post(f"/api/stores/{store['id']}/rating", json={"value": 4}, headers=alice.headers)
    client.post(f"/api/stores/{other['id']}/rating", json={"value": 1}, headers=bob.headers)

    body = client.get("/api/store-owner/dashboard", headers=owner.headers).json()
    assert body["store"]["id"] == store["id"]
    assert body["average_rating"] == 4.0
    assert body["total_ratings"] == 2
    assert body["unique_raters"] == 2
    assert body["distribution"][1] == {"stars": 4, "count": 2, "percentage": 100.0}
    assert sorted(r["email"] for r in body["raters"]) == ["alice@example.com", "bob@example.com"]
    assert all(r["rating_date_label"] for r in body["raters"])


def test_dashboard_is_owner_only(client, register):
    user = register("rater@example.com")
    res = client.get("/api/store-owner/dashboard", headers=user.headers)
    assert res.status_code == 403
    assert res.json()["redirect_to"] == "/"
