from conftest import SPRINGFIELD, VALID_PASSWORD, auth_headers


def registration(**overrides):
    payload = {
        "name": "Regular Rater With Long Name",
        "email": "rater@example.com",
        "address": SPRINGFIELD,
        "password": VALID_PASSWORD,
    }
    payload.update(overrides)
    return payload


def test_register_returns_token_and_profile(client, db):
    res = client.post("/api/auth/register", json=registration())
    assert res.status_code == 201
    body = res.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "user"
    assert "hashed_password" not in body["user"]
    assert db.users.docs[0]["email"] == "rater@example.com"
    assert "hashed_password" not in db.users.docs[0]


def test_register_validation_errors(client):
    res = client.post("/api/auth/register", json=registration(name="John Doe"))
    assert res.status_code == 422

    res = client.post("/api/auth/register", json=registration(email="nope"))
    assert res.status_code == 422


def test_register_weak_password_gets_friendly_text(client):
    res = client.post("/api/auth/register", json=registration(password="abcdefgh"))
    assert res.status_code == 400
    assert res.json()["code"] == "auth/weak-password"
    assert res.json()["detail"] == "Password is too weak."


def test_register_duplicate_email(client):
    client.post("/api/auth/register", json=registration())
    res = client.post("/api/auth/register", json=registration())
    assert res.status_code == 409
    assert res.json()["detail"] == "This email is already in use."

    res = client.post("/api/auth/register", json=registration(email="Rater@Example.COM"))
    assert res.status_code == 409


def test_login_and_me(client, register):
    register("rater@example.com")
    res = client.post("/api/auth/login", json={"email": "rater@example.com", "password": VALID_PASSWORD})
    assert res.status_code == 200
    token = res.json()["access_token"]

    me = client.get("/api/auth/me", headers=auth_headers(token)).json()
    assert me["identity"]["email"] == "rater@example.com"
    assert me["is_normal_user"] is True
    assert me["loading"] is False


def test_me_without_token(client):
    me = client.get("/api/auth/me").json()
    assert me["identity"] is None
    assert me["profile"] is None
    assert me["loading"] is False


def test_login_errors(client, register):
    register("rater@example.com")

    res = client.post("/api/auth/login", json={"email": "rater@example.com", "password": "Wrong123!"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid email or password. Please try again."

    res = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": VALID_PASSWORD})
    assert res.status_code == 404
    assert res.json()["detail"] == "No account found with this email."


def test_login_is_throttled(client, register):
    register("rater@example.com")
    for _ in range(5):
        client.post("/api/auth/login", json={"email": "rater@example.com", "password": "Wrong123!"})

    res = client.post("/api/auth/login", json={"email": "rater@example.com", "password": VALID_PASSWORD})
    assert res.status_code == 429
    assert res.json()["detail"] == "Too many attempts. Please try again later."


def test_signed_in_user_cannot_open_login(client, register):
    user = register("rater@example.com")
    res = client.post("/api/auth/login", json={"email": "rater@example.com", "password": VALID_PASSWORD},
                      headers=user.headers)
    assert res.status_code == 403
    assert res.json()["redirect_to"] == "/"


def test_logout_revokes_token(client, register):
    user = register("rater@example.com")
    assert client.post("/api/auth/logout", headers=user.headers).status_code == 200

    me = client.get("/api/auth/me", headers=user.headers).json()
    assert me["identity"] is None


def test_profile_requires_login(client):
    res = client.get("/api/profile")
    assert res.status_code == 401
    assert res.json()["redirect_to"] == "/login"
    assert res.headers["location"] == "/login"


def test_profile_shows_role_label(client, register):
    owner = register("owner@example.com", role="store_owner")
    body = client.get("/api/profile", headers=owner.headers).json()
    assert body["role_label"] == "Store Owner"
    assert body["profile"]["email"] == "owner@example.com"


def test_update_password(client, register):
    user = register("rater@example.com")

    res = client.put("/api/update-password", headers=user.headers,
                     json={"current_password": "Wrong123!", "new_password": "Newpass1!"})
    assert res.status_code == 400
    assert res.json()["code"] == "auth/wrong-password"

    res = client.put("/api/update-password", headers=user.headers,
                     json={"current_password": VALID_PASSWORD, "new_password": "weak"})
    assert res.status_code == 400
    assert res.json()["code"] == "auth/weak-password"

    res = client.put("/api/update-password", headers=user.headers,
                     json={"current_password": VALID_PASSWORD, "new_password": "Newpass1!"})
    assert res.status_code == 200

    res = client.post("/api/auth/login", json={"email": "rater@example.com", "password": "Newpass1!"})
    assert res.status_code == 200


def test_update_password_with_fresh_session(client, register):
    user = register("rater@example.com")
    res = client.put("/api/update-password", headers=user.headers, json={"new_password": "Newpass1!"})
    assert res.status_code == 200
