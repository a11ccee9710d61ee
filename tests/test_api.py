from conftest import bearer, make_user


def register(client, email="a@x.com", phone="01555555555", password="oldpw"):
    return client.post(
        "/api/v1/auth/register",
        data={
            "name": "Ayesha",
            "email": email,
            "phone": phone,
            "password": password,
            "photo": "https://example.com/ayesha.png",
        },
        files={
            "nidFront": ("front.jpg", b"front-bytes", "image/jpeg"),
            "nidBack": ("back.jpg", b"back-bytes", "image/jpeg"),
        },
    )


def login(client, email_or_phone, password):
    return client.post("/api/v1/auth/login", json={"emailOrPhone": email_or_phone, "password": password})


def test_root_and_health(client):
    assert client.get("/").status_code == 200
    assert client.get("/health").json() == {"status": "ok"}


def test_register_and_login(client, user_repo):
    res = register(client)
    assert res.status_code == 201
    assert "admin verification" in res.json()["message"]

    stored = next(iter(user_repo.users.values()))
    assert stored["nid_front"] == "ZnJvbnQtYnl0ZXM="

    res = login(client, "a@x.com", "oldpw")
    assert res.status_code == 200
    body = res.json()
    assert body["isVerified"] is False
    assert body["name"] == "Ayesha"
    assert body["token"]


def test_register_duplicate_is_400(client):
    assert register(client).status_code == 201
    res = register(client, phone="01666666666")
    assert res.status_code == 400
    assert "email" in res.json()["detail"]


def test_register_missing_document_is_400(client):
    res = client.post(
        "/api/v1/auth/register",
        data={"name": "A", "email": "a@x.com", "phone": "1", "password": "p", "photo": "x"},
    )
    assert res.status_code == 400


def test_login_wrong_password_is_401(client):
    register(client)
    res = login(client, "a@x.com", "nope")
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid credentials"


def test_me_is_redacted(client):
    register(client)
    token = login(client, "01555555555", "oldpw").json()["token"]
    res = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200
    body = res.json()
    assert set(body) == {"id", "name", "email", "phone", "isVerified", "isAdmin", "createdAt", "photo"}
    assert body["email"] == "a@x.com"


def test_me_requires_valid_token(client):
    assert client.get("/api/v1/auth/me").status_code == 401
    res = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer BOGUS"})
    assert res.status_code == 401


def test_password_reset_end_to_end(client, mailer):
    register(client)

    res = client.post("/api/v1/auth/request-reset", json={"email": "a@x.com"})
    assert res.status_code == 200
    otp = mailer.last_otp("a@x.com")

    res = client.post("/api/v1/auth/verify-otp", json={"email": "a@x.com", "otp": otp})
    assert res.status_code == 200

    res = client.post(
        "/api/v1/auth/reset-password",
        json={"email": "a@x.com", "otp": otp, "newPassword": "newpw"},
    )
    assert res.status_code == 200

    assert login(client, "a@x.com", "newpw").status_code == 200
    assert login(client, "a@x.com", "oldpw").status_code == 401

    res = client.post(
        "/api/v1/auth/reset-password",
        json={"email": "a@x.com", "otp": otp, "newPassword": "again"},
    )
    assert res.status_code == 400


def test_verify_wrong_otp_is_400(client):
    register(client)
    client.post("/api/v1/auth/request-reset", json={"email": "a@x.com"})
    res = client.post("/api/v1/auth/verify-otp", json={"email": "a@x.com", "otp": "abcdef"})
    assert res.status_code == 400


def test_request_reset_errors(client, mailer):
    res = client.post("/api/v1/auth/request-reset", json={"email": "ghost@x.com"})
    assert res.status_code == 404

    register(client)
    mailer.fail = True
    res = client.post("/api/v1/auth/request-reset", json={"email": "a@x.com"})
    assert res.status_code == 502


def test_admin_listing_and_verification(client, user_repo, mailer):
    admin = make_user(name="Admin", email="admin@x.com", phone="01700000000", is_admin=True)
    user_repo.users[admin["id"]] = admin
    register(client)
    target = next(u for u in user_repo.users.values() if u["email"] == "a@x.com")

    res = client.get("/api/v1/users", params={"verified": "false"}, headers=bearer(admin))
    assert res.status_code == 200
    listed = res.json()
    assert [u["email"] for u in listed] == ["admin@x.com", "a@x.com"]
    assert "hashedPassword" not in listed[0] and "hashed_password" not in listed[0]
    assert listed[1]["nidFront"] == target["nid_front"]

    res = client.patch(f"/api/v1/users/{target['id']}/verify", params={"approve": "true"}, headers=bearer(admin))
    assert res.status_code == 200
    assert res.json()["isVerified"] is True
    assert mailer.of_kind("approved") == [("approved", "a@x.com", "Ayesha")]

    res = client.get("/api/v1/users", params={"verified": "true"}, headers=bearer(admin))
    assert [u["email"] for u in res.json()] == ["a@x.com"]

    res = client.patch("/api/v1/users/missing/verify", params={"approve": "true"}, headers=bearer(admin))
    assert res.status_code == 404


def test_admin_endpoints_forbid_regular_users(client, user_repo):
    user = make_user()
    user_repo.users[user["id"]] = user

    assert client.get("/api/v1/users", headers=bearer(user)).status_code == 403
    res = client.patch(f"/api/v1/users/{user['id']}/verify", params={"approve": "true"}, headers=bearer(user))
    assert res.status_code == 403
    assert user_repo.users[user["id"]]["is_verified"] is False


def test_update_own_info(client, user_repo):
    user = make_user()
    user_repo.users[user["id"]] = user

    res = client.patch("/api/v1/users/me", json={"name": "Rahim U."}, headers=bearer(user))
    assert res.status_code == 200
    assert res.json()["name"] == "Rahim U."
    assert res.json()["phone"] == user["phone"]

    assert client.patch("/api/v1/users/me", json={"name": "x"}).status_code == 401


def test_change_password_endpoint(client, user_repo):
    user = make_user(password="old-pw")
    user_repo.users[user["id"]] = user

    res = client.post(
        "/api/v1/users/me/change-password",
        json={"currentPassword": "wrong", "newPassword": "new-pw"},
        headers=bearer(user),
    )
    assert res.status_code == 401

    res = client.post(
        "/api/v1/users/me/change-password",
        json={"currentPassword": "old-pw", "newPassword": "new-pw"},
        headers=bearer(user),
    )
    assert res.status_code == 200
    assert login(client, user["email"], "new-pw").status_code == 200


def test_oauth2_token_form(client):
    register(client)
    res = client.post("/api/v1/auth/token", data={"username": "a@x.com", "password": "oldpw"})
    assert res.status_code == 200
    body = res.json()
    assert body["token_type"] == "bearer"
    assert client.get("/api/v1/auth/me", headers={"Authorization": "Bearer " + body["access_token"]}).status_code == 200

    res = client.post("/api/v1/auth/token", data={"username": "01555555555", "password": "nope"})
    assert res.status_code == 401
