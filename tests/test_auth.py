import pytest

from be4real.modules.user_management.models.user import User

EMAIL = "Casey@Example.com"


def _register(client, username="casey", email=EMAIL, password="password123"):
    return client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password},
    )


def _stored_user(db, email=EMAIL):
    db.expire_all()
    return db.query(User).filter(User.email == email.lower()).one()


def test_register_creates_unverified_user(client, db):
    response = _register(client, username="  casey  ")
    assert response.status_code == 200
    assert response.json()["data"]["username"] == "casey"

    user = _stored_user(db)
    assert user.email == "casey@example.com"
    assert user.is_verified is False
    assert user.verification_code is None
    assert user.login_method == "password"
    assert user.hashed_password != "password123"


def test_register_duplicate_email_conflicts(client):
    assert _register(client).status_code == 200
    response = _register(client, username="other", email="casey@example.com")
    assert response.status_code == 409
    assert response.json()["kind"] == "conflict"


def test_register_duplicate_username_conflicts(client):
    assert _register(client).status_code == 200
    response = _register(client, email="someone@example.com")
    assert response.status_code == 409


@pytest.mark.parametrize(
    "payload",
    [
        {"username": "ab", "email": "a@example.com", "password": "password123"},
        {"username": "x" * 33, "email": "a@example.com", "password": "password123"},
        {"username": "casey", "email": "not-an-email", "password": "password123"},
        {"username": "casey", "email": "a@example.com", "password": "short"},
        {"username": "casey", "email": "a@example.com"},
    ],
)
def test_register_validates_fields(client, payload):
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_input"


def test_verification_and_login_flow(client, db):
    _register(client)

    response = client.post("/api/auth/login", json={"email": EMAIL, "password": "password123"})
    assert response.status_code == 403
    assert response.json()["message"] == "User requires verification"

    response = client.post("/api/auth/send-verification", json={"email": EMAIL})
    assert response.status_code == 200
    code = _stored_user(db).verification_code
    assert len(code) == 6 and code.isdigit()

    wrong = "000000" if code != "000000" else "111111"
    response = client.post("/api/auth/verify", json={"email": EMAIL, "code": wrong})
    assert response.status_code == 401

    response = client.post("/api/auth/verify", json={"email": EMAIL, "code": code})
    assert response.status_code == 200
    token = response.json()["data"]["access_token"]
    user = _stored_user(db)
    assert user.is_verified is True
    assert user.verification_code is None

    response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["data"]["email"] == "casey@example.com"

    response = client.post("/api/auth/login", json={"email": EMAIL, "password": "password123"})
    assert response.status_code == 200
    assert response.json()["data"]["token_type"] == "bearer"


def test_send_verification_rejects_verified_or_unknown(client, make_user):
    make_user("dana")
    response = client.post("/api/auth/send-verification", json={"email": "dana@example.com"})
    assert response.status_code == 400
    response = client.post("/api/auth/send-verification", json={"email": "ghost@example.com"})
    assert response.status_code == 400


def test_verify_unknown_user(client):
    response = client.post("/api/auth/verify", json={"email": "ghost@example.com", "code": "123456"})
    assert response.status_code == 404


def test_login_rejects_bad_credentials(client, make_user):
    make_user("erin")
    response = client.post("/api/auth/login", json={"email": "erin@example.com", "password": "wrongpass1"})
    assert response.status_code == 401
    response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "password123"})
    assert response.status_code == 401


def test_login_rejects_federated_account(client, make_user):
    make_user("gina", login_method="google")
    response = client.post("/api/auth/login", json={"email": "gina@example.com", "password": "password123"})
    assert response.status_code == 403


def test_password_reset_flow(client, db, make_user, password):
    make_user("fran")
    email = "fran@example.com"

    response = client.post("/api/auth/forgot-password", json={"email": email})
    assert response.status_code == 200
    code = _stored_user(db, email).verification_code

    wrong = "000000" if code != "000000" else "111111"
    response = client.post(
        "/api/auth/reset-password",
        json={"email": email, "code": wrong, "new_password": "newpassword1"},
    )
    assert response.status_code == 400

    response = client.post(
        "/api/auth/reset-password",
        json={"email": email, "code": code, "new_password": "newpassword1"},
    )
    assert response.status_code == 200
    assert _stored_user(db, email).verification_code is None

    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 401
    response = client.post("/api/auth/login", json={"email": email, "password": "newpassword1"})
    assert response.status_code == 200


def test_me_requires_valid_token(client):
    assert client.get("/api/users/me").status_code == 401
    response = client.get("/api/users/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["kind"] == "unauthenticated"
