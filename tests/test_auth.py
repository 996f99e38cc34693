from datetime import datetime, timedelta, timezone

from storefront.config import settings
from storefront.models.log import Log
from storefront.models.session import UserSession
from storefront.models.users import User
from storefront.utils.hashing import get_password_hash, verify_password

from conftest import PASSWORD, login

NEW_USER = {"name": "Carol", "email": "Carol@Example.com", "password": "hunter22"}


def test_password_hashing_roundtrip():
    hashed = get_password_hash("s3cret!")
    assert hashed != "s3cret!"
    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret!", "not-a-bcrypt-hash")


def test_register_then_login(client, db):
    response = client.post("/register", json=NEW_USER)
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "carol@example.com"
    assert body["user"]["role"] == "customer"

    stored = db.query(User).filter(User.email == "carol@example.com").one()
    assert stored.password_hash != NEW_USER["password"]

    response = client.post("/login", json={"email": "carol@example.com", "password": "hunter22"})
    assert response.status_code == 200
    assert response.json()["user"] == {
        "id": stored.id, "name": "Carol", "email": "carol@example.com", "role": "customer",
    }
    assert settings.SESSION_COOKIE_NAME in response.cookies


def test_register_duplicate_email_conflicts_regardless_of_case(client):
    assert client.post("/register", json=NEW_USER).status_code == 201

    response = client.post("/register", json={**NEW_USER, "email": "CAROL@example.COM"})
    assert response.status_code == 400
    assert response.json() == {"kind": "conflict", "message": "Email already registered"}


def test_register_validation_errors(client):
    response = client.post("/register", json={"name": " ", "email": "nope", "password": "123"})
    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "validation_error"
    assert {err["field"] for err in body["errors"]} == {"name", "email", "password"}


def test_register_grants_admin_for_configured_domain(client, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_EMAIL_DOMAIN", "shop.example")

    admin = client.post("/register", json={**NEW_USER, "email": "boss@shop.example"}).json()["user"]
    lookalike = client.post("/register", json={**NEW_USER, "email": "x@evilshop.example"}).json()["user"]

    assert admin["role"] == "admin"
    assert lookalike["role"] == "customer"


def test_login_wrong_password(client, make_user, db):
    user = make_user()
    response = client.post("/login", json={"email": user.email, "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json()["kind"] == "auth_error"

    failure = db.query(Log).filter(Log.action == "LOGIN").one()
    assert failure.status == "FAIL"
    assert failure.user_id == user.id


def test_login_unknown_email(client):
    response = client.post("/login", json={"email": "ghost@example.com", "password": PASSWORD})
    assert response.status_code == 401


def test_login_persists_session_and_profile_works(user_client, db):
    response = user_client.get("/profile")
    assert response.status_code == 200
    assert response.json()["email"] == user_client.user.email

    session = db.query(UserSession).one()
    assert session.user_id == user_client.user.id


def test_logout_destroys_session(user_client, db):
    response = user_client.post("/logout")
    assert response.status_code == 200
    assert db.query(UserSession).count() == 0
    assert user_client.get("/cart").status_code == 401


def test_old_cookie_rejected_after_logout(make_client, make_user):
    user = make_user()
    client = make_client()
    login(client, user.email)
    stolen = client.cookies.get(settings.SESSION_COOKIE_NAME)
    client.post("/logout")

    client.cookies.set(settings.SESSION_COOKIE_NAME, stolen)
    assert client.get("/profile").status_code == 401


def _expire_all_sessions(db):
    month_ago = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=30)
    db.query(UserSession).update({UserSession.expires_at: month_ago})
    db.commit()


def test_expired_session_is_deleted_on_use(user_client, db):
    _expire_all_sessions(db)

    assert user_client.get("/profile").status_code == 401
    db.expire_all()
    assert db.query(UserSession).count() == 0


def test_login_purges_expired_sessions(make_client, make_user, db):
    user = make_user()
    for _ in range(3):
        login(make_client(), user.email)
    assert db.query(UserSession).count() == 3
    _expire_all_sessions(db)

    client = make_client()
    login(client, user.email)

    db.expire_all()
    assert db.query(UserSession).count() == 1
    assert client.get("/profile").status_code == 200


def test_profile_404_when_user_record_is_gone(user_client, db):
    db.query(User).filter(User.id == user_client.user.id).delete()
    db.commit()

    response = user_client.get("/profile")
    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"


def test_state_changing_request_needs_csrf_token(make_client):
    client = make_client(with_csrf=False)
    response = client.post("/register", json=NEW_USER)
    assert response.status_code == 403
    assert response.json()["kind"] == "csrf_error"


def test_csrf_token_mismatch_is_rejected(make_client):
    client = make_client()
    client.headers[settings.CSRF_HEADER_NAME] = "forged"
    response = client.post("/register", json=NEW_USER)
    assert response.status_code == 403
    assert response.json() == {"kind": "csrf_error", "message": "Invalid CSRF token"}


def test_csrf_can_be_disabled(make_client, monkeypatch):
    monkeypatch.setattr(settings, "CSRF_ENABLED", False)
    client = make_client(with_csrf=False)
    assert client.post("/register", json=NEW_USER).status_code == 201
