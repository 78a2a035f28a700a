from datetime import timedelta

from gigboard.core.security import issue_token, read_claims, read_token
from gigboard.policies.ownership import Principal

EMAIL = "dana@gigboard.io"


def register(client, email=EMAIL, password="secret123", name="Dana"):
    return client.post(
        "/api/v1/auth/register",
        json={"name": name, "email": email, "password": password},
    )


def test_register_returns_token_and_user(client):
    r = register(client)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["user"]["email"] == EMAIL
    assert body["user"]["name"] == "Dana"

    claims = read_claims(body["access_token"])
    assert claims["user_id"] == body["user"]["id"]
    assert claims["name"] == "Dana"


def test_duplicate_email_conflicts(client):
    assert register(client).status_code == 201
    r = register(client, email=EMAIL.upper(), name="Dana Again")
    assert r.status_code == 409
    assert r.json()["code"] == "conflict"


def test_register_validates_payload(client):
    assert register(client, password="123").status_code == 422
    assert register(client, email="not-an-email").status_code == 422


def test_login_and_me(client):
    user_id = register(client).json()["user"]["id"]

    r = client.post("/api/v1/auth/login", json={"email": EMAIL, "password": "secret123"})
    assert r.status_code == 200, r.text
    token = r.json()["access_token"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["user_id"] == user_id
    assert me.json()["email"] == EMAIL


def test_login_with_wrong_password(client):
    register(client)
    r = client.post("/api/v1/auth/login", json={"email": EMAIL, "password": "wrong-pass"})
    assert r.status_code == 401
    r = client.post("/api/v1/auth/login", json={"email": "ghost@gigboard.io", "password": "secret123"})
    assert r.status_code == 401


def test_me_rejects_bad_tokens(client):
    assert client.get("/api/v1/auth/me").status_code in (401, 403)
    r = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401


def test_token_carries_principal():
    dana = Principal(user_id="7c1f0a4e-0000-4000-8000-000000000001", name="Dana", email=EMAIL)
    token = issue_token(dana)
    assert read_token(token) == dana
    assert read_claims(token)["sub"] == dana.user_id


def test_expired_and_tampered_tokens_are_refused(client):
    dana = Principal(user_id="7c1f0a4e-0000-4000-8000-000000000001", name="Dana")
    expired = issue_token(dana, ttl=timedelta(minutes=-5))
    assert read_token(expired) is None

    header, payload, signature = issue_token(dana).split(".")
    tampered = ".".join([header, payload, signature[::-1]])
    assert read_token(tampered) is None

    r = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401
