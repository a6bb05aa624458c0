import jwt

from storefront.application.users import UserService
from storefront.auth_local import decode_access_token, hash_password, verify_password
from storefront.domain.models import User, UserRole
from conftest import make_order

import scripts.seed_admin as seed_admin


def test_password_hashing():
    encoded = hash_password("s3cret!", iterations=1000)
    assert encoded.startswith("pbkdf2_sha256$1000$")
    assert verify_password("s3cret!", encoded)
    assert not verify_password("wrong", encoded)
    assert not verify_password("s3cret!", None)
    assert not verify_password("s3cret!", "garbage")
    # Salted: same password hashes differently
    assert hash_password("s3cret!", iterations=1000) != encoded


def test_issue_token(client, db):
    UserService(db).upsert("Admin@Example.com", "hunter22", role=UserRole.ADMIN)

    resp = client.post("/auth/token", json={"email": "admin@example.com", "password": "hunter22"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    claims = decode_access_token(body["access_token"])
    assert claims["sub"] == "admin@example.com"
    assert claims["role"] == "admin"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60


def test_issue_token_rejects_bad_password(client, db):
    UserService(db).upsert("asha@example.com", "hunter22")
    resp = client.post("/auth/token", json={"email": "asha@example.com", "password": "nope"})
    assert resp.status_code == 401
    resp = client.post("/auth/token", json={"email": "ghost@example.com", "password": "nope"})
    assert resp.status_code == 401


def test_expired_token_rejected(client, settings):
    token = jwt.encode({"sub": "asha@example.com", "role": "user", "exp": 1}, settings.JWT_SECRET, algorithm="HS256")
    resp = client.get("/orders", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_my_orders(client, db, user_headers):
    make_order(db, customer_email="ASHA@example.com")
    make_order(db, customer_email="someone@example.com")

    assert client.get("/orders").status_code == 401

    resp = client.get("/orders", headers=user_headers)
    assert resp.status_code == 200
    orders = resp.json()
    assert len(orders) == 1
    assert orders[0]["customer"]["email"] == "ASHA@example.com"
    assert orders[0]["customer"]["address"]["zip_code"] == "700016"


def test_seed_admin_creates_once(db, monkeypatch):
    assert seed_admin.seed_admin("ops@example.com", "hunter22") is True
    assert seed_admin.seed_admin("ops@example.com", "other") is False

    db.expire_all()
    user = db.query(User).filter(User.email == "ops@example.com").one()
    assert user.role == "admin"
    assert verify_password("hunter22", user.password_hash)

    monkeypatch.delenv("ADMIN_PASSWORD", raising=False)
    assert seed_admin.main(["seed_admin.py", "x@example.com"]) == 1
