from datetime import timedelta

from database.models import Customer, User
from services.auth import create_access_token, hash_password, verify_password


def test_password_hash_roundtrip():
    encoded = hash_password("geheim-wachtwoord")
    assert encoded.startswith("pbkdf2_sha256$100000$")
    assert verify_password("geheim-wachtwoord", encoded)
    assert not verify_password("fout", encoded)


def test_verify_password_rejects_malformed_hashes():
    assert not verify_password("x", None)
    assert not verify_password("x", "")
    assert not verify_password("x", "bcrypt$12$abc$def")
    assert not verify_password("x", "pbkdf2_sha256$notanumber$00$00")


def test_register_creates_consignor_with_customer(client, db):
    response = client.post(
        "/api/auth/register",
        json={"email": "Jan@Example.nl", "password": "welkom-123", "name": "Jan Jansen"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "jan@example.nl"
    assert body["user"]["role"] == "consignor"

    customer = db.query(Customer).filter(Customer.email == "jan@example.nl").one()
    assert body["user"]["customer_id"] == customer.id

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["name"] == "Jan Jansen"


def test_register_links_existing_customer(client, db):
    customer = Customer(name="Eva Bakker", email="eva@example.nl")
    db.add(customer)
    db.commit()

    response = client.post(
        "/api/auth/register",
        json={"email": "eva@example.nl", "password": "welkom-123", "name": "Eva Bakker"},
    )
    assert response.status_code == 201
    assert response.json()["user"]["customer_id"] == customer.id
    assert db.query(Customer).count() == 1


def test_register_duplicate_email(client, consignor_user):
    response = client.post(
        "/api/auth/register",
        json={"email": "sanne@example.nl", "password": "welkom-123", "name": "Sanne"},
    )
    assert response.status_code == 409


def test_register_short_password(client):
    response = client.post(
        "/api/auth/register",
        json={"email": "kort@example.nl", "password": "kort", "name": "Kort"},
    )
    assert response.status_code == 422


def test_login(client, admin_user, db):
    response = client.post(
        "/api/auth/login",
        json={"email": "admin@dutchthrift.nl", "password": "admin-pass-123"},
    )
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"
    db.refresh(admin_user)
    assert admin_user.last_login is not None


def test_login_wrong_password(client, admin_user):
    response = client.post(
        "/api/auth/login",
        json={"email": "admin@dutchthrift.nl", "password": "verkeerd"},
    )
    assert response.status_code == 401


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_expired_token(client, admin_user):
    token = create_access_token(admin_user, expires_delta=timedelta(minutes=-5))
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_inactive_account(client, db, consignor_user, consignor_headers):
    user = db.get(User, consignor_user.id)
    user.is_active = False
    db.commit()

    assert client.get("/api/auth/me", headers=consignor_headers).status_code == 403


def test_inactive_account_login_leaves_last_login_untouched(client, db, consignor_user):
    user = db.get(User, consignor_user.id)
    user.is_active = False
    db.commit()

    response = client.post(
        "/api/auth/login",
        json={"email": "sanne@example.nl", "password": "consignor-pass-1"},
    )
    assert response.status_code == 403
    db.refresh(user)
    assert user.last_login is None


def test_role_checks(client, admin_headers, consignor_headers):
    assert client.get("/api/admin/dashboard", headers=consignor_headers).status_code == 403
    assert client.get("/api/admin/dashboard", headers=admin_headers).status_code == 200
    # admin has no customer record
    assert client.get("/api/consignor/dashboard", headers=admin_headers).status_code == 400
