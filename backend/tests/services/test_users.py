"""User Routes — registration, login, profile, password and administration.

Invariants:
    - Responses never carry password_hash
    - Uniqueness violations are 409; bad credentials are 401
    - Role changes through PUT /users/{id} apply for admins only
"""

from uuid import uuid4

from sqlalchemy import select

from app.core.domain_types import Role
from app.models.cart import Cart
from app.models.user import User

BASE = "/api/v1/users"


# ─── Registration & login ────────────────────────────────────────

async def test_register_returns_201_with_token(client):
    res = await client.post(f"{BASE}/register", json={
        "name": "alice", "email": "Alice@Example.com", "password": "pw12345",
    })
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    data = body["data"]
    assert data["username"] == "alice"
    assert data["email"] == "alice@example.com"
    assert data["role"] == "customer"
    assert data["token"]
    assert "passwordHash" not in data and "password_hash" not in data


async def test_register_as_vendor(client):
    res = await client.post(f"{BASE}/register", json={
        "name": "vic", "email": "vic@example.com", "password": "pw", "role": "vendor",
    })
    assert res.status_code == 201
    assert res.json()["data"]["role"] == "vendor"


async def test_register_as_admin_is_forbidden(client):
    res = await client.post(f"{BASE}/register", json={
        "name": "eve", "email": "eve@example.com", "password": "pw", "role": "admin",
    })
    assert res.status_code == 403
    assert res.json()["success"] is False


async def test_register_duplicate_email_is_conflict(client, customer):
    res = await client.post(f"{BASE}/register", json={
        "name": "other", "email": customer.email.upper(), "password": "pw",
    })
    assert res.status_code == 409
    assert res.json()["message"] == "User already exists"


async def test_register_duplicate_username_is_conflict(client, customer):
    res = await client.post(f"{BASE}/register", json={
        "name": customer.username, "email": "fresh@example.com", "password": "pw",
    })
    assert res.status_code == 409
    assert res.json()["message"] == "Username already taken"


async def test_register_missing_fields_is_400(client):
    res = await client.post(f"{BASE}/register", json={"name": "x"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_login_success(client, customer, password):
    res = await client.post(f"{BASE}/login", json={
        "email": customer.email, "password": password,
    })
    assert res.status_code == 200
    assert res.json()["message"] == "Login successful"
    assert res.json()["data"]["id"] == str(customer.id)
    assert res.json()["data"]["token"]


async def test_login_wrong_password_is_401(client, customer):
    res = await client.post(f"{BASE}/login", json={
        "email": customer.email, "password": "wrong",
    })
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid credentials"


async def test_login_unknown_email_is_401(client):
    res = await client.post(f"{BASE}/login", json={
        "email": "nobody@example.com", "password": "whatever",
    })
    assert res.status_code == 401


async def test_registered_token_authenticates(client):
    reg = await client.post(f"{BASE}/register", json={
        "name": "tok", "email": "tok@example.com", "password": "pw",
    })
    token = reg.json()["data"]["token"]
    user_id = reg.json()["data"]["id"]
    res = await client.get(
        f"{BASE}/profile/{user_id}", headers={"Authorization": f"Bearer {token}"},
    )
    assert res.status_code == 200
    assert res.json()["data"]["username"] == "tok"


# ─── Authentication ──────────────────────────────────────────────

async def test_missing_header_is_401(client, customer):
    res = await client.get(f"{BASE}/profile/{customer.id}")
    assert res.status_code == 401
    assert res.json()["message"] == "Not authorized, no token"


async def test_empty_bearer_token_is_401(client, customer):
    res = await client.get(
        f"{BASE}/profile/{customer.id}", headers={"Authorization": "Bearer "},
    )
    assert res.status_code == 401


async def test_garbage_token_is_401(client, customer):
    res = await client.get(
        f"{BASE}/profile/{customer.id}",
        headers={"Authorization": "Bearer not.a.jwt"},
    )
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid token"


async def test_token_for_deleted_user_is_401(client, customer, headers_for, test_db):
    headers = headers_for(customer)
    await test_db.delete(customer)
    await test_db.commit()
    res = await client.get(f"{BASE}/profile/{uuid4()}", headers=headers)
    assert res.status_code == 401
    assert res.json()["message"] == "Not authorized, user not found"


# ─── Profile ─────────────────────────────────────────────────────

async def test_get_profile_invalid_id_is_400(client, customer, headers_for):
    res = await client.get(f"{BASE}/profile/nope", headers=headers_for(customer))
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid user ID"


async def test_get_profile_unknown_is_404(client, customer, headers_for):
    res = await client.get(f"{BASE}/profile/{uuid4()}", headers=headers_for(customer))
    assert res.status_code == 404


async def test_update_profile_returns_new_token(client, customer, headers_for):
    res = await client.put(
        f"{BASE}/profile", headers=headers_for(customer),
        json={"username": "caroline"},
    )
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["username"] == "caroline"
    assert data["email"] == customer.email
    assert data["token"]


async def test_update_profile_to_taken_email_is_409(client, customer, vendor, headers_for):
    res = await client.put(
        f"{BASE}/profile", headers=headers_for(customer),
        json={"email": vendor.email},
    )
    assert res.status_code == 409


async def test_update_profile_keeping_own_email_is_ok(client, customer, headers_for):
    res = await client.put(
        f"{BASE}/profile", headers=headers_for(customer),
        json={"email": customer.email},
    )
    assert res.status_code == 200


# ─── Password ────────────────────────────────────────────────────

async def test_change_password_then_login(client, customer, headers_for, password):
    res = await client.put(
        f"{BASE}/change-password", headers=headers_for(customer),
        json={"currentPassword": password, "newPassword": "brand-new"},
    )
    assert res.status_code == 200
    assert res.json()["message"] == "Password changed successfully"

    old = await client.post(f"{BASE}/login", json={
        "email": customer.email, "password": password,
    })
    new = await client.post(f"{BASE}/login", json={
        "email": customer.email, "password": "brand-new",
    })
    assert old.status_code == 401
    assert new.status_code == 200


async def test_change_password_wrong_current_is_400(client, customer, headers_for):
    res = await client.put(
        f"{BASE}/change-password", headers=headers_for(customer),
        json={"currentPassword": "wrong", "newPassword": "brand-new"},
    )
    assert res.status_code == 400
    assert res.json()["message"] == "Current password is incorrect"


async def test_change_password_missing_fields_is_400(client, customer, headers_for, password):
    res = await client.put(
        f"{BASE}/change-password", headers=headers_for(customer),
        json={"currentPassword": password},
    )
    assert res.status_code == 400
    assert res.json()["message"] == "Please provide current and new password"


# ─── Administration ──────────────────────────────────────────────

async def test_admin_lists_users_with_count(client, admin, customer, headers_for):
    res = await client.get(BASE, headers=headers_for(admin))
    assert res.status_code == 200
    body = res.json()
    assert body["count"] == 2
    assert {u["username"] for u in body["data"]} == {"ada", "carol"}
    assert all("password_hash" not in u for u in body["data"])


async def test_customer_cannot_list_users(client, customer, headers_for):
    res = await client.get(BASE, headers=headers_for(customer))
    assert res.status_code == 403
    assert res.json()["message"] == "Not authorized as admin"


async def test_admin_assigns_role(client, admin, customer, headers_for):
    res = await client.put(
        f"{BASE}/{customer.id}", headers=headers_for(admin), json={"role": "vendor"},
    )
    assert res.status_code == 200
    assert res.json()["data"]["role"] == "vendor"


async def test_self_update_ignores_role(client, customer, headers_for):
    res = await client.put(
        f"{BASE}/{customer.id}", headers=headers_for(customer),
        json={"role": "admin", "username": "carol2"},
    )
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["role"] == "customer"
    assert data["username"] == "carol2"


async def test_update_other_user_is_forbidden(client, customer, vendor, headers_for):
    res = await client.put(
        f"{BASE}/{vendor.id}", headers=headers_for(customer), json={"username": "x"},
    )
    assert res.status_code == 403


async def test_user_deletes_self_and_cart(client, customer, headers_for, test_db):
    user_id = customer.id
    test_db.add(Cart(user_id=user_id, products=[]))
    await test_db.commit()

    res = await client.delete(f"{BASE}/{user_id}", headers=headers_for(customer))
    assert res.status_code == 200
    assert res.json()["message"] == "User deleted successfully"

    test_db.expire_all()
    users = await test_db.execute(select(User).where(User.id == user_id))
    carts = await test_db.execute(select(Cart).where(Cart.user_id == user_id))
    assert users.scalar_one_or_none() is None
    assert carts.scalar_one_or_none() is None


async def test_customer_cannot_delete_other_user(client, customer, vendor, headers_for):
    res = await client.delete(f"{BASE}/{vendor.id}", headers=headers_for(customer))
    assert res.status_code == 403
    assert res.json()["message"] == "Not authorized to delete this user"


async def test_admin_deletes_any_user(client, admin, vendor, headers_for):
    res = await client.delete(f"{BASE}/{vendor.id}", headers=headers_for(admin))
    assert res.status_code == 200


async def test_delete_unknown_user_is_404(client, admin, headers_for):
    res = await client.delete(f"{BASE}/{uuid4()}", headers=headers_for(admin))
    assert res.status_code == 404


async def test_seeded_roles_round_trip(make_user):
    user = await make_user(Role.VENDOR)
    assert user.role == "vendor"
