"""Cart Routes — lazy creation, merge-add, replace-update, remove, clear.

Invariants:
    - GET never 404s: a user without a cart gets {userId, products: []}
    - Line items resolve productId to {id, name, price, description}, or null once deleted
    - Every mutation is scoped to the authenticated user's own cart
"""

from uuid import uuid4

from sqlalchemy import select

from app.core.domain_types import Role
from app.models.cart import Cart

BASE = "/api/v1/cart"


async def _add(client, headers, product_id, quantity=None):
    body = {"productId": str(product_id)}
    if quantity is not None:
        body["quantity"] = quantity
    return await client.post(f"{BASE}/add", headers=headers, json=body)


# ─── Get ─────────────────────────────────────────────────────────

async def test_get_without_cart_returns_synthetic_empty(client, customer, headers_for):
    res = await client.get(BASE, headers=headers_for(customer))
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["data"] == {"userId": str(customer.id), "products": []}


async def test_get_requires_auth(client):
    res = await client.get(BASE)
    assert res.status_code == 401


# ─── Add ─────────────────────────────────────────────────────────

async def test_first_add_creates_cart(client, customer, product, headers_for, test_db):
    res = await _add(client, headers_for(customer), product.id)
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["userId"] == str(customer.id)
    assert data["products"] == [{
        "productId": {
            "id": str(product.id), "name": "Headphones",
            "price": 99.5, "description": "Over-ear",
        },
        "quantity": 1,
    }]
    carts = await test_db.execute(select(Cart).where(Cart.user_id == customer.id))
    assert carts.scalar_one().version == 1


async def test_repeated_add_accumulates(client, customer, product, headers_for):
    headers = headers_for(customer)
    await _add(client, headers, product.id, 2)
    res = await _add(client, headers, product.id, 3)
    items = res.json()["data"]["products"]
    assert len(items) == 1
    assert items[0]["quantity"] == 5


async def test_add_keeps_insertion_order(client, customer, make_product, headers_for):
    first = await make_product(name="First")
    second = await make_product(name="Second")
    headers = headers_for(customer)
    await _add(client, headers, second.id)
    res = await _add(client, headers, first.id)
    names = [i["productId"]["name"] for i in res.json()["data"]["products"]]
    assert names == ["Second", "First"]


async def test_add_missing_product_id_is_400(client, customer, headers_for):
    res = await client.post(f"{BASE}/add", headers=headers_for(customer), json={})
    assert res.status_code == 400
    assert res.json()["message"] == "Please provide productId"


async def test_add_invalid_product_id_is_400(client, customer, headers_for):
    res = await _add(client, headers_for(customer), "bogus")
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid product ID"


async def test_add_unknown_product_is_404(client, customer, headers_for):
    res = await _add(client, headers_for(customer), uuid4())
    assert res.status_code == 404
    assert res.json()["message"] == "Product not found"


async def test_add_zero_quantity_is_400(client, customer, product, headers_for):
    res = await _add(client, headers_for(customer), product.id, 0)
    assert res.status_code == 400


# ─── Update ──────────────────────────────────────────────────────

async def test_update_replaces_quantity(client, customer, product, headers_for):
    headers = headers_for(customer)
    await _add(client, headers, product.id, 4)
    res = await client.put(f"{BASE}/update", headers=headers, json={
        "productId": str(product.id), "quantity": 2,
    })
    assert res.status_code == 200
    assert res.json()["data"]["products"][0]["quantity"] == 2


async def test_update_to_zero_removes_item(client, customer, product, headers_for):
    headers = headers_for(customer)
    await _add(client, headers, product.id, 4)
    res = await client.put(f"{BASE}/update", headers=headers, json={
        "productId": str(product.id), "quantity": 0,
    })
    assert res.status_code == 200
    assert res.json()["data"]["products"] == []


async def test_update_missing_quantity_is_400(client, customer, product, headers_for):
    res = await client.put(f"{BASE}/update", headers=headers_for(customer), json={
        "productId": str(product.id),
    })
    assert res.status_code == 400
    assert res.json()["message"] == "Please provide productId and quantity"


async def test_update_without_cart_is_404(client, customer, product, headers_for):
    res = await client.put(f"{BASE}/update", headers=headers_for(customer), json={
        "productId": str(product.id), "quantity": 1,
    })
    assert res.status_code == 404
    assert res.json()["message"] == "Cart not found"


async def test_update_item_not_in_cart_is_404(client, customer, make_product, headers_for):
    held = await make_product(name="Held")
    other = await make_product(name="Other")
    headers = headers_for(customer)
    await _add(client, headers, held.id)
    res = await client.put(f"{BASE}/update", headers=headers, json={
        "productId": str(other.id), "quantity": 1,
    })
    assert res.status_code == 404
    assert res.json()["message"] == "Product not in cart"


# ─── Remove / clear ──────────────────────────────────────────────

async def test_remove_item(client, customer, make_product, headers_for):
    a = await make_product(name="A")
    b = await make_product(name="B")
    headers = headers_for(customer)
    await _add(client, headers, a.id)
    await _add(client, headers, b.id)
    res = await client.request(
        "DELETE", f"{BASE}/remove", headers=headers, json={"productId": str(a.id)},
    )
    assert res.status_code == 200
    assert res.json()["message"] == "Product removed from cart successfully"
    assert [i["productId"]["name"] for i in res.json()["data"]["products"]] == ["B"]


async def test_remove_missing_item_is_404(client, customer, product, headers_for):
    headers = headers_for(customer)
    await _add(client, headers, product.id)
    res = await client.request(
        "DELETE", f"{BASE}/remove", headers=headers, json={"productId": str(uuid4())},
    )
    assert res.status_code == 404


async def test_remove_same_product_twice_second_is_404(client, customer, make_product, headers_for):
    a = await make_product(name="A")
    b = await make_product(name="B")
    headers = headers_for(customer)
    await _add(client, headers, a.id)
    await _add(client, headers, b.id)
    body = {"productId": str(a.id)}

    first = await client.request("DELETE", f"{BASE}/remove", headers=headers, json=body)
    assert first.status_code == 200

    second = await client.request("DELETE", f"{BASE}/remove", headers=headers, json=body)
    assert second.status_code == 404
    assert second.json()["success"] is False
    assert second.json()["message"] == "Product not in cart"

    res = await client.get(BASE, headers=headers)
    assert [i["productId"]["name"] for i in res.json()["data"]["products"]] == ["B"]


async def test_remove_without_cart_is_404(client, customer, product, headers_for):
    res = await client.request(
        "DELETE", f"{BASE}/remove", headers=headers_for(customer),
        json={"productId": str(product.id)},
    )
    assert res.status_code == 404


async def test_clear_empties_but_keeps_cart(client, customer, product, headers_for, test_db):
    headers = headers_for(customer)
    await _add(client, headers, product.id, 3)
    res = await client.delete(f"{BASE}/clear", headers=headers)
    assert res.status_code == 200
    assert res.json()["message"] == "Cart cleared successfully"
    data = res.json()["data"]
    assert data["products"] == []
    assert "id" in data

    carts = await test_db.execute(select(Cart).where(Cart.user_id == customer.id))
    assert carts.scalar_one_or_none() is not None


async def test_clear_without_cart_is_404(client, customer, headers_for):
    res = await client.delete(f"{BASE}/clear", headers=headers_for(customer))
    assert res.status_code == 404


# ─── Isolation & dangling references ─────────────────────────────

async def test_carts_are_per_user(client, customer, product, make_user, headers_for):
    other = await make_user(Role.CUSTOMER, username="dave")
    await _add(client, headers_for(customer), product.id, 2)
    res = await client.get(BASE, headers=headers_for(other))
    assert res.json()["data"]["products"] == []


async def test_deleted_product_resolves_to_null(
    client, customer, vendor, product, headers_for,
):
    await _add(client, headers_for(customer), product.id, 2)
    await client.delete(f"/api/v1/products/{product.id}", headers=headers_for(vendor))
    res = await client.get(BASE, headers=headers_for(customer))
    items = res.json()["data"]["products"]
    assert items == [{"productId": None, "quantity": 2}]
