"""
HTTP tests for /api/cart: request validation, envelopes and status codes.
"""
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from storecart.store import CartStore


async def add(client, user_id="u1", product_id="p1", name="Keyboard", price=1000, **extra):
    body = {"userId": user_id, "productId": product_id, "name": name, "price": price}
    body.update(extra)
    return await client.post("/api/cart/add", json=body)


async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


async def test_create_cart(client):
    r = await client.post("/api/cart/create", json={"userId": "u1"})
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Cart created successfully"
    data = body["data"]
    assert data["cart"]["userId"] == "u1"
    assert data["cart"]["items"] == []
    assert data["summary"] == {"totalItems": 0, "totalAmount": 0, "itemCount": 0, "isEmpty": True}
    assert data["formattedTotal"] == "$0.00"
    assert data["isEmpty"] is True


async def test_create_cart_twice_conflicts(client):
    await add(client)
    r = await client.post("/api/cart/create", json={"userId": "u1"})
    assert r.status_code == 409
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Cart already exists for this user"
    assert body["data"]["summary"]["totalItems"] == 1


async def test_create_requires_user_id(client):
    r = await client.post("/api/cart/create", json={})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert "userId" in body["message"]
    assert body["data"] is None


async def test_add_product(client):
    r = await add(client, image="k.png")
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["cart"]["totalItems"] == 1
    assert data["cart"]["totalAmount"] == 1000
    assert data["cart"]["formattedTotal"] == "$1000.00"
    line = data["cart"]["items"][0]
    assert line["productId"] == "p1"
    assert line["quantity"] == 1
    assert line["image"] == "k.png"
    assert line["category"] == ""
    assert data["summary"] == {"totalItems": 1, "totalAmount": 1000, "itemCount": 1, "isEmpty": False}
    assert data["formattedTotal"] == "$1000.00"


async def test_add_requires_price_and_product(client):
    r = await client.post("/api/cart/add", json={"userId": "u1", "name": "Keyboard"})
    assert r.status_code == 400
    message = r.json()["message"]
    assert "productId" in message
    assert "price" in message


async def test_add_rejects_negative_price(client):
    r = await add(client, price=-1)
    assert r.status_code == 400


async def test_add_rejects_price_with_more_than_two_decimals(client, session_maker):
    r = await add(client, price="19.999")
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert "price" in body["message"]

    async with session_maker() as session:
        assert await CartStore(session).find_cart("u1") is None


async def test_add_rejects_price_too_large_for_column(client):
    await add(client, product_id="p0", price="1.50")
    r = await add(client, price="123456789012.00")
    assert r.status_code == 400

    cart = (await client.get("/api/cart/u1")).json()["data"]["cart"]
    assert [l["productId"] for l in cart["items"]] == ["p0"]
    assert cart["totalAmount"] == 1.5


async def test_get_cart(client):
    await add(client)
    await add(client)
    r = await client.get("/api/cart/u1")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["cart"]["items"][0]["quantity"] == 2
    assert data["summary"]["totalAmount"] == 2000
    assert data["isEmpty"] is False


async def test_get_missing_cart_is_404_and_not_created(client, session_maker):
    r = await client.get("/api/cart/ghost")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Cart not found for this user", "data": None}

    async with session_maker() as session:
        assert await CartStore(session).find_cart("ghost") is None


async def test_update_quantity(client):
    await add(client, price=500)
    r = await client.put("/api/cart/u1/quantity", json={"productId": "p1", "quantity": 4})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Product quantity updated successfully"
    assert body["data"]["summary"]["totalItems"] == 4
    assert body["data"]["summary"]["totalAmount"] == 2000


async def test_update_quantity_zero_removes_line(client):
    await add(client)
    r = await client.put("/api/cart/u1/quantity", json={"productId": "p1", "quantity": 0})
    assert r.status_code == 200
    assert r.json()["data"]["cart"]["items"] == []


async def test_update_quantity_requires_quantity(client):
    r = await client.put("/api/cart/u1/quantity", json={"productId": "p1"})
    assert r.status_code == 400
    assert "quantity" in r.json()["message"]


async def test_update_quantity_rejects_out_of_range_value(client):
    await add(client, price=500)
    r = await client.put("/api/cart/u1/quantity", json={"productId": "p1", "quantity": 2**63})
    assert r.status_code == 400
    assert "quantity" in r.json()["message"]

    summary = (await client.get("/api/cart/u1/summary")).json()["data"]["summary"]
    assert summary["totalItems"] == 1


async def test_increase_and_decrease(client):
    await add(client, price=500)
    r = await client.patch("/api/cart/u1/increase", json={"productId": "p1"})
    assert r.status_code == 200
    assert r.json()["data"]["summary"]["totalItems"] == 2

    r = await client.patch("/api/cart/u1/decrease", json={"productId": "p1"})
    assert r.json()["data"]["summary"]["totalItems"] == 1

    r = await client.patch("/api/cart/u1/decrease", json={"productId": "p1"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["cart"]["items"] == []
    assert data["summary"]["totalAmount"] == 0


async def test_increase_requires_product_id(client):
    r = await client.patch("/api/cart/u1/increase", json={})
    assert r.status_code == 400


async def test_remove_product(client):
    await add(client, product_id="p1")
    await add(client, product_id="p2", price=20)
    r = await client.request("DELETE", "/api/cart/u1/remove", json={"productId": "p1"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert [l["productId"] for l in data["cart"]["items"]] == ["p2"]
    assert data["summary"]["totalAmount"] == 20


async def test_clear_cart(client):
    await add(client)
    r = await client.delete("/api/cart/u1/clear")
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Cart cleared successfully"
    assert body["data"]["cart"]["items"] == []
    assert body["data"]["formattedTotal"] == "$0.00"


async def test_items_projection(client):
    await add(client, product_id="p1")
    await add(client, product_id="p2", price=3)
    r = await client.get("/api/cart/u1/items")
    assert r.status_code == 200
    data = r.json()["data"]
    assert set(data) == {"items", "itemCount"}
    assert data["itemCount"] == 2
    assert [l["productId"] for l in data["items"]] == ["p1", "p2"]


async def test_summary_projection(client):
    await add(client, price="12.50")
    r = await client.get("/api/cart/u1/summary")
    assert r.status_code == 200
    assert r.json()["data"] == {
        "summary": {"totalItems": 1, "totalAmount": 12.5, "itemCount": 1, "isEmpty": False},
        "formattedTotal": "$12.50",
    }


async def test_projections_404_without_cart(client):
    assert (await client.get("/api/cart/ghost/items")).status_code == 404
    assert (await client.get("/api/cart/ghost/summary")).status_code == 404


async def test_persistence_failure_is_500(client, monkeypatch):
    async def failing_execute(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(AsyncSession, "execute", failing_execute)

    r = await client.get("/api/cart/u1")
    assert r.status_code == 500
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Internal server error"
    assert body["error"] == "Failed to load cart"
