from storefront.db.repositories import OrderRepository, ProductRepository, set_order_repository, set_product_repository
from storefront.db.store import InMemoryStore, LatencyProfile


def _failing_profile() -> LatencyProfile:
    return LatencyProfile(failure_rate=1.0, scale=0.0)


async def test_order_lifecycle(api_client) -> None:
    create = await api_client.post("/api/orders", json={"customer_id": "cust-1", "total": 19.99})
    assert create.status_code == 201
    order = create.json()
    assert order["status"] == "Pending"
    assert create.headers["location"] == f"/api/orders/{order['id']}"

    fetched = await api_client.get(f"/api/orders/{order['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == order

    listing = await api_client.get("/api/orders")
    assert [o["id"] for o in listing.json()] == [order["id"]]

    updated = await api_client.put(f"/api/orders/{order['id']}", json={"customer_id": "cust-2", "total": 5})
    assert updated.status_code == 200
    assert updated.json()["customer_id"] == "cust-2"

    first_delete = await api_client.delete(f"/api/orders/{order['id']}")
    assert first_delete.status_code == 204
    second_delete = await api_client.delete(f"/api/orders/{order['id']}")
    assert second_delete.status_code == 404


async def test_order_search_by_customer(api_client) -> None:
    for customer in ["alice", "bob", "alice"]:
        resp = await api_client.post("/api/orders", json={"customer_id": customer, "total": 1})
        assert resp.status_code == 201

    alice = await api_client.get("/api/orders/search", params={"customer_id": "alice"})
    assert alice.status_code == 200
    assert len(alice.json()) == 2
    assert all(o["customer_id"] == "alice" for o in alice.json())

    everyone = await api_client.get("/api/orders/search")
    assert len(everyone.json()) == 3

    blank = await api_client.get("/api/orders/search", params={"customer_id": "   "})
    assert blank.status_code == 200
    assert len(blank.json()) == 3


async def test_missing_order_returns_404(api_client) -> None:
    assert (await api_client.get("/api/orders/nope")).status_code == 404
    resp = await api_client.put("/api/orders/nope", json={"customer_id": "x", "total": 1})
    assert resp.status_code == 404


async def test_order_store_timeout_maps_to_503_without_partial_state(api_client) -> None:
    set_order_repository(OrderRepository(InMemoryStore("orders", _failing_profile())))

    resp = await api_client.post(
        "/api/orders",
        json={"customer_id": "cust-1", "total": 10},
        headers={"X-Correlation-Id": "retry-me"},
    )
    assert resp.status_code == 503
    assert resp.json()["detail"] == "Service temporarily unavailable"
    assert resp.headers["x-correlation-id"] == "retry-me"

    listing = await api_client.get("/api/orders")
    assert listing.json() == []


async def test_product_lifecycle(api_client) -> None:
    create = await api_client.post(
        "/api/products",
        json={"name": "Kettle", "description": "Steel", "price": 29.5, "stock_quantity": 3},
    )
    assert create.status_code == 201
    product = create.json()
    assert create.headers["location"] == f"/api/products/{product['id']}"

    fetched = await api_client.get(f"/api/products/{product['id']}")
    assert fetched.json() == product

    search = await api_client.get("/api/products/search", params={"name": "kett"})
    assert [p["id"] for p in search.json()] == [product["id"]]

    updated = await api_client.put(
        f"/api/products/{product['id']}",
        json={"name": "Kettle XL", "description": "Steel", "price": 35, "stock_quantity": 1},
    )
    assert updated.status_code == 200
    assert updated.json()["name"] == "Kettle XL"
    assert updated.json()["id"] == product["id"]

    assert (await api_client.delete(f"/api/products/{product['id']}")).status_code == 204
    assert (await api_client.get(f"/api/products/{product['id']}")).status_code == 404
    assert (await api_client.delete(f"/api/products/{product['id']}")).status_code == 404


async def test_update_missing_product_returns_404(api_client) -> None:
    resp = await api_client.put("/api/products/ghost", json={"name": "x", "price": 1})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Product not found"


async def test_product_store_timeout_maps_to_503(api_client) -> None:
    set_product_repository(ProductRepository(InMemoryStore("products", _failing_profile())))

    resp = await api_client.post("/api/products", json={"name": "Ghost", "price": 1})
    assert resp.status_code == 503
    assert (await api_client.get("/api/products")).json() == []


async def test_health_endpoints(api_client) -> None:
    health = await api_client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"

    ready = await api_client.get("/health/ready")
    assert ready.status_code == 200
    assert ready.json()["ready"] is True
