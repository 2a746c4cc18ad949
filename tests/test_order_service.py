import asyncio

import pytest
from opentelemetry.trace import StatusCode

from storefront.db.repositories import OrderRepository
from storefront.db.store import InMemoryStore, LatencyProfile, StoreTimeoutError
from storefront.models.schemas import CreateOrderRequest, OrderStatus, UpdateOrderRequest
from storefront.services.order_service import OrderService


def _service(profile: LatencyProfile | None = None) -> OrderService:
    return OrderService(OrderRepository(InMemoryStore("orders", profile or LatencyProfile.instant())))


def _span(spans, name: str):
    matches = [s for s in spans if s.name == name]
    assert len(matches) == 1, f"expected exactly one {name!r} span, got {[s.name for s in spans]}"
    return matches[0]


async def test_create_then_get_round_trip() -> None:
    service = _service()
    created = await service.create_order(CreateOrderRequest(customer_id="cust-1", total=42.5))

    assert created.id
    assert created.status == OrderStatus.PENDING
    assert created.created_at.tzinfo is not None

    fetched = await service.get_order(created.id)
    assert fetched == created


async def test_get_missing_order_returns_none() -> None:
    assert await _service().get_order("nope") is None


async def test_search_filters_by_customer() -> None:
    service = _service()
    await service.create_order(CreateOrderRequest(customer_id="alice", total=10))
    await service.create_order(CreateOrderRequest(customer_id="bob", total=20))
    await service.create_order(CreateOrderRequest(customer_id="alice", total=30))

    alice = await service.search_orders("alice")
    assert sorted(o.total for o in alice) == [10, 30]
    assert len(await service.search_orders("   ")) == 3
    assert len(await service.search_orders(" alice ")) == 2
    assert len(await service.search_orders(None)) == 3
    assert len(await service.list_orders()) == 3


async def test_update_replaces_order_and_missing_returns_none() -> None:
    service = _service()
    created = await service.create_order(CreateOrderRequest(customer_id="cust-1", total=5))

    updated = await service.update_order(created.id, UpdateOrderRequest(customer_id="cust-2", total=7.25))
    assert updated is not None
    assert updated.id == created.id
    assert updated.customer_id == "cust-2"
    assert updated.status == OrderStatus.PENDING
    assert await service.get_order(created.id) == updated

    assert await service.update_order("ghost", UpdateOrderRequest(customer_id="x", total=1)) is None
    assert await service.get_order("ghost") is None


async def test_delete_twice_returns_true_then_false() -> None:
    service = _service()
    created = await service.create_order(CreateOrderRequest(customer_id="cust-1", total=5))

    assert await service.delete_order(created.id) is True
    assert await service.delete_order(created.id) is False


async def test_concurrent_creates_yield_unique_retrievable_orders() -> None:
    service = _service()
    requests = [CreateOrderRequest(customer_id=f"cust-{i}", total=i) for i in range(50)]

    created = await asyncio.gather(*(service.create_order(r) for r in requests))

    ids = {order.id for order in created}
    assert len(ids) == 50
    stored = await service.list_orders()
    assert {order.id for order in stored} == ids


async def test_store_timeout_propagates_unchanged_and_leaves_nothing(span_exporter, log_events) -> None:
    service = _service(LatencyProfile(failure_rate=1.0, scale=0.0))

    with pytest.raises(StoreTimeoutError):
        await service.create_order(CreateOrderRequest(customer_id="cust-1", total=99))

    assert await service.list_orders() == []

    spans = span_exporter.get_finished_spans()
    create_span = _span(spans, "orders.create")
    save_span = _span(spans, "orders.repository.save")
    assert create_span.status.status_code == StatusCode.ERROR
    assert create_span.attributes["error"] is True
    assert create_span.attributes["error.message"] == "Database connection timeout"
    assert save_span.parent.span_id == create_span.context.span_id
    assert "repository.success" not in save_span.attributes

    failed = [e for e in log_events() if e["event"] == "order.create.failed"]
    assert len(failed) == 1
    assert failed[0]["level"] == "error"
    assert failed[0]["order_id"] == create_span.attributes["order.id"]


async def test_create_emits_nested_spans_with_order_attributes(span_exporter) -> None:
    service = _service()
    created = await service.create_order(CreateOrderRequest(customer_id="cust-7", total=12.5))

    spans = span_exporter.get_finished_spans()
    create_span = _span(spans, "orders.create")
    save_span = _span(spans, "orders.repository.save")

    assert create_span.attributes["order.id"] == created.id
    assert create_span.attributes["customer.id"] == "cust-7"
    assert create_span.attributes["order.total"] == 12.5
    assert save_span.parent.span_id == create_span.context.span_id
    assert save_span.attributes["repository.success"] is True
    assert save_span.attributes["order.id"] == created.id


async def test_every_operation_opens_a_span_with_a_store_child(span_exporter) -> None:
    service = _service()
    created = await service.create_order(CreateOrderRequest(customer_id="c", total=1))
    await service.list_orders()
    await service.get_order(created.id)
    await service.search_orders("c")
    await service.update_order(created.id, UpdateOrderRequest(customer_id="c", total=2))
    await service.delete_order(created.id)

    spans = span_exporter.get_finished_spans()
    for operation, child in [
        ("orders.list", "orders.repository.list"),
        ("orders.get", "orders.repository.get"),
        ("orders.search", "orders.repository.search"),
        ("orders.update", "orders.repository.update"),
        ("orders.delete", "orders.repository.delete"),
    ]:
        parent_span = _span(spans, operation)
        child_span = _span(spans, child)
        assert child_span.parent.span_id == parent_span.context.span_id

    assert _span(spans, "orders.get").attributes["result.found"] is True
    assert _span(spans, "orders.search").attributes["result.count"] == 1


async def test_not_found_is_logged_as_warning(log_events) -> None:
    service = _service()
    await service.get_order("missing-id")

    events = [e for e in log_events() if e["event"] == "order.get.not_found"]
    assert events and events[0]["level"] == "warning"
    assert events[0]["order_id"] == "missing-id"
