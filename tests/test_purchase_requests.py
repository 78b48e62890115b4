"""
Tests for purchase request intake through the service and the HTTP endpoints.
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from ticket_queue.domain.errors import (
    EmptyRequestError,
    MissingReferenceError,
    PurchaseRequestNotFoundError,
    WindowClosedError,
)
from ticket_queue.schemas.purchase_request import PurchaseRequestCreate, PurchaseRequestUpdate

T0 = datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)


def payload(sales_round_id, *items):
    return {
        "sales_round_id": sales_round_id,
        "items": [{"ticket_type_id": t, "quantity_requested": q} for t, q in items],
    }


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_then_get_returns_pending_request(service, sales_round, ticket_types):
    """A new request reads back pending, unnumbered and with nothing approved."""
    created = await service.create_purchase_request(
        PurchaseRequestCreate(**payload(sales_round.id, (ticket_types[0].id, 1), (ticket_types[1].id, 2))),
        "customer-1",
    )

    fetched = await service.get_purchase_request(created.id)

    assert fetched.id == created.id
    assert fetched.status == "pending"
    assert fetched.customer_id == "customer-1"
    assert fetched.sales_round_id == sales_round.id
    assert fetched.queue_number is None
    assert [(i.ticket_type_id, i.quantity_requested) for i in fetched.items] == [
        (ticket_types[0].id, 1),
        (ticket_types[1].id, 2),
    ]
    assert all(item.quantity_approved == 0 for item in fetched.items)


@pytest.mark.asyncio
async def test_unknown_sales_round_is_a_missing_reference(service, ticket_types):
    """A round id that resolves to nothing is rejected as a missing reference."""
    with pytest.raises(MissingReferenceError):
        await service.create_purchase_request(
            PurchaseRequestCreate(**payload(12345, (ticket_types[0].id, 1))), "customer-1"
        )


@pytest.mark.asyncio
async def test_unknown_ticket_type_is_a_missing_reference(service, sales_round):
    """A ticket type id that resolves to nothing is rejected as a missing reference."""
    with pytest.raises(MissingReferenceError):
        await service.create_purchase_request(
            PurchaseRequestCreate(**payload(sales_round.id, (9999, 1))), "customer-1"
        )


@pytest.mark.asyncio
async def test_create_rejected_once_window_has_passed(service, clock, sales_round, ticket_types):
    """Submitting after window_end raises WindowClosedError."""
    clock.advance(timedelta(hours=2))
    with pytest.raises(WindowClosedError):
        await service.create_purchase_request(
            PurchaseRequestCreate(**payload(sales_round.id, (ticket_types[0].id, 1))), "customer-1"
        )


@pytest.mark.asyncio
async def test_create_rejected_before_window_opens(service, clock, sales_round, ticket_types):
    """Submitting before window_start raises WindowClosedError."""
    clock.advance(timedelta(minutes=-30))
    with pytest.raises(WindowClosedError):
        await service.create_purchase_request(
            PurchaseRequestCreate(**payload(sales_round.id, (ticket_types[0].id, 1))), "customer-1"
        )


@pytest.mark.asyncio
async def test_update_replaces_every_item(service, sales_round, ticket_types):
    """Update swaps the whole item list and leaves status and queue number alone."""
    created = await service.create_purchase_request(
        PurchaseRequestCreate(**payload(sales_round.id, (ticket_types[0].id, 1), (ticket_types[0].id, 1))),
        "customer-1",
    )
    old_item_ids = {item.id for item in created.items}

    updated = await service.update_purchase_request(
        created.id,
        PurchaseRequestUpdate(**payload(sales_round.id, (ticket_types[1].id, 4))),
    )

    assert [(i.ticket_type_id, i.quantity_requested) for i in updated.items] == [(ticket_types[1].id, 4)]
    assert not old_item_ids & {item.id for item in updated.items}
    assert updated.status == "pending"
    assert updated.queue_number is None


@pytest.mark.asyncio
async def test_update_of_unknown_request_raises_not_found(service, sales_round, ticket_types):
    """Updating an id that does not exist raises PurchaseRequestNotFoundError."""
    with pytest.raises(PurchaseRequestNotFoundError):
        await service.update_purchase_request(
            4242, PurchaseRequestUpdate(**payload(sales_round.id, (ticket_types[0].id, 1)))
        )


@pytest.mark.asyncio
async def test_failed_update_keeps_previous_items(service, sales_round, ticket_types):
    """A rejected update leaves the stored items untouched."""
    created = await service.create_purchase_request(
        PurchaseRequestCreate(**payload(sales_round.id, (ticket_types[0].id, 2))), "customer-1"
    )
    request_id = created.id

    with pytest.raises(EmptyRequestError):
        await service.update_purchase_request(request_id, PurchaseRequestUpdate(sales_round_id=sales_round.id))

    fetched = await service.get_purchase_request(request_id)
    assert [(i.ticket_type_id, i.quantity_requested) for i in fetched.items] == [(ticket_types[0].id, 2)]


@pytest.mark.asyncio
async def test_get_unknown_request_raises_not_found(service):
    """Reading an id that does not exist raises PurchaseRequestNotFoundError."""
    with pytest.raises(PurchaseRequestNotFoundError):
        await service.get_purchase_request(1)


@pytest.mark.asyncio
async def test_list_by_customer_only_returns_their_requests(service, sales_round, ticket_types):
    """Listing by customer filters out everybody else's requests."""
    for customer in ("alice", "bob", "alice"):
        await service.create_purchase_request(
            PurchaseRequestCreate(**payload(sales_round.id, (ticket_types[0].id, 1))), customer
        )

    mine = await service.list_by_customer("alice")

    assert len(mine) == 2
    assert {r.customer_id for r in mine} == {"alice"}


@pytest.mark.asyncio
async def test_delete_all_resets_the_store(service, sales_round, ticket_types):
    """The administrative reset removes every request and reports how many."""
    for customer in ("a", "b"):
        await service.create_purchase_request(
            PurchaseRequestCreate(**payload(sales_round.id, (ticket_types[0].id, 1))), customer
        )

    assert await service.delete_all_purchase_requests() == 2
    assert await service.list_by_sales_round(sales_round.id) == []


@pytest.mark.asyncio
async def test_confirmation_names_round_window_and_ticket_types(service, sales_round, ticket_types):
    """The confirmation carries the round window, ticket type names and the ticket total."""
    created = await service.create_purchase_request(
        PurchaseRequestCreate(**payload(sales_round.id, (ticket_types[0].id, 1), (ticket_types[1].id, 2))),
        "customer-1",
    )

    confirmation = await service.get_purchase_request_confirmation(created.id)

    assert confirmation.purchase_request_id == created.id
    assert confirmation.event_id == 1
    assert confirmation.window_start == T0
    assert confirmation.window_end == T0 + timedelta(hours=1)
    assert confirmation.queue_number is None
    assert confirmation.total_tickets == 3
    assert [(i.ticket_type_name, i.quantity_requested) for i in confirmation.items] == [
        ("Category 1", 1),
        ("Category 2", 2),
    ]


@pytest.mark.asyncio
async def test_confirmation_of_unknown_request_raises_not_found(service):
    """Confirmation for an id that does not exist raises PurchaseRequestNotFoundError."""
    with pytest.raises(PurchaseRequestNotFoundError):
        await service.get_purchase_request_confirmation(31337)


# ---------------------------------------------------------------------------
# Purchase request endpoints
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_purchase_request(client: AsyncClient, customer_headers, sales_round, ticket_types):
    """POST returns 201 and the same body GET returns afterwards."""
    response = await client.post(
        "/api/v1/purchase-requests",
        json=payload(sales_round.id, (ticket_types[0].id, 2)),
        headers=customer_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["customer_id"] == "customer-1"
    assert data["queue_number"] is None
    assert data["items"][0]["quantity_approved"] == 0

    fetched = await client.get(f"/api/v1/purchase-requests/{data['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == data


@pytest.mark.asyncio
async def test_approved_quantity_from_caller_is_ignored(client: AsyncClient, customer_headers, sales_round, ticket_types):
    """A quantity_approved sent by the caller never reaches the stored item."""
    body = payload(sales_round.id, (ticket_types[0].id, 2))
    body["items"][0]["quantity_approved"] = 2
    response = await client.post("/api/v1/purchase-requests", json=body, headers=customer_headers)
    assert response.status_code == 201
    assert response.json()["items"][0]["quantity_approved"] == 0


@pytest.mark.asyncio
async def test_create_without_customer_header_is_rejected(client: AsyncClient, sales_round, ticket_types):
    """Submitting without X-Customer-Id returns 422."""
    response = await client.post(
        "/api/v1/purchase-requests", json=payload(sales_round.id, (ticket_types[0].id, 1))
    )
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body_factory, code, field",
    [
        (lambda r, t: payload(None, (t, 1)), "MISSING_REFERENCE", "sales_round_id"),
        (lambda r, t: payload(r), "EMPTY_REQUEST", "items"),
        (lambda r, t: payload(r, (None, 1)), "MISSING_REFERENCE", "items[0].ticket_type_id"),
        (lambda r, t: payload(r, (t, 0)), "QUANTITY_OUT_OF_BOUNDS", "items[0].quantity_requested"),
        (lambda r, t: payload(r, (t, 5)), "QUANTITY_OUT_OF_BOUNDS", "items"),
    ],
)
async def test_rule_violations_map_to_bad_request(
    client: AsyncClient, customer_headers, sales_round, ticket_types, body_factory, code, field
):
    """Each broken intake rule comes back as 400 with its own code and field."""
    response = await client.post(
        "/api/v1/purchase-requests",
        json=body_factory(sales_round.id, ticket_types[0].id),
        headers=customer_headers,
    )
    assert response.status_code == 400
    data = response.json()
    assert data["code"] == code
    assert data["field"] == field
    assert data["detail"]


@pytest.mark.asyncio
async def test_closed_window_maps_to_bad_request(client: AsyncClient, customer_headers, clock, sales_round, ticket_types):
    """One second after window_end the API answers 400 WINDOW_CLOSED."""
    clock.advance(timedelta(hours=1, seconds=1))
    response = await client.post(
        "/api/v1/purchase-requests",
        json=payload(sales_round.id, (ticket_types[0].id, 1)),
        headers=customer_headers,
    )
    assert response.status_code == 400
    assert response.json()["code"] == "WINDOW_CLOSED"


@pytest.mark.asyncio
async def test_update_purchase_request(client: AsyncClient, customer_headers, sales_round, ticket_types):
    """PUT replaces the item list."""
    created = await client.post(
        "/api/v1/purchase-requests",
        json=payload(sales_round.id, (ticket_types[0].id, 1)),
        headers=customer_headers,
    )
    request_id = created.json()["id"]

    response = await client.put(
        f"/api/v1/purchase-requests/{request_id}",
        json=payload(sales_round.id, (ticket_types[1].id, 3)),
    )
    assert response.status_code == 200
    items = response.json()["items"]
    assert [(i["ticket_type_id"], i["quantity_requested"]) for i in items] == [(ticket_types[1].id, 3)]


@pytest.mark.asyncio
async def test_get_unknown_purchase_request(client: AsyncClient):
    """GET of an unknown id returns 404 NOT_FOUND."""
    response = await client.get("/api/v1/purchase-requests/99999")
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_update_unknown_purchase_request(client: AsyncClient, sales_round, ticket_types):
    """PUT of an unknown id returns 404."""
    response = await client.put(
        "/api/v1/purchase-requests/99999",
        json=payload(sales_round.id, (ticket_types[0].id, 1)),
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_my_purchase_requests(client: AsyncClient, customer_headers, sales_round, ticket_types):
    """GET without an id lists only the caller's requests."""
    await client.post(
        "/api/v1/purchase-requests",
        json=payload(sales_round.id, (ticket_types[0].id, 1)),
        headers=customer_headers,
    )
    await client.post(
        "/api/v1/purchase-requests",
        json=payload(sales_round.id, (ticket_types[0].id, 1)),
        headers={"X-Customer-Id": "someone-else"},
    )

    response = await client.get("/api/v1/purchase-requests", headers=customer_headers)
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["customer_id"] == "customer-1"


@pytest.mark.asyncio
async def test_confirmation_shows_queue_number_after_allocation(
    client: AsyncClient, customer_headers, sales_round, ticket_types
):
    """The confirmation has no queue number until the round is allocated, then number 1."""
    created = await client.post(
        "/api/v1/purchase-requests",
        json=payload(sales_round.id, (ticket_types[1].id, 2)),
        headers=customer_headers,
    )
    request_id = created.json()["id"]

    before = await client.get(f"/api/v1/purchase-requests/{request_id}/confirmation")
    assert before.status_code == 200
    assert before.json()["queue_number"] is None
    assert before.json()["items"][0]["ticket_type_name"] == "Category 2"

    await client.post(f"/api/v1/sales-rounds/{sales_round.id}/allocation")

    after = await client.get(f"/api/v1/purchase-requests/{request_id}/confirmation")
    assert after.json()["queue_number"] == 1
    assert after.json()["total_tickets"] == 2


@pytest.mark.asyncio
async def test_confirmation_of_unknown_request(client: AsyncClient):
    """Confirmation for an unknown id returns 404."""
    response = await client.get("/api/v1/purchase-requests/99999/confirmation")
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Sales round endpoints
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_allocate_and_list_in_queue_order(client: AsyncClient, clock, sales_round, ticket_types):
    """After allocation the round listing comes back ordered 1..N."""
    for customer, quantity in (("a", 1), ("b", 2), ("c", 3), ("d", 5)):
        await client.post(
            "/api/v1/purchase-requests",
            json=payload(sales_round.id, (ticket_types[0].id, quantity)),
            headers={"X-Customer-Id": customer},
        )
    clock.advance(timedelta(hours=1))

    response = await client.post(f"/api/v1/sales-rounds/{sales_round.id}/allocation")
    assert response.status_code == 200
    assert response.json()["request_count"] == 3

    listing = await client.get(f"/api/v1/sales-rounds/{sales_round.id}/purchase-requests")
    data = listing.json()
    assert [r["queue_number"] for r in data] == [1, 2, 3]
    assert {r["customer_id"] for r in data} == {"a", "b", "c"}


@pytest.mark.asyncio
async def test_second_allocation_conflicts(client: AsyncClient, sales_round):
    """Allocating the same round twice returns 409 ALREADY_ALLOCATED."""
    first = await client.post(f"/api/v1/sales-rounds/{sales_round.id}/allocation")
    second = await client.post(f"/api/v1/sales-rounds/{sales_round.id}/allocation")
    assert first.status_code == 200
    assert second.status_code == 409
    assert second.json()["code"] == "ALREADY_ALLOCATED"


@pytest.mark.asyncio
async def test_allocate_unknown_round(client: AsyncClient):
    """Allocating an unknown round returns 404."""
    response = await client.post("/api/v1/sales-rounds/99999/allocation")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    """Health reports the cache as disabled when Redis is switched off."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["cache"] == {"status": "disabled"}
