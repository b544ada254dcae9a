import uuid

import pytest

from cargo_ops.models.shipment import ShipmentStatus


async def open_manifest(client, hubs, **overrides):
    origin, destination = hubs
    payload = {
        "type": "AIR",
        "from_hub_id": str(origin.id),
        "to_hub_id": str(destination.id),
        "flight_number": "6e-2041",
        "flight_date": "2026-03-14",
    }
    payload.update(overrides)
    return await client.post("/api/v1/manifests", json=payload)


async def scan(client, manifest_id, raw, **extra):
    return await client.post(
        f"/api/v1/manifests/{manifest_id}/scan",
        json={"raw": raw, "staff_id": "staff-1", **extra},
    )


@pytest.mark.asyncio
async def test_create_manifest(client, hubs):
    response = await open_manifest(client, hubs)
    assert response.status_code == 201
    data = response.json()
    assert data["manifest_no"].startswith("MNF-")
    assert data["status"] == "OPEN"
    assert data["flight_number"] == "6E-2041"
    assert data["total_shipments"] == 0


@pytest.mark.asyncio
async def test_create_air_manifest_requires_flight(client, hubs):
    response = await open_manifest(client, hubs, flight_number=None)
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "FLIGHT_NUMBER_REQUIRED"


@pytest.mark.asyncio
async def test_get_unknown_manifest(client):
    response = await client.get(f"/api/v1/manifests/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_scan_and_list_items(client, hubs, make_shipment):
    manifest_id = (await open_manifest(client, hubs)).json()["id"]
    shipment = await make_shipment(package_count=4, total_weight=22.0)

    response = await scan(client, manifest_id, shipment.awb_number, scan_source="CAMERA")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["duplicate"] is False

    repeat = await scan(client, manifest_id, shipment.awb_number)
    assert repeat.json()["duplicate"] is True
    assert repeat.json()["manifest_item_id"] == body["manifest_item_id"]

    response = await client.get(f"/api/v1/manifests/{manifest_id}/items")
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["awb_number"] == shipment.awb_number
    assert data["items"][0]["scan_source"] == "CAMERA"

    manifest = (await client.get(f"/api/v1/manifests/{manifest_id}")).json()
    assert manifest["total_packages"] == 4
    assert manifest["total_weight"] == 22.0


@pytest.mark.asyncio
async def test_scan_rejection_is_not_an_http_error(client, hubs, make_shipment):
    manifest_id = (await open_manifest(client, hubs)).json()["id"]
    shipment = await make_shipment(status=ShipmentStatus.DELIVERED)

    response = await scan(client, manifest_id, shipment.awb_number)
    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["error"] == "INVALID_STATUS"

    response = await scan(client, manifest_id, shipment.awb_number, validate_status=False)
    assert response.json()["success"] is True


@pytest.mark.asyncio
async def test_scan_malformed_input(client, hubs):
    manifest_id = (await open_manifest(client, hubs)).json()["id"]
    response = await scan(client, manifest_id, "{not json")
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_FORMAT"


@pytest.mark.asyncio
async def test_remove_shipment(client, hubs, make_shipment):
    manifest_id = (await open_manifest(client, hubs)).json()["id"]
    shipment = await make_shipment()
    await scan(client, manifest_id, shipment.awb_number)

    response = await client.delete(f"/api/v1/manifests/{manifest_id}/items/{shipment.id}")
    assert response.status_code == 200
    assert response.json()["total_shipments"] == 0

    response = await client.delete(f"/api/v1/manifests/{manifest_id}/items/{shipment.id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_lifecycle_endpoints(client, hubs, make_shipment):
    manifest_id = (await open_manifest(client, hubs)).json()["id"]
    shipment = await make_shipment()
    await scan(client, manifest_id, shipment.awb_number)

    response = await client.post(f"/api/v1/manifests/{manifest_id}/close", json={"actor": "supervisor"})
    assert response.status_code == 200
    data = response.json()
    assert data["manifest"]["status"] == "CLOSED"
    assert data["manifest"]["closed_by"] == "supervisor"
    assert data["shipments_updated"] == 1
    assert data["tracking_events_created"] == 1

    response = await scan(client, manifest_id, shipment.awb_number)
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "MANIFEST_CLOSED"

    response = await client.post(f"/api/v1/manifests/{manifest_id}/arrive")
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "PRECONDITION_FAILED"

    for action, status in (("depart", "DEPARTED"), ("arrive", "ARRIVED"), ("reconcile", "RECONCILED")):
        response = await client.post(f"/api/v1/manifests/{manifest_id}/{action}")
        assert response.status_code == 200
        assert response.json()["manifest"]["status"] == status

    tracking = (await client.get(f"/api/v1/shipments/{shipment.awb_number}/tracking")).json()
    assert [e["event_code"] for e in tracking["events"]] == [
        "LOADED_FOR_LINEHAUL", "IN_TRANSIT", "RECEIVED_AT_DEST",
    ]


@pytest.mark.asyncio
async def test_lookup_by_label(client, hubs):
    created = (await open_manifest(client, hubs)).json()

    response = await client.post("/api/v1/manifests/lookup", json={"raw": created["manifest_no"]})
    assert response.status_code == 200
    data = response.json()
    assert data["manifest"]["id"] == created["id"]

    response = await client.post("/api/v1/manifests/lookup", json={"raw": data["qr_payload"]})
    assert response.json()["manifest"]["id"] == created["id"]


@pytest.mark.asyncio
async def test_lookup_with_shipment_code(client):
    response = await client.post("/api/v1/manifests/lookup", json={"raw": "TAC48878789"})
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_SCAN_TYPE"
