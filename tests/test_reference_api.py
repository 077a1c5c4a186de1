import pytest

from farrier.domain.reference.service import ReferenceService


@pytest.mark.asyncio
async def test_location_colour_is_normalised(client):
    response = await client.post("/locations", json={"service_location": "Oak Hill", "location_color": "A1B2C3"})
    assert response.status_code == 200
    assert response.json()["location_color"] == "#a1b2c3"

    response = await client.post("/locations", json={"service_location": "River Farm"})
    assert response.json()["location_color"] == "#000000"

    location_id = response.json()["id"]
    response = await client.put(f"/locations/{location_id}", json={"location_color": "not-a-colour"})
    assert response.json()["location_color"] == "#000000"


@pytest.mark.asyncio
async def test_duplicate_location_is_rejected(client):
    await client.post("/locations", json={"service_location": "Oak Hill"})
    response = await client.post("/locations", json={"service_location": "Oak Hill"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_price_upsert_and_lookup(client, db):
    payload = {"product_name": "Full Set", "product_type": "Base Service", "location": "Oak Hill", "amount": "150"}
    first = await client.put("/prices", json=payload)
    second = await client.put("/prices", json={**payload, "amount": "165.50"})

    assert first.json()["id"] == second.json()["id"]
    assert second.json()["amount"] == 165.5
    assert ReferenceService(db).price_for("Full Set", "Oak Hill") == 165.5
    assert ReferenceService(db).price_for("Full Set", "River Farm") is None

    listed = (await client.get("/prices", params={"location": "Oak Hill"})).json()
    assert len(listed) == 1


@pytest.mark.asyncio
async def test_price_validation(client):
    response = await client.put(
        "/prices", json={"product_name": "Pads", "product_type": "Gadget", "location": "Oak Hill", "amount": "5"}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_reference_writes_are_admin_only(client, auth, farrier):
    auth.user = farrier
    assert (await client.post("/locations", json={"service_location": "Oak Hill"})).status_code == 403
    assert (await client.get("/locations")).status_code == 200
