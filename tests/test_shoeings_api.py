from decimal import Decimal

import pytest

from farrier.models import HORSE_PENDING, SHOEING_PENDING, Price, Shoeing


@pytest.fixture
def price_list(db):
    db.add_all(
        [
            Price(product_name="Full Set", product_type="Base Service", location="Oak Hill", amount=Decimal("150")),
            Price(product_name="Pads", product_type="Add-on", location="Oak Hill", amount=Decimal("20")),
            Price(product_name="Clips", product_type="Add-on", location="Oak Hill", amount=Decimal("7.50")),
            Price(product_name="Full Set", product_type="Base Service", location="River Farm", amount=Decimal("170")),
        ]
    )
    db.commit()


@pytest.mark.asyncio
async def test_create_computes_costs_from_location_prices(client, auth, farrier, price_list, make_horse):
    star = make_horse("Star", barn="Oak Hill")
    auth.user = farrier

    response = await client.post(
        "/shoeings",
        json={
            "horse_id": star.id,
            "date_of_service": "2024-05-01",
            "location": "Oak Hill",
            "base_service": "Full Set",
            "front_add_ons": "Pads, Clips",
            "hind_add_ons": ["Pads"],
            "description": "Front pads @[Star](1)",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["horse_name"] == "Star - [Oak Hill]"
    assert data["cost_of_service"] == "150.00"
    assert data["cost_of_front_add_ons"] == "27.50"
    assert data["cost_of_hind_add_ons"] == "20.00"
    assert data["total_cost"] == "197.50"
    assert data["front_add_ons"] == "Pads, Clips"
    assert data["status"] == SHOEING_PENDING
    assert data["is_new_horse"] is False
    assert data["user_id"] == farrier.id


@pytest.mark.asyncio
async def test_new_horse_flag_follows_horse_status(client, price_list, make_horse):
    colt = make_horse("Colt", status=HORSE_PENDING)
    response = await client.post(
        "/shoeings",
        json={"horse_id": colt.id, "date_of_service": "2024-05-01", "location": "River Farm", "base_service": "Full Set"},
    )
    assert response.json()["is_new_horse"] is True
    assert response.json()["total_cost"] == "170.00"


@pytest.mark.asyncio
async def test_create_requires_horse_and_date(client, make_horse):
    response = await client.post("/shoeings", json={"horse_id": 1, "location": "Oak Hill"})
    assert response.status_code == 422

    response = await client.post(
        "/shoeings", json={"horse_id": 999, "date_of_service": "2024-05-01", "location": "Oak Hill"}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_filters(client, make_horse, make_shoeing):
    star = make_horse("Star")
    blaze = make_horse("Blaze")
    make_shoeing(horse=star)
    make_shoeing(horse=blaze, status="completed")

    pending = (await client.get("/shoeings", params={"status": "pending"})).json()
    assert [s["horse_id"] for s in pending["items"]] == [star.id]

    by_name = (await client.get("/shoeings", params={"search": "blaze"})).json()
    assert [s["horse_id"] for s in by_name["items"]] == [blaze.id]


@pytest.mark.asyncio
async def test_delete_requires_confirmation(client, db, make_horse, make_shoeing):
    shoeing = make_shoeing(horse=make_horse())

    response = await client.delete(f"/shoeings/{shoeing.id}")
    assert response.status_code == 400
    assert db.query(Shoeing).count() == 1

    response = await client.delete(f"/shoeings/{shoeing.id}", params={"confirm": "true"})
    assert response.status_code == 200
    assert db.query(Shoeing).count() == 0


@pytest.mark.asyncio
async def test_delete_is_admin_only(client, auth, farrier, make_horse, make_shoeing):
    shoeing = make_shoeing(horse=make_horse())
    auth.user = farrier
    response = await client.delete(f"/shoeings/{shoeing.id}", params={"confirm": "true"})
    assert response.status_code == 403
