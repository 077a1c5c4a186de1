from datetime import date

import pytest

from farrier.domain.horses.repository import HorseRepository
from farrier.models import HORSE_ACCEPTED, HORSE_PENDING, Horse, Shoeing


@pytest.mark.asyncio
async def test_admin_created_horse_is_accepted(client):
    response = await client.post("/horses", json={"name": "Star", "barn_trainer": "Oak Hill"})
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == HORSE_ACCEPTED
    assert data["composite_name"] == "Star - [Oak Hill]"


@pytest.mark.asyncio
async def test_farrier_created_horse_waits_for_review(client, auth, admin, farrier):
    auth.user = farrier
    response = await client.post("/horses", json={"name": "Colt"})
    horse_id = response.json()["id"]
    assert response.json()["status"] == HORSE_PENDING

    listed = (await client.get("/horses")).json()
    assert listed["total"] == 0

    assert (await client.get("/horses/pending")).status_code == 403

    auth.user = admin
    pending = (await client.get("/horses/pending")).json()
    assert [h["name"] for h in pending] == ["Colt"]
    accepted = await client.post(f"/horses/{horse_id}/accept")
    assert accepted.json()["status"] == HORSE_ACCEPTED


@pytest.mark.asyncio
async def test_search_by_name_or_barn(client, make_horse):
    make_horse("Star", barn="Oak Hill")
    make_horse("Blaze", barn="River Farm")

    data = (await client.get("/horses", params={"search": "river"})).json()

    assert [h["name"] for h in data["items"]] == ["Blaze"]
    assert data["page_size"] == 25


@pytest.mark.asyncio
async def test_service_history_newest_first(client, make_horse, make_shoeing):
    star = make_horse("Star")
    make_shoeing(horse=star, service_date=date(2024, 1, 5), total_cost="80")
    make_shoeing(horse=star, service_date=date(2024, 3, 5), total_cost="$95")

    history = (await client.get(f"/horses/{star.id}/shoeings")).json()

    assert [h["date_of_service"] for h in history] == ["2024-03-05", "2024-01-05"]
    assert [h["total_cost"] for h in history] == ["$95", "$80"]


def test_get_all_horses_reads_every_page(db, admin, monkeypatch):
    monkeypatch.setattr("farrier.domain.horses.repository.BULK_FETCH_SIZE", 2)
    db.add_all([Horse(name=f"Horse {i}", status=HORSE_ACCEPTED) for i in range(5)])
    db.commit()

    assert len(HorseRepository.get_all_horses(db)) == 5


@pytest.mark.asyncio
async def test_missing_horse_is_404(client):
    assert (await client.get("/horses/404")).status_code == 404


@pytest.mark.asyncio
async def test_accepting_horse_marks_its_shoeings_reviewed(client, db, make_horse, make_shoeing):
    colt = make_horse("Colt", status=HORSE_PENDING)
    first = make_shoeing(horse=colt, is_new_horse=True)
    second = make_shoeing(horse=colt, is_new_horse=True)
    other = make_shoeing(horse=make_horse("Filly", status=HORSE_PENDING), is_new_horse=True)

    response = await client.post(f"/horses/{colt.id}/accept")

    assert response.status_code == 200
    db.expire_all()
    assert db.get(Shoeing, first.id).is_new_horse is False
    assert db.get(Shoeing, second.id).is_new_horse is False
    assert db.get(Shoeing, other.id).is_new_horse is True


@pytest.mark.asyncio
async def test_admin_edit_marks_shoeings_reviewed(client, db, make_horse, make_shoeing):
    colt = make_horse("Colt", status=HORSE_PENDING)
    shoeing = make_shoeing(horse=colt, is_new_horse=True)

    response = await client.put(f"/horses/{colt.id}", json={"name": "Star II"})

    assert response.status_code == 200
    assert response.json()["name"] == "Star II"
    db.expire_all()
    assert db.get(Shoeing, shoeing.id).is_new_horse is False


@pytest.mark.asyncio
async def test_farrier_edit_leaves_horse_unreviewed(client, db, auth, farrier, make_horse, make_shoeing):
    colt = make_horse("Colt", status=HORSE_PENDING)
    shoeing = make_shoeing(horse=colt, is_new_horse=True)
    auth.user = farrier

    response = await client.put(f"/horses/{colt.id}", json={"barn_trainer": "River Farm"})

    assert response.status_code == 200
    db.expire_all()
    assert db.get(Shoeing, shoeing.id).is_new_horse is True
