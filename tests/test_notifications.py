import asyncio

import pytest

from farrier.domain.notifications.stream import notification_events
from farrier.models import Notification
from farrier.services.notification_hub import NotificationHub


@pytest.fixture
def inbox(db, admin, farrier):
    rows = [
        Notification(recipient_id=admin.id, creator_id=farrier.id, message=f"note {i}", type="mention")
        for i in range(3)
    ]
    rows.append(Notification(recipient_id=farrier.id, message="not yours", type="mention"))
    db.add_all(rows)
    db.commit()
    return rows


@pytest.mark.asyncio
async def test_list_and_unread_count(client, inbox):
    response = await client.get("/notifications")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["page_size"] == 25
    assert data["items"][0]["creator_name"] == "Sam Smith"

    assert (await client.get("/notifications/unread-count")).json() == {"unread": 3}


@pytest.mark.asyncio
async def test_mark_read_and_mark_all_read(client, inbox):
    response = await client.post(f"/notifications/{inbox[0].id}/read")
    assert response.status_code == 200
    assert response.json()["read"] is True
    assert (await client.get("/notifications/unread-count")).json() == {"unread": 2}

    unread_only = (await client.get("/notifications", params={"include_read": False})).json()
    assert unread_only["total"] == 2

    assert (await client.post("/notifications/read-all")).json() == {"updated": 2}
    assert (await client.get("/notifications/unread-count")).json() == {"unread": 0}


@pytest.mark.asyncio
async def test_delete_is_soft(client, db, inbox):
    response = await client.delete(f"/notifications/{inbox[1].id}")
    assert response.status_code == 200

    assert (await client.get("/notifications")).json()["total"] == 2
    db.refresh(inbox[1])
    assert inbox[1].is_deleted is True


@pytest.mark.asyncio
async def test_cannot_touch_someone_elses_notification(client, inbox):
    response = await client.post(f"/notifications/{inbox[3].id}/read")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_stream_yields_published_notifications_and_heartbeats():
    hub = NotificationHub()
    events = notification_events(hub, "admin-1", heartbeat_seconds=0.05)

    assert await events.__anext__() == ": connected\n\n"
    assert hub.subscriber_count("admin-1") == 1

    assert await events.__anext__() == ": heartbeat\n\n"

    hub.publish("admin-1", {"id": 7, "message": "hello"})
    event = await asyncio.wait_for(events.__anext__(), timeout=1)
    assert event.startswith("event: notification\n")
    assert '"message": "hello"' in event

    await events.aclose()
    assert hub.subscriber_count() == 0


@pytest.mark.asyncio
async def test_stream_stops_when_client_disconnects():
    hub = NotificationHub()

    async def disconnected():
        return True

    events = [e async for e in notification_events(hub, "admin-1", 1, is_disconnected=disconnected)]

    assert events == [": connected\n\n"]
    assert hub.subscriber_count() == 0


def test_publish_to_full_queue_drops_event():
    hub = NotificationHub(max_queue_size=1)
    hub.subscribe("u1")
    assert hub.publish("u1", {"id": 1}) == 1
    assert hub.publish("u1", {"id": 2}) == 0
    assert hub.publish("nobody", {"id": 3}) == 0
