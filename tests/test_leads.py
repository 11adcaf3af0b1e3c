"""API tests for lead capture, admin CRM updates and alert hand-off."""

import pytest

from helpers import register
from propertyhub.services.notification_dispatcher import NotificationDispatcher


def _lead_payload(**overrides) -> dict:
    payload = {
        "name": "Meera Iyer",
        "email": "meera@example.com",
        "phone": "+91 9822000000",
        "message": "Please call me back.",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def admin(client_factory):
    c = client_factory()
    await register(c, "admin@example.com", role="admin")
    return c


class TestCreateLead:
    async def test_contact_lead_defaults(self, client, dispatcher):
        resp = await client.post("/api/leads", json=_lead_payload())
        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] == "new"
        assert body["property_id"] is None
        assert body["lead_type"] == "contact"
        assert body["created_at"] == body["updated_at"]
        assert dispatcher.queue.qsize() == 1

    async def test_property_inquiry(self, client, dispatcher, sent_notifications,
                                    make_user, make_property, db_session):
        prop = await make_property(await make_user(), title="Lake View Villa")
        await db_session.commit()

        dispatcher.start()
        try:
            resp = await client.post("/api/leads", json=_lead_payload(property_id=prop.id, budget=7_500_000))
            await dispatcher.drain()
        finally:
            await dispatcher.stop()

        assert resp.status_code == 201
        body = resp.json()
        assert body["lead_type"] == "property_inquiry"
        assert body["property_id"] == prop.id
        assert body["budget"] == 7_500_000

        assert len(sent_notifications) == 1
        alert = sent_notifications[0]
        assert alert["id"] == body["id"]
        assert alert["property_title"] == "Lake View Villa"
        assert alert["lead_type"] == "property_inquiry"

    async def test_explicit_lead_type_wins(self, client):
        resp = await client.post(
            "/api/leads",
            json=_lead_payload(lead_type="interior_design", requirements="Modular kitchen", budget=800_000),
        )
        assert resp.status_code == 201
        assert resp.json()["lead_type"] == "interior_design"
        assert resp.json()["requirements"] == "Modular kitchen"

    async def test_client_cannot_choose_status(self, client):
        resp = await client.post("/api/leads", json=_lead_payload(status="closed_won"))
        assert resp.json()["status"] == "new"

    @pytest.mark.parametrize("blank", ["", "   "])
    async def test_blank_property_id_is_a_contact_lead(self, client, blank):
        resp = await client.post("/api/leads", json=_lead_payload(property_id=blank))
        assert resp.status_code == 201
        assert resp.json()["property_id"] is None
        assert resp.json()["lead_type"] == "contact"

    async def test_unknown_property_rejected(self, client, dispatcher):
        resp = await client.post("/api/leads", json=_lead_payload(property_id="missing"))
        assert resp.status_code == 400
        assert dispatcher.queue.empty()

    @pytest.mark.parametrize("overrides", [
        {"email": "not-an-email"},
        {"phone": ""},
        {"name": ""},
        {"message": ""},
        {"lead_type": "spam"},
        {"budget": -5},
    ])
    async def test_invalid_payload(self, client, overrides):
        resp = await client.post("/api/leads", json=_lead_payload(**overrides))
        assert resp.status_code == 400

    async def test_failing_channel_does_not_affect_response(self, app, client):
        async def _boom(data):
            raise RuntimeError("smtp down")

        failing = NotificationDispatcher(channels=(_boom,))
        app.state.notifications = failing
        failing.start()
        try:
            resp = await client.post("/api/leads", json=_lead_payload())
            await failing.drain()
        finally:
            await failing.stop()
        assert resp.status_code == 201
        assert failing.running is False

    async def test_full_queue_still_accepts_lead(self, app, client):
        app.state.notifications = NotificationDispatcher(maxsize=1, channels=())
        assert (await client.post("/api/leads", json=_lead_payload())).status_code == 201
        assert (await client.post("/api/leads", json=_lead_payload())).status_code == 201
        assert app.state.notifications.queue.qsize() == 1

    async def test_without_dispatcher(self, app, client):
        app.state.notifications = None
        assert (await client.post("/api/leads", json=_lead_payload())).status_code == 201


class TestListLeads:
    async def test_newest_first_with_property(self, admin, make_user, make_property, make_lead, db_session):
        prop = await make_property(await make_user(), title="Office Tower")
        old = await make_lead(created_offset_minutes=0)
        new = await make_lead(property_id=prop.id, created_offset_minutes=5)
        await db_session.commit()

        items = (await admin.get("/api/leads")).json()
        assert [i["id"] for i in items] == [new.id, old.id]
        assert items[0]["property"]["title"] == "Office Tower"
        assert items[1]["property"] is None

    async def test_lead_survives_property_delete(self, client_factory, admin):
        owner = client_factory()
        await register(owner, "owner@example.com")
        prop = (await owner.post("/api/properties", json={
            "title": "Shop", "description": "Corner shop", "property_type": "commercial",
            "price_min": 90_000, "location": "MG Road", "city": "Bengaluru",
            "state": "Karnataka", "area": 400,
        })).json()
        lead = (await client_factory().post("/api/leads", json=_lead_payload(property_id=prop["id"]))).json()

        assert (await owner.delete(f"/api/properties/{prop['id']}")).status_code == 200

        items = (await admin.get("/api/leads")).json()
        assert items[0]["id"] == lead["id"]
        assert items[0]["property_id"] is None
        assert items[0]["property"] is None


class TestUpdateLead:
    async def test_status_can_move_freely(self, admin, make_lead, db_session):
        lead = await make_lead()
        await db_session.commit()

        for status in ("closed_won", "new", "qualified", "closed_lost", "new"):
            resp = await admin.patch(f"/api/leads/{lead.id}", json={"status": status})
            assert resp.status_code == 200
            assert resp.json()["status"] == status
        assert resp.json()["name"] == "Asha"

    async def test_updated_at_advances(self, admin, make_lead, db_session):
        lead = await make_lead()
        await db_session.commit()
        body = (await admin.patch(f"/api/leads/{lead.id}", json={"status": "contacted"})).json()
        assert body["updated_at"] > body["created_at"]

    async def test_missing_lead(self, admin):
        resp = await admin.patch("/api/leads/missing", json={"status": "closed_won"})
        assert resp.status_code == 404

    async def test_invalid_values(self, admin, make_lead, db_session):
        lead = await make_lead()
        await db_session.commit()
        assert (await admin.patch(f"/api/leads/{lead.id}", json={"status": "won"})).status_code == 400
        assert (await admin.patch(f"/api/leads/{lead.id}", json={"status": None})).status_code == 400
        assert (await admin.patch(f"/api/leads/{lead.id}", json={"property_id": "missing"})).status_code == 400

    async def test_relink_and_unlink_property(self, admin, make_lead, make_user, make_property, db_session):
        prop = await make_property(await make_user())
        lead = await make_lead()
        await db_session.commit()

        body = (await admin.patch(f"/api/leads/{lead.id}", json={"property_id": prop.id})).json()
        assert body["property_id"] == prop.id
        body = (await admin.patch(f"/api/leads/{lead.id}", json={"property_id": None})).json()
        assert body["property_id"] is None

    async def test_blank_property_id_unlinks(self, admin, make_lead, make_user, make_property, db_session):
        prop = await make_property(await make_user())
        lead = await make_lead(property_id=prop.id)
        await db_session.commit()

        resp = await admin.patch(f"/api/leads/{lead.id}", json={"property_id": ""})
        assert resp.status_code == 200
        assert resp.json()["property_id"] is None

    async def test_requires_admin(self, client_factory, make_lead, db_session):
        lead = await make_lead()
        await db_session.commit()

        anon = client_factory()
        assert (await anon.patch(f"/api/leads/{lead.id}", json={"status": "closed_won"})).status_code == 401
        broker = client_factory()
        await register(broker, "broker@example.com")
        assert (await broker.patch(f"/api/leads/{lead.id}", json={"status": "closed_won"})).status_code == 403
