"""Tests for Event CRUD, attributes and provider associations."""
from tests.conftest import seeded_event, seeded_attribute


def _make_event(client, headers, name="Feria", **extra):
    return client.post("/api/events/", json={"name": name, **extra}, headers=headers)


class TestSeededEvent:

    def test_admin_sees_seeded_event(self, client, admin_headers):
        """Login as admin -> GET /events returns EtMday with 3 attributes, 1 provider, 0 data."""
        resp = client.get("/api/events/", headers=admin_headers)
        assert resp.status_code == 200
        events = resp.json()
        assert len(events) == 1
        event = events[0]
        assert event["name"] == "EtMday"
        assert sorted(a["name"] for a in event["attributes"]) == ["baños", "camiones", "generadores"]
        assert len(event["providers"]) == 1
        assert event["providers"][0]["provider"]["name"] == "Proveedor de Energía Sostenible"
        assert event["_count"] == {"eventData": 0}
        assert event["dynamicFields"]["capacidad"] == 5000

    def test_employees_can_list_events(self, client, maria_headers):
        assert client.get("/api/events/", headers=maria_headers).status_code == 200


class TestEventCRUD:

    def test_create_event(self, client, admin_headers):
        resp = _make_event(client, admin_headers, description="Anual", startDate="2025-03-01",
                           dynamicFields={"sede": "Norte"})
        assert resp.status_code == 201
        data = resp.json()
        assert data["name"] == "Feria"
        assert data["startDate"].startswith("2025-03-01T00:00:00")
        assert data["dynamicFields"] == {"sede": "Norte"}

    def test_create_event_requires_name(self, client, admin_headers):
        resp = client.post("/api/events/", json={"description": "no name"}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Event name is required"}

    def test_employee_cannot_create_event(self, client, maria_headers):
        assert _make_event(client, maria_headers).status_code == 403

    def test_get_event_detail(self, client, admin_headers):
        event_id = seeded_event(client, admin_headers)["id"]
        resp = client.get(f"/api/events/{event_id}", headers=admin_headers)
        assert resp.status_code == 200
        assert len(resp.json()["attributes"]) == 3
        assert len(resp.json()["providers"]) == 1

    def test_get_event_not_found(self, client, admin_headers):
        resp = client.get("/api/events/missing", headers=admin_headers)
        assert resp.status_code == 404
        assert resp.json() == {"error": "Event not found"}

    def test_partial_update(self, client, admin_headers):
        event = _make_event(client, admin_headers, description="Anual").json()
        resp = client.put(f"/api/events/{event['id']}", json={"name": "Feria 2025"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["name"] == "Feria 2025"
        assert resp.json()["description"] == "Anual"

        resp = client.put(f"/api/events/{event['id']}", json={"description": None}, headers=admin_headers)
        assert resp.json()["description"] is None
        assert resp.json()["name"] == "Feria 2025"

    def test_update_missing_event(self, client, admin_headers):
        assert client.put("/api/events/missing", json={"name": "X"}, headers=admin_headers).status_code == 404

    def test_delete_event_cascades(self, client, admin_headers):
        event = seeded_event(client, admin_headers)
        attribute_id = event["attributes"][0]["id"]
        provider_id = event["providers"][0]["provider"]["id"]

        resp = client.delete(f"/api/events/{event['id']}", headers=admin_headers)
        assert resp.status_code == 200

        assert client.get(f"/api/events/{event['id']}", headers=admin_headers).status_code == 404
        assert client.get(f"/api/permissions/attribute/{attribute_id}", headers=admin_headers).status_code == 404
        provider = client.get(f"/api/providers/{provider_id}", headers=admin_headers).json()
        assert provider["events"] == []


class TestAttributes:

    def test_create_attribute(self, client, admin_headers):
        event = _make_event(client, admin_headers).json()
        resp = client.post(f"/api/events/{event['id']}/attributes",
                           json={"name": "vallas", "dataType": "NUMBER", "allowImage": True},
                           headers=admin_headers)
        assert resp.status_code == 201
        data = resp.json()
        assert data["eventId"] == event["id"]
        assert data["dataType"] == "NUMBER"
        assert data["allowImage"] is True

    def test_duplicate_name_same_event_conflicts(self, client, admin_headers):
        event_id = seeded_event(client, admin_headers)["id"]
        resp = client.post(f"/api/events/{event_id}/attributes",
                           json={"name": "generadores", "dataType": "TEXT"}, headers=admin_headers)
        assert resp.status_code == 400
        assert "already exists" in resp.json()["error"]

    def test_same_name_other_event_succeeds(self, client, admin_headers):
        event = _make_event(client, admin_headers).json()
        resp = client.post(f"/api/events/{event['id']}/attributes",
                           json={"name": "generadores", "dataType": "TEXT"}, headers=admin_headers)
        assert resp.status_code == 201

    def test_attribute_requires_name_and_type(self, client, admin_headers):
        event_id = seeded_event(client, admin_headers)["id"]
        resp = client.post(f"/api/events/{event_id}/attributes", json={"name": "x"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_attribute_on_missing_event(self, client, admin_headers):
        resp = client.post("/api/events/missing/attributes",
                           json={"name": "x", "dataType": "TEXT"}, headers=admin_headers)
        assert resp.status_code == 404

    def test_update_and_delete_attribute(self, client, admin_headers):
        event_id = seeded_event(client, admin_headers)["id"]
        attr = seeded_attribute(client, admin_headers, "camiones")

        resp = client.put(f"/api/events/{event_id}/attributes/{attr['id']}",
                          json={"allowImage": False, "description": None}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["allowImage"] is False
        assert resp.json()["description"] is None
        assert resp.json()["name"] == "camiones"

        resp = client.delete(f"/api/events/{event_id}/attributes/{attr['id']}", headers=admin_headers)
        assert resp.status_code == 200
        names = [a["name"] for a in seeded_event(client, admin_headers)["attributes"]]
        assert "camiones" not in names

    def test_attribute_must_belong_to_event(self, client, admin_headers):
        other = _make_event(client, admin_headers).json()
        attr = seeded_attribute(client, admin_headers, "camiones")
        resp = client.delete(f"/api/events/{other['id']}/attributes/{attr['id']}", headers=admin_headers)
        assert resp.status_code == 404

    def test_employee_cannot_manage_attributes(self, client, admin_headers, juan_headers):
        event_id = seeded_event(client, admin_headers)["id"]
        resp = client.post(f"/api/events/{event_id}/attributes",
                           json={"name": "x", "dataType": "TEXT"}, headers=juan_headers)
        assert resp.status_code == 403


class TestEventProviders:

    def test_associate_and_disassociate(self, client, admin_headers):
        event = _make_event(client, admin_headers).json()
        provider = client.post("/api/providers/", json={"name": "Toldos SL"}, headers=admin_headers).json()

        resp = client.post(f"/api/events/{event['id']}/providers", json={"providerId": provider["id"]},
                           headers=admin_headers)
        assert resp.status_code == 201
        assert resp.json()["provider"]["name"] == "Toldos SL"

        dup = client.post(f"/api/events/{event['id']}/providers", json={"providerId": provider["id"]},
                          headers=admin_headers)
        assert dup.status_code == 400
        assert dup.json()["error"] == "The provider is already associated with this event"

        resp = client.delete(f"/api/events/{event['id']}/providers/{provider['id']}", headers=admin_headers)
        assert resp.status_code == 200
        again = client.delete(f"/api/events/{event['id']}/providers/{provider['id']}", headers=admin_headers)
        assert again.status_code == 404

    def test_associate_requires_provider_id(self, client, admin_headers):
        event = _make_event(client, admin_headers).json()
        resp = client.post(f"/api/events/{event['id']}/providers", json={}, headers=admin_headers)
        assert resp.status_code == 400

    def test_associate_unknown_provider(self, client, admin_headers):
        event = _make_event(client, admin_headers).json()
        resp = client.post(f"/api/events/{event['id']}/providers", json={"providerId": "missing"},
                           headers=admin_headers)
        assert resp.status_code == 404
