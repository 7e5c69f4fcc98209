"""Tests for the JSON error envelope."""


def test_unknown_route(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert "error" in resp.json()


def test_body_validation_error(client, admin_headers):
    resp = client.post("/api/events/", json={"name": "X", "startDate": "not-a-date"}, headers=admin_headers)
    assert resp.status_code == 400
    assert "startDate" in resp.json()["error"]


def test_invalid_json_event_data(client, admin_headers):
    resp = client.post("/api/event-data/", content=b"{not json",
                       headers={**admin_headers, "Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Request body must be valid JSON"}
