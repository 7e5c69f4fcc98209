"""Tests for User CRUD endpoints."""
from tests.conftest import MARIA_EMAIL, JUAN_EMAIL, auth_headers, user_id_by_email


def _create_user(client, headers, email="lucia@respect.com", name="Lucía", role=None, password="clave123"):
    payload = {"email": email, "password": password, "name": name}
    if role:
        payload["role"] = role
    return client.post("/api/users/", json=payload, headers=headers)


class TestUserCRUD:
    """User create / get / update / list / delete."""

    def test_list_users(self, client, admin_headers):
        resp = client.get("/api/users/", headers=admin_headers)
        assert resp.status_code == 200
        emails = [u["email"] for u in resp.json()]
        assert emails == ["admin@respect.com", MARIA_EMAIL, JUAN_EMAIL]
        assert all("passwordHash" not in u for u in resp.json())

    def test_create_user_defaults_to_employee(self, client, admin_headers):
        resp = _create_user(client, admin_headers)
        assert resp.status_code == 201
        data = resp.json()
        assert data["role"] == "EMPLOYEE"
        assert data["name"] == "Lucía"
        assert "createdAt" in data
        # New user can log in
        assert auth_headers(client, "lucia@respect.com", "clave123")

    def test_create_user_missing_fields(self, client, admin_headers):
        resp = client.post("/api/users/", json={"email": "x@respect.com"}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Email, password and name are required"

    def test_create_user_duplicate_email(self, client, admin_headers):
        resp = _create_user(client, admin_headers, email=MARIA_EMAIL)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Email already registered"

    def test_create_user_invalid_role(self, client, admin_headers):
        resp = _create_user(client, admin_headers, role="SUPERUSER")
        assert resp.status_code == 400

    def test_update_user(self, client, store, admin_headers):
        maria_id = user_id_by_email(store, MARIA_EMAIL)
        resp = client.put(f"/api/users/{maria_id}", json={"name": "María G.", "password": "nueva123"},
                          headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["name"] == "María G."
        assert resp.json()["email"] == MARIA_EMAIL
        assert auth_headers(client, MARIA_EMAIL, "nueva123")

    def test_update_user_not_found(self, client, admin_headers):
        resp = client.put("/api/users/missing", json={"name": "X"}, headers=admin_headers)
        assert resp.status_code == 404
        assert resp.json() == {"error": "User not found"}

    def test_delete_user(self, client, store, admin_headers):
        juan_id = user_id_by_email(store, JUAN_EMAIL)
        resp = client.delete(f"/api/users/{juan_id}", headers=admin_headers)
        assert resp.status_code == 200
        assert client.get(f"/api/users/{juan_id}", headers=admin_headers).status_code == 404
        assert client.delete(f"/api/users/{juan_id}", headers=admin_headers).status_code == 404


class TestUserAccess:

    def test_employee_can_read_self_only(self, client, store, maria_headers):
        maria_id = user_id_by_email(store, MARIA_EMAIL)
        juan_id = user_id_by_email(store, JUAN_EMAIL)
        assert client.get(f"/api/users/{maria_id}", headers=maria_headers).status_code == 200
        assert client.get(f"/api/users/{juan_id}", headers=maria_headers).status_code == 403

    def test_employee_cannot_manage_users(self, client, store, maria_headers):
        juan_id = user_id_by_email(store, JUAN_EMAIL)
        assert client.get("/api/users/", headers=maria_headers).status_code == 403
        assert _create_user(client, maria_headers).status_code == 403
        assert client.put(f"/api/users/{juan_id}", json={"name": "X"}, headers=maria_headers).status_code == 403
        assert client.delete(f"/api/users/{juan_id}", headers=maria_headers).status_code == 403

    def test_requires_token(self, client):
        assert client.get("/api/users/").status_code == 401
