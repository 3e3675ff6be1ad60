# tests/unit/api/users/test_routes.py
import pytest

from marketplace.core.constants import UserStatus

BASE = "/api/admin/users"


class TestListUsers:
    def test_filters(self, client, auth_headers, customer_user, user_factory, default_roles):
        user_factory(email="seller@example.com", roles=[default_roles["seller"]])
        user_factory(email="frozen@example.com", status=UserStatus.SUSPENDED.value)

        data = client.get(BASE, headers=auth_headers).get_json()
        assert data["total"] == 4

        data = client.get(f"{BASE}?role=seller", headers=auth_headers).get_json()
        assert [u["email"] for u in data["users"]] == ["seller@example.com"]

        data = client.get(f"{BASE}?status=SUSPENDED", headers=auth_headers).get_json()
        assert [u["email"] for u in data["users"]] == ["frozen@example.com"]

        data = client.get(f"{BASE}?q=CUSTOMER@", headers=auth_headers).get_json()
        assert [u["email"] for u in data["users"]] == ["customer@example.com"]

    def test_invalid_status(self, client, auth_headers):
        assert client.get(f"{BASE}?status=GONE", headers=auth_headers).status_code == 400

    def test_password_hash_never_exposed(self, client, auth_headers):
        data = client.get(BASE, headers=auth_headers).get_json()
        assert all("password_hash" not in u for u in data["users"])

    def test_customer_forbidden(self, client, customer_headers):
        assert client.get(BASE, headers=customer_headers).status_code == 403


class TestGetUser:
    def test_includes_permissions(self, client, auth_headers, customer_user):
        data = client.get(f"{BASE}/{customer_user.id}", headers=auth_headers).get_json()

        assert data["email"] == "customer@example.com"
        assert data["permissions"] == ["orders:read", "transactions:read"]

    def test_unknown(self, client, auth_headers):
        response = client.get(f"{BASE}/missing", headers=auth_headers)
        assert response.status_code == 404
        assert response.get_json()["message"] == "User with ID missing not found"


class TestSuspension:
    def test_suspend_and_reactivate(self, client, auth_headers, customer_user):
        response = client.patch(f"{BASE}/{customer_user.id}/suspend", headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()["user"]["status"] == "SUSPENDED"

        response = client.patch(f"{BASE}/{customer_user.id}/suspend", headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "User is already suspended"

        response = client.patch(f"{BASE}/{customer_user.id}/reactivate", headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()["user"]["status"] == "ACTIVE"

        response = client.patch(f"{BASE}/{customer_user.id}/reactivate", headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "User is already active"

    def test_suspended_token_is_rejected(self, client, auth_headers, customer_user, customer_headers):
        client.patch(f"{BASE}/{customer_user.id}/suspend", headers=auth_headers)

        assert client.get("/api/auth/me", headers=customer_headers).status_code == 403

    def test_reactivate_pending_user(self, client, auth_headers, user_factory):
        pending = user_factory(status=UserStatus.PENDING.value)
        response = client.patch(f"{BASE}/{pending.id}/reactivate", headers=auth_headers)
        assert response.status_code == 400


class TestUserRoles:
    def test_replace_roles(self, client, auth_headers, customer_user, default_roles):
        ids = [default_roles["seller"].id, default_roles["customer"].id]

        response = client.put(f"{BASE}/{customer_user.id}/roles", json={"role_ids": ids}, headers=auth_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data["roles"] == ["customer", "seller"]
        assert "products:write" in data["permissions"]

    def test_replace_with_unknown_role(self, client, auth_headers, customer_user):
        response = client.put(
            f"{BASE}/{customer_user.id}/roles", json={"role_ids": ["missing"]}, headers=auth_headers
        )

        assert response.status_code == 404
        assert customer_user.get_role_names() == ["customer"]

    def test_remove_roles(self, client, auth_headers, customer_user, default_roles):
        response = client.delete(
            f"{BASE}/{customer_user.id}/roles",
            json={"role_ids": [default_roles["customer"].id]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.get_json()["roles"] == []
        assert response.get_json()["permissions"] == []

    @pytest.mark.parametrize("payload", [{}, {"role_ids": "admin"}, {"role_ids": [""]}])
    def test_invalid_payload(self, client, auth_headers, customer_user, payload):
        response = client.put(f"{BASE}/{customer_user.id}/roles", json=payload, headers=auth_headers)
        assert response.status_code == 400
