# tests/unit/api/vendors/test_routes.py
import pytest

from marketplace.models import Vendor

BASE = "/api/admin/vendors"


@pytest.fixture
def vendors(app):
    return [
        Vendor.create(name="Acme", email="acme@example.com", country="US"),
        Vendor.create(name="Bolt Parts", country="DE"),
        Vendor.create(name="Crate Co", country="US", is_active=False),
    ]


class TestVendorRoutes:
    def test_create(self, client, auth_headers):
        response = client.post(
            BASE,
            json={
                "name": "Acme",
                "email": "Sales@Acme.COM",
                "website": "",
                "country": "US",
                "tax_id": "US-123",
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.get_json()
        assert data["email"] == "sales@acme.com"
        assert data["website"] is None
        assert data["is_active"] is True

    @pytest.mark.parametrize("payload", [
        {"name": "Acme"},
        {"name": "Other", "email": "acme@example.com"},
    ])
    def test_conflicts(self, client, auth_headers, vendors, payload):
        assert client.post(BASE, json=payload, headers=auth_headers).status_code == 409

    @pytest.mark.parametrize("payload", [
        {},
        {"name": ""},
        {"name": "Acme", "email": "nope"},
        {"name": "Acme", "website": "not a url"},
    ])
    def test_invalid_payload(self, client, auth_headers, payload):
        assert client.post(BASE, json=payload, headers=auth_headers).status_code == 400

    def test_list_filters(self, client, auth_headers, vendors):
        data = client.get(f"{BASE}?country=US", headers=auth_headers).get_json()
        assert sorted(v["name"] for v in data["vendors"]) == ["Acme", "Crate Co"]

        data = client.get(f"{BASE}?is_active=false", headers=auth_headers).get_json()
        assert [v["name"] for v in data["vendors"]] == ["Crate Co"]

        data = client.get(f"{BASE}?search=bolt", headers=auth_headers).get_json()
        assert [v["name"] for v in data["vendors"]] == ["Bolt Parts"]
        assert data["total"] == 1

    @pytest.mark.parametrize("term, expected", [
        ("%", ["100% Cotton"]),
        ("_", ["Snake_Case Ltd"]),
        ("e_c", ["Snake_Case Ltd"]),
        ("0%", ["100% Cotton"]),
        ("\\", ["Back\\Slash"]),
    ])
    def test_search_wildcards_match_literally(self, client, auth_headers, vendors, term, expected):
        Vendor.create(name="100% Cotton")
        Vendor.create(name="Snake_Case Ltd")
        Vendor.create(name="Back\\Slash")

        data = client.get(BASE, query_string={"search": term}, headers=auth_headers).get_json()

        assert [v["name"] for v in data["vendors"]] == expected

    def test_active(self, client, auth_headers, vendors):
        data = client.get(f"{BASE}/active", headers=auth_headers).get_json()
        assert [v["name"] for v in data["vendors"]] == ["Acme", "Bolt Parts"]

    def test_by_country(self, client, auth_headers, vendors):
        data = client.get(f"{BASE}/country/DE", headers=auth_headers).get_json()
        assert [v["name"] for v in data["vendors"]] == ["Bolt Parts"]

    def test_get(self, client, auth_headers, vendors):
        response = client.get(f"{BASE}/{vendors[0].id}", headers=auth_headers)
        assert response.get_json()["name"] == "Acme"

    def test_update(self, client, auth_headers, vendors):
        response = client.put(
            f"{BASE}/{vendors[0].id}", json={"phone": "+1 555 0100"}, headers=auth_headers
        )

        assert response.status_code == 200
        data = response.get_json()
        assert data["phone"] == "+1 555 0100"
        assert data["name"] == "Acme"
        assert data["is_active"] is True

    def test_update_inactive_vendor_keeps_status(self, client, auth_headers, vendors):
        response = client.put(f"{BASE}/{vendors[2].id}", json={"notes": "paused"}, headers=auth_headers)
        assert response.get_json()["is_active"] is False

    def test_update_name_clash(self, client, auth_headers, vendors):
        response = client.put(f"{BASE}/{vendors[1].id}", json={"name": "Acme"}, headers=auth_headers)
        assert response.status_code == 409

    def test_toggle_status(self, client, auth_headers, vendors):
        url = f"{BASE}/{vendors[0].id}/toggle-status"

        assert client.patch(url, headers=auth_headers).get_json()["is_active"] is False
        assert client.patch(url, headers=auth_headers).get_json()["is_active"] is True

    def test_delete(self, client, auth_headers, vendors):
        vendor_id = vendors[1].id
        response = client.delete(f"{BASE}/{vendor_id}", headers=auth_headers)

        assert response.status_code == 200
        assert Vendor.get_by_id(vendor_id) is None
        assert client.get(f"{BASE}/{vendor_id}", headers=auth_headers).status_code == 404

    def test_seller_has_no_vendor_access(self, client, default_roles, user_factory, token_headers):
        headers = token_headers(user_factory(roles=[default_roles["seller"]]))
        assert client.get(BASE, headers=headers).status_code == 403

    def test_vendor_manager_role(self, client, role_factory, user_factory, token_headers, vendors):
        role = role_factory("vendor-manager", permissions=["vendors:read", "vendors:write"])
        headers = token_headers(user_factory(roles=[role]))

        assert client.get(BASE, headers=headers).status_code == 200
        assert client.patch(f"{BASE}/{vendors[0].id}/toggle-status", headers=headers).status_code == 200
        assert client.delete(f"{BASE}/{vendors[0].id}", headers=headers).status_code == 403
