# tests/unit/api/feature_flags/test_routes.py
import pytest

from marketplace.extensions import cache
from marketplace.models import FeatureFlag
from marketplace.core.feature_flags import ALL_FLAGS_CACHE_KEY, CACHE_PREFIX, is_feature_enabled

BASE = "/api/admin/features-flags"


class TestCreateFlag:
    def test_create_defaults(self, client, auth_headers):
        response = client.post(
            BASE, json={"key": "dark-mode", "display_name": "Dark Mode"}, headers=auth_headers
        )

        assert response.status_code == 201
        data = response.get_json()
        assert data["key"] == "dark-mode"
        assert data["is_enabled"] is False
        assert data["scope"] == "global"

    def test_create_role_scoped(self, client, auth_headers):
        response = client.post(
            BASE,
            json={
                "key": "reports.v2",
                "display_name": "Reports v2",
                "is_enabled": True,
                "scope": "role",
                "rules": {"roleNames": ["seller"]},
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert is_feature_enabled("reports.v2", user_id="u1", role_names=["seller"]) is True
        assert is_feature_enabled("reports.v2", user_id="u1", role_names=["customer"]) is False

    def test_create_clears_cached_list(self, client, auth_headers, customer_headers):
        assert client.get("/api/auth/me/features-flags/enabled", headers=customer_headers).get_json()["features"] == []

        client.post(
            BASE, json={"key": "dark-mode", "display_name": "Dark Mode", "is_enabled": True}, headers=auth_headers
        )

        features = client.get("/api/auth/me/features-flags/enabled", headers=customer_headers).get_json()["features"]
        assert features == ["dark-mode"]

    def test_duplicate_key(self, client, auth_headers, make_flag):
        make_flag("dark-mode")
        response = client.post(BASE, json={"key": "dark-mode", "display_name": "Again"}, headers=auth_headers)
        assert response.status_code == 409

    @pytest.mark.parametrize("payload", [
        {"key": "-leading-dash", "display_name": "X"},
        {"key": "has space", "display_name": "X"},
        {"key": "ok", "display_name": "X", "scope": "team"},
        {"key": "ok", "display_name": "X", "rollout_percentage": 101},
        {"key": "ok", "display_name": "X", "rollout_percentage": -1},
        {"key": "ok"},
    ])
    def test_invalid_payload(self, client, auth_headers, payload):
        assert client.post(BASE, json=payload, headers=auth_headers).status_code == 400

    @pytest.mark.parametrize("payload, field", [
        ({"scope": "user", "rules": {"userIds": 5}}, "rules"),
        ({"scope": "user", "rules": {"userIds": [True]}}, "rules"),
        ({"scope": "user"}, "rules"),
        ({"scope": "role", "rules": {"roleNames": "customer"}}, "rules"),
        ({"scope": "role", "rules": {"roleNames": [1, 2]}}, "rules"),
        ({"scope": "role"}, "rules"),
        ({"scope": "percentage"}, "rollout_percentage"),
        ({"scope": "percentage", "rollout_percentage": None}, "rollout_percentage"),
    ])
    def test_rules_must_fit_scope(self, client, auth_headers, payload, field):
        response = client.post(
            BASE, json={"key": "scoped", "display_name": "Scoped", **payload}, headers=auth_headers
        )

        assert response.status_code == 400
        assert field in response.get_json()["errors"]
        assert FeatureFlag.find_by_key("scoped") is None

    def test_global_flag_accepts_free_form_rules(self, client, auth_headers):
        response = client.post(
            BASE,
            json={"key": "banner", "display_name": "Banner", "rules": {"color": "red"}},
            headers=auth_headers,
        )
        assert response.status_code == 201

    def test_customer_cannot_create(self, client, customer_headers):
        response = client.post(BASE, json={"key": "x", "display_name": "X"}, headers=customer_headers)
        assert response.status_code == 403


class TestListFlags:
    def test_filters(self, client, auth_headers, make_flag):
        make_flag("one", is_enabled=True)
        make_flag("two", is_enabled=False, scope="percentage", rollout_percentage=10)
        make_flag("three", is_enabled=True, scope="user", rules={"userIds": []})

        enabled = client.get(f"{BASE}?is_enabled=true", headers=auth_headers).get_json()
        assert sorted(f["key"] for f in enabled["feature_flags"]) == ["one", "three"]

        by_scope = client.get(f"{BASE}?scope=percentage", headers=auth_headers).get_json()
        assert [f["key"] for f in by_scope["feature_flags"]] == ["two"]

        searched = client.get(f"{BASE}?q=thr", headers=auth_headers).get_json()
        assert searched["total"] == 1

    def test_seed(self, client, auth_headers, make_flag):
        make_flag("new-checkout", is_enabled=True)

        first = client.post(f"{BASE}/seed", headers=auth_headers).get_json()
        second = client.post(f"{BASE}/seed", headers=auth_headers).get_json()

        assert sorted(first["created"]) == ["advanced-analytics", "beta-features", "gradual-rollout-feature"]
        assert second["created"] == []
        assert FeatureFlag.find_by_key("new-checkout").is_enabled is True


class TestUpdateFlag:
    def test_toggle_invalidates_cache(self, client, auth_headers, make_flag):
        flag = make_flag("dark-mode", is_enabled=False)
        assert is_feature_enabled("dark-mode") is False

        response = client.patch(f"{BASE}/{flag.id}/toggle", json={"is_enabled": True}, headers=auth_headers)

        assert response.status_code == 200
        assert response.get_json()["is_enabled"] is True
        assert is_feature_enabled("dark-mode") is True

    def test_toggle_requires_value(self, client, auth_headers, make_flag):
        flag = make_flag("dark-mode")
        assert client.patch(f"{BASE}/{flag.id}/toggle", json={}, headers=auth_headers).status_code == 400

    def test_update_rules(self, client, auth_headers, make_flag, customer_user, customer_headers):
        flag = make_flag("beta", is_enabled=True, scope="user", rules={"userIds": []})
        url = "/api/auth/me/features-flags/beta/check"
        assert client.get(url, headers=customer_headers).get_json()["enabled"] is False

        client.put(f"{BASE}/{flag.id}", json={"rules": {"userIds": [customer_user.id]}}, headers=auth_headers)

        assert client.get(url, headers=customer_headers).get_json()["enabled"] is True

    def test_rename_drops_old_key(self, client, auth_headers, make_flag):
        flag = make_flag("old-name", is_enabled=True)
        assert is_feature_enabled("old-name") is True
        assert cache.get(f"{CACHE_PREFIX}old-name") is not None

        response = client.put(f"{BASE}/{flag.id}", json={"key": "new-name"}, headers=auth_headers)

        assert response.status_code == 200
        assert cache.get(f"{CACHE_PREFIX}old-name") is None
        assert is_feature_enabled("old-name") is False
        assert is_feature_enabled("new-name") is True

    def test_rename_clash(self, client, auth_headers, make_flag):
        make_flag("taken")
        flag = make_flag("mine")
        response = client.put(f"{BASE}/{flag.id}", json={"key": "taken"}, headers=auth_headers)
        assert response.status_code == 409

    def test_invalid_scope_on_update(self, client, auth_headers, make_flag):
        flag = make_flag("mine")
        response = client.put(f"{BASE}/{flag.id}", json={"scope": "everyone"}, headers=auth_headers)
        assert response.status_code == 400

    @pytest.mark.parametrize("payload, field", [
        ({"scope": "role"}, "rules"),
        ({"scope": "user", "rules": {"roleNames": ["admin"]}}, "rules"),
        ({"scope": "percentage"}, "rollout_percentage"),
    ])
    def test_scope_change_validates_merged_flag(self, client, auth_headers, make_flag, payload, field):
        flag = make_flag("mine", is_enabled=True)

        response = client.put(f"{BASE}/{flag.id}", json=payload, headers=auth_headers)

        assert response.status_code == 400
        assert field in response.get_json()["errors"]
        assert FeatureFlag.find_by_key("mine").scope == "global"

    def test_rules_update_validated_against_stored_scope(self, client, auth_headers, make_flag):
        flag = make_flag("beta", scope="user", rules={"userIds": ["u1"]})

        bad = client.put(f"{BASE}/{flag.id}", json={"rules": {"userIds": 5}}, headers=auth_headers)
        assert bad.status_code == 400

        rollout_only = client.put(f"{BASE}/{flag.id}", json={"rollout_percentage": 20}, headers=auth_headers)
        assert rollout_only.status_code == 200
        assert rollout_only.get_json()["rules"] == {"userIds": ["u1"]}

    def test_scope_change_with_matching_rules(self, client, auth_headers, make_flag):
        flag = make_flag("mine", is_enabled=True)

        response = client.put(
            f"{BASE}/{flag.id}",
            json={"scope": "role", "rules": {"roleNames": ["admin"]}},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert is_feature_enabled("mine", user_id="u1", role_names=["admin"]) is True

    def test_malformed_stored_rules_do_not_break_checks(self, client, make_flag, customer_headers):
        make_flag("legacy", is_enabled=True, scope="user", rules={"userIds": 5})
        make_flag("on", is_enabled=True)

        check = client.get("/api/auth/me/features-flags/legacy/check", headers=customer_headers)
        assert check.status_code == 200
        assert check.get_json()["enabled"] is False

        enabled = client.get("/api/auth/me/features-flags/enabled", headers=customer_headers)
        assert enabled.status_code == 200
        assert enabled.get_json()["features"] == ["on"]


class TestDeleteFlag:
    def test_delete_invalidates_cache(self, client, auth_headers, make_flag):
        flag = make_flag("dark-mode", is_enabled=True)
        assert is_feature_enabled("dark-mode") is True
        client.get("/api/auth/me/features-flags/enabled")
        assert cache.get(ALL_FLAGS_CACHE_KEY) is not None

        response = client.delete(f"{BASE}/{flag.id}", headers=auth_headers)

        assert response.status_code == 200
        assert cache.get(ALL_FLAGS_CACHE_KEY) is None
        assert is_feature_enabled("dark-mode") is False

    def test_delete_unknown(self, client, auth_headers):
        assert client.delete(f"{BASE}/missing", headers=auth_headers).status_code == 404
