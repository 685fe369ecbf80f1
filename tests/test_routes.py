"""HTTP tests through FastAPI's TestClient over the in-memory store."""

from datetime import timedelta

from fastapi.testclient import TestClient

from apps.backend.config.settings import Settings
from apps.backend.main import create_app
from apps.backend.services.rewards.timeutil import to_iso
from apps.backend.store.memory_store import InMemoryDocumentStore


class TestEnvelopeAndHealth:
    def test_root_and_health(self, client):
        assert client.get("/").json()["status"] == "Gold Rewards Online"

        res = client.get("/health/store")
        assert res.status_code == 200
        assert res.json() == {"ok": True, "data": {"store": True}, "meta": {}}

    def test_validation_errors_use_envelope(self, client):
        res = client.post("/users", json={"displayName": "no email"})

        assert res.status_code == 400
        assert res.json() == {"ok": False, "error": "validation_error", "message": "Email is required"}


class TestAdminGate:
    def test_admin_routes_require_token(self, client):
        res = client.put("/admin/gold-price", json={"price": 75})

        assert res.status_code == 401
        assert res.json()["error"] == "unauthorized"

    def test_bearer_token_is_accepted(self, client):
        res = client.put("/admin/gold-price", json={"price": 75}, headers={"Authorization": "Bearer test-admin-token"})

        assert res.status_code == 200
        assert res.json()["data"] == {"price": 75.0}

    def test_admin_routes_closed_without_configured_token(self):
        app = create_app(
            settings=Settings(STORE_BACKEND="memory", REQUEST_LOGGING=False),
            store=InMemoryDocumentStore(),
        )
        with TestClient(app) as c:
            res = c.get("/admin/users", headers={"X-Internal-Token": "anything"})

        assert res.status_code == 503
        assert res.json()["error"] == "admin_disabled"

    def test_public_routes_skip_gate(self, client):
        assert client.get("/gold-price").status_code == 200


class TestRewardsFlow:
    def test_order_claim_dashboard(self, client, admin_headers):
        created = client.post("/admin/orders", json={"orderId": "X", "rewardGrams": 5}, headers=admin_headers)
        assert created.status_code == 201
        assert created.json()["data"]["_customId"]

        claimed = client.post("/orders/claim", json={"orderId": "X", "email": "a@b.com"})
        assert claimed.status_code == 200
        assert claimed.json()["data"]["userEmail"] == "a@b.com"

        dash = client.get("/dashboard", params={"email": "a@b.com"}).json()["data"]
        assert dash["totalGrams"] == 5
        assert dash["totalValue"] == 300
        assert dash["redeemableGrams"] == 0
        assert dash["currentPrice"] == 60

    def test_claim_unknown_order_is_404(self, client):
        res = client.post("/orders/claim", json={"orderId": "nope", "email": "a@b.com"})

        assert res.status_code == 404
        assert res.json()["error"] == "not_found"

    def test_claim_requires_fields(self, client):
        res = client.post("/orders/claim", json={"orderId": "X"})

        assert res.status_code == 400

    def test_redemption_lifecycle(self, client, admin_headers, clock):
        client.post(
            "/admin/orders",
            json={
                "orderId": "X",
                "rewardGrams": 10,
                "userEmail": "a@b.com",
                "createdAt": to_iso(clock.now - timedelta(days=31)),
            },
            headers=admin_headers,
        )
        created = client.post("/redemptions", json={"email": "a@b.com", "grams": 4})
        assert created.status_code == 201
        rid = created.json()["data"]["id"]
        assert created.json()["data"]["status"] == "pending"

        first = client.post(f"/admin/redemptions/{rid}/approve", headers=admin_headers).json()["data"]
        clock.advance(minutes=10)
        second = client.post(f"/admin/redemptions/{rid}/approve", headers=admin_headers).json()["data"]
        assert first == second
        assert first["status"] == "approved"

        listed = client.get("/redemptions", params={"email": "a@b.com"}).json()
        assert listed["meta"] == {"count": 1}

        dash = client.get("/dashboard", params={"email": "a@b.com"}).json()["data"]
        assert dash["redeemableGrams"] == 6

    def test_public_redemption_is_always_pending(self, client):
        res = client.post(
            "/redemptions",
            json={"email": "a@b.com", "grams": 3, "status": "approved", "approvedAt": "2026-01-01T00:00:00.000Z"},
        )

        assert res.status_code == 201
        data = res.json()["data"]
        assert data["status"] == "pending"
        assert "approvedAt" not in data

    def test_admin_can_create_approved_redemption(self, client, admin_headers, clock):
        assert client.post("/admin/redemptions", json={"email": "a@b.com", "grams": 3, "status": "approved"}).status_code == 401

        res = client.post(
            "/admin/redemptions",
            json={"email": "a@b.com", "grams": 3, "status": "approved"},
            headers=admin_headers,
        )

        assert res.status_code == 201
        assert res.json()["data"]["status"] == "approved"
        assert res.json()["data"]["approvedAt"] == to_iso(clock.now)

    def test_approve_missing_redemption_is_404(self, client, admin_headers):
        res = client.post("/admin/redemptions/missing/approve", headers=admin_headers)

        assert res.status_code == 404

    def test_list_orders_for_unknown_email_is_empty(self, client):
        res = client.get("/orders", params={"email": "nobody@x.com"})

        assert res.status_code == 200
        assert res.json()["data"] == []

    def test_dashboard_requires_email(self, client):
        assert client.get("/dashboard").status_code == 400

    def test_invalid_price_is_400(self, client, admin_headers):
        res = client.put("/admin/gold-price", json={"price": "abc"}, headers=admin_headers)

        assert res.status_code == 400
        assert client.get("/gold-price").json()["data"] == {"price": 60.0}


class TestUsersAndCatalog:
    def test_user_upsert_get_update_delete(self, client, admin_headers):
        created = client.post("/users", json={"email": "a@b.com", "displayName": "Ada"}).json()["data"]
        assert created["createdAt"] == created["updatedAt"]

        patched = client.patch("/users/a@b.com", json={"phone": "123"}).json()["data"]
        assert patched["displayName"] == "Ada"
        assert patched["phone"] == "123"
        assert patched["createdAt"] == created["createdAt"]

        assert client.get("/admin/users", headers=admin_headers).json()["meta"] == {"count": 1}
        assert client.delete("/admin/users/a@b.com", headers=admin_headers).json()["data"] == {"success": True}
        assert client.get("/users/a@b.com").status_code == 404

    def test_shop_crud(self, client, admin_headers):
        shop = client.post("/admin/shops", json={"name": "Goldsmith"}, headers=admin_headers).json()["data"]

        updated = client.patch(f"/admin/shops/{shop['id']}", json={"url": "https://g.example"}, headers=admin_headers)
        assert updated.json()["data"]["url"] == "https://g.example"
        assert updated.json()["data"]["createdAt"] == shop["createdAt"]

        assert [s["name"] for s in client.get("/shops").json()["data"]] == ["Goldsmith"]
        client.delete(f"/admin/shops/{shop['id']}", headers=admin_headers)
        assert client.get(f"/shops/{shop['id']}").status_code == 404

    def test_update_missing_shop_is_404(self, client, admin_headers):
        res = client.patch("/admin/shops/missing", json={"name": "x"}, headers=admin_headers)

        assert res.status_code == 404

    def test_contact_queries(self, client, admin_headers):
        created = client.post(
            "/queries",
            json={"name": "Bo", "brand": "Bo & Co", "email": "bo@co.example", "message": "Partnership?"},
        )
        assert created.status_code == 201
        qid = created.json()["data"]["id"]
        assert created.json()["data"]["_customId"]

        listed = client.get("/admin/queries", headers=admin_headers).json()["data"]
        assert [q["brand"] for q in listed] == ["Bo & Co"]

        client.delete(f"/admin/queries/{qid}", headers=admin_headers)
        assert client.get("/admin/queries", headers=admin_headers).json()["data"] == []
