"""Tests for the admin dashboard endpoints."""

import pytest

from conftest import PASSWORD, place_order


def set_status(client, admin_session, order_id, status):
    return client.patch(f"/admin/orders/{order_id}", params={"session_id": admin_session}, json={"status": status})


class TestAdminAccess:
    def test_wrong_credentials(self, client):
        response = client.post("/admin/login", json={"username": "admin", "password": "nope"})

        assert response.status_code == 401

    def test_customer_session_is_forbidden(self, client, alice):
        response = client.get("/admin/stats", params={"session_id": alice})

        assert response.status_code == 403

    def test_unknown_session(self, client):
        response = client.get("/admin/stats", params={"session_id": "nobody"})

        assert response.status_code == 401

    def test_admin_session_is_not_a_customer(self, client, admin_session):
        assert client.get("/me", params={"session_id": admin_session}).status_code == 401

    def test_logout(self, client, admin_session):
        client.post("/admin/logout", json={"session_id": admin_session})

        assert client.get("/admin/stats", params={"session_id": admin_session}).status_code == 401


class TestOrderManagement:
    def test_update_status(self, client, alice, admin_session):
        order = place_order(client, alice)
        response = client.patch(
            f"/admin/orders/{order['id']}", params={"session_id": admin_session}, json={"status": "shipped"},
        )

        assert response.status_code == 200
        mine = client.get(f"/orders/{order['id']}", params={"session_id": alice}).json()
        assert mine["status"] == "shipped"

    def test_cancelling_paid_order_refunds(self, client, alice, admin_session):
        order = place_order(client, alice)
        updated = client.patch(
            f"/admin/orders/{order['id']}", params={"session_id": admin_session}, json={"status": "cancelled"},
        ).json()

        assert updated["payment_status"] == "refunded"

    def test_delivering_cod_order_marks_it_paid(self, client, alice, admin_session):
        order = place_order(client, alice, payment_method="cod")
        for status in ("processing", "shipped"):
            assert set_status(client, admin_session, order["id"], status).status_code == 200
        updated = set_status(client, admin_session, order["id"], "delivered").json()

        assert updated["payment_status"] == "paid"

    def test_status_follows_fulfilment_order(self, client, alice, admin_session):
        """Orders move pending -> processing -> shipped -> delivered without skipping."""
        order = place_order(client, alice, payment_method="cod")

        response = set_status(client, admin_session, order["id"], "shipped")

        assert response.status_code == 400
        mine = client.get(f"/orders/{order['id']}", params={"session_id": alice}).json()
        assert mine["status"] == "pending"

    def test_delivered_order_is_final(self, client, alice, admin_session):
        order = place_order(client, alice)
        set_status(client, admin_session, order["id"], "shipped")
        set_status(client, admin_session, order["id"], "delivered")

        assert set_status(client, admin_session, order["id"], "pending").status_code == 400
        response = set_status(client, admin_session, order["id"], "cancelled")

        assert response.status_code == 400
        mine = client.get(f"/orders/{order['id']}", params={"session_id": alice}).json()
        assert mine["status"] == "delivered"
        assert mine["payment_status"] == "paid"

    def test_cancelled_order_is_final(self, client, alice, admin_session):
        order = place_order(client, alice)
        set_status(client, admin_session, order["id"], "cancelled")

        response = set_status(client, admin_session, order["id"], "processing")

        assert response.status_code == 400
        assert "cancelled" in response.json()["detail"]

    def test_invalid_status(self, client, alice, admin_session):
        order = place_order(client, alice)
        response = client.patch(
            f"/admin/orders/{order['id']}", params={"session_id": admin_session}, json={"status": "lost"},
        )

        assert response.status_code == 422

    def test_unknown_order(self, client, admin_session):
        response = client.patch(
            "/admin/orders/000000000000000000000000", params={"session_id": admin_session},
            json={"status": "shipped"},
        )

        assert response.status_code == 404

    def test_filter_and_search(self, client, alice, bob, admin_session):
        place_order(client, alice, items=[("2", 1)])
        place_order(client, bob, items=[("6", 1)], payment_method="cod")

        pending = client.get("/admin/orders", params={"session_id": admin_session, "status": "pending"}).json()
        assert [o["customer_email"] for o in pending] == ["bob@example.com"]

        wayfarer = client.get("/admin/orders", params={"session_id": admin_session, "q": "wayfarer"}).json()
        assert [o["customer_name"] for o in wayfarer] == ["Bob Buyer"]

        everyone = client.get("/admin/orders", params={"session_id": admin_session, "status": "all"}).json()
        assert len(everyone) == 2


class TestUsers:
    def test_blocked_user_cannot_log_in(self, client, alice, admin_session):
        me = client.get("/me", params={"session_id": alice}).json()
        response = client.patch(
            f"/admin/users/{me['id']}", params={"session_id": admin_session}, json={"status": "blocked"},
        )

        assert response.json()["status"] == "blocked"
        login = client.post("/auth/login", json={"email": "alice@example.com", "password": PASSWORD})
        assert login.status_code == 403
        assert client.get("/me", params={"session_id": alice}).status_code == 403

    def test_list_users_hides_passwords(self, client, alice, bob, admin_session):
        users = client.get("/admin/users", params={"session_id": admin_session}).json()

        assert [u["email"] for u in users] == ["alice@example.com", "bob@example.com"]
        assert all("password" not in u for u in users)

    def test_search_users(self, client, alice, bob, admin_session):
        users = client.get("/admin/users", params={"session_id": admin_session, "q": "bob"}).json()

        assert [u["name"] for u in users] == ["Bob Buyer"]


class TestCouponManagement:
    def test_create_update_delete(self, client, admin_session):
        params = {"session_id": admin_session}
        created = client.post("/admin/coupons", params=params, json={
            "code": "new30", "discount": 30, "type": "percentage", "min_order": 150,
        })
        assert created.status_code == 201
        coupon = created.json()
        assert coupon["code"] == "NEW30"

        duplicate = client.post("/admin/coupons", params=params, json={"code": "NEW30", "discount": 5})
        assert duplicate.status_code == 409

        updated = client.put(f"/admin/coupons/{coupon['id']}", params=params, json={
            "code": "NEW30", "discount": 35, "type": "percentage", "min_order": 150, "status": "disabled",
        })
        assert updated.json()["discount"] == 35
        assert updated.json()["status"] == "disabled"

        assert client.delete(f"/admin/coupons/{coupon['id']}", params=params).status_code == 200
        assert client.delete(f"/admin/coupons/{coupon['id']}", params=params).status_code == 404

    def test_percentage_above_hundred_is_rejected(self, client, admin_session):
        response = client.post("/admin/coupons", params={"session_id": admin_session}, json={
            "code": "HUGE", "discount": 150, "type": "percentage",
        })

        assert response.status_code == 422

    def test_disabled_coupon_cannot_be_applied(self, client, admin_session):
        params = {"session_id": admin_session}
        client.post("/admin/coupons", params=params, json={"code": "OFF5", "discount": 5, "status": "disabled"})
        client.post("/cart/add", json={"session_id": "guest", "product_id": "2"})

        response = client.post("/cart/coupon", json={"session_id": "guest", "code": "OFF5"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Coupon is not active"

    def test_expired_coupon_cannot_be_applied(self, client, admin_session):
        params = {"session_id": admin_session}
        client.post("/admin/coupons", params=params, json={"code": "OLD10", "discount": 10, "expiry_date": "2024-01-15"})
        client.post("/cart/add", json={"session_id": "guest", "product_id": "2"})

        response = client.post("/cart/coupon", json={"session_id": "guest", "code": "OLD10"})
        assert response.json()["detail"] == "Coupon has expired"

    def test_usage_limit(self, client, admin_session):
        params = {"session_id": admin_session}
        client.post("/admin/coupons", params=params, json={
            "code": "ONCE", "discount": 5, "usage_limit": 1, "usage_count": 1,
        })
        client.post("/cart/add", json={"session_id": "guest", "product_id": "2"})

        response = client.post("/cart/coupon", json={"session_id": "guest", "code": "ONCE"})
        assert response.json()["detail"] == "Coupon usage limit reached"


class TestDashboard:
    def test_stats(self, client, alice, bob, admin_session):
        kept = place_order(client, alice, items=[("2", 2)])
        dropped = place_order(client, bob, items=[("8", 1)])
        client.patch(
            f"/admin/orders/{dropped['id']}", params={"session_id": admin_session}, json={"status": "cancelled"},
        )

        stats = client.get("/admin/stats", params={"session_id": admin_session}).json()

        assert stats["orders"] == 2
        assert stats["users"] == 2
        assert stats["products"] == 9
        assert stats["revenue"] == pytest.approx(kept["total"])
        assert stats["orders_by_status"]["cancelled"] == 1
        assert stats["orders_by_status"]["processing"] == 1
        assert len(stats["monthly_revenue"]) == 1
        assert stats["monthly_revenue"][0]["orders"] == 1
        assert [o["id"] for o in stats["recent_orders"]] == [dropped["id"], kept["id"]]
