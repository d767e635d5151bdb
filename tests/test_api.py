from types import SimpleNamespace
from unittest.mock import patch

from fastapi.testclient import TestClient

from config import Config
from main import app


def record_booking(client, headers, member, trainer, price="$10.00", **extra):
    response = client.patch(
        f"/users/activity/{member['email']}",
        json={"trainer_id": trainer["id"], "slot": {"day": "Mon", "time": "10am"}, "price": price, **extra},
        headers=headers
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]["booking_id"]


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "FitMarket API running"}


def test_register_login_and_profile(client):
    response = client.post("/api/auth/register", json={
        "email": "newbie@example.com", "password": "secret123", "name": "Newbie"
    })
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = client.post("/api/auth/register", json={
        "email": "newbie@example.com", "password": "secret123"
    })
    assert response.status_code == 409
    assert response.json()["message"] == "Email already registered"

    response = client.post("/api/auth/login", json={"email": "newbie@example.com", "password": "secret123"})
    assert response.status_code == 200
    token = response.json()["data"]["access_token"]

    response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Newbie"


def test_login_with_cookie(client, make_user):
    member = make_user("member", password="secret123")
    token = client.post("/api/auth/login", json={
        "email": member["email"], "password": "secret123"
    }).json()["data"]["access_token"]

    client.cookies.set("access_token", token)
    response = client.get("/api/users/me")
    assert response.status_code == 200
    assert response.json()["data"]["email"] == member["email"]


def test_requires_authentication(client):
    response = client.get("/users/payment-history/someone@example.com")
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_booking_and_payment_flow(client, make_user, auth_headers):
    trainer = make_user("trainer")
    member = make_user("member", name="Dana")
    admin = make_user("admin")
    member_headers = auth_headers(member)

    response = client.patch("/trainers/add-slots", json={
        "trainer_id": trainer["id"], "slots": [{"day": "Mon", "time": "10am"}]
    }, headers=auth_headers(trainer))
    assert response.status_code == 200
    assert response.json()["data"] == {"added_count": 1}

    booking_id = record_booking(client, member_headers, member, trainer)

    response = client.get(f"/users/paymentData/{booking_id}", headers=auth_headers(trainer))
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Dana"
    assert response.json()["data"]["booking"]["payment_status"] == "pending"

    response = client.patch(f"/users/payment-status/{booking_id}", headers=member_headers)
    assert response.status_code == 200
    assert response.json()["data"]["inserted_ledger_id"]

    response = client.patch(f"/users/payment-status/{booking_id}", headers=member_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Payment not found or already updated"

    history = client.get(f"/users/payment-history/{member['email']}", headers=member_headers).json()["data"]
    assert [b["payment_status"] for b in history] == ["paid"]

    summary = client.get("/admin/payment-summary", headers=auth_headers(admin)).json()["data"]
    assert summary["total_paid"] == 10.0
    assert summary["recent_transactions"][0]["booking_id"] == booking_id

    response = client.request(
        "DELETE", "/delete-slot",
        json={"trainer_id": trainer["id"], "slot": {"day": "Mon", "time": "10am"}},
        headers=auth_headers(trainer)
    )
    assert response.status_code == 200
    assert response.json()["data"]["deleted_booking_count"] == 1
    assert client.get(f"/trainers/{trainer['id']}/slots").json()["data"] == []


def test_add_duplicate_slots_returns_400(client, make_user, auth_headers):
    trainer = make_user("trainer")
    body = {"trainer_id": trainer["id"], "slots": [{"day": "Mon", "time": "10am"}]}
    client.patch("/trainers/add-slots", json=body, headers=auth_headers(trainer))

    response = client.patch("/trainers/add-slots", json=body, headers=auth_headers(trainer))

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "All selected slots already exist",
        "code": "DUPLICATE_SLOTS",
        "details": {"trainer_id": trainer["id"]},
    }


def test_missing_fields_return_400(client, make_user, auth_headers):
    trainer = make_user("trainer")
    response = client.patch("/trainers/add-slots", json={"trainer_id": trainer["id"]}, headers=auth_headers(trainer))

    assert response.status_code == 400
    assert response.json()["message"] == "Missing or invalid fields"
    assert "slots" in response.json()["details"]["fields"]


def test_trainer_cannot_manage_another_trainers_slots(client, make_user, auth_headers):
    trainer = make_user("trainer")
    other = make_user("trainer")
    member = make_user("member")
    body = {"trainer_id": trainer["id"], "slots": [{"day": "Mon", "time": "10am"}]}

    assert client.patch("/trainers/add-slots", json=body, headers=auth_headers(other)).status_code == 403
    assert client.patch("/trainers/add-slots", json=body, headers=auth_headers(member)).status_code == 403


def test_member_cannot_touch_other_members_bookings(client, make_user, auth_headers):
    trainer = make_user("trainer")
    member = make_user("member")
    stranger = make_user("member")
    booking_id = record_booking(client, auth_headers(member), member, trainer)

    response = client.patch(f"/users/payment-status/{booking_id}", headers=auth_headers(stranger))
    assert response.status_code == 403
    assert client.get(f"/users/paymentData/{booking_id}", headers=auth_headers(stranger)).status_code == 403
    assert client.patch(
        f"/users/activity/{member['email']}",
        json={"trainer_id": trainer["id"], "slot": {"day": "Mon", "time": "10am"}},
        headers=auth_headers(stranger)
    ).status_code == 403


def test_delete_single_booking(client, make_user, auth_headers):
    trainer = make_user("trainer")
    member = make_user("member")
    booking_id = record_booking(client, auth_headers(member), member, trainer)
    client.patch(f"/users/payment-status/{booking_id}", headers=auth_headers(member))

    response = client.request(
        "DELETE", "/delete-slot",
        json={"trainer_id": trainer["id"], "booking_id": booking_id, "user_id": member["id"]},
        headers=auth_headers(trainer)
    )

    assert response.status_code == 200
    assert response.json()["data"] == {"booking_id": booking_id, "deleted": True}
    assert client.get(f"/users/payment-history/{member['email']}", headers=auth_headers(member)).json()["data"] == []


def test_delete_slot_needs_a_target(client, make_user, auth_headers):
    trainer = make_user("trainer")
    response = client.request(
        "DELETE", "/delete-slot", json={"trainer_id": trainer["id"]}, headers=auth_headers(trainer)
    )
    assert response.status_code == 400


def test_admin_endpoints_require_admin(client, make_user, auth_headers):
    member = make_user("member")
    response = client.get("/admin/payment-summary", headers=auth_headers(member))
    assert response.status_code == 403
    assert response.json()["message"] == "Admins only"


def test_trainer_application_review(client, make_user, auth_headers):
    member = make_user("member")
    admin = make_user("admin")

    response = client.post("/trainers/apply", json={
        "skills": ["yoga"], "slots": [{"day": "Tue", "time": "7am"}]
    }, headers=auth_headers(member))
    assert response.status_code == 200
    application_id = response.json()["data"]["id"]

    listed = client.get("/admin/trainer-applications?status=pending", headers=auth_headers(admin)).json()["data"]
    assert [a["id"] for a in listed] == [application_id]

    response = client.patch(
        f"/admin/trainer-applications/{application_id}/approve",
        json={"feedback": "Approved"}, headers=auth_headers(admin)
    )
    assert response.status_code == 200
    assert client.get(f"/trainers/{member['id']}/slots").json()["data"] == [{"day": "Tue", "time": "7am"}]

    response = client.get("/admin/trainer-applications?status=unknown", headers=auth_headers(admin))
    assert response.status_code == 400


def test_class_enrollment_through_payment(client, make_user, auth_headers):
    trainer = make_user("trainer")
    member = make_user("member")
    admin = make_user("admin")

    response = client.post("/admin/classes", json={
        "class_name": "Evening HIIT", "skills": ["hiit"], "difficulty_level": "advanced"
    }, headers=auth_headers(admin))
    class_id = response.json()["data"]["id"]

    booking_id = record_booking(client, auth_headers(member), member, trainer, class_id=class_id)
    client.patch(f"/users/payment-status/{booking_id}", headers=auth_headers(member))

    fitness_class = client.get(f"/classes/{class_id}").json()["data"]
    assert fitness_class["members_enrolled"] == [member["id"]]


def test_create_payment_intent_test_mode(client, make_user, auth_headers):
    member = make_user("member")
    with patch("service_modules.payment_service.is_stripe_configured", return_value=False):
        response = client.post("/create-payment-intent", json={"price": 19.99}, headers=auth_headers(member))

    assert response.status_code == 200
    assert response.json()["data"]["test_mode"] is True


def test_stripe_webhook_finalizes(client, make_user, auth_headers):
    trainer = make_user("trainer")
    member = make_user("member")
    booking_id = record_booking(client, auth_headers(member), member, trainer)
    event = SimpleNamespace(
        type="payment_intent.succeeded",
        data=SimpleNamespace(object=SimpleNamespace(id="pi_1", metadata={"booking_id": booking_id}))
    )

    with patch.object(Config, "STRIPE_WEBHOOK_SECRET", "whsec_test"), \
            patch("stripe.Webhook.construct_event", return_value=event):
        response = client.post("/webhook/stripe", content=b"{}", headers={"Stripe-Signature": "t=1,v1=abc"})

    assert response.status_code == 200
    assert response.json()["status"] == "success"
    history = client.get(f"/users/payment-history/{member['email']}", headers=auth_headers(member)).json()["data"]
    assert history[0]["payment_status"] == "paid"


def test_malformed_price_rejected_at_booking(client, make_user, auth_headers):
    trainer = make_user("trainer")
    member = make_user("member")

    for price in ("$-9.00", "25.00", "$NaN", "$1,000.00"):
        response = client.patch(
            f"/users/activity/{member['email']}",
            json={"trainer_id": trainer["id"], "slot": {"day": "Mon", "time": "10am"}, "price": price},
            headers=auth_headers(member)
        )
        assert response.status_code == 400, price
        assert "price" in response.json()["details"]["fields"]

    history = client.get(f"/users/payment-history/{member['email']}", headers=auth_headers(member)).json()["data"]
    assert history == []


def test_startup_creates_tables():
    with patch("main.init_db") as init_db:
        with TestClient(app) as test_client:
            assert test_client.get("/").status_code == 200

    init_db.assert_called_once_with()
