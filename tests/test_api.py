"""HTTP tests against the FastAPI app backed by the in-memory store."""

import uuid

from slotbook.core.security import Role, create_access_token

DAY = "2025-03-18"
API = "/api/v1"


def bearer(role: Role, subject: object = None) -> dict[str, str]:
    token = create_access_token(subject or uuid.uuid4(), role=role)
    return {"Authorization": f"Bearer {token}"}


def booking_body(seed, start_time: str, service=None, employee=None, day: str = DAY) -> dict:
    return {
        "employee_id": str((employee or seed.e1).id),
        "service_id": str((service or seed.haircut).id),
        "customer_id": str(seed.customer.id),
        "date": day,
        "start_time": start_time,
    }


class TestPublicBooking:
    def test_create_then_conflict(self, client, seed):
        r = client.post(f"{API}/public/bookings", json=booking_body(seed, "10:00"))
        assert r.status_code == 201
        data = r.json()
        assert data["status"] == "pending"
        assert data["booking_date"] == DAY
        assert data["start_at"].startswith("2025-03-18T10:00:00")
        assert data["end_at"].startswith("2025-03-18T10:30:00")
        assert data["employee"]["first_name"] == "Anna"
        assert data["service"]["name"] == "Haircut"

        r = client.post(f"{API}/public/bookings", json=booking_body(seed, "10:15"))
        assert r.status_code == 409
        assert r.json()["code"] == "CONFLICT"

    def test_back_to_back_is_allowed(self, client, seed):
        assert client.post(f"{API}/public/bookings", json=booking_body(seed, "10:00")).status_code == 201
        assert client.post(f"{API}/public/bookings", json=booking_body(seed, "10:30")).status_code == 201

    def test_bad_date_is_invalid_input(self, client, seed):
        r = client.post(f"{API}/public/bookings", json=booking_body(seed, "10:00", day="18-03-2025"))
        assert r.status_code == 422
        body = r.json()
        assert body["code"] == "INVALID_INPUT"
        assert body["field"] == "date"

    def test_missing_field_is_invalid_input(self, client, seed):
        body = booking_body(seed, "10:00")
        del body["service_id"]
        r = client.post(f"{API}/public/bookings", json=body)
        assert r.status_code == 422
        assert r.json()["code"] == "INVALID_INPUT"
        assert r.json()["field"] == "service_id"

    def test_unknown_service_is_not_found(self, client, seed):
        body = booking_body(seed, "10:00")
        body["service_id"] = str(uuid.uuid4())
        r = client.post(f"{API}/public/bookings", json=body)
        assert r.status_code == 404
        assert r.json()["code"] == "NOT_FOUND"


class TestAuth:
    def test_missing_token(self, client):
        r = client.get(f"{API}/bookings")
        assert r.status_code == 401
        assert r.json()["code"] == "UNAUTHORIZED"
        assert r.headers["www-authenticate"] == "Bearer"

    def test_garbage_token(self, client):
        r = client.get(f"{API}/bookings", headers={"Authorization": "Bearer nope"})
        assert r.status_code == 401

    def test_guest_cannot_list(self, client):
        r = client.get(f"{API}/bookings", headers=bearer(Role.GUEST))
        assert r.status_code == 403
        assert r.json()["code"] == "FORBIDDEN"

    def test_employee_cannot_create(self, client, seed):
        r = client.post(
            f"{API}/bookings", json=booking_body(seed, "10:00"), headers=bearer(Role.EMPLOYEE, seed.e1.id)
        )
        assert r.status_code == 403


class TestAdminBookings:
    def test_create_and_get(self, client, seed, admin_headers):
        r = client.post(f"{API}/bookings", json=booking_body(seed, "09:00"), headers=admin_headers)
        assert r.status_code == 201
        booking_id = r.json()["id"]

        r = client.get(f"{API}/bookings/{booking_id}", headers=admin_headers)
        assert r.status_code == 200
        assert r.json()["id"] == booking_id

    def test_employee_sees_only_own_bookings(self, client, seed, admin_headers):
        mine = client.post(f"{API}/bookings", json=booking_body(seed, "09:00"), headers=admin_headers).json()
        other = client.post(
            f"{API}/bookings", json=booking_body(seed, "09:00", employee=seed.e2), headers=admin_headers
        ).json()
        headers = bearer(Role.EMPLOYEE, seed.e1.id)

        r = client.get(f"{API}/bookings", headers=headers, params={"employee_id": str(seed.e2.id)})
        assert r.status_code == 200
        assert [b["id"] for b in r.json()] == [mine["id"]]

        assert client.get(f"{API}/bookings/{mine['id']}", headers=headers).status_code == 200
        assert client.get(f"{API}/bookings/{other['id']}", headers=headers).status_code == 404

    def test_admin_lists_by_employee(self, client, seed, admin_headers):
        client.post(f"{API}/bookings", json=booking_body(seed, "09:00"), headers=admin_headers)
        client.post(f"{API}/bookings", json=booking_body(seed, "09:00", employee=seed.e2), headers=admin_headers)
        r = client.get(f"{API}/bookings", headers=admin_headers)
        assert len(r.json()) == 2
        r = client.get(f"{API}/bookings", headers=admin_headers, params={"employee_id": str(seed.e2.id)})
        assert [b["employee_id"] for b in r.json()] == [str(seed.e2.id)]

    def test_reschedule_conflict_keeps_original(self, client, seed, admin_headers):
        first = client.post(f"{API}/bookings", json=booking_body(seed, "09:00"), headers=admin_headers).json()
        client.post(f"{API}/bookings", json=booking_body(seed, "10:00"), headers=admin_headers)

        r = client.patch(f"{API}/bookings/{first['id']}", json={"start_time": "10:00"}, headers=admin_headers)
        assert r.status_code == 409

        r = client.get(f"{API}/bookings/{first['id']}", headers=admin_headers)
        assert r.json()["start_at"].startswith("2025-03-18T09:00:00")

    def test_reschedule_moves_booking(self, client, seed, admin_headers):
        first = client.post(f"{API}/bookings", json=booking_body(seed, "09:00"), headers=admin_headers).json()
        r = client.patch(f"{API}/bookings/{first['id']}", json={"start_time": "09:15"}, headers=admin_headers)
        assert r.status_code == 200
        assert r.json()["start_at"].startswith("2025-03-18T09:15:00")

    def test_patch_rejects_unknown_fields(self, client, seed, admin_headers):
        first = client.post(f"{API}/bookings", json=booking_body(seed, "09:00"), headers=admin_headers).json()
        r = client.patch(f"{API}/bookings/{first['id']}", json={"total_price": "1.00"}, headers=admin_headers)
        assert r.status_code == 422
        assert r.json()["code"] == "INVALID_INPUT"

    def test_invalid_status_transition(self, client, seed, admin_headers):
        first = client.post(f"{API}/bookings", json=booking_body(seed, "09:00"), headers=admin_headers).json()
        client.patch(f"{API}/bookings/{first['id']}", json={"status": "completed"}, headers=admin_headers)
        r = client.patch(f"{API}/bookings/{first['id']}", json={"status": "pending"}, headers=admin_headers)
        assert r.status_code == 422
        assert r.json()["code"] == "INVALID_STATUS_TRANSITION"
        assert r.json()["field"] == "status"

    def test_delete_cancels_and_frees_slot(self, client, seed, admin_headers):
        first = client.post(f"{API}/bookings", json=booking_body(seed, "09:00"), headers=admin_headers).json()
        r = client.delete(f"{API}/bookings/{first['id']}", headers=admin_headers)
        assert r.status_code == 204

        r = client.get(f"{API}/bookings/{first['id']}", headers=admin_headers)
        assert r.json()["status"] == "cancelled"

        r = client.post(f"{API}/public/bookings", json=booking_body(seed, "09:00"))
        assert r.status_code == 201

    def test_unknown_booking(self, client, admin_headers):
        r = client.get(f"{API}/bookings/{uuid.uuid4()}", headers=admin_headers)
        assert r.status_code == 404


class TestAvailability:
    def test_day_grid(self, client, seed):
        client.post(f"{API}/public/bookings", json=booking_body(seed, "10:00", service=seed.coloring))
        r = client.get(f"{API}/availability", params={"employee_id": str(seed.e1.id), "date": DAY})
        assert r.status_code == 200
        data = r.json()
        assert data["step_minutes"] == 30
        slots = {s["time"]: s for s in data["slots"]}
        assert len(slots) == 25
        assert not slots["10:00"]["available"]
        assert slots["10:00"]["is_booking_start"]
        assert not slots["10:30"]["available"]
        assert not slots["11:00"]["available"]
        assert slots["11:30"]["available"]

    def test_invalid_date(self, client, seed):
        r = client.get(f"{API}/availability", params={"employee_id": str(seed.e1.id), "date": "tomorrow"})
        assert r.status_code == 422
        assert r.json()["field"] == "date"

    def test_unknown_employee(self, client):
        r = client.get(f"{API}/availability", params={"employee_id": str(uuid.uuid4()), "date": DAY})
        assert r.status_code == 404


class TestCatalog:
    def test_list_services(self, client):
        r = client.get(f"{API}/services")
        assert r.status_code == 200
        assert sorted(s["name"] for s in r.json()) == ["Coloring", "Haircut"]

    def test_price_change_does_not_touch_existing_bookings(self, client, seed, admin_headers):
        booking = client.post(f"{API}/public/bookings", json=booking_body(seed, "10:00")).json()

        r = client.patch(f"{API}/services/{seed.haircut.id}", json={"price": "65.00"}, headers=admin_headers)
        assert r.status_code == 200
        assert r.json()["price"] == "65.00"

        r = client.get(f"{API}/bookings/{booking['id']}", headers=admin_headers)
        assert r.json()["total_price"] == "50.00"

        fresh = client.post(f"{API}/public/bookings", json=booking_body(seed, "11:00")).json()
        assert fresh["total_price"] == "65.00"

    def test_update_service_requires_admin(self, client, seed):
        r = client.patch(f"{API}/services/{seed.haircut.id}", json={"price": "65.00"}, headers=bearer(Role.GUEST))
        assert r.status_code == 403

    def test_negative_price_rejected(self, client, seed, admin_headers):
        r = client.patch(f"{API}/services/{seed.haircut.id}", json={"price": "-1"}, headers=admin_headers)
        assert r.status_code == 422

    def test_list_active_employees(self, client):
        r = client.get(f"{API}/employees")
        names = sorted(e["display_name"] for e in r.json())
        assert names == ["Anna Berg", "Ben Cole"]

    def test_employee_services(self, client, seed):
        r = client.get(f"{API}/employees/{seed.e2.id}/services")
        assert [s["name"] for s in r.json()] == ["Haircut"]


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


class TestCatalogWrites:
    def test_empty_backend_can_be_set_up_and_booked_through_api(self, client, admin_headers):
        r = client.post(
            f"{API}/services",
            json={"name": "Massage", "price": "80.00", "duration_seconds": 3600},
            headers=admin_headers,
        )
        assert r.status_code == 201
        service_id = r.json()["id"]

        r = client.post(
            f"{API}/employees",
            json={"first_name": "Eva", "last_name": "Fox", "email": "Eva@Example.com", "service_ids": [service_id]},
            headers=admin_headers,
        )
        assert r.status_code == 201
        employee_id = r.json()["id"]
        services = client.get(f"{API}/employees/{employee_id}/services").json()
        assert [s["id"] for s in services] == [service_id]

        r = client.post(f"{API}/public/customers", json={"first_name": "Gus", "phone": "+49 151 000"})
        assert r.status_code == 201
        customer_id = r.json()["id"]

        r = client.post(
            f"{API}/public/bookings",
            json={
                "employee_id": employee_id,
                "service_id": service_id,
                "customer_id": customer_id,
                "date": DAY,
                "start_time": "15:00",
            },
        )
        assert r.status_code == 201
        assert r.json()["end_at"].startswith("2025-03-18T16:00:00")

    def test_create_service_requires_admin(self, client):
        r = client.post(
            f"{API}/services",
            json={"name": "Massage", "price": "80.00", "duration_seconds": 3600},
            headers=bearer(Role.EMPLOYEE),
        )
        assert r.status_code == 403

    def test_service_longer_than_a_day_rejected(self, client, admin_headers):
        r = client.post(
            f"{API}/services",
            json={"name": "Retreat", "price": "800.00", "duration_seconds": 90000},
            headers=admin_headers,
        )
        assert r.status_code == 422
        assert r.json()["field"] == "duration_seconds"

    def test_duplicate_employee_email_conflicts(self, client, admin_headers):
        body = {"first_name": "Anna", "last_name": "Other", "email": "anna@example.com"}
        r = client.post(f"{API}/employees", json=body, headers=admin_headers)
        assert r.status_code == 409

    def test_employee_with_unknown_service_not_found(self, client, admin_headers):
        body = {"first_name": "Hal", "last_name": "Ives", "email": "hal@example.com", "service_ids": [str(uuid.uuid4())]}
        r = client.post(f"{API}/employees", json=body, headers=admin_headers)
        assert r.status_code == 404
        assert "Hal Ives" not in [e["display_name"] for e in client.get(f"{API}/employees").json()]

    def test_assign_and_unassign_service(self, client, seed, admin_headers):
        url = f"{API}/employees/{seed.e2.id}/services"
        r = client.post(url, json={"service_id": str(seed.coloring.id)}, headers=admin_headers)
        assert r.status_code == 200
        assert sorted(s["name"] for s in r.json()) == ["Coloring", "Haircut"]
        # Assigning twice is harmless.
        client.post(url, json={"service_id": str(seed.coloring.id)}, headers=admin_headers)

        r = client.delete(f"{url}/{seed.haircut.id}", headers=admin_headers)
        assert r.status_code == 204
        assert [s["name"] for s in client.get(url).json()] == ["Coloring"]
        assert client.delete(f"{url}/{seed.haircut.id}", headers=admin_headers).status_code == 404


class TestCustomers:
    def test_find_or_create_by_phone(self, client):
        r = client.post(f"{API}/public/customers", json={"first_name": "Ivy", "phone": "+49 151 234"})
        assert r.status_code == 201
        created = r.json()
        assert created["phone"] == "+49151234"

        r = client.post(f"{API}/public/customers", json={"first_name": "Ivy B.", "phone": "+49151234"})
        assert r.status_code == 200
        assert r.json()["id"] == created["id"]

    def test_customers_without_phone_are_always_created(self, client):
        a = client.post(f"{API}/public/customers", json={"first_name": "Jo"}).json()
        b = client.post(f"{API}/public/customers", json={"first_name": "Jo"}).json()
        assert a["id"] != b["id"]

    def test_check_phone(self, client, seed):
        client.post(f"{API}/public/customers", json={"first_name": "Kai", "phone": "0170 1"})
        r = client.get(f"{API}/public/customers/check-phone", params={"phone": "01701"})
        assert r.json()["exists"] is True
        assert r.json()["customer"]["first_name"] == "Kai"

        r = client.get(f"{API}/public/customers/check-phone", params={"phone": "999"})
        assert r.json() == {"exists": False, "customer": None}

    def test_blank_phone_is_invalid(self, client):
        r = client.get(f"{API}/public/customers/check-phone", params={"phone": "  "})
        assert r.status_code == 422
        assert r.json()["field"] == "phone"

    def test_list_customers_is_staff_only(self, client, seed, admin_headers):
        assert client.get(f"{API}/customers", headers=bearer(Role.GUEST)).status_code == 403
        r = client.get(f"{API}/customers", headers=admin_headers)
        assert [c["email"] for c in r.json()] == ["dana@example.com"]
