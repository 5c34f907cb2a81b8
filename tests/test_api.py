import pytest
from fastapi.testclient import TestClient

from hoardingadmin_firestoredb.api.app import create_app


@pytest.fixture
def client(context, seeded):
    with TestClient(create_app(context=context, start_notifier=False)) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(identity):
    return {"Authorization": f"Bearer {identity.add_account('admin1', 'admin@example.com')}"}


@pytest.fixture
def staff_headers(identity):
    return {"Authorization": f"Bearer {identity.add_account('u1', 'asha@example.com')}"}


def test_root_is_public(client):
    assert client.get("/").json()["message"] == "Hoarding Admin API"


def test_login_and_me(client, identity, admin_headers):
    login = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "secret123"})
    me = client.get("/api/auth/me", headers=admin_headers)

    assert login.status_code == 200
    assert login.json()["data"]["idToken"] == "token-admin1"
    assert me.json()["role"] == "admin"


def test_login_with_wrong_password(client, admin_headers):
    response = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "wrong"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_protected_routes_need_a_token(client):
    assert client.get("/api/bookings").status_code == 401
    assert client.get("/api/bookings", headers={"Authorization": "Bearer forged"}).status_code == 401


def test_list_bookings_with_filters(client, admin_headers):
    everything = client.get("/api/bookings", headers=admin_headers).json()["data"]
    pending = client.get("/api/bookings", params={"status": "pending"}, headers=admin_headers).json()["data"]
    second_page = client.get("/api/bookings", params={"perPage": 2, "page": 2}, headers=admin_headers).json()["data"]

    assert [item["id"] for item in everything["items"]] == ["b2", "b1", "b3"]
    assert everything["items"][1]["customerName"] == "Asha Rao"
    assert everything["totalItems"] == 3
    assert [item["id"] for item in pending["items"]] == ["b2"]
    assert [item["id"] for item in second_page["items"]] == ["b3"]


def test_unknown_date_filter_is_rejected(client, admin_headers):
    bookings = client.get("/api/bookings", params={"dateFilter": "tomorrow"}, headers=admin_headers)
    customers = client.get("/api/customers", params={"dateFilter": "tomorrow"}, headers=admin_headers)
    upcoming = client.get("/api/bookings", params={"dateFilter": "Upcoming"}, headers=admin_headers)

    assert bookings.status_code == 400
    assert bookings.json()["detail"] == "Invalid date filter: tomorrow"
    assert customers.status_code == 400
    assert upcoming.status_code == 200


def test_get_single_booking(client, admin_headers):
    found = client.get("/api/bookings/b3", headers=admin_headers)
    missing = client.get("/api/bookings/nope", headers=admin_headers)

    assert found.json()["data"]["hoardingTitle"] == "NH48 Mega Board"
    assert missing.status_code == 404


def test_update_booking_status(client, seeded, admin_headers):
    approved = client.patch("/api/bookings/b2/status", json={"status": "approved"}, headers=admin_headers)
    invalid = client.patch("/api/bookings/b2/status", json={"status": "Cancelled"}, headers=admin_headers)
    paid = client.patch("/api/bookings/b2/payment-status", json={"paymentStatus": "paid"}, headers=admin_headers)

    assert approved.json()["data"]["status"] == "Approved"
    assert invalid.status_code == 400
    assert paid.json()["data"]["paymentStatus"] == "Paid"
    assert seeded.data("bookings/b2")["status"] == "Approved"


def test_booking_calendar(client, admin_headers):
    month = client.get("/api/bookings/calendar", params={"year": 2026, "month": 10}, headers=admin_headers).json()["data"]
    day = client.get("/api/bookings/calendar/2026-10-15", headers=admin_headers).json()["data"]

    assert len(month) == 31
    assert month["2026-10-15"]["label"] == "Partial"
    assert [booking["id"] for booking in day["bookings"]] == ["b1"]
    assert day["status"]["booked"] == 1


def test_customers(client, admin_headers):
    listing = client.get("/api/customers", headers=admin_headers).json()["data"]
    with_bookings = client.get("/api/customers", params={"includeBookings": True}, headers=admin_headers).json()["data"]
    history = client.get("/api/customers/u1/bookings", headers=admin_headers).json()["data"]

    first = listing["items"][0]
    assert (first["customerId"], first["totalSpend"], first["totalBookings"]) == ("u1", 1500, 2)
    assert "bookings" not in first
    assert len(with_bookings["items"][0]["bookings"]) == 2
    assert [booking["id"] for booking in history] == ["b1", "b2"]


def test_customer_without_bookings_is_found(client, admin_headers):
    response = client.get("/api/customers/u3", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Meera Shah"
    assert response.json()["data"]["totalBookings"] == 0


def test_hoardings(client, seeded, admin_headers):
    listing = client.get("/api/hoardings", params={"availability": "available"}, headers=admin_headers).json()["data"]
    created = client.post(
        "/api/hoardings",
        json={"title": "Ring Road Board", "location": "Hyderabad", "size": "30x15", "price": "1500", "category": "Highway"},
        headers=admin_headers,
    )
    invalid = client.post("/api/hoardings", json={"title": "", "category": "Highway"}, headers=admin_headers)

    assert [item["id"] for item in listing["items"]] == ["h1"]
    assert created.status_code == 201
    assert created.json()["data"]["categoryName"] == "Highway"
    assert invalid.status_code == 400


def test_upload_hoarding_image(client, uploader, admin_headers):
    response = client.post(
        "/api/hoardings/images",
        params={"filename": "board.png"},
        content=b"\x89PNG",
        headers={**admin_headers, "Content-Type": "image/png"},
    )

    assert response.json()["data"]["url"].endswith("/hoardings/board.png")
    assert uploader.uploads[0]["size"] == 4


def test_dashboard(client, admin_headers):
    stats = client.get("/api/dashboard/stats", headers=admin_headers).json()["data"]
    search = client.get("/api/dashboard/search", params={"q": "asha"}, headers=admin_headers).json()["data"]

    assert (stats["totalBookings"], stats["pendingBookings"], stats["totalCustomers"]) == (3, 1, 3)
    assert [user["id"] for user in search["users"]] == ["u1"]


def test_backup_is_admin_only(client, admin_headers, staff_headers):
    backup = client.get("/api/dashboard/backup", headers=admin_headers)
    refused = client.get("/api/dashboard/backup", headers=staff_headers)

    assert backup.headers["content-disposition"].startswith('attachment; filename="firestore_all_data_')
    assert len(backup.json()["users"]) == 4
    assert refused.status_code == 403


def test_staff_cannot_manage_users(client, staff_headers):
    listing = client.get("/api/users", headers=staff_headers)
    create = client.post("/api/users", json={"name": "Kiran", "email": "kiran@example.com"}, headers=staff_headers)

    assert listing.status_code == 200
    assert create.status_code == 403


def test_report_export(client, admin_headers):
    csv_export = client.get("/api/reports/bookings/export", params={"format": "csv", "clientName": "ravi"}, headers=admin_headers)
    section = client.get("/api/reports/status-distribution/export", params={"format": "json"}, headers=admin_headers)
    unknown = client.get("/api/reports/nothing/export", headers=admin_headers)

    lines = csv_export.text.splitlines()
    assert lines[0].startswith("Client Name,Hoarding Name")
    assert len(lines) == 2
    assert 'filename="bookings_report_' in csv_export.headers["content-disposition"]
    assert [row["name"] for row in section.json()] == ["Pending", "Approved", "Rejected"]
    assert unknown.status_code == 404


def test_notifications(client, admin_headers):
    created = client.post("/api/notifications", json={"title": "Maintenance tonight"}, headers=admin_headers)
    count = client.get("/api/notifications/unread-count", headers=admin_headers).json()["data"]
    client.post("/api/notifications/read-all", headers=admin_headers)

    assert created.status_code == 201
    assert count == {"unread": 1}
    assert client.get("/api/notifications", params={"unread": True}, headers=admin_headers).json()["data"] == []


def test_settings_password_uses_session_email(client, identity, admin_headers):
    response = client.post(
        "/api/settings/password",
        json={"currentPassword": "secret123", "newPassword": "fresh-pass", "confirmPassword": "fresh-pass"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert identity.password_updates == ["admin@example.com"]
    assert client.get("/api/settings/status-policy", headers=admin_headers).json() == {"policy": "permissive"}
