from conftest import API, place_order


def test_admin_only(client, vendor):
    headers, _ = vendor
    response = client.get(f"{API}/admin/dashboard", headers=headers)
    assert response.status_code == 403
    assert response.json()["error"] == "User role vendor is not authorized to access this route"


def test_dashboard(client, admin, customer, make_product):
    admin_headers, _ = admin
    headers, _ = customer
    place_order(client, headers, make_product(), quantity=1)

    stats = client.get(f"{API}/admin/dashboard", headers=admin_headers).json()["data"]["stats"]
    assert stats["total_users"] == 1
    assert stats["total_vendors"] == 1
    assert stats["total_products"] == 1
    assert stats["total_orders"] == 1
    assert stats["pending_orders"] == 1


def test_list_and_update_users(client, admin, customer, vendor):
    admin_headers, _ = admin
    _, customer_body = customer
    user_id = customer_body["user"]["_id"]

    body = client.get(f"{API}/admin/users", headers=admin_headers, params={"role": "vendor"}).json()
    assert body["pagination"]["total"] == 1
    assert "password" not in body["data"][0]

    response = client.put(f"{API}/admin/users/{user_id}", headers=admin_headers, json={"role": "vendor"})
    assert response.json()["data"]["role"] == "vendor"

    response = client.put(f"{API}/admin/users/{user_id}", headers=admin_headers, json={"email": "admin@example.com"})
    assert response.status_code == 400
    assert response.json()["error"] == "Email is already taken"


def test_suspend_and_unsuspend(client, admin, customer, db, run):
    admin_headers, _ = admin
    headers, customer_body = customer
    user_id = customer_body["user"]["_id"]

    response = client.put(f"{API}/admin/users/{user_id}/suspend", headers=admin_headers,
                          json={"isSuspended": True, "reason": "fraud"})
    assert response.json()["data"]["is_suspended"] is True
    assert client.get(f"{API}/auth/me", headers=headers).status_code == 401

    body = client.get(f"{API}/admin/users", headers=admin_headers, params={"status": "suspended"}).json()
    assert body["pagination"]["total"] == 1

    client.put(f"{API}/admin/users/{user_id}/suspend", headers=admin_headers, json={"isSuspended": False})
    stored = run(db.users.find_one({"email": customer_body["user"]["email"]}))
    assert stored["is_suspended"] is False
    assert stored["refresh_tokens"] == []
    assert client.get(f"{API}/auth/me", headers=headers).status_code == 200


def test_products_orders_and_analytics(client, admin, customer, make_product):
    admin_headers, _ = admin
    headers, _ = customer
    make_product(status="draft")
    place_order(client, headers, make_product(), quantity=1)

    body = client.get(f"{API}/admin/products", headers=admin_headers, params={"status": "draft"}).json()
    assert body["pagination"]["total"] == 1

    body = client.get(f"{API}/admin/orders", headers=admin_headers).json()
    assert body["pagination"]["total"] == 1

    data = client.get(f"{API}/admin/analytics", headers=admin_headers).json()["data"]
    assert data["period"] == "30d"
    assert data["orders_by_status"] == [{"status": "pending", "count": 1}]


def test_settings(client, admin):
    headers, _ = admin
    data = client.get(f"{API}/admin/settings", headers=headers).json()["data"]
    assert data["tax_rate"] == 0.1

    data = client.put(f"{API}/admin/settings", headers=headers, json={"siteName": "Shopfront", "bogus": 1}).json()["data"]
    assert data["site_name"] == "Shopfront"
    assert "bogus" not in data
