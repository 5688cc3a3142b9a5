from conftest import API, image_files

ADDRESS = {
    "name": "Jane Doe",
    "phone": "555-0100",
    "address": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "zipCode": "62701",
}


def add_address(client, headers, **overrides):
    response = client.post(f"{API}/users/addresses", headers=headers, json={**ADDRESS, **overrides})
    assert response.status_code == 201, response.text
    return response.json()["data"]


def default_ids(addresses):
    return [a["_id"] for a in addresses if a["is_default"]]


def test_profile_requires_auth(client):
    assert client.get(f"{API}/users/profile").status_code == 401


def test_get_and_update_profile(client, customer):
    headers, body = customer
    response = client.get(f"{API}/users/profile", headers=headers)
    assert response.status_code == 200
    profile = response.json()["data"]
    assert profile["email"] == body["user"]["email"]
    assert "password" not in profile
    assert "refresh_tokens" not in profile

    response = client.put(f"{API}/users/profile", headers=headers, json={"name": "Renamed"})
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Renamed"


def test_profile_email_must_be_unique(client, customer, vendor):
    headers, _ = customer
    _, vendor_body = vendor
    taken = vendor_body["user"]["email"]
    response = client.put(f"{API}/users/profile", headers=headers, json={"email": taken})
    assert response.status_code == 400


def test_vendor_profile_ignored_for_customers(client, customer):
    headers, _ = customer
    response = client.put(f"{API}/users/profile", headers=headers, json={"vendorProfile": {"storeName": "Nope"}})
    assert response.status_code == 200
    assert response.json()["data"]["vendor_profile"] is None


def test_first_address_becomes_default(client, customer):
    headers, _ = customer
    addresses = add_address(client, headers)
    assert len(addresses) == 1
    assert addresses[0]["is_default"] is True
    assert addresses[0]["country"] == "US"

    addresses = add_address(client, headers, city="Shelbyville")
    assert len(addresses) == 2
    assert default_ids(addresses) == [addresses[0]["_id"]]


def test_new_default_address_replaces_old(client, customer):
    headers, _ = customer
    add_address(client, headers)
    addresses = add_address(client, headers, city="Capital City", isDefault=True)
    assert default_ids(addresses) == [addresses[1]["_id"]]


def test_update_and_set_default_address(client, customer):
    headers, _ = customer
    add_address(client, headers)
    first, second = add_address(client, headers, city="Ogdenville")

    response = client.put(f"{API}/users/addresses/{second['_id']}", headers=headers, json={"phone": "555-0199"})
    assert response.status_code == 200
    updated = {a["_id"]: a for a in response.json()["data"]}
    assert updated[second["_id"]]["phone"] == "555-0199"
    assert default_ids(response.json()["data"]) == [first["_id"]]

    response = client.put(f"{API}/users/addresses/{second['_id']}/default", headers=headers)
    assert default_ids(response.json()["data"]) == [second["_id"]]

    # unsetting the default moves it elsewhere
    response = client.put(f"{API}/users/addresses/{second['_id']}", headers=headers, json={"isDefault": False})
    assert default_ids(response.json()["data"]) == [first["_id"]]


def test_delete_default_address_reassigns(client, customer):
    headers, _ = customer
    add_address(client, headers)
    first, second = add_address(client, headers, city="North Haverbrook")

    response = client.delete(f"{API}/users/addresses/{first['_id']}", headers=headers)
    assert response.status_code == 200
    remaining = response.json()["data"]
    assert [a["_id"] for a in remaining] == [second["_id"]]
    assert remaining[0]["is_default"] is True


def test_unknown_address(client, customer):
    headers, _ = customer
    add_address(client, headers)
    missing = "64b000000000000000000000"
    for response in (
        client.put(f"{API}/users/addresses/{missing}", headers=headers, json={"city": "X"}),
        client.delete(f"{API}/users/addresses/{missing}", headers=headers),
        client.put(f"{API}/users/addresses/{missing}/default", headers=headers),
    ):
        assert response.status_code == 404
        assert response.json()["error"] == "Address not found"


def test_address_validation(client, customer):
    headers, _ = customer
    response = client.post(f"{API}/users/addresses", headers=headers, json={"name": "Only a name"})
    assert response.status_code == 400


def test_update_preferences_merges(client, customer):
    headers, _ = customer
    response = client.put(f"{API}/users/preferences", headers=headers, json={"smsNotifications": True})
    assert response.status_code == 200
    preferences = response.json()["data"]
    assert preferences["sms_notifications"] is True
    assert preferences["newsletter"] is True

    response = client.put(f"{API}/users/preferences", headers=headers, json={"newsletter": False})
    preferences = response.json()["data"]
    assert preferences["sms_notifications"] is True
    assert preferences["newsletter"] is False


def test_avatar_upload_replaces_previous(client, customer, cloudinary):
    headers, _ = customer
    response = client.post(f"{API}/users/avatar", headers=headers, files=image_files(1, field="avatar"))
    assert response.status_code == 200, response.text
    assert response.json()["data"]["url"] == "https://res.cloudinary.com/demo/img1.jpg"
    assert cloudinary["destroyed"] == []

    response = client.post(f"{API}/users/avatar", headers=headers, files=image_files(1, field="avatar"))
    assert response.json()["data"]["url"] == "https://res.cloudinary.com/demo/img2.jpg"
    assert len(cloudinary["destroyed"]) == 1
    assert "img1" in cloudinary["destroyed"][0]

    profile = client.get(f"{API}/users/profile", headers=headers).json()["data"]
    assert profile["avatar"]["public_id"] == "ecom/products/img2"


def test_avatar_rejects_non_images(client, customer, cloudinary):
    headers, _ = customer
    files = [("avatar", ("notes.txt", b"hello", "text/plain"))]
    response = client.post(f"{API}/users/avatar", headers=headers, files=files)
    assert response.status_code == 400
    assert cloudinary["uploads"] == 0
