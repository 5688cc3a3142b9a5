from bson import ObjectId

from conftest import API


def create_section(client, headers, **overrides):
    payload = {"title": "Top Picks", "type": "custom"}
    payload.update(overrides)
    response = client.post(f"{API}/admin/homepage-sections", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_create_with_products(client, admin, make_product):
    headers, admin_body = admin
    a = make_product(name="A")
    b = make_product(name="B")
    section = create_section(client, headers, category="Electronics", products=[b["_id"], a["_id"]])
    assert section["category"] == "electronics"
    assert [p["name"] for p in section["products"]] == ["B", "A"]
    assert section["created_by"]["email"] == admin_body["user"]["email"]


def test_create_with_unknown_product(client, admin):
    headers, _ = admin
    response = client.post(f"{API}/admin/homepage-sections", headers=headers, json={
        "title": "Broken", "type": "custom", "products": [str(ObjectId())],
    })
    assert response.status_code == 400
    assert response.json()["error"] == "One or more products not found"


def test_public_sections_visible_only_and_ordered(client, admin):
    headers, _ = admin
    create_section(client, headers, title="Second", order=2)
    create_section(client, headers, title="First", order=1)
    create_section(client, headers, title="Hidden", isVisible=False)
    body = client.get(f"{API}/homepage-sections").json()
    assert body["count"] == 2
    assert [s["title"] for s in body["data"]] == ["First", "Second"]


def test_delivery_filter_drops_products(client, admin, make_product):
    headers, _ = admin
    fast = make_product(name="Fast", deliveryOptions={"instant": True})
    slow = make_product(name="Slow")
    create_section(client, headers, products=[fast["_id"], slow["_id"]])

    body = client.get(f"{API}/homepage-sections", params={"delivery": "instant"}).json()
    assert [p["name"] for p in body["data"][0]["products"]] == ["Fast"]


def test_add_remove_and_reorder_products(client, admin, make_product):
    headers, _ = admin
    products = [make_product(name=f"P{i}") for i in range(3)]
    section = create_section(client, headers, maxProducts=2)
    url = f"{API}/admin/homepage-sections/{section['_id']}/products"

    for product in products:
        response = client.post(url, headers=headers, json={"productId": product["_id"]})
        assert response.status_code == 200
    # capped at max_products, oldest dropped
    assert [p["name"] for p in response.json()["data"]["products"]] == ["P1", "P2"]

    response = client.put(f"{url}/reorder", headers=headers, json={
        "productIds": [products[2]["_id"], products[1]["_id"], products[0]["_id"]],
    })
    assert [p["name"] for p in response.json()["data"]["products"]] == ["P2", "P1"]

    response = client.delete(f"{url}/{products[2]['_id']}", headers=headers)
    assert [p["name"] for p in response.json()["data"]["products"]] == ["P1"]

    response = client.post(url, headers=headers, json={"productId": str(ObjectId())})
    assert response.status_code == 404


def test_update_truncates_to_max_products(client, admin, make_product):
    headers, _ = admin
    products = [make_product(name=f"P{i}") for i in range(3)]
    section = create_section(client, headers, products=[p["_id"] for p in products])
    response = client.put(f"{API}/admin/homepage-sections/{section['_id']}", headers=headers, json={"maxProducts": 1})
    assert response.status_code == 200
    assert [p["name"] for p in response.json()["data"]["products"]] == ["P0"]


def test_reorder_sections(client, admin):
    headers, _ = admin
    a = create_section(client, headers, title="A", order=0)
    b = create_section(client, headers, title="B", order=1)
    response = client.put(f"{API}/admin/homepage-sections/reorder", headers=headers, json={"sectionOrders": [
        {"sectionId": a["_id"], "order": 5},
        {"sectionId": b["_id"], "order": 0},
    ]})
    assert response.status_code == 200
    assert [s["title"] for s in response.json()["data"]] == ["B", "A"]


def test_get_and_delete_section(client, admin):
    headers, _ = admin
    section = create_section(client, headers)
    assert client.get(f"{API}/homepage-sections/{section['_id']}").status_code == 200
    assert client.delete(f"{API}/admin/homepage-sections/{section['_id']}", headers=headers).status_code == 200
    response = client.get(f"{API}/homepage-sections/{section['_id']}")
    assert response.status_code == 404
    assert response.json()["error"] == "Section not found"
