def test_list_and_filter_subcategories(client, sample_catalog):
    all_subs = client.get("/api/v1/subcategories").json()
    assert len(all_subs) == 3
    paper = client.get("/api/v1/subcategories", params={"category": "Paper Testing Equipment"}).json()
    assert [s["slug"] for s in paper] == ["cobb-tester", "bursting-strength-tester"]


def test_get_subcategory_by_slug(client, sample_catalog):
    response = client.get("/api/v1/subcategories/crock-meter")
    assert response.json()["category"] == "Textile Testing Equipment"
    assert client.get("/api/v1/subcategories/missing").status_code == 404


def test_create_subcategory_records_parent(client, admin_headers, sample_catalog):
    response = client.post(
        "/api/v1/subcategories",
        json={"title": "Tearing Tester", "category": "Paper Testing Equipment"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["slug"] == "tearing-tester"
    parent = client.get("/api/v1/categories").json()[0]
    assert body["parent_category_id"] == parent["id"]


def test_create_subcategory_validation(client, admin_headers, sample_catalog):
    missing_parent = client.post(
        "/api/v1/subcategories",
        json={"title": "Tearing Tester", "category": "Unknown Category"},
        headers=admin_headers,
    )
    assert missing_parent.status_code == 400
    assert missing_parent.json()["detail"] == "Parent category does not exist"

    missing_title = client.post(
        "/api/v1/subcategories", json={"category": "Paper Testing Equipment"}, headers=admin_headers
    )
    assert missing_title.status_code == 400

    duplicate = client.post(
        "/api/v1/subcategories",
        json={"title": "Cobb Tester", "category": "Paper Testing Equipment"},
        headers=admin_headers,
    )
    assert duplicate.status_code == 400


def test_update_subcategory_parent(client, admin_headers, sample_catalog):
    sub = client.get("/api/v1/subcategories/cobb-tester").json()
    response = client.put(
        f"/api/v1/subcategories/{sub['id']}",
        json={"category": "Textile Testing Equipment"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["category"] == "Textile Testing Equipment"

    bad = client.put(
        f"/api/v1/subcategories/{sub['id']}", json={"category": "Nope"}, headers=admin_headers
    )
    assert bad.status_code == 400


def test_delete_subcategory_with_products_is_rejected(client, admin_headers, sample_catalog):
    sub = client.get("/api/v1/subcategories/cobb-tester").json()
    response = client.delete(f"/api/v1/subcategories/{sub['id']}", headers=admin_headers)
    assert response.status_code == 400

    created = client.post(
        "/api/v1/subcategories",
        json={"title": "Empty Sub", "category": "Paper Testing Equipment"},
        headers=admin_headers,
    ).json()
    assert client.delete(f"/api/v1/subcategories/{created['id']}", headers=admin_headers).json() == {
        "success": True
    }
