from datetime import datetime

from storefront.api.v1.endpoints.catalog import SESSION_COOKIE, get_catalog_source
from storefront.catalog.sources import CatalogSource
from storefront.db.models import Product
from storefront.main import app


def ids(body):
    return [item["id"] for item in body["items"]]


def test_products_page_sets_session_cookie(client, sample_catalog):
    response = client.get("/api/v1/catalog/products")
    assert response.status_code == 200
    assert SESSION_COOKIE in response.cookies
    body = response.json()
    assert ids(body) == ["p1", "p2", "p3", "p4", "p5", "p6"]
    assert body["meta"]["total"] == 6
    assert body["meta"]["page_size"] == 12
    assert body["pages"] == []
    assert body["url"] == "/products"
    assert body["facets"] == ["Paper Testing Equipment", "Textile Testing Equipment"]
    assert body["empty"] is False


def test_products_page_filters(client, sample_catalog):
    body = client.get(
        "/api/v1/catalog/products",
        params={"category": ["Paper Testing Equipment"], "min_rating": 4},
    ).json()
    assert ids(body) == ["p1", "p2"]
    assert body["url"] == "/products?category=Paper+Testing+Equipment&min_rating=4"

    body = client.get("/api/v1/catalog/products", params={"q": "bursting", "price_max": 100000}).json()
    assert ids(body) == ["p3"]


def test_products_page_latest_sort(client, sample_catalog):
    body = client.get("/api/v1/catalog/products", params={"sort": "latest"}).json()
    assert ids(body) == ["p1", "p2", "p3", "p4", "p5", "p6"]
    assert body["url"] == "/products?sort=latest"
    assert client.get("/api/v1/catalog/products", params={"sort": "price"}).status_code == 422


def test_empty_result_offers_reset(client, sample_catalog):
    body = client.get("/api/v1/catalog/products", params={"q": "zzz", "page": 4}).json()
    assert body["empty"] is True
    assert body["items"] == []
    assert body["meta"]["page"] == 1
    assert body["meta"]["total_pages"] == 0
    assert body["reset_url"] == "/products"


def test_out_of_range_page_is_clamped(client, sample_catalog):
    body = client.get("/api/v1/catalog/products", params={"page": 9}).json()
    assert body["meta"]["page"] == 1
    assert len(body["items"]) == 6


def test_category_page(client, sample_catalog):
    body = client.get("/api/v1/catalog/category/paper-testing-equipment").json()
    assert ids(body) == ["p1", "p2", "p3", "p6"]
    assert body["meta"]["page_size"] == 9
    assert body["heading"] == "paper testing equipment"
    assert [entry["title"] for entry in body["sidebar"]] == [
        "Paper Testing Equipment",
        "Textile Testing Equipment",
    ]
    assert body["sidebar"][0]["active"] is True
    assert body["sidebar"][0]["subcategories"] == []
    assert [item["id"] for item in body["latest"]] == ["p1", "p2", "p3", "p6"]


def test_category_page_with_subcategory(client, sample_catalog):
    body = client.get(
        "/api/v1/catalog/category/paper-testing-equipment",
        params={"subcategory": "bursting-strength-tester"},
    ).json()
    assert ids(body) == ["p2", "p3"]
    assert body["heading"] == "paper testing equipment - Bursting Strength Tester"
    assert body["url"] == "/category/paper-testing-equipment?subcategory=bursting-strength-tester"
    paper = body["sidebar"][0]
    assert paper["expanded"] is True
    assert [(s["slug"], s["selected"]) for s in paper["subcategories"]] == [
        ("cobb-tester", False),
        ("bursting-strength-tester", True),
    ]


def test_category_page_ignores_unknown_subcategory(client, sample_catalog):
    body = client.get(
        "/api/v1/catalog/category/paper-testing-equipment", params={"subcategory": "nope"}
    ).json()
    assert ids(body) == ["p1", "p2", "p3", "p6"]
    assert body["criteria"]["selected_subcategory"] is None


def test_category_search_matches_category_name(client, sample_catalog):
    body = client.get(
        "/api/v1/catalog/category/textile-testing-equipment", params={"q": "textile"}
    ).json()
    assert ids(body) == ["p4", "p5"]


def test_subcategory_click_toggles_url(client, sample_catalog):
    url = "/api/v1/catalog/category/paper-testing-equipment/subcategory/cobb-tester"
    first = client.post(url).json()
    assert first == {
        "url": "/category/paper-testing-equipment?subcategory=cobb-tester",
        "selected_subcategory": "cobb-tester",
    }
    second = client.post(url).json()
    assert second == {"url": "/category/paper-testing-equipment", "selected_subcategory": None}


def test_expand_toggle(client, sample_catalog):
    url = "/api/v1/catalog/category/paper-testing-equipment/expand/Textile Testing Equipment"
    assert client.post(url).json()["expanded"] is True
    assert client.post(url).json()["expanded"] is False


def test_reset_category_filters(client, sample_catalog):
    client.get(
        "/api/v1/catalog/category/paper-testing-equipment",
        params={"subcategory": "cobb-tester", "min_rating": 5},
    )
    body = client.post("/api/v1/catalog/category/paper-testing-equipment/reset").json()
    assert ids(body) == ["p1", "p2", "p3", "p6"]
    assert body["criteria"]["min_rating"] == 0
    assert body["url"] == "/category/paper-testing-equipment"


def test_reset_products_filters(client, sample_catalog):
    client.get("/api/v1/catalog/products", params={"q": "zzz"})
    body = client.post("/api/v1/catalog/products/reset").json()
    assert body["empty"] is False
    assert body["criteria"]["search_query"] == ""


def test_latest_in_category(client, sample_catalog):
    latest = client.get("/api/v1/catalog/category/textile-testing-equipment/latest").json()
    assert [p["id"] for p in latest] == ["p4", "p5"]
    limited = client.get("/api/v1/catalog/category/paper-testing-equipment/latest", params={"limit": 1}).json()
    assert [p["id"] for p in limited] == ["p1"]


def test_snapshot_is_reused_until_session_is_discarded(client, sample_catalog):
    assert client.get("/api/v1/catalog/products").json()["meta"]["total"] == 6

    sample_catalog.add(
        Product(id="p7", title="New Tester", slug="new-tester", category="Paper Testing Equipment",
                created_at=datetime(2024, 6, 1))
    )
    sample_catalog.commit()
    assert client.get("/api/v1/catalog/products").json()["meta"]["total"] == 6

    assert client.delete("/api/v1/catalog/session").json() == {"success": True, "discarded": True}
    body = client.get("/api/v1/catalog/products").json()
    assert body["meta"]["total"] == 7
    assert ids(body)[0] == "p7"


class FailingSource(CatalogSource):
    async def fetch_products(self):
        raise ConnectionError("catalog is down")

    async def fetch_categories(self):
        raise ConnectionError("catalog is down")

    async def fetch_subcategories(self):
        return {"error": "not a list"}


def test_failing_source_degrades_to_empty_page(client):
    app.dependency_overrides[get_catalog_source] = FailingSource
    try:
        response = client.get("/api/v1/catalog/category/paper-testing-equipment")
    finally:
        del app.dependency_overrides[get_catalog_source]
    assert response.status_code == 200
    body = response.json()
    assert body["empty"] is True
    assert body["sidebar"] == []
    assert body["reset_url"] == "/category/paper-testing-equipment"


def test_expensive_products_are_visible_without_price_filter(client, sample_catalog):
    sample_catalog.add(
        Product(id="p7", title="Universal Testing Machine", slug="universal-testing-machine",
                category="Paper Testing Equipment", price="3,50,000",
                created_at=datetime(2024, 1, 1))
    )
    sample_catalog.commit()

    body = client.get("/api/v1/catalog/products").json()
    assert "p7" in ids(body)
    assert body["criteria"]["price_max"] is None
    assert body["price_slider_max"] == 240000

    body = client.get("/api/v1/catalog/products", params={"price_max": 240000}).json()
    assert "p7" not in ids(body)
    assert body["criteria"]["price_max"] == 240000

    body = client.post("/api/v1/catalog/products/reset").json()
    assert "p7" in ids(body)

    body = client.get("/api/v1/catalog/category/paper-testing-equipment").json()
    assert "p7" in ids(body)
