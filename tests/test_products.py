import pytest


@pytest.fixture
def catalog(make_product):
    products = [make_product(name=f"Toy {i}", price="3.50", category="Toys") for i in range(12)]
    products.append(make_product(name="Kettle", price="25.00", category="Home Goods"))
    products.append(make_product(name="Drill", price="80.00", category="Power-Tools"))
    return products


def test_list_products_defaults(client, catalog):
    body = client.get("/products").json()
    assert body["page"] == 1
    assert body["limit"] == 10
    assert body["total"] == 14
    assert len(body["items"]) == 10
    assert body["items"][0] == {
        "id": catalog[0].id, "name": "Toy 0", "price": 3.5, "image_url": None, "category": "Toys",
    }


def test_list_products_pagination(client, catalog):
    body = client.get("/products", params={"page": 2, "limit": 5}).json()
    assert [item["name"] for item in body["items"]] == ["Toy 5", "Toy 6", "Toy 7", "Toy 8", "Toy 9"]


@pytest.mark.parametrize("params", [
    {"page": "abc", "limit": "xyz"},
    {"page": "0", "limit": "-3"},
    {"page": "", "limit": ""},
])
def test_list_products_bad_paging_falls_back_to_defaults(client, catalog, params):
    response = client.get("/products", params=params)
    assert response.status_code == 200
    body = response.json()
    assert (body["page"], body["limit"]) == (1, 10)


def test_list_products_caps_limit(client, catalog):
    assert client.get("/products", params={"limit": 5000}).json()["limit"] == 100


@pytest.mark.parametrize("category, expected", [
    ("Toys", 12),
    ("Home Goods", 1),
    ("Power-Tools", 1),
    ("Garden", 0),
])
def test_filter_by_category(client, catalog, category, expected):
    response = client.get(f"/products/category/{category}", params={"limit": 50})
    assert response.status_code == 200
    assert response.json()["total"] == expected


@pytest.mark.parametrize("category", ["Toys'; DROP TABLE products;--", "Toys%21", "a_b", "Toys%0A"])
def test_filter_by_category_rejects_disallowed_characters(client, catalog, category):
    response = client.get(f"/products/category/{category}")
    assert response.status_code == 400
    assert response.json()["kind"] == "validation_error"


def test_categories(client, catalog):
    assert client.get("/products/categories").json() == ["Home Goods", "Power-Tools", "Toys"]


def test_get_single_product(client, catalog):
    kettle = catalog[12]
    assert client.get(f"/products/{kettle.id}").json()["name"] == "Kettle"
    assert client.get("/products/99999").status_code == 404
