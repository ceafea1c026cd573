from app.core.exceptions import StorageError


def test_create_product_returns_201(client):
    response = client.post(
        "/products",
        json={
            "name": "Trail Shoe",
            "description": "Lightweight running shoe",
            "price": 89.5,
            "categories": ["Footwear", "Running"],
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["id"] == 1
    assert body["name"] == "Trail Shoe"
    assert body["price"] == 89.5
    assert body["categories"] == ["Footwear", "Running"]
    assert body["created_at"] == body["updated_at"]
    assert "X-Request-ID" in response.headers


def test_create_product_with_missing_field_is_bad_request(client, product_dao):
    response = client.post("/products", json={"name": "No price", "description": "", "categories": ["x"]})

    assert response.status_code == 400
    assert response.text == "invalid input"
    assert product_dao.calls == []


def test_create_product_with_malformed_json_is_bad_request(client):
    response = client.post("/products", content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400


def test_create_product_with_empty_name_is_bad_request(client, product_dao):
    response = client.post(
        "/products",
        json={"name": "", "description": "", "price": 1, "categories": ["x"]},
    )

    assert response.status_code == 400
    assert response.text == "invalid input"
    assert product_dao.calls == []


def test_get_product(client, seed):
    created = seed(name="Mug")

    response = client.get(f"/products/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_get_product_with_bad_id(client):
    response = client.get("/products/abc")

    assert response.status_code == 400
    assert response.text == "Invalid product ID"


def test_get_missing_product(client):
    response = client.get("/products/999")

    assert response.status_code == 404
    assert response.text == "product not found"


def test_update_product_is_partial(client, seed):
    created = seed(name="Kettle", price=30, categories=["kitchen"])

    response = client.put(f"/products/{created['id']}", json={"price": 25.5})
    assert response.status_code == 204
    assert response.content == b""

    body = client.get(f"/products/{created['id']}").json()
    assert body["price"] == 25.5
    assert body["name"] == "Kettle"
    assert body["categories"] == ["kitchen"]
    assert body["updated_at"] > created["updated_at"]


def test_update_missing_product(client):
    response = client.put("/products/5", json={"name": "Ghost"})

    assert response.status_code == 404


def test_update_with_empty_body_is_bad_request(client, seed):
    created = seed()

    response = client.put(f"/products/{created['id']}", json={})

    assert response.status_code == 400


def test_delete_product_twice(client, seed):
    created = seed()

    assert client.delete(f"/products/{created['id']}").status_code == 204
    assert client.delete(f"/products/{created['id']}").status_code == 404
    assert client.get(f"/products/{created['id']}").status_code == 404


def test_list_products_defaults(client, seed):
    seed(name="One")
    seed(name="Two")

    response = client.get("/products")

    assert response.status_code == 200
    body = response.json()
    assert body["page"] == 1
    assert body["limit"] == 10
    assert body["total_count"] == 2
    assert [p["name"] for p in body["products"]] == ["Two", "One"]


def test_list_products_second_page(client, seed):
    for i in range(1, 26):
        seed(name=f"Item {i}")

    body = client.get("/products", params={"page": 2, "limit": 10}).json()

    assert body["page"] == 2
    assert body["limit"] == 10
    assert body["total_count"] == 25
    assert [p["name"] for p in body["products"]] == [f"Item {i}" for i in range(15, 5, -1)]


def test_list_products_price_bounds_are_inclusive(client, seed):
    for price in (9.5, 10, 15, 20, 20.5):
        seed(name=f"Priced {price}", price=price)

    body = client.get("/products", params={"min_price": 10, "max_price": 20}).json()

    assert sorted(p["price"] for p in body["products"]) == [10, 15, 20]
    assert body["total_count"] == 3


def test_list_products_category_filter(client, seed):
    seed(name="Boot", categories=["Footwear"])
    seed(name="Hat", categories=["Headwear"])

    body = client.get("/products", params={"category_id": "foot"}).json()

    assert [p["name"] for p in body["products"]] == ["Boot"]


def test_list_products_clamps_out_of_range_pagination(client, seed):
    seed()

    for params in ({"page": 0}, {"page": -4}, {"limit": 0}, {"limit": 101}, {"limit": 500}):
        response = client.get("/products", params=params)
        assert response.status_code == 200, params
        body = response.json()
        assert body["page"] == 1
        assert body["limit"] == 10
        assert body["total_count"] == 1


def test_list_products_keeps_in_range_pagination(client):
    body = client.get("/products", params={"page": 3, "limit": 100}).json()

    assert body["page"] == 3
    assert body["limit"] == 100


def test_list_products_rejects_non_numeric_pagination(client, product_dao):
    assert client.get("/products", params={"page": "abc"}).status_code == 400
    assert client.get("/products", params={"limit": "ten"}).status_code == 400
    assert product_dao.calls == []


def test_list_products_rejects_malformed_price(client):
    response = client.get("/products", params={"min_price": "cheap"})

    assert response.status_code == 400


def test_storage_failure_is_internal_error(client, product_dao):
    product_dao.fail_with = StorageError("error listing products")

    response = client.get("/products")

    assert response.status_code == 500
    assert response.text == "Internal server error"


def test_health_ok(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert "T" in body["timestamp"]


def test_health_unavailable_when_database_unreachable(client, fake_database):
    fake_database.reachable = False

    response = client.get("/health")

    assert response.status_code == 503
    assert response.text == "Service Unavailable"
