def test_create_category_with_default_color(client, headers):
    response = client.post("/api/categories", json={"name": "  Rent "}, headers=headers)
    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Rent"
    assert body["color"] == "#f87171"


def test_create_category_rejects_blank_name(client, headers):
    response = client.post("/api/categories", json={"name": "   "}, headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Category name cannot be empty"


def test_create_category_rejects_bad_color(client, headers):
    response = client.post(
        "/api/categories", json={"name": "Fun", "color": "red"}, headers=headers
    )
    assert response.status_code == 422


def test_categories_are_listed_in_creation_order(client, headers):
    for name in ["Food", "Transport", "Books"]:
        client.post("/api/categories", json={"name": name}, headers=headers)

    response = client.get("/api/categories", headers=headers)
    assert response.status_code == 200
    assert [cat["name"] for cat in response.json()] == ["Food", "Transport", "Books"]


def test_categories_are_scoped_to_their_owner(client, make_user, food):
    other = make_user(email="mallory@example.com")
    assert client.get("/api/categories", headers=other).json() == []

    response = client.delete(f"/api/categories/{food['id']}", headers=other)
    assert response.status_code == 404


def test_deleting_category_keeps_its_expenses(client, headers, food):
    created = client.post(
        "/api/expenses",
        json={"date": "2026-10-01", "amount": 12.5, "category_id": food["id"]},
        headers=headers,
    ).json()

    response = client.delete(f"/api/categories/{food['id']}", headers=headers)
    assert response.status_code == 200

    raw = client.get(f"/api/expenses/{created['id']}", headers=headers).json()
    assert raw["category_id"] is None
    assert raw["amount"] == 12.5
    # uncategorized expenses drop out of the joined list
    assert client.get("/api/expenses", headers=headers).json() == []
    assert client.get("/api/categories", headers=headers).json() == []
