"""Tests for the product catalog endpoints."""

from catalog import PRODUCTS, final_price


class TestProductList:
    def test_lists_whole_catalog(self, client):
        response = client.get("/products")

        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [p.id for p in PRODUCTS]

    def test_filter_by_category(self, client):
        response = client.get("/products", params={"category": "eyeglasses"})

        assert {p["category"] for p in response.json()} == {"eyeglasses"}

    def test_category_all_means_no_filter(self, client):
        response = client.get("/products", params={"category": "all"})

        assert len(response.json()) == len(PRODUCTS)

    def test_search_matches_brand_case_insensitive(self, client):
        response = client.get("/products", params={"q": "rayban"})

        assert {p["id"] for p in response.json()} == {"1", "6"}

    def test_price_range_uses_discounted_price(self, client):
        """Aviator lists at 89.99 but sells at 71.99 after its 20% discount."""
        response = client.get("/products", params={"min_price": 70, "max_price": 72})

        assert [p["id"] for p in response.json()] == ["1"]

    def test_sort_price_low(self, client):
        prices = [p["final_price"] for p in client.get("/products", params={"sort": "price-low"}).json()]

        assert prices == sorted(prices)

    def test_sort_rating(self, client):
        ratings = [p["rating"] for p in client.get("/products", params={"sort": "rating"}).json()]

        assert ratings == sorted(ratings, reverse=True)

    def test_unknown_sort_is_rejected(self, client):
        response = client.get("/products", params={"sort": "cheapest"})

        assert response.status_code == 400


class TestProductDetail:
    def test_detail_includes_final_price(self, client):
        response = client.get("/products/2")

        assert response.status_code == 200
        assert response.json()["final_price"] == round(final_price(PRODUCTS[1]), 2)

    def test_unknown_product(self, client):
        response = client.get("/products/999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Product not found"


def test_categories_carry_product_counts(client):
    categories = {c["id"]: c for c in client.get("/categories").json()}

    assert categories["sunglasses"]["product_count"] == 5
    assert categories["eyeglasses"]["product_count"] == 3
    assert categories["contact-lenses"]["product_count"] == 1
