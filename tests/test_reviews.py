"""Tests des avis produits (liste, note moyenne, publication)."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

from bson import ObjectId

from conftest import PRODUCT_ID, USER_ID, make_cursor

from agrimart.api.reviews import average_rating
from agrimart.core import security
from agrimart.models.schemas import Review


def review_doc(rating, day, username="ramesh"):
    return {
        "_id": ObjectId(),
        "product_id": PRODUCT_ID,
        "user_id": str(USER_ID),
        "username": username,
        "rating": rating,
        "comment": f"{rating} stars",
        "created_at": datetime(2024, 5, day, tzinfo=timezone.utc),
    }


def test_average_rating():
    reviews = [
        Review(id=str(i), userId="u", username="u", rating=r, createdAt=datetime(2024, 5, 1))
        for i, r in enumerate([5, 4, 3])
    ]
    assert average_rating(reviews) == 4
    assert average_rating([]) == 0


class TestListReviews:
    def test_newest_first_with_average(self, client, patch_db):
        patch_db.reviews.find.return_value = make_cursor([review_doc(5, 3), review_doc(2, 1)])

        response = client.get(f"/api/products/{PRODUCT_ID}/reviews")

        body = response.json()
        patch_db.reviews.find.assert_called_once_with({"product_id": PRODUCT_ID})
        patch_db.reviews.find.return_value.sort.assert_called_once_with("created_at", -1)
        assert [r["rating"] for r in body["data"]] == [5, 2]
        assert body["count"] == 2
        assert body["averageRating"] == 3.5

    def test_no_reviews(self, client, patch_db):
        body = client.get(f"/api/products/{PRODUCT_ID}/reviews").json()
        assert body["data"] == []
        assert body["count"] == 0
        assert body["averageRating"] == 0


class TestCreateReview:
    def test_requires_login(self, client):
        response = client.post(f"/api/products/{PRODUCT_ID}/reviews", json={"rating": 4})
        assert response.status_code in (401, 403)

    def test_unknown_product(self, client, patch_db, as_user):
        response = client.post(f"/api/products/{PRODUCT_ID}/reviews", json={"rating": 4})
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"
        patch_db.reviews.insert_one.assert_not_awaited()

    def test_rating_out_of_range(self, client, as_user):
        for rating in (0, 6):
            response = client.post(f"/api/products/{PRODUCT_ID}/reviews", json={"rating": rating})
            assert response.status_code == 422

    def test_create(self, client, patch_db, as_user, product_doc):
        patch_db.products.find_one = AsyncMock(return_value=product_doc)

        response = client.post(f"/api/products/{PRODUCT_ID}/reviews",
                               json={"rating": 5, "comment": "Great tractor"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["username"] == "ramesh"
        assert data["productId"] == PRODUCT_ID
        doc = patch_db.reviews.insert_one.call_args.args[0]
        assert doc["user_id"] == str(USER_ID)
        assert doc["rating"] == 5

    def test_username_falls_back_to_email(self, app, client, patch_db, product_doc):
        profile = {"_id": USER_ID, "username": "", "email": "suresh@example.com"}
        app.dependency_overrides[security.get_current_user] = lambda: profile
        patch_db.products.find_one = AsyncMock(return_value=product_doc)

        response = client.post(f"/api/products/{PRODUCT_ID}/reviews", json={"rating": 3})

        assert response.json()["data"]["username"] == "suresh"
