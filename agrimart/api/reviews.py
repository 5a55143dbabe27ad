"""
agrimart/api/reviews.py - Avis clients sur les produits
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from agrimart.core.database import get_database
from agrimart.core.security import get_current_user
from agrimart.core.utils import parse_object_id, serialize_review, utcnow
from agrimart.models.schemas import ReviewCreate

logger = logging.getLogger(__name__)

router = APIRouter()


def average_rating(reviews) -> float:
    if not reviews:
        return 0
    return sum(r.rating for r in reviews) / len(reviews)


@router.get("/{product_id}/reviews")
async def get_reviews(product_id: str):
    """Avis d'un produit, plus récents d'abord, avec la note moyenne"""
    db = get_database()
    docs = await db.reviews.find({"product_id": product_id}).sort("created_at", -1).to_list(length=None)
    reviews = [serialize_review(d) for d in docs]

    return {
        "success": True,
        "data": [r.model_dump() for r in reviews],
        "count": len(reviews),
        "averageRating": average_rating(reviews)
    }


@router.post("/{product_id}/reviews")
async def create_review(
        product_id: str,
        data: ReviewCreate,
        current_user: dict = Depends(get_current_user)
):
    """Publier un avis (connexion requise)"""
    db = get_database()

    if not await db.products.find_one({"_id": parse_object_id(product_id, "product ID")}):
        raise HTTPException(status_code=404, detail="Product not found")

    username = current_user.get("username") or current_user.get("email", "").split("@")[0] or "Anonymous"

    doc = {
        "user_id": str(current_user["_id"]),
        "product_id": product_id,
        "username": username,
        "rating": data.rating,
        "comment": data.comment,
        "images": data.images or None,
        "created_at": utcnow(),
    }
    result = await db.reviews.insert_one(doc)
    doc["_id"] = result.inserted_id

    logger.info("Review %s added on product %s", result.inserted_id, product_id)

    return {
        "success": True,
        "message": "Thank you for your feedback!",
        "data": serialize_review(doc).model_dump()
    }
