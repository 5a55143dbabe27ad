from datetime import datetime, timezone

from bson import ObjectId
from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse

from agrimart.models.schemas import Order, OrderItem, Product, Review, User


def api_response(success: bool, data=None, message: str = "", status_code: int = None, **kwargs):
    """
    Crée une réponse API standardisée avec sérialisation correcte

    Exemple:
    - api_response(True, data=product, message="OK")
    - api_response(True, data=products, total=100)
    - api_response(False, message="Erreur", status_code=404)
    """
    response = {
        "success": success,
        **({"data": data} if data is not None else {}),
        **({"message": message} if message else {}),
        **kwargs
    }

    # jsonable_encoder convertit datetime → isoformat, modèles pydantic → dict
    return JSONResponse(
        content=jsonable_encoder(response),
        status_code=status_code or (200 if success else 400)
    )


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_object_id(value: str, label: str = "ID") -> ObjectId:
    """Convertit une chaîne en ObjectId ou lève une 400"""
    if not ObjectId.is_valid(value):
        raise HTTPException(status_code=400, detail=f"Invalid {label}")
    return ObjectId(value)


def serialize_user(profile: dict) -> User:
    """Profil MongoDB → User (le hash du mot de passe ne sort jamais)"""
    return User(
        id=str(profile["_id"]),
        username=profile.get("username", ""),
        email=profile.get("email", ""),
        address=profile.get("address") or "",
        phoneNumber=profile.get("phone_number") or "",
        profilePicture=profile.get("profile_picture") or None,
        isAdmin=bool(profile.get("is_admin", False)),
    )


def serialize_review(review: dict) -> Review:
    return Review(
        id=str(review["_id"]),
        productId=review.get("product_id"),
        userId=review["user_id"],
        username=review.get("username", "Anonymous"),
        rating=review["rating"],
        comment=review.get("comment"),
        images=review.get("images") or [],
        createdAt=review["created_at"],
    )


def serialize_product(product: dict, reviews=None) -> Product:
    """
    Sérialise un produit pour l'API

    Les colonnes sont stockées en snake_case, l'API parle camelCase.
    """
    return Product(
        id=str(product["_id"]),
        name=product["name"],
        description=product.get("description", ""),
        price=product["price"],
        images=product.get("images") or [],
        category=product.get("category", ""),
        stockQuantity=product.get("stock_quantity", 0),
        colors=product.get("colors") or [],
        specifications=product.get("specifications") or {},
        createdAt=product.get("created_at"),
        reviews=[serialize_review(r) for r in (reviews or [])],
    )


def serialize_order_item(item: dict) -> OrderItem:
    return OrderItem(
        productId=item.get("product_id"),
        productName=item["product_name"],
        quantity=item["quantity"],
        color=item.get("color", ""),
        price=item["price"],
        status=item.get("status", "pending"),
    )


def serialize_order(order: dict, items=None) -> Order:
    return Order(
        id=str(order["_id"]),
        userId=order["user_id"],
        items=[serialize_order_item(i) for i in (items or [])],
        shippingAddress=order.get("shipping_address") or {},
        paymentMethod=order.get("payment_method", ""),
        orderStatus=order.get("order_status", "pending"),
        totalAmount=order.get("total_amount", 0),
        orderedAt=order["ordered_at"],
        deliveredAt=order.get("delivered_at"),
        canCancel=bool(order.get("can_cancel")),
        canReplace=bool(order.get("can_replace")),
        canReturn=bool(order.get("can_return")),
    )
