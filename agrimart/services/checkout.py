"""
agrimart/services/checkout.py - Passage de commande

Lignes sélectionnées du panier → commande + lignes de commande, paiement
simulé pour tout sauf le paiement à la livraison.
"""

import logging
import random

from fastapi import HTTPException

from agrimart.core.config import settings
from agrimart.core.utils import serialize_order, utcnow
from agrimart.models.schemas import (
    Address,
    CheckoutRequest,
    OrderItemStatus,
    OrderStatus,
    PaymentMethod,
)
from agrimart.state.session import Session
from agrimart.state.store import Action, ActionType, cart_total, selected_items

logger = logging.getLogger(__name__)


class PaymentFailed(Exception):
    pass


def simulate_payment(method: PaymentMethod, rng=random):
    """Le paiement à la livraison ne passe pas par la passerelle"""
    if method == PaymentMethod.cashOnDelivery:
        return
    if rng.random() >= settings.PAYMENT_SUCCESS_RATE:
        raise PaymentFailed("Payment failed")


def validate_address(address: Address):
    if any(not value.strip() for value in address.model_dump().values()):
        raise HTTPException(status_code=400, detail="Please fill all address fields")


def prefill_address(saved: str) -> Address:
    """Adresse du profil "porte, rue, ville, état, code" → Address"""
    parts = (saved or "").split(", ")
    if len(parts) < 4:
        return Address()
    parts += [""] * (5 - len(parts))
    return Address(
        doorNumber=parts[0],
        street=parts[1],
        cityOrVillage=parts[2],
        state=parts[3],
        pinCode=parts[4],
    )


def initial_status(method: PaymentMethod) -> OrderStatus:
    return OrderStatus.processing if method == PaymentMethod.cashOnDelivery else OrderStatus.pending


def build_order_documents(user_id: str, items, request: CheckoutRequest, now=None):
    """Retourne (document commande, documents lignes sans order_id)"""
    now = now or utcnow()
    order_doc = {
        "user_id": user_id,
        "shipping_address": request.shippingAddress.model_dump(),
        "payment_method": request.paymentMethod.value,
        "order_status": initial_status(request.paymentMethod).value,
        "total_amount": cart_total(items),
        "ordered_at": now,
        "delivered_at": None,
        "can_cancel": True,
        "can_replace": False,
        "can_return": False,
    }
    item_docs = [
        {
            "position": position,
            "product_id": line.productId,
            "product_name": line.product.name,
            "quantity": line.quantity,
            "color": line.color,
            "price": line.product.price,
            "status": OrderItemStatus.pending.value,
        }
        for position, line in enumerate(items)
    ]
    return order_doc, item_docs


async def place_order(db, session: Session, request: CheckoutRequest, rng=random):
    state = session.state
    if not state.isAuthenticated or state.user is None:
        raise HTTPException(status_code=401, detail="Please login to continue")

    items = selected_items(state)
    if not items:
        raise HTTPException(status_code=400, detail="No items selected for checkout")

    validate_address(request.shippingAddress)

    try:
        simulate_payment(request.paymentMethod, rng)
    except PaymentFailed:
        logger.warning("Simulated payment failed for user %s", state.user.id)
        raise HTTPException(status_code=402, detail="Payment failed. Please try again.")

    order_doc, item_docs = build_order_documents(state.user.id, items, request)

    result = await db.orders.insert_one(order_doc)
    order_doc["_id"] = result.inserted_id
    order_id = str(result.inserted_id)
    for doc in item_docs:
        doc["order_id"] = order_id
    await db.order_items.insert_many(item_docs)

    order = serialize_order(order_doc, item_docs)

    removed = list(dict.fromkeys(line.productId for line in items))
    session.dispatch(
        Action(type=ActionType.ADD_ORDER, payload=order),
        *[Action(type=ActionType.REMOVE_FROM_CART, payload=pid) for pid in removed]
    )
    await session.save()

    logger.info("✅ Order created: %s | user=%s | total=%s", order_id, state.user.id, order.totalAmount)
    return order
