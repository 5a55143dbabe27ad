# agrimart/api/orders.py - Checkout + suivi des commandes côté client

from fastapi import APIRouter, HTTPException, Depends

from agrimart.core.database import get_database
from agrimart.models.schemas import CheckoutRequest, OrderStatus
from agrimart.services import orders as order_service
from agrimart.services.checkout import place_order, prefill_address
from agrimart.state.session import Session, get_session
from agrimart.state.store import Action, ActionType, cart_total, selected_items

router = APIRouter()
checkout_router = APIRouter()


async def get_user_session(session: Session = Depends(get_session)) -> Session:
    if session.profile is None:
        raise HTTPException(status_code=401, detail="Please login to continue")
    return session


# ============================================
# CHECKOUT
# ============================================

@checkout_router.get("")
async def get_checkout(session: Session = Depends(get_user_session)):
    """Récapitulatif: lignes cochées, total, adresse pré-remplie"""
    items = selected_items(session.state)
    return {
        "success": True,
        "data": {
            "items": [line.model_dump() for line in items],
            "subtotal": cart_total(items),
            "shippingAddress": prefill_address(session.state.user.address).model_dump()
        }
    }


@checkout_router.post("")
async def checkout(data: CheckoutRequest, session: Session = Depends(get_user_session)):
    """
    Passe la commande des lignes cochées

    ✅ Vérifie l'adresse
    ✅ Paiement simulé (sauf paiement à la livraison)
    ✅ Crée la commande et ses lignes
    ✅ Retire les produits commandés du panier
    """
    order = await place_order(get_database(), session, data)
    return {
        "success": True,
        "message": "Order placed successfully!",
        "data": order.model_dump()
    }


# ============================================
# COMMANDES DE L'UTILISATEUR
# ============================================

@router.get("")
async def get_user_orders(session: Session = Depends(get_user_session)):
    """Toutes les commandes de l'utilisateur, plus récentes d'abord"""
    orders = await order_service.list_orders(get_database(), {"user_id": session.state.user.id})
    session.dispatch(Action(type=ActionType.SET_ORDERS, payload=orders))

    return {
        "success": True,
        "count": len(session.state.orders),
        "data": [o.model_dump() for o in session.state.orders]
    }


@router.get("/{order_id}")
async def get_order(order_id: str, session: Session = Depends(get_user_session)):
    order = await order_service.get_order(get_database(), order_id, user_id=session.state.user.id)
    return {
        "success": True,
        "data": order.model_dump()
    }


@router.post("/{order_id}/cancel")
async def cancel_order(order_id: str, session: Session = Depends(get_user_session)):
    """Annuler une commande tant que c'est encore possible"""
    order = await order_service.cancel_order(get_database(), order_id, session.state.user.id)
    session.dispatch(Action(
        type=ActionType.UPDATE_ORDER_STATUS,
        payload={"orderId": order.id, "status": OrderStatus.cancelled}
    ))

    return {
        "success": True,
        "message": "Order cancelled",
        "data": order.model_dump()
    }
