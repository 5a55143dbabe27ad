from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel

from agrimart.core.database import get_database
from agrimart.core.utils import parse_object_id, serialize_product
from agrimart.models.schemas import CartAdd, CartItem, CartQuantity
from agrimart.state.session import Session, get_session
from agrimart.state.store import Action, ActionType, AppState, cart_total, selected_items

router = APIRouter()


class SelectionUpdate(BaseModel):
    selected: bool


def cart_payload(state: AppState) -> dict:
    """Panier + totaux calculés sur les lignes cochées"""
    selected = selected_items(state)
    return {
        "items": [line.model_dump() for line in state.cart],
        "itemCount": len(state.cart),
        "selectedCount": len(selected),
        "total": cart_total(selected)
    }


def _ensure_in_cart(session: Session, product_id: str):
    if not any(line.productId == product_id for line in session.state.cart):
        raise HTTPException(status_code=404, detail="Product not in cart")


@router.get("")
async def get_cart(session: Session = Depends(get_session)):
    """Récupérer le panier de la session"""
    return {
        "success": True,
        "data": cart_payload(session.state)
    }


@router.post("/add")
async def add_to_cart(data: CartAdd, session: Session = Depends(get_session)):
    """Ajouter un produit au panier (fusion par produit + couleur)"""
    db = get_database()

    doc = await db.products.find_one({"_id": parse_object_id(data.productId, "product ID")})
    if not doc:
        raise HTTPException(status_code=404, detail="Product not found")

    product = serialize_product(doc)
    # Pas de couleur choisie → première couleur du produit
    color = data.color or (product.colors[0] if product.colors else "")

    item = CartItem(
        productId=data.productId,
        product=product,
        quantity=data.quantity,
        color=color,
        selected=True
    )
    session.dispatch(Action(type=ActionType.ADD_TO_CART, payload=item))
    await session.save()

    return {
        "success": True,
        "message": f"Added {product.name} to your cart!",
        "data": cart_payload(session.state)
    }


@router.put("/{product_id}/quantity")
async def update_quantity(product_id: str, data: CartQuantity, session: Session = Depends(get_session)):
    _ensure_in_cart(session, product_id)
    session.dispatch(Action(
        type=ActionType.UPDATE_CART_ITEM_QUANTITY,
        payload={"productId": product_id, "quantity": data.quantity}
    ))
    await session.save()
    return {"success": True, "data": cart_payload(session.state)}


@router.post("/{product_id}/toggle")
async def toggle_selection(product_id: str, session: Session = Depends(get_session)):
    _ensure_in_cart(session, product_id)
    session.dispatch(Action(type=ActionType.TOGGLE_CART_ITEM_SELECTION, payload=product_id))
    await session.save()
    return {"success": True, "data": cart_payload(session.state)}


@router.put("/selection")
async def select_all(data: SelectionUpdate, session: Session = Depends(get_session)):
    """Coche / décoche tout le panier"""
    for product_id in dict.fromkeys(line.productId for line in session.state.cart):
        if any(line.productId == product_id and line.selected != data.selected
               for line in session.state.cart):
            session.dispatch(Action(type=ActionType.TOGGLE_CART_ITEM_SELECTION, payload=product_id))
    await session.save()
    return {"success": True, "data": cart_payload(session.state)}


@router.delete("/{product_id}")
async def remove_from_cart(product_id: str, session: Session = Depends(get_session)):
    _ensure_in_cart(session, product_id)
    session.dispatch(Action(type=ActionType.REMOVE_FROM_CART, payload=product_id))
    await session.save()
    return {
        "success": True,
        "message": "Item removed from cart",
        "data": cart_payload(session.state)
    }


@router.delete("")
async def clear_cart(session: Session = Depends(get_session)):
    """Vider le panier"""
    session.dispatch(Action(type=ActionType.CLEAR_CART))
    await session.save()
    return {
        "success": True,
        "message": "Cart cleared"
    }
