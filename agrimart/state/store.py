"""
agrimart/state/store.py - Store d'état de la boutique

Tout l'état de session (utilisateur, catalogue en cache, panier, commandes,
produits vus récemment, filtres) passe par ``reduce(state, action)``.
Le reducer est pur: il retourne toujours un nouvel état et ne modifie
jamais celui qu'il reçoit.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from agrimart.core.config import settings
from agrimart.models.schemas import (
    CartItem,
    FilterOptions,
    FilterUpdate,
    Order,
    OrderStatus,
    Product,
    User,
)


class ActionType(str, Enum):
    SET_USER = "SET_USER"
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGOUT = "LOGOUT"
    SET_PRODUCTS = "SET_PRODUCTS"
    ADD_TO_CART = "ADD_TO_CART"
    REMOVE_FROM_CART = "REMOVE_FROM_CART"
    UPDATE_CART_ITEM_QUANTITY = "UPDATE_CART_ITEM_QUANTITY"
    TOGGLE_CART_ITEM_SELECTION = "TOGGLE_CART_ITEM_SELECTION"
    CLEAR_CART = "CLEAR_CART"
    ADD_ORDER = "ADD_ORDER"
    SET_ORDERS = "SET_ORDERS"
    UPDATE_ORDER_STATUS = "UPDATE_ORDER_STATUS"
    ADD_TO_RECENTLY_VIEWED = "ADD_TO_RECENTLY_VIEWED"
    UPDATE_FILTER_OPTIONS = "UPDATE_FILTER_OPTIONS"


class Action(BaseModel):
    type: ActionType
    payload: Any = None


class AppState(BaseModel):
    user: Optional[User] = None
    isAuthenticated: bool = False
    products: List[Product] = []
    cart: List[CartItem] = []
    orders: List[Order] = []
    recentlyViewed: List[Product] = []
    filterOptions: FilterOptions = FilterOptions()


def initial_state() -> AppState:
    return AppState()


# ============================================
# SESSION / CATALOGUE
# ============================================

def _set_user(state: AppState, user: Optional[User]) -> AppState:
    return state.model_copy(update={"user": user, "isAuthenticated": user is not None})


def _login_success(state: AppState, user: User) -> AppState:
    return state.model_copy(update={"user": user, "isAuthenticated": True})


def _logout(state: AppState, _payload) -> AppState:
    return state.model_copy(update={"user": None, "isAuthenticated": False})


def _set_products(state: AppState, products: List[Product]) -> AppState:
    return state.model_copy(update={"products": list(products)})


# ============================================
# PANIER
# ============================================

def _add_to_cart(state: AppState, item: CartItem) -> AppState:
    """Fusionne par (productId, color): incrémente la quantité ou ajoute la ligne"""
    cart = list(state.cart)
    for index, line in enumerate(cart):
        if line.productId == item.productId and line.color == item.color:
            cart[index] = line.model_copy(update={"quantity": line.quantity + item.quantity})
            break
    else:
        cart.append(item)
    return state.model_copy(update={"cart": cart})


def _remove_from_cart(state: AppState, product_id: str) -> AppState:
    # Toutes les couleurs du produit partent
    return state.model_copy(update={
        "cart": [line for line in state.cart if line.productId != product_id]
    })


def _update_quantity(state: AppState, payload: Dict[str, Any]) -> AppState:
    product_id, quantity = payload["productId"], payload["quantity"]
    return state.model_copy(update={
        "cart": [
            line.model_copy(update={"quantity": quantity}) if line.productId == product_id else line
            for line in state.cart
        ]
    })


def _toggle_selection(state: AppState, product_id: str) -> AppState:
    return state.model_copy(update={
        "cart": [
            line.model_copy(update={"selected": not line.selected}) if line.productId == product_id else line
            for line in state.cart
        ]
    })


def _clear_cart(state: AppState, _payload) -> AppState:
    return state.model_copy(update={"cart": []})


# ============================================
# COMMANDES
# ============================================

def _add_order(state: AppState, order: Order) -> AppState:
    return state.model_copy(update={"orders": [*state.orders, order]})


def _set_orders(state: AppState, orders: List[Order]) -> AppState:
    return state.model_copy(update={"orders": list(orders)})


def _update_order_status(state: AppState, payload: Dict[str, Any]) -> AppState:
    """Écrase directement le statut, sans vérifier la transition"""
    order_id = payload["orderId"]
    status = OrderStatus(payload["status"])
    return state.model_copy(update={
        "orders": [
            order.model_copy(update={"orderStatus": status}) if order.id == order_id else order
            for order in state.orders
        ]
    })


# ============================================
# VUS RÉCEMMENT / FILTRES
# ============================================

def _add_to_recently_viewed(state: AppState, product: Product) -> AppState:
    others = [p for p in state.recentlyViewed if p.id != product.id]
    return state.model_copy(update={
        "recentlyViewed": [product, *others][:settings.RECENTLY_VIEWED_LIMIT]
    })


def _update_filter_options(state: AppState, partial) -> AppState:
    if isinstance(partial, BaseModel):
        partial = partial.model_dump(exclude_none=True)
    merged = {**state.filterOptions.model_dump(), **partial}
    return state.model_copy(update={"filterOptions": FilterOptions.model_validate(merged)})


_HANDLERS: Dict[ActionType, Callable[[AppState, Any], AppState]] = {
    ActionType.SET_USER: _set_user,
    ActionType.LOGIN_SUCCESS: _login_success,
    ActionType.LOGOUT: _logout,
    ActionType.SET_PRODUCTS: _set_products,
    ActionType.ADD_TO_CART: _add_to_cart,
    ActionType.REMOVE_FROM_CART: _remove_from_cart,
    ActionType.UPDATE_CART_ITEM_QUANTITY: _update_quantity,
    ActionType.TOGGLE_CART_ITEM_SELECTION: _toggle_selection,
    ActionType.CLEAR_CART: _clear_cart,
    ActionType.ADD_ORDER: _add_order,
    ActionType.SET_ORDERS: _set_orders,
    ActionType.UPDATE_ORDER_STATUS: _update_order_status,
    ActionType.ADD_TO_RECENTLY_VIEWED: _add_to_recently_viewed,
    ActionType.UPDATE_FILTER_OPTIONS: _update_filter_options,
}


def reduce(state: AppState, action: Action) -> AppState:
    """Applique une action et retourne le nouvel état"""
    handler = _HANDLERS.get(action.type)
    if handler is None:
        return state
    return handler(state, action.payload)


def reduce_all(state: AppState, actions) -> AppState:
    for action in actions:
        state = reduce(state, action)
    return state


# ============================================
# SÉLECTEURS
# ============================================

def selected_items(state: AppState) -> List[CartItem]:
    return [line for line in state.cart if line.selected]


def cart_total(items: List[CartItem]) -> float:
    return sum(line.product.price * line.quantity for line in items)


# Raccourci pour FilterUpdate -> payload
def filter_action(update: FilterUpdate) -> Action:
    return Action(type=ActionType.UPDATE_FILTER_OPTIONS, payload=update.model_dump(exclude_none=True))
