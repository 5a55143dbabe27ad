"""
agrimart/state/session.py - Miroir de l'état de session

Après chaque action, le panier, l'utilisateur, les produits vus récemment et
les filtres sont recopiés dans la collection ``sessions``. Au début de chaque
requête l'état est reconstruit en rejouant ces entrées dans le reducer.
Dernière écriture gagnante: aucun verrou entre requêtes concurrentes.
"""

import logging
from typing import List, Optional, Tuple

from fastapi import Depends, Header, HTTPException
from pydantic import ValidationError

from agrimart.core.database import get_database
from agrimart.core.security import get_optional_user
from agrimart.core.utils import serialize_user
from agrimart.models.schemas import CartItem, FilterOptions, Product, User
from agrimart.state.store import Action, ActionType, AppState, initial_state, reduce, reduce_all

logger = logging.getLogger(__name__)

MIRRORED_KEYS = ("user", "cart", "recentlyViewed", "filterOptions")


def snapshot(state: AppState) -> dict:
    """Partie de l'état recopiée dans la collection sessions"""
    return state.model_dump(mode="json", include=set(MIRRORED_KEYS))


def restore_state(doc: dict) -> Tuple[AppState, List[str]]:
    """
    Reconstruit l'état depuis un document de session

    Retourne (état, clés corrompues). Une clé qui ne valide pas est ignorée,
    les autres sont quand même chargées.
    """
    state = initial_state()
    corrupted = []

    if doc.get("user"):
        try:
            user = User.model_validate(doc["user"])
            state = reduce(state, Action(type=ActionType.SET_USER, payload=user))
        except ValidationError:
            logger.error("Failed to parse user from session", exc_info=True)
            corrupted.append("user")

    if doc.get("cart"):
        try:
            items = [CartItem.model_validate(item) for item in doc["cart"]]
            for item in items:
                state = reduce(state, Action(type=ActionType.ADD_TO_CART, payload=item))
        except (ValidationError, TypeError):
            logger.error("Failed to parse cart from session", exc_info=True)
            corrupted.append("cart")

    if doc.get("recentlyViewed"):
        try:
            products = [Product.model_validate(p) for p in doc["recentlyViewed"]]
            # Rejoué du plus ancien au plus récent pour garder l'ordre
            for product in reversed(products):
                state = reduce(state, Action(type=ActionType.ADD_TO_RECENTLY_VIEWED, payload=product))
        except (ValidationError, TypeError):
            logger.error("Failed to parse recently viewed from session", exc_info=True)
            corrupted.append("recentlyViewed")

    if doc.get("filterOptions"):
        try:
            filters = FilterOptions.model_validate(doc["filterOptions"])
            state = reduce(state, Action(type=ActionType.UPDATE_FILTER_OPTIONS, payload=filters.model_dump()))
        except ValidationError:
            logger.error("Failed to parse filter options from session", exc_info=True)
            corrupted.append("filterOptions")

    return state, corrupted


class Session:
    """État d'une session + sa clé dans la collection sessions"""

    def __init__(self, key: str, state: AppState, profile: Optional[dict] = None):
        self.key = key
        self.state = state
        self.profile = profile

    def dispatch(self, *actions: Action) -> AppState:
        self.state = reduce_all(self.state, actions)
        return self.state

    async def save(self):
        db = get_database()
        await db.sessions.update_one(
            {"_id": self.key},
            {"$set": snapshot(self.state)},
            upsert=True
        )


async def load_session(key: str) -> Session:
    db = get_database()
    doc = await db.sessions.find_one({"_id": key}) or {}
    state, corrupted = restore_state(doc)

    if corrupted:
        await db.sessions.update_one(
            {"_id": key},
            {"$unset": {k: "" for k in corrupted}}
        )

    return Session(key, state)


def guest_key(guest_id: str) -> str:
    return f"guest:{guest_id}"


def session_key(profile: Optional[dict], guest_id: Optional[str]) -> str:
    if profile is not None:
        return f"user:{profile['_id']}"
    if guest_id:
        return guest_key(guest_id)
    raise HTTPException(status_code=400, detail="Missing X-Session-Id header")


async def adopt_guest_session(session: Session, guest_id: str) -> bool:
    """
    Reprend le panier et les produits vus d'une session invitée

    Les lignes passent par ADD_TO_CART (fusion par produit + couleur), les
    produits vus par ADD_TO_RECENTLY_VIEWED. La session invitée est ensuite
    supprimée. Retourne True si quelque chose a été repris.
    """
    guest = await load_session(guest_key(guest_id))
    if not guest.state.cart and not guest.state.recentlyViewed:
        return False

    session.dispatch(*[Action(type=ActionType.ADD_TO_CART, payload=line) for line in guest.state.cart])
    session.dispatch(*[
        Action(type=ActionType.ADD_TO_RECENTLY_VIEWED, payload=product)
        for product in reversed(guest.state.recentlyViewed)
    ])
    await session.save()

    db = get_database()
    await db.sessions.delete_one({"_id": guest.key})

    logger.info(
        "Guest session %s merged into %s (%d cart lines)",
        guest_id, session.key, len(guest.state.cart)
    )
    return True


async def get_session(
        x_session_id: Optional[str] = Header(None),
        profile: Optional[dict] = Depends(get_optional_user)
) -> Session:
    """Dépendance FastAPI: charge la session et synchronise l'utilisateur connecté"""
    session = await load_session(session_key(profile, x_session_id))
    session.profile = profile

    if profile is not None:
        session.dispatch(Action(type=ActionType.LOGIN_SUCCESS, payload=serialize_user(profile)))
        if x_session_id:
            await adopt_guest_session(session, x_session_id)

    return session


async def get_optional_session(
        x_session_id: Optional[str] = Header(None),
        profile: Optional[dict] = Depends(get_optional_user)
) -> Optional[Session]:
    """Session si le client s'est identifié, sinon None"""
    if profile is None and not x_session_id:
        return None
    return await get_session(x_session_id, profile)
