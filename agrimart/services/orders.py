"""
agrimart/services/orders.py - Lecture et changements de statut des commandes

Les statuts sont écrasés directement: aucune vérification de transition,
aucun retour arrière.
"""

import logging
from typing import Iterable, List, Optional

from bson import ObjectId
from fastapi import HTTPException

from agrimart.core.utils import parse_object_id, serialize_order, utcnow
from agrimart.models.schemas import Order, OrderItemStatus, OrderStatus

logger = logging.getLogger(__name__)

# Une commande dont toutes les lignes ont au moins ce statut part en "shipped"
PROCESSED_ITEM_STATUSES = {
    OrderItemStatus.processed,
    OrderItemStatus.shipped,
    OrderItemStatus.delivered,
}


# ============================================
# LECTURE
# ============================================

async def load_items(db, order_ids: List[str]) -> dict:
    """order_id → lignes triées par position"""
    if not order_ids:
        return {}
    cursor = db.order_items.find({"order_id": {"$in": order_ids}}).sort("position", 1)
    rows = await cursor.to_list(length=None)

    grouped = {oid: [] for oid in order_ids}
    for row in rows:
        grouped.setdefault(row["order_id"], []).append(row)
    return grouped


async def list_orders(db, query: dict, limit: int = 0) -> List[Order]:
    cursor = db.orders.find(query).sort("ordered_at", -1)
    if limit:
        cursor = cursor.limit(limit)
    docs = await cursor.to_list(length=limit or None)

    items = await load_items(db, [str(d["_id"]) for d in docs])
    return [serialize_order(d, items.get(str(d["_id"]), [])) for d in docs]


async def get_order(db, order_id: str, user_id: Optional[str] = None) -> Order:
    oid = parse_object_id(order_id, "order ID")
    order_id = str(oid)
    query = {"_id": oid}
    if user_id is not None:
        query["user_id"] = user_id

    doc = await db.orders.find_one(query)
    if not doc:
        raise HTTPException(status_code=404, detail="Order not found")

    items = await load_items(db, [order_id])
    return serialize_order(doc, items.get(order_id, []))


def filter_orders(orders: Iterable[Order], status: str = "all", search: str = "") -> List[Order]:
    """Filtre admin: statut ("all" = tous) puis recherche id / client / article"""
    results = []
    term = (search or "").lower()

    for order in orders:
        if status != "all" and order.orderStatus.value != status:
            continue
        if term and not (
            term in order.id.lower()
            or term in order.userId.lower()
            or any(term in item.productName.lower() for item in order.items)
        ):
            continue
        results.append(order)

    return results


# ============================================
# STATUTS
# ============================================

def can_cancel(order: Order) -> bool:
    return order.orderStatus != OrderStatus.cancelled and order.canCancel


def all_items_processed(statuses: Iterable[OrderItemStatus]) -> bool:
    statuses = list(statuses)
    return bool(statuses) and all(s in PROCESSED_ITEM_STATUSES for s in statuses)


async def cancel_order(db, order_id: str, user_id: str) -> Order:
    """Annulation par le client"""
    order_id = str(parse_object_id(order_id, "order ID"))
    order = await get_order(db, order_id, user_id=user_id)
    if not can_cancel(order):
        raise HTTPException(status_code=400, detail="This order can no longer be cancelled")

    await db.orders.update_one(
        {"_id": ObjectId(order_id)},
        {"$set": {"order_status": OrderStatus.cancelled.value, "can_cancel": False}}
    )
    await db.order_items.update_many(
        {"order_id": order_id},
        {"$set": {"status": OrderItemStatus.cancelled.value}}
    )

    logger.info("Order %s cancelled by user %s", order_id, user_id)
    return await get_order(db, order_id)


async def set_order_status(db, order_id: str, status: OrderStatus) -> Order:
    """Écrase le statut (admin)"""
    update = {"order_status": status.value}
    if status == OrderStatus.delivered:
        update["delivered_at"] = utcnow()

    result = await db.orders.update_one({"_id": parse_object_id(order_id, "order ID")}, {"$set": update})
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Order not found")

    logger.info("Order %s status → %s", order_id, status.value)
    return await get_order(db, order_id)


async def set_item_status(db, order_id: str, position: int, status: OrderItemStatus) -> Order:
    """
    Met à jour une ligne (admin). Si toutes les lignes sont traitées,
    la commande passe en "shipped".
    """
    order_id = str(parse_object_id(order_id, "order ID"))
    order = await get_order(db, order_id)
    if position < 0 or position >= len(order.items):
        raise HTTPException(status_code=404, detail="Order item not found")

    await db.order_items.update_one(
        {"order_id": order_id, "position": position},
        {"$set": {"status": status.value}}
    )

    statuses = [item.status for item in order.items]
    statuses[position] = status
    if all_items_processed(statuses):
        await db.orders.update_one(
            {"_id": ObjectId(order_id)},
            {"$set": {"order_status": OrderStatus.shipped.value}}
        )
        logger.info("Order %s: all items processed → shipped", order_id)

    return await get_order(db, order_id)
