"""
agrimart/api/admin.py - Gestion des commandes côté back-office
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from agrimart.core.database import get_database
from agrimart.core.security import get_current_admin
from agrimart.models.schemas import OrderItemStatusUpdate, OrderStatus, OrderStatusUpdate
from agrimart.services import orders as order_service

router = APIRouter()

STATUS_FILTERS = ["all"] + [s.value for s in OrderStatus]


@router.get("/orders")
async def get_all_orders(
        status: str = Query("all"),
        search: str = Query(""),
        admin=Depends(get_current_admin)
):
    """
    Toutes les commandes (Admin uniquement)

    Paramètres:
    - status: statut exact ou "all"
    - search: id commande, id client ou nom d'article
    """
    if status not in STATUS_FILTERS:
        raise HTTPException(status_code=400, detail="Invalid status filter")

    orders = await order_service.list_orders(get_database(), {})
    results = order_service.filter_orders(orders, status, search)

    return {
        "success": True,
        "data": [o.model_dump() for o in results],
        "total": len(results)
    }


@router.patch("/orders/{order_id}")
async def update_order_status(
        order_id: str,
        data: OrderStatusUpdate,
        admin=Depends(get_current_admin)
):
    """Mettre à jour le statut d'une commande"""
    order = await order_service.set_order_status(get_database(), order_id, data.status)
    return {
        "success": True,
        "message": f"Order status updated: {data.status.value}",
        "data": order.model_dump()
    }


@router.patch("/orders/{order_id}/items/{position}")
async def update_order_item_status(
        order_id: str,
        position: int,
        data: OrderItemStatusUpdate,
        admin=Depends(get_current_admin)
):
    """Statut d'une ligne; la commande passe en "shipped" quand tout est traité"""
    order = await order_service.set_item_status(get_database(), order_id, position, data.status)
    return {
        "success": True,
        "message": "Order item updated successfully",
        "data": order.model_dump()
    }


@router.post("/orders/{order_id}/complete")
async def complete_order(order_id: str, admin=Depends(get_current_admin)):
    order = await order_service.set_order_status(get_database(), order_id, OrderStatus.delivered)
    return {
        "success": True,
        "message": "Order marked as delivered",
        "data": order.model_dump()
    }
