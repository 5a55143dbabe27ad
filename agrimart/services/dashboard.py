"""
agrimart/services/dashboard.py - Statistiques du dashboard admin
"""

from typing import List

from bson import ObjectId

from agrimart.core.utils import serialize_product
from agrimart.services.orders import list_orders


def summarize_status_counts(rows: List[dict]) -> dict:
    """Résultat de l'agrégation {_id: statut, count} → compteurs du dashboard"""
    counts = {row["_id"]: row["count"] for row in rows}
    return {
        "pendingOrders": counts.get("pending", 0) + counts.get("processing", 0),
        "deliveredOrders": counts.get("delivered", 0),
        "cancelledOrders": counts.get("cancelled", 0),
    }


async def total_revenue(db) -> float:
    pipeline = [
        {"$group": {"_id": None, "total_revenue": {"$sum": "$total_amount"}}}
    ]
    result = await db.orders.aggregate(pipeline).to_list(1)
    return result[0]["total_revenue"] if result else 0


async def popular_products(db, limit: int = 5):
    """Produits les plus commentés"""
    pipeline = [
        {"$group": {"_id": "$product_id", "reviewCount": {"$sum": 1}}},
        {"$sort": {"reviewCount": -1}},
        {"$limit": limit}
    ]
    rows = await db.reviews.aggregate(pipeline).to_list(limit)
    if not rows:
        return []

    ids = [ObjectId(row["_id"]) for row in rows if ObjectId.is_valid(row["_id"])]
    products = await db.products.find({"_id": {"$in": ids}}).to_list(length=limit)
    by_id = {str(p["_id"]): p for p in products}

    return [
        {**serialize_product(by_id[row["_id"]]).model_dump(), "reviewCount": row["reviewCount"]}
        for row in rows
        if row["_id"] in by_id
    ]


async def dashboard_stats(db) -> dict:
    status_rows = await db.orders.aggregate([
        {"$group": {"_id": "$order_status", "count": {"$sum": 1}}}
    ]).to_list(None)

    return {
        "totalOrders": await db.orders.count_documents({}),
        "totalProducts": await db.products.count_documents({}),
        "totalUsers": await db.profiles.count_documents({}),
        "revenue": await total_revenue(db),
        **summarize_status_counts(status_rows),
        "popularProducts": await popular_products(db),
        "recentOrders": await list_orders(db, {}, limit=5),
    }
