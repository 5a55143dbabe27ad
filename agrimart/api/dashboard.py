"""
agrimart/api/dashboard.py - Endpoint pour le dashboard admin
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from agrimart.core.database import get_database
from agrimart.core.security import get_current_admin
from agrimart.services.dashboard import dashboard_stats

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def get_dashboard(current_user: dict = Depends(get_current_admin)):
    """
    Récupère les statistiques du dashboard admin
    Requiert les droits d'administrateur
    """
    try:
        stats = await dashboard_stats(get_database())
    except Exception as e:
        logger.exception("Dashboard stats failed")
        raise HTTPException(status_code=500, detail=str(e))

    stats["recentOrders"] = [o.model_dump() for o in stats["recentOrders"]]
    return {
        "success": True,
        "data": stats
    }
