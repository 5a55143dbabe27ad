"""
agrimart/api/state.py - Lecture de l'état de session et des filtres
"""

from typing import Optional

from fastapi import APIRouter, Depends

from agrimart.api.products import load_catalog
from agrimart.catalog.filters import filter_products
from agrimart.core.database import get_database
from agrimart.models.schemas import FilterOptions, FilterUpdate
from agrimart.state.session import Session, get_session, snapshot
from agrimart.state.store import Action, ActionType, filter_action

router = APIRouter()


@router.get("")
async def get_state(session: Session = Depends(get_session)):
    """Instantané de la session (utilisateur, panier, vus récemment, filtres)"""
    return {
        "success": True,
        "data": {
            **snapshot(session.state),
            "isAuthenticated": session.state.isAuthenticated
        }
    }


@router.get("/recently-viewed")
async def get_recently_viewed(session: Session = Depends(get_session)):
    return {
        "success": True,
        "data": [p.model_dump() for p in session.state.recentlyViewed]
    }


@router.put("/filters")
async def update_filters(data: FilterUpdate, session: Session = Depends(get_session)):
    """Fusionne les filtres envoyés avec ceux de la session"""
    session.dispatch(filter_action(data))
    await session.save()
    return {
        "success": True,
        "data": session.state.filterOptions.model_dump()
    }


@router.delete("/filters")
async def clear_filters(session: Session = Depends(get_session)):
    session.dispatch(Action(type=ActionType.UPDATE_FILTER_OPTIONS, payload=FilterOptions().model_dump()))
    await session.save()
    return {
        "success": True,
        "data": session.state.filterOptions.model_dump()
    }


@router.get("/products")
async def get_filtered_products(search: Optional[str] = None, session: Session = Depends(get_session)):
    """Catalogue filtré avec les filtres enregistrés dans la session"""
    session.dispatch(Action(type=ActionType.SET_PRODUCTS, payload=await load_catalog(get_database())))
    results = filter_products(session.state.products, session.state.filterOptions, search)

    return {
        "success": True,
        "data": [p.model_dump() for p in results],
        "total": len(results)
    }
