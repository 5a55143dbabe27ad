# agrimart/api/products.py - Catalogue + gestion admin des produits

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from slugify import slugify

from agrimart.catalog.filters import filter_products, list_categories, list_colors
from agrimart.core.database import get_database
from agrimart.core.security import get_current_admin
from agrimart.core.utils import parse_object_id, serialize_product, utcnow
from agrimart.models.schemas import FilterOptions, PriceRange, ProductCreate, ProductUpdate, StockUpdate
from agrimart.state.session import Session, get_optional_session
from agrimart.state.store import Action, ActionType

logger = logging.getLogger(__name__)

router = APIRouter()

PRODUCT_COLUMNS = {
    "name": "name",
    "description": "description",
    "price": "price",
    "category": "category",
    "stockQuantity": "stock_quantity",
    "images": "images",
    "colors": "colors",
    "specifications": "specifications",
}


async def load_catalog(db):
    """Charge tout le catalogue en mémoire (le filtrage se fait côté API)"""
    docs = await db.products.find({}).sort("created_at", -1).to_list(length=None)
    return [serialize_product(d) for d in docs]


def parse_spec_filters(specs: List[str]) -> dict:
    """["Power:50 HP", "Power:60 HP"] → {"Power": ["50 HP", "60 HP"]}"""
    wanted = {}
    for spec in specs:
        key, sep, value = spec.partition(":")
        if not sep:
            raise HTTPException(status_code=400, detail=f"Invalid specification filter: {spec}")
        wanted.setdefault(key.strip(), []).append(value.strip())
    return wanted


# ============================================
# GET - CATALOGUE
# ============================================

@router.get("")
async def get_products(
        search: Optional[str] = None,
        category: List[str] = Query([]),
        color: List[str] = Query([]),
        spec: List[str] = Query([]),
        minPrice: float = Query(0, ge=0),
        maxPrice: float = Query(100000, ge=0)
):
    """
    Liste filtrée des produits

    Paramètres:
    - search: recherche dans nom, description, catégorie
    - category / color: répétables (?category=Tractors&category=Tillers)
    - spec: "clé:valeur", répétable
    - minPrice / maxPrice: bornes incluses
    """
    filters = FilterOptions(
        category=category,
        colors=color,
        specifications=parse_spec_filters(spec),
        priceRange=PriceRange(min=minPrice, max=maxPrice),
    )

    try:
        catalog = await load_catalog(get_database())
    except Exception as e:
        logger.exception("Failed to load products")
        raise HTTPException(status_code=500, detail=str(e))

    results = filter_products(catalog, filters, search)

    return {
        "success": True,
        "data": [p.model_dump() for p in results],
        "total": len(results)
    }


@router.get("/categories")
async def get_categories():
    """Catégories et couleurs disponibles pour le panneau de filtres"""
    catalog = await load_catalog(get_database())
    return {
        "success": True,
        "categories": list_categories(catalog),
        "colors": list_colors(catalog)
    }


@router.get("/{product_id}")
async def get_product(
        product_id: str,
        session: Optional[Session] = Depends(get_optional_session)
):
    """Détail d'un produit avec ses avis; l'ajoute aux vus récemment"""
    db = get_database()

    doc = await db.products.find_one({"_id": parse_object_id(product_id, "product ID")})
    if not doc:
        raise HTTPException(status_code=404, detail="Product not found")

    reviews = await db.reviews.find({"product_id": product_id}).sort("created_at", -1).to_list(length=None)
    product = serialize_product(doc, reviews)

    if session is not None:
        # Sans les avis: inutile de les recopier dans la session
        session.dispatch(Action(
            type=ActionType.ADD_TO_RECENTLY_VIEWED,
            payload=product.model_copy(update={"reviews": []})
        ))
        await session.save()

    return {
        "success": True,
        "data": product.model_dump()
    }


# ============================================
# ADMIN - CRÉER / MODIFIER / SUPPRIMER
# ============================================

@router.post("")
async def create_product(data: ProductCreate, admin=Depends(get_current_admin)):
    """Crée un nouveau produit (Admin uniquement)"""
    db = get_database()

    try:
        doc = {PRODUCT_COLUMNS[k]: v for k, v in data.model_dump().items()}
        doc["slug"] = slugify(data.name)
        doc["created_at"] = utcnow()

        result = await db.products.insert_one(doc)
        doc["_id"] = result.inserted_id

        logger.info("📝 Product created: %s", data.name)

        return {
            "success": True,
            "data": serialize_product(doc).model_dump(),
            "message": "The product has been added successfully"
        }
    except Exception as e:
        logger.exception("Failed to add product")
        raise HTTPException(status_code=500, detail=str(e))


async def _apply_update(db, product_id: str, update: dict):
    oid = parse_object_id(product_id, "product ID")
    result = await db.products.update_one({"_id": oid}, {"$set": update})
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    return serialize_product(await db.products.find_one({"_id": oid}))


@router.put("/{product_id}")
async def update_product(product_id: str, data: ProductUpdate, admin=Depends(get_current_admin)):
    """Met à jour un produit (Admin uniquement); seuls les champs envoyés changent"""
    update = {
        PRODUCT_COLUMNS[k]: v
        for k, v in data.model_dump().items()
        if v is not None
    }
    if not update:
        raise HTTPException(status_code=400, detail="Nothing to update")
    if "name" in update:
        update["slug"] = slugify(update["name"])

    product = await _apply_update(get_database(), product_id, update)
    return {
        "success": True,
        "data": product.model_dump(),
        "message": "Product updated"
    }


@router.put("/{product_id}/stock")
async def update_product_stock(product_id: str, data: StockUpdate, admin=Depends(get_current_admin)):
    """Met à jour le stock (entier positif ou nul)"""
    product = await _apply_update(get_database(), product_id, {"stock_quantity": data.stockQuantity})
    logger.info("📦 Stock updated for %s: %s", product.name, data.stockQuantity)
    return {
        "success": True,
        "data": product.model_dump(),
        "message": "Stock updated"
    }


@router.delete("/{product_id}")
async def delete_product(product_id: str, admin=Depends(get_current_admin)):
    """Supprime un produit (Admin uniquement)"""
    db = get_database()

    result = await db.products.delete_one({"_id": parse_object_id(product_id, "product ID")})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")

    logger.info("🗑️  Product deleted: %s", product_id)

    return {
        "success": True,
        "message": "The product has been deleted successfully"
    }
