"""Filtres et recherche sur la liste de produits en mémoire"""

from typing import Iterable, List, Optional

from agrimart.models.schemas import FilterOptions, Product


def matches_search(product: Product, term: str) -> bool:
    term = term.lower()
    return (
        term in product.name.lower()
        or term in product.description.lower()
        or term in product.category.lower()
    )


def matches_specifications(product: Product, wanted: dict) -> bool:
    for key, values in wanted.items():
        if values and product.specifications.get(key) not in values:
            return False
    return True


def filter_products(
        products: Iterable[Product],
        filters: FilterOptions,
        search: Optional[str] = None
) -> List[Product]:
    """
    Applique recherche puis filtres, dans cet ordre:
    - search: sous-chaîne (insensible à la casse) du nom, description ou catégorie
    - category: le produit doit être dans une des catégories cochées
    - colors: au moins une couleur du produit est cochée
    - specifications: chaque clé renseignée doit matcher
    - priceRange: bornes incluses

    Une liste vide = pas de contrainte.
    """
    results = list(products)

    if search:
        results = [p for p in results if matches_search(p, search)]

    if filters.category:
        results = [p for p in results if p.category in filters.category]

    if filters.colors:
        results = [p for p in results if any(c in filters.colors for c in p.colors)]

    if filters.specifications:
        results = [p for p in results if matches_specifications(p, filters.specifications)]

    price = filters.priceRange
    return [p for p in results if price.min <= p.price <= price.max]


def list_categories(products: Iterable[Product]) -> List[dict]:
    """Catégories distinctes avec leur nombre de produits"""
    counts = {}
    for product in products:
        counts[product.category] = counts.get(product.category, 0) + 1
    return [{"name": name, "productCount": count} for name, count in sorted(counts.items())]


def list_colors(products: Iterable[Product]) -> List[str]:
    return sorted({color for p in products for color in p.colors})
