"""
Поиск товара по slug и подборки для витрины.
"""

from typing import List, Optional, Sequence

from storefront.catalog.records import ProductRecord
from storefront.catalog.slugs import slugify


def find_product_by_slug(products: Sequence[ProductRecord], slug: str) -> Optional[ProductRecord]:
    """
    Найти товар по slug из URL.

    Порядок стратегий:
    1. точное совпадение с сохраненным slug (без учета регистра);
    2. slug, заново построенный из сохраненного slug;
    3. slug, построенный из названия.
    Сохраненный slug имеет приоритет над вычисленными, поэтому товар
    с явным slug не перекрывается товаром с совпадающим названием.
    """
    wanted = slugify(slug) if slug else ""
    normalized = (slug or "").lower()
    if not normalized:
        return None
    for product in products:
        if product.slug and product.slug.lower() == normalized:
            return product
    for product in products:
        if slugify(product.slug or product.title) in (normalized, wanted):
            return product
    for product in products:
        if product.derived_slug in (normalized, wanted):
            return product
    return None


def related_products(
    products: Sequence[ProductRecord], product: ProductRecord, limit: int = 50
) -> List[ProductRecord]:
    """Другие товары снимка (сначала той же категории), не более limit."""
    others = [p for p in products if p.id != product.id]
    same = [p for p in others if p.category.lower() == product.category.lower()]
    rest = [p for p in others if p.category.lower() != product.category.lower()]
    return (same + rest)[:limit]


def featured_products(products: Sequence[ProductRecord], limit: Optional[int] = None) -> List[ProductRecord]:
    featured = [p for p in products if p.is_featured]
    return featured if limit is None else featured[:limit]


def best_selling_products(products: Sequence[ProductRecord], limit: int = 10) -> List[ProductRecord]:
    return [p for p in products if p.is_best_selling][:limit]
