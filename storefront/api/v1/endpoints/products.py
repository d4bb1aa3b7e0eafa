"""
API endpoints для работы с товарами.

Список товаров отдается целиком (до PRODUCTS_FETCH_LIMIT) - это
источник снимка каталога. Страница товара ищет запись по slug
несколькими стратегиями и подбирает похожие товары.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storefront.catalog.lookup import (
    best_selling_products,
    featured_products,
    find_product_by_slug,
    related_products,
)
from storefront.catalog.records import normalize_products
from storefront.catalog.slugs import slugify
from storefront.catalog.sources import ordered_products_stmt, product_to_dict
from storefront.core.auth import require_admin
from storefront.core.config import settings
from storefront.db.database import get_db
from storefront.db.models import Product
from storefront.schemas.product import ProductCard, ProductCreate, ProductDetail, ProductOut, ProductUpdate
from storefront.services.catalog_service import to_cards

logger = logging.getLogger(__name__)

router = APIRouter()


def _snapshot_records(db: Session):
    rows = db.scalars(ordered_products_stmt()).all()
    return normalize_products([product_to_dict(p) for p in rows])


def _slug_taken(db: Session, slug: str, exclude_id: Optional[str] = None) -> bool:
    stmt = select(func.count()).select_from(Product).where(Product.slug == slug)
    if exclude_id is not None:
        stmt = stmt.where(Product.id != exclude_id)
    return (db.scalar(stmt) or 0) > 0


@router.get("", response_model=List[Dict[str, Any]])
def list_products(
    db: Session = Depends(get_db),
    include_description: bool = Query(
        False, description="Включить описание и характеристики"
    ),
    limit: int = Query(
        settings.PRODUCTS_FETCH_LIMIT,
        ge=1,
        le=settings.PRODUCTS_FETCH_LIMIT,
        description="Размер выборки",
    ),
    page: int = Query(1, ge=1, description="Номер страницы выборки"),
):
    """
    Получить список товаров.

    Порядок: сначала новые, при равной дате - по id. Ответ - JSON массив
    без обертки; по нему строится снимок каталога.

    Args:
        db: Сессия базы данных
        include_description: Включить description и specifications
        limit: Количество товаров (не более PRODUCTS_FETCH_LIMIT)
        page: Номер выборки размера limit

    Returns:
        List[dict]: Товары
    """
    stmt = ordered_products_stmt().offset((page - 1) * limit).limit(limit)
    rows = db.scalars(stmt).all()
    return [product_to_dict(p, include_description=include_description) for p in rows]


@router.get("/featured", response_model=List[ProductCard])
def list_featured(db: Session = Depends(get_db)):
    """Товары с флагом is_featured для главной страницы."""
    return to_cards(featured_products(_snapshot_records(db)))


@router.get("/best-selling", response_model=List[ProductCard])
def list_best_selling(
    db: Session = Depends(get_db),
    limit: int = Query(10, ge=1, le=100),
):
    return to_cards(best_selling_products(_snapshot_records(db), limit=limit))


@router.get("/{slug}", response_model=ProductDetail)
def get_product(
    slug: str,
    db: Session = Depends(get_db),
    related_limit: int = Query(50, ge=0, le=100, description="Сколько похожих товаров вернуть"),
):
    """
    Получить товар по slug.

    Args:
        slug: Slug из URL страницы товара
        db: Сессия базы данных
        related_limit: Максимум похожих товаров

    Returns:
        ProductDetail: Товар с описанием и похожими товарами

    Raises:
        HTTPException: Если товар не найден
    """
    records = _snapshot_records(db)
    product = find_product_by_slug(records, slug)
    if product is None:
        raise HTTPException(404, detail="Product not found")

    detail = ProductDetail.model_validate(product.model_dump())
    detail.related = to_cards(related_products(records, product, limit=related_limit))
    return detail


# ==================== УПРАВЛЕНИЕ (АДМИН) ====================


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Создать товар.

    Slug строится из названия, если не передан; повторяющийся slug
    отклоняется.
    """
    title = (payload.title or "").strip()
    category = (payload.category or "").strip()
    if not title or not category:
        raise HTTPException(400, detail="Title and category are required fields")

    slug = slugify(payload.slug or title)
    if not slug:
        raise HTTPException(400, detail="Cannot derive slug from title")
    if _slug_taken(db, slug):
        raise HTTPException(400, detail="Product with this slug already exists")

    data = payload.model_dump(exclude={"title", "category", "slug"})
    product = Product(id=uuid.uuid4().hex, title=title, category=category, slug=slug, **data)
    db.add(product)
    db.commit()
    db.refresh(product)

    logger.info(f"Product created: {product.id} ({product.slug}) by {admin}")
    return product


@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: str,
    payload: ProductUpdate,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Обновить товар; передаются только изменяемые поля."""
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(404, detail="Product not found")

    changes = payload.model_dump(exclude_unset=True)
    if "slug" in changes:
        slug = slugify(changes["slug"] or changes.get("title") or product.title)
        if not slug:
            raise HTTPException(400, detail="Cannot derive slug from title")
        if _slug_taken(db, slug, exclude_id=product.id):
            raise HTTPException(400, detail="Product with this slug already exists")
        changes["slug"] = slug

    for field, value in changes.items():
        if field in ("title", "category") and not (value or "").strip():
            raise HTTPException(400, detail=f"{field} cannot be empty")
        setattr(product, field, value)

    db.commit()
    db.refresh(product)

    logger.info(f"Product updated: {product.id} fields={sorted(changes)} by {admin}")
    return product


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Удалить товар."""
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(404, detail="Product not found")

    db.delete(product)
    db.commit()

    logger.info(f"Product deleted: {product_id} by {admin}")
    return {"success": True}
