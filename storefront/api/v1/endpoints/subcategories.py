"""
API endpoints для подкатегорий.

Подкатегория принадлежит категории по названию (поле category);
при записи дополнительно сохраняется id родителя.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storefront.catalog.slugs import slugify
from storefront.core.auth import require_admin
from storefront.db.database import get_db
from storefront.db.models import Category, Product, SubCategory
from storefront.schemas.category import SubCategoryCreate, SubCategoryOut, SubCategoryUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


def _parent_or_400(db: Session, title: str) -> Category:
    parent = db.scalars(select(Category).where(Category.title == title)).first()
    if parent is None:
        raise HTTPException(400, detail="Parent category does not exist")
    return parent


def _slug_taken(db: Session, slug: str, exclude_id: Optional[int] = None) -> bool:
    stmt = select(func.count()).select_from(SubCategory).where(SubCategory.slug == slug)
    if exclude_id is not None:
        stmt = stmt.where(SubCategory.id != exclude_id)
    return (db.scalar(stmt) or 0) > 0


@router.get("", response_model=List[SubCategoryOut])
def list_subcategories(
    db: Session = Depends(get_db),
    category: Optional[str] = Query(None, description="Название родительской категории"),
):
    """Список подкатегорий, опционально только одной категории."""
    stmt = select(SubCategory).order_by(SubCategory.id)
    if category:
        stmt = stmt.where(SubCategory.category == category)
    return db.scalars(stmt).all()


@router.get("/{slug}", response_model=SubCategoryOut)
def get_subcategory(slug: str, db: Session = Depends(get_db)):
    subcategory = db.scalars(select(SubCategory).where(SubCategory.slug == slug)).first()
    if subcategory is None:
        raise HTTPException(404, detail="Subcategory not found")
    return subcategory


@router.post("", response_model=SubCategoryOut, status_code=status.HTTP_201_CREATED)
def create_subcategory(
    payload: SubCategoryCreate,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Создать подкатегорию.

    Raises:
        HTTPException: 400 - нет названия/категории, родитель не найден
            или slug занят
    """
    title = (payload.title or "").strip()
    category = (payload.category or "").strip()
    if not title or not category:
        raise HTTPException(400, detail="Title and category are required fields")

    slug = slugify(payload.slug or title)
    if not slug:
        raise HTTPException(400, detail="Cannot derive slug from title")
    if _slug_taken(db, slug):
        raise HTTPException(400, detail="Subcategory with this slug already exists")

    parent = _parent_or_400(db, category)
    subcategory = SubCategory(
        title=title,
        slug=slug,
        category=parent.title,
        parent_category_id=parent.id,
    )
    db.add(subcategory)
    db.commit()
    db.refresh(subcategory)

    logger.info(f"Subcategory created: {subcategory.id} '{title}' in '{parent.title}' by {admin}")
    return subcategory


@router.put("/{subcategory_id}", response_model=SubCategoryOut)
def update_subcategory(
    subcategory_id: int,
    payload: SubCategoryUpdate,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Обновить подкатегорию; смена родителя проверяет, что он существует."""
    subcategory = db.get(SubCategory, subcategory_id)
    if subcategory is None:
        raise HTTPException(404, detail="Subcategory not found")

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("category"):
        parent = _parent_or_400(db, changes["category"])
        subcategory.category = parent.title
        subcategory.parent_category_id = parent.id
    if changes.get("title"):
        subcategory.title = changes["title"].strip()
    if "slug" in changes:
        slug = slugify(changes["slug"] or subcategory.title)
        if _slug_taken(db, slug, exclude_id=subcategory.id):
            raise HTTPException(400, detail="Subcategory with this slug already exists")
        subcategory.slug = slug

    db.commit()
    db.refresh(subcategory)

    logger.info(f"Subcategory updated: {subcategory.id} by {admin}")
    return subcategory


@router.delete("/{subcategory_id}")
def delete_subcategory(
    subcategory_id: int,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Удалить подкатегорию, если на нее не ссылается ни один товар."""
    subcategory = db.get(SubCategory, subcategory_id)
    if subcategory is None:
        raise HTTPException(404, detail="Subcategory not found")

    products_count = db.scalar(
        select(func.count())
        .select_from(Product)
        .where(func.lower(Product.sub_category) == subcategory.title.lower())
    ) or 0
    if products_count > 0:
        raise HTTPException(
            400, detail="Cannot delete subcategory with associated products"
        )

    db.delete(subcategory)
    db.commit()

    logger.info(f"Subcategory deleted: {subcategory_id} by {admin}")
    return {"success": True}
