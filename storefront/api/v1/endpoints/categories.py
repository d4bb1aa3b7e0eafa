"""
API endpoints для работы с категориями товаров.

Товары и подкатегории ссылаются на категорию по названию. При
переименовании ссылки по умолчанию не переносятся (товары "осиротеют");
флаг propagate_rename переносит их на новое название.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from storefront.catalog.slugs import slugify
from storefront.core.auth import require_admin
from storefront.db.database import get_db
from storefront.db.models import Category, Product, SubCategory
from storefront.schemas.category import CategoryCreate, CategoryOut, CategoryUpdate
from storefront.services.image_service import image_service
from storefront.services.storage_service import storage_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_or_404(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if not category:
        raise HTTPException(404, detail="Category not found")
    return category


def _check_unique(db: Session, title: str, slug: str, exclude_id: Optional[int] = None) -> None:
    stmt = select(Category).where((Category.title == title) | (Category.slug == slug))
    if exclude_id is not None:
        stmt = stmt.where(Category.id != exclude_id)
    if db.scalars(stmt).first() is not None:
        raise HTTPException(400, detail="Category with this title or slug already exists")


@router.get("", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    """
    Получить список всех категорий в порядке создания.

    Args:
        db: Сессия базы данных

    Returns:
        List[CategoryOut]: Список категорий
    """
    return db.scalars(select(Category).order_by(Category.id)).all()


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    """
    Получить категорию по ID.

    Raises:
        HTTPException: Если категория не найдена
    """
    return _get_or_404(db, category_id)


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Создать категорию; slug строится из названия, если не передан."""
    title = (payload.title or "").strip()
    if not title:
        raise HTTPException(400, detail="Title is required")
    slug = slugify(payload.slug or title)
    if not slug:
        raise HTTPException(400, detail="Cannot derive slug from title")
    _check_unique(db, title, slug)

    category = Category(
        title=title,
        slug=slug,
        image=payload.image,
        description=payload.description,
    )
    db.add(category)
    db.commit()
    db.refresh(category)

    logger.info(f"Category created: {category.id} '{category.title}' by {admin}")
    return category


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Обновить категорию.

    Args:
        category_id: ID категории
        payload: Изменяемые поля; propagate_rename=true переносит товары и
            подкатегории со старого названия на новое

    Raises:
        HTTPException: Если категория не найдена или название/slug заняты
    """
    category = _get_or_404(db, category_id)
    changes = payload.model_dump(exclude_unset=True, exclude={"propagate_rename"})

    old_title = category.title
    new_title = (changes.get("title") or old_title).strip()
    if "slug" in changes:
        changes["slug"] = slugify(changes["slug"] or new_title)
    new_slug = changes.get("slug", category.slug)
    if new_title != old_title or new_slug != category.slug:
        _check_unique(db, new_title, new_slug, exclude_id=category.id)

    for field, value in changes.items():
        setattr(category, field, value)
    category.title = new_title

    if new_title != old_title:
        if payload.propagate_rename:
            moved = db.execute(
                update(Product).where(Product.category == old_title).values(category=new_title)
            ).rowcount
            db.execute(
                update(SubCategory)
                .where(SubCategory.category == old_title)
                .values(category=new_title)
            )
            logger.info(f"Category rename '{old_title}' -> '{new_title}' moved {moved} products")
        else:
            orphaned = db.scalar(
                select(func.count()).select_from(Product).where(Product.category == old_title)
            ) or 0
            orphaned_subs = db.scalar(
                select(func.count()).select_from(SubCategory).where(SubCategory.category == old_title)
            ) or 0
            if orphaned or orphaned_subs:
                logger.warning(
                    f"Category rename '{old_title}' -> '{new_title}' leaves "
                    f"{orphaned} products and {orphaned_subs} subcategories on the old title"
                )

    db.commit()
    db.refresh(category)

    logger.info(f"Category updated: {category.id} by {admin}")
    return category


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Удалить категорию вместе с ее изображением в хранилище.

    Ошибка удаления изображения не мешает удалению категории.
    """
    category = _get_or_404(db, category_id)

    image_path = image_service.path_from_url(category.image, folder="categories")
    if image_path and not storage_service.delete_file(image_path):
        logger.warning(f"Category {category_id} image was not deleted: {image_path}")

    db.delete(category)
    db.commit()

    logger.info(f"Category deleted: {category_id} by {admin}")
    return {"success": True}
