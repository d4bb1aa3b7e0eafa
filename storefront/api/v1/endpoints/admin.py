"""
API эндпоинты для административной панели.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from storefront.catalog.filters import ViewContext
from storefront.catalog.hierarchy import find_subcategory_by_title
from storefront.catalog.session import CatalogSession
from storefront.catalog.slugs import slugify
from storefront.catalog.snapshot import load_snapshot
from storefront.catalog.sources import DatabaseCatalogSource
from storefront.core.auth import auth_service, require_admin
from storefront.core.config import settings
from storefront.db.database import get_db
from storefront.db.models import Category, Product, SubCategory
from storefront.schemas.admin import DashboardStats, LoginRequest, LoginResponse
from storefront.schemas.pagination import PageMeta
from storefront.services.catalog_service import to_cards

logger = logging.getLogger(__name__)

router = APIRouter()


# ==================== АУТЕНТИФИКАЦИЯ ====================


@router.post("/auth/login", response_model=LoginResponse)
def admin_login(login_data: LoginRequest):
    """
    Вход в административную панель.

    Args:
        login_data: Данные для входа (username, password)

    Returns:
        JWT токен и время его жизни в секундах

    Raises:
        HTTPException: При неверных учетных данных
    """
    if not auth_service.authenticate_admin(login_data.username, login_data.password):
        logger.warning(f"Failed admin login for username: {login_data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
        )

    access_token = auth_service.create_access_token(
        data={"sub": login_data.username, "role": "admin"}
    )
    logger.info(f"Admin logged in: {login_data.username}")
    return LoginResponse(
        access_token=access_token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


# ==================== ДАШБОРД ====================


@router.get("/dashboard/stats", response_model=DashboardStats)
def get_dashboard_stats(
    admin: str = Depends(require_admin), db: Session = Depends(get_db)
):
    """
    Получить статистику для дашборда.

    orphaned_products - товары, чья категория (по названию) не существует,
    например после переименования категории без переноса товаров.
    """
    def count(stmt) -> int:
        return db.scalar(stmt) or 0

    category_titles = select(Category.title)
    return DashboardStats(
        total_products=count(select(func.count()).select_from(Product)),
        total_categories=count(select(func.count()).select_from(Category)),
        total_subcategories=count(select(func.count()).select_from(SubCategory)),
        featured_products=count(
            select(func.count()).select_from(Product).where(Product.is_featured.is_(True))
        ),
        best_selling_products=count(
            select(func.count()).select_from(Product).where(Product.is_best_selling.is_(True))
        ),
        products_without_images=count(
            select(func.count())
            .select_from(Product)
            .where(or_(Product.image.is_(None), Product.image == ""))
        ),
        orphaned_products=count(
            select(func.count())
            .select_from(Product)
            .where(Product.category.not_in(category_titles))
        ),
    )


# ==================== УПРАВЛЕНИЕ ПРОДУКТАМИ ====================


@router.get("/products", response_model=dict)
async def admin_list_products(
    q: Optional[str] = Query(None, description="Поиск по названию и категории"),
    category: Optional[str] = Query(None, description="Название категории"),
    subcategory: Optional[str] = Query(None, description="Название подкатегории"),
    page: int = Query(1, ge=1, description="Номер страницы"),
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Список товаров для админки: поиск по названию или категории,
    фильтры по категории и подкатегории (по названию), 10 на страницу.

    Снимок загружается на каждый запрос, чтобы админка видела
    только что сохраненные изменения.
    """
    snapshot = await load_snapshot(DatabaseCatalogSource(db))
    session = CatalogSession(snapshot, view=ViewContext.ADMIN)
    session.set_search(q or "")
    if category:
        session.toggle_category(category)
    if subcategory:
        sub = find_subcategory_by_title(snapshot.subcategories, subcategory, category)
        # неизвестное название не совпадает ни с одним товаром
        session.set_subcategory(sub.slug if sub is not None else slugify(subcategory))
    session.go_to_page(page)
    result = session.current_page()
    return {
        "items": [card.model_dump(mode="json") for card in to_cards(result.page.items)],
        "meta": PageMeta.from_page(result.page).model_dump(),
    }
