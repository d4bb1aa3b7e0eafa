"""
API endpoints представлений каталога.

Страница всех товаров и страница категории работают по снимку
каталога, который загружается один раз на сессию посетителя
(cookie catalog_session). Критерии фильтрации приходят в строке
запроса, поэтому любой отфильтрованный вид можно открыть по ссылке.
"""

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Cookie, Depends, Query, Response
from sqlalchemy.orm import Session

from storefront.catalog.filters import ViewContext, latest_products
from storefront.catalog.slugs import decode_category_segment
from storefront.catalog.sources import CatalogSource, DatabaseCatalogSource
from storefront.catalog.url_state import criteria_from_params
from storefront.core.config import settings
from storefront.db.database import get_db
from storefront.schemas.catalog import CatalogPageOut
from storefront.schemas.product import ProductCard
from storefront.services.catalog_service import (
    discard_session,
    new_session_id,
    open_view,
    render_page,
    to_cards,
)

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_COOKIE = "catalog_session"
LATEST_LIMIT = 5

SortOrder = Literal["latest"]


def get_catalog_source(db: Session = Depends(get_db)) -> CatalogSource:
    """Источник снимка по умолчанию - БД текущего запроса."""
    return DatabaseCatalogSource(db)


def _session_id(response: Response, current: Optional[str]) -> str:
    if current:
        return current
    session_id = new_session_id()
    response.set_cookie(
        SESSION_COOKIE,
        session_id,
        max_age=settings.CATALOG_SESSION_TTL,
        httponly=True,
        samesite="lax",
    )
    logger.debug(f"New catalog session {session_id}")
    return session_id


# ==================== СТРАНИЦА ВСЕХ ТОВАРОВ ====================


@router.get("/products", response_model=CatalogPageOut)
async def products_page(
    response: Response,
    q: Optional[str] = Query(None, description="Поиск по названию"),
    category: List[str] = Query([], description="Выбранные категории (можно несколько)"),
    min_rating: int = Query(0, ge=0, le=5, description="Минимальный рейтинг"),
    price_min: Optional[float] = Query(None, ge=0, description="Нижняя граница цены"),
    price_max: Optional[float] = Query(None, ge=0, description="Верхняя граница цены"),
    sort: Optional[SortOrder] = Query(None, description="latest - сначала новые"),
    page: int = Query(1, ge=1, description="Номер страницы"),
    catalog_session: Optional[str] = Cookie(None),
    source: CatalogSource = Depends(get_catalog_source),
):
    """
    Страница всех товаров: 12 товаров на страницу, мультивыбор категорий.

    Номер страницы за пределами результата приводится к ближайшей
    существующей; пустой результат отдается с empty=true и reset_url.
    """
    session_id = _session_id(response, catalog_session)
    session = await open_view(session_id, source, ViewContext.PRODUCTS)
    session.set_sort(sort)
    session.apply(
        criteria_from_params(
            q=q,
            categories=category,
            min_rating=min_rating,
            price_min=price_min,
            price_max=price_max,
        ),
        page,
    )
    return render_page(session, session.current_page())


@router.post("/products/reset", response_model=CatalogPageOut)
async def reset_products_page(
    response: Response,
    catalog_session: Optional[str] = Cookie(None),
    source: CatalogSource = Depends(get_catalog_source),
):
    """Сбросить все фильтры страницы товаров без повторной загрузки снимка."""
    session_id = _session_id(response, catalog_session)
    session = await open_view(session_id, source, ViewContext.PRODUCTS)
    session.reset_filters()
    return render_page(session, session.current_page())


# ==================== СТРАНИЦА КАТЕГОРИИ ====================


@router.get("/category/{segment}", response_model=CatalogPageOut)
async def category_page(
    segment: str,
    response: Response,
    subcategory: Optional[str] = Query(None, description="Slug выбранной подкатегории"),
    q: Optional[str] = Query(None, description="Поиск по названию и категории"),
    min_rating: int = Query(0, ge=0, le=5),
    price_min: Optional[float] = Query(None, ge=0),
    price_max: Optional[float] = Query(None, ge=0),
    sort: Optional[SortOrder] = Query(None),
    page: int = Query(1, ge=1),
    catalog_session: Optional[str] = Cookie(None),
    source: CatalogSource = Depends(get_catalog_source),
):
    """
    Страница категории: 9 товаров на страницу, боковая панель с подкатегориями.

    Args:
        segment: Название категории в URL (пробелы заменены дефисами)
        subcategory: Slug подкатегории из ?subcategory=; неизвестный игнорируется

    Returns:
        CatalogPageOut: Товары категории, sidebar, заголовок и 5 новинок
    """
    session_id = _session_id(response, catalog_session)
    session = await open_view(session_id, source, ViewContext.CATEGORY)
    session.set_sort(sort)
    session.apply(
        criteria_from_params(
            q=q,
            category_segment_value=segment,
            subcategory=subcategory,
            min_rating=min_rating,
            price_min=price_min,
            price_max=price_max,
        ),
        page,
    )
    latest = latest_products(
        session.snapshot.products, session.criteria.category_name, limit=LATEST_LIMIT
    )
    return render_page(session, session.current_page(), latest=latest)


@router.get("/category/{segment}/latest", response_model=List[ProductCard])
async def category_latest(
    segment: str,
    response: Response,
    limit: int = Query(LATEST_LIMIT, ge=1, le=50),
    catalog_session: Optional[str] = Cookie(None),
    source: CatalogSource = Depends(get_catalog_source),
):
    """Новинки категории: сначала новые, товары без даты в конце."""
    session_id = _session_id(response, catalog_session)
    session = await open_view(session_id, source, ViewContext.CATEGORY)
    products = latest_products(
        session.snapshot.products, decode_category_segment(segment), limit=limit
    )
    return to_cards(products)


@router.post("/category/{segment}/subcategory/{slug}")
async def toggle_subcategory(
    segment: str,
    slug: str,
    response: Response,
    catalog_session: Optional[str] = Cookie(None),
    source: CatalogSource = Depends(get_catalog_source),
):
    """
    Клик по подкатегории в боковой панели.

    Returns:
        dict: URL для адресной строки и выбранный slug (null - выбор снят)
    """
    session_id = _session_id(response, catalog_session)
    session = await open_view(session_id, source, ViewContext.CATEGORY)
    if session.criteria.category_name != decode_category_segment(segment):
        session.navigate(decode_category_segment(segment), session.criteria.selected_subcategory)
    url = session.select_subcategory(slug)
    return {"url": url, "selected_subcategory": session.criteria.selected_subcategory}


@router.post("/category/{segment}/expand/{category_title}")
async def toggle_expansion(
    segment: str,
    category_title: str,
    response: Response,
    catalog_session: Optional[str] = Cookie(None),
    source: CatalogSource = Depends(get_catalog_source),
):
    """Раскрыть или свернуть категорию в боковой панели; фильтры не меняются."""
    session_id = _session_id(response, catalog_session)
    session = await open_view(session_id, source, ViewContext.CATEGORY)
    expanded = session.toggle_expansion(category_title)
    return {"category": category_title, "expanded": expanded}


@router.post("/category/{segment}/reset", response_model=CatalogPageOut)
async def reset_category_page(
    segment: str,
    response: Response,
    catalog_session: Optional[str] = Cookie(None),
    source: CatalogSource = Depends(get_catalog_source),
):
    """Сбросить фильтры страницы категории; маршрут категории сохраняется."""
    session_id = _session_id(response, catalog_session)
    session = await open_view(session_id, source, ViewContext.CATEGORY)
    session.navigate(decode_category_segment(segment))
    session.reset_filters()
    latest = latest_products(
        session.snapshot.products, session.criteria.category_name, limit=LATEST_LIMIT
    )
    return render_page(session, session.current_page(), latest=latest)


# ==================== СЕССИЯ ====================


@router.delete("/session")
def end_session(response: Response, catalog_session: Optional[str] = Cookie(None)):
    """Уход со страницы: снимок сессии отбрасывается, следующий просмотр загрузит новый."""
    discarded = discard_session(catalog_session)
    response.delete_cookie(SESSION_COOKIE)
    return {"success": True, "discarded": discarded}
