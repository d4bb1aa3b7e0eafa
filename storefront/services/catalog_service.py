"""
Сервис представлений каталога.

Связывает HTTP-сессию посетителя (cookie) со снимком каталога в
SnapshotRegistry. Снимок загружается при первом просмотре и живет,
пока сессия не сброшена или не истек ее ttl; фильтрация, пагинация
и навигация по категориям работают по нему без повторной загрузки.
"""

import asyncio
import math
import logging
import uuid
from typing import Dict, List, Optional

from storefront.catalog.filters import ViewContext
from storefront.catalog.records import ProductRecord
from storefront.catalog.session import CatalogPage, CatalogSession, page_urls
from storefront.catalog.snapshot import CatalogSnapshot, SnapshotRegistry, load_snapshot
from storefront.catalog.sources import CatalogSource
from storefront.core.config import settings
from storefront.schemas.catalog import CatalogPageOut, CriteriaOut, PageLink
from storefront.schemas.pagination import PageMeta
from storefront.schemas.product import ProductCard

logger = logging.getLogger(__name__)


class SessionViews:
    """Все представления одной сессии посетителя над общим снимком."""

    def __init__(self, snapshot: CatalogSnapshot):
        self.snapshot = snapshot
        self._views: Dict[ViewContext, CatalogSession] = {}

    def view(self, context: ViewContext) -> CatalogSession:
        session = self._views.get(context)
        if session is None:
            session = CatalogSession(self.snapshot, view=context)
            self._views[context] = session
        return session


# Кэш снимков по сессиям просмотра
snapshot_registry = SnapshotRegistry()


def new_session_id() -> str:
    return uuid.uuid4().hex


async def open_views(session_id: str, source: CatalogSource) -> SessionViews:
    """Вернуть представления сессии, загрузив снимок при первом обращении."""

    async def _load() -> SessionViews:
        logger.info(f"Loading catalog snapshot for session {session_id}")
        return SessionViews(await load_snapshot(source))

    return await snapshot_registry.get_or_create(session_id, _load)


async def open_view(session_id: str, source: CatalogSource, context: ViewContext) -> CatalogSession:
    views = await open_views(session_id, source)
    return views.view(context)


def discard_session(session_id: Optional[str]) -> bool:
    if not session_id:
        return False
    return snapshot_registry.discard(session_id)


def to_cards(records: List[ProductRecord]) -> List[ProductCard]:
    return [ProductCard.model_validate(record.model_dump()) for record in records]


def render_page(session: CatalogSession, result: CatalogPage, latest: Optional[List[ProductRecord]] = None) -> CatalogPageOut:
    """Преобразовать результат движка в ответ API."""
    criteria = result.criteria
    low, high = criteria.price_range
    return CatalogPageOut(
        items=to_cards(result.page.items),
        meta=PageMeta.from_page(result.page),
        pages=[PageLink(page=number, url=url) for number, url in page_urls(session, result.page.window)],
        criteria=CriteriaOut(
            search_query=criteria.search_query,
            selected_categories=sorted(criteria.selected_categories),
            category_name=criteria.category_name,
            selected_subcategory=criteria.selected_subcategory,
            min_rating=criteria.min_rating,
            price_min=low,
            price_max=None if math.isinf(high) else high,
        ),
        url=result.url,
        reset_url=result.reset_url,
        empty=result.empty,
        heading=result.heading if result.view is ViewContext.CATEGORY else None,
        facets=result.facets,
        sidebar=result.sidebar,
        latest=to_cards(latest or []),
        price_slider_max=settings.PRICE_SLIDER_MAX,
    )


class SessionSweeper:
    """Фоновая очистка снимков сессий, у которых истек ttl."""

    def __init__(self, registry: SnapshotRegistry, interval: Optional[int] = None):
        self.registry = registry
        self.interval = interval or settings.CATALOG_PURGE_INTERVAL
        self.is_running = False
        self._background_task: Optional[asyncio.Task] = None

    async def start(self):
        if self.is_running:
            return
        self.is_running = True
        self._background_task = asyncio.create_task(self._sweep())
        logger.info("Catalog session sweeper started")

    async def stop(self):
        if not self.is_running:
            return
        self.is_running = False
        if self._background_task:
            self._background_task.cancel()
            try:
                await self._background_task
            except asyncio.CancelledError:
                pass
        logger.info("Catalog session sweeper stopped")

    async def _sweep(self):
        while self.is_running:
            await asyncio.sleep(self.interval)
            purged = self.registry.purge_expired()
            if purged:
                logger.info(f"Purged {purged} expired catalog sessions")


session_sweeper = SessionSweeper(snapshot_registry)
