"""
Снимок каталога и кэш снимков по сессиям просмотра.

Снимок загружается один раз на просмотр страницы: три запроса
(товары, категории, подкатегории) идут параллельно и ждутся вместе.
Любая ошибка загрузки превращается в пустой список, а не в исключение.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from storefront.catalog.records import (
    CategoryRecord,
    ProductRecord,
    SubCategoryRecord,
    normalize_categories,
    normalize_products,
    normalize_subcategories,
)
from storefront.catalog.sources import CatalogSource
from storefront.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class CatalogSnapshot:
    """Неизменяемый на время сессии снимок каталога."""

    products: List[ProductRecord] = field(default_factory=list)
    categories: List[CategoryRecord] = field(default_factory=list)
    subcategories: List[SubCategoryRecord] = field(default_factory=list)
    loaded_at: float = field(default_factory=time.time)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.products

    @classmethod
    def empty(cls) -> "CatalogSnapshot":
        return cls()


def _settle(name: str, result: Any, errors: Dict[str, str]) -> Any:
    if isinstance(result, BaseException):
        logger.warning(f"Failed to load {name}: {result!r}")
        errors[name] = str(result) or type(result).__name__
        return []
    if not isinstance(result, list):
        logger.warning(f"Invalid {name} response: expected list, got {type(result).__name__}")
        errors[name] = "invalid response"
        return []
    return result


async def load_snapshot(source: CatalogSource) -> CatalogSnapshot:
    """
    Загрузить и нормализовать снимок.

    Три загрузки выполняются параллельно; снимок собирается только
    после завершения всех трех (успешного или нет).
    """
    results = await asyncio.gather(
        source.fetch_products(),
        source.fetch_categories(),
        source.fetch_subcategories(),
        return_exceptions=True,
    )
    for result in results:
        # отмену не превращаем в пустой список
        if isinstance(result, asyncio.CancelledError):
            raise result

    errors: Dict[str, str] = {}
    raw_products = _settle("products", results[0], errors)
    raw_categories = _settle("categories", results[1], errors)
    raw_subcategories = _settle("subcategories", results[2], errors)

    snapshot = CatalogSnapshot(
        products=normalize_products(raw_products),
        categories=normalize_categories(raw_categories),
        subcategories=normalize_subcategories(raw_subcategories),
        errors=errors,
    )
    logger.info(
        f"Catalog snapshot loaded: {len(snapshot.products)} products, "
        f"{len(snapshot.categories)} categories, {len(snapshot.subcategories)} subcategories"
    )
    return snapshot


class SnapshotRegistry:
    """
    Кэш снимков по идентификатору сессии просмотра.

    Запись создается при первом просмотре и удаляется явно (discard)
    или по истечении ttl без обращений. Кэш не разделяется между
    сессиями. Результат загрузки, пришедший после discard этой же
    сессии, отбрасывается.
    """

    def __init__(self, ttl: Optional[int] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = settings.CATALOG_SESSION_TTL if ttl is None else ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._generations: Dict[str, int] = {}

    def _expired(self, touched_at: float) -> bool:
        return self.ttl > 0 and self._clock() - touched_at > self.ttl

    def get(self, session_id: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return None
            value, touched_at = entry
            if self._expired(touched_at):
                del self._entries[session_id]
                return None
            self._entries[session_id] = (value, self._clock())
            return value

    def begin_load(self, session_id: str) -> int:
        """Отметить начало загрузки; возвращает поколение для store()."""
        with self._lock:
            return self._generations.get(session_id, 0)

    def store(self, session_id: str, value: Any, generation: int) -> bool:
        """
        Сохранить результат загрузки.

        Returns:
            False, если сессия была сброшена после begin_load() -
            тогда результат не применяется.
        """
        with self._lock:
            if self._generations.get(session_id, 0) != generation:
                logger.info(f"Discarding stale catalog load for session {session_id}")
                return False
            self._entries[session_id] = (value, self._clock())
            return True

    async def get_or_create(self, session_id: str, factory: Callable[[], Any]) -> Any:
        """
        Вернуть закэшированное значение или создать его корутиной factory().

        Если сессия сброшена во время загрузки, созданное значение
        возвращается вызывающему, но в кэш не попадает.
        """
        cached = self.get(session_id)
        if cached is not None:
            return cached
        generation = self.begin_load(session_id)
        value = await factory()
        self.store(session_id, value, generation)
        return value

    def discard(self, session_id: str) -> bool:
        with self._lock:
            self._generations[session_id] = self._generations.get(session_id, 0) + 1
            return self._entries.pop(session_id, None) is not None

    def purge_expired(self) -> int:
        with self._lock:
            stale = [sid for sid, (_, t) in self._entries.items() if self._expired(t)]
            for sid in stale:
                del self._entries[sid]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._generations.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
