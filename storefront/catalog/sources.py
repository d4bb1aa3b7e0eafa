"""
Источники снимка каталога.

Движок не знает, откуда приходят товары: он получает три полных
списка через CatalogSource. DatabaseCatalogSource читает их из БД
текущего запроса, HttpCatalogSource - из JSON API другого инстанса.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy import asc, desc, select
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.db.models import Category, Product, SubCategory

logger = logging.getLogger(__name__)


class CatalogSource(ABC):
    """Контракт загрузки полного снимка; пагинация на стороне источника не используется."""

    @abstractmethod
    async def fetch_products(self) -> Any:
        pass

    @abstractmethod
    async def fetch_categories(self) -> Any:
        pass

    @abstractmethod
    async def fetch_subcategories(self) -> Any:
        pass


def product_to_dict(product: Product, include_description: bool = True) -> Dict[str, Any]:
    """Сериализация товара в документ снимка/ответа API."""
    item = {
        "id": product.id,
        "title": product.title,
        "slug": product.slug,
        "image": product.image,
        "additional_images": product.additional_images or [],
        "price": product.price,
        "original_price": product.original_price,
        "rating": product.rating,
        "reviews": product.reviews,
        "category": product.category,
        "sub_category": product.sub_category,
        "is_best_selling": product.is_best_selling,
        "is_featured": product.is_featured,
        "created_at": product.created_at.isoformat() if product.created_at else None,
    }
    if include_description:
        item["description"] = product.description
        item["specifications"] = product.specifications or []
    return item


def category_to_dict(category: Category) -> Dict[str, Any]:
    return {
        "id": category.id,
        "title": category.title,
        "slug": category.slug,
        "image": category.image,
        "description": category.description,
    }


def subcategory_to_dict(subcategory: SubCategory) -> Dict[str, Any]:
    return {
        "id": subcategory.id,
        "title": subcategory.title,
        "slug": subcategory.slug,
        "category": subcategory.category,
        "parent_category_id": subcategory.parent_category_id,
    }


def ordered_products_stmt():
    """Порядок выдачи: сначала новые, при равенстве - по id."""
    return select(Product).order_by(desc(Product.created_at), asc(Product.id))


class DatabaseCatalogSource(CatalogSource):
    """
    Снимок из БД через сессию текущего запроса.

    Запросы синхронные: одна сессия SQLAlchemy не допускает
    параллельного использования, поэтому корутины не уступают управление.
    """

    def __init__(self, db: Session):
        self.db = db

    async def fetch_products(self) -> List[Dict[str, Any]]:
        rows = self.db.scalars(ordered_products_stmt()).all()
        return [product_to_dict(p) for p in rows]

    async def fetch_categories(self) -> List[Dict[str, Any]]:
        rows = self.db.scalars(select(Category).order_by(Category.id)).all()
        return [category_to_dict(c) for c in rows]

    async def fetch_subcategories(self) -> List[Dict[str, Any]]:
        rows = self.db.scalars(select(SubCategory).order_by(SubCategory.id)).all()
        return [subcategory_to_dict(s) for s in rows]


class HttpCatalogSource(CatalogSource):
    """
    Снимок из JSON API каталога.

    Ответ не 2xx поднимает httpx.HTTPStatusError; снимок перехватывает
    ошибку и подставляет пустой список.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        page_size: Optional[int] = None,
    ):
        self.base_url = (base_url or settings.CATALOG_API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.CATALOG_FETCH_TIMEOUT
        self.page_size = page_size or settings.PRODUCTS_FETCH_LIMIT
        self._client = client

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/api/v1{path}"
        if self._client is not None:
            response = await self._client.get(url, params=params, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params)
        response.raise_for_status()
        data = response.json()
        if isinstance(data, list):
            logger.debug(f"Loaded {len(data)} records from {path}")
        return data

    async def fetch_products(self) -> Any:
        """
        Все товары: выборки по page_size, пока не придет неполная.

        Если сервер игнорирует page и возвращает ту же выборку,
        загрузка останавливается с предупреждением.
        """
        products: List[Any] = []
        page = 1
        while True:
            batch = await self._get(
                "/products",
                params={"include_description": "true", "limit": self.page_size, "page": page},
            )
            if not isinstance(batch, list):
                if page == 1:
                    return batch
                logger.warning(f"Invalid products page {page}; keeping {len(products)} products")
                return products
            if page > 1 and batch and batch == products[-len(batch):]:
                logger.warning(
                    f"Catalog API ignores paging; product list may be truncated at {len(products)}"
                )
                return products
            products.extend(batch)
            if len(batch) < self.page_size:
                return products
            page += 1

    async def fetch_categories(self) -> Any:
        return await self._get("/categories")

    async def fetch_subcategories(self) -> Any:
        return await self._get("/subcategories")
