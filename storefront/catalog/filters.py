"""
Фильтрация каталога.

Каждый фасет (категория, подкатегория, рейтинг, цена, поиск) - отдельная
чистая функция от одного товара и активных критериев. Итоговый фильтр -
логическое И всех предикатов с сохранением исходного порядка товаров.
"""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.catalog.records import ProductRecord, SubCategoryRecord
from storefront.core.config import settings

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class ViewContext(str, Enum):
    """Контекст представления каталога; определяет размер страницы и вариант предикатов."""

    PRODUCTS = "products"
    CATEGORY = "category"
    ADMIN = "admin"

    @property
    def page_size(self) -> int:
        if self is ViewContext.CATEGORY:
            return settings.CATEGORY_PAGE_SIZE
        if self is ViewContext.ADMIN:
            return settings.ADMIN_PAGE_SIZE
        return settings.PRODUCTS_PAGE_SIZE


def default_price_range() -> Tuple[float, float]:
    """Диапазон без ограничения сверху: фильтр по цене не скрывает ни одного товара."""
    return (settings.PRICE_RANGE_MIN, math.inf)


class FilterCriteria(BaseModel):
    """
    Активные критерии фильтрации. Значения по умолчанию - "без ограничений".

    Attributes:
        search_query: Подстрока поиска (без учета регистра)
        selected_categories: Выбранные категории (страница всех товаров)
        category_name: Декодированная категория из маршрута (страница категории)
        selected_subcategory: Slug выбранной подкатегории
        min_rating: Минимальный рейтинг 0-5, 0 - любой
        price_range: Включительный диапазон цены [min, max]
    """

    model_config = ConfigDict(frozen=True)

    search_query: str = ""
    selected_categories: FrozenSet[str] = frozenset()
    category_name: Optional[str] = None
    selected_subcategory: Optional[str] = None
    min_rating: int = Field(0, ge=0, le=5)
    price_range: Tuple[float, float] = Field(default_factory=default_price_range)

    @field_validator("selected_subcategory", mode="before")
    @classmethod
    def _empty_subcategory(cls, value):
        return value or None

    @field_validator("search_query", mode="before")
    @classmethod
    def _none_search(cls, value):
        return value or ""

    def is_default(self) -> bool:
        """Нет ни одного активного ограничения (кроме маршрута категории)."""
        return (
            not self.search_query
            and not self.selected_categories
            and self.selected_subcategory is None
            and self.min_rating == 0
            and tuple(self.price_range) == default_price_range()
        )

    def reset(self) -> "FilterCriteria":
        """Все критерии по умолчанию; маршрут категории сохраняется."""
        return FilterCriteria(category_name=self.category_name)


# ==================== ПРЕДИКАТЫ ====================


def price_of(product: ProductRecord) -> float:
    return product.price


def match_categories(product: ProductRecord, selected: Iterable[str]) -> bool:
    """Мультивыбор категорий: пустой выбор пропускает все."""
    selected = set(selected)
    return not selected or product.category in selected


def match_category_route(product: ProductRecord, category_name: Optional[str]) -> bool:
    """Страница категории: сравнение по обрезанному названию без учета регистра."""
    if category_name is None:
        return True
    return product.category.strip().lower() == category_name.strip().lower()


def match_subcategory(
    product: ProductRecord,
    selected_slug: Optional[str],
    subcategories: Sequence[SubCategoryRecord],
) -> bool:
    """Товар относится к подкатегории с выбранным slug (связь по названию)."""
    if not selected_slug:
        return True
    if not product.sub_category:
        return False
    product_sub = product.sub_category.lower()
    return any(
        sub.slug == selected_slug and sub.title.lower() == product_sub
        for sub in subcategories
    )


def match_rating(product: ProductRecord, min_rating: int) -> bool:
    return product.rating >= min_rating


def match_price(product: ProductRecord, price_range: Tuple[float, float]) -> bool:
    low, high = price_range
    return low <= price_of(product) <= high


def match_search(product: ProductRecord, query: str, include_category: bool = False) -> bool:
    if not query:
        return True
    needle = query.lower()
    if needle in product.title.lower():
        return True
    return include_category and needle in product.category.lower()


def matches(
    product: ProductRecord,
    criteria: FilterCriteria,
    subcategories: Sequence[SubCategoryRecord] = (),
    view: ViewContext = ViewContext.PRODUCTS,
) -> bool:
    """Логическое И всех фасетов для одного товара."""
    if view is ViewContext.CATEGORY:
        category_ok = match_category_route(product, criteria.category_name)
    else:
        category_ok = match_categories(product, criteria.selected_categories)
    return (
        category_ok
        and match_subcategory(product, criteria.selected_subcategory, subcategories)
        and match_rating(product, criteria.min_rating)
        and match_price(product, criteria.price_range)
        and match_search(
            product,
            criteria.search_query,
            include_category=view is not ViewContext.PRODUCTS,
        )
    )


def filter_products(
    products: Sequence[ProductRecord],
    criteria: FilterCriteria,
    subcategories: Sequence[SubCategoryRecord] = (),
    view: ViewContext = ViewContext.PRODUCTS,
) -> List[ProductRecord]:
    """
    Отфильтровать снимок по критериям.

    Порядок результата совпадает с порядком снимка; функция чистая,
    повторный вызов с теми же аргументами дает тот же список.
    """
    return [p for p in products if matches(p, criteria, subcategories, view)]


# ==================== ФАСЕТЫ И СОРТИРОВКА ====================


def facet_categories(products: Iterable[ProductRecord]) -> List[str]:
    """Уникальные категории товаров в порядке первого появления."""
    return list(dict.fromkeys(p.category for p in products))


def latest_products(
    products: Sequence[ProductRecord],
    category_name: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[ProductRecord]:
    """
    Представление "новинки": сортировка по дате создания по убыванию.

    Товары без даты считаются созданными в эпоху и уходят в конец;
    сортировка устойчивая.
    """
    pool = [p for p in products if match_category_route(p, category_name)]
    pool.sort(key=lambda p: p.created_at or EPOCH, reverse=True)
    return pool if limit is None else pool[:limit]
