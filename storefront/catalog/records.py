"""
Нормализация записей снимка каталога.

Сырые документы (из БД или JSON API) приводятся к полностью
типизированным записям на границе загрузки, поэтому предикаты
фильтрации никогда не проверяют None и не падают на кривых данных.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from storefront.catalog.slugs import slugify

logger = logging.getLogger(__name__)


def _finite(value: Any) -> Optional[float]:
    """float(value) или None для нечитаемых, NaN, бесконечных и слишком больших значений."""
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_price(value: Any) -> float:
    """
    Числовое значение цены.

    Строка с разделителями тысяч ("145,650.00"), число или отсутствие.
    Отсутствующая или нечитаемая цена считается нулевой.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if not isinstance(value, (int, float)):
        value = str(value).replace(",", "").strip()
    number = _finite(value)
    return 0.0 if number is None else number


def parse_datetime(value: Any) -> Optional[datetime]:
    """Разобрать дату создания; нечитаемое значение -> None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        # миллисекунды с эпохи, как в JSON документах
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _as_int(value: Any) -> int:
    number = _finite(value)
    return 0 if number is None else int(number)


def _as_float(value: Any) -> float:
    number = _finite(value)
    return 0.0 if number is None else number


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_str_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if item is not None]


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(default="", validation_alias=AliasChoices("id", "_id"))

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> str:
        return _as_text(value)


class ProductRecord(_Record):
    """Нормализованный товар снимка каталога."""

    title: str = ""
    image: str = ""
    additional_images: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("additional_images", "additionalImages"),
    )
    price: float = 0.0
    price_raw: Optional[str] = None
    original_price: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("original_price", "originalPrice")
    )
    rating: float = 0.0
    reviews: int = 0
    category: str = ""
    sub_category: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("sub_category", "subCategory")
    )
    slug: str = ""
    description: Optional[str] = None
    specifications: List[str] = Field(default_factory=list)
    is_best_selling: bool = Field(
        default=False, validation_alias=AliasChoices("is_best_selling", "isBestSelling")
    )
    is_featured: bool = Field(
        default=False, validation_alias=AliasChoices("is_featured", "isFeatured")
    )
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("created_at", "createdAt")
    )

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        doc = dict(data)
        raw_price = doc.get("price")
        doc["price_raw"] = None if raw_price is None else str(raw_price)
        doc["price"] = parse_price(raw_price)
        for key in ("title", "image", "category"):
            doc[key] = _as_text(doc.get(key))
        doc["rating"] = _as_float(doc.get("rating"))
        doc["reviews"] = _as_int(doc.get("reviews"))
        for key in ("additional_images", "additionalImages", "specifications"):
            if key in doc:
                doc[key] = _as_str_list(doc[key])
        for key in ("created_at", "createdAt"):
            if key in doc:
                doc[key] = parse_datetime(doc[key])
        for key in ("sub_category", "subCategory", "original_price", "originalPrice", "description"):
            if doc.get(key) is not None:
                doc[key] = str(doc[key])
        for key in ("is_best_selling", "isBestSelling", "is_featured", "isFeatured"):
            if key in doc:
                doc[key] = bool(doc[key])
        if not doc.get("slug"):
            doc["slug"] = slugify(doc["title"])
        else:
            doc["slug"] = str(doc["slug"])
        return doc

    @property
    def derived_slug(self) -> str:
        """Slug, вычисленный из названия (без учета сохраненного)."""
        return slugify(self.title)


class CategoryRecord(_Record):
    """Нормализованная категория."""

    title: str = ""
    image: str = ""
    slug: str = ""
    description: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        doc = dict(data)
        doc["title"] = _as_text(doc.get("title"))
        doc["image"] = _as_text(doc.get("image"))
        doc["slug"] = str(doc.get("slug") or slugify(doc["title"]))
        if doc.get("description") is not None:
            doc["description"] = str(doc["description"])
        return doc


class SubCategoryRecord(_Record):
    """Нормализованная подкатегория; category - название родителя."""

    title: str = ""
    slug: str = ""
    category: str = ""

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        doc = dict(data)
        doc["title"] = _as_text(doc.get("title"))
        doc["category"] = _as_text(doc.get("category"))
        doc["slug"] = str(doc.get("slug") or slugify(doc["title"]))
        return doc


def _normalize_many(model, raw: Any, name: str) -> list:
    if not isinstance(raw, (list, tuple)):
        if raw is not None:
            logger.warning(f"Expected a list of {name}, got {type(raw).__name__}")
        return []
    return [model.model_validate(doc) for doc in raw]


def normalize_products(raw: Any) -> List[ProductRecord]:
    return _normalize_many(ProductRecord, raw, "products")


def normalize_categories(raw: Any) -> List[CategoryRecord]:
    return _normalize_many(CategoryRecord, raw, "categories")


def normalize_subcategories(raw: Any) -> List[SubCategoryRecord]:
    return _normalize_many(SubCategoryRecord, raw, "subcategories")
