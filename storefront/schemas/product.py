"""
Pydantic схемы товаров.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _price_text(value) -> Optional[str]:
    """Цена хранится строкой; 1500.0 -> "1500"."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class ProductBase(BaseModel):
    title: Optional[str] = Field(None, description="Название товара, обязательно")
    category: Optional[str] = Field(None, description="Название категории, обязательно")
    sub_category: Optional[str] = Field(None, description="Название подкатегории")
    slug: Optional[str] = Field(None, description="Slug; если не задан, строится из названия")
    image: Optional[str] = None
    additional_images: List[str] = []
    price: Optional[Union[str, float]] = Field(None, description="Цена, число или строка с разделителями")
    original_price: Optional[str] = None
    rating: float = Field(0, ge=0, le=5)
    reviews: int = Field(0, ge=0)
    description: Optional[str] = Field(None, description="HTML описание из редактора")
    specifications: List[str] = []
    is_best_selling: bool = False
    is_featured: bool = False

    @field_validator("price", mode="after")
    @classmethod
    def _price_to_str(cls, value):
        return _price_text(value)


class ProductCreate(ProductBase):
    """Схема для создания товара."""


class ProductUpdate(BaseModel):
    """Схема для обновления товара; передаются только изменяемые поля."""

    title: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    sub_category: Optional[str] = None
    slug: Optional[str] = None
    image: Optional[str] = None
    additional_images: Optional[List[str]] = None
    price: Optional[Union[str, float]] = None
    original_price: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    reviews: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    specifications: Optional[List[str]] = None
    is_best_selling: Optional[bool] = None
    is_featured: Optional[bool] = None

    @field_validator("price", mode="after")
    @classmethod
    def _price_to_str(cls, value):
        return _price_text(value)


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    slug: str
    image: Optional[str] = None
    additional_images: Optional[List[str]] = None
    price: Optional[str] = None
    original_price: Optional[str] = None
    rating: float = 0
    reviews: int = 0
    category: str
    sub_category: Optional[str] = None
    description: Optional[str] = None
    specifications: Optional[List[str]] = None
    is_best_selling: bool = False
    is_featured: bool = False
    created_at: Optional[datetime] = None


class ProductCard(BaseModel):
    """Карточка товара в выдаче каталога (нормализованная запись снимка)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    slug: str
    image: str = ""
    price: float = 0
    price_raw: Optional[str] = None
    original_price: Optional[str] = None
    rating: float = 0
    reviews: int = 0
    category: str = ""
    sub_category: Optional[str] = None
    is_best_selling: bool = False
    is_featured: bool = False
    created_at: Optional[datetime] = None


class ProductDetail(ProductCard):
    """Страница товара: полное описание и похожие товары."""

    additional_images: List[str] = []
    description: Optional[str] = None
    specifications: List[str] = []
    related: List[ProductCard] = []
