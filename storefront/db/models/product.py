"""
Модель товара.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Product(Base):
    """
    Модель товара.

    Attributes:
        id: Уникальный идентификатор товара
        title: Название товара
        slug: URL-friendly идентификатор, уникален в каталоге
        image: URL главного изображения
        additional_images: Дополнительные изображения
        price: Сырая цена (строка, может содержать разделители тысяч)
        original_price: Цена до скидки (строка)
        rating: Рейтинг 0-5
        reviews: Количество отзывов
        category: Название категории (ключ связи по имени)
        sub_category: Название подкатегории (ключ связи по имени)
        description: Описание товара (HTML из редактора)
        specifications: Список характеристик
        is_best_selling: Флаг "хит продаж"
        is_featured: Флаг "рекомендуемый"
        created_at: Дата создания
        updated_at: Дата обновления
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(Text)
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    additional_images: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    price: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    original_price: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    rating: Mapped[float] = mapped_column(Float, default=0)
    reviews: Mapped[int] = mapped_column(Integer, default=0)
    category: Mapped[str] = mapped_column(String(255), index=True)
    sub_category: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    specifications: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    is_best_selling: Mapped[bool] = mapped_column(Boolean, default=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)

    # Временные метки
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<Product(id='{self.id}', title='{self.title}')>"
