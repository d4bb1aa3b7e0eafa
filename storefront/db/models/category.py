"""
Модель категории товаров.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Category(Base):
    """
    Модель категории товаров.

    Товары и подкатегории ссылаются на категорию по названию (title),
    а не по id: переименование категории не обновляет ссылки на нее.

    Attributes:
        id: Уникальный идентификатор категории
        title: Отображаемое название, ключ связи с товарами
        slug: URL-friendly название категории
        image: URL изображения категории
        description: Описание категории
        created_at: Дата создания
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, title='{self.title}')>"
