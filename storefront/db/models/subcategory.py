"""
Модель подкатегории товаров.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class SubCategory(Base):
    """
    Модель подкатегории.

    Attributes:
        id: Уникальный идентификатор подкатегории
        title: Название подкатегории (ключ связи с Product.sub_category)
        slug: URL-friendly название, уникально
        category: Название родительской категории (ключ связи)
        parent_category_id: ID родительской категории на момент записи
        created_at: Дата создания
    """

    __tablename__ = "subcategories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    category: Mapped[str] = mapped_column(String(255), index=True)
    parent_category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<SubCategory(id={self.id}, title='{self.title}', category='{self.category}')>"
