"""
Базовый класс для моделей каталога.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Декларативная база SQLAlchemy 2.0 для всех таблиц магазина."""
    pass
