#!/usr/bin/env python3
"""
Скрипт для инициализации базы данных
"""

import sys
from pathlib import Path

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

# Добавляем путь к пакету storefront
sys.path.insert(0, str(Path(__file__).parent))

from storefront.db.database import engine
from storefront.db.models import Base


def init_database(bind=engine) -> bool:
    """Создает все таблицы каталога в базе данных."""
    print("🗄️ Инициализация базы данных...")

    try:
        Base.metadata.create_all(bind=bind)
    except SQLAlchemyError as e:
        print(f"❌ Ошибка создания таблиц: {e}")
        return False

    tables = inspect(bind).get_table_names()
    print(f"📋 Таблиц в базе: {len(tables)}")
    for table in tables:
        print(f"  - {table}")
    return True


if __name__ == "__main__":
    if not init_database():
        sys.exit(1)
