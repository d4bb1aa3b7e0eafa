"""
Подключение к базе данных каталога.

По умолчанию PostgreSQL, но принимается любой URL SQLAlchemy:
для SQLite (локальная разработка, тесты) соединение разрешено
использовать из пула потоков FastAPI.
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from storefront.core.config import settings


def _connect_args(url: str) -> dict:
    if make_url(url).get_backend_name() == "sqlite":
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=bool(settings.DEBUG),  # SQL в лог только в режиме отладки
    connect_args=_connect_args(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Generator[Session, None, None]:
    """Сессия на запрос; закрывается после ответа."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
