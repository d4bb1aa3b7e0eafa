"""
Главный модуль FastAPI приложения SK Equipments Storefront API.

Содержит конфигурацию приложения, middleware и роутеры.
"""

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from storefront.api.v1.routers import api_router
from storefront.core.config import settings
from storefront.services.catalog_service import session_sweeper, snapshot_registry

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Создание экземпляра FastAPI приложения
app = FastAPI(
    title="SK Equipments Storefront API",
    description="Каталог испытательного оборудования: товары, категории, фильтрация и админка",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Статические файлы локального хранилища раздаются через /static
if settings.STORAGE_TYPE == "local":
    uploads_path = Path(settings.STORAGE_PATH).resolve()
    uploads_path.mkdir(parents=True, exist_ok=True)
    app.mount("/static", StaticFiles(directory=str(uploads_path)), name="static")
    logger.info(f"Static files mounted at /static from {uploads_path}")


# Настройка CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/healthz")
def healthz():
    """
    Health check endpoint для мониторинга состояния приложения.

    Returns:
        dict: Статус приложения и число активных сессий каталога
    """
    return {
        "status": "ok",
        "service": "SK Equipments Storefront API",
        "version": "1.0.0",
        "catalog_sessions": len(snapshot_registry),
    }


# Подключение API роутеров
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    """
    Событие запуска приложения.

    Запускает фоновую очистку просроченных снимков каталога.
    """
    await session_sweeper.start()


@app.on_event("shutdown")
async def shutdown_event():
    """
    Событие завершения приложения.

    Останавливает очистку и освобождает кэш снимков каталога.
    """
    await session_sweeper.stop()
    snapshot_registry.clear()
