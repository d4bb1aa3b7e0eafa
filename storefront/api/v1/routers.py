"""
Основной роутер API v1.

Подключает все endpoint'ы приложения.
"""

from fastapi import APIRouter

from storefront.api.v1.endpoints import admin, catalog, categories, products, subcategories, upload

# Создание основного роутера API v1
api_router = APIRouter()

# Подключение роутеров для различных ресурсов
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(subcategories.router, prefix="/subcategories", tags=["subcategories"])
api_router.include_router(upload.router, prefix="/upload", tags=["upload"])
api_router.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
