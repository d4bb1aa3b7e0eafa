"""
Pydantic схемы для административной панели.
"""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Схема для входа в систему."""

    username: str = Field(..., description="Логин администратора")
    password: str = Field(..., description="Пароль")


class LoginResponse(BaseModel):
    """Схема ответа при входе в систему."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int


class DashboardStats(BaseModel):
    """Сводка для дашборда админки."""

    total_products: int
    total_categories: int
    total_subcategories: int
    featured_products: int
    best_selling_products: int
    products_without_images: int
    orphaned_products: int
