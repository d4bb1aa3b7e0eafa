"""
Pydantic схемы категорий и подкатегорий.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryCreate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    """Изменение категории; propagate_rename переносит товары и подкатегории на новое название."""

    title: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None
    propagate_rename: bool = False


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    image: Optional[str] = None
    description: Optional[str] = None


class SubCategoryCreate(BaseModel):
    title: Optional[str] = None
    category: Optional[str] = Field(None, description="Название родительской категории")
    slug: Optional[str] = None


class SubCategoryUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = None


class SubCategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    category: str
    parent_category_id: Optional[int] = None
