"""
Схемы ответов представлений каталога.
"""

from typing import List, Optional

from pydantic import BaseModel

from storefront.catalog.hierarchy import SidebarCategory
from storefront.schemas.pagination import PageMeta
from storefront.schemas.product import ProductCard


class CriteriaOut(BaseModel):
    search_query: str
    selected_categories: List[str]
    category_name: Optional[str] = None
    selected_subcategory: Optional[str] = None
    min_rating: int
    price_min: float
    price_max: Optional[float] = None  # null - без ограничения сверху


class PageLink(BaseModel):
    page: Optional[int] = None
    url: Optional[str] = None


class CatalogPageOut(BaseModel):
    """
    Страница каталога.

    empty=true - показать "No products found" и кнопку сброса (reset_url).
    """

    items: List[ProductCard]
    meta: PageMeta
    pages: List[PageLink] = []
    criteria: CriteriaOut
    url: str
    reset_url: str
    empty: bool
    heading: Optional[str] = None
    facets: List[str] = []
    sidebar: List[SidebarCategory] = []
    latest: List[ProductCard] = []
    price_slider_max: float = 0
