"""
Движок фильтрации каталога.

Снимок товаров/категорий/подкатегорий загружается один раз на просмотр
страницы, дальше видимый набор пересчитывается синхронно при каждом
изменении критериев.
"""

from .filters import FilterCriteria, ViewContext, filter_products, latest_products
from .hierarchy import ExpansionState, group_subcategories
from .pagination import Page, page_window, paginate
from .records import CategoryRecord, ProductRecord, SubCategoryRecord
from .session import CatalogPage, CatalogSession
from .slugs import decode_category_segment, slugify
from .snapshot import CatalogSnapshot, SnapshotRegistry, load_snapshot
from .sources import CatalogSource, DatabaseCatalogSource, HttpCatalogSource

__all__ = [
    "CatalogPage",
    "CatalogSession",
    "CatalogSnapshot",
    "CatalogSource",
    "CategoryRecord",
    "DatabaseCatalogSource",
    "ExpansionState",
    "FilterCriteria",
    "HttpCatalogSource",
    "Page",
    "ProductRecord",
    "SnapshotRegistry",
    "SubCategoryRecord",
    "ViewContext",
    "decode_category_segment",
    "filter_products",
    "group_subcategories",
    "latest_products",
    "load_snapshot",
    "page_window",
    "paginate",
    "slugify",
]
