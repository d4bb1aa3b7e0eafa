"""
Схемы для пагинации.
"""

from typing import List, Optional

from pydantic import BaseModel

from storefront.catalog.pagination import Page


class PageMeta(BaseModel):
    """
    Метаданные пагинации.

    Attributes:
        page: Номер текущей страницы
        page_size: Размер страницы
        total: Общее количество записей
        total_pages: Общее количество страниц (0 для пустого результата)
        first_index: Индекс первого товара страницы (с нуля)
        last_index: Индекс после последнего товара страницы
        window: Номера страниц для панели, null - многоточие
        has_previous, has_next: Доступность кнопок "назад" и "вперед"
    """

    page: int
    page_size: int
    total: int
    total_pages: int
    first_index: int = 0
    last_index: int = 0
    window: List[Optional[int]] = []
    has_previous: bool = False
    has_next: bool = False

    @classmethod
    def from_page(cls, page: Page) -> "PageMeta":
        return cls(
            page=page.page,
            page_size=page.page_size,
            total=page.total,
            total_pages=page.total_pages,
            first_index=page.first_index,
            last_index=page.last_index,
            window=page.window,
            has_previous=page.has_previous,
            has_next=page.has_next,
        )
