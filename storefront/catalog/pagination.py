"""
Пагинация отфильтрованного списка и окно номеров страниц.
"""

from dataclasses import dataclass, field
from typing import Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")

MAX_VISIBLE_PAGES = 5


def total_pages(count: int, page_size: int) -> int:
    """ceil(count / page_size); 0 для пустого списка."""
    if page_size < 1:
        raise ValueError("page_size must be positive")
    return (count + page_size - 1) // page_size


def clamp_page(page: int, pages: int) -> int:
    """Прижать номер страницы к [1, pages]; при пустом списке - 1."""
    return max(1, min(page, max(pages, 1)))


def page_slice(items: Sequence[T], page: int, page_size: int) -> List[T]:
    """Срез [(page-1)*size, page*size)."""
    start = (page - 1) * page_size
    return list(items[start:start + page_size])


@dataclass
class Page(Generic[T]):
    """
    Одна страница результата.

    first_index / last_index - границы для подписи
    "Showing {first_index + 1}-{last_index} of {total}".
    """

    items: List[T]
    page: int
    page_size: int
    total: int
    total_pages: int
    first_index: int = 0
    last_index: int = 0
    window: List[Optional[int]] = field(default_factory=list)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def paginate(items: Sequence[T], page: int, page_size: int) -> Page[T]:
    pages = total_pages(len(items), page_size)
    current = clamp_page(page, pages)
    first = (current - 1) * page_size
    return Page(
        items=page_slice(items, current, page_size),
        page=current,
        page_size=page_size,
        total=len(items),
        total_pages=pages,
        first_index=first,
        last_index=min(current * page_size, len(items)),
        window=page_window(current, pages),
    )


def page_window(current: int, pages: int, max_visible: int = MAX_VISIBLE_PAGES) -> List[Optional[int]]:
    """
    Номера страниц для панели пагинации.

    Не более max_visible подряд идущих номеров вокруг текущей страницы,
    первая и последняя страницы доступны всегда, разрывы помечены None
    (многоточие). При одной странице панель не выводится.

    Example:
        >>> page_window(6, 10)
        [1, None, 4, 5, 6, 7, 8, None, 10]
    """
    if pages <= 1:
        return []

    start = max(1, current - max_visible // 2)
    end = min(pages, start + max_visible - 1)

    # Окно короче max_visible: в первой половине растем вперед, иначе назад
    if end - start + 1 < max_visible:
        if current < pages / 2:
            end = min(pages, start + max_visible - 1)
        else:
            start = max(1, end - max_visible + 1)

    window: List[Optional[int]] = []
    if start > 1:
        window.append(1)
        if start > 2:
            window.append(None)

    window.extend(range(start, end + 1))

    if end < pages:
        if end < pages - 1:
            window.append(None)
        window.append(pages)

    return window
