"""
Сессия просмотра каталога.

CatalogSession - состояние одной страницы: снимок, активные критерии,
текущая страница и раскрытые категории. Любое изменение фильтра
сбрасывает пагинацию на первую страницу и работает по уже загруженному
снимку без повторной загрузки.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from storefront.catalog.filters import (
    FilterCriteria,
    ViewContext,
    facet_categories,
    filter_products,
    latest_products,
)
from storefront.catalog.hierarchy import ExpansionState, SidebarCategory, build_sidebar, find_subcategory
from storefront.catalog.pagination import Page, clamp_page, paginate, total_pages
from storefront.catalog.records import ProductRecord, SubCategoryRecord
from storefront.catalog.snapshot import CatalogSnapshot
from storefront.catalog.url_state import category_view_url, products_url, subcategory_toggle


SORT_LATEST = "latest"


@dataclass
class CatalogPage:
    """Результат для отрисовки: страница товаров и все, что нужно панели фильтров."""

    page: Page[ProductRecord]
    criteria: FilterCriteria
    view: ViewContext
    url: str
    reset_url: str
    empty: bool
    facets: List[str] = field(default_factory=list)
    sidebar: List[SidebarCategory] = field(default_factory=list)
    active_subcategory: Optional[SubCategoryRecord] = None

    @property
    def heading(self) -> str:
        """Заголовок страницы категории: "<категория> - <подкатегория>"."""
        name = self.criteria.category_name or ""
        if self.active_subcategory is not None:
            return f"{name} - {self.active_subcategory.title}"
        return name


class CatalogSession:
    """
    Состояние одной страницы каталога.

    Создается при открытии страницы и отбрасывается при уходе с нее;
    снимок не изменяется в течение жизни сессии.
    """

    def __init__(
        self,
        snapshot: Optional[CatalogSnapshot] = None,
        view: ViewContext = ViewContext.PRODUCTS,
        criteria: Optional[FilterCriteria] = None,
        page_size: Optional[int] = None,
    ):
        self.snapshot = snapshot or CatalogSnapshot.empty()
        self.view = view
        self.criteria = criteria or FilterCriteria()
        self.page_size = page_size or view.page_size
        self.page = 1
        self.sort: Optional[str] = None
        self.expansion = ExpansionState()

    # ==================== ИЗМЕНЕНИЕ КРИТЕРИЕВ ====================

    def _update(self, **changes) -> FilterCriteria:
        self.criteria = self.criteria.model_copy(update=changes)
        self.page = 1
        return self.criteria

    def set_search(self, query: str) -> FilterCriteria:
        return self._update(search_query=query or "")

    def toggle_category(self, category: str) -> FilterCriteria:
        selected = set(self.criteria.selected_categories)
        selected.symmetric_difference_update({category})
        return self._update(selected_categories=frozenset(selected))

    def set_min_rating(self, rating: int) -> FilterCriteria:
        # model_copy не валидирует, поэтому границы проверяем здесь
        if not 0 <= rating <= 5:
            raise ValueError("min_rating must be between 0 and 5")
        return self._update(min_rating=rating)

    def set_price_range(self, low: float, high: float) -> FilterCriteria:
        return self._update(price_range=(low, high))

    def select_subcategory(self, slug: str) -> str:
        """
        Клик по подкатегории.

        Повторный клик по выбранной подкатегории снимает выбор; родительская
        категория раскрывается в обоих случаях.

        Returns:
            URL, который нужно отразить в адресной строке
        """
        sub = find_subcategory(self.snapshot.subcategories, slug)
        if sub is None:
            return self.url()
        new_selection, url = subcategory_toggle(self.criteria.selected_subcategory, sub)
        self.expansion.expand(sub.category)
        self._update(selected_subcategory=new_selection)
        return url

    def set_subcategory(self, slug: Optional[str]) -> FilterCriteria:
        """Выбрать подкатегорию по slug без переключения (список админки)."""
        return self._update(selected_subcategory=slug or None)

    def set_sort(self, sort: Optional[str]) -> None:
        """None - порядок снимка, "latest" - сначала новые."""
        if sort not in (None, SORT_LATEST):
            raise ValueError(f"Unknown sort: {sort}")
        self.sort = sort
        self.page = 1

    def toggle_expansion(self, category_title: str) -> bool:
        return self.expansion.toggle(category_title)

    def navigate(self, category_name: Optional[str], subcategory: Optional[str] = None) -> FilterCriteria:
        """
        Перечитать маршрут категории и параметр ?subcategory=.

        Неизвестный slug подкатегории игнорируется; для известного
        раскрывается родительская категория.
        """
        sub = find_subcategory(self.snapshot.subcategories, subcategory)
        if sub is not None:
            self.expansion.expand(sub.category)
        return self._update(
            category_name=category_name,
            selected_subcategory=sub.slug if sub is not None else None,
        )

    def apply(self, criteria: FilterCriteria, page: int = 1) -> None:
        """Применить критерии, пришедшие из URL, с проверкой подкатегории."""
        self.navigate(criteria.category_name, criteria.selected_subcategory)
        self.criteria = criteria.model_copy(
            update={"selected_subcategory": self.criteria.selected_subcategory}
        )
        self.page = page

    def reset_filters(self) -> FilterCriteria:
        """Все критерии по умолчанию, первая страница; снимок не перезагружается."""
        self.criteria = self.criteria.reset()
        self.page = 1
        return self.criteria

    # ==================== ПАГИНАЦИЯ ====================

    def filtered(self) -> List[ProductRecord]:
        products = filter_products(
            self.snapshot.products, self.criteria, self.snapshot.subcategories, self.view
        )
        if self.sort == SORT_LATEST:
            products = latest_products(products)
        return products

    def total_pages(self) -> int:
        return total_pages(len(self.filtered()), self.page_size)

    def go_to_page(self, page: int) -> int:
        self.page = clamp_page(page, self.total_pages())
        return self.page

    # ==================== РЕЗУЛЬТАТ ====================

    def url(self, page: Optional[int] = None) -> str:
        page = self.page if page is None else page
        if self.view is ViewContext.CATEGORY:
            return category_view_url(self.criteria, page, self.sort)
        return products_url(self.criteria, page, self.sort)

    def reset_url(self) -> str:
        reset = self.criteria.reset()
        if self.view is ViewContext.CATEGORY:
            return category_view_url(reset, sort=self.sort)
        return products_url(reset, sort=self.sort)

    def current_page(self) -> CatalogPage:
        page = paginate(self.filtered(), self.page, self.page_size)
        self.page = page.page
        active = find_subcategory(self.snapshot.subcategories, self.criteria.selected_subcategory)
        sidebar: List[SidebarCategory] = []
        facets: List[str] = []
        if self.view is ViewContext.CATEGORY:
            sidebar = build_sidebar(
                self.snapshot.categories,
                self.snapshot.subcategories,
                self.expansion,
                self.criteria.category_name,
                self.criteria.selected_subcategory,
            )
        else:
            facets = facet_categories(self.snapshot.products)
        return CatalogPage(
            page=page,
            criteria=self.criteria,
            view=self.view,
            url=self.url(),
            reset_url=self.reset_url(),
            empty=page.total == 0,
            facets=facets,
            sidebar=sidebar,
            active_subcategory=active,
        )


def page_urls(session: CatalogSession, numbers: Iterable[Optional[int]]) -> List[Tuple[Optional[int], Optional[str]]]:
    """Пары (номер, URL) для окна пагинации; многоточие -> (None, None)."""
    return [(n, session.url(n) if n is not None else None) for n in numbers]
