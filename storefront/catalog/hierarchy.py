"""
Иерархия категорий и подкатегорий для боковой панели.

Подкатегории привязаны к родителю по названию категории, поэтому
группировка идет по SubCategoryRecord.category как есть.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel

from storefront.catalog.records import CategoryRecord, SubCategoryRecord
from storefront.catalog.slugs import category_segment
from storefront.catalog.url_state import category_url, subcategory_toggle


def group_subcategories(subcategories: Iterable[SubCategoryRecord]) -> Dict[str, List[SubCategoryRecord]]:
    """Название категории -> подкатегории в порядке вставки (без сортировки)."""
    grouped: Dict[str, List[SubCategoryRecord]] = {}
    for sub in subcategories:
        grouped.setdefault(sub.category, []).append(sub)
    return grouped


def is_expandable(grouped: Dict[str, List[SubCategoryRecord]], category_title: str) -> bool:
    return bool(grouped.get(category_title))


def find_subcategory(subcategories: Iterable[SubCategoryRecord], slug: Optional[str]) -> Optional[SubCategoryRecord]:
    if not slug:
        return None
    return next((sub for sub in subcategories if sub.slug == slug), None)


def find_subcategory_by_title(
    subcategories: Iterable[SubCategoryRecord], title: Optional[str], category: Optional[str] = None
) -> Optional[SubCategoryRecord]:
    """Подкатегория по названию без учета регистра; category сужает поиск до родителя."""
    if not title:
        return None
    needle = title.strip().lower()
    for sub in subcategories:
        if sub.title.strip().lower() != needle:
            continue
        if category and sub.category != category:
            continue
        return sub
    return None


class ExpansionState:
    """Какие категории раскрыты в боковой панели."""

    def __init__(self):
        self._expanded: Dict[str, bool] = {}

    def expand(self, category_title: str) -> None:
        self._expanded[category_title] = True

    def toggle(self, category_title: str) -> bool:
        self._expanded[category_title] = not self._expanded.get(category_title, False)
        return self._expanded[category_title]

    def is_expanded(self, category_title: str) -> bool:
        return self._expanded.get(category_title, False)

    def expanded(self) -> List[str]:
        return [title for title, flag in self._expanded.items() if flag]


class SidebarSubcategory(BaseModel):
    title: str
    slug: str
    selected: bool
    url: str


class SidebarCategory(BaseModel):
    title: str
    slug: str
    url: str
    active: bool
    expandable: bool
    expanded: bool
    subcategories: List[SidebarSubcategory] = []


def build_sidebar(
    categories: Sequence[CategoryRecord],
    subcategories: Sequence[SubCategoryRecord],
    expansion: ExpansionState,
    category_name: Optional[str] = None,
    selected_subcategory: Optional[str] = None,
) -> List[SidebarCategory]:
    """
    Записи боковой панели страницы категории.

    У каждой подкатегории url - адрес после клика по ней: выбор
    добавляет ?subcategory=<slug>, повторный клик снимает параметр.
    Дочерние записи выводятся только у раскрытых категорий.
    """
    grouped = group_subcategories(subcategories)
    active_name = (category_name or "").lower()
    sidebar = []
    for category in categories:
        expandable = is_expandable(grouped, category.title)
        expanded = expansion.is_expanded(category.title)
        children = []
        if expandable and expanded:
            for sub in grouped[category.title]:
                _, url = subcategory_toggle(selected_subcategory, sub)
                children.append(
                    SidebarSubcategory(
                        title=sub.title,
                        slug=sub.slug,
                        selected=sub.slug == selected_subcategory,
                        url=url,
                    )
                )
        sidebar.append(
            SidebarCategory(
                title=category.title,
                slug=category_segment(category.title),
                url=category_url(category.title),
                active=active_name == category.title.lower(),
                expandable=expandable,
                expanded=expanded,
                subcategories=children,
            )
        )
    return sidebar
