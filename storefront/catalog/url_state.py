"""
Синхронизация состояния фильтров с URL.

Выбранная подкатегория отражается в ?subcategory= на маршруте
категории, критерии страницы всех товаров - в строке запроса
/products, поэтому отфильтрованный вид можно сохранить в закладки.
"""

from typing import Iterable, List, Optional, Tuple
from urllib.parse import urlencode

from storefront.catalog.filters import FilterCriteria, default_price_range
from storefront.catalog.records import SubCategoryRecord
from storefront.catalog.slugs import category_segment, decode_category_segment

SUBCATEGORY_PARAM = "subcategory"


def category_url(category_title: str, subcategory: Optional[str] = None) -> str:
    """
    /category/<segment>[?subcategory=<slug>]

    Example:
        >>> category_url("Paper Testing Equipment", "cobb-tester")
        '/category/paper-testing-equipment?subcategory=cobb-tester'
    """
    url = f"/category/{category_segment(category_title)}"
    if subcategory:
        url += "?" + urlencode({SUBCATEGORY_PARAM: subcategory})
    return url


def subcategory_toggle(current: Optional[str], subcategory: SubCategoryRecord) -> Tuple[Optional[str], str]:
    """
    Клик по подкатегории: выбор или снятие выбора.

    Returns:
        (новый выбранный slug или None, URL маршрута родительской категории)
    """
    new_selection = None if current == subcategory.slug else subcategory.slug
    return new_selection, category_url(subcategory.category, new_selection)


def _query(
    criteria: FilterCriteria, page: int, include_categories: bool, sort: Optional[str] = None
) -> List[Tuple[str, str]]:
    params: List[Tuple[str, str]] = []
    if criteria.search_query:
        params.append(("q", criteria.search_query))
    if include_categories:
        for category in sorted(criteria.selected_categories):
            params.append(("category", category))
    if criteria.min_rating:
        params.append(("min_rating", str(criteria.min_rating)))
    low, high = criteria.price_range
    default_low, default_high = default_price_range()
    if low != default_low:
        params.append(("price_min", _number(low)))
    if high != default_high:
        params.append(("price_max", _number(high)))
    if sort:
        params.append(("sort", sort))
    if page > 1:
        params.append(("page", str(page)))
    return params


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def products_url(criteria: FilterCriteria, page: int = 1, sort: Optional[str] = None) -> str:
    """Адрес страницы всех товаров для заданных критериев."""
    params = _query(criteria, page, include_categories=True, sort=sort)
    return "/products" + ("?" + urlencode(params) if params else "")


def category_view_url(criteria: FilterCriteria, page: int = 1, sort: Optional[str] = None) -> str:
    """Адрес страницы категории, включая выбранную подкатегорию и прочие фильтры."""
    url = category_url(criteria.category_name or "")
    params: List[Tuple[str, str]] = []
    if criteria.selected_subcategory:
        params.append((SUBCATEGORY_PARAM, criteria.selected_subcategory))
    params.extend(_query(criteria, page, include_categories=False, sort=sort))
    return url + ("?" + urlencode(params) if params else "")


def criteria_from_params(
    q: Optional[str] = None,
    categories: Optional[Iterable[str]] = None,
    category_segment_value: Optional[str] = None,
    subcategory: Optional[str] = None,
    min_rating: int = 0,
    price_min: Optional[float] = None,
    price_max: Optional[float] = None,
) -> FilterCriteria:
    """Собрать критерии из параметров запроса; отсутствующие - по умолчанию."""
    default_low, default_high = default_price_range()
    return FilterCriteria(
        search_query=q or "",
        selected_categories=frozenset(c for c in (categories or ()) if c),
        category_name=(
            decode_category_segment(category_segment_value)
            if category_segment_value is not None
            else None
        ),
        selected_subcategory=subcategory or None,
        min_rating=min_rating,
        price_range=(
            default_low if price_min is None else price_min,
            default_high if price_max is None else price_max,
        ),
    )
