from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from storefront.catalog.filters import (
    FilterCriteria,
    ViewContext,
    default_price_range,
    facet_categories,
    filter_products,
    latest_products,
    match_subcategory,
)
from storefront.catalog.records import ProductRecord, SubCategoryRecord

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def product(pid, title, category, sub=None, price="100", rating=4, days_ago=None):
    return ProductRecord.model_validate({
        "id": pid,
        "title": title,
        "category": category,
        "sub_category": sub,
        "price": price,
        "rating": rating,
        "created_at": None if days_ago is None else NOW - timedelta(days=days_ago),
    })


PRODUCTS = [
    product("1", "Cobb Sizing Tester", "Paper Testing Equipment", "Cobb Tester", "45,000", 4.5, 1),
    product("2", "Digital Bursting Tester", "Paper Testing Equipment", "Bursting Strength Tester", "120000", 5, 3),
    product("3", "Motorised Crock Meter", "Textile Testing Equipment", "Crock Meter", "38,500", 4, 2),
    product("4", "Tensile Tester", "Textile Testing Equipment", None, None, 2),
    product("5", "Paper Thickness Gauge", "Paper Testing Equipment", None, "abc", 0, 5),
]

SUBCATEGORIES = [
    SubCategoryRecord.model_validate({"title": "Cobb Tester", "slug": "cobb-tester", "category": "Paper Testing Equipment"}),
    SubCategoryRecord.model_validate({
        "title": "Bursting Strength Tester", "slug": "bursting-strength-tester", "category": "Paper Testing Equipment"
    }),
    SubCategoryRecord.model_validate({"title": "Crock Meter", "slug": "crock-meter", "category": "Textile Testing Equipment"}),
]


def ids(products):
    return [p.id for p in products]


def test_default_criteria_pass_everything():
    assert ids(filter_products(PRODUCTS, FilterCriteria())) == ["1", "2", "3", "4", "5"]


def test_search_is_case_insensitive_substring_of_title():
    criteria = FilterCriteria(search_query="TESTER")
    assert ids(filter_products(PRODUCTS, criteria)) == ["1", "2", "4"]


def test_flat_view_search_ignores_category_but_category_view_uses_it():
    criteria = FilterCriteria(search_query="textile")
    assert filter_products(PRODUCTS, criteria) == []
    in_category = FilterCriteria(search_query="textile", category_name="textile testing equipment")
    assert ids(filter_products(PRODUCTS, in_category, view=ViewContext.CATEGORY)) == ["3", "4"]


def test_category_multiselect():
    criteria = FilterCriteria(selected_categories=frozenset({"Textile Testing Equipment"}))
    assert ids(filter_products(PRODUCTS, criteria)) == ["3", "4"]


def test_category_route_match_is_trimmed_and_case_insensitive():
    criteria = FilterCriteria(category_name="  paper testing equipment ")
    assert ids(filter_products(PRODUCTS, criteria, view=ViewContext.CATEGORY)) == ["1", "2", "5"]


def test_subcategory_filter_joins_by_title():
    criteria = FilterCriteria(category_name="paper testing equipment", selected_subcategory="cobb-tester")
    result = filter_products(PRODUCTS, criteria, SUBCATEGORIES, ViewContext.CATEGORY)
    assert ids(result) == ["1"]


def test_unknown_subcategory_slug_matches_nothing():
    assert not match_subcategory(PRODUCTS[0], "no-such-slug", SUBCATEGORIES)
    assert match_subcategory(PRODUCTS[0], None, SUBCATEGORIES)


def test_min_rating_is_inclusive():
    assert ids(filter_products(PRODUCTS, FilterCriteria(min_rating=4))) == ["1", "2", "3"]


def test_price_range_is_inclusive_and_missing_price_counts_as_zero():
    criteria = FilterCriteria(price_range=(38500, 45000))
    assert ids(filter_products(PRODUCTS, criteria)) == ["1", "3"]
    zero = FilterCriteria(price_range=(0, 0))
    assert ids(filter_products(PRODUCTS, zero)) == ["4", "5"]


def test_criteria_combine_with_and():
    criteria = FilterCriteria(
        search_query="tester",
        selected_categories=frozenset({"Paper Testing Equipment"}),
        min_rating=5,
    )
    assert ids(filter_products(PRODUCTS, criteria)) == ["2"]


def test_result_is_ordered_subset_and_idempotent():
    criteria = FilterCriteria(min_rating=3)
    first = filter_products(PRODUCTS, criteria)
    assert filter_products(PRODUCTS, criteria) == first
    positions = [PRODUCTS.index(p) for p in first]
    assert positions == sorted(positions)


def test_min_rating_out_of_range_rejected():
    with pytest.raises(ValidationError):
        FilterCriteria(min_rating=6)


def test_reset_keeps_category_route():
    criteria = FilterCriteria(
        search_query="x", category_name="paper testing equipment", selected_subcategory="cobb-tester", min_rating=3
    )
    reset = criteria.reset()
    assert reset.is_default()
    assert reset.category_name == "paper testing equipment"
    assert reset.price_range == default_price_range()


def test_facet_categories_in_first_seen_order():
    assert facet_categories(PRODUCTS) == ["Paper Testing Equipment", "Textile Testing Equipment"]


def test_latest_products_sorts_by_date_with_missing_last():
    assert ids(latest_products(PRODUCTS)) == ["1", "3", "2", "5", "4"]
    assert ids(latest_products(PRODUCTS, "paper testing equipment", limit=2)) == ["1", "2"]


def test_default_price_range_has_no_upper_bound():
    expensive = product("9", "Universal Testing Machine", "Paper Testing Equipment", price="3,50,000")
    catalog = PRODUCTS + [expensive]
    assert ids(filter_products(catalog, FilterCriteria())) == ["1", "2", "3", "4", "5", "9"]

    narrowed = FilterCriteria(price_range=(0, 240000))
    assert "9" not in ids(filter_products(catalog, narrowed))
    assert "9" in ids(filter_products(catalog, narrowed.reset()))

    for view in ViewContext:
        assert "9" in ids(filter_products(catalog, FilterCriteria(), view=view))


def test_admin_search_matches_category():
    criteria = FilterCriteria(search_query="textile")
    assert ids(filter_products(PRODUCTS, criteria, view=ViewContext.ADMIN)) == ["3", "4"]
    assert ids(filter_products(PRODUCTS, criteria, view=ViewContext.PRODUCTS)) == []
