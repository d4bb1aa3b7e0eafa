from storefront.catalog.hierarchy import (
    ExpansionState,
    build_sidebar,
    find_subcategory,
    find_subcategory_by_title,
    group_subcategories,
    is_expandable,
)
from storefront.catalog.records import CategoryRecord, SubCategoryRecord

CATEGORIES = [
    CategoryRecord.model_validate({"id": 1, "title": "Paper Testing Equipment"}),
    CategoryRecord.model_validate({"id": 2, "title": "Packaging Testing Equipment"}),
]
SUBCATEGORIES = [
    SubCategoryRecord.model_validate({"title": "Cobb Tester", "category": "Paper Testing Equipment"}),
    SubCategoryRecord.model_validate({"title": "Bursting Strength Tester", "category": "Paper Testing Equipment"}),
    SubCategoryRecord.model_validate({"title": "Orphan", "category": "Deleted Category"}),
]


def test_group_keeps_insertion_order():
    grouped = group_subcategories(SUBCATEGORIES)
    assert [s.slug for s in grouped["Paper Testing Equipment"]] == ["cobb-tester", "bursting-strength-tester"]
    assert "Deleted Category" in grouped


def test_category_without_subcategories_is_not_expandable():
    grouped = group_subcategories(SUBCATEGORIES)
    assert is_expandable(grouped, "Paper Testing Equipment")
    assert not is_expandable(grouped, "Packaging Testing Equipment")


def test_find_subcategory_by_slug():
    assert find_subcategory(SUBCATEGORIES, "cobb-tester").title == "Cobb Tester"
    assert find_subcategory(SUBCATEGORIES, "missing") is None
    assert find_subcategory(SUBCATEGORIES, None) is None


def test_expansion_toggle():
    state = ExpansionState()
    assert not state.is_expanded("Paper Testing Equipment")
    assert state.toggle("Paper Testing Equipment") is True
    assert state.toggle("Paper Testing Equipment") is False
    state.expand("Paper Testing Equipment")
    assert state.expanded() == ["Paper Testing Equipment"]


def test_sidebar_lists_children_of_expanded_categories_only():
    state = ExpansionState()
    sidebar = build_sidebar(CATEGORIES, SUBCATEGORIES, state, "paper testing equipment")
    assert [entry.title for entry in sidebar] == ["Paper Testing Equipment", "Packaging Testing Equipment"]
    assert sidebar[0].active and sidebar[0].expandable and sidebar[0].subcategories == []
    assert sidebar[0].url == "/category/paper-testing-equipment"
    assert not sidebar[1].expandable

    state.expand("Paper Testing Equipment")
    sidebar = build_sidebar(CATEGORIES, SUBCATEGORIES, state, "paper testing equipment", "cobb-tester")
    children = sidebar[0].subcategories
    assert [c.slug for c in children] == ["cobb-tester", "bursting-strength-tester"]
    assert children[0].selected
    # повторный клик по выбранной подкатегории снимает параметр
    assert children[0].url == "/category/paper-testing-equipment"
    assert children[1].url == "/category/paper-testing-equipment?subcategory=bursting-strength-tester"


def test_find_subcategory_by_title():
    assert find_subcategory_by_title(SUBCATEGORIES, " cobb tester ").slug == "cobb-tester"
    assert find_subcategory_by_title(SUBCATEGORIES, "Cobb Tester", "Paper Testing Equipment") is not None
    assert find_subcategory_by_title(SUBCATEGORIES, "Cobb Tester", "Packaging Testing Equipment") is None
    assert find_subcategory_by_title(SUBCATEGORIES, "Missing") is None
    assert find_subcategory_by_title(SUBCATEGORIES, None) is None
