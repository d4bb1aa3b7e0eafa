"""
Генерация slug и преобразование сегментов маршрута категорий.
"""

import re
from urllib.parse import unquote

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_WHITESPACE = re.compile(r"\s+")


def slugify(title: str) -> str:
    """
    Построить URL-safe slug из названия.

    Нижний регистр, любые последовательности символов вне [a-z0-9]
    схлопываются в один дефис, крайние дефисы удаляются.

    Example:
        >>> slugify("Sharp Edge Tester For Toys")
        'sharp-edge-tester-for-toys'
    """
    return _NON_ALNUM.sub("-", (title or "").lower()).strip("-")


def category_segment(title: str) -> str:
    """Сегмент ссылки /category/<segment>: пробелы заменяются дефисами."""
    return _WHITESPACE.sub("-", (title or "").lower())


def decode_category_segment(segment: str) -> str:
    """
    Восстановить название категории из сегмента маршрута.

    "paper-testing-equipment" -> "paper testing equipment"
    """
    return unquote(segment or "").replace("-", " ")
