"""Menu categories."""

from __future__ import annotations

from typing import Iterable

from reviewbar.models import Dish

CATEGORIES: tuple[str, ...] = (
    "SWEETS",
    "SNACKS",
    "SAVOURIES",
    "COOKIES",
    "PODI",
    "THOKKU",
    "PICKLE",
    "GIFT_HAMPER",
)


def category_label(category: str) -> str:
    return category.replace("_", " ")


def group_by_category(dishes: Iterable[Dish]) -> dict[str, list[Dish]]:
    """Group dishes by category, keeping categories in first-seen order."""
    grouped: dict[str, list[Dish]] = {}
    for dish in dishes:
        grouped.setdefault(dish.category, []).append(dish)
    return grouped
