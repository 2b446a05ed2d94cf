"""Field coercion shared by the structured and heuristic recipe extractors.

Embedded recipe data is loosely typed: a yield may be ``4``, ``"4 servings"``
or ``["4", "4 bowls"]``; a name may be a string or an object. These helpers
turn such values into the plain fields of :class:`ScrapedRecipe`.
"""

import math
import re
from typing import Any

from .ingredients import parse_ingredients
from .models import DEFAULT_SERVINGS, MAX_SERVINGS, MIN_SERVINGS, Ingredient, MealType

_SERVINGS_NUMBER_RE = re.compile(r"(\d{1,3})(?:\s*-\s*\d{1,3})?")

_SERVINGS_PHRASES = (
    re.compile(r"serves?\s+(\d{1,3})", re.IGNORECASE),
    re.compile(r"yields?[:\s]+(\d{1,3})", re.IGNORECASE),
    re.compile(r"(\d{1,3})\s+servings?", re.IGNORECASE),
)

# Checked in order; the first meal type whose keywords appear wins
MEAL_TYPE_KEYWORDS: tuple[tuple[MealType, re.Pattern[str]], ...] = (
    (
        MealType.BREAKFAST,
        re.compile(r"\b(breakfast|brunch|pancake|oatmeal|frittata|granola)\b"),
    ),
    (MealType.LUNCH, re.compile(r"\b(lunch|sandwich|wrap|bento|grain bowl)\b")),
    (
        MealType.DINNER,
        re.compile(r"\b(dinner|supper|entree|main course|casserole|roast)\b"),
    ),
    (
        MealType.SNACK,
        re.compile(r"\b(snack|appetizer|dessert|cookie|brownie|muffin|bar)\b"),
    ),
)


def as_string(value: Any) -> str:
    """Coerce a loosely typed structured-data value to text.

    Strings pass through, numbers are formatted, lists are joined with
    spaces, and objects contribute their ``text`` or ``name`` member.

    Examples:
        >>> as_string(["4", 4])
        '4 4'
        >>> as_string({"@type": "Person", "name": "Ada"})
        'Ada'
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return ""
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, list):
        return " ".join(text for text in (as_string(item) for item in value) if text)
    if isinstance(value, dict):
        for key in ("text", "name"):
            if isinstance(value.get(key), str):
                return value[key]
    return ""


def _clamp_servings(value: int) -> int:
    return max(MIN_SERVINGS, min(MAX_SERVINGS, value))


def parse_servings(raw: Any) -> int:
    """Read a serving count from a yield value.

    Positive numbers are rounded; text contributes its first 1-3 digit
    integer (``"6-8 servings"`` gives 6). The result is clamped to [1, 100];
    missing or unusable values give the default of 4.

    Examples:
        >>> parse_servings("Serves 6-8")
        6
        >>> parse_servings(None)
        4
    """
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        if math.isfinite(raw) and raw > 0:
            return _clamp_servings(math.floor(raw + 0.5))

    match = _SERVINGS_NUMBER_RE.search(as_string(raw))
    if not match:
        return DEFAULT_SERVINGS
    value = int(match.group(1))
    if value <= 0:
        return DEFAULT_SERVINGS
    return _clamp_servings(value)


def parse_servings_from_text(lines: list[str]) -> int | None:
    """Find a "serves N", "yield: N" or "N servings" phrase in page text.

    Returns:
        The clamped serving count, or None when no phrase is present
    """
    for line in lines:
        for pattern in _SERVINGS_PHRASES:
            match = pattern.search(line)
            if match and int(match.group(1)) > 0:
                return _clamp_servings(int(match.group(1)))
    return None


def infer_meal_type(parts: list[str]) -> MealType:
    """Guess a meal type from titles, descriptions, categories and keywords.

    Examples:
        >>> infer_meal_type(["Spinach Frittata", ""])
        <MealType.BREAKFAST: 'breakfast'>
    """
    content = " ".join(parts).lower()
    if not content.strip():
        return MealType.NONE

    for meal_type, pattern in MEAL_TYPE_KEYWORDS:
        if pattern.search(content):
            return meal_type
    return MealType.NONE


def to_ingredient_rows(lines: list[str]) -> list[Ingredient]:
    """Convert ingredient lines into recipe rows with identities.

    Lines go through the bulk parser. If it keeps nothing (every line looked
    like noise), the lines are kept verbatim as names so scraped content is
    never silently dropped.
    """
    if not lines:
        return []

    parsed = parse_ingredients("\n".join(lines))
    if parsed:
        return [Ingredient(**item.model_dump()) for item in parsed]

    return [Ingredient(name=line) for line in lines]
