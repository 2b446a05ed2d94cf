"""Quantity and unit vocabulary shared by the ingredient and recipe parsers.

This module holds the two static lookup tables of the parser (Unicode vulgar
fractions and unit spellings) and the functions built on them:

- ``parse_fraction`` turns a short numeric token into a float
- ``normalize_unit`` maps a unit spelling to its canonical form
- ``format_qty`` renders a quantity for display

Example:
    >>> parse_fraction("1 1/2")
    1.5
    >>> normalize_unit("Tablespoons")
    'tbsp'
"""

import math
import re
from collections.abc import Callable
from types import MappingProxyType

UNICODE_FRACTIONS: MappingProxyType[str, float] = MappingProxyType(
    {
        "¼": 0.25,
        "½": 0.5,
        "¾": 0.75,
        "⅐": 0.142857,
        "⅑": 0.111111,
        "⅒": 0.1,
        "⅓": 0.333333,
        "⅔": 0.666667,
        "⅕": 0.2,
        "⅖": 0.4,
        "⅗": 0.6,
        "⅘": 0.8,
        "⅙": 0.166667,
        "⅚": 0.833333,
        "⅛": 0.125,
        "⅜": 0.375,
        "⅝": 0.625,
        "⅞": 0.875,
    }
)

# Character class matching any single vulgar fraction, for use in patterns
FRACTION_CHARS = "[" + "".join(UNICODE_FRACTIONS) + "]"

# Canonical unit -> accepted spellings (canonical form included)
_UNIT_SPELLINGS: dict[str, tuple[str, ...]] = {
    "cup": ("cup", "cups", "c"),
    "tbsp": ("tbsp", "tbs", "tb", "tablespoon", "tablespoons"),
    "tsp": ("tsp", "ts", "teaspoon", "teaspoons"),
    "oz": ("oz", "ounce", "ounces"),
    "fl oz": ("fl oz", "fluid ounce", "fluid ounces"),
    "lb": ("lb", "lbs", "pound", "pounds"),
    "g": ("g", "gram", "grams"),
    "kg": ("kg", "kilogram", "kilograms"),
    "ml": ("ml", "milliliter", "milliliters"),
    "l": ("l", "liter", "liters"),
    "pint": ("pint", "pints", "pt"),
    "quart": ("quart", "quarts", "qt"),
    "gallon": ("gallon", "gallons", "gal"),
    "pinch": ("pinch", "pinches"),
    "dash": ("dash", "dashes"),
    "stick": ("stick", "sticks"),
    "clove": ("clove", "cloves"),
    "slice": ("slice", "slices"),
    "piece": ("piece", "pieces", "pc", "pcs"),
    "bunch": ("bunch", "bunches"),
    "can": ("can", "cans"),
    "package": ("package", "packages", "pkg"),
    "bag": ("bag", "bags"),
    "head": ("head", "heads"),
    "sprig": ("sprig", "sprigs"),
    "handful": ("handful", "handfuls"),
    "whole": ("whole",),
    "small": ("small",),
    "medium": ("medium",),
    "large": ("large",),
}

UNIT_ALIASES: MappingProxyType[str, str] = MappingProxyType(
    {
        spelling: canonical
        for canonical, spellings in _UNIT_SPELLINGS.items()
        for spelling in spellings
    }
)
KNOWN_UNITS: frozenset[str] = frozenset(UNIT_ALIASES)

_PLAIN_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
_GLUED_FRACTION_RE = re.compile(r"^(\d+)\s*([^\d\s/])$")
_SLASH_FRACTION_RE = re.compile(r"^(\d+)\s*/\s*(\d+)$")
_MIXED_FRACTION_RE = re.compile(r"^(\d+)\s+(\d+)\s*/\s*(\d+)$")


def _plain_number(token: str) -> float | None:
    if not _PLAIN_NUMBER_RE.match(token):
        return None
    value = float(token)
    return value if math.isfinite(value) else None


def _lone_fraction(token: str) -> float | None:
    return UNICODE_FRACTIONS.get(token)


def _glued_fraction(token: str) -> float | None:
    match = _GLUED_FRACTION_RE.match(token)
    if not match:
        return None
    frac = UNICODE_FRACTIONS.get(match.group(2))
    if frac is None:
        return None
    return int(match.group(1)) + frac


def _slash_fraction(token: str) -> float | None:
    match = _SLASH_FRACTION_RE.match(token)
    if not match:
        return None
    den = int(match.group(2))
    if den == 0:
        return None
    return int(match.group(1)) / den


def _mixed_fraction(token: str) -> float | None:
    match = _MIXED_FRACTION_RE.match(token)
    if not match:
        return None
    den = int(match.group(3))
    if den == 0:
        return None
    return int(match.group(1)) + int(match.group(2)) / den


# Precedence order matters: first shape that matches the whole token wins
_FRACTION_SHAPES: tuple[Callable[[str], float | None], ...] = (
    _plain_number,
    _lone_fraction,
    _glued_fraction,
    _slash_fraction,
    _mixed_fraction,
)


def parse_fraction(token: str) -> float | None:
    """Parse a quantity token into a float.

    Recognized shapes, in precedence order: a plain number (``"2"``,
    ``"0.5"``), a lone vulgar fraction (``"½"``), an integer followed by a
    vulgar fraction (``"1½"``), a slash fraction (``"1/2"``) and a mixed
    number (``"1 1/2"``). A zero denominator is not a match.

    Args:
        token: Candidate quantity text

    Returns:
        The numeric value, or None if the token is not a recognized quantity

    Examples:
        >>> parse_fraction("1½")
        1.5
        >>> parse_fraction("1/0") is None
        True
    """
    trimmed = token.strip()
    if not trimmed:
        return None
    for shape in _FRACTION_SHAPES:
        value = shape(trimmed)
        if value is not None:
            return value
    return None


def is_known_unit(token: str) -> bool:
    """Check whether ``token`` is an exact (case-insensitive) unit spelling."""
    return token.lower() in KNOWN_UNITS


def normalize_unit(token: str) -> str:
    """Map a unit spelling to its canonical lowercase form.

    Exact lookup only; unknown tokens are returned lowercased.

    Examples:
        >>> normalize_unit("cups")
        'cup'
        >>> normalize_unit("Pinches")
        'pinch'
        >>> normalize_unit("jar")
        'jar'
    """
    lowered = token.lower()
    return UNIT_ALIASES.get(lowered, lowered)


def format_qty(qty: float | None) -> str:
    """Render a quantity for display, rounded to two places.

    Examples:
        >>> format_qty(1.5)
        '1.5'
        >>> format_qty(2.0)
        '2'
        >>> format_qty(None)
        ''
    """
    if qty is None or not math.isfinite(qty):
        return ""
    return f"{qty:.2f}".rstrip("0").rstrip(".")
