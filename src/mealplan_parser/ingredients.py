"""Ingredient line parsing for bulk pasted text.

Turns lines such as ``"1 1/2 cups flour"``, ``"(½ cup) butter"`` or
``"2 eggs, divided"`` into :class:`ParsedIngredient` records. The line parser
never fails: a line it cannot read becomes a name-only ingredient.

The bulk parser splits text into lines, routes noise lines (see
:mod:`mealplan_parser.noise`) into ``skipped_lines`` and parses the rest, so
every non-blank input line lands in exactly one of the two result lists.

Example:
    >>> result = parse_ingredients_with_diagnostics("1 1/2 cups flour\\nAdd to Cart")
    >>> result.ingredients[0].unit
    'cup'
    >>> result.skipped_lines
    ['Add to Cart']
"""

import logging
import re
from collections.abc import Callable
from typing import NamedTuple

from .models import UNKNOWN_INGREDIENT, ParseDiagnostics, ParsedIngredient
from .noise import is_noise_line
from .quantities import (
    FRACTION_CHARS,
    UNICODE_FRACTIONS,
    is_known_unit,
    normalize_unit,
    parse_fraction,
)

logger = logging.getLogger(__name__)

_BULLET_RE = re.compile(r"^[-*•‣◦⁃]\s*")
_ORDINAL_RE = re.compile(r"^\d+\.\s+")
_PAREN_MEASUREMENT_RE = re.compile(r"^\(([^)]+)\)\s+(.+)$")

_MIXED_RE = re.compile(r"^(\d+)\s+(\d+)\s*/\s*(\d+)\s+(.+)$")
_SLASH_RE = re.compile(r"^(\d+)\s*/\s*(\d+)\s+(.+)$")
_GLUED_RE = re.compile(rf"^(\d+)({FRACTION_CHARS})\s+(.+)$")
_LONE_FRACTION_RE = re.compile(rf"^({FRACTION_CHARS})\s+(.+)$")
_PLAIN_RE = re.compile(r"^(\d+(?:\.\d+)?)\s+(.+)$")

_TRAILING_QUALIFIER_RE = re.compile(
    r",\s*(divided|optional|to taste|or more|as needed|for garnish|for serving)$",
    re.IGNORECASE,
)

# Most quantity tokens inside "(1 1/2 cups)" span at most three words
_MAX_PAREN_QTY_TOKENS = 3


class Measurement(NamedTuple):
    """A leading quantity, its unit and whatever text follows them."""

    qty: float
    unit: str
    rest: str


def extract_unit(text: str) -> tuple[str, str]:
    """Split a known unit off the front of ``text``.

    The first word (ignoring a trailing ``.`` or ``,``) is taken as the unit
    when it is in the vocabulary and more words follow; otherwise the first
    two words are tried as a two-word unit such as ``"fl oz"``.

    Args:
        text: Remainder of a line after its quantity

    Returns:
        Tuple of (canonical unit or "", remaining text)

    Examples:
        >>> extract_unit("cups flour")
        ('cup', 'flour')
        >>> extract_unit("eggs, beaten")
        ('', 'eggs, beaten')
    """
    parts = text.split()
    if not parts:
        return "", text

    first_word = re.sub(r"[.,]$", "", parts[0].lower())
    if len(parts) > 1 and is_known_unit(first_word):
        return normalize_unit(first_word), " ".join(parts[1:])

    if len(parts) > 2:
        two_words = f"{parts[0]} {parts[1]}".lower()
        if is_known_unit(two_words):
            return normalize_unit(two_words), " ".join(parts[2:])

    return "", text


def _measurement(qty: float, remainder: str) -> Measurement:
    unit, rest = extract_unit(remainder)
    return Measurement(qty, unit, rest)


def _match_mixed(text: str) -> Measurement | None:
    match = _MIXED_RE.match(text)
    if not match or int(match.group(3)) == 0:
        return None
    qty = int(match.group(1)) + int(match.group(2)) / int(match.group(3))
    return _measurement(qty, match.group(4))


def _match_slash(text: str) -> Measurement | None:
    match = _SLASH_RE.match(text)
    if not match or int(match.group(2)) == 0:
        return None
    return _measurement(int(match.group(1)) / int(match.group(2)), match.group(3))


def _match_glued_fraction(text: str) -> Measurement | None:
    match = _GLUED_RE.match(text)
    if not match:
        return None
    qty = int(match.group(1)) + UNICODE_FRACTIONS[match.group(2)]
    return _measurement(qty, match.group(3))


def _match_lone_fraction(text: str) -> Measurement | None:
    match = _LONE_FRACTION_RE.match(text)
    if not match:
        return None
    return _measurement(UNICODE_FRACTIONS[match.group(1)], match.group(2))


def _match_plain_number(text: str) -> Measurement | None:
    match = _PLAIN_RE.match(text)
    if not match:
        return None
    return _measurement(float(match.group(1)), match.group(2))


LEADING_MEASUREMENT_MATCHERS: tuple[Callable[[str], Measurement | None], ...] = (
    _match_mixed,
    _match_slash,
    _match_glued_fraction,
    _match_lone_fraction,
    _match_plain_number,
)


def parse_leading_measurement(text: str) -> Measurement | None:
    """Read a quantity (and optional unit) from the start of a line.

    Tries each of ``LEADING_MEASUREMENT_MATCHERS`` in order and returns the
    first hit.

    Examples:
        >>> parse_leading_measurement("1/2 cup butter")
        Measurement(qty=0.5, unit='cup', rest='butter')
        >>> parse_leading_measurement("salt and pepper") is None
        True
    """
    for matcher in LEADING_MEASUREMENT_MATCHERS:
        measurement = matcher(text)
        if measurement is not None:
            return measurement
    return None


def parse_quantity_and_unit(text: str) -> tuple[float | None, str]:
    """Parse a standalone measurement such as ``"1 1/2 cups"`` or ``"2"``.

    Used for parenthesized measurements. Up to three leading words are tried
    as the quantity; whatever follows must be a known unit.

    Returns:
        Tuple of (quantity or None, canonical unit or "")
    """
    parts = text.split()
    if not parts:
        return None, ""

    for i in range(1, min(_MAX_PAREN_QTY_TOKENS, len(parts)) + 1):
        qty = parse_fraction(" ".join(parts[:i]))
        if qty is None:
            continue
        remaining = " ".join(parts[i:]).lower()
        if remaining and is_known_unit(remaining):
            return qty, normalize_unit(remaining)
        if i == 1 and not remaining:
            return qty, ""

    first_qty = parse_fraction(parts[0])
    if first_qty is not None:
        rest = " ".join(parts[1:]).lower()
        if is_known_unit(rest):
            return first_qty, normalize_unit(rest)
        return first_qty, ""

    return None, ""


def _clean_ingredient(name: str, qty: float | None, unit: str) -> ParsedIngredient:
    cleaned = _TRAILING_QUALIFIER_RE.sub("", name.strip())
    cleaned = re.sub(r",\s*$", "", re.sub(r"^,\s*", "", cleaned.strip()))

    rounded = round(qty, 3) if qty is not None else None
    if rounded is not None and rounded <= 0:
        rounded = None

    return ParsedIngredient(name=cleaned or UNKNOWN_INGREDIENT, qty=rounded, unit=unit)


def parse_ingredient_line(line: str) -> ParsedIngredient:
    """Parse a single ingredient line.

    Handles bullets and ``"N. "`` prefixes, parenthesized leading
    measurements (``"(1/2 cup) butter"``), mixed/slash/Unicode fractions and
    plain numbers, followed by an optional unit. Trailing qualifiers such as
    ``", divided"`` or ``", to taste"`` are dropped from the name.

    Args:
        line: One line of ingredient text

    Returns:
        ParsedIngredient; the whole line becomes the name when no measurement
        is found

    Examples:
        >>> parse_ingredient_line("2 tbsp hot honey")
        ParsedIngredient(name='hot honey', qty=2.0, unit='tbsp', store='')
    """
    text = _ORDINAL_RE.sub("", _BULLET_RE.sub("", line.strip()), count=1)

    paren = _PAREN_MEASUREMENT_RE.match(text)
    if paren:
        qty, unit = parse_quantity_and_unit(paren.group(1).strip())
        if qty is not None:
            return _clean_ingredient(paren.group(2).strip(), qty, unit)

    measurement = parse_leading_measurement(text)
    if measurement is not None:
        return _clean_ingredient(measurement.rest, measurement.qty, measurement.unit)

    return _clean_ingredient(text, None, "")


def parse_ingredients_with_diagnostics(text: str) -> ParseDiagnostics:
    """Parse pasted multi-line text, keeping track of rejected lines.

    Args:
        text: Raw text, one ingredient per line

    Returns:
        ParseDiagnostics with parsed ingredients and the noise lines skipped
    """
    ingredients: list[ParsedIngredient] = []
    skipped_lines: list[str] = []

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if is_noise_line(line):
            skipped_lines.append(line)
            continue
        ingredients.append(parse_ingredient_line(line))

    logger.debug(
        f"Parsed {len(ingredients)} ingredient lines, skipped {len(skipped_lines)} noise lines"
    )
    return ParseDiagnostics(ingredients=ingredients, skipped_lines=skipped_lines)


def parse_ingredients(text: str) -> list[ParsedIngredient]:
    """Parse pasted multi-line text into ingredients, discarding diagnostics."""
    return parse_ingredients_with_diagnostics(text).ingredients
