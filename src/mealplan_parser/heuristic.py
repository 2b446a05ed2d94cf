"""Heuristic recipe extraction from the visible text of a page.

Used for pages without usable structured data. The page is flattened into
text lines; ingredients are the lines under an "Ingredients" heading and
steps are the instruction-like lines under an "Instructions" / "Method" /
"Directions" heading. Name, description and servings come from page
metadata.

This extractor never fails: a page with no recognizable sections yields a
recipe with empty ingredient and step lists.
"""

import logging
import re

from bs4 import BeautifulSoup

from .html_text import (
    STOP_SECTION_RE,
    extract_meta_content,
    extract_title,
    html_to_lines,
    make_soup,
    normalize_lines,
)
from .models import DEFAULT_SERVINGS, ScrapedRecipe
from .noise import matches_noise_pattern
from .recipe_fields import (
    infer_meal_type,
    parse_servings,
    parse_servings_from_text,
    to_ingredient_rows,
)

logger = logging.getLogger(__name__)

INGREDIENTS_HEADING_RE = re.compile(r"^ingredients?[:\s-]*$", re.IGNORECASE)
STEPS_HEADING_RE = re.compile(
    r"^(instructions?|directions?|method|preparation|steps?)[:\s-]*$", re.IGNORECASE
)

DEFAULT_MAX_SECTION_LINES = 80
MIN_STEP_LENGTH = 24

_NUMBERED_LINE_RE = re.compile(r"^\d+[.)]\s+")
_DESCRIPTION_META_KEYS = ("description", "og:description", "twitter:description")


def is_likely_step_line(line: str) -> bool:
    """Check whether a line reads like an instruction step.

    Numbered lines ("1. ", "2) ") always qualify; otherwise the line must be
    at least 24 characters and contain whitespace, which rules out short
    labels such as "Serves 4" or "Vegetarian".

    Examples:
        >>> is_likely_step_line("2) Whisk the eggs")
        True
        >>> is_likely_step_line("Jump to video")
        False
    """
    if not line:
        return False
    if _NUMBERED_LINE_RE.match(line):
        return True
    return len(line) >= MIN_STEP_LENGTH and any(char.isspace() for char in line)


def extract_section_lines(
    lines: list[str],
    start_pattern: re.Pattern[str],
    stop_pattern: re.Pattern[str],
    max_lines: int = DEFAULT_MAX_SECTION_LINES,
    steps_only: bool = False,
) -> list[str]:
    """Collect the lines of the section introduced by a heading.

    Collection starts after the first line matching ``start_pattern`` and
    stops at ``stop_pattern``, at a stop-section heading ("Notes",
    "Nutrition", ...), at any ingredients or steps heading, or after
    ``max_lines`` collected lines. Repeated start headings and noise lines
    are skipped.

    Args:
        lines: Page lines from :func:`html_to_lines`
        start_pattern: Heading that opens the section
        stop_pattern: Heading that closes the section
        max_lines: Upper bound on collected lines
        steps_only: Keep only lines that look like instruction steps

    Returns:
        Normalized section lines with "N. " / "N) " prefixes removed
    """
    start_index = next((i for i, line in enumerate(lines) if start_pattern.match(line)), None)
    if start_index is None:
        return []

    collected: list[str] = []
    for line in lines[start_index + 1 :]:
        if len(collected) >= max_lines:
            break
        if start_pattern.match(line):
            continue
        if (
            stop_pattern.match(line)
            or STOP_SECTION_RE.match(line)
            or INGREDIENTS_HEADING_RE.match(line)
            or STEPS_HEADING_RE.match(line)
        ):
            break
        if not line or matches_noise_pattern(line):
            continue
        if steps_only and not is_likely_step_line(line):
            continue
        collected.append(_NUMBERED_LINE_RE.sub("", line, count=1).strip())

    return normalize_lines(collected)


def _extract_description(soup: BeautifulSoup) -> str:
    for key in _DESCRIPTION_META_KEYS:
        description = extract_meta_content(soup, key)
        if description:
            return description
    return ""


def _extract_servings(meta_yield: str, lines: list[str]) -> int:
    if meta_yield:
        return parse_servings(meta_yield)

    from_text = parse_servings_from_text(lines)
    return from_text if from_text is not None else DEFAULT_SERVINGS


def extract_heuristic_recipe(page: str | BeautifulSoup) -> ScrapedRecipe:
    """Extract a recipe from page text and metadata.

    Args:
        page: Raw HTML, or a parsed page. A parsed page is flattened in
            place (see :func:`html_to_lines`).

    Returns:
        ScrapedRecipe; fields that could not be found are left empty
    """
    soup = make_soup(page)

    # Metadata is read before flattening rewrites the tree
    name = extract_title(soup)
    description = _extract_description(soup)
    meta_yield = extract_meta_content(soup, "recipeYield")

    lines = html_to_lines(soup)
    ingredient_lines = extract_section_lines(lines, INGREDIENTS_HEADING_RE, STEPS_HEADING_RE)
    steps = extract_section_lines(lines, STEPS_HEADING_RE, STOP_SECTION_RE, steps_only=True)

    logger.debug(
        f"Heuristic extraction found {len(ingredient_lines)} ingredient lines "
        f"and {len(steps)} steps in {len(lines)} page lines"
    )

    return ScrapedRecipe(
        name=name,
        description=description,
        ingredients=to_ingredient_rows(ingredient_lines),
        steps=steps,
        servings=_extract_servings(meta_yield, lines),
        meal_type=infer_meal_type([name, description]),
    )
