"""Recipe extraction from embedded JSON-LD structured data.

Recipe sites usually embed a schema.org ``Recipe`` object in a
``<script type="application/ld+json">`` block, often wrapped in a ``@graph``
together with the page's WebSite, Organization and BreadcrumbList nodes.
This module finds every Recipe node on a page, turns each into a
:class:`ScrapedRecipe` candidate and keeps the best scoring one.

Example:
    >>> recipe = extract_structured_recipe(page_html)
    >>> recipe.name if recipe else None
    'Lemon Garlic Salmon'
"""

import json
import logging
import re
from collections.abc import Iterator
from typing import Any

from bs4 import BeautifulSoup

from .html_text import decode_html_entities, make_soup, normalize_lines, normalize_text
from .models import ScrapedRecipe
from .recipe_fields import as_string, infer_meal_type, parse_servings, to_ingredient_rows
from .validator import pick_best_candidate

logger = logging.getLogger(__name__)

# Nesting bound for the graph walk; real pages stay well under it
MAX_GRAPH_DEPTH = 12

NESTED_RECIPE_KEYS = ("@graph", "graph", "mainEntity", "itemListElement", "subjectOf", "hasPart")

_INSTRUCTION_CHILD_KEYS = ("itemListElement", "steps", "recipeInstructions")

_JSON_LD_TYPE_RE = re.compile(r"^\s*application/ld\+json\s*$", re.IGNORECASE)
_LINE_BREAK_RE = re.compile(r"\r?\n+")

_WRAPPERS = (
    re.compile(r"^\s*<!--"),
    re.compile(r"-->\s*$"),
    re.compile(r"^\s*/\*<!\[CDATA\[\*/\s*", re.IGNORECASE),
    re.compile(r"\s*/\*\]\]>\*/\s*$", re.IGNORECASE),
    re.compile(r";\s*$"),
)


def normalize_json_ld_block(raw: str) -> str:
    """Strip HTML comment and CDATA wrappers and a trailing semicolon."""
    for wrapper in _WRAPPERS:
        raw = wrapper.sub("", raw)
    return raw.strip()


def parse_json_ld_block(raw: str) -> Any | None:
    """Parse one JSON-LD script body.

    The block is parsed as-is first and then once more with HTML entities
    decoded (some CMSes entity-encode the whole script body).

    Returns:
        The parsed JSON value, or None when neither attempt succeeds
    """
    normalized = normalize_json_ld_block(raw)
    if not normalized:
        return None

    for attempt in (normalized, decode_html_entities(normalized)):
        # RecursionError: deeply nested input exhausts the decoder stack
        try:
            return json.loads(attempt)
        except (ValueError, RecursionError):
            continue

    logger.debug(f"Skipping unparseable JSON-LD block ({len(normalized)} chars)")
    return None


def is_recipe_node(node: dict[str, Any]) -> bool:
    """Check whether a JSON-LD object is typed as a Recipe (case-insensitive)."""
    node_type = node.get("@type")
    if isinstance(node_type, str):
        return node_type.lower() == "recipe"
    if isinstance(node_type, list):
        return any(isinstance(item, str) and item.lower() == "recipe" for item in node_type)
    return False


def iter_recipe_nodes(node: Any, depth: int = 0) -> Iterator[dict[str, Any]]:
    """Yield every Recipe object reachable from a parsed JSON-LD value.

    Descends into lists and into the container keys in
    ``NESTED_RECIPE_KEYS``; nodes nested deeper than ``MAX_GRAPH_DEPTH`` are
    ignored.
    """
    if depth > MAX_GRAPH_DEPTH or not node:
        return

    if isinstance(node, list):
        for item in node:
            yield from iter_recipe_nodes(item, depth + 1)
        return

    if not isinstance(node, dict):
        return

    if is_recipe_node(node):
        yield node

    for key in NESTED_RECIPE_KEYS:
        if node.get(key):
            yield from iter_recipe_nodes(node[key], depth + 1)


def _collect_instruction_texts(value: Any, depth: int = 0) -> list[str]:
    if not value or depth > MAX_GRAPH_DEPTH:
        return []

    if isinstance(value, str):
        chunks = (normalize_text(chunk) for chunk in _LINE_BREAK_RE.split(value))
        return [chunk for chunk in chunks if chunk]

    if isinstance(value, list):
        texts: list[str] = []
        for item in value:
            texts.extend(_collect_instruction_texts(item, depth + 1))
        return texts

    if isinstance(value, dict):
        # HowToStep carries text; HowToSection carries nested steps and a name
        # that is only a section title
        if isinstance(value.get("text"), str) and value["text"].strip():
            return _collect_instruction_texts(value["text"], depth + 1)

        nested: list[str] = []
        for key in _INSTRUCTION_CHILD_KEYS:
            nested.extend(_collect_instruction_texts(value.get(key), depth + 1))
        if nested:
            return nested

        return _collect_instruction_texts(value.get("name"), depth + 1)

    return []


def extract_instruction_texts(value: Any) -> list[str]:
    """Flatten a ``recipeInstructions`` value into step strings.

    Accepts a newline-separated string, a list of strings, ``HowToStep``
    objects and ``HowToSection`` objects in any nesting. Headings and
    duplicates are removed.

    Examples:
        >>> extract_instruction_texts([
        ...     {"@type": "HowToStep", "text": "Preheat oven."},
        ...     {"@type": "HowToStep", "text": "Bake 20 minutes."},
        ... ])
        ['Preheat oven.', 'Bake 20 minutes.']
    """
    return normalize_lines(_collect_instruction_texts(value))


def _first_present(node: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = node.get(key)
        if value is not None:
            return value
    return None


def parse_recipe_node(node: dict[str, Any]) -> ScrapedRecipe:
    """Build a recipe candidate from one schema.org Recipe object."""
    raw_ingredients = _first_present(node, "recipeIngredient", "ingredients") or []
    if not isinstance(raw_ingredients, list):
        raw_ingredients = [raw_ingredients]
    ingredient_lines = normalize_lines([as_string(value) for value in raw_ingredients])

    name = normalize_text(as_string(node.get("name")))
    description = normalize_text(as_string(node.get("description")))

    return ScrapedRecipe(
        name=name,
        description=description,
        ingredients=to_ingredient_rows(ingredient_lines),
        steps=extract_instruction_texts(
            _first_present(node, "recipeInstructions", "instructions", "steps")
        ),
        servings=parse_servings(_first_present(node, "recipeYield", "yield", "servings")),
        meal_type=infer_meal_type(
            [
                as_string(node.get("recipeCategory")),
                as_string(node.get("keywords")),
                name,
                description,
            ]
        ),
    )


def extract_structured_recipe(page: str | BeautifulSoup) -> ScrapedRecipe | None:
    """Extract the best recipe described by the page's JSON-LD blocks.

    Args:
        page: Raw HTML, or a parsed page (read only)

    Returns:
        The highest scoring Recipe candidate, or None when the page embeds no
        parseable Recipe node
    """
    soup = make_soup(page)
    candidates: list[ScrapedRecipe] = []

    for script in soup.find_all("script", attrs={"type": _JSON_LD_TYPE_RE}):
        block = parse_json_ld_block(script.string or script.get_text())
        if block is None:
            continue
        candidates.extend(parse_recipe_node(node) for node in iter_recipe_nodes(block))

    logger.debug(f"Found {len(candidates)} structured recipe candidates")
    return pick_best_candidate(candidates)
