"""HTML text flattening and page metadata lookup.

Both recipe extraction strategies work on plain text rather than on markup.
This module turns a fetched page into an ordered list of text lines and
provides the small helpers that read ``<meta>`` tags and the page title.

The flattener:
- drops script, style, noscript and template blocks
- numbers ordered-list items so they keep their step shape ("1. Mix...")
- breaks lines at ``<br>`` and around block-level elements, and keeps
  adjacent inline elements apart with a space
- decodes entities and collapses whitespace
"""

import html
import re

from bs4 import BeautifulSoup

_DROPPED_TAGS = ["script", "style", "noscript", "template"]
_BLOCK_TAGS = [
    "p",
    "div",
    "li",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "section",
    "article",
    "tr",
    "ul",
    "ol",
    "dt",
    "dd",
    "table",
    "blockquote",
    "header",
    "footer",
    "main",
    "aside",
    "nav",
    "title",
]

RECIPE_HEADING_RE = re.compile(
    r"^(recipe|ingredients?|instructions?|directions?|method|preparation|steps?)[:\s-]*$",
    re.IGNORECASE,
)
STOP_SECTION_RE = re.compile(
    r"^(nutrition|reviews?|notes?|tips?|video|faq|author|related|more recipes|print)[:\s-]*$",
    re.IGNORECASE,
)

_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")
_NUMBERED_ITEM_RE = re.compile(r"^\d+[.)](?:\s|$)")
_TITLE_SUFFIX_RE = re.compile(r"\s+[-|–—]\s+.*$")


def collapse_whitespace(value: str) -> str:
    """Collapse runs of whitespace to single spaces and trim."""
    return _WHITESPACE_RE.sub(" ", value).strip()


def decode_html_entities(value: str) -> str:
    """Decode named, decimal and hex character references (``&amp;``, ``&#39;``, ``&#x27;``)."""
    return html.unescape(value)


def normalize_text(value: str) -> str:
    """Turn an inline HTML fragment into a single line of plain text.

    Examples:
        >>> normalize_text("<b>Mix</b>  the&nbsp;flour &amp; sugar")
        'Mix the flour & sugar'
    """
    stripped = collapse_whitespace(_TAG_RE.sub(" ", value))
    return collapse_whitespace(decode_html_entities(stripped))


def normalize_lines(lines: list[str]) -> list[str]:
    """Normalize lines and drop empties, headings and duplicates.

    Recipe headings ("Ingredients", "Method", ...) and stop-section headings
    ("Nutrition", "Notes", ...) are removed; for repeated lines the first
    occurrence wins.
    """
    result: list[str] = []
    seen: set[str] = set()

    for line in lines:
        cleaned = normalize_text(line)
        if not cleaned:
            continue
        if RECIPE_HEADING_RE.match(cleaned) or STOP_SECTION_RE.match(cleaned):
            continue
        if cleaned in seen:
            continue
        seen.add(cleaned)
        result.append(cleaned)

    return result


def _number_ordered_lists(soup: BeautifulSoup) -> None:
    for ordered in soup.find_all("ol"):
        items = ordered.find_all("li", recursive=False)
        for index, item in enumerate(items, start=1):
            if not _NUMBERED_ITEM_RE.match(item.get_text(" ", strip=True)):
                item.insert(0, f"{index}. ")


def make_soup(page: str | BeautifulSoup) -> BeautifulSoup:
    """Parse raw HTML, passing an already parsed page through unchanged."""
    if isinstance(page, BeautifulSoup):
        return page
    return BeautifulSoup(page, "html.parser")


def html_to_lines(page: str | BeautifulSoup) -> list[str]:
    """Flatten a page into its visible text lines, in document order.

    Adjacent inline elements are separated by a space, so markup such as
    ``<span>2</span><span>cups</span>`` reads as "2 cups".

    Args:
        page: Raw HTML, or a parsed page. A parsed page is flattened in
            place: scripts are removed and line breaks inserted, so read
            anything else needed from it first.

    Returns:
        Non-empty, whitespace-collapsed lines

    Examples:
        >>> html_to_lines("<h2>Ingredients</h2><ul><li>1 cup milk</li></ul>")
        ['Ingredients', '1 cup milk']
    """
    soup = make_soup(page)

    for tag in soup.find_all(_DROPPED_TAGS):
        tag.decompose()

    _number_ordered_lists(soup)

    for br in soup.find_all("br"):
        br.replace_with("\n")
    for block in soup.find_all(_BLOCK_TAGS):
        block.insert_before("\n")
        block.append("\n")

    lines = (collapse_whitespace(line) for line in soup.get_text(" ").split("\n"))
    return [line for line in lines if line]


def extract_meta_content(soup: BeautifulSoup, key: str) -> str:
    """Read the content of a ``<meta>`` tag identified by name, property or itemprop.

    Args:
        soup: Parsed page
        key: Attribute value to look for (e.g. "og:title", "description"),
            compared case-insensitively

    Returns:
        Normalized content, or "" when no matching tag has content
    """
    matcher = re.compile(rf"^{re.escape(key)}$", re.IGNORECASE)
    for attribute in ("name", "property", "itemprop"):
        tag = soup.find("meta", attrs={attribute: matcher, "content": True})
        if tag is None:
            continue
        content = normalize_text(str(tag.get("content", "")))
        if content:
            return content
    return ""


def extract_title(soup: BeautifulSoup) -> str:
    """Find the page title: Open Graph, then Twitter Card, then ``<title>``.

    A trailing site-name suffix (``"Lemon Salmon - Example Kitchen"``) is
    removed from the ``<title>`` text.
    """
    for key in ("og:title", "twitter:title"):
        title = extract_meta_content(soup, key)
        if title:
            return title

    if soup.title is None:
        return ""
    title = normalize_text(soup.title.get_text())
    return _TITLE_SUFFIX_RE.sub("", title).strip()
