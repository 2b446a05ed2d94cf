"""Noise line classification for pasted and scraped recipe text.

Text copied from shop and recipe pages carries UI chrome ("Add to Cart",
"Jump to Recipe", calorie callouts, bare section headings) between the lines
that matter. ``is_noise_line`` rejects those lines before they reach the
ingredient parser.
"""

import re

MIN_LINE_LENGTH = 2
MAX_LINE_LENGTH = 200

NOISE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"^add\s+to\s+cart$",
        r"^shop$",
        r"^sold\s+out$",
        r"^select\s+size$",
        r"^buy\s+now$",
        r"^add\s+to\s+(list|bag|basket)$",
        r"^in\s+stock$",
        r"^out\s+of\s+stock$",
        r"^save$",
        r"^share$",
        r"^print$",
        r"^advertisement$",
        r"^sponsored$",
        r"^subscribe$",
        r"^sign\s+up$",
        r"^log\s*in$",
        r"^ingredients:?$",
        r"^directions:?$",
        r"^instructions:?$",
        r"^nutrition\s+(info|facts|information):?$",
        r"^prep\s+time",
        r"^cook\s+time",
        r"^total\s+time",
        r"^servings?:?\s*$",
        r"^yield:?\s*$",
        r"^\d+\s*(cal|calories|kcal)\b",
        r"^jump\s+to\s+recipe$",
        r"^rate\s+this\s+recipe$",
        r"^\s*$",
    )
)


def matches_noise_pattern(line: str) -> bool:
    """Check a line against the fixed noise patterns only (no length gates)."""
    trimmed = line.strip()
    return any(pattern.search(trimmed) for pattern in NOISE_PATTERNS)


def is_noise_line(line: str) -> bool:
    """Decide whether a line is page chrome rather than recipe content.

    A line is noise when it is blank, shorter than two characters, longer than
    200 characters, or matches one of ``NOISE_PATTERNS``.

    Examples:
        >>> is_noise_line("Add to Cart")
        True
        >>> is_noise_line("2 cups flour")
        False
    """
    trimmed = line.strip()
    if len(trimmed) < MIN_LINE_LENGTH or len(trimmed) > MAX_LINE_LENGTH:
        return True
    return matches_noise_pattern(trimmed)
