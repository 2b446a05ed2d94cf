"""Protocol definitions for mealplan_parser.

Recipe import talks to the network through a single seam, the page fetcher.
Callers can substitute their own (a cached fetcher, a retrying wrapper, a
stub in tests) as long as it satisfies :class:`HtmlFetcher`.

Example:
    >>> async def fetch_fixture(url: str) -> str:
    ...     return Path("tests/fixtures/salmon.html").read_text()
    ...
    >>> recipe = await import_recipe("https://example.com/salmon", fetcher=fetch_fixture)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class HtmlFetcher(Protocol):
    """Protocol for retrieving the HTML of an already-validated recipe URL.

    Implementations must only be handed URLs that passed
    ``normalize_recipe_import_url`` and must signal failure with
    ``RecipeFetchError``.
    """

    async def __call__(self, url: str) -> str:
        """Fetch a page.

        Args:
            url: Normalized public http(s) URL

        Returns:
            Non-empty page HTML

        Raises:
            RecipeFetchError: If the page cannot be retrieved
        """
        ...
