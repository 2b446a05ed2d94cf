"""Pytest configuration and fixtures for mealplan_parser tests.

This module provides shared fixtures for testing the mealplan_parser package.
Fixtures follow pytest best practices:
- Use monkeypatch for environment manipulation
- Use tmp_path for file operations
- Serve HTTP through httpx.MockTransport, never the network
"""

import json
import sys
from pathlib import Path
from typing import Any

import pytest

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Remove all MEALPLAN_PARSER_* environment variables and config files.

    HOME and the working directory point at an empty temporary directory so
    neither the user nor the project config file is picked up.
    """
    import os

    for key in list(os.environ.keys()):
        if key.startswith("MEALPLAN_PARSER_"):
            monkeypatch.delenv(key, raising=False)

    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def mock_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Provide a helper to set MEALPLAN_PARSER_* environment variables.

    Example:
        def test_env_loading(mock_env):
            mock_env["FETCH_TIMEOUT"] = "30"
            # MEALPLAN_PARSER_FETCH_TIMEOUT is now set
    """

    class EnvSetter(dict[str, str]):
        def __setitem__(self, key: str, value: str) -> None:
            super().__setitem__(key, value)
            monkeypatch.setenv(f"MEALPLAN_PARSER_{key}", value)

    return EnvSetter()


@pytest.fixture
def fast_config():
    """ImportConfig with short timeouts and no retry delay worth waiting for."""
    from mealplan_parser.config import ImportConfig

    return ImportConfig(
        fetch_timeout=2.0,
        retry_attempts=2,
        initial_retry_delay=0.001,
        max_retry_delay=0.001,
    )


# ============================================================================
# Recipe Page Fixtures
# ============================================================================


@pytest.fixture
def recipe_json_ld() -> dict[str, Any]:
    """A schema.org Recipe node as embedded by typical recipe sites."""
    return {
        "@context": "https://schema.org",
        "@type": "Recipe",
        "name": "Lemon Garlic Salmon",
        "description": "A quick weeknight dinner.",
        "recipeYield": ["4", "4 servings"],
        "recipeCategory": "Main Course",
        "keywords": "salmon, dinner, easy",
        "recipeIngredient": [
            "4 salmon fillets",
            "2 tbsp olive oil",
            "3 cloves garlic, minced",
            "1 lemon",
        ],
        "recipeInstructions": [
            {"@type": "HowToStep", "text": "Preheat the oven to 400F."},
            {"@type": "HowToStep", "text": "Season the salmon and bake for 12 minutes."},
        ],
    }


def make_page(
    body: str = "",
    head: str = "",
    json_ld: Any = None,
) -> str:
    """Assemble a minimal HTML page, optionally embedding a JSON-LD block."""
    script = ""
    if json_ld is not None:
        payload = json_ld if isinstance(json_ld, str) else json.dumps(json_ld)
        script = f'<script type="application/ld+json">{payload}</script>'
    return f"<html><head>{head}{script}</head><body>{body}</body></html>"


@pytest.fixture
def page_factory():
    """Expose make_page to tests."""
    return make_page


@pytest.fixture
def structured_page(recipe_json_ld: dict[str, Any]) -> str:
    """Page whose recipe comes entirely from embedded structured data."""
    return make_page(
        head="<title>Lemon Garlic Salmon - Example Kitchen</title>",
        json_ld={
            "@context": "https://schema.org",
            "@graph": [{"@type": "WebSite", "name": "Example Kitchen"}, recipe_json_ld],
        },
        body="<h1>Lemon Garlic Salmon</h1><p>Jump to Recipe</p>",
    )


@pytest.fixture
def heuristic_page() -> str:
    """Page without structured data; sections are only marked by headings."""
    return make_page(
        head=(
            "<title>Buttermilk Pancakes | Example Kitchen</title>"
            '<meta name="description" content="Fluffy pancakes for a lazy weekend breakfast.">'
        ),
        body=(
            "<h1>Buttermilk Pancakes</h1>"
            "<p>Serves 6</p>"
            "<h2>Ingredients</h2>"
            "<ul>"
            "<li>2 cups flour</li>"
            "<li>1 1/2 cups buttermilk</li>"
            "<li>Add to Cart</li>"
            "<li>2 large eggs</li>"
            "</ul>"
            "<h2>Instructions</h2>"
            "<ol>"
            "<li>Whisk the dry ingredients together in a large bowl.</li>"
            "<li>Stir in the buttermilk and eggs until just combined.</li>"
            "<li>Cook on a hot griddle until golden.</li>"
            "</ol>"
            "<h2>Notes</h2>"
            "<p>Leftover pancakes freeze well for up to a month.</p>"
        ),
    )
