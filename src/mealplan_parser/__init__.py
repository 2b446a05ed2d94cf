"""
Mealplan Parser - Turn pasted ingredient text and recipe web pages into structured data.

This package provides the ingredient line parser used for bulk pasted lists
and the recipe page extractor (embedded structured data with a heuristic
fallback) used when importing recipes from a link.
"""

__version__ = "0.1.0"

from .exceptions import (
    ConfigurationError,
    InvalidRecipeUrlError,
    MealplanParserError,
    RecipeFetchError,
)
from .ingredients import (
    parse_ingredient_line,
    parse_ingredients,
    parse_ingredients_with_diagnostics,
)
from .models import (
    ImportedRecipe,
    Ingredient,
    MealType,
    ParseDiagnostics,
    ParsedIngredient,
    ScrapedRecipe,
)
from .noise import is_noise_line
from .quantities import normalize_unit, parse_fraction
from .recipe_import import (
    fetch_recipe_html,
    import_recipe,
    normalize_recipe_import_url,
    parse_recipe_from_html,
)

__all__ = [
    "ConfigurationError",
    "ImportedRecipe",
    "Ingredient",
    "InvalidRecipeUrlError",
    "MealType",
    "MealplanParserError",
    "ParseDiagnostics",
    "ParsedIngredient",
    "RecipeFetchError",
    "ScrapedRecipe",
    "fetch_recipe_html",
    "import_recipe",
    "is_noise_line",
    "normalize_recipe_import_url",
    "normalize_unit",
    "parse_fraction",
    "parse_ingredient_line",
    "parse_ingredients",
    "parse_ingredients_with_diagnostics",
    "parse_recipe_from_html",
]
