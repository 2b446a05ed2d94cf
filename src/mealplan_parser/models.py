"""Pydantic models for parsed ingredients and scraped recipes.

Every model is frozen: parser outputs are created per call and handed to the
caller, never mutated afterwards. Field names are snake_case in Python and
serialize to the camelCase names the application layers exchange
(``model_dump(by_alias=True)``).
"""

import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_INGREDIENT = "Unknown ingredient"
DEFAULT_SERVINGS = 4
MIN_SERVINGS = 1
MAX_SERVINGS = 100


def new_ingredient_id() -> str:
    """Generate an opaque identifier for an ingredient row."""
    return f"ing_{uuid.uuid4().hex[:12]}"


class MealType(str, Enum):
    """Meal slot a recipe is suited for. ``NONE`` means no slot was found."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"
    NONE = ""


class ParsedIngredient(BaseModel):
    """One ingredient line turned into name, quantity and unit.

    ``store`` is always empty here; the grocery-store lookup that fills it in
    lives outside this package.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(
        min_length=1,
        description="Ingredient name as written, with trailing qualifiers removed",
        examples=["flour", "hot honey"],
    )
    qty: float | None = Field(
        None,
        gt=0,
        description="Quantity rounded to 3 decimal places, or None when absent",
        examples=[1.5, 0.333],
    )
    unit: str = Field(
        "",
        description="Canonical unit (e.g. 'cup', 'tbsp') or empty",
        examples=["cup", "tsp", ""],
    )
    store: str = ""


class ParseDiagnostics(BaseModel):
    """Result of a bulk parse: parsed rows plus every line that was rejected."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    ingredients: list[ParsedIngredient] = Field(default_factory=list)
    skipped_lines: list[str] = Field(default_factory=list, alias="skippedLines")


class Ingredient(ParsedIngredient):
    """A parsed ingredient with a row identity, as stored on a recipe."""

    id: str = Field(default_factory=new_ingredient_id)


class ScrapedRecipe(BaseModel):
    """Recipe fields recovered from a web page."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    name: str = ""
    description: str = ""
    ingredients: list[Ingredient] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    servings: int = Field(DEFAULT_SERVINGS, ge=MIN_SERVINGS, le=MAX_SERVINGS)
    meal_type: MealType = Field(MealType.NONE, alias="mealType")


class ImportedRecipe(ScrapedRecipe):
    """A scraped recipe together with the URL it was fetched from."""

    source_url: str = Field(alias="sourceUrl")
