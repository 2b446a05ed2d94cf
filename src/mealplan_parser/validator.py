"""Candidate scoring for recipes found in embedded structured data.

A page can embed several recipe nodes (a main recipe, related-recipe cards,
sub-recipes in a ``@graph``). Each candidate is scored by how much usable
structure it carries and the best one is kept.

Example:
    >>> scorer = RecipeScorer()
    >>> best = scorer.pick_best([thin_card, full_recipe])
    >>> best is full_recipe
    True
"""

from dataclasses import dataclass

from .models import ScrapedRecipe


@dataclass
class RecipeCandidateScore:
    """Structure metrics for one recipe candidate.

    Attributes:
        recipe_name: Name of the candidate being scored
        has_name: Whether the candidate has a non-empty name
        has_description: Whether the candidate has a non-empty description
        ingredient_count: Number of ingredient rows
        step_count: Number of instruction steps
        score: Weighted total used to rank candidates
    """

    recipe_name: str
    has_name: bool
    has_description: bool
    ingredient_count: int
    step_count: int
    score: int

    @property
    def is_empty(self) -> bool:
        """True when the candidate carries no usable field at all."""
        return self.score == 0

    def __str__(self) -> str:
        return (
            f"Score: {self.score} - {self.ingredient_count} ingredients, "
            f"{self.step_count} steps"
        )


class RecipeScorer:
    """Ranks recipe candidates; more structure scores higher.

    The default weights are +3 for a name, +1 for a description and +2 for
    every ingredient and every step. They only decide between candidates and
    can be tuned per instance.
    """

    def __init__(
        self,
        name_weight: int = 3,
        description_weight: int = 1,
        ingredient_weight: int = 2,
        step_weight: int = 2,
    ) -> None:
        self.name_weight = name_weight
        self.description_weight = description_weight
        self.ingredient_weight = ingredient_weight
        self.step_weight = step_weight

    def score_recipe(self, recipe: ScrapedRecipe) -> RecipeCandidateScore:
        """Score one candidate.

        Args:
            recipe: Candidate built from a structured-data node

        Returns:
            RecipeCandidateScore with the weighted total
        """
        has_name = bool(recipe.name.strip())
        has_description = bool(recipe.description.strip())
        ingredient_count = len(recipe.ingredients)
        step_count = len(recipe.steps)

        score = (
            (self.name_weight if has_name else 0)
            + (self.description_weight if has_description else 0)
            + self.ingredient_weight * ingredient_count
            + self.step_weight * step_count
        )

        return RecipeCandidateScore(
            recipe_name=recipe.name,
            has_name=has_name,
            has_description=has_description,
            ingredient_count=ingredient_count,
            step_count=step_count,
            score=score,
        )

    def pick_best(self, candidates: list[ScrapedRecipe]) -> ScrapedRecipe | None:
        """Return the highest scoring candidate; the earliest wins ties.

        Returns:
            The best candidate, or None for an empty list
        """
        best: ScrapedRecipe | None = None
        best_score = -1

        for candidate in candidates:
            score = self.score_recipe(candidate).score
            if score > best_score:
                best, best_score = candidate, score

        return best


def score_recipe(recipe: ScrapedRecipe) -> int:
    """Score a candidate with the default weights."""
    return RecipeScorer().score_recipe(recipe).score


def pick_best_candidate(candidates: list[ScrapedRecipe]) -> ScrapedRecipe | None:
    """Pick the best candidate with the default weights."""
    return RecipeScorer().pick_best(candidates)
