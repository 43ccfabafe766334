"""Cost optimization suggestion models."""

from dataclasses import dataclass, field
from enum import StrEnum

from meal_planner.domain.meals import MealPlan
from meal_planner.domain.profiles import SkillLevel


class SuggestionType(StrEnum):
    INGREDIENT_SWAP = "ingredient_swap"
    MEAL_REPLACEMENT = "meal_replacement"
    PORTION_ADJUSTMENT = "portion_adjustment"
    BULK_PURCHASE = "bulk_purchase"
    SEASONAL_SWAP = "seasonal_swap"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def weight(self) -> int:
        return _PRIORITY_WEIGHTS[self]


_PRIORITY_WEIGHTS = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class Replacement:
    """What a suggestion proposes instead of the current item."""

    name: str
    reason: str
    nutritional_impact: str = "none"


@dataclass(frozen=True)
class Implementation:
    """How to carry out a suggestion."""

    steps: tuple[str, ...]
    time_required: int
    skill_required: SkillLevel


@dataclass(frozen=True)
class Impact:
    """Expected effect on taste, nutrition and cooking time."""

    taste_change: str = "none"
    nutrition_change: str = "same"
    cooking_time_change: int = 0


@dataclass(frozen=True)
class OptimizationSuggestion:
    """A ranked, ephemeral cost-saving proposal for a plan."""

    id: str
    type: SuggestionType
    priority: Priority
    title: str
    description: str
    current_cost: float
    optimized_cost: float
    savings: float
    savings_percentage: float
    difficulty: Difficulty
    implementation: Implementation
    impact: Impact
    meal_id: str | None = None
    ingredient_name: str | None = None
    replacement: Replacement | None = None

    @property
    def score(self) -> float:
        return self.savings + self.priority.weight * 0.5


@dataclass
class OptimizationResult:
    """Outcome of applying a batch of suggestions."""

    original_cost: float
    optimized_cost: float
    total_savings: float
    savings_percentage: float
    suggestions: list[OptimizationSuggestion]
    optimized_meal_plan: MealPlan
    applied: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
