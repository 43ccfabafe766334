"""Budget status derivation."""

from enum import StrEnum

AT_BUDGET_TOLERANCE = 1.05


class BudgetStatus(StrEnum):
    """Plan cost relative to the weekly budget."""

    UNDER = "under"
    AT = "at"
    OVER = "over"


def calculate_budget_status(total_cost: float, weekly_budget: float) -> BudgetStatus:
    """Classify a total cost against a weekly budget."""
    if total_cost <= weekly_budget:
        return BudgetStatus.UNDER
    if total_cost <= weekly_budget * AT_BUDGET_TOLERANCE:
        return BudgetStatus.AT
    return BudgetStatus.OVER
