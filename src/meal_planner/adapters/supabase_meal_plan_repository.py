"""Supabase repository for meal plans."""

from dataclasses import dataclass

from supabase import Client

from meal_planner.domain.meals import MealPlan
from meal_planner.services.meal_plans import MealPlanRepository

_TABLE = "meal_plans"
_COLUMNS = (
    "id, user_id, week_start_date, meals, total_estimated_cost, budget_status, "
    "created_at, updated_at"
)
_DOCUMENT_COLUMNS = {
    "id": "id",
    "userId": "user_id",
    "weekStartDate": "week_start_date",
    "meals": "meals",
    "totalEstimatedCost": "total_estimated_cost",
    "budgetStatus": "budget_status",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


@dataclass
class SupabaseMealPlanRepository(MealPlanRepository):
    """Supabase implementation for meal plans.

    Meals are stored as a JSON array; timestamps travel as ISO strings and
    are parsed back into datetimes when rows are read.
    """

    client: Client

    def save(self, plan: MealPlan) -> str:
        """Insert or replace a plan row."""
        response = (
            self.client.table(_TABLE).upsert(_to_row(plan.to_document())).execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save meal plan")
        return str(response.data[0]["id"])

    def get(self, plan_id: str) -> MealPlan | None:
        """Return a plan by id, if present."""
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("id", plan_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _from_row(response.data[0])

    def list_by_user(self, user_id: str) -> list[MealPlan]:
        """Return a user's plans, newest week first."""
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("user_id", user_id)
            .order("week_start_date", desc=True)
            .execute()
        )
        return [_from_row(row) for row in response.data or []]

    def delete(self, plan_id: str) -> None:
        """Delete a plan row."""
        self.client.table(_TABLE).delete().eq("id", plan_id).execute()

    def update(self, plan_id: str, fields: dict[str, object]) -> None:
        """Update selected columns of a plan row."""
        response = (
            self.client.table(_TABLE)
            .update(_to_row(fields))
            .eq("id", plan_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update meal plan")

    def find_by_meal_id(self, meal_id: str) -> MealPlan | None:
        """Return the plan whose meals array contains the meal id."""
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .contains("meals", [{"id": meal_id}])
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _from_row(response.data[0])


def _to_row(document: dict[str, object]) -> dict[str, object]:
    return {
        _DOCUMENT_COLUMNS[key]: value
        for key, value in document.items()
        if key in _DOCUMENT_COLUMNS
    }


def _from_row(row: dict[str, object]) -> MealPlan:
    return MealPlan.model_validate(
        {
            "id": row["id"],
            "user_id": row["user_id"],
            "week_start_date": row["week_start_date"],
            "meals": row.get("meals") or [],
            "total_estimated_cost": row["total_estimated_cost"],
            "budget_status": row["budget_status"],
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }
    )
