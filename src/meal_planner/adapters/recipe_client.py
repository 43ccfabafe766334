"""Spoonacular-style recipe catalogue client."""

import re
from dataclasses import dataclass
from typing import Protocol

import httpx

from meal_planner.domain.meals import Ingredient
from meal_planner.domain.recipes import RecipeDetail

_TAGS = re.compile(r"<[^>]+>")


class RecipeClient(Protocol):
    """Interface for recipe catalogue lookups."""

    async def get_recipe_instructions(self, recipe_id: str) -> list[str]:
        """Return ordered cooking steps for a recipe."""

    async def get_recipe_by_id(self, recipe_id: str) -> RecipeDetail:
        """Return recipe details."""


@dataclass
class HttpxRecipeClient(RecipeClient):
    """HTTPX-backed recipe catalogue client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "HttpxRecipeClient":
        """Create a recipe client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def get_recipe_instructions(self, recipe_id: str) -> list[str]:
        """Fetch analyzed instructions and flatten their steps."""
        url = f"{self.base_url}/recipes/{recipe_id}/analyzedInstructions"
        response = await self.http_client.get(
            url,
            params={"apiKey": self.api_key},
            timeout=15,
        )
        response.raise_for_status()
        steps: list[str] = []
        for section in response.json():
            for step in section.get("steps", []):
                text = str(step.get("step", "")).strip()
                if text:
                    steps.append(text)
        return steps

    async def get_recipe_by_id(self, recipe_id: str) -> RecipeDetail:
        """Fetch recipe information."""
        url = f"{self.base_url}/recipes/{recipe_id}/information"
        response = await self.http_client.get(
            url,
            params={"apiKey": self.api_key},
            timeout=15,
        )
        response.raise_for_status()
        data = response.json()
        return RecipeDetail(
            id=str(data.get("id", recipe_id)),
            name=str(data.get("title", "")),
            description=_TAGS.sub("", str(data.get("summary") or "")).strip(),
            prep_time=int(data.get("preparationMinutes") or 0),
            cook_time=int(data.get("cookingMinutes") or 0),
            servings=int(data.get("servings") or 1),
            ingredients=tuple(
                _to_ingredient(item) for item in data.get("extendedIngredients", [])
            ),
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _to_ingredient(item: dict[str, object]) -> Ingredient:
    # The catalogue has no prices; cost estimation happens elsewhere.
    return Ingredient(
        name=str(item.get("name", "")),
        amount=float(item.get("amount") or 1),
        unit=str(item.get("unit") or ""),
        category=str(item.get("aisle") or "other").lower(),
        estimated_price=0.0,
    )
