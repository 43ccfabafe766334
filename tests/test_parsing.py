"""Tests for model response parsing."""

import json

import pytest

from meal_planner.domain.budget import BudgetStatus
from meal_planner.domain.meals import DAYS_PER_WEEK, MEAL_TYPES, MealType
from meal_planner.errors import InvalidResponseFormatError
from meal_planner.services.parsing import (
    extract_json,
    parse_meal_plan_response,
    parse_meal_swap_response,
    parse_string_list,
    parse_substitutes,
)
from tests.conftest import FIXED_NOW, make_meal, meal_json

STAMP = int(FIXED_NOW.timestamp() * 1000)


def test_extract_json_skips_prose_and_braces_in_strings() -> None:
    content = 'Sure! {"a": "x}y", "b": [1, {"c": 2}]} Enjoy your meals {'

    assert extract_json(content) == {"a": "x}y", "b": [1, {"c": 2}]}


def test_extract_json_reads_arrays() -> None:
    assert extract_json('Steps: ["one", "two"]', opening="[") == ["one", "two"]


def test_extract_json_without_payload_raises() -> None:
    with pytest.raises(InvalidResponseFormatError):
        extract_json("I cannot help with that.")


def test_extract_json_with_malformed_payload_raises() -> None:
    with pytest.raises(InvalidResponseFormatError):
        extract_json('{"meals": [1, 2,]}')


def test_extract_json_rejects_unknown_opening() -> None:
    with pytest.raises(ValueError, match="Unsupported"):
        extract_json("(1, 2)", opening="(")


def _week(cost: float = 1.0) -> list[dict[str, object]]:
    return [
        meal_json(day, str(meal_type), f"Meal {day}-{meal_type}", cost)
        for day in range(DAYS_PER_WEEK)
        for meal_type in MEAL_TYPES
    ]


def test_parse_meal_plan_response_assigns_ids_and_totals() -> None:
    meals = _week()
    meals[0] = meal_json(0, "breakfast", "Veggie Omelette", 6.0)
    meals[2] = meal_json(0, "dinner", "Chicken  Stir Fry", 9.5)

    draft = parse_meal_plan_response(json.dumps({"meals": meals}), 40.0, FIXED_NOW)

    assert draft.meals[0].id == f"meal_{STAMP}_0"
    assert draft.meals[20].id == f"meal_{STAMP}_20"
    assert draft.meals[2].recipe_id == "recipe_chicken_stir_fry"
    assert draft.meals[2].meal_type == MealType.DINNER
    assert draft.total_estimated_cost == 34.5
    assert draft.budget_status == BudgetStatus.UNDER


def test_parse_meal_plan_response_rejects_missing_fields() -> None:
    meal = meal_json(0, "lunch", "Soup", 5.0)
    del meal["prepTime"]

    with pytest.raises(InvalidResponseFormatError, match="Soup"):
        parse_meal_plan_response(json.dumps({"meals": [meal]}), 50.0, FIXED_NOW)


def test_parse_meal_plan_response_rejects_bad_meal_type() -> None:
    meal = meal_json(0, "brunch", "Waffles", 5.0)

    with pytest.raises(InvalidResponseFormatError):
        parse_meal_plan_response(json.dumps({"meals": [meal]}), 50.0, FIXED_NOW)


def test_parse_meal_plan_response_requires_meals_array() -> None:
    with pytest.raises(InvalidResponseFormatError, match="meals"):
        parse_meal_plan_response('{"plan": []}', 50.0, FIXED_NOW)


def test_parse_meal_plan_response_rejects_empty_plan() -> None:
    with pytest.raises(InvalidResponseFormatError, match="0 meals"):
        parse_meal_plan_response('{"meals": []}', 100.0, FIXED_NOW)


def test_parse_meal_plan_response_rejects_partial_week() -> None:
    content = json.dumps({"meals": _week()[:20]})

    with pytest.raises(InvalidResponseFormatError, match="20 meals"):
        parse_meal_plan_response(content, 100.0, FIXED_NOW)


def test_parse_meal_plan_response_rejects_repeated_slot() -> None:
    meals = _week()
    meals[1] = meal_json(0, "dinner", "Second Dinner", 1.0)

    with pytest.raises(InvalidResponseFormatError, match="dinner on day 0"):
        parse_meal_plan_response(json.dumps({"meals": meals}), 100.0, FIXED_NOW)


def test_parse_meal_swap_response_keeps_slot_of_original() -> None:
    original = make_meal("meal_1", day=3, meal_type=MealType.LUNCH, servings=6)
    content = json.dumps(meal_json(0, "dinner", "Lentil Soup", 7.0, servings=2))

    replacement = parse_meal_swap_response(content, original, FIXED_NOW)

    assert replacement.id == f"meal_{STAMP}_swap"
    assert replacement.day_of_week == 3
    assert replacement.meal_type == MealType.LUNCH
    assert replacement.servings == 6
    assert replacement.recipe_name == "Lentil Soup"


def test_parse_string_list_drops_blank_entries() -> None:
    assert parse_string_list('["Chop onions", " ", "Simmer"]') == [
        "Chop onions",
        "Simmer",
    ]


def test_parse_substitutes() -> None:
    content = json.dumps(
        [
            {
                "name": "Chickpeas",
                "estimatedPrice": 1.25,
                "description": "Cheap protein",
                "tips": ["Rinse well"],
            },
            {"name": "Lentils", "estimated_price": "0.9"},
        ]
    )

    substitutes = parse_substitutes(content)

    assert substitutes[0].name == "Chickpeas"
    assert substitutes[0].cooking_tip == "Rinse well"
    assert substitutes[1].estimated_price == 0.9
    assert substitutes[1].reason == "Lower cost alternative"


def test_parse_substitutes_requires_price() -> None:
    with pytest.raises(InvalidResponseFormatError):
        parse_substitutes('[{"name": "Tofu"}]')
