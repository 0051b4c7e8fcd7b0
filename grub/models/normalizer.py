# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

"""Turns untrusted model output into validated plans, targets and recipes."""

import logging
import math
import re
from typing import Any, List, Optional

from grub.shared.json_utils import recover_json_object
from grub.shared.types import (
    MAX_PLANS_PER_SET,
    WEEKDAYS,
    Meal,
    MealPlan,
    NutritionTargets,
    PlanSet,
    Recipe,
)

logger = logging.getLogger(__name__)

_LEADING_NUMBER = re.compile(
    r"^\s*((?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?|\.\d+)([eE][+-]?\d+)?"
)
_DIGIT = re.compile(r"\d")

# Marks an optional numeric field as present but unusable.
_INVALID = object()


class SchemaError(Exception):
    """The model output parsed as JSON but does not have a usable shape."""

    def __init__(self, message: str, raw: str | None = None):
        super().__init__(message)
        self.raw = raw


def coerce_number(value: Any) -> Optional[float]:
    """
    Coerces a model-supplied value to a non-negative number.

    Ints and floats pass through unchanged. Numeric strings ("300",
    "12.5 g", "1,200 kcal", "1e3", ".5") use their leading number, unless
    more digits follow it ("1 200", "2-3"), in which case the value is
    ambiguous. Returns None for anything else, including booleans,
    negatives and non-finite values.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return value if value >= 0 else None
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match or _DIGIT.search(value, match.end()):
            return None
        mantissa, exponent = match.groups()
        mantissa = mantissa.replace(",", "")
        if "." not in mantissa and not exponent:
            return int(mantissa)
        number = float(mantissa + (exponent or ""))
        return number if math.isfinite(number) else None
    return None


def _clean_string(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _clean_string_list(values: Any) -> Optional[List[str]]:
    if not isinstance(values, list):
        return None
    cleaned = [_clean_string(v) for v in values]
    return [v for v in cleaned if v]


def _optional_number(entry: dict, key: str):
    value = entry.get(key)
    if value is None:
        return None
    number = coerce_number(value)
    return _INVALID if number is None else number


def coerce_meal(entry: Any) -> Optional[Meal]:
    """Returns a Meal, or None when the entry has to be dropped."""
    if not isinstance(entry, dict):
        return None
    name = _clean_string(entry.get("name"))
    if not name:
        return None

    calories = coerce_number(entry.get("calories"))
    protein = coerce_number(entry.get("protein"))
    if calories is None or protein is None:
        return None

    carbs = _optional_number(entry, "carbs")
    fats = _optional_number(entry, "fats")
    if carbs is _INVALID or fats is _INVALID:
        return None

    return Meal(
        name=name,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fats=fats,
        ingredients=_clean_string_list(entry.get("ingredients")),
    )


def coerce_plan(candidate: dict) -> MealPlan:
    """
    Builds a MealPlan from a weekday-keyed dict.

    Days that are absent or not arrays become empty, and meals that fail
    validation are dropped. Keys outside the canonical weekdays are ignored.
    """
    plan = MealPlan()
    label = candidate.get("label")
    if label is not None:
        plan.label = label if isinstance(label, str) else str(label)

    for day in WEEKDAYS:
        entries = candidate.get(day)
        if entries is None:
            continue
        if not isinstance(entries, list):
            logger.debug("Coercing non-array %s to an empty day", day)
            continue
        meals = [coerce_meal(entry) for entry in entries]
        kept = [meal for meal in meals if meal is not None]
        if len(kept) != len(entries):
            logger.debug("Dropped %d invalid meals on %s", len(entries) - len(kept), day)
        plan.days[day] = kept
    return plan


def _plan_candidates(document: dict, raw: str | None) -> List[dict]:
    if "plans" in document:
        plans = document["plans"]
        if not isinstance(plans, list):
            raise SchemaError("'plans' must be an array", raw)
        candidates = [p for p in plans if isinstance(p, dict)]
    elif any(day in document for day in WEEKDAYS):
        candidates = [document]
    else:
        raise SchemaError("Expected a 'plans' array or weekday keys", raw)

    if len(candidates) > MAX_PLANS_PER_SET:
        logger.warning(
            "Model returned %d plans, keeping the first %d",
            len(candidates),
            MAX_PLANS_PER_SET,
        )
        candidates = candidates[:MAX_PLANS_PER_SET]
    return candidates


def normalize_document(document: dict, raw: str | None = None) -> PlanSet:
    """Validates an already parsed document into a PlanSet."""
    plans = [coerce_plan(c) for c in _plan_candidates(document, raw)]
    if not any(plan.non_empty_days() for plan in plans):
        raise SchemaError("No plan contains any meals", raw)
    return PlanSet(plans=plans)


def normalize(raw: str) -> PlanSet:
    """
    Recovers, repairs and validates a meal plan response.

    Args:
        raw (str): The completion text.

    Returns:
        PlanSet: One or two validated plans.

    Raises:
        MalformedResponseError: If no JSON object can be recovered.
        SchemaError: If the JSON has the wrong shape or no meals survive.
    """
    return normalize_document(recover_json_object(raw), raw)


def parse_ingredient_list(raw: str) -> List[str]:
    """Parses a consolidated grocery response: {"ingredients": [...]}."""
    document = recover_json_object(raw)
    values = document.get("ingredients")
    if not isinstance(values, list):
        raise SchemaError("Expected an 'ingredients' array", raw)

    seen = set()
    ingredients = []
    for item in _clean_string_list(values):
        key = item.casefold()
        if key in seen:
            continue
        seen.add(key)
        ingredients.append(item)
    if not ingredients:
        raise SchemaError("No ingredients in model output", raw)
    return ingredients


def _target_value(document: dict, *keys: str) -> Optional[int]:
    for key in keys:
        if key in document:
            number = coerce_number(document[key])
            return None if number is None else int(round(number))
    return None


def parse_nutrition_targets(raw: str) -> NutritionTargets:
    """Parses {"calorieGoal": n, "proteinGoal": n}; snake_case also accepted."""
    document = recover_json_object(raw)
    calorie_goal = _target_value(document, "calorieGoal", "calorie_goal")
    protein_goal = _target_value(document, "proteinGoal", "protein_goal")
    if calorie_goal is None or protein_goal is None:
        raise SchemaError("Missing or invalid calorie/protein targets", raw)
    return NutritionTargets(calorie_goal=calorie_goal, protein_goal=protein_goal)


def parse_recipes(raw: str) -> List[Recipe]:
    document = recover_json_object(raw)
    entries = document.get("recipes")
    if not isinstance(entries, list):
        raise SchemaError("Expected a 'recipes' array", raw)

    recipes = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        name = _clean_string(entry.get("name"))
        if not name:
            continue
        instructions = entry.get("instructions")
        if isinstance(instructions, list):
            instructions = "\n".join(_clean_string_list(instructions))
        recipes.append(
            Recipe(
                name=name,
                ingredients=_clean_string_list(entry.get("ingredients")) or [],
                instructions=_clean_string(instructions) or "",
            )
        )
    if not recipes:
        raise SchemaError("No usable recipes in model output", raw)
    return recipes
