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

import json

PLAN_LABELS = ("Plan A", "Plan B")
MEALS_PER_DAY = ("Breakfast", "Morning Snack", "Lunch", "Dinner")

JSON_ONLY_INSTRUCTION = (
    "Reply ONLY with valid JSON: no prose, no markdown, no comments, "
    "no trailing commas."
)

MEAL_PLAN_PROMPT = """You are a professional meal-prep chef. Given these user preferences:
{preferences_json}

Produce {plan_count_text} 7-day meal plan{plural} ({meals_per_day} meals per day: {meal_names}).
Each meal must include: name, calories (number), protein (number), carbs (number), fats (number), ingredients (array of strings).
Respect every allergy and the diet. Aim for the daily calorie and protein goals.
{json_only}
Use exactly this shape:
{{
  "plans": [
    {{
      "label": "{first_label}",
      "Monday": [ {{ "name": "...", "calories": 0, "protein": 0, "carbs": 0, "fats": 0, "ingredients": ["..."] }} ],
      "Tuesday": [ ... ],
      ...
      "Sunday": [ ... ]
    }}{more_plans}
  ]
}}"""

GROCERY_PROMPT = """Consolidate a weekly grocery list of unique ingredients from this meal plan:
{plan_json}

Merge duplicates and near-duplicates into one entry each.
{json_only}
Use exactly this shape:
{{ "ingredients": ["item1", "item2"] }}"""

TARGETS_PROMPT = """Suggest daily calorie and protein targets for a {diet} diet with goals "{goals}".
{json_only}
Use exactly this shape:
{{ "calorieGoal": 2000, "proteinGoal": 120 }}"""

RECIPES_PROMPT = """Given this weekly meal plan:
{plan_json}

Suggest {count} recipes that fit it.
{json_only}
Use exactly this shape:
{{ "recipes": [ {{ "name": "...", "ingredients": ["..."], "instructions": "..." }} ] }}"""


def make_meal_plan_prompt(preferences: dict, plan_count: int = 1) -> str:
    """Builds the weekly plan request for one or two alternative plans."""
    plan_count = max(1, min(plan_count, len(PLAN_LABELS)))
    more_plans = ""
    if plan_count > 1:
        more_plans = f',\n    {{ "label": "{PLAN_LABELS[1]}", ... }}'
    return MEAL_PLAN_PROMPT.format(
        preferences_json=json.dumps(preferences, default=str),
        plan_count_text="two alternative" if plan_count > 1 else "one",
        plural="s" if plan_count > 1 else "",
        meals_per_day=len(MEALS_PER_DAY),
        meal_names=", ".join(MEALS_PER_DAY),
        json_only=JSON_ONLY_INSTRUCTION,
        first_label=PLAN_LABELS[0],
        more_plans=more_plans,
    )


def make_grocery_prompt(plan: dict) -> str:
    return GROCERY_PROMPT.format(
        plan_json=json.dumps(plan), json_only=JSON_ONLY_INSTRUCTION
    )


def make_targets_prompt(diet: str | None, goals_text: str | None) -> str:
    diet = (diet or "").strip()
    if not diet or diet == "none":
        diet = "balanced"
    return TARGETS_PROMPT.format(
        diet=diet,
        goals=(goals_text or "").strip() or "general health",
        json_only=JSON_ONLY_INSTRUCTION,
    )


def make_recipes_prompt(plan: dict, count: int = 5) -> str:
    return RECIPES_PROMPT.format(
        plan_json=json.dumps(plan), count=count, json_only=JSON_ONLY_INSTRUCTION
    )
