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

from dataclasses import dataclass, field
from typing import Dict, List, Optional

WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

MAX_PLANS_PER_SET = 2


@dataclass
class Meal:
    """A single meal in a day of a plan."""

    name: str
    calories: float
    protein: float
    carbs: Optional[float] = None
    fats: Optional[float] = None
    ingredients: Optional[List[str]] = None

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "calories": self.calories,
            "protein": self.protein,
        }
        # Optional fields stay absent rather than null on the wire.
        if self.carbs is not None:
            data["carbs"] = self.carbs
        if self.fats is not None:
            data["fats"] = self.fats
        if self.ingredients is not None:
            data["ingredients"] = list(self.ingredients)
        return data


@dataclass
class NutritionTotals:
    """Summed nutrition for one day. Missing carbs/fats count as zero."""

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fats: float = 0

    def percent_of_goal(self, calorie_goal: Optional[float]) -> float:
        """Calories as a percentage of the goal, capped at 100."""
        goal = calorie_goal or 1
        return min(self.calories / goal * 100, 100)


@dataclass
class MealPlan:
    """A week of meals keyed by weekday, every weekday always present."""

    days: Dict[str, List[Meal]] = field(
        default_factory=lambda: {day: [] for day in WEEKDAYS}
    )
    label: Optional[str] = None

    def meals_for(self, day: str) -> List[Meal]:
        return self.days.get(day, [])

    def non_empty_days(self) -> List[str]:
        return [day for day in WEEKDAYS if self.days.get(day)]

    def day_totals(self, day: str) -> NutritionTotals:
        totals = NutritionTotals()
        for meal in self.meals_for(day):
            totals.calories += meal.calories
            totals.protein += meal.protein
            totals.carbs += meal.carbs or 0
            totals.fats += meal.fats or 0
        return totals

    def to_dict(self) -> dict:
        data: dict = {}
        if self.label is not None:
            data["label"] = self.label
        for day in WEEKDAYS:
            data[day] = [meal.to_dict() for meal in self.days.get(day, [])]
        return data


@dataclass
class PlanSet:
    """The one or two plans returned for a single generation request."""

    plans: List[MealPlan]

    def __len__(self) -> int:
        return len(self.plans)

    def to_dict(self) -> dict:
        return {"plans": [plan.to_dict() for plan in self.plans]}


@dataclass
class NutritionTargets:
    calorie_goal: int
    protein_goal: int


@dataclass
class Recipe:
    name: str
    ingredients: List[str]
    instructions: str

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "ingredients": list(self.ingredients),
            "instructions": self.instructions,
        }
