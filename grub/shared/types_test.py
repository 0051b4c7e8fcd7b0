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

import unittest

from grub.shared.types import Meal, MealPlan, NutritionTotals


class DayTotalsTest(unittest.TestCase):

    def test_sums_meals_with_missing_macros_as_zero(self):
        plan = MealPlan()
        plan.days["Monday"] = [
            Meal(name="Oats", calories=300, protein=10, carbs=50, fats=6.5),
            Meal(name="Chili", calories=600, protein=35),
        ]
        self.assertEqual(
            plan.day_totals("Monday"),
            NutritionTotals(calories=900, protein=45, carbs=50, fats=6.5),
        )
        self.assertEqual(plan.day_totals("Tuesday"), NutritionTotals())

    def test_percent_of_goal(self):
        totals = NutritionTotals(calories=900)
        self.assertEqual(totals.percent_of_goal(1800), 50.0)
        self.assertEqual(totals.percent_of_goal(600), 100)
        # No goal set divides by one, so any calories reach the cap.
        self.assertEqual(totals.percent_of_goal(0), 100)
        self.assertEqual(totals.percent_of_goal(None), 100)
        self.assertEqual(NutritionTotals().percent_of_goal(None), 0)


if __name__ == "__main__":
    unittest.main()
