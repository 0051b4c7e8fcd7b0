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

from grub.models import prompts


class PromptsTest(unittest.TestCase):

    def test_meal_plan_prompt_embeds_preferences(self):
        prompt = prompts.make_meal_plan_prompt(
            {"diet": "vegan", "allergies": ["soy"], "calorie_goal": 2000}
        )
        self.assertIn('"diet": "vegan"', prompt)
        self.assertIn('"allergies": ["soy"]', prompt)
        self.assertIn("one 7-day meal plan", prompt)
        self.assertIn('"label": "Plan A"', prompt)
        self.assertNotIn("Plan B", prompt)
        self.assertIn("Breakfast, Morning Snack, Lunch, Dinner", prompt)

    def test_meal_plan_prompt_for_two_plans(self):
        prompt = prompts.make_meal_plan_prompt({}, plan_count=2)
        self.assertIn("two alternative 7-day meal plans", prompt)
        self.assertIn('{ "label": "Plan B", ... }', prompt)

    def test_plan_count_is_clamped(self):
        self.assertIn("Plan B", prompts.make_meal_plan_prompt({}, plan_count=5))
        self.assertNotIn("Plan B", prompts.make_meal_plan_prompt({}, plan_count=0))

    def test_targets_prompt_defaults(self):
        prompt = prompts.make_targets_prompt("none", "  ")
        self.assertIn("balanced diet", prompt)
        self.assertIn('goals "general health"', prompt)

    def test_recipes_prompt(self):
        prompt = prompts.make_recipes_prompt({"Monday": []}, count=3)
        self.assertIn("Suggest 3 recipes", prompt)
        self.assertIn('{"Monday": []}', prompt)


if __name__ == "__main__":
    unittest.main()
