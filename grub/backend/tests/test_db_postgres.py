import unittest

from grub.backend.db import InMemoryDbClient, PostgresDbClient, PreferencesRecord
from grub.shared.types import Meal, MealPlan


def _plan(label: str, meal_name: str = "Oats") -> MealPlan:
    plan = MealPlan(label=label)
    plan.days["Monday"] = [Meal(name=meal_name, calories=300, protein=10)]
    return plan


class PostgresDbClientTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the Postgres client logic.
    """

    def setUp(self):
        self.db = PostgresDbClient("sqlite+pysqlite:///:memory:")

    def tearDown(self):
        self.db.close()

    def test_preferences_upsert(self):
        self.assertIsNone(self.db.get_preferences("user-1"))
        self.db.save_preferences(
            PreferencesRecord(user_id="user-1", diet="vegan", allergies=["soy"])
        )
        saved = self.db.save_preferences(
            PreferencesRecord(user_id="user-1", diet="keto", calorie_goal=1900)
        )
        self.assertEqual(saved.diet, "keto")

        loaded = self.db.get_preferences("user-1")
        self.assertEqual(loaded.diet, "keto")
        self.assertEqual(loaded.allergies, [])
        self.assertEqual(loaded.calorie_goal, 1900)

    def test_meal_plans_ordered_by_timestamp(self):
        self.db.save_meal_plan("user-1", _plan("Plan A", "Old"), created_at=10.0)
        self.db.save_meal_plan("user-1", _plan("Plan B", "New"), created_at=20.0)
        self.db.save_meal_plan("user-2", _plan("Plan C"), created_at=30.0)

        latest = self.db.get_latest_meal_plan("user-1")
        self.assertEqual(latest.label, "Plan B")
        self.assertEqual(latest.plan["Monday"][0]["name"], "New")
        self.assertEqual(latest.plan["Sunday"], [])

        history = self.db.list_meal_plans("user-1")
        self.assertEqual([r.label for r in history], ["Plan B", "Plan A"])
        self.assertIsNone(self.db.get_latest_meal_plan("user-3"))

    def test_same_timestamp_prefers_last_saved(self):
        self.db.save_meal_plan("user-1", _plan("First"), created_at=5.0)
        self.db.save_meal_plan("user-1", _plan("Second"), created_at=5.0)
        self.assertEqual(self.db.get_latest_meal_plan("user-1").label, "Second")

    def test_grocery_items(self):
        first = self.db.add_grocery_item("user-1", "apples")
        self.db.add_grocery_item("user-1", "bread")
        self.db.add_grocery_item("user-2", "milk")

        items = self.db.list_grocery_items("user-1")
        self.assertEqual([i.item for i in items], ["apples", "bread"])

        self.assertFalse(self.db.delete_grocery_item("user-2", first.id))
        self.assertTrue(self.db.delete_grocery_item("user-1", first.id))
        self.assertFalse(self.db.delete_grocery_item("user-1", first.id))
        self.assertEqual(
            [i.item for i in self.db.list_grocery_items("user-1")], ["bread"]
        )


class InMemoryDbClientTests(unittest.TestCase):
    def test_reset_clears_everything(self):
        db = InMemoryDbClient()
        db.save_preferences(PreferencesRecord(user_id="user-1"))
        db.save_meal_plan("user-1", _plan("Plan A"))
        db.add_grocery_item("user-1", "apples")

        db.reset()

        self.assertIsNone(db.get_preferences("user-1"))
        self.assertIsNone(db.get_latest_meal_plan("user-1"))
        self.assertEqual(db.list_grocery_items("user-1"), [])


if __name__ == "__main__":
    unittest.main()
