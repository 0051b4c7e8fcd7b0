"""
Database abstraction for Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

from sqlalchemy import (
    JSON,
    Column,
    Float,
    Integer,
    String,
    create_engine,
    select,
)
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from grub.shared.types import MealPlan


class DbClient(Protocol):
    """Interface for database access."""

    def save_preferences(self, prefs: "PreferencesRecord") -> "PreferencesRecord":
        ...

    def get_preferences(self, user_id: str) -> Optional["PreferencesRecord"]:
        ...

    def save_meal_plan(
        self, user_id: str, plan: MealPlan, created_at: float | None = None
    ) -> None:
        ...

    def get_latest_meal_plan(self, user_id: str) -> Optional["MealPlanRecord"]:
        ...

    def list_meal_plans(
        self, user_id: str, limit: int = 20
    ) -> list["MealPlanRecord"]:
        ...

    def add_grocery_item(self, user_id: str, item: str) -> "GroceryItemRecord":
        ...

    def list_grocery_items(self, user_id: str) -> list["GroceryItemRecord"]:
        ...

    def delete_grocery_item(self, user_id: str, item_id: int) -> bool:
        ...

    def close(self) -> None:
        ...


@dataclass
class PreferencesRecord:
    user_id: str
    diet: str = "none"
    allergies: list[str] = field(default_factory=list)
    goals_text: str = ""
    calorie_goal: int = 0
    protein_goal: int = 0
    updated_at: float = field(default_factory=lambda: time.time())

    def as_prompt_dict(self) -> dict:
        """Preference fields the model needs, without bookkeeping columns."""
        return {
            "diet": self.diet,
            "allergies": list(self.allergies),
            "goals_text": self.goals_text,
            "calorie_goal": self.calorie_goal,
            "protein_goal": self.protein_goal,
        }


@dataclass
class MealPlanRecord:
    id: int
    user_id: str
    label: Optional[str]
    plan: dict
    created_at: float


@dataclass
class GroceryItemRecord:
    id: int
    user_id: str
    item: str
    created_at: float = field(default_factory=lambda: time.time())


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.preferences: Dict[str, PreferencesRecord] = {}
        self.meal_plans: list[MealPlanRecord] = []
        self.grocery_items: list[GroceryItemRecord] = []
        self._ids = itertools.count(1)

    def save_preferences(self, prefs: PreferencesRecord) -> PreferencesRecord:
        prefs.updated_at = time.time()
        self.preferences[prefs.user_id] = prefs
        return prefs

    def get_preferences(self, user_id: str) -> Optional[PreferencesRecord]:
        return self.preferences.get(user_id)

    def save_meal_plan(
        self, user_id: str, plan: MealPlan, created_at: float | None = None
    ) -> None:
        self.meal_plans.append(
            MealPlanRecord(
                id=next(self._ids),
                user_id=user_id,
                label=plan.label,
                plan=plan.to_dict(),
                created_at=created_at if created_at is not None else time.time(),
            )
        )

    def list_meal_plans(self, user_id: str, limit: int = 20) -> list[MealPlanRecord]:
        records = [r for r in self.meal_plans if r.user_id == user_id]
        records.sort(key=lambda r: (r.created_at, r.id), reverse=True)
        return records[:limit]

    def get_latest_meal_plan(self, user_id: str) -> Optional[MealPlanRecord]:
        records = self.list_meal_plans(user_id, limit=1)
        return records[0] if records else None

    def add_grocery_item(self, user_id: str, item: str) -> GroceryItemRecord:
        record = GroceryItemRecord(id=next(self._ids), user_id=user_id, item=item)
        self.grocery_items.append(record)
        return record

    def list_grocery_items(self, user_id: str) -> list[GroceryItemRecord]:
        return [r for r in self.grocery_items if r.user_id == user_id]

    def delete_grocery_item(self, user_id: str, item_id: int) -> bool:
        for i, record in enumerate(self.grocery_items):
            if record.id == item_id and record.user_id == user_id:
                del self.grocery_items[i]
                return True
        return False

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.preferences.clear()
        self.meal_plans.clear()
        self.grocery_items.clear()

    def close(self) -> None:
        pass


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_preferences(self, row: "PreferencesRow") -> PreferencesRecord:
        return PreferencesRecord(
            user_id=row.user_id,
            diet=row.diet,
            allergies=list(row.allergies or []),
            goals_text=row.goals_text,
            calorie_goal=row.calorie_goal,
            protein_goal=row.protein_goal,
            updated_at=row.updated_at,
        )

    def _to_meal_plan(self, row: "MealPlanRow") -> MealPlanRecord:
        return MealPlanRecord(
            id=row.id,
            user_id=row.user_id,
            label=row.label,
            plan=row.plan,
            created_at=row.created_at,
        )

    def _to_grocery_item(self, row: "GroceryItemRow") -> GroceryItemRecord:
        return GroceryItemRecord(
            id=row.id, user_id=row.user_id, item=row.item, created_at=row.created_at
        )

    def save_preferences(self, prefs: PreferencesRecord) -> PreferencesRecord:
        now = time.time()
        with self.Session() as session:
            row = session.get(PreferencesRow, prefs.user_id)
            if not row:
                row = PreferencesRow(user_id=prefs.user_id)
                session.add(row)
            row.diet = prefs.diet
            row.allergies = list(prefs.allergies)
            row.goals_text = prefs.goals_text
            row.calorie_goal = prefs.calorie_goal
            row.protein_goal = prefs.protein_goal
            row.updated_at = now
            session.commit()
            session.refresh(row)
            return self._to_preferences(row)

    def get_preferences(self, user_id: str) -> Optional[PreferencesRecord]:
        with self.Session() as session:
            row = session.get(PreferencesRow, user_id)
            return self._to_preferences(row) if row else None

    def save_meal_plan(
        self, user_id: str, plan: MealPlan, created_at: float | None = None
    ) -> None:
        with self.Session() as session:
            session.add(
                MealPlanRow(
                    user_id=user_id,
                    label=plan.label,
                    plan=plan.to_dict(),
                    created_at=created_at if created_at is not None else time.time(),
                )
            )
            session.commit()

    def list_meal_plans(self, user_id: str, limit: int = 20) -> list[MealPlanRecord]:
        with self.Session() as session:
            stmt = (
                select(MealPlanRow)
                .where(MealPlanRow.user_id == user_id)
                .order_by(MealPlanRow.created_at.desc(), MealPlanRow.id.desc())
                .limit(limit)
            )
            return [self._to_meal_plan(row) for row in session.execute(stmt).scalars()]

    def get_latest_meal_plan(self, user_id: str) -> Optional[MealPlanRecord]:
        records = self.list_meal_plans(user_id, limit=1)
        return records[0] if records else None

    def add_grocery_item(self, user_id: str, item: str) -> GroceryItemRecord:
        with self.Session() as session:
            row = GroceryItemRow(user_id=user_id, item=item, created_at=time.time())
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_grocery_item(row)

    def list_grocery_items(self, user_id: str) -> list[GroceryItemRecord]:
        with self.Session() as session:
            stmt = (
                select(GroceryItemRow)
                .where(GroceryItemRow.user_id == user_id)
                .order_by(GroceryItemRow.created_at.asc(), GroceryItemRow.id.asc())
            )
            return [
                self._to_grocery_item(row) for row in session.execute(stmt).scalars()
            ]

    def delete_grocery_item(self, user_id: str, item_id: int) -> bool:
        with self.Session() as session:
            row = session.get(GroceryItemRow, item_id)
            if not row or row.user_id != user_id:
                return False
            session.delete(row)
            session.commit()
            return True

    def close(self) -> None:
        self.engine.dispose()


Base = declarative_base()


class PreferencesRow(Base):
    __tablename__ = "preferences"

    user_id = Column(String, primary_key=True)
    diet = Column(String, nullable=False, default="none")
    allergies = Column(JSON, nullable=False, default=list)
    goals_text = Column(String, nullable=False, default="")
    calorie_goal = Column(Integer, nullable=False, default=0)
    protein_goal = Column(Integer, nullable=False, default=0)
    updated_at = Column(Float, nullable=False)


class MealPlanRow(Base):
    __tablename__ = "meal_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    label = Column(String, nullable=True)
    plan = Column(JSON, nullable=False)
    created_at = Column(Float, nullable=False, index=True)


class GroceryItemRow(Base):
    __tablename__ = "grocery_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    item = Column(String, nullable=False)
    created_at = Column(Float, nullable=False)
