"""
Pydantic schemas for the meal planner API.

Request models accept both snake_case and the browser frontend's camelCase
field names.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateRequest(RequestModel):
    model: Optional[str] = Field(default=None, max_length=128)
    prompt: str = Field(..., min_length=1, max_length=20000)


class GenerateResponse(BaseModel):
    content: str


class MealPlanRequest(RequestModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    plan_count: int = Field(default=1, ge=1, le=2)


class MealPlanSetResponse(BaseModel):
    plans: list[dict]


class SaveMealPlanRequest(RequestModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    plan: dict


class StatusResponse(BaseModel):
    status: Literal["ok"]


class SavedMealPlanResponse(BaseModel):
    id: int
    label: Optional[str] = None
    plan: dict
    created_at: float


class MealPlanHistoryResponse(BaseModel):
    plans: list[SavedMealPlanResponse]


class PreferencesRequest(RequestModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    diet: str = Field(default="none", max_length=64)
    allergies: list[str] = Field(default_factory=list)
    goals_text: str = Field(default="", max_length=1024)
    calorie_goal: int = Field(default=0, ge=0, le=20000)
    protein_goal: int = Field(default=0, ge=0, le=1000)


class PreferencesResponse(BaseModel):
    user_id: str
    diet: str
    allergies: list[str]
    goals_text: str
    calorie_goal: int
    protein_goal: int
    updated_at: float


class SuggestTargetsRequest(RequestModel):
    diet: Optional[str] = Field(default=None, max_length=64)
    goals_text: Optional[str] = Field(default=None, max_length=1024)


class SuggestTargetsResponse(BaseModel):
    calorie_goal: int
    protein_goal: int


class GroceryItemRequest(RequestModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    item: str = Field(..., max_length=256)


class GroceryItemResponse(BaseModel):
    id: int
    item: str
    created_at: float


class GroceryListResponse(BaseModel):
    items: list[GroceryItemResponse]


class GroceryImportRequest(RequestModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    plan: Optional[dict] = None


class GroceryImportResponse(BaseModel):
    added: list[str]
    items: list[GroceryItemResponse]


class RecipeSuggestionsRequest(RequestModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    count: int = Field(default=5, ge=1, le=10)


class RecipeModel(BaseModel):
    name: str
    ingredients: list[str]
    instructions: str


class RecipeSuggestionsResponse(BaseModel):
    recipes: list[RecipeModel]


class DaySummaryResponse(BaseModel):
    day: str
    calories: float
    protein: float
    carbs: float
    fats: float
    calorie_goal: Optional[int] = None
    percent_of_goal: float
