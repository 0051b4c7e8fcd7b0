"""
HTTP routes for the meal planner API.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from grub.backend.completion import CompletionClient, CompletionRequest
from grub.backend.config import get_settings
from grub.backend.db import DbClient, GroceryItemRecord, PreferencesRecord
from grub.backend.dependencies import get_completion_client, get_db_client
from grub.backend.schemas import (
    DaySummaryResponse,
    GenerateRequest,
    GenerateResponse,
    GroceryImportRequest,
    GroceryImportResponse,
    GroceryItemRequest,
    GroceryItemResponse,
    GroceryListResponse,
    MealPlanHistoryResponse,
    MealPlanRequest,
    MealPlanSetResponse,
    PreferencesRequest,
    PreferencesResponse,
    RecipeModel,
    RecipeSuggestionsRequest,
    RecipeSuggestionsResponse,
    SavedMealPlanResponse,
    SaveMealPlanRequest,
    StatusResponse,
    SuggestTargetsRequest,
    SuggestTargetsResponse,
)
from grub.models import normalizer, prompts
from grub.models.gemini import UpstreamError
from grub.models.normalizer import SchemaError
from grub.shared.json_utils import MalformedResponseError
from grub.shared.types import WEEKDAYS

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")


def _complete(
    completion: CompletionClient, prompt: str, model: str | None = None
) -> str:
    request = CompletionRequest(
        model_name=model or get_settings().default_model, prompt_text=prompt
    )
    try:
        return completion.complete(request).text
    except UpstreamError as e:
        logger.error("Completion request failed: %s", e)
        raise HTTPException(status_code=502, detail="AI generation failed") from e


def _complete_and_parse(
    completion: CompletionClient,
    prompt: str,
    parse: Callable[[str], T],
    what: str,
) -> T:
    """
    Runs one completion and parses it, mapping failures to HTTP errors.

    Malformed output is a 502 like an upstream failure; a parsed but
    unusable shape is a 422 so the client can offer to regenerate.
    """
    raw = _complete(completion, prompt)
    try:
        return parse(raw)
    except MalformedResponseError as e:
        logger.warning("Invalid JSON from AI (%s): %s\nRaw output:\n%s", what, e, raw)
        raise HTTPException(status_code=502, detail="Invalid JSON from AI") from e
    except SchemaError as e:
        logger.warning("Unusable AI response (%s): %s\nRaw output:\n%s", what, e, raw)
        raise HTTPException(
            status_code=422,
            detail=f"AI response did not contain a usable {what}",
        ) from e


def _preferences_response(prefs: PreferencesRecord) -> PreferencesResponse:
    return PreferencesResponse(
        user_id=prefs.user_id,
        diet=prefs.diet,
        allergies=prefs.allergies,
        goals_text=prefs.goals_text,
        calorie_goal=prefs.calorie_goal,
        protein_goal=prefs.protein_goal,
        updated_at=prefs.updated_at,
    )


def _grocery_item_response(record: GroceryItemRecord) -> GroceryItemResponse:
    return GroceryItemResponse(
        id=record.id, item=record.item, created_at=record.created_at
    )


def _latest_plan_or_404(db: DbClient, user_id: str) -> dict:
    record = db.get_latest_meal_plan(user_id)
    if not record:
        raise HTTPException(status_code=404, detail="No saved meal plan")
    return record.plan


@router.post("/generate", response_model=GenerateResponse)
def generate(
    payload: GenerateRequest,
    completion: CompletionClient = Depends(get_completion_client),
):
    """
    Generic prompt proxy. Returns the model text untouched.
    """
    return GenerateResponse(content=_complete(completion, payload.prompt, payload.model))


@router.post("/meal-plans", response_model=MealPlanSetResponse)
def generate_meal_plans(
    payload: MealPlanRequest,
    db: DbClient = Depends(get_db_client),
    completion: CompletionClient = Depends(get_completion_client),
):
    prefs = db.get_preferences(payload.user_id)
    if not prefs:
        raise HTTPException(status_code=404, detail="Preferences not found")

    prompt = prompts.make_meal_plan_prompt(prefs.as_prompt_dict(), payload.plan_count)
    plan_set = _complete_and_parse(
        completion, prompt, normalizer.normalize, "meal plan"
    )
    return MealPlanSetResponse(**plan_set.to_dict())


@router.post("/meal-plans/save", response_model=StatusResponse, status_code=201)
def save_meal_plan(
    payload: SaveMealPlanRequest, db: DbClient = Depends(get_db_client)
):
    plan = normalizer.coerce_plan(payload.plan)
    if not plan.non_empty_days():
        raise HTTPException(status_code=422, detail="Meal plan has no meals")
    db.save_meal_plan(payload.user_id, plan)
    return StatusResponse(status="ok")


@router.get("/meal-plans/{user_id}", response_model=SavedMealPlanResponse)
def get_latest_meal_plan(user_id: str, db: DbClient = Depends(get_db_client)):
    record = db.get_latest_meal_plan(user_id)
    if not record:
        raise HTTPException(status_code=404, detail="No saved meal plan")
    return SavedMealPlanResponse(
        id=record.id,
        label=record.label,
        plan=record.plan,
        created_at=record.created_at,
    )


@router.get("/meal-plans/{user_id}/history", response_model=MealPlanHistoryResponse)
def list_meal_plans(
    user_id: str,
    limit: int = Query(20, ge=1, le=100),
    db: DbClient = Depends(get_db_client),
):
    records = db.list_meal_plans(user_id, limit=limit)
    return MealPlanHistoryResponse(
        plans=[
            SavedMealPlanResponse(
                id=r.id, label=r.label, plan=r.plan, created_at=r.created_at
            )
            for r in records
        ]
    )


@router.get("/meal-plans/{user_id}/summary", response_model=DaySummaryResponse)
def get_day_summary(
    user_id: str,
    day: Optional[str] = Query(None),
    db: DbClient = Depends(get_db_client),
):
    """
    Nutrition totals for one day of the latest saved plan, with progress
    toward the saved calorie goal. Defaults to today's weekday.
    """
    day = day or WEEKDAYS[date.today().weekday()]
    if day not in WEEKDAYS:
        raise HTTPException(status_code=422, detail=f"Unknown day: {day}")

    plan = normalizer.coerce_plan(_latest_plan_or_404(db, user_id))
    totals = plan.day_totals(day)
    prefs = db.get_preferences(user_id)
    calorie_goal = prefs.calorie_goal if prefs else None
    return DaySummaryResponse(
        day=day,
        calories=totals.calories,
        protein=totals.protein,
        carbs=totals.carbs,
        fats=totals.fats,
        calorie_goal=calorie_goal,
        percent_of_goal=totals.percent_of_goal(calorie_goal),
    )


@router.get("/preferences/{user_id}", response_model=PreferencesResponse)
def get_preferences(user_id: str, db: DbClient = Depends(get_db_client)):
    prefs = db.get_preferences(user_id)
    if not prefs:
        raise HTTPException(status_code=404, detail="Preferences not found")
    return _preferences_response(prefs)


@router.post("/preferences", response_model=PreferencesResponse)
def save_preferences(
    payload: PreferencesRequest, db: DbClient = Depends(get_db_client)
):
    # The form splits a free-text field on commas, which yields blanks.
    allergies = [a.strip() for a in payload.allergies if a and a.strip()]
    prefs = db.save_preferences(
        PreferencesRecord(
            user_id=payload.user_id,
            diet=payload.diet.strip() or "none",
            allergies=allergies,
            goals_text=payload.goals_text.strip(),
            calorie_goal=payload.calorie_goal,
            protein_goal=payload.protein_goal,
        )
    )
    return _preferences_response(prefs)


@router.post("/preferences/suggest-targets", response_model=SuggestTargetsResponse)
def suggest_targets(
    payload: SuggestTargetsRequest,
    completion: CompletionClient = Depends(get_completion_client),
):
    prompt = prompts.make_targets_prompt(payload.diet, payload.goals_text)
    targets = _complete_and_parse(
        completion, prompt, normalizer.parse_nutrition_targets, "nutrition target"
    )
    return SuggestTargetsResponse(
        calorie_goal=targets.calorie_goal, protein_goal=targets.protein_goal
    )


@router.get("/grocery-list/{user_id}", response_model=GroceryListResponse)
def list_grocery_items(user_id: str, db: DbClient = Depends(get_db_client)):
    return GroceryListResponse(
        items=[_grocery_item_response(r) for r in db.list_grocery_items(user_id)]
    )


@router.post("/grocery-list", response_model=GroceryItemResponse, status_code=201)
def add_grocery_item(
    payload: GroceryItemRequest, db: DbClient = Depends(get_db_client)
):
    item = payload.item.strip()
    if not item:
        raise HTTPException(status_code=422, detail="Item must not be blank")
    return _grocery_item_response(db.add_grocery_item(payload.user_id, item))


@router.delete("/grocery-list/{user_id}/{item_id}", status_code=204)
def delete_grocery_item(
    user_id: str, item_id: int, db: DbClient = Depends(get_db_client)
):
    if not db.delete_grocery_item(user_id, item_id):
        raise HTTPException(status_code=404, detail="Grocery item not found")
    return Response(status_code=204)


@router.post("/grocery-list/import", response_model=GroceryImportResponse)
def import_grocery_list(
    payload: GroceryImportRequest,
    db: DbClient = Depends(get_db_client),
    completion: CompletionClient = Depends(get_completion_client),
):
    """
    Consolidates the ingredients of a plan into the user's grocery list.

    Uses the plan in the request, or the latest saved plan. Items already on
    the list (ignoring case) are skipped.
    """
    plan = payload.plan if payload.plan is not None else _latest_plan_or_404(
        db, payload.user_id
    )
    ingredients = _complete_and_parse(
        completion,
        prompts.make_grocery_prompt(plan),
        normalizer.parse_ingredient_list,
        "ingredient list",
    )

    existing = {r.item.casefold() for r in db.list_grocery_items(payload.user_id)}
    added = []
    for ingredient in ingredients:
        if ingredient.casefold() in existing:
            continue
        db.add_grocery_item(payload.user_id, ingredient)
        existing.add(ingredient.casefold())
        added.append(ingredient)

    logger.info("Imported %d grocery items for %s", len(added), payload.user_id)
    return GroceryImportResponse(
        added=added,
        items=[
            _grocery_item_response(r)
            for r in db.list_grocery_items(payload.user_id)
        ],
    )


@router.post("/recipes/suggestions", response_model=RecipeSuggestionsResponse)
def suggest_recipes(
    payload: RecipeSuggestionsRequest,
    db: DbClient = Depends(get_db_client),
    completion: CompletionClient = Depends(get_completion_client),
):
    plan = _latest_plan_or_404(db, payload.user_id)
    recipes = _complete_and_parse(
        completion,
        prompts.make_recipes_prompt(plan, payload.count),
        normalizer.parse_recipes,
        "recipe list",
    )
    return RecipeSuggestionsResponse(
        recipes=[RecipeModel(**r.to_dict()) for r in recipes[: payload.count]]
    )
