from __future__ import annotations

import logging
import re

from pydantic import BaseModel, Field

from app.config import settings

logger = logging.getLogger(__name__)

MACROS = ("calories", "protein", "fat", "carbs")

# Totals key -> FatSecret serving field
_SERVING_FIELDS = {
    "calories": "calories",
    "protein": "protein",
    "fat": "fat",
    "carbs": "carbohydrate",
}

# Description text looks like "Per 100g - Calories: 52kcal | Fat: 0.17g | Carbs: 13.81g | Protein: 0.26g"
_DESCRIPTION_PATTERNS = {
    "calories": re.compile(r"Calories:\s*([\d.]+)", re.IGNORECASE),
    "fat": re.compile(r"Fat:\s*([\d.]+)", re.IGNORECASE),
    "carbohydrate": re.compile(r"Carbs?:\s*([\d.]+)", re.IGNORECASE),
    "protein": re.compile(r"Protein:\s*([\d.]+)", re.IGNORECASE),
}


class DailyTargets(BaseModel):
    calories: float = Field(default_factory=lambda: settings.calorie_target, gt=0)
    protein: float = Field(default_factory=lambda: settings.protein_target, gt=0)
    fat: float = Field(default_factory=lambda: settings.fat_target, gt=0)
    carbs: float = Field(default_factory=lambda: settings.carbs_target, gt=0)


def _to_float(value) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def get_nutrient(food: dict, nutrient: str) -> float:
    """Nutrient amount for one serving of a FatSecret food record.

    Uses the first serving when it carries a positive value, otherwise parses
    ``nutritional_info`` / ``food_description``. Unknown values count as 0.
    """
    servings = food.get("servings")
    serving = servings.get("serving") if isinstance(servings, dict) else None
    first = serving[0] if isinstance(serving, list) and serving else serving
    if isinstance(first, dict):
        val = _to_float(first.get(nutrient))
        if val is not None and val > 0:
            return val

    text = food.get("nutritional_info") or food.get("food_description") or ""
    pattern = _DESCRIPTION_PATTERNS.get(nutrient)
    if isinstance(text, str) and text and pattern:
        match = pattern.search(text)
        if match:
            val = _to_float(match.group(1))
            if val is not None:
                return val
    return 0.0


def calculate_totals(entries: list[dict]) -> dict[str, float]:
    """Sum macros over ``{"food": {...}, "quantity": n}`` entries (quantity defaults to 1)."""
    totals = {macro: 0.0 for macro in MACROS}
    for entry in entries:
        qty = entry.get("quantity") or 1
        food = entry.get("food", {})
        for macro in MACROS:
            totals[macro] += get_nutrient(food, _SERVING_FIELDS[macro]) * qty
    logger.debug("Nutrition totals for %d entries: %s", len(entries), totals)
    return totals


def calculate_progress(totals: dict[str, float], targets: DailyTargets) -> dict[str, float]:
    """Percent of each daily target reached, capped at 100."""
    return {
        macro: round(min(totals.get(macro, 0.0) / getattr(targets, macro) * 100, 100), 1)
        for macro in MACROS
    }
