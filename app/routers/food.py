from typing import Optional
import logging

import httpx
from fastapi import APIRouter, Query, HTTPException
from pydantic import BaseModel, Field

from app.services.fatsecret_api import search_foods, FatSecretAPIError
from app.services.fatsecret_auth import OAuthSigningError
from app.services.nutrition import DailyTargets, calculate_totals, calculate_progress

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class FoodEntry(BaseModel):
    food: dict
    quantity: float = Field(default=1, ge=1)


class TotalsRequest(BaseModel):
    foods: list[FoodEntry] = []
    targets: Optional[DailyTargets] = None


@router.get("/search_food")
async def food_search(
    query: Optional[str] = Query(default=None),
    q: Optional[str] = Query(default=None, description="Alias for query"),
):
    term = (query or q or "").strip()
    if not term:
        raise HTTPException(status_code=400, detail="query param is required")

    try:
        return await search_foods(term)
    except OAuthSigningError as e:
        # Class name only, never the credentials
        logger.error("FatSecret request signing failed: %s", type(e).__name__)
        raise HTTPException(status_code=500, detail="Unable to authenticate request")
    except (httpx.HTTPError, FatSecretAPIError, ValueError):
        logger.exception("FatSecret API error for query='%s'", term)
        raise HTTPException(status_code=500, detail="Error fetching food data")


@router.post("/nutrition/totals")
async def nutrition_totals(body: TotalsRequest):
    targets = body.targets or DailyTargets()
    totals = calculate_totals([entry.model_dump() for entry in body.foods])
    return {
        "totals": totals,
        "targets": targets.model_dump(),
        "progress": calculate_progress(totals, targets),
    }
