"""API routes for analytics dashboard trends.

Texts are read and written in the locale picked from ?lang= or
Accept-Language; reads fall back to the base text when a locale has no
translation.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from src.api.schemas import (
    PopularityTrendResponse,
    PopularityTrendUpsertRequest,
    StatusResponse,
    TopTrendResponse,
    TopTrendUpsertRequest,
)
from src.db.connection import get_db
from src.services.analytics_service import AnalyticsService
from src.utils.locale import detect_locale

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


def _get_service(db: Session = Depends(get_db)) -> AnalyticsService:
    """Dependency injector for AnalyticsService."""
    return AnalyticsService(db)


@router.get("/top-trend", response_model=None)
def get_top_trend(
    request: Request,
    service: AnalyticsService = Depends(_get_service),
) -> dict[str, Any]:
    """Return the current leading trend, or an empty object if none exists."""
    trend = service.get_top_trend(detect_locale(request))
    if trend is None:
        return {}
    return TopTrendResponse(**trend).model_dump()


@router.put("/top-trend", response_model=StatusResponse)
def upsert_top_trend(
    payload: TopTrendUpsertRequest,
    request: Request,
    service: AnalyticsService = Depends(_get_service),
) -> StatusResponse:
    """Create or update the leading trend and make it current."""
    service.upsert_top_trend(
        payload.name,
        percent_change=payload.percent_change,
        description=payload.description,
        why_popular=payload.why_popular,
        locale=detect_locale(request),
    )
    return StatusResponse(status="ok")


@router.get("/popularity-trends", response_model=list[PopularityTrendResponse])
def list_popularity_trends(
    request: Request,
    service: AnalyticsService = Depends(_get_service),
) -> list[PopularityTrendResponse]:
    """List every niche's popularity movement, ordered by name."""
    return [
        PopularityTrendResponse(**trend)
        for trend in service.list_popularity_trends(detect_locale(request))
    ]


@router.put("/popularity-trends", response_model=StatusResponse)
def upsert_popularity_trend(
    payload: PopularityTrendUpsertRequest,
    request: Request,
    service: AnalyticsService = Depends(_get_service),
) -> StatusResponse:
    """Create or update one niche's popularity movement.

    Raises:
        ValidationError: If direction is not 'growing' or 'decreasing'.
    """
    service.upsert_popularity_trend(
        payload.name,
        payload.direction,
        percent_change=payload.percent_change,
        notes=payload.notes,
        locale=detect_locale(request),
    )
    return StatusResponse(status="ok")
