"""API routes for the static business catalog."""

from fastapi import APIRouter, Request

from src.api.schemas import CategoryListResponse, ResourceListResponse
from src.services.business_catalog import get_categories, get_resources
from src.utils.locale import detect_locale

router = APIRouter(prefix="/business", tags=["business"])


@router.get("/categories", response_model=CategoryListResponse)
def list_categories(request: Request) -> CategoryListResponse:
    return CategoryListResponse(categories=get_categories(detect_locale(request)))


@router.get("/resources/{category}", response_model=ResourceListResponse)
def list_resources(category: str, request: Request) -> ResourceListResponse:
    """Starter resources for a category; unknown categories yield none."""
    return ResourceListResponse(
        category=category,
        resources=get_resources(category, detect_locale(request)),
    )
