"""API routes for Telegram identities and identity resolution.

A Telegram user is registered once per numeric id and may later be
linked to an account. The resolve endpoint exposes the same lookup the
chat and conversation routes use.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from src.api.schemas import (
    CreateTelegramUserRequest,
    LinkTelegramUserRequest,
    ResolvedIdentityResponse,
    TelegramUserResponse,
)
from src.db.connection import get_db
from src.errors.domain import NotFoundError, ValidationError
from src.services.identity_resolver import IdentityResolver
from src.services.secondary_identity_service import SecondaryIdentityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/identities", tags=["identities"])


def _get_service(db: Session = Depends(get_db)) -> SecondaryIdentityService:
    """Dependency injector for SecondaryIdentityService."""
    return SecondaryIdentityService(db)


@router.post("/telegram", response_model=TelegramUserResponse, status_code=201)
def create_telegram_user(
    payload: CreateTelegramUserRequest,
    response: Response,
    service: SecondaryIdentityService = Depends(_get_service),
) -> TelegramUserResponse:
    """Register a Telegram user, or return the existing record.

    Returns 201 when a record was created and 200 when one already existed;
    an existing record is never modified here.
    """
    record, created = service.create_or_get(
        payload.telegram_user_id,
        telegram_username=payload.telegram_username,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    if not created:
        response.status_code = 200
    return TelegramUserResponse.model_validate(record)


@router.get("/telegram/{telegram_user_id}", response_model=TelegramUserResponse)
def get_telegram_user(
    telegram_user_id: int,
    service: SecondaryIdentityService = Depends(_get_service),
) -> TelegramUserResponse:
    """Get a Telegram user by numeric id.

    Raises:
        NotFoundError: If the id was never registered.
    """
    record = service.get(telegram_user_id)
    if record is None:
        raise NotFoundError("TelegramUser", str(telegram_user_id))
    return TelegramUserResponse.model_validate(record)


@router.post("/telegram/{telegram_user_id}/link", response_model=TelegramUserResponse)
def link_telegram_user(
    telegram_user_id: int,
    payload: LinkTelegramUserRequest,
    service: SecondaryIdentityService = Depends(_get_service),
) -> TelegramUserResponse:
    """Link a Telegram user to an account.

    Raises:
        ValidationError: If user_id is missing.
        NotFoundError: If the Telegram user or the account does not exist.
    """
    if not payload.user_id:
        raise ValidationError("user_id is required")
    record = service.link(telegram_user_id, payload.user_id)
    return TelegramUserResponse.model_validate(record)


@router.get("/resolve/{raw_id}", response_model=ResolvedIdentityResponse)
def resolve_identity(
    raw_id: str,
    db: Session = Depends(get_db),
) -> ResolvedIdentityResponse:
    """Map an account id, Telegram id or handle to the canonical user id."""
    return ResolvedIdentityResponse(raw_id=raw_id, user_id=IdentityResolver(db).resolve(raw_id))
