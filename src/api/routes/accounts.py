"""API routes for account profiles and session token checks.

Registration and login are handled elsewhere; these routes only read
sessions that already exist and edit the profile fields that feed the
advisor's base business context.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.api.schemas import (
    AccountProfileResponse,
    ExistsResponse,
    TokenStatusResponse,
    UpdateProfileRequest,
)
from src.db.connection import get_db
from src.services.account_service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts", tags=["accounts"])


def _get_service(db: Session = Depends(get_db)) -> AccountService:
    """Dependency injector for AccountService."""
    return AccountService(db)


@router.get("/check-token", response_model=TokenStatusResponse)
def check_token(
    token: str | None = None,
    service: AccountService = Depends(_get_service),
) -> TokenStatusResponse:
    """Report whether a session token is present, known and unexpired."""
    if not token:
        return TokenStatusResponse(valid=False, message="no-token")
    if service.resolve_session_token(token) is None:
        return TokenStatusResponse(valid=False, message="expired-or-invalid")
    return TokenStatusResponse(valid=True, message="valid")


@router.get("/email-exists", response_model=ExistsResponse)
def email_exists(
    email: str,
    service: AccountService = Depends(_get_service),
) -> ExistsResponse:
    return ExistsResponse(exists=service.email_exists(email))


@router.get("/telegram-username-exists", response_model=ExistsResponse)
def telegram_username_exists(
    username: str,
    service: AccountService = Depends(_get_service),
) -> ExistsResponse:
    return ExistsResponse(exists=service.telegram_username_exists(username))


@router.get("/me", response_model=AccountProfileResponse)
def get_profile(
    token: str | None = None,
    service: AccountService = Depends(_get_service),
) -> AccountProfileResponse:
    """Return the profile of the account behind a session token.

    Raises:
        InvalidSessionError: If the token is missing, unknown or expired.
    """
    return AccountProfileResponse.model_validate(service.get_account_for_token(token))


@router.patch("/me", response_model=AccountProfileResponse)
def update_profile(
    payload: UpdateProfileRequest,
    token: str | None = None,
    service: AccountService = Depends(_get_service),
) -> AccountProfileResponse:
    """Apply the provided profile fields; null fields are left unchanged.

    Raises:
        InvalidSessionError: If the token is missing, unknown or expired.
    """
    account = service.update_profile(token, **payload.model_dump())
    return AccountProfileResponse.model_validate(account)
