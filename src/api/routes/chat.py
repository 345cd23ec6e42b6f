"""API route for advisor chat turns.

POST /chat/message runs one turn: identity resolution, conversation
resolve-or-create, context merge, advisor completion, title derivation,
persistence and optional file attachment.
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from src.api.schemas import ChatRequest, ChatResponse, FileAttachmentResponse
from src.db.connection import get_db
from src.errors import AppError, DomainError
from src.services.advisor_client import AdvisorClient
from src.services.chat_service import ChatService, ChatTurnRequest
from src.utils.config import get_config
from src.utils.locale import detect_locale, parse_locale

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


def get_advisor_client() -> AdvisorClient:
    """Dependency injector for the advisor completion client."""
    return AdvisorClient(get_config().advisor)


@router.post("/message", response_model=ChatResponse)
async def send_message(
    payload: ChatRequest,
    request: Request,
    db: Session = Depends(get_db),
    advisor: AdvisorClient = Depends(get_advisor_client),
) -> ChatResponse:
    """Send one message to the advisor and persist the turn.

    The advisor being unreachable does not fail the request; a localized
    fallback reply is returned and stored instead.

    Args:
        payload: Message, user id and optional overrides.
        request: Incoming request, used for locale detection.
        db: Database session (injected).
        advisor: Completion client (injected).

    Returns:
        Assistant reply with conversation id, title and attachments.

    Raises:
        AppError: E-2001 on missing fields, E-4001 if the turn is not saved.
    """
    locale = parse_locale(payload.language) or detect_locale(request)
    service = ChatService(
        db, advisor, inline_max_bytes=get_config().attachments.inline_max_bytes
    )
    turn = ChatTurnRequest(
        message=payload.message,
        user_id=payload.user_id,
        conversation_id=payload.conversation_id,
        category=payload.category,
        business_type=payload.business_type,
        output_format=payload.output_format,
        table=payload.table,
        context_filters=(
            payload.context_filters.to_context() if payload.context_filters else None
        ),
    )

    try:
        result = await service.send_message(turn, locale)
    except DomainError as e:
        raise AppError.from_domain(e, locale) from None

    return ChatResponse(
        response=result.response,
        message_id=result.message_id,
        timestamp=result.timestamp,
        conversation_id=result.conversation_id,
        title=result.title,
        files=[FileAttachmentResponse(**f) for f in result.files] or None,
    )
