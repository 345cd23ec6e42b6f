"""API routes for persisted advisor conversations.

Every user_id accepted here goes through the identity resolver first, so
a Telegram id or handle addresses the same conversations as the account
it maps to.

Endpoints:
    POST   /conversations                  Create a conversation
    GET    /conversations/user/{user_id}   List a user's conversations
    GET    /conversations/{id}/history     Messages and attachments
    PUT    /conversations/{id}/context     Merge business context fields
    PATCH  /conversations/{id}/title       Rename (null clears)
    DELETE /conversations/{id}             Delete with all children
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.api.schemas import (
    ContextFilters,
    ConversationHistoryResponse,
    ConversationListResponse,
    ConversationOwner,
    ConversationStatusResponse,
    CreateConversationRequest,
    CreateConversationResponse,
    RenameConversationRequest,
)
from src.db.connection import get_db
from src.errors.domain import ValidationError
from src.services.conversation_service import ConversationService
from src.services.identity_resolver import IdentityResolver
from src.utils.config import get_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conversations", tags=["conversations"])


def _get_service(db: Session = Depends(get_db)) -> ConversationService:
    """Dependency injector for ConversationService."""
    return ConversationService(db)


def _get_resolver(db: Session = Depends(get_db)) -> IdentityResolver:
    """Dependency injector for IdentityResolver."""
    return IdentityResolver(db)


def _require_user_id(user_id: str) -> str:
    if not user_id.strip():
        raise ValidationError("user_id is required")
    return user_id


@router.post("", response_model=CreateConversationResponse)
def create_conversation(
    payload: CreateConversationRequest,
    service: ConversationService = Depends(_get_service),
    resolver: IdentityResolver = Depends(_get_resolver),
) -> CreateConversationResponse:
    """Create a conversation, optionally titled and with initial context.

    Args:
        payload: Owner, optional title and optional context.
        service: ConversationService (injected).
        resolver: IdentityResolver (injected).

    Returns:
        The new conversation id and its creation time.
    """
    account_id = resolver.resolve(_require_user_id(payload.user_id))
    conversation = service.create_conversation(
        account_id,
        title=payload.title or None,
        initial_context=payload.context.to_context() if payload.context else None,
    )
    return CreateConversationResponse(
        conversation_id=conversation.id,
        created_at=conversation.created_at,
    )


@router.get("/user/{user_id}", response_model=ConversationListResponse)
def list_conversations(
    user_id: str,
    service: ConversationService = Depends(_get_service),
    resolver: IdentityResolver = Depends(_get_resolver),
) -> ConversationListResponse:
    """List a user's conversations, newest first.

    The response echoes the caller's identifier; each conversation carries
    the resolved owning account id.
    """
    account_id = resolver.resolve(user_id)
    return ConversationListResponse(
        user_id=user_id,
        conversations=service.list_conversations(account_id),
    )


@router.get("/{conversation_id}/history", response_model=ConversationHistoryResponse)
def get_history(
    conversation_id: str,
    service: ConversationService = Depends(_get_service),
) -> ConversationHistoryResponse:
    """Return a conversation's messages in order with their attachments.

    An unknown conversation yields an empty history.
    """
    history = service.get_history(
        conversation_id, inline_max_bytes=get_config().attachments.inline_max_bytes
    )
    return ConversationHistoryResponse(**history)


@router.put("/{conversation_id}/context", response_model=ConversationStatusResponse)
def update_context(
    conversation_id: str,
    payload: ContextFilters,
    service: ConversationService = Depends(_get_service),
) -> ConversationStatusResponse:
    """Merge context fields into the conversation; omitted fields are kept.

    Raises:
        NotFoundError: If the conversation does not exist.
    """
    service.update_context(conversation_id, payload.to_context())
    return ConversationStatusResponse(status="updated", conversation_id=conversation_id)


@router.patch("/{conversation_id}/title", response_model=ConversationStatusResponse)
def rename_conversation(
    conversation_id: str,
    payload: RenameConversationRequest,
    service: ConversationService = Depends(_get_service),
    resolver: IdentityResolver = Depends(_get_resolver),
) -> ConversationStatusResponse:
    """Overwrite the title. A null or empty title returns it to untitled.

    Raises:
        NotFoundOrNotOwnedError: If the caller does not own the conversation.
    """
    account_id = resolver.resolve(_require_user_id(payload.user_id))
    service.rename_conversation(conversation_id, account_id, payload.title)
    return ConversationStatusResponse(status="renamed", conversation_id=conversation_id)


@router.delete("/{conversation_id}", response_model=ConversationStatusResponse)
def delete_conversation(
    conversation_id: str,
    payload: ConversationOwner,
    service: ConversationService = Depends(_get_service),
    resolver: IdentityResolver = Depends(_get_resolver),
) -> ConversationStatusResponse:
    """Delete a conversation with its messages, context and files.

    Raises:
        NotFoundOrNotOwnedError: If the caller does not own the conversation.
    """
    account_id = resolver.resolve(_require_user_id(payload.user_id))
    service.delete_conversation(conversation_id, account_id)
    return ConversationStatusResponse(status="deleted", conversation_id=conversation_id)
