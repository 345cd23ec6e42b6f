"""One advisor chat turn, end to end.

Flow:
    validate -> resolve identity -> resolve-or-create conversation
    -> merge context layers -> load history -> advisor completion
    -> extract title/body/directive -> set title once -> append turn
    -> optional file attachment

The advisor failing never fails the turn: a localized fallback reply is
persisted instead. Only primary writes (conversation creation, message
insert) propagate as PersistenceFailure. Title, initial context and
attachment writes are best-effort.

Store work runs on the request-scoped sync session through
asyncio.to_thread; the steps are sequential so the session is never used
from two threads at once.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.errors.domain import (
    DomainError,
    UpstreamUnavailableError,
    ValidationError,
)
from src.services.advisor_client import AdvisorClient
from src.services.attachment_service import (
    DEFAULT_INLINE_MAX_BYTES,
    AttachmentService,
    attachment_payload,
)
from src.services.context_merger import BusinessContext, merge_contexts
from src.services.context_store import ContextStore
from src.services.conversation_service import ConversationService
from src.services.file_export import encode_table
from src.services.identity_resolver import IdentityResolver
from src.services.output_extractor import (
    FileDirective,
    TableSpec,
    extract_structured_output,
)
from src.services.prompt_builder import build_system_prompt
from src.utils.locale import Locale, get_message

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "general"


@dataclass
class ChatTurnRequest:
    """Inputs for one chat turn, already decoupled from the HTTP schema."""

    message: str
    user_id: str
    conversation_id: str | None = None
    category: str | None = None
    business_type: str | None = None
    output_format: str | None = None
    table: TableSpec | None = None
    context_filters: BusinessContext | None = None


@dataclass
class ChatResult:
    response: str
    message_id: str
    timestamp: str
    conversation_id: str
    title: str | None = None
    files: list[dict[str, Any]] = field(default_factory=list)


class ChatService:
    """Orchestrate a chat turn across the store and the advisor.

    Args:
        db: Request-scoped SQLAlchemy session (sync).
        advisor: Completion client.
        inline_max_bytes: Largest attachment returned inline as base64.
    """

    def __init__(
        self,
        db: Session,
        advisor: AdvisorClient,
        inline_max_bytes: int = DEFAULT_INLINE_MAX_BYTES,
    ) -> None:
        self._db = db
        self._advisor = advisor
        self._inline_max_bytes = inline_max_bytes
        self._conversations = ConversationService(db)
        self._contexts = ContextStore(db)

    def _effective_context(
        self,
        account_id: str,
        conversation_id: str,
        filters: BusinessContext | None,
    ) -> BusinessContext:
        try:
            base = self._contexts.get_base_context(account_id)
            stored = self._contexts.get_conversation_context(conversation_id)
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.warning(
                "Context lookup failed for conversation %s: %s", conversation_id, e
            )
            base, stored = BusinessContext(), None
        return merge_contexts(base, stored, filters)

    def _history(self, conversation_id: str) -> list[tuple[str, str]]:
        try:
            return self._conversations.get_history_turns(conversation_id)
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.warning("History load failed for conversation %s: %s", conversation_id, e)
            return []

    def _append_turn(
        self,
        conversation_id: str,
        account_id: str,
        user_text: str,
        assistant_text: str,
    ) -> tuple[str, str]:
        _, assistant_msg = self._conversations.append_turn(
            conversation_id, account_id, user_text, assistant_text
        )
        return assistant_msg.id, assistant_msg.timestamp

    def _store_file(
        self, directive: FileDirective, message_id: str
    ) -> dict[str, Any] | None:
        try:
            encoded = encode_table(directive.output_format, directive.table)
            record = AttachmentService(self._db).store(encoded, message_id)
        except DomainError as e:
            logger.warning("Attachment for message %s skipped: %s", message_id, e)
            return None
        return attachment_payload(record, self._inline_max_bytes)

    async def send_message(
        self, request: ChatTurnRequest, locale: Locale = Locale.en
    ) -> ChatResult:
        """Run one chat turn.

        Args:
            request: Message, raw user id and optional overrides.
            locale: Language for the prompt and the fallback reply.

        Returns:
            ChatResult with the persisted assistant reply.

        Raises:
            ValidationError: If message or user_id is empty.
            PersistenceFailure: If the conversation or messages cannot be saved.
        """
        if not request.message.strip() or not request.user_id.strip():
            raise ValidationError("message and user_id are required", code="E-2001")

        account_id = await asyncio.to_thread(
            IdentityResolver(self._db).resolve, request.user_id
        )
        conversation_id = await asyncio.to_thread(
            self._conversations.get_or_create_conversation,
            account_id,
            request.conversation_id,
            request.context_filters,
        )
        context = await asyncio.to_thread(
            self._effective_context, account_id, conversation_id, request.context_filters
        )
        history = await asyncio.to_thread(self._history, conversation_id)

        system_prompt = build_system_prompt(
            category=request.category or DEFAULT_CATEGORY,
            business_type=request.business_type
            or get_message("default-business-type", locale),
            context=context,
            locale=locale,
        )
        try:
            raw_reply = await self._advisor.complete(
                system_prompt, history, request.message
            )
        except UpstreamUnavailableError as e:
            logger.warning(
                "Advisor unavailable for conversation %s, using fallback: %s",
                conversation_id,
                e,
            )
            raw_reply = get_message("advisor-fallback", locale)

        extracted = extract_structured_output(
            raw_reply, request.message, request.output_format, request.table
        )

        try:
            await asyncio.to_thread(
                self._conversations.derive_and_set_title,
                conversation_id,
                extracted.title,
                extracted.body,
            )
        except DomainError as e:
            logger.warning("Title for conversation %s not set: %s", conversation_id, e)

        assistant_id, timestamp = await asyncio.to_thread(
            self._append_turn,
            conversation_id,
            account_id,
            request.message,
            extracted.body,
        )

        files: list[dict[str, Any]] = []
        if extracted.directive is not None:
            payload = await asyncio.to_thread(
                self._store_file, extracted.directive, assistant_id
            )
            if payload is not None:
                files.append(payload)

        title = await asyncio.to_thread(self._conversations.get_title, conversation_id)

        return ChatResult(
            response=extracted.body,
            message_id=assistant_id,
            timestamp=timestamp,
            conversation_id=conversation_id,
            title=title,
            files=files,
        )
