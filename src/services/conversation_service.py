"""Conversation lifecycle: ownership, titles, turns, listing and deletion.

All reads and writes go straight to the store; there is no in-process
conversation cache. Ownership is always checked against the canonical
account id produced by IdentityResolver.

Resolve-or-create is a check followed by an insert without a wrapping
transaction. Two concurrent first messages for the same unknown id each
get their own new conversation; that outcome is accepted.

Example:
    svc = ConversationService(db)
    conversation_id = svc.get_or_create_conversation(account_id, requested_id)
    svc.append_turn(conversation_id, account_id, "Hello", "Hi there")
"""

import logging
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.db.models import (
    Conversation,
    ConversationContextRecord,
    FileAttachment,
    Message,
    MessageRole,
    generate_uuid,
    utc_now_iso,
)
from src.errors.domain import (
    NotFoundError,
    NotFoundOrNotOwnedError,
    PersistenceFailure,
)
from src.services.attachment_service import (
    DEFAULT_INLINE_MAX_BYTES,
    AttachmentService,
    attachment_payload,
)
from src.services.context_merger import BusinessContext
from src.services.context_store import ContextStore
from src.services.output_extractor import derive_title

logger = logging.getLogger(__name__)


class ConversationService:
    """Conversation manager over a sync SQLAlchemy session.

    Every write commits before returning. Primary writes that fail raise
    PersistenceFailure after rolling the session back.

    Args:
        db: SQLAlchemy session (sync).
    """

    def __init__(self, db: Session) -> None:
        self._db = db
        self._contexts = ContextStore(db)

    def _fail(self, operation: str, exc: SQLAlchemyError) -> PersistenceFailure:
        self._db.rollback()
        logger.error("%s failed: %s", operation, exc)
        return PersistenceFailure(operation, exc)

    def _owned(self, conversation_id: str, account_id: str) -> Conversation | None:
        return self._db.execute(
            select(Conversation).where(
                Conversation.id == conversation_id,
                Conversation.account_id == account_id,
            )
        ).scalar_one_or_none()

    def create_conversation(
        self,
        account_id: str,
        title: str | None = None,
        initial_context: BusinessContext | None = None,
    ) -> Conversation:
        """Create a conversation and, best-effort, its initial context.

        Args:
            account_id: Canonical owner id.
            title: Explicit title, or None to leave it for derivation.
            initial_context: Context fields to persist with the conversation.

        Returns:
            The created Conversation.

        Raises:
            PersistenceFailure: If the conversation row cannot be written.
        """
        conversation = Conversation(
            id=generate_uuid(),
            account_id=account_id,
            title=title,
            created_at=utc_now_iso(),
        )
        try:
            self._db.add(conversation)
            self._db.commit()
        except SQLAlchemyError as e:
            raise self._fail("create conversation", e) from e

        logger.info(
            "Created conversation %s for account %s", conversation.id, account_id
        )

        if initial_context is not None and not initial_context.is_empty():
            try:
                self._contexts.upsert_conversation_context(
                    conversation.id, initial_context
                )
            except SQLAlchemyError as e:
                self._db.rollback()
                logger.warning(
                    "Initial context for conversation %s not saved: %s",
                    conversation.id,
                    e,
                )
        return conversation

    def get_or_create_conversation(
        self,
        account_id: str,
        conversation_id: str | None = None,
        initial_context: BusinessContext | None = None,
    ) -> str:
        """Reuse an owned conversation or start a new one.

        A conversation id that does not exist, or exists under another
        owner, is ignored and a fresh conversation is created.

        Returns:
            The conversation id to use for this turn.
        """
        if conversation_id:
            try:
                existing = self._owned(conversation_id, account_id)
            except SQLAlchemyError as e:
                raise self._fail("load conversation", e) from e
            if existing is not None:
                return existing.id
            logger.info(
                "Conversation %s not found for account %s, starting a new one",
                conversation_id,
                account_id,
            )
        return self.create_conversation(
            account_id, initial_context=initial_context
        ).id

    def append_turn(
        self,
        conversation_id: str,
        account_id: str,
        user_text: str,
        assistant_text: str,
    ) -> tuple[Message, Message]:
        """Insert the user message then the assistant message of one turn.

        Both share the call-time timestamp; sequence keeps the user
        message first when timestamps tie.

        Returns:
            (user_message, assistant_message).

        Raises:
            PersistenceFailure: If the messages cannot be written.
        """
        try:
            max_seq = self._db.execute(
                select(func.max(Message.sequence)).where(
                    Message.conversation_id == conversation_id
                )
            ).scalar()
            next_seq = (max_seq or 0) + 1
            now = utc_now_iso()

            user_msg = Message(
                id=generate_uuid(),
                conversation_id=conversation_id,
                account_id=account_id,
                role=MessageRole.user.value,
                content=user_text,
                timestamp=now,
                sequence=next_seq,
            )
            assistant_msg = Message(
                id=generate_uuid(),
                conversation_id=conversation_id,
                account_id=account_id,
                role=MessageRole.assistant.value,
                content=assistant_text,
                timestamp=now,
                sequence=next_seq + 1,
            )
            self._db.add(user_msg)
            self._db.flush()
            self._db.add(assistant_msg)
            self._db.commit()
        except SQLAlchemyError as e:
            raise self._fail("save messages", e) from e
        return user_msg, assistant_msg

    def derive_and_set_title(
        self,
        conversation_id: str,
        explicit_title: str | None,
        body: str,
    ) -> str | None:
        """Set the title once, only while the conversation is untitled.

        Args:
            conversation_id: Target conversation.
            explicit_title: Title captured from a TITLE: line, if any.
            body: Response text used to derive a title otherwise.

        Returns:
            The candidate title, or None when nothing could be derived.

        Raises:
            PersistenceFailure: If the update fails.
        """
        candidate = explicit_title or derive_title(body)
        if not candidate:
            return None
        try:
            self._db.execute(
                update(Conversation)
                .where(
                    Conversation.id == conversation_id,
                    (Conversation.title.is_(None)) | (Conversation.title == ""),
                )
                .values(title=candidate)
                .execution_options(synchronize_session=False)
            )
            self._db.commit()
        except SQLAlchemyError as e:
            raise self._fail("set conversation title", e) from e
        return candidate

    def get_title(self, conversation_id: str) -> str | None:
        return self._db.execute(
            select(Conversation.title).where(Conversation.id == conversation_id)
        ).scalar_one_or_none()

    def list_conversations(self, account_id: str) -> list[dict[str, Any]]:
        """List owned conversations with their context, newest first."""
        rows = self._db.execute(
            select(Conversation, ConversationContextRecord)
            .outerjoin(
                ConversationContextRecord,
                ConversationContextRecord.conversation_id == Conversation.id,
            )
            .where(Conversation.account_id == account_id)
            .order_by(Conversation.created_at.desc())
        ).all()

        return [
            {
                "id": conversation.id,
                "user_id": conversation.account_id,
                "title": conversation.title,
                "created_at": conversation.created_at,
                "context": (
                    BusinessContext.from_object(context).as_dict()
                    if context is not None
                    else None
                ),
            }
            for conversation, context in rows
        ]

    def _ordered_messages(self, conversation_id: str) -> list[Message]:
        return list(
            self._db.execute(
                select(Message)
                .where(Message.conversation_id == conversation_id)
                .order_by(Message.timestamp.asc(), Message.sequence.asc())
            ).scalars()
        )

    def get_history_turns(self, conversation_id: str) -> list[tuple[str, str]]:
        """Return (role, content) pairs in conversation order."""
        return [(m.role, m.content) for m in self._ordered_messages(conversation_id)]

    def get_history(
        self,
        conversation_id: str,
        inline_max_bytes: int = DEFAULT_INLINE_MAX_BYTES,
    ) -> dict[str, Any]:
        """Return messages in order plus the attachments of each message.

        Messages are sorted by timestamp; concurrent turns may interleave
        and ties fall back to the per-conversation sequence.
        """
        messages = self._ordered_messages(conversation_id)
        files = AttachmentService(self._db).list_for_messages([m.id for m in messages])

        return {
            "conversation_id": conversation_id,
            "messages": [
                {
                    "id": m.id,
                    "role": m.role,
                    "content": m.content,
                    "timestamp": m.timestamp,
                }
                for m in messages
            ],
            "count": len(messages),
            "attachments": [
                {
                    "message_id": m.id,
                    "files": [
                        attachment_payload(f, inline_max_bytes) for f in files[m.id]
                    ],
                }
                for m in messages
                if files.get(m.id)
            ],
        }

    def delete_conversation(self, conversation_id: str, account_id: str) -> None:
        """Delete an owned conversation and everything under it.

        Children go before the parent: attachments, messages, context,
        then the conversation row.

        Raises:
            NotFoundOrNotOwnedError: Unless id and owner both match.
            PersistenceFailure: If the delete fails.
        """
        if self._owned(conversation_id, account_id) is None:
            raise NotFoundOrNotOwnedError(conversation_id)

        message_ids = select(Message.id).where(
            Message.conversation_id == conversation_id
        )
        try:
            self._db.execute(
                delete(FileAttachment)
                .where(FileAttachment.message_id.in_(message_ids))
                .execution_options(synchronize_session=False)
            )
            self._db.execute(
                delete(Message)
                .where(Message.conversation_id == conversation_id)
                .execution_options(synchronize_session=False)
            )
            self._db.execute(
                delete(ConversationContextRecord)
                .where(ConversationContextRecord.conversation_id == conversation_id)
                .execution_options(synchronize_session=False)
            )
            self._db.execute(
                delete(Conversation)
                .where(
                    Conversation.id == conversation_id,
                    Conversation.account_id == account_id,
                )
                .execution_options(synchronize_session=False)
            )
            self._db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete conversation", e) from e
        self._db.expire_all()
        logger.info("Deleted conversation %s", conversation_id)

    def rename_conversation(
        self, conversation_id: str, account_id: str, title: str | None
    ) -> None:
        """Overwrite the title unconditionally. None or '' clears it.

        Raises:
            NotFoundOrNotOwnedError: If no conversation matches id and owner.
            PersistenceFailure: If the update fails.
        """
        try:
            result = self._db.execute(
                update(Conversation)
                .where(
                    Conversation.id == conversation_id,
                    Conversation.account_id == account_id,
                )
                .values(title=title)
                .execution_options(synchronize_session=False)
            )
            self._db.commit()
        except SQLAlchemyError as e:
            raise self._fail("rename conversation", e) from e
        if result.rowcount == 0:
            raise NotFoundOrNotOwnedError(conversation_id)

    def update_context(self, conversation_id: str, context: BusinessContext) -> None:
        """Coalesce the given fields into the conversation's stored context.

        Raises:
            NotFoundError: If the conversation does not exist.
            PersistenceFailure: If the upsert fails.
        """
        if self._db.get(Conversation, conversation_id) is None:
            raise NotFoundError("Conversation", conversation_id)
        try:
            self._contexts.upsert_conversation_context(conversation_id, context)
        except SQLAlchemyError as e:
            raise self._fail("update conversation context", e) from e
