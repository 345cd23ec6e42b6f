"""Read and write the stored business-context layers.

The base layer lives on the account profile. The conversation layer is one
conversation_context row per conversation, written through an upsert that
coalesces each field so omitted values never clear stored ones.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from src.db.models import Account, ConversationContextRecord, utc_now_iso
from src.services.context_merger import CONTEXT_FIELDS, BusinessContext

logger = logging.getLogger(__name__)


class ContextStore:
    """Accessor for the base and conversation context layers.

    Args:
        db: SQLAlchemy session (sync).
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def get_base_context(self, account_id: str) -> BusinessContext:
        """Return the account profile layer.

        Goal and urgency are per-request concerns and never come from the
        profile. An unknown account yields an empty context.
        """
        account = self._db.get(Account, account_id)
        if account is None:
            return BusinessContext()
        return BusinessContext(
            user_role=account.user_role,
            business_stage=account.business_stage,
            region=account.region,
            business_niche=account.business_niche,
        )

    def get_conversation_context(self, conversation_id: str) -> BusinessContext | None:
        """Return the persisted conversation layer, or None if absent."""
        stmt = (
            select(ConversationContextRecord)
            .where(ConversationContextRecord.conversation_id == conversation_id)
            .execution_options(populate_existing=True)
        )
        record = self._db.execute(stmt).scalar_one_or_none()
        if record is None:
            return None
        return BusinessContext.from_object(record)

    def upsert_conversation_context(
        self,
        conversation_id: str,
        context: BusinessContext,
        commit: bool = True,
    ) -> None:
        """Insert the context row or coalesce provided fields into it.

        Args:
            conversation_id: Owning conversation.
            context: Fields to set; None fields leave stored values alone.
            commit: Commit immediately (default) or leave it to the caller.
        """
        values = context.as_dict()
        stmt = sqlite_insert(ConversationContextRecord).values(
            conversation_id=conversation_id,
            updated_at=utc_now_iso(),
            **values,
        )
        table = ConversationContextRecord.__table__
        update_set = {
            name: func.coalesce(stmt.excluded[name], table.c[name])
            for name in CONTEXT_FIELDS
        }
        update_set["updated_at"] = stmt.excluded.updated_at
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.conversation_id],
            set_=update_set,
        )
        self._db.execute(stmt)
        if commit:
            self._db.commit()
        logger.debug("Upserted context for conversation %s", conversation_id)
