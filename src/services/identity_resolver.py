"""Map an inbound identifier to the account id that owns conversation state.

Clients reach the chat from two surfaces: the native app sends account
ids, the Telegram bot sends numeric Telegram user ids (or sometimes a
handle). Rules, first match wins:

1. An existing account id is returned unchanged.
2. A numeric id resolves through its Telegram record: the linked account
   first, otherwise an account whose telegram_username equals the
   record's handle. The handle match is not persisted as a link.
3. Any remaining id is tried as a handle against accounts.
4. Otherwise the raw id is returned unchanged.

Resolution is a pure lookup. Store failures count as "no match".
"""

import logging
import re

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.db.models import Account, SecondaryIdentity

logger = logging.getLogger(__name__)

_NUMERIC_ID = re.compile(r"[+-]?\d+", re.ASCII)

# SQLite INTEGER bounds
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class IdentityResolver:
    """Resolve raw identifiers to canonical account ids.

    Args:
        db: SQLAlchemy session (sync).
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def _scalar(self, stmt, label: str) -> object | None:
        try:
            return self._db.execute(stmt).scalars().first()
        except SQLAlchemyError as e:
            logger.warning("Identity lookup '%s' failed: %s", label, e)
            self._db.rollback()
            return None

    def _account_by_handle(self, handle: str) -> str | None:
        return self._scalar(
            select(Account.id).where(Account.telegram_username == handle).limit(1),
            "account-by-handle",
        )

    def resolve(self, raw_id: str) -> str:
        """Return the canonical account id for raw_id.

        Args:
            raw_id: Account id, Telegram numeric id, or Telegram handle.

        Returns:
            The owning account id, or raw_id itself when nothing matches.
        """
        account_id = self._scalar(
            select(Account.id).where(Account.id == raw_id).limit(1),
            "account-by-id",
        )
        if account_id:
            return account_id

        # Strict decimal form only: no padding, underscores or non-ASCII digits
        telegram_user_id = int(raw_id) if _NUMERIC_ID.fullmatch(raw_id) else None
        if telegram_user_id is not None and not (
            _INT64_MIN <= telegram_user_id <= _INT64_MAX
        ):
            telegram_user_id = None

        if telegram_user_id is not None:
            identity = self._scalar(
                select(SecondaryIdentity)
                .where(SecondaryIdentity.telegram_user_id == telegram_user_id)
                .limit(1),
                "telegram-user",
            )
            if identity is not None:
                if identity.account_id:
                    return identity.account_id
                if identity.telegram_username:
                    matched = self._account_by_handle(identity.telegram_username)
                    if matched:
                        logger.debug(
                            "Telegram user %s matched account %s by handle",
                            telegram_user_id,
                            matched,
                        )
                        return matched

        matched = self._account_by_handle(raw_id)
        if matched:
            return matched

        return raw_id
