"""Telegram user records and their explicit link to accounts.

A Telegram user is registered on first contact with the bot and stays
unlinked until the link operation sets its account id. Identity
resolution reads these records but never writes them.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.db.models import Account, SecondaryIdentity, generate_uuid, utc_now_iso
from src.errors.domain import NotFoundError, PersistenceFailure

logger = logging.getLogger(__name__)


def _blank_to_none(value: str | None) -> str | None:
    return value if value else None


class SecondaryIdentityService:
    """Register, fetch and link Telegram users.

    Args:
        db: SQLAlchemy session (sync).
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, telegram_user_id: int) -> SecondaryIdentity | None:
        return self._db.execute(
            select(SecondaryIdentity).where(
                SecondaryIdentity.telegram_user_id == telegram_user_id
            )
        ).scalar_one_or_none()

    def create_or_get(
        self,
        telegram_user_id: int,
        telegram_username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> tuple[SecondaryIdentity, bool]:
        """Return the existing record for telegram_user_id or create it.

        Empty strings are stored as NULL. An existing record is returned
        unchanged even when the supplied names differ.

        Returns:
            (record, created).

        Raises:
            PersistenceFailure: If the insert fails for a reason other than
                a concurrent insert of the same id.
        """
        existing = self.get(telegram_user_id)
        if existing is not None:
            return existing, False

        record = SecondaryIdentity(
            id=generate_uuid(),
            telegram_user_id=telegram_user_id,
            telegram_username=_blank_to_none(telegram_username),
            first_name=_blank_to_none(first_name),
            last_name=_blank_to_none(last_name),
            created_at=utc_now_iso(),
        )
        try:
            self._db.add(record)
            self._db.commit()
        except IntegrityError:
            # Lost a race with another registration of the same id
            self._db.rollback()
            existing = self.get(telegram_user_id)
            if existing is None:
                raise PersistenceFailure("create telegram user") from None
            return existing, False
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceFailure("create telegram user", e) from e

        logger.info("Registered telegram user %s", telegram_user_id)
        return record, True

    def link(self, telegram_user_id: int, account_id: str) -> SecondaryIdentity:
        """Link a Telegram user to an account.

        Raises:
            NotFoundError: If either the Telegram user or the account is missing.
            PersistenceFailure: If the update fails.
        """
        record = self.get(telegram_user_id)
        if record is None:
            raise NotFoundError("TelegramUser", str(telegram_user_id))
        if self._db.get(Account, account_id) is None:
            raise NotFoundError("Account", account_id)

        try:
            record.account_id = account_id
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceFailure("link telegram user", e) from e

        logger.info("Linked telegram user %s to account %s", telegram_user_id, account_id)
        return record
