"""Account lookups, session-token resolution and profile updates.

Password hashing and session issuance live outside this service; it only
answers "which account does this token belong to" and "does this account
exist", and applies set-if-provided profile edits.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.db.models import Account, AuthSession
from src.errors.domain import InvalidSessionError, NotFoundError, PersistenceFailure

logger = logging.getLogger(__name__)

PROFILE_FIELDS: tuple[str, ...] = (
    "business_type",
    "full_name",
    "nickname",
    "phone",
    "country",
    "gender",
    "telegram_username",
    "user_role",
    "business_stage",
    "business_niche",
    "region",
)


def _is_expired(expires_at: str | None, now: datetime) -> bool:
    if not expires_at:
        return False
    try:
        expiry = datetime.fromisoformat(expires_at)
    except ValueError:
        logger.warning("Unparseable session expiry %r, treating as expired", expires_at)
        return True
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=UTC)
    return expiry <= now


class AccountService:
    """Read and update accounts.

    Args:
        db: SQLAlchemy session (sync).
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def account_exists(self, account_id: str) -> bool:
        return self._db.get(Account, account_id) is not None

    def get_account(self, account_id: str) -> Account:
        """Return the account.

        Raises:
            NotFoundError: If no account has that id.
        """
        account = self._db.get(Account, account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    def email_exists(self, email: str) -> bool:
        return (
            self._db.execute(
                select(Account.id).where(Account.email == email).limit(1)
            ).first()
            is not None
        )

    def telegram_username_exists(self, telegram_username: str) -> bool:
        return (
            self._db.execute(
                select(Account.id)
                .where(Account.telegram_username == telegram_username)
                .limit(1)
            ).first()
            is not None
        )

    def resolve_session_token(self, token: str | None) -> str | None:
        """Return the account id for an unexpired session token, else None."""
        if not token:
            return None
        session = self._db.get(AuthSession, token)
        if session is None or _is_expired(session.expires_at, datetime.now(UTC)):
            return None
        if not self.account_exists(session.account_id):
            return None
        return session.account_id

    def get_account_for_token(self, token: str | None) -> Account:
        """Return the account behind a session token.

        Raises:
            InvalidSessionError: If the token is missing, unknown or expired.
        """
        account_id = self.resolve_session_token(token)
        if account_id is None:
            raise InvalidSessionError()
        return self.get_account(account_id)

    def update_profile(self, token: str | None, **fields: str | None) -> Account:
        """Apply provided profile fields to the token's account.

        Fields passed as None are left untouched. An empty telegram_username
        counts as not provided.

        Raises:
            InvalidSessionError: If the token is missing, unknown or expired.
            PersistenceFailure: If the update fails.
        """
        account = self.get_account_for_token(token)
        for name, value in fields.items():
            if name not in PROFILE_FIELDS or value is None:
                continue
            if name == "telegram_username" and value == "":
                continue
            setattr(account, name, value)
        try:
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceFailure("update profile", e) from e
        logger.info("Updated profile for account %s", account.id)
        return account
