"""SQLAlchemy ORM models for the BizAdvisor state database.

This module defines accounts, secondary chat-platform identities,
conversations with their persisted business context, messages, file
attachments and the trend figures shown on the analytics dashboard. Uses SQLAlchemy 2.0 style with Mapped and mapped_column.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    String,
    Text,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


def generate_uuid() -> str:
    """Generate a UUID4 string for primary keys."""
    return str(uuid4())


def utc_now_iso() -> str:
    """Generate current UTC timestamp in ISO8601 format.

    Always carries microseconds so lexical order matches time order.
    """
    return datetime.now(UTC).isoformat(timespec="microseconds")


class MessageRole(str, Enum):
    """Author of a conversation message."""

    user = "user"
    assistant = "assistant"


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class Account(Base):
    """Canonical identity that owns conversation state.

    Attributes:
        id: UUID primary key. The only id conversations are stored under.
        email: Unique login email.
        password_hash: Opaque credential hash (issued elsewhere).
        business_type: Free-form business type used in advisor prompts.
        telegram_username: Secondary-platform handle, used for implicit
            identity matching.
        user_role, business_stage, business_niche, region: Base context
            layer fed into every conversation.
    """

    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    business_type: Mapped[str] = mapped_column(
        String(100), nullable=False, default="general"
    )
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    nickname: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    telegram_username: Mapped[str | None] = mapped_column(
        String(100), nullable=True, index=True
    )
    user_role: Mapped[str | None] = mapped_column(String(50), nullable=True)
    business_stage: Mapped[str | None] = mapped_column(String(50), nullable=True)
    business_niche: Mapped[str | None] = mapped_column(String(255), nullable=True)
    region: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    sessions: Mapped[list["AuthSession"]] = relationship(
        "AuthSession",
        back_populates="account",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Account(id={self.id!r}, email={self.email!r})>"


class AuthSession(Base):
    """Opaque session token issued to an account.

    Attributes:
        token: Primary key, the bearer value.
        account_id: FK to Account.
        expires_at: ISO8601 expiry, or None for a non-expiring session.
    """

    __tablename__ = "auth_sessions"

    token: Mapped[str] = mapped_column(String(128), primary_key=True)
    account_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )
    expires_at: Mapped[str | None] = mapped_column(String(50), nullable=True)

    account: Mapped["Account"] = relationship("Account", back_populates="sessions")

    def __repr__(self) -> str:
        return f"<AuthSession(account_id={self.account_id!r})>"


class SecondaryIdentity(Base):
    """A Telegram user record, optionally linked to an Account.

    Attributes:
        id: UUID primary key.
        telegram_user_id: Platform numeric id (unique).
        telegram_username: Optional platform handle.
        account_id: Linked Account id, set only by an explicit link.
    """

    __tablename__ = "telegram_users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    telegram_user_id: Mapped[int] = mapped_column(
        BigInteger, nullable=False, unique=True
    )
    telegram_username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    account_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    def __repr__(self) -> str:
        return (
            f"<SecondaryIdentity(telegram_user_id={self.telegram_user_id!r}, "
            f"account_id={self.account_id!r})>"
        )


class Conversation(Base):
    """A thread of advisor messages owned by one account id.

    account_id is a plain string rather than a foreign key: an identifier
    that resolves to no Account still owns its conversations.
    """

    __tablename__ = "conversations"
    __table_args__ = (
        Index("ix_conversations_account_created", "account_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    account_id: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    context: Mapped["ConversationContextRecord | None"] = relationship(
        "ConversationContextRecord",
        back_populates="conversation",
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<Conversation(id={self.id!r}, title={self.title!r})>"


class ConversationContextRecord(Base):
    """Persisted business context for one conversation.

    All six fields are independently nullable. Writes go through an
    upsert that only overwrites fields that are provided.
    """

    __tablename__ = "conversation_context"

    conversation_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("conversations.id"), primary_key=True
    )
    user_role: Mapped[str | None] = mapped_column(String(50), nullable=True)
    business_stage: Mapped[str | None] = mapped_column(String(50), nullable=True)
    goal: Mapped[str | None] = mapped_column(String(50), nullable=True)
    urgency: Mapped[str | None] = mapped_column(String(50), nullable=True)
    region: Mapped[str | None] = mapped_column(String(100), nullable=True)
    business_niche: Mapped[str | None] = mapped_column(String(255), nullable=True)
    updated_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    conversation: Mapped["Conversation"] = relationship(
        "Conversation", back_populates="context"
    )

    def __repr__(self) -> str:
        return f"<ConversationContextRecord(conversation_id={self.conversation_id!r})>"


class Message(Base):
    """One turn in a conversation. Append-only.

    Attributes:
        id: UUID primary key.
        conversation_id: FK to Conversation.
        account_id: Owning account id at send time.
        role: 'user' or 'assistant'.
        content: Message text.
        timestamp: ISO8601 send time. Primary ordering key.
        sequence: Per-conversation counter, used as a tiebreak only.
    """

    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_conversation_ts", "conversation_id", "timestamp"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    conversation_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("conversations.id"), nullable=False
    )
    account_id: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return (
            f"<Message(id={self.id!r}, role={self.role!r}, "
            f"sequence={self.sequence!r})>"
        )


class FileAttachment(Base):
    """Generated file derived from an assistant message. Immutable."""

    __tablename__ = "files"
    __table_args__ = (Index("ix_files_message", "message_id"),)

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    mime: Mapped[str] = mapped_column(String(255), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    message_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("messages.id"), nullable=True
    )
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    def __repr__(self) -> str:
        return f"<FileAttachment(id={self.id!r}, filename={self.filename!r})>"


class TrendDirection(str, Enum):
    """Whether a niche is gaining or losing popularity."""

    growing = "growing"
    decreasing = "decreasing"


class AnalyticsTrend(Base):
    """Leading market trend for the analytics dashboard.

    The description texts stored here are the fallback for locales that
    have no AnalyticsTrendTranslation row.
    """

    __tablename__ = "analytics_trends"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    percent_change: Mapped[float | None] = mapped_column(Float, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    why_popular: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    def __repr__(self) -> str:
        return f"<AnalyticsTrend(name={self.name!r})>"


class AnalyticsTrendTranslation(Base):
    """Localized description texts for an AnalyticsTrend."""

    __tablename__ = "analytics_trends_i18n"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    locale: Mapped[str] = mapped_column(String(8), primary_key=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    why_popular: Mapped[str | None] = mapped_column(Text, nullable=True)


class PopularityTrend(Base):
    """Per-niche popularity movement for the analytics dashboard."""

    __tablename__ = "popularity_trends"
    __table_args__ = (
        CheckConstraint(
            "direction IN ('growing', 'decreasing')",
            name="ck_popularity_trends_direction",
        ),
    )

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    direction: Mapped[str] = mapped_column(String(20), nullable=False)
    percent_change: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    def __repr__(self) -> str:
        return f"<PopularityTrend(name={self.name!r}, direction={self.direction!r})>"


class PopularityTrendTranslation(Base):
    """Localized notes for a PopularityTrend."""

    __tablename__ = "popularity_trends_i18n"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    locale: Mapped[str] = mapped_column(String(8), primary_key=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
