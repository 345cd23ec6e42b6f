"""Database module for BizAdvisor state management and persistence."""

from src.db.connection import (
    SessionLocal,
    engine,
    get_db,
    init_db,
)
from src.db.models import (
    Account,
    AuthSession,
    Conversation,
    ConversationContextRecord,
    FileAttachment,
    Message,
    MessageRole,
    SecondaryIdentity,
)

__all__ = [
    # Models
    "Account",
    "AuthSession",
    "SecondaryIdentity",
    "Conversation",
    "ConversationContextRecord",
    "Message",
    "FileAttachment",
    # Enums
    "MessageRole",
    # Connection
    "engine",
    "SessionLocal",
    "get_db",
    "init_db",
]
